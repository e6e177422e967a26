# src/spec_factory/ai_pipeline/agents.py
"""
Structured-output agents.

Each agent has ONE focused task with constrained JSON output:
- SpecAgent: description -> ProductSpec
- CodeAgent: spec -> implementation snippet
- AuditAgent: spec + produced diagrams -> issues and corrected spec

Agents build prompts and parse responses. The capability client does the I/O.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from .client import CapabilityClient
from .schemas import (
    GeneratedCode,
    GeneratedImage,
    ProductSpec,
    SelfCheckResult,
    audit_response_schema,
    code_response_schema,
    parse_code,
    parse_self_check,
    parse_spec,
    spec_response_schema,
)

T = TypeVar("T")

NO_DIAGRAMS_SENTINEL = "No images were generated."


class BaseAgent(ABC, Generic[T]):
    """
    Abstract base class for structured-output agents.

    Each agent:
    - Sends one request with a JSON schema contract
    - Treats the response as untrusted and parses it through the schema layer
    - Raises SchemaParseError (or the transport error) on failure; callers
      decide whether that is fatal
    """

    name: str = "BaseAgent"

    def __init__(self, client: CapabilityClient) -> None:
        self._client = client

    def get_system_prompt(self) -> str | None:
        """Return the system instruction defining the agent role, if any."""
        return None

    @abstractmethod
    def get_output_schema(self) -> dict[str, Any]:
        """Return the JSON schema sent as the response contract."""
        ...

    @abstractmethod
    def parse(self, text: str) -> T:
        """Decode the raw response text."""
        ...

    async def generate(self, prompt: str) -> T:
        print(f"  [{self.name}] Calling Gemini API (model: {self._client.settings.spec_model})...")
        text = await self._client.generate_structured(
            prompt,
            schema=self.get_output_schema(),
            system_instruction=self.get_system_prompt(),
        )
        result = self.parse(text)
        print(f"✅ {self.name} completed")
        return result


class SpecAgent(BaseAgent[ProductSpec]):
    """Turns a free-text description into a structured engineering spec."""

    name = "Spec"

    def get_system_prompt(self) -> str:
        return """You are a senior engineering architect.
Your goal is to take a user description and output a rigorously structured engineering spec.
You must adhere strictly to the JSON schema provided.
For 'diagramsPlan', you MUST propose 2-4 distinct views (e.g., 'Top View', 'Exploded View', 'Circuit Diagram', 'User Interface Screen')."""

    def get_output_schema(self) -> dict[str, Any]:
        return spec_response_schema()

    def parse(self, text: str) -> ProductSpec:
        return parse_spec(text)

    @staticmethod
    def build_prompt(description: str, product_type: str) -> str:
        return f"Product Type: {product_type}\nDescription: {description}"


# Implementation targets per category
_CODE_TARGETS: dict[str, str] = {
    "physical": "Arduino C++ or Python firmware logic",
    "robotic": "Arduino C++ or Python firmware logic",
    "mechanical": "Arduino C++ or Python control firmware",
    "digital": "a React/TypeScript component",
}


class CodeAgent(BaseAgent[GeneratedCode]):
    """Writes a core implementation snippet for the product."""

    name = "Code"

    def get_output_schema(self) -> dict[str, Any]:
        return code_response_schema()

    def parse(self, text: str) -> GeneratedCode:
        return parse_code(text)

    @staticmethod
    def build_prompt(spec: ProductSpec) -> str:
        target = _CODE_TARGETS.get(spec.product_type, _CODE_TARGETS["physical"])
        return f"""Create a core implementation snippet for this {spec.product_type} product.
If it's Physical/Robotic/Mechanical: generate Arduino C++ or Python firmware logic.
If it's Digital: generate a React/TypeScript component.
For this product, generate {target}.
Product Context: {spec.summary}
Key Requirements: {", ".join(spec.key_requirements)}
Return JSON with 'language' (use 'cpp' for Arduino, 'python' for Python, 'tsx' for React), 'code', and 'explanation'."""


class AuditAgent(BaseAgent[SelfCheckResult]):
    """Checks the spec against the diagrams that were actually produced."""

    name = "Audit"

    def get_system_prompt(self) -> str:
        return """You are a QA and Systems Validation Engineer.
Review the provided Engineering Spec and the descriptions of generated diagrams.
Identify inconsistencies, logic errors, missing constraints, or physical impossibilities.
Output your findings in JSON format with two fields: 'issues' (array of strings) and 'correctedSpec' (the full ProductSpec object with fixes applied)."""

    def get_output_schema(self) -> dict[str, Any]:
        return audit_response_schema()

    def parse(self, text: str) -> SelfCheckResult:
        return parse_self_check(text)

    @staticmethod
    def build_prompt(spec: ProductSpec, images: list[GeneratedImage]) -> str:
        spec_json = json.dumps(spec.model_dump(by_alias=True), indent=2)
        return f"""CURRENT SPEC:
{spec_json}
GENERATED DIAGRAMS CONTEXT:
{summarize_diagrams(images)}
Perform a consistency check. Return JSON with 'issues' and 'correctedSpec'."""


def summarize_diagrams(images: list[GeneratedImage]) -> str:
    """One line per produced diagram (type + title), or the none-produced sentinel."""
    if not images:
        return NO_DIAGRAMS_SENTINEL
    return "\n".join(f"Generated Image ({img.diagram_type}): {img.title}" for img in images)
