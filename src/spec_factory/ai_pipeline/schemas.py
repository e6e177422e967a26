# src/spec_factory/ai_pipeline/schemas.py
"""
Design Packet - Pydantic Schemas

One definition of the product specification serves two purposes:
- its JSON schema is sent to the text model as the response contract
- the audit response embeds the same model as ``correctedSpec``

Model output is untrusted. ``parse_spec`` is the single place where raw
JSON text becomes a validated ``ProductSpec``.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel


ProductType = Literal["physical", "robotic", "mechanical", "digital"]
DiagramType = Literal["top", "side", "exploded", "section", "ui_screen"]

PRODUCT_TYPES: tuple[str, ...] = ("physical", "robotic", "mechanical", "digital")

# Sent to the model as "required". Hint only: missing sub-objects are defaulted.
SPEC_REQUIRED_FIELDS: list[str] = [
    "productName",
    "productType",
    "summary",
    "primaryUseCases",
    "keyRequirements",
    "partsList",
    "diagramsPlan",
    "assemblyOrImplementationSteps",
    "constraints",
]

PART_REQUIRED_FIELDS: list[str] = ["name", "description", "materialOrTech", "roleInSystem"]
DIAGRAM_REQUIRED_FIELDS: list[str] = ["diagramType", "title", "descriptionForImageModel"]


class GenerationStatus(str, Enum):
    """Progress transitions reported by the pipeline, in order."""

    SPECIFICATION = "specification"
    DIAGRAMS = "diagrams"
    AUXILIARY = "auxiliary"
    VIDEO = "video"
    AUDIT = "audit"
    COMPLETE = "complete"
    ERROR = "error"


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase JSON on the wire and in storage."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Specification
# =============================================================================

class Constraints(CamelModel):
    """Every field is optional. Absence means "not specified"."""

    environment: str | None = None
    size_limits: str | None = None
    weight_limits: str | None = None
    power_or_battery: str | None = None
    safety: str | None = None
    budget_range: str | None = None


class Part(CamelModel):
    name: str
    description: str
    estimated_dimensions: str | None = None
    material_or_tech: str | None = None
    quantity: float | None = None
    role_in_system: str | None = None

    @field_validator("estimated_dimensions", "material_or_tech", "role_in_system", mode="before")
    @classmethod
    def _best_effort_text(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return None

    @field_validator("quantity", mode="before")
    @classmethod
    def _best_effort_quantity(cls, value: Any) -> Any:
        # "2 per band" and friends carry no usable number
        if value is None or isinstance(value, bool):
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None


class DiagramRequest(CamelModel):
    """One planned technical view, handed to the image model."""

    diagram_type: DiagramType
    title: str = ""  # untitled entries are skipped by the diagram stage
    description_for_image_model: str = ""

    @field_validator("title", "description_for_image_model", mode="before")
    @classmethod
    def _default_text(cls, value: Any) -> Any:
        return "" if value is None else value


class ProductSpec(CamelModel):
    """Structured engineering spec produced from a free-text description."""

    product_name: str
    product_type: ProductType
    summary: str
    primary_use_cases: list[str] = Field(default_factory=list)
    key_requirements: list[str] = Field(default_factory=list)
    constraints: Constraints = Field(default_factory=Constraints)
    parts_list: list[Part] = Field(default_factory=list)
    interactions_or_mechanisms: list[str] = Field(default_factory=list)
    diagrams_plan: list[DiagramRequest] = Field(
        default_factory=list,
        description="2-4 distinct technical views (top, side, exploded, section, ui_screen)",
    )
    assembly_or_implementation_steps: list[str] = Field(default_factory=list)
    risks_and_tradeoffs: list[str] = Field(default_factory=list)
    validation_checks: list[str] = Field(default_factory=list)

    @field_validator("constraints", mode="before")
    @classmethod
    def _default_constraints(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator(
        "primary_use_cases",
        "key_requirements",
        "parts_list",
        "interactions_or_mechanisms",
        "diagrams_plan",
        "assembly_or_implementation_steps",
        "risks_and_tradeoffs",
        "validation_checks",
        mode="before",
    )
    @classmethod
    def _default_lists(cls, value: Any) -> Any:
        return [] if value is None else value


# =============================================================================
# Generated artifacts
# =============================================================================

class GeneratedImage(CamelModel):
    diagram_type: str
    title: str
    url: str  # data:<mime>;base64,<payload>
    prompt_used: str


class GeneratedCode(CamelModel):
    """Implementation snippet. Also the response contract for the code request."""

    language: str
    code: str
    explanation: str


class SelfCheckResult(CamelModel):
    """
    Audit output.

    ``corrected_spec`` may be None; consumers fall back to the original
    spec through ``effective_spec`` and never treat None as "no spec".
    """

    issues: list[str] = Field(default_factory=list)
    corrected_spec: ProductSpec | None = None

    @field_validator("issues", mode="before")
    @classmethod
    def _default_issues(cls, value: Any) -> Any:
        return [] if value is None else value

    def effective_spec(self, original: ProductSpec) -> ProductSpec:
        return self.corrected_spec or original


class DesignPacket(CamelModel):
    """Merged result of one pipeline run."""

    spec: ProductSpec
    images: list[GeneratedImage] = Field(default_factory=list)
    self_check: SelfCheckResult
    implementation_code: GeneratedCode | None = None
    marketing_pitch_url: str | None = None
    video_url: str | None = None

    @property
    def final_spec(self) -> ProductSpec:
        """Corrected spec when the audit produced one, the original otherwise."""
        return self.self_check.effective_spec(self.spec)


# =============================================================================
# Parsing untrusted model output
# =============================================================================

_DIAGRAM_TYPES = frozenset(get_args(DiagramType))


class SchemaParseError(ValueError):
    """Model output could not be decoded into the expected shape."""


def _load_json(text: str | None) -> Any:
    try:
        return json.loads(text or "{}")
    except json.JSONDecodeError as e:
        raise SchemaParseError(f"Invalid JSON: {e}") from e


def normalize_spec_payload(data: Any) -> dict[str, Any]:
    """
    Fill in sub-objects the model is allowed to drop.

    Missing ``constraints``, ``diagramsPlan`` and ``partsList`` become an
    empty record / empty list instead of a validation failure. Plan entries
    that are not objects or name an unknown view type are dropped.
    """
    if not isinstance(data, dict):
        raise SchemaParseError(f"Expected a JSON object, got {type(data).__name__}")

    normalized = dict(data)
    if not normalized.get("constraints"):
        normalized["constraints"] = {}
    plan = normalized.get("diagramsPlan")
    if not isinstance(plan, list):
        plan = []
    normalized["diagramsPlan"] = [
        entry for entry in plan
        if isinstance(entry, dict) and entry.get("diagramType") in _DIAGRAM_TYPES
    ]
    if not normalized.get("partsList"):
        normalized["partsList"] = []
    return normalized


def parse_spec(data: str | dict[str, Any] | None) -> ProductSpec:
    """Decode model output (JSON text or an already-decoded dict) into a ProductSpec."""
    if not isinstance(data, dict):
        data = _load_json(data)

    payload = normalize_spec_payload(data)
    try:
        return ProductSpec.model_validate(payload)
    except ValidationError as e:
        raise SchemaParseError(str(e)) from e


def parse_self_check(text: str | None) -> SelfCheckResult:
    """Decode the audit response. The embedded spec goes through the same normalization."""
    data = _load_json(text)
    if not isinstance(data, dict):
        raise SchemaParseError(f"Expected a JSON object, got {type(data).__name__}")

    corrected = data.get("correctedSpec")
    if corrected is not None:
        data = {**data, "correctedSpec": normalize_spec_payload(corrected)}

    try:
        return SelfCheckResult.model_validate(data)
    except ValidationError as e:
        raise SchemaParseError(str(e)) from e


def parse_code(text: str | None) -> GeneratedCode:
    data = _load_json(text)
    try:
        return GeneratedCode.model_validate(data)
    except ValidationError as e:
        raise SchemaParseError(str(e)) from e


# =============================================================================
# JSON schema for the text model
# =============================================================================

# Schema keywords Gemini structured output rejects or ignores
_DROPPED_KEYWORDS = {"additionalProperties", "title", "default"}


def clean_schema(obj: Any) -> Any:
    """
    Make a pydantic JSON schema acceptable to Gemini structured output.

    Strips unsupported keywords and stamps the required subsets onto the
    spec and part objects.
    """
    if isinstance(obj, list):
        return [clean_schema(item) for item in obj]
    if not isinstance(obj, dict):
        return obj

    cleaned: dict[str, Any] = {}
    for key, value in obj.items():
        if key in _DROPPED_KEYWORDS:
            continue
        if key in ("properties", "$defs") and isinstance(value, dict):
            # Keys here are field / definition names, not keywords
            cleaned[key] = {name: clean_schema(sub) for name, sub in value.items()}
        else:
            cleaned[key] = clean_schema(value)

    props = cleaned.get("properties")
    if isinstance(props, dict):
        if "productName" in props and "diagramsPlan" in props:
            cleaned["required"] = list(SPEC_REQUIRED_FIELDS)
        elif "roleInSystem" in props and "materialOrTech" in props:
            cleaned["required"] = list(PART_REQUIRED_FIELDS)
        elif "diagramType" in props and "descriptionForImageModel" in props:
            cleaned["required"] = list(DIAGRAM_REQUIRED_FIELDS)
    return cleaned


def response_schema(model: type[BaseModel]) -> dict[str, Any]:
    """JSON schema (camelCase aliases) for a response model."""
    return clean_schema(model.model_json_schema(by_alias=True))


def spec_response_schema() -> dict[str, Any]:
    return response_schema(ProductSpec)


def audit_response_schema() -> dict[str, Any]:
    """Audit contract: issues plus a corrected spec sharing the spec definition."""
    schema = response_schema(SelfCheckResult)
    schema["required"] = ["issues", "correctedSpec"]
    return schema


def code_response_schema() -> dict[str, Any]:
    return response_schema(GeneratedCode)
