"""
Shared fixtures: a scripted capability client and sample model payloads.

No test talks to the network.
"""

import copy
import json
from types import SimpleNamespace
from typing import Any, Callable

import pytest

from spec_factory.ai_pipeline.client import InlineMedia
from spec_factory.ai_pipeline.schemas import DesignPacket, GeneratedCode, GeneratedImage, SelfCheckResult, parse_spec
from spec_factory.config import FactorySettings


SAMPLE_SPEC: dict[str, Any] = {
    "productName": "HaptiGuide Band",
    "productType": "physical",
    "summary": "A wrist-worn band that vibrates when obstacles are near.",
    "primaryUseCases": ["Navigation assistance for visually impaired users"],
    "keyRequirements": ["Detect obstacles within 2m", "All-day battery"],
    "constraints": {
        "environment": "Indoor and outdoor",
        "sizeLimits": None,
        "weightLimits": "< 60g",
        "powerOrBattery": "300mAh LiPo",
        "safety": None,
        "budgetRange": "$40-$60 BOM",
    },
    "partsList": [
        {
            "name": "ToF sensor",
            "description": "Time-of-flight distance sensor",
            "estimatedDimensions": "5x3x1mm",
            "materialOrTech": "VL53L1X",
            "quantity": 2,
            "roleInSystem": "Obstacle ranging",
        },
        {
            "name": "Vibration motor",
            "description": "Coin ERM motor",
            "materialOrTech": "ERM",
            "quantity": 1,
            "roleInSystem": "Haptic feedback",
        },
    ],
    "interactionsOrMechanisms": ["Sensor polls at 20Hz and drives motor intensity"],
    "diagramsPlan": [
        {"diagramType": "top", "title": "Top View", "descriptionForImageModel": "Band seen from above"},
        {"diagramType": "exploded", "title": "Exploded View", "descriptionForImageModel": "Layers of the housing"},
        {"diagramType": "side", "title": "Side Profile", "descriptionForImageModel": "Band thickness"},
    ],
    "assemblyOrImplementationSteps": ["Solder sensor", "Mount motor", "Close housing"],
    "risksAndTradeoffs": ["False positives in crowds"],
    "validationChecks": ["Drop test from 1m"],
}

SAMPLE_CODE: dict[str, Any] = {
    "language": "cpp",
    "code": "void loop() { int d = readDistance(); vibrate(d); }",
    "explanation": "Maps distance to vibration strength.",
}

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image"


def sample_spec(**overrides) -> dict[str, Any]:
    spec = copy.deepcopy(SAMPLE_SPEC)
    spec.update(overrides)
    return spec


def video_operation(done: bool, uri: str | None = None, error: Any = None) -> SimpleNamespace:
    response = None
    if uri is not None:
        response = SimpleNamespace(generated_videos=[SimpleNamespace(video=SimpleNamespace(uri=uri))])
    return SimpleNamespace(done=done, response=response, error=error)


class FakeCapabilityClient:
    """
    Scripted stand-in for CapabilityClient.

    Responses may be a value or an Exception instance (raised when called).
    Structured requests are routed by the schema they carry.
    """

    def __init__(self, settings: FactorySettings) -> None:
        self.settings = settings
        self.spec_response: Any = json.dumps(SAMPLE_SPEC)
        self.code_response: Any = json.dumps(SAMPLE_CODE)
        self.audit_response: Any = None  # None -> echo the spec back with one issue
        self.image_handler: Callable[[str], Any] = lambda prompt: InlineMedia("image/png", PNG_BYTES)
        self.speech_response: Any = InlineMedia("audio/L16;codec=pcm;rate=24000", b"\x00\x01" * 64)
        self.video_start: Any = video_operation(done=False)
        self.video_polls: list[Any] = [video_operation(done=True, uri="https://video.example/v1/files/abc:download?alt=media")]

        self.structured_calls: list[dict[str, Any]] = []
        self.image_prompts: list[str] = []
        self.speech_prompts: list[str] = []
        self.video_prompts: list[str] = []
        self.poll_count = 0

    @property
    def api_key(self) -> str:
        return self.settings.api_key

    @staticmethod
    def _resolve(value: Any) -> Any:
        if isinstance(value, Exception):
            raise value
        return value

    async def generate_structured(self, prompt, schema, system_instruction=None):
        props = schema.get("properties", {})
        self.structured_calls.append({"prompt": prompt, "schema": schema, "system": system_instruction})
        if "diagramsPlan" in props:
            return self._resolve(self.spec_response)
        if "issues" in props:
            if self.audit_response is None:
                spec = json.loads(self.spec_response)
                return json.dumps({"issues": ["Battery capacity unverified"], "correctedSpec": spec})
            return self._resolve(self.audit_response)
        if "language" in props:
            return self._resolve(self.code_response)
        raise AssertionError(f"Unexpected schema: {list(props)}")

    async def generate_image(self, prompt, aspect_ratio=None, image_size=None):
        self.image_prompts.append(prompt)
        return self._resolve(self.image_handler(prompt))

    async def synthesize_speech(self, prompt, voice_name=None):
        self.speech_prompts.append(prompt)
        return self._resolve(self.speech_response)

    async def start_video_generation(self, prompt, resolution=None, aspect_ratio=None):
        self.video_prompts.append(prompt)
        return self._resolve(self.video_start)

    async def poll_video_operation(self, operation):
        self.poll_count += 1
        if self.video_polls:
            return self._resolve(self.video_polls.pop(0))
        return operation


class FakeSleep:
    """Records requested delays instead of waiting."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def settings() -> FactorySettings:
    return FactorySettings(api_key="test-key", video_poll_interval=10.0, video_max_polls=30)


@pytest.fixture
def fake_client(settings) -> FakeCapabilityClient:
    return FakeCapabilityClient(settings)


@pytest.fixture
def fake_sleep() -> FakeSleep:
    return FakeSleep()


def make_packet(spec_overrides: dict[str, Any] | None = None, **packet_fields) -> DesignPacket:
    """A finished packet with one blueprint and the original spec echoed by the audit."""
    spec = parse_spec(sample_spec(**(spec_overrides or {})))
    fields: dict[str, Any] = {
        "spec": spec,
        "images": [
            GeneratedImage(
                diagram_type="top",
                title="Top View",
                url="data:image/png;base64,iVBORw0KGgo=",
                prompt_used="Technical engineering drawing, blueprint style, top view of Top View.",
            )
        ],
        "self_check": SelfCheckResult(issues=["Battery capacity unverified"], corrected_spec=spec),
        "implementation_code": GeneratedCode(**SAMPLE_CODE),
    }
    fields.update(packet_fields)
    return DesignPacket(**fields)
