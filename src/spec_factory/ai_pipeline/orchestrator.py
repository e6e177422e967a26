# src/spec_factory/ai_pipeline/orchestrator.py
"""
AI Pipeline Orchestrator - design packet generation flow.

Entry point for packet generation. Sequences the stages, reports status
transitions and merges every artifact into one DesignPacket.

Flow:
1. Specification (fatal on failure)
2. Diagrams (fan-out, per-item failures dropped)
3. Auxiliary: code + pitch audio (fan-out, each optional)
4. Video (bounded polling, optional)
5. Audit (falls back to the pre-audit spec)
"""

from __future__ import annotations

import asyncio
import inspect
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Union

from pydantic import BaseModel

from ..config import FactorySettings
from .agents import SpecAgent
from .auditor import run_audit
from .auxiliary import generate_auxiliary
from .client import CapabilityClient
from .diagram_artist import generate_diagrams
from .schemas import (
    DesignPacket,
    GeneratedCode,
    GeneratedImage,
    GenerationStatus,
    ProductSpec,
    ProductType,
    SelfCheckResult,
)
from .video import SleepFunc, generate_video

# Progress sink: receives each status transition. May be sync or async.
StatusCallback = Callable[[GenerationStatus], Union[Awaitable[None], None]]


class SpecGenerationError(RuntimeError):
    """The specification stage failed; the run produced no packet."""


async def notify_status(on_status: StatusCallback | None, status: GenerationStatus) -> None:
    """Advisory only: sink failures are reported and ignored."""
    if on_status is None:
        return
    try:
        result = on_status(status)
        if inspect.isawaitable(result):
            await result
    except Exception as e:
        print(f"⚠️ Status callback failed (non-fatal): {e}")


class GenerateRequest(BaseModel):
    """Request to generate a design packet."""

    description: str
    product_type: ProductType


@dataclass
class GenerationState:
    """
    Mutable state for one run.

    Each stage writes its own slot. Nothing here is shared across runs.
    """

    request: GenerateRequest
    spec: ProductSpec | None = None
    images: list[GeneratedImage] = field(default_factory=list)
    code: GeneratedCode | None = None
    pitch_url: str | None = None
    video_url: str | None = None
    self_check: SelfCheckResult | None = None

    def to_packet(self) -> DesignPacket:
        if self.spec is None:
            raise SpecGenerationError("No specification available")
        return DesignPacket(
            spec=self.spec,
            images=self.images,
            self_check=self.self_check or SelfCheckResult(issues=[], corrected_spec=self.spec),
            implementation_code=self.code,
            marketing_pitch_url=self.pitch_url,
            video_url=self.video_url,
        )


class DesignPipeline:
    """Runs the fixed generation topology against one capability client."""

    def __init__(
        self,
        client: CapabilityClient,
        on_status: StatusCallback | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self._client = client
        self._on_status = on_status
        self._sleep = sleep

    async def _set_status(self, status: GenerationStatus) -> None:
        await notify_status(self._on_status, status)

    async def _generate_spec(self, request: GenerateRequest) -> ProductSpec:
        print(f"📝 [1/5] Generating spec for: {request.product_type}...")
        agent = SpecAgent(self._client)
        try:
            return await agent.generate(SpecAgent.build_prompt(request.description, request.product_type))
        except Exception as e:
            raise SpecGenerationError(f"Failed to generate valid spec: {e}") from e

    async def run(self, request: GenerateRequest) -> DesignPacket:
        start_time = time.time()
        state = GenerationState(request=request)

        # 1. Specification - the only fatal stage
        await self._set_status(GenerationStatus.SPECIFICATION)
        try:
            state.spec = await self._generate_spec(request)
        except SpecGenerationError as e:
            print(f"❌ [Spec] {e}")
            await self._set_status(GenerationStatus.ERROR)
            raise

        spec = state.spec

        # 2. Diagrams
        print(f"🎨 [2/5] Generating {len(spec.diagrams_plan)} diagrams...")
        await self._set_status(GenerationStatus.DIAGRAMS)
        state.images = await generate_diagrams(self._client, spec.diagrams_plan)

        # 3. Code + pitch
        print("💻 [3/5] Generating implementation code & marketing pitch...")
        await self._set_status(GenerationStatus.AUXILIARY)
        state.code, state.pitch_url = await generate_auxiliary(self._client, spec)

        # 4. Video
        print("🎥 [4/5] Generating Veo video...")
        await self._set_status(GenerationStatus.VIDEO)
        state.video_url = await generate_video(self._client, spec, sleep=self._sleep)

        # 5. Audit against the diagrams actually produced
        print("🔍 [5/5] Running self-check audit...")
        await self._set_status(GenerationStatus.AUDIT)
        state.self_check = await run_audit(self._client, spec, state.images)

        packet = state.to_packet()
        await self._set_status(GenerationStatus.COMPLETE)

        elapsed = time.time() - start_time
        print(
            f"✅ Design packet complete in {elapsed:.1f}s "
            f"({len(packet.images)} images, code={'yes' if packet.implementation_code else 'no'}, "
            f"pitch={'yes' if packet.marketing_pitch_url else 'no'}, "
            f"video={'yes' if packet.video_url else 'no'})"
        )
        return packet


async def generate_design_packet(
    description: str,
    product_type: ProductType,
    on_status: StatusCallback | None = None,
    settings: FactorySettings | None = None,
    client: CapabilityClient | None = None,
) -> DesignPacket:
    """
    Main entry point: (description, category) -> DesignPacket.

    Builds a capability client from ``settings`` (or the environment) unless
    one is supplied. Raises SpecGenerationError when no packet can be made.
    """
    request = GenerateRequest(description=description, product_type=product_type)

    if client is None:
        try:
            client = CapabilityClient(settings or FactorySettings.from_env())
        except Exception as e:
            await notify_status(on_status, GenerationStatus.ERROR)
            raise SpecGenerationError(f"Capability client unavailable: {e}") from e

    return await DesignPipeline(client, on_status=on_status).run(request)
