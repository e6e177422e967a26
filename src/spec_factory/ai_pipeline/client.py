# src/spec_factory/ai_pipeline/client.py
"""
Capability client - thin typed handle over the Gemini endpoints.

Wraps ``google.genai.Client`` async surface:
- structured text (spec, code, audit)
- image generation (Nano Banana Pro)
- speech synthesis (Gemini TTS)
- video generation (Veo) + long-running operation polling

The API key is passed in explicitly. Nothing here reads the environment.
Created once per run; holds no mutable state after construction.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from google import genai
from google.genai import types

from ..config import FactorySettings


@dataclass(frozen=True)
class InlineMedia:
    """Binary payload returned inline by the model."""

    mime_type: str
    data: bytes


class CapabilityClient:
    """Async access to the four generative capabilities."""

    def __init__(self, settings: FactorySettings, client: genai.Client | None = None) -> None:
        if not settings.api_key:
            raise RuntimeError("Gemini API key not configured")
        self.settings = settings
        self._client = client or genai.Client(api_key=settings.api_key)

    @property
    def api_key(self) -> str:
        return self.settings.api_key

    async def generate_structured(
        self,
        prompt: str,
        schema: dict[str, Any],
        system_instruction: str | None = None,
    ) -> str:
        """Request JSON output constrained by ``schema``. Returns the raw response text."""
        logging.debug(f"[CapabilityClient] Structured request schema keys: {list(schema.get('properties', {}))}")

        try:
            response = await asyncio.wait_for(
                self._client.aio.models.generate_content(
                    model=self.settings.spec_model,
                    contents=prompt,
                    config=types.GenerateContentConfig(
                        system_instruction=system_instruction,
                        response_mime_type="application/json",
                        response_json_schema=schema,
                    ),
                ),
                timeout=self.settings.request_timeout,
            )
        except asyncio.TimeoutError:
            raise RuntimeError(f"API call timed out after {self.settings.request_timeout} seconds")

        return response.text or "{}"

    async def generate_image(
        self,
        prompt: str,
        aspect_ratio: str | None = None,
        image_size: str | None = None,
    ) -> InlineMedia | None:
        """Generate one image. Returns the first inline image part, or None when absent."""
        response = await self._client.aio.models.generate_content(
            model=self.settings.image_model,
            contents=prompt,
            config=types.GenerateContentConfig(
                response_modalities=["IMAGE"],
                image_config=types.ImageConfig(
                    aspect_ratio=aspect_ratio or self.settings.image_aspect_ratio,
                    image_size=image_size or self.settings.image_size,
                ),
            ),
        )
        return _first_inline_part(response)

    async def synthesize_speech(self, prompt: str, voice_name: str | None = None) -> InlineMedia | None:
        """Speak ``prompt`` with a prebuilt voice. Returns the audio part, or None."""
        response = await self._client.aio.models.generate_content(
            model=self.settings.speech_model,
            contents=prompt,
            config=types.GenerateContentConfig(
                response_modalities=["AUDIO"],
                speech_config=types.SpeechConfig(
                    voice_config=types.VoiceConfig(
                        prebuilt_voice_config=types.PrebuiltVoiceConfig(
                            voice_name=voice_name or self.settings.voice_name,
                        ),
                    ),
                ),
            ),
        )
        return _first_inline_part(response)

    async def start_video_generation(
        self,
        prompt: str,
        resolution: str | None = None,
        aspect_ratio: str | None = None,
    ) -> types.GenerateVideosOperation:
        """Start a Veo job. Returns the operation handle, not the video."""
        return await self._client.aio.models.generate_videos(
            model=self.settings.video_model,
            prompt=prompt,
            config=types.GenerateVideosConfig(
                number_of_videos=1,
                resolution=resolution or self.settings.video_resolution,
                aspect_ratio=aspect_ratio or self.settings.video_aspect_ratio,
            ),
        )

    async def poll_video_operation(
        self, operation: types.GenerateVideosOperation
    ) -> types.GenerateVideosOperation:
        """Refresh an operation handle with its latest completion state."""
        return await self._client.aio.operations.get(operation)


def _first_inline_part(response: Any) -> InlineMedia | None:
    """First inline-data part of the first candidate, if any."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None

    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    for part in parts:
        inline = getattr(part, "inline_data", None)
        if inline is not None and inline.data:
            return InlineMedia(mime_type=inline.mime_type or "application/octet-stream", data=inline.data)
    return None


def video_uri(operation: Any) -> str | None:
    """URI of the first generated video on a finished operation."""
    response = getattr(operation, "response", None) or getattr(operation, "result", None)
    videos = getattr(response, "generated_videos", None) or []
    if not videos:
        return None
    video = getattr(videos[0], "video", None)
    return getattr(video, "uri", None)
