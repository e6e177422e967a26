# src/spec_factory/ai_pipeline/auxiliary.py
"""
Auxiliary artifacts: implementation code + narrated marketing pitch.

Both requests run concurrently and are independent. Either may fail; a
failure only means that artifact is absent from the packet.
"""

from __future__ import annotations

import asyncio
import base64
import io
import re
import wave

from .agents import CodeAgent
from .client import CapabilityClient, InlineMedia
from .schemas import GeneratedCode, ProductSpec

# Gemini TTS emits raw 16-bit mono PCM at 24kHz
PCM_SAMPLE_RATE = 24000
PCM_SAMPLE_WIDTH = 2
PCM_CHANNELS = 1


def build_pitch_prompt(spec: ProductSpec) -> str:
    return (
        f'Write a short, punchy, exciting 30-second "Shark Tank" style pitch for the '
        f"{spec.product_name}. Focus on the problem it solves: {spec.summary}."
    )


async def generate_code(client: CapabilityClient, spec: ProductSpec) -> GeneratedCode | None:
    """Request an implementation snippet. Any failure yields None."""
    try:
        return await CodeAgent(client).generate(CodeAgent.build_prompt(spec))
    except Exception as e:
        print(f"⚠️ [Code] Implementation snippet skipped: {e}")
        return None


def pcm_to_wav(pcm: bytes, sample_rate: int = PCM_SAMPLE_RATE) -> bytes:
    """Wrap raw 16-bit PCM in a WAV container."""
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav_file:
        wav_file.setnchannels(PCM_CHANNELS)
        wav_file.setsampwidth(PCM_SAMPLE_WIDTH)
        wav_file.setframerate(sample_rate)
        wav_file.writeframes(pcm)
    return buffer.getvalue()


def audio_data_url(media: InlineMedia) -> str:
    """Data URL for a TTS payload. Raw PCM is wrapped as WAV; containers pass through."""
    mime = media.mime_type.lower()
    data = media.data
    if mime.startswith("audio/l16") or "pcm" in mime:
        match = re.search(r"rate=(\d+)", mime)
        data = pcm_to_wav(data, int(match.group(1)) if match else PCM_SAMPLE_RATE)
        mime = "audio/wav"
    else:
        mime = mime.split(";")[0]

    return f"data:{mime};base64,{base64.b64encode(data).decode('utf-8')}"


async def generate_pitch_audio(client: CapabilityClient, spec: ProductSpec) -> str | None:
    """Narrate a short promotional pitch. Any failure yields None."""
    try:
        media = await client.synthesize_speech(build_pitch_prompt(spec))
        if media is None:
            print("⚠️ [Pitch] No audio data in response")
            return None
        print(f"  └─ [Pitch] Narrated pitch ({len(media.data)} bytes)")
        return audio_data_url(media)
    except Exception as e:
        print(f"⚠️ [Pitch] Audio generation failed: {e}")
        return None


async def generate_auxiliary(
    client: CapabilityClient,
    spec: ProductSpec,
) -> tuple[GeneratedCode | None, str | None]:
    """Run code and pitch requests concurrently. Returns (code, pitch_audio_url)."""
    code, pitch = await asyncio.gather(
        generate_code(client, spec),
        generate_pitch_audio(client, spec),
    )
    return code, pitch
