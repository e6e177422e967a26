# src/spec_factory/config.py
"""
Runtime settings for the design pipeline.

The API key is an explicit value threaded into the capability client.
Stage code never reads the environment directly.
"""

from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel


class FactorySettings(BaseModel):
    """Model names, media options and polling budget for one deployment."""

    api_key: str

    # Models
    spec_model: str = "gemini-3-pro-preview"
    image_model: str = "gemini-3-pro-image-preview"
    speech_model: str = "gemini-2.5-flash-preview-tts"
    video_model: str = "veo-3.1-fast-generate-preview"

    # Media options
    voice_name: str = "Kore"
    image_aspect_ratio: str = "4:3"
    image_size: str = "1K"
    video_resolution: str = "720p"
    video_aspect_ratio: str = "16:9"

    # Video polling (10s x 30 polls = ~5 min ceiling)
    video_poll_interval: float = 10.0
    video_max_polls: int = 30

    # Per-request timeout for structured text calls
    request_timeout: float = 120.0

    # Recent designs library
    mongo_uri: str | None = None
    mongo_db: str = "spec_factory"

    @classmethod
    def from_env(cls, **overrides) -> "FactorySettings":
        """
        Build settings from environment variables (and a local .env file).

        GEMINI_API_KEY is required (API_KEY is accepted as a fallback).
        SPEC_FACTORY_* variables override the defaults.
        """
        load_dotenv()

        api_key = overrides.pop("api_key", None) or os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY")
        if not api_key:
            raise RuntimeError("GEMINI_API_KEY environment variable not set")

        env_values: dict[str, str] = {}
        for name in cls.model_fields:
            if name == "api_key":
                continue
            value = os.environ.get(f"SPEC_FACTORY_{name.upper()}")
            if value is not None:
                env_values[name] = value

        return cls(api_key=api_key, **{**env_values, **overrides})
