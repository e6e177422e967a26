# src/spec_factory/ai_pipeline/video.py
"""
Video stage - Veo product commercial.

Veo returns a long-running operation rather than a video. The poller walks
an explicit state machine:

    PENDING -> POLLING -> DONE | FAILED | TIMED_OUT

One poll at a time: sleep, refresh, check. The budget is
``max_polls`` x ``poll_interval`` (30 x 10s by default). Nothing here is
fatal to the pipeline: every exit other than DONE-with-URI yields None.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable

import httpx

from .client import CapabilityClient, video_uri
from .schemas import ProductSpec

SleepFunc = Callable[[float], Awaitable[Any]]


class VideoJobState(str, Enum):
    PENDING = "pending"
    POLLING = "polling"
    DONE = "done"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass
class VideoJobResult:
    state: VideoJobState
    polls: int = 0
    video_url: str | None = None
    error: str | None = None


def build_video_prompt(spec: ProductSpec) -> str:
    return (
        f"Cinematic product commercial for {spec.product_name}, {spec.summary}. "
        "High tech, futuristic, 4k, slow motion product reveal."
    )


def sign_video_uri(uri: str, api_key: str) -> str:
    """The download endpoint requires the same key that started generation."""
    return str(httpx.URL(uri).copy_merge_params({"key": api_key}))


class VideoPoller:
    """Drives one Veo operation to completion, failure or timeout."""

    def __init__(
        self,
        client: CapabilityClient,
        poll_interval: float | None = None,
        max_polls: int | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self._client = client
        self.poll_interval = client.settings.video_poll_interval if poll_interval is None else poll_interval
        self.max_polls = client.settings.video_max_polls if max_polls is None else max_polls
        self._sleep = sleep
        self.state = VideoJobState.PENDING

    async def run(self, prompt: str) -> VideoJobResult:
        polls = 0
        try:
            operation = await self._client.start_video_generation(prompt)
            self.state = VideoJobState.POLLING

            while not operation.done:
                if polls >= self.max_polls:
                    self.state = VideoJobState.TIMED_OUT
                    print(f"⚠️ [Video] Not done after {polls} polls, giving up")
                    return VideoJobResult(state=self.state, polls=polls)

                await self._sleep(self.poll_interval)
                operation = await self._client.poll_video_operation(operation)
                polls += 1

            error = getattr(operation, "error", None)
            uri = video_uri(operation)
            if error or not uri:
                self.state = VideoJobState.FAILED
                return VideoJobResult(
                    state=self.state,
                    polls=polls,
                    error=str(error) if error else "Operation finished without a video URI",
                )

            self.state = VideoJobState.DONE
            return VideoJobResult(
                state=self.state,
                polls=polls,
                video_url=sign_video_uri(uri, self._client.api_key),
            )

        except Exception as e:
            self.state = VideoJobState.FAILED
            return VideoJobResult(state=self.state, polls=polls, error=str(e))


async def generate_video(
    client: CapabilityClient,
    spec: ProductSpec,
    sleep: SleepFunc = asyncio.sleep,
) -> str | None:
    """Film a short product commercial. Returns a signed download URL or None."""
    result = await VideoPoller(client, sleep=sleep).run(build_video_prompt(spec))

    if result.state is VideoJobState.DONE:
        print(f"✅ [Video] Ready after {result.polls} polls")
        return result.video_url

    if result.state is VideoJobState.FAILED:
        print(f"⚠️ [Video] Generation failed (skipping): {result.error}")
    return None
