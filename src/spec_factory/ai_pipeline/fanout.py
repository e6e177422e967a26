# src/spec_factory/ai_pipeline/fanout.py
"""
Best-effort concurrent fan-out.

Launch one task per item, wait for every task to settle, keep the successes.
A failing item is logged and dropped; it never cancels its siblings.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Iterable, TypeVar

T = TypeVar("T")
R = TypeVar("R")


async def gather_successes(
    items: Iterable[T],
    operation: Callable[[T], Awaitable[R | None]],
    label: str = "fan-out",
    describe: Callable[[T], str] = str,
) -> list[R]:
    """
    Run ``operation`` on every item concurrently and return the non-None results.

    Exceptions and None results are filtered out. Survivors keep input order.
    """

    async def _settle(item: T) -> R | None:
        try:
            return await operation(item)
        except Exception as e:
            print(f"⚠️ [{label}] Failed for {describe(item)}: {e}")
            return None

    results = await asyncio.gather(*(_settle(item) for item in items))
    return [result for result in results if result is not None]
