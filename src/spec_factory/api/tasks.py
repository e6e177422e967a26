# src/spec_factory/api/tasks.py
"""
Background task runner for design generation jobs.

Executed by FastAPI BackgroundTasks. Each job updates its dict in the
shared TTLCache store and streams status transitions over WebSocket.
"""

from __future__ import annotations

import traceback
from typing import Any

from cachetools import TTLCache

from ..ai_pipeline import DesignPipeline, GenerateRequest, GenerationStatus, SpecGenerationError
from ..librarian import DesignLibrarian, build_recent_record
from .deps import ClientFactory
from .schemas import DesignRequestAPI
from .websocket import broadcast_status

# TTL-evicted job tracking: at most 256 entries, 1 hour each
jobs: TTLCache[str, dict[str, Any]] = TTLCache(maxsize=256, ttl=3600)


async def run_design_generation(
    job_id: str,
    request: DesignRequestAPI,
    client_factory: ClientFactory,
    librarian: DesignLibrarian,
) -> None:
    """Run the pipeline for one job, then store the packet as a recent design."""
    print(f"🚀 [*] Starting design job {job_id}...")
    job = jobs[job_id]

    async def publish(status: GenerationStatus, **extra) -> None:
        job["status"] = status.value
        try:
            await broadcast_status(job_id, status.value, **extra)
        except Exception as ws_error:
            print(f"⚠️ WebSocket broadcast failed (non-fatal): {ws_error}")

    async def on_status(status: GenerationStatus) -> None:
        # Terminal statuses are published below, once result or error is attached
        if status not in (GenerationStatus.COMPLETE, GenerationStatus.ERROR):
            await publish(status)

    try:
        client = client_factory()
        pipeline = DesignPipeline(client, on_status=on_status)
        packet = await pipeline.run(
            GenerateRequest(description=request.description, product_type=request.product_type)
        )
    except SpecGenerationError as e:
        job["error"] = str(e)
        print(f"❌ [-] Design job {job_id} failed: {e}")
        await publish(GenerationStatus.ERROR, error=job["error"])
        return
    except Exception as e:
        job["error"] = str(e)
        print(f"❌ [-] Design job {job_id} failed: {e}")
        print(f"[-] Traceback:\n{traceback.format_exc()}")
        await publish(GenerationStatus.ERROR, error=job["error"])
        return

    job["result"] = packet.model_dump(mode="json", by_alias=True)
    # Persisting is best-effort; the packet is already in the job result
    try:
        record = build_recent_record(packet)
        job["design_id"] = await librarian.put(record)
    except Exception as e:
        print(f"⚠️ Failed to save recent design for job {job_id}: {e}")

    await publish(GenerationStatus.COMPLETE, design_id=job.get("design_id"))

    print(f"✅ [+] Design job {job_id} complete")
