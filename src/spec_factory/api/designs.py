# src/spec_factory/api/designs.py
"""
Design API route handlers.

Flow:
1. POST / - queue a design job (runs in background)
2. GET /status/{job_id} - poll status, packet on completion
   (or listen on /ws/events?job_id=<id>)
3. GET /recent - most recent stored designs
4. GET /{design_id}/export - static HTML design packet

Schemas live in schemas.py, the background runner in tasks.py.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Response

from ..export import export_filename, render_packet_html
from ..librarian import DEFAULT_RECENT_LIMIT, DesignLibrarian, RecentDesignRecord
from .deps import ClientFactory, get_client_factory, get_librarian
from .schemas import (
    DesignJobResponse,
    DesignRequestAPI,
    DesignStatusResponse,
    RecentDesignSummary,
)
from .tasks import jobs, run_design_generation

router = APIRouter()


@router.post("/", response_model=DesignJobResponse)
async def create_design(
    request: DesignRequestAPI,
    background_tasks: BackgroundTasks,
    client_factory: ClientFactory = Depends(get_client_factory),
    librarian: DesignLibrarian = Depends(get_librarian),
):
    """
    Start a design packet job.

    Generation runs in background - poll /status/{job_id} for the result.
    """
    job_id = str(uuid.uuid4())[:8]
    jobs[job_id] = {
        "status": "queued",
        "request": request.model_dump(),
        "design_id": None,
        "result": None,
        "error": None,
    }

    background_tasks.add_task(run_design_generation, job_id, request, client_factory, librarian)

    print(f"📥 [*] Queued design job {job_id}: {request.description[:50]}...")

    return DesignJobResponse(job_id=job_id, status="queued")


@router.get("/status/{job_id}", response_model=DesignStatusResponse)
async def get_design_status(job_id: str):
    if job_id not in jobs:
        raise HTTPException(status_code=404, detail="Job not found")

    job = jobs[job_id]
    return DesignStatusResponse(
        job_id=job_id,
        status=job["status"],
        design_id=job.get("design_id"),
        result=job.get("result"),
        error=job.get("error"),
    )


@router.get("/recent", response_model=list[RecentDesignSummary])
async def list_recent_designs(
    limit: int = DEFAULT_RECENT_LIMIT,
    librarian: DesignLibrarian = Depends(get_librarian),
):
    """Most recent designs, newest first."""
    records = await librarian.list_recent(limit=min(max(limit, 1), DEFAULT_RECENT_LIMIT))
    return [
        RecentDesignSummary(id=r.id, date=r.date, product_name=r.product_name, type=r.type)
        for r in records
    ]


async def _load_record(design_id: str, librarian: DesignLibrarian) -> RecentDesignRecord:
    record = await librarian.get(design_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Design not found")
    return record


@router.get("/{design_id}")
async def get_design(design_id: str, librarian: DesignLibrarian = Depends(get_librarian)):
    """Full stored record, including the packet."""
    record = await _load_record(design_id, librarian)
    return record.model_dump(mode="json", by_alias=True)


@router.get("/{design_id}/export")
async def export_design(design_id: str, librarian: DesignLibrarian = Depends(get_librarian)):
    """Download the packet as a self-contained HTML document."""
    record = await _load_record(design_id, librarian)
    return Response(
        content=render_packet_html(record.data),
        media_type="text/html",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(record.data)}"'},
    )
