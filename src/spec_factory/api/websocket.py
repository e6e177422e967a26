# src/spec_factory/api/websocket.py
"""
Design job status stream.

Clients connect to /ws/events, optionally with ?job_id=<id> to receive
only that job's transitions. Broadcast failures never reach the pipeline.
"""

from __future__ import annotations

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

router = APIRouter()


class ConnectionManager:
    """Active connections with their job filter, error-isolated broadcast."""

    def __init__(self) -> None:
        self.active_connections: dict[WebSocket, str | None] = {}

    async def connect(self, websocket: WebSocket, job_id: str | None = None) -> None:
        await websocket.accept()
        self.active_connections[websocket] = job_id

    def disconnect(self, websocket: WebSocket) -> None:
        self.active_connections.pop(websocket, None)

    async def broadcast(self, message: dict, job_id: str | None = None) -> None:
        """Send to every client subscribed to ``job_id`` (or to all jobs). Dead connections are pruned."""
        dead: list[WebSocket] = []
        for conn, wanted in list(self.active_connections.items()):
            if wanted is not None and wanted != job_id:
                continue
            try:
                await conn.send_json(message)
            except Exception:
                dead.append(conn)
        for conn in dead:
            self.disconnect(conn)


manager = ConnectionManager()


@router.websocket("/events")
async def websocket_endpoint(websocket: WebSocket, job_id: str | None = None) -> None:
    await manager.connect(websocket, job_id)
    try:
        while True:
            # Keep-alive; client messages carry no meaning
            await websocket.receive_text()
    except WebSocketDisconnect:
        manager.disconnect(websocket)


async def broadcast_status(job_id: str, status: str, **extra) -> None:
    """Broadcast a design:status event for one job."""
    await manager.broadcast(
        {
            "type": "design:status",
            "payload": {"job_id": job_id, "status": status, **extra},
        },
        job_id=job_id,
    )
