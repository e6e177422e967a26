# src/spec_factory/api/__init__.py
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .deps import close_connections
from .designs import router as designs_router
from .websocket import router as websocket_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Library and clients initialize lazily on first request
    yield

    # Shutdown: Clean up database connections
    await close_connections()


app = FastAPI(
    title="Spec Factory API",
    description="Design packet generation: spec, blueprints, code, pitch, video, audit",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(designs_router, prefix="/api/designs", tags=["designs"])
app.include_router(websocket_router, prefix="/ws", tags=["websocket"])


@app.get("/api/status", tags=["status"])
async def get_system_status():
    """Liveness check for the factory frontend."""
    from .tasks import jobs

    return {
        "factory": "online",
        "active_jobs": sum(1 for job in jobs.values() if job["status"] not in ("complete", "error")),
    }
