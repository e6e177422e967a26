# src/spec_factory/api/deps.py
"""
Shared dependencies for route handlers and background tasks.

Overridable through ``app.dependency_overrides`` in tests.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Callable

from ..ai_pipeline.client import CapabilityClient
from ..config import FactorySettings
from ..librarian import DesignLibrarian, create_librarian

ClientFactory = Callable[[], CapabilityClient]

_librarian: DesignLibrarian | None = None


@lru_cache(maxsize=1)
def get_settings() -> FactorySettings:
    return FactorySettings.from_env()


def get_librarian() -> DesignLibrarian:
    """Process-wide librarian. Mongo when configured, memory otherwise."""
    global _librarian
    if _librarian is None:
        try:
            settings = get_settings()
        except RuntimeError as e:
            print(f"⚠️ Settings unavailable, using in-memory library: {e}")
            settings = None
        _librarian = create_librarian(settings)
    return _librarian


def get_client_factory() -> ClientFactory:
    """Clients are built per run, inside the job, so a bad key fails the job and not the request."""
    return lambda: CapabilityClient(get_settings())


async def close_connections() -> None:
    global _librarian
    if _librarian is not None:
        await _librarian.close_connections()
        _librarian = None
