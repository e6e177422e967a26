# src/spec_factory/librarian/designs.py
"""
Recent designs library.

Stores one record per completed pipeline run. Records are never mutated;
``put`` with an existing id overwrites in place. Reads return the most
recent records by numeric id, newest first.
"""

from __future__ import annotations

import threading
import time
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorClient

from ..ai_pipeline.schemas import CamelModel, DesignPacket
from ..config import FactorySettings

DEFAULT_RECENT_LIMIT = 10
UNTITLED_PROJECT = "Untitled Project"


class RecentDesignRecord(CamelModel):
    """Persisted summary of one run plus the full packet."""

    id: str  # millisecond creation timestamp, string-encoded
    date: str  # display date
    product_name: str
    type: str
    data: DesignPacket

    @property
    def sort_key(self) -> int:
        return int(self.id)


class _MonotonicIds:
    """Millisecond timestamps, bumped so two records never share an id."""

    def __init__(self) -> None:
        self._last = 0
        self._lock = threading.Lock()

    def next(self, now_ms: int | None = None) -> str:
        with self._lock:
            candidate = now_ms if now_ms is not None else int(time.time() * 1000)
            if candidate <= self._last:
                candidate = self._last + 1
            self._last = candidate
            return str(candidate)


_ids = _MonotonicIds()


def build_recent_record(packet: DesignPacket, now: datetime | None = None) -> RecentDesignRecord:
    """
    Build the record for a completed run.

    Name and type come from the corrected spec when the audit produced one.
    """
    now = now or datetime.now()
    spec = packet.final_spec
    return RecentDesignRecord(
        id=_ids.next(int(now.timestamp() * 1000)),
        date=now.strftime("%x"),
        product_name=spec.product_name or UNTITLED_PROJECT,
        type=spec.product_type,
        data=packet,
    )


class DesignLibrarian(ABC):
    """Keyed record store with a most-recent-N read contract."""

    @abstractmethod
    async def put(self, record: RecentDesignRecord) -> str:
        """Upsert by id. Returns the id."""
        ...

    @abstractmethod
    async def get(self, design_id: str) -> Optional[RecentDesignRecord]:
        ...

    @abstractmethod
    async def list_recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> List[RecentDesignRecord]:
        """Records sorted by numeric id descending, truncated to ``limit``."""
        ...

    async def close_connections(self) -> None:
        """Release any connections. Call on application shutdown."""
        return None


class MemoryDesignLibrarian(DesignLibrarian):
    """Process-local store. Used when no database is configured."""

    def __init__(self) -> None:
        self._records: Dict[str, RecentDesignRecord] = {}

    async def put(self, record: RecentDesignRecord) -> str:
        self._records[record.id] = record.model_copy(deep=True)
        return record.id

    async def get(self, design_id: str) -> Optional[RecentDesignRecord]:
        record = self._records.get(design_id)
        return record.model_copy(deep=True) if record else None

    async def list_recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> List[RecentDesignRecord]:
        records = sorted(self._records.values(), key=lambda r: r.sort_key, reverse=True)
        return [r.model_copy(deep=True) for r in records[:limit]]


class MongoDesignLibrarian(DesignLibrarian):
    """MongoDB-backed store (motor)."""

    collection_name = "designs"

    def __init__(self, mongo_uri: str, db_name: str) -> None:
        self._mongo_uri = mongo_uri
        self._db_name = db_name
        self.client: Optional[AsyncIOMotorClient] = None
        self.db = None

    async def _ensure_db(self):
        """Lazy initialization of the database connection."""
        if self.db is None:
            self.client = AsyncIOMotorClient(self._mongo_uri)
            self.db = self.client[self._db_name]
        return self.db

    @staticmethod
    def _to_doc(record: RecentDesignRecord) -> dict[str, Any]:
        doc = record.model_dump(mode="json", by_alias=True)
        doc["_id"] = doc.pop("id")
        doc["created_ms"] = record.sort_key
        return doc

    @staticmethod
    def _from_doc(doc: dict[str, Any]) -> RecentDesignRecord:
        doc = dict(doc)
        doc["id"] = str(doc.pop("_id"))
        doc.pop("created_ms", None)
        return RecentDesignRecord.model_validate(doc)

    async def put(self, record: RecentDesignRecord) -> str:
        db = await self._ensure_db()
        doc = self._to_doc(record)
        await db[self.collection_name].replace_one({"_id": doc["_id"]}, doc, upsert=True)
        return record.id

    async def get(self, design_id: str) -> Optional[RecentDesignRecord]:
        db = await self._ensure_db()
        doc = await db[self.collection_name].find_one({"_id": design_id})
        if not doc:
            return None
        return self._from_doc(doc)

    async def list_recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> List[RecentDesignRecord]:
        db = await self._ensure_db()
        cursor = db[self.collection_name].find({}).sort("created_ms", -1).limit(limit)
        results = []
        async for doc in cursor:
            results.append(self._from_doc(doc))
        return results

    async def close_connections(self) -> None:
        if self.client:
            self.client.close()
            self.client = None
            self.db = None


def create_librarian(settings: FactorySettings | None = None) -> DesignLibrarian:
    """Mongo when a URI is configured, process memory otherwise."""
    if settings is not None and settings.mongo_uri:
        return MongoDesignLibrarian(settings.mongo_uri, settings.mongo_db)
    return MemoryDesignLibrarian()
