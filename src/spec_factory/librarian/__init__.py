from .designs import (
    RecentDesignRecord,
    DesignLibrarian,
    MemoryDesignLibrarian,
    MongoDesignLibrarian,
    build_recent_record,
    create_librarian,
    DEFAULT_RECENT_LIMIT,
)

__all__ = [
    "RecentDesignRecord",
    "DesignLibrarian",
    "MemoryDesignLibrarian",
    "MongoDesignLibrarian",
    "build_recent_record",
    "create_librarian",
    "DEFAULT_RECENT_LIMIT",
]
