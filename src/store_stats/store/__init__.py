"""Store backends.

- ``base``: protocols the job depends on (EntityStore, BlobStore).
- ``sql``: SQLAlchemy backends over the store database.
- ``files``: JSON file blob store for the snapshot.
- ``memory``: in-memory backends for tests and dry runs.
"""

from store_stats.store.base import BlobStore, EntityStore, LineItemRecord
from store_stats.store.files import JsonFileBlobStore
from store_stats.store.memory import InMemoryBlobStore, InMemoryEntityStore
from store_stats.store.sql import SqlEntityStore, SqlOptionStore, create_schema, get_engine

__all__ = [
    "BlobStore",
    "EntityStore",
    "InMemoryBlobStore",
    "InMemoryEntityStore",
    "JsonFileBlobStore",
    "LineItemRecord",
    "SqlEntityStore",
    "SqlOptionStore",
    "create_schema",
    "get_engine",
]
