"""Single-slot cache for the latest sales snapshot."""

from __future__ import annotations

import json
from decimal import InvalidOperation
import logging
from typing import TYPE_CHECKING, Optional

from store_stats.config import DEFAULT_SNAPSHOT_KEY
from store_stats.exceptions import StoreError
from store_stats.sales.types import SalesSnapshot

if TYPE_CHECKING:
    from store_stats.store.base import BlobStore

logger = logging.getLogger(__name__)


class SnapshotCache:
    """Holds the most recent SalesSnapshot under one blob key.

    ``put`` replaces the previous snapshot entirely. ``get`` returns None
    until a run has stored something.
    """

    def __init__(self, blobs: BlobStore, key: str = DEFAULT_SNAPSHOT_KEY) -> None:
        self.blobs = blobs
        self.key = key

    def get(self) -> Optional[SalesSnapshot]:
        raw = self.blobs.get(self.key)
        if raw is None:
            return None
        try:
            return SalesSnapshot.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError, InvalidOperation) as e:
            raise StoreError(f"Cached snapshot '{self.key}' is unreadable: {e}") from e

    def put(self, snapshot: SalesSnapshot) -> None:
        self.blobs.put(self.key, json.dumps(snapshot.to_dict()))
        logger.info("Cached snapshot '%s' with %d row(s)", self.key, len(snapshot))
