# === proceed_dashboard/store/base.py ===
"""
Version store contract shared by the in-memory and database-backed stores.

The store owns two things: the current dashboard snapshot and a bounded,
newest-first history of version records. Every successful upload replaces the
snapshot and prepends one record in a single step; once the history grows past
``history_limit`` the oldest records fall off the tail.
"""
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from proceed_dashboard.schemas.dashboard import DEFAULT_UPLOADER, UploadMeta, VersionRecord

DEFAULT_HISTORY_LIMIT = 10


@dataclass
class DashboardState:
    """Snapshot and history read together."""
    snapshot: Optional[Dict[str, Any]]
    last_updated: Optional[datetime]
    versions: List[VersionRecord] = field(default_factory=list)


@dataclass
class VersionPage:
    versions: List[VersionRecord]
    total: int


@dataclass
class RollbackResult:
    target: VersionRecord
    version: VersionRecord
    snapshot: Dict[str, Any]


def next_version_id(previous_id: Optional[str] = None) -> str:
    """Millisecond epoch id, strictly greater than ``previous_id``."""
    now_ms = time.time_ns() // 1_000_000
    if previous_id is not None and previous_id.isdigit():
        now_ms = max(now_ms, int(previous_id) + 1)
    return str(now_ms)


def rollback_meta(target: VersionRecord, uploaded_by: Optional[str] = None,
                  description: Optional[str] = None) -> UploadMeta:
    return UploadMeta(
        filename=target.filename,
        size=target.size,
        uploaded_by=uploaded_by or DEFAULT_UPLOADER,
        description=description or f"Rollback to version {target.id}",
        rollback_of=target.id,
    )


def page_bounds(limit: int, offset: int, total: int):
    if limit <= 0 or offset < 0 or offset >= total:
        return None
    return offset, min(offset + limit, total)


class VersionStore(ABC):
    """Abstract base class for snapshot + version history storage."""

    kind = "abstract"

    def __init__(self, history_limit: int = DEFAULT_HISTORY_LIMIT):
        if history_limit < 1:
            raise ValueError("history_limit must be at least 1")
        self.history_limit = history_limit

    @abstractmethod
    async def get_state(self) -> DashboardState:
        """Consistent snapshot + history pair."""
        pass

    async def get_snapshot(self) -> Optional[Dict[str, Any]]:
        state = await self.get_state()
        return state.snapshot

    @abstractmethod
    async def list_versions(self, limit: int = 20, offset: int = 0) -> VersionPage:
        """Newest-first page of the history; out-of-range pages are empty."""
        pass

    @abstractmethod
    async def get_version(self, version_id: str) -> VersionRecord:
        """Raises NotFoundError for unknown ids."""
        pass

    @abstractmethod
    async def get_version_data(self, version_id: str) -> Dict[str, Any]:
        """Snapshot recorded by a version. Raises NotFoundError for unknown ids."""
        pass

    @abstractmethod
    async def record_upload(self, snapshot: Dict[str, Any], meta: UploadMeta) -> VersionRecord:
        """Replace the snapshot, prepend a record and truncate the history."""
        pass

    @abstractmethod
    async def rollback(self, version_id: str, uploaded_by: Optional[str] = None,
                       description: Optional[str] = None) -> RollbackResult:
        """Make a past version's snapshot current again as a new version."""
        pass

    @abstractmethod
    async def clear(self) -> None:
        pass

    async def close(self) -> None:
        pass
