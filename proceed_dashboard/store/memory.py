# === proceed_dashboard/store/memory.py ===
import asyncio
import copy
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from proceed_dashboard.core.errors import NotFoundError
from proceed_dashboard.schemas.dashboard import UploadMeta, VersionRecord, utcnow
from proceed_dashboard.store.base import (
    DEFAULT_HISTORY_LIMIT,
    DashboardState,
    RollbackResult,
    VersionPage,
    VersionStore,
    next_version_id,
    page_bounds,
    rollback_meta,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _State:
    snapshot: Optional[Dict[str, Any]] = None
    last_updated: Optional[datetime] = None
    history: Tuple[VersionRecord, ...] = ()
    payloads: Dict[str, Dict[str, Any]] = field(default_factory=dict)


class InMemoryVersionStore(VersionStore):
    """Process-local store.

    The whole state is one frozen value swapped under a lock, so a reader that
    grabs ``self._state`` once always sees a snapshot and history that belong
    together.
    """

    kind = "memory"

    def __init__(self, history_limit: int = DEFAULT_HISTORY_LIMIT):
        super().__init__(history_limit)
        self._state = _State()
        self._lock = asyncio.Lock()

    async def get_state(self) -> DashboardState:
        state = self._state
        return DashboardState(
            snapshot=copy.deepcopy(state.snapshot),
            last_updated=state.last_updated,
            versions=list(state.history),
        )

    async def get_snapshot(self) -> Optional[Dict[str, Any]]:
        return copy.deepcopy(self._state.snapshot)

    async def list_versions(self, limit: int = 20, offset: int = 0) -> VersionPage:
        history = self._state.history
        bounds = page_bounds(limit, offset, len(history))
        if bounds is None:
            return VersionPage(versions=[], total=len(history))
        start, end = bounds
        return VersionPage(versions=list(history[start:end]), total=len(history))

    async def get_version(self, version_id: str) -> VersionRecord:
        for record in self._state.history:
            if record.id == version_id:
                return record
        raise NotFoundError("Version not found", details={"versionId": version_id})

    async def get_version_data(self, version_id: str) -> Dict[str, Any]:
        state = self._state
        if version_id not in state.payloads:
            raise NotFoundError("Version not found", details={"versionId": version_id})
        return copy.deepcopy(state.payloads[version_id])

    async def record_upload(self, snapshot: Dict[str, Any], meta: UploadMeta) -> VersionRecord:
        async with self._lock:
            return self._apply(copy.deepcopy(snapshot), meta)

    async def rollback(self, version_id: str, uploaded_by: Optional[str] = None,
                       description: Optional[str] = None) -> RollbackResult:
        async with self._lock:
            state = self._state
            target = next((r for r in state.history if r.id == version_id), None)
            if target is None:
                raise NotFoundError("Version not found", details={"versionId": version_id})
            snapshot = copy.deepcopy(state.payloads[version_id])
            record = self._apply(snapshot, rollback_meta(target, uploaded_by, description))
            logger.info(f"Rolled back to version {version_id} as {record.id}")
            return RollbackResult(target=target, version=record, snapshot=copy.deepcopy(snapshot))

    async def clear(self) -> None:
        async with self._lock:
            self._state = _State()

    def _apply(self, snapshot: Dict[str, Any], meta: UploadMeta) -> VersionRecord:
        # caller holds self._lock
        state = self._state
        previous_id = state.history[0].id if state.history else None
        timestamp = utcnow()
        record = VersionRecord.from_meta(next_version_id(previous_id), timestamp, meta)

        history = (record,) + state.history
        history = history[:self.history_limit]
        payloads = {r.id: state.payloads[r.id] for r in history if r.id in state.payloads}
        payloads[record.id] = snapshot

        self._state = _State(
            snapshot=snapshot,
            last_updated=timestamp,
            history=history,
            payloads=payloads,
        )
        return record
