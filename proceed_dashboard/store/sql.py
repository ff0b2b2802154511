# === proceed_dashboard/store/sql.py ===
import asyncio
import json
import logging
from typing import Any, Dict, Optional

from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlalchemy.future import select

from proceed_dashboard.core.errors import NotFoundError
from proceed_dashboard.db.database import create_db_and_tables, create_session_factory
from proceed_dashboard.models.version import DashboardVersion
from proceed_dashboard.schemas.dashboard import UploadMeta, VersionRecord, utcnow
from proceed_dashboard.store.base import (
    DEFAULT_HISTORY_LIMIT,
    DashboardState,
    RollbackResult,
    VersionPage,
    VersionStore,
    next_version_id,
    rollback_meta,
)

logger = logging.getLogger(__name__)


def _to_record(row: DashboardVersion) -> VersionRecord:
    return VersionRecord(
        id=row.version_id,
        timestamp=row.created_at,
        filename=row.filename,
        size=row.size,
        uploaded_by=row.uploaded_by,
        description=row.description,
        rollback_of=row.rollback_of,
    )


class SqlVersionStore(VersionStore):
    """Database-backed store.

    The current snapshot is the payload of the newest row, so the snapshot and
    the head of the history can never disagree.
    """

    kind = "database"

    def __init__(self, engine: AsyncEngine, history_limit: int = DEFAULT_HISTORY_LIMIT):
        super().__init__(history_limit)
        self.engine = engine
        self.async_session = create_session_factory(engine)
        self._write_lock = asyncio.Lock()

    async def init(self) -> None:
        await create_db_and_tables(self.engine)

    async def get_state(self) -> DashboardState:
        async with self.async_session() as session:
            result = await session.execute(
                select(DashboardVersion).order_by(DashboardVersion.seq.desc())
            )
            rows = result.scalars().all()

        if not rows:
            return DashboardState(snapshot=None, last_updated=None, versions=[])
        return DashboardState(
            snapshot=json.loads(rows[0].snapshot),
            last_updated=rows[0].created_at,
            versions=[_to_record(row) for row in rows],
        )

    async def get_snapshot(self) -> Optional[Dict[str, Any]]:
        async with self.async_session() as session:
            result = await session.execute(
                select(DashboardVersion.snapshot).order_by(DashboardVersion.seq.desc()).limit(1)
            )
            raw = result.scalar_one_or_none()
        return json.loads(raw) if raw is not None else None

    async def list_versions(self, limit: int = 20, offset: int = 0) -> VersionPage:
        async with self.async_session() as session:
            total_result = await session.execute(select(func.count(DashboardVersion.seq)))
            total = total_result.scalar() or 0
            if limit <= 0 or offset < 0 or offset >= total:
                return VersionPage(versions=[], total=total)

            result = await session.execute(
                select(DashboardVersion)
                .order_by(DashboardVersion.seq.desc())
                .offset(offset)
                .limit(limit)
            )
            rows = result.scalars().all()
        return VersionPage(versions=[_to_record(row) for row in rows], total=total)

    async def get_version(self, version_id: str) -> VersionRecord:
        async with self.async_session() as session:
            row = await self._find(session, version_id)
            return _to_record(row)

    async def get_version_data(self, version_id: str) -> Dict[str, Any]:
        async with self.async_session() as session:
            row = await self._find(session, version_id)
            return json.loads(row.snapshot)

    async def record_upload(self, snapshot: Dict[str, Any], meta: UploadMeta) -> VersionRecord:
        payload = json.dumps(snapshot, allow_nan=False)
        async with self._write_lock:
            async with self.async_session() as session:
                async with session.begin():
                    return await self._insert(session, payload, meta)

    async def rollback(self, version_id: str, uploaded_by: Optional[str] = None,
                       description: Optional[str] = None) -> RollbackResult:
        async with self._write_lock:
            async with self.async_session() as session:
                async with session.begin():
                    row = await self._find(session, version_id)
                    target = _to_record(row)
                    payload = row.snapshot
                    record = await self._insert(session, payload, rollback_meta(target, uploaded_by, description))
        logger.info(f"Rolled back to version {version_id} as {record.id}")
        return RollbackResult(target=target, version=record, snapshot=json.loads(payload))

    async def clear(self) -> None:
        async with self._write_lock:
            async with self.async_session() as session:
                async with session.begin():
                    await session.execute(delete(DashboardVersion))

    async def close(self) -> None:
        await self.engine.dispose()

    async def _find(self, session: AsyncSession, version_id: str) -> DashboardVersion:
        result = await session.execute(
            select(DashboardVersion).where(DashboardVersion.version_id == version_id)
        )
        row = result.scalar_one_or_none()
        if not row:
            raise NotFoundError("Version not found", details={"versionId": version_id})
        return row

    async def _insert(self, session: AsyncSession, payload: str, meta: UploadMeta) -> VersionRecord:
        head = await session.execute(
            select(DashboardVersion.version_id).order_by(DashboardVersion.seq.desc()).limit(1)
        )
        timestamp = utcnow()
        row = DashboardVersion(
            version_id=next_version_id(head.scalar_one_or_none()),
            created_at=timestamp,
            filename=meta.filename,
            size=meta.size,
            uploaded_by=meta.uploaded_by,
            description=meta.description,
            rollback_of=meta.rollback_of,
            snapshot=payload,
        )
        session.add(row)
        await session.flush()

        # evict everything past the cap, oldest first
        evicted = await session.execute(
            select(DashboardVersion.seq)
            .order_by(DashboardVersion.seq.desc())
            .offset(self.history_limit)
        )
        evicted_seqs = evicted.scalars().all()
        if evicted_seqs:
            await session.execute(
                delete(DashboardVersion).where(DashboardVersion.seq.in_(evicted_seqs))
            )
        return VersionRecord.from_meta(row.version_id, timestamp, meta)
