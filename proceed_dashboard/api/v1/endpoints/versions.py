# === proceed_dashboard/api/v1/endpoints/versions.py ===
import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from proceed_dashboard.api.deps import get_store
from proceed_dashboard.schemas.dashboard import (
    RollbackRequest,
    RollbackResponse,
    VersionDetailResponse,
    VersionListResponse,
)
from proceed_dashboard.store.base import VersionStore

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_PAGE_SIZE = 100

@router.get("", response_model=VersionListResponse)
async def list_versions(
    limit: int = Query(20, description="Page size, clamped to 1..100"),
    offset: int = Query(0),
    store: VersionStore = Depends(get_store),
):
    limit = max(1, min(limit, MAX_PAGE_SIZE))
    page = await store.list_versions(limit=limit, offset=offset)
    return VersionListResponse(
        versions=page.versions,
        total=page.total,
        limit=limit,
        offset=offset,
        message="Version history retrieved successfully" if page.total > 0 else "No versions available yet",
    )

@router.get("/{version_id}", response_model=VersionDetailResponse)
async def get_version(
    version_id: str,
    include_data: bool = Query(False, alias="includeData"),
    store: VersionStore = Depends(get_store),
):
    record = await store.get_version(version_id)
    data = await store.get_version_data(version_id) if include_data else None
    return VersionDetailResponse(version=record, data=data)

@router.post("/{version_id}/rollback", response_model=RollbackResponse)
async def rollback_version(
    version_id: str,
    payload: Optional[RollbackRequest] = Body(None),
    store: VersionStore = Depends(get_store),
):
    payload = payload or RollbackRequest()
    result = await store.rollback(
        version_id,
        uploaded_by=payload.uploaded_by,
        description=payload.notes,
    )
    logger.info(f"Version {version_id} restored as {result.version.id}")
    return RollbackResponse(
        message=f"Rolled back to version {version_id}",
        version=result.target,
        new_version=result.version,
        note=f"Version {version_id} is now the current dashboard data, recorded as version {result.version.id}",
        data=result.snapshot,
    )
