# === proceed_dashboard/api/v1/endpoints/export.py ===
import json

from fastapi import APIRouter, Depends, Query, Request, Response

from proceed_dashboard.api.deps import get_settings, get_store
from proceed_dashboard.core.config import Settings
from proceed_dashboard.core.errors import NotFoundError
from proceed_dashboard.schemas.dashboard import UploadResponse, utcnow
from proceed_dashboard.services.upload_service import apply_upload, extract_from_file
from proceed_dashboard.store.base import VersionStore

router = APIRouter()

@router.get("/download")
async def download_json(store: VersionStore = Depends(get_store)):
    """Current snapshot as a downloadable JSON file"""
    snapshot = await store.get_snapshot()
    if snapshot is None:
        raise NotFoundError("No data uploaded yet")

    filename = f"dashboard-{utcnow().date().isoformat()}.json"
    return Response(
        content=json.dumps(snapshot, indent=2, allow_nan=False),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

@router.post("/upload", response_model=UploadResponse)
async def upload_json_file(
    request: Request,
    commit: bool = Query(True, description="Save the data (true) or only validate and preview it (false)"),
    format: str = Query("domain", description="Accepted for front-end compatibility; the file is stored as-is"),
    store: VersionStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """Multipart ``file`` upload of a previously downloaded dashboard JSON"""
    async with request.form() as form:
        extracted = await extract_from_file(
            form.get("file"),
            settings.MAX_UPLOAD_BYTES,
            uploaded_by=form.get("uploadedBy"),
            description=form.get("description") or form.get("notes"),
        )

    record, committed = await apply_upload(store, extracted, commit)
    return UploadResponse(
        committed=committed,
        message="JSON uploaded and processed successfully" if committed else "JSON validated successfully (preview only, nothing saved)",
        version=record,
        data=extracted.snapshot,
    )
