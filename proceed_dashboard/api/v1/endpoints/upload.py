# === proceed_dashboard/api/v1/endpoints/upload.py ===
from fastapi import APIRouter, Depends, Query, Request

from proceed_dashboard.api.deps import get_settings, get_store
from proceed_dashboard.core.config import Settings
from proceed_dashboard.core.errors import ValidationError
from proceed_dashboard.schemas.dashboard import UploadResponse
from proceed_dashboard.services.upload_service import (
    JSON_CONTENT_TYPES,
    apply_upload,
    extract_from_envelope,
    extract_from_file,
    media_type,
)
from proceed_dashboard.store.base import VersionStore

router = APIRouter()

@router.post("", response_model=UploadResponse)
async def upload_dashboard(
    request: Request,
    commit: bool = Query(True, description="Save the data (true) or only validate and preview it (false)"),
    store: VersionStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """
    Accepts a multipart ``file`` field (Excel or JSON) with optional
    ``uploadedBy``/``description``/``notes`` fields, or a JSON body
    ``{filename, size, uploadedBy, description, data}``.
    """
    content_type = media_type(request.headers.get("content-type"))

    if content_type == "multipart/form-data":
        async with request.form() as form:
            extracted = await extract_from_file(
                form.get("file"),
                settings.MAX_UPLOAD_BYTES,
                uploaded_by=form.get("uploadedBy"),
                description=form.get("description") or form.get("notes"),
            )
    elif content_type in JSON_CONTENT_TYPES:
        extracted = extract_from_envelope(await request.body(), settings.MAX_UPLOAD_BYTES)
    else:
        raise ValidationError(
            "Invalid file type. Only Excel and JSON files are allowed.",
            details={"contentType": content_type or None},
        )

    record, committed = await apply_upload(store, extracted, commit)
    return UploadResponse(
        committed=committed,
        message="File uploaded and processed successfully" if committed else "File validated successfully (preview only, nothing saved)",
        version=record,
        data=extracted.snapshot,
    )
