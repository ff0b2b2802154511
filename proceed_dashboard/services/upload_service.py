# === proceed_dashboard/services/upload_service.py ===
"""
Upload validation and extraction.

Preview (``commit=false``) and commit run exactly the same extraction, the
only difference being whether the result is handed to the version store.
"""
import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from proceed_dashboard.core.errors import PayloadTooLargeError, ValidationError
from proceed_dashboard.schemas.dashboard import (
    DEFAULT_DESCRIPTION,
    DEFAULT_UPLOADER,
    UploadMeta,
    VersionRecord,
    utcnow,
)
from proceed_dashboard.services.workbook_parser import parse_workbook
from proceed_dashboard.store.base import VersionStore

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPES = {"application/json", "text/json"}
SPREADSHEET_CONTENT_TYPES = {
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-excel",
}
GENERIC_CONTENT_TYPES = {"", "application/octet-stream"}
EXTENSION_KINDS = {".json": "json", ".xlsx": "spreadsheet", ".xlsm": "spreadsheet", ".xls": "spreadsheet"}

RAW_PREVIEW_CHARS = 2000
PREVIEW_VERSION_ID = "preview"


@dataclass
class ExtractedUpload:
    snapshot: Dict[str, Any]
    meta: UploadMeta


def media_type(content_type: Optional[str]) -> str:
    return (content_type or "").split(";")[0].strip().lower()


def resolve_file_kind(content_type: Optional[str], filename: Optional[str]) -> str:
    """'json' or 'spreadsheet'; anything else is rejected"""
    mtype = media_type(content_type)
    if mtype in JSON_CONTENT_TYPES:
        return "json"
    if mtype in SPREADSHEET_CONTENT_TYPES:
        return "spreadsheet"
    if mtype in GENERIC_CONTENT_TYPES and filename:
        kind = EXTENSION_KINDS.get(os.path.splitext(filename)[1].lower())
        if kind:
            return kind
    raise ValidationError(
        "Invalid file type. Only Excel and JSON files are allowed.",
        details={"contentType": mtype or None, "filename": filename},
    )


def check_size(size: int, max_bytes: int) -> None:
    if size > max_bytes:
        raise PayloadTooLargeError(
            f"File too large. Maximum upload size is {max_bytes} bytes.",
            details={"size": size, "maxBytes": max_bytes},
        )


def parse_json_bytes(raw: bytes) -> Any:
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ValidationError("JSON content must be UTF-8 encoded", details={"error": str(e)})

    def reject_constant(token: str):
        # NaN / Infinity / -Infinity are not JSON
        logger.warning(f"JSON parse failed: non-standard constant {token}")
        raise ValidationError(
            "Invalid JSON content",
            details={"error": f"Non-standard JSON constant: {token}", "raw": text[:RAW_PREVIEW_CHARS]},
        )

    try:
        return json.loads(text, parse_constant=reject_constant)
    except json.JSONDecodeError as e:
        logger.warning(f"JSON parse failed at line {e.lineno} column {e.colno}: {e.msg}")
        raise ValidationError(
            "Invalid JSON content",
            details={"error": str(e), "raw": text[:RAW_PREVIEW_CHARS]},
        )


def ensure_snapshot(data: Any) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ValidationError(
            "Dashboard data must be a JSON object",
            details={"receivedType": type(data).__name__},
        )
    return data


def _text(value: Any, default: str) -> str:
    if value is None:
        return default
    value = str(value).strip()
    return value or default


async def extract_from_file(
    file: Any,
    max_bytes: int,
    uploaded_by: Optional[str] = None,
    description: Optional[str] = None,
) -> ExtractedUpload:
    """Validate a multipart file field and turn it into a snapshot"""
    if not isinstance(file, UploadFile) or not file.filename:
        raise ValidationError("No file uploaded")

    kind = resolve_file_kind(file.content_type, file.filename)
    raw = await file.read()
    check_size(len(raw), max_bytes)
    if not raw:
        raise ValidationError("Uploaded file is empty", details={"filename": file.filename})

    if kind == "json":
        snapshot = ensure_snapshot(parse_json_bytes(raw))
    else:
        snapshot = await run_in_threadpool(parse_workbook, raw)

    meta = UploadMeta(
        filename=file.filename,
        size=len(raw),
        uploaded_by=_text(uploaded_by, DEFAULT_UPLOADER),
        description=_text(description, DEFAULT_DESCRIPTION),
    )
    return ExtractedUpload(snapshot=snapshot, meta=meta)


def extract_from_envelope(raw: bytes, max_bytes: int) -> ExtractedUpload:
    """JSON request body ``{filename, size, uploadedBy, description, data}``"""
    check_size(len(raw), max_bytes)
    if not raw.strip():
        raise ValidationError("No file uploaded")

    body = parse_json_bytes(raw)
    if not isinstance(body, dict):
        raise ValidationError(
            "Upload body must be a JSON object",
            details={"receivedType": type(body).__name__},
        )

    snapshot = ensure_snapshot(body["data"] if body.get("data") is not None else body)

    size = body.get("size")
    if not isinstance(size, int) or isinstance(size, bool) or size < 0:
        size = len(raw)

    meta = UploadMeta(
        filename=_text(body.get("filename"), "uploaded-file"),
        size=size,
        uploaded_by=_text(body.get("uploadedBy"), DEFAULT_UPLOADER),
        description=_text(body.get("description"), DEFAULT_DESCRIPTION),
    )
    return ExtractedUpload(snapshot=snapshot, meta=meta)


def preview_record(meta: UploadMeta) -> VersionRecord:
    return VersionRecord.from_meta(PREVIEW_VERSION_ID, utcnow(), meta)


async def apply_upload(store: VersionStore, extracted: ExtractedUpload, commit: bool) -> Tuple[VersionRecord, bool]:
    if not commit:
        logger.info(f"Previewed upload {extracted.meta.filename} ({extracted.meta.size} bytes)")
        return preview_record(extracted.meta), False

    record = await store.record_upload(extracted.snapshot, extracted.meta)
    logger.info(f"Recorded version {record.id} from {record.filename} ({record.size} bytes)")
    return record, True
