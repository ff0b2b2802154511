# === proceed_dashboard/api/v1/endpoints/template.py ===
from fastapi import APIRouter, Depends, Query, Request, Response

from proceed_dashboard.api.deps import get_store
from proceed_dashboard.services.template_service import (
    TEMPLATE_FILENAME,
    XLSX_MEDIA_TYPE,
    build_template_workbook,
    get_template_descriptor,
)
from proceed_dashboard.store.base import VersionStore
from starlette.concurrency import run_in_threadpool

router = APIRouter()

@router.get("")
async def get_template(request: Request):
    return {
        "success": True,
        "message": "Template endpoint ready",
        "template": get_template_descriptor(str(request.url_for("download_template"))),
    }

@router.get("/download", name="download_template")
async def download_template(
    prefill: bool = Query(False, description="Fill the sheets with the current dashboard data"),
    store: VersionStore = Depends(get_store),
):
    snapshot = await store.get_snapshot() if prefill else None
    content = await run_in_threadpool(build_template_workbook, snapshot)
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{TEMPLATE_FILENAME}"'},
    )
