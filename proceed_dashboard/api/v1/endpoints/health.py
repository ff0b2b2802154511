# === proceed_dashboard/api/v1/endpoints/health.py ===
from fastapi import APIRouter, Depends

from proceed_dashboard.api.deps import get_settings, get_store
from proceed_dashboard.core.config import Settings
from proceed_dashboard.schemas.dashboard import isoformat_z, utcnow
from proceed_dashboard.store.base import VersionStore

router = APIRouter()

ENDPOINTS = {
    "health": "GET /health",
    "dashboard": "GET /dashboard",
    "upload": "POST /upload",
    "template": "GET /template",
    "templateDownload": "GET /template/download",
    "jsonDownload": "GET /json/download",
    "jsonUpload": "POST /json/upload",
    "versions": "GET /versions",
    "version": "GET /versions/{id}",
    "rollback": "POST /versions/{id}/rollback",
}

@router.get("/health")
async def health_check(
    settings: Settings = Depends(get_settings),
    store: VersionStore = Depends(get_store),
):
    return {
        "status": "ok",
        "message": "Backend API is running successfully",
        "timestamp": isoformat_z(utcnow()),
        "environment": settings.ENVIRONMENT,
        "store": store.kind,
        "endpoints": ENDPOINTS,
    }
