# === proceed_dashboard/api/v1/api.py ===
from fastapi import APIRouter
from .endpoints import health, dashboard, upload, template, versions, export

api_router = APIRouter()
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(upload.router, prefix="/upload", tags=["Upload"])
api_router.include_router(template.router, prefix="/template", tags=["Template"])
api_router.include_router(versions.router, prefix="/versions", tags=["Versions"])
api_router.include_router(export.router, prefix="/json", tags=["JSON"])
