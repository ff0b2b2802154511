# === proceed_dashboard/api/deps.py ===
from fastapi import Request

from proceed_dashboard.core.config import Settings
from proceed_dashboard.core.errors import AppError
from proceed_dashboard.store.base import VersionStore

def get_store(request: Request) -> VersionStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise AppError("Version store is not initialised", status_code=503)
    return store

def get_settings(request: Request) -> Settings:
    return request.app.state.settings
