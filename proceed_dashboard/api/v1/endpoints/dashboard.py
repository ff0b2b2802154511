# === proceed_dashboard/api/v1/endpoints/dashboard.py ===
from fastapi import APIRouter, Depends

from proceed_dashboard.api.deps import get_store
from proceed_dashboard.schemas.dashboard import DashboardData, DashboardResponse
from proceed_dashboard.store.base import VersionStore

router = APIRouter()

POPULATED_MESSAGE = "Dashboard data retrieved successfully"
EMPTY_MESSAGE = "No data uploaded yet. Please upload an Excel or JSON file."

@router.get("", response_model=DashboardResponse)
async def get_dashboard(store: VersionStore = Depends(get_store)):
    state = await store.get_state()
    return DashboardResponse(
        data=DashboardData(
            last_updated=state.last_updated,
            portfolio_snapshot=state.snapshot,
            versions=state.versions,
        ),
        message=POPULATED_MESSAGE if state.snapshot is not None else EMPTY_MESSAGE,
    )
