# === proceed_dashboard/schemas/dashboard.py ===
from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field, field_serializer
from typing import Optional, List, Dict, Any

DEFAULT_UPLOADER = "Anonymous"
DEFAULT_DESCRIPTION = "File upload"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def isoformat_z(value: datetime) -> str:
    """ISO-8601 UTC with millisecond precision, e.g. 2024-01-31T09:15:00.123Z"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


class UploadMeta(BaseModel):
    filename: str
    size: int = 0
    uploaded_by: str = DEFAULT_UPLOADER
    description: str = DEFAULT_DESCRIPTION
    rollback_of: Optional[str] = None


class VersionRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    timestamp: datetime
    filename: str
    size: int = 0
    uploaded_by: str = Field(DEFAULT_UPLOADER, alias="uploadedBy")
    description: str = DEFAULT_DESCRIPTION
    rollback_of: Optional[str] = Field(None, alias="rollbackOf")

    @field_serializer("timestamp")
    def serialize_timestamp(self, value: datetime) -> str:
        return isoformat_z(value)

    @classmethod
    def from_meta(cls, version_id: str, timestamp: datetime, meta: UploadMeta) -> "VersionRecord":
        return cls(
            id=version_id,
            timestamp=timestamp,
            filename=meta.filename,
            size=meta.size,
            uploaded_by=meta.uploaded_by,
            description=meta.description,
            rollback_of=meta.rollback_of,
        )


class DashboardData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    last_updated: Optional[datetime] = Field(None, alias="lastUpdated")
    portfolio_snapshot: Optional[Dict[str, Any]] = Field(None, alias="portfolioSnapshot")
    versions: List[VersionRecord] = []

    @field_serializer("last_updated")
    def serialize_last_updated(self, value: Optional[datetime]) -> Optional[str]:
        return isoformat_z(value) if value else None


class DashboardResponse(BaseModel):
    success: bool = True
    data: DashboardData
    message: str


class UploadResponse(BaseModel):
    success: bool = True
    committed: bool
    message: str
    version: VersionRecord
    data: Dict[str, Any]


class VersionListResponse(BaseModel):
    success: bool = True
    versions: List[VersionRecord]
    total: int
    limit: int
    offset: int
    message: str


class VersionDetailResponse(BaseModel):
    success: bool = True
    version: VersionRecord
    data: Optional[Dict[str, Any]] = None


class RollbackRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    notes: Optional[str] = None
    uploaded_by: Optional[str] = Field(None, alias="uploadedBy")


class RollbackResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    version: VersionRecord
    new_version: VersionRecord = Field(alias="newVersion")
    note: str
    data: Dict[str, Any]
