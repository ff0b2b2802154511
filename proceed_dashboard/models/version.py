# === proceed_dashboard/models/version.py ===
from sqlalchemy import Column, Integer, String, Text, DateTime
from proceed_dashboard.db.database import Base

class DashboardVersion(Base):
    __tablename__ = "dashboard_versions"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    version_id = Column(String(32), unique=True, index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    filename = Column(String, nullable=False)
    size = Column(Integer, nullable=False, default=0)
    uploaded_by = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    rollback_of = Column(String(32), nullable=True)
    snapshot = Column(Text, nullable=False)  # JSON
