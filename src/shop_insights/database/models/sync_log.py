"""
SyncLog model - history of sync operations.
"""

import enum

from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Index, Text
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class SyncStatus(str, enum.Enum):
    """Final state of one sync attempt."""
    SUCCESS = "success"
    FAILED = "failed"


class SyncTrigger(str, enum.Enum):
    """What started a sync."""
    MANUAL = "manual"
    SCHEDULED = "scheduled"
    CLI = "cli"


class SyncLog(Base):
    """
    Log entry for each sync attempt of an existing tenant.

    status is "failed" only when the remote fetch failed; per-record
    failures are counted in records_failed on an otherwise successful run.
    """

    __tablename__ = "sync_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)

    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)

    status = Column(String(20), nullable=False)
    trigger = Column(String(20), nullable=False, default=SyncTrigger.MANUAL.value)

    products_synced = Column(Integer, default=0)
    customers_synced = Column(Integer, default=0)
    orders_synced = Column(Integer, default=0)
    records_failed = Column(Integer, default=0)
    duration_ms = Column(Integer, nullable=True)

    error_message = Column(Text, nullable=True)

    started_at = Column(DateTime, default=utcnow, nullable=False)
    completed_at = Column(DateTime, nullable=True)

    tenant = relationship("Tenant", back_populates="sync_logs")

    __table_args__ = (
        Index("ix_sync_logs_tenant_started", "tenant_id", "started_at"),
    )

    def __repr__(self):
        return f"<SyncLog(id={self.id}, tenant_id={self.tenant_id}, status='{self.status}')>"

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "status": self.status,
            "trigger": self.trigger,
            "productsSynced": self.products_synced,
            "customersSynced": self.customers_synced,
            "ordersSynced": self.orders_synced,
            "recordsFailed": self.records_failed,
            "durationMs": self.duration_ms,
            "errorMessage": self.error_message,
            "startedAt": self.started_at.isoformat() if self.started_at else None,
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
        }
