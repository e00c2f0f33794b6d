"""
Customer model for store customers synced from a store.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class Customer(Base):
    """
    Customer of a tenant's store.

    created_at comes from the platform and is written once on insert.
    """

    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, autoincrement=True)

    tenant_id = Column(
        Integer,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    external_id = Column(String(64), nullable=False, unique=True)

    email = Column(String(320), nullable=False, default="")
    first_name = Column(String(255), nullable=False, default="")
    last_name = Column(String(255), nullable=False, default="")

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    tenant = relationship("Tenant", back_populates="customers")
    orders = relationship("Order", back_populates="customer")

    def __repr__(self):
        return f"<Customer(id={self.id}, tenant={self.tenant_id}, external_id={self.external_id})>"

