"""
Order model for store orders synced from a store.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class Order(Base):
    """
    Order placed in a tenant's store.

    customer_id is NULL when the platform payload carries no customer, and
    is reset to NULL on update when a later payload drops it.
    """

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)

    tenant_id = Column(
        Integer,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    customer_id = Column(
        Integer,
        ForeignKey("customers.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    external_id = Column(String(64), nullable=False, unique=True)

    total_price = Column(Float, nullable=False, default=0.0)
    order_date = Column(DateTime, nullable=True)

    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    tenant = relationship("Tenant", back_populates="orders")
    customer = relationship("Customer", back_populates="orders")

    __table_args__ = (
        Index("idx_orders_tenant_order_date", "tenant_id", "order_date"),
    )

    def __repr__(self):
        return (
            f"<Order(id={self.id}, tenant={self.tenant_id}, "
            f"external_id={self.external_id}, total={self.total_price})>"
        )
