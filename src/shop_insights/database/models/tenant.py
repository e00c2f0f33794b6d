"""
Tenant model - an onboarded store and the credentials used to read it.
"""

from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class Tenant(Base):
    """
    One store whose data is isolated by the tenant_id foreign key.

    The access token is kept in plaintext; there is no encryption layer.
    """

    __tablename__ = "tenants"

    id = Column(Integer, primary_key=True, autoincrement=True)

    name = Column(String(255), nullable=False)
    shop_url = Column(String(255), nullable=False)
    access_token = Column(Text, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    products = relationship("Product", back_populates="tenant")
    customers = relationship("Customer", back_populates="tenant")
    orders = relationship("Order", back_populates="tenant")
    sync_logs = relationship("SyncLog", back_populates="tenant")

    def __repr__(self):
        return f"<Tenant(id={self.id}, name='{self.name}', shop_url='{self.shop_url}')>"

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "name": self.name,
            "shopUrl": self.shop_url,
            "accessToken": self.access_token,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
