"""
Product model for catalog entries synced from a store.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Index, Text
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class Product(Base):
    """
    Product from the store catalog.

    external_id is the platform's product id and is unique across all
    tenants; price always holds the most recently fetched value.
    """

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)

    tenant_id = Column(
        Integer,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    external_id = Column(String(64), nullable=False, unique=True)

    title = Column(String(500), nullable=False, default="")
    price = Column(Float, nullable=False, default=0.0)
    image_url = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    tenant = relationship("Tenant", back_populates="products")

    __table_args__ = (
        Index("idx_products_tenant_price", "tenant_id", "price"),
    )

    def __repr__(self):
        return (
            f"<Product(id={self.id}, tenant={self.tenant_id}, "
            f"external_id={self.external_id}, price={self.price})>"
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "title": self.title,
            "price": self.price,
            "imageUrl": self.image_url,
        }
