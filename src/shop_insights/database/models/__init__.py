"""
SQLAlchemy database models for multi-tenant Shop Insights.

Models:
- Tenant: Onboarded store with its API credentials
- Product: Catalog entry synced from the store
- Customer: Store customer synced from the store
- Order: Store order, optionally linked to a customer
- SyncLog: Sync operation history
"""

from .base import Base
from .tenant import Tenant
from .product import Product
from .customer import Customer
from .order import Order
from .sync_log import SyncLog, SyncStatus, SyncTrigger

__all__ = [
    "Base",
    "Tenant",
    "Product",
    "Customer",
    "Order",
    "SyncLog",
    "SyncStatus",
    "SyncTrigger",
]
