"""
Pydantic schemas for API request/response validation.

Field names are camelCase because the dashboard consumes them as-is.
"""

from typing import Optional

from pydantic import BaseModel


# Tenant schemas
class TenantCreate(BaseModel):
    """
    Tenant creation payload.

    Fields are optional at the schema level so that missing values produce
    the route's own 400 message instead of a generic validation error.
    """
    name: Optional[str] = None
    shopUrl: Optional[str] = None
    accessToken: Optional[str] = None


class TenantResponse(BaseModel):
    """Tenant as returned by the API (access token included, no auth layer)."""
    id: int
    name: str
    shopUrl: str
    accessToken: str
    createdAt: Optional[str] = None


# Ingestion schemas
class SyncResponse(BaseModel):
    """Manual sync acknowledgement."""
    ok: bool = True


# Metrics schemas
class SummaryResponse(BaseModel):
    """Dashboard summary."""
    totalCustomers: int
    totalProducts: int
    totalOrders: int
    totalRevenue: float


class OrdersByDatePoint(BaseModel):
    """One day of the orders time series."""
    date: str
    orders: int
    revenue: float


class TopCustomer(BaseModel):
    """Customer ranked by revenue."""
    id: int
    name: str
    email: Optional[str] = None
    orders: int
    revenue: float


class TopProduct(BaseModel):
    """Product ranked by price."""
    id: int
    title: str
    price: float
    imageUrl: Optional[str] = None


class SyncHistoryItem(BaseModel):
    """Sync history item."""
    id: int
    status: str
    trigger: str
    productsSynced: Optional[int] = None
    customersSynced: Optional[int] = None
    ordersSynced: Optional[int] = None
    recordsFailed: Optional[int] = None
    durationMs: Optional[int] = None
    errorMessage: Optional[str] = None
    startedAt: Optional[str] = None
    completedAt: Optional[str] = None
