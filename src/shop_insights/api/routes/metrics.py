"""
Dashboard metrics routes.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from shop_insights.api.schemas import (
    SummaryResponse,
    OrdersByDatePoint,
    TopCustomer,
    TopProduct,
    SyncHistoryItem,
)
from shop_insights.database.connection import get_db
from shop_insights.services.analytics_service import AnalyticsService
from shop_insights.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


def _failure(path: str, message: str, error: Exception) -> HTTPException:
    logger.error(f"GET /api/metrics/{{tenantId}}/{path} error: {error}", exc_info=True)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)


@router.get("/{tenant_id}/summary", response_model=SummaryResponse)
async def get_summary(tenant_id: int, db: Session = Depends(get_db)):
    """Customer, product and order counts plus total revenue."""
    try:
        return AnalyticsService(db, tenant_id).get_summary()
    except Exception as e:
        raise _failure("summary", "Failed to compute summary", e)


@router.get("/{tenant_id}/orders-by-date", response_model=List[OrdersByDatePoint])
async def get_orders_by_date(
    tenant_id: int,
    days: Optional[int] = Query(None, ge=1, le=3650, description="Days to look back"),
    db: Session = Depends(get_db)
):
    """Daily order count and revenue, ascending by date."""
    try:
        return AnalyticsService(db, tenant_id).get_orders_by_date(days=days)
    except Exception as e:
        raise _failure("orders-by-date", "Failed to compute orders by date", e)


@router.get("/{tenant_id}/top-customers", response_model=List[TopCustomer])
async def get_top_customers(tenant_id: int, db: Session = Depends(get_db)):
    """Top 5 customers by revenue."""
    try:
        return AnalyticsService(db, tenant_id).get_top_customers()
    except Exception as e:
        raise _failure("top-customers", "Failed to compute top customers", e)


@router.get("/{tenant_id}/top-products", response_model=List[TopProduct])
async def get_top_products(tenant_id: int, db: Session = Depends(get_db)):
    """Top 5 products by price."""
    try:
        return AnalyticsService(db, tenant_id).get_top_products()
    except Exception as e:
        raise _failure("top-products", "Failed to compute top products", e)


@router.get("/{tenant_id}/sync-history", response_model=List[SyncHistoryItem])
async def get_sync_history(
    tenant_id: int,
    limit: int = Query(20, ge=1, le=200, description="Maximum results"),
    db: Session = Depends(get_db)
):
    """Recent sync attempts, newest first."""
    try:
        return AnalyticsService(db, tenant_id).get_sync_history(limit=limit)
    except Exception as e:
        raise _failure("sync-history", "Failed to load sync history", e)
