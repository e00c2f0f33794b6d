"""
Analytics Service for the dashboard metrics.

Every query is read-only, scoped by tenant id and computed from the current
rows; nothing is cached or materialized.
"""
from collections import OrderedDict
from datetime import timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import func, desc
from sqlalchemy.orm import Session

from shop_insights.database.models import Customer, Order, Product, SyncLog
from shop_insights.database.models.base import utcnow
from shop_insights.utils.logger import get_logger

logger = get_logger(__name__)

TOP_N = 5


def customer_display_name(first_name: Optional[str], last_name: Optional[str],
                          email: Optional[str]) -> str:
    """Full name, falling back to email, then "Unknown"."""
    full_name = f"{first_name or ''} {last_name or ''}".strip()
    return full_name or email or "Unknown"


class AnalyticsService:
    """Service for calculating tenant metrics"""

    def __init__(self, db_session: Session, tenant_id: int):
        """
        Initialize analytics service

        Args:
            db_session: Database session
            tenant_id: Tenant whose rows are aggregated
        """
        self.db = db_session
        self.tenant_id = tenant_id

    def get_summary(self) -> Dict[str, Any]:
        """
        Row counts plus total order revenue.

        Returns:
            Dictionary with totalCustomers, totalProducts, totalOrders, totalRevenue
        """
        logger.info(f"Generating summary for tenant {self.tenant_id}")

        total_customers = self.db.query(func.count(Customer.id)).filter(
            Customer.tenant_id == self.tenant_id
        ).scalar() or 0

        total_products = self.db.query(func.count(Product.id)).filter(
            Product.tenant_id == self.tenant_id
        ).scalar() or 0

        total_orders = self.db.query(func.count(Order.id)).filter(
            Order.tenant_id == self.tenant_id
        ).scalar() or 0

        total_revenue = self.db.query(func.sum(Order.total_price)).filter(
            Order.tenant_id == self.tenant_id
        ).scalar() or 0

        return {
            "totalCustomers": total_customers,
            "totalProducts": total_products,
            "totalOrders": total_orders,
            "totalRevenue": float(total_revenue),
        }

    def get_orders_by_date(self, days: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        Order count and revenue per UTC calendar day, ascending.

        Args:
            days: Only include orders from the last N days (None = all)

        Returns:
            List of {date, orders, revenue}, one entry per distinct date
        """
        logger.info(f"Fetching orders by date for tenant {self.tenant_id} (days={days})")

        query = self.db.query(Order.order_date, Order.total_price).filter(
            Order.tenant_id == self.tenant_id,
            Order.order_date.isnot(None),
        )
        if days is not None:
            query = query.filter(Order.order_date >= utcnow() - timedelta(days=days))

        # order_date is stored as naive UTC, so .date() is the UTC calendar day
        buckets: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
        for order_date, total_price in query.order_by(Order.order_date.asc()).all():
            key = order_date.date().isoformat()
            point = buckets.setdefault(key, {"date": key, "orders": 0, "revenue": 0.0})
            point["orders"] += 1
            point["revenue"] += float(total_price or 0)

        return [buckets[key] for key in sorted(buckets)]

    def get_top_customers(self, limit: int = TOP_N) -> List[Dict[str, Any]]:
        """
        Customers ranked by revenue across their linked orders.

        Orders without a customer are ignored. Ties keep database order.
        """
        logger.info(f"Fetching top customers for tenant {self.tenant_id}")

        revenue = func.coalesce(func.sum(Order.total_price), 0).label("revenue")
        order_count = func.count(Order.id).label("orders")

        rows = self.db.query(
            Customer.id,
            Customer.first_name,
            Customer.last_name,
            Customer.email,
            order_count,
            revenue,
        ).join(
            Order, Order.customer_id == Customer.id
        ).filter(
            Order.tenant_id == self.tenant_id,
            Customer.tenant_id == self.tenant_id,
        ).group_by(
            Customer.id, Customer.first_name, Customer.last_name, Customer.email
        ).order_by(desc(revenue)).limit(limit).all()

        return [
            {
                "id": row.id,
                "name": customer_display_name(row.first_name, row.last_name, row.email),
                "email": row.email or None,
                "orders": row.orders,
                "revenue": float(row.revenue),
            }
            for row in rows
        ]

    def get_top_products(self, limit: int = TOP_N) -> List[Dict[str, Any]]:
        """
        Products ranked by unit price.

        This is a price ranking; order line items are not stored.
        """
        logger.info(f"Fetching top products for tenant {self.tenant_id}")

        products = self.db.query(Product).filter(
            Product.tenant_id == self.tenant_id
        ).order_by(desc(Product.price)).limit(limit).all()

        return [product.to_dict() for product in products]

    def get_sync_history(self, limit: int = 20) -> List[Dict[str, Any]]:
        """Most recent sync attempts, newest first."""
        logs = self.db.query(SyncLog).filter(
            SyncLog.tenant_id == self.tenant_id
        ).order_by(desc(SyncLog.started_at), desc(SyncLog.id)).limit(limit).all()

        return [log.to_dict() for log in logs]
