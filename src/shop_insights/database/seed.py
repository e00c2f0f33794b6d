"""
Demo data for local dashboards.

Seeds four demo tenants, each with 8 customers, 4 products and 10 orders
spread over a different month. Records are fed through the ingestion
pipeline in the platform's payload format, so reruns are idempotent.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Dict, List

from sqlalchemy import text
from sqlalchemy.orm import Session

from shop_insights.database.models import Tenant
from shop_insights.marketplaces.base import Fetched, Snapshot
from shop_insights.services.ingestion import IngestionPipeline, IngestionReport
from shop_insights.utils.logger import get_logger

logger = get_logger(__name__)

PRODUCT_TITLES = ["Running Shoes", "Sports T-Shirt", "Water Bottle", "Fitness Tracker"]
CUSTOMERS_PER_TENANT = 8
ORDERS_PER_TENANT = 10


@dataclass
class DemoTenant:
    id: int
    name: str
    shop_url: str
    base_date: date


DEMO_TENANTS = [
    DemoTenant(1, "Demo Store A", "demo-a.myshopify.com", date(2025, 2, 1)),
    DemoTenant(2, "Demo Store B", "demo-b.myshopify.com", date(2025, 3, 1)),
    DemoTenant(3, "Demo Store C", "demo-c.myshopify.com", date(2025, 4, 1)),
    DemoTenant(4, "Demo Store D", "demo-d.myshopify.com", date(2025, 5, 1)),
]


def _timestamp(day: date) -> str:
    return datetime(day.year, day.month, day.day).isoformat() + "Z"


def build_demo_snapshot(demo: DemoTenant) -> Snapshot:
    """Platform-shaped payloads for one demo tenant."""
    tid = demo.id

    customers: List[Dict[str, Any]] = [
        {
            "id": f"T{tid}_C{i}",
            "email": f"customer{i}_t{tid}@example.com",
            "first_name": f"Customer{i}",
            "last_name": f"Tenant{tid}",
            "created_at": _timestamp(demo.base_date + timedelta(days=i)),
        }
        for i in range(1, CUSTOMERS_PER_TENANT + 1)
    ]

    prices = [1000 + tid * 200 + i * 150 for i in range(len(PRODUCT_TITLES))]
    products: List[Dict[str, Any]] = [
        {
            "id": f"T{tid}_P{i + 1}",
            "title": f"{title} (Store {tid})",
            "variants": [{"price": f"{prices[i]:.2f}"}],
        }
        for i, title in enumerate(PRODUCT_TITLES)
    ]

    orders: List[Dict[str, Any]] = []
    for i in range(1, ORDERS_PER_TENANT + 1):
        customer = customers[(i - 1) % len(customers)]
        price = prices[(i - 1) % len(prices)]
        orders.append({
            "id": f"T{tid}_O{i}",
            "total_price": f"{price + 100 * ((i + tid) % 3):.2f}",
            "created_at": _timestamp(demo.base_date + timedelta(days=10 + i)),
            "customer": {"id": customer["id"]},
        })

    return Snapshot(products=products, customers=customers, orders=orders)


def _sync_tenant_id_sequence(db: Session) -> None:
    """Move the PostgreSQL id sequence past the explicitly inserted demo ids."""
    if db.get_bind().dialect.name != "postgresql":
        return
    db.execute(text(
        "SELECT setval(pg_get_serial_sequence('tenants', 'id'), "
        "(SELECT COALESCE(MAX(id), 1) FROM tenants))"
    ))
    db.commit()


def seed_demo_data(db: Session) -> List[IngestionReport]:
    """
    Create the demo tenants (if missing) and ingest their data.

    Demo tenants use fixed ids 1-4. An existing tenant at one of those ids is
    never modified: if it is the demo store (same shop URL) its data is
    refreshed, otherwise it is skipped. On PostgreSQL the tenants id sequence
    is advanced past the inserted ids.

    Returns:
        One ingestion report per demo tenant that was seeded
    """
    reports = []
    pipeline = IngestionPipeline(db)

    for demo in DEMO_TENANTS:
        tenant = db.get(Tenant, demo.id)
        if tenant is None:
            db.add(Tenant(
                id=demo.id,
                name=demo.name,
                shop_url=demo.shop_url,
                access_token=f"dummy-token-{demo.id}",
            ))
            db.commit()
            logger.info(f"Seeded tenant {demo.id}: {demo.name}")
        elif tenant.shop_url != demo.shop_url:
            logger.warning(
                f"Tenant {demo.id} ({tenant.name}) is not a demo store; skipping demo data"
            )
            continue

        report = pipeline.ingest(demo.id, Fetched(snapshot=build_demo_snapshot(demo)))
        reports.append(report)

    _sync_tenant_id_sequence(db)

    logger.info(f"Seed data inserted for {len(reports)} tenants")
    return reports
