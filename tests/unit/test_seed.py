"""
Unit tests for demo data seeding
"""
from unittest.mock import MagicMock

from sqlalchemy import func

from shop_insights.database.models import Customer, Order, Product, Tenant
from shop_insights.database.seed import (
    DEMO_TENANTS,
    _sync_tenant_id_sequence,
    build_demo_snapshot,
    seed_demo_data,
)


class TestDemoSnapshot:
    """Test demo payload generation"""

    def test_snapshot_shape(self):
        snapshot = build_demo_snapshot(DEMO_TENANTS[0])

        assert snapshot.counts() == {"products": 4, "customers": 8, "orders": 10}
        assert snapshot.products[0]["variants"][0]["price"] == "1200.00"
        assert snapshot.orders[0]["customer"] == {"id": "T1_C1"}
        assert snapshot.orders[8]["customer"] == {"id": "T1_C1"}
        assert snapshot.orders[0]["created_at"] == "2025-02-12T00:00:00Z"


class TestSeedDemoData:
    """Test seeding through the ingestion pipeline"""

    def test_seed_creates_four_tenants(self, db_session):
        reports = seed_demo_data(db_session)

        assert [r.tenant_id for r in reports] == [1, 2, 3, 4]
        assert all(r.total_failed == 0 for r in reports)
        assert db_session.query(Tenant).count() == 4
        assert db_session.get(Tenant, 2).access_token == "dummy-token-2"

        per_tenant = dict(
            db_session.query(Order.tenant_id, func.count(Order.id)).group_by(Order.tenant_id).all()
        )
        assert per_tenant == {1: 10, 2: 10, 3: 10, 4: 10}
        assert db_session.query(Order).filter(Order.customer_id.is_(None)).count() == 0

    def test_seed_is_idempotent(self, db_session):
        seed_demo_data(db_session)
        reports = seed_demo_data(db_session)

        assert all(r.products.created == 0 for r in reports)
        assert db_session.query(Tenant).count() == 4
        assert db_session.query(Product).count() == 16
        assert db_session.query(Customer).count() == 32
        assert db_session.query(Order).count() == 40

    def test_existing_tenant_with_demo_id_is_left_alone(self, db_session, make_tenant):
        real = make_tenant("Real Store", shop_url="real-store.myshopify.com", access_token="shpat_real")
        assert real.id == 1

        reports = seed_demo_data(db_session)

        assert [r.tenant_id for r in reports] == [2, 3, 4]
        db_session.expire_all()
        kept = db_session.get(Tenant, 1)
        assert (kept.name, kept.shop_url, kept.access_token) == (
            "Real Store", "real-store.myshopify.com", "shpat_real"
        )
        assert db_session.query(Order).filter(Order.tenant_id == 1).count() == 0

    def test_postgres_sequence_is_advanced(self):
        db = MagicMock()
        db.get_bind.return_value.dialect.name = "postgresql"

        _sync_tenant_id_sequence(db)

        statement = str(db.execute.call_args[0][0])
        assert "setval(pg_get_serial_sequence('tenants', 'id')" in statement
        db.commit.assert_called_once()

    def test_sequence_untouched_on_sqlite(self, db_session):
        _sync_tenant_id_sequence(db_session)

        assert db_session.query(Tenant).count() == 0
