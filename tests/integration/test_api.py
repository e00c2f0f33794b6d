"""
Integration tests for the HTTP API
"""
from datetime import datetime
from unittest.mock import patch

import httpx
import pytest
from fastapi.testclient import TestClient

from shop_insights.api.main import create_app
from shop_insights.database.models import Product
from shop_insights.marketplaces.shopify_client import ShopifyClient


class TestHealthEndpoints:
    """Test liveness and readiness"""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"ok": True}

    def test_ready(self, client):
        response = client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["database"]["status"] == "healthy"

    def test_root(self, client):
        assert client.get("/").json()["status"] == "operational"

    def test_unknown_route_uses_error_body(self, client):
        response = client.get("/api/nope")

        assert response.status_code == 404
        assert "error" in response.json()

    def test_cors_allows_any_origin_outside_production(self, client):
        response = client.get("/health", headers={"Origin": "http://dashboard.example.com"})

        assert response.headers["access-control-allow-origin"] == "*"


class TestTenantEndpoints:
    """Test tenant management"""

    def test_create_tenant(self, client):
        response = client.post("/api/tenants", json={
            "name": "  Shoe Shop ",
            "shopUrl": "shoe-shop.myshopify.com",
            "accessToken": "shpat_123",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Shoe Shop"
        assert data["shopUrl"] == "shoe-shop.myshopify.com"
        assert data["accessToken"] == "shpat_123"
        assert isinstance(data["id"], int)

    @pytest.mark.parametrize("payload", [
        {"name": "Shop", "shopUrl": "shop.myshopify.com"},
        {"name": "   ", "shopUrl": "shop.myshopify.com", "accessToken": "t"},
        {},
    ])
    def test_create_tenant_requires_all_fields(self, client, payload):
        response = client.post("/api/tenants", json=payload)

        assert response.status_code == 400
        assert response.json() == {"error": "name, shopUrl and accessToken are required"}

    def test_create_tenant_rejects_malformed_body(self, client):
        response = client.post("/api/tenants", content=b"{not json",
                               headers={"Content-Type": "application/json"})

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid request")

    def test_list_tenants_ordered_by_id(self, client):
        for name in ("B Store", "A Store"):
            client.post("/api/tenants", json={
                "name": name, "shopUrl": f"{name[0].lower()}.myshopify.com", "accessToken": "t",
            })

        tenants = client.get("/api/tenants").json()

        assert [t["name"] for t in tenants] == ["B Store", "A Store"]
        assert tenants[0]["id"] < tenants[1]["id"]


class TestIngestAndMetrics:
    """Test the sync trigger and the dashboard metrics"""

    @pytest.fixture
    def tenant(self, make_tenant, fake_client_factory, payloads):
        tenant = make_tenant("Metrics Store")
        fake_client_factory.outcomes[tenant.shop_url] = payloads.fetched(
            products=[
                payloads.product("P1", "Mug", "12.00", image_src="https://cdn.example.com/mug.png"),
                payloads.product("P2", "Poster", "30.00"),
            ],
            customers=[
                payloads.customer("C1", email="alice@example.com", first_name="Alice", last_name="Smith"),
                payloads.customer("C2", email="bob@example.com", first_name="", last_name=""),
            ],
            orders=[
                payloads.order("O1", "100.00", "2025-01-10T09:00:00Z", customer_id="C1"),
                payloads.order("O2", "50.00", "2025-01-10T18:00:00Z", customer_id="C1"),
                payloads.order("O3", "30.00", "2025-01-08T12:00:00Z", customer_id="C2"),
            ],
        )
        return tenant

    def test_sync_then_metrics(self, client, tenant):
        response = client.post(f"/api/ingest/{tenant.id}/sync")
        assert response.status_code == 200
        assert response.json() == {"ok": True}

        summary = client.get(f"/api/metrics/{tenant.id}/summary").json()
        assert summary == {
            "totalCustomers": 2,
            "totalProducts": 2,
            "totalOrders": 3,
            "totalRevenue": 180.0,
        }

        by_date = client.get(f"/api/metrics/{tenant.id}/orders-by-date").json()
        assert by_date == [
            {"date": "2025-01-08", "orders": 1, "revenue": 30.0},
            {"date": "2025-01-10", "orders": 2, "revenue": 150.0},
        ]

        customers = client.get(f"/api/metrics/{tenant.id}/top-customers").json()
        assert customers[0]["name"] == "Alice Smith"
        assert customers[0]["orders"] == 2
        assert customers[0]["revenue"] == 150.0
        assert customers[1]["name"] == "bob@example.com"

        products = client.get(f"/api/metrics/{tenant.id}/top-products").json()
        assert [p["title"] for p in products] == ["Poster", "Mug"]
        assert products[1]["imageUrl"] == "https://cdn.example.com/mug.png"

    def test_repeated_sync_is_idempotent(self, client, tenant):
        client.post(f"/api/ingest/{tenant.id}/sync")
        client.post(f"/api/ingest/{tenant.id}/sync")

        summary = client.get(f"/api/metrics/{tenant.id}/summary").json()
        assert summary["totalOrders"] == 3
        assert summary["totalRevenue"] == 180.0

        history = client.get(f"/api/metrics/{tenant.id}/sync-history").json()
        assert len(history) == 2
        assert all(h["status"] == "success" and h["trigger"] == "manual" for h in history)
        assert history[0]["ordersSynced"] == 3

    def test_sync_unknown_tenant_is_ok(self, client):
        response = client.post("/api/ingest/4242/sync")

        assert response.status_code == 200
        assert response.json() == {"ok": True}

    def test_sync_rejects_non_numeric_tenant(self, client):
        response = client.post("/api/ingest/abc/sync")

        assert response.status_code == 400
        assert "error" in response.json()

    def test_metrics_for_empty_tenant(self, client, make_tenant):
        tenant = make_tenant("Empty Store")

        assert client.get(f"/api/metrics/{tenant.id}/summary").json()["totalRevenue"] == 0.0
        assert client.get(f"/api/metrics/{tenant.id}/orders-by-date").json() == []
        assert client.get(f"/api/metrics/{tenant.id}/top-customers").json() == []
        assert client.get(f"/api/metrics/{tenant.id}/top-products").json() == []

    def test_orders_by_date_rejects_bad_window(self, client, tenant):
        response = client.get(f"/api/metrics/{tenant.id}/orders-by-date", params={"days": 0})

        assert response.status_code == 400

    def test_metrics_failure_is_reported(self, client, tenant):
        with patch("shop_insights.api.routes.metrics.AnalyticsService") as service_cls:
            service_cls.return_value.get_summary.side_effect = RuntimeError("disk I/O error")
            response = client.get(f"/api/metrics/{tenant.id}/summary")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to compute summary"}

    def test_sync_failure_is_reported(self, client, tenant):
        with patch("shop_insights.services.sync_service.SyncService.sync_tenant",
                   side_effect=RuntimeError("database is locked")):
            response = client.post(f"/api/ingest/{tenant.id}/sync")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to ingest data"}


class TestSyncWithUnreachableShop:
    """Test a sync whose remote calls fail at the network level"""

    def test_network_error_leaves_rows_untouched(self, test_settings, database, db_session, make_tenant):
        tenant = make_tenant("Offline Store")
        db_session.add(Product(tenant_id=tenant.id, external_id="P1", title="Kept",
                               price=5.0, created_at=datetime(2025, 1, 1)))
        db_session.commit()

        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        app = create_app(
            settings=test_settings,
            database=database,
            client_factory=lambda creds: ShopifyClient(creds, transport=httpx.MockTransport(refuse)),
        )
        with TestClient(app) as api:
            response = api.post(f"/api/ingest/{tenant.id}/sync")
            history = api.get(f"/api/metrics/{tenant.id}/sync-history").json()

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        assert history[0]["status"] == "failed"
        assert "ConnectError" in history[0]["errorMessage"]

        db_session.expire_all()
        product = db_session.query(Product).one()
        assert (product.title, product.price) == ("Kept", 5.0)
