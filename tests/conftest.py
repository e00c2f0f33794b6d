"""
Test configuration and fixtures for Shop Insights
"""
import os

# Keep test runs off the filesystem and free of background timers
os.environ["LOG_TO_FILE"] = "false"
os.environ["AUTO_SYNC_ENABLED"] = "false"

from typing import Dict, Generator, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from shop_insights.api.main import create_app
from shop_insights.database.connection import Database
from shop_insights.database.models import Tenant
from shop_insights.marketplaces.base import (
    CommerceClient,
    ShopCredentials,
    Snapshot,
    Fetched,
    FetchFailed,
    FetchOutcome,
)
from shop_insights.utils.config import Settings


# =============================================================================
# Database Setup
# =============================================================================

@pytest.fixture(scope="function")
def database() -> Generator[Database, None, None]:
    """Fresh in-memory database for each test"""
    db = Database("sqlite://")
    db.create_all()
    yield db
    db.drop_all()
    db.dispose()


@pytest.fixture(scope="function")
def db_session(database) -> Generator[Session, None, None]:
    """Create a new database session for each test"""
    session = database.new_session()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def make_tenant(db_session):
    """Factory creating committed tenants"""
    def _make(name: str = "Test Store", shop_url: Optional[str] = None,
              access_token: str = "shpat_test") -> Tenant:
        tenant = Tenant(
            name=name,
            shop_url=shop_url or f"{name.lower().replace(' ', '-')}.myshopify.com",
            access_token=access_token,
        )
        db_session.add(tenant)
        db_session.commit()
        db_session.refresh(tenant)
        return tenant
    return _make


# =============================================================================
# Platform payloads
# =============================================================================

class Payloads:
    """Builders for platform-shaped records"""

    @staticmethod
    def product(external_id, title="Product", price="10.00", image_src=None) -> Dict:
        record = {"id": external_id, "title": title, "variants": [{"price": price}]}
        if image_src:
            record["image"] = {"src": image_src}
        return record

    @staticmethod
    def customer(external_id, email="buyer@example.com", first_name="Jane",
                 last_name="Doe", created_at="2025-01-05T10:00:00Z") -> Dict:
        return {
            "id": external_id,
            "email": email,
            "first_name": first_name,
            "last_name": last_name,
            "created_at": created_at,
        }

    @staticmethod
    def order(external_id, total_price="100.00", created_at="2025-01-10T12:00:00Z",
              customer_id=None) -> Dict:
        record = {"id": external_id, "total_price": total_price, "created_at": created_at}
        if customer_id is not None:
            record["customer"] = {"id": customer_id}
        return record

    @staticmethod
    def fetched(products: List = None, customers: List = None, orders: List = None) -> Fetched:
        return Fetched(snapshot=Snapshot(
            products=products or [],
            customers=customers or [],
            orders=orders or [],
        ))


@pytest.fixture
def payloads():
    return Payloads


# =============================================================================
# Commerce client doubles
# =============================================================================

class FakeCommerceClient(CommerceClient):
    """Client returning a canned outcome"""

    def __init__(self, credentials: ShopCredentials, outcome: FetchOutcome):
        super().__init__(credentials)
        self.outcome = outcome

    @property
    def platform_name(self) -> str:
        return "fake"

    async def fetch_snapshot(self) -> FetchOutcome:
        return self.outcome


class FakeClientFactory:
    """Client factory keyed by shop URL; unknown shops fail to fetch"""

    def __init__(self):
        self.outcomes: Dict[str, FetchOutcome] = {}
        self.calls: List[ShopCredentials] = []

    def __call__(self, credentials: ShopCredentials) -> CommerceClient:
        self.calls.append(credentials)
        outcome = self.outcomes.get(
            credentials.shop_url, FetchFailed(reason="ConnectError: no canned response")
        )
        return FakeCommerceClient(credentials, outcome)


@pytest.fixture
def fake_client_factory() -> FakeClientFactory:
    return FakeClientFactory()


# =============================================================================
# API client
# =============================================================================

@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        auto_sync_enabled=False,
        log_to_file=False,
    )


@pytest.fixture
def client(test_settings, database, fake_client_factory) -> Generator[TestClient, None, None]:
    """Test client bound to the per-test database and fake commerce clients"""
    app = create_app(settings=test_settings, database=database,
                     client_factory=fake_client_factory)
    with TestClient(app) as test_client:
        yield test_client
