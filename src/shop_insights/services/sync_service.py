"""
Sync service - fetch one tenant's snapshot and ingest it.

The same sequence serves the manual HTTP trigger, the CLI and the periodic
scheduler. Each sync opens its own session on the injected Database handle.
"""

import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from shop_insights.database.connection import Database
from shop_insights.database.models import Tenant, SyncLog, SyncStatus, SyncTrigger
from shop_insights.database.models.base import utcnow
from shop_insights.marketplaces.base import (
    CommerceClient,
    ShopCredentials,
    Fetched,
    FetchFailed,
    FetchOutcome,
)
from shop_insights.marketplaces.factory import create_commerce_client
from shop_insights.services.ingestion import IngestionPipeline, IngestionReport
from shop_insights.utils.exceptions import TenantNotFoundError
from shop_insights.utils.logger import get_logger

logger = get_logger(__name__)

ClientFactory = Callable[[ShopCredentials], CommerceClient]


@dataclass
class SyncResult:
    """Outcome of one tenant sync."""
    tenant_id: int
    outcome: FetchOutcome
    report: IngestionReport
    duration_ms: int
    sync_log_id: Optional[int] = None

    @property
    def fetched(self) -> bool:
        return isinstance(self.outcome, Fetched)


class SyncService:
    """
    Runs Client -> Pipeline for tenants.

    Usage:
        service = SyncService(database)
        result = await service.sync_tenant(tenant_id)
    """

    def __init__(self, database: Database, client_factory: Optional[ClientFactory] = None):
        """
        Initialize sync service.

        Args:
            database: Application database handle
            client_factory: Builds a client from credentials (defaults to Shopify)
        """
        self.database = database
        self.client_factory = client_factory or create_commerce_client

    def list_tenant_ids(self) -> List[int]:
        """All tenant ids, ascending."""
        db = self.database.new_session()
        try:
            return [row[0] for row in db.query(Tenant.id).order_by(Tenant.id).all()]
        finally:
            db.close()

    async def sync_tenant(self, tenant_id: int,
                          trigger: SyncTrigger = SyncTrigger.MANUAL) -> SyncResult:
        """
        Fetch and ingest one tenant's data.

        A missing tenant or a failed fetch is not an error: the result carries
        a FetchFailed outcome and nothing is written.

        Args:
            tenant_id: Tenant to sync
            trigger: What started the sync (recorded in the sync log)

        Returns:
            SyncResult with the fetch outcome and ingestion report
        """
        start = time.monotonic()
        started_at = utcnow()
        db = self.database.new_session()

        try:
            tenant = db.get(Tenant, tenant_id)
            if tenant is None:
                logger.warning(f"Sync requested for unknown tenant {tenant_id}")
                outcome: FetchOutcome = FetchFailed(reason=TenantNotFoundError(tenant_id).message)
                report = IngestionPipeline(db).ingest(tenant_id, outcome)
                return SyncResult(
                    tenant_id=tenant_id,
                    outcome=outcome,
                    report=report,
                    duration_ms=int((time.monotonic() - start) * 1000),
                )

            logger.info(f"Starting {trigger.value} sync for tenant {tenant.id} ({tenant.name})")

            client = self.client_factory(ShopCredentials.from_tenant(tenant))
            outcome = await client.fetch_snapshot()

            report = IngestionPipeline(db).ingest(tenant_id, outcome)
            duration_ms = int((time.monotonic() - start) * 1000)

            sync_log = self._record_sync(db, tenant_id, trigger, outcome, report,
                                         started_at, duration_ms)

            logger.info(
                f"Sync completed for tenant {tenant_id}: "
                f"{report.total_succeeded} records written, {report.total_failed} failed "
                f"in {duration_ms}ms"
            )

            return SyncResult(
                tenant_id=tenant_id,
                outcome=outcome,
                report=report,
                duration_ms=duration_ms,
                sync_log_id=sync_log.id if sync_log else None,
            )
        finally:
            db.close()

    def _record_sync(self, db, tenant_id: int, trigger: SyncTrigger, outcome: FetchOutcome,
                     report: IngestionReport, started_at, duration_ms: int) -> Optional[SyncLog]:
        """Persist a SyncLog row; a failure here never fails the sync."""
        sync_log = SyncLog(
            tenant_id=tenant_id,
            status=(SyncStatus.SUCCESS if isinstance(outcome, Fetched) else SyncStatus.FAILED).value,
            trigger=trigger.value,
            products_synced=report.products.succeeded,
            customers_synced=report.customers.succeeded,
            orders_synced=report.orders.succeeded,
            records_failed=report.total_failed,
            error_message=outcome.reason if isinstance(outcome, FetchFailed) else None,
            started_at=started_at,
            completed_at=utcnow(),
            duration_ms=duration_ms,
        )
        try:
            db.add(sync_log)
            db.commit()
            return sync_log
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to record sync log for tenant {tenant_id}: {e}")
            return None
