"""
Upsert ingestion pipeline.

Writes a fetched snapshot into the database, one record at a time, keyed by
the platform's external id. Entity kinds are processed in a fixed order:
products, customers, orders (orders resolve their customer locally).

Each record is committed on its own. A record that cannot be mapped or
written is rolled back, logged and reported; it never stops the rest of the
batch or the other entity kinds. Nothing wraps the whole sync, so a partially
ingested snapshot stays partially ingested.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Type

from sqlalchemy.orm import Session

from shop_insights.database.models import Customer, Order, Product
from shop_insights.database.models.base import utcnow
from shop_insights.marketplaces.base import Fetched, FetchOutcome
from shop_insights.utils.exceptions import RecordMappingError
from shop_insights.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class RecordFailure:
    """One record that could not be ingested."""
    entity: str
    external_id: Optional[str]
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {"entity": self.entity, "externalId": self.external_id, "reason": self.reason}


@dataclass
class EntityOutcome:
    """Per-entity-kind tally."""
    created: int = 0
    updated: int = 0
    failures: List[RecordFailure] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return self.created + self.updated

    def to_dict(self) -> Dict[str, Any]:
        return {
            "created": self.created,
            "updated": self.updated,
            "failed": len(self.failures),
            "failures": [f.to_dict() for f in self.failures],
        }


@dataclass
class IngestionReport:
    """Structured result of ingesting one fetch outcome."""
    tenant_id: int
    products: EntityOutcome = field(default_factory=EntityOutcome)
    customers: EntityOutcome = field(default_factory=EntityOutcome)
    orders: EntityOutcome = field(default_factory=EntityOutcome)
    skipped: bool = False
    skip_reason: Optional[str] = None

    @property
    def total_succeeded(self) -> int:
        return self.products.succeeded + self.customers.succeeded + self.orders.succeeded

    @property
    def total_failed(self) -> int:
        return len(self.products.failures) + len(self.customers.failures) + len(self.orders.failures)

    @property
    def failures(self) -> List[RecordFailure]:
        return self.products.failures + self.customers.failures + self.orders.failures

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tenantId": self.tenant_id,
            "skipped": self.skipped,
            "skipReason": self.skip_reason,
            "products": self.products.to_dict(),
            "customers": self.customers.to_dict(),
            "orders": self.orders.to_dict(),
        }


# ---------------------------------------------------------------------------
# Field coercion
# ---------------------------------------------------------------------------

def to_price(value: Any) -> float:
    """Coerce a price-like value to float, 0.0 when absent or malformed."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        price = float(value)
    except (TypeError, ValueError):
        return 0.0
    # NaN and infinities are malformed prices too
    if price != price or price in (float("inf"), float("-inf")):
        return 0.0
    return price


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp into a naive UTC datetime.

    Returns None when the value is missing or unparseable. Timestamps without
    an offset are taken as UTC.
    """
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def external_id_of(record: Any, entity: str) -> str:
    """Return the record's platform id as a string."""
    if not isinstance(record, dict):
        raise RecordMappingError(f"{entity} record is not an object", entity=entity)
    raw_id = record.get("id")
    if raw_id is None or raw_id == "":
        raise RecordMappingError(f"{entity} record has no id", entity=entity)
    return str(raw_id)


def map_product(record: Dict[str, Any]) -> Dict[str, Any]:
    variants = record.get("variants") or []
    first_variant = variants[0] if isinstance(variants, list) and variants else {}
    if not isinstance(first_variant, dict):
        first_variant = {}
    image = record.get("image") or {}

    return {
        "title": record.get("title") or "",
        "price": to_price(first_variant.get("price")),
        "image_url": image.get("src") if isinstance(image, dict) else None,
    }


def map_customer(record: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "email": record.get("email") or "",
        "first_name": record.get("first_name") or "",
        "last_name": record.get("last_name") or "",
    }


def map_order(record: Dict[str, Any]) -> Dict[str, Any]:
    customer = record.get("customer")
    customer_external_id = None
    if isinstance(customer, dict) and customer.get("id") not in (None, ""):
        customer_external_id = str(customer["id"])

    return {
        "total_price": to_price(record.get("total_price")),
        "order_date": parse_timestamp(record.get("created_at")),
        "customer_external_id": customer_external_id,
    }


class IngestionPipeline:
    """
    Upserts snapshots for one tenant at a time.

    Usage:
        pipeline = IngestionPipeline(db)
        report = pipeline.ingest(tenant.id, outcome)
    """

    def __init__(self, db_session: Session):
        self.db = db_session

    def ingest(self, tenant_id: int, outcome: FetchOutcome) -> IngestionReport:
        """
        Ingest a fetch outcome for a tenant.

        Args:
            tenant_id: Owning tenant
            outcome: Fetched snapshot or FetchFailed

        Returns:
            IngestionReport with per-entity counts and failures
        """
        report = IngestionReport(tenant_id=tenant_id)

        if not isinstance(outcome, Fetched):
            report.skipped = True
            report.skip_reason = outcome.reason
            logger.warning(f"Nothing to ingest for tenant {tenant_id}: {outcome.reason}")
            return report

        snapshot = outcome.snapshot
        logger.info(f"Ingesting snapshot for tenant {tenant_id}: {snapshot.counts()}")

        self._ingest_batch(tenant_id, "products", snapshot.products, self._upsert_product, report.products)
        self._ingest_batch(tenant_id, "customers", snapshot.customers, self._upsert_customer, report.customers)
        self._ingest_batch(tenant_id, "orders", snapshot.orders, self._upsert_order, report.orders)

        logger.info(
            f"Ingestion finished for tenant {tenant_id}: "
            f"{report.total_succeeded} written, {report.total_failed} failed"
        )
        return report

    def _ingest_batch(self, tenant_id: int, entity: str, records: List[Any],
                      upsert: Callable[[int, str, Dict[str, Any]], bool],
                      outcome: EntityOutcome) -> None:
        for record in records:
            external_id = None
            try:
                external_id = external_id_of(record, entity)
                created = upsert(tenant_id, external_id, record)
                self.db.commit()
            except Exception as e:
                self.db.rollback()
                logger.error(f"Failed to ingest {entity} record {external_id}: {e}")
                outcome.failures.append(
                    RecordFailure(entity=entity, external_id=external_id, reason=str(e))
                )
                continue

            if created:
                outcome.created += 1
            else:
                outcome.updated += 1

    def _find_existing(self, model: Type, entity: str, tenant_id: int, external_id: str):
        """Look up a row by external id, refusing rows owned by another tenant."""
        existing = self.db.query(model).filter(model.external_id == external_id).first()
        if existing is not None and existing.tenant_id != tenant_id:
            raise RecordMappingError(
                f"{entity} {external_id} belongs to tenant {existing.tenant_id}",
                entity=entity,
                external_id=external_id,
            )
        return existing

    def _upsert_product(self, tenant_id: int, external_id: str, record: Dict[str, Any]) -> bool:
        fields = map_product(record)
        existing = self._find_existing(Product, "products", tenant_id, external_id)

        if existing:
            existing.title = fields["title"]
            existing.price = fields["price"]
            existing.image_url = fields["image_url"]
            logger.debug(f"Updated product {external_id}")
            return False

        self.db.add(Product(tenant_id=tenant_id, external_id=external_id, **fields))
        logger.debug(f"Created product {external_id}")
        return True

    def _upsert_customer(self, tenant_id: int, external_id: str, record: Dict[str, Any]) -> bool:
        fields = map_customer(record)
        existing = self._find_existing(Customer, "customers", tenant_id, external_id)

        if existing:
            # created_at is never revised after insert
            existing.email = fields["email"]
            existing.first_name = fields["first_name"]
            existing.last_name = fields["last_name"]
            logger.debug(f"Updated customer {external_id}")
            return False

        created_at = parse_timestamp(record.get("created_at")) or utcnow()
        self.db.add(Customer(tenant_id=tenant_id, external_id=external_id,
                             created_at=created_at, **fields))
        logger.debug(f"Created customer {external_id}")
        return True

    def _resolve_customer_id(self, tenant_id: int, customer_external_id: Optional[str]) -> Optional[int]:
        if customer_external_id is None:
            return None
        customer_id = self.db.query(Customer.id).filter(
            Customer.tenant_id == tenant_id,
            Customer.external_id == customer_external_id,
        ).scalar()
        if customer_id is None:
            logger.warning(
                f"Order references unknown customer {customer_external_id} "
                f"for tenant {tenant_id}; leaving it unlinked"
            )
        return customer_id

    def _upsert_order(self, tenant_id: int, external_id: str, record: Dict[str, Any]) -> bool:
        fields = map_order(record)
        customer_id = self._resolve_customer_id(tenant_id, fields["customer_external_id"])
        existing = self._find_existing(Order, "orders", tenant_id, external_id)

        if existing:
            existing.total_price = fields["total_price"]
            existing.order_date = fields["order_date"]
            existing.customer_id = customer_id
            logger.debug(f"Updated order {external_id}")
            return False

        self.db.add(Order(
            tenant_id=tenant_id,
            external_id=external_id,
            total_price=fields["total_price"],
            order_date=fields["order_date"],
            customer_id=customer_id,
        ))
        logger.debug(f"Created order {external_id}")
        return True
