"""
Abstract base class and result types for commerce platform clients.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Union


@dataclass
class ShopCredentials:
    """Credentials for reading one store."""
    shop_url: str
    access_token: str

    @classmethod
    def from_tenant(cls, tenant) -> "ShopCredentials":
        return cls(shop_url=tenant.shop_url, access_token=tenant.access_token)


@dataclass
class Snapshot:
    """Raw collections fetched for one tenant in one sync."""
    products: List[Dict[str, Any]] = field(default_factory=list)
    customers: List[Dict[str, Any]] = field(default_factory=list)
    orders: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.products or self.customers or self.orders)

    def counts(self) -> Dict[str, int]:
        return {
            "products": len(self.products),
            "customers": len(self.customers),
            "orders": len(self.orders),
        }


@dataclass
class Fetched:
    """The remote fetch succeeded."""
    snapshot: Snapshot


@dataclass
class FetchFailed:
    """The remote fetch failed; there is nothing to ingest."""
    reason: str


FetchOutcome = Union[Fetched, FetchFailed]


class CommerceClient(ABC):
    """
    Abstract commerce platform client interface.

    Implementations never raise from fetch_snapshot: every failure becomes a
    FetchFailed outcome.
    """

    def __init__(self, credentials: ShopCredentials):
        self.credentials = credentials

    @abstractmethod
    async def fetch_snapshot(self) -> FetchOutcome:
        """
        Fetch products, customers and orders.

        Returns:
            Fetched with the snapshot, or FetchFailed with the reason
        """
        pass

    @property
    @abstractmethod
    def platform_name(self) -> str:
        """Get platform name."""
        pass
