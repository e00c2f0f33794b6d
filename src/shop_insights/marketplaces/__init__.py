"""
Commerce platform client layer for Shop Insights.

Provides the fetch outcome types and the Shopify Admin API client.
"""

from .base import (
    CommerceClient,
    ShopCredentials,
    Snapshot,
    Fetched,
    FetchFailed,
    FetchOutcome,
)
from .shopify_client import ShopifyClient
# factory is imported separately; it depends on the settings module

__all__ = [
    "CommerceClient",
    "ShopCredentials",
    "Snapshot",
    "Fetched",
    "FetchFailed",
    "FetchOutcome",
    "ShopifyClient",
]
