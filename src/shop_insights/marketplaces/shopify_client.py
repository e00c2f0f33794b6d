"""
Shopify Admin API client implementation.

Reads the first page of products, customers and orders for one store. The
three requests run concurrently and each is bounded by the configured
timeout. There is no retry and no pagination: the next sync is the retry.
"""

import asyncio
from typing import Any, Dict, List, Optional

import httpx

from shop_insights.marketplaces.base import (
    CommerceClient,
    ShopCredentials,
    Snapshot,
    Fetched,
    FetchFailed,
    FetchOutcome,
)
from shop_insights.utils.exceptions import ShopAPIError, handle_api_error
from shop_insights.utils.logger import get_logger

logger = get_logger(__name__)

COLLECTIONS = ("products", "customers", "orders")


def normalize_shop_url(shop_url: str) -> str:
    """Strip scheme and trailing slashes from a shop domain."""
    url = shop_url.strip()
    for prefix in ("https://", "http://"):
        if url.lower().startswith(prefix):
            url = url[len(prefix):]
    return url.rstrip("/")


class ShopifyClient(CommerceClient):
    """
    Shopify Admin REST API integration.

    Authenticates with the X-Shopify-Access-Token header.
    """

    def __init__(self, credentials: ShopCredentials,
                 api_version: str = "2024-01",
                 timeout: float = 15.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize Shopify client.

        Args:
            credentials: Shop domain and access token
            api_version: Admin API version segment
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        super().__init__(credentials)
        self.api_version = api_version
        self.timeout = timeout
        self.transport = transport
        self.base_url = (
            f"https://{normalize_shop_url(credentials.shop_url)}/admin/api/{api_version}/"
        )

    @property
    def platform_name(self) -> str:
        return "shopify"

    def _headers(self) -> Dict[str, str]:
        return {
            "X-Shopify-Access-Token": self.credentials.access_token,
            "Content-Type": "application/json",
            "User-Agent": "ShopInsights/1.0",
        }

    async def _get_collection(self, client: httpx.AsyncClient, name: str) -> List[Dict[str, Any]]:
        """
        GET one collection endpoint and return its list.

        Raises:
            ShopAPIError: non-2xx status or a body that is not a JSON object
        """
        endpoint = f"{name}.json"
        logger.debug(f"GET {self.base_url}{endpoint}")

        response = await client.get(endpoint)
        if not response.is_success:
            handle_api_error(response, endpoint)

        try:
            payload = response.json()
        except ValueError:
            raise ShopAPIError("Response body is not valid JSON", endpoint=endpoint,
                               status_code=response.status_code)

        if not isinstance(payload, dict):
            raise ShopAPIError("Response body is not a JSON object", endpoint=endpoint,
                               status_code=response.status_code)

        items = payload.get(name) or []
        if not isinstance(items, list):
            raise ShopAPIError(f"'{name}' is not a list", endpoint=endpoint,
                               status_code=response.status_code)
        return items

    async def fetch_snapshot(self) -> FetchOutcome:
        """
        Fetch products, customers and orders concurrently.

        Returns:
            Fetched(snapshot) when all three requests succeed, otherwise
            FetchFailed with the first error encountered
        """
        shop = self.credentials.shop_url
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._headers(),
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                results = await asyncio.gather(
                    *(self._get_collection(client, name) for name in COLLECTIONS),
                    return_exceptions=True,
                )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Shopify API error for {shop}: {e}")
            return FetchFailed(reason=f"{type(e).__name__}: {e}")

        for name, result in zip(COLLECTIONS, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, BaseException):
                logger.error(f"Shopify API error for {shop} ({name}): {result}")
                return FetchFailed(reason=f"{name}: {type(result).__name__}: {result}")

        snapshot = Snapshot(products=results[0], customers=results[1], orders=results[2])
        logger.info(f"Fetched snapshot from {shop}: {snapshot.counts()}")
        return Fetched(snapshot=snapshot)
