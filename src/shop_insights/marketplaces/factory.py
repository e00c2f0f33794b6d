"""
Factory for creating commerce clients from tenant credentials.
"""

from typing import Optional

from shop_insights.marketplaces.base import CommerceClient, ShopCredentials
from shop_insights.marketplaces.shopify_client import ShopifyClient
from shop_insights.utils.config import ShopAPIConfig, get_config
from shop_insights.utils.logger import get_logger

logger = get_logger(__name__)


def create_commerce_client(credentials: ShopCredentials,
                           api_config: Optional[ShopAPIConfig] = None) -> CommerceClient:
    """
    Create the client used to read one store.

    Args:
        credentials: Shop domain and access token taken from the tenant row
        api_config: API version and timeout (defaults to the loaded settings)

    Returns:
        A ShopifyClient
    """
    api_config = api_config or get_config().shop_api
    logger.debug(f"Creating Shopify client for {credentials.shop_url}")
    return ShopifyClient(
        credentials,
        api_version=api_config.api_version,
        timeout=api_config.timeout,
    )
