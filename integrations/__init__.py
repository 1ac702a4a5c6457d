"""
External data sources: Shopify and an in-memory source.
"""

from integrations.order_source import (
    OrderSource,
    InventorySource,
    InMemoryOrderSource,
    fetch_all_orders,
)
from integrations.shopify import ShopifyClient

__all__ = [
    "OrderSource",
    "InventorySource",
    "InMemoryOrderSource",
    "fetch_all_orders",
    "ShopifyClient",
]
