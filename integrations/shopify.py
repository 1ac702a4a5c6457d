"""
Shopify Admin GraphQL integration.

Fetches orders for a time window and inventory levels per SKU. Requests
go through a single `query()` helper so every transport, HTTP and
GraphQL failure surfaces as DataSourceUnavailableError.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional

import requests
import structlog
from dateutil.parser import isoparse
from pydantic import ValidationError as PydanticValidationError

from config import settings
from exceptions import DataSourceUnavailableError, MalformedOrderRecordError
from integrations.order_source import InventorySource, OrderSource
from models.inventory import InventorySnapshot
from models.orders import UNKNOWN_SKU, LineItem, OrderPage, OrderQuery, OrderRecord

logger = structlog.get_logger(__name__)


ORDERS_BY_DATE_RANGE_QUERY = """
query GetOrdersByDateRange($first: Int!, $after: String, $query: String!) {
  orders(first: $first, after: $after, sortKey: CREATED_AT, reverse: true, query: $query) {
    edges {
      node {
        id
        createdAt
        totalPriceSet { shopMoney { amount } }
        lineItems(first: 100) {
          edges {
            node {
              quantity
              variant {
                id
                sku
                title
                product { id title }
              }
              originalTotalSet { shopMoney { amount } }
            }
          }
        }
      }
    }
    pageInfo { hasNextPage endCursor }
  }
}
"""

INVENTORY_LEVELS_QUERY = """
query GetInventoryLevels($first: Int!, $after: String) {
  inventoryItems(first: $first, after: $after) {
    edges {
      node {
        id
        sku
        tracked
        inventoryLevels(first: 10) {
          edges {
            node {
              id
              quantities(names: ["available"]) { name quantity }
              location { id name }
            }
          }
        }
      }
    }
    pageInfo { hasNextPage endCursor }
  }
}
"""


def build_search_query(query: OrderQuery) -> str:
    """
    Shopify order search string for a window (both ends inclusive).

    Example:
        created_at:>='2025-10-01T00:00:00+10:00' AND created_at:<='2025-10-31T23:59:59+10:00'
    """
    start = query.window_start.isoformat(timespec="seconds")
    end = query.window_end.isoformat(timespec="seconds")
    search = f"created_at:>='{start}' AND created_at:<='{end}'"
    if query.sku_filter:
        search += f" AND sku:'{query.sku_filter}'"
    return search


def _money(value: Optional[Dict[str, Any]]) -> Decimal:
    """Amount out of a {shopMoney: {amount}} set. Raises KeyError/TypeError if absent."""
    return Decimal(str(value["shopMoney"]["amount"]))


def parse_line_item(node: Dict[str, Any]) -> LineItem:
    variant = node.get("variant") or {}
    product = variant.get("product") or {}
    return LineItem(
        sku=variant.get("sku") or UNKNOWN_SKU,
        quantity=int(node["quantity"]),
        variant_title=variant.get("title") or "",
        product_title=product.get("title") or "",
        amount=_money(node["originalTotalSet"]),
    )


def parse_order_node(node: Dict[str, Any]) -> OrderRecord:
    """
    Convert a GraphQL order node to an OrderRecord.

    A line item without a variant (deleted product, custom item) is kept
    under the "unknown" SKU.

    Raises:
        MalformedOrderRecordError: If required fields are missing or invalid
    """
    record_id = node.get("id") if isinstance(node, dict) else None
    try:
        line_items = tuple(
            parse_line_item(edge["node"])
            for edge in node["lineItems"]["edges"]
        )
        return OrderRecord(
            id=node["id"],
            created_at=isoparse(node["createdAt"]),
            total_amount=_money(node["totalPriceSet"]),
            line_items=line_items,
        )
    except (KeyError, TypeError, ValueError, ArithmeticError, PydanticValidationError) as e:
        raise MalformedOrderRecordError(record_id, f"{type(e).__name__}: {e}")


class ShopifyClient(OrderSource, InventorySource):
    """
    Shopify Admin API client.

    Usage:
        client = ShopifyClient()
        page = client.fetch_page(query)
    """

    name = "shopify"

    def __init__(
        self,
        endpoint: Optional[str] = None,
        access_token: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.endpoint = endpoint or settings.shopify_endpoint
        self.access_token = access_token or settings.shopify_access_token
        self.timeout = timeout or settings.shopify_timeout_seconds

    def query(self, document: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        """
        Run a GraphQL document and return its `data`.

        Raises:
            DataSourceUnavailableError: On missing credentials, transport
                errors, non-2xx responses or GraphQL errors
        """
        if not self.access_token:
            logger.warning("shopify_not_configured")
            raise DataSourceUnavailableError(self.name, "Shopify access token is not configured")

        headers = {
            "Content-Type": "application/json",
            "X-Shopify-Access-Token": self.access_token,
        }

        try:
            response = requests.post(
                self.endpoint,
                json={"query": document, "variables": variables},
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.RequestException as e:
            logger.error("shopify_request_failed", error=str(e))
            raise DataSourceUnavailableError(
                self.name, f"Shopify request failed: {e}"
            )
        except ValueError as e:
            logger.error("shopify_invalid_json", error=str(e))
            raise DataSourceUnavailableError(
                self.name, "Shopify returned a non-JSON response"
            )

        errors = payload.get("errors")
        if errors:
            messages = [err.get("message", str(err)) for err in errors]
            logger.error("shopify_graphql_errors", errors=messages)
            raise DataSourceUnavailableError(
                self.name,
                "Shopify GraphQL query failed",
                details={"errors": messages},
            )

        return payload.get("data") or {}

    def fetch_page(self, query: OrderQuery) -> OrderPage:
        """
        Fetch one page of orders for the query window.

        Records that cannot be parsed are logged and skipped; the rest of
        the page is returned.
        """
        variables = {
            "first": query.page_size,
            "after": query.page_token,
            "query": build_search_query(query),
        }
        data = self.query(ORDERS_BY_DATE_RANGE_QUERY, variables)

        connection = data.get("orders") or {}
        records: List[OrderRecord] = []
        for edge in connection.get("edges") or []:
            try:
                records.append(parse_order_node(edge.get("node") or {}))
            except MalformedOrderRecordError as e:
                logger.warning(
                    "order_record_quarantined",
                    record_id=e.details.get("id"),
                    reason=e.details.get("reason"),
                )

        page_info = connection.get("pageInfo") or {}
        return OrderPage(
            records=records,
            has_more=bool(page_info.get("hasNextPage")),
            next_page_token=page_info.get("endCursor"),
        )

    def fetch_inventory_levels(self) -> List[InventorySnapshot]:
        """
        Available units per SKU, summed across locations.

        Items without a SKU are skipped.
        """
        on_hand: Dict[str, int] = {}
        tracked: Dict[str, bool] = {}
        cursor: Optional[str] = None
        pages = 0

        while True:
            data = self.query(
                INVENTORY_LEVELS_QUERY,
                {"first": settings.page_size, "after": cursor},
            )
            connection = data.get("inventoryItems") or {}
            pages += 1

            for edge in connection.get("edges") or []:
                node = edge.get("node") or {}
                sku = node.get("sku")
                if not sku:
                    continue
                available = 0
                for level in (node.get("inventoryLevels") or {}).get("edges") or []:
                    for quantity in level["node"].get("quantities") or []:
                        if quantity.get("name") == "available":
                            available += int(quantity.get("quantity") or 0)
                on_hand[sku] = on_hand.get(sku, 0) + available
                tracked[sku] = bool(node.get("tracked", True))

            page_info = connection.get("pageInfo") or {}
            cursor = page_info.get("endCursor")
            if not page_info.get("hasNextPage") or not cursor or pages >= settings.max_pages:
                break

        logger.info("inventory_levels_fetched", skus=len(on_hand), pages=pages)
        return [
            InventorySnapshot(sku=sku, on_hand=units, tracked=tracked[sku])
            for sku, units in on_hand.items()
        ]
