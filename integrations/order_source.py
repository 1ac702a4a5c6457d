"""
Order and inventory source interfaces.

Services receive a source instance instead of reaching for a global
client, so tests (and demos) can pass an InMemoryOrderSource.
"""

from abc import ABC, abstractmethod
from typing import Callable, Iterable, List, Optional

import structlog

from config import settings
from exceptions import DataSourceUnavailableError
from models.inventory import InventorySnapshot
from models.orders import OrderPage, OrderQuery, OrderRecord
from models.periods import PeriodWindow

logger = structlog.get_logger(__name__)


class OrderSource(ABC):
    """Anything that can return pages of order records for a time window."""

    name: str = "orders"

    @abstractmethod
    def fetch_page(self, query: OrderQuery) -> OrderPage:
        """
        Fetch one page of orders.

        Raises:
            DataSourceUnavailableError: If the source cannot be reached
        """


class InventorySource(ABC):
    """Anything that can report on-hand inventory per SKU."""

    @abstractmethod
    def fetch_inventory_levels(self) -> List[InventorySnapshot]:
        """
        Fetch on-hand inventory for every tracked SKU.

        Raises:
            DataSourceUnavailableError: If the source cannot be reached
        """


def fetch_all_orders(
    source: OrderSource,
    window: PeriodWindow,
    sku: Optional[str] = None,
    page_size: Optional[int] = None,
    max_pages: Optional[int] = None,
) -> List[OrderRecord]:
    """
    Fetch every order in a window, following continuation tokens.

    A single page is never assumed to be complete: pages are requested
    until has_more is false. Records are de-duplicated by id and filtered
    to the window again, since sources match the window end inclusively.

    Raises:
        DataSourceUnavailableError: If any page fails
    """
    page_size = page_size or settings.page_size
    max_pages = max_pages or settings.max_pages

    records: List[OrderRecord] = []
    seen_ids = set()
    token: Optional[str] = None
    pages = 0

    while True:
        query = OrderQuery(
            window_start=window.start,
            window_end=window.end,
            sku_filter=sku,
            page_size=page_size,
            page_token=token,
        )
        page = source.fetch_page(query)
        pages += 1

        for record in page.records:
            if record.id in seen_ids or not window.contains(record.created_at):
                continue
            seen_ids.add(record.id)
            records.append(record)

        if not page.has_more:
            break
        if not page.next_page_token:
            logger.warning(
                "page_continuation_missing",
                source=source.name,
                pages=pages,
                records=len(records),
            )
            break
        if pages >= max_pages:
            logger.warning(
                "max_pages_reached",
                source=source.name,
                pages=pages,
                records=len(records),
            )
            break
        token = page.next_page_token

    logger.info(
        "orders_fetched",
        source=source.name,
        window=window.token,
        sku=sku,
        pages=pages,
        records=len(records),
    )
    return records


class InMemoryOrderSource(OrderSource, InventorySource):
    """
    Order source backed by a list.

    Pages through records in creation order using the offset as the page
    token. `fail_when` lets callers simulate an outage for chosen queries.
    """

    name = "memory"

    def __init__(
        self,
        orders: Iterable[OrderRecord] = (),
        inventory: Iterable[InventorySnapshot] = (),
        fail_when: Optional[Callable[[OrderQuery], bool]] = None,
        inventory_fails: bool = False,
    ):
        self.orders = sorted(orders, key=lambda o: o.created_at)
        self.inventory = list(inventory)
        self.fail_when = fail_when
        self.inventory_fails = inventory_fails
        self.queries: List[OrderQuery] = []

    def fetch_page(self, query: OrderQuery) -> OrderPage:
        self.queries.append(query)
        if self.fail_when is not None and self.fail_when(query):
            raise DataSourceUnavailableError(self.name, "Simulated outage")

        matching = [
            order for order in self.orders
            if query.window_start <= order.created_at <= query.window_end
            and (query.sku_filter is None or order.items_for_sku(query.sku_filter))
        ]

        offset = int(query.page_token or 0)
        chunk = matching[offset:offset + query.page_size]
        next_offset = offset + len(chunk)
        has_more = next_offset < len(matching)

        return OrderPage(
            records=chunk,
            has_more=has_more,
            next_page_token=str(next_offset) if has_more else None,
        )

    def fetch_inventory_levels(self) -> List[InventorySnapshot]:
        if self.inventory_fails:
            raise DataSourceUnavailableError(self.name, "Simulated outage")
        return list(self.inventory)
