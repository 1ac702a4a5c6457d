"""
Test data factories.

Uses factory pattern to generate consistent order and inventory records.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence, Tuple, Union
from zoneinfo import ZoneInfo

from models.inventory import (
    DepositTracking,
    FreightMode,
    InboundOrder,
    InboundStatus,
    InventorySnapshot,
)
from models.orders import LineItem, OrderRecord

BRISBANE = ZoneInfo("Australia/Brisbane")


def brisbane(year: int, month: int, day: int, hour: int = 12, minute: int = 0) -> datetime:
    """Aware datetime in the business timezone."""
    return datetime(year, month, day, hour, minute, tzinfo=BRISBANE)


class LineItemFactory:
    """
    Factory for LineItem records.

    Usage:
        item = LineItemFactory.create(sku="A", quantity=2)
    """

    @classmethod
    def create(
        cls,
        sku: str = "SKU-A",
        quantity: int = 1,
        amount: Union[Decimal, str, int, None] = None,
        product_title: Optional[str] = None,
        variant_title: str = "Default",
    ) -> LineItem:
        """Amount defaults to 10.00 per unit."""
        return LineItem(
            sku=sku,
            quantity=quantity,
            amount=Decimal(str(amount)) if amount is not None else Decimal("10.00") * quantity,
            product_title=product_title or f"Product {sku}",
            variant_title=variant_title,
        )


class OrderFactory:
    """
    Factory for OrderRecord records.

    Usage:
        # One line per (sku, quantity) pair
        order = OrderFactory.create(brisbane(2025, 10, 6), items=[("A", 2)])

        # Several orders on consecutive minutes
        orders = OrderFactory.create_batch(5, brisbane(2025, 10, 6))
    """

    _counter = 0

    @classmethod
    def _next_counter(cls) -> int:
        cls._counter += 1
        return cls._counter

    @classmethod
    def create(
        cls,
        created_at: Optional[datetime] = None,
        items: Sequence[Tuple[str, int]] = (("SKU-A", 1),),
        total_amount: Union[Decimal, str, int, None] = None,
        id: Optional[str] = None,
    ) -> OrderRecord:
        """Total defaults to the sum of line amounts."""
        line_items = tuple(LineItemFactory.create(sku=sku, quantity=qty) for sku, qty in items)
        total = (
            Decimal(str(total_amount))
            if total_amount is not None
            else sum((item.amount for item in line_items), Decimal("0"))
        )
        return OrderRecord(
            id=id or f"gid://shopify/Order/{cls._next_counter()}",
            created_at=created_at or brisbane(2025, 10, 6),
            total_amount=total,
            line_items=line_items,
        )

    @classmethod
    def create_batch(
        cls,
        count: int,
        start: datetime,
        items: Sequence[Tuple[str, int]] = (("SKU-A", 1),),
    ) -> list[OrderRecord]:
        return [
            cls.create(created_at=start.replace(minute=i % 60), items=items)
            for i in range(count)
        ]


class InboundOrderFactory:
    """Factory for persisted InboundOrder records."""

    _counter = 0

    @classmethod
    def create(
        cls,
        sku: str = "SKU-A",
        quantity: int = 100,
        status: InboundStatus = InboundStatus.PENDING,
        freight_mode: FreightMode = FreightMode.SEA,
        expected_arrival: Optional[date] = None,
    ) -> InboundOrder:
        cls._counter += 1
        return InboundOrder(
            id=f"inbound-{cls._counter}",
            sku=sku,
            quantity=quantity,
            freight_mode=freight_mode,
            expected_arrival=expected_arrival or date(2025, 12, 1),
            deposit=DepositTracking(paid=Decimal("0"), remaining=Decimal(quantity) / 10),
            status=status,
            created_at=brisbane(2025, 10, 1),
        )


def snapshot(sku: str, on_hand: int) -> InventorySnapshot:
    return InventorySnapshot(sku=sku, on_hand=on_hand)
