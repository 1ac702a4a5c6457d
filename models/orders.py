"""
Order record models.

Shapes of the data consumed from an order source (Shopify or a fixture
source) and of the paged query used to request it.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator, model_validator

from models.base import BaseSchema, RecordSchema

UNKNOWN_SKU = "unknown"


class LineItem(RecordSchema):
    """A single line of an order."""

    sku: str = Field(..., min_length=1, description="Opaque variant SKU")
    quantity: int = Field(..., ge=0, description="Units ordered")
    variant_title: str = Field(default="", description="Variant title")
    product_title: str = Field(default="", description="Product title")
    amount: Decimal = Field(
        default=Decimal("0"), ge=0, description="Line total before discounts"
    )


class OrderRecord(RecordSchema):
    """An order as fetched from the source. Immutable."""

    id: str = Field(..., min_length=1)
    created_at: datetime = Field(..., description="Creation instant (timezone-aware)")
    total_amount: Decimal = Field(..., ge=0, description="Order total")
    line_items: tuple[LineItem, ...] = Field(default=())

    @field_validator("created_at")
    @classmethod
    def created_at_must_be_aware(cls, v: datetime) -> datetime:
        if v.tzinfo is None or v.utcoffset() is None:
            raise ValueError("created_at must include a UTC offset")
        return v

    @property
    def units(self) -> int:
        """Total units across all line items."""
        return sum(item.quantity for item in self.line_items)

    def items_for_sku(self, sku: str) -> list[LineItem]:
        """Line items matching an exact SKU."""
        return [item for item in self.line_items if item.sku == sku]


class OrderQuery(BaseSchema):
    """One page request against an order source."""

    window_start: datetime
    window_end: datetime
    sku_filter: Optional[str] = None
    page_size: int = Field(default=250, ge=1, le=250)
    page_token: Optional[str] = None

    @model_validator(mode="after")
    def window_must_be_ordered(self) -> "OrderQuery":
        if self.window_start > self.window_end:
            raise ValueError("window_start must not be after window_end")
        return self


class OrderPage(BaseSchema):
    """One page of results. has_more without a token means the page is final."""

    records: list[OrderRecord] = Field(default_factory=list)
    has_more: bool = False
    next_page_token: Optional[str] = None
