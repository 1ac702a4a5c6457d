"""
Inbound order store.

Scheduled shipments live in a JSON file (settings.inbound_store_path).
Writes go to a temporary file that then replaces the original, so a
crash mid-write never leaves a truncated store behind.
"""

import os
import tempfile
import threading
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import List, Optional, Union

import structlog
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from config import settings
from exceptions import InboundOrderNotFoundError, InboundStoreError
from models.inventory import (
    DepositTracking,
    InboundOrder,
    InboundOrderCreate,
    InboundStatus,
)
from utils.number_utils import round_decimal

logger = structlog.get_logger(__name__)

DEPOSIT_RATE = Decimal("0.1")

_orders_adapter = TypeAdapter(List[InboundOrder])


class InboundStore:
    """
    CRUD for inbound orders, persisted as a JSON array.

    The file is created on first write; a missing file reads as empty.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path or settings.inbound_store_path)
        self._lock = threading.Lock()

    # ===================
    # READ OPERATIONS
    # ===================

    def list(
        self,
        sku: Optional[str] = None,
        open_only: bool = False,
    ) -> List[InboundOrder]:
        """
        All inbound orders, ordered by expected arrival.

        Args:
            sku: Only orders for this SKU
            open_only: Only pending and in-transit orders
        """
        orders = self._read()
        if sku is not None:
            orders = [o for o in orders if o.sku == sku]
        if open_only:
            orders = [o for o in orders if o.is_open]
        return sorted(orders, key=lambda o: (o.expected_arrival, o.created_at))

    def get(self, order_id: str) -> InboundOrder:
        """
        Raises:
            InboundOrderNotFoundError: If no order has this id
        """
        for order in self._read():
            if order.id == order_id:
                return order
        raise InboundOrderNotFoundError(order_id)

    # ===================
    # WRITE OPERATIONS
    # ===================

    def add(self, data: InboundOrderCreate) -> InboundOrder:
        """
        Schedule a new inbound order.

        The deposit still owed is 10% of the quantity less what was paid.
        """
        order = InboundOrder(
            id=str(uuid.uuid4()),
            sku=data.sku,
            quantity=data.quantity,
            freight_mode=data.freight_mode,
            expected_arrival=data.expected_arrival,
            deposit=DepositTracking(
                paid=data.deposit_paid,
                remaining=round_decimal(data.quantity * DEPOSIT_RATE - data.deposit_paid, 2),
            ),
            status=InboundStatus.PENDING,
            notes=data.notes,
            created_at=datetime.now(timezone.utc),
        )

        with self._lock:
            orders = self._read()
            orders.append(order)
            self._write(orders)

        logger.info(
            "inbound_order_added",
            order_id=order.id,
            sku=order.sku,
            quantity=order.quantity,
            freight_mode=order.freight_mode.value,
        )
        return order

    def update_status(self, order_id: str, status: InboundStatus) -> InboundOrder:
        """
        Raises:
            InboundOrderNotFoundError: If no order has this id
        """
        with self._lock:
            orders = self._read()
            for index, order in enumerate(orders):
                if order.id == order_id:
                    updated = order.model_copy(update={"status": status})
                    orders[index] = updated
                    self._write(orders)
                    break
            else:
                raise InboundOrderNotFoundError(order_id)

        logger.info(
            "inbound_order_status_updated",
            order_id=order_id,
            old_status=order.status.value,
            new_status=status.value,
        )
        return updated

    def delete(self, order_id: str) -> None:
        """
        Raises:
            InboundOrderNotFoundError: If no order has this id
        """
        with self._lock:
            orders = self._read()
            remaining = [o for o in orders if o.id != order_id]
            if len(remaining) == len(orders):
                raise InboundOrderNotFoundError(order_id)
            self._write(remaining)

        logger.info("inbound_order_deleted", order_id=order_id)

    # ===================
    # FILE I/O
    # ===================

    def _read(self) -> List[InboundOrder]:
        if not self.path.exists():
            return []
        try:
            raw = self.path.read_bytes()
            if not raw.strip():
                return []
            return _orders_adapter.validate_json(raw)
        except OSError as e:
            logger.error("inbound_store_read_failed", path=str(self.path), error=str(e))
            raise InboundStoreError("read", str(e), path=str(self.path))
        except PydanticValidationError as e:
            logger.error(
                "inbound_store_corrupt",
                path=str(self.path),
                errors=e.error_count(),
            )
            raise InboundStoreError("read", "Store contents are invalid", path=str(self.path))

    def _write(self, orders: List[InboundOrder]) -> None:
        payload = _orders_adapter.dump_json(orders, indent=2)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=".inbound-", suffix=".json"
            )
            try:
                with os.fdopen(fd, "wb") as handle:
                    handle.write(payload)
                os.replace(tmp_name, self.path)
            except OSError:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            logger.error("inbound_store_write_failed", path=str(self.path), error=str(e))
            raise InboundStoreError("write", str(e), path=str(self.path))


# Singleton instance for convenience
_inbound_store: Optional[InboundStore] = None


def get_inbound_store() -> InboundStore:
    """Get or create InboundStore instance."""
    global _inbound_store
    if _inbound_store is None:
        _inbound_store = InboundStore()
    return _inbound_store
