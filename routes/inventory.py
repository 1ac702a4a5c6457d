"""
Inventory API routes.

Cover status, reorder recommendations, and CRUD for scheduled inbound
shipments.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from typing import List, Optional
import structlog

from models.inventory import (
    FreightMode,
    InboundOrder,
    InboundOrderCreate,
    InboundOrderStatusUpdate,
    InventoryStatusSummary,
    ReorderRecommendation,
)
from services.inventory_service import get_inventory_service
from services.inbound_store import get_inbound_store
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# COVER ROUTES
# ===================

@router.get("/status", response_model=InventoryStatusSummary)
def get_inventory_status(
    velocity_weeks: Optional[int] = Query(None, description="Velocity window: 4, 8 or 12 weeks"),
):
    """Weeks of cover and stock status for every SKU, most urgent first."""
    try:
        service = get_inventory_service()
        return service.get_inventory_status(velocity_weeks=velocity_weeks)
    except Exception as e:
        return handle_error(e)


@router.get("/reorder", response_model=List[ReorderRecommendation])
def get_reorder_recommendations(
    velocity_weeks: Optional[int] = Query(None, description="Velocity window: 4, 8 or 12 weeks"),
    freight_mode: FreightMode = Query(FreightMode.SEA, description="air or sea"),
):
    """Units to order per SKU to cover lead time plus safety stock."""
    try:
        service = get_inventory_service()
        return service.get_reorder_recommendations(
            velocity_weeks=velocity_weeks,
            freight_mode=freight_mode,
        )
    except Exception as e:
        return handle_error(e)


# ===================
# INBOUND ROUTES
# ===================

@router.get("/inbound", response_model=List[InboundOrder])
def list_inbound_orders(
    sku: Optional[str] = Query(None, description="Filter by SKU"),
    open_only: bool = Query(False, description="Only pending and in-transit orders"),
):
    """Scheduled inbound shipments, earliest arrival first."""
    try:
        store = get_inbound_store()
        return store.list(sku=sku, open_only=open_only)
    except Exception as e:
        return handle_error(e)


@router.post("/inbound", response_model=InboundOrder, status_code=201)
def create_inbound_order(data: InboundOrderCreate):
    """Schedule an inbound shipment."""
    try:
        store = get_inbound_store()
        return store.add(data)
    except Exception as e:
        return handle_error(e)


@router.patch("/inbound/{order_id}", response_model=InboundOrder)
def update_inbound_order_status(order_id: str, data: InboundOrderStatusUpdate):
    """Change the status of an inbound shipment."""
    try:
        store = get_inbound_store()
        return store.update_status(order_id, data.status)
    except Exception as e:
        return handle_error(e)


@router.delete("/inbound/{order_id}", status_code=204)
def delete_inbound_order(order_id: str):
    """Remove an inbound shipment."""
    try:
        store = get_inbound_store()
        store.delete(order_id)
    except Exception as e:
        return handle_error(e)
