"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.dashboard import router as dashboard_router
from routes.inventory import router as inventory_router

__all__ = [
    "dashboard_router",
    "inventory_router",
]
