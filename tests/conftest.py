"""
Shared test fixtures.
"""

import sys
from pathlib import Path

# Add project directory to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

import pytest

from integrations.order_source import InMemoryOrderSource
from services.inbound_store import InboundStore
from tests.factories import OrderFactory, brisbane


# ===================
# ORDER DATA
# ===================

@pytest.fixture
def october_orders():
    """
    Orders spread over October 2025 (Brisbane).

    Week of 6 Oct: 3 orders, A x2 / B x1 / A x2 + B x1
    Week of 13 Oct: 1 order, A x2
    """
    return [
        OrderFactory.create(brisbane(2025, 10, 6, 9), items=[("A", 2)], id="o-1"),
        OrderFactory.create(brisbane(2025, 10, 7, 14), items=[("B", 1)], id="o-2"),
        OrderFactory.create(brisbane(2025, 10, 8, 23, 30), items=[("A", 2), ("B", 1)], id="o-3"),
        OrderFactory.create(brisbane(2025, 10, 14, 8), items=[("A", 2)], id="o-4"),
    ]


@pytest.fixture
def order_source(october_orders):
    """In-memory source over the October orders."""
    return InMemoryOrderSource(october_orders)


# ===================
# STORAGE
# ===================

@pytest.fixture
def inbound_store(tmp_path):
    """InboundStore writing to a temporary file."""
    return InboundStore(tmp_path / "inbound_orders.json")


# ===================
# API CLIENT
# ===================

@pytest.fixture
def client():
    """FastAPI TestClient."""
    from fastapi.testclient import TestClient
    from main import app
    return TestClient(app)

