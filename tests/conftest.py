"""
Pytest configuration and fixtures for BandDesigner tests.
"""

from collections.abc import AsyncGenerator
from datetime import datetime

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from banddesigner.formula.context import EvaluationContext
from banddesigner.formula.engine import FormulaEngine
from banddesigner.main import app
from banddesigner.models.band import Band
from banddesigner.models.controls import (
    CalculatedControl,
    FieldControl,
    LineControl,
    TextControl,
)
from banddesigner.models.data_field import DataField

FIXED_NOW = datetime(2024, 3, 15, 9, 30, 45)


def fixed_clock() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock():
    """Clock frozen at 2024-03-15 09:30:45."""
    return fixed_clock


@pytest.fixture
def engine() -> FormulaEngine:
    """Formula engine with its own default registry."""
    return FormulaEngine()


@pytest.fixture
def sample_fields() -> list[DataField]:
    """Master and detail fields of an invoice."""
    return [
        DataField(name="customer", label="Customer", source="master", type="string"),
        DataField(name="orderDate", label="Order date", source="master", type="date"),
        DataField(name="total", label="Total", source="master", type="currency"),
        DataField(name="products.name", label="Product", source="detail", type="string"),
        DataField(name="products.qty", label="Quantity", source="detail", type="number"),
        DataField(name="products.amount", label="Amount", source="detail", type="currency"),
    ]


@pytest.fixture
def sample_rows() -> list[dict]:
    return [
        {"name": "Bolt", "qty": 2, "amount": 5},
        {"name": "Nut", "qty": 4, "amount": "x"},
        {"name": "Washer", "qty": 1, "amount": 10},
    ]


@pytest.fixture
def sample_context(sample_rows, clock) -> EvaluationContext:
    """Context bound to the first of three detail rows."""
    return EvaluationContext(
        record={"customer": "ACME", "total": 15, "a": 2, "b": 3},
        detail_row=sample_rows[0],
        all_detail_rows=sample_rows,
        row_index=0,
        page_number=1,
        total_pages=2,
        clock=clock,
    )


@pytest.fixture
def sample_bands() -> list[Band]:
    """Header, detail, summary and footer bands with a few controls."""
    return [
        Band(
            id="header",
            name="Header",
            type="header",
            top=0,
            bottom=50,
            objects=(
                TextControl(id="title", type="text", x=10, y=10, width=200, height=30, text="Invoice"),
                FieldControl(id="customer", type="field", x=220, y=10, width=120, height=30, field_name="customer"),
            ),
        ),
        Band(
            id="detail",
            name="Detail",
            type="detail",
            top=70,
            bottom=100,
            objects=(
                FieldControl(id="product", type="field", x=10, y=75, width=120, height=20, field_name="products.name"),
                FieldControl(id="amount", type="field", x=140, y=75, width=80, height=20, field_name="products.amount"),
                LineControl(id="rule", type="line", x1=10, y1=98, x2=300, y2=98),
            ),
        ),
        Band(
            id="summary",
            name="Summary",
            type="summary",
            top=120,
            bottom=160,
            objects=(
                CalculatedControl(id="sum", type="calculated", x=140, y=125, width=80, height=20, formula="SUM({products.amount})"),
            ),
        ),
        Band(
            id="footer",
            name="Footer",
            type="footer",
            top=180,
            bottom=220,
            objects=(
                TextControl(id="thanks", type="text", x=10, y=185, width=200, height=20, text="Thank you"),
            ),
        ),
    ]


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
