"""
Tests for the finance summary endpoint.
"""

from datetime import datetime
from decimal import Decimal

from trade_ledger.config import SUPPORTED_CURRENCIES
from trade_ledger.models.enums import OrderStatus


def test_summary_has_every_currency(client):
    response = client.get("/finance/summary", params={"fiscal_year": "2025"})
    assert response.status_code == 200
    data = response.json()
    assert data["fiscal_year"] == 2025
    assert data["fiscal_year_label"] == "2025-26"
    for field in (
        "revenue_by_currency",
        "paid_by_currency",
        "outstanding_by_currency",
        "advance_by_currency",
        "pipeline_by_currency",
    ):
        assert set(data[field]) == set(SUPPORTED_CURRENCIES)


def test_label_and_year_select_same_period(client, make_order):
    make_order("800.00", "AED", OrderStatus.SHIPPED, created_at=datetime(2024, 11, 3))

    by_label = client.get("/finance/summary", params={"fiscal_year": "2024-25"}).json()
    by_year = client.get("/finance/summary", params={"fiscal_year": "2024"}).json()

    assert by_label == by_year
    assert Decimal(by_label["revenue_by_currency"]["AED"]) == Decimal("800.00")


def test_bad_label_returns_400(client):
    response = client.get("/finance/summary", params={"fiscal_year": "2025-27"})
    assert response.status_code == 400
