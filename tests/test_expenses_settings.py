from datetime import datetime

import pytest

from restaurant_pos.models.expense import Expense
from restaurant_pos.models.log import Log


def test_admin_records_expense(client, admin_headers, db):
    r = client.post("/expenses", json={"description": " Flour ", "amount": 42.5}, headers=admin_headers)
    assert r.status_code == 200, r.text
    assert r.json()["description"] == "Flour"

    r = client.get("/expenses", headers=admin_headers)
    assert [e["amount"] for e in r.json()] == [42.5]
    assert db.query(Log).filter(Log.action == "EXPENSE_CREATE").count() == 1


@pytest.mark.parametrize("body", [
    {"description": "Gas", "amount": 0},
    {"description": "Gas", "amount": -3},
    {"description": "", "amount": 3},
    {"description": "   ", "amount": 3},
])
def test_invalid_expense(client, admin_headers, body):
    assert client.post("/expenses", json=body, headers=admin_headers).status_code == 422


def test_expenses_are_admin_only(client, waiter_headers, kitchen_headers):
    for headers in (waiter_headers, kitchen_headers):
        assert client.get("/expenses", headers=headers).status_code == 403
        assert client.post("/expenses", json={"description": "x", "amount": 1}, headers=headers).status_code == 403


def test_expenses_for_a_local_day(client, admin_headers, db):
    db.add_all([
        Expense(description="late", amount=5, created_at=datetime(2026, 3, 11, 3, 0)),
        Expense(description="noon", amount=7, created_at=datetime(2026, 3, 10, 12, 0)),
        Expense(description="early", amount=9, created_at=datetime(2026, 3, 10, 1, 0)),
    ])
    db.commit()

    r = client.get("/expenses", params={"date": "2026-03-10"}, headers=admin_headers)
    assert [e["description"] for e in r.json()] == ["noon", "early"]

    # UTC-5: the local day runs from 05:00 to 05:00 UTC
    r = client.get("/expenses", params={"date": "2026-03-10", "timezone_offset": 300}, headers=admin_headers)
    assert [e["description"] for e in r.json()] == ["late", "noon"]


def test_expenses_bad_date(client, admin_headers):
    r = client.get("/expenses", params={"date": "10/03/2026"}, headers=admin_headers)
    assert r.status_code == 400
    assert "YYYY-MM-DD" in r.json()["detail"]


def test_any_staff_reads_settings(client, kitchen_headers):
    r = client.get("/settings", headers=kitchen_headers)
    assert r.status_code == 200
    assert r.json() == {"business_name": "Test Bistro", "sales_tax_rate": 0.0}


def test_admin_updates_settings_partially(client, admin_headers):
    r = client.put("/settings", json={"sales_tax_rate": 8.5}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json() == {"business_name": "Test Bistro", "sales_tax_rate": 8.5}

    r = client.put("/settings", json={"business_name": "Chez Nous"}, headers=admin_headers)
    assert r.json() == {"business_name": "Chez Nous", "sales_tax_rate": 8.5}


@pytest.mark.parametrize("rate", [-1, 100.5])
def test_tax_rate_bounds(client, admin_headers, rate):
    assert client.put("/settings", json={"sales_tax_rate": rate}, headers=admin_headers).status_code == 422


def test_waiter_cannot_update_settings(client, waiter_headers):
    assert client.put("/settings", json={"sales_tax_rate": 5}, headers=waiter_headers).status_code == 403
