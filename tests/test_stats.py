from datetime import datetime

import pytest
from sqlalchemy.exc import OperationalError

from restaurant_pos.models.expense import Expense
from restaurant_pos.models.order import Order, OrderItem
from restaurant_pos.routes import stats as stats_route


def _order(db, status, closed_at, lines):
    subtotal = sum(price * qty for _, qty, price in lines)
    order = Order(status=status, subtotal=subtotal, discount_type="none", discount_value=0,
                  tax_amount=0, total=subtotal, created_at=closed_at, updated_at=closed_at)
    order.items = [OrderItem(product_id=pid, quantity=qty, price_at_order=price) for pid, qty, price in lines]
    db.add(order)
    return order


@pytest.fixture
def business_day(db, menu):
    pizza, cola = menu["pizza"], menu["cola"]
    _order(db, "completed", datetime(2026, 3, 10, 12, 0), [(pizza, 2, 10.0)])
    _order(db, "completed", datetime(2026, 3, 11, 3, 0), [(cola, 2, 2.5)])
    _order(db, "cancelled", datetime(2026, 3, 10, 9, 0), [(cola, 1, 2.5)])
    _order(db, "pending", datetime(2026, 3, 8, 9, 0), [(pizza, 1, 10.0)])
    db.add_all([
        Expense(description="Produce", amount=20, created_at=datetime(2026, 3, 10, 10, 0)),
        Expense(description="Ice", amount=5, created_at=datetime(2026, 3, 9, 12, 0)),
    ])
    db.commit()


def _stats(client, headers, **body):
    return client.post("/functions/get-dashboard-stats", json=body, headers=headers)


def test_utc_day(client, waiter_headers, business_day):
    r = _stats(client, waiter_headers, date="2026-03-10")
    assert r.status_code == 200, r.text
    stats = r.json()

    assert stats["income"] == pytest.approx(20.0)
    assert stats["total_expenses"] == pytest.approx(20.0)
    assert stats["net"] == pytest.approx(0.0)
    assert stats["completed_orders_count"] == 1
    assert stats["cancelled_orders_count"] == 1
    assert stats["pending_orders"] == 1
    assert stats["average_order_value"] == pytest.approx(20.0)
    assert stats["top_selling_products"] == [{"name": "Pizza", "quantity": 2}]


def test_local_day_behind_utc(client, kitchen_headers, business_day):
    r = _stats(client, kitchen_headers, date="2026-03-10", timezone_offset=300)
    stats = r.json()

    assert stats["income"] == pytest.approx(25.0)
    assert stats["completed_orders_count"] == 2
    assert stats["average_order_value"] == pytest.approx(12.5)
    # Equal quantities fall back to name order
    assert stats["top_selling_products"] == [
        {"name": "Cola", "quantity": 2},
        {"name": "Pizza", "quantity": 2},
    ]


def test_empty_day(client, admin_headers, business_day):
    stats = _stats(client, admin_headers, date="2026-01-01").json()
    assert stats["income"] == 0
    assert stats["total_expenses"] == 0
    assert stats["average_order_value"] == 0
    assert stats["top_selling_products"] == []
    # Pending orders are counted regardless of the day
    assert stats["pending_orders"] == 1


@pytest.mark.parametrize("date", ["", "2026-3-10", "yesterday"])
def test_invalid_date(client, admin_headers, date):
    r = _stats(client, admin_headers, date=date)
    assert r.status_code == 400
    assert r.json()["detail"] == "A valid date in YYYY-MM-DD format is required."


def test_requires_login(client):
    assert _stats(client, {}, date="2026-03-10").status_code in (401, 403)


def test_top_products_failure_is_not_fatal(client, admin_headers, business_day, monkeypatch):
    def _boom(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("no such table"))

    monkeypatch.setattr(stats_route, "_top_selling_products", _boom)
    stats = _stats(client, admin_headers, date="2026-03-10").json()
    assert stats["income"] == pytest.approx(20.0)
    assert stats["top_selling_products"] == []
