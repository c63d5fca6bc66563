import asyncio
import time

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from starlette.websockets import WebSocketDisconnect

from restaurant_pos.main import app
from restaurant_pos.routes import expenses as expenses_route
from restaurant_pos.routes import products as products_route
from restaurant_pos.routes import realtime as realtime_route
from restaurant_pos.utils.realtime import ChangeHub, hub


def test_hub_delivers_to_subscribers_of_the_table():
    local = ChangeHub()

    async def scenario():
        orders = local.subscribe("orders")
        products = local.subscribe("products")
        assert local.publish("orders", "INSERT", {"id": 1}) == 1
        message = await asyncio.wait_for(orders[1].get(), timeout=1)
        local.unsubscribe("orders", orders)
        return message, products[1].empty()

    message, products_empty = asyncio.run(scenario())
    assert message == {"table": "orders", "event": "INSERT", "record": {"id": 1}}
    assert products_empty
    assert local.subscriber_count("orders") == 0
    assert local.publish("orders", "UPDATE") == 0


def test_hub_rejects_unknown_table_and_event():
    local = ChangeHub()
    with pytest.raises(ValueError):
        local.publish("orders", "TRUNCATE")

    async def scenario():
        local.subscribe("reservations")

    with pytest.raises(KeyError):
        asyncio.run(scenario())


def test_order_changes_are_pushed(client, waiter_token, waiter_headers, menu):
    with client.websocket_connect(f"/realtime/orders?token={waiter_token}") as ws:
        assert ws.receive_json() == {"type": "subscribed", "table": "orders"}

        r = client.post("/orders", json={"items": [{"product_id": menu["cola"], "quantity": 1}]},
                        headers=waiter_headers)
        order_id = r.json()["id"]
        message = ws.receive_json()
        assert message["event"] == "INSERT"
        assert message["record"]["id"] == order_id

        client.post(f"/orders/{order_id}/complete", headers=waiter_headers)
        message = ws.receive_json()
        assert message["event"] == "UPDATE"
        assert message["record"]["status"] == "completed"


def test_order_item_changes_on_edit(client, waiter_token, waiter_headers, menu):
    order = client.post("/orders", json={"items": [{"product_id": menu["cola"], "quantity": 1}]},
                        headers=waiter_headers).json()

    with client.websocket_connect(f"/realtime/order_items?token={waiter_token}") as ws:
        ws.receive_json()
        client.put(f"/orders/{order['id']}", json={"items": [{"product_id": menu["pizza"], "quantity": 2}]},
                   headers=waiter_headers)
        events = [ws.receive_json() for _ in range(2)]

    assert [e["event"] for e in events] == ["DELETE", "INSERT"]
    assert events[1]["record"]["product_id"] == menu["pizza"]
    assert events[1]["record"]["quantity"] == 2


def test_subscription_ends_on_disconnect(client, admin_token):
    with client.websocket_connect(f"/realtime/expenses?token={admin_token}") as ws:
        ws.receive_json()
        assert hub.subscriber_count("expenses") == 1
    # The server side unsubscribes once it notices the close
    for _ in range(50):
        if hub.subscriber_count("expenses") == 0:
            break
        time.sleep(0.01)
    assert hub.subscriber_count("expenses") == 0


@pytest.mark.parametrize("path", [
    "/realtime/reservations?token={token}",
    "/realtime/orders?token=not-a-token",
    "/realtime/orders",
])
def test_rejected_subscriptions(client, admin_token, path):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect(path.format(token=admin_token)) as ws:
            ws.receive_json()


def test_token_check_runs_off_the_event_loop(client, admin_token, monkeypatch):
    calls = []
    original = realtime_route.run_in_threadpool

    async def _recording(func, *args, **kwargs):
        calls.append(func)
        return await original(func, *args, **kwargs)

    monkeypatch.setattr(realtime_route, "run_in_threadpool", _recording)
    with client.websocket_connect(f"/realtime/orders?token={admin_token}") as ws:
        assert ws.receive_json()["type"] == "subscribed"
    assert calls == [realtime_route._authenticate]


class _ClosedSocket:
    def __init__(self):
        self.attempts = 0

    async def send_json(self, message):
        self.attempts += 1
        raise RuntimeError('Cannot call "send" once a close message has been sent.')


def test_forwarding_stops_quietly_on_closed_socket():
    ws = _ClosedSocket()

    async def scenario():
        queue = asyncio.Queue()
        queue.put_nowait({"table": "orders", "event": "INSERT", "record": {}})
        await asyncio.wait_for(realtime_route.forward_changes(ws, queue), timeout=1)

    assert asyncio.run(scenario()) is None
    assert ws.attempts == 1


def test_change_is_published_even_if_audit_write_fails(admin_headers, menu, monkeypatch):
    published = []

    def _failing_log(db, **kwargs):
        raise OperationalError("INSERT INTO logs", {}, Exception("disk I/O error"))

    monkeypatch.setattr(hub, "publish", lambda table, event, record=None: published.append((table, event)))
    monkeypatch.setattr(expenses_route, "write_log", _failing_log)
    monkeypatch.setattr(products_route, "write_log", _failing_log)

    client = TestClient(app, raise_server_exceptions=False)
    r = client.post("/expenses", json={"description": "Ice", "amount": 4}, headers=admin_headers)
    assert r.status_code == 500
    r = client.patch(f"/products/{menu['pizza']}/stock", json={"in_stock": False}, headers=admin_headers)
    assert r.status_code == 500

    assert published == [("expenses", "INSERT"), ("products", "UPDATE")]
