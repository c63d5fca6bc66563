def test_products_are_listed_by_name_with_category(client, waiter_headers, menu):
    r = client.get("/products", headers=waiter_headers)
    assert r.status_code == 200
    rows = r.json()
    assert [p["name"] for p in rows] == ["Cola", "Pizza", "Tiramisu"]
    pizza = rows[1]
    assert pizza["category"] == "Main"
    assert pizza["price"] == 10.0
    assert pizza["in_stock"] is True


def test_admin_creates_category_and_product(client, admin_headers):
    r = client.post("/categories", json={"name": "Sides"}, headers=admin_headers)
    assert r.status_code == 200
    category_id = r.json()["id"]

    r = client.post("/products", json={"name": "Fries", "price": 3.5, "category_id": category_id},
                    headers=admin_headers)
    assert r.status_code == 200
    product = r.json()
    assert product["category"] == "Sides"
    assert product["in_stock"] is True

    r = client.get("/categories", headers=admin_headers)
    assert [c["name"] for c in r.json()] == ["Sides"]


def test_duplicate_category_is_rejected(client, admin_headers, menu):
    r = client.post("/categories", json={"name": "main"}, headers=admin_headers)
    assert r.status_code == 400


def test_product_needs_existing_category_and_positive_price(client, admin_headers, menu):
    r = client.post("/products", json={"name": "Soup", "price": 4.0, "category_id": 999},
                    headers=admin_headers)
    assert r.status_code == 400
    r = client.post("/products", json={"name": "Soup", "price": 0, "category_id": 1},
                    headers=admin_headers)
    assert r.status_code == 422


def test_waiter_cannot_change_catalog(client, waiter_headers, menu):
    r = client.post("/categories", json={"name": "Sides"}, headers=waiter_headers)
    assert r.status_code == 403
    r = client.patch(f"/products/{menu['pizza']}/stock", json={"in_stock": False}, headers=waiter_headers)
    assert r.status_code == 403


def test_admin_toggles_stock(client, admin_headers, menu):
    r = client.patch(f"/products/{menu['pizza']}/stock", json={"in_stock": False}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["in_stock"] is False

    r = client.patch("/products/999/stock", json={"in_stock": True}, headers=admin_headers)
    assert r.status_code == 404


def test_blank_catalog_names_are_rejected(client, admin_headers, menu):
    r = client.post("/categories", json={"name": "   "}, headers=admin_headers)
    assert r.status_code == 422
    r = client.post("/products", json={"name": " \t ", "price": 4.0, "category_id": 1},
                    headers=admin_headers)
    assert r.status_code == 422

    names = [c["name"] for c in client.get("/categories", headers=admin_headers).json()]
    assert "" not in names
