# tests/conftest.py
# ---------------------------------------------------------------------
# - Point the app at a throwaway SQLite file before anything imports it
# - Fresh schema for every test (drop_all / create_all)
# - Staff accounts for each role plus a small menu
# ---------------------------------------------------------------------
import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="restaurant-pos-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR}/test_pos.db"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ADMIN_USERNAME"] = "sysadmin"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from restaurant_pos.database import Base, SessionLocal, engine
from restaurant_pos.main import app
from restaurant_pos.models.category import Category
from restaurant_pos.models.product import Product
from restaurant_pos.models.settings import AppSettings, SETTINGS_ID, ensure_settings_row
from restaurant_pos.models.users import User
from restaurant_pos.utils.hashing import get_password_hash

PASSWORD = "secret1"


@pytest.fixture(autouse=True)
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    ensure_settings_row(session, "Test Bistro")
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def staff(db):
    users = {}
    for username, role in (("sysadmin", "admin"), ("wendy", "waiter"), ("kim", "kitchen")):
        user = User(username=username, password_hash=get_password_hash(PASSWORD), role=role)
        db.add(user)
        users[role] = user
    db.commit()
    return {role: u.id for role, u in users.items()}


def _token(client, username):
    r = client.post("/login", json={"username": username, "password": PASSWORD})
    assert r.status_code == 200, r.text
    return r.json()["access_token"]


@pytest.fixture
def admin_token(client, staff):
    return _token(client, "sysadmin")


@pytest.fixture
def waiter_token(client, staff):
    return _token(client, "wendy")


@pytest.fixture
def kitchen_token(client, staff):
    return _token(client, "kim")


@pytest.fixture
def admin_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def waiter_headers(waiter_token):
    return {"Authorization": f"Bearer {waiter_token}"}


@pytest.fixture
def kitchen_headers(kitchen_token):
    return {"Authorization": f"Bearer {kitchen_token}"}


@pytest.fixture
def menu(db):
    main = Category(name="Main")
    drink = Category(name="Drink")
    dessert = Category(name="Dessert")
    db.add_all([main, drink, dessert])
    db.flush()
    products = {
        "pizza": Product(name="Pizza", price=10.0, category_id=main.id, in_stock=True),
        "cola": Product(name="Cola", price=2.5, category_id=drink.id, in_stock=True),
        "tiramisu": Product(name="Tiramisu", price=6.0, category_id=dessert.id, in_stock=False),
    }
    db.add_all(products.values())
    db.commit()
    return {key: p.id for key, p in products.items()}


@pytest.fixture
def set_tax_rate(db):
    def _set(rate):
        row = db.get(AppSettings, SETTINGS_ID)
        row.sales_tax_rate = rate
        db.commit()
    return _set
