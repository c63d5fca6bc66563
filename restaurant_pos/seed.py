# restaurant_pos/seed.py
"""Prepare a database: tables, settings row, admin account, optional menu.

    python -m restaurant_pos.seed --menu data/menu.csv

The menu CSV needs ``name``, ``price`` and ``category`` columns and may
carry an ``in_stock`` column (true/false, yes/no, 1/0).
"""
import argparse
from typing import Tuple

import pandas as pd
from sqlalchemy import func
from sqlalchemy.orm import Session

from restaurant_pos.config import settings
from restaurant_pos.database import SessionLocal, init_db
from restaurant_pos.models.category import Category
from restaurant_pos.models.product import Product
from restaurant_pos.models.users import User
from restaurant_pos.utils.hashing import get_password_hash

REQUIRED_COLUMNS = ("name", "price", "category")
_TRUE_VALUES = {"1", "true", "yes", "y", "t"}


def ensure_admin(session: Session, username: str, password: str) -> Tuple[User, bool]:
    user = session.query(User).filter(func.lower(User.username) == username.lower()).first()
    if user:
        return user, False
    user = User(username=username, password_hash=get_password_hash(password), role="admin")
    session.add(user)
    session.commit()
    session.refresh(user)
    return user, True


def load_menu(path) -> pd.DataFrame:
    """Read and clean a menu CSV; rows without a name or positive price are dropped."""
    df = pd.read_csv(path)
    df.columns = [c.strip().lower() for c in df.columns]
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Menu file is missing columns: {', '.join(missing)}")

    df["name"] = df["name"].astype(str).str.strip()
    df["category"] = df["category"].fillna("Uncategorized").astype(str).str.strip()
    df["price"] = pd.to_numeric(df["price"], errors="coerce")
    if "in_stock" in df.columns:
        df["in_stock"] = df["in_stock"].astype(str).str.strip().str.lower().isin(_TRUE_VALUES)
    else:
        df["in_stock"] = True

    df = df[(df["name"] != "") & (df["name"].str.lower() != "nan") & (df["price"] > 0)]
    return df.drop_duplicates(subset="name", keep="last").reset_index(drop=True)


def import_menu(session: Session, menu: pd.DataFrame) -> Tuple[int, int]:
    """Insert missing categories and products; existing products get the CSV price and stock flag."""
    categories = {c.name.lower(): c for c in session.query(Category).all()}
    new_categories = 0
    for name in menu["category"].unique():
        if name.lower() not in categories:
            category = Category(name=name)
            session.add(category)
            session.flush()
            categories[name.lower()] = category
            new_categories += 1

    products = {p.name.lower(): p for p in session.query(Product).all()}
    new_products = 0
    for row in menu.itertuples(index=False):
        category = categories[row.category.lower()]
        product = products.get(row.name.lower())
        if product is None:
            session.add(Product(
                name=row.name, price=float(row.price),
                category_id=category.id, in_stock=bool(row.in_stock),
            ))
            new_products += 1
        else:
            product.price = float(row.price)
            product.category_id = category.id
            product.in_stock = bool(row.in_stock)

    session.commit()
    return new_categories, new_products


def main(argv=None):
    parser = argparse.ArgumentParser(description="Seed the restaurant POS database")
    parser.add_argument("--menu", help="CSV file with name, price, category[, in_stock]")
    args = parser.parse_args(argv)

    init_db()
    session = SessionLocal()
    try:
        _, created = ensure_admin(session, settings.ADMIN_USERNAME, settings.ADMIN_PASSWORD)
        print(f"Admin account '{settings.ADMIN_USERNAME}' {'created' if created else 'already exists'}.")

        if args.menu:
            menu = load_menu(args.menu)
            new_categories, new_products = import_menu(session, menu)
            print(f"Menu imported: {len(menu)} rows, {new_categories} new categories, {new_products} new products.")
    finally:
        session.close()


if __name__ == "__main__":
    main()
