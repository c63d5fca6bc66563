# restaurant_pos/client/store.py
"""Client-side data layer: cached queries plus mutations.

Stock toggles, order completion and order cancellation are applied to the
cache before the server answers and rolled back if the call fails. Every
other mutation simply invalidates the queries it affects. Change events from
the real-time feed invalidate queries the same way.
"""
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from restaurant_pos.client.api import PosApiClient, PosApiError
from restaurant_pos.client.cache import QueryCache, QueryKey
from restaurant_pos.utils import permissions
from restaurant_pos.utils.dates import local_today
from restaurant_pos.utils.pricing import OrderTotals, compute_order_totals

logger = logging.getLogger(__name__)

Notifier = Callable[[str, str], None]

PRODUCTS: QueryKey = ("products",)
CATEGORIES: QueryKey = ("categories",)
ORDERS: QueryKey = ("orders",)
EXPENSES: QueryKey = ("expenses",)
SETTINGS: QueryKey = ("settings",)
USERS: QueryKey = ("users",)
DASHBOARD_STATS: QueryKey = ("dashboardStats",)

# Queries to refresh when a table changes
INVALIDATIONS: Dict[str, Tuple[QueryKey, ...]] = {
    "orders": (ORDERS, DASHBOARD_STATS),
    "order_items": (ORDERS, DASHBOARD_STATS),
    "expenses": (EXPENSES, DASHBOARD_STATS),
    "products": (PRODUCTS,),
    "categories": (CATEGORIES, PRODUCTS),
    "app_settings": (SETTINGS,),
    "profiles": (USERS,),
}


def _log_notifier(level: str, message: str) -> None:
    logger.log(logging.ERROR if level == "error" else logging.INFO, message)


def _replace_by_id(rows: Optional[List[Dict[str, Any]]], record: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [record if row["id"] == record["id"] else row for row in (rows or [])]


class PosStore:
    def __init__(self, api: PosApiClient, cache: Optional[QueryCache] = None,
                 notify: Optional[Notifier] = None, timezone_offset: Optional[int] = None):
        self.api = api
        self.cache = cache or QueryCache()
        self.notify = notify or _log_notifier
        self.timezone_offset = timezone_offset

    # --- session / views ---

    @property
    def role(self) -> Optional[str]:
        return (self.api.current_user or {}).get("role")

    def visible_pages(self) -> List[str]:
        return permissions.allowed_pages(self.role)

    def resolve_page(self, requested: str) -> str:
        return permissions.resolve_page(self.role, requested)

    def can(self, capability: str) -> bool:
        return permissions.can(self.role, capability)

    # --- queries ---

    def products(self) -> List[Dict[str, Any]]:
        return self.cache.fetch(PRODUCTS, self.api.get_products)

    def categories(self) -> List[Dict[str, Any]]:
        return self.cache.fetch(CATEGORIES, self.api.get_categories)

    def orders(self) -> List[Dict[str, Any]]:
        return self.cache.fetch(ORDERS, self.api.get_orders)

    def expenses(self, date: Optional[str] = None) -> List[Dict[str, Any]]:
        day = date or local_today(self.timezone_offset)
        return self.cache.fetch(EXPENSES + (day,), lambda: self.api.get_expenses(day, self.timezone_offset))

    def settings(self) -> Dict[str, Any]:
        return self.cache.fetch(SETTINGS, self.api.get_settings)

    def users(self) -> List[Dict[str, Any]]:
        return self.cache.fetch(USERS, self.api.get_users)

    def dashboard_stats(self, date: Optional[str] = None) -> Dict[str, Any]:
        day = date or local_today(self.timezone_offset)
        return self.cache.fetch(
            DASHBOARD_STATS + (day,),
            lambda: self.api.get_dashboard_stats(day, self.timezone_offset),
        )

    def preview_totals(self, lines: Iterable[Tuple[float, int]], discount_type: str = "none",
                       discount_value: float = 0.0) -> OrderTotals:
        """Totals shown while an order is being built, using the cached tax rate."""
        tax_rate = self.settings().get("sales_tax_rate", 0.0)
        return compute_order_totals(lines, discount_type, discount_value, tax_rate)

    # --- helpers ---

    def _invalidate(self, *keys: QueryKey) -> None:
        for key in keys:
            self.cache.invalidate(key)

    def _mutate(self, call: Callable[[], Any], success: str, failure: str, *keys: QueryKey) -> Any:
        try:
            result = call()
        except PosApiError:
            self.notify("error", failure)
            raise
        self._invalidate(*keys)
        self.notify("success", success)
        return result

    def _optimistic(self, key: QueryKey, updater, call: Callable[[], Dict[str, Any]],
                    success: str, failure: str, *settle: QueryKey) -> Dict[str, Any]:
        try:
            with self.cache.optimistic(key, updater):
                record = call()
        except PosApiError:
            self.notify("error", failure)
            raise
        else:
            self.cache.update(key, lambda rows: _replace_by_id(rows, record))
            self.notify("success", success)
            return record
        finally:
            self._invalidate(key, *settle)

    # --- mutations ---

    def create_order(self, items: List[Dict[str, Any]], discount_type: str = "none",
                     discount_value: float = 0.0, note: Optional[str] = None) -> Dict[str, Any]:
        return self._mutate(
            lambda: self.api.create_order(items, discount_type, discount_value, note),
            "Order created", "Could not create order", ORDERS, DASHBOARD_STATS,
        )

    def edit_order(self, order_id: int, items: List[Dict[str, Any]], discount_type: str = "none",
                   discount_value: float = 0.0, note: Optional[str] = None) -> Dict[str, Any]:
        return self._mutate(
            lambda: self.api.edit_order(order_id, items, discount_type, discount_value, note),
            "Order updated", "Could not update order", ORDERS, DASHBOARD_STATS,
        )

    def complete_order(self, order_id: int) -> Dict[str, Any]:
        def _mark(rows):
            return [dict(o, status="completed") if o["id"] == order_id else o for o in (rows or [])]

        return self._optimistic(
            ORDERS, _mark, lambda: self.api.complete_order(order_id),
            "Order completed", "Could not complete order", DASHBOARD_STATS,
        )

    def cancel_order(self, order_id: int, note: str) -> Dict[str, Any]:
        def _mark(rows):
            return [
                dict(o, status="cancelled", cancellation_note=note) if o["id"] == order_id else o
                for o in (rows or [])
            ]

        return self._optimistic(
            ORDERS, _mark, lambda: self.api.cancel_order(order_id, note),
            "Order cancelled", "Could not cancel order", DASHBOARD_STATS,
        )

    def update_stock(self, product_id: int, in_stock: bool) -> Dict[str, Any]:
        def _mark(rows):
            return [dict(p, in_stock=in_stock) if p["id"] == product_id else p for p in (rows or [])]

        return self._optimistic(
            PRODUCTS, _mark, lambda: self.api.update_product_stock(product_id, in_stock),
            "Stock updated", "Could not update stock",
        )

    def create_product(self, name: str, price: float, category_id: int, in_stock: bool = True) -> Dict[str, Any]:
        return self._mutate(
            lambda: self.api.create_product(name, price, category_id, in_stock),
            "Product added", "Could not add product", PRODUCTS,
        )

    def create_category(self, name: str) -> Dict[str, Any]:
        return self._mutate(
            lambda: self.api.create_category(name),
            "Category added", "Could not add category", CATEGORIES,
        )

    def create_expense(self, description: str, amount: float) -> Dict[str, Any]:
        return self._mutate(
            lambda: self.api.create_expense(description, amount),
            "Expense added", "Could not add expense", EXPENSES, DASHBOARD_STATS,
        )

    def update_settings(self, business_name: Optional[str] = None,
                        sales_tax_rate: Optional[float] = None) -> Dict[str, Any]:
        result = self._mutate(
            lambda: self.api.update_settings(business_name, sales_tax_rate),
            "Settings saved", "Could not save settings", SETTINGS,
        )
        self.cache.set(SETTINGS, result)
        return result

    def create_user(self, username: str, password: str, role: str) -> Dict[str, Any]:
        return self._mutate(
            lambda: self.api.create_user(username, password, role),
            f"User {username} created", "Could not create user", USERS,
        )

    def delete_user(self, user_id: int) -> None:
        self._mutate(
            lambda: self.api.delete_user(user_id),
            "User deleted", "Could not delete user", USERS,
        )

    # --- real-time ---

    def handle_change(self, message: Dict[str, Any]) -> List[QueryKey]:
        """Invalidate the queries affected by one change-feed message."""
        table = message.get("table")
        keys = INVALIDATIONS.get(table, ())
        if not keys:
            return []
        logger.debug("Change received for %s: %s", table, message.get("event"))
        self._invalidate(*keys)
        return list(keys)
