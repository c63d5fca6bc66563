# restaurant_pos/utils/permissions.py
from typing import Dict, FrozenSet, List, Optional

ROLES = ("admin", "waiter", "kitchen")

DEFAULT_PAGE = "dashboard"

# Pages shown in the navigation for each role, in display order
PAGES_BY_ROLE: Dict[str, List[str]] = {
    "admin": ["dashboard", "products", "orders", "expenses", "reports", "settings"],
    "waiter": ["dashboard", "products", "orders"],
    "kitchen": ["dashboard", "orders"],
}

# Roles allowed to perform each write operation
ADMIN_ONLY: FrozenSet[str] = frozenset({"admin"})
ORDER_TAKERS: FrozenSet[str] = frozenset({"admin", "waiter"})
ALL_STAFF: FrozenSet[str] = frozenset(ROLES)

CAPABILITIES: Dict[str, FrozenSet[str]] = {
    "create_product": ADMIN_ONLY,
    "create_category": ADMIN_ONLY,
    "toggle_stock": ADMIN_ONLY,
    "create_order": ORDER_TAKERS,
    "edit_order": ORDER_TAKERS,
    "complete_order": ORDER_TAKERS,
    "cancel_order": ALL_STAFF,
    "manage_expenses": ADMIN_ONLY,
    "manage_settings": ADMIN_ONLY,
    "manage_users": ADMIN_ONLY,
    "view_logs": ADMIN_ONLY,
}


def allowed_pages(role: Optional[str]) -> List[str]:
    return list(PAGES_BY_ROLE.get((role or "").lower(), []))


def resolve_page(role: Optional[str], requested: str) -> str:
    """Page to actually render; anything not allowed falls back to the dashboard."""
    if requested in allowed_pages(role):
        return requested
    return DEFAULT_PAGE


def can(role: Optional[str], capability: str) -> bool:
    return (role or "").lower() in CAPABILITIES.get(capability, frozenset())
