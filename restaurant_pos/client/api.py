# restaurant_pos/client/api.py
import logging
from typing import Any, Dict, List, Optional

import httpx

from restaurant_pos.utils.dates import local_today

logger = logging.getLogger(__name__)


class PosApiError(Exception):
    def __init__(self, context: str, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.context = context
        self.message = message
        self.status_code = status_code

    def __str__(self):
        return f"{self.context}: {self.message}"


class PosApiClient:
    """Synchronous client for the POS HTTP API.

    ``http`` may be any ``httpx.Client``; tests pass FastAPI's ``TestClient``.
    """

    def __init__(self, base_url: str = "http://127.0.0.1:8000", http: Optional[httpx.Client] = None,
                 timeout: float = 10.0):
        self.http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self.token: Optional[str] = None
        self.current_user: Optional[Dict[str, Any]] = None

    # --- transport ---

    def _headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def _request(self, context: str, method: str, url: str, **kwargs) -> Any:
        try:
            response = self.http.request(method, url, headers=self._headers(), **kwargs)
        except httpx.HTTPError as e:
            logger.error("API error in %s: %s", context, e)
            raise PosApiError(context, f"An unknown error occurred in {context}.") from e

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = None
            detail = body.get("detail") if isinstance(body, dict) else None
            if not detail:
                detail = f"An unknown error occurred in {context}."
            elif not isinstance(detail, str):
                # FastAPI validation errors come back as a list
                detail = str(detail)
            logger.error("API error in %s: %s %s", context, response.status_code, detail)
            raise PosApiError(context, detail, response.status_code)

        if not response.content:
            return None
        return response.json()

    # --- auth ---

    def login(self, username: str, password: str) -> Dict[str, Any]:
        data = self._request("login", "POST", "/login", json={"username": username, "password": password})
        self.token = data["access_token"]
        self.current_user = data["user"]
        return self.current_user

    def logout(self):
        self.token = None
        self.current_user = None

    # --- read ---

    def get_dashboard_stats(self, date: str, timezone_offset: Optional[int] = None) -> Dict[str, Any]:
        body = {"date": date, "timezone_offset": timezone_offset}
        return self._request("getDashboardStats", "POST", "/functions/get-dashboard-stats", json=body)

    def get_products(self) -> List[Dict[str, Any]]:
        return self._request("getProducts", "GET", "/products")

    def get_orders(self, status: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {"status": status} if status else None
        return self._request("getOrders", "GET", "/orders", params=params)

    def get_expenses(self, date: Optional[str] = None, timezone_offset: Optional[int] = None) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {"date": date or local_today(timezone_offset)}
        if timezone_offset is not None:
            params["timezone_offset"] = timezone_offset
        return self._request("getExpenses", "GET", "/expenses", params=params)

    def get_categories(self) -> List[Dict[str, Any]]:
        return self._request("getCategories", "GET", "/categories")

    def get_settings(self) -> Dict[str, Any]:
        return self._request("getSettings", "GET", "/settings")

    def get_users(self) -> List[Dict[str, Any]]:
        return self._request("getUsers", "GET", "/users")

    # --- create ---

    def create_product(self, name: str, price: float, category_id: int, in_stock: bool = True) -> Dict[str, Any]:
        body = {"name": name, "price": price, "category_id": category_id, "in_stock": in_stock}
        return self._request("createProduct", "POST", "/products", json=body)

    def create_category(self, name: str) -> Dict[str, Any]:
        return self._request("createCategory", "POST", "/categories", json={"name": name})

    def create_expense(self, description: str, amount: float) -> Dict[str, Any]:
        body = {"description": description, "amount": amount}
        return self._request("createExpense", "POST", "/expenses", json=body)

    def create_order(self, items: List[Dict[str, Any]], discount_type: str = "none",
                     discount_value: float = 0.0, note: Optional[str] = None) -> Dict[str, Any]:
        body = {"items": items, "discount_type": discount_type, "discount_value": discount_value, "note": note}
        return self._request("createOrder", "POST", "/orders", json=body)

    def create_user(self, username: str, password: str, role: str) -> Dict[str, Any]:
        body = {"username": username, "password": password, "role": role}
        data = self._request("createUser", "POST", "/functions/create-user", json=body)
        user = (data or {}).get("user") or {}
        if not user.get("id") or not user.get("username") or not user.get("role"):
            raise PosApiError("createUser", "User creation API returned invalid data.")
        return user

    # --- update ---

    def edit_order(self, order_id: int, items: List[Dict[str, Any]], discount_type: str = "none",
                   discount_value: float = 0.0, note: Optional[str] = None) -> Dict[str, Any]:
        body = {"items": items, "discount_type": discount_type, "discount_value": discount_value, "note": note}
        return self._request("editOrder", "PUT", f"/orders/{order_id}", json=body)

    def complete_order(self, order_id: int) -> Dict[str, Any]:
        return self._request("completeOrder", "POST", f"/orders/{order_id}/complete")

    def cancel_order(self, order_id: int, note: str) -> Dict[str, Any]:
        return self._request("cancelOrder", "POST", f"/orders/{order_id}/cancel", json={"note": note})

    def update_product_stock(self, product_id: int, in_stock: bool) -> Dict[str, Any]:
        return self._request("updateProductStock", "PATCH", f"/products/{product_id}/stock",
                             json={"in_stock": in_stock})

    def update_settings(self, business_name: Optional[str] = None,
                        sales_tax_rate: Optional[float] = None) -> Dict[str, Any]:
        body = {"business_name": business_name, "sales_tax_rate": sales_tax_rate}
        return self._request("updateSettings", "PUT", "/settings", json=body)

    # --- delete ---

    def delete_user(self, user_id: int) -> None:
        self._request("deleteUser", "POST", "/functions/delete-user", json={"user_id": user_id})
