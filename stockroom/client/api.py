import logging

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15


class ApiError(Exception):
    """A request that did not come back with a 2xx status."""

    def __init__(self, status, message):
        super().__init__(message)
        self.status = status
        self.message = message


class AuthenticationRequired(ApiError):
    """The server rejected the bearer token (HTTP 401); the user must log in again."""


class StockroomClient:
    """
    Thin wrapper over the Stockroom REST API.
    Holds the bearer token returned at login/register and raises ApiError for
    any non-2xx response.
    """

    def __init__(self, base_url, token=None, session=None, timeout=DEFAULT_TIMEOUT):
        self.api_url = base_url.rstrip("/") + "/api"
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout

    def _headers(self):
        if not self.token:
            logger.warning("No auth token set on the client")
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def _request(self, method, path, **kwargs):
        url = f"{self.api_url}{path}"
        try:
            response = self.session.request(method, url, headers=self._headers(), timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error(f"{method} {url} failed: {e}")
            raise ApiError(None, f"Could not reach the server: {e}") from e

        if response.status_code == 204:
            return None
        try:
            data = response.json()
        except ValueError:
            data = None

        if response.status_code >= 400:
            message = data.get("error") if isinstance(data, dict) else None
            message = message or response.reason or f"HTTP {response.status_code}"
            logger.error(f"{method} {url} returned {response.status_code}: {message}")
            if response.status_code == 401:
                raise AuthenticationRequired(401, message)
            raise ApiError(response.status_code, message)
        return data

    # --- Auth ---

    def login(self, email, password):
        data = self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.token = data["token"]
        return data["user"]

    def register(self, username, email, password):
        data = self._request(
            "POST", "/auth/register", json={"username": username, "email": email, "password": password}
        )
        self.token = data["token"]
        return data["user"]

    def logout(self):
        self.token = None

    # --- Users ---

    def get_profile(self):
        return self._request("GET", "/users/profile")

    def get_users(self):
        return self._request("GET", "/users") or []

    def update_user_role(self, user_id, role):
        return self._request("PUT", f"/users/{user_id}/role", json={"role": role})

    def delete_user(self, user_id):
        return self._request("DELETE", f"/users/{user_id}")

    # --- Inventory ---

    def get_inventory(self):
        return self._request("GET", "/inventory") or []

    def get_restock_recommendations(self):
        return self._request("GET", "/inventory/restock") or []

    def add_item(self, item):
        return self._request("POST", "/inventory", json=item)

    def update_item(self, product_id, item):
        return self._request("PUT", f"/inventory/{product_id}", json=item)

    def delete_item(self, product_id):
        return self._request("DELETE", f"/inventory/{product_id}")

    def add_inventory_stock(self, product_id, quantity):
        return self._request("POST", f"/inventory/{product_id}/add-stock", json={"quantity": quantity})

    def get_categories(self):
        return self._request("GET", "/categories") or []

    # --- Suppliers ---

    def get_suppliers(self):
        return self._request("GET", "/suppliers") or []

    def get_supplier_by_name(self, name):
        """Return the supplier with this name (case-insensitive), or None."""
        try:
            return self._request("GET", "/suppliers", params={"name": name})
        except ApiError as e:
            if e.status == 404:
                return None
            raise

    def create_supplier(self, supplier):
        return self._request("POST", "/suppliers", json=supplier)

    # --- Orders ---

    def create_order(self, order):
        return self._request("POST", "/orders", json=order)

    def add_order_details(self, order_id, items):
        return self._request("POST", "/order-detail", json={"order_id": order_id, "items": items})

    def get_order_details(self):
        return self._request("GET", "/order-detail") or []

    def get_pending_orders(self):
        return self._request("GET", "/orders/pending") or []

    def get_processing_orders(self):
        return self._request("GET", "/orders/processing") or []

    def get_delivered_orders(self):
        return self._request("GET", "/orders/delivered") or []

    def update_order_status(self, order_id, status):
        return self._request("PUT", f"/orders/{order_id}/status", json={"status": status})

    # --- Reports ---

    def get_report_summary(self):
        return self._request("GET", "/reports/summary")

    def get_monthly_top_products(self, year, month, limit=5):
        params = {"year": year, "month": month, "limit": limit}
        return self._request("GET", "/reports/monthly-top-products", params=params) or []
