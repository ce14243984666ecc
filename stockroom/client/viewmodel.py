"""Derived, display-ready views over lists fetched from the API.

Nothing here mutates the fetched lists; every function returns a new list.
"""
import locale

from stockroom.capabilities import has_capability, MANAGE_USERS
from stockroom.stock import stock_status, STOCK_STATUSES

DELIVERY_ALL = "all"
DELIVERY_DELIVERED = "delivered"
DELIVERY_PENDING = "pending"
DELIVERY_FILTERS = (DELIVERY_ALL, DELIVERY_DELIVERED, DELIVERY_PENDING)

SORT_BY_DATE = "date"
SORT_BY_TOTAL = "total"


def can(user, capability):
    """Capability check for a user dict as returned by the profile or login endpoints."""
    if not user:
        return False
    return has_capability(user.get("role"), capability)


def product_status(product):
    return stock_status(product.get("current_stock"), product.get("min_quantity"))


def name_sort_key(name):
    name = name or ""
    return locale.strxfrm(name.casefold()), name


class InventoryFilter:
    """Supplier and stock-status filters; an empty selection lets everything through."""

    def __init__(self, suppliers=(), statuses=()):
        self.suppliers = set(suppliers)
        self.statuses = set(statuses)

    @property
    def active_filter_count(self):
        return int(bool(self.suppliers)) + int(bool(self.statuses))

    def apply(self, suppliers=(), statuses=()):
        self.suppliers = set(suppliers)
        self.statuses = set(statuses)

    def clear(self):
        self.suppliers = set()
        self.statuses = set()

    def matches(self, product):
        supplier_match = not self.suppliers or product.get("supplier_name") in self.suppliers
        status_match = not self.statuses or product_status(product) in self.statuses
        return supplier_match and status_match

    def filter_items(self, products):
        if self.active_filter_count == 0:
            return list(products)
        return [p for p in products if self.matches(p)]

    @staticmethod
    def available_suppliers(products):
        return sorted({p.get("supplier_name") for p in products if p.get("supplier_name")})

    available_statuses = STOCK_STATUSES


def search_products(products, term):
    """Case-insensitive substring match on product name or supplier name."""
    term = (term or "").strip().lower()
    if not term:
        return list(products)
    return [
        p for p in products
        if term in (p.get("name") or "").lower() or term in (p.get("supplier_name") or "").lower()
    ]


def display_products(products, inventory_filter=None, search_term=""):
    """Filter, then search, then sort by product name."""
    items = inventory_filter.filter_items(products) if inventory_filter else list(products)
    items = search_products(items, search_term)
    return sorted(items, key=lambda p: name_sort_key(p.get("name")))


def delivery_state(order):
    return DELIVERY_DELIVERED if order.get("delivered_date") else DELIVERY_PENDING


class OrderHistoryView:
    """Filter and sort settings for the order history list."""

    def __init__(self, delivery=DELIVERY_ALL, names=(), sort_by=SORT_BY_DATE, descending=True):
        if delivery not in DELIVERY_FILTERS:
            raise ValueError(f"Unknown delivery filter: {delivery}")
        if sort_by not in (SORT_BY_DATE, SORT_BY_TOTAL):
            raise ValueError(f"Unknown sort key: {sort_by}")
        self.delivery = delivery
        self.names = set(names)
        self.sort_by = sort_by
        self.descending = descending

    def toggle_sort(self, sort_by):
        """Selecting the current key flips the direction; a new key starts descending."""
        if sort_by == self.sort_by:
            self.descending = not self.descending
        else:
            if sort_by not in (SORT_BY_DATE, SORT_BY_TOTAL):
                raise ValueError(f"Unknown sort key: {sort_by}")
            self.sort_by = sort_by
            self.descending = True

    def matches(self, order):
        if self.delivery != DELIVERY_ALL and delivery_state(order) != self.delivery:
            return False
        if not self.names:
            return True
        for line in order.get("details") or []:
            if line.get("product_name") in self.names or line.get("supplier_name") in self.names:
                return True
        return False

    def _sort_key(self, order):
        if self.sort_by == SORT_BY_TOTAL:
            return order.get("total_amount") or 0
        # ISO dates compare correctly as strings
        return order.get("order_date") or ""

    def apply(self, orders):
        matching = [o for o in orders if self.matches(o)]
        return sorted(matching, key=self._sort_key, reverse=self.descending)


class UserAdmin:
    """Admin user list. Role changes and deletes patch the loaded list in place."""

    def __init__(self, client, loader, current_user):
        if not can(current_user, MANAGE_USERS):
            raise PermissionError("Managing users requires the admin role")
        self.client = client
        self.loader = loader

    def change_role(self, user_id, role):
        def patch(users, updated):
            return [updated if u["id"] == user_id else u for u in users]
        return self.loader.apply_confirmed(lambda: self.client.update_user_role(user_id, role), patch)

    def delete_user(self, user_id):
        def patch(users, _):
            return [u for u in users if u["id"] != user_id]
        return self.loader.apply_confirmed(lambda: self.client.delete_user(user_id), patch)
