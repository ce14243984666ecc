import logging

logger = logging.getLogger(__name__)


class CartError(ValueError):
    pass


def _as_number(value, cast):
    try:
        return cast(value)
    except (TypeError, ValueError):
        return None


def order_line_from_product(product):
    """Build a cart line for a product, defaulting the quantity to what is needed to reach its minimum."""
    current = _as_number(product.get("current_stock"), int)
    minimum = _as_number(product.get("min_quantity"), int)
    if current is None or minimum is None:
        requested = 0
    else:
        requested = minimum - current

    unit_price = _as_number(product.get("case_price"), float)
    return {
        "product_id": product["id"],
        "product_name": product.get("name"),
        "requested_quantity": requested,
        "unit_price": unit_price if unit_price is not None else 0.0,
        "order_unit": product.get("order_unit"),
        "supplier_id": product.get("supplier_id"),
        "supplier_name": product.get("supplier_name"),
    }


class OrderCart:
    """Products picked for ordering, keyed by product id. The first add of a product wins."""

    def __init__(self):
        self._lines = {}

    def __len__(self):
        return len(self._lines)

    def __contains__(self, product_id):
        return product_id in self._lines

    def add(self, product):
        if product["id"] in self._lines:
            return False
        self._lines[product["id"]] = order_line_from_product(product)
        return True

    def remove(self, product_id):
        self._lines.pop(product_id, None)

    def clear(self):
        self._lines.clear()

    def set_quantity(self, product_id, quantity):
        if product_id not in self._lines:
            raise KeyError(product_id)
        self._lines[product_id]["requested_quantity"] = quantity

    def items(self):
        return list(self._lines.values())

    def grouped_by_supplier(self):
        groups = {}
        for line in self._lines.values():
            groups.setdefault(line["supplier_id"], []).append(line)
        return groups

    def total(self):
        return sum((line["requested_quantity"] or 0) * (line["unit_price"] or 0) for line in self._lines.values())

    def submit(self, client):
        """Place one order per supplier and drop the submitted lines from the cart.

        Nothing is sent when a line has no supplier. If a later order fails the
        lines of the orders already placed are removed before the error propagates.
        """
        if not self._lines:
            raise CartError("Cart is empty")
        missing = [line["product_name"] for line in self._lines.values() if not line["supplier_id"]]
        if missing:
            raise CartError(f"No supplier for: {', '.join(str(name) for name in missing)}")

        placed = []
        for supplier_id, lines in self.grouped_by_supplier().items():
            items = [
                {
                    "product_id": line["product_id"],
                    "supplier_id": supplier_id,
                    "requested_quantity": line["requested_quantity"],
                    "unit_price": line["unit_price"],
                    "order_unit": line["order_unit"],
                }
                for line in lines
            ]
            order = client.create_order({"supplier_id": supplier_id, "items": items})
            placed.append(order)
            for line in lines:
                self._lines.pop(line["product_id"], None)
            logger.info(f"Placed order {order.get('id') if order else None} for supplier {supplier_id}")
        return placed
