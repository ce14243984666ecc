"""Order reporting: product rankings and inventory valuation.

The aggregation functions work on plain mappings (one per order line) so they
can be fed straight from labelled query rows, and the query helpers at the
bottom of the module load those rows from the database.
"""
import logging
import re
from datetime import date

from stockroom.extensions import db
from stockroom.models.order import Order, OrderDetail, ORDER_DELIVERED
from stockroom.models.product import Product

logger = logging.getLogger(__name__)

DEFAULT_TOP_LIMIT = 5
MIN_REPORT_YEAR = 2000
LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class ReportParameterError(ValueError):
    """Raised when a report is requested with an invalid year, month or limit."""


def _group_lines(lines):
    groups = {}
    for line in lines:
        product_id = line.get("product_id")
        product_name = line.get("product_name")
        if product_id is None or product_name is None:
            logger.warning("Skipping order line with missing product data: %r", line)
            continue
        quantity = line.get("requested_quantity") or 0
        unit_price = line.get("unit_price") or 0
        group = groups.get(product_id)
        if group is None:
            group = groups[product_id] = {
                "id": product_id,
                "name": product_name,
                "count": 0,
                "total_quantity": 0,
                "total_value": 0,
            }
        group["count"] += 1
        group["total_quantity"] += quantity
        group["total_value"] += quantity * unit_price
    return list(groups.values())


def _rank(lines, metric, limit):
    # sorted() is stable, so ties keep the order products were first seen in
    ranked = sorted(_group_lines(lines), key=lambda group: group[metric], reverse=True)
    return [{"id": g["id"], "name": g["name"], metric: g[metric]} for g in ranked[:limit]]


def top_by_frequency(lines, limit=DEFAULT_TOP_LIMIT):
    """Products ranked by how many order lines reference them."""
    return _rank(lines, "count", limit)


def top_by_quantity(lines, limit=DEFAULT_TOP_LIMIT):
    """Products ranked by total requested quantity."""
    return _rank(lines, "total_quantity", limit)


def top_by_value(lines, limit=DEFAULT_TOP_LIMIT):
    """Products ranked by total requested quantity times unit price."""
    return _rank(lines, "total_value", limit)


def latest_unit_costs(price_lines):
    """Map each product id to the unit price of its most recently delivered line.

    Lines without a delivered date sort as the oldest.
    """
    ordered = sorted(
        price_lines,
        key=lambda line: line.get("delivered_date") or date.min,
        reverse=True,
    )
    costs = {}
    for line in ordered:
        product_id = line.get("product_id")
        if product_id is not None and product_id not in costs:
            costs[product_id] = line.get("unit_price") or 0
    return costs


def estimated_inventory_value(products, price_lines):
    """Value stock on hand at each product's latest delivered unit price.

    ``products`` are mappings with ``id`` and ``current_stock``; a product with
    no delivered history contributes 0.
    """
    costs = latest_unit_costs(price_lines)
    total = 0
    for product in products:
        stock = product.get("current_stock") or 0
        total += stock * costs.get(product.get("id"), 0)
    return total


def _leading_int(value):
    """Read the integer a query value starts with, so "2.5" gives 2; None when there is none."""
    if isinstance(value, int):
        return value
    match = LEADING_INT.match(str(value)) if value is not None else None
    return int(match.group(1)) if match else None


def parse_month_query(year, month, limit=None, today=None):
    """Validate the raw monthly report parameters and return them as integers."""
    today = today or date.today()
    year = _leading_int(year)
    if year is None:
        raise ReportParameterError("Invalid or missing 'year' parameter.")
    if year < MIN_REPORT_YEAR or year > today.year + 1:
        raise ReportParameterError("Invalid or missing 'year' parameter.")

    month = _leading_int(month)
    if month is None:
        raise ReportParameterError("Invalid or missing 'month' parameter (1-12).")
    if month < 1 or month > 12:
        raise ReportParameterError("Invalid or missing 'month' parameter (1-12).")

    if limit is None or limit == "":
        limit = DEFAULT_TOP_LIMIT
    limit = _leading_int(limit)
    if limit is None or limit <= 0:
        raise ReportParameterError("Invalid 'limit' parameter.")

    return year, month, limit


def month_bounds(year, month):
    """Return the half-open range [first day of month, first day of next month)."""
    start = date(year, month, 1)
    if month == 12:
        end = date(year + 1, 1, 1)
    else:
        end = date(year, month + 1, 1)
    return start, end


# --- Queries ---

def _line_query():
    return (
        db.session.query(
            OrderDetail.product_id.label("product_id"),
            Product.name.label("product_name"),
            OrderDetail.requested_quantity.label("requested_quantity"),
            OrderDetail.unit_price.label("unit_price"),
            Order.order_date.label("order_date"),
            Order.delivered_date.label("delivered_date"),
        )
        .join(Order, OrderDetail.order_id == Order.id)
        .outerjoin(Product, OrderDetail.product_id == Product.id)
    )


def load_delivered_lines():
    rows = _line_query().filter(Order.status == ORDER_DELIVERED).all()
    return [dict(r._mapping) for r in rows]


def load_lines_between(start, end):
    rows = (
        _line_query()
        .filter(Order.order_date >= start, Order.order_date < end)
        .order_by(OrderDetail.id)
        .all()
    )
    return [dict(r._mapping) for r in rows]


def load_price_lines(product_ids=None):
    """Delivered lines carrying a delivered date, optionally for some products only."""
    query = (
        db.session.query(
            OrderDetail.product_id.label("product_id"),
            OrderDetail.unit_price.label("unit_price"),
            Order.delivered_date.label("delivered_date"),
        )
        .join(Order, OrderDetail.order_id == Order.id)
        .filter(Order.status == ORDER_DELIVERED, Order.delivered_date.isnot(None))
    )
    if product_ids is not None:
        if not product_ids:
            return []
        query = query.filter(OrderDetail.product_id.in_(product_ids))
    return [dict(r._mapping) for r in query.all()]


def load_stocked_products():
    rows = (
        db.session.query(Product.id.label("id"), Product.current_stock.label("current_stock"))
        .filter(Product.is_active.is_(True), Product.current_stock > 0)
        .all()
    )
    return [dict(r._mapping) for r in rows]


def build_summary():
    """Compute the dashboard summary. Any query failure propagates to the caller."""
    delivered_count = (
        db.session.query(db.func.count(Order.id)).filter(Order.status == ORDER_DELIVERED).scalar()
    )
    delivered_value = (
        db.session.query(db.func.sum(Order.total_amount)).filter(Order.status == ORDER_DELIVERED).scalar()
    )
    active_products = (
        db.session.query(db.func.count(Product.id)).filter(Product.is_active.is_(True)).scalar()
    )

    lines = load_delivered_lines()

    stocked = load_stocked_products()
    price_lines = load_price_lines([p["id"] for p in stocked])

    return {
        "total_delivered_orders": delivered_count or 0,
        "total_delivered_value": delivered_value or 0,
        "total_active_products": active_products or 0,
        "estimated_inventory_value": estimated_inventory_value(stocked, price_lines),
        "top_products_by_frequency": top_by_frequency(lines),
        "top_products_by_quantity": top_by_quantity(lines),
        "top_products_by_value": top_by_value(lines),
    }


def monthly_top_products(year, month, limit=DEFAULT_TOP_LIMIT):
    start, end = month_bounds(year, month)
    logger.info("Querying top products for range >= %s and < %s", start, end)
    return top_by_frequency(load_lines_between(start, end), limit)
