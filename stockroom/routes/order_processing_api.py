from datetime import date

from flask import Blueprint, jsonify, current_app
from flask_login import login_required, current_user
from sqlalchemy.exc import SQLAlchemyError

from stockroom.extensions import db
from stockroom.auth import capability_required
from stockroom.capabilities import PLACE_ORDERS, RECEIVE_ORDERS
from stockroom.forms import OrderForm, OrderItemForm, OrderStatusForm, json_formdata, first_error
from stockroom.models.order import (
    Order, OrderDetail, ORDER_PENDING, ORDER_PROCESSING, ORDER_DELIVERED,
)
from stockroom.models.product import Product
from stockroom.models.supplier import Supplier
from .utils import error_response, get_json_payload

orders_bp = Blueprint("orders_api", __name__)
order_detail_bp = Blueprint("order_detail_api", __name__)


def _build_lines(items, default_supplier_id):
    """Validate raw JSON items and turn them into unsaved OrderDetail rows.

    Returns ``(lines, None)`` on success or ``(None, error_response)``.
    """
    if not isinstance(items, list) or not items:
        return None, error_response("Missing or invalid order items", 400)

    lines = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            return None, error_response(f"Item {index} must be an object", 400)
        form = OrderItemForm(formdata=json_formdata(item))
        if not form.validate():
            return None, error_response(f"Item {index}: {first_error(form)}", 400)

        product = db.session.get(Product, form.product_id.data)
        if product is None or not product.is_active:
            return None, error_response(f"Product with ID {form.product_id.data} not found.", 404)
        supplier_id = form.supplier_id.data or default_supplier_id
        if db.session.get(Supplier, supplier_id) is None:
            return None, error_response(f"Supplier with ID {supplier_id} not found.", 404)

        lines.append(OrderDetail(
            product_id=product.id,
            supplier_id=supplier_id,
            requested_quantity=form.requested_quantity.data,
            unit_price=form.unit_price.data,
            order_unit=form.order_unit.data or product.order_unit,
        ))
    return lines, None


def _orders_with_status(status, newest_first_by=None):
    query = Order.query.options(
        db.joinedload(Order.details).joinedload(OrderDetail.product),
        db.joinedload(Order.supplier),
    ).filter(Order.status == status)
    order_column = newest_first_by if newest_first_by is not None else Order.id
    return query.order_by(order_column.desc(), Order.id.desc()).all()


@orders_bp.route("", methods=["POST"])
@capability_required(PLACE_ORDERS)
def create_order():
    """Create an order and its lines in one transaction.

    The total is computed from the lines, so it always equals the sum of
    requested quantity times unit price.
    """
    data = get_json_payload()
    if data is None:
        return error_response("No order data provided", 400)
    form = OrderForm(formdata=json_formdata(data))
    if not form.validate():
        return error_response(first_error(form), 400)
    if db.session.get(Supplier, form.supplier_id.data) is None:
        return error_response(f"Supplier with ID {form.supplier_id.data} not found.", 404)

    lines, problem = _build_lines(data.get("items"), form.supplier_id.data)
    if problem:
        return problem

    order = Order(
        supplier_id=form.supplier_id.data,
        user_id=current_user.id,
        order_date=form.order_date.data or date.today(),
        status=ORDER_PENDING,
        details=lines,
    )
    order.recompute_total()
    try:
        db.session.add(order)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error placing order: {e}", exc_info=True)
        return error_response(str(e), 500)

    current_app.logger.info(
        f"Order {order.id} placed by {current_user.username} with {len(lines)} lines, total {order.total_amount}"
    )
    return jsonify(order.to_dict(include_details=True)), 201


@orders_bp.route("/pending", methods=["GET"])
@login_required
def get_pending_orders():
    """Orders that have not started processing yet, newest first."""
    return jsonify([o.to_dict(include_details=True) for o in _orders_with_status(ORDER_PENDING)])


@orders_bp.route("/processing", methods=["GET"])
@login_required
def get_processing_orders():
    return jsonify([o.to_dict(include_details=True) for o in _orders_with_status(ORDER_PROCESSING)])


@orders_bp.route("/delivered", methods=["GET"])
@login_required
def get_delivered_orders():
    """Delivered orders, most recently delivered first."""
    orders = _orders_with_status(ORDER_DELIVERED, newest_first_by=Order.delivered_date)
    return jsonify([o.to_dict(include_details=True) for o in orders])


@orders_bp.route("/<int:order_id>/status", methods=["PUT"])
@capability_required(RECEIVE_ORDERS)
def update_order_status(order_id):
    """Move an order along pending -> processing -> delivered.

    Delivering an order receives every line in full and adds it to stock.
    """
    order = db.session.get(Order, order_id)
    if order is None:
        return error_response("Order not found", 404)

    form = OrderStatusForm(formdata=json_formdata(get_json_payload()))
    if not form.validate():
        return error_response(first_error(form), 400)
    new_status = form.status.data
    if not order.can_move_to(new_status):
        return error_response(f"Cannot change order status from {order.status} to {new_status}.", 400)

    try:
        order.status = new_status
        if new_status == ORDER_DELIVERED:
            today = date.today()
            order.delivered_date = today
            for line in order.details:
                if line.received_quantity is None:
                    line.received_quantity = line.requested_quantity
                line.received_date = today
                if line.product is not None:
                    line.product.current_stock = (line.product.current_stock or 0) + line.received_quantity
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error updating status for order {order_id}: {e}", exc_info=True)
        return error_response(str(e), 500)

    current_app.logger.info(f"Order {order.id} moved to {order.status} by {current_user.username}")
    return jsonify(order.to_dict(include_details=True))


# --- Order lines ---

@order_detail_bp.route("", methods=["GET"])
@login_required
def get_order_details():
    """Every order line with product and supplier names, newest order first."""
    try:
        lines = (
            OrderDetail.query.options(
                db.joinedload(OrderDetail.product),
                db.joinedload(OrderDetail.supplier),
            )
            .order_by(OrderDetail.order_id.desc(), OrderDetail.id)
            .all()
        )
        return jsonify([line.to_dict() for line in lines])
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error fetching order details: {e}", exc_info=True)
        return error_response(str(e), 500)


@order_detail_bp.route("", methods=["POST"])
@capability_required(PLACE_ORDERS)
def add_order_details():
    """Append lines to an order that has not been delivered, keeping its total in step."""
    data = get_json_payload()
    if data is None or data.get("order_id") is None:
        return error_response("Missing or invalid order_id/items", 400)
    try:
        order_id = int(data["order_id"])
    except (TypeError, ValueError):
        return error_response("Missing or invalid order_id/items", 400)

    order = db.session.get(Order, order_id)
    if order is None:
        return error_response("Order not found", 404)
    if order.status == ORDER_DELIVERED:
        return error_response("Cannot add lines to a delivered order.", 400)

    lines, problem = _build_lines(data.get("items"), order.supplier_id)
    if problem:
        return problem

    try:
        order.details.extend(lines)
        order.recompute_total()
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error inserting order details: {e}", exc_info=True)
        return error_response(str(e), 500)
    return jsonify([line.to_dict() for line in lines]), 201
