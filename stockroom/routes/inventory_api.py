from flask import Blueprint, jsonify, current_app
from flask_login import login_required, current_user
from sqlalchemy.exc import SQLAlchemyError

from stockroom.extensions import db
from stockroom.auth import capability_required
from stockroom.capabilities import MANAGE_INVENTORY
from stockroom.forms import ProductForm, ProductUpdateForm, AddStockForm, json_formdata, first_error
from stockroom.models.category import Category
from stockroom.models.order import Order, OrderDetail, ORDER_DELIVERED
from stockroom.models.product import Product
from stockroom.models.supplier import Supplier
from stockroom.reports import latest_unit_costs, load_price_lines
from .utils import error_response, get_json_payload

inventory_bp = Blueprint("inventory_api", __name__)

PRODUCT_FIELDS = (
    "name", "current_stock", "min_quantity", "max_quantity", "case_quantity", "case_price",
    "order_unit", "expiration", "category_id", "supplier_id", "is_active",
)
# Columns that a null or blank value leaves untouched
REQUIRED_PRODUCT_FIELDS = ("name", "current_stock", "min_quantity", "is_active")


def _serialize_products(products):
    """Serialize products along with the unit price of their latest delivery."""
    costs = latest_unit_costs(load_price_lines([p.id for p in products]))
    return [p.to_dict(latest_unit_price=costs.get(p.id)) for p in products]


def _active_products():
    return (
        Product.query.options(db.joinedload(Product.supplier))
        .filter(Product.is_active.is_(True))
        .order_by(Product.name)
        .all()
    )


def _apply_fields(product, form, data):
    """Copy the fields present in the JSON body onto the product; return how many were set."""
    applied = 0
    for field in PRODUCT_FIELDS:
        if field not in data:
            continue
        value = getattr(form, field).data
        if field in REQUIRED_PRODUCT_FIELDS and value in (None, ""):
            continue
        setattr(product, field, value)
        applied += 1
    return applied


def _check_references(form):
    """Return an error response when the form points at a missing supplier or category."""
    if form.supplier_id.data is not None and db.session.get(Supplier, form.supplier_id.data) is None:
        return error_response(f"Supplier with ID {form.supplier_id.data} not found.", 404)
    if form.category_id.data is not None and db.session.get(Category, form.category_id.data) is None:
        return error_response(f"Category with ID {form.category_id.data} not found.", 404)
    return None


@inventory_bp.route("", methods=["GET"])
@login_required
def get_inventory():
    """Get all active products with supplier, stock status and latest delivered price."""
    try:
        return jsonify(_serialize_products(_active_products()))
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error fetching inventory: {e}", exc_info=True)
        return error_response(str(e), 500)


@inventory_bp.route("/restock", methods=["GET"])
@login_required
def get_restock_recommendations():
    """Get active products whose stock is below their minimum quantity."""
    try:
        products = [p for p in _active_products() if p.needs_restock]
        return jsonify(_serialize_products(products))
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error fetching restock recommendations: {e}", exc_info=True)
        return error_response(str(e), 500)


@inventory_bp.route("", methods=["POST"])
@capability_required(MANAGE_INVENTORY)
def add_product():
    data = get_json_payload() or {}
    form = ProductForm(formdata=json_formdata(data))
    if not form.validate():
        return error_response(first_error(form), 400)
    missing = _check_references(form)
    if missing:
        return missing

    product = Product(user_id=current_user.id)
    _apply_fields(product, form, data)
    try:
        db.session.add(product)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error adding product: {e}", exc_info=True)
        return error_response(str(e), 500)

    current_app.logger.info(f"Product {product.name} added by {current_user.username}")
    return jsonify(product.to_dict()), 201


@inventory_bp.route("/<int:product_id>", methods=["PUT"])
@capability_required(MANAGE_INVENTORY)
def update_product(product_id):
    product = db.session.get(Product, product_id)
    if product is None:
        return error_response("Product not found", 404)

    data = get_json_payload()
    if not data:
        return error_response("No data provided for update", 400)
    form = ProductUpdateForm(formdata=json_formdata(data))
    if not form.validate():
        return error_response(first_error(form), 400)
    missing = _check_references(form)
    if missing:
        return missing

    if not _apply_fields(product, form, data):
        return error_response("No valid fields provided for update", 400)
    # max >= min must hold for the stored pair, not just the request body
    if (product.max_quantity is not None and product.min_quantity is not None
            and product.max_quantity < product.min_quantity):
        db.session.rollback()
        return error_response("Maximum quantity cannot be below the minimum quantity.", 400)

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error updating product {product_id}: {e}", exc_info=True)
        return error_response(str(e), 500)
    return jsonify(_serialize_products([product])[0])


@inventory_bp.route("/<int:product_id>", methods=["DELETE"])
@capability_required(MANAGE_INVENTORY)
def delete_product(product_id):
    """Archive a product. Products on an order that is not yet delivered are kept."""
    product = db.session.get(Product, product_id)
    if product is None or not product.is_active:
        return error_response("Product not found", 404)

    open_lines = (
        OrderDetail.query.join(Order, OrderDetail.order_id == Order.id)
        .filter(OrderDetail.product_id == product_id, Order.status != ORDER_DELIVERED)
        .count()
    )
    if open_lines:
        return error_response("Cannot delete product with active or pending orders.", 400)

    try:
        product.is_active = False
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error deleting product {product_id}: {e}", exc_info=True)
        return error_response(str(e), 500)

    current_app.logger.info(f"Product {product.name} archived by {current_user.username}")
    return jsonify({"message": "Product archived successfully"})


@inventory_bp.route("/<int:product_id>/add-stock", methods=["POST"])
@capability_required(MANAGE_INVENTORY)
def add_stock(product_id):
    form = AddStockForm(formdata=json_formdata(get_json_payload()))
    if not form.validate():
        return error_response(first_error(form), 400)

    product = db.session.get(Product, product_id)
    if product is None:
        return error_response("Product not found", 404)

    try:
        product.current_stock = (product.current_stock or 0) + form.quantity.data
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error adjusting stock for product {product_id}: {e}", exc_info=True)
        return error_response(str(e), 500)
    return jsonify(product.to_dict())
