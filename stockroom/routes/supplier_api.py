from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user
from sqlalchemy.exc import SQLAlchemyError

from stockroom.extensions import db
from stockroom.auth import capability_required
from stockroom.capabilities import CREATE_SUPPLIERS
from stockroom.forms import SupplierForm, json_formdata, first_error
from stockroom.models.supplier import Supplier
from .utils import error_response, get_json_payload

supplier_bp = Blueprint("supplier_api", __name__)


@supplier_bp.route("", methods=["GET"])
@login_required
def get_suppliers():
    """Get all suppliers, or with ?name= the one matching that name regardless of case."""
    name = (request.args.get("name") or "").strip()
    try:
        if name:
            supplier = Supplier.find_by_name(name)
            if supplier is None:
                return error_response(f"Supplier '{name}' not found.", 404)
            return jsonify(supplier.to_dict())
        suppliers = Supplier.query.order_by(Supplier.name).all()
        return jsonify([s.to_dict() for s in suppliers])
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error fetching suppliers: {e}", exc_info=True)
        return error_response(str(e), 500)


@supplier_bp.route("", methods=["POST"])
@capability_required(CREATE_SUPPLIERS)
def add_supplier():
    """Add a new supplier. Names are unique regardless of case."""
    form = SupplierForm(formdata=json_formdata(get_json_payload()))
    if not form.validate():
        return error_response(first_error(form), 400)

    name = form.name.data.strip()
    if Supplier.find_by_name(name):
        return error_response(f"Supplier '{name}' already exists.", 400)

    supplier = Supplier(
        name=name,
        contact=form.contact.data.strip(),
        email=form.email.data.strip(),
        address=form.address.data.strip(),
    )
    try:
        db.session.add(supplier)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error adding supplier: {e}", exc_info=True)
        return error_response(str(e), 500)

    current_app.logger.info(f"Supplier {supplier.name} added by {current_user.username}")
    return jsonify(supplier.to_dict()), 201
