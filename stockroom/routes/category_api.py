from flask import Blueprint, jsonify, current_app
from flask_login import login_required
from sqlalchemy.exc import SQLAlchemyError

from stockroom.extensions import db
from stockroom.auth import capability_required
from stockroom.capabilities import MANAGE_CATEGORIES
from stockroom.forms import CategoryForm, json_formdata, first_error
from stockroom.models.category import Category
from .utils import error_response, get_json_payload

category_bp = Blueprint("category_api", __name__)


@category_bp.route("", methods=["GET"])
@login_required
def get_categories():
    categories = Category.query.order_by(Category.name).all()
    return jsonify([c.to_dict() for c in categories])


@category_bp.route("", methods=["POST"])
@capability_required(MANAGE_CATEGORIES)
def add_category():
    form = CategoryForm(formdata=json_formdata(get_json_payload()))
    if not form.validate():
        return error_response(first_error(form), 400)

    name = form.name.data.strip()
    if Category.query.filter(db.func.lower(Category.name) == name.lower()).first():
        return error_response(f"Category '{name}' already exists.", 400)

    category = Category(name=name, description=form.description.data or None)
    try:
        db.session.add(category)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error adding category: {e}", exc_info=True)
        return error_response(str(e), 500)
    return jsonify(category.to_dict()), 201
