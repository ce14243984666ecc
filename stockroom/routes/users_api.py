from flask import Blueprint, jsonify, current_app
from flask_login import login_required, current_user
from sqlalchemy.exc import SQLAlchemyError

from stockroom.extensions import db
from stockroom.auth import capability_required
from stockroom.capabilities import MANAGE_USERS, ROLE_ADMIN
from stockroom.forms import RoleForm, json_formdata, first_error
from stockroom.models.user import User
from stockroom.models.order import Order
from stockroom.models.product import Product
from .utils import error_response, get_json_payload

users_bp = Blueprint("users_api", __name__)


def _get_active_user(user_id):
    user = db.session.get(User, user_id)
    if user is None or not user.is_active:
        return None
    return user


@users_bp.route("/profile", methods=["GET"])
@login_required
def profile():
    return jsonify(current_user.to_dict())


@users_bp.route("", methods=["GET"])
@capability_required(MANAGE_USERS)
def list_users():
    """List every active user."""
    users = User.query.filter_by(is_active=True).order_by(User.username).all()
    return jsonify([u.to_dict() for u in users])


@users_bp.route("/<int:user_id>/role", methods=["PUT"])
@capability_required(MANAGE_USERS)
def set_user_role(user_id):
    form = RoleForm(formdata=json_formdata(get_json_payload()))
    if not form.validate():
        return error_response(first_error(form), 400)

    user = _get_active_user(user_id)
    if user is None:
        return error_response("User not found", 404)
    if user.id == current_user.id and form.role.data != ROLE_ADMIN:
        return error_response("Admins cannot change their own role from Admin.", 400)

    try:
        user.role = form.role.data
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error updating role for user {user_id}: {e}", exc_info=True)
        return error_response("Failed to update user role", 500)

    current_app.logger.info(f"User {user.username} role set to {user.role} by {current_user.username}")
    return jsonify(user.to_dict())


@users_bp.route("/<int:user_id>", methods=["DELETE"])
@capability_required(MANAGE_USERS)
def delete_user(user_id):
    """Deactivate a user and detach them from the orders and products they created."""
    user = _get_active_user(user_id)
    if user is None:
        return error_response("User not found", 404)
    if user.id == current_user.id:
        return error_response("Admins cannot delete their own account.", 400)

    try:
        Order.query.filter_by(user_id=user.id).update({"user_id": None})
        Product.query.filter_by(user_id=user.id).update({"user_id": None})
        user.is_active = False
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error deleting user {user_id}: {e}", exc_info=True)
        return error_response(str(e), 500)

    current_app.logger.info(f"User {user.username} deleted by {current_user.username}")
    return "", 204
