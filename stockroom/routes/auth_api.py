from flask import Blueprint, jsonify, current_app
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from stockroom.extensions import db
from stockroom.auth import issue_token
from stockroom.capabilities import ROLE_ADMIN, ROLE_USER
from stockroom.forms import RegistrationForm, LoginForm, json_formdata, first_error
from stockroom.models.user import User
from .utils import error_response, get_json_payload

auth_bp = Blueprint("auth_api", __name__)


@auth_bp.route("/register", methods=["POST"])
def register():
    """Create a user account and return a bearer token for it."""
    form = RegistrationForm(formdata=json_formdata(get_json_payload()))
    if not form.validate():
        return error_response(first_error(form), 400)

    email = form.email.data.strip().lower()
    username = form.username.data.strip()
    existing = User.query.filter(or_(User.email == email, User.username == username)).first()
    if existing:
        return error_response("User with this email or username already exists", 400)

    # The first account bootstraps the system as its administrator
    is_first_user = User.query.count() == 0
    user = User(username=username, email=email, role=ROLE_ADMIN if is_first_user else ROLE_USER)
    user.set_password(form.password.data)
    try:
        db.session.add(user)
        db.session.commit()
    except IntegrityError as ie:
        db.session.rollback()
        current_app.logger.error(f"IntegrityError during registration: {ie}")
        return error_response("User with this email or username already exists", 400)
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Unexpected error during registration: {e}", exc_info=True)
        return error_response("Failed to create user", 500)

    current_app.logger.info(f"Registered user {user.username} as {user.role}")
    return jsonify({"token": issue_token(user), "user": user.to_dict()}), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    form = LoginForm(formdata=json_formdata(get_json_payload()))
    if not form.validate():
        return error_response(first_error(form), 400)

    user = User.query.filter_by(email=form.email.data.strip().lower()).first()
    if not user or not user.is_active or not user.check_password(form.password.data):
        return error_response("Invalid credentials", 400)

    return jsonify({"token": issue_token(user), "user": user.to_dict()})
