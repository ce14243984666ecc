from datetime import datetime, timedelta, timezone
from functools import wraps

import jwt
from flask import current_app, jsonify, request
from flask_login import current_user

from stockroom.extensions import db, login_manager
from stockroom.models.user import User


def issue_token(user):
    """Sign a bearer token for ``user`` that expires after JWT_EXPIRES_HOURS."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user.id),
        "iat": now,
        "exp": now + timedelta(hours=current_app.config["JWT_EXPIRES_HOURS"]),
    }
    return jwt.encode(payload, current_app.config["JWT_SECRET"], algorithm="HS256")


def decode_token(token):
    """Return the user id carried by ``token`` or None if it is invalid or expired."""
    try:
        payload = jwt.decode(token, current_app.config["JWT_SECRET"], algorithms=["HS256"])
    except jwt.InvalidTokenError as e:
        current_app.logger.info(f"Rejected bearer token: {e}")
        return None
    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        return None
    return int(subject)


def _bearer_token():
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


@login_manager.request_loader
def load_user_from_request(req):
    token = _bearer_token()
    if token is None:
        return None
    user_id = decode_token(token)
    if user_id is None:
        return None
    user = db.session.get(User, user_id)
    if user is None or not user.is_active:
        return None
    return user


@login_manager.unauthorized_handler
def unauthorized():
    if _bearer_token() is None:
        return jsonify({"error": "Access denied. No token provided."}), 401
    return jsonify({"error": "Invalid token"}), 401


def capability_required(capability):
    """Allow the view only for authenticated users whose role grants ``capability``."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                return login_manager.unauthorized()
            if not current_user.can(capability):
                return jsonify({"error": "Access denied. Insufficient permissions."}), 403
            return f(*args, **kwargs)
        return decorated_function
    return decorator
