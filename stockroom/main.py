# Flask App Initializations
import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from stockroom.config import Config
from stockroom.extensions import db, bcrypt, login_manager, migrate


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    app.logger.setLevel(app.config["LOG_LEVEL"])

    db.init_app(app)
    bcrypt.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db)

    # Ensure all models are imported so relationships and migrations see them
    from stockroom import models  # noqa: F401
    # Registers the bearer token loader on login_manager
    from stockroom import auth  # noqa: F401

    from .routes.api_routes import api_bp
    from .routes.auth_api import auth_bp
    from .routes.users_api import users_bp
    from .routes.inventory_api import inventory_bp
    from .routes.category_api import category_bp
    from .routes.supplier_api import supplier_bp
    from .routes.order_processing_api import orders_bp, order_detail_bp
    from .routes.reports_api import reports_bp

    app.register_blueprint(api_bp, url_prefix="/api")
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(users_bp, url_prefix="/api/users")
    app.register_blueprint(inventory_bp, url_prefix="/api/inventory")
    app.register_blueprint(category_bp, url_prefix="/api/categories")
    app.register_blueprint(supplier_bp, url_prefix="/api/suppliers")
    app.register_blueprint(orders_bp, url_prefix="/api/orders")
    app.register_blueprint(order_detail_bp, url_prefix="/api/order-detail")
    app.register_blueprint(reports_bp, url_prefix="/api/reports")

    @app.errorhandler(HTTPException)
    def http_error_handler(e):
        return jsonify({"error": e.description}), e.code

    @app.errorhandler(500)
    def internal_server_error_handler(e):
        original = getattr(e, "original_exception", None) or e
        app.logger.error(f"Internal Server Error: {original}", exc_info=original)
        return jsonify({"error": "An internal server error occurred", "details": str(original)}), 500

    app.logger.info(f"Database configured: {app.config['SQLALCHEMY_DATABASE_URI'].split(':', 1)[0]}")
    return app


if __name__ == "__main__":
    app = create_app()
    app.run(debug=True, host="0.0.0.0")
