from flask import Blueprint, jsonify, request, current_app
from sqlalchemy.exc import SQLAlchemyError

from stockroom.extensions import db
from stockroom.auth import capability_required
from stockroom.capabilities import VIEW_REPORTS
from stockroom.reports import build_summary, monthly_top_products, parse_month_query, ReportParameterError
from .utils import error_response

reports_bp = Blueprint("reports_api", __name__)


@reports_bp.route("/summary", methods=["GET"])
@capability_required(VIEW_REPORTS)
def get_summary():
    """Delivered totals, top products and the estimated inventory value."""
    try:
        summary = build_summary()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error fetching report summary: {e}", exc_info=True)
        return jsonify({"error": "Failed to generate report summary.", "details": str(e)}), 500
    return jsonify(summary)


@reports_bp.route("/monthly-top-products", methods=["GET"])
@capability_required(VIEW_REPORTS)
def get_monthly_top_products():
    """Top products by order-line count for ?year=&month= with an optional &limit=."""
    try:
        year, month, limit = parse_month_query(
            request.args.get("year"), request.args.get("month"), request.args.get("limit")
        )
    except ReportParameterError as e:
        return error_response(str(e), 400)

    try:
        return jsonify(monthly_top_products(year, month, limit))
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error fetching monthly top products for {year}-{month}: {e}", exc_info=True)
        return jsonify({"error": "Failed to generate monthly top products report.", "details": str(e)}), 500
