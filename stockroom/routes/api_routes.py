from flask import Blueprint, jsonify

api_bp = Blueprint("api", __name__)


# A simple health check endpoint for the API
@api_bp.route("/health", methods=["GET"])
def health_check():
    return jsonify({"status": "API is healthy"}), 200
