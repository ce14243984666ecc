from flask import jsonify, request


def error_response(message, status):
    return jsonify({"error": message}), status


def get_json_payload():
    """Return the request body as a dict, or None when it is missing or not an object."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return None
    return data
