from datetime import datetime, date
from flask import current_app, jsonify
from bson import ObjectId
from marshmallow import ValidationError

from app.context import get_context
from app.utils.errors import RecordNotFound, ValidationFailed


def app_context():
    """The AppContext of the running Flask app"""
    return get_context(current_app)


def json_ready(value):
    """Recursively convert ObjectIds and dates into JSON-friendly strings"""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: json_ready(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [json_ready(item) for item in value]
    return value


def error_response(error):
    """Map service and schema errors to JSON error responses"""
    if isinstance(error, ValidationError):
        return jsonify({'error': 'Validation error', 'details': error.messages}), 400
    if isinstance(error, ValidationFailed):
        return jsonify({'error': error.message, 'details': json_ready(error.details)}), 400
    if isinstance(error, RecordNotFound):
        return jsonify({'error': error.message}), 404

    current_app.logger.error(f"Unhandled error: {str(error)}")
    return jsonify({'error': 'Internal server error'}), 500
