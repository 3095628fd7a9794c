"""HTTP blueprints. Every API route lives under /api and speaks JSON."""
from flask import request, jsonify

from cafepos.exceptions import ValidationError


def json_body(required=True):
    """Parsed JSON object of the current request."""
    data = request.get_json(silent=True)
    if data is None:
        if required:
            raise ValidationError('Request body must be a JSON object')
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def success(**extra):
    return jsonify({'success': True, **extra})
