"""
JSON envelope helpers shared by the API views.

Success bodies are ``{"data": ...}`` (plus ``meta`` where useful); failures
are ``{"error": {"code": ..., "message": ...}}``.
"""

import json
import logging
from functools import wraps

from django.http import JsonResponse

from .exceptions import BoardsError

logger = logging.getLogger(__name__)


class InvalidPayload(BoardsError):
    code = 'INVALID_JSON'
    status = 400
    default_message = 'Request body must be a JSON object.'


def error_response(code, message, status, **extra):
    body = {'error': {'code': code, 'message': message}}
    body['error'].update(extra)
    return JsonResponse(body, status=status)


def validation_error(form):
    return error_response('VALIDATION_ERROR', 'Invalid input.', 400, fields=form.errors.get_json_data())


def parse_json_body(request):
    """Decode the request body into a dict; an empty body is an empty dict."""
    if not request.body:
        return {}
    try:
        payload = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise InvalidPayload()
    if not isinstance(payload, dict):
        raise InvalidPayload()
    return payload


def to_form_data(payload, field_map):
    """Rename camelCase API keys to form field names, keeping only known keys."""
    return {field: payload[key] for key, field in field_map.items() if key in payload}


def handles_board_errors(view_func):
    """Render BoardsError subclasses raised by a view as the JSON error envelope."""
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except BoardsError as e:
            return error_response(e.code, e.message, e.status)
        except Exception:
            logger.error(f"Unhandled error in {view_func.__name__} ({request.method} {request.path})", exc_info=True)
            raise
    return wrapper
