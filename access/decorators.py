import logging
from functools import wraps

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt

from .services import ApiKeyService, extract_key

logger = logging.getLogger(__name__)


def auth_error(code, message, status):
    return JsonResponse({'error': {'code': code, 'message': message}}, status=status)


def api_key_required(*scopes):
    """
    Decorator to require a valid API key holding every scope in ``scopes``.

    On success the view sees ``request.api_user`` and ``request.api_key``.
    """
    required_scopes = scopes or ('read',)

    def decorator(view_func):
        @csrf_exempt
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            raw_key = extract_key(request)
            if not raw_key:
                return auth_error(
                    'MISSING_API_KEY',
                    'API key required. Provide via Authorization: Bearer <key> or X-API-Key header.',
                    401
                )

            api_key = ApiKeyService.find_by_key(raw_key)
            if api_key is None:
                logger.warning(f"Rejected invalid API key from {request.META.get('REMOTE_ADDR')}")
                return auth_error('INVALID_API_KEY', 'Invalid or revoked API key.', 401)

            if not api_key.is_valid():
                return auth_error('EXPIRED_API_KEY', 'API key has expired. Generate a new key.', 401)

            if not all(api_key.has_scope(scope) for scope in required_scopes):
                return auth_error(
                    'INSUFFICIENT_SCOPE',
                    f"This action requires scope(s): {', '.join(required_scopes)}",
                    403
                )

            ApiKeyService.record_usage(api_key, request.META.get('REMOTE_ADDR'))

            request.api_key = api_key
            request.api_user = api_key.user
            return view_func(request, *args, **kwargs)
        return wrapper
    return decorator


def scoped_methods(**method_scopes):
    """
    Decorator for views serving several HTTP methods, each with its own
    scope, e.g. ``@scoped_methods(GET='read', PUT='write', DELETE='delete')``.
    Methods not listed are answered with 405.
    """
    def decorator(view_func):
        guarded = {
            method: api_key_required(scope)(view_func)
            for method, scope in method_scopes.items()
        }

        @csrf_exempt
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            handler = guarded.get(request.method)
            if handler is None:
                return auth_error('METHOD_NOT_ALLOWED', f"{request.method} is not allowed here.", 405)
            return handler(request, *args, **kwargs)
        return wrapper
    return decorator
