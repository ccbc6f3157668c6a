import json
import logging

from django.http import JsonResponse

from .decorators import api_key_required, auth_error, scoped_methods
from .forms import ApiKeyForm
from .models import ApiKey
from .services import ApiKeyService

logger = logging.getLogger(__name__)


@scoped_methods(GET='read', POST='write')
def api_keys(request):
    """List the caller's keys, or create a new one."""
    if request.method == 'GET':
        keys = ApiKey.objects.filter(user=request.api_user)
        return JsonResponse({'data': [key.to_dict() for key in keys]})

    try:
        payload = json.loads(request.body or b'{}')
    except json.JSONDecodeError:
        return auth_error('INVALID_JSON', 'Request body must be valid JSON.', 400)

    form = ApiKeyForm({
        'name': payload.get('name'),
        'scopes': payload.get('scopes') or [],
        'expires_in_days': payload.get('expiresInDays'),
    })
    if not form.is_valid():
        return JsonResponse({
            'error': {'code': 'VALIDATION_ERROR', 'message': 'Invalid input.', 'fields': form.errors.get_json_data()}
        }, status=400)

    requested_scopes = form.cleaned_data['scopes'] or ['read']
    # A key can never grant more than the key that created it
    if not all(request.api_key.has_scope(scope) for scope in requested_scopes):
        return auth_error('INSUFFICIENT_SCOPE', 'Cannot grant scopes you do not hold.', 403)

    api_key, raw_key = ApiKeyService.create_for_user(
        request.api_user,
        form.cleaned_data['name'],
        scopes=requested_scopes,
        expires_in_days=form.cleaned_data.get('expires_in_days'),
    )
    return JsonResponse({'data': {'apiKey': api_key.to_dict(), 'key': raw_key}}, status=201)


@api_key_required('delete')
def revoke_api_key(request, pk):
    if request.method != 'DELETE':
        return auth_error('METHOD_NOT_ALLOWED', 'DELETE method required.', 405)

    api_key = ApiKey.objects.filter(pk=pk, user=request.api_user, is_revoked=False).first()
    if api_key is None:
        return auth_error('NOT_FOUND', 'API key not found.', 404)

    ApiKeyService.revoke(api_key)
    return JsonResponse({'meta': {'message': 'API key revoked successfully.'}})
