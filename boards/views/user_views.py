from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_GET

from access.decorators import api_key_required, scoped_methods

from ..forms import UserPreferenceForm
from ..models import UserPreference
from ..responses import handles_board_errors, parse_json_body, validation_error
from ..services.stats import dashboard_summary
from ..timezones import local_today


def _profile(user, prefs):
    return {
        'id': user.id,
        'email': user.email,
        'name': user.get_full_name() or user.username,
        'timezone': prefs.timezone,
        'today': local_today(prefs.timezone).isoformat(),
        'updatedAt': prefs.updated_at.isoformat() if prefs.updated_at else None,
    }


@scoped_methods(GET='read', PUT='write')
@handles_board_errors
def current_user(request):
    """Read or update the caller's profile; the timezone decides what "today" is."""
    prefs = UserPreference.get_or_create_for_user(request.api_user)

    if request.method == 'PUT':
        payload = parse_json_body(request)
        form = UserPreferenceForm({'timezone': payload.get('timezone', prefs.timezone)}, instance=prefs)
        if not form.is_valid():
            return validation_error(form)
        prefs = form.save()

    return JsonResponse({'data': _profile(request.api_user, prefs)})


@api_key_required('read')
def dashboard(request):
    return JsonResponse({'data': dashboard_summary(request.api_user)})


@require_GET
def health_check(request):
    return JsonResponse({'status': 'healthy', 'timestamp': timezone.now().isoformat()})
