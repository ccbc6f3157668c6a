from django.forms.models import model_to_dict
from django.http import JsonResponse
import logging

from access.decorators import api_key_required, scoped_methods

from ..forms import BoardForm, HeatmapRangeForm
from ..models import Board
from ..responses import handles_board_errors, parse_json_body, to_form_data, validation_error
from ..services.checkin_service import CheckInService
from ..services.heatmap import board_heatmap, year_range
from ..services.stats import board_stats, quick_status
from ..timezones import today_for_user

logger = logging.getLogger(__name__)

BOARD_FIELDS = {
    'name': 'name',
    'description': 'description',
    'emoji': 'emoji',
    'color': 'color',
    'unitType': 'unit_type',
    'unit': 'unit',
    'targetAmount': 'target_amount',
}


@scoped_methods(GET='read', POST='write')
@handles_board_errors
def board_collection(request):
    """List the caller's boards, or create a new one."""
    if request.method == 'GET':
        boards = Board.objects.filter(user=request.api_user)
        if request.GET.get('includeArchived', '').lower() not in ('1', 'true', 'yes'):
            boards = boards.filter(is_archived=False)
        return JsonResponse({'data': [board.to_dict() for board in boards.order_by('-updated_at')]})

    payload = parse_json_body(request)
    form = BoardForm(to_form_data(payload, BOARD_FIELDS), user=request.api_user)
    if not form.is_valid():
        return validation_error(form)

    board = form.save(commit=False)
    board.user = request.api_user
    board.save()

    logger.info(f"Board {board.id} '{board.name}' created for user {request.api_user.id}")
    return JsonResponse({'data': board.to_dict()}, status=201)


@scoped_methods(GET='read', PUT='write', DELETE='delete')
@handles_board_errors
def board_detail(request, pk):
    service = CheckInService(request.api_user)
    board = service.get_board(pk)

    if request.method == 'GET':
        return JsonResponse({'data': board.to_dict()})

    if request.method == 'DELETE':
        # Hard delete; check-ins go with it
        board.delete()
        logger.info(f"Board {pk} deleted by user {request.api_user.id}")
        return JsonResponse({'meta': {'message': 'Board deleted successfully.'}})

    # Partial update: fields not sent keep their current values
    data = model_to_dict(board, fields=list(BOARD_FIELDS.values()))
    data.update(to_form_data(parse_json_body(request), BOARD_FIELDS))
    form = BoardForm(data, instance=board, user=request.api_user)
    if not form.is_valid():
        return validation_error(form)

    board = form.save()
    return JsonResponse({'data': board.to_dict()})


@api_key_required('write')
@handles_board_errors
def archive_board(request, pk):
    if request.method != 'POST':
        return JsonResponse({'error': {'code': 'METHOD_NOT_ALLOWED', 'message': 'POST method required.'}}, status=405)

    board = CheckInService(request.api_user).get_board(pk)
    board.archive()
    return JsonResponse({'data': board.to_dict()})


@api_key_required('write')
@handles_board_errors
def restore_board(request, pk):
    if request.method != 'POST':
        return JsonResponse({'error': {'code': 'METHOD_NOT_ALLOWED', 'message': 'POST method required.'}}, status=405)

    board = CheckInService(request.api_user).get_board(pk)
    board.restore()
    return JsonResponse({'data': board.to_dict()})


@api_key_required('read')
@handles_board_errors
def board_heatmap_view(request, pk):
    """Per-day sessions, totals and intensity for a year or a date range."""
    service = CheckInService(request.api_user)
    board = service.get_board(pk)

    form = HeatmapRangeForm(to_form_data(request.GET, {
        'year': 'year',
        'startDate': 'start_date',
        'endDate': 'end_date',
    }))
    if not form.is_valid():
        return validation_error(form)

    if form.cleaned_data.get('start_date'):
        start_date = form.cleaned_data['start_date']
        end_date = form.cleaned_data['end_date']
        year = None
    else:
        year = form.cleaned_data.get('year') or service.today.year
        start_date, end_date = year_range(year)

    days = board_heatmap(board, start_date, end_date)
    return JsonResponse({
        'data': {
            'year': year,
            'startDate': start_date.isoformat(),
            'endDate': end_date.isoformat(),
            'targetAmount': float(board.target_amount) if board.target_amount is not None else None,
            'days': [day.to_dict() for day in days],
        }
    })


@api_key_required('read')
@handles_board_errors
def board_stats_view(request, pk):
    service = CheckInService(request.api_user)
    board = service.get_board(pk)
    return JsonResponse({'data': board_stats(board, service.today)})


@api_key_required('read')
def quick_status_view(request):
    return JsonResponse({'data': quick_status(request.api_user, today_for_user(request.api_user))})
