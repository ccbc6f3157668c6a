from django.http import JsonResponse
import logging

from access.decorators import api_key_required, scoped_methods

from ..forms import CheckInForm, CheckInListForm, CheckInUpdateForm, QuickCheckInForm
from ..responses import error_response, handles_board_errors, parse_json_body, to_form_data, validation_error
from ..services.checkin_service import CheckInService, UNSET

logger = logging.getLogger(__name__)


@scoped_methods(GET='read', POST='write')
@handles_board_errors
def board_check_ins(request, board_id):
    """List a board's check-ins (newest first), or record a new one."""
    service = CheckInService(request.api_user)

    if request.method == 'GET':
        board = service.get_board(board_id)
        form = CheckInListForm(to_form_data(request.GET, {
            'startDate': 'start_date',
            'endDate': 'end_date',
            'limit': 'limit',
        }))
        if not form.is_valid():
            return validation_error(form)

        check_ins = board.check_ins.order_by('-date', '-timestamp')
        if form.cleaned_data.get('start_date'):
            check_ins = check_ins.filter(date__gte=form.cleaned_data['start_date'])
        if form.cleaned_data.get('end_date'):
            check_ins = check_ins.filter(date__lte=form.cleaned_data['end_date'])
        if form.cleaned_data.get('limit'):
            check_ins = check_ins[:form.cleaned_data['limit']]

        return JsonResponse({'data': [check_in.to_dict() for check_in in check_ins]})

    form = CheckInForm(parse_json_body(request))
    if not form.is_valid():
        return validation_error(form)

    check_in, board = service.record_check_in(
        board_id,
        requested_date=form.cleaned_data.get('date'),
        amount=form.cleaned_data.get('amount'),
        note=form.cleaned_data.get('note'),
    )
    return JsonResponse({'data': {'checkIn': check_in.to_dict(), 'board': board.to_dict()}}, status=201)


@scoped_methods(GET='read', PUT='write', DELETE='delete')
@handles_board_errors
def check_in_detail(request, pk):
    service = CheckInService(request.api_user)

    if request.method == 'GET':
        return JsonResponse({'data': service.get_check_in(pk).to_dict(include_board=True)})

    if request.method == 'DELETE':
        board = service.delete_check_in(pk)
        return JsonResponse({
            'data': {'board': board.to_dict()},
            'meta': {'message': 'Check-in deleted successfully.'},
        })

    payload = parse_json_body(request)
    form = CheckInUpdateForm(payload)
    if not form.is_valid():
        return validation_error(form)

    # Only keys present in the body are changed; null clears a field
    check_in = service.update_check_in(
        pk,
        amount=form.cleaned_data['amount'] if 'amount' in payload else UNSET,
        note=form.cleaned_data['note'] if 'note' in payload else UNSET,
    )
    return JsonResponse({'data': check_in.to_dict(include_board=True)})


@api_key_required('write')
@handles_board_errors
def quick_check_in(request):
    """Check in today on a board picked by id or by name."""
    if request.method != 'POST':
        return error_response('METHOD_NOT_ALLOWED', 'POST method required.', 405)

    form = QuickCheckInForm(to_form_data(parse_json_body(request), {
        'boardId': 'board_id',
        'boardName': 'board_name',
        'amount': 'amount',
        'note': 'note',
    }))
    if not form.is_valid():
        return validation_error(form)

    check_in, board = CheckInService(request.api_user).quick_check_in(
        board_id=form.cleaned_data.get('board_id'),
        board_name=form.cleaned_data.get('board_name'),
        amount=form.cleaned_data.get('amount'),
        note=form.cleaned_data.get('note'),
    )
    return JsonResponse({
        'data': {
            'checkIn': check_in.to_dict(),
            'board': board.to_dict(),
        }
    }, status=201)
