# Import all views so `from boards.views import board_collection` keeps working

from .board_views import (
    board_collection,
    board_detail,
    archive_board,
    restore_board,
    board_heatmap_view,
    board_stats_view,
    quick_status_view,
)

from .checkin_views import (
    board_check_ins,
    check_in_detail,
    quick_check_in,
)

from .user_views import (
    current_user,
    dashboard,
    health_check,
)
