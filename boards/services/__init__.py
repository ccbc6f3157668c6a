from .streaks import calculate_current_streak, longest_run
from .aggregates import AggregateMaintainer, BoardAggregates, derive_aggregates
from .checkin_service import CheckInService, UNSET, next_session_number, resolve_check_in_date
from .heatmap import HeatmapDay, board_heatmap, project_heatmap, year_range
from .stats import board_stats, completion_rate, dashboard_summary, quick_status
