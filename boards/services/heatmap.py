from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from ..models import Board


@dataclass
class HeatmapDay:
    date: date
    session_count: int
    total_amount: Decimal
    intensity: float

    def to_dict(self):
        return {
            'date': self.date.isoformat(),
            'sessions': self.session_count,
            'total': float(self.total_amount),
            'intensity': self.intensity,
        }


def year_range(year: int) -> Tuple[date, date]:
    return date(year, 1, 1), date(year, 12, 31)


def project_heatmap(rows: Iterable[Tuple[date, Optional[Decimal]]],
                    target_amount: Optional[Decimal]) -> List[HeatmapDay]:
    """
    Group (date, amount) rows into one entry per day that has check-ins.

    Check-ins without an amount count as 1. Intensity is total / target
    capped at 1, or 1 for any active day when the board has no target.
    Days without check-ins are left out.
    """
    totals = {}
    for day, amount in rows:
        sessions, total = totals.get(day, (0, Decimal('0')))
        totals[day] = (sessions + 1, total + (amount if amount is not None else Decimal('1')))

    heatmap = []
    for day in sorted(totals):
        sessions, total = totals[day]
        if target_amount:
            intensity = min(float(total / target_amount), 1.0)
        else:
            intensity = 1.0
        heatmap.append(HeatmapDay(date=day, session_count=sessions, total_amount=total, intensity=intensity))
    return heatmap


def board_heatmap(board: Board, start_date: date, end_date: date) -> List[HeatmapDay]:
    rows = board.check_ins.filter(
        date__gte=start_date,
        date__lte=end_date
    ).values_list('date', 'amount')
    return project_heatmap(rows, board.target_amount)
