"""
calendar_grid.py
Month layout for the calendar view (Sunday-first weeks, no trailing padding).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

WEEKDAY_HEADERS = ["Dom", "Lun", "Mar", "Mié", "Jue", "Vie", "Sáb"]


@dataclass(frozen=True)
class CalendarGrid:
    cells: list[int | None]  # None = leading blank
    days_in_month: int
    start_weekday: int  # 0=Sunday .. 6=Saturday

    def weeks(self) -> list[list[int | None]]:
        # Last row may be shorter than 7
        return [self.cells[i:i + 7] for i in range(0, len(self.cells), 7)]


def build_grid(year: int, month: int) -> CalendarGrid:
    if not 1 <= month <= 12:
        raise ValueError(f"month must be 1..12, got {month}")

    first = date(year, month, 1)
    # date.weekday() is Monday=0; shift so Sunday=0
    start_weekday = (first.weekday() + 1) % 7

    # last day of the month = day before the 1st of the next month
    if month == 12:
        next_month = date(year + 1, 1, 1)
    else:
        next_month = date(year, month + 1, 1)
    days_in_month = (next_month - timedelta(days=1)).day

    cells: list[int | None] = [None] * start_weekday
    cells.extend(range(1, days_in_month + 1))
    return CalendarGrid(cells=cells, days_in_month=days_in_month, start_weekday=start_weekday)
