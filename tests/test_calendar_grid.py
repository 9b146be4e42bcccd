import calendar

import pytest

from calendar_grid import build_grid


def test_leap_february():
    assert build_grid(2024, 2).days_in_month == 29
    assert build_grid(2023, 2).days_in_month == 28


@pytest.mark.parametrize("year", [2023, 2024, 2025])
def test_day_cells_match_month_length(year):
    for month in range(1, 13):
        grid = build_grid(year, month)
        days = [c for c in grid.cells if c is not None]
        assert days == list(range(1, calendar.monthrange(year, month)[1] + 1))


def test_leading_blanks_equal_weekday_of_first():
    # 2025-08-01 is a Friday -> 5 with Sunday=0
    grid = build_grid(2025, 8)
    assert grid.start_weekday == 5
    assert grid.cells[:5] == [None] * 5
    assert grid.cells[5] == 1

    # 2023-01-01 is a Sunday -> no blanks
    grid = build_grid(2023, 1)
    assert grid.start_weekday == 0
    assert grid.cells[0] == 1


def test_no_trailing_padding():
    grid = build_grid(2025, 8)
    assert grid.cells[-1] == 31
    assert len(grid.cells) == 5 + 31
    # Aug 31 2025 is a Sunday: alone on the last row
    assert len(grid.weeks()) == 6
    assert grid.weeks()[-1] == [31]


def test_december_rolls_into_next_year():
    grid = build_grid(2024, 12)
    assert grid.days_in_month == 31


def test_invalid_month():
    with pytest.raises(ValueError):
        build_grid(2025, 13)
