import datetime as dt

import pytest

from flow_chart_layout.weeks import (
    add_weeks,
    column_position,
    generate_week_dates,
    generate_work_dates,
    position_from_today,
    today_column_index,
    week_label,
    week_monday,
    week_window,
)

MON = dt.date(2026, 10, 19)


def test_week_monday_and_window():
    assert week_monday(dt.date(2026, 10, 22)) == MON
    assert week_monday(dt.date(2026, 10, 25)) == MON
    assert week_window(MON) == (MON, dt.date(2026, 10, 23))
    assert add_weeks(MON, -1) == dt.date(2026, 10, 12)


def test_week_dates_are_monday_to_friday():
    assert generate_week_dates(MON) == [MON + dt.timedelta(days=offset) for offset in range(5)]


def test_work_dates_keep_weekends_in_between():
    thursday = dt.date(2026, 10, 22)

    dates = generate_work_dates(thursday)

    assert dates[0] == thursday
    assert dates[-1] == dt.date(2026, 10, 28)
    assert len(dates) == 7


def test_week_label():
    assert week_label(MON) == "Oct 19 - Oct 23, 2026"


def test_column_position_for_full_and_single_day():
    assert column_position(MON, dt.date(2026, 10, 23), MON) == pytest.approx((0.0, 100.0))
    assert column_position(dt.date(2026, 10, 21), dt.date(2026, 10, 21), MON) == pytest.approx((40.0, 20.0))


def test_column_position_clamps_outside_dates():
    left, width = column_position(dt.date(2026, 10, 1), dt.date(2026, 11, 30), MON)
    assert left == pytest.approx(0.0)
    assert width == pytest.approx(100.0)


def test_weekend_columns_have_fixed_width():
    thursday = dt.date(2026, 10, 22)
    saturday = dt.date(2026, 10, 24)

    left, width = column_position(saturday, saturday, thursday)

    assert width == pytest.approx(4.8)
    assert left == pytest.approx((1000 - 2 * 48) / 5 * 2 / 10)


def test_today_column_index():
    assert today_column_index(MON, today=dt.date(2026, 10, 21)) == 2
    assert today_column_index(MON, today=dt.date(2026, 10, 28)) == -1


def test_position_from_today():
    assert position_from_today(MON, today=dt.date(2026, 11, 2)) == (0.0, 0.0)
    assert position_from_today(MON, today=MON) == (0.0, 60.0)
    assert position_from_today(MON, today=dt.date(2026, 10, 21)) == pytest.approx((40.0, 60.0))
    assert position_from_today(MON, today=dt.date(2026, 10, 23)) == pytest.approx((80.0, 40.0))
