from __future__ import annotations

from datetime import date, timedelta

WORKDAYS_PER_WEEK = 5
WEEKEND_COLUMN_PX = 48
ASSUMED_CONTAINER_PX = 1000
MIN_WIDTH_PERCENT = 0.1


def week_monday(day: date) -> date:
    """Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())


def week_window(monday: date) -> tuple[date, date]:
    """Visible window of the chart: Monday through Friday."""
    return monday, monday + timedelta(days=WORKDAYS_PER_WEEK - 1)


def add_weeks(day: date, weeks: int) -> date:
    return day + timedelta(weeks=weeks)


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def generate_week_dates(monday: date) -> list[date]:
    """Monday to Friday of the week starting at ``monday``."""
    return [monday + timedelta(days=offset) for offset in range(WORKDAYS_PER_WEEK)]


def generate_work_dates(start: date) -> list[date]:
    """Consecutive days from ``start`` until five working days are covered, weekends included."""
    dates: list[date] = []
    current = start
    workdays = 0
    while workdays < WORKDAYS_PER_WEEK:
        dates.append(current)
        if not is_weekend(current):
            workdays += 1
        current += timedelta(days=1)
    return dates


def week_label(monday: date) -> str:
    """Header label such as ``Oct 19 - Oct 23, 2026``."""
    friday = monday + timedelta(days=WORKDAYS_PER_WEEK - 1)
    return f"{monday:%b} {monday.day} - {friday:%b} {friday.day}, {friday.year}"


def column_position(start: date, end: date, week_start: date) -> tuple[float, float]:
    """
    Horizontal placement of a bar as ``(left_percent, width_percent)``.

    Columns follow generate_work_dates(week_start): weekend columns are a
    fixed 48px, weekdays share the rest of an assumed 1000px container. The
    bar always spans at least one column.
    """

    columns = generate_work_dates(week_start)
    start_index = -1
    end_index = -1
    for idx, day in enumerate(columns):
        if start_index == -1 and day >= start:
            start_index = idx
        if day == end:
            end_index = idx
            break
        if day > end:
            end_index = max(0, idx - 1)
            break

    if start_index == -1:
        start_index = 0
    if end_index == -1:
        end_index = len(columns) - 1
    if end_index < start_index:
        end_index = start_index

    widths = _column_widths(columns)
    left_px = sum(widths[:start_index])
    span_px = sum(widths[start_index : end_index + 1])

    left_percent = left_px / ASSUMED_CONTAINER_PX * 100
    width_percent = span_px / ASSUMED_CONTAINER_PX * 100
    return left_percent, max(width_percent, MIN_WIDTH_PERCENT)


def today_column_index(week_start: date, today: date | None = None) -> int:
    """Index of today's column in the window, or -1 when today is not shown."""
    today = today if today is not None else date.today()
    columns = generate_work_dates(week_start)
    try:
        return columns.index(today)
    except ValueError:
        return -1


def position_from_today(week_start: date, today: date | None = None, min_columns: int = 2) -> tuple[float, float]:
    """
    Placement of the overdue strip: from today's column to the end of the window.

    Returns ``(0.0, 0.0)`` when today is outside the window.
    """

    index = today_column_index(week_start, today)
    if index == -1:
        return 0.0, 0.0
    if index == 0:
        return 0.0, 60.0

    columns = generate_work_dates(week_start)
    widths = _column_widths(columns)
    weekday_px = _weekday_column_px(columns)
    left_px = sum(widths[:index])
    span_px = max(sum(widths[index:]), weekday_px * min_columns)

    left_percent = left_px / ASSUMED_CONTAINER_PX * 100
    width_percent = span_px / ASSUMED_CONTAINER_PX * 100
    return max(0.0, left_percent), max(20.0, width_percent)


def _weekday_column_px(columns: list[date]) -> float:
    weekend_count = sum(1 for day in columns if is_weekend(day))
    weekday_count = len(columns) - weekend_count
    if weekday_count == 0:
        return 0.0
    return (ASSUMED_CONTAINER_PX - weekend_count * WEEKEND_COLUMN_PX) / weekday_count


def _column_widths(columns: list[date]) -> list[float]:
    weekday_px = _weekday_column_px(columns)
    return [float(WEEKEND_COLUMN_PX) if is_weekend(day) else weekday_px for day in columns]
