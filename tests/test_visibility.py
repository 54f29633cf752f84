import datetime as dt

from flow_chart_layout.models import Task
from flow_chart_layout.visibility import (
    intervals_overlap,
    is_overdue,
    project_extensions,
    project_visible,
    split_overdue_tasks,
    task_visible,
    visible_tasks,
    visual_boundaries,
)

MON = dt.date(2026, 10, 19)
FRI = dt.date(2026, 10, 23)
SUN = dt.date(2026, 10, 25)
TODAY = dt.date(2026, 10, 21)


def _task(task_id="t", status="todo", start=None, end=None):
    return Task(id=task_id, project_id="p", status=status, start_date=start, end_date=end)


def test_intervals_overlap_is_inclusive_at_both_edges():
    assert intervals_overlap(dt.date(2026, 10, 12), MON, MON, FRI)
    assert intervals_overlap(FRI, dt.date(2026, 10, 30), MON, FRI)
    assert not intervals_overlap(dt.date(2026, 10, 12), dt.date(2026, 10, 18), MON, FRI)
    assert not intervals_overlap(dt.date(2026, 10, 24), dt.date(2026, 10, 30), MON, FRI)


def test_open_ended_project_visible_from_start_onward():
    started = dt.date(2025, 1, 6)
    assert project_visible(started, started, MON, FRI, has_no_end=True)
    assert project_visible(FRI, FRI, MON, FRI, has_no_end=True)


def test_open_ended_project_starting_next_month_is_not_visible():
    next_month = dt.date(2026, 11, 16)
    assert not project_visible(next_month, next_month, MON, FRI, has_no_end=True)


def test_bounded_project_must_overlap_window():
    assert project_visible(dt.date(2026, 10, 1), dt.date(2026, 10, 20), MON, FRI)
    assert not project_visible(dt.date(2026, 10, 1), dt.date(2026, 10, 16), MON, FRI)


def test_done_tasks_are_never_visible():
    task = _task(status="done", start=MON, end=FRI)
    assert not task_visible(task, MON, FRI, MON, FRI, today=TODAY)
    assert not task_visible(_task(status="done"), MON, FRI, MON, FRI, today=TODAY)


def test_dateless_task_is_always_visible():
    far_project_start = dt.date(2020, 1, 1)
    assert task_visible(_task(), MON, FRI, far_project_start, far_project_start, today=TODAY)


def test_task_inherits_missing_end_from_project():
    task = _task(start=dt.date(2026, 10, 12))
    assert task_visible(task, MON, FRI, dt.date(2026, 10, 1), dt.date(2026, 10, 30), today=dt.date(2026, 10, 1))
    assert not task_visible(task, MON, FRI, dt.date(2026, 10, 1), dt.date(2026, 10, 16), today=dt.date(2026, 10, 1))


def test_task_inherits_missing_start_from_project():
    task = _task(end=dt.date(2026, 11, 30))
    assert task_visible(task, MON, FRI, dt.date(2026, 10, 1), dt.date(2026, 12, 1), today=TODAY)
    assert not task_visible(task, MON, FRI, dt.date(2026, 11, 2), dt.date(2026, 12, 1), today=TODAY)


def test_overdue_task_visible_in_week_containing_today():
    task = _task(start=dt.date(2026, 10, 5), end=dt.date(2026, 10, 7))
    assert is_overdue(task, today=TODAY)
    assert task_visible(task, MON, FRI, dt.date(2026, 10, 1), dt.date(2026, 10, 30), today=TODAY)


def test_overdue_task_visible_in_its_original_week():
    task = _task(start=dt.date(2026, 10, 5), end=dt.date(2026, 10, 7))
    week_start, week_end = dt.date(2026, 10, 5), dt.date(2026, 10, 9)
    assert task_visible(task, week_start, week_end, dt.date(2026, 10, 1), dt.date(2026, 10, 30), today=TODAY)


def test_overdue_task_hidden_in_unrelated_week():
    task = _task(start=dt.date(2026, 10, 5), end=dt.date(2026, 10, 7))
    week_start, week_end = dt.date(2026, 9, 28), dt.date(2026, 10, 2)
    assert not task_visible(task, week_start, week_end, dt.date(2026, 9, 1), dt.date(2026, 10, 30), today=TODAY)


def test_task_ending_today_is_not_overdue():
    task = _task(start=dt.date(2026, 10, 12), end=TODAY)
    assert not is_overdue(task, today=TODAY)


def test_visible_tasks_keeps_input_order():
    tasks = [
        _task("a", start=FRI, end=FRI),
        _task("b", status="done", start=MON, end=MON),
        _task("c"),
        _task("d", start=dt.date(2026, 11, 2), end=dt.date(2026, 11, 3)),
    ]
    shown = visible_tasks(tasks, MON, FRI, MON, SUN, today=MON)
    assert [task.id for task in shown] == ["a", "c"]


def test_split_overdue_tasks_drops_done_tasks():
    overdue = _task("late", end=dt.date(2026, 10, 1))
    regular = _task("ok", end=FRI)
    done = _task("done", status="done", end=dt.date(2026, 10, 1))
    assert split_overdue_tasks([overdue, regular, done], today=TODAY) == ([overdue], [regular])


def test_visual_boundaries_clamp_to_window():
    assert visual_boundaries(dt.date(2026, 10, 1), dt.date(2026, 10, 21), MON, FRI) == (MON, dt.date(2026, 10, 21))
    assert visual_boundaries(dt.date(2026, 10, 20), dt.date(2026, 10, 20), MON, FRI, has_no_end=True) == (
        dt.date(2026, 10, 20),
        FRI,
    )


def test_open_ended_projects_always_extend_past_window():
    assert project_extensions(MON, MON, MON, FRI, has_no_end=True) == (False, True)
