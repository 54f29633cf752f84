from __future__ import annotations

from datetime import date
from typing import Iterable

from .models import Task, task_effective_end, task_effective_start


def intervals_overlap(start: date, end: date, window_start: date, window_end: date) -> bool:
    """Inclusive overlap test of ``[start, end]`` against ``[window_start, window_end]``."""
    return not (end < window_start or start > window_end)


def project_visible(
    start: date,
    end: date,
    week_start: date,
    week_end: date,
    has_no_end: bool = False,
) -> bool:
    """
    Return True if a project bar belongs in the window.

    Open-ended projects are visible from their start date onward; all others
    must overlap the window.
    """

    if has_no_end:
        return start <= week_end
    return intervals_overlap(start, end, week_start, week_end)


def is_overdue(task: Task, today: date | None = None) -> bool:
    """A task is overdue when it is not done and its end date lies before today."""
    if task.is_done or task.end_date is None:
        return False
    return task.end_date < _today(today)


def task_visible(
    task: Task,
    week_start: date,
    week_end: date,
    project_start: date,
    project_end: date,
    today: date | None = None,
) -> bool:
    """
    Return True if the task should be drawn in the window.

    - Done tasks are hidden.
    - Tasks without any dates are always shown while their project is.
    - Overdue tasks stay visible in the week containing today and in the
      weeks their own dates overlap.
    - Everything else must overlap the window, with missing dates
      inherited from the project.
    """

    if task.is_done:
        return False
    if task.has_no_dates:
        return True

    start = task_effective_start(task, project_start)
    end = task_effective_end(task, project_end)
    today = _today(today)

    if is_overdue(task, today):
        today_in_week = week_start <= today <= week_end
        return today_in_week or intervals_overlap(start, end, week_start, week_end)
    return intervals_overlap(start, end, week_start, week_end)


def visible_tasks(
    tasks: Iterable[Task],
    week_start: date,
    week_end: date,
    project_start: date,
    project_end: date,
    today: date | None = None,
) -> list[Task]:
    """Filter tasks to the ones visible in the window, keeping input order."""
    today = _today(today)
    return [task for task in tasks if task_visible(task, week_start, week_end, project_start, project_end, today)]


def split_overdue_tasks(tasks: Iterable[Task], today: date | None = None) -> tuple[list[Task], list[Task]]:
    """Separate open tasks into ``(overdue, regular)``; done tasks are dropped."""
    today = _today(today)
    overdue: list[Task] = []
    regular: list[Task] = []
    for task in tasks:
        if task.is_done:
            continue
        if is_overdue(task, today):
            overdue.append(task)
        else:
            regular.append(task)
    return overdue, regular


def project_extensions(
    start: date,
    end: date,
    week_start: date,
    week_end: date,
    has_no_end: bool = False,
) -> tuple[bool, bool]:
    """Return ``(starts_before_week, ends_after_week)`` for a project bar."""
    starts_before_week = start < week_start
    ends_after_week = True if has_no_end else end > week_end
    return starts_before_week, ends_after_week


def visual_boundaries(
    start: date,
    end: date,
    week_start: date,
    week_end: date,
    has_no_end: bool = False,
) -> tuple[date, date]:
    """Clamp a project bar to the part that falls inside the window."""
    starts_before_week, ends_after_week = project_extensions(start, end, week_start, week_end, has_no_end)
    visual_start = week_start if starts_before_week else start
    visual_end = week_end if ends_after_week else end
    return visual_start, visual_end


def _today(today: date | None) -> date:
    return today if today is not None else date.today()
