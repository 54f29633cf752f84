from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from functools import reduce
from typing import Sequence

from .models import Project, RowLayout, StackedProject, as_day
from .visibility import project_visible, visible_tasks

logger = logging.getLogger(__name__)

# Pixel constants shared with the renderer; they must match the drawn bars exactly.
TASK_BAR_HEIGHT = 32
TASK_BAR_SPACING = 2
TASK_CONTAINER_PADDING = 2
PROJECT_HEADER_HEIGHT = 36
PROJECT_PADDING = 2  # top and bottom
PROJECT_BORDER = 2  # top and bottom
PROJECT_GAP = 1
EMPTY_ROW_HEIGHT = 4
ROW_BOTTOM_MARGIN = 1
MAX_PROJECTS_PER_USER = 10


@dataclass(frozen=True)
class _Cursor:
    """Fold accumulator: next top offset, next stack level and the projects placed so far."""

    top: int
    level: int
    placed: tuple[StackedProject, ...] = ()


def task_container_height(task_count: int) -> int:
    """Height of the task area for ``task_count`` visible tasks; zero when empty."""
    if task_count <= 0:
        return 0
    return task_count * (TASK_BAR_HEIGHT + TASK_BAR_SPACING) + TASK_CONTAINER_PADDING


def project_bar_height(task_count: int) -> int:
    """Total bar height: header, task area, padding and border. No minimum height."""
    return (
        PROJECT_HEADER_HEIGHT
        + task_container_height(task_count)
        + PROJECT_PADDING * 2
        + PROJECT_BORDER * 2
    )


def stack_projects(
    projects: Sequence[Project],
    week_start: date,
    week_end: date,
    start_offset: int = 0,
    today: date | None = None,
) -> RowLayout:
    """
    Stack a user's projects for the window ``[week_start, week_end]``.

    Only the first MAX_PROJECTS_PER_USER projects are considered. A project
    takes a stack slot only if it is visible itself and has at least one
    visible task; its height follows the visible task count and the returned
    project carries only those tasks. Input order is preserved.
    """

    week_start = as_day(week_start)
    week_end = as_day(week_end)
    today = as_day(today) or date.today()

    def place(cursor: _Cursor, project: Project) -> _Cursor:
        if not project_visible(project.start_date, project.resolved_end, week_start, week_end, project.has_no_end):
            logger.debug("Skipping %r: project not visible in %s..%s", project.name, week_start, week_end)
            return cursor

        shown = visible_tasks(project.tasks, week_start, week_end, project.start_date, project.resolved_end, today)
        if not shown:
            logger.debug("Skipping %r: no visible tasks (%d total)", project.name, len(project.tasks))
            return cursor

        height = project_bar_height(len(shown))
        stacked = StackedProject(
            project=replace(project, tasks=tuple(shown)),
            stack_level=cursor.level,
            height=height,
            top=cursor.top,
        )
        logger.debug(
            "Including %r: %d of %d tasks visible, height=%d top=%d",
            project.name,
            len(shown),
            len(project.tasks),
            height,
            cursor.top,
        )
        return _Cursor(top=cursor.top + height + PROJECT_GAP, level=cursor.level + 1, placed=cursor.placed + (stacked,))

    final = reduce(place, projects[:MAX_PROJECTS_PER_USER], _Cursor(top=start_offset, level=0))

    if not final.placed:
        return RowLayout(projects=(), total_height=EMPTY_ROW_HEIGHT)
    return RowLayout(projects=final.placed, total_height=final.top - PROJECT_GAP + ROW_BOTTOM_MARGIN)


def summarize_stacking(layout: RowLayout, original_count: int = 0) -> list[str]:
    """
    Describe a computed layout for diagnostics.

    Lines are logged at DEBUG level and returned; the layout is untouched.
    """

    lines = [
        f"Original projects: {original_count}",
        f"Included projects: {len(layout.projects)}",
        f"Filtered out: {max(0, original_count - len(layout.projects))}",
        f"Total row height: {layout.total_height}px",
    ]
    for stacked in layout.projects:
        lines.append(
            f"  {stacked.project.name!r}: {len(stacked.visible_tasks)} tasks, "
            f"{stacked.height}px height, top: {stacked.top}px"
        )
    for line in lines:
        logger.debug(line)
    return lines
