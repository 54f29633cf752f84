from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Literal


TaskStatus = Literal["todo", "in-progress", "done"]
"""Workflow states of a task; ``done`` is terminal and hides the task from the chart."""

TASK_STATUSES: tuple[str, ...] = ("todo", "in-progress", "done")
DONE: TaskStatus = "done"


def as_day(value: Any) -> date | None:
    """
    Normalise a date-like value to a calendar day.

    Datetimes lose their time of day, ISO strings are parsed on their
    ``YYYY-MM-DD`` prefix and ``None`` passes through unchanged.
    """

    if value is None:
        return None
    if isinstance(value, _dt.datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return _dt.date.fromisoformat(value.strip()[:10])
    raise TypeError(f"Unsupported date value: {value!r}")


def _normalise_days(instance: Any, *names: str) -> None:
    """Coerce date fields of a frozen dataclass to calendar days in place."""
    for name in names:
        object.__setattr__(instance, name, as_day(getattr(instance, name)))


@dataclass(frozen=True)
class User:
    """Member of a department; the engine only compares identifiers."""

    id: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    department: str | None = None

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part) or self.id


@dataclass(frozen=True)
class Task:
    """Unit of work owned by a project; read-only from the engine's perspective."""

    id: str
    project_id: str
    status: TaskStatus = "todo"
    name: str = ""
    assignee_id: str | None = None
    start_date: date | None = None
    end_date: date | None = None

    def __post_init__(self) -> None:
        _normalise_days(self, "start_date", "end_date")

    @property
    def is_done(self) -> bool:
        return self.status == DONE

    @property
    def has_no_dates(self) -> bool:
        """True when neither start nor end date is set."""
        return self.start_date is None and self.end_date is None


@dataclass(frozen=True)
class Project:
    """
    Project as seen by the layout engine.

    ``end_date`` may be absent, which makes the project open-ended for the
    project-level overlap rule while task fallbacks use ``resolved_end``.
    """

    id: str
    name: str
    start_date: date
    end_date: date | None = None
    deadline: date | None = None
    progress: float = 0
    assignee_id: str | None = None
    multi_assignee_ids: tuple[str, ...] = ()
    tasks: tuple[Task, ...] = ()

    def __post_init__(self) -> None:
        _normalise_days(self, "start_date", "end_date", "deadline")

    @property
    def has_no_end(self) -> bool:
        return self.end_date is None

    @property
    def resolved_end(self) -> date:
        """End date used for visibility math (start date when absent)."""
        return resolve_project_end(self.start_date, self.end_date)


FlowProject = Project
"""A project narrowed to the tasks one user is entitled to see."""


def resolve_project_end(start_date: date, end_date: date | None) -> date:
    """Return ``end_date`` when set, else ``start_date``."""
    if end_date is None:
        return start_date
    return end_date


def task_effective_start(task: Task, project_start: date) -> date:
    """Task start date, inheriting the project's start when unset."""
    if task.start_date is None:
        return project_start
    return task.start_date


def task_effective_end(task: Task, project_end: date) -> date:
    """Task end date, inheriting the project's end when unset."""
    if task.end_date is None:
        return project_end
    return task.end_date


@dataclass(frozen=True)
class StackedProject:
    """
    Visible project placed inside a user row.

    ``project.tasks`` holds only the tasks visible in the window the layout
    was computed for; ``top`` and ``height`` are in pixels.
    """

    project: Project
    stack_level: int
    height: int
    top: int

    @property
    def visible_tasks(self) -> tuple[Task, ...]:
        return self.project.tasks

    @property
    def bottom(self) -> int:
        return self.top + self.height


@dataclass(frozen=True)
class RowLayout:
    """Stacked projects of one user row plus the row's total pixel height."""

    projects: tuple[StackedProject, ...]
    total_height: int

    @property
    def is_empty(self) -> bool:
        return not self.projects


@dataclass
class Board:
    """Everything loaded from a board file: users, projects and tasks in file order."""

    users: list[User] = field(default_factory=list)
    projects: list[Project] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)

    def project_tasks(self, project_id: str) -> list[Task]:
        return [task for task in self.tasks if task.project_id == project_id]


@dataclass
class UserRow:
    """Render-ready row: a user and the layout of their visible projects."""

    order: int
    user: User
    layout: RowLayout
    project_count: int = 0
