from __future__ import annotations

import datetime as _dt
import logging
from dataclasses import dataclass, replace
from typing import Any

import yaml

from .models import TASK_STATUSES, Board, Project, Task, User

logger = logging.getLogger(__name__)


class BoardValidationError(Exception):
    """Raised when a board file is structurally invalid (bad types, duplicates, dangling refs)."""


@dataclass(frozen=True)
class _Path:
    """Helper to produce readable YAML path strings like tasks[2].status."""

    parts: tuple[str, ...] = ()

    def child(self, segment: str) -> "_Path":
        return _Path(self.parts + (segment,))

    def __str__(self) -> str:  # pragma: no cover - trivial
        return ".".join(self.parts) if self.parts else "root"


_USER_KEYS = {"id", "first_name", "last_name", "email", "department"}
_PROJECT_KEYS = {
    "id",
    "name",
    "start_date",
    "end_date",
    "deadline",
    "progress",
    "assignee_id",
    "multi_assignee_ids",
}
_TASK_KEYS = {"id", "project_id", "name", "status", "assignee_id", "start_date", "end_date"}


def load_board(path: str) -> Board:
    """Load users, projects and tasks from a YAML board file; tasks are attached to their projects."""

    with open(path, "r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)

    return parse_board(raw)


def parse_board(data: Any) -> Board:
    """Validate an already-decoded board mapping and build the model objects."""
    path = _Path()
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise BoardValidationError(f"{path}: expected mapping at top level")
    _assert_allowed_keys(data, {"users", "projects", "tasks"}, path)

    users = [
        _parse_user(item, path.child(f"users[{idx}]"))
        for idx, item in enumerate(_optional_list(data, "users", path))
    ]
    _assert_unique_ids([user.id for user in users], path.child("users"))

    projects: list[Project] = []
    # Projects without a start date are skipped but their tasks still reference them.
    known_projects: set[str] = set()
    for idx, item in enumerate(_optional_list(data, "projects", path)):
        item_path = path.child(f"projects[{idx}]")
        project_id, project = _parse_project(item, item_path)
        if project_id in known_projects:
            raise BoardValidationError(f"{item_path.child('id')}: duplicate id '{project_id}'")
        known_projects.add(project_id)
        if project is not None:
            projects.append(project)

    tasks = [
        _parse_task(item, path.child(f"tasks[{idx}]"), known_projects)
        for idx, item in enumerate(_optional_list(data, "tasks", path))
    ]
    _assert_unique_ids([task.id for task in tasks], path.child("tasks"))

    board = Board(users=users, projects=[], tasks=tasks)
    board.projects = [_attach_tasks(project, board) for project in projects]
    logger.info("Loaded board: %d users, %d projects, %d tasks", len(users), len(board.projects), len(tasks))
    return board


def _parse_user(data: Any, path: _Path) -> User:
    if not isinstance(data, dict):
        raise BoardValidationError(f"{path}: expected mapping for user")
    _assert_allowed_keys(data, _USER_KEYS, path)
    return User(
        id=_require_str(data, "id", path),
        first_name=_optional_str(data, "first_name", path) or "",
        last_name=_optional_str(data, "last_name", path) or "",
        email=_optional_str(data, "email", path) or "",
        department=_optional_str(data, "department", path),
    )


def _parse_project(data: Any, path: _Path) -> tuple[str, Project | None]:
    if not isinstance(data, dict):
        raise BoardValidationError(f"{path}: expected mapping for project")
    _assert_allowed_keys(data, _PROJECT_KEYS, path)
    project_id = _require_str(data, "id", path)
    name = _require_str(data, "name", path)

    if data.get("start_date") is None:
        logger.warning("%s: project %r has no start_date and is left off the chart", path, name)
        return project_id, None

    progress = data.get("progress", 0)
    if progress is None:
        progress = 0
    if isinstance(progress, bool) or not isinstance(progress, (int, float)):
        raise BoardValidationError(f"{path.child('progress')}: expected number")

    return project_id, Project(
        id=project_id,
        name=name,
        start_date=_parse_date(data["start_date"], path.child("start_date")),
        end_date=_optional_date(data, "end_date", path),
        deadline=_optional_date(data, "deadline", path),
        progress=progress,
        assignee_id=_optional_str(data, "assignee_id", path),
        multi_assignee_ids=_parse_id_list(data.get("multi_assignee_ids"), path.child("multi_assignee_ids")),
    )


def _parse_task(data: Any, path: _Path, known_projects: set[str]) -> Task:
    if not isinstance(data, dict):
        raise BoardValidationError(f"{path}: expected mapping for task")
    _assert_allowed_keys(data, _TASK_KEYS, path)
    project_id = _require_str(data, "project_id", path)
    if project_id not in known_projects:
        raise BoardValidationError(f"{path.child('project_id')}: unknown project '{project_id}'")

    status = data.get("status", "todo")
    if status not in TASK_STATUSES:
        raise BoardValidationError(f"{path.child('status')}: expected one of {list(TASK_STATUSES)}")

    return Task(
        id=_require_str(data, "id", path),
        project_id=project_id,
        status=status,
        name=_optional_str(data, "name", path) or "",
        assignee_id=_optional_str(data, "assignee_id", path),
        start_date=_optional_date(data, "start_date", path),
        end_date=_optional_date(data, "end_date", path),
    )


def _attach_tasks(project: Project, board: Board) -> Project:
    return replace(project, tasks=tuple(board.project_tasks(project.id)))


def _assert_allowed_keys(data: dict[str, Any], allowed: set[str], path: _Path) -> None:
    extras = sorted(str(key) for key in set(data.keys()) - allowed)
    if extras:
        raise BoardValidationError(f"{path}: unexpected fields {extras}")


def _assert_unique_ids(ids: list[str], path: _Path) -> None:
    seen: set[str] = set()
    for idx, value in enumerate(ids):
        if value in seen:
            raise BoardValidationError(f"{path}[{idx}].id: duplicate id '{value}'")
        seen.add(value)


def _optional_list(data: dict[str, Any], key: str, path: _Path) -> list[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise BoardValidationError(f"{path.child(key)}: expected list")
    return value


def _require_str(data: dict[str, Any], key: str, path: _Path) -> str:
    if key not in data:
        raise BoardValidationError(f"{path}: missing required field '{key}'")
    value = data[key]
    # YAML turns bare numeric ids into ints; accept them as strings.
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    if not isinstance(value, str) or not value.strip():
        raise BoardValidationError(f"{path.child(key)}: expected non-empty string")
    return value


def _optional_str(data: dict[str, Any], key: str, path: _Path) -> str | None:
    if data.get(key) is None:
        return None
    return _require_str(data, key, path)


def _parse_id_list(value: Any, path: _Path) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise BoardValidationError(f"{path}: expected list of ids")
    ids: list[str] = []
    for idx, item in enumerate(value):
        if isinstance(item, int) and not isinstance(item, bool):
            item = str(item)
        if not isinstance(item, str):
            raise BoardValidationError(f"{path}[{idx}]: expected string id")
        ids.append(item)
    return tuple(ids)


def _optional_date(data: dict[str, Any], key: str, path: _Path) -> _dt.date | None:
    value = data.get(key)
    if value is None:
        return None
    return _parse_date(value, path.child(key))


def _parse_date(value: Any, path: _Path) -> _dt.date:
    if isinstance(value, _dt.datetime):
        return value.date()
    if isinstance(value, _dt.date):
        return value
    if not isinstance(value, str):
        raise BoardValidationError(f"{path}: expected YYYY-MM-DD date")
    try:
        return _dt.date.fromisoformat(value[:10])
    except ValueError as exc:
        raise BoardValidationError(f"{path}: expected YYYY-MM-DD date") from exc
