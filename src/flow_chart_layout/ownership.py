from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Iterable, Sequence

from .models import FlowProject, Project, Task, User

logger = logging.getLogger(__name__)


def projects_for_user(user: User, all_projects: Sequence[Project], all_tasks: Sequence[Task]) -> list[FlowProject]:
    """
    Select the projects shown in a user's row and the tasks they may see.

    A project is included when the user is its primary assignee or owns at
    least one of its tasks. Primary assignees see every task; secondary
    assignees and task-only participants see only their own tasks.
    Input order of projects and tasks is preserved.
    """

    tasks_by_project: dict[str, list[Task]] = {}
    for task in all_tasks:
        tasks_by_project.setdefault(task.project_id, []).append(task)

    result: list[FlowProject] = []
    for project in all_projects:
        project_tasks = tasks_by_project.get(project.id, [])
        own_tasks = [task for task in project_tasks if task.assignee_id == user.id]
        is_main = project.assignee_id == user.id

        if not (is_main or own_tasks):
            continue

        is_secondary = user.id in _assignee_ids(project.multi_assignee_ids)
        entitled = project_tasks if is_main else own_tasks
        logger.debug(
            "User %s - project %r: main=%s secondary=%s own_tasks=%d of %d",
            user.id,
            project.name,
            is_main,
            is_secondary,
            len(own_tasks),
            len(project_tasks),
        )
        result.append(
            replace(
                project,
                multi_assignee_ids=_assignee_ids(project.multi_assignee_ids),
                tasks=tuple(entitled),
            )
        )

    logger.debug("Projects for %s: %d of %d", user.full_name, len(result), len(all_projects))
    return result


def describe_user_projects(user: User, projects: Iterable[FlowProject]) -> list[dict[str, Any]]:
    """Per-project summary of a user's relationship to each project, for diagnostics."""
    return [
        {
            "name": project.name,
            "task_count": len(project.tasks),
            "is_main_assignee": project.assignee_id == user.id,
            "is_additional_assignee": user.id in _assignee_ids(project.multi_assignee_ids),
        }
        for project in projects
    ]


def _assignee_ids(value: Any) -> tuple[str, ...]:
    """Coerce an assignee list to a tuple of ids; anything that is not a list of strings counts as empty."""
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(item for item in value if isinstance(item, str))
