from __future__ import annotations

from datetime import date
from typing import Iterable, List

from .models import Board, UserRow
from .ownership import projects_for_user
from .stacking import stack_projects, summarize_stacking


def to_user_rows(
    board: Board,
    week_start: date,
    week_end: date,
    today: date | None = None,
    user_ids: Iterable[str] | None = None,
) -> list[UserRow]:
    """
    Build one render row per user for the window ``[week_start, week_end]``.

    Users keep their board order. Each row holds the user's stacked visible
    projects; users without visible work still get a minimal empty row.
    ``user_ids`` restricts the output to the given users.
    """

    wanted = set(user_ids) if user_ids is not None else None
    rows: List[UserRow] = []

    for user in board.users:
        if wanted is not None and user.id not in wanted:
            continue
        user_projects = projects_for_user(user, board.projects, board.tasks)
        layout = stack_projects(user_projects, week_start, week_end, today=today)
        summarize_stacking(layout, len(user_projects))
        rows.append(UserRow(order=len(rows), user=user, layout=layout, project_count=len(user_projects)))

    return rows


def layout_table(rows: Iterable[UserRow]) -> str:
    """Plain-text summary of the computed rows, one line per stacked project."""
    lines: List[str] = []
    for row in rows:
        lines.append(f"{row.user.full_name} ({row.user.id}): {row.layout.total_height}px")
        if row.layout.is_empty:
            lines.append("  (no visible projects)")
        for stacked in row.layout.projects:
            lines.append(
                f"  [{stacked.stack_level}] {stacked.project.name}: top={stacked.top} "
                f"height={stacked.height} tasks={len(stacked.visible_tasks)}"
            )
    return "\n".join(lines)
