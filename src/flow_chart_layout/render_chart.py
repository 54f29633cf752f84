from __future__ import annotations

import datetime as dt
from importlib import metadata
from pathlib import Path
from typing import Iterable

import matplotlib

matplotlib.use("Agg")  # ensure headless, deterministic output
import matplotlib.pyplot as plt
from matplotlib.patches import Rectangle

from .models import Project, StackedProject, Task, UserRow, task_effective_end, task_effective_start
from .stacking import (
    PROJECT_BORDER,
    PROJECT_HEADER_HEIGHT,
    PROJECT_PADDING,
    TASK_BAR_HEIGHT,
    TASK_BAR_SPACING,
    TASK_CONTAINER_PADDING,
)
from .visibility import intervals_overlap, is_overdue, visual_boundaries
from .weeks import column_position, generate_work_dates, is_weekend, position_from_today

# Vertical units are layout pixels; horizontal units are percent of the week area.
USER_HEADER_PX = 28
DATE_HEADER_PX = 24
PX_PER_INCH = 72.0
FIG_WIDTH_INCH = 14.0
FONT_SCALE = 1.0
TITLE_FONT = 14 * FONT_SCALE
USER_FONT = 11 * FONT_SCALE
PROJECT_FONT = 9 * FONT_SCALE
TASK_FONT = 8 * FONT_SCALE
FOOTER_FONT = 8 * FONT_SCALE
STATUS_COLORS = {"todo": "#d9e2f3", "in-progress": "#fde9b6", "done": "#d5e8d4"}
OVERDUE_EDGE = "#c0392b"
WEEKEND_SHADE = "#f2f2f2"
TITLE_Y = 0.995


def render_flow_chart(
    rows: list[UserRow],
    out_path: str,
    week_start: dt.date,
    week_end: dt.date,
    title: str = "",
    today: dt.date | None = None,
) -> None:
    """
    Render a static SVG flow chart of user rows to `out_path`.

    - Each user gets a header band followed by a body sized to the row's total height.
    - Stacked projects are drawn at their computed top offsets and heights.
    - Task bars sit inside their project in visible-task order.
    """

    if not rows:
        raise ValueError("rows must not be empty")

    today = today or dt.date.today()
    columns = generate_work_dates(week_start)
    colors = _project_colors(stacked.project for row in rows for stacked in row.layout.projects)

    total_px = DATE_HEADER_PX + sum(USER_HEADER_PX + row.layout.total_height for row in rows)
    fig = plt.figure(figsize=(FIG_WIDTH_INCH, max(2.0, total_px / PX_PER_INCH + 1.0)))
    gs = fig.add_gridspec(1, 2, width_ratios=[1.0, 5.0], wspace=0.02, left=0.02, right=0.98, top=0.95, bottom=0.04)
    label_ax = fig.add_subplot(gs[0, 0])
    ax = fig.add_subplot(gs[0, 1], sharey=label_ax)

    ax.set_xlim(0, 100)
    ax.set_ylim(total_px, 0)
    ax.set_xticks([])
    ax.set_yticks([])
    label_ax.set_xlim(0, 1)
    label_ax.axis("off")

    fig.suptitle(title, x=0.5, fontsize=TITLE_FONT, y=TITLE_Y)
    footer = f"Flow chart layout v{_tool_version()} - week of {week_start:%b %d, %Y}"
    fig.text(0.99, 0.005, footer, ha="right", va="bottom", fontsize=FOOTER_FONT, alpha=0.8)

    _draw_columns(ax, columns, week_start, total_px, today)

    y = DATE_HEADER_PX
    for row in rows:
        ax.add_patch(Rectangle((0, y), 100, USER_HEADER_PX, facecolor="#e8e8e8", edgecolor="none", zorder=1))
        label_ax.text(
            0.98,
            y + USER_HEADER_PX / 2,
            row.user.full_name,
            ha="right",
            va="center",
            fontsize=USER_FONT,
            fontweight="bold",
            transform=label_ax.transData,
        )
        body_top = y + USER_HEADER_PX
        for stacked in row.layout.projects:
            _draw_project(ax, stacked, body_top, week_start, week_end, today, colors.get(stacked.project.id, "#999999"))
        y = body_top + row.layout.total_height
        ax.axhline(y, color="#bbbbbb", linewidth=0.5, zorder=1)

    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_path, format="svg", bbox_inches="tight")
    plt.close(fig)


def _draw_columns(ax, columns: list[dt.date], week_start: dt.date, total_px: float, today: dt.date) -> None:
    for day in columns:
        left, width = column_position(day, day, week_start)
        if is_weekend(day):
            ax.add_patch(Rectangle((left, 0), width, total_px, facecolor=WEEKEND_SHADE, edgecolor="none", zorder=0))
        if day == today:
            ax.add_patch(Rectangle((left, 0), width, total_px, facecolor="#fff6d5", edgecolor="none", zorder=0))
        ax.axvline(left, color="#dddddd", linewidth=0.5, zorder=0)
        label = f"{day:%a}" if is_weekend(day) else f"{day:%a} {day:%b} {day.day}"
        ax.text(left + width / 2, DATE_HEADER_PX / 2, label, ha="center", va="center", fontsize=TASK_FONT)


def _draw_project(
    ax,
    stacked: StackedProject,
    row_top: float,
    week_start: dt.date,
    week_end: dt.date,
    today: dt.date,
    color: str,
) -> None:
    project = stacked.project
    visual_start, visual_end = visual_boundaries(
        project.start_date, project.resolved_end, week_start, week_end, project.has_no_end
    )
    left, width = column_position(visual_start, visual_end, week_start)
    top = row_top + stacked.top
    ax.add_patch(
        Rectangle(
            (left, top),
            width,
            stacked.height,
            facecolor=color,
            alpha=0.25,
            edgecolor=color,
            linewidth=PROJECT_BORDER / 2,
            zorder=2,
        )
    )
    header_y = top + PROJECT_BORDER + PROJECT_PADDING + PROJECT_HEADER_HEIGHT / 2
    ax.text(
        left + 0.5,
        header_y,
        f"{project.name} ({project.progress:g}%)",
        ha="left",
        va="center",
        fontsize=PROJECT_FONT,
        fontweight="bold",
        zorder=4,
        clip_on=True,
    )

    task_top = top + PROJECT_BORDER + PROJECT_PADDING + PROJECT_HEADER_HEIGHT + TASK_CONTAINER_PADDING / 2
    for idx, task in enumerate(stacked.visible_tasks):
        bar_top = task_top + idx * (TASK_BAR_HEIGHT + TASK_BAR_SPACING)
        task_left, task_width = _task_columns(task, project, week_start, week_end, today, (left, width))
        overdue = is_overdue(task, today)
        ax.add_patch(
            Rectangle(
                (task_left, bar_top),
                task_width,
                TASK_BAR_HEIGHT,
                facecolor=STATUS_COLORS.get(task.status, "#eeeeee"),
                edgecolor=OVERDUE_EDGE if overdue else "#666666",
                linewidth=1.2 if overdue else 0.5,
                zorder=3,
            )
        )
        ax.text(
            task_left + 0.4,
            bar_top + TASK_BAR_HEIGHT / 2,
            task.name or task.id,
            ha="left",
            va="center",
            fontsize=TASK_FONT,
            zorder=4,
            clip_on=True,
        )


def _task_columns(
    task: Task,
    project: Project,
    week_start: dt.date,
    week_end: dt.date,
    today: dt.date,
    project_columns: tuple[float, float],
) -> tuple[float, float]:
    """Horizontal placement of a task bar; dateless tasks span their project bar."""
    if task.has_no_dates:
        return project_columns
    start = task_effective_start(task, project.start_date)
    end = task_effective_end(task, project.resolved_end)
    if is_overdue(task, today) and not intervals_overlap(start, end, week_start, week_end):
        return position_from_today(week_start, today)
    return column_position(max(start, week_start), min(end, week_end), week_start)


def _project_colors(projects: Iterable[Project]) -> dict[str, str]:
    project_ids = sorted({project.id for project in projects})
    palette = plt.get_cmap("tab20")
    return {pid: matplotlib.colors.to_hex(palette(i % palette.N)) for i, pid in enumerate(project_ids)}


def _tool_version() -> str:
    try:
        return metadata.version("flow-chart-layout")
    except Exception:
        return "0.0.0"
