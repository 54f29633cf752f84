from __future__ import annotations

import argparse
import datetime as dt
import logging
import sys
import webbrowser
from pathlib import Path

import yaml

from .parse_board import BoardValidationError, load_board
from .render_chart import render_flow_chart
from .render_rows import layout_table, to_user_rows
from .weeks import week_label, week_monday, week_window

logger = logging.getLogger(__name__)


def _parse_date(value: str) -> dt.date:
    try:
        return dt.date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date '{value}', expected YYYY-MM-DD") from exc


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Per-user weekly project flow chart",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("board", help="Path to board YAML (users, projects, tasks)")
    parser.add_argument("--out", default="output/flow_chart.svg", help="Output SVG path")
    parser.add_argument("--week", type=_parse_date, help="Any day of the week to show (YYYY-MM-DD); defaults to today")
    parser.add_argument("--today", type=_parse_date, help="Override the current day used for overdue tasks")
    parser.add_argument("--user", dest="users", action="append", help="Only show this user id (repeatable)")
    parser.add_argument("--summary", action="store_true", help="Print the computed layout table to stdout")
    parser.add_argument(
        "--view",
        dest="view",
        action="store_true",
        default=True,
        help="Best-effort open the output file after rendering",
    )
    parser.add_argument(
        "--no-view",
        dest="view",
        action="store_false",
        help="Do not open the output file after rendering",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("matplotlib").setLevel(logging.WARNING)


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    board_path = Path(args.board)

    try:
        board = load_board(str(board_path))
    except (yaml.YAMLError, BoardValidationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    except FileNotFoundError:
        print(f"Error: board file not found: {board_path}", file=sys.stderr)
        return 1
    except Exception as exc:  # Unexpected
        print(f"Unexpected error while loading board: {exc}", file=sys.stderr)
        return 1

    today = args.today or dt.date.today()
    week_start, week_end = week_window(week_monday(args.week or today))
    rows = to_user_rows(board, week_start, week_end, today=today, user_ids=args.users)
    logger.info("Computed %d user rows for %s", len(rows), week_label(week_start))

    if args.summary:
        print(layout_table(rows))

    if not rows:
        print("Error: no users to render", file=sys.stderr)
        return 1

    try:
        render_flow_chart(
            rows=rows,
            out_path=args.out,
            week_start=week_start,
            week_end=week_end,
            title=week_label(week_start),
            today=today,
        )
    except Exception as exc:
        print(f"Unexpected error while rendering: {exc}", file=sys.stderr)
        return 1

    if args.view:
        try:
            webbrowser.open(Path(args.out).resolve().as_uri())
        except Exception:
            logger.debug("Could not open %s in a browser", args.out)

    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
