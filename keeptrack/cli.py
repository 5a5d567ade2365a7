#!/usr/bin/env python3
"""
KeepTrack — command-line board

Loads the board (cache first, then the API), prints it as text columns,
and applies drag-and-drop style moves.

Usage:
    python -m keeptrack board
    python -m keeptrack move 2 done 0          # move project 2 to the top of Done
    python -m keeptrack show 2
    python -m keeptrack reset-cache
    python -m keeptrack --api http://localhost:4000 board
"""
import argparse
import asyncio
import logging
import sys
from typing import Dict, List, Optional

from .board import BoardController
from .cache import LocalCache, SQLiteStorage
from .config import Config
from .errors import KeepTrackError
from .gateway import ProjectGateway
from .reorder import MoveEvent, column
from .schema import COLUMNS, Project, is_valid_status


# ── Formatting ─────────────────────────────────────────────────────────────


def format_board(groups: Dict[str, List[Project]]) -> str:
    """Render the per-column view as plain text."""
    lines = []
    for title, status in COLUMNS:
        cards = groups.get(status, [])
        lines.append(f"{title} ({len(cards)})")
        for p in cards:
            lines.append(f"  #{p.id} {p.name} ({p.order})")
    return "\n".join(lines)


def format_project(project: Project) -> str:
    lines = [
        f"#{project.id}: {project.name}",
        f"Status: {project.status}",
        f"Order: {project.order}",
        f"Budget: {project.budget}",
        f"Active: {'yes' if project.is_active else 'no'}",
    ]
    if project.description:
        lines.append(f"Description: {project.description}")
    if project.contract_signed_on:
        lines.append(f"Contract signed: {project.contract_signed_on.date().isoformat()}")
    return "\n".join(lines)


# ── Commands ───────────────────────────────────────────────────────────────


def build_controller(cfg: Config) -> BoardController:
    gateway = ProjectGateway(cfg.api_base_url, timeout=cfg.request_timeout)
    cache = LocalCache(SQLiteStorage(cfg.cache_path))
    return BoardController(gateway, cache)


async def cmd_board(controller: BoardController, args) -> int:
    await controller.load()
    print(format_board(controller.get_by_column()))
    return 0


async def cmd_move(controller: BoardController, args) -> int:
    if not is_valid_status(args.column):
        print(f"Unknown column: {args.column}", file=sys.stderr)
        return 2
    await controller.load()
    project = controller.find(args.id)
    if project is None:
        print(f"Project {args.id} not found", file=sys.stderr)
        return 1

    source_index = [p.id for p in column(controller.projects, project.status)].index(project.id)
    event = MoveEvent(
        dragged_id=project.id,
        source_column=project.status,
        source_index=source_index,
        dest_column=args.column,
        dest_index=args.index,
    )
    await controller.apply_move(event)
    print(format_board(controller.get_by_column()))
    if controller.error:
        print(f"\nError: {controller.error}", file=sys.stderr)
        return 1
    return 0


async def cmd_show(controller: BoardController, args) -> int:
    project = await asyncio.to_thread(controller.gateway.fetch_one, args.id)
    print(format_project(project))
    return 0


async def cmd_reset_cache(controller: BoardController, args) -> int:
    controller.cache.clear()
    print("Local cache cleared.")
    return 0


COMMANDS = {
    "board": cmd_board,
    "move": cmd_move,
    "show": cmd_show,
    "reset-cache": cmd_reset_cache,
}


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="keeptrack", description="KeepTrack project board")
    ap.add_argument("--config", default=None, help="Path to keeptrack.yaml")
    ap.add_argument("--api", default=None, help="API base URL (e.g. http://localhost:4000)")
    ap.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    sub = ap.add_subparsers(dest="command", required=True)
    sub.add_parser("board", help="Print the board")

    move = sub.add_parser("move", help="Move a project to a column position")
    move.add_argument("id", type=int)
    move.add_argument("column", help="backlog|todo|in-progress|review|done|blocked")
    move.add_argument("index", type=int)

    show = sub.add_parser("show", help="Fetch one project from the API")
    show.add_argument("id", type=int)

    sub.add_parser("reset-cache", help="Clear the local cache")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [keeptrack] %(levelname)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    cfg = Config.load(args.config)
    if args.api:
        cfg.api_base_url = args.api

    controller = build_controller(cfg)
    try:
        return asyncio.run(COMMANDS[args.command](controller, args))
    except KeepTrackError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
