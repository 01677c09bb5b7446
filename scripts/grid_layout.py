#!/usr/bin/env python3
"""Inspect and edit stored grid layouts from the command line."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from grid_engine import GridConfig, LayoutEditor
from grid_engine.contracts import Layout, WidgetId
from grid_engine.occupancy import render_text, summarize_layout
from grid_engine.templates import TEMPLATES
from layout_store import LayoutStore

EXIT_OK = 0
EXIT_REJECTED = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Grid layout tool: place, move, displace and compact widgets"
    )
    parser.add_argument(
        "--store", default="layouts.json", help="Path to the JSON layout store"
    )
    parser.add_argument("--page", default="dashboard", help="Page id inside the store")
    parser.add_argument(
        "--cell-size",
        type=float,
        default=GridConfig.cell_size,
        help="Cell size in pixels (used to convert drag deltas)",
    )
    parser.add_argument(
        "--gap", type=float, default=GridConfig.gap, help="Gap between cells in pixels"
    )
    parser.add_argument(
        "--auto-compact",
        action="store_true",
        help="Compact the page after every accepted move",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logs"
    )

    sub = parser.add_subparsers(dest="command", required=True)

    init = sub.add_parser("init", help="Create a page layout")
    init.add_argument(
        "--template",
        choices=sorted(TEMPLATES),
        default=None,
        help="Seed the page from a starter layout",
    )
    init.add_argument("--columns", type=int, default=GridConfig.columns)
    init.add_argument("--rows", type=int, default=GridConfig.rows)
    init.add_argument(
        "--force", action="store_true", help="Overwrite an existing page"
    )

    sub.add_parser("show", help="Print the grid and its widgets")
    sub.add_parser("check", help="Report overlap/bounds violations")
    sub.add_parser("compact", help="Close gaps in reading order")

    move = sub.add_parser("move", help="Move a widget, displacing what it covers")
    move.add_argument("widget_id")
    move.add_argument("x", type=int)
    move.add_argument("y", type=int)

    drag = sub.add_parser(
        "drag", help="Replay a drag gesture given as a cumulative pixel delta"
    )
    drag.add_argument("widget_id")
    drag.add_argument("dx", type=float)
    drag.add_argument("dy", type=float)
    drag.add_argument(
        "--dry-run", action="store_true", help="Report feedback, then cancel"
    )

    hide = sub.add_parser("hide", help="Hide a widget")
    hide.add_argument("widget_id")
    reveal = sub.add_parser("reveal", help="Show a hidden widget")
    reveal.add_argument("widget_id")
    return parser


def _resolve_id(layout: Layout, raw: str) -> Optional[WidgetId]:
    """Match a command-line id against stored ids, which may be ints."""
    for widget in layout:
        if str(widget.id) == raw:
            return widget.id
    return None


def _print_layout(editor: LayoutEditor) -> None:
    summary = summarize_layout(editor.page_id, editor.grid, editor.layout)
    print(f"Page: {summary.page_id}")
    print(f"Grid: {summary.grid.columns}x{summary.grid.rows}")
    print(f"Widgets: {summary.widget_count} ({summary.hidden_count} hidden)")
    print(f"Fill: {summary.fill_ratio:.0%}")
    print()
    print(render_text(editor.grid, editor.layout))
    print()
    for widget in editor.layout:
        state = "" if widget.visible else "  [hidden]"
        print(
            f"  {widget.id}: ({widget.x}, {widget.y}) "
            f"{widget.width}x{widget.height}{state}"
        )


def _run_init(args: argparse.Namespace, store: LayoutStore, base: GridConfig) -> int:
    if store.has_layout(args.page) and not args.force:
        print(f"Page {args.page!r} already exists (use --force)", file=sys.stderr)
        return EXIT_USAGE
    if args.template:
        grid, layout = TEMPLATES[args.template]()
        grid = GridConfig(
            columns=grid.columns, rows=grid.rows,
            cell_size=base.cell_size, gap=base.gap,
        )
    else:
        grid = GridConfig(
            columns=args.columns, rows=args.rows,
            cell_size=base.cell_size, gap=base.gap,
        )
        layout = []
    store.save_layout(args.page, layout, grid)
    print(f"Initialized {args.page!r}: {grid.columns}x{grid.rows}, {len(layout)} widgets")
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        base = GridConfig(cell_size=args.cell_size, gap=args.gap)
    except ValueError as exc:
        print(f"Invalid grid metrics: {exc}", file=sys.stderr)
        return EXIT_USAGE
    store = LayoutStore(args.store)

    if args.command == "init":
        try:
            return _run_init(args, store, base)
        except ValueError as exc:
            print(f"Cannot update {args.store}: {exc}", file=sys.stderr)
            return EXIT_USAGE

    try:
        if not store.has_layout(args.page):
            print(f"No layout stored for page {args.page!r}", file=sys.stderr)
            return EXIT_USAGE
        editor = LayoutEditor.from_store(
            store, args.page, base, auto_compact=args.auto_compact
        )
    except ValueError as exc:
        print(f"Cannot load {args.page!r} from {args.store}: {exc}", file=sys.stderr)
        return EXIT_USAGE

    if args.command == "show":
        _print_layout(editor)
        return EXIT_OK

    if args.command == "check":
        summary = summarize_layout(editor.page_id, editor.grid, editor.layout)
        if summary.is_valid:
            print("OK")
            return EXIT_OK
        for issue in summary.violations:
            print(issue)
        return EXIT_REJECTED

    if args.command == "compact":
        editor.compact()
        _print_layout(editor)
        return EXIT_OK

    widget_id = _resolve_id(editor.layout, args.widget_id)
    if widget_id is None:
        print(f"Unknown widget {args.widget_id!r} on {args.page!r}", file=sys.stderr)
        return EXIT_USAGE

    if args.command == "move":
        if not editor.move_widget(widget_id, args.x, args.y):
            print(f"Rejected: no room to move {widget_id} to ({args.x}, {args.y})")
            return EXIT_REJECTED
        _print_layout(editor)
        return EXIT_OK

    if args.command == "drag":
        editor.on_gesture_start(widget_id)
        feedback = editor.on_gesture_update(args.dx, args.dy)
        preview = feedback.preview_position
        where = f"({preview.x}, {preview.y})" if preview else "n/a"
        print(
            f"Preview: {where} valid={feedback.is_valid_drop} "
            f"displace={feedback.will_displace}"
        )
        if args.dry_run:
            editor.on_gesture_cancel()
            return EXIT_OK if feedback.is_valid_drop else EXIT_REJECTED
        if not editor.on_gesture_end():
            print("Rejected: invalid drop")
            return EXIT_REJECTED
        _print_layout(editor)
        return EXIT_OK

    if args.command in {"hide", "reveal"}:
        if not editor.set_visibility(widget_id, args.command == "reveal"):
            print(f"Rejected: no room to show {widget_id}")
            return EXIT_REJECTED
        _print_layout(editor)
        return EXIT_OK

    parser.error(f"unhandled command {args.command}")
    return EXIT_USAGE


if __name__ == "__main__":
    raise SystemExit(main())
