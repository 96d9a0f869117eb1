#!/usr/bin/env python3
"""Replay directional moves over a JSON layout and print where focus lands.

Example::

    spatial-nav-trace layout.json --config nav.json --start a right down down

The layout file holds ``{"elements": [{"id": "a", "rect": [0, 0, 100, 40],
"classes": ["item"]}, ...]}``. Sections come from ``--config`` (same format as
:func:`spatial_nav.config.load_nav_config`) or, without one, a single section
covering every element.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from spatial_nav.config import Direction, load_nav_config
from spatial_nav.errors import NavigationConfigError
from spatial_nav.events import NavEvent
from spatial_nav.logging_utils import (
    LOGGER_NAME,
    build_rotating_file_handler,
    configure_package_logger,
    resolve_logs_dir,
)
from spatial_nav.memory_host import InMemoryHost
from spatial_nav.navigator import SpatialNavigator

LOG_FILENAME = "spatial-nav-trace.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _parse_args(argv: List[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Trace spatial navigation moves over a layout file")
    parser.add_argument("layout", type=Path, help="JSON file describing element rects")
    parser.add_argument("moves", nargs="*", help="Directions to replay (left/right/up/down)")
    parser.add_argument("--config", type=Path, help="Navigation config JSON (global + sections)")
    parser.add_argument("--start", help="Element id to focus first; defaults to the default section's entry")
    parser.add_argument("--verbose", action="store_true", help="Print every lifecycle event and debug logs to stderr")
    parser.add_argument(
        "--log-file",
        action="store_true",
        help="Also write debug logs to spatial-nav-trace.log under SPATIAL_NAV_LOG_DIR, ./logs or the XDG state dir",
    )
    # Moves may follow options, e.g. "layout.json --start a right down".
    return parser.parse_intermixed_args(argv)


def _load_layout(path: Path) -> InMemoryHost:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Layout {path} must be a JSON object")
    return InMemoryHost.from_layout(data)


def _attach_log_handlers(args: argparse.Namespace) -> List[logging.Handler]:
    if not (args.verbose or args.log_file):
        return []
    logger = configure_package_logger(debug_enabled=True)
    formatter = logging.Formatter(LOG_FORMAT)
    handlers: List[logging.Handler] = []
    if args.verbose:
        stream = logging.StreamHandler(sys.stderr)
        stream.setFormatter(formatter)
        handlers.append(stream)
    if args.log_file:
        log_dir = resolve_logs_dir(Path.cwd(), log_dir_name="SpatialNavTrace")
        handlers.append(build_rotating_file_handler(log_dir, LOG_FILENAME, formatter=formatter))
    for handler in handlers:
        logger.addHandler(handler)
    return handlers


def _detach_log_handlers(handlers: List[logging.Handler]) -> None:
    if not handlers:
        return
    logger = logging.getLogger(LOGGER_NAME)
    for handler in handlers:
        logger.removeHandler(handler)
        handler.close()
    configure_package_logger()


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    handlers = _attach_log_handlers(args)
    try:
        return _trace(args)
    finally:
        _detach_log_handlers(handlers)


def _trace(args: argparse.Namespace) -> int:
    try:
        host = _load_layout(args.layout)
    except (OSError, ValueError) as exc:
        print(f"error: cannot load layout: {exc}", file=sys.stderr)
        return 2

    navigator = SpatialNavigator(host)
    navigator.init()
    try:
        if args.config is not None:
            navigator.apply_config(load_nav_config(args.config))
        if not navigator.section_count:
            navigator.add("all", {"selector": "*"})
    except NavigationConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if args.verbose:
        for event in NavEvent:
            host.bus.subscribe(event, lambda payload: print(f"  {payload.name} {payload.target!r}"))
    host.bus.subscribe(
        NavEvent.NAVIGATE_FAILED,
        lambda payload: print(f"  no target {payload.detail['direction']} of {payload.target!r}"),
    )

    if args.start:
        start = host.get(args.start)
        if start is None:
            print(f"error: unknown element '{args.start}'", file=sys.stderr)
            return 2
        focused = navigator.focus(start)
    else:
        focused = navigator.focus()
    if not focused:
        print("error: nothing focusable", file=sys.stderr)
        return 1
    print(f"start: {host.current_focus()!r}")

    for raw in args.moves:
        direction = Direction.coerce(raw)
        if direction is None:
            print(f"error: unknown direction '{raw}'", file=sys.stderr)
            return 2
        navigator.move(direction)
        print(f"{direction.value}: {host.current_focus()!r}")
    navigator.uninit()
    return 0


if __name__ == "__main__":
    sys.exit(main())
