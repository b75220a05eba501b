"""conceptour launcher.

Parses the command line, loads the graph snapshot and settings, and runs
preflight checks before importing GTK-related modules, which gives clearer
error messages on new systems.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from conceptour.config import load_settings
from conceptour.graph import GraphData, GraphError, load_snapshot
from conceptour.outline import display_label, indent_level

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def format_path(graph: GraphData, path: list[str]) -> str:
    """Render a tour path as an indented, numbered outline."""
    lines = []
    for step, node_id in enumerate(path, 1):
        node = graph.get_node(node_id)
        if node is None:
            continue
        indent = "  " * indent_level(node.type)
        lines.append(f"{step:>3}. {indent}{display_label(node.label)} [{node.type.value}]")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="conceptour")
    parser.add_argument(
        "graph",
        nargs="?",
        help="Graph snapshot (JSON with nodes/links) to explore; a sample graph is used if omitted",
    )
    parser.add_argument(
        "--print-path",
        action="store_true",
        help="Print the guided tour order and exit without opening a window",
    )
    parser.add_argument("--log-level", help="Override the configured log level (e.g. DEBUG)")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    settings = load_settings()
    if args.log_level:
        settings.log_level = args.log_level
    configure_logging(settings.log_level)

    try:
        if args.graph:
            graph = load_snapshot(Path(args.graph))
        else:
            from conceptour.sample import sample_graph
            graph = sample_graph()
    except (OSError, GraphError) as exc:
        sys.stderr.write(f"Cannot load graph: {exc}\n")
        return 1

    if args.print_path:
        from conceptour.tour import TourController

        controller = TourController(graph)
        controller.prepare(graph.custom_order)
        print(format_path(graph, controller.path))
        return 0

    from conceptour.preflight import run_preflight_or_die

    run_preflight_or_die(require_display=True, check_deps=True)

    from conceptour.app import main as app_main

    return int(app_main(graph, settings))


if __name__ == "__main__":
    raise SystemExit(main())
