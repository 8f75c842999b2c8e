"""Command-line interface for archfit."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from engine.fitness import Project, check_project
from engine.report import format_edgelist, format_text, render_json, write_report
from errors import ArchfitError
from rules.config import load_config

if TYPE_CHECKING:
    from collections.abc import Callable


def _add_common_paths(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Repository root (default: .)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Config file (default: <root>/archfit.toml)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log rule evaluation (-v: info, -vv: every edge)",
    )


def _bounded_int(minimum: int) -> Callable[[str], int]:
    def parse(text: str) -> int:
        try:
            value = int(text)
        except ValueError as exc:
            msg = f"invalid int value: '{text}'"
            raise argparse.ArgumentTypeError(msg) from exc
        if value < minimum:
            msg = f"must be >= {minimum}, got {value}"
            raise argparse.ArgumentTypeError(msg)
        return value

    return parse


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="archfit")
    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser(
        "check", help="Check the source tree against its architecture rules"
    )
    _add_common_paths(check_parser)
    check_parser.add_argument(
        "--baseline",
        type=_bounded_int(0),
        default=None,
        help="Tolerated number of violations (default: config baseline)",
    )
    check_parser.add_argument(
        "--workers",
        type=_bounded_int(1),
        default=None,
        help="Threads for extraction and validation (default: config workers)",
    )
    check_parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Report format (default: text)",
    )
    check_parser.add_argument(
        "--output",
        default=None,
        help="Write the report to a file instead of stdout",
    )

    graph_parser = subparsers.add_parser(
        "graph", help="Print the module dependency edge list"
    )
    _add_common_paths(graph_parser)
    graph_parser.add_argument(
        "--output",
        default=None,
        help="Write the edge list to a file instead of stdout",
    )

    return parser


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _resolve_config_path(config: str | None) -> Path | None:
    if config is None:
        return None
    return Path(config).expanduser().resolve()


def _handle_check(args: argparse.Namespace, root: Path) -> int:
    config = load_config(root, _resolve_config_path(args.config))
    if not config.components:
        sys.stderr.write("warning: no components declared; nothing to check\n")

    outcome = check_project(
        root, config, baseline=args.baseline, workers=args.workers
    )

    if args.output is not None:
        write_report(Path(args.output), outcome, fmt=args.format)
    elif args.format == "json":
        sys.stdout.write(render_json(outcome).decode("utf-8") + "\n")
    else:
        sys.stdout.write(format_text(outcome))

    return 0 if outcome.ok else 1


def _handle_graph(args: argparse.Namespace, root: Path) -> int:
    config = load_config(root, _resolve_config_path(args.config))
    project = Project.from_config(root, config)
    graph = project.module_graph(
        workers=config.workers,
        track_attribute_paths=config.track_attribute_paths,
    )
    edgelist = format_edgelist(graph)

    if args.output is not None:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(edgelist, encoding="utf-8")
    else:
        sys.stdout.write(edgelist)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)
    root = Path(args.root).expanduser().resolve()

    try:
        if args.command == "check":
            return _handle_check(args, root)

        if args.command == "graph":
            return _handle_graph(args, root)
    except (ArchfitError, NotADirectoryError) as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    raise AssertionError


if __name__ == "__main__":
    raise SystemExit(main())
