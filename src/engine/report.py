"""Text and JSON rendering of check outcomes."""

from __future__ import annotations

from typing import TYPE_CHECKING

import orjson

if TYPE_CHECKING:
    from pathlib import Path

    from engine.result import BaselineOutcome
    from graph.module_graph import ModuleGraph


def format_text(outcome: BaselineOutcome) -> str:
    """Render violations grouped by component, followed by the baseline verdict."""
    lines: list[str] = []
    for component, violations in outcome.result.by_component().items():
        lines.append(f"[{component or '-'}]")
        for violation in violations:
            lines.append(f"  {violation.message}")
            lines.append(f"    rule: {violation.rule_description}")
    lines.append(outcome.describe())
    return "\n".join(lines) + "\n"


def render_json(outcome: BaselineOutcome) -> bytes:
    opts = orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2
    return orjson.dumps(outcome.to_dict(), option=opts)


def write_report(path: Path, outcome: BaselineOutcome, *, fmt: str = "json") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if fmt == "json":
        path.write_bytes(render_json(outcome))
    else:
        path.write_text(format_text(outcome), encoding="utf-8")


def format_edgelist(graph: ModuleGraph) -> str:
    return "".join(f"{source} -> {target}\n" for source, target in graph.edges())


__all__ = ["format_edgelist", "format_text", "render_json", "write_report"]
