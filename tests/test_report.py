from __future__ import annotations

from typing import TYPE_CHECKING

import orjson

from engine.report import format_edgelist, format_text, render_json, write_report
from engine.result import ValidationResult, Violation, check_baseline
from graph.module_graph import build_module_graph
from scan.files import SourceFile

if TYPE_CHECKING:
    from pathlib import Path

OUTCOME = check_baseline(
    ValidationResult(
        violations=(
            Violation(
                source_module="shop.domain.order",
                target_dependency="os",
                rule_description="Domain must not depend on anything",
                message="os is an external dependency not allowed for Domain "
                "(shop.domain.order -> os)",
                component="Domain",
            ),
            Violation(
                source_module="shop.ui.view",
                target_dependency="shop.infrastructure.db",
                rule_description="Ui must not depend on [Infrastructure]",
                message="Ui must not depend on component Infrastructure "
                "(shop.ui.view -> shop.infrastructure.db)",
                component="Ui",
            ),
        )
    ),
    baseline=1,
)


def test_format_text_groups_violations_by_component() -> None:
    assert format_text(OUTCOME).splitlines() == [
        "[Domain]",
        "  os is an external dependency not allowed for Domain "
        "(shop.domain.order -> os)",
        "    rule: Domain must not depend on anything",
        "[Ui]",
        "  Ui must not depend on component Infrastructure "
        "(shop.ui.view -> shop.infrastructure.db)",
        "    rule: Ui must not depend on [Infrastructure]",
        "Detected 2 > 1 violation(s)",
    ]


def test_format_text_for_a_clean_run_is_the_verdict_only() -> None:
    outcome = check_baseline(ValidationResult())

    assert format_text(outcome) == "0 violation(s), within baseline 0\n"


def test_render_json_is_stable_and_complete() -> None:
    payload = orjson.loads(render_json(OUTCOME))

    assert payload["ok"] is False
    assert payload["baseline"] == 1
    assert payload["violation_count"] == 2
    assert payload["violations"][0] == {
        "component": "Domain",
        "message": "os is an external dependency not allowed for Domain "
        "(shop.domain.order -> os)",
        "rule": "Domain must not depend on anything",
        "source_module": "shop.domain.order",
        "target_dependency": "os",
    }
    assert render_json(OUTCOME) == render_json(OUTCOME)


def test_write_report_creates_parent_directories(tmp_path: Path) -> None:
    json_path = tmp_path / "reports" / "archfit.json"
    text_path = tmp_path / "reports" / "archfit.txt"

    write_report(json_path, OUTCOME)
    write_report(text_path, OUTCOME, fmt="text")

    assert orjson.loads(json_path.read_bytes())["violation_count"] == 2
    assert text_path.read_text(encoding="utf-8") == format_text(OUTCOME)


def test_format_edgelist_lists_sorted_edges() -> None:
    graph = build_module_graph(
        [
            SourceFile("shop.b", "import os\nimport shop.a\n"),
            SourceFile("shop.a", "from typing import Any\n"),
        ]
    )

    assert format_edgelist(graph) == (
        "shop.a -> typing.Any\nshop.b -> os\nshop.b -> shop.a\n"
    )
