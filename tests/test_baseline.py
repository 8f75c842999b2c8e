from __future__ import annotations

import logging
from pathlib import Path

import pytest

from engine.fitness import Architecture, Project, check_project
from engine.result import ValidationResult, Violation, check_baseline
from errors import ArchitectureViolationError
from rules.builder import ArchitecturalRules
from rules.config import load_config
from scan.files import SourceFile

RULES = (
    ArchitecturalRules.define()
    .component("Domain")
    .located_at("shop.domain")
    .must_not_depend_on_anything()
    .component("Application")
    .located_at("shop.application")
    .may_depend_on("Domain")
    .build()
)

# Three edges leave the domain: two into Application, one external.
PROJECT = Project.from_sources(
    [
        SourceFile("shop.domain.order", "import shop.application.service\nimport json\n"),
        SourceFile("shop.domain.money", "from shop.application.dto import Amount\n"),
        SourceFile("shop.application.service", "import shop.domain.order\n"),
    ]
)


def _result(count: int) -> ValidationResult:
    return ValidationResult(
        violations=tuple(
            Violation(f"shop.domain.m{i}", "os", "rule", f"message {i}")
            for i in range(count)
        )
    )


def test_count_above_baseline_fails_with_comparison_message() -> None:
    outcome = check_baseline(_result(3), baseline=2)

    assert not outcome.ok
    assert outcome.describe() == "Detected 3 > 2 violation(s)"


def test_count_equal_to_baseline_passes() -> None:
    outcome = check_baseline(_result(3), baseline=3)

    assert outcome.ok
    assert outcome.describe() == "3 violation(s), within baseline 3"
    assert outcome.raise_for_status() is outcome


def test_default_baseline_is_zero() -> None:
    assert check_baseline(_result(0)).ok
    assert not check_baseline(_result(1)).ok


def test_negative_baseline_is_rejected() -> None:
    with pytest.raises(ValueError, match="baseline"):
        check_baseline(_result(0), baseline=-1)

    with pytest.raises(ValueError, match="baseline"):
        Architecture.ensure_that(PROJECT).with_baseline(-1)


def test_raise_for_status_carries_counts_and_messages() -> None:
    outcome = check_baseline(_result(2), baseline=1)

    with pytest.raises(ArchitectureViolationError) as excinfo:
        outcome.raise_for_status()

    assert excinfo.value.violation_count == 2
    assert excinfo.value.baseline == 1
    assert str(excinfo.value).splitlines() == [
        "Detected 2 > 1 violation(s)",
        "message 0",
        "message 1",
    ]


def test_architecture_facade_checks_a_project_snapshot() -> None:
    strict = Architecture.ensure_that(PROJECT).complies_with(RULES)
    tolerant = Architecture.ensure_that(PROJECT).with_baseline(3).complies_with(RULES)

    assert strict.violation_count == 3
    assert not strict.ok
    assert tolerant.ok
    assert strict.result == tolerant.result


def test_architecture_facade_parallel_run_matches_sequential_run() -> None:
    sequential = Architecture.ensure_that(PROJECT).complies_with(RULES)
    parallel = Architecture.ensure_that(PROJECT).with_workers(4).complies_with(RULES)

    assert parallel == sequential


def test_architecture_facade_logs_to_injected_logger(
    caplog: pytest.LogCaptureFixture,
) -> None:
    logger = logging.getLogger("archfit.tests.fitness")

    with caplog.at_level(logging.ERROR, logger="archfit.tests.fitness"):
        Architecture.ensure_that(PROJECT).with_logger(logger).complies_with(RULES)

    assert len(caplog.records) == 3


def test_project_from_path_rejects_missing_directory(tmp_path: Path) -> None:
    with pytest.raises(NotADirectoryError):
        Project.from_path(tmp_path / "missing")


def test_check_project_reads_sources_and_baseline_from_config(tmp_path: Path) -> None:
    package = tmp_path / "src" / "shop"
    (package / "domain").mkdir(parents=True)
    (package / "application").mkdir()
    (package / "domain" / "order.py").write_text(
        "import shop.application.service\n", encoding="utf-8"
    )
    (package / "application" / "service.py").write_text(
        "from shop.domain.order import Order\n", encoding="utf-8"
    )
    (tmp_path / "archfit.toml").write_text(
        """
source_root = "src"
baseline = 1

[[components]]
name = "Domain"
located_at = ["shop.domain"]
must_not_depend_on_anything = true

[[components]]
name = "Application"
located_at = ["shop.application"]
may_depend_on = ["Domain"]
""".strip(),
        encoding="utf-8",
    )
    config = load_config(tmp_path)

    within = check_project(tmp_path, config)
    strict = check_project(tmp_path, config, baseline=0)

    assert within.ok
    assert within.baseline == 1
    assert [v.source_module for v in within.result.violations] == ["shop.domain.order"]
    assert not strict.ok
