"""Fitness-function entry points for use inside a test suite.

Example::

    def test_architecture() -> None:
        project = Project.from_path(Path("src"))
        rules = ArchitecturalRules.define()...build()

        Architecture.ensure_that(project).with_baseline(3).complies_with(
            rules
        ).raise_for_status()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING

from engine.result import BaselineOutcome, check_baseline
from engine.validator import validate
from graph.module_graph import ModuleGraph, build_module_graph
from rules.config import resolve_source_root
from scan.files import SourceFile, iter_source_files

if TYPE_CHECKING:
    from collections.abc import Iterable

    from rules.config import ArchfitConfig
    from rules.model import RuleSet


@dataclass(frozen=True)
class Project:
    """A snapshot of (module, source text) pairs."""

    sources: tuple[SourceFile, ...]
    root: Path | None = None

    @classmethod
    def from_sources(cls, sources: Iterable[SourceFile]) -> Project:
        return cls(sources=tuple(sources))

    @classmethod
    def from_path(
        cls,
        root: Path | str,
        *,
        include_patterns: list[str] | None = None,
        exclude_patterns: list[str] | None = None,
        nested_gitignore: bool = False,
    ) -> Project:
        root_path = Path(root).expanduser().resolve()
        if not root_path.is_dir():
            msg = f"Source root is not a directory: {root_path}"
            raise NotADirectoryError(msg)
        sources = iter_source_files(
            root_path,
            include_patterns=include_patterns,
            exclude_patterns=exclude_patterns,
            nested_gitignore=nested_gitignore,
        )
        return cls(sources=tuple(sources), root=root_path)

    @classmethod
    def from_config(cls, root: Path, config: ArchfitConfig) -> Project:
        return cls.from_path(
            resolve_source_root(root, config.source_root),
            include_patterns=config.include or None,
            exclude_patterns=config.exclude or None,
            nested_gitignore=config.nested_gitignore,
        )

    def module_graph(
        self, *, workers: int = 1, track_attribute_paths: bool = True
    ) -> ModuleGraph:
        return build_module_graph(
            self.sources,
            workers=workers,
            track_attribute_paths=track_attribute_paths,
        )


@dataclass(frozen=True)
class Architecture:
    """Checks a project against a rule set, tolerating up to ``baseline`` violations."""

    project: Project
    baseline: int = 0
    workers: int = 1
    track_attribute_paths: bool = True
    logger: logging.Logger | None = None

    @classmethod
    def ensure_that(cls, project: Project) -> Architecture:
        return cls(project=project)

    def with_baseline(self, baseline: int) -> Architecture:
        if baseline < 0:
            msg = f"baseline must be >= 0, got {baseline}"
            raise ValueError(msg)
        return replace(self, baseline=baseline)

    def with_workers(self, workers: int) -> Architecture:
        if workers < 1:
            msg = f"workers must be >= 1, got {workers}"
            raise ValueError(msg)
        return replace(self, workers=workers)

    def with_logger(self, logger: logging.Logger) -> Architecture:
        return replace(self, logger=logger)

    def complies_with(self, rules: RuleSet) -> BaselineOutcome:
        graph = self.project.module_graph(
            workers=self.workers,
            track_attribute_paths=self.track_attribute_paths,
        )
        result = validate(graph, rules, logger=self.logger, workers=self.workers)
        return check_baseline(result, self.baseline)


def check_project(
    root: Path,
    config: ArchfitConfig,
    *,
    baseline: int | None = None,
    workers: int | None = None,
) -> BaselineOutcome:
    """Run a complete check described by ``config`` against the repo at ``root``."""
    rules = config.to_rule_set()
    project = Project.from_config(root, config)
    architecture = Architecture(
        project=project,
        baseline=config.baseline if baseline is None else baseline,
        workers=config.workers if workers is None else workers,
        track_attribute_paths=config.track_attribute_paths,
    )
    return architecture.complies_with(rules)


__all__ = ["Architecture", "Project", "check_project"]
