from __future__ import annotations

import tomllib
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from errors import ConfigurationError
from rules.model import (
    Component,
    MayDependOn,
    MustNotDependOn,
    MustNotDependOnAnything,
    Policy,
    RuleSet,
    Unconstrained,
)
from rules.patterns import parse_patterns

CONFIG_FILENAME = "archfit.toml"


class _StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class ComponentDef(_StrictModel):
    """Declaration of one component and its dependency rule."""

    name: str = Field(min_length=1, description="Component name (e.g. 'Domain')")
    located_at: list[str] = Field(
        min_length=1,
        description="Dotted module prefixes owned by this component",
    )
    must_not_depend_on_anything: bool = Field(
        default=False,
        description="Forbid every dependency leaving the component",
    )
    may_depend_on: list[str] | None = Field(
        default=None,
        description="Component names this component may depend on",
    )
    must_not_depend_on: list[str] | None = Field(
        default=None,
        description="Component names this component must not depend on",
    )
    allow_external: list[str] = Field(
        default_factory=list,
        alias="allow_external_dependencies",
        description="Patterns of external (undeclared) paths that are permitted",
    )

    @model_validator(mode="after")
    def check_single_policy(self) -> ComponentDef:
        declared = [
            name
            for name, present in (
                ("must_not_depend_on_anything", self.must_not_depend_on_anything),
                ("may_depend_on", self.may_depend_on is not None),
                ("must_not_depend_on", self.must_not_depend_on is not None),
            )
            if present
        ]
        if len(declared) > 1:
            msg = (
                f"Component '{self.name}' declares conflicting rules: "
                f"{', '.join(declared)}"
            )
            raise ValueError(msg)
        return self

    def policy(self) -> Policy:
        if self.must_not_depend_on_anything:
            return MustNotDependOnAnything()
        if self.may_depend_on is not None:
            return MayDependOn(frozenset(self.may_depend_on))
        if self.must_not_depend_on is not None:
            return MustNotDependOn(frozenset(self.must_not_depend_on))
        return Unconstrained()

    def to_component(self) -> Component:
        return Component(
            name=self.name,
            patterns=parse_patterns(self.located_at),
            policy=self.policy(),
            allowed_external=parse_patterns(self.allow_external),
        )


class ArchfitConfig(_StrictModel):
    """Configuration for an archfit run."""

    source_root: str = Field(
        default=".",
        description="Directory scanned for Python sources, relative to the repo root",
    )
    include: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files to include (empty = all Python files)",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files to exclude",
    )
    nested_gitignore: bool = Field(
        default=False,
        description=(
            "Enable nested .gitignore composition (default: false for root-only)"
        ),
    )
    baseline: int = Field(
        default=0,
        ge=0,
        description="Number of violations tolerated before the run fails",
    )
    workers: int = Field(
        default=1,
        ge=1,
        description="Threads used for extraction and validation",
    )
    track_attribute_paths: bool = Field(
        default=True,
        description="Record dotted attribute chains rooted at imported names",
    )
    forbid_circular_dependencies: bool = Field(
        default=False,
        description="Report import cycles between owned modules",
    )
    components: list[ComponentDef] = Field(
        default_factory=list,
        description="Component declarations",
    )

    @field_validator("components")
    @classmethod
    def validate_unique_names(cls, v: list[ComponentDef]) -> list[ComponentDef]:
        seen: set[str] = set()
        for component in v:
            if component.name in seen:
                msg = f"Component '{component.name}' is declared twice"
                raise ValueError(msg)
            seen.add(component.name)
        return v

    def to_rule_set(self) -> RuleSet:
        return RuleSet(
            components=tuple(c.to_component() for c in self.components),
            forbid_circular_dependencies=self.forbid_circular_dependencies,
        )


class ConfigError(ConfigurationError):
    """Raised when config file exists but cannot be parsed."""


def resolve_source_root(root: Path, source_root: str) -> Path:
    """Resolve a config-provided source_root safely within the repo root.

    Absolute paths and paths that escape the root are rejected.
    """
    if not source_root:
        msg = "source_root must be a non-empty relative path"
        raise ConfigError(msg)

    if source_root.startswith("~"):
        msg = "source_root must be a relative path within the repo root"
        raise ConfigError(msg)

    source_path = Path(source_root)
    if source_path.is_absolute():
        msg = "source_root must be a relative path within the repo root"
        raise ConfigError(msg)

    try:
        resolved_root = root.resolve()
        resolved_source = (resolved_root / source_path).resolve()
    except OSError as exc:
        msg = f"Failed to resolve source_root '{source_root}': {exc}"
        raise ConfigError(msg) from exc

    try:
        resolved_source.relative_to(resolved_root)
    except ValueError as exc:
        msg = f"source_root '{source_root}' escapes the repository root"
        raise ConfigError(msg) from exc

    if not resolved_source.is_dir():
        msg = f"source_root '{source_root}' is not a directory"
        raise ConfigError(msg)

    return resolved_source


def load_config(root: Path, config_path: Path | None = None) -> ArchfitConfig:
    """Load configuration from archfit.toml if it exists.

    An explicit ``config_path`` must exist; the default location may be absent,
    in which case defaults (and no components) are returned.
    """
    if config_path is None:
        config_path = Path(root) / CONFIG_FILENAME
        if not config_path.is_file():
            return ArchfitConfig()
    elif not config_path.is_file():
        msg = f"Config file not found: {config_path}"
        raise ConfigError(msg)

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return ArchfitConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e
