"""Fluent construction of a RuleSet.

Example::

    rules = (
        ArchitecturalRules.define()
        .component("Domain")
        .located_at("shop.domain")
        .must_not_depend_on_anything()
        .allow_external_dependencies("dataclasses", "typing")
        .component("Application")
        .located_at("shop.application")
        .may_depend_on("Domain")
        .build()
    )

The builder only records declarations and rejects contradictory ones; every
evaluation lives in RuleSet.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from errors import RuleDefinitionError
from rules.model import (
    Component,
    MayDependOn,
    MustNotDependOn,
    MustNotDependOnAnything,
    Policy,
    RuleSet,
    Unconstrained,
)
from rules.patterns import PathPattern

if TYPE_CHECKING:
    from collections.abc import Iterable

    from rules.model import CustomRule


@dataclass
class _ComponentDraft:
    name: str
    patterns: list[PathPattern] = field(default_factory=list)
    policy: Policy = field(default_factory=Unconstrained)
    allowed_external: list[PathPattern] = field(default_factory=list)

    def set_policy(self, policy: Policy) -> None:
        if not isinstance(self.policy, Unconstrained) and self.policy != policy:
            msg = (
                f"Component '{self.name}' already declares "
                f"{_policy_name(self.policy)}; cannot also declare "
                f"{_policy_name(policy)}"
            )
            raise RuleDefinitionError(msg)
        self.policy = policy

    def freeze(self) -> Component:
        return Component(
            name=self.name,
            patterns=tuple(self.patterns),
            policy=self.policy,
            allowed_external=tuple(self.allowed_external),
        )


def _policy_name(policy: Policy) -> str:
    if isinstance(policy, MustNotDependOnAnything):
        return "must_not_depend_on_anything"
    if isinstance(policy, MayDependOn):
        return "may_depend_on"
    if isinstance(policy, MustNotDependOn):
        return "must_not_depend_on"
    return "no rule"


class ArchitecturalRules:
    """Chainable declaration of components and their dependency rules."""

    def __init__(self) -> None:
        self._drafts: dict[str, _ComponentDraft] = {}
        self._current: _ComponentDraft | None = None
        self._custom_rules: list[CustomRule] = []
        self._forbid_cycles = False

    @classmethod
    def define(cls) -> ArchitecturalRules:
        return cls()

    def _require_current(self, action: str) -> _ComponentDraft:
        if self._current is None:
            msg = f"{action}() must follow component()"
            raise RuleDefinitionError(msg)
        return self._current

    def component(self, name: str) -> ArchitecturalRules:
        if not name:
            msg = "Component names must be non-empty"
            raise RuleDefinitionError(msg)
        if name in self._drafts:
            msg = f"Component '{name}' is declared twice"
            raise RuleDefinitionError(msg)
        self._current = _ComponentDraft(name=name)
        self._drafts[name] = self._current
        return self

    def located_at(self, *patterns: str) -> ArchitecturalRules:
        draft = self._require_current("located_at")
        if not patterns:
            msg = f"located_at() for '{draft.name}' needs at least one path"
            raise RuleDefinitionError(msg)
        draft.patterns.extend(PathPattern.parse(raw) for raw in patterns)
        return self

    def _require_located(self, action: str) -> _ComponentDraft:
        draft = self._require_current(action)
        if not draft.patterns:
            msg = f"{action}() for '{draft.name}' must follow located_at()"
            raise RuleDefinitionError(msg)
        return draft

    def must_not_depend_on_anything(self) -> ArchitecturalRules:
        draft = self._require_located("must_not_depend_on_anything")
        draft.set_policy(MustNotDependOnAnything())
        return self

    def may_depend_on(self, *components: str) -> ArchitecturalRules:
        draft = self._require_located("may_depend_on")
        draft.set_policy(MayDependOn(frozenset(components)))
        return self

    def must_not_depend_on(self, *components: str) -> ArchitecturalRules:
        draft = self._require_located("must_not_depend_on")
        draft.set_policy(MustNotDependOn(frozenset(components)))
        return self

    def allow_external_dependencies(self, *patterns: str) -> ArchitecturalRules:
        draft = self._require_located("allow_external_dependencies")
        draft.allowed_external.extend(PathPattern.parse(raw) for raw in patterns)
        return self

    def with_custom_rules(self, rules: Iterable[CustomRule]) -> ArchitecturalRules:
        self._custom_rules.extend(rules)
        return self

    def must_not_have_circular_dependencies(self) -> ArchitecturalRules:
        self._forbid_cycles = True
        return self

    def build(self) -> RuleSet:
        return RuleSet(
            components=tuple(draft.freeze() for draft in self._drafts.values()),
            custom_rules=tuple(self._custom_rules),
            forbid_circular_dependencies=self._forbid_cycles,
        )


__all__ = ["ArchitecturalRules"]
