"""Immutable rule-set data model and per-edge policy evaluation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, NamedTuple, Protocol, runtime_checkable

from errors import RuleDefinitionError
from rules.patterns import PathPattern, longest_match

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from graph.module_graph import Module


@dataclass(frozen=True)
class MustNotDependOnAnything:
    """Only intra-component and allow-listed external dependencies are permitted."""


@dataclass(frozen=True)
class MayDependOn:
    """Dependencies are permitted on the named components only."""

    components: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class MustNotDependOn:
    """Dependencies are permitted on anything except the named components."""

    components: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class Unconstrained:
    """No rule recorded for the component; every dependency is permitted."""


Policy = MustNotDependOnAnything | MayDependOn | MustNotDependOn | Unconstrained


@runtime_checkable
class CustomRule(Protocol):
    """User-supplied rule evaluated against whole modules."""

    @property
    def description(self) -> str: ...

    def is_applicable(self, module: Module) -> bool:
        """Return True when the rule should be checked for ``module``."""
        ...

    def apply(self, module: Module) -> Iterable[str]:
        """Return the offending dependency paths; empty means satisfied."""
        ...


@dataclass(frozen=True)
class PredicateRule:
    """CustomRule assembled from two callables."""

    description: str
    applies_to: Callable[[Module], bool]
    offending: Callable[[Module], Iterable[str]]

    def is_applicable(self, module: Module) -> bool:
        return self.applies_to(module)

    def apply(self, module: Module) -> Iterable[str]:
        return self.offending(module)


class Decision(NamedTuple):
    permitted: bool
    reason: str = ""


def _format_names(names: Iterable[object]) -> str:
    return "[" + ", ".join(sorted(str(name) for name in names)) + "]"


@dataclass(frozen=True)
class Component:
    """A named group of modules located by one or more path patterns."""

    name: str
    patterns: tuple[PathPattern, ...]
    policy: Policy = field(default_factory=Unconstrained)
    allowed_external: tuple[PathPattern, ...] = ()

    @property
    def is_constrained(self) -> bool:
        if self.allowed_external:
            return True
        return not isinstance(self.policy, Unconstrained)

    def allowed_external_match(self, path: str) -> PathPattern | None:
        return longest_match(self.allowed_external, path)

    def describe_rule(self) -> str:
        policy = self.policy
        external = ""
        if self.allowed_external:
            external = f" (external: {_format_names(self.allowed_external)})"

        if isinstance(policy, MustNotDependOnAnything):
            return f"{self.name} must not depend on anything{external}"
        if isinstance(policy, MayDependOn):
            if not policy.components:
                return f"{self.name} may not depend on any component{external}"
            return (
                f"{self.name} may depend on {_format_names(policy.components)}"
                f"{external}"
            )
        if isinstance(policy, MustNotDependOn):
            return (
                f"{self.name} must not depend on {_format_names(policy.components)}"
                f"{external}"
            )
        if self.allowed_external:
            return f"{self.name} may depend on any component{external}"
        return f"{self.name} may depend on any module"


@dataclass(frozen=True)
class RuleSet:
    """The validated, immutable architecture declaration for one run."""

    components: tuple[Component, ...]
    custom_rules: tuple[CustomRule, ...] = ()
    forbid_circular_dependencies: bool = False

    def __post_init__(self) -> None:
        _check_components(self.components)

    def component(self, name: str) -> Component:
        for component in self.components:
            if component.name == name:
                return component
        msg = f"Unknown component '{name}'"
        raise KeyError(msg)

    def unconstrained_components(self) -> list[Component]:
        return [c for c in self.components if not c.is_constrained]

    def is_permitted(
        self,
        source: Component,
        target_path: str,
        target: Component | None,
    ) -> Decision:
        """Decide whether ``source`` may depend on ``target_path``.

        ``target`` is the component owning ``target_path``, or None when the
        path is external to the declared architecture.
        """
        if target is not None and target.name == source.name:
            return Decision(True)

        policy = source.policy

        if isinstance(policy, Unconstrained):
            if target is None and source.allowed_external:
                return _external_decision(source, target_path, policy)
            return Decision(True)

        if target is None:
            return _external_decision(source, target_path, policy)

        if isinstance(policy, MustNotDependOnAnything):
            return Decision(
                False,
                f"{source.name} must not depend on anything, "
                f"but depends on component {target.name}",
            )

        if isinstance(policy, MayDependOn):
            if target.name in policy.components:
                return Decision(True)
            return Decision(
                False, f"{source.name} may not depend on component {target.name}"
            )

        if isinstance(policy, MustNotDependOn):
            if target.name not in policy.components:
                return Decision(True)
            return Decision(
                False, f"{source.name} must not depend on component {target.name}"
            )

        return Decision(False, f"{source.name} has an unsupported rule")


def _external_decision(source: Component, target_path: str, policy: Policy) -> Decision:
    if source.allowed_external_match(target_path) is not None:
        return Decision(True)

    # A forbid-list only restricts externals once an allow-list is declared.
    if isinstance(policy, MustNotDependOn) and not source.allowed_external:
        return Decision(True)

    return Decision(
        False,
        f"{target_path} is an external dependency not allowed for {source.name}",
    )


def _check_components(components: tuple[Component, ...]) -> None:
    names: set[str] = set()
    for component in components:
        if not component.name:
            msg = "Component names must be non-empty"
            raise RuleDefinitionError(msg)
        if component.name in names:
            msg = f"Component '{component.name}' is declared twice"
            raise RuleDefinitionError(msg)
        names.add(component.name)
        if not component.patterns:
            msg = f"Component '{component.name}' has no location (use located_at)"
            raise RuleDefinitionError(msg)

    for component in components:
        policy = component.policy
        if isinstance(policy, MayDependOn | MustNotDependOn):
            unknown = policy.components - names
            if unknown:
                msg = (
                    f"Component '{component.name}' references unknown "
                    f"components {_format_names(unknown)}"
                )
                raise RuleDefinitionError(msg)

    owners: dict[tuple[str, ...], str] = {}
    for component in components:
        for pattern in component.patterns:
            owner = owners.setdefault(pattern.segments, component.name)
            if owner != component.name:
                msg = (
                    f"Location '{pattern}' is claimed by both "
                    f"'{owner}' and '{component.name}'"
                )
                raise RuleDefinitionError(msg)


__all__ = [
    "Component",
    "CustomRule",
    "Decision",
    "MayDependOn",
    "MustNotDependOn",
    "MustNotDependOnAnything",
    "Policy",
    "PredicateRule",
    "RuleSet",
    "Unconstrained",
]
