"""Per-edge evaluation of a module graph against a rule set."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from engine.result import ValidationResult, Violation
from graph.algos import cycle_path, find_cycles, internal_adjacency
from rules.resolver import ComponentResolver

if TYPE_CHECKING:
    from graph.module_graph import Module, ModuleGraph
    from rules.model import Component, RuleSet

_LOGGER = logging.getLogger(__name__)

CYCLE_RULE_DESCRIPTION = "Modules must not have circular dependencies"


def _resolve_all(
    graph: ModuleGraph, resolver: ComponentResolver
) -> dict[str, Component | None]:
    """Resolve every module and dependency path up front.

    Ambiguous locations therefore abort the run before any edge is evaluated.
    """
    owners: dict[str, Component | None] = {}
    for module in graph.modules():
        owners[module.path] = resolver.resolve(module.path)
        for dependency in module.dependencies:
            if dependency not in owners:
                owners[dependency] = resolver.resolve(dependency)
    return owners


def _check_module(
    module: Module,
    owner: Component,
    rules: RuleSet,
    owners: dict[str, Component | None],
    log: logging.Logger,
) -> list[Violation]:
    violations: list[Violation] = []

    for dependency in sorted(module.dependencies):
        target = owners[dependency]
        decision = rules.is_permitted(owner, dependency, target)
        log.debug(
            "%s -> %s [%s -> %s]: %s",
            module.path,
            dependency,
            owner.name,
            target.name if target is not None else "external",
            "ok" if decision.permitted else decision.reason,
        )
        if not decision.permitted:
            violations.append(
                Violation(
                    source_module=module.path,
                    target_dependency=dependency,
                    rule_description=owner.describe_rule(),
                    message=f"{decision.reason} ({module.path} -> {dependency})",
                    component=owner.name,
                )
            )

    for rule in rules.custom_rules:
        if not rule.is_applicable(module):
            continue
        for dependency in sorted(set(rule.apply(module))):
            violations.append(
                Violation(
                    source_module=module.path,
                    target_dependency=dependency,
                    rule_description=rule.description,
                    message=(
                        f"{module.path} -> {dependency} breaks rule: "
                        f"{rule.description}"
                    ),
                    component=owner.name,
                )
            )

    return violations


def _check_cycles(
    graph: ModuleGraph, owners: dict[str, Component | None]
) -> list[Violation]:
    adjacency = internal_adjacency(graph)
    violations: list[Violation] = []
    for cycle in find_cycles(graph):
        if any(owners.get(member) is None for member in cycle):
            continue
        chain = cycle_path(cycle, adjacency)
        owner = owners[chain[0]]
        violations.append(
            Violation(
                source_module=chain[0],
                target_dependency=chain[1],
                rule_description=CYCLE_RULE_DESCRIPTION,
                message="Circular dependency: " + " -> ".join(chain),
                component=owner.name if owner is not None else "",
            )
        )
    return violations


def validate(
    graph: ModuleGraph,
    rules: RuleSet,
    *,
    resolver: ComponentResolver | None = None,
    logger: logging.Logger | None = None,
    workers: int = 1,
) -> ValidationResult:
    """Classify every dependency edge of ``graph`` as compliant or violating.

    Modules whose path resolves to no component are skipped. Every violation
    is collected; the result is sorted so repeated runs are identical.

    Args:
        graph: Module graph of the source tree snapshot
        rules: Validated rule set
        resolver: Component resolver (defaults to one over ``rules.components``)
        logger: Diagnostic sink; edges at DEBUG, violations at ERROR
        workers: Threads used to evaluate modules

    Raises:
        AmbiguousComponentError: If a path matches two components equally.
    """
    log = logger or _LOGGER
    if resolver is None:
        resolver = ComponentResolver(rules.components)

    for component in rules.unconstrained_components():
        log.warning(
            "Component %s declares no dependency rule; every dependency is permitted",
            component.name,
        )

    owners = _resolve_all(graph, resolver)

    owned: list[tuple[Module, Component]] = []
    for module in graph.modules():
        owner = owners[module.path]
        if owner is None:
            log.debug("%s belongs to no component; skipped", module.path)
            continue
        owned.append((module, owner))

    def check(item: tuple[Module, Component]) -> list[Violation]:
        module, owner = item
        return _check_module(module, owner, rules, owners, log)

    if workers > 1 and len(owned) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            partitions = list(pool.map(check, owned))
    else:
        partitions = [check(item) for item in owned]

    violations = [violation for part in partitions for violation in part]

    if rules.forbid_circular_dependencies:
        violations.extend(_check_cycles(graph, owners))

    violations.sort()
    for violation in violations:
        log.error("%s violated: %s", violation.rule_description, violation.message)

    return ValidationResult(violations=tuple(violations))


__all__ = ["CYCLE_RULE_DESCRIPTION", "validate"]
