"""Resolution of module paths onto declared components."""

from __future__ import annotations

from typing import TYPE_CHECKING

from errors import AmbiguousComponentError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from rules.model import Component


class ComponentResolver:
    """Map a dotted path to the component owning it.

    The most specific matching location (greatest number of segments) wins.
    Two different components tied on specificity raise
    AmbiguousComponentError; a path matching nothing is external (None).
    """

    def __init__(self, components: Iterable[Component]) -> None:
        self._components = tuple(components)
        self._cache: dict[str, Component | None] = {}

    @property
    def components(self) -> tuple[Component, ...]:
        return self._components

    def resolve(self, path: str) -> Component | None:
        if path in self._cache:
            return self._cache[path]

        candidates: list[tuple[int, Component]] = []
        for component in self._components:
            specificity = max(
                (p.specificity for p in component.patterns if p.matches(path)),
                default=0,
            )
            if specificity:
                candidates.append((specificity, component))

        best: Component | None = None
        if candidates:
            top = max(specificity for specificity, _ in candidates)
            winners = [
                component for specificity, component in candidates if specificity == top
            ]
            if len(winners) > 1:
                raise AmbiguousComponentError(path, winners[0].name, winners[1].name)
            best = winners[0]

        self._cache[path] = best
        return best


__all__ = ["ComponentResolver"]
