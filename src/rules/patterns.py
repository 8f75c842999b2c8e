"""Dotted path patterns used for component locations and external allow-lists."""

from __future__ import annotations

from dataclasses import dataclass

from errors import RuleDefinitionError
from utils import SEPARATOR, split_path

WILDCARD = "*"
_TRAILING_WILDCARDS = frozenset({"*", "**"})


@dataclass(frozen=True)
class PathPattern:
    """A dotted prefix whose segments may be ``*`` (any single segment).

    A trailing ``.*`` or ``.**`` is accepted and dropped: a prefix already
    covers everything below it. Matching is on whole segments, so
    ``shop.domain`` matches ``shop.domain.order`` but not ``shop.domain_events``.
    """

    raw: str
    segments: tuple[str, ...]

    @classmethod
    def parse(cls, raw: str) -> PathPattern:
        text = raw.strip().replace("::", SEPARATOR)
        segments = list(split_path(text))
        while segments and segments[-1] in _TRAILING_WILDCARDS:
            segments.pop()
        if not segments:
            msg = f"Path pattern '{raw}' is empty"
            raise RuleDefinitionError(msg)
        if any(segment == "**" for segment in segments):
            msg = f"Path pattern '{raw}' may only use '**' as its last segment"
            raise RuleDefinitionError(msg)
        return cls(raw=raw, segments=tuple(segments))

    @property
    def specificity(self) -> int:
        return len(self.segments)

    def matches(self, path: str) -> bool:
        parts = split_path(path)
        if len(parts) < len(self.segments):
            return False
        return all(
            expected in (WILDCARD, actual)
            for expected, actual in zip(self.segments, parts, strict=False)
        )

    def __str__(self) -> str:
        return SEPARATOR.join(self.segments)


def longest_match(patterns: tuple[PathPattern, ...], path: str) -> PathPattern | None:
    """Return the most specific pattern matching ``path``.

    Ties keep the pattern declared first.
    """
    best: PathPattern | None = None
    for pattern in patterns:
        if pattern.matches(path) and (
            best is None or pattern.specificity > best.specificity
        ):
            best = pattern
    return best


def parse_patterns(raw_patterns: list[str] | tuple[str, ...]) -> tuple[PathPattern, ...]:
    return tuple(PathPattern.parse(raw) for raw in raw_patterns)


__all__ = ["WILDCARD", "PathPattern", "longest_match", "parse_patterns"]
