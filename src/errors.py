"""Error taxonomy for archfit.

Configuration and parse errors abort a run. Violations are values, never
exceptions, except when a caller explicitly asks for a failing assertion via
``BaselineOutcome.raise_for_status``.
"""

from __future__ import annotations


class ArchfitError(Exception):
    """Base class for every error raised by archfit."""


class ConfigurationError(ArchfitError):
    """The architecture declaration itself is inconsistent."""


class RuleDefinitionError(ConfigurationError):
    """A rule set or builder chain declares something contradictory."""


class AmbiguousComponentError(ConfigurationError):
    """Two components match a path with the same specificity."""

    def __init__(self, path: str, first: str, second: str) -> None:
        names = sorted((first, second))
        super().__init__(
            f"Path '{path}' matches components '{names[0]}' and '{names[1]}' "
            "with equal specificity"
        )
        self.path = path
        self.components = tuple(names)


class DuplicateModuleError(ConfigurationError):
    """The same module path was registered twice in one graph."""

    def __init__(self, module: str, first_file: str | None, second_file: str | None):
        detail = ""
        if first_file or second_file:
            detail = f" ({first_file or '?'} and {second_file or '?'})"
        super().__init__(f"Module '{module}' registered twice{detail}")
        self.module = module


class ParseError(ArchfitError):
    """A source file could not be parsed; no partial result is produced."""

    def __init__(self, file_path: str, diagnostic: str) -> None:
        super().__init__(f"{file_path}: {diagnostic}")
        self.file_path = file_path
        self.diagnostic = diagnostic


class ArchitectureViolationError(ArchfitError):
    """Raised on request when a run exceeds its violation baseline."""

    def __init__(self, message: str, violation_count: int, baseline: int) -> None:
        super().__init__(message)
        self.violation_count = violation_count
        self.baseline = baseline


__all__ = [
    "AmbiguousComponentError",
    "ArchfitError",
    "ArchitectureViolationError",
    "ConfigurationError",
    "DuplicateModuleError",
    "ParseError",
    "RuleDefinitionError",
]
