"""Validation engine for archfit."""

from engine.fitness import Architecture, Project, check_project
from engine.result import BaselineOutcome, ValidationResult, Violation, check_baseline
from engine.validator import validate

__all__ = [
    "Architecture",
    "BaselineOutcome",
    "Project",
    "ValidationResult",
    "Violation",
    "check_baseline",
    "check_project",
    "validate",
]
