"""Validation results and baseline comparison."""

from __future__ import annotations

from dataclasses import dataclass, field

from errors import ArchitectureViolationError


@dataclass(frozen=True, order=True)
class Violation:
    """One dependency edge refused by a rule."""

    source_module: str
    target_dependency: str
    rule_description: str
    message: str = field(compare=False)
    component: str = field(default="", compare=False)

    def to_dict(self) -> dict[str, str]:
        return {
            "source_module": self.source_module,
            "target_dependency": self.target_dependency,
            "component": self.component,
            "rule": self.rule_description,
            "message": self.message,
        }


@dataclass(frozen=True)
class ValidationResult:
    violations: tuple[Violation, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.violations

    @property
    def count(self) -> int:
        return len(self.violations)

    def by_component(self) -> dict[str, list[Violation]]:
        grouped: dict[str, list[Violation]] = {}
        for violation in self.violations:
            grouped.setdefault(violation.component, []).append(violation)
        return dict(sorted(grouped.items()))

    def to_dict(self) -> dict[str, object]:
        return {
            "violation_count": self.count,
            "violations": [v.to_dict() for v in self.violations],
        }


@dataclass(frozen=True)
class BaselineOutcome:
    """Comparison of a run's violation count against a tolerated baseline."""

    result: ValidationResult
    baseline: int = 0

    @property
    def violation_count(self) -> int:
        return self.result.count

    @property
    def ok(self) -> bool:
        return self.violation_count <= self.baseline

    def describe(self) -> str:
        if self.ok:
            return (
                f"{self.violation_count} violation(s), within baseline "
                f"{self.baseline}"
            )
        return f"Detected {self.violation_count} > {self.baseline} violation(s)"

    def raise_for_status(self) -> BaselineOutcome:
        if not self.ok:
            lines = [self.describe(), *(v.message for v in self.result.violations)]
            raise ArchitectureViolationError(
                "\n".join(lines), self.violation_count, self.baseline
            )
        return self

    def to_dict(self) -> dict[str, object]:
        return {
            "ok": self.ok,
            "baseline": self.baseline,
            **self.result.to_dict(),
        }


def check_baseline(result: ValidationResult, baseline: int = 0) -> BaselineOutcome:
    """Succeed iff the result holds no more than ``baseline`` violations."""
    if baseline < 0:
        msg = f"baseline must be >= 0, got {baseline}"
        raise ValueError(msg)
    return BaselineOutcome(result=result, baseline=baseline)


__all__ = ["BaselineOutcome", "ValidationResult", "Violation", "check_baseline"]
