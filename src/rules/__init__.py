"""Rule definitions for archfit."""

from rules.builder import ArchitecturalRules
from rules.config import (
    ArchfitConfig,
    ComponentDef,
    ConfigError,
    load_config,
)
from rules.model import (
    Component,
    CustomRule,
    Decision,
    MayDependOn,
    MustNotDependOn,
    MustNotDependOnAnything,
    PredicateRule,
    RuleSet,
    Unconstrained,
)
from rules.patterns import PathPattern
from rules.resolver import ComponentResolver

__all__ = [
    "ArchfitConfig",
    "ArchitecturalRules",
    "Component",
    "ComponentDef",
    "ComponentResolver",
    "ConfigError",
    "CustomRule",
    "Decision",
    "MayDependOn",
    "MustNotDependOn",
    "MustNotDependOnAnything",
    "PathPattern",
    "PredicateRule",
    "RuleSet",
    "Unconstrained",
    "load_config",
]
