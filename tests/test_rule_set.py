from __future__ import annotations

import pytest

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
from rules.patterns import parse_patterns


def _component(
    name: str,
    location: str,
    policy: Policy | None = None,
    allowed_external: tuple[str, ...] = (),
) -> Component:
    return Component(
        name=name,
        patterns=parse_patterns([location]),
        policy=policy if policy is not None else Unconstrained(),
        allowed_external=parse_patterns(list(allowed_external)),
    )


DOMAIN = _component("Domain", "shop.domain", MustNotDependOnAnything(), ("typing",))
APPLICATION = _component(
    "Application", "shop.application", MayDependOn(frozenset({"Domain"})), ("logging",)
)
INFRA = _component("Infrastructure", "shop.infrastructure", MustNotDependOn(frozenset({"Ui"})))
UI = _component("Ui", "shop.ui")
RULES = RuleSet(components=(DOMAIN, APPLICATION, INFRA, UI))


def test_intra_component_dependency_is_always_permitted() -> None:
    assert RULES.is_permitted(DOMAIN, "shop.domain.money", DOMAIN).permitted


def test_forbid_all_rejects_any_declared_component() -> None:
    decision = RULES.is_permitted(DOMAIN, "shop.application.service", APPLICATION)

    assert not decision.permitted
    assert "Domain must not depend on anything" in decision.reason


def test_forbid_all_permits_only_allow_listed_externals() -> None:
    assert RULES.is_permitted(DOMAIN, "typing.Protocol", None).permitted

    decision = RULES.is_permitted(DOMAIN, "fmt", None)
    assert not decision.permitted
    assert decision.reason == "fmt is an external dependency not allowed for Domain"


def test_may_depend_on_permits_listed_component_and_allowed_externals() -> None:
    assert RULES.is_permitted(APPLICATION, "shop.domain.order", DOMAIN).permitted
    assert RULES.is_permitted(APPLICATION, "logging.getLogger", None).permitted


def test_may_depend_on_rejects_unlisted_components_and_externals() -> None:
    assert not RULES.is_permitted(APPLICATION, "shop.infrastructure.db", INFRA).permitted
    assert not RULES.is_permitted(APPLICATION, "requests", None).permitted


def test_must_not_depend_on_rejects_only_listed_components() -> None:
    assert RULES.is_permitted(INFRA, "shop.domain.order", DOMAIN).permitted
    assert not RULES.is_permitted(INFRA, "shop.ui.views", UI).permitted


def test_must_not_depend_on_without_allow_list_permits_externals() -> None:
    assert RULES.is_permitted(INFRA, "sqlalchemy.orm", None).permitted


def test_must_not_depend_on_with_allow_list_restricts_externals() -> None:
    infra = _component(
        "Infrastructure",
        "shop.infrastructure",
        MustNotDependOn(frozenset()),
        ("sqlalchemy",),
    )
    rules = RuleSet(components=(infra,))

    assert rules.is_permitted(infra, "sqlalchemy.orm", None).permitted
    assert not rules.is_permitted(infra, "redis", None).permitted


def test_component_without_rule_is_permissive() -> None:
    assert RULES.is_permitted(UI, "shop.domain", DOMAIN).permitted
    assert RULES.is_permitted(UI, "anything.at.all", None).permitted
    assert RULES.unconstrained_components() == [UI]


def test_describe_rule_names_policy_and_externals() -> None:
    assert DOMAIN.describe_rule() == "Domain must not depend on anything (external: [typing])"
    assert APPLICATION.describe_rule() == (
        "Application may depend on [Domain] (external: [logging])"
    )
    assert INFRA.describe_rule() == "Infrastructure must not depend on [Ui]"
    assert UI.describe_rule() == "Ui may depend on any module"


def test_rule_set_rejects_unknown_component_references() -> None:
    broken = _component("Application", "shop.application", MayDependOn(frozenset({"Nope"})))

    with pytest.raises(RuleDefinitionError, match="unknown components"):
        RuleSet(components=(broken,))


def test_rule_set_rejects_duplicate_names_and_shared_locations() -> None:
    with pytest.raises(RuleDefinitionError, match="declared twice"):
        RuleSet(components=(DOMAIN, _component("Domain", "shop.core")))

    with pytest.raises(RuleDefinitionError, match="claimed by both"):
        RuleSet(components=(DOMAIN, _component("Core", "shop.domain")))


def test_rule_set_rejects_component_without_location() -> None:
    with pytest.raises(RuleDefinitionError, match="no location"):
        RuleSet(components=(Component(name="Ghost", patterns=()),))


def test_component_lookup_by_name() -> None:
    assert RULES.component("Ui") is UI

    with pytest.raises(KeyError):
        RULES.component("Missing")


def test_allow_list_without_policy_restricts_externals_only() -> None:
    shared = _component("Shared", "shop.shared", allowed_external=("typing",))
    rules = RuleSet(components=(shared, DOMAIN))

    assert rules.is_permitted(shared, "typing.Any", None).permitted
    assert not rules.is_permitted(shared, "os", None).permitted
    assert rules.is_permitted(shared, "shop.domain.order", DOMAIN).permitted
    assert shared.is_constrained
    assert rules.unconstrained_components() == []
    assert shared.describe_rule() == (
        "Shared may depend on any component (external: [typing])"
    )
