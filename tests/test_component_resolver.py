from __future__ import annotations

import pytest

from errors import AmbiguousComponentError, RuleDefinitionError
from rules.model import Component
from rules.patterns import PathPattern, longest_match, parse_patterns
from rules.resolver import ComponentResolver


def _component(name: str, *locations: str) -> Component:
    return Component(name=name, patterns=parse_patterns(list(locations)))


def test_pattern_matches_on_whole_segments_only() -> None:
    pattern = PathPattern.parse("shop.domain")

    assert pattern.matches("shop.domain")
    assert pattern.matches("shop.domain.order.Order")
    assert not pattern.matches("shop.domain_events")
    assert not pattern.matches("shop")


def test_pattern_wildcard_segment_matches_any_single_segment() -> None:
    pattern = PathPattern.parse("shop.*.domain")

    assert pattern.matches("shop.billing.domain.invoice")
    assert pattern.matches("shop.orders.domain")
    assert not pattern.matches("shop.domain")
    assert pattern.specificity == 3


def test_pattern_trailing_wildcard_and_double_colon_separators_are_normalized() -> None:
    assert PathPattern.parse("shop.infrastructure.redis.*").segments == (
        "shop",
        "infrastructure",
        "redis",
    )
    assert PathPattern.parse("shop::domain::**").segments == ("shop", "domain")


@pytest.mark.parametrize("raw", ["", "*", "shop.**.domain"])
def test_invalid_patterns_are_rejected(raw: str) -> None:
    with pytest.raises(RuleDefinitionError):
        PathPattern.parse(raw)


def test_longest_match_prefers_the_most_specific_pattern() -> None:
    patterns = parse_patterns(["redis", "redis.asyncio"])

    match = longest_match(patterns, "redis.asyncio.client")

    assert match is not None
    assert str(match) == "redis.asyncio"
    assert longest_match(patterns, "requests") is None


def test_resolve_returns_owning_component() -> None:
    domain = _component("Domain", "shop.domain")
    application = _component("Application", "shop.application")
    resolver = ComponentResolver([domain, application])

    assert resolver.resolve("shop.domain.order") is domain
    assert resolver.resolve("shop.application.service.handle") is application


def test_resolve_returns_none_for_external_paths() -> None:
    resolver = ComponentResolver([_component("Domain", "shop.domain")])

    assert resolver.resolve("shop.domain_events.created") is None
    assert resolver.resolve("typing") is None


def test_most_specific_component_wins() -> None:
    domain = _component("Domain", "shop.domain")
    events = _component("Events", "shop.domain.events")
    resolver = ComponentResolver([events, domain])

    assert resolver.resolve("shop.domain.events.created") is events
    assert resolver.resolve("shop.domain.order") is domain


def test_component_may_own_several_locations() -> None:
    shared = _component("Shared", "shop.shared", "shop.utils")
    resolver = ComponentResolver([shared])

    assert resolver.resolve("shop.utils.clock") is shared
    assert resolver.resolve("shop.shared.ids") is shared


def test_equal_specificity_between_components_is_ambiguous() -> None:
    billing = _component("Billing", "shop.billing.domain")
    domains = _component("Domains", "shop.*.domain")
    resolver = ComponentResolver([billing, domains])

    with pytest.raises(AmbiguousComponentError) as excinfo:
        resolver.resolve("shop.billing.domain.invoice")

    assert excinfo.value.components == ("Billing", "Domains")


def test_tie_is_resolved_when_a_more_specific_component_also_matches() -> None:
    billing = _component("Billing", "shop.billing.domain")
    domains = _component("Domains", "shop.*.domain")
    invoices = _component("Invoices", "shop.billing.domain.invoice")
    resolver = ComponentResolver([billing, domains, invoices])

    assert resolver.resolve("shop.billing.domain.invoice.Invoice") is invoices
