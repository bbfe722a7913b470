"""Load-time invariant checks for filter rules."""
from __future__ import annotations

from TestFiltering.filtering.rules import (
    AnnotationDataRule,
    CompositionRule,
    FilterRule,
    FilterSpecification,
    FragmentationRule,
    MatchSourceRule,
)
from TestFiltering.shared.errors import ConfigurationError


def validate(rule: FilterRule) -> None:
    """Raise ConfigurationError if ``rule`` violates its invariants.

    Pure check: never touches the filesystem, even for file sources.
    """
    if isinstance(rule, MatchSourceRule):
        _validate_match_source(rule)
    elif isinstance(rule, AnnotationDataRule):
        return
    elif isinstance(rule, FragmentationRule):
        _validate_fragmentation(rule)
    elif isinstance(rule, CompositionRule):
        for nested in rule.filters:
            validate(nested)
    else:
        raise ConfigurationError(
            f"Unsupported filter rule type {type(rule).__name__}"
        )


def validate_specification(spec: FilterSpecification) -> None:
    """Validate every allowlist and blocklist rule, failing on the first error."""
    for rule in (*spec.allowlist, *spec.blocklist):
        validate(rule)


def _validate_match_source(rule: MatchSourceRule) -> None:
    present = sum(1 for source in rule.sources.values() if source is not None)
    if present > 1:
        raise ConfigurationError(
            f"Only one of [regex,values,file] can be specified for {rule.kind}"
        )
    if present == 0:
        raise ConfigurationError(
            f"At least one of [regex,values,file] should be specified for {rule.kind}"
        )


def _validate_fragmentation(rule: FragmentationRule) -> None:
    if rule.index < 0:
        raise ConfigurationError(
            f"Fragment index [{rule.index}] should be >= 0 "
            f"(count [{rule.count}])"
        )
    if rule.count < 0:
        raise ConfigurationError(
            f"Fragment count [{rule.count}] should be >= 0 "
            f"(index [{rule.index}])"
        )
    if rule.index >= rule.count:
        raise ConfigurationError(
            f"Fragment index [{rule.index}] should be less than "
            f"count [{rule.count}]"
        )
