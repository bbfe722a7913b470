"""Registry mapping rule types to their evaluator factories."""
from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from TestFiltering.filtering.composition import CompositionFilter
from TestFiltering.filtering.evaluator import (
    AnnotationDataFilter,
    FragmentationFilter,
    MatchSourceFilter,
    RuleFilter,
)
from TestFiltering.filtering.rules import (
    AnnotationDataRule,
    AnnotationRule,
    CompositionRule,
    FilterRule,
    FragmentationRule,
    FullyQualifiedClassNameRule,
    FullyQualifiedTestNameRule,
    SimpleClassNameRule,
    TestMethodRule,
    TestPackageRule,
)
from TestFiltering.shared.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from TestFiltering.shared.types import Test

FilterFactory = Callable[["FilterRule", "FilterRegistry"], RuleFilter]


class FilterRegistry:
    """Registry mapping rule classes to the factories that evaluate them."""

    def __init__(self) -> None:
        self._factories: dict[type, FilterFactory] = {}

    def register(self, rule_class: type, factory: FilterFactory) -> None:
        """Register the evaluator factory for a rule class."""
        self._factories[rule_class] = factory

    def build(self, rule: FilterRule) -> RuleFilter:
        """Build the evaluator tree for ``rule``."""
        factory = self._factories.get(type(rule))
        if factory is None:
            available = ", ".join(sorted(c.__name__ for c in self._factories))
            msg = (
                f"Unsupported filter rule type {type(rule).__name__}. "
                f"Available: {available}"
            )
            raise ConfigurationError(msg)
        return factory(rule, self)

    def available(self) -> list[str]:
        """Return names of all registered rule classes."""
        return sorted(c.__name__ for c in self._factories)

    def is_available(self, rule_class: type) -> bool:
        return rule_class in self._factories


def _build_composition(rule: CompositionRule, registry: FilterRegistry) -> RuleFilter:
    return CompositionFilter([registry.build(r) for r in rule.filters], rule.op)


def _build_default_registry() -> FilterRegistry:
    registry = FilterRegistry()
    for rule_class in (
        SimpleClassNameRule,
        FullyQualifiedClassNameRule,
        TestPackageRule,
        FullyQualifiedTestNameRule,
        TestMethodRule,
        AnnotationRule,
    ):
        registry.register(rule_class, lambda rule, _: MatchSourceFilter(rule))
    registry.register(AnnotationDataRule, lambda rule, _: AnnotationDataFilter(rule))
    registry.register(FragmentationRule, lambda rule, _: FragmentationFilter(rule))
    registry.register(CompositionRule, _build_composition)
    return registry


default_registry = _build_default_registry()


def build_filter(rule: FilterRule) -> RuleFilter:
    """Build an evaluator for ``rule`` using the default registry."""
    return default_registry.build(rule)


def evaluate(rule: FilterRule, tests: Sequence[Test]) -> list[Test]:
    """Return the subset of ``tests`` matched by ``rule``."""
    return build_filter(rule).filter(tests)
