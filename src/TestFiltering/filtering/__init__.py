"""Filtering bounded context: rule model, validation, evaluation and composition."""

from TestFiltering.filtering.composition import CompositionFilter
from TestFiltering.filtering.evaluator import (
    AnnotationDataFilter,
    FragmentationFilter,
    MatchSourceFilter,
    RuleFilter,
)
from TestFiltering.filtering.loader import (
    load_specification,
    rule_from_dict,
    rule_to_dict,
    specification_from_dict,
    specification_to_dict,
)
from TestFiltering.filtering.registry import (
    FilterRegistry,
    build_filter,
    default_registry,
    evaluate,
)
from TestFiltering.filtering.rules import (
    AnnotationDataRule,
    AnnotationRule,
    CompositionRule,
    FilterRule,
    FilterSpecification,
    FragmentationRule,
    FullyQualifiedClassNameRule,
    FullyQualifiedTestNameRule,
    MatchSourceRule,
    Operation,
    SimpleClassNameRule,
    TestMethodRule,
    TestPackageRule,
)
from TestFiltering.filtering.validation import validate, validate_specification

__all__ = [
    "AnnotationDataFilter",
    "AnnotationDataRule",
    "AnnotationRule",
    "CompositionFilter",
    "CompositionRule",
    "FilterRegistry",
    "FilterRule",
    "FilterSpecification",
    "FragmentationFilter",
    "FragmentationRule",
    "FullyQualifiedClassNameRule",
    "FullyQualifiedTestNameRule",
    "MatchSourceFilter",
    "MatchSourceRule",
    "Operation",
    "RuleFilter",
    "SimpleClassNameRule",
    "TestMethodRule",
    "TestPackageRule",
    "build_filter",
    "default_registry",
    "evaluate",
    "load_specification",
    "rule_from_dict",
    "rule_to_dict",
    "specification_from_dict",
    "specification_to_dict",
    "validate",
    "validate_specification",
]
