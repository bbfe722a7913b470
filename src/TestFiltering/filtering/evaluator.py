"""Filter evaluators: turn a validated rule into a predicate over tests."""
from __future__ import annotations

import hashlib
import logging
import re
from abc import ABC, abstractmethod
from functools import cached_property
from typing import TYPE_CHECKING, Callable, Protocol, runtime_checkable

from TestFiltering.filtering.rules import (
    AnnotationDataRule,
    AnnotationRule,
    FragmentationRule,
    FullyQualifiedClassNameRule,
    FullyQualifiedTestNameRule,
    MatchSourceRule,
    SimpleClassNameRule,
    TestMethodRule,
    TestPackageRule,
)
from TestFiltering.shared.errors import ConfigurationError, FilterSourceError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from TestFiltering.shared.types import Test

logger = logging.getLogger(__name__)


@runtime_checkable
class RuleFilter(Protocol):
    """Protocol for evaluated filter rules.

    ``filter`` returns the matched subset of ``tests``; ``filter_not``
    returns the rest. Both preserve candidate order.
    """

    def filter(self, tests: Sequence[Test]) -> list[Test]: ...

    def filter_not(self, tests: Sequence[Test]) -> list[Test]: ...


class PredicateFilter(ABC):
    """Base for filters that decide per test, independent of the other tests."""

    @abstractmethod
    def matches(self, test: Test) -> bool: ...

    def filter(self, tests: Sequence[Test]) -> list[Test]:
        return [t for t in tests if self.matches(t)]

    def filter_not(self, tests: Sequence[Test]) -> list[Test]:
        return [t for t in tests if not self.matches(t)]


def compile_regex(pattern: str, kind: str) -> re.Pattern[str]:
    """Compile a rule regex, reporting bad patterns as ConfigurationError."""
    if not isinstance(pattern, str):
        raise ConfigurationError(
            f"Regex for {kind} must be a string, got {pattern!r}"
        )
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise ConfigurationError(
            f"Invalid regex {pattern!r} for {kind}: {exc}"
        ) from exc


def _annotation_names(test: Test) -> tuple[str, ...]:
    return tuple(a.name for a in test.annotations)


ATTRIBUTES: dict[type, Callable[[Test], Iterable[str]]] = {
    SimpleClassNameRule: lambda t: (t.clazz,),
    FullyQualifiedClassNameRule: lambda t: (t.fully_qualified_class_name,),
    TestPackageRule: lambda t: (t.package,),
    FullyQualifiedTestNameRule: lambda t: (t.fully_qualified_test_name,),
    TestMethodRule: lambda t: (t.method,),
    AnnotationRule: _annotation_names,
}


class MatchSourceFilter(PredicateFilter):
    """Matches a test attribute by regex, explicit values, or a file list.

    The file list is read on first use and cached for the lifetime of
    this filter instance.
    """

    def __init__(self, rule: MatchSourceRule) -> None:
        try:
            self._attribute = ATTRIBUTES[type(rule)]
        except KeyError:
            raise ConfigurationError(
                f"No test attribute registered for {rule.kind}"
            ) from None
        self._rule = rule
        self._pattern = (
            compile_regex(rule.regex, rule.kind)
            if rule.regex is not None
            else None
        )

    @property
    def rule(self) -> MatchSourceRule:
        return self._rule

    @cached_property
    def _lookup(self) -> frozenset[str]:
        if self._rule.values is not None:
            return frozenset(self._rule.values)
        path = self._rule.file
        try:
            lines = path.read_text(encoding="utf-8").splitlines()
        except (OSError, UnicodeDecodeError) as exc:
            raise FilterSourceError(path, str(exc)) from exc
        lookup = frozenset(line.strip() for line in lines if line.strip())
        logger.debug(
            "[TEST-FILTER] stage=evaluate event=file_loaded "
            "rule=%s path=%s entries=%d",
            self._rule.kind,
            path,
            len(lookup),
        )
        return lookup

    def matches(self, test: Test) -> bool:
        candidates = self._attribute(test)
        if self._pattern is not None:
            return any(self._pattern.fullmatch(c) for c in candidates)
        lookup = self._lookup
        return any(c in lookup for c in candidates)


class AnnotationDataFilter(PredicateFilter):
    """Matches when a single annotation satisfies both name and value regexes."""

    def __init__(self, rule: AnnotationDataRule) -> None:
        self._rule = rule
        self._name = compile_regex(rule.name_regex, rule.kind)
        self._value = compile_regex(rule.value_regex, rule.kind)

    def matches(self, test: Test) -> bool:
        return any(
            self._name.fullmatch(a.name)
            and self._value.fullmatch(a.value if a.value is not None else "")
            for a in test.annotations
        )


class FragmentationFilter(PredicateFilter):
    """Deterministic sharding by a stable hash of the test identity.

    The bucket depends only on the fully-qualified test name, so the
    same test lands in the same shard across runs and input orders.
    """

    def __init__(self, rule: FragmentationRule) -> None:
        self._index = rule.index
        self._count = rule.count

    @staticmethod
    def bucket(test: Test, count: int) -> int:
        digest = hashlib.md5(
            test.fully_qualified_test_name.encode(), usedforsecurity=False,
        ).hexdigest()
        return int(digest, 16) % count

    def matches(self, test: Test) -> bool:
        return self.bucket(test, self._count) == self._index
