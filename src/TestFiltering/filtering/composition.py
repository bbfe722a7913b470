"""Composition engine: set algebra over the outputs of nested filters."""
from __future__ import annotations

from typing import TYPE_CHECKING

from TestFiltering.filtering.rules import Operation

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from TestFiltering.filtering.evaluator import RuleFilter
    from TestFiltering.shared.types import Test


class CompositionFilter:
    """Combines nested filters with UNION, INTERSECTION or SUBTRACT.

    Every nested filter is evaluated against the original candidates,
    never against an intermediate result.
    """

    def __init__(self, filters: Sequence[RuleFilter], op: Operation) -> None:
        self._filters = tuple(filters)
        self._op = Operation(op)

    @property
    def op(self) -> Operation:
        return self._op

    def filter(self, tests: Sequence[Test]) -> list[Test]:
        if self._op is Operation.UNION:
            matched = self._union(tests)
        elif self._op is Operation.INTERSECTION:
            matched = self._intersection(tests)
        elif self._op is Operation.SUBTRACT:
            matched = self._subtract(tests)
        else:
            raise ValueError(f"Unsupported operation {self._op!r}")
        return _in_candidate_order(tests, matched)

    def filter_not(self, tests: Sequence[Test]) -> list[Test]:
        # Plain complement for every operator, not the operator's dual.
        matched = set(self.filter(tests))
        return [t for t in dict.fromkeys(tests) if t not in matched]

    def _union(self, tests: Sequence[Test]) -> set[Test]:
        acc: set[Test] = set()
        for f in self._filters:
            acc |= set(f.filter(tests))
        return acc

    def _intersection(self, tests: Sequence[Test]) -> set[Test]:
        acc = set(tests)
        for f in self._filters:
            acc &= set(f.filter(tests))
        return acc

    def _subtract(self, tests: Sequence[Test]) -> set[Test]:
        acc = set(tests)
        for f in self._filters:
            acc -= set(f.filter(tests))
        return acc


def _in_candidate_order(tests: Iterable[Test], matched: set[Test]) -> list[Test]:
    return [t for t in dict.fromkeys(tests) if t in matched]
