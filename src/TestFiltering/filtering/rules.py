"""Filter rule model: one immutable value object per match kind."""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Union


class Operation(str, Enum):
    """Operator combining the sub-rules of a composition."""

    UNION = "UNION"
    INTERSECTION = "INTERSECTION"
    SUBTRACT = "SUBTRACT"


class _FilterRuleBase:
    __test__ = False  # keep pytest from collecting Test*Rule classes

    @property
    def kind(self) -> str:
        return type(self).__name__


@dataclass(frozen=True)
class MatchSourceRule(_FilterRuleBase):
    """Base for rules matching a single test attribute.

    Exactly one of ``regex``, ``values`` or ``file`` is expected to be set;
    the validator enforces it.
    """

    regex: str | None = None
    values: tuple[str, ...] | None = None
    file: Path | None = None

    def __post_init__(self) -> None:
        if self.values is not None and not isinstance(self.values, tuple):
            object.__setattr__(self, "values", tuple(self.values))
        if self.file is not None and not isinstance(self.file, Path):
            object.__setattr__(self, "file", Path(self.file))

    @property
    def sources(self) -> dict[str, object]:
        return {"regex": self.regex, "values": self.values, "file": self.file}


@dataclass(frozen=True)
class SimpleClassNameRule(MatchSourceRule):
    """Matches the class name without its package."""


@dataclass(frozen=True)
class FullyQualifiedClassNameRule(MatchSourceRule):
    """Matches ``package.Class``."""


@dataclass(frozen=True)
class TestPackageRule(MatchSourceRule):
    """Matches the test package."""


@dataclass(frozen=True)
class FullyQualifiedTestNameRule(MatchSourceRule):
    """Matches ``package.Class#method``."""


@dataclass(frozen=True)
class TestMethodRule(MatchSourceRule):
    """Matches the test method name."""


@dataclass(frozen=True)
class AnnotationRule(MatchSourceRule):
    """Matches when any annotation name of the test matches."""


@dataclass(frozen=True)
class AnnotationDataRule(_FilterRuleBase):
    """Matches when one annotation matches both name and value regexes."""

    name_regex: str
    value_regex: str


@dataclass(frozen=True)
class FragmentationRule(_FilterRuleBase):
    """Selects shard ``index`` out of ``count`` stable shards."""

    index: int
    count: int


@dataclass(frozen=True, eq=False)
class CompositionRule(_FilterRuleBase):
    """Combines nested rules with a set operator.

    Equality ignores the order of ``filters``: two compositions are equal
    when they share the operator and the same multiset of sub-rules. The
    hash is a sum so it stays consistent with that equality.
    """

    filters: tuple[FilterRule, ...]
    op: Operation

    def __post_init__(self) -> None:
        if not isinstance(self.filters, tuple):
            object.__setattr__(self, "filters", tuple(self.filters))
        if not isinstance(self.op, Operation):
            object.__setattr__(self, "op", Operation(self.op))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CompositionRule):
            return NotImplemented
        if self.op is not other.op:
            return False
        if len(self.filters) != len(other.filters):
            return False
        return Counter(self.filters) == Counter(other.filters)

    def __hash__(self) -> int:
        return sum(hash(f) for f in self.filters) + hash(self.op)


FilterRule = Union[
    SimpleClassNameRule,
    FullyQualifiedClassNameRule,
    TestPackageRule,
    FullyQualifiedTestNameRule,
    TestMethodRule,
    AnnotationRule,
    AnnotationDataRule,
    FragmentationRule,
    CompositionRule,
]


@dataclass(frozen=True)
class FilterSpecification:
    """Allowlist and blocklist rule collections; combining them is the caller's job."""

    allowlist: tuple[FilterRule, ...] = field(default_factory=tuple)
    blocklist: tuple[FilterRule, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "allowlist", tuple(self.allowlist))
        object.__setattr__(self, "blocklist", tuple(self.blocklist))

    @property
    def is_empty(self) -> bool:
        return not self.allowlist and not self.blocklist
