"""Mapping between decoded configuration data and filter rules.

Rules are tagged by ``type``::

    {"type": "simple-class-name", "values": ["FooTest"]}
    {"type": "annotation-data", "nameRegex": "Severity", "valueRegex": "high"}
    {"type": "fragmentation", "index": 0, "count": 4}
    {"type": "composition", "op": "UNION", "filters": [...]}
"""
from __future__ import annotations

import json
import logging
from pathlib import Path

from TestFiltering.filtering.evaluator import compile_regex
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
from TestFiltering.filtering.validation import validate_specification
from TestFiltering.shared.errors import ConfigurationError

logger = logging.getLogger(__name__)

MATCH_SOURCE_TYPES: dict[str, type[MatchSourceRule]] = {
    "simple-class-name": SimpleClassNameRule,
    "fully-qualified-class-name": FullyQualifiedClassNameRule,
    "package": TestPackageRule,
    "fully-qualified-test-name": FullyQualifiedTestNameRule,
    "method": TestMethodRule,
    "annotation": AnnotationRule,
}

_TYPE_NAMES: dict[type, str] = {
    **{cls: name for name, cls in MATCH_SOURCE_TYPES.items()},
    AnnotationDataRule: "annotation-data",
    FragmentationRule: "fragmentation",
    CompositionRule: "composition",
}


def rule_from_dict(data: dict, base_dir: Path | None = None) -> FilterRule:
    """Build a rule from its decoded configuration mapping.

    Relative ``file`` sources are resolved against ``base_dir`` when given.
    Structural problems, including non-list ``values``/``filters``, non-string
    or uncompilable regexes and a missing ``filters`` key, raise
    ConfigurationError; invariants are left to the validator.
    """
    if not isinstance(data, dict):
        raise ConfigurationError(f"Filter rule must be a mapping, got {data!r}")
    kind = data.get("type")
    try:
        if kind in MATCH_SOURCE_TYPES:
            return _match_source_from_dict(MATCH_SOURCE_TYPES[kind], data, base_dir)
        if kind == "annotation-data":
            return AnnotationDataRule(
                name_regex=_regex(data["nameRegex"], kind),
                value_regex=_regex(data["valueRegex"], kind),
            )
        if kind == "fragmentation":
            return FragmentationRule(index=int(data["index"]), count=int(data["count"]))
        if kind == "composition":
            filters = data["filters"]
            if not isinstance(filters, list):
                raise ConfigurationError(
                    f"Field 'filters' for filter type {kind!r} must be a list, "
                    f"got {filters!r}"
                )
            return CompositionRule(
                filters=tuple(rule_from_dict(f, base_dir) for f in filters),
                op=_operation(data["op"]),
            )
    except KeyError as exc:
        raise ConfigurationError(
            f"Missing required field {exc.args[0]!r} for filter type {kind!r}"
        ) from exc
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(
            f"Invalid field value for filter type {kind!r}: {exc}"
        ) from exc
    known = ", ".join(sorted(_TYPE_NAMES.values()))
    raise ConfigurationError(f"Unknown filter type {kind!r}. Known: {known}")


def rule_to_dict(rule: FilterRule) -> dict:
    """Inverse of rule_from_dict; absent match sources are omitted."""
    kind = _TYPE_NAMES.get(type(rule))
    if kind is None:
        raise ConfigurationError(f"Unsupported filter rule type {type(rule).__name__}")
    data: dict = {"type": kind}
    if isinstance(rule, MatchSourceRule):
        if rule.regex is not None:
            data["regex"] = rule.regex
        if rule.values is not None:
            data["values"] = list(rule.values)
        if rule.file is not None:
            data["file"] = str(rule.file)
    elif isinstance(rule, AnnotationDataRule):
        data["nameRegex"] = rule.name_regex
        data["valueRegex"] = rule.value_regex
    elif isinstance(rule, FragmentationRule):
        data["index"] = rule.index
        data["count"] = rule.count
    elif isinstance(rule, CompositionRule):
        data["filters"] = [rule_to_dict(r) for r in rule.filters]
        data["op"] = rule.op.value
    return data


def specification_from_dict(data: dict, base_dir: Path | None = None) -> FilterSpecification:
    """Build and validate a FilterSpecification; both lists default to empty."""
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Filtering configuration must be a mapping, got {type(data).__name__}"
        )
    spec = FilterSpecification(
        allowlist=tuple(
            rule_from_dict(r, base_dir) for r in data.get("allowlist") or []
        ),
        blocklist=tuple(
            rule_from_dict(r, base_dir) for r in data.get("blocklist") or []
        ),
    )
    validate_specification(spec)
    return spec


def specification_to_dict(spec: FilterSpecification) -> dict:
    return {
        "allowlist": [rule_to_dict(r) for r in spec.allowlist],
        "blocklist": [rule_to_dict(r) for r in spec.blocklist],
    }


def load_specification(path: Path) -> FilterSpecification:
    """Load a JSON filtering configuration file.

    ``file`` sources inside it are resolved relative to the file's directory.
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"Cannot read filter specification {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Malformed filter specification {path}: {exc}") from exc
    spec = specification_from_dict(raw, base_dir=path.parent)
    logger.info(
        "[TEST-FILTER] stage=load event=specification_loaded "
        "path=%s allowlist=%d blocklist=%d",
        path,
        len(spec.allowlist),
        len(spec.blocklist),
    )
    return spec


def _match_source_from_dict(
    rule_class: type[MatchSourceRule], data: dict, base_dir: Path | None,
) -> MatchSourceRule:
    kind = _TYPE_NAMES[rule_class]
    regex = data.get("regex")
    if regex is not None:
        _regex(regex, kind)
    values = data.get("values")
    if values is not None and not isinstance(values, list):
        raise ConfigurationError(
            f"Field 'values' for filter type {kind!r} must be a list, got {values!r}"
        )
    file = data.get("file")
    if file is not None:
        file = Path(file)
        if base_dir is not None and not file.is_absolute():
            file = base_dir / file
    return rule_class(
        regex=regex,
        values=tuple(str(v) for v in values) if values is not None else None,
        file=file,
    )


def _regex(pattern: str, kind: str) -> str:
    compile_regex(pattern, kind)
    return pattern


def _operation(value: str) -> Operation:
    try:
        return Operation(str(value).upper())
    except ValueError:
        allowed = ", ".join(op.value for op in Operation)
        raise ConfigurationError(
            f"Unknown composition operation {value!r}. Allowed: {allowed}"
        ) from None
