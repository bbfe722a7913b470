"""Filter stage orchestrator: load artifacts, validate, filter, and output."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from TestFiltering.filtering.composition import CompositionFilter
from TestFiltering.filtering.loader import load_specification
from TestFiltering.filtering.registry import default_registry
from TestFiltering.filtering.rules import Operation
from TestFiltering.filtering.validation import validate_specification
from TestFiltering.pipeline.artifacts import FilterResult, load_tests
from TestFiltering.shared.errors import FilterRunError, TestFilteringError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from TestFiltering.filtering.rules import FilterRule, FilterSpecification
    from TestFiltering.shared.types import Test

logger = logging.getLogger(__name__)


def apply_specification(
    tests: Sequence[Test], spec: FilterSpecification,
) -> FilterResult:
    """Apply allowlist and blocklist to ``tests``.

    An empty allowlist allows everything; otherwise a test is allowed when
    any allowlist rule matches it. Allowed tests matched by any blocklist
    rule are then removed.
    """
    validate_specification(spec)
    candidates = list(dict.fromkeys(tests))

    if spec.allowlist:
        allowed = _union(spec.allowlist).filter(candidates)
    else:
        allowed = candidates

    if spec.blocklist:
        remaining = _union(spec.blocklist).filter_not(allowed)
    else:
        remaining = allowed

    logger.info(
        "[TEST-FILTER] stage=filter event=complete "
        "total=%d allowed=%d blocked=%d remaining=%d",
        len(candidates),
        len(allowed),
        len(allowed) - len(remaining),
        len(remaining),
    )
    return FilterResult(
        total_tests=len(candidates),
        tests=tuple(remaining),
        allowed_tests=len(allowed),
        blocked_tests=len(allowed) - len(remaining),
    )


def run_filter(
    spec_path: Path,
    tests_path: Path,
    output_file: Path | None = None,
) -> FilterResult:
    """Run the filter stage.

    Returns FilterResult. Raises FilterRunError on failure.
    """
    try:
        spec = load_specification(spec_path)
        tests = load_tests(tests_path)

        logger.info(
            "[TEST-FILTER] stage=filter event=artifacts_loaded "
            "tests=%d allowlist=%d blocklist=%d",
            len(tests),
            len(spec.allowlist),
            len(spec.blocklist),
        )

        result = apply_specification(tests, spec)

        if output_file is not None:
            result.to_json(output_file)
            logger.info(
                "[TEST-FILTER] stage=filter event=written path=%s", output_file,
            )
        return result

    except TestFilteringError as exc:
        logger.warning(
            "[TEST-FILTER] stage=filter event=error error=%s", str(exc),
        )
        raise FilterRunError(str(exc)) from exc


def _union(rules: Sequence[FilterRule]) -> CompositionFilter:
    return CompositionFilter(
        [default_registry.build(rule) for rule in rules], Operation.UNION,
    )
