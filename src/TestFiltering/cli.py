"""CLI entry points for the test filtering engine."""
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from TestFiltering.shared.config import FilterRunConfig

logger = logging.getLogger("TestFiltering")


def _setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
    )


def _env_path(name: str) -> Path | None:
    value = os.environ.get(name, "")
    return Path(value) if value else None


def _add_validate_parser(subparsers: argparse._SubParsersAction) -> None:
    default_spec = _env_path("TEST_FILTER_SPEC")

    p = subparsers.add_parser("validate", help="Validate a filter specification")
    p.add_argument(
        "--spec",
        type=Path,
        default=default_spec,
        required=default_spec is None,
        help="Filter specification JSON",
    )
    p.set_defaults(func=_cmd_validate)


def _add_apply_parser(subparsers: argparse._SubParsersAction) -> None:
    default_spec = _env_path("TEST_FILTER_SPEC")
    default_output = os.environ.get(
        "TEST_FILTER_OUTPUT", "./results/filtered_tests.json",
    )

    p = subparsers.add_parser("apply", help="Filter a test manifest")
    p.add_argument(
        "--spec",
        type=Path,
        default=default_spec,
        required=default_spec is None,
        help="Filter specification JSON",
    )
    p.add_argument("--tests", required=True, type=Path, help="Test manifest JSON")
    p.add_argument(
        "--output",
        type=Path,
        default=Path(default_output),
        help="Output file for the filtered tests",
    )
    p.set_defaults(func=_cmd_apply)


def _cmd_validate(args: argparse.Namespace) -> int:
    from TestFiltering.filtering.loader import load_specification

    try:
        spec = load_specification(args.spec)
    except Exception as exc:
        logger.error("[TEST-FILTER] Invalid filter specification: %s", exc)
        return 2
    logger.info(
        "[TEST-FILTER] Specification valid (allowlist=%d, blocklist=%d)",
        len(spec.allowlist),
        len(spec.blocklist),
    )
    return 0


def _cmd_apply(args: argparse.Namespace) -> int:
    from TestFiltering.pipeline.apply import run_filter

    config = FilterRunConfig(
        spec_path=args.spec,
        tests_path=args.tests,
        output_path=args.output,
    )
    try:
        result = run_filter(
            spec_path=config.spec_path,
            tests_path=config.tests_path,
            output_file=config.output_path,
        )
    except Exception as exc:
        logger.error("[TEST-FILTER] Filtering failed: %s", exc)
        return 2
    logger.info(
        "[TEST-FILTER] Kept %d/%d tests",
        result.filtered_tests,
        result.total_tests,
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="testcase-filter",
        description="Declarative allowlist/blocklist filtering of test manifests",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    _add_validate_parser(subparsers)
    _add_apply_parser(subparsers)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(getattr(args, "verbose", False))

    if not args.command:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
