"""Tests for filter evaluators."""
from __future__ import annotations

import random
from pathlib import Path

import pytest

from TestFiltering.filtering.evaluator import (
    AnnotationDataFilter,
    FragmentationFilter,
    MatchSourceFilter,
    PredicateFilter,
)
from TestFiltering.filtering.registry import evaluate
from TestFiltering.filtering.rules import (
    AnnotationDataRule,
    AnnotationRule,
    FragmentationRule,
    FullyQualifiedClassNameRule,
    FullyQualifiedTestNameRule,
    SimpleClassNameRule,
    TestMethodRule,
    TestPackageRule,
)
from TestFiltering.shared.errors import ConfigurationError, FilterSourceError
from TestFiltering.shared.types import Annotation, Test


def _make_tests() -> list[Test]:
    return [
        Test("com.example", "FooTest", "testLogin", (Annotation("Smoke"),)),
        Test("com.example", "BarTest", "testSearch", (Annotation("Severity", "high"),)),
        Test("com.other", "FooTest", "testLogout", (Annotation("Flaky"),)),
        Test("com.other.deep", "BazTest", "testLogin", ()),
    ]


class TestMatchSourceFilter:
    def test_simple_class_name_values(self) -> None:
        tests = _make_tests()
        result = evaluate(SimpleClassNameRule(values=["FooTest"]), tests)
        assert result == [tests[0], tests[2]]

    def test_simple_class_name_regex_is_full_match(self) -> None:
        tests = _make_tests()
        assert evaluate(SimpleClassNameRule(regex="Foo"), tests) == []
        assert evaluate(SimpleClassNameRule(regex="Ba.*"), tests) == [tests[1], tests[3]]

    def test_fully_qualified_class_name(self) -> None:
        tests = _make_tests()
        result = evaluate(FullyQualifiedClassNameRule(values=["com.other.FooTest"]), tests)
        assert result == [tests[2]]

    def test_package_regex(self) -> None:
        tests = _make_tests()
        result = evaluate(TestPackageRule(regex=r"com\.other(\..*)?"), tests)
        assert result == [tests[2], tests[3]]

    def test_package_values_exact(self) -> None:
        tests = _make_tests()
        result = evaluate(TestPackageRule(values=["com.other"]), tests)
        assert result == [tests[2]]

    def test_fully_qualified_test_name(self) -> None:
        tests = _make_tests()
        rule = FullyQualifiedTestNameRule(values=["com.example.BarTest#testSearch"])
        assert evaluate(rule, tests) == [tests[1]]

    def test_method_values(self) -> None:
        tests = _make_tests()
        result = evaluate(TestMethodRule(values=["testLogin"]), tests)
        assert result == [tests[0], tests[3]]

    def test_annotation_matches_any_annotation_name(self) -> None:
        tests = _make_tests()
        assert evaluate(AnnotationRule(values=["Flaky"]), tests) == [tests[2]]
        assert evaluate(AnnotationRule(regex="S.*"), tests) == [tests[0], tests[1]]

    def test_empty_values_match_nothing(self) -> None:
        assert evaluate(TestMethodRule(values=[]), _make_tests()) == []

    def test_filter_not_is_complement(self) -> None:
        tests = _make_tests()
        f = MatchSourceFilter(SimpleClassNameRule(values=["FooTest"]))
        assert f.filter_not(tests) == [tests[1], tests[3]]

    def test_invalid_regex_raises_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError, match="Invalid regex"):
            MatchSourceFilter(TestPackageRule(regex="com.(example"))

    def test_non_string_regex_raises_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError, match="must be a string"):
            MatchSourceFilter(TestPackageRule(regex=5))  # type: ignore[arg-type]

    def test_predicate_filter_is_abstract(self) -> None:
        with pytest.raises(TypeError):
            PredicateFilter()  # type: ignore[abstract]


class TestFileSource:
    def test_file_lines_are_matched(self, tmp_path: Path) -> None:
        source = tmp_path / "classes.txt"
        source.write_text("FooTest\n\n  BazTest  \n")
        tests = _make_tests()
        result = evaluate(SimpleClassNameRule(file=source), tests)
        assert result == [tests[0], tests[2], tests[3]]

    def test_file_read_once(self, tmp_path: Path) -> None:
        source = tmp_path / "methods.txt"
        source.write_text("testLogin\n")
        tests = _make_tests()
        f = MatchSourceFilter(TestMethodRule(file=source))
        first = f.filter(tests)
        source.write_text("testSearch\n")
        assert f.filter(tests) == first

    def test_missing_file_raises_with_path(self, tmp_path: Path) -> None:
        missing = tmp_path / "missing.txt"
        f = MatchSourceFilter(TestMethodRule(file=missing))
        with pytest.raises(FilterSourceError) as exc_info:
            f.filter(_make_tests())
        assert exc_info.value.path == missing
        assert str(missing) in str(exc_info.value)

    def test_missing_file_not_read_without_candidates(self, tmp_path: Path) -> None:
        f = MatchSourceFilter(TestMethodRule(file=tmp_path / "missing.txt"))
        assert f.filter([]) == []


class TestAnnotationDataFilter:
    def test_name_and_value_on_same_annotation(self) -> None:
        rule = AnnotationDataRule(name_regex="Severity", value_regex="high")
        high = Test("p", "A", "m1", (Annotation("Severity", "high"),))
        low = Test("p", "A", "m2", (Annotation("Severity", "low"),))
        priority = Test("p", "A", "m3", (Annotation("Priority", "high"),))
        assert evaluate(rule, [high, low, priority]) == [high]

    def test_conjunction_not_across_annotations(self) -> None:
        rule = AnnotationDataRule(name_regex="Severity", value_regex="high")
        split = Test(
            "p", "A", "m",
            (Annotation("Severity", "low"), Annotation("Priority", "high")),
        )
        assert evaluate(rule, [split]) == []

    def test_any_annotation_may_match(self) -> None:
        rule = AnnotationDataRule(name_regex="Sev.*", value_regex="hi.*")
        test = Test(
            "p", "A", "m",
            (Annotation("Owner", "team"), Annotation("Severity", "highest")),
        )
        assert evaluate(rule, [test]) == [test]

    def test_absent_value_matches_empty_string(self) -> None:
        rule = AnnotationDataRule(name_regex="Smoke", value_regex="")
        assert evaluate(rule, _make_tests()) == [_make_tests()[0]]

    def test_filter_not(self) -> None:
        tests = _make_tests()
        f = AnnotationDataFilter(AnnotationDataRule("Severity", "high"))
        assert f.filter_not(tests) == [tests[0], tests[2], tests[3]]


def _many_tests(n: int) -> list[Test]:
    return [Test("com.example", f"Class{i % 7}", f"test{i}") for i in range(n)]


class TestFragmentationFilter:
    def test_shards_are_disjoint_and_complete(self) -> None:
        tests = _many_tests(50)
        shards = [evaluate(FragmentationRule(index=i, count=3), tests) for i in range(3)]
        seen = [t for shard in shards for t in shard]
        assert len(seen) == len(tests)
        assert set(seen) == set(tests)

    def test_stable_across_input_order(self) -> None:
        tests = _many_tests(5)
        rule = FragmentationRule(index=1, count=3)
        expected = set(evaluate(rule, tests))
        shuffled = list(tests)
        random.Random(7).shuffle(shuffled)
        assert set(evaluate(rule, shuffled)) == expected
        assert set(evaluate(rule, list(reversed(tests)))) == expected

    def test_repeated_invocations_identical(self) -> None:
        tests = _many_tests(5)
        rule = FragmentationRule(index=1, count=3)
        assert evaluate(rule, tests) == evaluate(rule, tests)

    def test_bucket_depends_on_identity_only(self) -> None:
        test = Test("com.example", "FooTest", "testLogin")
        alone = FragmentationFilter.bucket(test, 4)
        assert FragmentationFilter.bucket(Test("com.example", "FooTest", "testLogin"), 4) == alone
        assert 0 <= alone < 4

    def test_single_shard_selects_everything(self) -> None:
        tests = _many_tests(10)
        assert evaluate(FragmentationRule(index=0, count=1), tests) == tests

    def test_roughly_even_split(self) -> None:
        tests = _many_tests(300)
        sizes = [
            len(evaluate(FragmentationRule(index=i, count=3), tests)) for i in range(3)
        ]
        assert all(60 <= size <= 140 for size in sizes)
