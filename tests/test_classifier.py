"""Tests for deployment error classification."""

import pytest

from remediation.classifier import (
    ERROR_PATTERNS,
    PATTERN_PRIORITY,
    ClassificationRule,
    ErrorClassifier,
    estimate_fix_time,
)
from schemas.remediation import ErrorCategory, ErrorPattern, FixStrategy, Severity


@pytest.fixture
def classifier() -> ErrorClassifier:
    return ErrorClassifier()


class TestKnownPatterns:
    def test_missing_module(self, classifier):
        analysis = classifier.analyze("Error: Cannot find module '/app/server.js'")

        assert analysis.can_auto_fix
        assert analysis.confidence == 0.95
        assert analysis.category == ErrorCategory.MISSING_DEPENDENCY
        assert analysis.strategy == FixStrategy.CREATE_MISSING_FILES
        assert analysis.severity == Severity.HIGH
        assert analysis.estimated_fix_time == "2-3 minutes"

    def test_earlier_pattern_wins_when_two_match(self, classifier):
        analysis = classifier.analyze("Cannot find module 'mongoose' after ECONNREFUSED 127.0.0.1:27017")

        assert analysis.category == ErrorCategory.MISSING_DEPENDENCY
        assert analysis.matched_pattern == "Cannot find module"

    def test_order_is_independent_of_position_in_text(self, classifier):
        analysis = classifier.analyze("ECONNREFUSED first, then Cannot find module 'x'")

        assert analysis.strategy == FixStrategy.CREATE_MISSING_FILES

    @pytest.mark.parametrize(
        "error, strategy",
        [
            ("connect ECONNREFUSED 10.0.0.1:5432", FixStrategy.FIX_CONNECTION_STRING),
            ("Port already in use: 3000", FixStrategy.DYNAMIC_PORT_ALLOCATION),
            ("ModuleNotFoundError: No module named 'requests'", FixStrategy.INSTALL_DEPENDENCIES),
            ("Build failed with exit code 1", FixStrategy.FIX_BUILD_PROCESS),
        ],
    )
    def test_each_pattern(self, classifier, error, strategy):
        assert classifier.analyze(error).strategy == strategy

    def test_pattern_match_is_case_sensitive(self, classifier):
        analysis = classifier.analyze("cannot find module foo")

        assert analysis.matched_pattern != "Cannot find module"

    def test_priority_covers_every_pattern(self):
        assert sorted(PATTERN_PRIORITY) == sorted(ERROR_PATTERNS)

    def test_custom_rules_are_sorted_by_priority(self):
        pattern = ErrorPattern(
            severity=Severity.LOW,
            category=ErrorCategory.RUNTIME,
            strategy=FixStrategy.EXPERIMENTAL_FIX,
        )
        rules = [
            ClassificationRule(priority=5, name="late", predicate=lambda e: "boom" in e, pattern=pattern),
            ClassificationRule(
                priority=1,
                name="early",
                predicate=lambda e: "boom" in e,
                pattern=ERROR_PATTERNS["Build failed"],
            ),
        ]

        analysis = ErrorClassifier(rules).analyze("boom")

        assert analysis.matched_pattern == "early"


class TestKeywordFallback:
    def test_high_confidence_keyword_is_auto_fixable(self, classifier):
        analysis = classifier.analyze("MongoServerError: mongodb authentication rejected")

        assert analysis.can_auto_fix
        assert analysis.confidence == 0.9
        assert analysis.category == ErrorCategory.DATABASE
        assert analysis.strategy == FixStrategy.EXPERIMENTAL_FIX

    def test_threshold_keyword_is_not_auto_fixable(self, classifier):
        analysis = classifier.analyze("request timeout while waiting for upstream")

        assert not analysis.can_auto_fix
        assert analysis.confidence == 0.7
        assert analysis.category == ErrorCategory.NETWORK

    def test_highest_confidence_keyword_wins(self, classifier):
        analysis = classifier.analyze("npm ERR! permission denied")

        assert analysis.matched_pattern == "permission"
        assert analysis.confidence == 0.9

    def test_tie_goes_to_earlier_keyword(self, classifier):
        # npm and express both score 0.8
        analysis = classifier.analyze("express app failed after npm start")

        assert analysis.matched_pattern == "npm"

    def test_fallback_is_case_insensitive(self, classifier):
        assert classifier.analyze("MONGODB unreachable").matched_pattern == "mongodb"


class TestEmptyInput:
    @pytest.mark.parametrize("error", [None, ""])
    def test_empty_error(self, classifier, error):
        analysis = classifier.analyze(error)

        assert not analysis.can_auto_fix
        assert analysis.confidence == 0

    def test_unknown_error(self, classifier):
        analysis = classifier.analyze("Something odd happened")

        assert not analysis.can_auto_fix
        assert analysis.strategy is None
        assert analysis.error == "Something odd happened"


def test_estimate_fix_time_defaults():
    assert estimate_fix_time(None) == "5-15 minutes"
    assert estimate_fix_time(ErrorCategory.SECURITY) == "5-15 minutes"
    assert estimate_fix_time(ErrorCategory.RUNTIME_CONFLICT) == "1-2 minutes"
