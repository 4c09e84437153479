"""Deployment error classification.

Known failure signatures are matched first, in explicit priority order;
anything unmatched is scored against a small keyword table.
"""

import logging
from dataclasses import dataclass
from typing import Callable

from schemas.remediation import (
    ErrorAnalysis,
    ErrorCategory,
    ErrorPattern,
    FixStrategy,
    Severity,
)

logger = logging.getLogger(__name__)

PATTERN_CONFIDENCE = 0.95
AUTO_FIX_THRESHOLD = 0.7

# ============ Known Error Patterns ============

ERROR_PATTERNS: dict[str, ErrorPattern] = {
    "Cannot find module": ErrorPattern(
        severity=Severity.HIGH,
        category=ErrorCategory.MISSING_DEPENDENCY,
        strategy=FixStrategy.CREATE_MISSING_FILES,
        common_causes=["Missing entry point", "Incorrect package.json", "Build output mismatch"],
        solutions=["createServerFile", "fixPackageJson", "addBuildConfig"],
    ),
    "ECONNREFUSED": ErrorPattern(
        severity=Severity.HIGH,
        category=ErrorCategory.DATABASE_CONNECTION,
        strategy=FixStrategy.FIX_CONNECTION_STRING,
        common_causes=["Wrong DATABASE_URL", "Network timeout", "Auth issues"],
        solutions=["updateConnectionString", "addRetryLogic", "fixAuthCredentials"],
    ),
    "Port already in use": ErrorPattern(
        severity=Severity.MEDIUM,
        category=ErrorCategory.RUNTIME_CONFLICT,
        strategy=FixStrategy.DYNAMIC_PORT_ALLOCATION,
        common_causes=["Hardcoded port", "Process not killed", "Railway port conflict"],
        solutions=["useDynamicPort", "addProcessManagement", "updatePortConfig"],
    ),
    "ModuleNotFoundError": ErrorPattern(
        severity=Severity.HIGH,
        category=ErrorCategory.DEPENDENCY_MISSING,
        strategy=FixStrategy.INSTALL_DEPENDENCIES,
        common_causes=["Missing npm install", "Wrong package name", "Version mismatch"],
        solutions=["updatePackageJson", "addMissingDeps", "fixVersions"],
    ),
    "Build failed": ErrorPattern(
        severity=Severity.HIGH,
        category=ErrorCategory.BUILD_ERROR,
        strategy=FixStrategy.FIX_BUILD_PROCESS,
        common_causes=["Syntax errors", "Missing build script", "Environment variables"],
        solutions=["fixSyntax", "addBuildScript", "configureEnvVars"],
    ),
}

# Evaluation order; an error containing several signatures gets the earliest
PATTERN_PRIORITY: list[str] = [
    "Cannot find module",
    "ECONNREFUSED",
    "Port already in use",
    "ModuleNotFoundError",
    "Build failed",
]

# ============ Keyword Fallback ============

# keyword -> (confidence, category); ties resolve to the earlier keyword
FALLBACK_KEYWORDS: dict[str, tuple[float, ErrorCategory]] = {
    "npm": (0.8, ErrorCategory.DEPENDENCY),
    "node": (0.7, ErrorCategory.RUNTIME),
    "mongodb": (0.9, ErrorCategory.DATABASE),
    "express": (0.8, ErrorCategory.SERVER),
    "timeout": (0.7, ErrorCategory.NETWORK),
    "permission": (0.9, ErrorCategory.SECURITY),
}

FIX_TIME_ESTIMATES: dict[ErrorCategory, str] = {
    ErrorCategory.MISSING_DEPENDENCY: "2-3 minutes",
    ErrorCategory.DATABASE_CONNECTION: "3-5 minutes",
    ErrorCategory.RUNTIME_CONFLICT: "1-2 minutes",
    ErrorCategory.BUILD_ERROR: "5-10 minutes",
    ErrorCategory.DEPENDENCY_MISSING: "2-4 minutes",
}
DEFAULT_FIX_TIME = "5-15 minutes"


@dataclass
class ClassificationRule:
    """One prioritized matching rule."""

    priority: int
    name: str
    predicate: Callable[[str], bool]
    pattern: ErrorPattern


def _substring_rule(priority: int, text: str) -> ClassificationRule:
    return ClassificationRule(
        priority=priority,
        name=text,
        predicate=lambda error: text in error,
        pattern=ERROR_PATTERNS[text],
    )


def estimate_fix_time(category: ErrorCategory | None) -> str:
    """Return the expected duration of an auto-fix for ``category``."""
    if category is None:
        return DEFAULT_FIX_TIME
    return FIX_TIME_ESTIMATES.get(category, DEFAULT_FIX_TIME)


class ErrorClassifier:
    """Classifies deployment error text into an ``ErrorAnalysis``.

    Known signatures are case-sensitive substring matches; the keyword
    fallback is case-insensitive. Classification never raises.

    Example:
        classifier = ErrorClassifier()
        analysis = classifier.analyze("Error: Cannot find module '/app/server.js'")
        analysis.strategy  # FixStrategy.CREATE_MISSING_FILES
    """

    def __init__(self, rules: list[ClassificationRule] | None = None) -> None:
        if rules is None:
            rules = [_substring_rule(i, text) for i, text in enumerate(PATTERN_PRIORITY)]
        self.rules = sorted(rules, key=lambda rule: rule.priority)

    def analyze(self, error: str | None) -> ErrorAnalysis:
        """Classify one error string.

        Args:
            error: Raw error text (may be empty or None)

        Returns:
            ErrorAnalysis; ``can_auto_fix`` is False when nothing applies.
        """
        if not error:
            return ErrorAnalysis(can_auto_fix=False, confidence=0)

        for rule in self.rules:
            if rule.predicate(error):
                pattern = rule.pattern
                logger.info("Matched known error pattern %r", rule.name)
                return ErrorAnalysis(
                    can_auto_fix=pattern.auto_fix,
                    confidence=PATTERN_CONFIDENCE,
                    error=error,
                    matched_pattern=rule.name,
                    severity=pattern.severity,
                    category=pattern.category,
                    strategy=pattern.strategy,
                    common_causes=list(pattern.common_causes),
                    solutions=list(pattern.solutions),
                    estimated_fix_time=estimate_fix_time(pattern.category),
                )

        return self._keyword_analysis(error)

    def _keyword_analysis(self, error: str) -> ErrorAnalysis:
        text = error.lower()
        best_keyword: str | None = None
        best_confidence = 0.0

        for keyword, (confidence, _category) in FALLBACK_KEYWORDS.items():
            if keyword in text and confidence > best_confidence:
                best_keyword = keyword
                best_confidence = confidence

        if best_keyword is None:
            logger.info("No pattern or keyword matched; error is not auto-fixable")
            return ErrorAnalysis(can_auto_fix=False, confidence=0, error=error)

        category = FALLBACK_KEYWORDS[best_keyword][1]
        return ErrorAnalysis(
            can_auto_fix=best_confidence > AUTO_FIX_THRESHOLD,
            confidence=best_confidence,
            error=error,
            matched_pattern=best_keyword,
            category=category,
            strategy=FixStrategy.EXPERIMENTAL_FIX,
            solutions=[f"fix{category.value}"],
            estimated_fix_time=estimate_fix_time(category),
        )
