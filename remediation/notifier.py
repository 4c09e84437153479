"""Escalation port for the remediation loop."""

import logging
from abc import ABC, abstractmethod

from schemas.remediation import ErrorAnalysis, FixResult

logger = logging.getLogger(__name__)


class Notifier(ABC):
    """Receives remediation outcomes that a human may need to see."""

    @abstractmethod
    def notify_fix_success(self, analysis: ErrorAnalysis, fix_result: FixResult) -> None:
        ...

    @abstractmethod
    def escalate(self, analysis: ErrorAnalysis, fix_result: FixResult | None = None) -> None:
        """Hand an error to a human; ``fix_result`` is None when no fix was tried."""
        ...


class LogNotifier(Notifier):
    """Default notifier: writes outcomes to the log."""

    def notify_fix_success(self, analysis: ErrorAnalysis, fix_result: FixResult) -> None:
        logger.info(
            "Auto-fix succeeded: %s (%s)",
            fix_result.strategy.value,
            fix_result.action or "no action",
        )

    def escalate(self, analysis: ErrorAnalysis, fix_result: FixResult | None = None) -> None:
        if fix_result is None:
            logger.warning("Escalating error without auto-fix: %s", analysis.error or "<empty>")
        else:
            logger.warning(
                "Escalating after failed auto-fix %s: %s",
                fix_result.strategy.value,
                fix_result.error or analysis.error,
            )
