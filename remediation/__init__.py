"""Deployment error classification and auto-remediation.

- ErrorClassifier: pattern table plus keyword fallback
- RemediationDispatcher: one fix routine per strategy
- DeploymentMonitor: poll, fix, escalate, redeploy, report
- RepositoryFixer: scan repositories and open fix pull requests
- create_dashboard: FastAPI status dashboard and Railway webhook
"""

from .classifier import (
    ERROR_PATTERNS,
    FALLBACK_KEYWORDS,
    PATTERN_PRIORITY,
    ClassificationRule,
    ErrorClassifier,
    estimate_fix_time,
)
from .dashboard import create_dashboard
from .monitor import DeploymentControl, DeploymentMonitor, RemediationState
from .notifier import LogNotifier, Notifier
from .repository_fixer import RepositoryFixer
from .strategies import RemediationDispatcher, RepositoryFiles, missing_packages

__all__ = [
    "ERROR_PATTERNS",
    "FALLBACK_KEYWORDS",
    "PATTERN_PRIORITY",
    "ClassificationRule",
    "DeploymentControl",
    "DeploymentMonitor",
    "ErrorClassifier",
    "LogNotifier",
    "Notifier",
    "RemediationDispatcher",
    "RemediationState",
    "RepositoryFiles",
    "RepositoryFixer",
    "create_dashboard",
    "estimate_fix_time",
    "missing_packages",
]
