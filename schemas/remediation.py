"""Remediation schemas.

Error analyses, fix results and incident records produced by the DevOps
monitoring loop.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


def _now() -> str:
    return datetime.now().isoformat()


class Severity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class ErrorCategory(str, Enum):
    """Error categories from the pattern table and the keyword fallback."""

    MISSING_DEPENDENCY = "MISSING_DEPENDENCY"
    DATABASE_CONNECTION = "DATABASE_CONNECTION"
    RUNTIME_CONFLICT = "RUNTIME_CONFLICT"
    DEPENDENCY_MISSING = "DEPENDENCY_MISSING"
    BUILD_ERROR = "BUILD_ERROR"
    # Keyword fallback categories
    DEPENDENCY = "DEPENDENCY"
    RUNTIME = "RUNTIME"
    DATABASE = "DATABASE"
    SERVER = "SERVER"
    NETWORK = "NETWORK"
    SECURITY = "SECURITY"


class FixStrategy(str, Enum):
    CREATE_MISSING_FILES = "CREATE_MISSING_FILES"
    FIX_CONNECTION_STRING = "FIX_CONNECTION_STRING"
    DYNAMIC_PORT_ALLOCATION = "DYNAMIC_PORT_ALLOCATION"
    INSTALL_DEPENDENCIES = "INSTALL_DEPENDENCIES"
    FIX_BUILD_PROCESS = "FIX_BUILD_PROCESS"
    EXPERIMENTAL_FIX = "EXPERIMENTAL_FIX"


class ErrorPattern(BaseModel):
    """A known deployment failure signature."""

    severity: Severity
    category: ErrorCategory
    auto_fix: bool = True
    strategy: FixStrategy
    common_causes: list[str] = Field(default_factory=list)
    solutions: list[str] = Field(default_factory=list)


class ErrorAnalysis(BaseModel):
    """Result of classifying one error string."""

    can_auto_fix: bool = False
    confidence: float = 0.0
    error: str = ""
    matched_pattern: str | None = Field(None, description="Pattern text or fallback keyword")
    severity: Severity | None = None
    category: ErrorCategory | None = None
    strategy: FixStrategy | None = None
    common_causes: list[str] = Field(default_factory=list)
    solutions: list[str] = Field(default_factory=list)
    estimated_fix_time: str | None = None


class FixResult(BaseModel):
    """Outcome of one auto-fix routine."""

    success: bool
    strategy: FixStrategy
    action: str | None = None
    files_created: int | None = None
    total_files: int | None = None
    files: list[str] = Field(default_factory=list)
    error: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)


class FixRecord(BaseModel):
    """Entry in the fix history."""

    timestamp: str = Field(default_factory=_now)
    error: str
    analysis: ErrorAnalysis
    fix_result: FixResult
    success: bool


class IncidentState(str, Enum):
    DETECTED = "DETECTED"
    ANALYZED = "ANALYZED"
    AUTO_FIXING = "AUTO_FIXING"
    FIXED = "FIXED"
    ESCALATED = "ESCALATED"
    ESCALATED_DIRECT = "ESCALATED_DIRECT"


# Allowed incident transitions
INCIDENT_TRANSITIONS: dict[IncidentState, set[IncidentState]] = {
    IncidentState.DETECTED: {IncidentState.ANALYZED},
    IncidentState.ANALYZED: {IncidentState.AUTO_FIXING, IncidentState.ESCALATED_DIRECT},
    IncidentState.AUTO_FIXING: {IncidentState.FIXED, IncidentState.ESCALATED},
}


class Incident(BaseModel):
    """One deployment error and what the monitor did about it."""

    error: str
    deployment_id: str | None = None
    build_logs: str | None = None
    state: IncidentState = IncidentState.DETECTED
    analysis: ErrorAnalysis | None = None
    fix_result: FixResult | None = None
    history: list[IncidentState] = Field(default_factory=lambda: [IncidentState.DETECTED])
    redeployed: bool = False

    def advance(self, new_state: IncidentState) -> None:
        """Move to ``new_state``.

        Raises:
            ValueError: If the transition is not allowed.
        """
        if new_state not in INCIDENT_TRANSITIONS.get(self.state, set()):
            raise ValueError(f"Invalid incident transition: {self.state.value} -> {new_state.value}")
        self.state = new_state
        self.history.append(new_state)

    @property
    def escalated(self) -> bool:
        return self.state in (IncidentState.ESCALATED, IncidentState.ESCALATED_DIRECT)


class DeploymentStatus(BaseModel):
    """Latest deployment status of a monitored project."""

    has_errors: bool
    status: str
    project_id: str | None = None
    deployment_id: str | None = None
    service_id: str | None = None
    url: str | None = None
    created_at: str | None = None
    error: str | None = None


class HealthReport(BaseModel):
    """Periodic summary of the monitor's activity."""

    timestamp: str = Field(default_factory=_now)
    agent: str
    uptime: float = Field(..., description="Seconds since the monitor started")
    total_fixes: int
    successful_fixes: int
    recent_activity: list[FixRecord] = Field(default_factory=list)
    monitored_systems: dict[str, list[str]] = Field(default_factory=dict)


class RepositoryFix(str, Enum):
    """Fixes a repository scan can recommend."""

    MISSING_SERVER_FILE = "MISSING_SERVER_FILE"
    PACKAGE_JSON_FIX = "PACKAGE_JSON_FIX"
    RAILWAY_CONFIG = "RAILWAY_CONFIG"


class RepositoryAnalysis(BaseModel):
    """Deployment readiness of one repository's root directory."""

    repo: str
    has_server_js: bool = False
    has_package_json: bool = False
    has_railway_config: bool = False
    has_dockerfile: bool = False
    has_github_actions: bool = False
    missing_files: list[str] = Field(default_factory=list)
    package_issues: list[str] = Field(default_factory=list)
    recommended_fixes: list[RepositoryFix] = Field(default_factory=list)

    @property
    def healthy(self) -> bool:
        return not self.recommended_fixes


class FixPullRequest(BaseModel):
    """A pull request opened by a repository scan."""

    timestamp: str = Field(default_factory=_now)
    repo: str
    branch: str
    pr_number: int
    pr_url: str | None = None
    fixes: list[RepositoryFix]
    auto_merged: bool = False
