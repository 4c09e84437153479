"""Schemas module for structured agent I/O.

Provides Pydantic models for:
- Shared project context and communication log
- Phase results passed between agents
- Pipeline (build) state
- Error analyses, fixes and incidents
"""

from .communication import CommunicationLog, CommunicationLogEntry, new_message_id
from .phase_results import (
    AppAnalysis,
    ApplicationResult,
    BackendResult,
    BuildResult,
    DatabaseResult,
    DeploymentResult,
    DesignSystem,
    Endpoint,
    FrontendResult,
    PlanningResult,
    RepoResult,
    RequirementsResult,
    TechSelectionResult,
)
from .pipeline_state import PipelineState, RunStatus, Stage, StageResult, StageStatus
from .project_context import (
    TEAM_ROLES,
    Blocker,
    BlockerStatus,
    MemberStatus,
    Milestone,
    MilestoneStatus,
    ProjectContext,
    TeamMemberStatus,
    normalize_role,
)
from .remediation import (
    DeploymentStatus,
    ErrorAnalysis,
    ErrorCategory,
    ErrorPattern,
    FixPullRequest,
    FixRecord,
    FixResult,
    FixStrategy,
    HealthReport,
    Incident,
    IncidentState,
    RepositoryAnalysis,
    RepositoryFix,
    Severity,
)

__all__ = [
    # Context
    "TEAM_ROLES",
    "Blocker",
    "BlockerStatus",
    "MemberStatus",
    "Milestone",
    "MilestoneStatus",
    "ProjectContext",
    "TeamMemberStatus",
    "normalize_role",
    "CommunicationLog",
    "CommunicationLogEntry",
    "new_message_id",
    # Phases
    "AppAnalysis",
    "ApplicationResult",
    "BackendResult",
    "BuildResult",
    "DatabaseResult",
    "DeploymentResult",
    "DesignSystem",
    "Endpoint",
    "FrontendResult",
    "PlanningResult",
    "RepoResult",
    "RequirementsResult",
    "TechSelectionResult",
    # Pipeline
    "PipelineState",
    "RunStatus",
    "Stage",
    "StageResult",
    "StageStatus",
    # Remediation
    "DeploymentStatus",
    "ErrorAnalysis",
    "ErrorCategory",
    "ErrorPattern",
    "FixPullRequest",
    "FixRecord",
    "FixResult",
    "FixStrategy",
    "HealthReport",
    "Incident",
    "IncidentState",
    "RepositoryAnalysis",
    "RepositoryFix",
    "Severity",
]
