"""Project context schema.

The team-wide record persisted as ``project-context.json``: who is working
on what, which phase the build is in, open blockers and milestones.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

TEAM_ROLES = ("product_owner", "frontend_dev", "backend_dev", "devops", "manual_tester")


def _now() -> str:
    return datetime.now().isoformat()


def normalize_role(name: str) -> str:
    """Normalise a role name to its team-status key ("Frontend Dev" -> "frontend_dev")."""
    return name.lower().replace(" ", "_")


class MemberStatus(str, Enum):
    """Availability of a team member."""

    AVAILABLE = "available"
    ASSIGNED = "assigned"
    BLOCKED = "blocked"


class TeamMemberStatus(BaseModel):
    """Status of one role in the team."""

    status: MemberStatus = Field(MemberStatus.AVAILABLE, description="Current availability")
    current_task: str | None = Field(None, description="Task the member is working on")
    assigned_at: str | None = Field(None, description="When the task was assigned")
    priority: str | None = Field(None, description="Priority of the current task")


class BlockerStatus(str, Enum):
    OPEN = "open"
    RESOLVED = "resolved"


class Blocker(BaseModel):
    """Something preventing a role from progressing."""

    id: str = Field(..., description="BLOCKER-<epochMillis>")
    title: str
    description: str = ""
    affected_roles: list[str] = Field(default_factory=list)
    priority: str = "high"
    created: str = Field(default_factory=_now)
    status: BlockerStatus = BlockerStatus.OPEN
    resolved_at: str | None = None
    resolution: str | None = None


class MilestoneStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class Milestone(BaseModel):
    """A dated project milestone."""

    id: str = Field(..., description="MILESTONE-<epochMillis>")
    title: str
    description: str = ""
    due_date: str | None = None
    status: MilestoneStatus = MilestoneStatus.PENDING
    completed_at: str | None = None


class ContextMetadata(BaseModel):
    created_at: str = Field(default_factory=_now)
    orchestrator_version: str = "1.0.0"
    team_size: int = 5
    current_phase: str = "initialization"


class ProjectState(BaseModel):
    repositories_created: bool = False
    technology_stack: dict[str, Any] = Field(default_factory=dict)
    infrastructure_setup: str = "not_started"
    development_phase: str = "planning"
    current_phase: str | None = None


class ProjectContext(BaseModel):
    """Shared project context read and written by every agent.

    Example:
        ctx = ProjectContext()
        ctx.team_status["devops"].status  # MemberStatus.AVAILABLE
    """

    metadata: ContextMetadata = Field(default_factory=ContextMetadata)
    project_state: ProjectState = Field(default_factory=ProjectState)
    team_status: dict[str, TeamMemberStatus] = Field(
        default_factory=lambda: {role: TeamMemberStatus() for role in TEAM_ROLES},
        description="Status by normalised role name",
    )
    active_decisions: list[dict[str, Any]] = Field(default_factory=list)
    blockers: list[Blocker] = Field(default_factory=list)
    milestones: list[Milestone] = Field(default_factory=list)
    orchestration_analysis: str | None = Field(None, description="Latest orchestrator plan")
    last_updated: str | None = None

    def open_blockers(self) -> list[Blocker]:
        """Return blockers that are still open."""
        return [b for b in self.blockers if b.status == BlockerStatus.OPEN]
