"""Typed results handed from one build phase to the next."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


def _now() -> str:
    return datetime.now().isoformat()


class PlanningResult(BaseModel):
    """Orchestrator project plan."""

    agent: str = "Orchestrator AI"
    analysis: str
    timestamp: str = Field(default_factory=_now)
    next_phase: str = "team_assignment"


class RequirementsResult(BaseModel):
    """Product owner requirements analysis."""

    original_description: str
    requirements_analysis: str
    created_by: str = "Product Owner AI"
    created_at: str = Field(default_factory=_now)
    status: str = "requirements_defined"


class TechSelectionResult(BaseModel):
    """Frontend technology stack decision."""

    agent: str = "Frontend Developer AI"
    technology_decision: str
    framework: str | None = Field(None, description="Framework detected in the decision text")
    timestamp: str = Field(default_factory=_now)


class RepoResult(BaseModel):
    """A GitHub repository created (or found) for the project."""

    name: str
    full_name: str
    url: str = Field(..., description="HTML URL of the repository")
    clone_url: str | None = None
    default_branch: str = "main"
    already_existed: bool = False


class DatabaseResult(BaseModel):
    """Database architect output."""

    database_type: str
    architecture_analysis: str = ""
    schema_design: str = ""
    railway_config: dict[str, Any] = Field(default_factory=dict)
    connection_string: str = "process.env.DATABASE_URL"
    environment_setup: bool = False
    files: list[str] = Field(default_factory=list)


class Endpoint(BaseModel):
    method: str
    path: str


class BackendResult(BaseModel):
    """Backend developer output."""

    architecture: str
    endpoints: list[Endpoint] = Field(default_factory=list)
    branch: str
    commit_sha: str | None = None
    files: list[str] = Field(default_factory=list)
    pr_number: int | None = None
    pr_url: str | None = None

    def api_spec(self) -> str:
        """Render endpoints as a one-per-line list for the frontend prompt."""
        return "\n".join(f"{e.method} {e.path}" for e in self.endpoints)


class FrontendResult(BaseModel):
    """Frontend developer output."""

    technology: TechSelectionResult
    repository: RepoResult | None = None
    branch: str | None = None
    commit_sha: str | None = None
    files: list[str] = Field(default_factory=list)
    pr_number: int | None = None
    pr_url: str | None = None


class DeploymentResult(BaseModel):
    """DevOps merge-and-deploy outcome for one pull request."""

    success: bool
    repo: str
    pr_number: int
    merge_sha: str | None = None
    railway_config_created: bool = False
    deployment_status: dict[str, Any] | None = None
    error: str | None = None


class BuildResult(BaseModel):
    """Final outcome of a full team build."""

    success: bool
    project_name: str | None = None
    error: str | None = None
    failed_phase: str | None = None
    repositories: dict[str, str] = Field(default_factory=dict, description="Role -> repository URL")
    phases: dict[str, Any] = Field(default_factory=dict, description="Serialized phase results")
    run_id: str | None = None
    completed_at: str | None = None


class AppAnalysis(BaseModel):
    """Keyword analysis of a free-form application description."""

    description: str
    app_type: str
    features: list[str] = Field(default_factory=list)
    complexity: str = "medium"
    estimated_time: str = "15-20 minutes"
    project_name: str | None = None


class ApplicationResult(BaseModel):
    """A complete application generated and pushed by the DevOps agent."""

    success: bool
    analysis: AppAnalysis
    repository: RepoResult
    files: list[str] = Field(default_factory=list)
    failed_files: dict[str, str] = Field(default_factory=dict, description="Path -> error")
    design_system: bool = False


class DesignSystem(BaseModel):
    """Design tokens shared between the designer and the CSS specialist."""

    app_type: str = "productivity"
    colors: dict[str, str] = Field(default_factory=dict)
    typography: dict[str, Any] = Field(default_factory=dict)
    spacing: dict[str, str] = Field(default_factory=dict)
    border_radius: dict[str, str] = Field(default_factory=dict)
    shadows: dict[str, str] = Field(default_factory=dict)
    transitions: dict[str, str] = Field(default_factory=dict)
