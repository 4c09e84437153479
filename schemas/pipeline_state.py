"""Pipeline state schema.

State machine representation for the team build sequence.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RunStatus(str, Enum):
    """Overall build run status."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"  # First phase error stops the run


class Stage(str, Enum):
    """Build stages, in execution order."""

    INIT = "init"
    PLANNING = "planning"
    REQUIREMENTS = "requirements"
    TECH_SELECTION = "tech_selection"
    REPO_CREATED = "repo_created"
    DB_CONFIGURED = "db_configured"
    BACKEND_DONE = "backend_done"
    FRONTEND_DONE = "frontend_done"
    DEPLOYED = "deployed"
    SUMMARY = "summary"


class StageStatus(str, Enum):
    """Individual stage status."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class StageResult(BaseModel):
    """Result of a single stage execution."""

    stage: Stage = Field(..., description="Stage name")
    status: StageStatus = Field(..., description="Stage status")
    started_at: datetime | None = Field(None, description="When stage started")
    completed_at: datetime | None = Field(None, description="When stage completed")
    duration_seconds: float | None = Field(None, description="Duration in seconds")
    output_summary: str | None = Field(None, description="Brief summary of output")
    error: str | None = Field(None, description="Error message if failed")


class PipelineState(BaseModel):
    """Complete build state.

    Persisted to ``<runs_dir>/<run_id>/state.json`` after every transition
    so a finished or aborted run can be inspected afterwards.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "run_id": "2026-01-04-143052",
                "description": "A fitness tracking app with workout logging",
                "status": "running",
                "current_stage": "backend_done",
            }
        }
    )

    run_id: str = Field(..., description="Unique run identifier")
    description: str = Field(..., description="Application description")
    project_name: str | None = Field(None, description="Generated project name")

    status: RunStatus = Field(RunStatus.PENDING, description="Overall status")
    current_stage: Stage = Field(Stage.INIT, description="Current stage")

    created_at: datetime = Field(default_factory=datetime.now)
    started_at: datetime | None = None
    completed_at: datetime | None = None

    stages: dict[str, StageResult] = Field(
        default_factory=dict,
        description="Results by stage name",
    )
    run_dir: str = Field(..., description="Directory holding state.json for this run")

    # Phase outputs keyed by stage value, serialized with model_dump
    outputs: dict[str, Any] = Field(default_factory=dict)

    last_error: str | None = Field(None, description="Error that aborted the run")
    failed_stage: Stage | None = None

    def get_stage_result(self, stage: Stage) -> StageResult | None:
        """Get result for a specific stage."""
        return self.stages.get(stage.value)

    def mark_stage_started(self, stage: Stage) -> None:
        """Mark a stage as started."""
        self.current_stage = stage
        self.stages[stage.value] = StageResult(
            stage=stage,
            status=StageStatus.RUNNING,
            started_at=datetime.now(),
        )

    def mark_stage_completed(self, stage: Stage, summary: str | None = None) -> None:
        """Mark a stage as completed."""
        result = self.stages.get(stage.value)
        if result:
            result.status = StageStatus.COMPLETED
            result.completed_at = datetime.now()
            if result.started_at:
                result.duration_seconds = (
                    result.completed_at - result.started_at
                ).total_seconds()
            result.output_summary = summary

    def mark_stage_failed(self, stage: Stage, error: str) -> None:
        """Mark a stage as failed."""
        result = self.stages.get(stage.value)
        if result:
            result.status = StageStatus.FAILED
            result.completed_at = datetime.now()
            result.error = error
        self.last_error = error
        self.failed_stage = stage
