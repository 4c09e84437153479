"""State machine for the team build sequence."""

import json
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from schemas.pipeline_state import (
    PipelineState,
    RunStatus,
    Stage,
    StageStatus,
)


@dataclass
class Transition:
    """Defines a valid state transition."""

    from_stage: Stage
    to_stage: Stage


class StateMachine:
    """State machine for one build run.

    Manages:
    - Valid stage transitions (a single linear path)
    - Completion and abort bookkeeping
    - State persistence to ``state.json``

    There is no resume: an aborted run stays aborted and a new build starts
    again from INIT.
    """

    TRANSITIONS: list[Transition] = [
        Transition(Stage.INIT, Stage.PLANNING),
        Transition(Stage.PLANNING, Stage.REQUIREMENTS),
        Transition(Stage.REQUIREMENTS, Stage.TECH_SELECTION),
        Transition(Stage.TECH_SELECTION, Stage.REPO_CREATED),
        Transition(Stage.REPO_CREATED, Stage.DB_CONFIGURED),
        Transition(Stage.DB_CONFIGURED, Stage.BACKEND_DONE),
        Transition(Stage.BACKEND_DONE, Stage.FRONTEND_DONE),
        Transition(Stage.FRONTEND_DONE, Stage.DEPLOYED),
        Transition(Stage.DEPLOYED, Stage.SUMMARY),
    ]

    def __init__(self, state: PipelineState, run_dir: Path | str | None = None) -> None:
        """Initialize state machine.

        Args:
            state: Initial pipeline state
            run_dir: Directory for state.json (defaults to ``state.run_dir``)
        """
        self.state = state
        self.run_dir = Path(run_dir or state.run_dir)
        self.run_dir.mkdir(parents=True, exist_ok=True)

        self._transition_map: dict[Stage, list[Stage]] = {}
        for t in self.TRANSITIONS:
            self._transition_map.setdefault(t.from_stage, []).append(t.to_stage)

    def can_transition(self, to_stage: Stage) -> bool:
        """Check if transition to target stage is valid."""
        if self.is_aborted():
            return False
        return to_stage in self._transition_map.get(self.state.current_stage, [])

    def transition(self, to_stage: Stage) -> bool:
        """Move to ``to_stage`` and mark it started.

        Returns:
            True if the transition was valid and applied
        """
        if not self.can_transition(to_stage):
            return False

        self.state.mark_stage_started(to_stage)
        self.save_state()
        return True

    def get_next_stage(self) -> Stage | None:
        """The single stage following the current one (None at SUMMARY)."""
        targets = self._transition_map.get(self.state.current_stage, [])
        return targets[0] if targets else None

    def start(self) -> None:
        """Enter INIT and mark the run as running."""
        self.state.status = RunStatus.RUNNING
        self.state.started_at = datetime.now()
        self.state.mark_stage_started(Stage.INIT)
        self.save_state()

    def complete_stage(self, summary: str | None = None) -> None:
        """Mark the current stage as completed.

        Completing SUMMARY completes the whole run.
        """
        self.state.mark_stage_completed(self.state.current_stage, summary=summary)
        if self.state.current_stage == Stage.SUMMARY:
            self.state.status = RunStatus.COMPLETED
            self.state.completed_at = datetime.now()
        self.save_state()

    def abort(self, error: str) -> None:
        """Fail the current stage and stop the run with ``error``."""
        self.state.mark_stage_failed(self.state.current_stage, error)
        self.state.status = RunStatus.ABORTED
        self.state.completed_at = datetime.now()
        self.save_state()

    def is_completed(self) -> bool:
        return self.state.status == RunStatus.COMPLETED

    def is_aborted(self) -> bool:
        return self.state.status == RunStatus.ABORTED

    def save_state(self) -> Path:
        """Persist state to disk.

        Returns:
            Path to state file
        """
        state_file = self.run_dir / "state.json"
        state_data = self.state.model_dump(mode="json")

        with open(state_file, "w") as f:
            json.dump(state_data, f, indent=2, default=str)

        return state_file

    @classmethod
    def load_state(cls, run_dir: Path | str) -> "StateMachine":
        """Load a finished or aborted run for inspection.

        Args:
            run_dir: Directory containing state.json
        """
        state_file = Path(run_dir) / "state.json"

        with open(state_file) as f:
            state_data = json.load(f)

        state = PipelineState.model_validate(state_data)
        return cls(state, run_dir)

    def get_progress_summary(self) -> dict[str, Any]:
        """Get a summary of pipeline progress.

        Returns:
            Progress summary dict
        """
        completed = sum(
            1 for s in self.state.stages.values() if s.status == StageStatus.COMPLETED
        )
        total = len(Stage)

        return {
            "run_id": self.state.run_id,
            "status": self.state.status.value,
            "current_stage": self.state.current_stage.value,
            "progress": f"{completed}/{total}",
            "progress_percent": round(completed / total * 100) if total > 0 else 0,
            "failed_stage": self.state.failed_stage.value if self.state.failed_stage else None,
            "error": self.state.last_error,
            "stages": {
                name: result.status.value for name, result in self.state.stages.items()
            },
        }
