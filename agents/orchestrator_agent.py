"""Orchestrator agent - plans the project and coordinates the team."""

from typing import Any

from schemas.phase_results import PlanningResult

from .base import BaseAgent
from .prompts import CONFLICT_RESOLUTION_PROMPT, ORCHESTRATOR_PROMPT


class OrchestratorAgent(BaseAgent):
    """Technical lead of the team.

    Produces the project plan, assigns tasks through the shared context,
    reports team status and arbitrates conflicts between agents.
    """

    display_name = "Orchestrator AI"

    def default_system_prompt(self) -> str:
        return ORCHESTRATOR_PROMPT

    def coordinate_project(self, requirements: str) -> PlanningResult:
        """Analyze the requirements and produce the coordination plan.

        The plan is stored as ``orchestration_analysis`` in the project
        context and the phase moves to ``planning_complete``.
        """
        self.logger.info("Coordinating project")
        analysis = self._chat(requirements, max_tokens=3000, temperature=0.2)

        self._log(
            "All Team",
            "project_analysis",
            "Project requirements analyzed. Coordination plan created.",
            "high",
        )
        if self.context is not None:
            self.context.record_analysis(analysis, "planning_complete")

        return PlanningResult(agent=self.display_name, analysis=analysis)

    def assign_task(self, role: str, task: str, priority: str = "normal") -> dict[str, Any]:
        """Assign ``task`` to ``role`` and log the assignment.

        Unknown roles are still logged; ``assigned`` is False for them.
        """
        context = self._require_context()
        self.logger.info("Assigning task to %s: %s", role, task)
        member = context.assign_task(role, task, priority)
        return {
            "agent": role,
            "task": task,
            "priority": priority,
            "assigned": member is not None,
            "assigned_at": member.assigned_at if member else None,
        }

    def monitor_team_progress(self) -> dict[str, Any]:
        """Snapshot of team status, phase, message count and open blockers."""
        context = self._require_context()
        project = context.get_project_context()
        log = context.get_communication_log()

        return {
            "team_status": {
                role: member.model_dump(mode="json")
                for role, member in project.team_status.items()
            },
            "project_phase": project.project_state.current_phase or project.metadata.current_phase,
            "total_communications": len(log.messages),
            "blockers": [b.model_dump(mode="json") for b in project.open_blockers()],
        }

    def resolve_conflict(self, agent_a: str, agent_b: str, description: str) -> str:
        """Ask for a decision on a disagreement between two agents."""
        self.logger.info("Resolving conflict between %s and %s", agent_a, agent_b)
        prompt = CONFLICT_RESOLUTION_PROMPT.format(agent_a=agent_a, agent_b=agent_b, description=description)
        resolution = self._chat(description, system_prompt=prompt, max_tokens=1500, temperature=0.1)

        self._log(
            f"{agent_a}, {agent_b}",
            "conflict_resolution",
            f"Conflict resolved: {description}",
            "high",
        )
        return resolution
