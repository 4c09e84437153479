"""Shared context manager.

Typed operations over the shared-context documents. Agents write here for
observability and hand-off; the build sequence itself passes results
directly between phases.
"""

import logging
import time
from datetime import datetime
from typing import Any

from pydantic import BaseModel

from schemas.communication import CommunicationLog, CommunicationLogEntry
from schemas.project_context import (
    Blocker,
    BlockerStatus,
    MemberStatus,
    Milestone,
    MilestoneStatus,
    ProjectContext,
    TeamMemberStatus,
    normalize_role,
)

from .store import ContextStore

logger = logging.getLogger(__name__)

PROJECT_CONTEXT = "project-context"
COMMUNICATION_LOG = "communication-log"
TEAM_DECISIONS = "team-decisions"

DECISION_TYPES = ("architecture", "technology", "process", "design")


def _dump(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True)


def _now() -> str:
    return datetime.now().isoformat()


def _millis() -> int:
    return int(time.time() * 1000)


def deep_merge(base: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``updates`` into a copy of ``base``."""
    merged = dict(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class SharedContext:
    """Read and update the team's shared project context.

    Args:
        store: Document store (``FileContextStore`` in production)
    """

    def __init__(self, store: ContextStore) -> None:
        self.store = store

    # --- Lifecycle ---

    def initialize(self) -> ProjectContext:
        """Write a fresh project context and communication log."""
        context = ProjectContext()
        self.store.write(PROJECT_CONTEXT, _dump(context))
        self.store.write(COMMUNICATION_LOG, _dump(CommunicationLog.initial()))
        logger.info("Shared context initialized")
        return context

    def ensure_initialized(self) -> None:
        """Initialize only if no project context exists yet."""
        if not self.store.exists(PROJECT_CONTEXT):
            self.initialize()

    # --- Project context ---

    def get_project_context(self) -> ProjectContext:
        document = self.store.read(PROJECT_CONTEXT)
        if document is None:
            return ProjectContext()
        return ProjectContext.model_validate(document)

    def update_project_context(self, context: ProjectContext) -> None:
        self.store.write(PROJECT_CONTEXT, _dump(context))

    def _modify_context(self, change) -> Any:
        with self.store.locked(PROJECT_CONTEXT):
            context = self.get_project_context()
            result = change(context)
            self.update_project_context(context)
        return result

    def set_phase(self, phase: str) -> None:
        """Record the phase the team is currently in."""

        def change(ctx: ProjectContext) -> None:
            ctx.metadata.current_phase = phase
            ctx.project_state.current_phase = phase
            ctx.last_updated = _now()

        self._modify_context(change)

    def record_analysis(self, analysis: str, phase: str) -> None:
        """Store the orchestrator's plan and move to ``phase``."""

        def change(ctx: ProjectContext) -> None:
            ctx.orchestration_analysis = analysis
            ctx.metadata.current_phase = phase
            ctx.last_updated = _now()

        self._modify_context(change)

    # --- Team status ---

    def assign_task(self, role: str, task: str, priority: str = "normal") -> TeamMemberStatus | None:
        """Mark a role as assigned and log the assignment.

        Unknown roles are logged but leave the team status unchanged.

        Returns:
            The updated member status, or None for an unknown role.
        """
        key = normalize_role(role)

        def change(ctx: ProjectContext) -> TeamMemberStatus | None:
            member = ctx.team_status.get(key)
            if member is None:
                return None
            member.status = MemberStatus.ASSIGNED
            member.current_task = task
            member.assigned_at = _now()
            member.priority = priority
            return member.model_copy()

        member = self._modify_context(change)
        if member is None:
            logger.warning("Task assigned to unknown role %r", role)

        self.log_communication("Orchestrator AI", role, "task_assignment", f"Task assigned: {task}", priority)
        return member

    def set_member_status(self, role: str, status: MemberStatus | str) -> None:
        """Set a role's status; ``available`` clears its current task."""
        key = normalize_role(role)
        status = MemberStatus(status)

        def change(ctx: ProjectContext) -> None:
            member = ctx.team_status.get(key)
            if member is None:
                return
            member.status = status
            if status == MemberStatus.AVAILABLE:
                member.current_task = None
                member.priority = None

        self._modify_context(change)

    def release(self, role: str) -> None:
        self.set_member_status(role, MemberStatus.AVAILABLE)

    def block(self, role: str, reason: str) -> Blocker:
        """Mark a role blocked and open a blocker describing why."""
        self.set_member_status(role, MemberStatus.BLOCKED)
        return self.add_blocker(f"{role} blocked", reason, affected_roles=[normalize_role(role)])

    # --- Blockers and milestones ---

    def add_blocker(
        self,
        title: str,
        description: str = "",
        affected_roles: list[str] | None = None,
        priority: str = "high",
    ) -> Blocker:
        blocker = Blocker(
            id=f"BLOCKER-{_millis()}",
            title=title,
            description=description,
            affected_roles=affected_roles or [],
            priority=priority,
        )

        def change(ctx: ProjectContext) -> None:
            ctx.blockers.append(blocker)

        self._modify_context(change)
        logger.info("Blocker added: %s (%s)", blocker.id, title)
        return blocker

    def resolve_blocker(self, blocker_id: str, resolution: str) -> Blocker:
        """Close a blocker.

        Raises:
            KeyError: If no blocker has ``blocker_id``
        """

        def change(ctx: ProjectContext) -> Blocker:
            for blocker in ctx.blockers:
                if blocker.id == blocker_id:
                    blocker.status = BlockerStatus.RESOLVED
                    blocker.resolved_at = _now()
                    blocker.resolution = resolution
                    return blocker.model_copy()
            raise KeyError(f"Unknown blocker: {blocker_id}")

        return self._modify_context(change)

    def add_milestone(self, title: str, description: str = "", due_date: str | None = None) -> Milestone:
        milestone = Milestone(
            id=f"MILESTONE-{_millis()}",
            title=title,
            description=description,
            due_date=due_date,
        )

        def change(ctx: ProjectContext) -> None:
            ctx.milestones.append(milestone)

        self._modify_context(change)
        return milestone

    def complete_milestone(self, milestone_id: str) -> Milestone:
        """Mark a milestone completed.

        Raises:
            KeyError: If no milestone has ``milestone_id``
        """

        def change(ctx: ProjectContext) -> Milestone:
            for milestone in ctx.milestones:
                if milestone.id == milestone_id:
                    milestone.status = MilestoneStatus.COMPLETED
                    milestone.completed_at = _now()
                    return milestone.model_copy()
            raise KeyError(f"Unknown milestone: {milestone_id}")

        return self._modify_context(change)

    def update_technology_stack(self, updates: dict[str, Any]) -> dict[str, Any]:
        """Deep-merge ``updates`` into the recorded technology stack."""

        def change(ctx: ProjectContext) -> dict[str, Any]:
            ctx.project_state.technology_stack = deep_merge(ctx.project_state.technology_stack, updates)
            return ctx.project_state.technology_stack

        return self._modify_context(change)

    def mark_repositories_created(self) -> None:
        def change(ctx: ProjectContext) -> None:
            ctx.project_state.repositories_created = True

        self._modify_context(change)

    # --- Communication log ---

    def get_communication_log(self) -> CommunicationLog:
        document = self.store.read(COMMUNICATION_LOG)
        if document is None:
            return CommunicationLog.initial()
        return CommunicationLog.model_validate(document)

    def log_communication(
        self,
        sender: str,
        recipient: str,
        message_type: str,
        content: str,
        priority: str = "normal",
    ) -> str:
        """Append a message to the communication log.

        Returns:
            The message id (``msg_<epochMillis>_<random6>``).
        """
        entry = CommunicationLogEntry(
            sender=sender,
            recipient=recipient,
            message_type=message_type,
            content=content,
            priority=priority,
        )
        with self.store.locked(COMMUNICATION_LOG):
            log = self.get_communication_log()
            log.messages.append(entry)
            self.store.write(COMMUNICATION_LOG, _dump(log))
        logger.debug("%s -> %s [%s]: %s", sender, recipient, message_type, content[:80])
        return entry.id

    # --- Decisions and artifacts ---

    def add_team_decision(self, decision_type: str, decision: dict[str, Any]) -> dict[str, Any]:
        """Record a team decision with an id such as ``ARCHITECTURE-001``.

        Raises:
            ValueError: If ``decision_type`` is not a known decision type
        """
        if decision_type not in DECISION_TYPES:
            raise ValueError(f"Unknown decision type: {decision_type}. Expected one of {DECISION_TYPES}")

        with self.store.locked(TEAM_DECISIONS):
            document = self.store.read(TEAM_DECISIONS) or {"decisions": []}
            count = sum(1 for d in document["decisions"] if d.get("type") == decision_type)
            record = {
                "id": f"{decision_type.upper()}-{count + 1:03d}",
                "type": decision_type,
                "date": _now(),
                **decision,
            }
            document["decisions"].append(record)
            self.store.write(TEAM_DECISIONS, document)
        return record

    def save_decision(self, role: str, artifact: str, payload: BaseModel | dict[str, Any]) -> str:
        """Write ``<role>-<artifact>-decision.json``; returns the document name."""
        return self.save_artifact(role, f"{artifact}-decision", payload)

    def save_artifact(self, role: str, slug: str, payload: BaseModel | dict[str, Any]) -> str:
        """Write ``<role>-<slug>.json``; returns the document name."""
        name = f"{role}-{slug}"
        document = _dump(payload) if isinstance(payload, BaseModel) else payload
        self.store.write(name, document)
        return name

    def read_document(self, name: str) -> dict[str, Any] | None:
        return self.store.read(name)
