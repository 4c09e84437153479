"""Deployment monitoring and auto-remediation loop."""

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Protocol

from schemas.remediation import (
    DeploymentStatus,
    FixRecord,
    HealthReport,
    Incident,
    IncidentState,
)

from .classifier import ErrorClassifier
from .notifier import LogNotifier, Notifier
from .strategies import RemediationDispatcher

logger = logging.getLogger(__name__)

SPECIALTIES = [
    "Deployment error analysis",
    "Automatic file recovery",
    "Database connection repair",
    "Port conflict resolution",
    "Dependency management",
    "Build pipeline repair",
]


@dataclass
class RemediationState:
    """Mutable state of one monitor: its fix history and start time."""

    started_at: float = field(default_factory=time.time)
    fix_history: list[FixRecord] = field(default_factory=list)

    @property
    def uptime(self) -> float:
        return round(time.time() - self.started_at, 3)


class StatusSource(Protocol):
    """Anything that can report the latest deployment status of a project."""

    def check_status(self, project_id: str) -> DeploymentStatus: ...


class DeploymentControl(Protocol):
    """Build-log access and redeploys (``RailwayClient``)."""

    def fetch_build_logs(self, deployment_id: str) -> str | None: ...

    def redeploy(self, service_id: str) -> Any: ...


# Railway webhook event types that start an incident
FAILURE_EVENTS = ("deployment.failed", "deployment.crashed")


class DeploymentMonitor:
    """Watches deployments and auto-fixes recognised errors.

    Args:
        dispatcher: Runs fix routines against the target repository
        status_source: Railway client (or any ``check_status`` provider)
        agent_name: Name reported in health reports and the dashboard
        projects: Railway project ids to poll
        repositories: Repositories reported as monitored
        classifier: Error classifier (default patterns if omitted)
        notifier: Escalation port (logs if omitted)
        state: Shared remediation state
        railway: Build logs and redeploys (no logs or redeploys if omitted)
        service_id: Service redeployed after a fix when an event names none
    """

    def __init__(
        self,
        dispatcher: RemediationDispatcher,
        status_source: StatusSource | None = None,
        agent_name: str = "Senior DevOps AI Agent",
        projects: list[str] | None = None,
        repositories: list[str] | None = None,
        classifier: ErrorClassifier | None = None,
        notifier: Notifier | None = None,
        state: RemediationState | None = None,
        railway: DeploymentControl | None = None,
        service_id: str | None = None,
    ) -> None:
        self.dispatcher = dispatcher
        self.status_source = status_source
        self.agent_name = agent_name
        self.projects = projects or []
        self.repositories = repositories or [dispatcher.repo]
        self.classifier = classifier or ErrorClassifier()
        self.notifier = notifier or LogNotifier()
        self.state = state or RemediationState()
        self.railway = railway
        self.service_id = service_id or None

    def handle_deployment_error(
        self,
        error: str | None,
        deployment_id: str | None = None,
        service_id: str | None = None,
    ) -> Incident:
        """Analyse one error, auto-fix it if possible, otherwise escalate.

        With a ``deployment_id`` the deployment's build logs are fetched and
        classified together with ``error``. A successful fix triggers a
        redeploy of ``service_id`` (or the configured service).

        Returns:
            The incident with its final state (FIXED, ESCALATED or
            ESCALATED_DIRECT).
        """
        incident = Incident(error=error or "", deployment_id=deployment_id)
        if deployment_id and self.railway is not None:
            incident.build_logs = self.railway.fetch_build_logs(deployment_id)

        error_text = "\n".join(part for part in (error, incident.build_logs) if part)
        analysis = self.classifier.analyze(error_text)
        incident.analysis = analysis
        incident.advance(IncidentState.ANALYZED)

        if not analysis.can_auto_fix:
            incident.advance(IncidentState.ESCALATED_DIRECT)
            self.notifier.escalate(analysis)
            return incident

        incident.advance(IncidentState.AUTO_FIXING)
        fix_result = self.dispatcher.execute(analysis)
        incident.fix_result = fix_result
        self.log_fix(FixRecord(error=error or "", analysis=analysis, fix_result=fix_result, success=fix_result.success))

        if fix_result.success:
            incident.advance(IncidentState.FIXED)
            self.notifier.notify_fix_success(analysis, fix_result)
            incident.redeployed = self._redeploy(service_id or self.service_id)
        else:
            incident.advance(IncidentState.ESCALATED)
            self.notifier.escalate(analysis, fix_result)
        return incident

    def _redeploy(self, service_id: str | None) -> bool:
        if self.railway is None or not service_id:
            return False
        try:
            self.railway.redeploy(service_id)
        except Exception:
            logger.exception("Redeploy of %s failed after a successful fix", service_id)
            return False
        return True

    def handle_webhook_event(self, event: dict[str, Any]) -> Incident | None:
        """Handle one Railway webhook event.

        Failed and crashed deployments become incidents; every other event
        is only logged.
        """
        event_type = event.get("type")
        data = event.get("data") or {}
        if event_type not in FAILURE_EVENTS:
            logger.info("Railway event %s (%s)", event_type, data.get("id", "no deployment"))
            return None

        logger.warning("Railway reported %s for deployment %s", event_type, data.get("id"))
        return self.handle_deployment_error(
            data.get("error") or "Unknown deployment error",
            deployment_id=data.get("id"),
            service_id=data.get("serviceId"),
        )

    def log_fix(self, record: FixRecord) -> None:
        self.state.fix_history.append(record)
        logger.info(
            "Fix logged: %s success=%s",
            record.fix_result.strategy.value,
            record.success,
        )

    def check_deployments(self) -> list[Incident]:
        """Poll every monitored project once and handle failed deployments.

        A failing poll is logged and skipped; it never stops the loop.
        """
        incidents: list[Incident] = []
        if self.status_source is None:
            return incidents

        for project_id in self.projects:
            try:
                status = self.status_source.check_status(project_id)
            except Exception:
                logger.exception("Deployment check failed for %s", project_id)
                continue

            if status.has_errors:
                logger.warning("Deployment %s is %s", project_id, status.status)
                incidents.append(
                    self.handle_deployment_error(
                        status.error or f"Deployment {status.status}",
                        deployment_id=status.deployment_id,
                        service_id=status.service_id,
                    )
                )
        return incidents

    def generate_health_report(self, path: Path | str | None = None) -> HealthReport:
        """Summarise fix activity, optionally writing it as JSON to ``path``."""
        history = self.state.fix_history
        report = HealthReport(
            agent=self.agent_name,
            uptime=self.state.uptime,
            total_fixes=len(history),
            successful_fixes=sum(1 for record in history if record.success),
            recent_activity=history[-5:],
            monitored_systems={
                "repositories": list(self.repositories),
                "railway_projects": list(self.projects),
            },
        )

        if path is not None:
            report_path = Path(path)
            report_path.parent.mkdir(parents=True, exist_ok=True)
            report_path.write_text(json.dumps(report.model_dump(mode="json"), indent=2) + "\n")
            logger.info("Health report written to %s", report_path)
        return report

    def run(
        self,
        poll_interval: float = 300,
        report_interval: float = 86400,
        report_path: Path | str | None = None,
        max_ticks: int | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Poll deployments forever (or for ``max_ticks`` polls).

        A health report is produced each time ``report_interval`` seconds
        of polling have elapsed.
        """
        ticks = 0
        since_report = 0.0
        logger.info(
            "Monitoring %d project(s) every %ss",
            len(self.projects),
            poll_interval,
        )

        while max_ticks is None or ticks < max_ticks:
            self.check_deployments()
            ticks += 1

            since_report += poll_interval
            if since_report >= report_interval:
                self.generate_health_report(report_path)
                since_report = 0.0

            if max_ticks is not None and ticks >= max_ticks:
                break
            sleep(poll_interval)
