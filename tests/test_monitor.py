"""Tests for the deployment monitor and its incident lifecycle."""

import json

import pytest

from remediation import DeploymentMonitor, Notifier, RemediationDispatcher, RemediationState
from schemas.remediation import DeploymentStatus, IncidentState

REPO = "octo/shop-api"


class RecordingNotifier(Notifier):
    def __init__(self) -> None:
        self.successes = []
        self.escalations = []

    def notify_fix_success(self, analysis, fix_result):
        self.successes.append(fix_result)

    def escalate(self, analysis, fix_result=None):
        self.escalations.append((analysis, fix_result))


class ScriptedStatusSource:
    """Returns a fixed status per project; ``None`` raises."""

    def __init__(self, statuses):
        self.statuses = statuses
        self.polled = []

    def check_status(self, project_id):
        self.polled.append(project_id)
        status = self.statuses[project_id]
        if status is None:
            raise ConnectionError("Railway API unreachable")
        return status


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def monitor(fake_github, notifier) -> DeploymentMonitor:
    return DeploymentMonitor(RemediationDispatcher(fake_github, REPO), notifier=notifier)


class TestIncidents:
    def test_fixable_error_is_fixed(self, monitor, notifier):
        incident = monitor.handle_deployment_error("Cannot find module 'server.js'")

        assert incident.state == IncidentState.FIXED
        assert incident.history == [
            IncidentState.DETECTED,
            IncidentState.ANALYZED,
            IncidentState.AUTO_FIXING,
            IncidentState.FIXED,
        ]
        assert len(notifier.successes) == 1
        assert len(monitor.state.fix_history) == 1
        assert monitor.state.fix_history[0].success

    def test_failed_fix_is_escalated(self, monitor, notifier, fake_github):
        fake_github.fail_paths = {"railway.json"}

        incident = monitor.handle_deployment_error("Cannot find module 'server.js'")

        assert incident.state == IncidentState.ESCALATED
        assert incident.fix_result.files_created == 2
        assert notifier.escalations[0][1] is incident.fix_result
        assert not monitor.state.fix_history[0].success

    def test_unfixable_error_escalates_directly(self, monitor, notifier, fake_github):
        incident = monitor.handle_deployment_error("request timeout")

        assert incident.state == IncidentState.ESCALATED_DIRECT
        assert incident.escalated
        assert notifier.escalations[0][1] is None
        assert monitor.state.fix_history == []
        assert fake_github.writes == []

    def test_empty_error_escalates_directly(self, monitor):
        incident = monitor.handle_deployment_error(None)

        assert incident.state == IncidentState.ESCALATED_DIRECT
        assert incident.analysis.confidence == 0

    def test_keyword_match_without_fix_escalates(self, monitor):
        incident = monitor.handle_deployment_error("mongodb replica set lost")

        assert incident.state == IncidentState.ESCALATED
        assert incident.fix_result.action == "no_change"


class TestPolling:
    def test_failed_deployments_are_handled(self, fake_github, notifier):
        source = ScriptedStatusSource(
            {
                "healthy": DeploymentStatus(has_errors=False, status="SUCCESS"),
                "broken": DeploymentStatus(has_errors=True, status="FAILED", error="Port already in use"),
            }
        )
        monitor = DeploymentMonitor(
            RemediationDispatcher(fake_github, REPO),
            status_source=source,
            projects=["healthy", "broken"],
            notifier=notifier,
        )

        incidents = monitor.check_deployments()

        assert len(incidents) == 1
        assert incidents[0].state == IncidentState.FIXED

    def test_failing_poll_does_not_stop_others(self, fake_github, notifier):
        source = ScriptedStatusSource(
            {
                "down": None,
                "broken": DeploymentStatus(has_errors=True, status="CRASHED"),
            }
        )
        monitor = DeploymentMonitor(
            RemediationDispatcher(fake_github, REPO),
            status_source=source,
            projects=["down", "broken"],
            notifier=notifier,
        )

        incidents = monitor.check_deployments()

        assert source.polled == ["down", "broken"]
        assert incidents[0].error == "Deployment CRASHED"

    def test_no_status_source(self, monitor):
        assert monitor.check_deployments() == []

    def test_run_writes_report_each_interval(self, fake_github, tmp_path):
        source = ScriptedStatusSource({"p1": DeploymentStatus(has_errors=False, status="SUCCESS")})
        monitor = DeploymentMonitor(RemediationDispatcher(fake_github, REPO), status_source=source, projects=["p1"])
        sleeps = []
        report_path = tmp_path / "logs" / "health.json"

        monitor.run(poll_interval=10, report_interval=20, report_path=report_path, max_ticks=3, sleep=sleeps.append)

        assert source.polled == ["p1", "p1", "p1"]
        assert sleeps == [10, 10]
        assert report_path.exists()


class TestHealthReport:
    def test_report_counts_fixes(self, monitor, tmp_path):
        monitor.handle_deployment_error("Port already in use")
        monitor.handle_deployment_error("mongodb down")

        path = tmp_path / "report.json"
        report = monitor.generate_health_report(path)

        assert report.total_fixes == 2
        assert report.successful_fixes == 1
        assert report.monitored_systems["repositories"] == [REPO]
        assert json.loads(path.read_text())["total_fixes"] == 2

    def test_state_is_shared_between_monitors(self, fake_github):
        state = RemediationState()
        first = DeploymentMonitor(RemediationDispatcher(fake_github, REPO), state=state)
        second = DeploymentMonitor(RemediationDispatcher(fake_github, REPO), state=state)

        first.handle_deployment_error("Port already in use")

        assert second.generate_health_report().total_fixes == 1


class FakeRailway:
    """Serves build logs per deployment and records redeploys."""

    def __init__(self, logs=None, redeploy_error=None):
        self.logs = logs or {}
        self.redeploy_error = redeploy_error
        self.log_requests = []
        self.redeploys = []

    def fetch_build_logs(self, deployment_id):
        self.log_requests.append(deployment_id)
        return self.logs.get(deployment_id)

    def redeploy(self, service_id):
        if self.redeploy_error is not None:
            raise self.redeploy_error
        self.redeploys.append(service_id)
        return {"serviceInstanceRedeploy": True}


def railway_monitor(fake_github, notifier, railway, **kwargs) -> DeploymentMonitor:
    return DeploymentMonitor(
        RemediationDispatcher(fake_github, REPO), notifier=notifier, railway=railway, **kwargs
    )


class TestBuildLogsAndRedeploy:
    def test_build_logs_drive_classification(self, fake_github, notifier):
        railway = FakeRailway(logs={"dep-1": "npm ERR!\nError: Cannot find module '/app/server.js'"})
        monitor = railway_monitor(fake_github, notifier, railway, service_id="svc-1")

        incident = monitor.handle_deployment_error("Deployment FAILED", deployment_id="dep-1")

        assert railway.log_requests == ["dep-1"]
        assert incident.deployment_id == "dep-1"
        assert "Cannot find module" in incident.build_logs
        assert incident.state == IncidentState.FIXED
        assert incident.redeployed
        assert railway.redeploys == ["svc-1"]

    def test_status_alone_is_not_fixable(self, monitor):
        incident = monitor.handle_deployment_error("Deployment FAILED", deployment_id="dep-1")

        assert incident.build_logs is None
        assert incident.state == IncidentState.ESCALATED_DIRECT

    def test_service_from_call_wins(self, fake_github, notifier):
        railway = FakeRailway()
        monitor = railway_monitor(fake_github, notifier, railway, service_id="svc-default")

        monitor.handle_deployment_error("Port already in use", service_id="svc-event")

        assert railway.redeploys == ["svc-event"]

    def test_redeploy_failure_keeps_fix(self, fake_github, notifier):
        railway = FakeRailway(redeploy_error=RuntimeError("Railway API error: Not Authorized"))
        monitor = railway_monitor(fake_github, notifier, railway, service_id="svc-1")

        incident = monitor.handle_deployment_error("Port already in use")

        assert incident.state == IncidentState.FIXED
        assert not incident.redeployed
        assert len(notifier.successes) == 1

    def test_no_service_means_no_redeploy(self, fake_github, notifier):
        railway = FakeRailway()
        monitor = railway_monitor(fake_github, notifier, railway)

        incident = monitor.handle_deployment_error("Port already in use")

        assert not incident.redeployed
        assert railway.redeploys == []

    def test_escalation_does_not_redeploy(self, fake_github, notifier):
        railway = FakeRailway()
        monitor = railway_monitor(fake_github, notifier, railway, service_id="svc-1")

        monitor.handle_deployment_error("request timeout")

        assert railway.redeploys == []

    def test_polling_passes_deployment_and_service(self, fake_github, notifier):
        railway = FakeRailway(logs={"dep-7": "Error: listen EADDRINUSE: Port already in use"})
        source = ScriptedStatusSource(
            {"p1": DeploymentStatus(has_errors=True, status="FAILED", deployment_id="dep-7", service_id="svc-7")}
        )
        monitor = railway_monitor(fake_github, notifier, railway, status_source=source, projects=["p1"])

        incidents = monitor.check_deployments()

        assert railway.log_requests == ["dep-7"]
        assert incidents[0].state == IncidentState.FIXED
        assert railway.redeploys == ["svc-7"]


class TestWebhookEvents:
    def test_failed_deployment_event(self, fake_github, notifier):
        railway = FakeRailway()
        monitor = railway_monitor(fake_github, notifier, railway)
        event = {
            "type": "deployment.failed",
            "data": {"id": "dep-3", "serviceId": "svc-3", "error": "Port already in use"},
        }

        incident = monitor.handle_webhook_event(event)

        assert incident.state == IncidentState.FIXED
        assert incident.deployment_id == "dep-3"
        assert railway.redeploys == ["svc-3"]

    def test_crash_without_error_text(self, monitor):
        incident = monitor.handle_webhook_event({"type": "deployment.crashed", "data": {"id": "dep-4"}})

        assert incident.error == "Unknown deployment error"
        assert incident.state == IncidentState.ESCALATED_DIRECT

    def test_other_events_are_ignored(self, monitor, fake_github):
        assert monitor.handle_webhook_event({"type": "deployment.succeeded", "data": {"id": "dep-5"}}) is None
        assert monitor.state.fix_history == []
        assert fake_github.writes == []
