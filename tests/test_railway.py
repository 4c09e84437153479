"""Tests for the Railway status client."""

import json

import httpx
import pytest

from integrations.railway import RailwayClient, RailwayError

API = "https://backboard.railway.app/graphql"
HEALTH = "https://shop-api.up.railway.app/health"


def make_client(handler) -> RailwayClient:
    return RailwayClient(token="rw", health_url=HEALTH, transport=httpx.MockTransport(handler))


def deployments(*nodes):
    return {"data": {"project": {"deployments": {"edges": [{"node": node} for node in nodes]}}}}


def test_failed_deployment_has_errors():
    client = make_client(
        lambda request: httpx.Response(
            200,
            json=deployments({"status": "FAILED", "url": "shop-api.up.railway.app", "createdAt": "2026-10-01"}),
        )
    )

    status = client.check_status("proj-1")

    assert status.has_errors
    assert status.status == "FAILED"
    assert status.project_id == "proj-1"
    assert status.created_at == "2026-10-01"


def test_successful_deployment():
    client = make_client(lambda request: httpx.Response(200, json=deployments({"status": "SUCCESS"})))

    status = client.check_status("proj-1")

    assert not status.has_errors
    assert status.status == "SUCCESS"


def test_no_deployments():
    client = make_client(lambda request: httpx.Response(200, json=deployments()))

    assert client.check_status("proj-1").status == "NO_DEPLOYMENTS"


def test_query_variables_and_auth():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=deployments({"status": "SUCCESS"}))

    make_client(handler).check_status("proj-9")

    assert seen[0].headers["Authorization"] == "Bearer rw"
    assert b'"projectId":"proj-9"' in seen[0].content.replace(b" ", b"")


class TestHealthFallback:
    def test_api_error_falls_back_to_healthy_endpoint(self):
        def handler(request):
            if str(request.url) == API:
                return httpx.Response(500)
            return httpx.Response(200, json={"status": "ok"})

        status = make_client(handler).check_status("proj-1")

        assert status.status == "HEALTHY"
        assert not status.has_errors
        assert status.project_id == "proj-1"

    def test_malformed_payload_falls_back(self):
        def handler(request):
            if str(request.url) == API:
                return httpx.Response(200, json={"errors": [{"message": "Not Authorized"}]})
            return httpx.Response(503)

        status = make_client(handler).check_status("proj-1")

        assert status.has_errors
        assert status.error == "Health check returned 503"

    def test_unreachable_health_endpoint(self):
        def handler(request):
            raise httpx.ConnectError("no route", request=request)

        status = make_client(handler).check_status("proj-1")

        assert status.has_errors
        assert status.status == "FAILED"


class TestDeploymentControl:
    def test_status_carries_deployment_and_service(self):
        client = make_client(
            lambda request: httpx.Response(
                200, json=deployments({"id": "dep-1", "serviceId": "svc-1", "status": "FAILED"})
            )
        )

        status = client.check_status("proj-1")

        assert status.deployment_id == "dep-1"
        assert status.service_id == "svc-1"

    def test_fetch_build_logs(self):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return httpx.Response(
                200,
                json={"data": {"deployment": {"buildLogs": "npm ERR! missing script: start", "status": "FAILED"}}},
            )

        logs = make_client(handler).fetch_build_logs("dep-1")

        assert logs == "npm ERR! missing script: start"
        assert seen[0]["variables"] == {"deploymentId": "dep-1"}
        assert "buildLogs" in seen[0]["query"]

    def test_build_logs_unavailable(self):
        client = make_client(
            lambda request: httpx.Response(200, json={"errors": [{"message": "Deployment not found"}]})
        )

        assert client.fetch_build_logs("dep-missing") is None

    def test_redeploy(self):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"data": {"serviceInstanceRedeploy": True}})

        result = make_client(handler).redeploy("svc-1")

        assert result == {"serviceInstanceRedeploy": True}
        assert seen[0]["variables"] == {"serviceId": "svc-1"}
        assert "serviceInstanceRedeploy" in seen[0]["query"]

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, json={"errors": [{"message": "Not Authorized"}]}),
            httpx.Response(502),
        ],
    )
    def test_redeploy_failure_raises(self, response):
        client = make_client(lambda request: response)

        with pytest.raises(RailwayError):
            client.redeploy("svc-1")
