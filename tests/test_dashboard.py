"""Tests for the DevOps dashboard API."""

import hashlib
import hmac
import json

import pytest
from fastapi.testclient import TestClient

from remediation import DeploymentMonitor, RemediationDispatcher, create_dashboard
from remediation.dashboard import verify_signature

SECRET = "whsec-test"


@pytest.fixture
def monitor(fake_github) -> DeploymentMonitor:
    return DeploymentMonitor(
        RemediationDispatcher(fake_github, "octo/shop-api"),
        projects=["railway-project"],
    )


@pytest.fixture
def client(monitor) -> TestClient:
    return TestClient(create_dashboard(monitor))


def test_health(client):
    response = client.get("/agent/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ACTIVE", "monitoring": True}


def test_status_lists_recent_fixes(client, monitor):
    monitor.handle_deployment_error("Port already in use")

    data = client.get("/agent/status").json()

    assert data["agent"] == "Senior DevOps AI Agent"
    assert data["monitoring"] == {"repositories": ["octo/shop-api"], "railway_projects": ["railway-project"]}
    assert len(data["recent_fixes"]) == 1
    assert data["recent_fixes"][0]["fix_result"]["strategy"] == "DYNAMIC_PORT_ALLOCATION"
    assert "Build pipeline repair" in data["specialties"]


def test_manual_fix(client, fake_github):
    response = client.post("/agent/manual-fix", json={"strategy": "CREATE_MISSING_FILES"})

    assert response.status_code == 200
    assert response.json()["files_created"] == 3
    assert len(fake_github.writes) == 3


def test_manual_fix_unknown_strategy(client):
    response = client.post("/agent/manual-fix", json={"strategy": "REBOOT_EVERYTHING"})

    assert response.status_code == 400
    assert "REBOOT_EVERYTHING" in response.json()["detail"]


def sign(body: bytes, secret: str = SECRET) -> str:
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


@pytest.fixture
def webhook_client(monitor) -> TestClient:
    return TestClient(create_dashboard(monitor, webhook_secret=SECRET))


class TestRailwayWebhook:
    def test_signed_failure_event_is_fixed(self, webhook_client, fake_github):
        body = json.dumps(
            {"type": "deployment.failed", "data": {"id": "dep-1", "error": "Port already in use"}}
        ).encode()

        response = webhook_client.post(
            "/webhook/railway", content=body, headers={"x-railway-signature": sign(body)}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["event"] == "deployment.failed"
        assert data["incident"]["state"] == "FIXED"
        assert data["incident"]["deployment_id"] == "dep-1"
        assert fake_github.writes[0]["path"] == "server.js"

    def test_other_event_has_no_incident(self, webhook_client):
        body = json.dumps({"type": "deployment.succeeded", "data": {"id": "dep-2"}}).encode()

        response = webhook_client.post(
            "/webhook/railway", content=body, headers={"x-railway-signature": sign(body)}
        )

        assert response.json() == {"status": "ok", "event": "deployment.succeeded", "incident": None}

    @pytest.mark.parametrize("headers", [{}, {"x-railway-signature": "deadbeef"}])
    def test_bad_signature_is_rejected(self, webhook_client, fake_github, headers):
        body = json.dumps({"type": "deployment.failed", "data": {"error": "Port already in use"}}).encode()

        response = webhook_client.post("/webhook/railway", content=body, headers=headers)

        assert response.status_code == 401
        assert fake_github.writes == []

    def test_no_secret_rejects_everything(self, client):
        body = b'{"type": "deployment.failed", "data": {}}'

        response = client.post("/webhook/railway", content=body, headers={"x-railway-signature": sign(body)})

        assert response.status_code == 401

    @pytest.mark.parametrize("body", [b"not json", b"[1, 2]"])
    def test_malformed_body(self, webhook_client, body):
        response = webhook_client.post(
            "/webhook/railway", content=body, headers={"x-railway-signature": sign(body)}
        )

        assert response.status_code == 400


def test_signature_is_case_insensitive():
    body = b"{}"

    assert verify_signature(body, sign(body).upper(), SECRET)
    assert not verify_signature(body, sign(body, "other"), SECRET)
