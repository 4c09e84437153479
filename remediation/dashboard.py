"""HTTP dashboard exposing the DevOps monitor's status and Railway webhooks."""

import hashlib
import hmac
import json
import logging

from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from schemas.remediation import ErrorAnalysis, FixResult, FixStrategy

from .monitor import SPECIALTIES, DeploymentMonitor

logger = logging.getLogger(__name__)


class ManualFixRequest(BaseModel):
    strategy: str
    error: str | None = None


def verify_signature(body: bytes, signature: str | None, secret: str | None) -> bool:
    """Check a hex HMAC-SHA256 webhook signature; no secret rejects everything."""
    if not secret or not signature:
        return False
    expected = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(signature.lower(), expected)


def create_dashboard(monitor: DeploymentMonitor, webhook_secret: str | None = None) -> FastAPI:
    """Build the dashboard app for ``monitor``.

    Railway webhooks are accepted only when signed with ``webhook_secret``.
    """
    app = FastAPI(title="DevOps Agent Dashboard", version="1.0.0")

    @app.get("/agent/status")
    def agent_status() -> dict:
        return {
            "agent": monitor.agent_name,
            "specialties": SPECIALTIES,
            "uptime": monitor.state.uptime,
            "monitoring": {
                "repositories": monitor.repositories,
                "railway_projects": monitor.projects,
            },
            "recent_fixes": [record.model_dump(mode="json") for record in monitor.state.fix_history[-10:]],
        }

    @app.get("/agent/health")
    def agent_health() -> dict:
        return {"status": "ACTIVE", "monitoring": True}

    @app.post("/agent/manual-fix", response_model=FixResult)
    def manual_fix(request: ManualFixRequest) -> FixResult:
        try:
            strategy = FixStrategy(request.strategy)
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Unknown strategy: {request.strategy}")

        logger.info("Manual fix requested: %s", strategy.value)
        analysis = ErrorAnalysis(can_auto_fix=True, error=request.error or "", strategy=strategy)
        return monitor.dispatcher.execute(analysis)

    @app.post("/webhook/railway")
    async def railway_webhook(
        request: Request,
        x_railway_signature: str | None = Header(None),
    ) -> dict:
        body = await request.body()
        if not verify_signature(body, x_railway_signature, webhook_secret):
            raise HTTPException(status_code=401, detail="Invalid webhook signature")

        try:
            event = json.loads(body)
        except ValueError:
            raise HTTPException(status_code=400, detail="Webhook body is not JSON")
        if not isinstance(event, dict):
            raise HTTPException(status_code=400, detail="Webhook body must be a JSON object")

        incident = await run_in_threadpool(monitor.handle_webhook_event, event)
        return {
            "status": "ok",
            "event": event.get("type"),
            "incident": incident.model_dump(mode="json") if incident else None,
        }

    return app
