"""Railway deployment client: status polling, build logs and redeploys."""

import logging
import os
from typing import Any

import httpx

from schemas.remediation import DeploymentStatus

logger = logging.getLogger(__name__)

LATEST_DEPLOYMENT_QUERY = """
query($projectId: String!) {
  project(id: $projectId) {
    deployments(first: 1) {
      edges {
        node {
          id
          serviceId
          status
          url
          createdAt
        }
      }
    }
  }
}
"""

BUILD_LOGS_QUERY = """
query($deploymentId: String!) {
  deployment(id: $deploymentId) {
    buildLogs
    deployLogs
    status
  }
}
"""

REDEPLOY_MUTATION = """
mutation($serviceId: String!) {
  serviceInstanceRedeploy(serviceId: $serviceId)
}
"""


class RailwayError(Exception):
    """Railway API request failed or returned GraphQL errors."""


class RailwayClient:
    """Talks to the Railway GraphQL API.

    Status checks fall back to the application's health endpoint whenever
    the API cannot be queried.
    """

    def __init__(
        self,
        token: str | None = None,
        api_url: str = "https://backboard.railway.app/graphql",
        health_url: str | None = None,
        health_timeout: int = 10,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.token = token or os.environ.get("RAILWAY_TOKEN", "")
        self.api_url = api_url
        self.health_url = (
            health_url
            or os.environ.get("RAILWAY_HEALTH_URL")
            or "https://your-app.railway.app/health"
        )
        self.health_timeout = health_timeout
        self._transport = transport

    def _graphql(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        """Run one GraphQL operation and return its ``data``.

        Raises:
            RailwayError: On transport errors, HTTP errors or GraphQL errors
        """
        try:
            with httpx.Client(timeout=30, transport=self._transport) as client:
                response = client.post(
                    self.api_url,
                    headers={
                        "Authorization": f"Bearer {self.token}",
                        "Content-Type": "application/json",
                    },
                    json={"query": query, "variables": variables},
                )
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise RailwayError(f"Railway API request failed: {e}") from e

        if payload.get("errors"):
            messages = "; ".join(error.get("message", "unknown error") for error in payload["errors"])
            raise RailwayError(f"Railway API error: {messages}")
        return payload.get("data") or {}

    def check_status(self, project_id: str) -> DeploymentStatus:
        """Return the status of the project's latest deployment."""
        try:
            data = self._graphql(LATEST_DEPLOYMENT_QUERY, {"projectId": project_id})
            edges = data["project"]["deployments"]["edges"]
        except (RailwayError, KeyError, TypeError) as e:
            logger.warning("Railway API check failed for %s: %s; using health endpoint", project_id, e)
            status = self.check_health_endpoint()
            status.project_id = project_id
            return status

        if not edges:
            return DeploymentStatus(has_errors=False, status="NO_DEPLOYMENTS", project_id=project_id)

        node = edges[0]["node"]
        return DeploymentStatus(
            has_errors=node.get("status") == "FAILED",
            status=node.get("status", "UNKNOWN"),
            project_id=project_id,
            deployment_id=node.get("id"),
            service_id=node.get("serviceId"),
            url=node.get("url"),
            created_at=node.get("createdAt"),
        )

    def fetch_build_logs(self, deployment_id: str) -> str | None:
        """Return the build logs of a deployment, or None if unavailable."""
        try:
            data = self._graphql(BUILD_LOGS_QUERY, {"deploymentId": deployment_id})
        except RailwayError as e:
            logger.warning("Failed to fetch build logs for %s: %s", deployment_id, e)
            return None

        deployment = data.get("deployment") or {}
        return deployment.get("buildLogs") or None

    def redeploy(self, service_id: str) -> dict[str, Any]:
        """Trigger a redeployment of a service.

        Raises:
            RailwayError: If Railway rejects or cannot receive the request
        """
        data = self._graphql(REDEPLOY_MUTATION, {"serviceId": service_id})
        logger.info("Redeployment triggered for service %s", service_id)
        return data

    def check_health_endpoint(self) -> DeploymentStatus:
        """Check the deployed application's health endpoint."""
        try:
            with httpx.Client(timeout=self.health_timeout, transport=self._transport) as client:
                response = client.get(self.health_url)
        except httpx.RequestError as e:
            return DeploymentStatus(has_errors=True, status="FAILED", error=str(e))

        if response.status_code != 200:
            return DeploymentStatus(
                has_errors=True,
                status="FAILED",
                error=f"Health check returned {response.status_code}",
            )
        return DeploymentStatus(has_errors=False, status="HEALTHY")
