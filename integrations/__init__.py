"""External service clients.

Supports:
- GitHub REST API (repositories, git data, pull requests, contents, deployments)
- Railway deployments (status with health-endpoint fallback, build logs, redeploy)
"""

from .github import GitHubClient, GitHubError
from .railway import RailwayClient, RailwayError

__all__ = [
    "GitHubClient",
    "GitHubError",
    "RailwayClient",
    "RailwayError",
]
