"""GitHub REST client used by the role agents and the DevOps monitor.

Covers repositories, the git data API (blobs, trees, commits, refs), pull
requests, the contents API and deployments.
"""

import base64
import logging
import os
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class GitHubError(Exception):
    """Raised when a GitHub API call fails.

    Attributes:
        status_code: HTTP status, or None when the request never got a response
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GitHubClient:
    """Client for the GitHub REST API.

    Authentication via a personal access token (GITHUB_TOKEN). Repository
    arguments accept "name" (resolved against ``owner``) or "owner/name".

    Usage:
        client = GitHubClient(token="ghp_...", owner="octocat")
        client.create_branch("todo-app", "feature-backend-api-implementation")
    """

    def __init__(
        self,
        token: str | None = None,
        owner: str | None = None,
        api_url: str = "https://api.github.com",
        timeout: int = 30,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize GitHub client.

        Args:
            token: Personal access token (or GITHUB_TOKEN/GH_TOKEN env var)
            owner: Default repository owner (or GITHUB_USERNAME env var)
            api_url: API base URL
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.token = token or os.environ.get("GITHUB_TOKEN") or os.environ.get("GH_TOKEN", "")
        self.owner = owner or os.environ.get("GITHUB_USERNAME", "")
        self.base_url = api_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

        self._headers = {
            "Accept": "application/vnd.github.v3+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.token:
            self._headers["Authorization"] = f"Bearer {self.token}"

    # --- Plumbing ---

    def _repo_path(self, repo: str) -> str:
        if "/" in repo:
            return repo
        if not self.owner:
            raise ValueError(
                f"Repository owner not set for '{repo}'. Pass owner/name or set GITHUB_USERNAME."
            )
        return f"{self.owner}/{repo}"

    def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.request(method, url, headers=self._headers, json=json, params=params)
        except httpx.RequestError as e:
            raise GitHubError(f"Failed to connect to GitHub: {e}") from e

        if response.status_code == 404:
            raise GitHubError(f"Not found: {method} {path}", 404)
        elif response.status_code == 401:
            raise GitHubError("GitHub authentication failed. Check GITHUB_TOKEN.", 401)
        elif response.status_code == 403:
            if "rate limit" in response.text.lower():
                raise GitHubError("GitHub API rate limit exceeded.", 403)
            raise GitHubError(f"Access denied: {method} {path}", 403)
        elif response.status_code >= 400:
            raise GitHubError(
                f"GitHub API error: {response.status_code} - {response.text}",
                response.status_code,
            )

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # --- Users and repositories ---

    def get_authenticated_user(self) -> dict[str, Any]:
        """Return the user the token belongs to."""
        return self._request("GET", "/user")

    def get_repository(self, repo: str) -> dict[str, Any]:
        return self._request("GET", f"/repos/{self._repo_path(repo)}")

    def create_repository(
        self,
        name: str,
        description: str = "",
        private: bool = False,
        auto_init: bool = True,
        gitignore_template: str | None = "Node",
        license_template: str | None = "mit",
    ) -> dict[str, Any]:
        """Create a repository for the authenticated user.

        Raises:
            GitHubError: status 422 when the repository already exists
        """
        payload: dict[str, Any] = {
            "name": name,
            "description": description,
            "private": private,
            "auto_init": auto_init,
        }
        if gitignore_template:
            payload["gitignore_template"] = gitignore_template
        if license_template:
            payload["license_template"] = license_template

        data = self._request("POST", "/user/repos", json=payload)
        logger.info("Created repository %s", data.get("full_name", name))
        return data

    # --- Git data API ---

    def get_ref(self, repo: str, ref: str) -> dict[str, Any]:
        """Get a reference, e.g. ``heads/main``."""
        return self._request("GET", f"/repos/{self._repo_path(repo)}/git/ref/{ref}")

    def create_ref(self, repo: str, ref: str, sha: str) -> dict[str, Any]:
        """Create ``refs/<ref>`` pointing at ``sha``."""
        full_ref = ref if ref.startswith("refs/") else f"refs/{ref}"
        return self._request(
            "POST",
            f"/repos/{self._repo_path(repo)}/git/refs",
            json={"ref": full_ref, "sha": sha},
        )

    def update_ref(self, repo: str, ref: str, sha: str, force: bool = False) -> dict[str, Any]:
        return self._request(
            "PATCH",
            f"/repos/{self._repo_path(repo)}/git/refs/{ref}",
            json={"sha": sha, "force": force},
        )

    def get_commit(self, repo: str, sha: str) -> dict[str, Any]:
        return self._request("GET", f"/repos/{self._repo_path(repo)}/git/commits/{sha}")

    def create_blob(self, repo: str, content: str) -> str:
        """Upload file content and return the blob SHA."""
        data = self._request(
            "POST",
            f"/repos/{self._repo_path(repo)}/git/blobs",
            json={"content": _b64(content), "encoding": "base64"},
        )
        return data["sha"]

    def create_tree(self, repo: str, base_tree: str, blobs: dict[str, str]) -> str:
        """Create a tree on top of ``base_tree`` from ``path -> blob sha``."""
        tree = [
            {"path": path, "mode": "100644", "type": "blob", "sha": sha}
            for path, sha in blobs.items()
        ]
        data = self._request(
            "POST",
            f"/repos/{self._repo_path(repo)}/git/trees",
            json={"base_tree": base_tree, "tree": tree},
        )
        return data["sha"]

    def create_commit(self, repo: str, message: str, tree: str, parents: list[str]) -> str:
        data = self._request(
            "POST",
            f"/repos/{self._repo_path(repo)}/git/commits",
            json={"message": message, "tree": tree, "parents": parents},
        )
        return data["sha"]

    def create_branch(self, repo: str, branch: str) -> bool:
        """Create ``branch`` from the repository default branch.

        Returns:
            True if the branch was created, False if it already existed.
        """
        default_branch = self.get_repository(repo).get("default_branch", "main")
        base_sha = self.get_ref(repo, f"heads/{default_branch}")["object"]["sha"]
        try:
            self.create_ref(repo, f"refs/heads/{branch}", base_sha)
        except GitHubError as e:
            if e.status_code == 422:
                logger.info("Branch %s already exists in %s", branch, repo)
                return False
            raise
        logger.info("Created branch %s in %s from %s", branch, repo, default_branch)
        return True

    def commit_files(self, repo: str, branch: str, files: dict[str, str], message: str) -> str:
        """Commit several files to ``branch`` in one commit.

        Args:
            repo: Repository
            branch: Branch to advance
            files: Path -> file content
            message: Commit message

        Returns:
            SHA of the new commit.
        """
        head_sha = self.get_ref(repo, f"heads/{branch}")["object"]["sha"]
        base_tree = self.get_commit(repo, head_sha)["tree"]["sha"]

        blobs = {path: self.create_blob(repo, content) for path, content in files.items()}
        tree_sha = self.create_tree(repo, base_tree, blobs)
        commit_sha = self.create_commit(repo, message, tree_sha, [head_sha])
        self.update_ref(repo, f"heads/{branch}", commit_sha)

        logger.info("Committed %d files to %s:%s (%s)", len(files), repo, branch, commit_sha[:7])
        return commit_sha

    # --- Pull requests ---

    def create_pull_request(
        self,
        repo: str,
        head: str,
        title: str,
        body: str = "",
        base: str = "main",
    ) -> dict[str, Any]:
        data = self._request(
            "POST",
            f"/repos/{self._repo_path(repo)}/pulls",
            json={"title": title, "head": head, "base": base, "body": body},
        )
        logger.info("Opened PR #%s in %s: %s", data.get("number"), repo, title)
        return data

    def get_pull_request(self, repo: str, number: int) -> dict[str, Any]:
        return self._request("GET", f"/repos/{self._repo_path(repo)}/pulls/{number}")

    def merge_pull_request(
        self,
        repo: str,
        number: int,
        commit_title: str | None = None,
        merge_method: str = "squash",
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"merge_method": merge_method}
        if commit_title:
            payload["commit_title"] = commit_title
        return self._request(
            "PUT",
            f"/repos/{self._repo_path(repo)}/pulls/{number}/merge",
            json=payload,
        )

    # --- Contents API ---

    def get_file(self, repo: str, path: str, ref: str | None = None) -> dict[str, Any] | None:
        """Return file metadata (including ``sha``), or None if it does not exist."""
        params = {"ref": ref} if ref else None
        try:
            return self._request(
                "GET", f"/repos/{self._repo_path(repo)}/contents/{path}", params=params
            )
        except GitHubError as e:
            if e.status_code == 404:
                return None
            raise

    def read_file(self, repo: str, path: str, ref: str | None = None) -> str | None:
        """Return the decoded text of a file, or None if it does not exist."""
        data = self.get_file(repo, path, ref=ref)
        if not data or "content" not in data:
            return None
        return base64.b64decode(data["content"]).decode("utf-8")

    def list_directory(self, repo: str, path: str = "", ref: str | None = None) -> list[dict[str, Any]]:
        """List the entries (``name``, ``path``, ``type``) of a directory."""
        params = {"ref": ref} if ref else None
        data = self._request("GET", f"/repos/{self._repo_path(repo)}/contents/{path}", params=params)
        return data if isinstance(data, list) else []

    def put_file(
        self,
        repo: str,
        path: str,
        content: str,
        message: str,
        branch: str | None = None,
    ) -> dict[str, Any]:
        """Create or overwrite one file through the contents API."""
        existing = self.get_file(repo, path, ref=branch)

        payload: dict[str, Any] = {"message": message, "content": _b64(content)}
        if existing and existing.get("sha"):
            payload["sha"] = existing["sha"]
        if branch:
            payload["branch"] = branch

        data = self._request("PUT", f"/repos/{self._repo_path(repo)}/contents/{path}", json=payload)
        logger.info("%s %s in %s", "Updated" if existing else "Created", path, repo)
        return data

    # --- Deployments ---

    def list_deployments(self, repo: str, per_page: int = 5) -> list[dict[str, Any]]:
        return self._request(
            "GET",
            f"/repos/{self._repo_path(repo)}/deployments",
            params={"per_page": per_page},
        )

    def list_deployment_statuses(self, repo: str, deployment_id: int) -> list[dict[str, Any]]:
        return self._request(
            "GET",
            f"/repos/{self._repo_path(repo)}/deployments/{deployment_id}/statuses",
        )


def _b64(content: str) -> str:
    return base64.b64encode(content.encode("utf-8")).decode("ascii")
