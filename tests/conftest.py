"""Shared fixtures: scripted LLM, in-memory GitHub and shared context."""

from typing import Any

import pytest

from integrations.github import GitHubError
from pipeline.config import Config, GitHubConfig, LLMConfig, PipelineConfig, SharedContextConfig
from shared_context import InMemoryContextStore, SharedContext


class FakeLLM:
    """Returns queued responses in order, then ``default``.

    A queued exception is raised instead of returned.
    """

    def __init__(self, responses: list[Any] | None = None, default: str = "OK") -> None:
        self.responses = list(responses or [])
        self.default = default
        self.calls: list[dict[str, Any]] = []

    def chat(self, messages: list[dict[str, str]], **kwargs: Any) -> str:
        self.calls.append({"messages": messages, **kwargs})
        if self.responses:
            response = self.responses.pop(0)
            if isinstance(response, Exception):
                raise response
            return response
        return self.default

    @property
    def last_user_message(self) -> str:
        return self.calls[-1]["messages"][-1]["content"]

    @property
    def last_system_prompt(self) -> str:
        return self.calls[-1]["messages"][0]["content"]


class FakeGitHub:
    """In-memory stand-in for ``GitHubClient``.

    Paths listed in ``fail_paths`` make ``put_file`` raise, and repositories
    in ``conflicted_prs`` report their pull requests as unmergeable.
    """

    owner = "octo"

    def __init__(self) -> None:
        self.repositories: dict[str, dict[str, Any]] = {}
        self.branches: dict[str, set[str]] = {}
        self.commits: list[dict[str, Any]] = []
        self.pull_requests: dict[str, list[dict[str, Any]]] = {}
        self.merged: list[tuple[str, int]] = []
        self.files: dict[tuple[str, str], str] = {}
        self.writes: list[dict[str, Any]] = []
        self.deployments: dict[str, list[dict[str, Any]]] = {}
        self.fail_paths: set[str] = set()
        self.conflicted_prs: set[str] = set()

    def get_authenticated_user(self) -> dict[str, Any]:
        return {"login": self.owner}

    def _repo_data(self, name: str) -> dict[str, Any]:
        return {
            "name": name,
            "full_name": f"{self.owner}/{name}",
            "html_url": f"https://github.com/{self.owner}/{name}",
            "clone_url": f"https://github.com/{self.owner}/{name}.git",
            "default_branch": "main",
        }

    def create_repository(self, name: str, description: str = "", **kwargs: Any) -> dict[str, Any]:
        if name in self.repositories:
            raise GitHubError("Repository creation failed: name already exists on this account", 422)
        self.repositories[name] = self._repo_data(name)
        self.branches[name] = {"main"}
        return self.repositories[name]

    def get_repository(self, repo: str) -> dict[str, Any]:
        if repo not in self.repositories:
            raise GitHubError(f"Not found: GET /repos/{self.owner}/{repo}", 404)
        return self.repositories[repo]

    def create_branch(self, repo: str, branch: str) -> bool:
        branches = self.branches.setdefault(repo, {"main"})
        if branch in branches:
            return False
        branches.add(branch)
        return True

    def commit_files(self, repo: str, branch: str, files: dict[str, str], message: str) -> str:
        sha = f"commit-{len(self.commits) + 1}"
        self.commits.append({"repo": repo, "branch": branch, "files": dict(files), "message": message, "sha": sha})
        return sha

    def create_pull_request(self, repo: str, head: str, title: str, body: str = "", base: str = "main") -> dict[str, Any]:
        prs = self.pull_requests.setdefault(repo, [])
        number = len(prs) + 1
        pr = {
            "number": number,
            "title": title,
            "head": head,
            "body": body,
            "base": {"ref": base},
            "html_url": f"https://github.com/{self.owner}/{repo}/pull/{number}",
        }
        prs.append(pr)
        return pr

    def get_pull_request(self, repo: str, number: int) -> dict[str, Any]:
        for pr in self.pull_requests.get(repo, []):
            if pr["number"] == number:
                return {**pr, "mergeable": repo not in self.conflicted_prs}
        raise GitHubError(f"Not found: GET /repos/{self.owner}/{repo}/pulls/{number}", 404)

    def merge_pull_request(self, repo: str, number: int, commit_title: str | None = None, **kwargs: Any) -> dict[str, Any]:
        self.merged.append((repo, number))
        return {"sha": f"merge-{repo}-{number}", "merged": True}

    def get_file(self, repo: str, path: str, ref: str | None = None) -> dict[str, Any] | None:
        if (repo, path) not in self.files:
            return None
        return {"path": path, "sha": f"blob-{path}"}

    def read_file(self, repo: str, path: str, ref: str | None = None) -> str | None:
        return self.files.get((repo, path))

    def list_directory(self, repo: str, path: str = "", ref: str | None = None) -> list[dict[str, Any]]:
        names = sorted({p.split("/")[0] for r, p in self.files if r == repo})
        if not names and repo not in self.repositories:
            raise GitHubError(f"Not found: GET /repos/{repo}/contents/", 404)
        return [{"name": name, "path": name, "type": "file"} for name in names]

    def put_file(self, repo: str, path: str, content: str, message: str, branch: str | None = None) -> dict[str, Any]:
        if path in self.fail_paths:
            raise GitHubError(f"GitHub API error: 500 - could not write {path}", 500)
        self.files[(repo, path)] = content
        self.writes.append({"repo": repo, "path": path, "message": message, "branch": branch})
        return {"content": {"path": path}}

    def list_deployments(self, repo: str, per_page: int = 5) -> list[dict[str, Any]]:
        return self.deployments.get(repo, [])

    def list_deployment_statuses(self, repo: str, deployment_id: int) -> list[dict[str, Any]]:
        return [{"state": "success", "target_url": f"https://{repo}.up.railway.app"}]


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def shared_context() -> SharedContext:
    context = SharedContext(InMemoryContextStore())
    context.initialize()
    return context


@pytest.fixture
def config(tmp_path) -> Config:
    return Config(
        llm=LLMConfig(api_key="test-key"),
        github=GitHubConfig(token="test-token", username="octo"),
        shared_context=SharedContextConfig(directory=str(tmp_path / "shared-context")),
        pipeline=PipelineConfig(runs_dir=str(tmp_path / "runs")),
    )
