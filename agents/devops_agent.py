"""DevOps agent - repositories, merges, Railway config and app generation."""

import time
from typing import Any, Callable

from schemas.phase_results import ApplicationResult, DeploymentResult, RepoResult
from scaffolding.generator import analyze_app_description, generate_project_name, generate_repository_structure
from scaffolding.templates import railway_json

from .base import AgentError, BaseAgent
from .css_agent import CSSAgent
from .designer_agent import DesignerAgent
from .prompts import DEVOPS_PROMPT

CREATE_KEYWORDS = ("create", "generate", "make", "set up", "setup")
REPO_KEYWORDS = ("repo", "repository")

EXPERTISE = [
    "Infrastructure as Code",
    "Kubernetes & Cloud Native",
    "CI/CD & GitOps",
    "Security & Compliance",
    "Observability & Monitoring",
    "Cost Optimization",
    "Disaster Recovery",
]


class DevOpsAgent(BaseAgent):
    """Owns repositories and deployment.

    Args:
        deploy_wait: Seconds to wait after a merge before reading deployments
        sleep: Sleep function (replaced in tests)
    """

    display_name = "DevOps AI"

    def __init__(self, *args: Any, deploy_wait: float = 5.0, sleep: Callable[[float], None] = time.sleep, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.deploy_wait = deploy_wait
        self._sleep = sleep

    def default_system_prompt(self) -> str:
        return DEVOPS_PROMPT

    def consult(self, request: str) -> dict[str, Any]:
        """Answer a DevOps request.

        Requests asking to create a repository are executed directly; the
        repository name is derived from the request.
        """
        lowered = request.lower()
        if any(k in lowered for k in CREATE_KEYWORDS) and any(k in lowered for k in REPO_KEYWORDS):
            self.logger.info("Request asks for a repository, creating it")
            repository = self.create_repository(generate_project_name(request), request[:200])
            return {"action": "repository_created", "repository": repository.model_dump(), "request": request}

        response = self._chat(request, max_tokens=3000, temperature=0.3)
        return {"action": "consultation", "response": response, "request": request, "expertise": EXPERTISE}

    def create_repository(self, name: str, description: str = "") -> RepoResult:
        """Create the project repository (an existing one is reused)."""
        repository = self._ensure_repository(name, description)
        if self.context is not None:
            self.context.mark_repositories_created()
        verb = "Reusing" if repository.already_existed else "Created"
        self._log("All Team", "repository_created", f"{verb} repository {repository.full_name}: {repository.url}", "high")
        return repository

    def merge_pull_request(self, repo: str, pr_number: int, commit_title: str = "Auto-merge by DevOps AI") -> dict[str, Any]:
        """Squash-merge a PR.

        Raises:
            AgentError: If the PR has conflicts or GitHub refuses the merge
        """
        github = self._require_github()
        with self._github_call(f"Merge PR #{pr_number}"):
            pr = github.get_pull_request(repo, pr_number)
            if pr.get("mergeable") is False:
                raise AgentError(f"PR #{pr_number} has merge conflicts")
            merge = github.merge_pull_request(repo, pr_number, commit_title=commit_title)

        self._log("All Team", "pr_merged", f"Merged PR #{pr_number}: {pr.get('title', '')}. SHA: {merge.get('sha')}")
        return {"merge_sha": merge.get("sha"), "pr_number": pr_number, "base": pr.get("base", {}).get("ref")}

    def create_railway_config(self, repo: str) -> bool:
        """Add railway.json unless the repository already has one.

        Returns:
            True if the file was created.
        """
        github = self._require_github()
        with self._github_call("Create railway.json"):
            if github.get_file(repo, "railway.json") is not None:
                return False
            github.put_file(repo, "railway.json", railway_json(), "Add Railway deployment configuration")
        return True

    def monitor_deployment(self, repo: str) -> dict[str, Any]:
        """Latest GitHub deployment of ``repo`` and its latest status."""
        github = self._require_github()
        with self._github_call("Read deployments"):
            deployments = github.list_deployments(repo)
            if not deployments:
                return {"deployment_id": None, "status": "no_deployments"}

            latest = deployments[0]
            statuses = github.list_deployment_statuses(repo, latest["id"])

        status = statuses[0] if statuses else {}
        return {
            "deployment_id": latest["id"],
            "status": status.get("state", "unknown"),
            "url": status.get("target_url"),
            "sha": latest.get("sha"),
        }

    def automated_workflow(self, repo: str, pr_number: int) -> DeploymentResult:
        """Merge the PR, ensure Railway config, then read the deployment status.

        Failures are returned (``success=False``), not raised.
        """
        self.logger.info("Automated workflow for %s PR #%s", repo, pr_number)
        try:
            merge = self.merge_pull_request(repo, pr_number)
            config_created = self.create_railway_config(repo)
            if self.deploy_wait > 0:
                self._sleep(self.deploy_wait)
            status = self.monitor_deployment(repo)
        except AgentError as e:
            self._log("All Team", "workflow_failed", f"Automated workflow failed for {repo}: {e}")
            return DeploymentResult(success=False, repo=repo, pr_number=pr_number, error=str(e))

        self._log("All Team", "workflow_completed", f"Automated workflow completed for {repo}. PR #{pr_number} merged.")
        return DeploymentResult(
            success=True,
            repo=repo,
            pr_number=pr_number,
            merge_sha=merge["merge_sha"],
            railway_config_created=config_created,
            deployment_status=status,
        )

    def create_application(
        self,
        description: str,
        designer: DesignerAgent | None = None,
        css: CSSAgent | None = None,
    ) -> ApplicationResult:
        """Generate a complete Express application and push it to a new repository.

        With a designer (and optionally a CSS specialist) the app gets a
        design system and a generated stylesheet. Files that fail to upload
        are reported in ``failed_files``; the rest are still pushed.
        """
        analysis = analyze_app_description(description)
        self.logger.info("Creating %s application %s", analysis.app_type, analysis.project_name)

        design_system = None
        stylesheet = None
        if designer is not None:
            brief = designer.create_design_brief(analysis.app_type, description)
            design_system = designer.create_design_system(brief)
            if css is not None:
                stylesheet = css.create_advanced_styling(design_system)

        structure = generate_repository_structure(analysis, design_system, stylesheet)
        repository = self.create_repository(
            analysis.project_name or "ai-team-app",
            f"{analysis.app_type} application - {description[:100]}",
        )

        github = self._require_github()
        written: list[str] = []
        failed: dict[str, str] = {}
        for path, content in structure.items():
            try:
                with self._github_call(f"Write {path}"):
                    github.put_file(repository.name, path, content, f"Add {path}")
                written.append(path)
            except AgentError as e:
                failed[path] = str(e)

        return ApplicationResult(
            success=not failed,
            analysis=analysis,
            repository=repository,
            files=written,
            failed_files=failed,
            design_system=design_system is not None,
        )
