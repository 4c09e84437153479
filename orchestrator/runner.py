"""Team controller: runs the role agents through the build sequence."""

import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

from pydantic import BaseModel
from rich.console import Console

from agents import BaseAgent, OrchestratorAgent
from integrations.github import GitHubClient
from llm_backend import LLMBackend
from pipeline.clients import create_github, create_llm, create_shared_context, create_team
from pipeline.config import Config
from scaffolding.generator import generate_project_name
from schemas.phase_results import (
    BackendResult,
    BuildResult,
    DatabaseResult,
    FrontendResult,
    RepoResult,
    RequirementsResult,
    TechSelectionResult,
)
from schemas.pipeline_state import PipelineState, Stage, StageStatus
from shared_context import SharedContext

from .state_machine import StateMachine

logger = logging.getLogger(__name__)

# Type alias for stage handlers
StageHandler = Callable[[PipelineState], tuple[bool, str | None]]

# Team member working on each stage (stages without one are run by the controller)
STAGE_ROLES: dict[Stage, str] = {
    Stage.REQUIREMENTS: "product_owner",
    Stage.TECH_SELECTION: "frontend_dev",
    Stage.REPO_CREATED: "devops",
    Stage.DB_CONFIGURED: "backend_dev",
    Stage.BACKEND_DONE: "backend_dev",
    Stage.FRONTEND_DONE: "frontend_dev",
    Stage.DEPLOYED: "devops",
}

STAGE_TASKS: dict[Stage, str] = {
    Stage.REQUIREMENTS: "Analyze requirements",
    Stage.TECH_SELECTION: "Select frontend technology stack",
    Stage.REPO_CREATED: "Create project repository",
    Stage.DB_CONFIGURED: "Configure database",
    Stage.BACKEND_DONE: "Implement backend API",
    Stage.FRONTEND_DONE: "Implement frontend application",
    Stage.DEPLOYED: "Merge pull requests and deploy",
}

STAGE_NAMES: dict[Stage, str] = {
    Stage.INIT: "Initializing",
    Stage.PLANNING: "Planning Project",
    Stage.REQUIREMENTS: "Analyzing Requirements",
    Stage.TECH_SELECTION: "Selecting Technology",
    Stage.REPO_CREATED: "Creating Repository",
    Stage.DB_CONFIGURED: "Configuring Database",
    Stage.BACKEND_DONE: "Building Backend",
    Stage.FRONTEND_DONE: "Building Frontend",
    Stage.DEPLOYED: "Deploying",
    Stage.SUMMARY: "Summary",
}


class TeamController:
    """Builds an application end-to-end with the AI team.

    Stages run strictly in order. The first stage that raises or reports
    failure aborts the run; later stages never start and the returned
    ``BuildResult`` carries the original error message.

    Args:
        config: Application configuration
        llm: LLM backend (created from config if omitted)
        github: GitHub client (created from config if omitted)
        shared_context: Shared context (file store from config if omitted)
        agents: Role agents keyed like ``pipeline.clients.AGENT_CLASSES``
        console: Rich console for progress output
    """

    def __init__(
        self,
        config: Config,
        llm: LLMBackend | None = None,
        github: GitHubClient | None = None,
        shared_context: SharedContext | None = None,
        agents: dict[str, BaseAgent] | None = None,
        console: Console | None = None,
    ) -> None:
        self.config = config
        self.llm = llm
        self.github = github
        self.shared_context = shared_context
        self.agents = agents
        self.console = console or Console()
        self.runs_dir = Path(config.pipeline.runs_dir)
        self.github_user: str | None = None
        self._initialized = False

        # Typed phase outputs of the current build, keyed by stage
        self._results: dict[Stage, Any] = {}

        self._handlers: dict[Stage, StageHandler] = {
            Stage.INIT: self._handle_init,
            Stage.PLANNING: self._handle_planning,
            Stage.REQUIREMENTS: self._handle_requirements,
            Stage.TECH_SELECTION: self._handle_tech_selection,
            Stage.REPO_CREATED: self._handle_repo_created,
            Stage.DB_CONFIGURED: self._handle_db_configured,
            Stage.BACKEND_DONE: self._handle_backend_done,
            Stage.FRONTEND_DONE: self._handle_frontend_done,
            Stage.DEPLOYED: self._handle_deployed,
            Stage.SUMMARY: self._handle_summary,
        }

    def initialize(self, reset: bool = True) -> None:
        """Check credentials, verify GitHub access and prepare the shared context.

        Args:
            reset: Start a fresh project context (False keeps the existing one)

        Raises:
            ConfigurationError: If the GitHub token or Anthropic key is missing
            GitHubError: If the token is rejected
        """
        self.config.require_credentials("github_token", "anthropic_api_key")

        if self.github is None:
            self.github = create_github(self.config)
        user = self.github.get_authenticated_user()
        self.github_user = user.get("login")
        logger.info("Authenticated with GitHub as %s", self.github_user)

        if self.shared_context is None:
            self.shared_context = create_shared_context(self.config)
        if reset:
            self.shared_context.initialize()
        else:
            self.shared_context.ensure_initialized()

        if self.agents is None:
            self.llm = self.llm or create_llm(self.config)
            self.agents = create_team(self.config, self.llm, self.shared_context, self.github)

        self._initialized = True

    def _agent(self, role: str) -> Any:
        return self.agents[role]

    def create_run(self, description: str) -> PipelineState:
        """Create the state for a new build run."""
        # Unique even for runs started within the same second
        now = datetime.now()
        run_id = f"{now:%Y-%m-%d-%H%M%S}-{now.microsecond // 1000:03d}-{uuid.uuid4().hex[:6]}"
        run_dir = self.runs_dir / run_id
        run_dir.mkdir(parents=True, exist_ok=True)

        return PipelineState(
            run_id=run_id,
            description=description,
            project_name=generate_project_name(description),
            run_dir=str(run_dir),
        )

    def build_application(self, description: str) -> BuildResult:
        """Run every stage from INIT to SUMMARY for ``description``.

        Returns:
            ``BuildResult``; on abort ``success`` is False and ``error`` holds
            the message of the first failure.
        """
        if not self._initialized:
            self.initialize()

        self._results = {}
        state = self.create_run(description)
        state_machine = StateMachine(state)
        state_machine.start()
        self.console.print(f"[green]Starting build {state.run_id} for {state.project_name}[/green]")

        while True:
            stage = state.current_stage
            handler = self._handlers[stage]
            role = STAGE_ROLES.get(stage)

            self._print_stage_start(stage)
            logger.info("BUILD: Starting stage %s", stage.value)
            self._begin_stage(stage, role)

            try:
                success, error = handler(state)
            except Exception as e:
                logger.exception("Handler exception in stage %s", stage.value)
                success, error = False, str(e)

            if not success:
                error = error or f"Stage {stage.value} failed"
                logger.error("BUILD: Stage %s failed: %s", stage.value, error)
                if role is not None:
                    self.shared_context.block(role, error)
                state_machine.abort(error)
                progress = state_machine.get_progress_summary()
                self.console.print(
                    f"[red]Build aborted at {stage.value} ({progress['progress']} stages done): {error}[/red]"
                )
                return BuildResult(
                    success=False,
                    project_name=state.project_name,
                    error=error,
                    failed_phase=stage.value,
                    phases=state.outputs,
                    run_id=state.run_id,
                )

            if role is not None:
                self.shared_context.release(role)
            state_machine.complete_stage()

            next_stage = state_machine.get_next_stage()
            if next_stage is None:
                break
            state_machine.transition(next_stage)

        self._print_completion_summary(state, state_machine.get_progress_summary())
        return BuildResult(
            success=True,
            project_name=state.project_name,
            repositories=self._repositories(),
            phases=state.outputs,
            run_id=state.run_id,
            completed_at=state.completed_at.isoformat() if state.completed_at else None,
        )

    def monitor_team(self) -> dict[str, Any]:
        """Team status as reported by the orchestrator agent.

        Only reads the shared context, so no credentials are needed.
        """
        if self.agents is not None:
            return self._agent("orchestrator").monitor_team_progress()
        if self.shared_context is None:
            self.shared_context = create_shared_context(self.config)
        return OrchestratorAgent(None, context=self.shared_context).monitor_team_progress()

    # --- Bookkeeping ---

    def _begin_stage(self, stage: Stage, role: str | None) -> None:
        self.shared_context.set_phase(stage.value)
        if role is not None:
            self.shared_context.assign_task(role, STAGE_TASKS[stage], "high")

    def _record(self, state: PipelineState, stage: Stage, result: BaseModel) -> None:
        self._results[stage] = result
        state.outputs[stage.value] = result.model_dump(mode="json")

    def _repositories(self) -> dict[str, str]:
        repositories: dict[str, str] = {}
        repository: RepoResult | None = self._results.get(Stage.REPO_CREATED)
        if repository is not None:
            repositories["backend"] = repository.url
        frontend: FrontendResult | None = self._results.get(Stage.FRONTEND_DONE)
        if frontend is not None and frontend.repository is not None:
            repositories["frontend"] = frontend.repository.url
        return repositories

    def _print_stage_start(self, stage: Stage) -> None:
        """Print stage start indicator."""
        name = STAGE_NAMES.get(stage, stage.value)
        self.console.print(f"\n[bold blue]>>> {name}[/bold blue]")

    def _print_completion_summary(self, state: PipelineState, progress: dict[str, Any]) -> None:
        """Print build completion summary."""
        self.console.print()
        self.console.print("[bold green]Build completed successfully![/bold green]")
        self.console.print()
        self.console.print(f"Run ID: {state.run_id}")
        self.console.print(f"Project: {state.project_name}")
        self.console.print(f"Progress: {progress['progress']} stages")
        for role, url in self._repositories().items():
            self.console.print(f"{role.title()} repository: {url}")
        self.console.print()
        self.console.print("[bold]Stage Summary:[/bold]")
        for stage_name, result in state.stages.items():
            status_color = {
                StageStatus.COMPLETED: "green",
                StageStatus.FAILED: "red",
            }.get(result.status, "white")
            self.console.print(f"  {stage_name}: [{status_color}]{result.status.value}[/{status_color}]")

    # --- Stage Handlers ---

    def _handle_init(self, state: PipelineState) -> tuple[bool, str | None]:
        """Record the project in the shared context."""
        self.shared_context.log_communication(
            "Team Controller",
            "All Team",
            "build_started",
            f"Building {state.project_name}: {state.description}",
            "high",
        )
        return True, None

    def _handle_planning(self, state: PipelineState) -> tuple[bool, str | None]:
        plan = self._agent("orchestrator").coordinate_project(state.description)
        self._record(state, Stage.PLANNING, plan)
        return True, None

    def _handle_requirements(self, state: PipelineState) -> tuple[bool, str | None]:
        requirements = self._agent("product_owner").analyze_requirements(state.description)
        self._record(state, Stage.REQUIREMENTS, requirements)
        return True, None

    def _requirements(self) -> str:
        requirements: RequirementsResult = self._results[Stage.REQUIREMENTS]
        return requirements.requirements_analysis

    def _handle_tech_selection(self, state: PipelineState) -> tuple[bool, str | None]:
        technology = self._agent("frontend").select_technology_stack(self._requirements())
        self._record(state, Stage.TECH_SELECTION, technology)
        return True, None

    def _handle_repo_created(self, state: PipelineState) -> tuple[bool, str | None]:
        repository = self._agent("devops").create_repository(state.project_name, state.description[:200])
        self._record(state, Stage.REPO_CREATED, repository)
        return True, None

    def _handle_db_configured(self, state: PipelineState) -> tuple[bool, str | None]:
        repository: RepoResult = self._results[Stage.REPO_CREATED]
        database = self._agent("database").configure_database(self._requirements(), repository.name)
        self._record(state, Stage.DB_CONFIGURED, database)
        return True, None

    def _handle_backend_done(self, state: PipelineState) -> tuple[bool, str | None]:
        repository: RepoResult = self._results[Stage.REPO_CREATED]
        database: DatabaseResult = self._results[Stage.DB_CONFIGURED]
        backend = self._agent("backend").develop_complete_api(self._requirements(), repository.name, database)
        self._record(state, Stage.BACKEND_DONE, backend)
        return True, None

    def _handle_frontend_done(self, state: PipelineState) -> tuple[bool, str | None]:
        backend: BackendResult = self._results[Stage.BACKEND_DONE]
        technology: TechSelectionResult = self._results[Stage.TECH_SELECTION]
        frontend = self._agent("frontend").implement_application(
            self._requirements(),
            f"{state.project_name}-frontend",
            api_spec=backend.api_spec(),
            technology=technology,
        )
        self._record(state, Stage.FRONTEND_DONE, frontend)
        return True, None

    def _handle_deployed(self, state: PipelineState) -> tuple[bool, str | None]:
        """Merge and deploy every pull request the build opened."""
        repository: RepoResult = self._results[Stage.REPO_CREATED]
        backend: BackendResult = self._results[Stage.BACKEND_DONE]
        frontend: FrontendResult = self._results[Stage.FRONTEND_DONE]

        targets = [("backend", repository.name, backend.pr_number)]
        if frontend.repository is not None:
            targets.append(("frontend", frontend.repository.name, frontend.pr_number))

        deployments: dict[str, Any] = {}
        for role, repo, pr_number in targets:
            if pr_number is None:
                logger.info("No pull request for %s, skipping deployment", role)
                continue
            result = self._agent("devops").automated_workflow(repo, pr_number)
            deployments[role] = result.model_dump(mode="json")
            if not result.success:
                state.outputs[Stage.DEPLOYED.value] = deployments
                return False, result.error

        state.outputs[Stage.DEPLOYED.value] = deployments
        return True, None

    def _handle_summary(self, state: PipelineState) -> tuple[bool, str | None]:
        repositories = self._repositories()
        summary = ", ".join(f"{role}: {url}" for role, url in repositories.items())
        self.shared_context.log_communication(
            "Team Controller",
            "All Team",
            "build_completed",
            f"{state.project_name} built and deployed. {summary}",
            "high",
        )
        state.outputs[Stage.SUMMARY.value] = {"repositories": repositories}
        return True, None
