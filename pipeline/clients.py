"""Build backends, clients and agents from configuration.

The CLI and the team controller share these factories so every entry point
wires the LLM, GitHub, Railway and shared context the same way.
"""

import logging
from pathlib import Path

from agents import (
    BackendDeveloperAgent,
    BaseAgent,
    CSSAgent,
    DatabaseAgent,
    DesignerAgent,
    DevOpsAgent,
    FrontendDeveloperAgent,
    OrchestratorAgent,
    ProductOwnerAgent,
)
from integrations.github import GitHubClient
from integrations.railway import RailwayClient
from llm_backend import LLMBackend, get_backend
from pipeline.config import Config
from remediation import DeploymentMonitor, RemediationDispatcher, RepositoryFixer
from shared_context import FileContextStore, SharedContext

logger = logging.getLogger(__name__)

# Role key -> agent class
AGENT_CLASSES: dict[str, type[BaseAgent]] = {
    "orchestrator": OrchestratorAgent,
    "product_owner": ProductOwnerAgent,
    "frontend": FrontendDeveloperAgent,
    "backend": BackendDeveloperAgent,
    "database": DatabaseAgent,
    "designer": DesignerAgent,
    "css": CSSAgent,
    "devops": DevOpsAgent,
}


def create_llm(config: Config) -> LLMBackend:
    """Create the configured LLM backend."""
    return get_backend(
        config.llm.backend,
        model=config.llm.model,
        api_key=config.llm.api_key or None,
        timeout=config.llm.timeout,
        max_tokens=config.llm.max_tokens,
    )


def create_github(config: Config) -> GitHubClient:
    return GitHubClient(
        token=config.github.token or None,
        owner=config.github.username or None,
        api_url=config.github.api_url,
        timeout=config.github.timeout,
    )


def create_railway(config: Config) -> RailwayClient:
    return RailwayClient(
        token=config.deploy.railway_token or None,
        api_url=config.deploy.railway_api_url,
        health_url=config.deploy.railway_health_url or None,
        health_timeout=config.deploy.health_check_timeout,
    )


def create_shared_context(config: Config) -> SharedContext:
    store = FileContextStore(
        Path(config.shared_context.directory),
        use_lock=config.shared_context.use_file_lock,
    )
    return SharedContext(store)


def create_agent(
    role: str,
    config: Config,
    llm: LLMBackend | None,
    context: SharedContext | None = None,
    github: GitHubClient | None = None,
) -> BaseAgent:
    """Create one role agent.

    Args:
        role: Key of ``AGENT_CLASSES``
        config: Configuration (DevOps reads its deploy wait from it)
        llm: LLM backend shared by the team (None for agents used without it)
        context: Shared context
        github: GitHub client

    Raises:
        ValueError: If ``role`` is unknown
    """
    cls = AGENT_CLASSES.get(role)
    if cls is None:
        raise ValueError(f"Unknown agent role: {role}. Available: {', '.join(AGENT_CLASSES)}")

    if cls is DevOpsAgent:
        return DevOpsAgent(llm, context=context, github=github, deploy_wait=config.deploy.deploy_wait)
    return cls(llm, context=context, github=github)


def create_team(
    config: Config,
    llm: LLMBackend,
    context: SharedContext | None = None,
    github: GitHubClient | None = None,
) -> dict[str, BaseAgent]:
    """Create every role agent, keyed like ``AGENT_CLASSES``."""
    return {role: create_agent(role, config, llm, context, github) for role in AGENT_CLASSES}


def create_monitor(config: Config, github: GitHubClient | None = None) -> DeploymentMonitor:
    """Create the deployment monitor for ``monitor.target_repo``.

    Raises:
        ConfigurationError: If the GitHub token or target repository is missing
    """
    config.require_credentials("github_token", "target_repo")
    github = github or create_github(config)

    dispatcher = RemediationDispatcher(
        github,
        config.monitor.target_repo,
        branch=config.monitor.fix_branch or None,
    )

    projects = list(config.monitor.railway_projects)
    if config.deploy.railway_project_id and config.deploy.railway_project_id not in projects:
        projects.append(config.deploy.railway_project_id)

    repositories = list(config.monitor.repositories) or [config.monitor.target_repo]
    logger.info("Monitor targets %s (%d Railway project(s))", config.monitor.target_repo, len(projects))

    railway = create_railway(config)
    return DeploymentMonitor(
        dispatcher,
        status_source=railway,
        railway=railway,
        service_id=config.deploy.railway_service_id or None,
        agent_name=config.monitor.agent_name,
        projects=projects,
        repositories=repositories,
    )


def create_repository_fixer(config: Config, github: GitHubClient | None = None) -> RepositoryFixer:
    """Create the repository scanner for ``monitor.repositories``.

    Raises:
        ConfigurationError: If the GitHub token is missing
    """
    config.require_credentials("github_token")
    repositories = list(config.monitor.repositories)
    if not repositories and config.monitor.target_repo:
        repositories = [config.monitor.target_repo]

    return RepositoryFixer(
        github or create_github(config),
        repositories=repositories,
        base_branch=config.github.default_base_branch,
        auto_merge=config.monitor.auto_merge_fixes,
    )
