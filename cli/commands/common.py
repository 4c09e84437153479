"""Helpers shared by the per-role CLI sub-apps."""

import json
from contextlib import contextmanager
from typing import Any, Iterator

import typer
from rich.console import Console
from rich.panel import Panel

from agents import AgentError, BaseAgent
from integrations.github import GitHubError
from pipeline.clients import create_agent, create_github, create_llm, create_shared_context
from pipeline.config import ConfigurationError, get_config

console = Console()
err_console = Console(stderr=True)


@contextmanager
def handle_errors() -> Iterator[None]:
    """Print known failures in red and exit with code 1."""
    try:
        yield
    except (ConfigurationError, AgentError, GitHubError, ValueError) as e:
        err_console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


def build_agent(role: str, github: bool = False, llm: bool = True) -> Any:
    """Create a role agent from the global configuration.

    Args:
        role: Agent role key (see ``pipeline.clients.AGENT_CLASSES``)
        github: Attach a GitHub client (requires GITHUB_TOKEN)
        llm: Attach the LLM backend (requires ANTHROPIC_API_KEY)
    """
    config = get_config()
    required = []
    if llm:
        required.append("anthropic_api_key")
    if github:
        required.append("github_token")
    config.require_credentials(*required)

    context = create_shared_context(config)
    context.ensure_initialized()
    agent: BaseAgent = create_agent(
        role,
        config,
        create_llm(config) if llm else None,
        context=context,
        github=create_github(config) if github else None,
    )
    return agent


def print_text(title: str, text: str) -> None:
    console.print(Panel(text, title=title, border_style="blue"))


def print_json(data: Any) -> None:
    console.print_json(json.dumps(data, default=str))
