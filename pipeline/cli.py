"""CLI entrypoint for the AI team."""

import logging
from typing import Optional

import typer
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from cli.commands import (
    backend_app,
    database_app,
    design_app,
    devops_app,
    frontend_app,
    orchestrator_app,
    product_app,
)
from cli.commands.common import handle_errors, print_json
from orchestrator import TeamController
from pipeline import __version__
from pipeline.config import get_config

app = typer.Typer(
    name="ai-team",
    help="AI development team: builds, deploys and repairs web applications.",
    add_completion=False,
)
console = Console()

app.add_typer(orchestrator_app, name="orchestrator")
app.add_typer(product_app, name="product")
app.add_typer(frontend_app, name="frontend")
app.add_typer(backend_app, name="backend")
app.add_typer(database_app, name="database")
app.add_typer(design_app, name="design")
app.add_typer(devops_app, name="devops")


def _version_callback(value: bool) -> None:
    if value:
        rprint(f"[bold blue]AI Team[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Logging level (default: pipeline.log_level)",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Configure logging for every command."""
    level = (log_level or get_config().pipeline.log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


@app.command()
def build(
    description: str = typer.Argument(..., help="Description of the application to build"),
) -> None:
    """Build an application end-to-end with the whole team."""
    controller = TeamController(get_config(), console=console)

    with handle_errors():
        controller.initialize()
        result = controller.build_application(description)

    if not result.success:
        console.print(f"[red]Build failed at {result.failed_phase}: {result.error}[/red]")
        raise typer.Exit(1)

    for role, url in result.repositories.items():
        rprint(f"[green]{role}:[/green] {url}")


@app.command()
def monitor() -> None:
    """Show team status, phase and blockers."""
    controller = TeamController(get_config(), console=console)

    with handle_errors():
        progress = controller.monitor_team()

    table = Table(title=f"Team Status ({progress['project_phase']})")
    table.add_column("Role", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Task")
    for role, member in progress["team_status"].items():
        table.add_row(role, member["status"], member.get("current_task") or "-")
    console.print(table)

    if progress["blockers"]:
        rprint("[bold red]Open blockers:[/bold red]")
        print_json(progress["blockers"])


@app.command()
def config_show() -> None:
    """Show current configuration (secrets are masked)."""
    cfg = get_config()

    def mask(value: str) -> str:
        return "****" if value else "(not set)"

    table = Table(title="Current Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("llm.backend", cfg.llm.backend)
    table.add_row("llm.model", cfg.llm.model)
    table.add_row("llm.api_key", mask(cfg.llm.api_key))
    table.add_row("github.username", cfg.github.username or "(not set)")
    table.add_row("github.token", mask(cfg.github.token))
    table.add_row("shared_context.directory", cfg.shared_context.directory)
    table.add_row("pipeline.runs_dir", cfg.pipeline.runs_dir)
    table.add_row("pipeline.log_level", cfg.pipeline.log_level)
    table.add_row("deploy.railway_project_id", cfg.deploy.railway_project_id or "(not set)")
    table.add_row("deploy.railway_service_id", cfg.deploy.railway_service_id or "(not set)")
    table.add_row("deploy.railway_token", mask(cfg.deploy.railway_token))
    table.add_row("monitor.target_repo", cfg.monitor.target_repo or "(not set)")
    table.add_row("monitor.agent_port", str(cfg.monitor.agent_port))
    table.add_row("monitor.webhook_secret", mask(cfg.monitor.webhook_secret))
    table.add_row("monitor.auto_merge_fixes", str(cfg.monitor.auto_merge_fixes))

    console.print(table)


if __name__ == "__main__":
    app()
