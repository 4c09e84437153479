"""DevOps CLI commands: repositories, deployments and auto-remediation."""

from pathlib import Path
from typing import Optional

import typer
import uvicorn
from rich.table import Table

from pipeline.clients import create_monitor, create_repository_fixer
from pipeline.config import get_config
from remediation import ErrorClassifier, create_dashboard
from schemas.remediation import IncidentState

from .common import build_agent, console, handle_errors, print_json, print_text

devops_app = typer.Typer(
    name="devops",
    help="Repositories, merges, Railway deployment and error remediation.",
)


# --- Repositories and deployments ---


@devops_app.command("create-repo")
def create_repo(
    name: str = typer.Argument(..., help="Repository name"),
    description: str = typer.Option("", "--description", "-d", help="Repository description"),
) -> None:
    """Create a repository (an existing one is reused)."""
    with handle_errors():
        repository = build_agent("devops", github=True, llm=False).create_repository(name, description)
    verb = "Reusing" if repository.already_existed else "Created"
    console.print(f"[green]{verb} {repository.full_name}: {repository.url}[/green]")


@devops_app.command("merge")
def merge(
    repo: str = typer.Argument(..., help="Repository name"),
    pr_number: int = typer.Argument(..., help="Pull request number"),
    title: str = typer.Option("Auto-merge by DevOps AI", "--title", help="Merge commit title"),
) -> None:
    """Squash-merge a pull request."""
    with handle_errors():
        merge_result = build_agent("devops", github=True, llm=False).merge_pull_request(repo, pr_number, title)
    console.print(f"[green]Merged PR #{pr_number} into {merge_result['base']}: {merge_result['merge_sha']}[/green]")


@devops_app.command("workflow")
def workflow(
    repo: str = typer.Argument(..., help="Repository name"),
    pr_number: int = typer.Argument(..., help="Pull request number"),
) -> None:
    """Merge a PR, add Railway config and report the deployment."""
    with handle_errors():
        result = build_agent("devops", github=True, llm=False).automated_workflow(repo, pr_number)
    print_json(result.model_dump(mode="json"))
    if not result.success:
        raise typer.Exit(1)


@devops_app.command("railway-config")
def railway_config(repo: str = typer.Argument(..., help="Repository name")) -> None:
    """Add railway.json to a repository."""
    with handle_errors():
        created = build_agent("devops", github=True, llm=False).create_railway_config(repo)
    console.print("[green]railway.json created[/green]" if created else "[yellow]railway.json already exists[/yellow]")


@devops_app.command("deployments")
def deployments(repo: str = typer.Argument(..., help="Repository name")) -> None:
    """Show the latest deployment status."""
    with handle_errors():
        status = build_agent("devops", github=True, llm=False).monitor_deployment(repo)
    print_json(status)


@devops_app.command("consult")
def consult(request: str = typer.Argument(..., help="DevOps question or request")) -> None:
    """Ask the DevOps agent; repository requests are executed."""
    with handle_errors():
        result = build_agent("devops", github=True).consult(request)
    if result["action"] == "repository_created":
        console.print(f"[green]Repository ready: {result['repository']['url']}[/green]")
    else:
        print_text("DevOps Consultation", result["response"])


@devops_app.command("create-app")
def create_app(
    description: str = typer.Argument(..., help="Application description"),
    design: bool = typer.Option(True, "--design/--no-design", help="Generate a design system and stylesheet"),
) -> None:
    """Generate a complete application and push it to a new repository."""
    with handle_errors():
        agent = build_agent("devops", github=True, llm=False)
        designer = build_agent("designer", llm=False) if design else None
        css = build_agent("css", llm=False) if design else None
        result = agent.create_application(description, designer, css)

    console.print(f"[bold]{result.analysis.app_type}[/bold] ({result.analysis.complexity}) -> {result.repository.url}")
    console.print(f"Files pushed: {len(result.files)}")
    for path, error in result.failed_files.items():
        console.print(f"[red]Failed: {path}: {error}[/red]")
    if not result.success:
        raise typer.Exit(1)


# --- Error classification and remediation ---


@devops_app.command("analyze-error")
def analyze_error(error: str = typer.Argument(..., help="Deployment error text")) -> None:
    """Classify an error and show the fix strategy."""
    analysis = ErrorClassifier().analyze(error)
    print_json(analysis.model_dump(mode="json"))


@devops_app.command("fix")
def fix(
    error: str = typer.Argument(..., help="Deployment error text"),
    repo: Optional[str] = typer.Option(None, "--repo", help="Repository to fix (default: TARGET_REPO)"),
) -> None:
    """Analyze an error and apply the matching auto-fix."""
    config = get_config()
    if repo:
        config.monitor.target_repo = repo

    with handle_errors():
        incident = create_monitor(config).handle_deployment_error(error)

    color = "green" if incident.state == IncidentState.FIXED else "yellow"
    console.print(f"[{color}]Incident {incident.state.value}[/{color}]")
    if incident.fix_result is not None:
        print_json(incident.fix_result.model_dump(mode="json"))
    if incident.escalated:
        raise typer.Exit(1)


@devops_app.command("check")
def check() -> None:
    """Poll every monitored Railway project once."""
    with handle_errors():
        incidents = create_monitor(get_config()).check_deployments()

    if not incidents:
        console.print("[green]All deployments healthy[/green]")
        return

    table = Table(title="Incidents")
    table.add_column("Error", style="red")
    table.add_column("Strategy", style="cyan")
    table.add_column("State", style="yellow")
    for incident in incidents:
        strategy = incident.analysis.strategy.value if incident.analysis and incident.analysis.strategy else "-"
        table.add_row(incident.error[:80], strategy, incident.state.value)
    console.print(table)


@devops_app.command("watch")
def watch(
    max_ticks: Optional[int] = typer.Option(None, "--max-ticks", help="Stop after this many polls"),
) -> None:
    """Monitor deployments continuously and auto-fix errors."""
    config = get_config()
    with handle_errors():
        monitor = create_monitor(config)

    console.print(f"[green]{monitor.agent_name} monitoring {', '.join(monitor.repositories)}[/green]")
    try:
        monitor.run(
            poll_interval=config.monitor.poll_interval,
            report_interval=config.monitor.report_interval,
            report_path=config.monitor.report_path,
            max_ticks=max_ticks,
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Monitoring stopped[/yellow]")


@devops_app.command("scan-repos")
def scan_repos(
    repo: Optional[list[str]] = typer.Option(None, "--repo", help="Repository to scan (repeatable)"),
    auto_merge: Optional[bool] = typer.Option(None, "--auto-merge/--no-auto-merge", help="Merge fix PRs right away"),
) -> None:
    """Check repositories for deployment files and open fix pull requests."""
    config = get_config()
    with handle_errors():
        fixer = create_repository_fixer(config)
        if repo:
            fixer.repositories = list(repo)
        if auto_merge is not None:
            fixer.auto_merge = auto_merge
        opened = fixer.scan_repositories()

    if not opened:
        console.print("[green]No fix pull requests needed[/green]")
        return

    table = Table(title="Fix Pull Requests")
    table.add_column("Repository", style="cyan")
    table.add_column("PR")
    table.add_column("Fixes", style="yellow")
    table.add_column("Merged")
    for record in opened:
        table.add_row(
            record.repo,
            record.pr_url or f"#{record.pr_number}",
            ", ".join(fix.value for fix in record.fixes),
            "yes" if record.auto_merged else "no",
        )
    console.print(table)


@devops_app.command("health-report")
def health_report(
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Report file (default from config)"),
) -> None:
    """Write a health report for the monitor."""
    config = get_config()
    with handle_errors():
        report = create_monitor(config).generate_health_report(output or config.monitor.report_path)
    print_json(report.model_dump(mode="json"))


@devops_app.command("dashboard")
def dashboard(
    port: Optional[int] = typer.Option(None, "--port", help="Port (default: AGENT_PORT or 3001)"),
    host: str = typer.Option("0.0.0.0", "--host", help="Bind address"),
) -> None:
    """Serve the DevOps agent dashboard."""
    config = get_config()
    with handle_errors():
        monitor = create_monitor(config)

    port = port or config.monitor.agent_port
    console.print(f"[green]Dashboard on http://{host}:{port}/agent/status[/green]")
    if not config.monitor.webhook_secret:
        console.print("[yellow]RAILWAY_WEBHOOK_SECRET not set: /webhook/railway rejects all events[/yellow]")
    uvicorn.run(create_dashboard(monitor, webhook_secret=config.monitor.webhook_secret), host=host, port=port)
