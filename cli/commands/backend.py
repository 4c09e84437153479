"""Backend developer CLI commands."""

from typing import Optional

import typer

from schemas.phase_results import DatabaseResult

from .common import build_agent, console, handle_errors, print_text

backend_app = typer.Typer(
    name="backend",
    help="API architecture and Node.js code generation.",
)


def _database(database: str | None) -> DatabaseResult | None:
    return DatabaseResult(database_type=database) if database else None


@backend_app.command("design")
def design(
    requirements: str = typer.Argument(..., help="Requirements analysis"),
    database: Optional[str] = typer.Option(None, "--database", help="Configured database, e.g. PostgreSQL"),
) -> None:
    """Design the API architecture."""
    with handle_errors():
        architecture = build_agent("backend").create_api_architecture(requirements, _database(database))
    print_text("API Architecture", architecture)


@backend_app.command("generate")
def generate(
    repo: str = typer.Argument(..., help="Backend repository name"),
    feature: str = typer.Argument(..., help="Feature to implement"),
    database: Optional[str] = typer.Option(None, "--database", help="Configured database"),
) -> None:
    """Generate API code for a feature and list its endpoints."""
    with handle_errors():
        agent = build_agent("backend")
        code = agent.generate_api_code(repo, feature, _database(database))
    print_text(f"API Code: {feature}", code)

    for endpoint in agent.extract_endpoints(code, feature):
        console.print(f"  [cyan]{endpoint.method}[/cyan] {endpoint.path}")


@backend_app.command("develop")
def develop(
    requirements: str = typer.Argument(..., help="Requirements analysis"),
    project_name: str = typer.Argument(..., help="Backend repository name"),
    database: Optional[str] = typer.Option(None, "--database", help="Configured database"),
) -> None:
    """Generate, commit and open a pull request for the complete backend."""
    with handle_errors():
        result = build_agent("backend", github=True).develop_complete_api(requirements, project_name, _database(database))
    console.print(f"[green]Pull request #{result.pr_number}: {result.pr_url}[/green]")
    console.print(f"Files: {', '.join(result.files)}")
