"""Database architect CLI commands."""

import typer

from .common import build_agent, console, handle_errors, print_json, print_text

database_app = typer.Typer(
    name="database",
    help="Database selection, schema design and connection setup.",
)


@database_app.command("configure")
def configure(
    requirements: str = typer.Argument(..., help="Requirements analysis"),
    project_name: str = typer.Argument(..., help="Backend repository name"),
) -> None:
    """Select a database, design its schema and push connection files."""
    with handle_errors():
        result = build_agent("database", github=True).configure_database(requirements, project_name)
    console.print(f"[green]{result.database_type} configured for {project_name}[/green]")
    print_json(result.railway_config)


@database_app.command("select")
def select(requirements: str = typer.Argument(..., help="Requirements analysis")) -> None:
    """Recommend a database for the requirements."""
    with handle_errors():
        selection = build_agent("database").select_database_technology(requirements)
    print_text(f"Database: {selection.database}", selection.analysis)


@database_app.command("schema")
def schema(
    requirements: str = typer.Argument(..., help="Requirements analysis"),
    database: str = typer.Argument("MongoDB", help="Database type"),
) -> None:
    """Design the database schema."""
    with handle_errors():
        text = build_agent("database").design_database_schema(requirements, database)
    print_text(f"{database} Schema", text)


@database_app.command("test")
def connection_test(
    project_name: str = typer.Argument(..., help="Backend repository name"),
    database: str = typer.Argument("MongoDB", help="Database type"),
    push: bool = typer.Option(False, "--push", help="Commit the test to the repository"),
) -> None:
    """Generate the database connection test script."""
    with handle_errors():
        agent = build_agent("database", github=push, llm=False)
        content = agent.create_connection_test(project_name, database)
    console.print(content)
