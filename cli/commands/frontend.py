"""Frontend developer CLI commands."""

import json
from pathlib import Path
from typing import Optional

import typer

from .common import build_agent, console, handle_errors, print_json, print_text

frontend_app = typer.Typer(
    name="frontend",
    help="Frontend stack selection, implementation and Git workflow.",
)


@frontend_app.command("select")
def select(requirements: str = typer.Argument(..., help="Requirements analysis")) -> None:
    """Choose the frontend technology stack."""
    with handle_errors():
        result = build_agent("frontend").select_technology_stack(requirements)
    print_text(f"Technology Decision ({result.framework or 'undetected'})", result.technology_decision)


@frontend_app.command("structure")
def structure(
    technology: str = typer.Argument(..., help="Framework, e.g. React"),
    project_name: str = typer.Argument(..., help="Project name"),
) -> None:
    """Describe the project structure for a framework."""
    with handle_errors():
        text = build_agent("frontend").create_project_structure(technology, project_name)
    print_text("Project Structure", text)


@frontend_app.command("implement")
def implement(
    requirements: str = typer.Argument(..., help="Requirements analysis"),
    project_name: str = typer.Argument(..., help="Frontend repository name"),
    api_spec: str = typer.Option("", "--api-spec", help="Backend endpoints, one per line"),
) -> None:
    """Build the frontend in its own repository and open a pull request."""
    with handle_errors():
        result = build_agent("frontend", github=True).implement_application(requirements, project_name, api_spec)
    console.print(f"[green]Pull request #{result.pr_number}: {result.pr_url}[/green]")
    print_json(result.model_dump(mode="json", exclude={"technology"}))


@frontend_app.command("branch")
def branch(
    repo: str = typer.Argument(..., help="Repository name"),
    name: str = typer.Argument(..., help="Branch name"),
) -> None:
    """Create a branch from the default branch."""
    with handle_errors():
        created = build_agent("frontend", github=True, llm=False).create_git_branch(repo, name)
    console.print(f"[green]Branch {name} {'created' if created else 'already exists'}[/green]")


@frontend_app.command("commit")
def commit(
    repo: str = typer.Argument(..., help="Repository name"),
    branch_name: str = typer.Argument(..., help="Branch to commit to"),
    files: Path = typer.Argument(..., help="JSON file mapping paths to contents"),
    message: str = typer.Option("Frontend update", "--message", "-m", help="Commit message"),
) -> None:
    """Commit files to a branch in one commit."""
    if not files.exists():
        console.print(f"[red]File not found: {files}[/red]")
        raise typer.Exit(1)

    with handle_errors():
        contents = json.loads(files.read_text())
        sha = build_agent("frontend", github=True, llm=False).commit_code(repo, branch_name, contents, message)
    console.print(f"[green]Committed {len(contents)} file(s): {sha}[/green]")


@frontend_app.command("pr")
def pull_request(
    repo: str = typer.Argument(..., help="Repository name"),
    branch_name: str = typer.Argument(..., help="Head branch"),
    title: str = typer.Argument(..., help="Pull request title"),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="Pull request body"),
    base: str = typer.Option("main", "--base", help="Base branch"),
) -> None:
    """Open a pull request."""
    with handle_errors():
        pr = build_agent("frontend", github=True, llm=False).create_pull_request(
            repo, branch_name, title, description or "", base=base
        )
    console.print(f"[green]Pull request #{pr['number']}: {pr['url']}[/green]")
