"""Designer and CSS specialist CLI commands."""

from pathlib import Path
from typing import Optional

import typer

from .common import build_agent, console, handle_errors, print_json, print_text

design_app = typer.Typer(
    name="design",
    help="Design briefs, design system tokens and stylesheets.",
)


@design_app.command("brief")
def brief(
    app_type: str = typer.Argument(..., help="Application type, e.g. dating_app"),
    description: str = typer.Argument("", help="Application description"),
    audience: Optional[str] = typer.Option(None, "--audience", help="Target audience"),
    goals: Optional[list[str]] = typer.Option(None, "--goal", help="Business goal (repeatable)"),
    collaborate: bool = typer.Option(False, "--collaborate", help="Ask the LLM for a design analysis"),
) -> None:
    """Create a design brief."""
    with handle_errors():
        if collaborate:
            result = build_agent("designer").collaborate_with_product_owner(description, app_type)
            print_text("Design Analysis", result["design_analysis"])
            print_json(result["design_brief"])
            return

        agent = build_agent("designer", llm=False)
        print_json(agent.create_design_brief(app_type, description, audience, goals))


@design_app.command("system")
def system(
    app_type: str = typer.Argument(..., help="Application type"),
    description: str = typer.Argument("", help="Application description"),
) -> None:
    """Generate design system tokens."""
    with handle_errors():
        agent = build_agent("designer", llm=False)
        design_system = agent.create_design_system(agent.create_design_brief(app_type, description))
    print_json(design_system.model_dump())


@design_app.command("styles")
def styles(
    app_type: str = typer.Argument(..., help="Application type"),
    description: str = typer.Argument("", help="Application description"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the stylesheet to this file"),
    refine: bool = typer.Option(False, "--refine", help="Let the LLM refine the stylesheet"),
) -> None:
    """Generate a production stylesheet from the design system."""
    with handle_errors():
        designer = build_agent("designer", llm=False)
        design_system = designer.create_design_system(designer.create_design_brief(app_type, description))

        css_agent = build_agent("css", llm=refine)
        stylesheet = css_agent.create_advanced_styling(design_system)
        if refine:
            stylesheet = css_agent.refine_stylesheet(stylesheet, design_system.app_type)

    validation = css_agent.validate_css(stylesheet)
    for warning in validation.warnings:
        console.print(f"[yellow]Warning: {warning}[/yellow]")
    for error in validation.errors:
        console.print(f"[red]Error: {error}[/red]")

    if output:
        output.write_text(stylesheet)
        console.print(f"[green]Stylesheet written to {output}[/green]")
    else:
        console.print(stylesheet, markup=False, highlight=False)

    if not validation.is_valid:
        raise typer.Exit(1)
