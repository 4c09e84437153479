"""Product owner CLI commands."""

import typer

from .common import build_agent, handle_errors, print_text

product_app = typer.Typer(
    name="product",
    help="Requirements, user stories and prioritization.",
)


@product_app.command("analyze")
def analyze(description: str = typer.Argument(..., help="Application description")) -> None:
    """Turn a description into a requirements analysis."""
    with handle_errors():
        result = build_agent("product_owner").analyze_requirements(description)
    print_text("Requirements Analysis", result.requirements_analysis)


@product_app.command("stories")
def stories(feature: str = typer.Argument(..., help="Feature to break into stories")) -> None:
    """Write user stories for a feature."""
    with handle_errors():
        text = build_agent("product_owner").create_user_stories(feature)
    print_text(f"User Stories: {feature}", text)


@product_app.command("criteria")
def criteria(story: str = typer.Argument(..., help="User story")) -> None:
    """Define acceptance criteria for a user story."""
    with handle_errors():
        text = build_agent("product_owner").define_acceptance_criteria(story)
    print_text("Acceptance Criteria", text)


@product_app.command("prioritize")
def prioritize(
    features: list[str] = typer.Argument(..., help="Features to prioritize"),
) -> None:
    """Rank features for delivery."""
    with handle_errors():
        text = build_agent("product_owner").prioritize_features(features)
    print_text("Feature Prioritization", text)
