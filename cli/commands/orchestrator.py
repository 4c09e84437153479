"""Orchestrator CLI commands: plan, assign, monitor and arbitrate."""

import typer

from .common import build_agent, handle_errors, print_json, print_text

orchestrator_app = typer.Typer(
    name="orchestrator",
    help="Coordinate the team: plans, task assignment and conflicts.",
)


@orchestrator_app.command("coordinate")
def coordinate(
    requirements: str = typer.Argument(..., help="Project requirements"),
) -> None:
    """Analyze requirements and produce a coordination plan."""
    with handle_errors():
        plan = build_agent("orchestrator").coordinate_project(requirements)
    print_text("Coordination Plan", plan.analysis)


@orchestrator_app.command("assign")
def assign(
    role: str = typer.Argument(..., help="Team role, e.g. backend_dev"),
    task: str = typer.Argument(..., help="Task description"),
    priority: str = typer.Option("normal", "--priority", "-p", help="Task priority"),
) -> None:
    """Assign a task to a team member."""
    with handle_errors():
        assignment = build_agent("orchestrator", llm=False).assign_task(role, task, priority)
    print_json(assignment)


@orchestrator_app.command("monitor")
def monitor() -> None:
    """Show team status, phase and open blockers."""
    with handle_errors():
        progress = build_agent("orchestrator", llm=False).monitor_team_progress()
    print_json(progress)


@orchestrator_app.command("resolve")
def resolve(
    agent_a: str = typer.Argument(..., help="First agent in the conflict"),
    agent_b: str = typer.Argument(..., help="Second agent in the conflict"),
    description: str = typer.Argument(..., help="What the conflict is about"),
) -> None:
    """Arbitrate a conflict between two agents."""
    with handle_errors():
        resolution = build_agent("orchestrator").resolve_conflict(agent_a, agent_b, description)
    print_text("Conflict Resolution", resolution)
