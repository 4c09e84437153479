"""CLI command modules, one sub-app per team role."""

from cli.commands.backend import backend_app
from cli.commands.database import database_app
from cli.commands.design import design_app
from cli.commands.devops import devops_app
from cli.commands.frontend import frontend_app
from cli.commands.orchestrator import orchestrator_app
from cli.commands.product import product_app

__all__ = [
    "backend_app",
    "database_app",
    "design_app",
    "devops_app",
    "frontend_app",
    "orchestrator_app",
    "product_app",
]
