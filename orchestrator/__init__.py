"""Orchestrator module for the AI team.

Linear build orchestration with:
- Explicit stage transitions
- Abort on the first failing stage
- State persistence for inspection
"""

from .state_machine import StateMachine, Transition
from .runner import STAGE_ROLES, TeamController

__all__ = [
    "StateMachine",
    "Transition",
    "TeamController",
    "STAGE_ROLES",
]
