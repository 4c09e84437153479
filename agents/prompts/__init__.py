"""System prompts shared by the role agents."""

from .roles import (
    ACCEPTANCE_CRITERIA_PROMPT,
    BACKEND_CODE_PROMPT,
    BACKEND_PROMPT,
    CONFLICT_RESOLUTION_PROMPT,
    CSS_PROMPT,
    DATABASE_PROMPT,
    DATABASE_SCHEMA_PROMPT,
    DESIGNER_PROMPT,
    DEVOPS_PROMPT,
    FRONTEND_FEATURE_PROMPT,
    FRONTEND_PROMPT,
    FRONTEND_STRUCTURE_PROMPT,
    ORCHESTRATOR_PROMPT,
    PRIORITIZATION_PROMPT,
    PRODUCT_OWNER_PROMPT,
    USER_STORIES_PROMPT,
)

__all__ = [
    "ACCEPTANCE_CRITERIA_PROMPT",
    "BACKEND_CODE_PROMPT",
    "BACKEND_PROMPT",
    "CONFLICT_RESOLUTION_PROMPT",
    "CSS_PROMPT",
    "DATABASE_PROMPT",
    "DATABASE_SCHEMA_PROMPT",
    "DESIGNER_PROMPT",
    "DEVOPS_PROMPT",
    "FRONTEND_FEATURE_PROMPT",
    "FRONTEND_PROMPT",
    "FRONTEND_STRUCTURE_PROMPT",
    "ORCHESTRATOR_PROMPT",
    "PRIORITIZATION_PROMPT",
    "PRODUCT_OWNER_PROMPT",
    "USER_STORIES_PROMPT",
]
