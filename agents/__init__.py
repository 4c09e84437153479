"""Agents module for the AI team.

Provides one agent per team role:
- OrchestratorAgent: Plan the project, assign tasks, resolve conflicts
- ProductOwnerAgent: Requirements, user stories, prioritization
- FrontendDeveloperAgent: Frontend stack choice and frontend repository
- BackendDeveloperAgent: API architecture, Node.js code and backend PR
- DatabaseAgent: Database choice, schema and connection files
- DesignerAgent: Design brief and design system tokens
- CSSAgent: Stylesheets from design tokens
- DevOpsAgent: Repositories, merges, Railway config, app generation
"""

from .backend_agent import BackendDeveloperAgent
from .base import AgentError, BaseAgent, LLMProtocol, extract_code_block, extract_files
from .css_agent import CSSAgent, CSSValidation
from .database_agent import DatabaseAgent, DatabaseSelection
from .designer_agent import DesignerAgent
from .devops_agent import DevOpsAgent
from .frontend_agent import FrontendDeveloperAgent
from .orchestrator_agent import OrchestratorAgent
from .product_owner_agent import ProductOwnerAgent

__all__ = [
    "AgentError",
    "BaseAgent",
    "LLMProtocol",
    "extract_code_block",
    "extract_files",
    "OrchestratorAgent",
    "ProductOwnerAgent",
    "FrontendDeveloperAgent",
    "BackendDeveloperAgent",
    "DatabaseAgent",
    "DatabaseSelection",
    "DesignerAgent",
    "CSSAgent",
    "CSSValidation",
    "DevOpsAgent",
]
