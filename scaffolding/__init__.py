"""Project scaffolding for generated web applications.

Provides:
- Keyword analysis of application descriptions
- Repository file maps for generated Express apps
- Deployment templates (server.js, package.json, railway.json)
- Database connection code per engine
"""

from .generator import (
    analyze_app_description,
    design_system_css,
    generate_project_name,
    generate_repository_structure,
)
from .templates import (
    CONNECTION_STRING_FORMATS,
    DATABASE_DRIVERS,
    RAILWAY_DATABASE_CONFIGS,
    RETRY_CONNECTION,
    database_connection_code,
    database_test_code,
    env_example,
    package_json,
    package_manifest,
    railway_json,
    render,
    server_js,
)

__all__ = [
    # Generator
    "analyze_app_description",
    "design_system_css",
    "generate_project_name",
    "generate_repository_structure",
    # Templates
    "CONNECTION_STRING_FORMATS",
    "DATABASE_DRIVERS",
    "RAILWAY_DATABASE_CONFIGS",
    "RETRY_CONNECTION",
    "database_connection_code",
    "database_test_code",
    "env_example",
    "package_json",
    "package_manifest",
    "railway_json",
    "render",
    "server_js",
]
