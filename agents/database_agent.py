"""Database architect agent - database choice, schema and Railway setup."""

from dataclasses import dataclass
from typing import Any

from schemas.phase_results import DatabaseResult
from scaffolding.templates import (
    CONNECTION_STRING_FORMATS,
    DATABASE_DRIVERS,
    RAILWAY_DATABASE_CONFIGS,
    database_connection_code,
    database_test_code,
    env_example,
)

from .base import BaseAgent
from .prompts import DATABASE_PROMPT, DATABASE_SCHEMA_PROMPT

SUPPORTED_DATABASES = ["MongoDB", "PostgreSQL", "MySQL", "Redis"]
DEFAULT_DATABASE = "MongoDB"

CONNECTION_FILE = "database/connection.js"
ENV_FILE = ".env.example"
TEST_FILE = "test/database-test.js"


@dataclass
class DatabaseSelection:
    """Database recommendation and the choice extracted from it."""

    analysis: str
    database: str


class DatabaseAgent(BaseAgent):
    """Picks the database, designs the schema and writes connection files.

    Connection code, the environment template and the connection test are
    written to the project repository's default branch when a GitHub client
    is attached.
    """

    display_name = "Database AI Agent"

    def default_system_prompt(self) -> str:
        return DATABASE_PROMPT

    def configure_database(self, requirements: str, project_name: str) -> DatabaseResult:
        """Run the full database setup for ``project_name``."""
        selection = self.select_database_technology(requirements)
        schema = self.design_database_schema(requirements, selection.database)
        railway_config = self.setup_railway_database(project_name, selection.database)
        connection = self.create_connection_config(project_name, selection.database)
        self.setup_environment_variables(project_name, selection.database)
        self.create_connection_test(project_name, selection.database)

        self._log(
            "Backend Developer AI",
            "database_configured",
            f"{selection.database} configured for {project_name}; use process.env.DATABASE_URL",
            "high",
        )
        return DatabaseResult(
            database_type=selection.database,
            architecture_analysis=selection.analysis,
            schema_design=schema,
            railway_config=railway_config,
            connection_string=connection["connection_string"],
            environment_setup=True,
            files=[CONNECTION_FILE, ENV_FILE, TEST_FILE] if self.github is not None else [],
        )

    def select_database_technology(self, requirements: str) -> DatabaseSelection:
        self.logger.info("Selecting database technology")
        analysis = self._chat(requirements, max_tokens=3000, temperature=0.2)
        database = self.extract_database_choice(analysis)

        if self.context is not None:
            self.context.save_decision(
                "database",
                "technology",
                {"requirements": requirements, "analysis": analysis, "selected_database": database},
            )
            self.context.update_technology_stack({"database": {"type": database}})
        self.logger.info("Selected database: %s", database)
        return DatabaseSelection(analysis=analysis, database=database)

    @staticmethod
    def extract_database_choice(analysis: str) -> str:
        """Pick the recommended database out of a free-text analysis.

        A database counts as chosen only when the text also recommends
        something; otherwise the domain decides (social apps get MongoDB,
        financial ones PostgreSQL) and MongoDB is the default.

        Example:
            >>> DatabaseAgent.extract_database_choice("We recommend PostgreSQL for ACID")
            'PostgreSQL'
        """
        text = analysis.lower()
        recommends = "recommend" in text or "primary choice" in text

        if recommends:
            for database in SUPPORTED_DATABASES:
                if database.lower() in text:
                    return database

        if "dating" in text or "social" in text:
            return "MongoDB"
        if "financial" in text or "betting" in text:
            return "PostgreSQL"
        return DEFAULT_DATABASE

    def design_database_schema(self, requirements: str, database: str) -> str:
        self.logger.info("Designing %s schema", database)
        driver = ", ".join(DATABASE_DRIVERS.get(database, DATABASE_DRIVERS[DEFAULT_DATABASE]))
        return self._chat(
            requirements,
            system_prompt=DATABASE_SCHEMA_PROMPT.format(database=database, driver=driver),
            max_tokens=4000,
            temperature=0.2,
        )

    def setup_railway_database(self, project_name: str, database: str) -> dict[str, Any]:
        """Railway service settings plus setup instructions for ``database``."""
        config = RAILWAY_DATABASE_CONFIGS.get(database, RAILWAY_DATABASE_CONFIGS[DEFAULT_DATABASE])
        instructions = (
            f"1. Open the Railway project {project_name} and add a {config['service']} database service.\n"
            f"2. Version {config['version']}, memory {config['memory']}, storage {config['storage']}.\n"
            "3. Railway generates DATABASE_URL, DATABASE_HOST, DATABASE_PORT, DATABASE_NAME, "
            "DATABASE_USER and DATABASE_PASSWORD.\n"
            f"4. Connection string format: {self.connection_string_format(database)}\n"
        )
        return {
            "database_type": database,
            "railway_service": config["service"],
            "configuration": dict(config),
            "setup_instructions": instructions,
            "ready_for_backend": True,
        }

    @staticmethod
    def connection_string_format(database: str) -> str:
        return CONNECTION_STRING_FORMATS.get(database, CONNECTION_STRING_FORMATS[DEFAULT_DATABASE])

    def create_connection_config(self, project_name: str, database: str) -> dict[str, Any]:
        code = database_connection_code(database)
        created = self._write_file(project_name, CONNECTION_FILE, code, f"Add {database} database connection configuration")
        return {
            "database_type": database,
            "connection_code": code,
            "connection_string": "process.env.DATABASE_URL",
            "config_file_created": created,
        }

    def setup_environment_variables(self, project_name: str, database: str) -> str:
        content = env_example(project_name, database)
        self._write_file(project_name, ENV_FILE, content, "Add database environment variables template")
        return content

    def create_connection_test(self, project_name: str, database: str) -> str:
        content = database_test_code(database)
        self._write_file(project_name, TEST_FILE, content, "Add database connection test")
        return content

    def _write_file(self, repo: str, path: str, content: str, message: str) -> bool:
        if self.github is None:
            return False
        with self._github_call(f"Write {path}"):
            self.github.put_file(repo, path, content, message)
        return True
