"""Configuration management for AI Team.

Loads configuration from:
1. config.toml (defaults)
2. .env file and environment variables (overrides)
"""

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()


class ConfigurationError(Exception):
    """Raised when required credentials or settings are missing."""


@dataclass
class LLMConfig:
    """LLM backend configuration."""

    backend: str = "anthropic"  # "anthropic" or "auto"
    model: str = "claude-sonnet-4-20250514"
    api_key: str = ""
    timeout: int = 120
    max_tokens: int = 4096


@dataclass
class GitHubConfig:
    """GitHub REST API configuration."""

    token: str = ""
    username: str = ""
    api_url: str = "https://api.github.com"
    timeout: int = 30
    default_base_branch: str = "main"


@dataclass
class SharedContextConfig:
    """Shared-context store configuration."""

    directory: str = "shared-context"
    use_file_lock: bool = False  # Serialize read-modify-write across processes


@dataclass
class PipelineConfig:
    """Team pipeline execution configuration."""

    runs_dir: str = "shared-context/runs"
    log_level: str = "INFO"


@dataclass
class DeployConfig:
    """Railway deployment configuration."""

    railway_token: str = ""
    railway_project_id: str = ""
    railway_service_id: str = ""  # Redeployed after a successful auto-fix
    railway_api_url: str = "https://backboard.railway.app/graphql"
    railway_health_url: str = "https://your-app.railway.app/health"
    health_check_timeout: int = 10
    deploy_wait: float = 5.0  # Seconds between merging a PR and checking deployments


@dataclass
class MonitorConfig:
    """DevOps monitoring and auto-remediation configuration."""

    agent_name: str = "Senior DevOps AI Agent"
    target_repo: str = ""
    fix_branch: str = ""  # Empty means the repository default branch
    poll_interval: int = 300  # Seconds between deployment checks
    report_interval: int = 86400  # Seconds between health reports
    report_path: str = "logs/devops-agent-health.json"
    agent_port: int = 3001
    repositories: list[str] = field(default_factory=list)
    railway_projects: list[str] = field(default_factory=list)
    webhook_secret: str = ""  # HMAC secret of Railway webhooks; empty rejects them
    auto_merge_fixes: bool = False  # Merge repository fix PRs right after opening them


@dataclass
class Config:
    """Main configuration container."""

    llm: LLMConfig = field(default_factory=LLMConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)
    shared_context: SharedContextConfig = field(default_factory=SharedContextConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    deploy: DeployConfig = field(default_factory=DeployConfig)
    monitor: MonitorConfig = field(default_factory=MonitorConfig)

    # Credential name -> (section, attribute, environment variable)
    CREDENTIALS = {
        "github_token": ("github", "token", "GITHUB_TOKEN"),
        "github_username": ("github", "username", "GITHUB_USERNAME"),
        "anthropic_api_key": ("llm", "api_key", "ANTHROPIC_API_KEY"),
        "railway_token": ("deploy", "railway_token", "RAILWAY_TOKEN"),
        "railway_project_id": ("deploy", "railway_project_id", "RAILWAY_PROJECT_ID"),
        "target_repo": ("monitor", "target_repo", "TARGET_REPO"),
    }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Create Config from dictionary."""
        return cls(
            llm=LLMConfig(**data.get("llm", {})),
            github=GitHubConfig(**data.get("github", {})),
            shared_context=SharedContextConfig(**data.get("shared_context", {})),
            pipeline=PipelineConfig(**data.get("pipeline", {})),
            deploy=DeployConfig(**data.get("deploy", {})),
            monitor=MonitorConfig(**data.get("monitor", {})),
        )

    def require_credentials(self, *names: str) -> None:
        """Ensure the named credentials are configured.

        Args:
            *names: Keys of ``Config.CREDENTIALS`` (e.g. "github_token")

        Raises:
            ConfigurationError: Listing every missing credential by its
                environment variable name.
        """
        missing = []
        for name in names:
            section, attribute, env_var = self.CREDENTIALS[name]
            if not getattr(getattr(self, section), attribute):
                missing.append(env_var)

        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}. "
                "Set them in the environment or a .env file."
            )


def find_config_file() -> Path | None:
    """Find config.toml in current or parent directories.

    Returns:
        Path to config.toml or None if not found.
    """
    current = Path.cwd()

    for directory in [current, *current.parents]:
        config_path = directory / "config.toml"
        if config_path.exists():
            return config_path

    return None


def load_config(config_path: Path | str | None = None) -> Config:
    """Load configuration from file and environment.

    Args:
        config_path: Optional explicit path to config.toml

    Returns:
        Config object with merged settings.
    """
    config_data: dict[str, Any] = {}

    if config_path is None:
        config_path = find_config_file()

    if config_path is not None:
        path = Path(config_path)
        if path.exists():
            with open(path, "rb") as f:
                config_data = tomllib.load(f)

    env_overrides = {
        "llm": {
            "backend": os.getenv("LLM_BACKEND"),
            "model": os.getenv("ANTHROPIC_MODEL"),
            "api_key": os.getenv("ANTHROPIC_API_KEY"),
            "timeout": _int_or_none(os.getenv("LLM_TIMEOUT")),
        },
        "github": {
            "token": os.getenv("GITHUB_TOKEN") or os.getenv("GH_TOKEN"),
            "username": os.getenv("GITHUB_USERNAME"),
        },
        "shared_context": {
            "directory": os.getenv("SHARED_CONTEXT_DIR"),
        },
        "pipeline": {
            "log_level": os.getenv("LOG_LEVEL"),
        },
        "deploy": {
            "railway_token": os.getenv("RAILWAY_TOKEN"),
            "railway_project_id": os.getenv("RAILWAY_PROJECT_ID"),
            "railway_service_id": os.getenv("RAILWAY_SERVICE_ID"),
            "railway_health_url": os.getenv("RAILWAY_HEALTH_URL"),
        },
        "monitor": {
            "target_repo": os.getenv("TARGET_REPO"),
            "agent_port": _int_or_none(os.getenv("AGENT_PORT")),
            "webhook_secret": os.getenv("RAILWAY_WEBHOOK_SECRET"),
            "auto_merge_fixes": _bool_or_none(os.getenv("AUTO_MERGE_FIXES")),
        },
    }

    # Merge env overrides (only non-None values)
    for section, values in env_overrides.items():
        if section not in config_data:
            config_data[section] = {}
        for key, value in values.items():
            if value is not None:
                config_data[section][key] = value

    return Config.from_dict(config_data)


def _int_or_none(value: str | None) -> int | None:
    """Convert string to int, or return None."""
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _bool_or_none(value: str | None) -> bool | None:
    """Convert "true"/"false" (any case) to bool, or return None."""
    if value is None:
        return None
    return value.strip().lower() == "true"


# Global config instance (lazy loaded)
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance.

    Returns:
        Config object (loaded once, cached).
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config() -> Config:
    """Force reload of configuration.

    Returns:
        Fresh Config object.
    """
    global _config
    _config = load_config()
    return _config
