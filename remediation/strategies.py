"""Auto-fix routines, one per ``FixStrategy``.

Every routine rewrites files in the monitored repository through the
contents API. Fixes overwrite whole files and assume the repository is
owned by the team.
"""

import json
import logging
import re
from typing import Callable, Protocol

from schemas.remediation import ErrorAnalysis, FixResult, FixStrategy
from scaffolding.templates import (
    RETRY_CONNECTION,
    package_json,
    package_manifest,
    railway_json,
    server_js,
)

logger = logging.getLogger(__name__)

COMMIT_PREFIX = "DevOps AI"

MODULE_NAME_PATTERNS = [
    re.compile(r"Cannot find module '([^']+)'"),
    re.compile(r"No module named '([^']+)'"),
    re.compile(r"ModuleNotFoundError:.*?'([^']+)'"),
]


class RepositoryFiles(Protocol):
    """The subset of the GitHub client the fix routines need."""

    def read_file(self, repo: str, path: str, ref: str | None = None) -> str | None: ...

    def put_file(
        self,
        repo: str,
        path: str,
        content: str,
        message: str,
        branch: str | None = None,
    ) -> dict: ...


FixHandler = Callable[[ErrorAnalysis], FixResult]


def missing_packages(error: str) -> list[str]:
    """Extract npm package names from a missing-module error.

    Relative and absolute paths are ignored; scoped packages keep their
    scope (``@scope/pkg/sub`` -> ``@scope/pkg``).
    """
    names: list[str] = []
    for pattern in MODULE_NAME_PATTERNS:
        for match in pattern.findall(error or ""):
            if match.startswith((".", "/")):
                continue
            parts = match.split("/")
            name = "/".join(parts[:2]) if match.startswith("@") else parts[0]
            if name not in names:
                names.append(name)
    return names


class RemediationDispatcher:
    """Runs the auto-fix routine matching an analysis' strategy.

    Args:
        files: Repository file access (``GitHubClient``)
        repo: Target repository ("owner/name" or "name")
        branch: Branch to write to (None means the default branch)
    """

    def __init__(self, files: RepositoryFiles, repo: str, branch: str | None = None) -> None:
        self.files = files
        self.repo = repo
        self.branch = branch or None

        self._handlers: dict[FixStrategy, FixHandler] = {
            FixStrategy.CREATE_MISSING_FILES: self.create_missing_files,
            FixStrategy.FIX_CONNECTION_STRING: self.fix_database_connection,
            FixStrategy.DYNAMIC_PORT_ALLOCATION: self.fix_port_configuration,
            FixStrategy.INSTALL_DEPENDENCIES: self.install_missing_dependencies,
            FixStrategy.FIX_BUILD_PROCESS: self.fix_build_process,
            FixStrategy.EXPERIMENTAL_FIX: self.experimental_fix,
        }

    @property
    def strategies(self) -> set[FixStrategy]:
        return set(self._handlers)

    def execute(self, analysis: ErrorAnalysis) -> FixResult:
        """Run the fix for ``analysis.strategy``.

        Errors raised by a routine are returned as a failed FixResult.
        """
        strategy = analysis.strategy or FixStrategy.EXPERIMENTAL_FIX
        handler = self._handlers.get(strategy, self.experimental_fix)

        logger.info("Executing auto-fix %s on %s", strategy.value, self.repo)
        try:
            return handler(analysis)
        except Exception as e:
            logger.exception("Auto-fix %s failed", strategy.value)
            return FixResult(success=False, strategy=strategy, error=str(e))

    def _write(self, path: str, content: str, message: str) -> None:
        self.files.put_file(self.repo, path, content, f"{COMMIT_PREFIX}: {message}", branch=self.branch)

    # --- Routines ---

    def create_missing_files(self, analysis: ErrorAnalysis) -> FixResult:
        """Write server.js, package.json and railway.json.

        Each file is attempted independently; the fix succeeds only if all
        three were written.
        """
        fixes = {
            "server.js": server_js(),
            "package.json": package_json(),
            "railway.json": railway_json(),
        }

        written: list[str] = []
        failures: dict[str, str] = {}
        for path, content in fixes.items():
            try:
                self._write(path, content, f"Auto-fix {path}")
                written.append(path)
            except Exception as e:
                logger.error("Failed to create %s: %s", path, e)
                failures[path] = str(e)

        return FixResult(
            success=len(written) == len(fixes),
            strategy=FixStrategy.CREATE_MISSING_FILES,
            action="missing_files_created",
            files_created=len(written),
            total_files=len(fixes),
            files=written,
            error="; ".join(f"{p}: {e}" for p, e in failures.items()) or None,
        )

    def fix_database_connection(self, analysis: ErrorAnalysis) -> FixResult:
        """Rewrite server.js with a retrying MongoDB connection."""
        self._write("server.js", server_js(custom_connection=RETRY_CONNECTION), "Fix MongoDB connection")
        return FixResult(
            success=True,
            strategy=FixStrategy.FIX_CONNECTION_STRING,
            action="database_connection_fixed",
            files=["server.js"],
        )

    def fix_port_configuration(self, analysis: ErrorAnalysis) -> FixResult:
        """Rewrite server.js to bind $PORT and step past ports in use."""
        self._write("server.js", server_js(dynamic_port=True), "Use dynamic port allocation")
        return FixResult(
            success=True,
            strategy=FixStrategy.DYNAMIC_PORT_ALLOCATION,
            action="port_configuration_fixed",
            files=["server.js"],
        )

    def install_missing_dependencies(self, analysis: ErrorAnalysis) -> FixResult:
        """Add the modules named in the error to package.json."""
        packages = missing_packages(analysis.error)
        existing = self.files.read_file(self.repo, "package.json", ref=self.branch)
        manifest = json.loads(existing) if existing else package_manifest()

        dependencies = manifest.setdefault("dependencies", {})
        added = [name for name in packages if name not in dependencies]
        for name in added:
            dependencies[name] = "latest"

        self._write("package.json", json.dumps(manifest, indent=2) + "\n", "Add missing dependencies")
        return FixResult(
            success=True,
            strategy=FixStrategy.INSTALL_DEPENDENCIES,
            action="dependencies_updated",
            files=["package.json"],
            details={"added": added},
        )

    def fix_build_process(self, analysis: ErrorAnalysis) -> FixResult:
        """Ensure package.json has a build script and railway.json runs it."""
        existing = self.files.read_file(self.repo, "package.json", ref=self.branch)
        manifest = json.loads(existing) if existing else package_manifest()

        scripts = manifest.setdefault("scripts", {})
        scripts.setdefault("build", "echo 'No build step required'")
        scripts.setdefault("start", "node server.js")

        self._write("package.json", json.dumps(manifest, indent=2) + "\n", "Add build script")
        self._write("railway.json", railway_json(build_command="npm run build"), "Configure build")
        return FixResult(
            success=True,
            strategy=FixStrategy.FIX_BUILD_PROCESS,
            action="build_process_fixed",
            files=["package.json", "railway.json"],
        )

    def experimental_fix(self, analysis: ErrorAnalysis) -> FixResult:
        """No known remedy: change nothing and report failure so the error escalates."""
        logger.info("No concrete fix for category %s", analysis.category)
        return FixResult(
            success=False,
            strategy=FixStrategy.EXPERIMENTAL_FIX,
            action="no_change",
            error="No automated fix available for this error",
        )
