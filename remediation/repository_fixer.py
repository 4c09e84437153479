"""Repository scans that open pull requests fixing deployment files.

Where ``RemediationDispatcher`` reacts to a failed deployment, the
``RepositoryFixer`` checks a repository ahead of time for the files a
Railway deployment needs and proposes the missing ones in a pull request.
"""

import json
import logging
import time
from collections import Counter
from typing import Any, Protocol

from schemas.remediation import FixPullRequest, RepositoryAnalysis, RepositoryFix
from scaffolding.templates import BASE_DEPENDENCIES, package_json, railway_json, server_js

logger = logging.getLogger(__name__)

PR_TITLE = "DevOps AI: Auto-fix deployment issues"
MERGE_TITLE = "DevOps AI: Auto-merged deployment fix"

FIX_DESCRIPTIONS: dict[RepositoryFix, str] = {
    RepositoryFix.MISSING_SERVER_FILE: "Create missing server.js entry point for Railway deployment",
    RepositoryFix.PACKAGE_JSON_FIX: "Fix package.json configuration for proper Railway deployment",
    RepositoryFix.RAILWAY_CONFIG: "Add Railway deployment configuration",
}


class RepositoryHost(Protocol):
    """The GitHub operations a repository scan needs."""

    def list_directory(self, repo: str, path: str = "", ref: str | None = None) -> list[dict[str, Any]]: ...

    def read_file(self, repo: str, path: str, ref: str | None = None) -> str | None: ...

    def put_file(self, repo: str, path: str, content: str, message: str, branch: str | None = None) -> Any: ...

    def create_branch(self, repo: str, branch: str) -> bool: ...

    def create_pull_request(
        self, repo: str, head: str, title: str, body: str = "", base: str = "main"
    ) -> dict[str, Any]: ...

    def merge_pull_request(
        self, repo: str, number: int, commit_title: str | None = None, merge_method: str = "squash"
    ) -> dict[str, Any]: ...


def package_json_issues(content: str) -> list[str]:
    """List what keeps a package.json from starting on Railway."""
    try:
        manifest = json.loads(content)
    except ValueError:
        return ["package.json is not valid JSON"]

    issues: list[str] = []
    if manifest.get("main") != "server.js":
        issues.append("Missing or incorrect main entry point")
    if not manifest.get("scripts", {}).get("start"):
        issues.append("Missing start script")
    if not manifest.get("engines", {}).get("node"):
        issues.append("Missing Node.js engine specification")

    dependencies = manifest.get("dependencies", {})
    missing = [name for name in BASE_DEPENDENCIES if name not in dependencies]
    if missing:
        issues.append(f"Missing dependencies: {', '.join(missing)}")
    return issues


def fixed_package_json(content: str | None) -> str:
    """Return package.json text with entry point, scripts, engine and dependencies set."""
    if content is None:
        return package_json()

    manifest = json.loads(content)
    manifest["main"] = "server.js"
    scripts = manifest.setdefault("scripts", {})
    scripts["start"] = "node server.js"
    scripts["dev"] = "nodemon server.js"
    manifest.setdefault("engines", {})["node"] = ">=18.0.0"
    manifest.setdefault("dependencies", {}).update(BASE_DEPENDENCIES)
    return json.dumps(manifest, indent=2) + "\n"


def pull_request_body(fixes: list[RepositoryFix], auto_merge: bool) -> str:
    lines = [
        "## DevOps AI Auto-Fix",
        "",
        "This PR was opened by the DevOps agent to resolve deployment issues.",
        "",
        "### Applied Fixes:",
    ]
    lines += [f"- **{fix.value}**: {FIX_DESCRIPTIONS[fix]}" for fix in fixes]
    lines += [
        "",
        "### Next Steps:",
        "1. Review the changes",
        "2. Merge to trigger a Railway redeployment",
        "3. Watch the deployment in the Railway dashboard",
        "",
        f"*Auto-merge: {'Enabled' if auto_merge else 'Disabled'}*",
    ]
    return "\n".join(lines) + "\n"


class RepositoryFixer:
    """Scans repositories and opens fix pull requests.

    Args:
        github: GitHub client
        repositories: Repositories checked by ``scan_repositories``
        base_branch: Branch the fix pull requests target
        auto_merge: Squash-merge fix pull requests right after opening them
    """

    def __init__(
        self,
        github: RepositoryHost,
        repositories: list[str] | None = None,
        base_branch: str = "main",
        auto_merge: bool = False,
    ) -> None:
        self.github = github
        self.repositories = repositories or []
        self.base_branch = base_branch
        self.auto_merge = auto_merge
        self.pr_history: list[FixPullRequest] = []

    def analyze_repository(self, repo: str) -> RepositoryAnalysis:
        """Check the repository root for the files a deployment needs.

        Raises:
            GitHubError: If the repository cannot be listed
        """
        names = {entry.get("name") for entry in self.github.list_directory(repo)}
        analysis = RepositoryAnalysis(
            repo=repo,
            has_server_js="server.js" in names,
            has_package_json="package.json" in names,
            has_railway_config="railway.json" in names,
            has_dockerfile="Dockerfile" in names,
            has_github_actions=".github" in names,
        )

        if not analysis.has_server_js:
            analysis.missing_files.append("server.js")
            analysis.recommended_fixes.append(RepositoryFix.MISSING_SERVER_FILE)
        if not analysis.has_package_json:
            analysis.missing_files.append("package.json")
            analysis.recommended_fixes.append(RepositoryFix.PACKAGE_JSON_FIX)
        if not analysis.has_railway_config:
            analysis.missing_files.append("railway.json")
            analysis.recommended_fixes.append(RepositoryFix.RAILWAY_CONFIG)

        if analysis.has_package_json:
            content = self.github.read_file(repo, "package.json")
            analysis.package_issues = package_json_issues(content or "")
            if analysis.package_issues:
                analysis.recommended_fixes.append(RepositoryFix.PACKAGE_JSON_FIX)

        logger.info(
            "Analyzed %s: missing=%s fixes=%s",
            repo,
            analysis.missing_files,
            [fix.value for fix in analysis.recommended_fixes],
        )
        return analysis

    def apply_fix(self, repo: str, branch: str, fix: RepositoryFix) -> None:
        """Write the files for one fix to ``branch``."""
        if fix == RepositoryFix.MISSING_SERVER_FILE:
            self.github.put_file(repo, "server.js", server_js(), "DevOps AI: Add server.js", branch=branch)
        elif fix == RepositoryFix.RAILWAY_CONFIG:
            self.github.put_file(repo, "railway.json", railway_json(), "DevOps AI: Add railway.json", branch=branch)
        elif fix == RepositoryFix.PACKAGE_JSON_FIX:
            content = fixed_package_json(self.github.read_file(repo, "package.json", ref=branch))
            self.github.put_file(
                repo, "package.json", content, "DevOps AI: Fix package.json configuration", branch=branch
            )
        else:
            raise ValueError(f"Unknown fix type: {fix}")

    def create_fix_pull_request(self, repo: str, fixes: list[RepositoryFix]) -> FixPullRequest | None:
        """Apply ``fixes`` on a new branch and open a pull request.

        Fixes that fail are logged and left out.

        Returns:
            The recorded pull request, or None when no fix could be applied.
        """
        branch = f"devops-ai-fix-{int(time.time() * 1000)}"
        self.github.create_branch(repo, branch)
        logger.info("Created branch %s in %s", branch, repo)

        applied: list[RepositoryFix] = []
        for fix in dict.fromkeys(fixes):
            try:
                self.apply_fix(repo, branch, fix)
                applied.append(fix)
            except Exception as e:
                logger.error("Failed to apply fix %s to %s: %s", fix.value, repo, e)

        if not applied:
            logger.warning("No fixes could be applied to %s", repo)
            return None

        pr = self.github.create_pull_request(
            repo,
            branch,
            PR_TITLE,
            pull_request_body(applied, self.auto_merge),
            base=self.base_branch,
        )

        auto_merged = False
        if self.auto_merge:
            try:
                self.github.merge_pull_request(repo, pr["number"], commit_title=MERGE_TITLE, merge_method="squash")
                auto_merged = True
            except Exception as e:
                logger.error("Auto-merge failed for %s PR #%s: %s", repo, pr["number"], e)

        record = FixPullRequest(
            repo=repo,
            branch=branch,
            pr_number=pr["number"],
            pr_url=pr.get("html_url"),
            fixes=applied,
            auto_merged=auto_merged,
        )
        self.pr_history.append(record)
        return record

    def scan_repositories(self) -> list[FixPullRequest]:
        """Analyze every configured repository and open fix PRs where needed.

        A repository that cannot be analyzed is logged and skipped.
        """
        opened: list[FixPullRequest] = []
        for repo in self.repositories:
            try:
                analysis = self.analyze_repository(repo)
                if analysis.healthy:
                    logger.info("%s is healthy", repo)
                    continue
                record = self.create_fix_pull_request(repo, analysis.recommended_fixes)
            except Exception:
                logger.exception("Failed to scan %s", repo)
                continue
            if record is not None:
                opened.append(record)
        return opened

    def fix_history(self) -> dict[str, Any]:
        counts = Counter(fix.value for record in self.pr_history for fix in record.fixes)
        return {
            "total_prs": len(self.pr_history),
            "successful_merges": sum(1 for record in self.pr_history if record.auto_merged),
            "recent_fixes": [record.model_dump(mode="json") for record in self.pr_history[-10:]],
            "most_common_fixes": counts.most_common(5),
        }
