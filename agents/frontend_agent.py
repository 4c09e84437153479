"""Frontend developer agent - technology choice and frontend delivery."""

import re

from schemas.phase_results import FrontendResult, TechSelectionResult

from .base import BaseAgent, extract_files
from .prompts import FRONTEND_FEATURE_PROMPT, FRONTEND_PROMPT, FRONTEND_STRUCTURE_PROMPT

# Checked in order; more specific names come before the frameworks they contain
KNOWN_FRAMEWORKS = [
    "Next.js",
    "Nuxt.js",
    "React Native",
    "React",
    "Vue.js",
    "Angular",
    "SvelteKit",
    "Svelte",
    "Flutter",
    "Remix",
]

FRONTEND_BRANCH = "feature/frontend-app"


def detect_framework(text: str) -> str | None:
    """Return the framework mentioned earliest in ``text``.

    Example:
        >>> detect_framework("We recommend Next.js on top of React")
        'Next.js'
    """
    best: tuple[int, str] | None = None
    for name in KNOWN_FRAMEWORKS:
        match = re.search(rf"(?<![\w.]){re.escape(name)}(?![\w])", text, re.IGNORECASE)
        if match and (best is None or match.start() < best[0]):
            best = (match.start(), name)
    return best[1] if best else None


class FrontendDeveloperAgent(BaseAgent):
    """Chooses the frontend stack and ships the frontend repository."""

    display_name = "Frontend Developer AI"

    def default_system_prompt(self) -> str:
        return FRONTEND_PROMPT

    def select_technology_stack(self, requirements: str) -> TechSelectionResult:
        """Pick the frontend technology and record it as a team decision."""
        self.logger.info("Selecting frontend technology stack")
        decision = self._chat(requirements, max_tokens=3000, temperature=0.3)

        result = TechSelectionResult(
            agent=self.display_name,
            technology_decision=decision,
            framework=detect_framework(decision),
        )
        if self.context is not None:
            self.context.save_decision("frontend", "technology", result)
            self.context.update_technology_stack({"frontend": {"framework": result.framework}})
        self._log("All Team", "technology_decision", f"Frontend stack selected: {result.framework or 'see decision'}")
        return result

    def create_project_structure(self, technology: str, project_name: str) -> str:
        self.logger.info("Planning %s project structure for %s", technology, project_name)
        structure = self._chat(
            f"Create the project structure for {project_name}",
            system_prompt=FRONTEND_STRUCTURE_PROMPT.format(technology=technology, project=project_name),
            max_tokens=2500,
            temperature=0.2,
        )
        if self.context is not None:
            self.context.save_artifact(
                "frontend",
                "project-structure",
                {"technology": technology, "project_name": project_name, "structure": structure},
            )
        return structure

    def implement_feature(self, feature: str, user_stories: str, technology: str) -> str:
        """Generate the code for one feature.

        Returns:
            The raw response; files are in ``File: <path>`` headed blocks.
        """
        self.logger.info("Implementing %s with %s", feature, technology)
        return self._chat(
            user_stories,
            system_prompt=FRONTEND_FEATURE_PROMPT.format(feature=feature, technology=technology),
            max_tokens=4000,
            temperature=0.2,
        )

    def implement_application(
        self,
        requirements: str,
        project_name: str,
        api_spec: str = "",
        technology: TechSelectionResult | None = None,
    ) -> FrontendResult:
        """Build the frontend in its own repository and open a PR.

        Args:
            requirements: Requirements analysis from the product owner
            project_name: Frontend repository name
            api_spec: Backend endpoints, one ``METHOD /path`` per line
            technology: Earlier stack decision; selected anew if omitted
        """
        technology = technology or self.select_technology_stack(requirements)
        framework = technology.framework or "React"

        repository = self._ensure_repository(project_name, f"Frontend for {project_name} ({framework})")
        self.create_git_branch(repository.name, FRONTEND_BRANCH)

        stories = requirements
        if api_spec:
            stories += f"\n\nBackend API endpoints:\n{api_spec}"
        implementation = self.implement_feature("Complete frontend application", stories, framework)

        files = extract_files(implementation)
        if not files:
            self.logger.warning("No file blocks in frontend implementation, committing it as documentation")
            files = {"IMPLEMENTATION.md": implementation.rstrip() + "\n"}
        files.setdefault("README.md", f"# {project_name}\n\nFrontend built with {framework}.\n")

        commit_sha = self.commit_code(repository.name, FRONTEND_BRANCH, files, f"Frontend implementation ({framework})")
        pr = self.create_pull_request(
            repository.name,
            FRONTEND_BRANCH,
            "Frontend: Complete Implementation",
            f"Frontend application built with {framework}.\n\nFiles: {len(files)}",
            base=repository.default_branch,
        )

        return FrontendResult(
            technology=technology,
            repository=repository,
            branch=FRONTEND_BRANCH,
            commit_sha=commit_sha,
            files=sorted(files),
            pr_number=pr["number"],
            pr_url=pr["url"],
        )
