"""Product owner agent - requirements, user stories and prioritization."""

import re
from datetime import datetime

from schemas.phase_results import RequirementsResult

from .base import BaseAgent
from .prompts import (
    ACCEPTANCE_CRITERIA_PROMPT,
    PRIORITIZATION_PROMPT,
    PRODUCT_OWNER_PROMPT,
    USER_STORIES_PROMPT,
)


def _slug(text: str) -> str:
    return re.sub(r"\s+", "-", text.strip().lower())


class ProductOwnerAgent(BaseAgent):
    """Turns a project description into requirements the team can build.

    Outputs are also written to the shared context (when attached):
    ``product-requirements``, ``user-stories-<feature>`` and
    ``feature-prioritization``.
    """

    display_name = "Product Owner AI"

    def default_system_prompt(self) -> str:
        return PRODUCT_OWNER_PROMPT

    def analyze_requirements(self, description: str) -> RequirementsResult:
        self.logger.info("Analyzing project requirements")
        analysis = self._chat(description, max_tokens=3500, temperature=0.3)

        result = RequirementsResult(
            original_description=description,
            requirements_analysis=analysis,
            created_by=self.display_name,
        )
        if self.context is not None:
            self.context.save_artifact("product", "requirements", result)
        self._log("All Team", "requirements_analysis", "Product requirements defined.")
        return result

    def create_user_stories(self, feature: str) -> str:
        """Write user stories for one feature."""
        self.logger.info("Creating user stories for %s", feature)
        stories = self._chat(
            f"Create user stories for: {feature}",
            system_prompt=USER_STORIES_PROMPT.format(feature=feature),
            max_tokens=2500,
            temperature=0.3,
        )
        if self.context is not None:
            self.context.save_artifact(
                "user-stories",
                _slug(feature),
                {
                    "feature": feature,
                    "user_stories": stories,
                    "created_at": datetime.now().isoformat(),
                    "created_by": self.display_name,
                },
            )
        return stories

    def define_acceptance_criteria(self, user_story: str) -> str:
        self.logger.info("Defining acceptance criteria")
        return self._chat(
            user_story,
            system_prompt=ACCEPTANCE_CRITERIA_PROMPT.format(story=user_story),
            max_tokens=1500,
            temperature=0.2,
        )

    def prioritize_features(self, features: list[str]) -> str:
        """Rank features with MoSCoW and value-versus-effort scoring."""
        self.logger.info("Prioritizing %d features", len(features))
        prioritization = self._chat(
            f"Prioritize these features: {', '.join(features)}",
            system_prompt=PRIORITIZATION_PROMPT.format(features=features),
            max_tokens=2500,
            temperature=0.3,
        )
        if self.context is not None:
            self.context.save_artifact(
                "feature",
                "prioritization",
                {
                    "features": features,
                    "prioritization": prioritization,
                    "created_at": datetime.now().isoformat(),
                    "created_by": self.display_name,
                },
            )
        return prioritization
