"""Designer agent - design brief and design system tokens."""

from typing import Any

from schemas.phase_results import DesignSystem

from .base import BaseAgent
from .prompts import DESIGNER_PROMPT

# Palettes per design category
COLOR_PSYCHOLOGY: dict[str, dict[str, str]] = {
    "dating": {"primary": "#FF6B6B", "secondary": "#4ECDC4", "accent": "#FFE66D", "neutral": "#F8F9FA"},
    "ecommerce": {"primary": "#6366F1", "secondary": "#10B981", "accent": "#F59E0B", "neutral": "#F9FAFB"},
    "productivity": {"primary": "#3B82F6", "secondary": "#8B5CF6", "accent": "#EF4444", "neutral": "#F5F5F5"},
    "social": {"primary": "#8B5CF6", "secondary": "#EC4899", "accent": "#06B6D4", "neutral": "#FAFAFA"},
    "health": {"primary": "#10B981", "secondary": "#3B82F6", "accent": "#F97316", "neutral": "#F0FDF4"},
}

SEMANTIC_COLORS = {"success": "#10B981", "warning": "#F59E0B", "error": "#EF4444", "info": "#3B82F6"}

DESIGN_DIRECTIONS: dict[str, dict[str, str]] = {
    "dating": {"style": "Modern Romance", "mood": "Warm, inviting, trustworthy", "approach": "Emotion-driven with clear CTAs"},
    "ecommerce": {"style": "Clean Commerce", "mood": "Professional, trustworthy, efficient", "approach": "Conversion-focused with clear hierarchy"},
    "productivity": {"style": "Minimal Professional", "mood": "Clean, focused, efficient", "approach": "Function over form with beautiful details"},
    "social": {"style": "Vibrant Community", "mood": "Energetic, inclusive, expressive", "approach": "User-generated content friendly"},
    "health": {"style": "Calm Wellness", "mood": "Calming, trustworthy, motivating", "approach": "Data visualization with empathy"},
}

FONT_PAIRINGS = {
    "elegant": {"heading": "'Playfair Display', serif", "body": "'Inter', sans-serif"},
    "modern": {"heading": "'Inter', sans-serif", "body": "'Inter', sans-serif"},
    "professional": {"heading": "'IBM Plex Sans', sans-serif", "body": "'IBM Plex Sans', sans-serif"},
    "friendly": {"heading": "'Poppins', sans-serif", "body": "'Nunito', sans-serif"},
}

CATEGORY_FONTS = {"dating": "elegant", "ecommerce": "modern", "productivity": "professional", "social": "friendly", "health": "modern"}

# Scaffold app type -> design category
APP_TYPE_CATEGORIES = {
    "ecommerce": "ecommerce",
    "realtime_chat": "social",
    "task_management": "productivity",
    "fitness_tracker": "health",
    "blog_cms": "productivity",
}

SPACING = {"1": "0.25rem", "2": "0.5rem", "3": "0.75rem", "4": "1rem", "6": "1.5rem", "8": "2rem", "12": "3rem"}
BORDER_RADIUS = {"sm": "0.25rem", "md": "0.5rem", "lg": "0.75rem", "full": "9999px"}
SHADOWS = {
    "sm": "0 1px 2px 0 rgb(0 0 0 / 0.05)",
    "md": "0 4px 6px -1px rgb(0 0 0 / 0.1)",
    "lg": "0 10px 15px -3px rgb(0 0 0 / 0.1)",
}
TRANSITIONS = {"fast": "150ms ease", "base": "300ms ease"}


def design_category(app_type: str, description: str = "") -> str:
    """Map an app type (or a description mentioning dating) to a design category."""
    if "dating" in description.lower() or app_type == "dating":
        return "dating"
    if app_type in COLOR_PSYCHOLOGY:
        return app_type
    return APP_TYPE_CATEGORIES.get(app_type, "productivity")


class DesignerAgent(BaseAgent):
    """UI/UX designer: turns product requirements into design tokens."""

    display_name = "Senior Designer AI"

    def default_system_prompt(self) -> str:
        return DESIGNER_PROMPT

    def create_design_brief(
        self,
        app_type: str,
        description: str = "",
        target_audience: str | None = None,
        business_goals: list[str] | None = None,
    ) -> dict[str, Any]:
        category = design_category(app_type, description)
        return {
            "app_type": category,
            "project_overview": description,
            "target_audience": target_audience or f"Users of {category} applications",
            "design_direction": DESIGN_DIRECTIONS[category],
            "primary_goals": business_goals or ["Engagement", "Retention", "Conversion"],
            "design_principles": ["Clarity", "Consistency", "Accessibility", "Mobile-first"],
            "deliverables": [
                "Design System Documentation",
                "High-Fidelity UI Designs",
                "Developer Handoff Package",
            ],
        }

    def generate_color_palette(self, design_brief: dict[str, Any]) -> dict[str, str]:
        base = COLOR_PSYCHOLOGY.get(design_brief.get("app_type", ""), COLOR_PSYCHOLOGY["productivity"])
        return {**base, **SEMANTIC_COLORS, "text": "#111827", "background": "#FFFFFF"}

    def create_design_system(self, design_brief: dict[str, Any]) -> DesignSystem:
        """Assemble colors, typography, spacing, radii, shadows and transitions."""
        category = design_brief.get("app_type", "productivity")
        fonts = FONT_PAIRINGS[CATEGORY_FONTS.get(category, "modern")]

        design_system = DesignSystem(
            app_type=category,
            colors=self.generate_color_palette(design_brief),
            typography={
                "font_families": dict(fonts),
                "scale": {"h1": "3rem", "h2": "2.25rem", "h3": "1.875rem", "body": "1rem", "small": "0.875rem"},
            },
            spacing=dict(SPACING),
            border_radius=dict(BORDER_RADIUS),
            shadows=dict(SHADOWS),
            transitions=dict(TRANSITIONS),
        )
        self._log("CSS Specialist AI", "design_system", f"Design system ready ({category})")
        return design_system

    def collaborate_with_product_owner(self, requirements: str, app_type: str = "generic_webapp") -> dict[str, Any]:
        """Ask for a design analysis of the requirements and build the brief.

        Returns:
            ``design_brief`` (structured) and ``design_analysis`` (LLM text).
        """
        self.logger.info("Collaborating with product owner on the design brief")
        analysis = self._chat(requirements, max_tokens=2500, temperature=0.4)
        brief = self.create_design_brief(app_type, requirements)

        if self.context is not None:
            self.context.save_artifact("design", "brief", {"design_brief": brief, "design_analysis": analysis})
            self.context.add_team_decision(
                "design",
                {"title": f"Design direction: {brief['design_direction']['style']}", "decided_by": self.display_name},
            )
        self._log("Product Owner AI", "design_collaboration", "Design brief aligned with product requirements")
        return {"design_brief": brief, "design_analysis": analysis}
