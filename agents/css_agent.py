"""CSS specialist agent - stylesheets from design tokens."""

import re
from dataclasses import dataclass, field

from schemas.phase_results import DesignSystem
from scaffolding.generator import design_system_css

from .base import BaseAgent, extract_code_block
from .prompts import CSS_PROMPT

UNSAFE_PATTERNS = [re.compile(r"eval\s*\(", re.IGNORECASE), re.compile(r"new\s+Function\s*\(", re.IGNORECASE)]
INLINE_STYLE_PATTERN = re.compile(r"style\s*=\s*['\"]", re.IGNORECASE)
REMOTE_IMPORT_PATTERN = re.compile(r"@import\s+(?:url\()?['\"]?https?://", re.IGNORECASE)


@dataclass
class CSSValidation:
    """Production checks on a stylesheet."""

    is_valid: bool = True
    csp_compliant: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class CSSAgent(BaseAgent):
    """Builds the application stylesheet on top of the designer's tokens.

    Every section is generated deterministically from the ``DesignSystem``;
    only ``refine_stylesheet`` calls the LLM.
    """

    display_name = "CSS Specialist AI"

    def default_system_prompt(self) -> str:
        return CSS_PROMPT

    def generate_css_variables(self, design_system: DesignSystem) -> str:
        return design_system_css(design_system)

    def create_typography_system(self, design_system: DesignSystem) -> str:
        scale = design_system.typography.get("scale", {})
        headings = "\n".join(
            f"{tag} {{ font-size: {size}; }}" for tag, size in scale.items() if tag.startswith("h")
        )
        heading_font = "var(--font-heading, var(--font-body, sans-serif))"
        return f"""/* Typography */
html {{ font-size: 16px; line-height: 1.5; -webkit-font-smoothing: antialiased; }}
body {{ font-family: var(--font-body, sans-serif); color: var(--color-text, #111827); background: var(--color-background, #fff); }}
h1, h2, h3, h4, h5, h6 {{ font-family: {heading_font}; font-weight: 700; line-height: 1.25; margin: 0 0 var(--space-4, 1rem); }}
{headings}
p {{ margin: 0 0 1rem; line-height: 1.625; }}
"""

    def create_layout_system(self, design_system: DesignSystem) -> str:
        return """/* Layout */
*, *::before, *::after { box-sizing: border-box; }
body { margin: 0; }
.container { width: 100%; max-width: 1200px; margin: 0 auto; padding: 0 var(--space-4, 1rem); }
.grid { display: grid; gap: var(--space-4, 1rem); }
.flex { display: flex; }
.flex-col { flex-direction: column; }
.items-center { align-items: center; }
.justify-between { justify-content: space-between; }
@media (min-width: 768px) { .grid-2 { grid-template-columns: repeat(2, 1fr); } .grid-3 { grid-template-columns: repeat(3, 1fr); } }
"""

    def generate_utility_classes(self, design_system: DesignSystem) -> str:
        lines = ["/* Utilities */"]
        for key in design_system.spacing:
            lines.append(f".p-{key} {{ padding: var(--space-{key}); }}")
            lines.append(f".m-{key} {{ margin: var(--space-{key}); }}")
        for key in design_system.border_radius:
            lines.append(f".rounded-{key} {{ border-radius: var(--radius-{key}); }}")
        for key in design_system.shadows:
            lines.append(f".shadow-{key} {{ box-shadow: var(--shadow-{key}); }}")
        lines += [
            ".text-center { text-align: center; }",
            ".bg-primary { background-color: var(--color-primary); color: #fff; }",
            ".text-primary { color: var(--color-primary); }",
        ]
        return "\n".join(lines) + "\n"

    def create_advanced_styling(self, design_system: DesignSystem) -> str:
        """Full stylesheet: variables, typography, layout, components, utilities."""
        components = """/* Components */
.btn { display: inline-flex; align-items: center; padding: var(--space-3, 0.75rem) var(--space-6, 1.5rem); border: 0; border-radius: var(--radius-md, 0.5rem); cursor: pointer; transition: var(--transition-base, 300ms ease); }
.btn-primary { background: var(--color-primary); color: #fff; }
.btn:focus-visible { outline: 3px solid var(--color-accent); outline-offset: 2px; }
.card { background: #fff; border-radius: var(--radius-lg, 0.75rem); box-shadow: var(--shadow-sm); padding: var(--space-6, 1.5rem); }
@media (prefers-reduced-motion: reduce) { * { transition: none !important; animation: none !important; } }
"""
        sections = [
            self.generate_css_variables(design_system),
            self.create_typography_system(design_system),
            self.create_layout_system(design_system),
            components,
            self.generate_utility_classes(design_system),
        ]
        return "\n".join(sections)

    def validate_css(self, css: str) -> CSSValidation:
        """Check a stylesheet is safe to serve under a strict CSP."""
        result = CSSValidation()

        if INLINE_STYLE_PATTERN.search(css):
            result.warnings.append("Inline styles detected - consider moving to external CSS")
        if REMOTE_IMPORT_PATTERN.search(css):
            result.warnings.append("Remote @import detected")
        if any(pattern.search(css) for pattern in UNSAFE_PATTERNS):
            result.errors.append("Unsafe JavaScript patterns detected")
            result.csp_compliant = False
        if css.count("{") != css.count("}"):
            result.errors.append("Unbalanced braces")

        result.is_valid = not result.errors
        return result

    def refine_stylesheet(self, css: str, app_type: str = "general") -> str:
        """Ask for an improved stylesheet; keep ``css`` if the answer is unusable."""
        self.logger.info("Refining stylesheet for %s", app_type)
        response = self._chat(
            f"Application type: {app_type}\n\n```css\n{css}\n```",
            max_tokens=4000,
            temperature=0.2,
        )
        refined = extract_code_block(response, "css")
        if not refined:
            self.logger.warning("No CSS block in refinement, keeping the original stylesheet")
            return css

        validation = self.validate_css(refined)
        if not validation.is_valid:
            self.logger.warning("Refined stylesheet rejected: %s", "; ".join(validation.errors))
            return css
        return refined + "\n"
