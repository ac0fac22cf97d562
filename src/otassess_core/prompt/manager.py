"""PromptManager: Jinja2-based prompt renderer for AI enrichment.

Loads templates from the ``template/`` directory.  Each enrichment kind has
a user-prompt template; kinds with a long system instruction keep it in a
``*_system.jinja2`` template alongside.
"""

from __future__ import annotations

import json
from pathlib import Path

import jinja2

from otassess_core.models.enrichment import EnrichmentKind

# --- kind-to-template mapping ---
_KIND_TEMPLATES: dict[EnrichmentKind, str] = {
    EnrichmentKind.RESPONSE_ANALYSIS: "response_analysis.jinja2",
    EnrichmentKind.ASSESSMENT_SUMMARY: "assessment_summary.jinja2",
    EnrichmentKind.EQUIPMENT_RECOMMENDATIONS: "equipment_recommendations.jinja2",
    EnrichmentKind.QUOTE_GENERATION: "generate_quotes.jinja2",
    EnrichmentKind.VIDEO_FRAME: "video_frame.jinja2",
    EnrichmentKind.ROOM_MAP: "room_map.jinja2",
    EnrichmentKind.VIDEO_ANALYSIS: "video_analysis.jinja2",
    EnrichmentKind.CATALOG_PARSING: "catalog_extraction.jinja2",
    EnrichmentKind.EQUIPMENT_JUSTIFICATION: "equipment_justification.jinja2",
}

_SYSTEM_TEMPLATES: dict[EnrichmentKind, str] = {
    EnrichmentKind.SUPPORT_CHAT: "support_chat_system.jinja2",
}


class PromptManager:
    """Jinja2-based prompt renderer.

    Args:
        template_dir: optional override for the template directory.
            Defaults to ``template/`` sibling of this module.
    """

    def __init__(self, template_dir: Path | None = None) -> None:
        if template_dir is None:
            template_dir = Path(__file__).parent / "template"
        self._env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
        )
        self._env.filters["tojson"] = lambda v: json.dumps(v, ensure_ascii=False)

    def render(self, template_name: str, **context) -> str:
        """Render a named template with arbitrary context."""
        template = self._env.get_template(template_name)
        return template.render(**context).strip()

    def render_prompt(self, kind: EnrichmentKind, **context) -> str:
        """Render the user prompt for an enrichment kind.

        Raises ``KeyError`` for kinds whose prompt is supplied by the caller
        (vision analysis, support chat).
        """
        return self.render(_KIND_TEMPLATES[kind], **context)

    def render_system(self, kind: EnrichmentKind, **context) -> str | None:
        template_name = _SYSTEM_TEMPLATES.get(kind)
        if template_name is None:
            return None
        return self.render(template_name, **context)
