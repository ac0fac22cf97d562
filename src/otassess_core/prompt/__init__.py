"""Prompt rendering for AI enrichment.

Provides ``PromptManager``, a Jinja2-based template engine that renders
enrichment contexts into provider-ready prompt strings.
"""

from otassess_core.prompt.manager import PromptManager

__all__ = ["PromptManager"]
