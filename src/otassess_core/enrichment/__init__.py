"""AI enrichment: provider clients, prompt dispatch, structured parsing, fallbacks."""

from otassess_core.enrichment.gateway import EnrichmentGateway
from otassess_core.enrichment.providers import (
    ChatCompletionsProvider,
    GeminiProvider,
    ModelProvider,
    ProviderSet,
)

__all__ = [
    "ChatCompletionsProvider",
    "EnrichmentGateway",
    "GeminiProvider",
    "ModelProvider",
    "ProviderSet",
]
