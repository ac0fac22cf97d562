"""Model provider clients.

Two wire styles cover every model the application uses:

    ChatCompletionsProvider  OpenAI-compatible ``/chat/completions``
                               (OpenAI itself and xAI Grok)
    GeminiProvider           Google ``models/{model}:generateContent``
                               with inline base64 media

Each call opens a short-lived ``httpx.AsyncClient`` with a bounded timeout.
Transport errors surface as ``httpx.HTTPError``; non-2xx replies and empty
completions raise ``UpstreamError`` carrying the provider's message.  The
gateway converts both into soft failures.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import httpx

from otassess_core.errors import UpstreamError
from otassess_core.models.enrichment import ChatMessage

logger = logging.getLogger(__name__)

OPENAI_BASE_URL = "https://api.openai.com/v1"
GROK_BASE_URL = "https://api.x.ai/v1"
GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

DEFAULT_TIMEOUT_SECONDS = 45.0
CONNECT_TIMEOUT_SECONDS = 8.0


@dataclass(frozen=True)
class InlineMedia:
    """Base64-encoded media sent alongside a prompt."""

    mime_type: str
    data: str


@dataclass(frozen=True)
class CompletionRequest:
    model: str
    prompt: str
    system: str | None = None
    history: tuple[ChatMessage, ...] = ()
    media: tuple[InlineMedia, ...] = ()
    temperature: float = 0.7
    max_tokens: int = 1000


class ModelProvider(ABC):
    """Interface for a text-generation backend.

    Implementations send one request per call and return the generated
    text.  They do not retry and do not interpret the text.
    """

    name: str

    @abstractmethod
    async def complete(self, request: CompletionRequest) -> str:
        """Run one completion.

        Parameters
        ----------
        request:
            Model name, prompt, optional system instruction, prior chat
            turns, inline media and sampling settings.

        Returns
        -------
        str
            The generated text, never empty.

        Raises
        ------
        httpx.HTTPError
            Network failure or timeout.
        UpstreamError
            The provider answered with an error status or no content.
        """
        ...


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _provider_error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        err = payload.get("error")
        if isinstance(err, dict) and isinstance(err.get("message"), str):
            return err["message"].strip()
        if isinstance(payload.get("message"), str):
            return payload["message"].strip()
    return response.text.strip() or f"HTTP {response.status_code}"


def _field(obj: Any, key: str, kind: type, *, where: str = "") -> Any:
    """Return ``obj[key]`` when it has type *kind*, ``None`` when absent.

    A reply whose outer object is not a dict, or whose value under *key*
    has the wrong type, raises ``UpstreamError`` when *where* names the
    provider.  Top-level lookups pass no *where* and treat a bad shape as
    missing so the caller reports an empty completion.
    """
    if not isinstance(obj, dict):
        if where:
            raise UpstreamError(f"{where} returned an unexpected response shape")
        return None
    value = obj.get(key)
    if value is None:
        return None
    if not isinstance(value, kind):
        if where:
            raise UpstreamError(f"{where} returned an unexpected response shape")
        return None
    return value


def _timeout(seconds: float) -> httpx.Timeout:
    return httpx.Timeout(seconds, connect=min(CONNECT_TIMEOUT_SECONDS, seconds))


class _HTTPProvider(ModelProvider):
    def __init__(
        self,
        *,
        api_key: str,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = _timeout(timeout)
        # Tests inject httpx.MockTransport here
        self._transport = transport

    async def _post(self, url: str, *, headers: dict[str, str], body: dict[str, Any]) -> Any:
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.post(url, headers=headers, json=body)
        if response.status_code >= 400:
            message = _provider_error_message(response)
            logger.warning("%s returned HTTP %d: %s", self.name, response.status_code, message)
            raise UpstreamError(f"{self.name} request failed", details=message)
        try:
            return response.json()
        except ValueError:
            raise UpstreamError(f"{self.name} returned invalid JSON") from None


# ------------------------------------------------------------------
# OpenAI-compatible chat completions
# ------------------------------------------------------------------

class ChatCompletionsProvider(_HTTPProvider):
    """OpenAI-style ``POST {base_url}/chat/completions`` with bearer auth."""

    def __init__(self, name: str, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.name = name

    def _messages(self, request: CompletionRequest) -> list[dict[str, Any]]:
        messages: list[dict[str, Any]] = []
        if request.system:
            messages.append({"role": "system", "content": request.system})
        for turn in request.history:
            messages.append({"role": turn.role, "content": turn.content})

        if request.media:
            content: list[dict[str, Any]] = [{"type": "text", "text": request.prompt}]
            for item in request.media:
                content.append({
                    "type": "image_url",
                    "image_url": {"url": f"data:{item.mime_type};base64,{item.data}"},
                })
            messages.append({"role": "user", "content": content})
        else:
            messages.append({"role": "user", "content": request.prompt})
        return messages

    async def complete(self, request: CompletionRequest) -> str:
        body = {
            "model": request.model,
            "messages": self._messages(request),
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
        }
        headers = {"Authorization": f"Bearer {self._api_key}"}
        payload = await self._post(f"{self._base_url}/chat/completions", headers=headers, body=body)

        choices = _field(payload, "choices", list)
        if not choices:
            raise UpstreamError(f"{self.name} returned an empty completion")
        message = _field(choices[0], "message", dict, where=self.name)
        content = message.get("content") if message else None

        text = ""
        if isinstance(content, str):
            text = content
        elif isinstance(content, list):
            text = "\n".join(
                part["text"] for part in content
                if isinstance(part, dict) and isinstance(part.get("text"), str)
            )
        if not text.strip():
            raise UpstreamError(f"{self.name} returned an empty completion")
        return text


# ------------------------------------------------------------------
# Google Gemini
# ------------------------------------------------------------------

class GeminiProvider(_HTTPProvider):
    """``POST {base_url}/models/{model}:generateContent`` with an API-key header."""

    name = "gemini"

    def __init__(self, *, api_key: str, base_url: str = GEMINI_BASE_URL, **kwargs: Any) -> None:
        super().__init__(api_key=api_key, base_url=base_url, **kwargs)

    async def complete(self, request: CompletionRequest) -> str:
        parts: list[dict[str, Any]] = [{"text": request.prompt}]
        for item in request.media:
            parts.append({"inline_data": {"mime_type": item.mime_type, "data": item.data}})

        contents: list[dict[str, Any]] = []
        for turn in request.history:
            role = "model" if turn.role == "assistant" else "user"
            contents.append({"role": role, "parts": [{"text": turn.content}]})
        contents.append({"role": "user", "parts": parts})

        body: dict[str, Any] = {
            "contents": contents,
            "generationConfig": {
                "temperature": request.temperature,
                "maxOutputTokens": request.max_tokens,
            },
        }
        if request.system:
            body["systemInstruction"] = {"parts": [{"text": request.system}]}

        url = f"{self._base_url}/models/{request.model}:generateContent"
        payload = await self._post(url, headers={"x-goog-api-key": self._api_key}, body=body)

        candidates = _field(payload, "candidates", list)
        if not candidates:
            raise UpstreamError("gemini returned no candidates")
        content = _field(candidates[0], "content", dict, where=self.name) or {}
        parts = _field(content, "parts", list, where=self.name) or []
        text = "".join(
            part["text"] for part in parts
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        )
        if not text.strip():
            raise UpstreamError("gemini returned no candidates")
        return text


@dataclass
class ProviderSet:
    """Configured providers by name; a missing key means "not configured"."""

    providers: dict[str, ModelProvider] = field(default_factory=dict)

    @classmethod
    def from_keys(
        cls,
        *,
        openai_api_key: str | None = None,
        grok_api_key: str | None = None,
        google_api_key: str | None = None,
        openai_base_url: str = OPENAI_BASE_URL,
        grok_base_url: str = GROK_BASE_URL,
        gemini_base_url: str = GEMINI_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "ProviderSet":
        providers: dict[str, ModelProvider] = {}
        if openai_api_key:
            providers["openai"] = ChatCompletionsProvider(
                "openai", api_key=openai_api_key, base_url=openai_base_url,
                timeout=timeout, transport=transport,
            )
        if grok_api_key:
            providers["grok"] = ChatCompletionsProvider(
                "grok", api_key=grok_api_key, base_url=grok_base_url,
                timeout=timeout, transport=transport,
            )
        if google_api_key:
            providers["gemini"] = GeminiProvider(
                api_key=google_api_key, base_url=gemini_base_url,
                timeout=timeout, transport=transport,
            )
        return cls(providers)

    def get(self, name: str) -> ModelProvider | None:
        return self.providers.get(name)
