"""EnrichmentGateway tests against httpx.MockTransport.

Mock strategy:
  - Providers are real ``ChatCompletionsProvider`` / ``GeminiProvider``
    instances built by ``ProviderSet.from_keys`` with an
    ``httpx.MockTransport`` injected, so request building and response
    decoding run for real.
  - Each test installs a handler that inspects the outgoing request and
    returns a canned provider reply (or raises a transport error).
"""

import asyncio
import json

import httpx
import pytest

from otassess_core.enrichment import EnrichmentGateway, ProviderSet
from otassess_core.enrichment.parsing import (
    extract_json_object,
    parse_structured,
    strip_code_fences,
)
from otassess_core.errors import StructuredOutputError
from otassess_core.models.enrichment import (
    EnrichmentKind,
    FrameAnalysis,
    QuoteGenerationContext,
    QuoteOptions,
    ResponseAnalysisContext,
    RoomMapContext,
    SupportChatContext,
    VideoFrameContext,
)

ANALYSIS_CTX = ResponseAnalysisContext(
    ai_prompt="Evaluate scooter transfer ability.",
    question="Can the client transfer on and off the scooter seat independently?",
    answer="Requires supervision",
)

QUOTE_JSON = {
    "quotes": [
        {
            "name": "Essential Package",
            "description": "Basics",
            "items": [{"name": "Shower chair", "quantity": 2, "price": 85.0}],
            "subtotal": 170.0,
            "tax": 17.0,
            "total": 187.0,
        }
    ]
}


def chat_reply(content, status=200):
    return httpx.Response(status, json={"choices": [{"message": {"content": content}}]})


def gemini_reply(text):
    return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]})


def gateway_with(handler, **keys):
    keys = keys or {"openai_api_key": "sk-test", "grok_api_key": "xai-test", "google_api_key": "g-test"}
    providers = ProviderSet.from_keys(transport=httpx.MockTransport(handler), **keys)
    return EnrichmentGateway(providers)


# =====================================================================
# Successful calls
# =====================================================================


@pytest.mark.asyncio
async def test_response_analysis_text():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        return chat_reply("Recommend a swivel seat.")

    result = await gateway_with(handler).enrich(EnrichmentKind.RESPONSE_ANALYSIS, ANALYSIS_CTX)

    assert result.success
    assert result.result == "Recommend a swivel seat."
    assert result.model == "gpt-4o"
    assert seen["url"] == "https://api.openai.com/v1/chat/completions"
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"]["model"] == "gpt-4o"
    user_message = seen["body"]["messages"][-1]["content"]
    assert "Requires supervision" in user_message
    assert "Evaluate scooter transfer ability." in user_message


@pytest.mark.asyncio
async def test_context_may_be_a_dict():
    result = await gateway_with(lambda r: chat_reply("ok")).enrich(
        "response_analysis", ANALYSIS_CTX.model_dump(),
    )
    assert result.success


@pytest.mark.asyncio
async def test_quote_generation_parses_fenced_json():
    def handler(request):
        assert request.url.host == "api.x.ai"
        return chat_reply("Here you go:\n```json\n" + json.dumps(QUOTE_JSON) + "\n```")

    result = await gateway_with(handler).enrich(
        EnrichmentKind.QUOTE_GENERATION,
        QuoteGenerationContext(client_name="Margaret Hill", assessment_type="home"),
    )

    assert result.success
    assert isinstance(result.result, QuoteOptions)
    assert result.result.quotes[0].items[0].quantity == 2


@pytest.mark.asyncio
async def test_gemini_frame_reading_accepts_camel_case():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["key"] = request.headers["x-goog-api-key"]
        body = json.loads(request.content)
        seen["inline"] = body["contents"][-1]["parts"][1]["inline_data"]
        return gemini_reply(json.dumps({
            "roomType": "kitchen",
            "confidence": 82,
            "estimatedDimensions": {"length": 4.2, "width": 3.1, "height": 2.4},
            "safetyIssues": ["loose mat"],
        }))

    result = await gateway_with(handler).enrich(
        EnrichmentKind.VIDEO_FRAME, VideoFrameContext(frame_base64="aGVsbG8="),
    )

    assert result.success
    assert isinstance(result.result, FrameAnalysis)
    assert result.result.room_type == "kitchen"
    assert result.result.safety_issues == ["loose mat"]
    assert seen["path"].endswith("/models/gemini-2.0-flash:generateContent")
    assert seen["key"] == "g-test"
    assert seen["inline"] == {"mime_type": "image/jpeg", "data": "aGVsbG8="}


@pytest.mark.asyncio
async def test_support_chat_keeps_recent_user_and_assistant_turns():
    seen = {}

    def handler(request):
        seen["messages"] = json.loads(request.content)["messages"]
        return chat_reply("Tap Save & Next.")

    history = [{"role": "user", "content": f"q{i}"} for i in range(10)]
    history.append({"role": "tool", "content": "ignored"})
    result = await gateway_with(handler).enrich(
        EnrichmentKind.SUPPORT_CHAT,
        SupportChatContext(message="How do I save?", history=history),
    )

    assert result.success
    roles = [m["role"] for m in seen["messages"]]
    assert roles[0] == "system"
    assert "tool" not in roles
    # system + at most six history turns + the new message
    assert len(seen["messages"]) <= 8
    assert seen["messages"][-1]["content"] == "How do I save?"


# =====================================================================
# Soft failures
# =====================================================================


@pytest.mark.asyncio
async def test_unconfigured_provider():
    gateway = EnrichmentGateway()
    result = await gateway.enrich(EnrichmentKind.RESPONSE_ANALYSIS, ANALYSIS_CTX)
    assert not result.success
    assert result.error == "openai provider is not configured"
    assert not gateway.is_configured(EnrichmentKind.RESPONSE_ANALYSIS)


@pytest.mark.asyncio
async def test_only_the_routed_provider_matters():
    gateway = gateway_with(lambda r: chat_reply("ok"), openai_api_key="sk-test")
    assert gateway.is_configured(EnrichmentKind.RESPONSE_ANALYSIS)
    result = await gateway.enrich(
        EnrichmentKind.QUOTE_GENERATION,
        QuoteGenerationContext(client_name="A", assessment_type="home"),
    )
    assert result.error == "grok provider is not configured"


@pytest.mark.asyncio
async def test_http_error_carries_provider_message():
    def handler(request):
        return httpx.Response(500, json={"error": {"message": "The server is overloaded"}})

    result = await gateway_with(handler).enrich(EnrichmentKind.RESPONSE_ANALYSIS, ANALYSIS_CTX)

    assert not result.success
    assert result.error == "response_analysis failed"
    assert result.details == "The server is overloaded"


@pytest.mark.asyncio
async def test_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    result = await gateway_with(handler).enrich(EnrichmentKind.RESPONSE_ANALYSIS, ANALYSIS_CTX)
    assert not result.success
    assert "connection refused" in result.details


@pytest.mark.asyncio
async def test_empty_completion():
    result = await gateway_with(lambda r: chat_reply("   ")).enrich(
        EnrichmentKind.RESPONSE_ANALYSIS, ANALYSIS_CTX,
    )
    assert not result.success


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"choices": ["x"]},
        {"choices": [{"message": "hi"}]},
        {"choices": [{"message": {"content": 42}}]},
        ["not", "an", "object"],
    ],
)
async def test_odd_chat_reply_shapes_fail_softly(payload):
    result = await gateway_with(lambda r: httpx.Response(200, json=payload)).enrich(
        EnrichmentKind.RESPONSE_ANALYSIS, ANALYSIS_CTX,
    )
    assert not result.success
    assert result.error == "response_analysis failed"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"candidates": ["x"]},
        {"candidates": [{"content": "text"}]},
        {"candidates": [{"content": {"parts": "text"}}]},
        {"candidates": [{"content": {"parts": [{"text": 7}]}}]},
    ],
)
async def test_odd_gemini_reply_shapes_fail_softly(payload):
    result = await gateway_with(lambda r: httpx.Response(200, json=payload)).enrich(
        EnrichmentKind.VIDEO_FRAME, VideoFrameContext(frame_base64="aGVsbG8="),
    )
    assert not result.success
    assert result.error == "video_frame failed"


@pytest.mark.asyncio
async def test_malformed_structured_reply():
    result = await gateway_with(lambda r: chat_reply("I cannot produce quotes today.")).enrich(
        EnrichmentKind.QUOTE_GENERATION,
        QuoteGenerationContext(client_name="A", assessment_type="home"),
    )
    assert not result.success
    assert "no JSON object" in result.details


@pytest.mark.asyncio
async def test_schema_violation():
    bad = {"quotes": [{"name": "Empty", "items": [], "subtotal": 0, "tax": 0, "total": 0}]}
    result = await gateway_with(lambda r: chat_reply(json.dumps(bad))).enrich(
        EnrichmentKind.QUOTE_GENERATION,
        QuoteGenerationContext(client_name="A", assessment_type="home"),
    )
    assert not result.success


@pytest.mark.asyncio
async def test_cancellation_propagates():
    def handler(request):
        raise asyncio.CancelledError()

    with pytest.raises(asyncio.CancelledError):
        await gateway_with(handler).enrich(EnrichmentKind.RESPONSE_ANALYSIS, ANALYSIS_CTX)


# =====================================================================
# Room map batches
# =====================================================================


@pytest.mark.asyncio
async def test_room_map_keeps_confident_frames_only():
    replies = iter([
        gemini_reply('{"roomType": "bedroom", "confidence": 90}'),
        gemini_reply('{"roomType": "hallway", "confidence": 40}'),
        httpx.Response(503, json={"error": {"message": "busy"}}),
        gemini_reply('{"roomType": "bathroom", "confidence": 75}'),
    ])

    result = await gateway_with(lambda r: next(replies)).enrich(
        EnrichmentKind.ROOM_MAP, RoomMapContext(frames=["f1", "f2", "f3", "f4"]),
    )

    assert result.success
    assert [r.room_type for r in result.result] == ["bedroom", "bathroom"]
    assert result.model == "gemini-2.0-flash-vision"


@pytest.mark.asyncio
async def test_room_map_fails_without_confident_frames():
    result = await gateway_with(lambda r: gemini_reply('{"confidence": 10}')).enrich(
        EnrichmentKind.ROOM_MAP, RoomMapContext(frames=["f1", "f2"]),
    )
    assert not result.success


# =====================================================================
# Parsing helpers
# =====================================================================


def test_strip_code_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('  {"a": 1} ') == '{"a": 1}'


def test_extract_json_object_skips_prose_and_braces():
    text = 'Sure {not json} here it is: {"roomType": "garage"} hope that helps'
    assert extract_json_object(text) == {"roomType": "garage"}


def test_extract_json_object_rejects_arrays_only():
    with pytest.raises(StructuredOutputError):
        extract_json_object("[1, 2, 3]")


def test_parse_structured_validation_error():
    with pytest.raises(StructuredOutputError, match="QuoteOptions"):
        parse_structured('{"quotes": []}', QuoteOptions)
