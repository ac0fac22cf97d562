"""AI-backed services with a stubbed gateway.

The gateway is an ``AsyncMock`` whose ``enrich`` returns a prepared
``EnrichmentResult``; the tests check how each service turns that result
(or a soft failure) into its response, and what context it sent.
"""

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from otassess_core.ai import AIService, recompute_quote
from otassess_core.equipment import EquipmentService
from otassess_core.errors import AnswerValidationError, NotFoundError, UpstreamError
from otassess_core.house_maps import HouseMapService, layout_from_readings
from otassess_core.models.ai import (
    GenerateMapRequest,
    JustificationRequest,
    ParseCatalogRequest,
    SupportChatRequest,
    VideoFrameRequest,
)
from otassess_core.models.enrichment import (
    CatalogExtraction,
    Dimensions,
    EnrichmentKind,
    EnrichmentResult,
    FrameAnalysis,
    GeneratedQuote,
    QuoteLine,
    QuoteOptions,
)


def _now():
    return datetime(2025, 6, 1, tzinfo=timezone.utc)


@dataclass
class MockEquipmentRow:
    name: str
    category: str = "bathroom"
    price: Decimal = Decimal("85.50")
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    description: str | None = None
    supplier_price: Decimal | None = None
    margin: Decimal | None = None
    brand: str | None = None
    model: str | None = None
    specifications: str | None = None
    government_approved: bool = False
    approval_reference: str | None = None
    image_url: str | None = None
    source_catalog: str | None = None
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)


def ok(result, model="test-model"):
    return EnrichmentResult(success=True, result=result, model=model)


def failed(error="openai provider is not configured", details=None):
    return EnrichmentResult(success=False, error=error, details=details)


@pytest.fixture
def gateway():
    return AsyncMock()


@pytest.fixture
def catalog():
    repo = AsyncMock()
    repo.list.return_value = [
        MockEquipmentRow("Shower chair", government_approved=True),
        MockEquipmentRow("Bed rail", category="bedroom", price=Decimal("120")),
    ]
    return repo


@pytest.fixture
def ai(store, repos, gateway, catalog):
    svc = AIService(store, gateway)
    svc._assessments = repos["assessments"]
    svc._responses = repos["responses"]
    svc._equipment = catalog
    return svc


@pytest.fixture
def assessment(data):
    return data.add_assessment(data.add_client(name="Margaret Hill"), assessment_type="mobility_scooter")


def sent_context(gateway):
    kind, context = gateway.enrich.await_args.args
    return kind, context


# =====================================================================
# Recommendations and quotes
# =====================================================================


@pytest.mark.asyncio
async def test_recommendations_context(ai, gateway, db, ctx, assessment, repos):
    repos["assessments"].media_counts[assessment.id] = {"photo": 3}
    gateway.enrich.return_value = ok("Install a shower chair.")

    resp = await ai.equipment_recommendations(db, ctx, assessment.id)

    assert resp.recommendations == "Install a shower chair."
    assert resp.equipment_count == 2
    kind, context = sent_context(gateway)
    assert kind == EnrichmentKind.EQUIPMENT_RECOMMENDATIONS
    assert context.client_name == "Margaret Hill"
    assert context.assessment_type == "mobility_scooter"
    assert context.media_count == 3
    assert [c.name for c in context.catalog] == ["Shower chair", "Bed rail"]


@pytest.mark.asyncio
async def test_recommendations_failure_is_upstream_error(ai, gateway, db, ctx, assessment):
    gateway.enrich.return_value = failed(details="rate limited")
    with pytest.raises(UpstreamError) as exc_info:
        await ai.equipment_recommendations(db, ctx, assessment.id)
    assert exc_info.value.details == "rate limited"


def test_recompute_quote_overrides_model_arithmetic():
    quote = GeneratedQuote(
        name="Essential",
        items=[QuoteLine(name="Shower chair", quantity=2, price=85.5)],
        subtotal=1.0,
        tax=1.0,
        total=999.0,
    )
    fixed = recompute_quote(quote)
    assert (fixed.subtotal, fixed.tax, fixed.total) == (171.0, 17.1, 188.1)


@pytest.mark.asyncio
async def test_generate_quotes_recomputes_totals(ai, gateway, db, ctx, assessment):
    options = QuoteOptions(quotes=[
        GeneratedQuote(
            name="Essential",
            items=[QuoteLine(name="Bed rail", price=120)],
            subtotal=120, tax=0, total=120,
        ),
    ])
    gateway.enrich.return_value = ok(options, model="grok-4")

    resp = await ai.generate_quotes(db, ctx, assessment.id)

    assert resp.model == "grok-4"
    assert resp.quotes[0].tax == 12.0
    assert resp.quotes[0].total == 132.0


# =====================================================================
# Justification
# =====================================================================


@pytest.mark.asyncio
async def test_justification_quotes_saved_findings(ai, gateway, catalog, db, ctx, data, assessment):
    chair = MockEquipmentRow("Shower chair")
    catalog.get.return_value = chair
    data.add_response(
        assessment, question_id="scooter_user_2", section_id="scooter_user", answer="No",
    )
    data.add_response(
        assessment,
        question_id="scooter_op_1",
        section_id="scooter_operation",
        answer=json.dumps(["Steering tiller", "Horn"]),
        needs_follow_up=True,
    )
    data.add_response(
        assessment, question_id="scooter_user_1", section_id="scooter_user", answer="",
    )
    gateway.enrich.return_value = ok("Funding is warranted.")

    resp = await ai.equipment_justification(
        db, ctx, JustificationRequest(assessment_id=assessment.id, equipment_id=chair.id),
    )

    assert resp.justification == "Funding is warranted."
    _, context = sent_context(gateway)
    assert context.equipment_name == "Shower chair"
    assert context.price == 85.5
    # Follow-up items first, blank answers left out
    assert context.findings == [
        "Which controls can the client operate reliably?: Horn, Steering tiller",
        "Does the client have adequate vision for outdoor scooter use?: No",
    ]


@pytest.mark.asyncio
async def test_justification_unknown_equipment(ai, catalog, db, ctx, assessment):
    catalog.get.return_value = None
    with pytest.raises(NotFoundError):
        await ai.equipment_justification(
            db, ctx, JustificationRequest(assessment_id=assessment.id, equipment_id=uuid.uuid4()),
        )


# =====================================================================
# Video frames and chat
# =====================================================================


@pytest.mark.asyncio
async def test_video_frame_uses_model_reading(ai, gateway):
    gateway.enrich.return_value = ok(
        FrameAnalysis(room_type="bathroom", confidence=90, features=["grab rail"]),
        model="gemini-2.0-flash",
    )
    resp = await ai.analyze_video_frame(
        VideoFrameRequest(frame_base64="aGk=", rooms_scanned=["Kitchen", "Lounge", "Hall"]),
    )
    assert resp.model == "gemini-2.0-flash"
    assert resp.analysis.room_type == "bathroom"
    # Three rooms already scanned makes this the fourth frame
    assert resp.analysis.next_action == "move_to_next"


@pytest.mark.asyncio
async def test_video_frame_never_fails(ai, gateway):
    gateway.enrich.return_value = failed("gemini provider is not configured")
    resp = await ai.analyze_video_frame(VideoFrameRequest(frame_base64="aGk="))
    assert resp.success
    assert resp.model == "rule-based-guidance"
    assert resp.analysis.room_name == "Room"
    assert resp.analysis.coverage_percent == 35


@pytest.mark.asyncio
async def test_support_chat(ai, gateway):
    gateway.enrich.return_value = ok("Tap the camera icon.")
    resp = await ai.support_chat(SupportChatRequest(
        message="How do I add a photo?",
        conversation_history=[{"role": "user", "content": "Hi"}],
    ))
    assert resp.response == "Tap the camera icon."
    _, context = sent_context(gateway)
    assert context.history[0].content == "Hi"


@pytest.mark.asyncio
async def test_support_chat_failure(ai, gateway):
    gateway.enrich.return_value = failed()
    with pytest.raises(UpstreamError, match="support response"):
        await ai.support_chat(SupportChatRequest(message="Help"))


# =====================================================================
# House maps
# =====================================================================


def test_layout_from_readings_splits_and_dedupes():
    rooms, areas = layout_from_readings([
        FrameAnalysis(room_type="kitchen", estimated_dimensions=Dimensions(length=4, width=3)),
        FrameAnalysis(room_type="kitchen"),
        FrameAnalysis(room_type="living_room"),
        FrameAnalysis(room_type="backyard", is_outdoor=True, features=["steps"]),
    ])
    assert [r["name"] for r in rooms] == ["Kitchen", "Living Room"]
    assert rooms[0]["length"] == 4
    assert rooms[1]["position_3d"] == {"x": 5, "y": 0, "z": 0}
    assert areas == [{
        "name": "Backyard", "area_type": "backyard", "length": 4.0, "width": 3.5, "features": ["steps"],
    }]


@dataclass
class MockMapRow:
    assessment_id: uuid.UUID
    property_type: str
    total_area: float
    floors: int
    ai_generated: bool
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)


@pytest.fixture
def maps(gateway, repos):
    repo = AsyncMock()

    async def replace(db, *, assessment_id, map_fields, rooms, areas):
        repo.saved_rooms = rooms
        return MockMapRow(assessment_id=assessment_id, **map_fields)

    repo.replace.side_effect = replace
    repo.list_rooms.return_value = []
    repo.list_areas.return_value = []
    repo.list_placements.return_value = []

    svc = HouseMapService(gateway)
    svc._repo = repo
    svc._assessments = repos["assessments"]
    return svc


@pytest.mark.asyncio
async def test_generate_map_from_readings(maps, gateway, db, ctx, assessment):
    gateway.enrich.return_value = ok(
        [FrameAnalysis(room_type="bedroom", estimated_dimensions=Dimensions(length=4, width=3))],
        model="gemini-2.0-flash-vision",
    )
    result = await maps.generate_map(
        db, ctx, GenerateMapRequest(assessment_id=assessment.id, frames=["f1", "f2"]),
    )
    assert result.ai_analyzed
    assert result.model == "gemini-2.0-flash-vision"
    assert result.house_map.total_area == 12.0
    assert maps._repo.saved_rooms[0]["room_type"] == "bedroom"


@pytest.mark.asyncio
async def test_generate_map_falls_back_to_rule_based_layout(maps, gateway, db, ctx, assessment):
    gateway.enrich.return_value = failed("room_map failed", details="no confident frames")
    result = await maps.generate_map(
        db, ctx, GenerateMapRequest(assessment_id=assessment.id, frames=["f"] * 9),
    )
    assert not result.ai_analyzed
    assert result.model == "rule-based-generation"
    assert len(maps._repo.saved_rooms) == 3
    assert result.house_map.total_area == 54.0


# =====================================================================
# Catalog import
# =====================================================================


@pytest.fixture
def equipment(gateway):
    repo = AsyncMock()

    async def create(db, **fields):
        return MockEquipmentRow(**fields)

    repo.create.side_effect = create
    storage = AsyncMock()
    svc = EquipmentService(gateway, storage)
    svc._repo = repo
    return svc


@pytest.mark.asyncio
async def test_parse_catalog_skips_invalid_items(equipment, gateway, db, ctx):
    gateway.enrich.return_value = ok(CatalogExtraction(items=[
        {"name": "Shower chair", "category": "bathroom", "price": 85.5},
        {"name": "", "price": 10},
        {"name": "Smart plug", "category": "gadgets", "price": 30, "governmentApproved": True},
    ]))

    result = await equipment.parse_catalog(
        db, ctx, ParseCatalogRequest(text="Shower chair $85.50\nSmart plug $30", filename="cat.txt"),
    )

    assert result.attempted_count == 3
    assert result.created_count == 2
    assert result.failed_count == 1
    assert result.equipment[1].government_approved
    assert result.equipment[0].source_catalog == "cat.txt"


@pytest.mark.asyncio
async def test_parse_catalog_reads_uploaded_text(equipment, gateway, db, ctx):
    equipment._storage.read.return_value = b"Walker $150"
    gateway.enrich.return_value = ok(CatalogExtraction(items=[]))

    await equipment.parse_catalog(db, ctx, ParseCatalogRequest(file_url="/uploads/abc.txt"))

    _, context = sent_context(gateway)
    assert context.text == "Walker $150"
    assert context.filename == "abc.txt"


@pytest.mark.asyncio
async def test_parse_catalog_rejects_pdf(equipment, db, ctx):
    equipment._storage.read.return_value = b"%PDF-1.7 ..."
    with pytest.raises(AnswerValidationError, match="PDF"):
        await equipment.parse_catalog(db, ctx, ParseCatalogRequest(file_url="/uploads/cat.pdf"))


@pytest.mark.asyncio
async def test_parse_catalog_needs_input(equipment, db, ctx):
    with pytest.raises(AnswerValidationError, match="text or file_url"):
        await equipment.parse_catalog(db, ctx, ParseCatalogRequest(text="   "))
