"""Rule-based substitutes for failed or unconfigured AI calls."""

import pytest

from otassess_core.enrichment.fallbacks import (
    FALLBACK_ROOM_TYPES,
    build_frame_result,
    fallback_room_layout,
    frame_guidance,
    summary_fallback,
)
from otassess_core.models.enrichment import Dimensions, FrameAnalysis


# =====================================================================
# Frame guidance
# =====================================================================


@pytest.mark.parametrize(
    "frame_count, coverage, next_action, complete",
    [
        (1, 35, "continue", False),
        (2, 60, "continue", False),
        (3, 85, "continue", False),
        (4, 100, "move_to_next", True),
        (5, 40, "continue", False),
        (8, 70, "continue", True),
        (20, 90, "continue", True),
    ],
)
def test_frame_guidance(frame_count, coverage, next_action, complete):
    g = frame_guidance(frame_count)
    assert g.coverage_percent == coverage
    assert g.next_action == next_action
    assert g.is_complete is complete
    assert g.guidance


def test_frame_result_without_reading():
    result = build_frame_result(None, context=None, frame_count=1)
    assert result.room_type == "living"
    assert result.room_name == "Room"
    assert result.detected_room_type is None
    assert result.dimensions == Dimensions()
    assert result.features == ["door", "window", "light fixture"]
    assert result.coverage_percent == 35


def test_frame_result_merges_reading_with_guidance():
    reading = FrameAnalysis(
        room_type="bathroom",
        confidence=88,
        features=["grab rail"],
        estimated_dimensions=Dimensions(length=2.5, width=2.0, height=2.4),
        safety_issues=["slippery floor"],
    )
    result = build_frame_result(reading, context="Ensuite", frame_count=4)
    assert result.room_type == "bathroom"
    assert result.room_name == "Ensuite"
    assert result.detected_room_type == "bathroom"
    assert result.dimensions.length == 2.5
    assert result.safety_issues == ["slippery floor"]
    assert result.next_action == "move_to_next"
    assert result.is_complete


def test_frame_result_names_room_from_reading():
    result = build_frame_result(FrameAnalysis(room_type="kitchen"), context=None, frame_count=2)
    assert result.room_name == "Kitchen"


# =====================================================================
# Room layout and summary
# =====================================================================


def test_layout_has_at_least_two_rooms():
    rooms = fallback_room_layout(0)
    assert [r["room_type"] for r in rooms] == ["living", "kitchen"]


def test_layout_one_room_per_three_frames():
    rooms = fallback_room_layout(21)
    assert len(rooms) == 7
    # Types repeat after the list runs out and get a numeric suffix
    assert rooms[6]["room_type"] == FALLBACK_ROOM_TYPES[0]
    assert rooms[6]["name"] == "Living 2"
    assert rooms[1]["position_3d"] == {"x": 5, "y": 0, "z": 0}


def test_summary_fallback():
    text = summary_fallback("Margaret Hill", "home", 4)
    assert text == (
        "Assessment for Margaret Hill (home). 4 media items captured. Detailed analysis pending."
    )
