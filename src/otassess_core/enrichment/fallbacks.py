"""Rule-based substitutes used when a model call fails or is not configured."""

from otassess_core.models.enrichment import (
    Dimensions,
    FrameAnalysis,
    FrameGuidance,
    VideoFrameResult,
)

DEFAULT_FRAME_FEATURES = ["door", "window", "light fixture"]
FALLBACK_ROOM_FEATURES = ["door", "window", "ceiling light"]
FALLBACK_ROOM_TYPES = ["living", "kitchen", "bedroom", "bathroom", "dining", "hallway"]
# Square metres assumed per generated room
FALLBACK_ROOM_AREA = 18
ROOM_SPACING = 5


def frame_guidance(frame_count: int) -> FrameGuidance:
    """Scanning instructions keyed on how many frames this walkthrough has sent.

    Four frames make one room; after that the user is nudged onwards.
    """
    if frame_count <= 1:
        guidance = FrameGuidance(
            guidance="Good! Now slowly pan to your right to capture the rest of this space",
            coverage_percent=35,
        )
    elif frame_count == 2:
        guidance = FrameGuidance(
            guidance="Great! Turn around 180 degrees to see the opposite wall",
            coverage_percent=60,
        )
    elif frame_count == 3:
        guidance = FrameGuidance(
            guidance="Almost done with this room! Capture any remaining corners or features",
            coverage_percent=85,
        )
    elif frame_count == 4:
        guidance = FrameGuidance(
            guidance="Room complete! Move to the next room and start recording there",
            next_action="move_to_next",
            coverage_percent=100,
        )
    else:
        guidance = FrameGuidance(
            guidance="Continue to the next area. Make sure to capture all rooms and outdoor spaces",
            coverage_percent=min(30 + (frame_count - 4) * 10, 90),
        )
    return guidance.model_copy(update={"is_complete": frame_count % 4 == 0})


def build_frame_result(
    analysis: FrameAnalysis | None, *, context: str | None, frame_count: int,
) -> VideoFrameResult:
    """Merge an optional model reading of a frame with rule-based guidance."""
    guidance = frame_guidance(frame_count)
    reading = analysis or FrameAnalysis()
    room_type = reading.room_type or "living"
    room_name = context or (room_type.capitalize() if analysis else "Room")
    return VideoFrameResult(
        room_type=room_type,
        room_name=room_name,
        detected_room_type=room_type if analysis else None,
        confidence=reading.confidence,
        dimensions=reading.estimated_dimensions or Dimensions(),
        features=reading.features or list(DEFAULT_FRAME_FEATURES),
        coverage_percent=guidance.coverage_percent,
        guidance=guidance.guidance,
        safety_issues=reading.safety_issues,
        is_complete=guidance.is_complete,
        next_action=guidance.next_action,
    )


def fallback_room_layout(frame_count: int) -> list[dict]:
    """A plausible single-floor layout: one room per three frames, at least two."""
    rooms = []
    for i in range(max(2, frame_count // 3)):
        room_type = FALLBACK_ROOM_TYPES[i % len(FALLBACK_ROOM_TYPES)]
        suffix = f" {i // len(FALLBACK_ROOM_TYPES) + 1}" if i >= len(FALLBACK_ROOM_TYPES) else ""
        dims = Dimensions()
        rooms.append({
            "name": f"{room_type.capitalize()}{suffix}",
            "room_type": room_type,
            "floor": 1,
            "length": dims.length,
            "width": dims.width,
            "height": dims.height,
            "position_3d": {"x": i * ROOM_SPACING, "y": 0, "z": 0},
            "features": list(FALLBACK_ROOM_FEATURES),
        })
    return rooms


def summary_fallback(client_name: str, assessment_type: str, media_count: int) -> str:
    return (
        f"Assessment for {client_name} ({assessment_type}). "
        f"{media_count} media items captured. Detailed analysis pending."
    )
