"""Per-request caller identity passed explicitly into every service call."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RequestContext:
    """Who is calling.

    ``user_id`` is the practitioner; ``session_id`` is the client session
    (device) and is informational only.
    """

    user_id: str
    session_id: str | None = None

    def __str__(self) -> str:
        if self.session_id:
            return f"user={self.user_id} session={self.session_id}"
        return f"user={self.user_id}"
