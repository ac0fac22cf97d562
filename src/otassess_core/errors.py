"""Domain exceptions raised by otassess_core services.

The server installs global handlers for these, so services raise and
routes stay on the happy path:

    NotFoundError          -> 404  (absent and not-owned are deliberately conflated)
    ForbiddenError         -> 403  (owned, but the action is not allowed yet)
    AnswerValidationError  -> 400
    PayloadTooLargeError   -> 413
    UpstreamError          -> 500, with ``details`` passed through to the caller

Plain ``ValueError`` is still used for malformed input and is mapped by
message pattern.
"""

from typing import Any


class NotFoundError(ValueError):
    """The entity does not exist, or belongs to another practitioner."""

    def __init__(self, entity: str, entity_id: Any = None) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: id={entity_id}")


class ForbiddenError(ValueError):
    """The requester owns the entity but the operation is not permitted."""


class AnswerValidationError(ValueError):
    """A draft answer failed the question's validation rules.

    ``field`` names the offending input, where one applies.
    """

    def __init__(self, message: str, *, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class PayloadTooLargeError(ValueError):
    """An upload exceeds the configured size limit."""


class UpstreamError(RuntimeError):
    """An external collaborator (AI provider, media storage) failed.

    ``details`` carries the upstream message and is returned to the client.
    """

    def __init__(self, message: str, details: str | None = None) -> None:
        self.details = details
        super().__init__(message)


class UploadError(UpstreamError):
    """Media bytes could not be stored."""


class StructuredOutputError(ValueError):
    """A model response could not be decoded into the expected schema."""
