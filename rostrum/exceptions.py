"""Exception hierarchy shared by the adjudication and orchestration code."""

from __future__ import annotations

RAW_EXCERPT_LIMIT = 500


def truncate_raw(text: str | None, limit: int = RAW_EXCERPT_LIMIT) -> str:
    """Shorten raw collaborator output for diagnostics."""
    if not text:
        return ""
    if len(text) <= limit:
        return text
    return f"{text[:limit]}..."


class RostrumError(Exception):
    """Base class for all engine errors."""


class CollaboratorUnavailable(RostrumError):
    """The text-generation service failed, timed out or returned nothing."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        self.message = message
        super().__init__(f"{provider}: {message}")


class ResponseError(RostrumError):
    """Collaborator text could not be turned into the expected structure."""

    kind = "response_error"

    def __init__(self, message: str, field: str | None = None, raw_text: str | None = None):
        self.message = message
        self.field = field
        self.raw_excerpt = truncate_raw(raw_text)
        super().__init__(message)


class MalformedResponse(ResponseError):
    """Text was not parseable as JSON after fence stripping and repair."""

    kind = "malformed_response"


class SchemaViolation(ResponseError):
    """Parsed JSON is missing a required field or holds a wrong type."""

    kind = "schema_violation"


class AdjudicationError(RostrumError):
    """A verdict could not be produced; callers decide whether to retry."""

    COLLABORATOR_UNAVAILABLE = "collaborator_unavailable"
    MALFORMED_RESPONSE = "malformed_response"
    SCHEMA_VIOLATION = "schema_violation"

    def __init__(self, kind: str, message: str):
        self.kind = kind
        self.message = message
        super().__init__(f"Adjudication failed ({kind}): {message}")


class DuplicateSubmission(RostrumError):
    """An author already has a statement for this debate round."""

    def __init__(self, debate_id: str, author_id: str, round_number: int):
        self.debate_id = debate_id
        self.author_id = author_id
        self.round_number = round_number
        super().__init__(
            f"Author {author_id} already submitted round {round_number} of debate {debate_id}"
        )


class DebateNotFound(RostrumError):
    def __init__(self, debate_id: str):
        self.debate_id = debate_id
        super().__init__(f"Debate {debate_id} not found")


class InvalidTransition(RostrumError):
    """Requested debate status change is not allowed."""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move debate from {current} to {requested}")


class NotYourTurn(RostrumError):
    def __init__(self, debate_id: str, participant_id: str, round_number: int):
        self.debate_id = debate_id
        self.participant_id = participant_id
        self.round_number = round_number
        super().__init__(
            f"Participant {participant_id} may not submit in round {round_number} of debate {debate_id}"
        )
