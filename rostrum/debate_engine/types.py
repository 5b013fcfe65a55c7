"""Shared types and enums for the debate engine."""

from enum import Enum

# Content written on behalf of a participant who let the round deadline pass
MISSED_DEADLINE_CONTENT = "[No submission - Time expired]"

_MISSED_MARKERS = ("[no submission - time expired]", "time expired")


def is_missed_submission(content: str | None) -> bool:
    """True when statement content signals an expired or missed submission."""
    if content is None:
        return True
    lowered = content.lower()
    return any(marker in lowered for marker in _MISSED_MARKERS)


class DebateStatus(Enum):
    """Lifecycle states of a debate."""

    WAITING = "WAITING"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    VERDICT_READY = "VERDICT_READY"
    CANCELLED = "CANCELLED"


ALLOWED_TRANSITIONS: dict[DebateStatus, frozenset[DebateStatus]] = {
    DebateStatus.WAITING: frozenset({DebateStatus.ACTIVE, DebateStatus.CANCELLED}),
    DebateStatus.ACTIVE: frozenset({DebateStatus.COMPLETED, DebateStatus.CANCELLED}),
    DebateStatus.COMPLETED: frozenset({DebateStatus.VERDICT_READY}),
    DebateStatus.VERDICT_READY: frozenset(),
    DebateStatus.CANCELLED: frozenset(),
}


class ChallengeType(Enum):
    """How participants take turns."""

    ONE_ON_ONE = "ONE_ON_ONE"
    GROUP = "GROUP"  # King of the Hill: simultaneous submissions


class Position(Enum):
    """Debate positions."""

    FOR = "FOR"
    AGAINST = "AGAINST"
    ARGUING = "ARGUING"  # King of the Hill has no sides
