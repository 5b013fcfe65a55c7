"""Data models for the debate engine."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from .types import ChallengeType, DebateStatus, Position


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Align ``value`` to UTC so naive and aware datetimes compare safely.

    Naive values are taken to already be in UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass
class Statement:
    """One submission by one author in one round."""

    debate_id: str
    author_id: str
    round_number: int
    content: str
    created_at: datetime = field(default_factory=utc_now)


@dataclass
class DebateParticipant:
    """A member of a group debate roster."""

    user_id: str
    display_name: str
    position: Position = Position.ARGUING
    active: bool = True
    is_ai: bool = False


@dataclass
class Debate:
    """Debate state as handed over by the persistence layer."""

    id: str
    topic: str
    challenger_id: str
    challenger_name: str = ""
    challenger_position: Position = Position.FOR
    opponent_id: str | None = None
    opponent_name: str = ""
    opponent_position: Position = Position.AGAINST
    challenge_type: ChallengeType = ChallengeType.ONE_ON_ONE
    participants: list[DebateParticipant] = field(default_factory=list)
    description: str | None = None
    total_rounds: int = 3
    current_round: int = 1
    status: DebateStatus = DebateStatus.WAITING
    round_deadline: datetime | None = None
    round_duration: timedelta | None = None  # None: use the configured default
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_group(self) -> bool:
        return self.challenge_type == ChallengeType.GROUP

    def roster(self) -> list[str]:
        """Ids of the participants expected to submit this round, in turn order."""
        if self.is_group:
            return [p.user_id for p in self.participants if p.active]
        if self.opponent_id is None:
            return [self.challenger_id]
        return [self.challenger_id, self.opponent_id]

    def display_name_of(self, participant_id: str) -> str:
        if participant_id == self.challenger_id and self.challenger_name:
            return self.challenger_name
        if participant_id == self.opponent_id and self.opponent_name:
            return self.opponent_name
        for participant in self.participants:
            if participant.user_id == participant_id:
                return participant.display_name
        return participant_id

    def position_of(self, participant_id: str) -> Position:
        if self.is_group:
            for participant in self.participants:
                if participant.user_id == participant_id:
                    return participant.position
            return Position.ARGUING
        if participant_id == self.challenger_id:
            return self.challenger_position
        if participant_id == self.opponent_id:
            return self.opponent_position
        raise ValueError(f"{participant_id} is not a participant in debate {self.id}")
