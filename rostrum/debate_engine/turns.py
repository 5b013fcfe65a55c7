"""Turn order and round-completion rules.

The state machine is a pure function of the debate record, the statements
already stored and the current time. It never locks: two callers may both
conclude that it is their turn, and the storage layer's uniqueness
constraint on (debate, author, round) decides which write wins.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable

from rostrum.exceptions import InvalidTransition

from .models import Debate, Statement, as_utc
from .types import ALLOWED_TRANSITIONS, DebateStatus, is_missed_submission

logger = logging.getLogger(__name__)


class RoundAction(Enum):
    """What the caller should do with the debate right now."""

    WAIT = "wait"
    ADVANCE_ROUND = "advance_round"
    COMPLETE_DEBATE = "complete_debate"
    SKIP = "skip"


@dataclass(frozen=True)
class RoundDecision:
    action: RoundAction
    round_number: int
    reason: str = ""
    next_round: int | None = None
    next_deadline: datetime | None = None
    missed_participant_ids: tuple[str, ...] = field(default_factory=tuple)
    expired: bool = False
    requires_adjudication: bool = False


class TurnStateMachine:
    """Decides whose turn it is and whether the current round is over.

    One-on-one rounds always open with the challenger; the opponent may
    answer only after the challenger's statement for that round exists.
    Group rounds accept submissions from every active participant in any
    order.
    """

    def __init__(self, debate: Debate, statements: Iterable[Statement]):
        self.debate = debate
        self._all_statements = [s for s in statements if s.debate_id == debate.id]
        self._roster = debate.roster()
        self._round_statements: dict[str, Statement] = {}
        for statement in self._all_statements:
            if statement.round_number == debate.current_round:
                self._round_statements.setdefault(statement.author_id, statement)

    @property
    def roster(self) -> list[str]:
        return list(self._roster)

    @property
    def round_number(self) -> int:
        return self.debate.current_round

    def has_submitted(self, participant_id: str) -> bool:
        return participant_id in self._round_statements

    def missing_participants(self) -> list[str]:
        """Roster members without a statement for the current round, in roster order."""
        return [pid for pid in self._roster if not self.has_submitted(pid)]

    def is_challenger_turn(self) -> bool:
        if self.debate.is_group:
            return False
        return not self.has_submitted(self.debate.challenger_id)

    def is_opponent_turn(self) -> bool:
        if self.debate.is_group or self.debate.opponent_id is None:
            return False
        return self.has_submitted(self.debate.challenger_id) and not self.has_submitted(
            self.debate.opponent_id
        )

    def whose_turn(self) -> list[str]:
        """Participants allowed to submit next, ignoring status and deadline."""
        if self.debate.is_group:
            return self.missing_participants()
        if self.is_challenger_turn():
            return [self.debate.challenger_id]
        if self.is_opponent_turn():
            return [self.debate.opponent_id]
        return []

    def is_expired(self, now: datetime | None = None) -> bool:
        deadline = self.debate.round_deadline
        if deadline is None or now is None:
            return False
        return as_utc(deadline) <= as_utc(now)

    def can_submit(self, participant_id: str, now: datetime | None = None) -> bool:
        """Whether a statement from ``participant_id`` would be accepted now."""
        if self.debate.status != DebateStatus.ACTIVE:
            return False
        if self.is_expired(now):
            return False
        return participant_id in self.whose_turn()

    def all_submitted(self) -> bool:
        if not self.debate.is_group and self.debate.opponent_id is None:
            return False
        if not self._roster:
            return False
        return not self.missing_participants()

    def is_round_complete(self, now: datetime | None = None) -> bool:
        """Every expected participant submitted, or the round deadline passed."""
        return self.all_submitted() or self.is_expired(now)

    def has_genuine_statements(self) -> bool:
        return any(not is_missed_submission(s.content) for s in self._all_statements)

    def decide(
        self, now: datetime, default_duration: timedelta = timedelta(hours=24)
    ) -> RoundDecision:
        """Work out the transition this debate is due for at ``now``."""
        debate = self.debate
        round_number = debate.current_round

        if debate.status != DebateStatus.ACTIVE:
            return RoundDecision(
                RoundAction.SKIP,
                round_number,
                reason=f"Debate is not ACTIVE (status: {debate.status.value})",
            )

        if not debate.is_group and debate.opponent_id is None:
            return RoundDecision(RoundAction.SKIP, round_number, reason="Debate has no opponent")

        expired = self.is_expired(now)
        missing = tuple(self.missing_participants())

        if expired and not self.has_genuine_statements():
            # Nobody ever argued: close it without asking anyone to judge
            return RoundDecision(
                RoundAction.COMPLETE_DEBATE,
                round_number,
                reason="No statements submitted before the deadline - debate ended automatically",
                expired=True,
                requires_adjudication=False,
            )

        if not (self.all_submitted() or expired):
            return RoundDecision(
                RoundAction.WAIT,
                round_number,
                reason=f"Waiting for {', '.join(missing)}",
            )

        missed = missing if expired else ()
        if missed:
            logger.info(
                f"Round {round_number} of debate {debate.id} expired; missed by {', '.join(missed)}"
            )

        if round_number >= debate.total_rounds:
            return RoundDecision(
                RoundAction.COMPLETE_DEBATE,
                round_number,
                reason="Debate completed - last round finished",
                missed_participant_ids=missed,
                expired=expired,
                requires_adjudication=True,
            )

        return RoundDecision(
            RoundAction.ADVANCE_ROUND,
            round_number,
            reason=f"Debate advanced to round {round_number + 1}",
            next_round=round_number + 1,
            next_deadline=now + (debate.round_duration or default_duration),
            missed_participant_ids=missed,
            expired=expired,
        )


def transition_status(current: DebateStatus, requested: DebateStatus) -> DebateStatus:
    """Validate a status change and return the new status.

    Re-requesting the current status is a no-op so repeated advances stay
    harmless.

    Raises:
        InvalidTransition: the change is not in ``ALLOWED_TRANSITIONS``.
    """
    if current == requested:
        return current
    if requested not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransition(current.value, requested.value)
    return requested
