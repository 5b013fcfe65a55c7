"""Idempotent debate advancement on top of the turn state machine.

Every entry point re-reads the debate from the store, asks
``TurnStateMachine`` what is due and applies it. Running any of them
twice with nothing changed in between is a no-op, so schedulers may call
``advance_debate`` as often as they like.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Awaitable, Callable

from rostrum.config.settings import DebateRulesConfig
from rostrum.exceptions import DebateNotFound, DuplicateSubmission, NotYourTurn, RostrumError

from .ai_debater import AIDebater
from .models import Debate, Statement, as_utc, utc_now
from .personalities import DebaterPersonality
from .store import DebateStore
from .turns import RoundAction, TurnStateMachine, transition_status
from .types import MISSED_DEADLINE_CONTENT, DebateStatus

logger = logging.getLogger(__name__)


@dataclass
class AdvanceResult:
    """Outcome of one ``advance_debate`` call."""

    debate_id: str
    action: RoundAction
    round_number: int
    status: DebateStatus
    reason: str = ""
    missed_participant_ids: tuple[str, ...] = field(default_factory=tuple)
    requires_adjudication: bool = False

    @property
    def advanced(self) -> bool:
        return self.action == RoundAction.ADVANCE_ROUND

    @property
    def completed(self) -> bool:
        return self.action == RoundAction.COMPLETE_DEBATE

    @property
    def skipped(self) -> bool:
        return self.action == RoundAction.SKIP


@dataclass
class SubmissionResult:
    """What happened to a submitted statement.

    ``accepted`` is False when a concurrent writer already stored a
    statement for the same author and round.
    """

    accepted: bool
    statement: Statement | None
    advance: AdvanceResult


CompletionHook = Callable[[Debate, AdvanceResult], Awaitable[None]]


class DebateOrchestrator:
    """Applies turn decisions to stored debates."""

    def __init__(
        self,
        store: DebateStore,
        rules: DebateRulesConfig | None = None,
        clock: Callable[[], datetime] | None = None,
        on_completed: CompletionHook | None = None,
        debater: AIDebater | None = None,
    ):
        self.store = store
        self.rules = rules or DebateRulesConfig()
        self.clock = clock or utc_now
        self.on_completed = on_completed
        self.debater = debater

    @property
    def round_duration(self) -> timedelta:
        return timedelta(hours=self.rules.round_duration_hours)

    async def _load(self, debate_id: str) -> tuple[Debate, list[Statement]]:
        debate = await self.store.get_debate(debate_id)
        if debate is None:
            raise DebateNotFound(debate_id)
        statements = await self.store.list_statements(debate_id)
        return debate, statements

    async def activate_debate(self, debate_id: str) -> Debate:
        """Move a WAITING debate to ACTIVE and open round one."""
        debate, _ = await self._load(debate_id)
        new_status = transition_status(debate.status, DebateStatus.ACTIVE)
        if new_status == debate.status:
            return debate

        deadline = self.clock() + (debate.round_duration or self.round_duration)
        await self.store.update_debate_status(debate_id, new_status)
        await self.store.update_debate_round(debate_id, 1, deadline)
        logger.info(f"Debate {debate_id} started; round 1 closes at {deadline.isoformat()}")

        debate.status = new_status
        debate.current_round = 1
        debate.round_deadline = deadline
        return debate

    async def cancel_debate(self, debate_id: str) -> None:
        debate, _ = await self._load(debate_id)
        new_status = transition_status(debate.status, DebateStatus.CANCELLED)
        if new_status != debate.status:
            await self.store.update_debate_status(debate_id, new_status)
            logger.info(f"Debate {debate_id} cancelled")

    async def submit_statement(
        self, debate_id: str, author_id: str, content: str
    ) -> SubmissionResult:
        """Store ``author_id``'s statement for the current round, then advance.

        Raises:
            DebateNotFound: no such debate.
            NotYourTurn: the author may not submit right now.
            ValueError: the content is blank.
        """
        debate, statements = await self._load(debate_id)
        machine = TurnStateMachine(debate, statements)

        if not machine.can_submit(author_id, self.clock()):
            raise NotYourTurn(debate_id, author_id, debate.current_round)

        text = content.strip()
        if not text:
            raise ValueError("Statement content cannot be empty")

        try:
            statement = await self.store.create_statement(
                debate_id, author_id, debate.current_round, text
            )
        except DuplicateSubmission as e:
            logger.info(f"Lost submission race, re-evaluating debate {debate_id}: {e}")
            return SubmissionResult(False, None, await self.advance_debate(debate_id))

        logger.info(
            f"Statement stored for {author_id} in round {debate.current_round} of debate {debate_id}"
        )
        return SubmissionResult(True, statement, await self.advance_debate(debate_id))

    async def advance_debate(self, debate_id: str) -> AdvanceResult:
        """Apply whatever transition the debate is due for right now."""
        debate, statements = await self._load(debate_id)
        decision = TurnStateMachine(debate, statements).decide(
            self.clock(), default_duration=self.round_duration
        )

        result = AdvanceResult(
            debate_id=debate_id,
            action=decision.action,
            round_number=decision.round_number,
            status=debate.status,
            reason=decision.reason,
            missed_participant_ids=decision.missed_participant_ids,
            requires_adjudication=decision.requires_adjudication,
        )

        if decision.action in (RoundAction.WAIT, RoundAction.SKIP):
            logger.debug(f"Debate {debate_id}: {decision.reason}")
            return result

        for participant_id in decision.missed_participant_ids:
            await self._write_missed_marker(debate, participant_id)

        if decision.action == RoundAction.ADVANCE_ROUND:
            await self.store.update_debate_round(
                debate_id, decision.next_round, decision.next_deadline
            )
            logger.info(f"Debate {debate_id} advanced to round {decision.next_round}")
            return result

        result.status = transition_status(debate.status, DebateStatus.COMPLETED)
        await self.store.complete_debate(debate_id)
        logger.info(f"Debate {debate_id} completed: {decision.reason}")

        if decision.requires_adjudication and self.on_completed is not None:
            debate.status = result.status
            try:
                await self.on_completed(debate, result)
            except Exception as e:
                # The debate stays COMPLETED and unjudged; a later run may retry
                logger.error(
                    f"Completion handler failed for debate {debate_id}: {type(e).__name__}: {e}"
                )
        return result

    async def _write_missed_marker(self, debate: Debate, participant_id: str) -> None:
        try:
            await self.store.create_statement(
                debate.id, participant_id, debate.current_round, MISSED_DEADLINE_CONTENT
            )
        except DuplicateSubmission:
            logger.info(
                f"{participant_id} submitted round {debate.current_round} of debate "
                f"{debate.id} concurrently; keeping their statement"
            )
        else:
            logger.info(
                f"Recorded missed deadline for {participant_id} in round "
                f"{debate.current_round} of debate {debate.id}"
            )

    async def advance_expired_debates(self) -> list[AdvanceResult]:
        """Advance every ACTIVE debate whose round deadline has passed."""
        now = self.clock()
        results: list[AdvanceResult] = []

        for debate in await self.store.list_active_debates():
            if debate.round_deadline is None or as_utc(debate.round_deadline) > as_utc(now):
                continue
            try:
                results.append(await self.advance_debate(debate.id))
            except RostrumError as e:
                logger.error(f"Error processing expired debate {debate.id}: {e}")

        logger.info(f"Processed {len(results)} expired debates")
        return results

    async def trigger_ai_response(
        self,
        debate_id: str,
        participant_id: str,
        personality: DebaterPersonality | str | None = None,
    ) -> bool:
        """Generate and store an AI participant's statement if it is their turn.

        Returns False when it is not their turn or another writer got there
        first.

        Raises:
            CollaboratorUnavailable: generation failed.
        """
        if self.debater is None:
            raise RuntimeError("No AI debater configured")

        debate, statements = await self._load(debate_id)
        if not TurnStateMachine(debate, statements).can_submit(participant_id, self.clock()):
            logger.info(f"Not {participant_id}'s turn in debate {debate_id}, skipping")
            return False

        round_number = debate.current_round
        content = await self.debater.compose_statement(
            debate, statements, participant_id, personality
        )

        # Generation is slow; the state may have moved on meanwhile
        fresh, fresh_statements = await self._load(debate_id)
        if fresh.current_round != round_number or TurnStateMachine(
            fresh, fresh_statements
        ).has_submitted(participant_id):
            logger.info(f"Debate {debate_id} moved on during generation, discarding response")
            return False

        try:
            await self.store.create_statement(
                debate_id, participant_id, round_number, content
            )
        except DuplicateSubmission:
            logger.info(f"Duplicate AI statement for {participant_id} in debate {debate_id}")
            return False

        await self.advance_debate(debate_id)
        return True
