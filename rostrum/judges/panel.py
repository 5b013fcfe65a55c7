"""Multi-judge panels, majority voting, Elo rating changes and appeals."""

import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable, List, Optional, Sequence

from rostrum.config.settings import DebateRulesConfig, GenerationSettings
from rostrum.debate_engine.models import Debate
from rostrum.debate_engine.store import DebateStore
from rostrum.debate_engine.turns import transition_status
from rostrum.debate_engine.types import DebateStatus
from rostrum.exceptions import (
    AdjudicationError,
    CollaboratorUnavailable,
    DebateNotFound,
    InvalidTransition,
)
from rostrum.models.usage import timed_completion
from rostrum.validation import strip_code_fences

from .ai_judge import VerdictEngine
from .base import VerdictContext, VerdictResult, Winner
from .personas import JUDGE_PERSONAS, JudgePersona

logger = logging.getLogger(__name__)


def select_judges(
    personas: Sequence[JudgePersona],
    count: int,
    rng: Optional[random.Random] = None,
    exclude: Iterable[str] = (),
) -> List[JudgePersona]:
    """Draw up to ``count`` distinct judges at random, skipping names in ``exclude``."""
    excluded = set(exclude)
    pool = [p for p in personas if p.name not in excluded]
    if not pool:
        raise ValueError("No judges available")
    rng = rng or random.Random()
    return rng.sample(pool, min(count, len(pool)))


def tally_votes(verdicts: Sequence[VerdictResult]) -> Winner:
    """Strict majority: a side wins only with more votes than each other outcome."""
    challenger = sum(1 for v in verdicts if v.winner == Winner.CHALLENGER)
    opponent = sum(1 for v in verdicts if v.winner == Winner.OPPONENT)
    ties = sum(1 for v in verdicts if v.winner == Winner.TIE)

    if challenger > opponent and challenger > ties:
        return Winner.CHALLENGER
    if opponent > challenger and opponent > ties:
        return Winner.OPPONENT
    return Winner.TIE


def calculate_elo_change(
    player_elo: float, opponent_elo: float, result: float, k_factor: int = 32
) -> int:
    """Rating change for ``player``; ``result`` is 1 for a win, 0.5 tie, 0 loss."""
    expected = 1 / (1 + 10 ** ((opponent_elo - player_elo) / 400))
    return round(k_factor * (result - expected))


@dataclass
class PanelDecision:
    """Combined outcome of every judge on the panel."""

    verdicts: List[VerdictResult]
    winner: Winner
    challenger_votes: int
    opponent_votes: int
    tie_votes: int
    challenger_total: float
    opponent_total: float
    challenger_elo_change: int = 0
    opponent_elo_change: int = 0
    judges: List[str] = field(default_factory=list)

    @property
    def max_total(self) -> int:
        return 100 * len(self.verdicts)


class JudgePanel:
    """Runs several judge personas over the same debate."""

    def __init__(
        self,
        engine: VerdictEngine,
        rules: Optional[DebateRulesConfig] = None,
        personas: Optional[Sequence[JudgePersona]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.engine = engine
        self.rules = rules or DebateRulesConfig()
        self.personas = list(personas) if personas is not None else list(JUDGE_PERSONAS)
        self.rng = rng or random.Random()

    async def deliberate(
        self,
        context: VerdictContext,
        judges: Optional[Sequence[JudgePersona]] = None,
        subject_id: Optional[str] = None,
        challenger_elo: Optional[float] = None,
        opponent_elo: Optional[float] = None,
    ) -> PanelDecision:
        """Collect a verdict from every judge and combine them.

        Raises:
            AdjudicationError: if any judge fails. Partial panels are not
                scored.
        """
        if judges is None:
            judges = select_judges(self.personas, self.rules.judge_panel_size, self.rng)
        if not judges:
            raise ValueError("A panel needs at least one judge")

        logger.info(
            f"Panel of {len(judges)} judging '{context.topic}': "
            f"{', '.join(j.name for j in judges)}"
        )
        outcomes = await asyncio.gather(
            *(
                self.engine.judge(j.system_prompt, context, subject_id=subject_id, judge_name=j.name)
                for j in judges
            ),
            return_exceptions=True,
        )

        failures = []
        for judge, outcome in zip(judges, outcomes):
            if isinstance(outcome, AdjudicationError):
                logger.error(f"Judge {judge.name} failed: {outcome}")
                failures.append(outcome)
            elif isinstance(outcome, BaseException):
                raise outcome

        if failures:
            first = failures[0]
            raise AdjudicationError(
                first.kind, f"{len(failures)} of {len(judges)} judges failed: {first.message}"
            ) from first

        verdicts: List[VerdictResult] = list(outcomes)
        winner = tally_votes(verdicts)

        start = self.rules.default_elo
        challenger_rating = challenger_elo if challenger_elo is not None else start
        opponent_rating = opponent_elo if opponent_elo is not None else start
        result = {Winner.CHALLENGER: 1.0, Winner.OPPONENT: 0.0, Winner.TIE: 0.5}[winner]
        challenger_change = calculate_elo_change(
            challenger_rating, opponent_rating, result, self.rules.elo_k_factor
        )

        decision = PanelDecision(
            verdicts=verdicts,
            winner=winner,
            challenger_votes=sum(1 for v in verdicts if v.winner == Winner.CHALLENGER),
            opponent_votes=sum(1 for v in verdicts if v.winner == Winner.OPPONENT),
            tie_votes=sum(1 for v in verdicts if v.winner == Winner.TIE),
            challenger_total=sum(v.challenger_score for v in verdicts),
            opponent_total=sum(v.opponent_score for v in verdicts),
            challenger_elo_change=challenger_change,
            opponent_elo_change=-challenger_change,
            judges=[j.name for j in judges],
        )
        logger.info(
            f"Panel decision: {winner.value} "
            f"({decision.challenger_votes}-{decision.opponent_votes}-{decision.tie_votes})"
        )
        return decision

    async def reconsider(
        self,
        context: VerdictContext,
        original_judges: Sequence[str],
        subject_id: Optional[str] = None,
        challenger_elo: Optional[float] = None,
        opponent_elo: Optional[float] = None,
    ) -> PanelDecision:
        """Deliberate again with judges who did not sit on the original panel.

        Falls back to the whole roster when too few fresh judges remain.
        """
        size = self.rules.judge_panel_size
        excluded = set(original_judges)
        fresh = [p for p in self.personas if p.name not in excluded]
        if len(fresh) >= size:
            judges = select_judges(self.personas, size, self.rng, exclude=excluded)
        else:
            logger.warning(
                f"Only {len(fresh)} judges outside the original panel; drawing from all {len(self.personas)}"
            )
            judges = select_judges(self.personas, size, self.rng)
        return await self.deliberate(
            context,
            judges=judges,
            subject_id=subject_id,
            challenger_elo=challenger_elo,
            opponent_elo=opponent_elo,
        )


async def adjudicate_debate(
    store: DebateStore,
    panel: JudgePanel,
    debate_id: str,
    challenger_elo: Optional[float] = None,
    opponent_elo: Optional[float] = None,
) -> PanelDecision:
    """Judge a COMPLETED debate, store each verdict and mark it VERDICT_READY.

    On failure nothing is written and the debate stays COMPLETED.
    """
    debate = await store.get_debate(debate_id)
    if debate is None:
        raise DebateNotFound(debate_id)
    new_status = transition_status(debate.status, DebateStatus.VERDICT_READY)

    statements = await store.list_statements(debate_id)
    context = VerdictContext.from_debate(debate, statements)
    decision = await panel.deliberate(
        context,
        subject_id=debate_id,
        challenger_elo=challenger_elo,
        opponent_elo=opponent_elo,
    )

    for verdict in decision.verdicts:
        await store.record_verdict(debate_id, verdict.judge_name or "judge", verdict)
    await store.update_debate_status(debate_id, new_status)
    return decision


def make_completion_hook(
    store: DebateStore, panel: JudgePanel
) -> Callable[[Debate, object], Awaitable[None]]:
    """Build an ``on_completed`` hook that judges debates as they finish."""

    async def _judge_completed(debate: Debate, _result: object) -> None:
        await adjudicate_debate(store, panel, debate.id)

    return _judge_completed


APPEAL_SYSTEM_PROMPT = (
    "You are a helpful assistant that explains appeal outcomes clearly and respectfully."
)


@dataclass
class AppealOutcome:
    """Result of re-judging an appealed debate."""

    original_winner: Winner
    decision: PanelDecision
    explanation: str

    @property
    def winner_changed(self) -> bool:
        return self.decision.winner != self.original_winner


def _side_name(context: VerdictContext, winner: Winner) -> str:
    if winner == Winner.CHALLENGER:
        return context.challenger_name
    if winner == Winner.OPPONENT:
        return context.opponent_name
    return "nobody (tie)"


def build_appeal_explanation_prompt(
    context: VerdictContext,
    original_winner: Winner,
    decision: PanelDecision,
    appeal_reason: Optional[str] = None,
) -> str:
    changed = decision.winner != original_winner
    verdicts_summary = "\n\n".join(
        f"Judge {i}: {v.reasoning}" for i, v in enumerate(decision.verdicts, start=1)
    )
    if changed:
        outcome = "why an appeal successfully changed a debate verdict"
        conclusion = "Explain that the new judges reached a different conclusion"
    else:
        outcome = "why an appeal did not change a debate verdict"
        conclusion = "Explain that the new judges reached the same conclusion"

    return f"""You are an AI assistant explaining {outcome}.

DEBATE CONTEXT:
- Topic: {context.topic}
- Original Winner: {_side_name(context, original_winner)}
- New Verdict Winner: {_side_name(context, decision.winner)}
- Appeal Reason: "{appeal_reason or 'No reason given'}"

NEW JUDGES' VERDICTS AND REASONING:
{verdicts_summary}

TASK:
Generate a clear, respectful explanation (2-3 sentences) for the appeal outcome. The explanation should:
1. Acknowledge that different judges reviewed the appeal
2. {conclusion}
3. Reference key points from the new judges' reasoning
4. Be respectful and constructive

Respond with ONLY the explanation text. Do not include any JSON formatting or additional commentary."""


async def explain_appeal(
    engine: VerdictEngine,
    context: VerdictContext,
    original_winner: Winner,
    decision: PanelDecision,
    appeal_reason: Optional[str] = None,
    subject_id: Optional[str] = None,
    settings: Optional[GenerationSettings] = None,
) -> str:
    """Ask the collaborator to explain the appeal outcome.

    Raises:
        AdjudicationError: the collaborator failed or returned no text.
    """
    try:
        completion = await timed_completion(
            engine.generator,
            APPEAL_SYSTEM_PROMPT,
            build_appeal_explanation_prompt(context, original_winner, decision, appeal_reason),
            settings or GenerationSettings(temperature=0.5, max_tokens=300),
            ledger=engine.ledger,
            subject_id=subject_id,
            operation="appeal_explanation",
        )
    except CollaboratorUnavailable as e:
        logger.error(f"Appeal explanation failed: {e}")
        raise AdjudicationError(AdjudicationError.COLLABORATOR_UNAVAILABLE, str(e)) from e

    explanation = strip_code_fences(completion.text)
    if not explanation:
        raise AdjudicationError(AdjudicationError.MALFORMED_RESPONSE, "Empty appeal explanation")
    return explanation


async def appeal_debate(
    store: DebateStore,
    panel: JudgePanel,
    debate_id: str,
    original: PanelDecision,
    appeal_reason: Optional[str] = None,
    challenger_elo: Optional[float] = None,
    opponent_elo: Optional[float] = None,
    settings: Optional[GenerationSettings] = None,
) -> AppealOutcome:
    """Re-judge a VERDICT_READY debate with a fresh panel and explain the result.

    The new verdicts are stored only once the panel and the explanation
    have both succeeded.
    """
    debate = await store.get_debate(debate_id)
    if debate is None:
        raise DebateNotFound(debate_id)
    if debate.status != DebateStatus.VERDICT_READY:
        raise InvalidTransition(debate.status.value, "APPEAL")

    statements = await store.list_statements(debate_id)
    context = VerdictContext.from_debate(debate, statements)
    decision = await panel.reconsider(
        context,
        original.judges,
        subject_id=debate_id,
        challenger_elo=challenger_elo,
        opponent_elo=opponent_elo,
    )
    explanation = await explain_appeal(
        panel.engine,
        context,
        original.winner,
        decision,
        appeal_reason=appeal_reason,
        subject_id=debate_id,
        settings=settings,
    )

    outcome = AppealOutcome(original_winner=original.winner, decision=decision, explanation=explanation)
    if not outcome.winner_changed:
        # upheld verdicts keep their original rating changes
        decision.challenger_elo_change = original.challenger_elo_change
        decision.opponent_elo_change = original.opponent_elo_change

    for verdict in decision.verdicts:
        await store.record_verdict(debate_id, verdict.judge_name or "judge", verdict)
    logger.info(
        f"Appeal of debate {debate_id}: {original.winner.value} -> {decision.winner.value}"
        f"{' (overturned)' if outcome.winner_changed else ' (upheld)'}"
    )
    return outcome
