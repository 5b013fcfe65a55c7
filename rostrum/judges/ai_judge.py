"""AI-powered verdicts for one-on-one debates."""

import logging
from typing import Optional

from rostrum.config.settings import GenerationSettings
from rostrum.exceptions import AdjudicationError, CollaboratorUnavailable
from rostrum.models.base_types import TextGenerator
from rostrum.models.usage import UsageLedger, timed_completion
from rostrum.validation import clamp_score, parse_response

from .base import VerdictContext, VerdictResponse, VerdictResult, Winner

logger = logging.getLogger(__name__)

MISSED_DEADLINE_LABEL = "[MISSED DEADLINE - NO SUBMISSION]"


def build_debate_summary(context: VerdictContext) -> str:
    """Render the debate as the judge reads it, round by round."""
    lines = [f'DEBATE TOPIC: "{context.topic}"', ""]
    if context.description:
        lines.extend([f"DESCRIPTION: {context.description}", ""])

    lines.append("DEBATERS:")
    lines.append(f"- {context.challenger_name}: Arguing {context.challenger_position}")
    lines.append(f"- {context.opponent_name}: Arguing {context.opponent_position}")
    lines.append("")

    if context.naturally_completed:
        status = "COMPLETED"
    else:
        status = f"IN PROGRESS - Round {context.current_round} of {context.total_rounds}"
    lines.append(f"DEBATE STATUS: {status}")
    lines.append("")
    lines.append("ARGUMENTS BY ROUND:")
    lines.append("")

    rounds: dict[int, list] = {}
    for statement in context.statements:
        rounds.setdefault(statement.round_number, []).append(statement)

    for round_number in sorted(rounds):
        lines.append(f"=== ROUND {round_number} ===")
        lines.append("")
        for statement in rounds[round_number]:
            lines.append(f"{statement.author} ({statement.position}):")
            if statement.missed:
                lines.append(MISSED_DEADLINE_LABEL)
                lines.append(
                    "This participant failed to submit their argument before the deadline expired."
                )
            else:
                lines.append(statement.content)
            lines.append("")

    return "\n".join(lines)


def completion_note(context: VerdictContext) -> str:
    """Tell the judge how the debate ended and how to weigh gaps."""
    if context.naturally_completed:
        return (
            "This debate has been completed with all rounds finished. "
            "Judge based on the full set of arguments presented."
        )
    if context.has_expired_statements:
        return (
            "This debate ended due to time expiration. Some rounds were not completed "
            "because participants missed the deadline. Judge based on whatever arguments "
            "were submitted before the time expired. If a debater missed a round due to "
            "time expiration, consider that as a negative factor in your evaluation - "
            "they failed to meet the deadline."
        )
    return (
        f"This debate is incomplete (Round {context.current_round}/{context.total_rounds}). "
        "Judge based on whatever arguments are available, even if not all rounds were "
        "completed. If a debater missed a round, consider that in your evaluation."
    )


def _reasoning_hint(context: VerdictContext) -> str:
    if context.naturally_completed:
        return "Do not mention that the debate is incomplete, as it has been fully completed."
    if context.has_expired_statements:
        return (
            "Mention that the debate ended due to time expiration and how missed "
            "deadlines affected your evaluation."
        )
    return "Mention if the incomplete nature of the debate affected your evaluation."


def build_verdict_prompt(context: VerdictContext) -> str:
    return f"""{build_debate_summary(context)}
{completion_note(context)}

Analyze the available arguments and provide your verdict in the following JSON format:

{{
  "winner": "CHALLENGER" | "OPPONENT" | "TIE",
  "reasoning": "Your detailed explanation of why you reached this decision. {_reasoning_hint(context)}",
  "challengerScore": 0-100,
  "opponentScore": 0-100
}}

IMPORTANT: Respond ONLY with valid JSON. Do not include any text outside the JSON object."""


class VerdictEngine:
    """Produces one judge's verdict on a one-on-one debate.

    Failures are never papered over: a collaborator error, unparseable
    output or a missing ``winner``/``reasoning`` raises
    ``AdjudicationError`` and the caller decides whether to retry.
    """

    def __init__(
        self,
        generator: TextGenerator,
        settings: Optional[GenerationSettings] = None,
        ledger: Optional[UsageLedger] = None,
    ):
        self.generator = generator
        self.settings = settings or GenerationSettings(temperature=0.7, max_tokens=2000)
        self.ledger = ledger

    async def judge(
        self,
        persona_prompt: str,
        context: VerdictContext,
        subject_id: Optional[str] = None,
        judge_name: Optional[str] = None,
    ) -> VerdictResult:
        """Ask the collaborator for a verdict and validate it.

        Raises:
            AdjudicationError: with ``kind`` naming the failure.
        """
        label = judge_name or "judge"
        logger.info(f"{label} evaluating debate: {context.topic}")

        try:
            completion = await timed_completion(
                self.generator,
                persona_prompt,
                build_verdict_prompt(context),
                self.settings,
                ledger=self.ledger,
                subject_id=subject_id,
                operation="verdict",
            )
        except CollaboratorUnavailable as e:
            logger.error(f"{label} could not reach the collaborator: {e}")
            raise AdjudicationError(AdjudicationError.COLLABORATOR_UNAVAILABLE, str(e)) from e

        parsed = parse_response(completion.text, VerdictResponse)
        if not parsed.ok:
            error = parsed.error
            logger.error(f"Failed to parse verdict from {label}: {error}")
            logger.debug(f"Raw verdict response: {error.raw_excerpt}")
            raise AdjudicationError(error.kind, error.message) from error

        response = parsed.value
        challenger_score = self._bounded(response.challenger_score, "challengerScore")
        opponent_score = self._bounded(response.opponent_score, "opponentScore")

        if response.winner == Winner.CHALLENGER and challenger_score < opponent_score:
            logger.warning(
                f"{label} declared CHALLENGER but scored {challenger_score} vs {opponent_score}"
            )
        elif response.winner == Winner.OPPONENT and opponent_score < challenger_score:
            logger.warning(
                f"{label} declared OPPONENT but scored {opponent_score} vs {challenger_score}"
            )

        result = VerdictResult(
            winner=response.winner,
            reasoning=response.reasoning,
            challenger_score=challenger_score,
            opponent_score=opponent_score,
            judge_name=judge_name,
        )
        logger.info(
            f"{label} decision: {result.winner.value} "
            f"({result.challenger_score:g}-{result.opponent_score:g})"
        )
        return result

    @staticmethod
    def _bounded(value: Optional[float], field_name: str) -> float:
        bounded = clamp_score(value)
        if value is None:
            logger.warning(f"{field_name} missing from verdict, defaulting to {bounded:g}")
        elif bounded != value:
            logger.warning(f"{field_name} {value} clamped to {bounded:g}")
        return bounded
