"""King of the Hill scoring and elimination.

All active participants submit at once each round. Every judge scores
every participant in a single collaborator call, the totals are ranked
and the bottom quarter (at least one) is cut until two remain for a
one-on-one final.
"""

import logging
import math
from typing import Iterable, Optional, Sequence

from rostrum.config.settings import GenerationSettings
from rostrum.debate_engine.models import DebateParticipant, Statement
from rostrum.debate_engine.types import ChallengeType, is_missed_submission
from rostrum.exceptions import CollaboratorUnavailable
from rostrum.models.base_types import TextGenerator
from rostrum.models.usage import UsageLedger, timed_completion
from rostrum.validation import clamp_score, parse_response

from .models import (
    EliminationOutcome,
    EliminationResponse,
    RoundPlan,
    RoundScoreSet,
    RoundSubmission,
    TournamentStage,
)

logger = logging.getLogger(__name__)

ELIMINATION_FRACTION = 0.25
DEFAULT_SCORE = 50.0
FALLBACK_REASONING = "default — adjudication failed"
OMITTED_REASONING = "No evaluation provided by judge"
NO_ELIMINATION_REASONING = "No elimination reasoning provided"


def eliminate_count(participant_count: int) -> int:
    """Participants cut this round: a quarter, rounded up, never fewer than one."""
    return max(1, math.ceil(participant_count * ELIMINATION_FRACTION))


def build_elimination_prompt(
    topic: str, round_number: int, submissions: Sequence[RoundSubmission]
) -> str:
    count = eliminate_count(len(submissions))
    submissions_text = "\n\n".join(
        f"Participant {index} (id: {sub.participant_id}, {sub.display_name}):\n{sub.content or '[No submission]'}\n\n---"
        for index, sub in enumerate(submissions, start=1)
    )
    example_scores = ",\n".join(
        f'    "{sub.participant_id}": {score}'
        for sub, score in zip(submissions[:2], (85, 72))
    )
    example_reasoning = ",\n".join(
        f'    "{sub.participant_id}": "Why this participant earned their score"'
        for sub in submissions[:2]
    )

    return f"""You are judging a King of the Hill tournament round. All {len(submissions)} participants have submitted arguments on the same topic.

TOPIC: "{topic}"

ROUND: {round_number}

SUBMISSIONS:
{submissions_text}

Your task:
1. Evaluate each participant's argument quality, reasoning, evidence, and persuasiveness
2. Assign a score (0-100) to EACH participant based on their argument quality
3. **IMPORTANT**: After scoring all participants, identify the bottom {count} participant(s) (lowest scores) and provide detailed reasoning explaining WHY they should be eliminated

SCORING CRITERIA (0-100 scale per participant):
- Argument Quality: How well-structured and logical is the argument? (0-25 points)
- Evidence: Does the participant provide supporting evidence or examples? (0-25 points)
- Persuasiveness: How convincing is the argument? (0-25 points)
- Clarity: Is the argument clear and easy to understand? (0-15 points)
- Relevance: Does the argument directly address the topic? (0-10 points)

**ELIMINATION REASONING REQUIREMENT:**
After scoring all participants, you must identify which {count} participant(s) have the LOWEST scores and explain in detail:
- Why their arguments were weaker compared to others
- What specific flaws or shortcomings led to their lower scores
- How their performance compared to the remaining participants
- Be specific and constructive in your explanation

Respond in the following JSON format (NO markdown code blocks, just pure JSON):
{{
  "scores": {{
{example_scores},
    ...
  }},
  "reasoning": {{
{example_reasoning},
    ...
  }},
  "eliminationReasoning": "The bottom {count} participant(s) [identify by username] should be eliminated because [provide detailed explanation of their weaknesses, lower scores, and why they performed worse than others]. Be specific about what made their arguments inferior."
}}

CRITICAL REQUIREMENTS:
- You MUST score ALL {len(submissions)} participants, keyed by the ids shown above
- Scores MUST be between 0-100
- Each participant MUST have a score
- Provide detailed elimination reasoning explaining why the bottom {count} participant(s) should be eliminated
- Be fair, objective, and consistent in your evaluation
- Return ONLY valid JSON, no markdown formatting, no code blocks"""


class EliminationScorer:
    """Scores every participant of a King of the Hill round with one judge.

    The returned score map always covers exactly the submitted roster.
    When the collaborator fails outright everyone gets the same default
    score and the result is flagged ``degraded``.
    """

    def __init__(
        self,
        generator: TextGenerator,
        settings: Optional[GenerationSettings] = None,
        ledger: Optional[UsageLedger] = None,
    ):
        self.generator = generator
        self.settings = settings or GenerationSettings(temperature=0.7, max_tokens=3000)
        self.ledger = ledger

    async def score_round(
        self,
        persona_prompt: str,
        topic: str,
        round_number: int,
        submissions: Sequence[RoundSubmission],
        subject_id: Optional[str] = None,
        judge_name: Optional[str] = None,
    ) -> RoundScoreSet:
        if not submissions:
            raise ValueError("Cannot score a round without participants")

        roster = [sub.participant_id for sub in submissions]
        if len(set(roster)) != len(roster):
            raise ValueError("Duplicate participant ids in round submissions")

        count = eliminate_count(len(roster))
        logger.info(
            f"Round {round_number}: {len(roster)} participants, eliminating bottom {count} "
            f"({round(count / len(roster) * 100)}%)"
        )

        try:
            completion = await timed_completion(
                self.generator,
                persona_prompt,
                build_elimination_prompt(topic, round_number, submissions),
                self.settings,
                ledger=self.ledger,
                subject_id=subject_id,
                operation="elimination",
            )
        except CollaboratorUnavailable as e:
            logger.error(f"Elimination scoring failed, using uniform fallback: {e}")
            return self._fallback(roster, count, judge_name)

        parsed = parse_response(completion.text, EliminationResponse)
        if not parsed.ok:
            logger.error(
                f"Failed to parse elimination response, using uniform fallback: {parsed.error}"
            )
            logger.debug(f"Raw elimination response: {parsed.error.raw_excerpt}")
            return self._fallback(roster, count, judge_name)

        return self._complete(parsed.value, roster, count, judge_name)

    def _complete(
        self,
        response: EliminationResponse,
        roster: list[str],
        count: int,
        judge_name: Optional[str],
    ) -> RoundScoreSet:
        extras = sorted(set(response.scores) - set(roster))
        if extras:
            logger.warning(f"Dropping scores for unknown participants: {', '.join(extras)}")

        scores: dict[str, float] = {}
        reasoning: dict[str, str] = {}
        for participant_id in roster:
            raw = response.scores.get(participant_id)
            if raw is None:
                logger.warning(
                    f"Judge did not score participant {participant_id}, "
                    f"assigning default score {DEFAULT_SCORE:g}"
                )
                scores[participant_id] = DEFAULT_SCORE
                reasoning[participant_id] = OMITTED_REASONING
                continue

            bounded = clamp_score(raw, DEFAULT_SCORE)
            if bounded != raw:
                logger.warning(
                    f"Judge gave invalid score {raw} to {participant_id}, clamping to {bounded:g}"
                )
            scores[participant_id] = bounded
            reasoning[participant_id] = response.reasoning.get(participant_id, "").strip()

        return RoundScoreSet(
            scores=scores,
            reasoning=reasoning,
            elimination_reasoning=(response.elimination_reasoning or "").strip()
            or NO_ELIMINATION_REASONING,
            eliminate_count=count,
            judge_name=judge_name,
        )

    @staticmethod
    def _fallback(roster: list[str], count: int, judge_name: Optional[str]) -> RoundScoreSet:
        return RoundScoreSet(
            scores={pid: DEFAULT_SCORE for pid in roster},
            reasoning={pid: FALLBACK_REASONING for pid in roster},
            elimination_reasoning=FALLBACK_REASONING,
            eliminate_count=count,
            degraded=True,
            judge_name=judge_name,
        )


def build_round_submissions(
    participants: Iterable[DebateParticipant],
    statements: Iterable[Statement],
    round_number: int,
) -> list[RoundSubmission]:
    """One submission per active participant, in roster order.

    Missing and missed-deadline statements become empty content so the
    participant is still scored.
    """
    by_author: dict[str, str] = {}
    for statement in statements:
        if statement.round_number == round_number:
            by_author.setdefault(statement.author_id, statement.content)

    submissions = []
    for participant in participants:
        if not participant.active:
            continue
        content = by_author.get(participant.user_id)
        if content is None or is_missed_submission(content):
            content = ""
        submissions.append(
            RoundSubmission(
                participant_id=participant.user_id,
                display_name=participant.display_name,
                content=content,
            )
        )
    return submissions


def resolve_round(
    score_sets: Sequence[RoundScoreSet], roster: Sequence[str]
) -> EliminationOutcome:
    """Sum every judge's scores, rank and cut the bottom of the round.

    Ties are broken by participant id so the outcome is deterministic even
    when every judge fell back to uniform scores.
    """
    if not roster:
        raise ValueError("Cannot resolve a round without participants")
    if not score_sets:
        raise ValueError("Cannot resolve a round without any judge scores")

    totals = {pid: sum(s.scores.get(pid, DEFAULT_SCORE) for s in score_sets) for pid in roster}
    ranking = sorted(totals.items(), key=lambda item: (-item[1], item[0]))

    count = min(eliminate_count(len(roster)), len(roster))
    eliminated = [pid for pid, _ in ranking[-count:]]
    advancing = [pid for pid, _ in ranking[:-count]]

    explanations = {}
    for rank, (pid, total) in enumerate(ranking, start=1):
        if pid not in eliminated:
            continue
        summary = f"Ranked {rank} out of {len(roster)} with a total score of {total:g}"
        judge_notes = [
            s.reasoning[pid]
            for s in score_sets
            if not s.degraded and s.reasoning.get(pid) and s.reasoning[pid] != OMITTED_REASONING
        ]
        explanations[pid] = f"{summary}. {' '.join(judge_notes)}" if judge_notes else summary

    logger.info(
        f"Eliminated {len(eliminated)} of {len(roster)}: {', '.join(eliminated)}"
    )
    return EliminationOutcome(
        ranking=ranking,
        eliminated_ids=eliminated,
        advancing_ids=advancing,
        explanations=explanations,
    )


def next_round_plan(active_count: int, finals_rounds: int = 3) -> RoundPlan:
    """Decide the next stage from how many participants are still in."""
    if active_count <= 0:
        raise ValueError("No active participants left")
    if active_count == 1:
        return RoundPlan(stage=TournamentStage.FINISHED)
    if active_count == 2:
        return RoundPlan(
            stage=TournamentStage.FINALS,
            challenge_type=ChallengeType.ONE_ON_ONE,
            total_rounds=finals_rounds,
        )
    return RoundPlan(
        stage=TournamentStage.GROUP_ROUND,
        challenge_type=ChallengeType.GROUP,
        total_rounds=1,
    )
