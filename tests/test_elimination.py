"""Tests for King of the Hill scoring and elimination."""

from __future__ import annotations

import asyncio
import json

import pytest

from rostrum.debate_engine.models import Debate, Statement
from rostrum.debate_engine.types import MISSED_DEADLINE_CONTENT, ChallengeType
from rostrum.exceptions import CollaboratorUnavailable
from rostrum.judges.personas import JUDGE_PERSONAS
from rostrum.tournaments.elimination import (
    DEFAULT_SCORE,
    FALLBACK_REASONING,
    NO_ELIMINATION_REASONING,
    OMITTED_REASONING,
    EliminationScorer,
    build_elimination_prompt,
    build_round_submissions,
    eliminate_count,
    next_round_plan,
    resolve_round,
)
from rostrum.tournaments.models import RoundScoreSet, RoundSubmission, TournamentStage


def _submissions(count: int = 5) -> list[RoundSubmission]:
    return [
        RoundSubmission(participant_id=f"user-{i}", display_name=f"Debater{i}", content=f"Argument {i}")
        for i in range(1, count + 1)
    ]


def _score(scorer: EliminationScorer, submissions):
    async def run():
        try:
            return await scorer.score_round(
                JUDGE_PERSONAS[0].system_prompt,
                "Pineapple belongs on pizza",
                1,
                submissions,
                subject_id="koth-1",
                judge_name="The Empiricist",
            )
        finally:
            await asyncio.sleep(0)

    return asyncio.run(run())


@pytest.mark.parametrize(
    ("participants", "expected"),
    [(1, 1), (2, 1), (3, 1), (4, 1), (5, 2), (8, 2), (10, 3)],
)
def test_eliminate_count(participants: int, expected: int) -> None:
    assert eliminate_count(participants) == expected


def test_prompt_lists_every_participant_id() -> None:
    submissions = _submissions(5)
    prompt = build_elimination_prompt("Topic", 2, submissions)

    assert "ROUND: 2" in prompt
    assert "bottom 2 participant(s)" in prompt
    assert '"user-1": 85' in prompt
    for index, sub in enumerate(submissions, start=1):
        assert f"Participant {index} (id: {sub.participant_id}, {sub.display_name}):" in prompt
    assert "Participant 5 (id: user-5, Debater5):\nArgument 5" in prompt


def test_omitted_participant_gets_default_score(fake_generator, ledger) -> None:
    response = {
        "scores": {"user-1": 90, "user-2": 80, "user-3": 70, "user-4": 60},
        "reasoning": {"user-1": "Strong", "user-4": "Thin evidence"},
        "eliminationReasoning": "user-4 and user-5 were weakest.",
    }
    generator = fake_generator(json.dumps(response))
    scorer = EliminationScorer(generator, ledger=ledger)

    result = _score(scorer, _submissions(5))

    assert set(result.scores) == {f"user-{i}" for i in range(1, 6)}
    assert result.scores["user-5"] == DEFAULT_SCORE
    assert result.reasoning["user-5"] == OMITTED_REASONING
    assert result.reasoning["user-1"] == "Strong"
    assert result.eliminate_count == 2
    assert not result.degraded
    assert generator.calls[0]["max_tokens"] == 3000
    assert ledger.records[0].operation == "elimination"


def test_unknown_ids_are_dropped_and_scores_clamped(fake_generator) -> None:
    response = {
        "scores": {"user-1": 130, "user-2": -10, "user-3": 0, "ghost": 99},
        "reasoning": {},
    }

    result = _score(EliminationScorer(fake_generator(json.dumps(response))), _submissions(3))

    assert result.scores == {"user-1": 100, "user-2": 0, "user-3": 0}
    assert result.elimination_reasoning == NO_ELIMINATION_REASONING


def test_collaborator_failure_falls_back_to_uniform_scores(fake_generator, ledger) -> None:
    generator = fake_generator(CollaboratorUnavailable("fake", "timed out after 60.0s"))

    result = _score(EliminationScorer(generator, ledger=ledger), _submissions(4))

    assert result.degraded
    assert set(result.scores.values()) == {50}
    assert set(result.reasoning.values()) == {FALLBACK_REASONING}
    assert result.elimination_reasoning == "default — adjudication failed"
    assert ledger.records[0].success is False


def test_unparseable_response_falls_back(fake_generator) -> None:
    result = _score(EliminationScorer(fake_generator("I liked them all.")), _submissions(3))

    assert result.degraded
    assert result.scores == {"user-1": 50, "user-2": 50, "user-3": 50}


def test_scores_must_be_an_object(fake_generator) -> None:
    generator = fake_generator('{"scores": [90, 80], "reasoning": {}}')

    assert _score(EliminationScorer(generator), _submissions(2)).degraded


def test_empty_or_duplicate_roster_is_rejected(fake_generator) -> None:
    scorer = EliminationScorer(fake_generator())
    duplicate = _submissions(2) + [_submissions(1)[0]]

    with pytest.raises(ValueError):
        _score(scorer, [])
    with pytest.raises(ValueError):
        _score(scorer, duplicate)


def test_build_round_submissions_blanks_missing_and_missed(group_debate: Debate) -> None:
    group_debate.participants[4].active = False
    statements = [
        Statement("koth-1", "user-1", 1, "Real argument"),
        Statement("koth-1", "user-2", 1, MISSED_DEADLINE_CONTENT),
        Statement("koth-1", "user-3", 2, "Wrong round"),
    ]

    submissions = build_round_submissions(group_debate.participants, statements, 1)

    assert [s.participant_id for s in submissions] == ["user-1", "user-2", "user-3", "user-4"]
    assert [s.content for s in submissions] == ["Real argument", "", "", ""]


def _score_set(scores: dict[str, float], **kwargs) -> RoundScoreSet:
    return RoundScoreSet(
        scores=scores,
        reasoning=kwargs.pop("reasoning", {}),
        elimination_reasoning="",
        eliminate_count=1,
        **kwargs,
    )


def test_resolve_round_sums_judges_and_cuts_bottom() -> None:
    roster = [f"user-{i}" for i in range(1, 6)]
    sets = [
        _score_set(
            {"user-1": 90, "user-2": 70, "user-3": 60, "user-4": 40, "user-5": 30},
            reasoning={"user-5": "Off topic."},
        ),
        _score_set({"user-1": 80, "user-2": 75, "user-3": 65, "user-4": 45, "user-5": 20}),
    ]

    outcome = resolve_round(sets, roster)

    assert outcome.ranking[0] == ("user-1", 170)
    assert outcome.eliminated_ids == ["user-4", "user-5"]
    assert outcome.advancing_ids == ["user-1", "user-2", "user-3"]
    assert outcome.explanations["user-5"] == (
        "Ranked 5 out of 5 with a total score of 50. Off topic."
    )


def test_resolve_round_breaks_ties_by_id() -> None:
    roster = ["user-3", "user-1", "user-2"]
    fallback = _score_set(
        {pid: 50 for pid in roster},
        reasoning={pid: FALLBACK_REASONING for pid in roster},
        degraded=True,
    )

    outcome = resolve_round([fallback], roster)

    assert outcome.eliminated_ids == ["user-3"]
    assert outcome.explanations["user-3"] == "Ranked 3 out of 3 with a total score of 50"


def test_next_round_plan_stages() -> None:
    assert next_round_plan(5).stage == TournamentStage.GROUP_ROUND
    assert next_round_plan(3).challenge_type == ChallengeType.GROUP

    finals = next_round_plan(2, finals_rounds=3)
    assert finals.stage == TournamentStage.FINALS
    assert finals.challenge_type == ChallengeType.ONE_ON_ONE
    assert finals.total_rounds == 3

    assert next_round_plan(1).stage == TournamentStage.FINISHED
    with pytest.raises(ValueError):
        next_round_plan(0)
