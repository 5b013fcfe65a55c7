"""Tests for judge panels, vote tallies, Elo changes and appeals."""

from __future__ import annotations

import asyncio
import json
import random

import pytest

from rostrum.config.settings import DebateRulesConfig
from rostrum.debate_engine.models import Debate
from rostrum.debate_engine.types import DebateStatus
from rostrum.exceptions import AdjudicationError, CollaboratorUnavailable, InvalidTransition
from rostrum.judges.ai_judge import VerdictEngine
from rostrum.judges.base import StatementRecord, VerdictContext, VerdictResult, Winner
from rostrum.judges.panel import (
    JudgePanel,
    PanelDecision,
    adjudicate_debate,
    appeal_debate,
    calculate_elo_change,
    make_completion_hook,
    select_judges,
    tally_votes,
)
from rostrum.judges.personas import JUDGE_PERSONAS, get_persona


def _verdict(winner: Winner, challenger: float = 60, opponent: float = 40) -> VerdictResult:
    return VerdictResult(winner, "reasons", challenger, opponent)


def _reply(winner: str, challenger: int, opponent: int) -> str:
    return json.dumps(
        {
            "winner": winner,
            "reasoning": f"{winner} argued better.",
            "challengerScore": challenger,
            "opponentScore": opponent,
        }
    )


def _context() -> VerdictContext:
    return VerdictContext(
        topic="X",
        challenger_name="Alice",
        opponent_name="Bob",
        challenger_position="FOR",
        opponent_position="AGAINST",
        current_round=1,
        total_rounds=1,
        is_complete=True,
        statements=[
            StatementRecord(1, "Alice", "FOR", "Yes."),
            StatementRecord(1, "Bob", "AGAINST", "No."),
        ],
    )


@pytest.mark.parametrize(
    ("winners", "expected"),
    [
        ([Winner.CHALLENGER, Winner.CHALLENGER, Winner.OPPONENT], Winner.CHALLENGER),
        ([Winner.OPPONENT, Winner.TIE, Winner.OPPONENT], Winner.OPPONENT),
        ([Winner.CHALLENGER, Winner.OPPONENT, Winner.TIE], Winner.TIE),
        ([Winner.CHALLENGER, Winner.OPPONENT], Winner.TIE),
    ],
)
def test_tally_votes_needs_strict_majority(winners, expected) -> None:
    assert tally_votes([_verdict(w) for w in winners]) == expected


def test_elo_change_between_equal_players() -> None:
    assert calculate_elo_change(1200, 1200, 1.0) == 16
    assert calculate_elo_change(1200, 1200, 0.0) == -16
    assert calculate_elo_change(1200, 1200, 0.5) == 0


def test_elo_change_rewards_upsets_more() -> None:
    assert calculate_elo_change(1000, 1400, 1.0) > calculate_elo_change(1400, 1000, 1.0)


def test_select_judges_draws_distinct_personas() -> None:
    chosen = select_judges(JUDGE_PERSONAS, 3, random.Random(7))

    assert len(chosen) == 3
    assert len({j.name for j in chosen}) == 3


def test_select_judges_caps_at_available() -> None:
    assert len(select_judges(JUDGE_PERSONAS[:2], 5)) == 2
    with pytest.raises(ValueError):
        select_judges([], 3)


def test_get_persona_is_forgiving_about_names() -> None:
    assert get_persona("empiricist").name == "The Empiricist"
    assert get_persona("The Logician").name == "The Logician"


def test_deliberate_combines_verdicts(fake_generator) -> None:
    generator = fake_generator(
        _reply("CHALLENGER", 80, 50),
        _reply("OPPONENT", 45, 70),
        _reply("CHALLENGER", 90, 30),
    )
    panel = JudgePanel(VerdictEngine(generator), DebateRulesConfig())

    decision = asyncio.run(panel.deliberate(_context(), judges=JUDGE_PERSONAS[:3]))

    assert decision.winner == Winner.CHALLENGER
    assert (decision.challenger_votes, decision.opponent_votes, decision.tie_votes) == (2, 1, 0)
    assert decision.challenger_total == 215
    assert decision.opponent_total == 150
    assert decision.max_total == 300
    assert decision.challenger_elo_change == 16
    assert decision.opponent_elo_change == -16
    assert decision.judges == [j.name for j in JUDGE_PERSONAS[:3]]


def test_deliberate_fails_when_any_judge_fails(fake_generator) -> None:
    generator = fake_generator(
        _reply("CHALLENGER", 80, 50),
        CollaboratorUnavailable("fake", "timed out"),
    )
    panel = JudgePanel(VerdictEngine(generator))

    with pytest.raises(AdjudicationError) as excinfo:
        asyncio.run(panel.deliberate(_context(), judges=JUDGE_PERSONAS[:2]))

    assert excinfo.value.kind == AdjudicationError.COLLABORATOR_UNAVAILABLE
    assert "1 of 2" in excinfo.value.message


def test_adjudicate_debate_records_verdicts(
    make_store, fake_generator, one_on_one_debate: Debate
) -> None:
    one_on_one_debate.status = DebateStatus.COMPLETED
    store = make_store(one_on_one_debate)
    store.add_statement("debate-1", "alice", 1, "Opening.")
    store.add_statement("debate-1", "bob", 1, "Rebuttal.")
    generator = fake_generator(_reply("OPPONENT", 40, 85))
    panel = JudgePanel(
        VerdictEngine(generator), DebateRulesConfig(judge_panel_size=1), personas=JUDGE_PERSONAS[:1]
    )

    decision = asyncio.run(adjudicate_debate(store, panel, "debate-1"))

    assert decision.winner == Winner.OPPONENT
    assert one_on_one_debate.status == DebateStatus.VERDICT_READY
    assert [(d, j) for d, j, _ in store.verdicts] == [("debate-1", "The Empiricist")]
    assert "Alice (FOR):" in generator.calls[0]["user_prompt"]


def test_adjudicate_debate_leaves_status_on_failure(
    make_store, fake_generator, one_on_one_debate: Debate
) -> None:
    one_on_one_debate.status = DebateStatus.COMPLETED
    store = make_store(one_on_one_debate)
    panel = JudgePanel(
        VerdictEngine(fake_generator("not json")),
        DebateRulesConfig(judge_panel_size=1),
        personas=JUDGE_PERSONAS[:1],
    )

    with pytest.raises(AdjudicationError):
        asyncio.run(adjudicate_debate(store, panel, "debate-1"))

    assert one_on_one_debate.status == DebateStatus.COMPLETED
    assert store.verdicts == []


def test_completion_hook_judges_finished_debate(
    make_store, fake_generator, one_on_one_debate: Debate
) -> None:
    one_on_one_debate.status = DebateStatus.COMPLETED
    store = make_store(one_on_one_debate)
    store.add_statement("debate-1", "alice", 1, "Opening.")
    panel = JudgePanel(
        VerdictEngine(fake_generator(_reply("CHALLENGER", 70, 40))),
        DebateRulesConfig(judge_panel_size=1),
        personas=JUDGE_PERSONAS[:1],
    )
    hook = make_completion_hook(store, panel)

    asyncio.run(hook(one_on_one_debate, None))

    assert one_on_one_debate.status == DebateStatus.VERDICT_READY


def test_select_judges_skips_excluded_names() -> None:
    excluded = [j.name for j in JUDGE_PERSONAS[:4]]

    chosen = select_judges(JUDGE_PERSONAS, 3, random.Random(3), exclude=excluded)

    assert len(chosen) == 3
    assert not {j.name for j in chosen} & set(excluded)


def test_select_judges_raises_when_everyone_is_excluded() -> None:
    with pytest.raises(ValueError):
        select_judges(JUDGE_PERSONAS[:2], 2, exclude=[j.name for j in JUDGE_PERSONAS[:2]])


def _original(winner: Winner, challenger_change: int = 16) -> PanelDecision:
    verdicts = [_verdict(winner) for _ in range(3)]
    return PanelDecision(
        verdicts=verdicts,
        winner=winner,
        challenger_votes=3 if winner == Winner.CHALLENGER else 0,
        opponent_votes=3 if winner == Winner.OPPONENT else 0,
        tie_votes=0,
        challenger_total=180,
        opponent_total=120,
        challenger_elo_change=challenger_change,
        opponent_elo_change=-challenger_change,
        judges=[j.name for j in JUDGE_PERSONAS[:3]],
    )


def _decided_store(make_store, debate: Debate):
    debate.status = DebateStatus.VERDICT_READY
    store = make_store(debate)
    store.add_statement("debate-1", "alice", 1, "Opening.")
    store.add_statement("debate-1", "bob", 1, "Rebuttal.")
    return store


def _appeal(store, panel: JudgePanel, original: PanelDecision, **kwargs):
    async def run():
        try:
            return await appeal_debate(store, panel, "debate-1", original, **kwargs)
        finally:
            await asyncio.sleep(0)

    return asyncio.run(run())


def test_appeal_overturns_with_fresh_judges(
    make_store, fake_generator, ledger, one_on_one_debate: Debate
) -> None:
    store = _decided_store(make_store, one_on_one_debate)
    generator = fake_generator(
        _reply("OPPONENT", 40, 80),
        _reply("OPPONENT", 50, 70),
        _reply("CHALLENGER", 65, 60),
        "Three different judges reviewed the appeal and found Bob's rebuttal stronger.",
    )
    panel = JudgePanel(VerdictEngine(generator, ledger=ledger), rng=random.Random(11))
    original = _original(Winner.CHALLENGER)

    outcome = _appeal(store, panel, original, appeal_reason="My rebuttal was ignored.")

    assert outcome.winner_changed
    assert outcome.decision.winner == Winner.OPPONENT
    assert not set(outcome.decision.judges) & set(original.judges)
    assert outcome.decision.challenger_elo_change == -16
    assert outcome.explanation.startswith("Three different judges")
    assert len(store.verdicts) == 3
    assert one_on_one_debate.status == DebateStatus.VERDICT_READY

    explanation_call = generator.calls[3]
    assert "successfully changed" in explanation_call["user_prompt"]
    assert '"My rebuttal was ignored."' in explanation_call["user_prompt"]
    assert "- New Verdict Winner: Bob" in explanation_call["user_prompt"]
    assert explanation_call["max_tokens"] == 300
    assert ledger.records[-1].operation == "appeal_explanation"


def test_upheld_appeal_keeps_original_rating_changes(
    make_store, fake_generator, one_on_one_debate: Debate
) -> None:
    store = _decided_store(make_store, one_on_one_debate)
    generator = fake_generator(
        _reply("CHALLENGER", 75, 50),
        _reply("CHALLENGER", 70, 55),
        _reply("TIE", 60, 60),
        "The new judges reached the same conclusion.",
    )
    panel = JudgePanel(VerdictEngine(generator), rng=random.Random(5))

    outcome = _appeal(store, panel, _original(Winner.CHALLENGER, challenger_change=9))

    assert not outcome.winner_changed
    assert outcome.decision.challenger_elo_change == 9
    assert outcome.decision.opponent_elo_change == -9
    assert "did not change" in generator.calls[3]["user_prompt"]


def test_appeal_explanation_failure_stores_nothing(
    make_store, fake_generator, one_on_one_debate: Debate
) -> None:
    store = _decided_store(make_store, one_on_one_debate)
    generator = fake_generator(
        _reply("OPPONENT", 40, 80),
        _reply("OPPONENT", 40, 80),
        _reply("OPPONENT", 40, 80),
        CollaboratorUnavailable("fake", "timed out after 60.0s"),
    )
    panel = JudgePanel(VerdictEngine(generator))

    with pytest.raises(AdjudicationError) as excinfo:
        _appeal(store, panel, _original(Winner.CHALLENGER))

    assert excinfo.value.kind == AdjudicationError.COLLABORATOR_UNAVAILABLE
    assert store.verdicts == []


def test_blank_appeal_explanation_is_malformed(
    make_store, fake_generator, one_on_one_debate: Debate
) -> None:
    store = _decided_store(make_store, one_on_one_debate)
    generator = fake_generator(
        _reply("CHALLENGER", 80, 40),
        _reply("CHALLENGER", 80, 40),
        _reply("CHALLENGER", 80, 40),
        "   ",
    )
    panel = JudgePanel(VerdictEngine(generator))

    with pytest.raises(AdjudicationError) as excinfo:
        _appeal(store, panel, _original(Winner.CHALLENGER))

    assert excinfo.value.kind == AdjudicationError.MALFORMED_RESPONSE


def test_appeal_needs_a_decided_debate(
    make_store, fake_generator, one_on_one_debate: Debate
) -> None:
    one_on_one_debate.status = DebateStatus.COMPLETED
    store = make_store(one_on_one_debate)
    generator = fake_generator()

    with pytest.raises(InvalidTransition):
        _appeal(store, JudgePanel(VerdictEngine(generator)), _original(Winner.CHALLENGER))

    assert generator.calls == []


def test_reconsider_reuses_roster_when_too_few_fresh_judges(fake_generator) -> None:
    generator = fake_generator(*[_reply("TIE", 50, 50)] * 3)
    panel = JudgePanel(VerdictEngine(generator), personas=JUDGE_PERSONAS[:4])

    decision = asyncio.run(
        panel.reconsider(_context(), [j.name for j in JUDGE_PERSONAS[:3]])
    )

    assert len(decision.judges) == 3
    assert set(decision.judges) <= {j.name for j in JUDGE_PERSONAS[:4]}
