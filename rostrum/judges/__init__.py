"""Judging system implementations."""

from .base import StatementRecord, VerdictContext, VerdictResponse, VerdictResult, Winner
from .ai_judge import VerdictEngine, build_debate_summary
from .personas import JUDGE_PERSONAS, JudgePersona, get_persona
from .panel import (
    AppealOutcome,
    JudgePanel,
    PanelDecision,
    adjudicate_debate,
    appeal_debate,
    calculate_elo_change,
    explain_appeal,
    make_completion_hook,
    select_judges,
    tally_votes,
)

__all__ = [
    "StatementRecord",
    "VerdictContext",
    "VerdictResponse",
    "VerdictResult",
    "Winner",
    "VerdictEngine",
    "build_debate_summary",
    "JUDGE_PERSONAS",
    "JudgePersona",
    "get_persona",
    "AppealOutcome",
    "JudgePanel",
    "PanelDecision",
    "adjudicate_debate",
    "appeal_debate",
    "calculate_elo_change",
    "explain_appeal",
    "make_completion_hook",
    "select_judges",
    "tally_votes",
]
