"""Debate turn order, round advancement and AI debaters."""

from .types import ChallengeType, DebateStatus, Position, MISSED_DEADLINE_CONTENT
from .models import Debate, DebateParticipant, Statement
from .turns import RoundAction, RoundDecision, TurnStateMachine, transition_status
from .store import DebateStore
from .personalities import DebaterPersonality, PersonalityCatalog, PersonalityPrompt
from .ai_debater import AIDebater
from .orchestrator import AdvanceResult, DebateOrchestrator, SubmissionResult

__all__ = [
    "ChallengeType",
    "DebateStatus",
    "Position",
    "MISSED_DEADLINE_CONTENT",
    "Debate",
    "DebateParticipant",
    "Statement",
    "RoundAction",
    "RoundDecision",
    "TurnStateMachine",
    "transition_status",
    "DebateStore",
    "DebaterPersonality",
    "PersonalityCatalog",
    "PersonalityPrompt",
    "AIDebater",
    "AdvanceResult",
    "DebateOrchestrator",
    "SubmissionResult",
]
