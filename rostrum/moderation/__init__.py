"""Content moderation for reports and flagged statements."""

from .models import (
    ModerationAction,
    ModerationDecision,
    ModerationResponse,
    ReportContext,
    Severity,
    StatementContext,
)
from .manager import ModerationDecisionEngine, escalation

__all__ = [
    "ModerationAction",
    "ModerationDecision",
    "ModerationResponse",
    "ReportContext",
    "Severity",
    "StatementContext",
    "ModerationDecisionEngine",
    "escalation",
]
