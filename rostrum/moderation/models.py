"""Moderation inputs, response schema and decisions."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator


class ModerationAction(Enum):
    APPROVE = "APPROVE"
    REMOVE = "REMOVE"
    ESCALATE = "ESCALATE"


class Severity(Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class ReportContext(BaseModel):
    """A user report about some piece of content."""

    report_reason: str
    report_description: str | None = None
    content: str | None = None
    author_username: str | None = None
    debate_topic: str | None = None


class StatementContext(BaseModel):
    """A debate statement flagged for review."""

    content: str
    author_username: str
    debate_topic: str
    round_number: int


def _upper(v: Any) -> Any:
    return v.strip().upper() if isinstance(v, str) else v


class ModerationResponse(BaseModel):
    """Shape the moderator's JSON answer must have.

    A REMOVE without a severity is rejected; a severity on any other
    action is dropped.
    """

    action: ModerationAction
    confidence: float = Field(..., allow_inf_nan=False)
    reasoning: str
    severity: Severity | None = None

    @field_validator("action", "severity", mode="before")
    @classmethod
    def normalize_enums(cls, v: Any) -> Any:
        return _upper(v)

    @model_validator(mode="after")
    def check_severity(self) -> "ModerationResponse":
        if self.action == ModerationAction.REMOVE and self.severity is None:
            raise ValueError("severity is required when action is REMOVE")
        if self.action != ModerationAction.REMOVE:
            self.severity = None
        return self


class ModerationDecision(BaseModel):
    """Final moderation outcome; ``fallback`` marks the safe default."""

    action: ModerationAction
    confidence: float = Field(..., ge=0, le=100)
    reasoning: str
    severity: Severity | None = None
    fallback: bool = False

    @model_validator(mode="after")
    def severity_only_for_remove(self) -> "ModerationDecision":
        if (self.action == ModerationAction.REMOVE) != (self.severity is not None):
            raise ValueError("severity must be set exactly when action is REMOVE")
        return self

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "action": self.action.value,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
        }
        if self.severity is not None:
            data["severity"] = self.severity.value
        return data
