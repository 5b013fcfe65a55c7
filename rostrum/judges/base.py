"""Inputs, response schema and results for one-on-one adjudication."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rostrum.debate_engine.models import Debate, Statement
from rostrum.debate_engine.types import DebateStatus, is_missed_submission


class Winner(Enum):
    CHALLENGER = "CHALLENGER"
    OPPONENT = "OPPONENT"
    TIE = "TIE"


@dataclass
class StatementRecord:
    """A statement as the judge sees it: who said it, from which side."""

    round_number: int
    author: str
    position: str
    content: str

    @property
    def missed(self) -> bool:
        return is_missed_submission(self.content)


@dataclass
class VerdictContext:
    """Everything a judge needs to rule on a one-on-one debate."""

    topic: str
    challenger_name: str
    opponent_name: str
    challenger_position: str
    opponent_position: str
    current_round: int
    total_rounds: int
    is_complete: bool
    statements: List[StatementRecord] = field(default_factory=list)
    description: Optional[str] = None

    @property
    def naturally_completed(self) -> bool:
        return self.is_complete and self.current_round >= self.total_rounds

    @property
    def has_expired_statements(self) -> bool:
        return any(s.missed for s in self.statements)

    @classmethod
    def from_debate(cls, debate: Debate, statements: Iterable[Statement]) -> "VerdictContext":
        if debate.is_group or debate.opponent_id is None:
            raise ValueError(f"Debate {debate.id} is not a one-on-one debate with an opponent")

        ordered = sorted(
            (s for s in statements if s.debate_id == debate.id),
            key=lambda s: (s.round_number, s.created_at),
        )
        records = [
            StatementRecord(
                round_number=s.round_number,
                author=debate.display_name_of(s.author_id),
                position=debate.position_of(s.author_id).value,
                content=s.content,
            )
            for s in ordered
        ]
        return cls(
            topic=debate.topic,
            challenger_name=debate.display_name_of(debate.challenger_id),
            opponent_name=debate.display_name_of(debate.opponent_id),
            challenger_position=debate.challenger_position.value,
            opponent_position=debate.opponent_position.value,
            current_round=debate.current_round,
            total_rounds=debate.total_rounds,
            is_complete=debate.status in (DebateStatus.COMPLETED, DebateStatus.VERDICT_READY),
            statements=records,
            description=debate.description,
        )


class VerdictResponse(BaseModel):
    """Shape a judge's JSON answer must have.

    Scores are optional and unbounded here; the engine defaults and clamps
    them.
    """

    model_config = ConfigDict(populate_by_name=True)

    winner: Winner
    reasoning: str
    challenger_score: Optional[float] = Field(default=None, alias="challengerScore")
    opponent_score: Optional[float] = Field(default=None, alias="opponentScore")

    @field_validator("winner", mode="before")
    @classmethod
    def normalize_winner(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("reasoning")
    @classmethod
    def require_reasoning(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("reasoning must not be empty")
        return v.strip()


@dataclass
class VerdictResult:
    """A validated verdict with both scores inside [0, 100]."""

    winner: Winner
    reasoning: str
    challenger_score: float
    opponent_score: float
    judge_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "winner": self.winner.value,
            "reasoning": self.reasoning,
            "challengerScore": self.challenger_score,
            "opponentScore": self.opponent_score,
        }
        if self.judge_name:
            data["judge"] = self.judge_name
        return data
