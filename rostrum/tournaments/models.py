"""King of the Hill data models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from rostrum.debate_engine.types import ChallengeType


class RoundSubmission(BaseModel):
    """One participant's entry for a round; empty content means nothing was submitted."""

    participant_id: str
    display_name: str
    content: str = ""


class EliminationResponse(BaseModel):
    """Shape a judge's elimination JSON must have.

    Scores are unbounded here; ``EliminationScorer`` clamps and repairs them.
    """

    model_config = ConfigDict(populate_by_name=True)

    scores: dict[str, float | None]
    reasoning: dict[str, str] = Field(default_factory=dict)
    elimination_reasoning: str | None = Field(default=None, alias="eliminationReasoning")


class RoundScoreSet(BaseModel):
    """One judge's scores for every active participant in a round."""

    scores: dict[str, float] = Field(..., description="participant id -> score in [0, 100]")
    reasoning: dict[str, str] = Field(default_factory=dict)
    elimination_reasoning: str
    eliminate_count: int
    degraded: bool = Field(default=False, description="True when scores are the uniform fallback")
    judge_name: str | None = None


class EliminationOutcome(BaseModel):
    """Ranking and cut for a round, after combining every judge."""

    ranking: list[tuple[str, float]] = Field(..., description="(participant id, total), best first")
    eliminated_ids: list[str]
    advancing_ids: list[str]
    explanations: dict[str, str] = Field(default_factory=dict)


class TournamentStage(Enum):
    GROUP_ROUND = "group_round"
    FINALS = "finals"
    FINISHED = "finished"


class RoundPlan(BaseModel):
    """What the tournament runs next."""

    stage: TournamentStage
    challenge_type: ChallengeType | None = None
    total_rounds: int = 0
