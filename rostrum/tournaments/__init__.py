"""King of the Hill tournament rounds."""

from .elimination import (
    EliminationScorer,
    build_round_submissions,
    eliminate_count,
    next_round_plan,
    resolve_round,
)
from .models import (
    EliminationOutcome,
    EliminationResponse,
    RoundPlan,
    RoundScoreSet,
    RoundSubmission,
    TournamentStage,
)

__all__ = [
    "EliminationScorer",
    "build_round_submissions",
    "eliminate_count",
    "next_round_plan",
    "resolve_round",
    "EliminationOutcome",
    "EliminationResponse",
    "RoundPlan",
    "RoundScoreSet",
    "RoundSubmission",
    "TournamentStage",
]
