"""Persistence interface consumed by the orchestrator.

The engine never talks to a database directly. Whatever backs the
platform implements this protocol and is handed to ``DebateOrchestrator``
and ``adjudicate_debate``.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Protocol

from .models import Debate, Statement
from .types import DebateStatus

if TYPE_CHECKING:
    from rostrum.judges.base import VerdictResult


class DebateStore(Protocol):
    async def get_debate(self, debate_id: str) -> Debate | None: ...

    async def list_statements(self, debate_id: str) -> list[Statement]: ...

    async def create_statement(
        self, debate_id: str, author_id: str, round_number: int, content: str
    ) -> Statement:
        """Persist a statement.

        Must raise ``DuplicateSubmission`` when the (debate, author, round)
        triple already exists; this is the only concurrency guard the
        engine relies on.
        """
        ...

    async def update_debate_round(
        self, debate_id: str, current_round: int, round_deadline: datetime | None
    ) -> None: ...

    async def complete_debate(self, debate_id: str) -> None: ...

    async def update_debate_status(self, debate_id: str, status: DebateStatus) -> None: ...

    async def list_active_debates(self) -> list[Debate]: ...

    async def record_verdict(
        self, debate_id: str, judge_name: str, verdict: VerdictResult
    ) -> None: ...
