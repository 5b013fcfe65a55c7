"""Pytest configuration and shared fixtures.

Provides fake collaborators (text generator, usage ledger, debate store)
so every component can be exercised without network or database access.
"""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from rostrum.debate_engine.models import Debate, DebateParticipant, Statement
from rostrum.debate_engine.types import ChallengeType, DebateStatus, Position
from rostrum.exceptions import DuplicateSubmission
from rostrum.models.base_types import Completion
from rostrum.models.usage import UsageRecord


# =============================================================================
# FAKE COLLABORATORS
# =============================================================================


class FakeTextGenerator:
    """Scripted stand-in for ``ModelManager``.

    Each queued item is either response text, a ``Completion`` or an
    exception to raise.
    """

    def __init__(self, *responses: object, provider_name: str = "fake"):
        self._responses = list(responses)
        self._provider_name = provider_name
        self.calls: list[dict] = []

    @property
    def provider_name(self) -> str:
        return self._provider_name

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int,
    ) -> Completion:
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        if not self._responses:
            raise AssertionError("No fake responses left")
        item = self._responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, Completion):
            return item
        return Completion(
            text=str(item),
            prompt_tokens=120,
            completion_tokens=80,
            model="fake-model",
            provider=self._provider_name,
        )


class FakeLedger:
    """Collects usage records in memory."""

    def __init__(self) -> None:
        self.records: list[UsageRecord] = []

    async def log_invocation(self, record: UsageRecord) -> None:
        self.records.append(record)


class InMemoryDebateStore:
    """Dict-backed ``DebateStore`` enforcing the (debate, author, round) uniqueness rule."""

    def __init__(self, *debates: Debate):
        self.debates: dict[str, Debate] = {d.id: d for d in debates}
        self.statements: list[Statement] = []
        self.verdicts: list[tuple[str, str, object]] = []
        self.completed: list[str] = []

    def add_statement(self, debate_id: str, author_id: str, round_number: int, content: str) -> None:
        self.statements.append(Statement(debate_id, author_id, round_number, content))

    async def get_debate(self, debate_id: str) -> Debate | None:
        return self.debates.get(debate_id)

    async def list_statements(self, debate_id: str) -> list[Statement]:
        return [s for s in self.statements if s.debate_id == debate_id]

    async def create_statement(
        self, debate_id: str, author_id: str, round_number: int, content: str
    ) -> Statement:
        for s in self.statements:
            if (s.debate_id, s.author_id, s.round_number) == (debate_id, author_id, round_number):
                raise DuplicateSubmission(debate_id, author_id, round_number)
        statement = Statement(debate_id, author_id, round_number, content)
        self.statements.append(statement)
        return statement

    async def update_debate_round(
        self, debate_id: str, current_round: int, round_deadline: datetime | None
    ) -> None:
        debate = self.debates[debate_id]
        debate.current_round = current_round
        debate.round_deadline = round_deadline

    async def complete_debate(self, debate_id: str) -> None:
        self.debates[debate_id].status = DebateStatus.COMPLETED
        self.debates[debate_id].round_deadline = None
        self.completed.append(debate_id)

    async def update_debate_status(self, debate_id: str, status: DebateStatus) -> None:
        self.debates[debate_id].status = status

    async def list_active_debates(self) -> list[Debate]:
        return [d for d in self.debates.values() if d.status == DebateStatus.ACTIVE]

    async def record_verdict(self, debate_id: str, judge_name: str, verdict: object) -> None:
        self.verdicts.append((debate_id, judge_name, verdict))


# =============================================================================
# SHARED FIXTURES - Available to all test modules
# =============================================================================


@pytest.fixture
def sample_debate_topic() -> str:
    """Provide a standard debate topic for testing."""
    return "Should artificial intelligence be regulated by governments?"


@pytest.fixture
def now() -> datetime:
    """A fixed 'current time' for deadline arithmetic."""
    return datetime(2026, 3, 1, 12, 0, 0)


@pytest.fixture
def fake_generator() -> type[FakeTextGenerator]:
    """Factory for scripted text generators."""
    return FakeTextGenerator


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def make_store() -> type[InMemoryDebateStore]:
    return InMemoryDebateStore


@pytest.fixture
def one_on_one_debate(sample_debate_topic: str, now: datetime) -> Debate:
    """An ACTIVE three-round debate between Alice (FOR) and Bob (AGAINST)."""
    return Debate(
        id="debate-1",
        topic=sample_debate_topic,
        challenger_id="alice",
        challenger_name="Alice",
        challenger_position=Position.FOR,
        opponent_id="bob",
        opponent_name="Bob",
        opponent_position=Position.AGAINST,
        total_rounds=3,
        current_round=1,
        status=DebateStatus.ACTIVE,
        round_deadline=now + timedelta(hours=24),
    )


@pytest.fixture
def group_debate(sample_debate_topic: str, now: datetime) -> Debate:
    """An ACTIVE King of the Hill round with five participants."""
    participants = [
        DebateParticipant(user_id=f"user-{i}", display_name=f"Debater{i}") for i in range(1, 6)
    ]
    return Debate(
        id="koth-1",
        topic=sample_debate_topic,
        challenger_id="user-1",
        challenge_type=ChallengeType.GROUP,
        participants=participants,
        total_rounds=1,
        current_round=1,
        status=DebateStatus.ACTIVE,
        round_deadline=now + timedelta(hours=24),
    )


# =============================================================================
# PYTEST CONFIGURATION HOOKS
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
