from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from ..base_types import Completion

if TYPE_CHECKING:
    from rostrum.config.settings import ProviderConfig


class BaseModelProvider(ABC):
    """Abstract base class for model providers."""

    def __init__(self, provider_config: "ProviderConfig"):
        self.provider_config = provider_config

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the name of this provider."""
        pass

    @abstractmethod
    async def generate(
        self,
        messages: list[dict[str, str]],
        temperature: float,
        max_tokens: int,
    ) -> Completion:
        """Run one chat completion.

        Args:
            messages: Chat messages in OpenAI format
            temperature: Sampling temperature
            max_tokens: Completion token limit

        Returns:
            The completion text and token usage

        Note:
            Implementations let transport errors propagate; the model
            manager converts them into ``CollaboratorUnavailable``.
        """
        pass

    def build_messages(self, system_prompt: str, user_prompt: str) -> list[dict[str, str]]:
        return [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]

    async def aclose(self) -> None:
        """Release any pooled connections."""
        return None
