"""Types shared between providers, the model manager and its callers."""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class Completion:
    """Text returned by the collaborator plus token accounting."""

    text: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    model: str = ""
    provider: str = ""

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


class TextGenerator(Protocol):
    """Anything that can turn a system/user prompt pair into text.

    Implementations raise ``CollaboratorUnavailable`` on transport errors
    and timeouts.
    """

    @property
    def provider_name(self) -> str: ...

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int,
    ) -> Completion: ...
