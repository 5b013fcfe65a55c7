"""Model manager: the single gateway to the text-generation service."""

from __future__ import annotations

import asyncio
import logging

from rostrum.config.settings import ProviderConfig
from rostrum.exceptions import CollaboratorUnavailable

from .base_types import Completion
from .providers.base_model_provider import BaseModelProvider
from .providers.providers import ProviderFactory

logger = logging.getLogger(__name__)


class ModelManager:
    """Bounds provider calls with a timeout and normalises their failures."""

    def __init__(
        self,
        provider_config: ProviderConfig,
        provider: BaseModelProvider | None = None,
    ):
        self._provider_config = provider_config
        self._provider = provider or ProviderFactory.create_provider(provider_config)

    @property
    def provider_name(self) -> str:
        return self._provider.provider_name

    @property
    def model_name(self) -> str:
        return self._provider_config.model

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int,
    ) -> Completion:
        """Generate one completion.

        Raises:
            CollaboratorUnavailable: on timeout, transport failure or empty output.
        """
        messages = self._provider.build_messages(system_prompt, user_prompt)
        timeout = self._provider_config.timeout

        try:
            completion = await asyncio.wait_for(
                self._provider.generate(messages, temperature, max_tokens),
                timeout=timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.error(f"{self.provider_name} call timed out after {timeout:.1f}s")
            raise CollaboratorUnavailable(
                self.provider_name, f"timed out after {timeout:.1f}s"
            ) from exc
        except CollaboratorUnavailable:
            raise
        except Exception as exc:
            logger.error(f"{self.provider_name} call failed: {type(exc).__name__}: {exc}")
            raise CollaboratorUnavailable(
                self.provider_name, f"{type(exc).__name__}: {exc}"
            ) from exc

        if not completion.text.strip():
            raise CollaboratorUnavailable(self.provider_name, "empty completion")

        logger.debug(
            f"Generated {len(completion.text)} chars from {self.provider_name} "
            f"({completion.total_tokens} tokens)"
        )
        return completion

    async def aclose(self) -> None:
        await self._provider.aclose()
