import logging
from typing import TYPE_CHECKING, Any

from openai import AsyncOpenAI

from ..base_types import Completion
from .base_model_provider import BaseModelProvider

if TYPE_CHECKING:
    from rostrum.config.settings import ProviderConfig

logger = logging.getLogger(__name__)


class OpenAICompatibleProvider(BaseModelProvider):
    """Provider for any endpoint speaking the OpenAI chat completions API.

    Serves DeepSeek, OpenAI itself and Ollama's ``/v1`` compatibility layer.
    """

    def __init__(self, provider_config: "ProviderConfig", client: Any | None = None):
        super().__init__(provider_config)
        self._client = client if client is not None else self._create_client()

    def _create_client(self) -> AsyncOpenAI | None:
        config = self.provider_config
        base_url = config.resolve_base_url()

        if config.provider == "ollama":
            return AsyncOpenAI(
                base_url=f"{base_url.rstrip('/')}/v1",
                api_key="ollama",  # Ollama doesn't require real API key
                timeout=config.timeout,
                max_retries=config.max_retries,
            )

        api_key = config.resolve_api_key()
        if not api_key:
            logger.warning(
                f"No API key found for {config.provider}. Set it in the config or the environment."
            )
            return None

        return AsyncOpenAI(
            base_url=base_url,
            api_key=api_key,
            timeout=config.timeout,
            max_retries=config.max_retries,
        )

    @property
    def provider_name(self) -> str:
        return self.provider_config.provider

    async def generate(
        self,
        messages: list[dict[str, str]],
        temperature: float,
        max_tokens: int,
    ) -> Completion:
        if not self._client:
            raise RuntimeError(f"{self.provider_name} client not initialized - check API key")

        response = await self._client.chat.completions.create(
            model=self.provider_config.model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )

        content = response.choices[0].message.content or ""
        usage = getattr(response, "usage", None)

        if not content.strip():
            logger.warning(
                f"{self.provider_name} model {self.provider_config.model} returned empty content"
            )

        return Completion(
            text=content.strip(),
            prompt_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            completion_tokens=getattr(usage, "completion_tokens", 0) or 0,
            model=self.provider_config.model,
            provider=self.provider_name,
        )

    async def aclose(self) -> None:
        if self._client is not None and hasattr(self._client, "close"):
            await self._client.close()
