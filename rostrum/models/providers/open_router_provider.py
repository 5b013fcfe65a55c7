import logging
from typing import TYPE_CHECKING

import httpx

from ..base_types import Completion
from .base_model_provider import BaseModelProvider

if TYPE_CHECKING:
    from rostrum.config.settings import ProviderConfig

logger = logging.getLogger(__name__)


class OpenRouterProvider(BaseModelProvider):
    """OpenRouter model provider implementation."""

    def __init__(
        self,
        provider_config: "ProviderConfig",
        http_client: httpx.AsyncClient | None = None,
    ):
        super().__init__(provider_config)
        self._api_key = provider_config.resolve_api_key()
        if not self._api_key:
            logger.warning(
                "No OpenRouter API key found. Set OPENROUTER_API_KEY or configure the provider."
            )
        self._http_client = http_client
        self._owns_client = http_client is None

    @property
    def provider_name(self) -> str:
        return "openrouter"

    def _headers(self) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        if self.provider_config.site_url:
            headers["HTTP-Referer"] = self.provider_config.site_url
        if self.provider_config.app_name:
            headers["X-Title"] = self.provider_config.app_name
        return headers

    def _client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.provider_config.timeout)
        return self._http_client

    async def generate(
        self,
        messages: list[dict[str, str]],
        temperature: float,
        max_tokens: int,
    ) -> Completion:
        if not self._api_key:
            raise RuntimeError("OpenRouter client not initialized - check API key")

        payload = {
            "model": self.provider_config.model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "reasoning": {"exclude": True},
        }

        http_response = await self._client().post(
            f"{self.provider_config.resolve_base_url()}/chat/completions",
            json=payload,
            headers=self._headers(),
            timeout=self.provider_config.timeout,
        )
        http_response.raise_for_status()
        response_data = http_response.json()

        content = response_data["choices"][0]["message"].get("content") or ""
        usage = response_data.get("usage") or {}

        if not content.strip():
            logger.warning(
                f"OpenRouter model {self.provider_config.model} returned empty content. "
                f"Response data: {response_data}"
            )

        return Completion(
            text=content.strip(),
            prompt_tokens=usage.get("prompt_tokens", 0) or 0,
            completion_tokens=usage.get("completion_tokens", 0) or 0,
            model=self.provider_config.model,
            provider=self.provider_name,
        )

    async def aclose(self) -> None:
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
