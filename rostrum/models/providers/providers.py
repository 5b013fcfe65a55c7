from typing import TYPE_CHECKING, List

from .base_model_provider import BaseModelProvider
from .open_router_provider import OpenRouterProvider
from .openai_provider import OpenAICompatibleProvider

if TYPE_CHECKING:
    from rostrum.config.settings import ProviderConfig


class ProviderFactory:
    """Factory for creating model providers."""

    _providers: dict[str, type[BaseModelProvider]] = {
        "deepseek": OpenAICompatibleProvider,
        "openai": OpenAICompatibleProvider,
        "ollama": OpenAICompatibleProvider,
        "openrouter": OpenRouterProvider,
    }

    @classmethod
    def create_provider(cls, provider_config: "ProviderConfig") -> BaseModelProvider:
        """Create a provider instance for the configured provider name."""
        provider_name = provider_config.provider
        if provider_name not in cls._providers:
            raise ValueError(
                f"Unknown provider: {provider_name}. Available: {list(cls._providers.keys())}"
            )

        provider_class = cls._providers[provider_name]
        return provider_class(provider_config)

    @classmethod
    def get_available_providers(cls) -> List[str]:
        """Get list of available provider names."""
        return list(cls._providers.keys())
