"""Model providers package."""

from .base_model_provider import BaseModelProvider
from .open_router_provider import OpenRouterProvider
from .openai_provider import OpenAICompatibleProvider
from .providers import ProviderFactory

__all__ = [
    "ProviderFactory",
    "OpenAICompatibleProvider",
    "OpenRouterProvider",
    "BaseModelProvider",
]
