"""Configuration models."""

from .settings import (
    AppConfig,
    DebateRulesConfig,
    GenerationConfig,
    GenerationSettings,
    PersonalityOverride,
    ProviderConfig,
    SystemConfig,
    get_default_config,
    get_template_config,
)

__all__ = [
    "AppConfig",
    "DebateRulesConfig",
    "GenerationConfig",
    "GenerationSettings",
    "PersonalityOverride",
    "ProviderConfig",
    "SystemConfig",
    "get_default_config",
    "get_template_config",
]
