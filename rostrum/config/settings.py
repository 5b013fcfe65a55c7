"""Configuration settings and data models."""

import json
import os
import shutil
from pathlib import Path
from typing import Dict, Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

PROVIDER_API_KEY_ENV = {
    "deepseek": "DEEPSEEK_API_KEY",
    "openai": "OPENAI_API_KEY",
    "openrouter": "OPENROUTER_API_KEY",
}

PROVIDER_DEFAULT_BASE_URLS = {
    "deepseek": "https://api.deepseek.com",
    "openai": "https://api.openai.com/v1",
    "openrouter": "https://openrouter.ai/api/v1",
    "ollama": "http://localhost:11434",
}


class ProviderConfig(BaseModel):
    """Connection settings for the text-generation service."""

    provider: str = Field(default="deepseek", description="deepseek, openai, openrouter or ollama")
    model: str = Field(default="deepseek-chat", description="Model name passed to the provider")
    base_url: Optional[str] = Field(
        default=None, description="Override the provider's default API base URL"
    )
    api_key: Optional[str] = Field(
        default=None, description="API key (falls back to the provider's env var)"
    )
    timeout: float = Field(default=60.0, description="Seconds before a call counts as failed")
    max_retries: int = Field(default=0, description="Transport-level retries inside the SDK")
    site_url: Optional[str] = Field(default=None, description="OpenRouter referrer header")
    app_name: Optional[str] = Field(default="Rostrum Debate Engine", description="OpenRouter X-Title")

    @field_validator("provider")
    @classmethod
    def validate_provider(cls, v: str) -> str:
        if v not in PROVIDER_DEFAULT_BASE_URLS:
            raise ValueError(f"Provider must be one of: {set(PROVIDER_DEFAULT_BASE_URLS)}")
        return v

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    def resolve_base_url(self) -> str:
        return self.base_url or PROVIDER_DEFAULT_BASE_URLS[self.provider]

    def resolve_api_key(self) -> Optional[str]:
        if self.api_key:
            return self.api_key
        env_name = PROVIDER_API_KEY_ENV.get(self.provider)
        return os.getenv(env_name) if env_name else None


class GenerationSettings(BaseModel):
    """Sampling parameters for one kind of collaborator call."""

    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=2000, gt=0)


class GenerationConfig(BaseModel):
    """Per-task sampling parameters.

    Verdicts and elimination favour variety, moderation favours consistency.
    """

    verdict: GenerationSettings = Field(
        default_factory=lambda: GenerationSettings(temperature=0.7, max_tokens=2000)
    )
    elimination: GenerationSettings = Field(
        default_factory=lambda: GenerationSettings(temperature=0.7, max_tokens=3000)
    )
    moderation: GenerationSettings = Field(
        default_factory=lambda: GenerationSettings(temperature=0.3, max_tokens=500)
    )
    debater: GenerationSettings = Field(
        default_factory=lambda: GenerationSettings(temperature=0.8, max_tokens=1000)
    )
    appeal: GenerationSettings = Field(
        default_factory=lambda: GenerationSettings(temperature=0.5, max_tokens=300)
    )


class DebateRulesConfig(BaseModel):
    """Game rules applied by the orchestrator, panel and tournaments."""

    round_duration_hours: float = Field(default=24.0, gt=0, description="Time allowed per round")
    finals_rounds: int = Field(default=3, ge=1, description="Rounds in a King of the Hill final")
    judge_panel_size: int = Field(default=3, ge=1, description="Judges drawn per debate")
    elo_k_factor: int = Field(default=32, gt=0)
    default_elo: int = Field(default=1200)


class PersonalityOverride(BaseModel):
    """Replacement prompt text for one debater personality."""

    system: str
    style: str


class SystemConfig(BaseModel):
    """System-wide configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")


class AppConfig(BaseModel):
    """Complete application configuration."""

    provider: ProviderConfig
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    rules: DebateRulesConfig = Field(default_factory=DebateRulesConfig)
    system: SystemConfig = Field(default_factory=SystemConfig)
    personalities: Dict[str, PersonalityOverride] = Field(
        default_factory=dict, description="Optional debater personality prompt overrides"
    )

    @classmethod
    def load_from_file(cls, config_path: Path) -> "AppConfig":
        """Load configuration from JSON file."""
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        required_sections = ["provider"]
        missing_sections = [section for section in required_sections if section not in data]
        if missing_sections:
            raise ValueError(f"Missing required config sections: {missing_sections}")

        return cls(**data)

    def save_to_file(self, config_path: Path) -> None:
        """Save configuration to YAML file."""
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w", encoding="utf-8") as f:
            yaml.dump(
                self.model_dump(exclude_unset=True),
                f,
                default_flow_style=False,
                indent=2,
            )


def get_default_config(config_path: Path = Path("rostrum_config.json")) -> AppConfig:
    """Load configuration from disk, creating it from the example or template if needed."""
    if not config_path.exists():
        example_path = config_path.with_name("rostrum_config.example.json")
        if example_path.exists():
            shutil.copy2(example_path, config_path)
        else:
            template_config = get_template_config()
            with open(config_path, "w", encoding="utf-8") as f:
                json.dump(template_config.model_dump(), f, indent=2)
    return AppConfig.load_from_file(config_path)


def get_template_config() -> AppConfig:
    """Get template configuration for config file generation."""
    return AppConfig(
        provider=ProviderConfig(
            provider="deepseek",
            model="deepseek-chat",
            api_key=None,  # Set here or via DEEPSEEK_API_KEY
            timeout=60.0,
        ),
        generation=GenerationConfig(),
        rules=DebateRulesConfig(),
        system=SystemConfig(log_level="INFO"),
    )
