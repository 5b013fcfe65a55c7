"""Debater personality prompts.

The catalog is assembled once from the built-in defaults plus any
overrides in ``AppConfig.personalities`` and is read-only afterwards.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from rostrum.config.settings import PersonalityOverride

logger = logging.getLogger(__name__)


class DebaterPersonality(Enum):
    BALANCED = "BALANCED"
    SMART = "SMART"
    AGGRESSIVE = "AGGRESSIVE"
    CALM = "CALM"
    WITTY = "WITTY"
    ANALYTICAL = "ANALYTICAL"


@dataclass(frozen=True)
class PersonalityPrompt:
    system_persona: str
    style_guidance: str


DEFAULT_PERSONALITY_PROMPTS: dict[DebaterPersonality, PersonalityPrompt] = {
    DebaterPersonality.BALANCED: PersonalityPrompt(
        "You are a balanced debater who considers multiple perspectives and presents well-rounded arguments.",
        "Present balanced, thoughtful arguments that consider both sides of the issue. "
        "Be fair and measured in your responses.",
    ),
    DebaterPersonality.SMART: PersonalityPrompt(
        "You are an intelligent, analytical debater who uses facts, logic, and evidence to support your arguments.",
        "Use facts, statistics, and logical reasoning. Be precise and analytical. Cite evidence when possible.",
    ),
    DebaterPersonality.AGGRESSIVE: PersonalityPrompt(
        "You are an aggressive, assertive debater who takes strong positions and challenges opponents directly.",
        "Be assertive and confrontational. Take strong positions. "
        "Challenge your opponent directly and forcefully.",
    ),
    DebaterPersonality.CALM: PersonalityPrompt(
        "You are a calm, composed debater who maintains composure and presents arguments in a measured way.",
        "Stay calm and composed. Present arguments in a measured, thoughtful manner. Avoid emotional language.",
    ),
    DebaterPersonality.WITTY: PersonalityPrompt(
        "You are a witty, clever debater who uses humor, wordplay, and clever arguments to make your points.",
        "Use humor, wordplay, and clever arguments. Be entertaining while making your points. "
        "Use wit to undermine opponents.",
    ),
    DebaterPersonality.ANALYTICAL: PersonalityPrompt(
        "You are an analytical debater who breaks down complex issues and provides detailed, data-driven analysis.",
        "Provide detailed analysis. Break down complex issues. Use data and evidence. "
        "Be thorough and comprehensive.",
    ),
}


def parse_personality(value: "DebaterPersonality | str | None") -> DebaterPersonality:
    """Coerce a stored personality name, defaulting to BALANCED."""
    if isinstance(value, DebaterPersonality):
        return value
    if value:
        try:
            return DebaterPersonality(value.strip().upper())
        except ValueError:
            logger.warning(f"Unknown debater personality '{value}', using BALANCED")
    return DebaterPersonality.BALANCED


class PersonalityCatalog:
    """Read-only mapping of personality to prompt text."""

    def __init__(self, overrides: Mapping[str, PersonalityOverride] | None = None):
        prompts = dict(DEFAULT_PERSONALITY_PROMPTS)
        for name, override in (overrides or {}).items():
            try:
                personality = DebaterPersonality(name.upper())
            except ValueError:
                raise ValueError(f"Unknown personality in config: {name}") from None
            prompts[personality] = PersonalityPrompt(override.system, override.style)
        self._prompts = MappingProxyType(prompts)

    @property
    def prompts(self) -> Mapping[DebaterPersonality, PersonalityPrompt]:
        return self._prompts

    def get(self, personality: "DebaterPersonality | str | None") -> PersonalityPrompt:
        return self._prompts[parse_personality(personality)]
