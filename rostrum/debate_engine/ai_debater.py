"""Statement generation for AI-controlled debaters."""

import logging
from typing import Iterable

from rostrum.config.settings import GenerationSettings
from rostrum.exceptions import CollaboratorUnavailable
from rostrum.models.base_types import TextGenerator
from rostrum.models.usage import UsageLedger, timed_completion

from .models import Debate, Statement
from .personalities import DebaterPersonality, PersonalityCatalog, parse_personality

logger = logging.getLogger(__name__)


class AIDebater:
    """Writes one round's statement on behalf of an AI participant."""

    def __init__(
        self,
        generator: TextGenerator,
        settings: GenerationSettings | None = None,
        catalog: PersonalityCatalog | None = None,
        ledger: UsageLedger | None = None,
    ):
        self.generator = generator
        self.settings = settings or GenerationSettings(temperature=0.8, max_tokens=1000)
        self.catalog = catalog or PersonalityCatalog()
        self.ledger = ledger

    def _opponent_label(self, debate: Debate, participant_id: str) -> str:
        if debate.is_group:
            others = [
                debate.display_name_of(pid) for pid in debate.roster() if pid != participant_id
            ]
            return f"{', '.join(others) or 'the other participants'} (each arguing their own case)"

        opponent_id = (
            debate.opponent_id if participant_id == debate.challenger_id else debate.challenger_id
        )
        if opponent_id is None:
            raise ValueError(f"Debate {debate.id} has no opponent")
        return f"{debate.display_name_of(opponent_id)} ({debate.position_of(opponent_id).value})"

    def build_system_prompt(
        self, debate: Debate, participant_id: str, personality: DebaterPersonality
    ) -> str:
        prompt = self.catalog.get(personality)
        position = debate.position_of(participant_id).value

        return f"""{prompt.system_persona}

You are participating in a debate on the topic: "{debate.topic}"

Your position: {position}
Your opponent: {self._opponent_label(debate, participant_id)}

{prompt.style_guidance}

Rules:
- Keep your response between 200-500 words
- Stay on topic and address the debate question
- Respond to your opponent's previous arguments
- Be persuasive and compelling
- Maintain your personality style: {personality.value.lower()}
- Do not use markdown formatting
- Write in first person
- NEVER start with pleasantries like "Thank you for your thoughtful...", "Thank you for the opportunity...", "I appreciate...", or "Great point...". Jump straight into your argument. You are a debater, not a diplomat.
- Sound natural and human. Avoid overly formal or robotic language."""

    def build_user_prompt(
        self, debate: Debate, statements: Iterable[Statement], participant_id: str
    ) -> str:
        round_number = debate.current_round
        previous = sorted(
            (s for s in statements if s.round_number < round_number),
            key=lambda s: (s.round_number, s.created_at),
        )

        lines = [f'DEBATE TOPIC: "{debate.topic}"']
        if debate.description:
            lines.append(f"DESCRIPTION: {debate.description}")
        lines.append("")
        lines.append(f"YOUR POSITION: {debate.position_of(participant_id).value}")
        lines.append(f"OPPONENT: {self._opponent_label(debate, participant_id)}")
        lines.append("")
        lines.append("PREVIOUS ARGUMENTS:")

        if previous:
            lines.append(
                "\n\n".join(
                    f"Round {s.round_number} - {debate.display_name_of(s.author_id)} "
                    f"({debate.position_of(s.author_id).value}): {s.content}"
                    for s in previous
                )
            )
            closing = "Respond to your opponent and strengthen your position."
        else:
            lines.append("This is the first round. Present your opening argument.")
            closing = "Present a strong opening argument for your position."

        lines.append("")
        lines.append(f"Now, write your response for Round {round_number}. {closing}")
        return "\n".join(lines)

    async def compose_statement(
        self,
        debate: Debate,
        statements: Iterable[Statement],
        participant_id: str,
        personality: "DebaterPersonality | str | None" = None,
    ) -> str:
        """Generate the participant's statement for ``debate.current_round``.

        Raises:
            CollaboratorUnavailable: the call failed or produced no text.
        """
        resolved = parse_personality(personality)
        statements = list(statements)
        system_prompt = self.build_system_prompt(debate, participant_id, resolved)
        user_prompt = self.build_user_prompt(debate, statements, participant_id)

        completion = await timed_completion(
            self.generator,
            system_prompt,
            user_prompt,
            self.settings,
            ledger=self.ledger,
            subject_id=debate.id,
            operation="debater_response",
        )

        text = completion.text.strip()
        if not text:
            raise CollaboratorUnavailable(self.generator.provider_name, "Empty response from AI")

        logger.info(
            f"Generated {resolved.value.lower()} statement for {participant_id} "
            f"in round {debate.current_round} of debate {debate.id} ({len(text)} chars)"
        )
        return text
