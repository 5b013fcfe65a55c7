"""AI moderation of user reports and flagged statements.

Moderation must never leave content unresolved: any collaborator failure
or unusable answer resolves to ESCALATE with zero confidence so a human
looks at it.
"""

import logging
from typing import Optional

from rostrum.config.settings import GenerationSettings
from rostrum.exceptions import CollaboratorUnavailable
from rostrum.models.base_types import TextGenerator
from rostrum.models.usage import UsageLedger, timed_completion
from rostrum.validation import clamp, parse_response

from .models import (
    ModerationAction,
    ModerationDecision,
    ModerationResponse,
    ReportContext,
    StatementContext,
)

logger = logging.getLogger(__name__)

REPORT_SYSTEM_PROMPT = (
    "You are a fair and consistent content moderator. "
    "Analyze reports objectively and follow platform guidelines strictly."
)
STATEMENT_SYSTEM_PROMPT = (
    "You are a fair and consistent content moderator. "
    "Analyze statements objectively and follow platform guidelines strictly."
)

SERVICE_UNAVAILABLE = "AI moderation service unavailable"
PARSE_FAILED = "AI moderation failed to parse response"

_SEVERITY_AND_FORMAT = """SEVERITY LEVELS:
- LOW: Minor violations, first-time offenses
- MEDIUM: Moderate violations, repeated patterns
- HIGH: Serious violations, potential harm
- CRITICAL: Immediate threat, illegal content

Respond in JSON format:
{
  "action": "APPROVE" | "REMOVE" | "ESCALATE",
  "confidence": 0-100,
  "reasoning": "Brief explanation",
  "severity": "LOW" | "MEDIUM" | "HIGH" | "CRITICAL" (only if REMOVE)
}"""


def build_report_prompt(context: ReportContext) -> str:
    details = [f"- Reason: {context.report_reason}"]
    if context.report_description:
        details.append(f"- Description: {context.report_description}")
    if context.content:
        details.append(f"- Reported Content: {context.content}")
    if context.author_username:
        details.append(f"- Author: {context.author_username}")
    if context.debate_topic:
        details.append(f"- Debate Topic: {context.debate_topic}")
    detail_text = "\n".join(details)

    return f"""You are an AI content moderator for a debate platform. Analyze this user report and determine the appropriate action.

REPORT DETAILS:
{detail_text}

MODERATION GUIDELINES:
1. **APPROVE** (dismiss report) if:
   - Content is within platform guidelines
   - Report appears to be false/spam/abuse of reporting system
   - Content is controversial but not violating rules
   - Confidence: 80%+

2. **REMOVE** (take action) if:
   - Clear violation: harassment, hate speech, threats, spam
   - Explicit content, illegal activity
   - Clear terms of service violation
   - Confidence: 80%+

3. **ESCALATE** (human review needed) if:
   - Ambiguous case requiring context
   - Edge case not clearly covered by guidelines
   - Confidence: < 80% for either action
   - Potential false positive/negative

{_SEVERITY_AND_FORMAT}"""


def build_statement_prompt(context: StatementContext) -> str:
    return f"""You are an AI content moderator for a debate platform. Analyze this flagged statement and determine if it should be removed.

STATEMENT DETAILS:
- Content: {context.content}
- Author: {context.author_username}
- Debate Topic: {context.debate_topic}
- Round: {context.round_number}

MODERATION GUIDELINES:
1. **APPROVE** (keep statement) if:
   - Content is within platform guidelines
   - Strong but respectful argumentation
   - Controversial but not violating rules
   - Confidence: 80%+

2. **REMOVE** (delete statement) if:
   - Clear violation: harassment, hate speech, threats, spam
   - Explicit content, illegal activity
   - Clear terms of service violation
   - Confidence: 80%+

3. **ESCALATE** (human review needed) if:
   - Ambiguous case requiring context
   - Edge case not clearly covered by guidelines
   - Confidence: < 80% for either action

{_SEVERITY_AND_FORMAT}"""


def escalation(cause: str) -> ModerationDecision:
    """The safe default decision."""
    return ModerationDecision(
        action=ModerationAction.ESCALATE,
        confidence=0.0,
        reasoning=f"{cause}, escalating for human review",
        severity=None,
        fallback=True,
    )


class ModerationDecisionEngine:
    """Classifies reports and flagged statements as APPROVE, REMOVE or ESCALATE."""

    def __init__(
        self,
        generator: TextGenerator,
        settings: Optional[GenerationSettings] = None,
        ledger: Optional[UsageLedger] = None,
    ):
        self.generator = generator
        self.settings = settings or GenerationSettings(temperature=0.3, max_tokens=500)
        self.ledger = ledger

    async def moderate_report(
        self, context: ReportContext, subject_id: Optional[str] = None
    ) -> ModerationDecision:
        return await self._decide(
            REPORT_SYSTEM_PROMPT,
            build_report_prompt(context),
            subject_id,
            "moderate_report",
        )

    async def moderate_statement(
        self, context: StatementContext, subject_id: Optional[str] = None
    ) -> ModerationDecision:
        return await self._decide(
            STATEMENT_SYSTEM_PROMPT,
            build_statement_prompt(context),
            subject_id,
            "moderate_statement",
        )

    async def _decide(
        self,
        system_prompt: str,
        user_prompt: str,
        subject_id: Optional[str],
        operation: str,
    ) -> ModerationDecision:
        try:
            completion = await timed_completion(
                self.generator,
                system_prompt,
                user_prompt,
                self.settings,
                ledger=self.ledger,
                subject_id=subject_id,
                operation=operation,
            )
        except CollaboratorUnavailable as e:
            logger.error(f"Moderation call failed for {subject_id or 'unknown subject'}: {e}")
            return escalation(SERVICE_UNAVAILABLE)

        parsed = parse_response(completion.text, ModerationResponse)
        if not parsed.ok:
            logger.error(f"Failed to parse moderation response: {parsed.error}")
            logger.debug(f"Raw moderation response: {parsed.error.raw_excerpt}")
            return escalation(PARSE_FAILED)

        response = parsed.value
        confidence = clamp(response.confidence, 0.0, 100.0)
        if confidence != response.confidence:
            logger.warning(f"Moderation confidence {response.confidence} clamped to {confidence:g}")

        decision = ModerationDecision(
            action=response.action,
            confidence=confidence,
            reasoning=response.reasoning,
            severity=response.severity,
        )
        logger.info(
            f"Moderation decision for {subject_id or 'unknown subject'}: "
            f"{decision.action.value} ({decision.confidence:g}%)"
        )
        return decision
