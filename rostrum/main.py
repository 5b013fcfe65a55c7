"""Command-line entry point for the Rostrum adjudication engine.

Reads already-fetched domain data from a JSON file, runs one component
against the configured provider and prints the result as JSON.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

from rostrum.config.settings import AppConfig, get_default_config
from rostrum.exceptions import AdjudicationError
from rostrum.judges import JUDGE_PERSONAS, StatementRecord, VerdictContext, VerdictEngine, get_persona
from rostrum.models.base_types import TextGenerator
from rostrum.models.manager import ModelManager
from rostrum.moderation import ModerationDecisionEngine, ReportContext, StatementContext
from rostrum.tournaments import EliminationScorer, RoundSubmission

logger = logging.getLogger(__name__)

COMMANDS = ("verdict", "eliminate", "moderate-report", "moderate-statement")


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for command-line runs."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    # Suppress noisy third-party loggers
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def print_usage() -> None:
    print("Rostrum Adjudication Engine")
    print("=" * 40)
    print("Usage:")
    print("   python -m rostrum <command> <input.json> [--config path/to/config.json]")
    print()
    print("Commands:")
    print("   verdict             judge a one-on-one debate")
    print("   eliminate           score a King of the Hill round")
    print("   moderate-report     classify a user report")
    print("   moderate-statement  classify a flagged statement")
    print()


def _persona_prompt(payload: dict[str, Any]) -> tuple[str, str]:
    if payload.get("persona_prompt"):
        return payload["persona_prompt"], payload.get("judge", "custom judge")
    persona = get_persona(payload["judge"]) if payload.get("judge") else JUDGE_PERSONAS[0]
    return persona.system_prompt, persona.name


async def run_command(
    command: str,
    payload: dict[str, Any],
    config: AppConfig,
    generator: Optional[TextGenerator] = None,
) -> dict[str, Any]:
    """Run one component on ``payload`` and return a JSON-ready dict."""
    if command not in COMMANDS:
        raise ValueError(f"Unknown command: {command}")

    manager: Optional[ModelManager] = None
    if generator is None:
        manager = ModelManager(config.provider)
        generator = manager

    try:
        subject_id = payload.get("subject_id")

        if command == "verdict":
            prompt, judge_name = _persona_prompt(payload)
            raw = dict(payload["context"])
            raw["statements"] = [StatementRecord(**s) for s in raw.get("statements", [])]
            engine = VerdictEngine(generator, config.generation.verdict)
            verdict = await engine.judge(prompt, VerdictContext(**raw), subject_id, judge_name)
            return verdict.to_dict()

        if command == "eliminate":
            prompt, judge_name = _persona_prompt(payload)
            submissions = [RoundSubmission.model_validate(s) for s in payload["submissions"]]
            scorer = EliminationScorer(generator, config.generation.elimination)
            score_set = await scorer.score_round(
                prompt,
                payload["topic"],
                int(payload.get("round_number", 1)),
                submissions,
                subject_id=subject_id,
                judge_name=judge_name,
            )
            return score_set.model_dump()

        engine = ModerationDecisionEngine(generator, config.generation.moderation)
        if command == "moderate-report":
            decision = await engine.moderate_report(
                ReportContext.model_validate(payload), subject_id
            )
        else:
            decision = await engine.moderate_statement(
                StatementContext.model_validate(payload), subject_id
            )
        return decision.to_dict()
    finally:
        if manager is not None:
            await manager.aclose()


def _option(argv: list[str], flag: str) -> Optional[str]:
    if flag in argv:
        index = argv.index(flag)
        if index + 1 < len(argv):
            return argv[index + 1]
        raise ValueError(f"{flag} requires a value")
    return None


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    argv = list(sys.argv[1:] if argv is None else argv)

    if not argv or "--help" in argv or "-h" in argv:
        print_usage()
        return 0

    try:
        config_path = _option(argv, "--config")
    except ValueError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 2
    positional = [a for a in argv if not a.startswith("--") and a != config_path]

    if len(positional) != 2 or positional[0] not in COMMANDS:
        print_usage()
        return 2
    command, input_path = positional

    config = AppConfig.load_from_file(Path(config_path)) if config_path else get_default_config()
    setup_logging(config.system.log_level)

    with open(input_path, "r", encoding="utf-8") as f:
        payload = json.load(f)

    try:
        result = asyncio.run(run_command(command, payload, config))
    except AdjudicationError as e:
        logger.error(str(e))
        print(json.dumps({"error": e.kind, "message": e.message}, indent=2))
        return 1

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
