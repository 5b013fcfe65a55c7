"""Schema-checked parsing of free-text collaborator output.

Language models wrap JSON in markdown fences, add chatter around it and
leave trailing commas. ``parse_response`` strips and repairs that, rejects
truncated objects, checks the result against a pydantic schema and hands
back a ``ParseResult`` instead of raising, so every caller decides its own
fallback policy.
Numeric ranges are deliberately not part of the schemas; callers bound
numbers with ``clamp``.
"""

import json
import math
import re
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from .exceptions import MalformedResponse, ResponseError, SchemaViolation

SchemaT = TypeVar("SchemaT", bound=BaseModel)

_FENCE_PATTERN = re.compile(r"```(?:json|JSON)?[ \t]*\n?")
_STRING_PATTERN = re.compile(r'("(?:\\.|[^"\\])*")')


@dataclass
class ParseResult(Generic[SchemaT]):
    """Tagged success/failure of a parse attempt."""

    value: SchemaT | None = None
    error: ResponseError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.value is not None


def strip_code_fences(raw_text: str) -> str:
    """Remove ```json / ``` delimiters and surrounding whitespace."""
    return _FENCE_PATTERN.sub("", raw_text or "").strip()


def extract_json_object(text: str) -> str:
    """Return the outermost ``{...}`` span, or the text itself if there is none."""
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        return text[start : end + 1]
    return text


def repair_json(json_text: str) -> str:
    """Fix trailing commas and unquoted keys outside string literals.

    Truncated output is left alone: closing it would invent values.
    """
    parts = _STRING_PATTERN.split(json_text.strip())
    # Odd indexes are quoted strings
    for index in range(0, len(parts), 2):
        segment = re.sub(r",(\s*[}\]])", r"\1", parts[index])
        segment = re.sub(r"([{,]\s*)([a-zA-Z_][a-zA-Z0-9_]*)\s*:", r'\1"\2":', segment)
        parts[index] = segment
    return "".join(parts)


def load_json_object(raw_text: str) -> dict[str, Any]:
    """Decode collaborator text into a JSON object.

    Raises:
        MalformedResponse: the text is not JSON even after repair.
        SchemaViolation: the text is JSON but not an object.
    """
    cleaned = strip_code_fences(raw_text)
    if not cleaned:
        raise MalformedResponse("Empty response", raw_text=raw_text)

    candidate = extract_json_object(cleaned)
    if candidate.lstrip().startswith("{") and not candidate.rstrip().endswith("}"):
        raise MalformedResponse("Response JSON is truncated", raw_text=raw_text)
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError:
        try:
            data = json.loads(repair_json(candidate))
        except json.JSONDecodeError as exc:
            raise MalformedResponse(
                f"Response is not valid JSON: {exc.msg}", raw_text=raw_text
            ) from exc

    if not isinstance(data, dict):
        raise SchemaViolation(
            f"Expected a JSON object, got {type(data).__name__}", raw_text=raw_text
        )
    return data


def parse_response(raw_text: str, schema: type[SchemaT]) -> ParseResult[SchemaT]:
    """Parse ``raw_text`` against ``schema`` without raising."""
    try:
        data = load_json_object(raw_text)
    except ResponseError as exc:
        return ParseResult(error=exc)

    try:
        value = schema.model_validate(data)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        return ParseResult(
            error=SchemaViolation(
                f"{field or 'response'}: {first.get('msg', 'invalid value')}",
                field=field,
                raw_text=raw_text,
            )
        )
    return ParseResult(value=value)


def clamp(value: float, minimum: float, maximum: float) -> float:
    """Bound ``value`` to ``[minimum, maximum]``."""
    return max(minimum, min(maximum, value))


def clamp_score(value: float | None, default: float = 50.0) -> float:
    """Clamp a 0-100 score, substituting ``default`` when it is absent."""
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return default
    return clamp(float(value), 0.0, 100.0)
