"""Text-generation collaborator: providers, manager and usage accounting."""

from .base_types import Completion, TextGenerator
from .manager import ModelManager
from .usage import UsageLedger, UsageRecord, record_usage, timed_completion

__all__ = [
    "Completion",
    "TextGenerator",
    "ModelManager",
    "UsageLedger",
    "UsageRecord",
    "record_usage",
    "timed_completion",
]
