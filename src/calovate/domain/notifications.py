"""User-facing notification models."""

from dataclasses import dataclass
from enum import Enum


class Severity(str, Enum):
    """Presentation hint for a notification."""

    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """Fire-and-forget message for the presentation layer."""

    title: str
    description: str
    severity: Severity = Severity.SUCCESS
