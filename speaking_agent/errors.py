"""Error taxonomy for the event search pipeline."""
from __future__ import annotations

from typing import Literal

ExtractionFailure = Literal[
    "timeout",
    "rate_limited",
    "provider_error",
    "malformed_json",
    "invalid_schema",
]


class SpeakingAgentError(Exception):
    """Base class for errors raised by the speaking agent."""


class ConfigurationError(SpeakingAgentError):
    """A required credential or provider setting is missing."""


class SearchProviderError(SpeakingAgentError):
    """The search provider returned a non-2xx status or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ExtractionError(SpeakingAgentError):
    """Model-based extraction failed; callers recover with the heuristic."""

    def __init__(self, message: str, reason: ExtractionFailure = "provider_error"):
        super().__init__(message)
        self.reason = reason
