"""Error kinds raised by the MoneyWhisper core and rendered by the API layer.

Each error carries the HTTP status it maps to and, for LLM-related failures, the
raw model text so the client can show it for debugging.
"""


class MoneyWhisperError(Exception):
    """Base exception for MoneyWhisper."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, raw_response: str | None = None) -> None:
        """Create the error with a user-facing message and optional raw LLM output."""
        self.message = message or self.default_message
        self.raw_response = raw_response
        super().__init__(self.message)


class InvalidInputError(MoneyWhisperError):
    """Missing or malformed request input."""

    status_code = 400
    default_message = "Invalid input. Please provide a valid expense description."


class ExtractionFailedError(MoneyWhisperError):
    """No structured expense could be extracted from the text."""

    status_code = 400
    default_message = "Could not extract expense information. Please try a different format."


class StorageFailedError(MoneyWhisperError):
    """The expense or category store rejected or failed an operation."""


class LLMCallFailedError(MoneyWhisperError):
    """The LLM provider call itself failed (network, auth, timeout)."""

    default_message = "LLM call failed"


class ProjectionParseFailedError(MoneyWhisperError):
    """The LLM projection reply was not a valid projection JSON object."""

    default_message = "Failed to generate projections"
