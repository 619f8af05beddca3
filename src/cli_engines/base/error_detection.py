"""Error helpers shared by every engine adapter.

- detect_structured_error: finds a JSON error payload in raw CLI output
- format_command_error: builds the message for an unexplained non-zero exit
"""

import json
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError


OUTPUT_EXCERPT_CHARS = 500
UNKNOWN_ERROR_MESSAGE = "Unknown error"


class ErrorDetail(BaseModel):
    """Nested ``error`` object of a structured payload."""

    model_config = ConfigDict(extra="ignore")

    message: Optional[str] = None


class StructuredErrorPayload(BaseModel):
    """One JSON line emitted by an engine CLI that may describe an error.

    Only payloads typed ``"error"`` count. The message is read from
    ``{"error": {"message": "..."}}``, then a top-level ``message``, then
    ``error`` given as a plain string.
    """

    model_config = ConfigDict(extra="ignore")

    type: Optional[str] = None
    message: Optional[str] = None
    error: Optional[Union[ErrorDetail, str]] = None

    def error_message(self) -> Optional[str]:
        """Return the error text, or None when the payload is not an error."""
        if self.type != "error":
            return None

        if isinstance(self.error, ErrorDetail) and self.error.message:
            return self.error.message
        if self.message:
            return self.message
        if isinstance(self.error, str) and self.error:
            return self.error
        return UNKNOWN_ERROR_MESSAGE


def detect_structured_error(output: str) -> Optional[str]:
    """Scan CLI output for a structured JSON error payload.

    Each line that looks like a JSON object is parsed; lines that are not
    valid JSON objects are ignored. The first error payload wins.

    Args:
        output: Combined stdout and stderr of the CLI.

    Returns:
        The error message from the first error payload, or None.

    Example:
        >>> detect_structured_error('{"type":"error","error":{"message":"boom"}}')
        'boom'
        >>> detect_structured_error("plain text") is None
        True
    """
    for line in (output or "").splitlines():
        candidate = line.strip()
        if not candidate.startswith("{"):
            continue

        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if not isinstance(data, dict):
            continue

        try:
            payload = StructuredErrorPayload.model_validate(data)
        except ValidationError:
            continue

        message = payload.error_message()
        if message:
            return message

    return None


def format_command_error(exit_code: int, output: str) -> str:
    """Describe a non-zero exit that no error pattern explained.

    The message always contains the exit code and, when the process printed
    anything, the last OUTPUT_EXCERPT_CHARS characters of its output.

    Args:
        exit_code: Process exit code.
        output: Combined stdout and stderr of the CLI.

    Returns:
        Human-readable error message.
    """
    excerpt = (output or "").strip()
    if not excerpt:
        return f"Command failed with exit code {exit_code}"

    if len(excerpt) > OUTPUT_EXCERPT_CHARS:
        excerpt = "..." + excerpt[-OUTPUT_EXCERPT_CHARS:]

    return f"Command failed with exit code {exit_code}: {excerpt}"
