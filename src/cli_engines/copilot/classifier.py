"""Plain-text error detection for GitHub Copilot CLI output.

The Copilot CLI reports most failures as plain text, sometimes with exit
code 0. classify_output() matches the known phrasings; rules are checked in
order and the first match wins. Update the rule table here when the CLI
changes its wording; invocation and response extraction do not depend on it.
"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from cli_engines.models import ErrorKind

AUTHENTICATION_MESSAGE = (
    "GitHub Copilot CLI is not authenticated. Run 'copilot' and use '/login' "
    "to authenticate, or set COPILOT_GITHUB_TOKEN environment variable."
)
RATE_LIMIT_MESSAGE = "GitHub Copilot rate limit exceeded. Please wait and try again."
NETWORK_MESSAGE = (
    "Network error connecting to GitHub Copilot. Check your internet connection."
)
GENERIC_ERROR_MESSAGE = "GitHub Copilot CLI returned an error"

# (kind, lowercase needles, message)
_PATTERN_RULES: Tuple[Tuple[ErrorKind, Tuple[str, ...], str], ...] = (
    (
        ErrorKind.AUTHENTICATION,
        ("no authentication", "not authenticated"),
        AUTHENTICATION_MESSAGE,
    ),
    (
        ErrorKind.RATE_LIMIT,
        ("rate limit", "too many requests"),
        RATE_LIMIT_MESSAGE,
    ),
    (
        ErrorKind.NETWORK,
        ("network error", "connection refused"),
        NETWORK_MESSAGE,
    ),
)

_ERROR_TEXT = re.compile(r"error:\s*(.+?)(?:\n|$)", re.IGNORECASE)


@dataclass(frozen=True)
class Classification:
    """An error recognized in CLI output.

    Attributes:
        kind: Error category.
        message: Human-readable message for the caller.
    """

    kind: ErrorKind
    message: str


def classify_output(output: str) -> Optional[Classification]:
    """Match Copilot's plain-text error phrasings against CLI output.

    Matching is case-insensitive over the whole output.

    Args:
        output: Combined stdout and stderr of the CLI.

    Returns:
        The first matching Classification, or None when the output does
        not look like an error.
    """
    lower = output.lower()

    for kind, needles, message in _PATTERN_RULES:
        if any(needle in lower for needle in needles):
            return Classification(kind=kind, message=message)

    if lower.strip().startswith("error:") or "\nerror:" in lower:
        return Classification(
            kind=ErrorKind.GENERIC,
            message=_extract_error_text(output) or GENERIC_ERROR_MESSAGE,
        )

    return None


def _extract_error_text(output: str) -> str:
    """Text after the first ``error:`` up to the end of that line."""
    match = _ERROR_TEXT.search(output)
    if match is None:
        return ""
    return match.group(1).strip()
