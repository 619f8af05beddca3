"""Response and token-usage extraction from Copilot CLI output.

The Copilot CLI prints plain text mixed with interactive artifacts (menu
prompts, status spinners) and a usage report. These helpers strip the noise
and read the usage lines.

Note: the filter patterns below follow the current Copilot CLI output
format and will need updating if its banner, status or usage text changes.
"""

import re
from decimal import ROUND_HALF_UP, Decimal
from typing import List

from cli_engines.models import TokenUsage

FALLBACK_RESPONSE = "Task completed"

PROMPT_GLYPH = "❯"
STATUS_MARKERS = ("Thinking...", "Working on it...")

_SUFFIX_MULTIPLIERS = {"": 1, "k": 1_000, "m": 1_000_000}

_COUNT = r"(\d+(?:\.\d+)?)([km]?)"
_USAGE_LINE = re.compile(
    rf"\S+\s+{_COUNT}\s+in,\s*{_COUNT}\s+out,\s*{_COUNT}\s+cached",
    re.IGNORECASE,
)
_TOTAL_USAGE_LINE = re.compile(r"total usage(?:\s+est)?:", re.IGNORECASE)


def parse_count(number: str, suffix: str = "") -> int:
    """Convert a usage count such as ``17.5`` + ``k`` to an integer.

    Example:
        >>> parse_count("17.5", "k")
        17500
        >>> parse_count("1.5", "m")
        1500000
    """
    multiplier = _SUFFIX_MULTIPLIERS[suffix.lower()]
    value = Decimal(number) * multiplier
    return int(value.to_integral_value(rounding=ROUND_HALF_UP))


def is_usage_line(line: str) -> bool:
    """True for a per-model usage line or a ``Total usage:`` summary line."""
    stripped = line.strip()
    if _TOTAL_USAGE_LINE.match(stripped):
        return True
    return _USAGE_LINE.fullmatch(stripped) is not None


def parse_token_usage(output: str) -> TokenUsage:
    """Sum the token counts of every per-model usage line in the output.

    A usage line looks like ``<model> 17.5k in, 2.3k out, 1k cached``;
    counts accept an optional ``k`` or ``m`` suffix.

    Args:
        output: Combined stdout and stderr of the CLI.

    Returns:
        Total usage, all zero when no usage line is present.
    """
    usage = TokenUsage()
    for line in output.splitlines():
        match = _USAGE_LINE.fullmatch(line.strip())
        if match is None:
            continue
        in_num, in_sfx, out_num, out_sfx, cached_num, cached_sfx = match.groups()
        usage = usage + TokenUsage(
            input_tokens=parse_count(in_num, in_sfx),
            output_tokens=parse_count(out_num, out_sfx),
            cached_tokens=parse_count(cached_num, cached_sfx),
        )
    return usage


def _is_meaningful(line: str) -> bool:
    trimmed = line.strip()
    if not trimmed:
        return False
    # Interactive menu prompts
    if trimmed.startswith("?") or trimmed.startswith(PROMPT_GLYPH):
        return False
    if any(marker in trimmed for marker in STATUS_MARKERS):
        return False
    return not is_usage_line(trimmed)


def extract_response(output: str) -> str:
    """Extract the human-readable response from raw CLI output.

    Blank lines, interactive prompts, status lines and usage lines are
    dropped; the remaining lines are joined with newlines.

    Args:
        output: Combined stdout and stderr of the CLI.

    Returns:
        The response text, or FALLBACK_RESPONSE when nothing remains.
    """
    lines: List[str] = [line for line in output.split("\n") if _is_meaningful(line)]
    return "\n".join(lines) or FALLBACK_RESPONSE
