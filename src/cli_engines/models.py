"""Data models shared by the CLI engine adapters.

This module defines the request options, the raw process result, and the
normalized result contract every engine returns to its caller:

- EngineOptions: per-call overrides (model, extra CLI arguments)
- InvocationResult: what the process executor observed
- TokenUsage: token counts scraped from an engine's usage report
- ErrorKind: taxonomy of failure categories, in precedence order
- AIResult: the immutable value returned once per engine call

The models use Pydantic for validation, consistent with the settings in
config.py.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ErrorKind(str, Enum):
    """Categories of engine failure, listed in classification precedence.

    Attributes:
        TIMEOUT: The process exceeded its wall-clock budget.
        STRUCTURED: A shared JSON error payload was found in the output.
        AUTHENTICATION: The CLI reported missing or invalid credentials.
        RATE_LIMIT: The CLI reported throttling by the upstream service.
        NETWORK: The CLI could not reach the upstream service.
        GENERIC: The CLI printed a plain ``error:`` line.
        NON_ZERO_EXIT: No pattern matched but the exit code was not zero.
        SPAWN_FAILURE: The process could not be started at all.
    """

    TIMEOUT = "timeout"
    STRUCTURED = "structured"
    AUTHENTICATION = "authentication"
    RATE_LIMIT = "rate_limit"
    NETWORK = "network"
    GENERIC = "generic"
    NON_ZERO_EXIT = "non_zero_exit"
    SPAWN_FAILURE = "spawn_failure"


class EngineOptions(BaseModel):
    """Optional per-call settings for an engine invocation.

    Attributes:
        model_override: Model name passed to the CLI via ``--model``.
        engine_args: Raw CLI tokens appended after the built-in arguments,
            in order.
    """

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_override: Optional[str] = Field(
        default=None,
        description="Model name passed to the CLI via --model",
    )

    engine_args: List[str] = Field(
        default_factory=list,
        description="Extra CLI arguments appended verbatim",
    )


class InvocationResult(BaseModel):
    """Raw outcome of running an engine CLI once.

    Attributes:
        exit_code: Process exit code (1 when the process was killed).
        output: Combined stdout followed by stderr.
        signal: Name of the signal that ended the process, if any.
        timed_out: True when the executor terminated the process on timeout.
        output_capped: True when the executor stopped the process because
            its output passed the cap.
        duration_ms: Wall-clock time from spawn to exit, in milliseconds.
    """

    model_config = ConfigDict(frozen=True)

    exit_code: int
    output: str = ""
    signal: Optional[str] = None
    timed_out: bool = False
    output_capped: bool = False
    duration_ms: int = Field(default=0, ge=0)


class TokenUsage(BaseModel):
    """Token counts reported by an engine's usage summary."""

    model_config = ConfigDict(frozen=True)

    input_tokens: int = Field(default=0, ge=0)
    output_tokens: int = Field(default=0, ge=0)
    cached_tokens: int = Field(default=0, ge=0)

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        return TokenUsage(
            input_tokens=self.input_tokens + other.input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
            cached_tokens=self.cached_tokens + other.cached_tokens,
        )


class AIResult(BaseModel):
    """Normalized result of a single engine call.

    Every failure carries a non-empty ``error``. On failure ``response`` is
    empty unless output was already extracted (non-zero exit keeps it).

    Attributes:
        success: True when the CLI completed and no error was detected.
        response: Human-readable response text extracted from the output.
        input_tokens: Input token count reported by the CLI (0 if unknown).
        output_tokens: Output token count reported by the CLI (0 if unknown).
        cost: Optional annotation, ``duration:<milliseconds>`` for engines
            that report no price.
        error: Human-readable failure description.

    Example:
        >>> result = AIResult(success=True, response="Done", cost="duration:12")
        >>> result.to_contract()["inputTokens"]
        0
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    success: bool
    response: str = ""
    input_tokens: int = Field(default=0, ge=0)
    output_tokens: int = Field(default=0, ge=0)
    cost: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str, response: str = "") -> "AIResult":
        """Build a failed result with zero token counts."""
        return cls(success=False, response=response, error=error)

    def to_contract(self) -> Dict[str, Any]:
        """Serialize using the camelCase field names callers expect.

        Absent optional fields are omitted rather than sent as null.
        """
        return self.model_dump(by_alias=True, exclude_none=True)
