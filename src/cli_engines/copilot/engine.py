"""GitHub Copilot CLI engine adapter.

Runs ``copilot --yolo -p <prompt>`` once per call and turns its unstructured
output into an AIResult. Classification follows a fixed precedence:

1. timeout
2. structured JSON error payload
3. Copilot plain-text error phrasings (see classifier.py)
4. non-zero exit code
5. success

A zero exit code can still produce ``success=False``: the Copilot CLI reports
several failures as normal output.

The engine does not stream. The process is run by the blocking
ProcessExecutor (see base/executor.py for why); execute() moves that blocking
call onto a worker thread so concurrent callers each get their own process.
"""

import asyncio
from pathlib import Path
from typing import Optional, Union

import structlog

from cli_engines.base.engine import BaseAIEngine
from cli_engines.base.error_detection import (
    detect_structured_error,
    format_command_error,
)
from cli_engines.base.executor import BuiltCommand, ProcessExecutor
from cli_engines.config import EngineSettings
from cli_engines.copilot.classifier import classify_output
from cli_engines.copilot.command import CommandBuilder, select_command_builder
from cli_engines.copilot.output import extract_response, parse_token_usage
from cli_engines.errors import ProcessSpawnError
from cli_engines.models import (
    AIResult,
    EngineOptions,
    ErrorKind,
    InvocationResult,
)

logger = structlog.get_logger(__name__)

PROMPT_PREVIEW_CHARS = 200
COMMAND_PREVIEW_CHARS = 300
OUTPUT_PREVIEW_CHARS = 500


def describe_timeout(seconds: int) -> str:
    """Render a timeout for messages, e.g. ``5 minutes`` or ``90 seconds``."""
    if seconds % 60 == 0:
        minutes = seconds // 60
        return f"{minutes} minute" if minutes == 1 else f"{minutes} minutes"
    return f"{seconds} second" if seconds == 1 else f"{seconds} seconds"


class CopilotEngine(BaseAIEngine):
    """Engine adapter for the GitHub Copilot CLI.

    Attributes:
        settings: Engine configuration (command, timeout, output cap).
        command_builder: Platform strategy chosen at construction.
        executor: Process runner used for every call.

    Example:
        >>> engine = CopilotEngine()
        >>> result = await engine.execute("Fix the failing test", "/repo")
        >>> result.success
        True
    """

    name = "GitHub Copilot"
    cli_command = "copilot"
    supports_streaming = False

    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        executor: Optional[ProcessExecutor] = None,
        platform: Optional[str] = None,
    ):
        self.settings = settings or EngineSettings()
        self.cli_command = self.settings.cli_command
        self.command_builder: CommandBuilder = select_command_builder(
            self.cli_command, platform
        )
        self.executor = executor or ProcessExecutor(
            timeout_seconds=self.settings.timeout_seconds,
            max_output_bytes=self.settings.max_output_bytes,
        )

    @property
    def timeout_message(self) -> str:
        return f"Copilot CLI timed out after {describe_timeout(self.settings.timeout_seconds)}"

    def build_command(
        self, prompt: str, options: Optional[EngineOptions] = None
    ) -> BuiltCommand:
        """Build the Copilot invocation without running it."""
        return self.command_builder.build(prompt, options)

    async def execute(
        self,
        prompt: str,
        work_dir: Union[str, Path],
        options: Optional[EngineOptions] = None,
    ) -> AIResult:
        """Run the Copilot CLI once and normalize its output.

        The blocking process call runs in a worker thread; the awaiting
        task resumes when the process exits, times out or fails to start.

        Args:
            prompt: Prompt text.
            work_dir: Directory the CLI runs in.
            options: Optional model override and extra CLI arguments.

        Returns:
            AIResult describing the outcome. Never raises for CLI failures.
        """
        return await asyncio.to_thread(self.execute_sync, prompt, work_dir, options)

    def execute_sync(
        self,
        prompt: str,
        work_dir: Union[str, Path],
        options: Optional[EngineOptions] = None,
    ) -> AIResult:
        """Blocking variant of execute() for callers without an event loop."""
        log = logger.bind(engine="copilot", work_dir=str(work_dir))
        log.debug(
            "Starting Copilot CLI",
            prompt_length=len(prompt),
            prompt_preview=prompt[:PROMPT_PREVIEW_CHARS],
        )

        command = self.build_command(prompt, options)
        if command.shell:
            log.debug("Shell command", command_preview=command.preview(COMMAND_PREVIEW_CHARS))

        try:
            invocation = self.executor.run(command, work_dir)
        except ProcessSpawnError as exc:
            log.error(
                "Failed to start Copilot CLI",
                error_kind=ErrorKind.SPAWN_FAILURE.value,
                reason=exc.reason,
            )
            return AIResult.failure(f"Failed to start Copilot CLI: {exc.reason}")

        log.debug(
            "Copilot CLI finished",
            exit_code=invocation.exit_code,
            duration_ms=invocation.duration_ms,
            output_length=len(invocation.output),
            output_preview=invocation.output[:OUTPUT_PREVIEW_CHARS],
        )

        result = self.interpret(invocation)
        if not result.success:
            log.warning("Copilot CLI call failed", error=result.error)
        return result

    def interpret(self, invocation: InvocationResult) -> AIResult:
        """Classify a finished invocation into an AIResult.

        Args:
            invocation: What the executor observed.

        Returns:
            Failed result for the first matching error category, otherwise
            a successful result with the extracted response.
        """
        if invocation.timed_out:
            return AIResult.failure(self.timeout_message)

        output = invocation.output

        structured_error = detect_structured_error(output)
        if structured_error:
            return AIResult.failure(structured_error)

        classification = classify_output(output)
        if classification is not None:
            logger.debug("Classified Copilot error", error_kind=classification.kind.value)
            return AIResult.failure(classification.message)

        response = extract_response(output)

        if invocation.exit_code != 0:
            return AIResult.failure(
                format_command_error(invocation.exit_code, output),
                response=response,
            )

        usage = parse_token_usage(output)
        return AIResult(
            success=True,
            response=response,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            cost=f"duration:{invocation.duration_ms}" if invocation.duration_ms > 0 else None,
        )
