"""Command-line construction for the GitHub Copilot CLI.

Two strategies build the same logical invocation:

- ArgvCommandBuilder: POSIX argument vector, no shell involved
- ShellCommandBuilder: single command string for cmd.exe, which is needed
  on Windows so the ``copilot.cmd`` wrapper resolves

The strategy is chosen once per engine by select_command_builder().

Known limitation (shell strategy): the prompt is made safe for a
double-quoted cmd.exe argument only by collapsing line breaks and doubling
``"``. Other cmd.exe metacharacters (``%``, ``^``, ``&``, ``|``) inside the
quotes are not analysed, and extra arguments are appended unquoted. This is
a best-effort mitigation, not a complete escaping scheme.
"""

import re
import sys
from abc import ABC, abstractmethod
from typing import List, Optional

from cli_engines.base.executor import BuiltCommand
from cli_engines.models import EngineOptions

DEFAULT_CLI_COMMAND = "copilot"

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def sanitize_prompt_for_shell(prompt: str) -> str:
    """Make a prompt safe to place inside a double-quoted cmd.exe argument.

    Every line break (``\\r\\n``, ``\\r`` or ``\\n``) becomes one space,
    since cmd.exe cannot carry a newline inside a quoted argument, then
    every ``"`` is doubled.

    Args:
        prompt: Raw prompt text.

    Returns:
        Sanitized single-line prompt, without surrounding quotes.

    Example:
        >>> sanitize_prompt_for_shell('say "hi"\\r\\nthen stop')
        'say ""hi"" then stop'
    """
    return _LINE_BREAK.sub(" ", prompt).replace('"', '""')


def _optional_args(options: Optional[EngineOptions]) -> List[str]:
    """Model override followed by caller-supplied arguments."""
    if options is None:
        return []

    args: List[str] = []
    if options.model_override:
        args.extend(["--model", options.model_override])
    args.extend(options.engine_args)
    return args


class CommandBuilder(ABC):
    """Builds the Copilot CLI invocation for a prompt.

    Builders hold no per-call state: the same prompt and options always
    produce an equal BuiltCommand.
    """

    def __init__(self, cli_command: str = DEFAULT_CLI_COMMAND):
        self.cli_command = cli_command

    @abstractmethod
    def build(self, prompt: str, options: Optional[EngineOptions] = None) -> BuiltCommand:
        """Return the command for ``prompt`` with the given options."""
        pass


class ArgvCommandBuilder(CommandBuilder):
    """Argument-vector strategy: the prompt is one argv element."""

    def build(self, prompt: str, options: Optional[EngineOptions] = None) -> BuiltCommand:
        args = [self.cli_command, "--yolo", "-p", prompt]
        args.extend(_optional_args(options))
        return BuiltCommand(args=tuple(args), shell=False)


class ShellCommandBuilder(CommandBuilder):
    """Shell-string strategy for cmd.exe."""

    def build(self, prompt: str, options: Optional[EngineOptions] = None) -> BuiltCommand:
        sanitized = sanitize_prompt_for_shell(prompt)
        extra = _optional_args(options)
        extra_str = f" {' '.join(extra)}" if extra else ""
        command = f'{self.cli_command} --yolo -p "{sanitized}"{extra_str}'
        return BuiltCommand(args=command, shell=True)


def select_command_builder(
    cli_command: str = DEFAULT_CLI_COMMAND,
    platform: Optional[str] = None,
) -> CommandBuilder:
    """Pick the command strategy for a platform.

    Args:
        cli_command: Copilot executable name or path.
        platform: ``sys.platform``-style identifier; defaults to the
            running interpreter's platform.

    Returns:
        ShellCommandBuilder on Windows, ArgvCommandBuilder elsewhere.
    """
    platform = platform or sys.platform
    if platform.startswith("win"):
        return ShellCommandBuilder(cli_command)
    return ArgvCommandBuilder(cli_command)
