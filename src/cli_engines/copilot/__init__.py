"""GitHub Copilot CLI engine.

This package adapts the Copilot CLI to the engine interface:
- Platform-specific command construction (argv or cmd.exe string)
- Plain-text error classification
- Response and token-usage extraction
"""

from cli_engines.copilot.classifier import Classification, classify_output
from cli_engines.copilot.command import (
    ArgvCommandBuilder,
    CommandBuilder,
    ShellCommandBuilder,
    sanitize_prompt_for_shell,
    select_command_builder,
)
from cli_engines.copilot.engine import CopilotEngine
from cli_engines.copilot.output import extract_response, parse_token_usage

__all__ = [
    "ArgvCommandBuilder",
    "Classification",
    "classify_output",
    "CommandBuilder",
    "CopilotEngine",
    "extract_response",
    "parse_token_usage",
    "sanitize_prompt_for_shell",
    "select_command_builder",
    "ShellCommandBuilder",
]
