"""Plumbing shared by all engine adapters.

- BaseAIEngine: the engine interface
- ProcessExecutor: blocking subprocess execution with timeout and output cap
- detect_structured_error / format_command_error: shared error helpers
"""

from cli_engines.base.engine import BaseAIEngine
from cli_engines.base.error_detection import (
    detect_structured_error,
    format_command_error,
)
from cli_engines.base.executor import BuiltCommand, ProcessExecutor

__all__ = [
    "BaseAIEngine",
    "BuiltCommand",
    "detect_structured_error",
    "format_command_error",
    "ProcessExecutor",
]
