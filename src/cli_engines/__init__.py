"""Adapters that run AI command-line assistants as subprocesses.

Each engine builds a platform-correct command line, runs it with a bounded
timeout, and normalizes the tool's output into an AIResult. This package
currently ships the GitHub Copilot CLI engine.
"""

from cli_engines.base.engine import BaseAIEngine
from cli_engines.config import EngineSettings, get_settings
from cli_engines.copilot.engine import CopilotEngine
from cli_engines.models import AIResult, EngineOptions, ErrorKind, TokenUsage

__all__ = [
    "AIResult",
    "BaseAIEngine",
    "CopilotEngine",
    "EngineOptions",
    "EngineSettings",
    "ErrorKind",
    "get_settings",
    "TokenUsage",
]
