"""Exceptions raised inside the engine adapters.

None of these escape an engine's execute(); the engine converts them into a
failed AIResult at the call boundary.
"""


class EngineError(Exception):
    """Base class for engine adapter errors."""

    pass


class ProcessSpawnError(EngineError):
    """Raised when an engine CLI process cannot be started.

    Attributes:
        command: Executable (or shell command) that failed to start.
        reason: Underlying OS error text.
    """

    def __init__(self, command: str, reason: str):
        self.command = command
        self.reason = reason
        super().__init__(f"Failed to start {command}: {reason}")
