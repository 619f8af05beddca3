"""Abstract base class for AI CLI engine adapters.

Every engine turns a prompt into one invocation of an external AI CLI and
normalizes the outcome into an AIResult. Dispatching between engines is the
caller's concern; this interface is what it dispatches to.
"""

import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from cli_engines.models import AIResult, EngineOptions


class BaseAIEngine(ABC):
    """Common interface for AI CLI engines.

    Implementations must never raise out of execute(): every failure,
    including a missing executable, is reported as ``success=False``.

    Attributes:
        name: Display name of the engine.
        cli_command: Executable invoked by the engine.
        supports_streaming: Whether the engine can stream partial output.

    Example:
        >>> class EchoEngine(BaseAIEngine):
        ...     name = "Echo"
        ...     cli_command = "echo"
        ...
        ...     async def execute(self, prompt, work_dir, options=None):
        ...         return AIResult(success=True, response=prompt)
    """

    name: str = ""
    cli_command: str = ""
    supports_streaming: bool = False

    def is_available(self) -> bool:
        """Check whether the engine's CLI resolves on PATH."""
        return bool(self.cli_command) and shutil.which(self.cli_command) is not None

    @abstractmethod
    async def execute(
        self,
        prompt: str,
        work_dir: Union[str, Path],
        options: Optional[EngineOptions] = None,
    ) -> AIResult:
        """Run the engine CLI once with the given prompt.

        Args:
            prompt: Prompt text passed to the CLI.
            work_dir: Directory the CLI runs in.
            options: Optional model override and extra CLI arguments.

        Returns:
            Normalized result of the invocation.
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(cli_command={self.cli_command!r})"
