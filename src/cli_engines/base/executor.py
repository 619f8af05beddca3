"""Blocking subprocess execution for engine CLIs.

Runs one engine CLI process to completion (or timeout) and returns what it
observed as an InvocationResult.

Execution contract:
    The executor waits on the *process*, never on its output streams.
    stdout and stderr are redirected to anonymous temporary files rather
    than pipes, so a CLI that exits while a child of it still holds the
    output descriptors open cannot hang the call. Some engine CLIs (the
    Copilot CLI among them) are known to leave their streams open after
    finishing, which makes a streaming pipe reader block forever. Keep this
    module free of pipe/streaming reads.

    While waiting, the executor polls the size of the capture files and
    terminates a child whose combined output passes the cap.
"""

import os
import signal as signal_module
import subprocess
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Optional, Tuple, Union

import structlog

from cli_engines.config import DEFAULT_MAX_OUTPUT_BYTES, DEFAULT_TIMEOUT_SECONDS
from cli_engines.errors import ProcessSpawnError
from cli_engines.models import InvocationResult

logger = structlog.get_logger(__name__)

KILL_GRACE_SECONDS = 5
TERMINATION_SIGNAL = "SIGTERM"
OUTPUT_POLL_SECONDS = 0.1


@dataclass(frozen=True)
class BuiltCommand:
    """A command ready to hand to the executor.

    Attributes:
        args: Argument vector, or a single command string when ``shell``
            is set.
        shell: Run ``args`` through the platform shell.
    """

    args: Union[Tuple[str, ...], str]
    shell: bool = False

    @property
    def program(self) -> str:
        """Executable name, for log and error messages."""
        if isinstance(self.args, str):
            return self.args.split(" ", 1)[0]
        return self.args[0] if self.args else ""

    def preview(self, limit: int = 300) -> str:
        """Render the command as one line, cut to ``limit`` characters."""
        text = self.args if isinstance(self.args, str) else " ".join(self.args)
        return text[:limit]


class ProcessExecutor:
    """Runs a BuiltCommand synchronously with a timeout and an output cap.

    Attributes:
        timeout_seconds: Wall-clock budget before the process is terminated.
        max_output_bytes: Maximum combined stdout+stderr bytes. A process
            that writes more is terminated and its output truncated.
    """

    def __init__(
        self,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES,
    ):
        self.timeout_seconds = timeout_seconds
        self.max_output_bytes = max_output_bytes

    def run(self, command: BuiltCommand, work_dir: Union[str, Path]) -> InvocationResult:
        """Execute the command in ``work_dir`` and wait for it to finish.

        Args:
            command: Command to run.
            work_dir: Working directory for the child process.

        Returns:
            InvocationResult with exit code, combined output, signal,
            timeout flag and duration.

        Raises:
            ProcessSpawnError: If the process could not be started.
        """
        with tempfile.TemporaryFile() as stdout_file, tempfile.TemporaryFile() as stderr_file:
            start_time = time.monotonic()
            process = self._start_process(command, work_dir, stdout_file, stderr_file)

            timed_out, output_capped = self._wait(
                process, start_time, stdout_file, stderr_file
            )

            duration_ms = int((time.monotonic() - start_time) * 1000)
            output = self._read_output(stdout_file, stderr_file)

        returncode = process.returncode
        signal_name = TERMINATION_SIGNAL if timed_out else _signal_name(returncode)
        exit_code = returncode if returncode is not None and returncode >= 0 else 1

        if timed_out:
            logger.warning(
                "Process timed out",
                program=command.program,
                timeout_seconds=self.timeout_seconds,
            )
        elif output_capped:
            logger.warning(
                "Process output exceeded cap",
                program=command.program,
                max_output_bytes=self.max_output_bytes,
            )

        return InvocationResult(
            exit_code=exit_code,
            output=output,
            signal=signal_name,
            timed_out=timed_out,
            output_capped=output_capped,
            duration_ms=duration_ms,
        )

    def _wait(
        self,
        process: subprocess.Popen,
        start_time: float,
        stdout_file: IO[bytes],
        stderr_file: IO[bytes],
    ) -> Tuple[bool, bool]:
        """Wait for exit, polling the output size against the cap.

        Returns:
            ``(timed_out, output_capped)``; at most one is True.
        """
        deadline = start_time + self.timeout_seconds
        while True:
            remaining = max(deadline - time.monotonic(), 0)
            try:
                process.wait(timeout=min(OUTPUT_POLL_SECONDS, remaining))
                return False, False
            except subprocess.TimeoutExpired:
                pass

            written = _written_bytes(stdout_file) + _written_bytes(stderr_file)
            if written > self.max_output_bytes:
                self._terminate(process)
                return False, True

            if time.monotonic() >= deadline:
                self._terminate(process)
                return True, False

    def _start_process(
        self,
        command: BuiltCommand,
        work_dir: Union[str, Path],
        stdout_file: IO[bytes],
        stderr_file: IO[bytes],
    ) -> subprocess.Popen:
        """Spawn the child with output redirected to the temporary files.

        Raises:
            ProcessSpawnError: If the executable is missing, not runnable,
                or the working directory does not exist.
        """
        try:
            return subprocess.Popen(
                command.args,
                cwd=str(work_dir),
                shell=command.shell,
                stdin=subprocess.DEVNULL,
                stdout=stdout_file,
                stderr=stderr_file,
            )
        except (OSError, ValueError, subprocess.SubprocessError) as exc:
            raise ProcessSpawnError(command.program, str(exc)) from exc

    def _terminate(self, process: subprocess.Popen) -> None:
        """Send SIGTERM, then SIGKILL if the process ignores it."""
        process.terminate()
        try:
            process.wait(timeout=KILL_GRACE_SECONDS)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()

    def _read_output(self, stdout_file: IO[bytes], stderr_file: IO[bytes]) -> str:
        """Read stdout then stderr back, stopping at max_output_bytes."""
        remaining = self.max_output_bytes
        chunks = []
        for handle in (stdout_file, stderr_file):
            if remaining <= 0:
                break
            handle.seek(0)
            data = handle.read(remaining)
            remaining -= len(data)
            chunks.append(data)
        return b"".join(chunks).decode("utf-8", errors="replace")


def _written_bytes(handle: IO[bytes]) -> int:
    """Size of a capture file as written so far by the child."""
    return os.fstat(handle.fileno()).st_size


def _signal_name(returncode: Optional[int]) -> Optional[str]:
    """Map a negative POSIX return code to its signal name."""
    if returncode is None or returncode >= 0:
        return None
    try:
        return signal_module.Signals(-returncode).name
    except ValueError:
        return None
