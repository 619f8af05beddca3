"""Unit tests for the blocking process executor.

These tests spawn short-lived Python child processes to check output
capture, exit codes, the output cap, timeout termination, and that a
grandchild holding the output descriptors open cannot hang the call.
"""

import sys
import time

import pytest

from cli_engines.base.executor import BuiltCommand, ProcessExecutor
from cli_engines.errors import ProcessSpawnError


def _python(code: str) -> BuiltCommand:
    return BuiltCommand(args=(sys.executable, "-c", code))


@pytest.fixture
def executor():
    return ProcessExecutor(timeout_seconds=30)


class TestOutputCapture:
    def test_stdout_then_stderr_combined(self, executor, tmp_path):
        command = _python(
            "import sys; sys.stdout.write('out\\n'); sys.stdout.flush(); "
            "sys.stderr.write('err\\n')"
        )
        result = executor.run(command, tmp_path)

        assert result.exit_code == 0
        assert result.output == "out\nerr\n"
        assert result.timed_out is False
        assert result.signal is None

    def test_utf8_output_decoded(self, executor, tmp_path):
        command = _python(
            "import sys; sys.stdout.buffer.write('résumé ❯ 中文'.encode('utf-8'))"
        )
        result = executor.run(command, tmp_path)

        assert result.output == "résumé ❯ 中文"

    def test_runs_in_work_dir(self, executor, tmp_path):
        command = _python("import os; print(os.getcwd())")
        result = executor.run(command, tmp_path)

        assert result.output.strip() == str(tmp_path.resolve())

    def test_stdin_is_closed(self, executor, tmp_path):
        command = _python("import sys; print(repr(sys.stdin.read()))")
        result = executor.run(command, tmp_path)

        assert result.output.strip() == "''"


class TestExitCodes:
    @pytest.mark.parametrize("code", [1, 2, 127])
    def test_exit_code_preserved(self, executor, tmp_path, code):
        result = executor.run(_python(f"import sys; sys.exit({code})"), tmp_path)

        assert result.exit_code == code
        assert result.timed_out is False

    def test_duration_recorded(self, executor, tmp_path):
        result = executor.run(_python("import time; time.sleep(0.05)"), tmp_path)

        assert result.duration_ms >= 50


class TestOutputCap:
    def test_output_truncated_to_cap(self, tmp_path):
        executor = ProcessExecutor(timeout_seconds=30, max_output_bytes=10)
        command = _python(
            "import sys; sys.stdout.write('a' * 8); sys.stdout.flush(); "
            "sys.stderr.write('b' * 8)"
        )
        result = executor.run(command, tmp_path)

        assert result.output == "a" * 8 + "b" * 2

    def test_stdout_alone_can_fill_cap(self, tmp_path):
        executor = ProcessExecutor(timeout_seconds=30, max_output_bytes=4)
        command = _python(
            "import sys; sys.stdout.write('abcdef'); sys.stderr.write('zz')"
        )
        result = executor.run(command, tmp_path)

        assert result.output == "abcd"

    def test_runaway_writer_is_stopped(self, tmp_path):
        executor = ProcessExecutor(timeout_seconds=20, max_output_bytes=1000)
        command = _python(
            "import sys, time\n"
            "while True:\n"
            "    sys.stdout.write('x' * 4096)\n"
            "    sys.stdout.flush()\n"
            "    time.sleep(0.01)\n"
        )
        start = time.monotonic()
        result = executor.run(command, tmp_path)
        elapsed = time.monotonic() - start

        assert result.output_capped is True
        assert result.timed_out is False
        assert result.exit_code != 0
        assert result.output == "x" * 1000
        assert elapsed < 10

    def test_output_within_cap_not_flagged(self, executor, tmp_path):
        result = executor.run(_python("print('small')"), tmp_path)

        assert result.output_capped is False


class TestTimeout:
    def test_timeout_terminates_process(self, tmp_path):
        executor = ProcessExecutor(timeout_seconds=2)
        start = time.monotonic()
        result = executor.run(
            _python("import time; print('started', flush=True); time.sleep(60)"),
            tmp_path,
        )
        elapsed = time.monotonic() - start

        assert result.timed_out is True
        assert result.signal == "SIGTERM"
        assert result.exit_code != 0
        assert result.output.startswith("started")
        assert elapsed < 30

    @pytest.mark.skipif(sys.platform.startswith("win"), reason="POSIX fork semantics")
    def test_grandchild_holding_streams_does_not_block(self, tmp_path):
        executor = ProcessExecutor(timeout_seconds=20)
        code = (
            "import subprocess, sys; "
            "subprocess.Popen([sys.executable, '-c', 'import time; time.sleep(10)']); "
            "print('parent done', flush=True)"
        )
        start = time.monotonic()
        result = executor.run(_python(code), tmp_path)
        elapsed = time.monotonic() - start

        assert result.timed_out is False
        assert result.exit_code == 0
        assert result.output.strip() == "parent done"
        assert elapsed < 5


    @pytest.mark.skipif(sys.platform.startswith("win"), reason="POSIX signals")
    def test_external_sigterm_is_reported_as_signal(self, executor, tmp_path):
        code = "import os, signal; os.kill(os.getpid(), signal.SIGTERM)"
        result = executor.run(_python(code), tmp_path)

        assert result.signal == "SIGTERM"
        assert result.timed_out is False
        assert result.exit_code == 1


class TestSpawnFailures:
    def test_missing_executable_raises_spawn_error(self, executor, tmp_path):
        command = BuiltCommand(args=("definitely-not-a-real-copilot-binary", "-p", "x"))

        with pytest.raises(ProcessSpawnError) as exc_info:
            executor.run(command, tmp_path)

        assert exc_info.value.command == "definitely-not-a-real-copilot-binary"
        assert "Failed to start" in str(exc_info.value)

    def test_missing_work_dir_raises_spawn_error(self, executor, tmp_path):
        with pytest.raises(ProcessSpawnError):
            executor.run(_python("print(1)"), tmp_path / "missing")


class TestBuiltCommand:
    def test_program_from_argv(self):
        assert BuiltCommand(args=("copilot", "--yolo")).program == "copilot"

    def test_program_from_shell_string(self):
        command = BuiltCommand(args='copilot --yolo -p "hi"', shell=True)
        assert command.program == "copilot"

    def test_preview_truncates(self):
        command = BuiltCommand(args=("copilot", "-p", "x" * 500))
        assert len(command.preview(300)) == 300
