"""Unit tests for Copilot command construction strategies."""

import pytest

from cli_engines.copilot.command import (
    ArgvCommandBuilder,
    ShellCommandBuilder,
    sanitize_prompt_for_shell,
    select_command_builder,
)
from cli_engines.models import EngineOptions


class TestStrategySelection:
    @pytest.mark.parametrize("platform", ["linux", "darwin", "freebsd13"])
    def test_posix_platforms_use_argv(self, platform):
        assert isinstance(select_command_builder(platform=platform), ArgvCommandBuilder)

    @pytest.mark.parametrize("platform", ["win32", "windows"])
    def test_windows_uses_shell_string(self, platform):
        assert isinstance(select_command_builder(platform=platform), ShellCommandBuilder)

    def test_cli_command_passed_through(self):
        builder = select_command_builder("/usr/local/bin/copilot", platform="linux")
        assert builder.cli_command == "/usr/local/bin/copilot"


class TestArgvCommandBuilder:
    def test_minimal_command(self):
        command = ArgvCommandBuilder().build("hello")

        assert command.shell is False
        assert command.args == ("copilot", "--yolo", "-p", "hello")

    def test_prompt_kept_verbatim(self):
        prompt = 'line one\nline "two"; rm -rf / && echo $HOME'
        command = ArgvCommandBuilder().build(prompt)

        assert command.args[3] == prompt

    def test_model_then_extra_args(self):
        options = EngineOptions(model_override="gpt-4", engine_args=["--verbose", "--debug"])
        command = ArgvCommandBuilder().build("hi", options)

        assert command.args == (
            "copilot", "--yolo", "-p", "hi", "--model", "gpt-4", "--verbose", "--debug",
        )

    def test_empty_model_override_ignored(self):
        command = ArgvCommandBuilder().build("hi", EngineOptions(model_override=""))
        assert "--model" not in command.args


class TestShellCommandBuilder:
    def test_prompt_quoted(self):
        command = ShellCommandBuilder().build("hello world")

        assert command.shell is True
        assert command.args == 'copilot --yolo -p "hello world"'

    def test_extra_args_unquoted_after_prompt(self):
        options = EngineOptions(model_override="gpt-4", engine_args=["--verbose"])
        command = ShellCommandBuilder().build("hi", options)

        assert command.args == 'copilot --yolo -p "hi" --model gpt-4 --verbose'

    def test_quote_cannot_close_region(self):
        command = ShellCommandBuilder().build('a" & calc & "b')

        assert command.args == 'copilot --yolo -p "a"" & calc & ""b"'


class TestSanitizePromptForShell:
    @pytest.mark.parametrize(
        "prompt, expected",
        [
            ("one\r\ntwo", "one two"),
            ("one\ntwo", "one two"),
            ("one\rtwo", "one two"),
            ("one\n\ntwo", "one  two"),
            ('say "hi"', 'say ""hi""'),
            ("plain", "plain"),
            ("", ""),
        ],
    )
    def test_sanitize(self, prompt, expected):
        assert sanitize_prompt_for_shell(prompt) == expected

    def test_no_line_breaks_survive(self):
        sanitized = sanitize_prompt_for_shell("a\r\nb\rc\nd")
        assert "\n" not in sanitized
        assert "\r" not in sanitized
