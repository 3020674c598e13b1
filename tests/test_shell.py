"""Tests for the shell module.

The shell is the command interpreter — it parses user input, dispatches
to the environment variable commands, and returns string output.
"""

import pytest

from py_envvar.commands import EnvironmentVariableCommands
from py_envvar.confirm import always_confirm
from py_envvar.shell import Shell, UsageError, parse_args, split_pipeline
from py_envvar.store import MemoryEnvironmentStore
from py_envvar.variable import Scope


def _shell(
    process: dict[str, str] | None = None,
    *,
    layered: bool = True,
    answer: str = "y",
) -> tuple[MemoryEnvironmentStore, Shell]:
    """Create a memory store and a shell over it."""
    store = MemoryEnvironmentStore({Scope.PROCESS: process or {}}, layered=layered)
    commands = EnvironmentVariableCommands(store, confirm=always_confirm)
    return store, Shell(commands=commands, prompt=lambda _q: answer)


class TestParseArgs:
    """Verify parameter parsing."""

    def test_switches_and_options(self) -> None:
        """Switches and options should be recognised in any case and dash style."""
        parsed = parse_args(
            ["A", "-FORCE", "--scope", "User", "b"],
            frozenset({"force"}),
            frozenset({"scope"}),
        )
        assert parsed.positional == ["A", "b"]
        assert parsed.has("force")
        assert parsed.options == {"scope": "User"}

    def test_unknown_parameter(self) -> None:
        """An unknown parameter should raise UsageError."""
        with pytest.raises(UsageError, match="-Bogus"):
            parse_args(["-Bogus"], frozenset(), frozenset())

    def test_option_without_value(self) -> None:
        """An option at the end of the line should raise UsageError."""
        with pytest.raises(UsageError, match="missing value"):
            parse_args(["-Scope"], frozenset(), frozenset({"scope"}))

    def test_double_dash_ends_parameters(self) -> None:
        """Everything after -- should be positional."""
        parsed = parse_args(["A", "--", "-Force"], frozenset({"force"}), frozenset())
        assert parsed.positional == ["A", "-Force"]
        assert not parsed.has("force")

    def test_lone_dash_is_positional(self) -> None:
        """A lone '-' should be treated as a value."""
        parsed = parse_args(["-"], frozenset(), frozenset())
        assert parsed.positional == ["-"]


class TestSplitPipeline:
    """Verify pipeline splitting."""

    def test_splits_on_pipe(self) -> None:
        """Unquoted pipes should separate stages."""
        assert split_pipeline("get-env A | set-env B") == ["get-env A", "set-env B"]

    def test_quoted_pipe_kept(self) -> None:
        """Pipes inside quotes should not split."""
        assert split_pipeline("new-env A 'x|y'") == ["new-env A 'x|y'"]


class TestShellBasics:
    """Verify command dispatch and housekeeping commands."""

    def test_empty_command(self) -> None:
        """A blank line should produce no output."""
        _store, shell = _shell()
        assert shell.execute("   ") == ""

    def test_unknown_command(self) -> None:
        """An unknown command should say so."""
        _store, shell = _shell()
        assert shell.execute("frobnicate") == "Unknown command: frobnicate"

    def test_command_names_case_insensitive(self) -> None:
        """Command names should be matched case-insensitively."""
        _store, shell = _shell({"A": "1"})
        assert shell.execute("GET-ENV A") == "A=1"

    def test_help_lists_commands(self) -> None:
        """Help should list every env command."""
        _store, shell = _shell()
        output = shell.execute("help")
        for name in ("get-env", "new-env", "set-env", "remove-env", "add-env", "exit"):
            assert name in output

    def test_help_for_command(self) -> None:
        """help NAME should show that command's usage."""
        _store, shell = _shell()
        assert shell.execute("help add-env").startswith("Usage: add-env")

    def test_unbalanced_quote(self) -> None:
        """An unbalanced quote should be an error, not an exception."""
        _store, shell = _shell()
        assert shell.execute("new-env A 'oops").startswith("Error:")

    def test_echo(self) -> None:
        """echo should print its arguments."""
        _store, shell = _shell()
        assert shell.execute("echo hello world") == "hello world"

    def test_history(self) -> None:
        """history should list previous commands."""
        _store, shell = _shell()
        assert shell.execute("history") == "  1  history"
        shell.execute("echo hi")
        assert "2  echo hi" in shell.execute("history")

    def test_alias(self) -> None:
        """An alias should expand and keep trailing arguments."""
        _store, shell = _shell({"PATH": "/bin"})
        shell.execute("alias genv=get-env")
        assert shell.execute("genv PATH") == "PATH=/bin"
        assert shell.execute("alias") == "genv=get-env"
        shell.execute("unalias genv")
        assert shell.execute("genv PATH").startswith("Unknown command")

    def test_exit(self) -> None:
        """exit should return the sentinel and stop the shell."""
        _store, shell = _shell()
        assert shell.execute("exit") == Shell.EXIT_SENTINEL
        assert shell.running is False


class TestGetEnvCommand:
    """Verify get-env."""

    def test_lists_everything_sorted(self) -> None:
        """Without names every variable should be listed, sorted."""
        _store, shell = _shell({"b": "2", "A": "1"})
        assert shell.execute("get-env") == "A=1\nb=2"

    def test_value_only(self) -> None:
        """-ValueOnly should print bare values."""
        _store, shell = _shell({"PATH": "/bin"})
        assert shell.execute("get-env path -valueonly") == "/bin"

    def test_partial_failure_continues(self) -> None:
        """A missing pattern should be reported after the other results."""
        _store, shell = _shell({"HOME": "/root"})
        output = shell.execute("get-env NOPE HOME")
        assert output.splitlines() == [
            "HOME=/root",
            "Error: [VariableNotFound] Cannot find a variable with the name 'NOPE'.",
        ]

    def test_scope_rejected_on_process_only_store(self) -> None:
        """User scope should be rejected on a non-layered store."""
        _store, shell = _shell(layered=False)
        output = shell.execute("get-env * -Scope User")
        assert output.startswith("Error: [InvalidArgument]")

    def test_unknown_parameter_shows_usage(self) -> None:
        """An unknown switch should report the error and the usage."""
        _store, shell = _shell()
        output = shell.execute("get-env -Force")
        assert output.startswith("Error: unknown parameter '-Force'")
        assert "Usage: get-env" in output


class TestNewAndSetCommands:
    """Verify new-env and set-env."""

    def test_new_creates(self) -> None:
        """new-env should create the variable silently."""
        store, shell = _shell()
        assert shell.execute("new-env GREETING hello") == ""
        assert store.get_all(Scope.PROCESS) == {"GREETING": "hello"}

    def test_new_quoted_value(self) -> None:
        """Quoted values should keep their spaces."""
        store, shell = _shell()
        shell.execute('new-env MSG "hello world"')
        assert store.get_all(Scope.PROCESS) == {"MSG": "hello world"}

    def test_new_passthru(self) -> None:
        """-PassThru should print the new record."""
        _store, shell = _shell()
        assert shell.execute("new-env A 1 -PassThru") == "A=1"

    def test_new_existing_fails(self) -> None:
        """new-env on an existing name should report VariableAlreadyExists."""
        _store, shell = _shell({"A": "1"})
        assert shell.execute("new-env A 2").startswith("Error: [VariableAlreadyExists]")

    def test_new_force(self) -> None:
        """-Force should overwrite."""
        store, shell = _shell({"A": "1"})
        shell.execute("new-env A 2 -Force")
        assert store.get_all(Scope.PROCESS) == {"A": "2"}

    def test_new_wildcard_name(self) -> None:
        """A wildcard name should be an invalid argument."""
        _store, shell = _shell()
        assert shell.execute("new-env 'A*' 1").startswith("Error: [InvalidArgument]")

    def test_new_without_value(self) -> None:
        """A missing value (and no pipe) should be an invalid argument."""
        _store, shell = _shell()
        assert shell.execute("new-env A").startswith("Error: [InvalidArgument]")

    def test_new_without_name(self) -> None:
        """new-env with no arguments should print usage."""
        _store, shell = _shell()
        assert shell.execute("new-env").startswith("Usage: new-env")

    def test_set_missing_fails(self) -> None:
        """set-env on a missing name should report VariableNotFound."""
        _store, shell = _shell()
        assert shell.execute("set-env A 1").startswith("Error: [VariableNotFound]")

    def test_set_force_creates(self) -> None:
        """set-env -Force should create a missing variable."""
        store, shell = _shell()
        shell.execute("set-env A 1 -Force")
        assert store.get_all(Scope.PROCESS) == {"A": "1"}

    def test_whatif_reports_and_does_not_write(self) -> None:
        """-WhatIf should describe the write and leave the store alone."""
        store, shell = _shell({"A": "1"})
        output = shell.execute("set-env A 2 -WhatIf")
        assert output == (
            'What if: Performing the operation "Set Environment Variable" '
            'on target "Name: A Value: 2".'
        )
        assert store.get_all(Scope.PROCESS) == {"A": "1"}

    def test_confirm_declined(self) -> None:
        """-Confirm answered 'n' should skip the write."""
        store, shell = _shell({"A": "1"}, answer="n")
        assert shell.execute("set-env A 2 -Confirm") == ""
        assert store.get_all(Scope.PROCESS) == {"A": "1"}

    def test_confirm_accepted(self) -> None:
        """-Confirm answered 'y' should perform the write."""
        store, shell = _shell({"A": "1"}, answer="y")
        shell.execute("set-env A 2 -Confirm")
        assert store.get_all(Scope.PROCESS) == {"A": "2"}


class TestRemoveEnvCommand:
    """Verify remove-env."""

    def test_removes_pattern(self) -> None:
        """A wildcard should remove every match."""
        store, shell = _shell({"TMP1": "a", "TMP2": "b", "KEEP": "c"})
        assert shell.execute("remove-env TMP*") == ""
        assert store.get_all(Scope.PROCESS) == {"KEEP": "c"}

    def test_second_remove_not_found(self) -> None:
        """Removing twice should report not found the second time."""
        _store, shell = _shell({"A": "1"})
        assert shell.execute("remove-env A") == ""
        assert shell.execute("remove-env A").startswith("Error: [VariableNotFound]")

    def test_whatif(self) -> None:
        """-WhatIf should describe the removal only."""
        store, shell = _shell({"A": "1"})
        output = shell.execute("remove-env A -WhatIf")
        assert "Remove Environment Variable" in output
        assert store.get_all(Scope.PROCESS) == {"A": "1"}

    def test_no_names_shows_usage(self) -> None:
        """remove-env with nothing to remove should print usage."""
        _store, shell = _shell()
        assert shell.execute("remove-env").startswith("Usage: remove-env")


class TestAddEnvCommand:
    """Verify add-env."""

    def test_append(self) -> None:
        """add-env should append with ';'."""
        _store, shell = _shell({"P": "a"})
        assert shell.execute("add-env P b -PassThru") == "P=a;b"

    def test_prepend(self) -> None:
        """-Prepend should put the new value first."""
        _store, shell = _shell({"P": "a"})
        assert shell.execute("add-env P b -Prepend -PassThru") == "P=b;a"

    def test_missing_fails(self) -> None:
        """add-env on a missing variable should fail."""
        _store, shell = _shell()
        assert shell.execute("add-env P b").startswith("Error: [VariableNotFound]")

    def test_force_creates(self) -> None:
        """add-env -Force on a missing variable should set the value verbatim."""
        _store, shell = _shell()
        assert shell.execute("add-env P b -Force -PassThru") == "P=b"

    def test_missing_value_shows_usage(self) -> None:
        """add-env without a value should print usage."""
        _store, shell = _shell({"P": "a"})
        assert shell.execute("add-env P").startswith("Usage: add-env")

    def test_explicit_empty_value(self) -> None:
        """An explicit empty value should be appended, not treated as missing."""
        _store, shell = _shell({"P": "a"})
        assert shell.execute("add-env P '' -PassThru") == "P=a;"


class TestPipes:
    """Verify piping between commands."""

    def test_copy_value(self) -> None:
        """A -ValueOnly result piped to set-env should become the value."""
        store, shell = _shell({"A": "1", "B": "0"})
        shell.execute("get-env A -ValueOnly | set-env B")
        assert store.get_all(Scope.PROCESS)["B"] == "1"

    def test_echo_into_add(self) -> None:
        """Echoed text piped to add-env should be appended."""
        _store, shell = _shell({"PATH": "/bin"})
        assert shell.execute("echo /usr/bin | add-env PATH -PassThru") == "PATH=/bin;/usr/bin"

    def test_get_into_remove(self) -> None:
        """Records piped to remove-env should be removed by name."""
        store, shell = _shell({"TMP1": "a", "TMP2": "b", "KEEP": "c"})
        shell.execute("get-env TMP* | remove-env")
        assert store.get_all(Scope.PROCESS) == {"KEEP": "c"}

    def test_error_stops_pipeline(self) -> None:
        """A failing stage should stop the pipeline."""
        store, shell = _shell()
        output = shell.execute("set-env A 1 | new-env B")
        assert output.startswith("Error: [VariableNotFound]")
        assert store.get_all(Scope.PROCESS) == {}

    def test_errors_are_not_piped(self) -> None:
        """Non-fatal errors should reach the output, never the next stage."""
        store, shell = _shell({"A": "1", "B": "0"})
        output = shell.execute("get-env A NOPE -ValueOnly | set-env B")
        assert store.get_all(Scope.PROCESS)["B"] == "1"
        assert output == "Error: [VariableNotFound] Cannot find a variable with the name 'NOPE'."

    def test_stage_with_only_errors_stops_pipeline(self) -> None:
        """A stage that only reported errors should not feed the next stage."""
        store, shell = _shell({"B": "0"})
        output = shell.execute("get-env NOPE -ValueOnly | set-env B")
        assert output.startswith("Error: [VariableNotFound]")
        assert store.get_all(Scope.PROCESS) == {"B": "0"}

    def test_errors_follow_final_output(self) -> None:
        """Queued errors should come after the last stage's output."""
        _store, shell = _shell({"A": "1", "B": "0"})
        output = shell.execute("get-env A NOPE -ValueOnly | set-env B -PassThru")
        assert output.splitlines() == [
            "B=1",
            "Error: [VariableNotFound] Cannot find a variable with the name 'NOPE'.",
        ]
