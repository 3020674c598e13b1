"""The shell — command interpreter for the environment variable commands.

The shell reads a command string, splits it into a command name,
positional arguments and ``-Switch`` parameters, dispatches to the
matching handler, and returns a string result.

Five commands do the real work:

=============  ==========================================================
``get-env``    list variables by name or wildcard pattern
``new-env``    create a variable (fails if it exists unless ``-Force``)
``set-env``    change a variable (fails if missing unless ``-Force``)
``remove-env`` remove every variable matching each pattern
``add-env``    append (or ``-Prepend``) a ``;``-separated value
=============  ==========================================================

Commands can be chained with ``|``.  A command that needs a value and
was given none takes the piped text; ``get-env`` and ``remove-env``
take one name per piped line, so ``get-env TMP* | remove-env`` works.

Design choices:
    - **Returns strings, not prints.**  This keeps the shell fully
      testable and separates concerns (the caller decides how to
      display output).
    - **Command dispatch via a dict.**  Adding a new command means
      writing a method and adding one dict entry.
    - **All variable access goes through the commands service.**  The
      shell never touches the store directly.
"""

import shlex
from collections.abc import Callable
from typing import TypeAlias
from dataclasses import dataclass, field

from py_envvar.commands import CommandResult, EnvironmentVariableCommands
from py_envvar.confirm import Confirmer, PromptConfirm, WhatIf
from py_envvar.errors import EnvVarError
from py_envvar.logging import LogLevel
from py_envvar.variable import EnvironmentVariable, Scope

# Type alias for a command handler: takes a list of args, returns output.
_Handler: TypeAlias = Callable[[list[str]], str]

_USAGE: dict[str, str] = {
    "get-env": "get-env [NAME ...] [-Scope S] [-ValueOnly]",
    "new-env": "new-env NAME [VALUE] [-Scope S] [-Force] [-PassThru] [-WhatIf] [-Confirm]",
    "set-env": "set-env NAME [VALUE] [-Scope S] [-Force] [-PassThru] [-WhatIf] [-Confirm]",
    "remove-env": "remove-env NAME [NAME ...] [-Scope S] [-WhatIf] [-Confirm]",
    "add-env": (
        "add-env NAME VALUE [-Scope S] [-Force] [-Prepend] [-PassThru] [-WhatIf] [-Confirm]"
    ),
    "log": "log [LEVEL] [-Scope S]",
}

# Switch and option names accepted by each command (lower-case).
_MUTATING_SWITCHES = frozenset({"force", "passthru", "whatif", "confirm"})
PARAMETERS: dict[str, tuple[frozenset[str], frozenset[str]]] = {
    "get-env": (frozenset({"valueonly"}), frozenset({"scope"})),
    "new-env": (_MUTATING_SWITCHES, frozenset({"scope"})),
    "set-env": (_MUTATING_SWITCHES, frozenset({"scope"})),
    "remove-env": (frozenset({"whatif", "confirm"}), frozenset({"scope"})),
    "add-env": (_MUTATING_SWITCHES | {"prepend"}, frozenset({"scope"})),
    "log": (frozenset(), frozenset({"scope"})),
}


class UsageError(ValueError):
    """Raised when a command line cannot be parsed."""


@dataclass
class _ParsedArgs:
    """Positional arguments plus ``-Switch`` and ``-Option value`` parameters."""

    positional: list[str] = field(default_factory=list)
    switches: set[str] = field(default_factory=set)
    options: dict[str, str] = field(default_factory=dict)

    def has(self, switch: str) -> bool:
        """Return True if *switch* was given."""
        return switch in self.switches


def parse_args(args: list[str], switches: frozenset[str], options: frozenset[str]) -> _ParsedArgs:
    """Split *args* into positionals, switches and options.

    Parameter names are case-insensitive and may be written ``-Name``
    or ``--name``.  A bare ``--`` ends parameter parsing.

    Raises:
        UsageError: For an unknown parameter or an option with no value.

    """
    parsed = _ParsedArgs()
    tokens = iter(args)
    for token in tokens:
        if token == "--":
            parsed.positional.extend(tokens)
            break
        if not token.startswith("-") or len(token) == 1:
            parsed.positional.append(token)
            continue
        key = token.lstrip("-").lower()
        if key in switches:
            parsed.switches.add(key)
        elif key in options:
            value = next(tokens, None)
            if value is None:
                msg = f"missing value for parameter '{token}'"
                raise UsageError(msg)
            parsed.options[key] = value
        else:
            msg = f"unknown parameter '{token}'"
            raise UsageError(msg)
    return parsed


def split_pipeline(command: str) -> list[str]:
    """Split *command* on ``|`` characters that are not inside quotes."""
    stages: list[str] = []
    current: list[str] = []
    quote: str | None = None
    for ch in command:
        if quote is not None:
            if ch == quote:
                quote = None
        elif ch in "'\"":
            quote = ch
        elif ch == "|":
            stages.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    stages.append("".join(current).strip())
    return stages


class Shell:
    """Command interpreter over an environment variable commands service."""

    EXIT_SENTINEL = "__EXIT__"

    def __init__(
        self,
        *,
        commands: EnvironmentVariableCommands,
        prompt: Callable[[str], str] = input,
    ) -> None:
        """Create a shell.

        Args:
            commands: The service that performs every variable operation.
            prompt: Input function used by ``-Confirm`` to ask the user.

        """
        self._env = commands
        self._prompt = prompt
        self._running = True
        self._pipe_input: str = ""
        self._errors: list[str] = []
        self._history: list[str] = []
        self._aliases: dict[str, str] = {}

        # Command dispatch table: command name to handler method.
        self._commands: dict[str, _Handler] = {
            "help": self._cmd_help,
            "get-env": self._cmd_get_env,
            "new-env": self._cmd_new_env,
            "set-env": self._cmd_set_env,
            "remove-env": self._cmd_remove_env,
            "add-env": self._cmd_add_env,
            "echo": self._cmd_echo,
            "log": self._cmd_log,
            "history": self._cmd_history,
            "alias": self._cmd_alias,
            "unalias": self._cmd_unalias,
            "exit": self._cmd_exit,
        }

    @property
    def commands(self) -> EnvironmentVariableCommands:
        """Return the commands service."""
        return self._env

    @property
    def command_names(self) -> list[str]:
        """Return every command name, sorted."""
        return sorted(self._commands)

    @property
    def running(self) -> bool:
        """Return False once ``exit`` has been executed."""
        return self._running

    def execute(self, command: str) -> str:
        """Parse and execute a shell command, with pipe support.

        Commands can be chained with ``|``.  The output of each stage
        becomes the piped input for the next; the pipeline stops at the
        first stage whose output is an error, or that reported errors
        and produced nothing.  Non-fatal error lines are never piped;
        they are appended to the final output.

        Args:
            command: The raw command string (e.g. ``get-env PATH -ValueOnly``).

        Returns:
            The command output as a string, or an error message.

        """
        stripped = command.strip()
        if not stripped:
            return ""
        self._history.append(stripped)

        self._errors = []
        output = ""
        for i, stage in enumerate(split_pipeline(stripped)):
            self._pipe_input = output if i > 0 else ""
            reported = len(self._errors)
            output = self._execute_single(self._expand_alias(stage))
            if output.startswith(("Unknown command:", "Error:", "Usage:")):
                break
            if not output and len(self._errors) > reported:
                break
        self._pipe_input = ""
        return "\n".join(part for part in (output, *self._errors) if part)

    def _expand_alias(self, command: str) -> str:
        """Expand an alias if the first word matches."""
        name, _, rest = command.strip().partition(" ")
        if name in self._aliases:
            return f"{self._aliases[name]} {rest}".strip()
        return command

    def _execute_single(self, command: str) -> str:
        """Execute a single (non-piped) command."""
        try:
            parts = shlex.split(command)
        except ValueError as e:
            return f"Error: {e}"
        if not parts:
            return ""

        name = parts[0].lower()
        handler = self._commands.get(name)
        if handler is None:
            return f"Unknown command: {parts[0]}"

        try:
            return handler(parts[1:])
        except UsageError as e:
            return f"Error: {e}\nUsage: {_USAGE[name]}"
        except EnvVarError as e:
            return f"Error: {e.describe()}"
        except OSError as e:
            return f"Error: {e}"

    # -- helpers -------------------------------------------------------------

    def _parse(self, name: str, args: list[str]) -> _ParsedArgs:
        """Parse *args* with the parameter set of command *name*."""
        switches, options = PARAMETERS[name]
        return parse_args(args, switches, options)

    def _confirmer(self, parsed: _ParsedArgs) -> tuple[Confirmer | None, WhatIf | None]:
        """Return the per-call confirmer chosen by ``-WhatIf``/``-Confirm``."""
        if parsed.has("whatif"):
            what_if = WhatIf()
            return what_if, what_if
        if parsed.has("confirm"):
            return PromptConfirm(self._prompt), None
        return None, None

    def _piped_value(self) -> str | None:
        """Return the piped text as a single value, if any."""
        text = self._pipe_input.strip()
        return text or None

    def _piped_names(self) -> list[str]:
        """Return one name per non-empty piped line (``NAME=value`` → ``NAME``)."""
        return [
            line.split("=", 1)[0].strip()
            for line in self._pipe_input.splitlines()
            if line.strip()
        ]

    def _emit(self, result: CommandResult) -> str:
        """Return *result*'s output lines; queue its errors for the final output."""
        self._errors.extend(f"Error: {error.describe()}" for error in result.errors)
        return "\n".join(str(item) for item in result.output)

    @staticmethod
    def _scope(parsed: _ParsedArgs) -> str:
        """Return the requested scope text (Process if omitted)."""
        return parsed.options.get("scope", Scope.PROCESS)

    @staticmethod
    def _render(record: EnvironmentVariable | None, what_if: WhatIf | None) -> str:
        """Render a mutating command's optional record and what-if report."""
        lines = list(what_if.messages) if what_if is not None else []
        if record is not None:
            lines.append(str(record))
        return "\n".join(lines)

    # -- environment variable commands ---------------------------------------

    def _cmd_get_env(self, args: list[str]) -> str:
        """List variables matching each name or pattern."""
        parsed = self._parse("get-env", args)
        names = parsed.positional or self._piped_names()
        result = self._env.get(names, self._scope(parsed), value_only=parsed.has("valueonly"))
        return self._emit(result)

    def _cmd_new_env(self, args: list[str]) -> str:
        """Create a variable."""
        return self._guarded_write("new-env", args)

    def _cmd_set_env(self, args: list[str]) -> str:
        """Change an existing variable."""
        return self._guarded_write("set-env", args)

    def _guarded_write(self, name: str, args: list[str]) -> str:
        """Shared body of ``new-env`` and ``set-env``."""
        parsed = self._parse(name, args)
        if not parsed.positional:
            return f"Usage: {_USAGE[name]}"
        var_name = parsed.positional[0]
        value = " ".join(parsed.positional[1:]) if len(parsed.positional) > 1 else None
        if value is None:
            value = self._piped_value()
        confirm, what_if = self._confirmer(parsed)
        write = self._env.new if name == "new-env" else self._env.set
        record = write(
            var_name,
            value,
            self._scope(parsed),
            force=parsed.has("force"),
            passthru=parsed.has("passthru"),
            confirm=confirm,
        )
        return self._render(record, what_if)

    def _cmd_remove_env(self, args: list[str]) -> str:
        """Remove variables matching each name or pattern."""
        parsed = self._parse("remove-env", args)
        names = parsed.positional or self._piped_names()
        if not names:
            return f"Usage: {_USAGE['remove-env']}"
        confirm, what_if = self._confirmer(parsed)
        result = self._env.remove(names, self._scope(parsed), confirm=confirm)
        self._emit(result)
        return self._render(None, what_if)

    def _cmd_add_env(self, args: list[str]) -> str:
        """Append or prepend a value to a variable."""
        parsed = self._parse("add-env", args)
        if not parsed.positional:
            return f"Usage: {_USAGE['add-env']}"
        if len(parsed.positional) > 1:
            value = " ".join(parsed.positional[1:])
        else:
            value = self._piped_value()
        if value is None:
            return f"Usage: {_USAGE['add-env']}"
        confirm, what_if = self._confirmer(parsed)
        record = self._env.add(
            parsed.positional[0],
            value,
            self._scope(parsed),
            force=parsed.has("force"),
            prepend=parsed.has("prepend"),
            passthru=parsed.has("passthru"),
            confirm=confirm,
        )
        return self._render(record, what_if)

    # -- housekeeping commands -----------------------------------------------

    def _cmd_help(self, args: list[str]) -> str:
        """List available commands, or show one command's usage."""
        if args:
            usage = _USAGE.get(args[0].lower())
            return f"Usage: {usage}" if usage else f"No help for '{args[0]}'."
        return "Available commands: " + ", ".join(self.command_names)

    def _cmd_echo(self, args: list[str]) -> str:
        """Print the arguments."""
        return " ".join(args)

    def _cmd_log(self, args: list[str]) -> str:
        """Show audit log entries, optionally at or above a level or in one scope."""
        parsed = self._parse("log", args)
        min_level = None
        if parsed.positional:
            try:
                min_level = LogLevel[parsed.positional[0].upper()]
            except KeyError:
                return f"Error: unknown log level '{parsed.positional[0]}'"
        scope = None
        if "scope" in parsed.options:
            try:
                scope = Scope.parse(parsed.options["scope"])
            except ValueError as e:
                raise UsageError(str(e)) from e
        entries = self._env.logger.filter(min_level=min_level, scope=scope)
        return "\n".join(str(e) for e in entries) if entries else "No log entries."

    def _cmd_history(self, _args: list[str]) -> str:
        """Show command history."""
        if not self._history:
            return "No history."
        lines = [f"  {i + 1}  {cmd}" for i, cmd in enumerate(self._history)]
        return "\n".join(lines)

    def _cmd_alias(self, args: list[str]) -> str:
        """Create or list command aliases."""
        if not args:
            if not self._aliases:
                return "No aliases defined."
            return "\n".join(f"{name}={cmd}" for name, cmd in sorted(self._aliases.items()))
        pair = " ".join(args)
        if "=" not in pair:
            return "Usage: alias NAME=COMMAND"
        name, cmd = pair.split("=", 1)
        self._aliases[name.strip()] = cmd.strip()
        return ""

    def _cmd_unalias(self, args: list[str]) -> str:
        """Remove a command alias."""
        if not args:
            return "Usage: unalias <name>"
        self._aliases.pop(args[0], None)
        return ""

    def _cmd_exit(self, _args: list[str]) -> str:
        """Signal the REPL to stop."""
        self._running = False
        return self.EXIT_SENTINEL
