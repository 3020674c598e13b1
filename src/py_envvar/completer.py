"""Context-aware tab completer for the environment variable shell.

The completer separates **what to complete** (pure logic, fully
testable) from **how to wire it** (readline integration in the REPL).

The ``complete(text, state)`` method is the readline callback.  It
delegates to ``completions(text, line)`` which analyses the input
context and returns a list of candidate strings:

- first word → command names;
- a word starting with ``-`` → the command's parameter names;
- the word after ``-Scope`` → scope names;
- otherwise, for the env commands → variable names in the chosen scope.
"""

from __future__ import annotations

import readline
import shlex
from typing import TYPE_CHECKING

from py_envvar.errors import EnvVarError
from py_envvar.logging import LogLevel
from py_envvar.shell import PARAMETERS
from py_envvar.variable import Scope

if TYPE_CHECKING:
    from py_envvar.shell import Shell

# Display spelling for each lower-case parameter name.
_PARAMETER_SPELLING: dict[str, str] = {
    "scope": "-Scope",
    "valueonly": "-ValueOnly",
    "force": "-Force",
    "passthru": "-PassThru",
    "prepend": "-Prepend",
    "whatif": "-WhatIf",
    "confirm": "-Confirm",
}


class Completer:
    """Context-aware tab completer for the environment variable shell."""

    def __init__(self, shell: Shell) -> None:
        """Create a completer attached to a shell instance.

        Args:
            shell: The shell whose commands and variables are used to
                   generate completion candidates.

        """
        self._shell = shell

    def complete(self, text: str, state: int) -> str | None:
        """Readline callback — return the *state*-th candidate for *text*.

        Args:
            text: The partial word being completed.
            state: Index into the candidate list (0, 1, 2, …).

        Returns:
            The candidate at *state*, or ``None`` when exhausted.

        """
        line = readline.get_line_buffer()
        candidates = self.completions(text, line)
        if state < len(candidates):
            return candidates[state]
        return None

    def completions(self, text: str, line: str) -> list[str]:
        """Return completion candidates based on context.

        Args:
            text: The partial word under the cursor.
            line: The full input line so far.

        Returns:
            Sorted list of matching candidates.

        """
        # Only the last pipeline stage matters.
        stage = line.rsplit("|", 1)[-1]
        words = stage.lstrip().split()

        # No words yet, or still typing the first word → command completion
        if not words or (len(words) == 1 and not stage.endswith(" ")):
            return self._complete_commands(text)

        return self._complete_argument(words, text, stage)

    # -- private completers ------------------------------------------------

    def _complete_argument(self, words: list[str], text: str, line: str) -> list[str]:
        """Dispatch argument completion based on the command and context."""
        cmd = words[0].lower()
        if cmd not in PARAMETERS:
            return []

        if text.startswith("-"):
            return self._complete_parameters(cmd, text)

        previous = words[-1] if line.endswith(" ") else words[-2]
        if previous.lstrip("-").lower() == "scope":
            return self._complete_scopes(text)

        if cmd == "log":
            return self._complete_levels(text)

        return self._complete_variables(text, self._scope_from(words))

    def _complete_commands(self, text: str) -> list[str]:
        """Complete command names from the shell's dispatch table."""
        return [cmd for cmd in self._shell.command_names if cmd.startswith(text)]

    @staticmethod
    def _complete_parameters(cmd: str, text: str) -> list[str]:
        """Complete ``-Parameter`` names accepted by *cmd*."""
        switches, options = PARAMETERS[cmd]
        prefix = text.lstrip("-").lower()
        return sorted(
            _PARAMETER_SPELLING[name]
            for name in switches | options
            if name.startswith(prefix)
        )

    @staticmethod
    def _complete_scopes(text: str) -> list[str]:
        """Complete scope names, ignoring case."""
        return [s.value for s in Scope if s.value.lower().startswith(text.lower())]

    @staticmethod
    def _complete_levels(text: str) -> list[str]:
        """Complete log level names for ``log``."""
        names = [level.name.lower() for level in LogLevel]
        return [name for name in names if name.startswith(text.lower())]

    @staticmethod
    def _scope_from(words: list[str]) -> str:
        """Return the ``-Scope`` value already typed, or Process."""
        for i, word in enumerate(words[:-1]):
            if word.lstrip("-").lower() == "scope":
                return words[i + 1]
        return Scope.PROCESS

    def _complete_variables(self, text: str, scope: str) -> list[str]:
        """Complete variable names in *scope*, ignoring case."""
        commands = self._shell.commands
        try:
            resolved = commands.validate_scope(scope)
        except EnvVarError:
            return []
        return sorted(shlex.quote(v.name) for v in commands.match(f"{text}*", resolved))
