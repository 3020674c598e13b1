"""Confirmation before a mutation ("should process").

Every mutating command asks one question before it writes:
*may I perform ACTION on TARGET?*  The answer comes from a
``Confirmer`` — any callable ``(target, action) -> bool``.

- ``always_confirm`` — the host skips prompts; every write proceeds.
- ``WhatIf`` — describe the write, never perform it.
- ``PromptConfirm`` — ask the user a yes/no question.

A denied confirmation is not an error: the command simply does nothing
for that target.
"""

from collections.abc import Callable
from typing import TypeAlias

Confirmer: TypeAlias = Callable[[str, str], bool]

_YES = frozenset({"y", "yes"})


def always_confirm(_target: str, _action: str) -> bool:
    """Approve every operation."""
    return True


def describe_operation(target: str, action: str) -> str:
    """Return the standard one-line description of an operation."""
    return f'Performing the operation "{action}" on target "{target}".'


class WhatIf:
    """Record what would happen and deny every operation."""

    def __init__(self) -> None:
        """Create a confirmer with an empty report."""
        self.messages: list[str] = []

    def __call__(self, target: str, action: str) -> bool:
        """Record the operation and refuse it."""
        self.messages.append(f"What if: {describe_operation(target, action)}")
        return False


class PromptConfirm:
    """Ask a yes/no question through an input function."""

    def __init__(self, read: Callable[[str], str] = input) -> None:
        """Create a prompting confirmer.

        Args:
            read: Called with the prompt text; returns the user's reply.

        """
        self._read = read

    def __call__(self, target: str, action: str) -> bool:
        """Return True only if the user answers yes."""
        question = f"Confirm: {describe_operation(target, action)} [y/N] "
        try:
            reply = self._read(question)
        except EOFError:
            return False
        return reply.strip().lower() in _YES
