"""Variable records and scopes.

Windows keeps environment variables in three layers:

- **Process** — the block every process inherits from its parent and
  can change freely.  Changes vanish when the process exits.
- **User** — per-user variables stored in the registry and merged into
  every new process the user starts.
- **Machine** — system-wide variables shared by every user.

Unix has only the process layer, so stores report whether they are
*layered* and the commands refuse User/Machine when they are not.

Design choices:
    - **StrEnum for scopes** so ``Scope.USER == "User"`` and the value
      prints cleanly in messages.
    - **Frozen dataclass for records** — a record is a snapshot taken
      at read time, never a live handle on the variable.
"""

from dataclasses import dataclass
from enum import StrEnum


class Scope(StrEnum):
    """The level at which an environment variable is stored."""

    PROCESS = "Process"
    USER = "User"
    MACHINE = "Machine"

    @classmethod
    def parse(cls, text: str) -> "Scope":
        """Return the scope named by *text*, ignoring case.

        Raises:
            ValueError: If *text* names no scope.

        """
        for scope in cls:
            if scope.value.casefold() == text.strip().casefold():
                return scope
        choices = ", ".join(s.value for s in cls)
        msg = f"Unknown scope '{text}' (expected one of: {choices})"
        raise ValueError(msg)


@dataclass(frozen=True)
class EnvironmentVariable:
    """An immutable snapshot of one environment variable.

    Attributes:
        name: The variable name, spelled as the store reported it.
        value: The value at read time (may be empty).
        scope: The scope the variable was read from or written to.

    """

    name: str
    value: str
    scope: Scope = Scope.PROCESS

    def __str__(self) -> str:
        """Format as ``NAME=value``."""
        return f"{self.name}={self.value}"
