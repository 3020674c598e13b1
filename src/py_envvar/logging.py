"""Audit trail of what the commands did to the environment.

Writes, removals, failed lookups and declined confirmations are kept
in memory as ``LogEntry`` records, each tagged with the scope it
touched.  Nothing is written to disk; the shell's ``log`` command and
the web UI's status endpoint read the entries back.

Severity follows the outcome of an operation:

==========  ==============================================================
``DEBUG``   a confirmation was declined and nothing was written
``INFO``    a variable was set or removed
``WARNING`` a Get/Remove pattern matched nothing (the command went on)
``ERROR``   a New/Set/Add precondition failed (the command stopped)
==========  ==============================================================
"""

from dataclasses import dataclass
from enum import IntEnum

from py_envvar.variable import Scope


class LogLevel(IntEnum):
    """Severity of an audit entry; higher is more severe."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass(frozen=True)
class LogEntry:
    """One audited event.

    Attributes:
        level: How the operation ended.
        message: What happened, e.g. ``"Set PATH"``.
        source: The component that logged it (``"commands"``).
        scope: The scope the operation touched, if it touched one.

    """

    level: LogLevel
    message: str
    source: str
    scope: Scope | None = None

    def __str__(self) -> str:
        """Format as ``[LEVEL] source: message (Scope)``."""
        if self.scope is None:
            return f"[{self.level.name}] {self.source}: {self.message}"
        return f"[{self.level.name}] {self.source}: {self.message} ({self.scope})"


class Logger:
    """In-memory audit trail, oldest entry first."""

    def __init__(self) -> None:
        """Create an empty audit trail."""
        self._entries: list[LogEntry] = []

    @property
    def entries(self) -> list[LogEntry]:
        """Return a copy of every entry."""
        return list(self._entries)

    def log(
        self,
        level: LogLevel,
        message: str,
        *,
        source: str,
        scope: Scope | None = None,
    ) -> None:
        """Record one event touching *scope*."""
        self._entries.append(LogEntry(level, message, source, scope))

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
        scope: Scope | None = None,
    ) -> list[LogEntry]:
        """Return the entries that pass every given criterion.

        Args:
            min_level: Keep entries at or above this severity.
            source: Keep entries from this component.
            scope: Keep entries that touched this scope.

        Returns:
            A new list; changing it does not change the log.

        """
        return [
            entry
            for entry in self._entries
            if (min_level is None or entry.level >= min_level)
            and (source is None or entry.source == source)
            and (scope is None or entry.scope is scope)
        ]

    def clear(self) -> None:
        """Forget every entry."""
        self._entries.clear()
