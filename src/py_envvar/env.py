"""Environment tables — one scope's worth of ``NAME=value`` pairs.

On Windows, variable names are case-insensitive: ``Path`` and ``PATH``
are the same variable, and the table remembers whichever spelling was
written last.  ``Environment`` reproduces that behaviour on top of a
plain dict keyed by the case-folded name, so the in-memory store
behaves like the registry it stands in for.

Writing an empty value removes the variable, which is how the platform
APIs delete.
"""


class Environment:
    """A case-insensitive, case-preserving table for one scope."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        """Create a table, optionally pre-populated.

        Args:
            initial: Starting variables (copied, not referenced).

        """
        # folded name -> (stored spelling, value)
        self._vars: dict[str, tuple[str, str]] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def set(self, key: str, value: str) -> None:
        """Set *key* to *value*; an empty *value* removes *key*."""
        if not value:
            self._vars.pop(key.casefold(), None)
            return
        self._vars[key.casefold()] = (key, value)

    def items(self) -> list[tuple[str, str]]:
        """Return all (name, value) pairs in insertion order."""
        return list(self._vars.values())
