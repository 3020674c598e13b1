"""Wildcard lookup of environment variables.

Names are matched with the familiar glob metacharacters:

- ``*`` — any run of characters (including none).
- ``?`` — exactly one character.
- ``[abc]`` / ``[a-z]`` — one character from a class.

Matching ignores case, so ``path`` finds ``Path`` and ``PATH``.

Commands that need one concrete variable (New, Set, Add) pass
``wildcard_allowed=False``; a pattern containing metacharacters is then
rejected outright rather than being treated as a literal name.
"""

from __future__ import annotations

import fnmatch
import re
from typing import TYPE_CHECKING

from py_envvar.errors import InvalidArgumentError
from py_envvar.variable import EnvironmentVariable, Scope

if TYPE_CHECKING:
    from py_envvar.store import EnvironmentStore

WILDCARD_CHARACTERS = frozenset("*?[]")


def contains_wildcard(text: str) -> bool:
    """Return True if *text* contains any glob metacharacter."""
    return any(ch in WILDCARD_CHARACTERS for ch in text)


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a glob *pattern* into a case-insensitive regex."""
    return re.compile(fnmatch.translate(pattern), re.IGNORECASE)


def match_variables(
    store: EnvironmentStore,
    pattern: str | None,
    scope: Scope = Scope.PROCESS,
    *,
    wildcard_allowed: bool = True,
) -> list[EnvironmentVariable]:
    """Return every variable in *scope* whose name matches *pattern*.

    Results keep the order the store yields them in; callers that want
    a sorted listing sort it themselves.

    Args:
        store: The platform store to enumerate.
        pattern: A name or glob pattern.  Empty means ``*`` when
            wildcards are allowed.
        scope: The scope to search.
        wildcard_allowed: Whether *pattern* may contain metacharacters.

    Returns:
        Snapshots of the matching variables (possibly empty).

    Raises:
        InvalidArgumentError: If *pattern* contains a wildcard and
            wildcards are not allowed.

    """
    if not pattern and wildcard_allowed:
        pattern = "*"
    pattern = pattern or ""
    if not wildcard_allowed and contains_wildcard(pattern):
        msg = f"Wildcard characters are not allowed in '{pattern}'"
        raise InvalidArgumentError(msg, parameter="Name", target=pattern)

    name_filter = compile_pattern(pattern)
    return [
        EnvironmentVariable(name, value, scope)
        for name, value in store.get_all(scope).items()
        if name_filter.match(name)
    ]
