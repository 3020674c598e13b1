"""Platform environment stores — where variables actually live.

Every command goes through a store, and a store only has to do two
things:

- ``get_all(scope)`` — return the full ``name -> value`` table.
- ``set(name, value, scope)`` — write one variable.  Writing an empty
  value deletes the variable; there is no separate delete call, which
  mirrors the Win32 ``SetEnvironmentVariable`` API.

Two implementations ship with the package:

**OsEnvironmentStore** — the real thing.  The Process scope is
    ``os.environ``.  On Windows the User and Machine scopes are the
    registry keys that Explorer reads when it starts new processes.

**MemoryEnvironmentStore** — a simulated layered store with one
    ``Environment`` table per scope.  Tests, the web UI and the
    ``memory`` backend use it so nothing outside the process changes.
"""

from __future__ import annotations

import contextlib
import os
import sys
from typing import TYPE_CHECKING, Protocol

from py_envvar.env import Environment
from py_envvar.variable import Scope

if sys.platform == "win32":
    import winreg

if TYPE_CHECKING:
    from collections.abc import Mapping, MutableMapping

_USER_KEY = "Environment"
_MACHINE_KEY = r"SYSTEM\CurrentControlSet\Control\Session Manager\Environment"


class EnvironmentStore(Protocol):
    """The platform operations the commands depend on."""

    @property
    def layered(self) -> bool:
        """Return True if the User and Machine scopes are meaningful."""
        ...

    def get_all(self, scope: Scope) -> dict[str, str]:
        """Return every variable in *scope*."""
        ...

    def set(self, name: str, value: str, scope: Scope) -> None:
        """Write *name* in *scope*; an empty *value* deletes it."""
        ...


class OsEnvironmentStore:
    """Environment store backed by the running operating system."""

    def __init__(self, environ: MutableMapping[str, str] | None = None) -> None:
        """Create a store over *environ* (``os.environ`` by default).

        Args:
            environ: The process environment mapping to read and write.

        """
        self._environ = os.environ if environ is None else environ

    @property
    def layered(self) -> bool:
        """Return True on Windows, the only platform with user/machine layers."""
        return sys.platform == "win32"

    def get_all(self, scope: Scope) -> dict[str, str]:
        """Return every variable in *scope*."""
        if scope is Scope.PROCESS:
            return dict(self._environ)
        return _read_registry(scope)

    def set(self, name: str, value: str, scope: Scope) -> None:
        """Write *name* in *scope*; an empty *value* deletes it."""
        if scope is Scope.PROCESS:
            if value:
                self._environ[name] = value
            else:
                self._environ.pop(name, None)
            return
        _write_registry(name, value, scope)


class MemoryEnvironmentStore:
    """A simulated layered store with one table per scope.

    Pass ``layered=False`` to behave like a Unix host, where only the
    Process scope exists.
    """

    def __init__(
        self,
        initial: Mapping[Scope, Mapping[str, str]] | None = None,
        *,
        layered: bool = True,
    ) -> None:
        """Create a store, optionally pre-populated per scope.

        Args:
            initial: Starting variables for each scope (copied).
            layered: Whether User and Machine are meaningful.

        """
        initial = initial or {}
        self._tables: dict[Scope, Environment] = {
            scope: Environment(dict(initial.get(scope, {}))) for scope in Scope
        }
        self._layered = layered

    @classmethod
    def from_os(cls, *, layered: bool = True) -> MemoryEnvironmentStore:
        """Return a store whose Process scope is a copy of ``os.environ``."""
        return cls({Scope.PROCESS: dict(os.environ)}, layered=layered)

    @property
    def layered(self) -> bool:
        """Return True if the User and Machine scopes are meaningful."""
        return self._layered

    def get_all(self, scope: Scope) -> dict[str, str]:
        """Return every variable in *scope*."""
        return dict(self._tables[scope].items())

    def set(self, name: str, value: str, scope: Scope) -> None:
        """Write *name* in *scope*; an empty *value* deletes it."""
        self._tables[scope].set(name, value)


# -- Windows registry --------------------------------------------------------


def _registry_location(scope: Scope) -> tuple[int, str]:
    """Return the (root key, subkey) pair holding *scope*'s variables."""
    if sys.platform != "win32":
        msg = f"The {scope} scope is only available on Windows"
        raise OSError(msg)
    if scope is Scope.USER:
        return winreg.HKEY_CURRENT_USER, _USER_KEY
    return winreg.HKEY_LOCAL_MACHINE, _MACHINE_KEY


def _read_registry(scope: Scope) -> dict[str, str]:
    """Read every value under the registry key for *scope*."""
    root, subkey = _registry_location(scope)
    result: dict[str, str] = {}
    with winreg.OpenKey(root, subkey) as key:
        index = 0
        while True:
            try:
                name, value, _kind = winreg.EnumValue(key, index)
            except OSError:
                break  # no more values
            result[name] = str(value)
            index += 1
    return result


def _write_registry(name: str, value: str, scope: Scope) -> None:
    """Write (or, for an empty value, delete) *name* under *scope*'s key."""
    root, subkey = _registry_location(scope)
    with winreg.OpenKey(root, subkey, 0, winreg.KEY_SET_VALUE) as key:
        if value:
            winreg.SetValueEx(key, name, 0, winreg.REG_SZ, value)
            return
        with contextlib.suppress(FileNotFoundError):
            winreg.DeleteValue(key, name)
