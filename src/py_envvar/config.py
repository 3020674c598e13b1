"""Runtime configuration for the shell, REPL and web UI.

Configuration is a frozen dataclass built with keyword arguments, or
read from ``PY_ENVVAR_*`` variables with ``Config.from_environ``:

=======================  ===============================  =========
Variable                 Meaning                          Default
=======================  ===============================  =========
``PY_ENVVAR_BACKEND``    ``os`` or ``memory``             ``os``
``PY_ENVVAR_CONFIRM``    prompt before every write        ``false``
``PY_ENVVAR_LAYERED``    memory backend has User/Machine  ``true``
``PY_ENVVAR_WEB_PORT``   port for the web UI              ``8080``
=======================  ===============================  =========
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum

from py_envvar.store import EnvironmentStore, MemoryEnvironmentStore, OsEnvironmentStore

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


class Backend(StrEnum):
    """Which environment store the commands operate on."""

    OS = "os"
    MEMORY = "memory"


def parse_bool(text: str, *, name: str) -> bool:
    """Parse a boolean setting.

    Raises:
        ValueError: If *text* is not a recognised boolean word.

    """
    lowered = text.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    msg = f"{name} must be a boolean (got {text!r})"
    raise ValueError(msg)


@dataclass(frozen=True)
class Config:
    """Settings shared by the REPL and web entry points.

    Attributes:
        backend: The store implementation to use.
        confirm: Whether mutating commands prompt before writing.
        layered: Whether the memory backend exposes User and Machine.
        web_port: TCP port for the development web server.

    """

    backend: Backend = Backend.OS
    confirm: bool = False
    layered: bool = True
    web_port: int = 8080

    @classmethod
    def from_environ(
        cls, environ: Mapping[str, str], *, default_backend: Backend = Backend.OS
    ) -> Config:
        """Build a configuration from ``PY_ENVVAR_*`` variables.

        Args:
            environ: The variables to read.
            default_backend: Backend used when ``PY_ENVVAR_BACKEND`` is unset.

        Raises:
            ValueError: If a variable holds an invalid value.

        """
        defaults = cls()
        backend = Backend(environ.get("PY_ENVVAR_BACKEND", default_backend).strip().lower())
        confirm = defaults.confirm
        if "PY_ENVVAR_CONFIRM" in environ:
            confirm = parse_bool(environ["PY_ENVVAR_CONFIRM"], name="PY_ENVVAR_CONFIRM")
        layered = defaults.layered
        if "PY_ENVVAR_LAYERED" in environ:
            layered = parse_bool(environ["PY_ENVVAR_LAYERED"], name="PY_ENVVAR_LAYERED")
        web_port = int(environ.get("PY_ENVVAR_WEB_PORT", defaults.web_port))
        return cls(backend=backend, confirm=confirm, layered=layered, web_port=web_port)

    def build_store(self) -> EnvironmentStore:
        """Create the store selected by ``backend``."""
        if self.backend is Backend.MEMORY:
            return MemoryEnvironmentStore.from_os(layered=self.layered)
        return OsEnvironmentStore()
