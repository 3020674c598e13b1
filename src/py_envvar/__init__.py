"""py-envvar — get, create, set, remove and extend environment variables.

Re-exports public symbols so callers can write::

    from py_envvar import EnvironmentVariableCommands, MemoryEnvironmentStore
"""

from py_envvar.commands import CommandResult, EnvironmentVariableCommands, Intent
from py_envvar.errors import (
    EnvVarError,
    InvalidArgumentError,
    VariableAlreadyExistsError,
    VariableNotFoundError,
)
from py_envvar.store import EnvironmentStore, MemoryEnvironmentStore, OsEnvironmentStore
from py_envvar.variable import EnvironmentVariable, Scope

__version__ = "0.1.0"

__all__ = [
    "CommandResult",
    "EnvVarError",
    "EnvironmentStore",
    "EnvironmentVariable",
    "EnvironmentVariableCommands",
    "Intent",
    "InvalidArgumentError",
    "MemoryEnvironmentStore",
    "OsEnvironmentStore",
    "Scope",
    "VariableAlreadyExistsError",
    "VariableNotFoundError",
    "__version__",
]
