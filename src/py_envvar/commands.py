"""The environment variable commands — Get, New, Set, Remove and Add.

All five commands share one service object, ``EnvironmentVariableCommands``,
which owns three collaborators:

- a **store** — where variables live (see ``py_envvar.store``);
- a **confirmer** — asked before every write (see ``py_envvar.confirm``);
- a **logger** — the audit trail (see ``py_envvar.logging``).

Each command validates its parameters first.  A validation failure
raises ``InvalidArgumentError`` before the store is touched.

Errors come in two flavours:

- **Terminating** — raised.  New, Set and Add have exactly one target,
  so a failed precondition ends the command.
- **Non-fatal** — collected in ``CommandResult.errors``.  Get and
  Remove work through a list of patterns, so a pattern that matches
  nothing is reported and the next pattern is still processed.

Design choices:
    - **One service, no subclassing.**  The commands differ only in
      validation and output shaping; the lookup and mutation helpers
      are shared methods.
    - **Per-call confirmer override.**  The shell's ``-WhatIf`` and
      ``-Confirm`` switches swap the confirmer for one invocation
      without touching the service's default.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum

from py_envvar.confirm import Confirmer, always_confirm
from py_envvar.errors import (
    EnvVarError,
    InvalidArgumentError,
    VariableAlreadyExistsError,
    VariableNotFoundError,
)
from py_envvar.logging import Logger, LogLevel
from py_envvar.matcher import contains_wildcard, match_variables
from py_envvar.store import EnvironmentStore
from py_envvar.variable import EnvironmentVariable, Scope

# Separator used by Add; fixed to match PATH-style lists.
LIST_SEPARATOR = ";"

NEW_ACTION = "New Environment Variable"
SET_ACTION = "Set Environment Variable"
REMOVE_ACTION = "Remove Environment Variable"
ADD_ACTION = "Add Environment Variable"

_SOURCE = "commands"


class Intent(StrEnum):
    """What a guarded write expects about the variable's existence."""

    CREATE = "Create"
    UPDATE = "Update"


@dataclass
class CommandResult:
    """Output and non-fatal errors from one command invocation.

    Attributes:
        output: Records (or bare values) in emission order.
        errors: Non-fatal per-item errors, in the order they occurred.

    """

    output: list[EnvironmentVariable | str] = field(default_factory=list)
    errors: list[EnvVarError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Return True if no errors were reported."""
        return not self.errors


def _target(name: str, value: str | None = None) -> str:
    """Format the confirmation target for *name* (and *value*)."""
    if value is None:
        return f"Name: {name}"
    return f"Name: {name} Value: {value}"


class EnvironmentVariableCommands:
    """Get, create, set, remove and extend environment variables."""

    def __init__(
        self,
        store: EnvironmentStore,
        *,
        confirm: Confirmer = always_confirm,
        logger: Logger | None = None,
    ) -> None:
        """Create the command service.

        Args:
            store: The platform environment store.
            confirm: Default confirmer asked before every write.
            logger: Audit log; a fresh one is created if omitted.

        """
        self._store = store
        self._confirm = confirm
        self._logger = logger if logger is not None else Logger()

    @property
    def store(self) -> EnvironmentStore:
        """Return the store the commands operate on."""
        return self._store

    @property
    def logger(self) -> Logger:
        """Return the audit log."""
        return self._logger

    # -- validation ----------------------------------------------------------

    def validate_scope(self, scope: Scope | str | None) -> Scope:
        """Return *scope* as a ``Scope``, rejecting unsupported values.

        Raises:
            InvalidArgumentError: If *scope* names no scope, or names
                User/Machine on a store without those layers.

        """
        if not isinstance(scope, str):
            msg = f"Scope must be one of Process, User, Machine, not {scope!r}"
            raise InvalidArgumentError(msg, parameter="Scope")
        if not isinstance(scope, Scope):
            try:
                scope = Scope.parse(scope)
            except ValueError as e:
                raise InvalidArgumentError(str(e), parameter="Scope", target=scope) from e
        if scope is not Scope.PROCESS and not self._store.layered:
            msg = f"The {scope} scope is not supported on this platform"
            raise InvalidArgumentError(msg, parameter="Scope", target=scope)
        return scope

    @staticmethod
    def validate_name(name: str | None, *, wildcard_allowed: bool) -> str:
        """Return *name* if it is usable as a variable name or pattern.

        Raises:
            InvalidArgumentError: If *name* is missing, blank, or holds a
                wildcard where none is allowed.

        """
        if name is None or not name.strip():
            msg = "Name cannot be null or whitespace"
            raise InvalidArgumentError(msg, parameter="Name", target=name)
        if not wildcard_allowed and contains_wildcard(name):
            msg = f"Wildcard characters are not allowed in '{name}'"
            raise InvalidArgumentError(msg, parameter="Name", target=name)
        return name

    @staticmethod
    def validate_value(value: str | None) -> str:
        """Return *value*; it may be empty but must not be missing.

        Raises:
            InvalidArgumentError: If *value* is ``None``.

        """
        if value is None:
            msg = "Value cannot be null"
            raise InvalidArgumentError(msg, parameter="Value")
        return value

    # -- lookup and mutation -------------------------------------------------

    def match(
        self,
        pattern: str | None,
        scope: Scope = Scope.PROCESS,
        *,
        wildcard_allowed: bool = True,
    ) -> list[EnvironmentVariable]:
        """Return the variables in *scope* matching *pattern*."""
        return match_variables(self._store, pattern, scope, wildcard_allowed=wildcard_allowed)

    def set_variable(self, name: str, value: str, scope: Scope) -> None:
        """Write *name* unconditionally; an empty *value* deletes it."""
        self._store.set(name, value, scope)
        verb = "Set" if value else "Removed"
        self._logger.log(LogLevel.INFO, f"{verb} {name}", source=_SOURCE, scope=scope)

    def set_variable_guarded(
        self,
        name: str,
        value: str,
        scope: Scope,
        *,
        force: bool = False,
        passthru: bool = False,
        intent: Intent,
        confirm: Confirmer | None = None,
    ) -> EnvironmentVariable | None:
        """Write *name* after checking existence and asking for confirmation.

        Args:
            name: The exact variable name.
            value: The new value.
            scope: Where to write.
            force: Skip the existence precondition.
            passthru: Return the resulting record.
            intent: ``CREATE`` requires the variable to be absent,
                ``UPDATE`` requires it to exist.
            confirm: Confirmer for this call (defaults to the service's).

        Returns:
            The written record if *passthru* and the write happened,
            otherwise ``None``.

        Raises:
            VariableAlreadyExistsError: Creating a variable that exists.
            VariableNotFoundError: Updating a variable that does not.

        """
        if not force:
            found = self.match(name, scope, wildcard_allowed=False)
            if intent is Intent.CREATE and found:
                self._logger.log(
                    LogLevel.ERROR, f"{name} already exists", source=_SOURCE, scope=scope
                )
                raise VariableAlreadyExistsError(name)
            if intent is Intent.UPDATE and not found:
                self._logger.log(LogLevel.ERROR, f"{name} not found", source=_SOURCE, scope=scope)
                raise VariableNotFoundError(name)
            if found:
                name = found[0].name  # the stored spelling

        action = NEW_ACTION if intent is Intent.CREATE else SET_ACTION
        if not self._should_process(_target(name, value), action, confirm):
            return None

        self.set_variable(name, value, scope)
        return EnvironmentVariable(name, value, scope) if passthru else None

    def _should_process(self, target: str, action: str, confirm: Confirmer | None) -> bool:
        """Ask the confirmer; log a denial."""
        approved = (confirm or self._confirm)(target, action)
        if not approved:
            self._logger.log(LogLevel.DEBUG, f"{action} skipped: {target}", source=_SOURCE)
        return approved

    # -- commands ------------------------------------------------------------

    def get(
        self,
        names: Sequence[str] | None = (),
        scope: Scope | str = Scope.PROCESS,
        *,
        value_only: bool = False,
    ) -> CommandResult:
        """Look up variables by name or wildcard pattern.

        Each pattern's matches are sorted case-insensitively by name.  A
        pattern with no matches is reported as a non-fatal
        ``VariableNotFoundError`` and the next pattern is processed.

        Raises:
            InvalidArgumentError: If *names* is ``None`` or *scope* is
                unsupported.

        """
        if names is None:
            msg = "Name cannot be null"
            raise InvalidArgumentError(msg, parameter="Name")
        scope = self.validate_scope(scope)

        result = CommandResult()
        for pattern in names or ["*"]:
            matches = sorted(self.match(pattern, scope), key=lambda v: v.name.casefold())
            if not matches:
                self._not_found(result, pattern, scope)
                continue
            result.output.extend(v.value if value_only else v for v in matches)
        return result

    def new(
        self,
        name: str | None,
        value: str | None,
        scope: Scope | str = Scope.PROCESS,
        *,
        force: bool = False,
        passthru: bool = False,
        confirm: Confirmer | None = None,
    ) -> EnvironmentVariable | None:
        """Create a variable; fail if it exists unless *force* is set."""
        name = self.validate_name(name, wildcard_allowed=False)
        value = self.validate_value(value)
        scope = self.validate_scope(scope)
        return self.set_variable_guarded(
            name,
            value,
            scope,
            force=force,
            passthru=passthru,
            intent=Intent.CREATE,
            confirm=confirm,
        )

    def set(
        self,
        name: str | None,
        value: str | None,
        scope: Scope | str = Scope.PROCESS,
        *,
        force: bool = False,
        passthru: bool = False,
        confirm: Confirmer | None = None,
    ) -> EnvironmentVariable | None:
        """Update a variable; fail if it is missing unless *force* is set."""
        name = self.validate_name(name, wildcard_allowed=False)
        value = self.validate_value(value)
        scope = self.validate_scope(scope)
        return self.set_variable_guarded(
            name,
            value,
            scope,
            force=force,
            passthru=passthru,
            intent=Intent.UPDATE,
            confirm=confirm,
        )

    def remove(
        self,
        names: Sequence[str | None],
        scope: Scope | str = Scope.PROCESS,
        *,
        confirm: Confirmer | None = None,
    ) -> CommandResult:
        """Remove every variable matching each name or pattern.

        All patterns are validated before anything is removed.  Each
        pattern gets one confirmation covering all of its matches.

        Raises:
            InvalidArgumentError: If any pattern is blank or *scope* is
                unsupported.

        """
        if names is None:
            msg = "Name cannot be null"
            raise InvalidArgumentError(msg, parameter="Name")
        scope = self.validate_scope(scope)
        patterns = [self.validate_name(n, wildcard_allowed=True) for n in names]

        result = CommandResult()
        for pattern in patterns:
            matches = self.match(pattern, scope)
            if not matches:
                self._not_found(result, pattern, scope)
                continue
            if not self._should_process(_target(pattern), REMOVE_ACTION, confirm):
                continue
            for variable in matches:
                self.set_variable(variable.name, "", scope)
        return result

    def add(
        self,
        name: str | None,
        value: str | None,
        scope: Scope | str = Scope.PROCESS,
        *,
        force: bool = False,
        prepend: bool = False,
        passthru: bool = False,
        confirm: Confirmer | None = None,
    ) -> EnvironmentVariable | None:
        """Append (or prepend) *value* to an existing variable.

        The parts are joined with ``;``.  With *force*, a missing
        variable is created holding exactly *value*.

        Returns:
            The written record if *passthru* and the write happened.

        Raises:
            VariableNotFoundError: If the variable is missing and
                *force* is not set.

        """
        name = self.validate_name(name, wildcard_allowed=False)
        value = self.validate_value(value)
        scope = self.validate_scope(scope)

        found = self.match(name, scope, wildcard_allowed=False)
        if not found and not force:
            self._logger.log(LogLevel.ERROR, f"{name} not found", source=_SOURCE, scope=scope)
            raise VariableNotFoundError(name)

        if not self._should_process(_target(name, value), ADD_ACTION, confirm):
            return None

        if not found:
            new_value = value
        else:
            name, current = found[0].name, found[0].value
            parts = (value, current) if prepend else (current, value)
            new_value = LIST_SEPARATOR.join(parts)

        self.set_variable(name, new_value, scope)
        return EnvironmentVariable(name, new_value, scope) if passthru else None

    def _not_found(self, result: CommandResult, pattern: str, scope: Scope) -> None:
        """Record a non-fatal not-found error for *pattern*."""
        self._logger.log(LogLevel.WARNING, f"No match for {pattern}", source=_SOURCE, scope=scope)
        result.errors.append(VariableNotFoundError(pattern))
