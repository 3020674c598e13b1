"""Errors raised by the environment variable commands.

Every error carries two things:

- ``error_id`` — a stable, machine-readable identifier such as
  ``VariableNotFound``.  Scripts should branch on this, never on the
  message text.
- ``target`` — the name, pattern or scope the error is about.

The commands either *raise* these (terminating errors: the invocation
stops) or *collect* them in ``CommandResult.errors`` (non-fatal errors:
the next name or pattern is still processed).
"""


class EnvVarError(Exception):
    """Base class for every environment variable command error."""

    error_id = "EnvVarError"

    def __init__(self, message: str, *, target: str | None = None) -> None:
        """Create an error about *target*.

        Args:
            message: Human-readable description.
            target: The offending name, pattern or parameter value.

        """
        super().__init__(message)
        self.target = target

    def __str__(self) -> str:
        """Return the human-readable message."""
        return str(self.args[0])

    def describe(self) -> str:
        """Format as ``[ErrorId] message`` for display."""
        return f"[{self.error_id}] {self}"


class InvalidArgumentError(EnvVarError):
    """A parameter failed validation; nothing was read or written."""

    error_id = "InvalidArgument"

    def __init__(self, message: str, *, parameter: str, target: str | None = None) -> None:
        """Create a validation error for *parameter*."""
        super().__init__(message, target=target)
        self.parameter = parameter


class VariableNotFoundError(EnvVarError):
    """No variable matched the requested name or pattern."""

    error_id = "VariableNotFound"

    def __init__(self, name: str) -> None:
        """Create a not-found error for *name*."""
        super().__init__(f"Cannot find a variable with the name '{name}'.", target=name)


class VariableAlreadyExistsError(EnvVarError):
    """A variable with the requested name already exists."""

    error_id = "VariableAlreadyExists"

    def __init__(self, name: str) -> None:
        """Create an already-exists error for *name*."""
        super().__init__(f"A variable with name '{name}' already exists.", target=name)
