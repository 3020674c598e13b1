"""Interactive REPL (Read-Eval-Print Loop) for the environment shell.

The REPL is the terminal interface.  It builds the store and commands
service from the configuration, creates a shell, and enters the classic
loop:

    1. **Read** — display a prompt and read user input.
    2. **Eval** — pass the command to ``shell.execute()``.
    3. **Print** — display the result.
    4. **Loop** — repeat until the shell returns the exit sentinel.

This module keeps the I/O loop separate from the shell logic.  The
shell is fully testable (returns strings, no I/O); the REPL is the
thin I/O wrapper that connects it to ``stdin``/``stdout``.

The helper functions (``create_shell``, ``build_prompt``,
``format_banner``) are pure and testable.  The ``run()`` function is
the I/O entrypoint.
"""

import os
import readline

from py_envvar import __version__
from py_envvar.commands import EnvironmentVariableCommands
from py_envvar.completer import Completer
from py_envvar.config import Config
from py_envvar.confirm import PromptConfirm, always_confirm
from py_envvar.shell import Shell
from py_envvar.store import EnvironmentStore

_BANNER_WIDTH = 38


def create_shell(config: Config, *, store: EnvironmentStore | None = None) -> Shell:
    """Build the commands service and shell described by *config*.

    Args:
        config: Runtime settings.
        store: Use this store instead of the one *config* selects.

    Returns:
        A shell ready to execute commands.

    """
    confirm = PromptConfirm() if config.confirm else always_confirm
    commands = EnvironmentVariableCommands(store or config.build_store(), confirm=confirm)
    return Shell(commands=commands)


def format_banner(config: Config, shell: Shell) -> str:
    """Format the start-up banner.

    Args:
        config: Runtime settings shown in the banner.
        shell: The shell whose store determines the available scopes.

    Returns:
        A formatted string suitable for printing to the console.

    """
    border = "=" * _BANNER_WIDTH
    scopes = "Process, User, Machine" if shell.commands.store.layered else "Process"
    header = f"\n  {border}\n          py-envvar v{__version__}\n  {border}\n\n"
    body = f"  Backend: {config.backend}\n  Scopes:  {scopes}\n"
    footer = "\nType 'help' for commands, 'exit' to quit.\n"
    return header + body + footer


def build_prompt(config: Config) -> str:
    """Build the prompt string, e.g. ``envvar[os] $ ``."""
    return f"envvar[{config.backend}] $ "


def run() -> None:
    """Run the interactive REPL.

    This is the ``py-envvar`` console entry point.  It handles:
    - Reading configuration from ``PY_ENVVAR_*`` variables.
    - Shell creation and tab completion.
    - The read-eval-print loop.
    - Graceful handling of Ctrl+C and Ctrl+D.
    """
    config = Config.from_environ(os.environ)
    shell = create_shell(config)

    # Wire up tab completion via readline.
    completer = Completer(shell)
    readline.set_completer(completer.complete)
    readline.set_completer_delims(" \t|")
    readline.parse_and_bind("tab: complete")

    print(format_banner(config, shell))  # noqa: T201

    try:
        while shell.running:
            try:
                command = input(build_prompt(config))
            except EOFError:
                # Ctrl+D
                print()  # noqa: T201
                break

            result = shell.execute(command)
            if result == Shell.EXIT_SENTINEL:
                break
            if result:
                print(result)  # noqa: T201

    except KeyboardInterrupt:
        # Ctrl+C
        print("\nInterrupted.")  # noqa: T201
