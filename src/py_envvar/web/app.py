"""Flask application factory for the py-envvar web UI.

The ``create_app`` function builds a store, a commands service and a
shell, and returns a Flask app with four endpoints:

- ``GET /`` — render the terminal HTML page.
- ``POST /api/execute`` — execute a shell command and return JSON.
- ``GET /api/variables`` — list variables as JSON records.
- ``GET /api/status`` — return running state, scopes and the audit log.
"""

from __future__ import annotations

import os

from flask import Flask, Response, jsonify, render_template, request

from py_envvar import __version__
from py_envvar.commands import EnvironmentVariableCommands
from py_envvar.config import Backend, Config
from py_envvar.errors import EnvVarError
from py_envvar.shell import Shell
from py_envvar.store import EnvironmentStore
from py_envvar.variable import EnvironmentVariable, Scope

_HTTP_BAD_REQUEST = 400


def _decline(_question: str) -> str:
    """Answer every ``-Confirm`` prompt with no; the browser cannot be asked."""
    return "n"


def _error_json(error: EnvVarError) -> dict[str, str | None]:
    return {"error_id": error.error_id, "target": error.target, "message": str(error)}


def _record_json(record: EnvironmentVariable) -> dict[str, str]:
    return {"name": record.name, "value": record.value, "scope": str(record.scope)}


def create_app(config: Config | None = None, *, store: EnvironmentStore | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        config: Runtime settings; defaults to the in-memory backend so
            the server never changes its own process environment.
        store: Use this store instead of the one *config* selects.

    Returns:
        A configured Flask application ready to serve.

    """
    config = config or Config(backend=Backend.MEMORY)
    commands = EnvironmentVariableCommands(store or config.build_store())
    shell = Shell(commands=commands, prompt=_decline)

    app = Flask(__name__)

    @app.route("/")
    def index() -> str:  # pyright: ignore[reportUnusedFunction]
        """Render the terminal HTML page."""
        return render_template("index.html", version=__version__, backend=config.backend)

    @app.route("/api/execute", methods=["POST"])
    def execute() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Execute a shell command and return JSON output.

        Expects JSON body: ``{"command": "..."}``

        Returns:
            JSON with ``output`` and ``halted`` fields.

        """
        data = request.get_json(silent=True)
        if data is None or "command" not in data:
            return jsonify({"error": "Missing 'command' field"}), _HTTP_BAD_REQUEST

        if not shell.running:
            return jsonify({"output": "Session closed.", "halted": True})

        command: str = data["command"]
        result = shell.execute(command)

        if result == Shell.EXIT_SENTINEL:
            return jsonify({"output": "Session closed.", "halted": True})

        return jsonify({"output": result, "halted": False})

    @app.route("/api/variables")
    def variables() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """List variables matching the ``name`` query parameters.

        Query parameters: ``name`` (repeatable, wildcards allowed) and
        ``scope`` (default Process).

        Returns:
            JSON with ``variables`` and ``errors`` lists, or a 400 with
            an ``error`` object for invalid arguments.

        """
        names = request.args.getlist("name")
        scope = request.args.get("scope", Scope.PROCESS)
        try:
            result = commands.get(names, scope)
        except EnvVarError as e:
            return jsonify({"error": _error_json(e)}), _HTTP_BAD_REQUEST
        records = [item for item in result.output if isinstance(item, EnvironmentVariable)]
        return jsonify(
            {
                "variables": [_record_json(r) for r in records],
                "errors": [_error_json(e) for e in result.errors],
            }
        )

    @app.route("/api/status")
    def status() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return session status for status polling.

        Returns:
            JSON with ``running``, ``scopes`` and ``log`` fields.

        """
        scopes = [str(s) for s in Scope] if commands.store.layered else [str(Scope.PROCESS)]
        return jsonify(
            {
                "running": shell.running,
                "scopes": scopes,
                "log": [str(e) for e in commands.logger.entries],
            }
        )

    return app


def main() -> None:
    """Run the web UI development server.

    This is the ``py-envvar-web`` console entry point.  Unless
    ``PY_ENVVAR_BACKEND`` says otherwise, requests change an in-memory
    copy of the environment, never the server's own.
    """
    config = Config.from_environ(os.environ, default_backend=Backend.MEMORY)
    app = create_app(config)
    app.run(port=config.web_port)
