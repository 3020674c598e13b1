"""Browser-based web UI for py-envvar.

This package provides a Flask application that exposes the shell
through a web browser.  It is an **optional** extra — install with::

    pip install py-envvar[web]

The ``create_app`` factory in ``app.py`` builds a store and a shell,
and serves four endpoints:

- ``GET /`` — HTML terminal page.
- ``POST /api/execute`` — execute a shell command and return JSON.
- ``GET /api/variables`` — list variables as JSON records.
- ``GET /api/status`` — session status for live polling.
"""
