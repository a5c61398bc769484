"""Status API Handler - Serves the current snapshot summary.

This module provides the single HTTP endpoint of the service and the
server thread that hosts it. Part of the imperative shell - handles
HTTP I/O.
"""

import json
import logging
import threading
from typing import TYPE_CHECKING, Any

from flask import Flask, Response
from werkzeug.serving import BaseWSGIServer, make_server

from quakefeed.core.config import DEFAULT_API_PORT
from quakefeed.core.status import build_status_summary

if TYPE_CHECKING:
    from quakefeed.service import EarthquakeService

logger = logging.getLogger(__name__)


def _json_response(data: dict[str, Any], status: int = 200) -> Response:
    """Create a JSON response."""
    return Response(
        json.dumps(data),
        status=status,
        mimetype="application/json",
    )


def create_app(provider: "EarthquakeService") -> Flask:
    """Create the status API application.

    Args:
        provider: Service whose snapshot is reported

    Returns:
        Flask app with a single GET /status route
    """
    app = Flask(__name__)

    @app.get("/status")
    def get_status() -> Response:
        """API endpoint: Summarize the current snapshot.

        Returns:
            JSON with status, record count and the first record (if any)
        """
        snapshot = provider.get_snapshot()
        return _json_response(build_status_summary(snapshot))

    return app


class StatusServer:
    """Owned, joinable HTTP server thread for the status endpoint.

    The listener binds when start() is called; stop() shuts it down and
    waits for the serving thread to exit.
    """

    def __init__(
        self,
        provider: "EarthquakeService",
        host: str = "0.0.0.0",
        port: int = DEFAULT_API_PORT,
    ) -> None:
        """Initialize status server.

        Args:
            provider: Service whose snapshot is reported
            host: Interface to bind
            port: Port to listen on (0 picks a free port)
        """
        self.provider = provider
        self.host = host
        self._requested_port = port
        self._server: BaseWSGIServer | None = None
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        """True while the serving thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    @property
    def port(self) -> int:
        """Port actually bound, or the requested port before start()."""
        if self._server is not None:
            return self._server.server_port
        return self._requested_port

    def start(self) -> None:
        """Bind the listener and start serving in a background thread.

        Raises:
            OSError: If the address cannot be bound
        """
        if self._server is not None:
            logger.debug("Status server already running on port %d", self.port)
            return

        try:
            self._server = make_server(
                self.host,
                self._requested_port,
                create_app(self.provider),
                threaded=True,
            )
        except SystemExit as e:
            # werkzeug reports bind failures by exiting the process
            raise OSError(
                f"Could not bind status API to {self.host}:{self._requested_port}"
            ) from e
        self._thread = threading.Thread(
            target=self._server.serve_forever,
            name="quakefeed-status-api",
        )
        self._thread.start()

        logger.info("Status API listening on %s:%d", self.host, self.port)

    def stop(self) -> None:
        """Stop serving and wait for the server thread to exit."""
        if self._server is None:
            return

        self._server.shutdown()
        if self._thread is not None:
            self._thread.join()
        self._server.server_close()

        logger.info("Status API on port %d stopped", self._server.server_port)

        self._server = None
        self._thread = None
