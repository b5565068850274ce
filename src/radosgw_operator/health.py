"""Health check and metrics endpoints for the operator."""

from __future__ import annotations

import threading
from typing import Any, Callable

from prometheus_client import make_wsgi_app
from werkzeug.serving import make_server
from werkzeug.wrappers import Response

HEALTH_RESPONSES = {
    "/healthz": '{"status":"ok"}',
    "/readyz": '{"status":"ready"}',
}


def create_combined_wsgi_app() -> Callable[..., Any]:
    """Create a WSGI app that combines metrics and health check endpoints.

    Returns:
        WSGI application serving ``/healthz`` and ``/readyz`` itself and
        delegating every other path (including ``/metrics``) to prometheus
    """
    metrics_app = make_wsgi_app()

    def combined_app(environ: dict[str, Any], start_response: Any) -> list[bytes]:
        body = HEALTH_RESPONSES.get(environ.get("PATH_INFO", ""))
        if body is not None:
            response = Response(body, mimetype="application/json", status=200)
            return response(environ, start_response)
        return metrics_app(environ, start_response)

    return combined_app


def start_metrics_server(port: int) -> threading.Thread:
    """Serve the combined app from a daemon thread.

    Args:
        port: Port to listen on

    Returns:
        The serving thread
    """
    server = make_server("", port, create_combined_wsgi_app(), threaded=True)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    return thread
