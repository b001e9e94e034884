"""HTTP server adapter for the Scribe API.

Provides an HTTP server built on Python's http.server module. Requests are
served from worker threads; each request's coroutine is scheduled on the
application event loop, so a slow request never blocks its siblings.

Routes:
    POST /api/authors, /authors    create an author
    POST /api/posts, /posts        create a post
    GET  /health                   liveness check
    GET  /metrics                  Prometheus metrics (when configured)
"""

import asyncio
import concurrent.futures
import json
import logging
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Coroutine

from scribe.adapters.http.handlers import ApiRequestHandler, ApiResponse
from scribe.adapters.metrics.prometheus import PrometheusAuthorMetrics

logger = logging.getLogger(__name__)

MAX_BODY_SIZE = 1024 * 1024
REQUEST_TIMEOUT_SECONDS = 30.0

AUTHOR_PATHS = frozenset({"/api/authors", "/authors"})
POST_PATHS = frozenset({"/api/posts", "/posts"})


def make_request_handler(
    api: ApiRequestHandler,
    event_loop: asyncio.AbstractEventLoop,
    metrics: PrometheusAuthorMetrics | None,
    request_timeout: float,
) -> type[BaseHTTPRequestHandler]:
    """Factory to create a request handler class with instance-specific state.

    Dependencies are captured by closure instead of class-level mutable
    state, so several servers can run in one process.

    Args:
        api: Transport-independent request handler
        event_loop: Event loop running the application coroutines
        metrics: Optional metrics adapter exposed on /metrics
        request_timeout: Seconds to wait for a request coroutine

    Returns:
        A ScribeHTTPHandler class configured with the provided dependencies
    """

    class ScribeHTTPHandler(BaseHTTPRequestHandler):
        """HTTP request handler for the Scribe API."""

        def do_POST(self) -> None:
            """Handle POST requests, routing on path."""
            path = self.path.split("?", 1)[0]
            if path in AUTHOR_PATHS:
                route = api.handle_create_author
            elif path in POST_PATHS:
                route = api.handle_create_post
            else:
                self._send_response(ApiResponse.error(HTTPStatus.NOT_FOUND, "Not found"))
                return

            try:
                content_length = int(self.headers.get("Content-Length", 0) or 0)
            except ValueError:
                content_length = -1
            if content_length < 0:
                self._send_response(
                    ApiResponse.error(HTTPStatus.BAD_REQUEST, "Invalid Content-Length")
                )
                return
            if content_length > MAX_BODY_SIZE:
                self._send_response(
                    ApiResponse.error(HTTPStatus.REQUEST_ENTITY_TOO_LARGE, "Request body too large")
                )
                return

            body = self.rfile.read(content_length) if content_length > 0 else b""

            try:
                data = json.loads(body) if body else None
            except (json.JSONDecodeError, UnicodeDecodeError):
                self._send_response(ApiResponse.error(HTTPStatus.BAD_REQUEST, "Invalid JSON body"))
                return

            if not isinstance(data, dict):
                self._send_response(
                    ApiResponse.error(HTTPStatus.BAD_REQUEST, "Request body must be a JSON object")
                )
                return

            self._send_response(self._run_async(route(data)))

        def do_GET(self) -> None:
            """Handle GET requests. Health and metrics are public."""
            path = self.path.split("?", 1)[0]
            if path == "/health":
                self._send_response(ApiRequestHandler.handle_health())
            elif path == "/metrics" and metrics is not None:
                self._send_raw(HTTPStatus.OK, metrics.content_type, metrics.render())
            else:
                self._send_response(ApiResponse.error(HTTPStatus.NOT_FOUND, "Not found"))

        def _run_async(self, coro: Coroutine[Any, Any, ApiResponse]) -> ApiResponse:
            """Run a request coroutine on the event loop and wait for it.

            A timed-out request is cancelled and reported as a failure; it
            is never retried, since its commit state is unknown.
            """
            future = asyncio.run_coroutine_threadsafe(coro, event_loop)
            try:
                return future.result(timeout=request_timeout)
            except concurrent.futures.TimeoutError:
                future.cancel()
                logger.error(f"Request to {self.path} timed out after {request_timeout}s")
                return ApiResponse.internal_error()
            except Exception as e:
                # Log full exception server-side; return a generic error to the client
                logger.error(f"Error handling request to {self.path}: {e}", exc_info=True)
                return ApiResponse.internal_error()

        def _send_response(self, response: ApiResponse) -> None:
            """Send JSON response."""
            self._send_raw(
                response.status_code,
                "application/json",
                json.dumps(response.body).encode(),
            )

        def _send_raw(self, status: int, content_type: str, payload: bytes) -> None:
            self.send_response(status)
            self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(len(payload)))
            self.end_headers()
            self.wfile.write(payload)

        def log_message(self, format: str, *args: Any) -> None:
            """Log HTTP request."""
            logger.debug(f"HTTP {self.client_address[0]}: {format % args}")

    return ScribeHTTPHandler


class ScribeHTTPServer:
    """HTTP server adapter for the Scribe API."""

    def __init__(
        self,
        api: ApiRequestHandler,
        host: str = "0.0.0.0",
        port: int = 8080,
        metrics: PrometheusAuthorMetrics | None = None,
        request_timeout: float = REQUEST_TIMEOUT_SECONDS,
    ):
        """Initialize the HTTP server.

        Args:
            api: ApiRequestHandler instance to handle requests.
            host: Host to listen on (default 0.0.0.0).
            port: Port to listen on (default 8080). Use 0 for an
                ephemeral port; read the bound port from ``port`` after start.
            metrics: Optional metrics adapter to expose on /metrics.
            request_timeout: Seconds to wait for each request.
        """
        self.api = api
        self.host = host
        self.port = port
        self.metrics = metrics
        self.request_timeout = request_timeout
        self.server: ThreadingHTTPServer | None = None
        self._server_task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        """Bind the socket and start serving in a background thread."""
        handler_class = make_request_handler(
            api=self.api,
            event_loop=asyncio.get_running_loop(),
            metrics=self.metrics,
            request_timeout=self.request_timeout,
        )

        self.server = ThreadingHTTPServer((self.host, self.port), handler_class)
        self.server.daemon_threads = True
        self.port = self.server.server_address[1]

        self._server_task = asyncio.create_task(self._run_server())
        logger.info(f"HTTP server listening on {self.host}:{self.port}")

    async def _run_server(self) -> None:
        """Run the HTTP server loop in a thread pool."""
        if not self.server:
            return

        try:
            await asyncio.to_thread(self.server.serve_forever)
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error(f"HTTP server error: {e}", exc_info=True)

    async def serve_forever(self) -> None:
        """Start the server and block until it stops."""
        await self.start()
        assert self._server_task is not None
        await self._server_task

    async def stop(self) -> None:
        """Stop the HTTP server."""
        if self.server:
            await asyncio.to_thread(self.server.shutdown)
            self.server.server_close()
        if self._server_task:
            self._server_task.cancel()
            try:
                await self._server_task
            except asyncio.CancelledError:
                pass
        logger.info("HTTP server stopped")
