from __future__ import annotations

import contextlib
import logging
import signal
import socket
import threading
from wsgiref.simple_server import make_server

from django.core.servers.basehttp import ThreadedWSGIServer, WSGIRequestHandler

logger = logging.getLogger(__name__)

SHUTDOWN_SIGNALS = (signal.SIGTERM, signal.SIGINT)


class GracefulWSGIServer(ThreadedWSGIServer):
    """Threaded server whose close waits for in-flight request threads.

    Keep-alive connections waiting for their next request are idle, not in
    flight: closing the server shuts their read side so those threads exit.
    """

    daemon_threads = False
    block_on_close = True

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._connections_lock = threading.Lock()
        self._idle_connections: dict[socket.socket, bool] = {}
        self._closing = False

    def connection_idle(self, connection) -> None:
        with self._connections_lock:
            if self._closing:
                _stop_reading(connection)
                return
            self._idle_connections[connection] = True

    def connection_busy(self, connection) -> None:
        with self._connections_lock:
            self._idle_connections[connection] = False

    def shutdown_request(self, request):
        with self._connections_lock:
            self._idle_connections.pop(request, None)
        super().shutdown_request(request)

    def server_close(self):
        with self._connections_lock:
            self._closing = True
            idle = [connection for connection, is_idle in self._idle_connections.items() if is_idle]
        for connection in idle:
            _stop_reading(connection)
        super().server_close()


def _stop_reading(connection) -> None:
    # The peer may already have hung up.
    with contextlib.suppress(OSError):
        connection.shutdown(socket.SHUT_RD)


class GracefulRequestHandler(WSGIRequestHandler):
    """Reports to the server whether the connection is between requests."""

    def handle_one_request(self):
        self.server.connection_idle(self.connection)
        super().handle_one_request()

    def parse_request(self):
        self.server.connection_busy(self.connection)
        return super().parse_request()


def create_server(host: str, port: int, application) -> GracefulWSGIServer:
    return make_server(
        host,
        port,
        application,
        server_class=GracefulWSGIServer,
        handler_class=GracefulRequestHandler,
    )


def install_shutdown_handler(httpd, signals=SHUTDOWN_SIGNALS):
    def handle(signum, _frame):
        logger.info("%s received. Shutting down gracefully", signal.Signals(signum).name)
        # shutdown() blocks until serve_forever() returns, so it cannot run on the serving thread.
        threading.Thread(target=httpd.shutdown, daemon=True).start()

    for signum in signals:
        signal.signal(signum, handle)
    return handle


def serve(httpd, *, mode: str) -> int:
    host, port = httpd.server_address[:2]
    install_shutdown_handler(httpd)
    logger.info("Server running in %s mode", mode)
    logger.info("Serving on http://%s:%s", host, port)
    try:
        httpd.serve_forever()
    finally:
        httpd.server_close()
    logger.info("Process terminated")
    return 0
