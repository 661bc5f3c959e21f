"""
HTTP responder serving the fixed configuration document
"""

import logging
import socket
import threading

from flask import Flask, Response, request
from werkzeug.serving import make_server

logger = logging.getLogger(__name__)


def create_app(body):
    """Flask app answering every method and path with body as text/xml"""
    app = Flask(__name__, static_folder=None)
    payload = body.encode() if isinstance(body, str) else body

    # Runs ahead of URL routing, so no method or path can end in 404 or 405
    @app.before_request
    def profile():
        logger.info(f"HTTP {request.method} {request.path} from {request.remote_addr}")
        return Response(payload, status=200, content_type='text/xml')

    return app


class HttpServer:
    """Runs a WSGI app on a background thread"""

    def __init__(self, app, host, port, name='HTTP'):
        self.app = app
        self.host = host
        self.port = port
        self.name = name
        self.server = None
        self.thread = None

    def bind(self):
        """Create the listening socket; raises OSError if the port is unavailable

        The socket is bound here rather than by werkzeug, which exits the
        process when a port is taken.
        """
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((self.host, self.port))
            sock.listen(128)
            self.server = make_server(self.host, self.port, self.app, threaded=True,
                                      fd=sock.fileno())
        finally:
            sock.close()
        self.port = self.server.server_address[1]

    def start(self):
        if self.server is None:
            self.bind()
        self.thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        self.thread.start()
        logger.info(f"{self.name} server started on {self.host}:{self.port}")

    def stop(self):
        if self.server:
            self.server.shutdown()
            self.server.server_close()
            logger.info(f"{self.name} server stopped")
