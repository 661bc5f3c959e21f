"""
Wires the lease engine to the DHCP, DNS, HTTP and status transports and
manages their lifecycle.
"""

import logging
import signal
import threading

from ..common.errors import ServiceStartError
from ..dhcp.engine import AllocationEngine
from ..dhcp.handler import DoraHandler
from . import health_server, http_server
from .dhcp_server import DhcpServer
from .dns_server import DnsServer
from .http_server import HttpServer

logger = logging.getLogger(__name__)


class SocketService:
    """Runs a socketserver instance on a background thread"""

    def __init__(self, name, factory):
        self.name = name
        self.factory = factory
        self.server = None
        self.thread = None

    def start(self):
        self.server = self.factory()
        self.thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        self.thread.start()
        host, port = self.server.server_address[:2]
        logger.info(f"{self.name} server started on {host}:{port}")

    def stop(self):
        if self.server:
            self.server.shutdown()
            self.server.server_close()
            logger.info(f"{self.name} server stopped")


class Provisioner:
    def __init__(self, config):
        self.config = config
        self.engine = AllocationEngine.from_config(config)
        self.handler = DoraHandler(config, self.engine)
        self.services = []
        self.running = False
        self._stop_event = threading.Event()

    @property
    def table(self):
        return self.engine.table

    def build_services(self):
        config = self.config
        services = [SocketService('DHCP', lambda: DhcpServer(config, self.handler))]
        if config.enable_dns:
            services.append(SocketService('DNS', lambda: DnsServer(config)))
        if config.enable_http:
            app = http_server.create_app(config.profile_body)
            services.append(HttpServer(app, config.bind_host, config.http_port))
        if config.health_port:
            app = health_server.create_app(config, self.table, lambda: self.running)
            services.append(HttpServer(app, config.bind_host, config.health_port, name='Health'))
        return services

    def start(self):
        """Bind and start every enabled service

        Failing to bind any listener is fatal: services already started are
        stopped again and ServiceStartError is raised.
        """
        self._stop_event.clear()
        pool = self.config.pool
        logger.info(f"Starting provisioning on {self.config.interface or self.config.bind_host} "
                    f"(server {self.config.server_ip}, pool "
                    f"{self.config.pool_address(pool.start)}-{self.config.pool_address(pool.end)})")

        for service in self.build_services():
            try:
                service.start()
            except OSError as e:
                logger.error(f"Failed to start {service.name} server: {e}")
                self.stop()
                raise ServiceStartError(f"{service.name} server could not bind: {e}")
            self.services.append(service)

        self.running = True

    def stop(self):
        """Stop accepting events; handlers already running are allowed to finish"""
        self.running = False
        for service in reversed(self.services):
            try:
                service.stop()
            except Exception as e:
                logger.error(f"Error stopping {service.name} server: {e}")
        self.services = []
        self._stop_event.set()

    def request_stop(self, signum=None, frame=None):
        if signum is not None:
            logger.info(f"Received signal {signal.Signals(signum).name}, shutting down...")
        self._stop_event.set()

    def serve_forever(self):
        """Start, then block until SIGINT/SIGTERM or request_stop()"""
        self.start()
        previous = {}
        if threading.current_thread() is threading.main_thread():
            for signum in (signal.SIGINT, signal.SIGTERM):
                previous[signum] = signal.signal(signum, self.request_stop)
        try:
            while not self._stop_event.wait(1):
                pass
        finally:
            for signum, handler in previous.items():
                signal.signal(signum, handler)
            self.stop()
            logger.info("Shutdown complete")
