"""
DHCP dispatch loop and UDP transport

Each inbound datagram is handled on its own thread. Replies are always
broadcast because the client has no configured address yet.
"""

import logging
import socket
import socketserver

from ..common.errors import EncodingFailure, MalformedPacket, TransportFailure
from ..dhcp import codec
from ..dhcp.messages import message_type_name

logger = logging.getLogger(__name__)

BROADCAST_ADDRESS = '255.255.255.255'


class DhcpDispatcher:
    """Decode, handle, encode and broadcast one datagram at a time

    send is a callable taking (payload, address). Per-event failures are
    logged and the event dropped; dispatch never raises for them.
    """

    def __init__(self, handler, send, client_port=68):
        self.handler = handler
        self.send = send
        self.destination = (BROADCAST_ADDRESS, client_port)

    def dispatch(self, data, peer=None):
        """Process one datagram; returns the reply bytes sent, or None"""
        try:
            request = codec.decode_request(data)
        except MalformedPacket as e:
            logger.debug(f"Dropping datagram from {peer}: {e}")
            return None

        response = self.handler.handle(request)
        if response is None:
            return None

        try:
            payload = codec.encode_response(response, request)
        except EncodingFailure as e:
            logger.error(f"Error handling {message_type_name(request.message_type)} "
                         f"from {request.client_mac}: {e}")
            return None

        try:
            self.broadcast(payload)
        except TransportFailure as e:
            logger.error(f"Failed to send {response.name} to {request.client_mac}: {e}")
            return None

        if response.assigned_address:
            logger.info(f"Sent DHCP {response.name} {response.assigned_address} to {request.client_mac}")
        else:
            logger.info(f"Sent DHCP {response.name} to {request.client_mac}")
        return payload

    def broadcast(self, payload):
        try:
            self.send(payload, self.destination)
        except OSError as e:
            raise TransportFailure(str(e))


class DhcpRequestHandler(socketserver.BaseRequestHandler):
    def handle(self):
        data, _sock = self.request
        self.server.dispatcher.dispatch(data, peer=self.client_address)


class DhcpServer(socketserver.ThreadingUDPServer):
    """Threaded UDP listener on the DHCP server port"""

    allow_reuse_address = True
    # server_close() waits for in-flight handlers
    daemon_threads = False
    block_on_close = True

    def __init__(self, config, handler, bind_and_activate=True):
        self.config = config
        self.dispatcher = DhcpDispatcher(handler, self.send_to, config.dhcp_client_port)
        super().__init__((config.bind_host, config.dhcp_port), DhcpRequestHandler,
                         bind_and_activate=bind_and_activate)

    def server_bind(self):
        self.socket.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
        if self.config.interface and hasattr(socket, 'SO_BINDTODEVICE'):
            self.socket.setsockopt(socket.SOL_SOCKET, socket.SO_BINDTODEVICE,
                                   self.config.interface.encode())
        super().server_bind()

    def send_to(self, payload, address):
        self.socket.sendto(payload, address)
