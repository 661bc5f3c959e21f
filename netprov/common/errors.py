"""
Exception types shared across netprov services
"""


class NetprovError(Exception):
    """Base class for all netprov errors"""


class ConfigError(NetprovError):
    """Invalid or inconsistent configuration"""


class InterfaceError(NetprovError):
    """The network interface could not be inspected or configured"""


class ServiceStartError(NetprovError):
    """A listening transport could not be bound at startup"""


class PoolExhausted(NetprovError):
    """The address pool cursor has passed the end of the range"""

    def __init__(self, client_id=None):
        self.client_id = client_id
        super().__init__("Address pool exhausted")


class MalformedPacket(NetprovError):
    """An inbound datagram could not be decoded"""


class EncodingFailure(NetprovError):
    """A response value could not be serialized"""


class TransportFailure(NetprovError):
    """Sending or receiving failed at the socket boundary"""
