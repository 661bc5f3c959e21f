"""
Decoded DHCP request and response values exchanged with the codec
"""

import ipaddress
from dataclasses import dataclass
from typing import Optional

# BOOTP opcodes
BOOTREQUEST = 1
BOOTREPLY = 2

# DHCP message types (option 53)
DISCOVER = 1
OFFER = 2
REQUEST = 3
DECLINE = 4
ACK = 5
NAK = 6
RELEASE = 7
INFORM = 8

MESSAGE_TYPE_NAMES = {
    DISCOVER: 'DISCOVER',
    OFFER: 'OFFER',
    REQUEST: 'REQUEST',
    DECLINE: 'DECLINE',
    ACK: 'ACK',
    NAK: 'NAK',
    RELEASE: 'RELEASE',
    INFORM: 'INFORM',
}


def message_type_name(message_type):
    return MESSAGE_TYPE_NAMES.get(message_type, f'UNKNOWN({message_type})')


def format_client_id(client_id):
    """Render a hardware address as aa:bb:cc:dd:ee:ff"""
    return ':'.join(f'{b:02x}' for b in client_id)


@dataclass(frozen=True)
class DhcpRequest:
    """Inbound BOOTP/DHCP message as seen by the handler"""
    op: int
    message_type: int
    client_id: bytes
    xid: int = 0
    flags: int = 0
    htype: int = 1
    hlen: int = 6
    giaddr: str = '0.0.0.0'
    chaddr: bytes = b''

    @property
    def client_mac(self):
        return format_client_id(self.client_id)


@dataclass(frozen=True)
class DhcpResponse:
    """Outbound reply the dispatcher asks the transport to broadcast

    A NAK carries only message_type and server_id.
    """
    message_type: int
    server_id: ipaddress.IPv4Address
    assigned_address: Optional[ipaddress.IPv4Address] = None
    subnet_mask: Optional[ipaddress.IPv4Address] = None
    router: Optional[ipaddress.IPv4Address] = None
    dns_server: Optional[ipaddress.IPv4Address] = None
    lease_time: Optional[int] = None

    @property
    def name(self):
        return message_type_name(self.message_type)
