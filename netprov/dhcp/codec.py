"""
BOOTP/DHCP wire codec on top of scapy
"""

from scapy.layers.dhcp import BOOTP, DHCP

from ..common.errors import EncodingFailure, MalformedPacket
from .messages import BOOTREPLY, NAK, DhcpRequest

# Fixed BOOTP header plus the DHCP magic cookie
MIN_DHCP_LENGTH = 240
# RFC 1542 minimum BOOTP message size; some clients drop shorter replies
MIN_REPLY_LENGTH = 300


def get_option(packet, name):
    """First value of a named option in a scapy DHCP layer"""
    for option in packet[DHCP].options:
        if isinstance(option, tuple) and option[0] == name:
            return option[1]
    return None


def decode_request(data):
    """Decode a raw datagram into a DhcpRequest"""
    if len(data) < MIN_DHCP_LENGTH:
        raise MalformedPacket(f"Datagram too short for DHCP ({len(data)} bytes)")

    try:
        packet = BOOTP(data)
    except Exception as e:
        raise MalformedPacket(f"Could not parse BOOTP header: {e}")

    if not packet.haslayer(DHCP):
        raise MalformedPacket("BOOTP message without DHCP options")

    hlen = min(packet.hlen, 16)
    chaddr = bytes(packet.chaddr)
    client_id = chaddr[:hlen]
    if not client_id:
        raise MalformedPacket("Missing client hardware address")

    return DhcpRequest(
        op=packet.op,
        message_type=get_option(packet, 'message-type'),
        client_id=client_id,
        xid=packet.xid,
        flags=int(packet.flags),
        htype=packet.htype,
        hlen=packet.hlen,
        giaddr=packet.giaddr,
        chaddr=chaddr,
    )


def build_options(response):
    options = [
        ('message-type', response.message_type),
        ('server_id', str(response.server_id)),
    ]
    if response.message_type != NAK:
        options += [
            ('lease_time', response.lease_time),
            ('subnet_mask', str(response.subnet_mask)),
            ('router', str(response.router)),
            ('name_server', str(response.dns_server)),
        ]
    options.append('end')
    return options


def encode_response(response, request):
    """Serialize response as a BOOTREPLY to request"""
    try:
        reply = BOOTP(
            op=BOOTREPLY,
            htype=request.htype,
            hlen=request.hlen,
            xid=request.xid,
            flags=request.flags,
            yiaddr=str(response.assigned_address) if response.assigned_address else '0.0.0.0',
            siaddr=str(response.server_id) if response.message_type != NAK else '0.0.0.0',
            giaddr=request.giaddr,
            chaddr=request.chaddr or request.client_id,
        ) / DHCP(options=build_options(response))
        payload = bytes(reply)
    except Exception as e:
        raise EncodingFailure(f"Could not encode DHCP {response.name}: {e}")

    return payload.ljust(MIN_REPLY_LENGTH, b'\x00')
