from scapy.layers.dhcp import BOOTP, DHCP

CLIENT_MAC = bytes.fromhex('aabbccddeeff')


def build_dhcp_packet(message_type, mac=CLIENT_MAC, xid=0x1234, op=1):
    """Raw client datagram as scapy would put it on the wire"""
    packet = BOOTP(op=op, xid=xid, chaddr=mac + b'\x00' * 10, flags=0x8000) / DHCP(
        options=[('message-type', message_type), 'end'])
    return bytes(packet)


def reply_options(payload):
    packet = BOOTP(payload)
    return packet, {opt[0]: opt[1] for opt in packet[DHCP].options if isinstance(opt, tuple)}
