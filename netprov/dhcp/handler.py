"""
DISCOVER/OFFER/REQUEST/ACK handling

The handler keeps no state between calls. Each inbound request is classified
by opcode and message type; DISCOVER and REQUEST drive the allocation engine,
everything else is dropped.
"""

import logging

from ..common.errors import PoolExhausted
from .messages import (
    ACK, BOOTREQUEST, DISCOVER, NAK, OFFER, REQUEST,
    DhcpResponse, message_type_name,
)

logger = logging.getLogger(__name__)


class DoraHandler:
    def __init__(self, config, engine):
        self.config = config
        self.engine = engine

    def handle(self, request):
        """Return the DhcpResponse for request, or None if nothing is sent"""
        if request.op != BOOTREQUEST:
            logger.debug(f"Dropping non-request opcode {request.op} from {request.client_mac}")
            return None

        logger.info(f"DHCP {message_type_name(request.message_type)} from {request.client_mac}")

        if request.message_type == DISCOVER:
            reply_type = OFFER
        elif request.message_type == REQUEST:
            reply_type = ACK
        else:
            logger.info(f"Ignoring DHCP {message_type_name(request.message_type)} "
                        f"from {request.client_mac}")
            return None

        try:
            address = self.engine.allocate(request.client_id)
        except PoolExhausted:
            return self.handle_exhausted(request)

        return self.build_reply(reply_type, address)

    def handle_exhausted(self, request):
        """Apply the configured policy for a client that could not be served

        A NAK is only valid as an answer to REQUEST; an exhausted DISCOVER is
        always dropped.
        """
        if self.config.exhausted_policy == 'nak' and request.message_type == REQUEST:
            logger.warning(f"No IP available for {request.client_mac}, sending NAK")
            return DhcpResponse(message_type=NAK, server_id=self.config.server_ip)

        logger.warning(f"No IP available for {request.client_mac}, not responding")
        return None

    def build_reply(self, message_type, address):
        """OFFER and ACK carry the same option set"""
        server_ip = self.config.server_ip
        return DhcpResponse(
            message_type=message_type,
            server_id=server_ip,
            assigned_address=address,
            subnet_mask=self.config.subnet_mask,
            router=server_ip,
            dns_server=server_ip,
            lease_time=self.config.lease_time,
        )
