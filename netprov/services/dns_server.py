"""
Fixed-answer DNS responder

Every question, whatever its type, gets one A record pointing at the service
address.
"""

import logging
import socketserver

import dns.exception
import dns.flags
import dns.message
import dns.rdataclass
import dns.rdatatype
import dns.rrset

logger = logging.getLogger(__name__)


def build_answer(wire, server_ip, ttl=60):
    """Parse a DNS query and return the wire-format response"""
    query = dns.message.from_wire(wire)
    response = dns.message.make_response(query)
    response.flags |= dns.flags.AA

    for question in query.question:
        logger.info(f"DNS query: {dns.rdatatype.to_text(question.rdtype)} {question.name}")
        rrset = dns.rrset.from_text(question.name, ttl, dns.rdataclass.IN,
                                    dns.rdatatype.A, str(server_ip))
        response.answer.append(rrset)

    return response.to_wire()


class DnsRequestHandler(socketserver.BaseRequestHandler):
    def handle(self):
        data, sock = self.request
        try:
            reply = build_answer(data, self.server.config.server_ip, self.server.config.dns_ttl)
        except dns.exception.DNSException as e:
            logger.debug(f"Dropping malformed DNS query from {self.client_address[0]}: {e}")
            return

        try:
            sock.sendto(reply, self.client_address)
        except OSError as e:
            logger.error(f"Failed to write DNS response to {self.client_address[0]}: {e}")


class DnsServer(socketserver.ThreadingUDPServer):
    """Threaded UDP listener for DNS queries"""

    allow_reuse_address = True
    daemon_threads = True

    def __init__(self, config, bind_and_activate=True):
        self.config = config
        super().__init__((config.bind_host, config.dns_port), DnsRequestHandler,
                         bind_and_activate=bind_and_activate)
