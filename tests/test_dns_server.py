"""Tests for the fixed-answer DNS responder."""
import threading

import dns.exception
import dns.flags
import dns.message
import dns.name
import dns.query
import dns.rdataclass
import dns.rdatatype
import pytest

from netprov.services.dns_server import DnsServer, build_answer

SERVER_IP = '192.168.1.1'


def answer_for(query):
    return dns.message.from_wire(build_answer(query.to_wire(), SERVER_IP))


class TestBuildAnswer:

    @pytest.mark.parametrize('name,rdtype', [
        ('example.com.', 'A'),
        ('anything.test.', 'AAAA'),
        ('mail.example.org.', 'MX'),
        ('provisioning.local.', 'TXT'),
    ])
    def test_single_a_record_for_any_type(self, name, rdtype):
        response = answer_for(dns.message.make_query(name, rdtype))

        assert len(response.answer) == 1
        rrset = response.answer[0]
        assert rrset.name == dns.name.from_text(name)
        assert rrset.rdtype == dns.rdatatype.A
        assert rrset.rdclass == dns.rdataclass.IN
        assert rrset.ttl == 60
        assert [rdata.address for rdata in rrset] == [SERVER_IP]

    def test_response_is_authoritative(self):
        query = dns.message.make_query('example.com.', 'A')
        response = answer_for(query)
        assert response.id == query.id
        assert response.flags & dns.flags.AA
        assert response.flags & dns.flags.QR

    def test_one_answer_per_question(self):
        query = dns.message.make_query('a.test.', 'A')
        query.find_rrset(query.question, dns.name.from_text('b.test.'),
                         dns.rdataclass.IN, dns.rdatatype.MX, create=True)
        response = answer_for(query)
        assert sorted(str(rrset.name) for rrset in response.answer) == ['a.test.', 'b.test.']

    def test_custom_ttl(self):
        wire = build_answer(dns.message.make_query('x.test.', 'A').to_wire(), SERVER_IP, ttl=5)
        assert dns.message.from_wire(wire).answer[0].ttl == 5

    def test_garbage_rejected(self):
        with pytest.raises(dns.exception.DNSException):
            build_answer(b'\x00\x01', SERVER_IP)


class TestDnsServer:

    def test_udp_query(self, local_config):
        server = DnsServer(local_config)
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()
        try:
            host, port = server.server_address
            query = dns.message.make_query('example.com.', 'AAAA')
            response = dns.query.udp(query, host, port=port, timeout=5)
        finally:
            server.shutdown()
            server.server_close()

        assert len(response.answer) == 1
        assert response.answer[0].rdtype == dns.rdatatype.A
        assert response.answer[0][0].address == str(local_config.server_ip)
