import ipaddress

import pytest

from netprov.common.config import ProvisionConfig
from netprov.dhcp.engine import AllocationEngine
from netprov.dhcp.handler import DoraHandler


@pytest.fixture
def config():
    return ProvisionConfig(
        server_ip=ipaddress.IPv4Address('192.168.1.1'),
        network=ipaddress.IPv4Network('192.168.1.0/24'),
        interface='test0',
    )


@pytest.fixture
def local_config(config):
    """Config with every listener on an ephemeral loopback port"""
    return ProvisionConfig(
        server_ip=config.server_ip,
        network=config.network,
        bind_host='127.0.0.1',
        dhcp_port=0,
        dns_port=0,
        http_port=0,
        health_port=0,
    )


@pytest.fixture
def engine(config):
    return AllocationEngine.from_config(config)


@pytest.fixture
def handler(config, engine):
    return DoraHandler(config, engine)
