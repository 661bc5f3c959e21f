"""
Service configuration

A ProvisionConfig is built once at startup from defaults, an optional YAML
file, environment variables and command line overrides, then passed to every
component. It is never mutated afterwards.
"""

import ipaddress
import logging
import os
from dataclasses import dataclass, field
from typing import Optional

import yaml

from .errors import ConfigError
from ..dhcp.leases import PoolRange

logger = logging.getLogger(__name__)

# Pool offsets within the subnet (host numbers .100 - .200 on a /24)
POOL_START = 100
POOL_END = 200
LEASE_TIME = 3600  # 1 hour, advisory only
DNS_TTL = 60

DHCP_SERVER_PORT = 67
DHCP_CLIENT_PORT = 68
DNS_PORT = 53
HTTP_PORT = 80
HEALTH_PORT = 8067

EXHAUSTED_POLICIES = ('ignore', 'nak')

DEFAULT_PROFILE = """<flat-profile>
    <Admin_Passwd ua="na"></Admin_Passwd>
    <User_Passwd ua="na"></User_Passwd>
    <Provision_Enable ua="na">No</Provision_Enable>
    <Upgrade_Enable ua="na">No</Upgrade_Enable>
</flat-profile>
"""

# Environment variable -> config field
ENV_OVERRIDES = {
    'NETPROV_HEALTH_PORT': ('health_port', int),
    'NETPROV_DNS_PORT': ('dns_port', int),
    'NETPROV_HTTP_PORT': ('http_port', int),
    'NETPROV_EXHAUSTED_POLICY': ('exhausted_policy', str),
}


@dataclass(frozen=True)
class ProvisionConfig:
    """Immutable service configuration"""
    server_ip: ipaddress.IPv4Address
    network: ipaddress.IPv4Network
    interface: Optional[str] = None
    pool: PoolRange = field(default_factory=lambda: PoolRange(POOL_START, POOL_END))
    lease_time: int = LEASE_TIME
    dns_ttl: int = DNS_TTL
    bind_host: str = '0.0.0.0'
    dhcp_port: int = DHCP_SERVER_PORT
    dhcp_client_port: int = DHCP_CLIENT_PORT
    dns_port: int = DNS_PORT
    http_port: int = HTTP_PORT
    health_port: int = HEALTH_PORT
    enable_dns: bool = True
    enable_http: bool = True
    exhausted_policy: str = 'ignore'
    profile_body: str = DEFAULT_PROFILE

    def __post_init__(self):
        if self.server_ip not in self.network:
            raise ConfigError(f"Server address {self.server_ip} is outside {self.network}")
        if self.pool.end >= self.network.num_addresses - 1:
            raise ConfigError(
                f"Pool offset {self.pool.end} does not fit in {self.network} "
                f"(last host offset is {self.network.num_addresses - 2})")
        server_offset = int(self.server_ip) - int(self.network.network_address)
        if self.pool.start <= server_offset <= self.pool.end:
            raise ConfigError(
                f"Server address {self.server_ip} lies inside the pool "
                f"{self.pool_address(self.pool.start)}-{self.pool_address(self.pool.end)}")
        if self.exhausted_policy not in EXHAUSTED_POLICIES:
            raise ConfigError(
                f"Unknown exhausted policy '{self.exhausted_policy}', "
                f"expected one of {', '.join(EXHAUSTED_POLICIES)}")
        if self.lease_time <= 0:
            raise ConfigError("Lease time must be positive")
        for name in ('dhcp_port', 'dhcp_client_port', 'dns_port', 'http_port', 'health_port'):
            port = getattr(self, name)
            if not 0 <= port <= 65535:
                raise ConfigError(f"{name} {port} is not a valid port")

    @property
    def subnet_mask(self):
        return self.network.netmask

    def pool_address(self, offset):
        """Concrete address for a host offset in the pool"""
        return self.network.network_address + offset


def read_config_file(path):
    """Load a YAML config file into a flat dict of ProvisionConfig fields"""
    try:
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"Could not read config file {path}: {e}")
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}")

    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    values = {}
    ports = raw.pop('ports', None) or {}
    for name in ('dhcp', 'dhcp_client', 'dns', 'http', 'health'):
        if name in ports:
            try:
                values[f'{name}_port'] = int(ports[name])
            except (TypeError, ValueError):
                raise ConfigError(f"Invalid {name} port in {path}: {ports[name]!r}")

    pool = raw.pop('pool', None)
    if pool:
        try:
            values['pool'] = PoolRange(int(pool['start']), int(pool['end']))
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigError(f"Invalid pool definition in {path}: {e}")

    profile_file = raw.pop('profile_file', None)
    if profile_file:
        try:
            with open(profile_file) as f:
                values['profile_body'] = f.read()
        except OSError as e:
            raise ConfigError(f"Could not read profile document {profile_file}: {e}")

    for key in ('lease_time', 'dns_ttl', 'bind_host', 'enable_dns', 'enable_http',
                'exhausted_policy', 'profile_body'):
        if key in raw:
            values[key] = raw.pop(key)

    if raw:
        logger.warning(f"Ignoring unknown config keys: {', '.join(sorted(raw))}")
    return values


def read_environment(environ=None):
    """Collect overrides from NETPROV_* environment variables"""
    environ = os.environ if environ is None else environ
    values = {}
    for var, (name, convert) in ENV_OVERRIDES.items():
        if var in environ:
            try:
                values[name] = convert(environ[var])
            except ValueError:
                raise ConfigError(f"Invalid value for {var}: {environ[var]!r}")
    return values


def load_config(address, interface=None, config_file=None, overrides=None, environ=None):
    """Build the service configuration

    address is the IPv4Interface of the serving interface; the server address
    and subnet are taken from it. Later sources win: file, environment,
    explicit overrides.
    """
    values = {}
    if config_file:
        values.update(read_config_file(config_file))
    values.update(read_environment(environ))
    values.update({k: v for k, v in (overrides or {}).items() if v is not None})

    try:
        config = ProvisionConfig(
            server_ip=address.ip,
            network=address.network,
            interface=interface,
            **values
        )
    except TypeError as e:
        raise ConfigError(f"Invalid configuration: {e}")

    logger.debug(f"Loaded configuration: {config}")
    return config
