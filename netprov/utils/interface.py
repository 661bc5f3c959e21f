"""
One-time bootstrap of the serving interface address
"""

import ipaddress
import logging
import subprocess

import netifaces

from ..common.errors import InterfaceError

logger = logging.getLogger(__name__)

FALLBACK_ADDRESS = '10.0.0.1/24'


def get_interface_ipv4(name):
    """First IPv4 address on interface name as an IPv4Interface, or None"""
    if name not in netifaces.interfaces():
        raise InterfaceError(f"Failed to find interface {name}")

    addrs = netifaces.ifaddresses(name)
    for addr in addrs.get(netifaces.AF_INET, []):
        if 'addr' not in addr:
            continue
        netmask = addr.get('netmask', '255.255.255.255')
        try:
            return ipaddress.IPv4Interface(f"{addr['addr']}/{netmask}")
        except ValueError as e:
            logger.warning(f"Skipping unusable address {addr['addr']} on {name}: {e}")
    return None


def run_ip(*args):
    """Run an iproute2 command, raising InterfaceError on failure"""
    cmd = ['ip', *args]
    try:
        subprocess.run(cmd, capture_output=True, text=True, check=True)
    except subprocess.CalledProcessError as e:
        raise InterfaceError(f"{' '.join(cmd)} failed: {e.stderr.strip() or e}")
    except FileNotFoundError:
        raise InterfaceError("The ip command is not available")


def assign_address(name, cidr):
    """Bring the interface up and make cidr its only address"""
    run_ip('link', 'set', name, 'up')
    run_ip('addr', 'flush', 'dev', name)
    run_ip('addr', 'add', cidr, 'dev', name)
    logger.info(f"Assigned {cidr} to {name}")


def ensure_interface_address(name, fallback=FALLBACK_ADDRESS):
    """Return the interface's IPv4 address, assigning fallback if it has none"""
    address = get_interface_ipv4(name)
    if address is None:
        logger.info(f"No IPv4 address on {name}, assigning {fallback}...")
        assign_address(name, fallback)
        address = get_interface_ipv4(name)
        if address is None:
            raise InterfaceError(f"Failed to get IPv4 address for {name} after assignment")

    logger.info(f"Using interface {name}: IP={address.ip} Subnet={address.network}")
    return address
