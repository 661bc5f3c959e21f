"""
Lease table: the bounded address pool and the client -> address bindings

This is the only shared mutable state in the service. Every read-check-write
happens under one lock so concurrent DHCP handlers can never race on the pool
cursor or hand the same address to two clients.
"""

import ipaddress
import logging
import threading
from dataclasses import dataclass
from datetime import datetime

from ..common.errors import ConfigError, PoolExhausted

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PoolRange:
    """Inclusive range of host offsets [start, end] within the subnet"""
    start: int
    end: int

    def __post_init__(self):
        if self.start < 1:
            raise ConfigError(f"Pool start {self.start} must be at least 1")
        if self.start > self.end:
            raise ConfigError(f"Pool start {self.start} is after pool end {self.end}")

    @property
    def size(self):
        return self.end - self.start + 1


@dataclass(frozen=True)
class Lease:
    """Binding of a client identity to an address. Never mutated once created."""
    client_id: bytes
    address: ipaddress.IPv4Address
    allocated_at: datetime


class LeaseTable:
    """Client identity -> address map backed by a forward-only pool cursor"""

    def __init__(self, network, pool):
        self._network = network
        self._pool = pool
        self._cursor = pool.start
        self._leases = {}  # client_id -> Lease, insertion ordered
        self._lock = threading.Lock()

    @property
    def pool(self):
        return self._pool

    def lookup(self, client_id):
        """Return the address bound to client_id, or None"""
        with self._lock:
            lease = self._leases.get(client_id)
            return lease.address if lease else None

    def insert_next(self, client_id):
        """Return the client's address, binding the next pool address if needed

        Idempotent for a known client. Raises PoolExhausted once the cursor has
        moved past the end of the pool.
        """
        with self._lock:
            lease = self._leases.get(client_id)
            if lease:
                return lease.address

            if self._cursor > self._pool.end:
                raise PoolExhausted(client_id)

            address = self._network.network_address + self._cursor
            self._cursor += 1
            self._leases[client_id] = Lease(client_id, address, datetime.now())
            logger.debug(f"Bound {client_id.hex()} to {address} ({self._remaining()} left)")
            return address

    def leases(self):
        """Snapshot of all leases in allocation order"""
        with self._lock:
            return list(self._leases.values())

    @property
    def remaining(self):
        with self._lock:
            return self._remaining()

    def _remaining(self):
        return max(self._pool.end - self._cursor + 1, 0)

    def __len__(self):
        with self._lock:
            return len(self._leases)
