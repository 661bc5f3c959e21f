"""Tests for the lease table and allocation engine."""
import ipaddress
import threading

import pytest
from hypothesis import given, settings, strategies as st

from netprov.common.errors import ConfigError, PoolExhausted
from netprov.dhcp.engine import AllocationEngine
from netprov.dhcp.leases import LeaseTable, PoolRange

NETWORK = ipaddress.IPv4Network('10.0.0.0/24')


def client(n):
    return n.to_bytes(6, 'big')


class TestPoolRange:

    def test_size_is_inclusive(self):
        assert PoolRange(100, 200).size == 101
        assert PoolRange(5, 5).size == 1

    def test_start_after_end_rejected(self):
        with pytest.raises(ConfigError):
            PoolRange(10, 9)

    def test_network_address_offset_rejected(self):
        with pytest.raises(ConfigError):
            PoolRange(0, 10)


class TestLeaseTable:

    def test_lookup_unknown_client(self):
        table = LeaseTable(NETWORK, PoolRange(100, 200))
        assert table.lookup(client(1)) is None

    def test_lookup_has_no_side_effect(self):
        table = LeaseTable(NETWORK, PoolRange(100, 200))
        table.lookup(client(1))
        assert len(table) == 0
        assert table.remaining == 101

    def test_first_client_gets_pool_start(self):
        table = LeaseTable(NETWORK, PoolRange(100, 200))
        assert table.insert_next(client(1)) == ipaddress.IPv4Address('10.0.0.100')

    def test_insert_is_idempotent(self):
        table = LeaseTable(NETWORK, PoolRange(100, 200))
        addr = table.insert_next(client(1))
        assert table.insert_next(client(1)) == addr
        assert table.lookup(client(1)) == addr
        assert len(table) == 1
        assert table.remaining == 100

    def test_nth_client_gets_start_plus_n(self):
        table = LeaseTable(NETWORK, PoolRange(100, 200))
        for n in range(1, 102):
            assert table.insert_next(client(n)) == ipaddress.IPv4Address(f'10.0.0.{99 + n}')

        with pytest.raises(PoolExhausted):
            table.insert_next(client(102))
        assert table.remaining == 0

    def test_known_client_served_after_exhaustion(self):
        table = LeaseTable(NETWORK, PoolRange(100, 100))
        addr = table.insert_next(client(1))
        with pytest.raises(PoolExhausted):
            table.insert_next(client(2))
        assert table.insert_next(client(1)) == addr
        assert table.lookup(client(2)) is None

    def test_exhausted_client_does_not_consume(self):
        table = LeaseTable(NETWORK, PoolRange(100, 100))
        table.insert_next(client(1))
        for _ in range(3):
            with pytest.raises(PoolExhausted):
                table.insert_next(client(2))
        assert len(table) == 1

    def test_leases_snapshot_in_allocation_order(self):
        table = LeaseTable(NETWORK, PoolRange(100, 200))
        for n in (3, 1, 2):
            table.insert_next(client(n))
        leases = table.leases()
        assert [lease.client_id for lease in leases] == [client(3), client(1), client(2)]
        assert [str(lease.address) for lease in leases] == ['10.0.0.100', '10.0.0.101', '10.0.0.102']
        assert all(isinstance(lease.address, ipaddress.IPv4Address) for lease in leases)


class TestAllocationEngine:

    def test_allocate_delegates_to_table(self, engine, config):
        addr = engine.allocate(client(1))
        assert addr == config.pool_address(config.pool.start)
        assert engine.lookup(client(1)) == addr

    def test_distinct_clients_distinct_addresses(self, engine):
        assert engine.allocate(client(1)) != engine.allocate(client(2))

    @settings(max_examples=50, deadline=None)
    @given(st.lists(st.binary(min_size=6, max_size=6), max_size=60))
    def test_allocation_follows_first_appearance(self, clients):
        engine = AllocationEngine(LeaseTable(NETWORK, PoolRange(100, 200)))
        first_seen = []
        for c in clients:
            if c not in first_seen:
                first_seen.append(c)
            addr = engine.allocate(c)
            assert addr == ipaddress.IPv4Address('10.0.0.100') + first_seen.index(c)

    @settings(max_examples=30, deadline=None)
    @given(st.sets(st.binary(min_size=6, max_size=6), min_size=1, max_size=20),
           st.integers(min_value=1, max_value=20))
    def test_exhaustion_after_pool_size_clients(self, clients, pool_size):
        engine = AllocationEngine(LeaseTable(NETWORK, PoolRange(10, 9 + pool_size)))
        granted = []
        for c in sorted(clients):
            try:
                granted.append(engine.allocate(c))
            except PoolExhausted:
                assert len(granted) == pool_size
        assert len(granted) == min(len(clients), pool_size)
        assert len(set(granted)) == len(granted)


class TestConcurrentAllocation:

    def run_threads(self, target, count):
        barrier = threading.Barrier(count)
        results = [None] * count

        def worker(i):
            barrier.wait()
            results[i] = target(i)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(count)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        return results

    @settings(max_examples=25, deadline=None)
    @given(st.sets(st.binary(min_size=6, max_size=6), min_size=1, max_size=64))
    def test_distinct_clients_get_distinct_pool_addresses(self, clients):
        clients = list(clients)
        pool_size = len(clients)
        pool = PoolRange(100, 99 + pool_size)
        engine = AllocationEngine(LeaseTable(NETWORK, pool))

        results = self.run_threads(lambda i: engine.allocate(clients[i]), pool_size)

        expected = {NETWORK.network_address + offset for offset in range(pool.start, pool.end + 1)}
        assert set(results) == expected
        assert len(set(results)) == pool_size

    def test_oversubscribed_pool_grants_each_address_once(self):
        engine = AllocationEngine(LeaseTable(NETWORK, PoolRange(100, 119)))

        def allocate(i):
            try:
                return engine.allocate(client(i))
            except PoolExhausted:
                return None

        results = self.run_threads(allocate, 50)
        granted = [r for r in results if r is not None]
        assert len(granted) == 20
        assert len(set(granted)) == 20

    def test_same_client_racing_gets_one_address(self):
        engine = AllocationEngine(LeaseTable(NETWORK, PoolRange(100, 200)))
        results = self.run_threads(lambda i: engine.allocate(client(7)), 32)
        assert set(results) == {ipaddress.IPv4Address('10.0.0.100')}
        assert len(engine.table) == 1
