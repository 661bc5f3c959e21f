"""
Allocation engine built on the lease table
"""

from .leases import LeaseTable


class AllocationEngine:
    """Idempotent address allocation

    Repeated calls for the same client return the same address, whether they
    come from a repeated DISCOVER or a later REQUEST. Addresses are never freed.
    """

    def __init__(self, table):
        self.table = table

    @classmethod
    def from_config(cls, config):
        return cls(LeaseTable(config.network, config.pool))

    def allocate(self, client_id):
        """Address for client_id; raises PoolExhausted when none is left"""
        return self.table.insert_next(client_id)

    def lookup(self, client_id):
        return self.table.lookup(client_id)
