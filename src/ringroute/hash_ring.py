import bisect
import hashlib
import logging
from typing import Callable

from .rwlock import RWLock

logger = logging.getLogger(__name__)

# Maps a byte string to an unsigned 32-bit integer
HashFunction = Callable[[bytes], int]

DEFAULT_REPLICAS = 50


def default_hash(data):
    # First 4 bytes of the SHA-256 digest, big-endian
    return int.from_bytes(hashlib.sha256(data).digest()[:4], byteorder='big')


class Ring:
    """Consistent hash ring with virtual nodes.

    Every member gets ``replica_count`` positions on a 32-bit ring. A key is
    owned by the first position clockwise from its own hash. Lookups may run
    concurrently; ``add`` and ``remove`` take the ring exclusively.
    """

    def __init__(self, replica_count=DEFAULT_REPLICAS, hash_fn=None):
        if replica_count is None or replica_count <= 0:
            replica_count = DEFAULT_REPLICAS

        self.replica_count = replica_count
        self.hash_fn = hash_fn or default_hash

        self._positions = []
        self._owner = {}
        self._members = set()
        self._lock = RWLock()

    def _virtual_hashes(self, node):
        for i in range(self.replica_count):
            yield self.hash_fn(f'{node}#{i}'.encode('utf-8'))

    def _search(self, key):
        # Binary search: first position >= hash, wrapping to the start
        hash_val = self.hash_fn(key.encode('utf-8'))
        idx = bisect.bisect_left(self._positions, hash_val)
        if idx == len(self._positions):
            idx = 0
        return idx

    def add(self, *nodes):
        with self._lock.write_lock():
            added = []
            for node in nodes:
                if not node or node in self._members:
                    continue

                self._members.add(node)
                # A colliding virtual key takes over the slot
                for hash_val in self._virtual_hashes(node):
                    self._owner[hash_val] = node
                added.append(node)

            if added:
                self._positions = sorted(self._owner)
                logger.debug('Added %s to ring (%d virtual nodes)', added, len(self._positions))

    def remove(self, *nodes):
        with self._lock.write_lock():
            removed = []
            for node in nodes:
                if not node or node not in self._members:
                    continue

                self._members.discard(node)
                for hash_val in self._virtual_hashes(node):
                    self._owner.pop(hash_val, None)
                removed.append(node)

            if removed:
                self._positions = sorted(self._owner)
                logger.debug('Removed %s from ring (%d virtual nodes)', removed, len(self._positions))

    def get(self, key):
        """Return the node owning ``key``, or ``''`` when the ring is empty."""
        with self._lock.read_lock():
            if not self._positions:
                return ''
            return self._owner[self._positions[self._search(key)]]

    def get_n(self, key, n):
        """Return up to ``n`` distinct nodes for ``key`` in preference order.

        The first entry is the same node ``get`` returns; the rest are the
        next distinct owners found walking clockwise, for replica placement.
        """
        with self._lock.read_lock():
            if not self._members or n <= 0:
                return []

            n = min(n, len(self._members))
            idx = self._search(key)
            total = len(self._positions)

            distinct_nodes = []
            seen = set()
            for step in range(total):
                node = self._owner[self._positions[(idx + step) % total]]
                if node not in seen:
                    seen.add(node)
                    distinct_nodes.append(node)
                    if len(distinct_nodes) == n:
                        break

            return distinct_nodes

    def nodes(self):
        with self._lock.read_lock():
            return list(self._members)

    def is_empty(self):
        with self._lock.read_lock():
            return not self._members

    def size(self):
        with self._lock.read_lock():
            return len(self._members)

    def virtual_count(self):
        with self._lock.read_lock():
            return len(self._positions)

    def positions(self):
        # Snapshot copy
        with self._lock.read_lock():
            return list(self._positions)
