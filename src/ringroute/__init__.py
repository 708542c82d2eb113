from .hash_ring import DEFAULT_REPLICAS, HashFunction, Ring, default_hash
from .rwlock import RWLock

__all__ = ["DEFAULT_REPLICAS", "HashFunction", "Ring", "RWLock", "default_hash"]
