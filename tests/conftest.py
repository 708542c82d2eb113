import pytest

from ringroute import Ring


def digit_hash(data: bytes) -> int:
    """Readable hash for tests.

    Virtual keys ``"<n>#<i>"`` land at ``n + 100 * i``; plain numeric keys
    land at their own value.
    """
    node, _, replica = data.decode("utf-8").partition("#")
    return int(node) + 100 * int(replica or 0)


@pytest.fixture
def digit_ring():
    ring = Ring(3, digit_hash)
    ring.add("2", "4", "6")
    return ring


@pytest.fixture
def cluster_ring():
    ring = Ring(100)
    ring.add(*[f"node-{i}" for i in range(5)])
    return ring


@pytest.fixture
def readable_hash():
    return digit_hash
