import logging
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from .hash_ring import DEFAULT_REPLICAS

logger = logging.getLogger(__name__)


def _split_nodes(value: str) -> List[str]:
    return [node.strip() for node in value.split(",") if node.strip()]


def _int_env(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer, using %d", name, raw, default)
        return default


def _level_env(environ: Mapping[str, str], name: str, default: str) -> str:
    level = environ.get(name, default).strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        logger.warning("Ignoring %s=%r: unknown log level, using %s", name, environ[name], default)
        return default
    return level


@dataclass
class GatewayConfig:
    """Settings for the routing gateway, read from the environment."""

    nodes: List[str] = field(default_factory=lambda: ["localhost:50051"])
    replicas: int = DEFAULT_REPLICAS
    replication_factor: int = 2
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GatewayConfig":
        if environ is None:
            environ = os.environ

        return cls(
            nodes=_split_nodes(environ.get("RING_NODE_ADDRESSES", "localhost:50051")),
            replicas=_int_env(environ, "RING_REPLICAS", DEFAULT_REPLICAS),
            replication_factor=_int_env(environ, "RING_REPLICATION_FACTOR", 2),
            host=environ.get("GATEWAY_HOST", "0.0.0.0"),
            port=_int_env(environ, "GATEWAY_PORT", 8080),
            log_level=_level_env(environ, "LOG_LEVEL", "INFO"),
        )
