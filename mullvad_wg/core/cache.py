"""On-disk snapshot of the relay directory."""

from __future__ import annotations

import json
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from ..utils.logging import get_logger
from .server import Server

logger = get_logger("cache")


@dataclass
class ServerCache:
    servers: List[Server] = field(default_factory=list)
    timestamp: int = 0

    def age(self, now: Optional[float] = None) -> float:
        return (now if now is not None else time.time()) - self.timestamp


def load_cache(path: Path) -> Optional[ServerCache]:
    path = Path(path)
    if not path.exists():
        return None
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
        servers = [Server.from_dict(raw) for raw in data.get("servers", [])]
        return ServerCache(servers=servers, timestamp=int(data.get("timestamp", 0)))
    except (OSError, ValueError, TypeError, AttributeError) as exc:
        logger.warning("Discarding unreadable server cache %s: %s", path, exc)
        return None


def save_cache(servers: Iterable[Server], path: Path) -> ServerCache:
    path = Path(path)
    cache = ServerCache(servers=list(servers), timestamp=int(time.time()))
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(".tmp")
    data = {
        "servers": [server.to_dict() for server in cache.servers],
        "timestamp": cache.timestamp,
    }
    with tmp_path.open("w", encoding="utf-8") as fh:
        json.dump(data, fh, indent=2)
    os.replace(tmp_path, path)
    logger.debug("Cached %d servers at %s", len(cache.servers), path)
    return cache
