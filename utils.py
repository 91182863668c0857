"""Small helpers (timestamps, random nonce source, query parsing)."""
from __future__ import annotations
import os, time
from typing import Optional
from urllib.parse import parse_qs

from errors import RandomSourceFailure

def now() -> float:
    return time.time()

def unix_seconds(ts: float) -> int:
    return int(ts)

def unix_millis(ts: float) -> int:
    return int(round(ts * 1000))

def random_bytes(n: int) -> bytes:
    try:
        return os.urandom(n)
    except (NotImplementedError, OSError) as e:
        raise RandomSourceFailure(f"could not read {n} random bytes: {e}") from e

def query_param(query: str, name: str) -> Optional[str]:
    """First value of `name` in a raw query string, or None."""
    values = parse_qs(query, keep_blank_values=True).get(name)
    return values[0] if values else None
