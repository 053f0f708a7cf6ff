from __future__ import annotations

import hashlib
import json
import os
from typing import Any, Tuple

CHUNK = 1024 * 1024  # 1MB

def sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()

def canonical(obj: Any) -> bytes:
    """Canonical JSON serialization for deterministic hashing."""
    return json.dumps(obj, sort_keys=True, separators=(",", ":")).encode("utf-8")

# Domain-separated hashing (prevents structural collisions)
def h_block(block_header: dict) -> str:
    """Hash a complete block header (prev+tx+writes)."""
    return sha256(b"BLOCK\x00" + canonical(block_header))

def genesis_hash() -> str:
    return h_block({"genesis": True})

def new_tx_id(timestamp: str) -> str:
    """
    Transaction id in the shape ledger peers use: 64 hex chars.

    Mixes the commit timestamp with 16 random bytes so two
    transactions committed in the same second never collide.
    """
    return sha256(b"TX\x00" + timestamp.encode("utf-8") + os.urandom(16))

def sha256_file(path: str) -> Tuple[str, int]:
    """Digest of a lab report file, suitable for labReportHash."""
    h = hashlib.sha256()
    n = 0
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(CHUNK), b""):
            h.update(chunk)
            n += len(chunk)
    return h.hexdigest(), n
