"""
Ledger Store bindings.

The core treats the ledger as a versioned key-value store that keeps
every mutation of every key. Two bindings share one block format:

    {
      "prev_hash": "...",
      "tx_id": "<64 hex>",
      "timestamp": "2025-01-01T00:00:00Z",
      "writes": [{"key": "H1", "value_b64": "...", "is_delete": false}],
      "block_hash": "..."
    }

Blocks are hash-chained (tamper evident). Current state is the replay of
all blocks; history is the per-key projection of the same blocks.
Writes are only accepted inside transaction(); they are buffered and
land as a single block when the transaction exits cleanly.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import os
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from .errors import StoreUnavailable
from .hashing import genesis_hash, h_block, new_tx_id
from .models import now_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeyModification:
    """One raw historical mutation of a key, as retained by the ledger."""
    tx_id: str
    timestamp: str
    is_delete: bool
    value: bytes


@dataclass
class Transaction:
    """Unit of work handed out by LedgerStore.transaction()."""
    tx_id: str
    timestamp: str
    writes: Dict[str, Tuple[bool, bytes]] = field(default_factory=dict)


def b64e(b: bytes) -> str:
    return base64.b64encode(b).decode("utf-8")

def b64d(s: str) -> bytes:
    return base64.b64decode(s.encode("utf-8"), validate=True)


class LedgerStore(ABC):
    """
    Versioned key-value ledger.

    Subclasses only decide where blocks live; replay, scans, history and
    transaction handling are shared. Conflicting transactions are
    serialized by a store-wide lock, standing in for the ordering
    service of a real ledger platform.
    """

    def __init__(self, clock: Optional[Callable[[], str]] = None):
        self._clock = clock or now_utc
        self._lock = threading.RLock()
        self._local = threading.local()

    # --- block persistence -------------------------------------------------

    @abstractmethod
    def _read_blocks(self) -> List[dict]:
        ...

    @abstractmethod
    def _append_block(self, block: dict) -> None:
        ...

    # --- reads -------------------------------------------------------------

    def _state(self) -> Dict[str, bytes]:
        state: Dict[str, bytes] = {}
        for block in self._read_blocks():
            for w in block["writes"]:
                if w["is_delete"]:
                    state.pop(w["key"], None)
                else:
                    state[w["key"]] = self._value(w)
        return state

    @staticmethod
    def _value(write: dict) -> bytes:
        try:
            return b64d(write.get("value_b64", ""))
        except (binascii.Error, ValueError) as e:
            raise StoreUnavailable(f"Corrupt ledger value for key {write.get('key')!r}: {e}") from e

    def get(self, key: str) -> Optional[bytes]:
        """Committed value for key, or None when absent or tombstoned."""
        return self._state().get(key)

    def range_scan(self, start: str = "", end: str = "") -> Iterator[Tuple[str, bytes]]:
        """
        Yield (key, value) in lexicographic key order.

        start is inclusive, end exclusive; an empty bound is open.
        """
        state = self._state()
        for key in sorted(state):
            if start and key < start:
                continue
            if end and key >= end:
                break
            yield key, state[key]

    def history(self, key: str) -> Iterator[KeyModification]:
        """Every committed mutation of key, oldest first."""
        for block in self._read_blocks():
            for w in block["writes"]:
                if w["key"] != key:
                    continue
                yield KeyModification(
                    tx_id=block["tx_id"],
                    timestamp=block["timestamp"],
                    is_delete=w["is_delete"],
                    value=b"" if w["is_delete"] else self._value(w),
                )

    # --- writes ------------------------------------------------------------

    def _current(self) -> Transaction:
        tx = getattr(self._local, "tx", None)
        if tx is None:
            raise RuntimeError("Ledger writes require an active transaction")
        return tx

    def put(self, key: str, value: bytes) -> None:
        """Create or overwrite key when the current transaction commits."""
        if not key:
            raise ValueError("Ledger key must be non-empty")
        self._current().writes[key] = (False, bytes(value))

    def delete(self, key: str) -> None:
        """Tombstone key when the current transaction commits."""
        if not key:
            raise ValueError("Ledger key must be non-empty")
        self._current().writes[key] = (True, b"")

    @contextmanager
    def transaction(self) -> Iterator[Transaction]:
        """
        Run a unit of work. Buffered writes are committed as one block
        on clean exit and discarded if the body raises.
        """
        with self._lock:
            if getattr(self._local, "tx", None) is not None:
                raise RuntimeError("Nested ledger transactions are not supported")
            timestamp = self._clock()
            tx = Transaction(tx_id=new_tx_id(timestamp), timestamp=timestamp)
            self._local.tx = tx
            try:
                yield tx
            except BaseException:
                if tx.writes:
                    logger.debug(f"Discarding {len(tx.writes)} write(s) of aborted tx {tx.tx_id[:12]}")
                raise
            else:
                if tx.writes:
                    self._commit(tx)
            finally:
                self._local.tx = None

    def _commit(self, tx: Transaction) -> dict:
        header = {
            "prev_hash": self.tip_hash(),
            "tx_id": tx.tx_id,
            "timestamp": tx.timestamp,
            "writes": [
                {"key": key, "value_b64": b64e(value), "is_delete": is_delete}
                for key, (is_delete, value) in sorted(tx.writes.items())
            ],
        }
        block = {**header, "block_hash": h_block(header)}
        self._append_block(block)
        logger.debug(f"Committed tx {tx.tx_id[:12]} with {len(tx.writes)} write(s)")
        return block

    # --- integrity ---------------------------------------------------------

    def tip_hash(self) -> str:
        blocks = self._read_blocks()
        return blocks[-1]["block_hash"] if blocks else genesis_hash()

    def block_count(self) -> int:
        return len(self._read_blocks())

    def verify(self) -> bool:
        """Re-derive the hash chain; False on the first broken link."""
        prev = genesis_hash()
        for b in self._read_blocks():
            header = {k: b[k] for k in ("prev_hash", "tx_id", "timestamp", "writes")}
            if b["prev_hash"] != prev:
                return False
            if b["block_hash"] != h_block(header):
                return False
            prev = b["block_hash"]
        return True


class MemoryLedgerStore(LedgerStore):
    """In-process ledger. Lost when the process exits."""

    def __init__(self, clock: Optional[Callable[[], str]] = None):
        super().__init__(clock)
        self._blocks: List[dict] = []

    def _read_blocks(self) -> List[dict]:
        return list(self._blocks)

    def _append_block(self, block: dict) -> None:
        self._blocks.append(block)


class JsonlLedgerStore(LedgerStore):
    """
    Append-only JSONL ledger file, one block per line.

    The file is re-read on every call; nothing is cached between calls.
    """

    def __init__(self, path: str, clock: Optional[Callable[[], str]] = None):
        super().__init__(clock)
        self.path = path
        try:
            os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
            if not os.path.exists(path):
                open(path, "wb").close()
        except OSError as e:
            raise StoreUnavailable(f"Cannot open ledger at {path}: {e}") from e

    def _read_blocks(self) -> List[dict]:
        blocks = []
        try:
            with open(self.path, "rb") as f:
                for lineno, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    blocks.append(json.loads(line))
        except OSError as e:
            raise StoreUnavailable(f"Cannot read ledger at {self.path}: {e}") from e
        except ValueError as e:
            raise StoreUnavailable(f"Malformed block at {self.path}:{lineno}: {e}") from e
        return blocks

    def _append_block(self, block: dict) -> None:
        try:
            with open(self.path, "ab") as f:
                f.write(json.dumps(block, sort_keys=True, separators=(",", ":")).encode("utf-8") + b"\n")
        except OSError as e:
            raise StoreUnavailable(f"Cannot append to ledger at {self.path}: {e}") from e
