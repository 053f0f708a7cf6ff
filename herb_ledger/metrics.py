"""
Operation counters.

Counts transactions and failures by kind. Never records herb ids or
field values.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass
class Metrics:
    counters: Dict[str, int] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def inc(self, name: str, by: int = 1) -> None:
        with self._lock:
            self.counters[name] = self.counters.get(name, 0) + by

    def record(self, op: str, error: Optional[BaseException] = None) -> None:
        """Count one call of op, and its failure kind if it failed."""
        self.inc(f"tx.{op}")
        if error is not None:
            self.inc(f"tx.{op}.failed")
            self.inc(f"error.{type(error).__name__}")

    def snapshot(self) -> dict:
        with self._lock:
            return {"counters": dict(self.counters)}
