from __future__ import annotations
"""
Strategies for identifier generation in linkbio_platform.

Users and links get stable string identifiers at creation time. The strategy
is pluggable so the in-memory demo, tests, and a database deployment can pick
what suits them.

Provided strategies:
- ObjectIdStrategy: 24 hex chars = 4-byte epoch seconds | 5-byte process random | 3-byte counter.
  Sorts roughly by creation time, which keeps identifiers readable in logs.
- UUID4Strategy: random UUID4 in canonical hex form.
- SequentialStrategy: process-local monotonically increasing integer with an optional prefix.
  Deterministic, so handy in tests and demos.

Configuration (via linkbio_platform.config.settings):
- ID_STRATEGY: "objectid" (default), "uuid4", "sequential"

Notes:
- ObjectIdStrategy and SequentialStrategy guard their counters with a lock, so
  concurrent adds from request threads never hand out the same id.
"""

import itertools
import os
import threading
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Optional, Type

from linkbio_platform.config import settings


class BaseIdStrategy(ABC):
    """Abstract base for identifier generation strategies."""

    @abstractmethod
    def generate(self) -> str:  # pragma: no cover
        """Return a new identifier, unique within this process at least."""
        raise NotImplementedError


@dataclass
class ObjectIdStrategy(BaseIdStrategy):
    """Time-ordered 12-byte identifiers rendered as 24 hex characters."""

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _process_random: bytes = field(default_factory=lambda: os.urandom(5), repr=False)
    _counter: itertools.count = field(default=None, repr=False)  # type: ignore

    def __post_init__(self):
        self._counter = itertools.count(int.from_bytes(os.urandom(3), "big"))

    def generate(self) -> str:
        with self._lock:
            n = next(self._counter) % 0x1000000
        ts = int(time.time()).to_bytes(4, "big")
        return (ts + self._process_random + n.to_bytes(3, "big")).hex()


@dataclass(frozen=True)
class UUID4Strategy(BaseIdStrategy):
    def generate(self) -> str:
        return uuid.uuid4().hex


@dataclass
class SequentialStrategy(BaseIdStrategy):
    """
    Counter-based identifiers: "1", "2", ... or "lnk-1", "lnk-2", ... with a prefix.

    Stateless across restarts; only use where ids do not outlive the process
    (tests, in-memory demos).
    """

    start: int = 1
    prefix: str = ""
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _counter: itertools.count = field(default=None, repr=False)  # type: ignore

    def __post_init__(self):
        self._counter = itertools.count(self.start)

    def generate(self) -> str:
        with self._lock:
            n = next(self._counter)
        return f"{self.prefix}{n}"


STRATEGY_REGISTRY: Dict[str, Type[BaseIdStrategy]] = {
    "objectid": ObjectIdStrategy,
    "object-id": ObjectIdStrategy,
    "uuid": UUID4Strategy,
    "uuid4": UUID4Strategy,
    "sequential": SequentialStrategy,
    "seq": SequentialStrategy,
}


def get_strategy_from_config(name: Optional[str] = None) -> BaseIdStrategy:
    """
    Resolve the active strategy from parameter or settings.ID_STRATEGY.
    Unknown names fall back to ObjectIdStrategy.
    """
    key = (name or getattr(settings, "ID_STRATEGY", "objectid") or "objectid").strip().lower()
    cls = STRATEGY_REGISTRY.get(key) or ObjectIdStrategy
    return cls()
