"""Context registry: one CompositionBuffer per focused application.

The registry is the only structure shared across threads; every access goes
through one lock.  It holds at most ``capacity`` contexts and evicts the
least recently focused one.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Callable, Optional

import vkey.log  # registers TRACE level and logger.trace()
from vkey.core.errors import UnknownContext
from vkey.core.states import CompositionBuffer
from vkey.core.types import OutputEncoding, Scheme

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 16


@dataclass
class Context:
    context_id: str
    encoding: OutputEncoding = OutputEncoding.UNICODE
    scheme: Optional[Scheme] = None          # None: follow the global scheme
    enabled_override: Optional[bool] = None  # explicit user toggle for this app
    auto_suspended: bool = False
    invalid_streak: int = 0
    last_timestamp: float = 0.0
    buffer: CompositionBuffer = field(init=False)

    def __post_init__(self):
        self.buffer = CompositionBuffer(context_id=self.context_id, encoding=self.encoding)


class ContextRegistry:
    """LRU map ``context_id -> Context`` guarded by a single lock."""

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        factory: Optional[Callable[[str], Context]] = None,
        on_evict: Optional[Callable[[Context], None]] = None,
    ):
        if capacity < 1:
            raise ValueError(f"Context capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._factory = factory or Context
        self._on_evict = on_evict
        self._contexts: OrderedDict[str, Context] = OrderedDict()
        self._lock = threading.Lock()

    def focus(self, context_id: str) -> Context:
        """Return the context for *context_id*, creating it if needed.

        Marks it most recently used; may evict the least recently used one.
        """
        evicted: list[Context] = []
        with self._lock:
            ctx = self._contexts.get(context_id)
            if ctx is None:
                ctx = self._factory(context_id)
                self._contexts[context_id] = ctx
                logger.debug("Context created: %s", context_id)
                while len(self._contexts) > self.capacity:
                    _, old = self._contexts.popitem(last=False)
                    evicted.append(old)
            else:
                self._contexts.move_to_end(context_id)

        for old in evicted:
            logger.debug("Context evicted: %s", old.context_id)
            if self._on_evict:
                try:
                    self._on_evict(old)
                except Exception:
                    logger.exception("on_evict handler failed for %s", old.context_id)
        return ctx

    def get(self, context_id: str) -> Context:
        """Return an existing context; raises ``UnknownContext``."""
        with self._lock:
            try:
                return self._contexts[context_id]
            except KeyError:
                raise UnknownContext(context_id) from None

    def find(self, context_id: str) -> Optional[Context]:
        with self._lock:
            return self._contexts.get(context_id)

    def evict(self, context_id: str) -> bool:
        with self._lock:
            ctx = self._contexts.pop(context_id, None)
        if ctx is None:
            return False
        if self._on_evict:
            try:
                self._on_evict(ctx)
            except Exception:
                logger.exception("on_evict handler failed for %s", context_id)
        return True

    def ids(self) -> list[str]:
        """Context ids, least recently used first."""
        with self._lock:
            return list(self._contexts)

    def contexts(self) -> list[Context]:
        with self._lock:
            return list(self._contexts.values())

    def __contains__(self, context_id: object) -> bool:
        with self._lock:
            return context_id in self._contexts

    def __len__(self) -> int:
        with self._lock:
            return len(self._contexts)
