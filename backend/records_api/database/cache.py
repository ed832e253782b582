"""
Two-state cached value used by the connection provider.

A :class:`CachedValue` is either *absent* or *present*. It replaces the
"module global that may be None" pattern with explicit transitions:

* ``populate(value)``        – absent/present → present
* ``invalidate()``           – present → absent
* ``get_or_populate(fn)``    – present stays present; absent calls ``fn`` once

An optional TTL makes a present value fall back to absent once it is older
than ``ttl_seconds``. ``None`` means the value never expires.
"""

from __future__ import annotations

import time
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class CachedValue(Generic[T]):
    """Holds at most one value with optional time-based expiry."""

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds is not None and ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive or None")

        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._value: Optional[T] = None
        self._populated_at: Optional[float] = None

    @property
    def is_present(self) -> bool:
        """True if a value is cached and has not expired."""
        if self._populated_at is None:
            return False
        if self.ttl_seconds is None:
            return True
        return (self._clock() - self._populated_at) < self.ttl_seconds

    def get(self) -> Optional[T]:
        """Return the cached value, or ``None`` when absent or expired."""
        return self._value if self.is_present else None

    def populate(self, value: T) -> T:
        self._value = value
        self._populated_at = self._clock()
        return value

    def invalidate(self) -> Optional[T]:
        """Drop the cached value and return whatever was held (even if expired)."""
        previous = self._value
        self._value = None
        self._populated_at = None
        return previous

    def get_or_populate(self, factory: Callable[[], T]) -> T:
        """
        Return the cached value, calling ``factory`` only when absent.

        If ``factory`` raises, the cache is left absent and the exception
        propagates unchanged.
        """
        if self.is_present:
            return self._value  # type: ignore[return-value]
        return self.populate(factory())
