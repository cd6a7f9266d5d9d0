"""Per-call context and the logical height source.

The host ledger supplies the caller identity and a logical height for every
call. Height never advances within a call, and never decreases across calls.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass

from atomic_exchange.domain.exceptions import HeightRegressionError

# Heights are journaled in signed 64-bit integer columns.
MAX_HEIGHT = (1 << 63) - 1


@dataclass(frozen=True)
class CallContext:
    """Identity and logical height of a single operation."""

    caller: str
    height: int

    def __post_init__(self) -> None:
        if not self.caller:
            raise ValueError("caller identity must be non-empty")
        if not 0 <= self.height <= MAX_HEIGHT:
            raise ValueError(f"height must be within [0, {MAX_HEIGHT}], got {self.height}")


class LogicalClock:
    """Monotonic logical height shared by every component of one exchange.

    Usage:
        clock = LogicalClock()
        clock.observe(10)
        clock.current  # 10
        clock.observe(5)  # HeightRegressionError
    """

    def __init__(self, start: int = 0) -> None:
        self._height = start
        self._lock = threading.Lock()

    @property
    def current(self) -> int:
        return self._height

    def observe(self, height: int) -> int:
        """Record a supplied height. Equal heights are allowed (same block)."""
        with self._lock:
            if height < self._height:
                raise HeightRegressionError(height, self._height)
            self._height = height
            return height

    def check(self, height: int) -> None:
        """Raise HeightRegressionError if the height is below the current one."""
        if height < self._height:
            raise HeightRegressionError(height, self._height)

    def settle(self, height: int) -> int:
        """Move the clock up to a height reached by a completed call.

        Never moves backwards, so a call that passed check() and finished
        after a higher one leaves the clock where it is.
        """
        with self._lock:
            self._height = max(self._height, height)
            return self._height

    def advance(self, blocks: int = 1) -> int:
        """Move the clock forward by a number of blocks."""
        if blocks < 0:
            raise ValueError("blocks must be non-negative")
        with self._lock:
            self._height += blocks
            return self._height

    def context(self, caller: str, height: int | None = None) -> CallContext:
        """Build a CallContext at the given height (defaults to current)."""
        return CallContext(caller=caller, height=self._height if height is None else height)
