from __future__ import annotations

from collections import deque
from typing import Deque, Iterable, List, Optional

from .bar import Bar


class BarSeries:
    """
    Bounded sliding-window bar store for one symbol+timeframe.

    Responsibilities:
    -----------------
    • Maintain strictly increasing bar timestamps
    • Provide O(1) append operations
    • Offer "update_last" for the still-forming bar
    • Serve bars by shift from the present (0 = most recent)
    """

    def __init__(self, symbol: str, timeframe: str, maxlen: int = 1000):
        self.symbol = symbol
        self.timeframe = timeframe
        # Stored oldest -> newest; shifts are resolved from the right end.
        self._bars: Deque[Bar] = deque(maxlen=maxlen)

    # ------------------------------------------------------------------
    # INTROSPECTION
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._bars)

    def last_ts(self) -> Optional[int]:
        """Return the timestamp of the most recent bar."""
        if not self._bars:
            return None
        return self._bars[-1].ts

    def get_bar(self, shift: int) -> Optional[Bar]:
        """Return the bar `shift` positions back from the present, or None."""
        if shift < 0 or shift >= len(self._bars):
            return None
        return self._bars[-1 - shift]

    def window(self, count: int) -> List[Bar]:
        """Return up to `count` most recent bars, newest first."""
        if count <= 0:
            return []
        n = min(count, len(self._bars))
        return [self._bars[-1 - i] for i in range(n)]

    # ------------------------------------------------------------------
    # LOAD INITIAL LIST
    # ------------------------------------------------------------------
    def load(self, bars: Iterable[Bar]) -> None:
        """
        Replace the contents with `bars` given oldest first.
        Ensures strict timestamp ordering.
        """
        self._bars.clear()
        for bar in bars:
            self.append(bar)

    # ------------------------------------------------------------------
    # ADD CLOSED BAR
    # ------------------------------------------------------------------
    def append(self, bar: Bar) -> None:
        """Append a new bar; its timestamp must be after the last one."""
        last_ts = self.last_ts()
        if last_ts is not None and bar.ts <= last_ts:
            raise ValueError(
                f"Bar sequence error for {self.symbol} {self.timeframe}: "
                f"{bar.ts} not greater than {last_ts}"
            )
        self._bars.append(bar)

    # ------------------------------------------------------------------
    # OVERWRITE LAST (forming bar update)
    # ------------------------------------------------------------------
    def update_last(self, bar: Bar) -> None:
        """Replace the last bar only if timestamps match."""
        if not self._bars:
            raise RuntimeError("update_last called on an empty series")

        if bar.ts != self._bars[-1].ts:
            raise ValueError(
                f"[BarSeries] update_last mismatch: incoming ts={bar.ts} "
                f"does not match last ts={self._bars[-1].ts}"
            )

        self._bars[-1] = bar


__all__ = ["BarSeries"]
