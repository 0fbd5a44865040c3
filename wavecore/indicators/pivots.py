"""
Swing pivot detection over OHLC bars.

A bar is a peak when its high is at least the highest high of the `window`
bars after it and strictly above every high of the `window` bars before it;
troughs mirror this on lows. Requiring a strict rise into the pivot keeps flat
and strictly monotonic series pivot-free and reports a plateau once, at its
first bar.
"""
import logging
from typing import List, Optional, Sequence

import numpy as np

from ..shared.defaults import PIVOT_WINDOW
from ..shared.types import PriceBar


logger = logging.getLogger(__name__)


class PivotDetector:
    """Finds local highs and lows in a bar series."""

    def __init__(self, window: int = PIVOT_WINDOW):
        """
        Initialize the pivot detector.

        Args:
            window: Number of bars compared on each side of a candidate pivot
        """
        if window < 1:
            raise ValueError(f"window must be >= 1, got {window}")
        self.window = window

    @property
    def min_bars(self) -> int:
        """Smallest series that can contain a pivot."""
        return 2 * self.window + 1

    def find_pivots(self, bars: Sequence[PriceBar]) -> List[int]:
        """
        Find pivot indices in time order.

        Args:
            bars: Bars sorted ascending by timestamp

        Returns:
            Ascending list of bar indices that are peaks or troughs.
            Empty if there are fewer than min_bars bars.
        """
        if len(bars) < self.min_bars:
            logger.debug(f"Need {self.min_bars} bars for pivot detection, got {len(bars)}")
            return []

        highs = np.array([bar.high for bar in bars], dtype=float)
        lows = np.array([bar.low for bar in bars], dtype=float)
        w = self.window

        pivots = []
        for i in range(w, len(bars) - w):
            if self._is_peak(highs, i) or self._is_trough(lows, i):
                pivots.append(i)

        logger.debug(f"Found {len(pivots)} pivots in {len(bars)} bars (window={w})")
        return pivots

    def classify(self, bars: Sequence[PriceBar], index: int) -> Optional[str]:
        """Return 'peak', 'trough' or None for the bar at index."""
        w = self.window
        if index < w or index >= len(bars) - w:
            return None
        highs = np.array([bar.high for bar in bars[index - w:index + w + 1]], dtype=float)
        lows = np.array([bar.low for bar in bars[index - w:index + w + 1]], dtype=float)
        if self._is_peak(highs, w):
            return "peak"
        if self._is_trough(lows, w):
            return "trough"
        return None

    def _is_peak(self, highs: np.ndarray, i: int) -> bool:
        before = highs[i - self.window:i]
        after = highs[i + 1:i + self.window + 1]
        return highs[i] > before.max() and highs[i] >= after.max()

    def _is_trough(self, lows: np.ndarray, i: int) -> bool:
        before = lows[i - self.window:i]
        after = lows[i + 1:i + self.window + 1]
        return lows[i] < before.min() and lows[i] <= after.min()
