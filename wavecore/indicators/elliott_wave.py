"""
Elliott Wave labeling for swing pivots.

Elliott Wave Theory identifies recurring patterns in price movements:
- Motive phase: 5 waves in the direction of the trend (1, 2, 3, 4, 5)
- Corrective phase: 3 waves against the trend (A, B, C)

Each leg between two consecutive pivots is one wave. Labels step through the
WaveNumber cycle 1-2-3-4-5-A-B-C-1-... exactly once per leg, so the sequence
never skips or repeats a label. Legs of the motive phase are priced as up
moves (low to high), legs of the corrective phase as down moves (high to low).
"""
import logging
from typing import Callable, List, Optional, Sequence

from .pivots import PivotDetector
from ..shared.defaults import PIVOT_WINDOW, PROGRESS_INTERVAL
from ..shared.types import Direction, PriceBar, Wave, WaveNumber


logger = logging.getLogger(__name__)

ProgressCallback = Callable[[List[Wave]], None]


class WaveLabeler:
    """Converts an ordered pivot list into a labeled wave sequence."""

    def __init__(self, progress_interval: int = PROGRESS_INTERVAL):
        """
        Initialize the wave labeler.

        Args:
            progress_interval: Legs between progress callback invocations
        """
        if progress_interval < 1:
            raise ValueError(f"progress_interval must be >= 1, got {progress_interval}")
        self.progress_interval = progress_interval

    def label(
        self,
        pivots: Sequence[int],
        bars: Sequence[PriceBar],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> List[Wave]:
        """
        Label the legs between consecutive pivots.

        When the series continues past the last pivot, a final in-progress leg
        runs from the last pivot to the last bar.

        Args:
            pivots: Ascending bar indices of swing points
            bars: Bars the indices refer to
            progress_callback: Called with a snapshot of the waves labeled so
                far every `progress_interval` legs and once at the end

        Returns:
            Waves in time order; the last one is the current wave
        """
        points = self._check_pivots(pivots, len(bars))
        if not points:
            return []

        in_progress_leg = points[-1] < len(bars) - 1
        if in_progress_leg:
            points.append(len(bars) - 1)

        waves: List[Wave] = []
        reported = 0
        number = WaveNumber.W1
        leg_count = len(points) - 1

        for i in range(leg_count):
            start, end = bars[points[i]], bars[points[i + 1]]
            complete = not (in_progress_leg and i == leg_count - 1)
            waves.append(self._make_wave(number, start, end, complete))
            number = number.next()

            if progress_callback and i % self.progress_interval == 0:
                progress_callback(list(waves))
                reported = len(waves)

        if progress_callback and reported != len(waves):
            progress_callback(list(waves))

        logger.debug(f"Labeled {len(waves)} waves from {len(pivots)} pivots")
        return waves

    @staticmethod
    def leg_direction(number: WaveNumber) -> Direction:
        """Motive legs are priced upward, corrective legs downward."""
        return Direction.UP if number.is_motive_leg else Direction.DOWN

    def _make_wave(self, number: WaveNumber, start: PriceBar, end: PriceBar, complete: bool) -> Wave:
        if self.leg_direction(number) == Direction.UP:
            start_price, end_price = start.low, end.high
        else:
            start_price, end_price = start.high, end.low
        return Wave(
            number=number,
            start_timestamp=start.timestamp,
            start_price=start_price,
            end_timestamp=end.timestamp,
            end_price=end_price,
            is_complete=complete,
        )

    @staticmethod
    def _check_pivots(pivots: Sequence[int], n_bars: int) -> List[int]:
        points = [int(p) for p in pivots]
        for a, b in zip(points, points[1:]):
            if b <= a:
                raise ValueError(f"Pivot indices must be strictly ascending, got {a} then {b}")
        if points and (points[0] < 0 or points[-1] >= n_bars):
            raise ValueError(f"Pivot index out of range for {n_bars} bars")
        return points


class ElliottWaveDetector:
    """Detects and labels Elliott Waves in a bar series."""

    def __init__(
        self,
        window: int = PIVOT_WINDOW,
        progress_interval: int = PROGRESS_INTERVAL,
    ):
        """
        Initialize the Elliott Wave detector.

        Args:
            window: Pivot look-around window in bars
            progress_interval: Legs between progress callback invocations
        """
        self.pivot_detector = PivotDetector(window=window)
        self.labeler = WaveLabeler(progress_interval=progress_interval)

    def detect_waves(
        self,
        bars: Sequence[PriceBar],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> List[Wave]:
        """
        Detect Elliott Waves in the bar series.

        Args:
            bars: Bars sorted ascending by timestamp
            progress_callback: Optional partial-result reporter

        Returns:
            List of labeled waves (empty when no pivots are found)
        """
        pivots = self.pivot_detector.find_pivots(bars)
        return self.labeler.label(pivots, bars, progress_callback=progress_callback)
