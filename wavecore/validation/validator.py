"""
Bounds checking and invalidation tracking for wave sequences.

The validator is the only place where waves change after creation, always
through dataclasses.replace:
- Waves that start before the first bar are filtered out. If that would
  remove every wave, the first wave is re-anchored to the first bar instead.
- A wave with an invalidation price is moved to the invalid list once a bar
  at or after its start trades through that price against the wave.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, List, Optional, Sequence, Tuple

import numpy as np

from .sources import normalize_sources
from ..data.bars import BarsInput, parse_bars
from ..shared.exceptions import AnalysisWarning, OutOfRangeWaveWarning
from ..shared.types import Direction, PriceBar, Wave


logger = logging.getLogger(__name__)


@dataclass
class ValidationReport:
    """Outcome of validating one wave sequence."""
    waves: List[Wave] = field(default_factory=list)
    invalid_waves: List[Wave] = field(default_factory=list)
    warnings: List[AnalysisWarning] = field(default_factory=list)
    entirely_out_of_range: bool = False

    @property
    def current_wave(self) -> Optional[Wave]:
        return self.waves[-1] if self.waves else None


class WaveValidator:
    """Reconciles wave sequences with the price history they describe."""

    def validate(self, candidates: Sequence[Any], bars: BarsInput) -> ValidationReport:
        """
        Normalize, bounds-check and invalidation-check a wave sequence.

        Args:
            candidates: Waves, raw external records or source variants
            bars: Authoritative price history (re-parsed, never trusted)

        Returns:
            ValidationReport with live waves, invalidated waves and warnings
        """
        price_bars, bar_warnings = parse_bars(bars)
        waves, wave_warnings = normalize_sources(candidates)
        report = ValidationReport(warnings=[*bar_warnings, *wave_warnings])

        if not price_bars:
            logger.warning("No usable bars; skipping bounds and invalidation checks")
            report.waves = [w for w in waves if not w.is_invalid]
            report.invalid_waves = [w for w in waves if w.is_invalid]
            return report

        waves, bounds_warnings, report.entirely_out_of_range = self.enforce_bounds(waves, price_bars)
        report.warnings.extend(bounds_warnings)

        timeline = _Timeline(price_bars)
        for wave in waves:
            checked = wave if wave.is_invalid else self.track_invalidation(wave, timeline)
            if checked.is_invalid:
                report.invalid_waves.append(checked)
            else:
                report.waves.append(checked)

        if report.invalid_waves:
            logger.info(f"{len(report.invalid_waves)} of {len(waves)} waves are invalidated")
        return report

    def enforce_bounds(
        self,
        waves: List[Wave],
        bars: Sequence[PriceBar],
    ) -> Tuple[List[Wave], List[OutOfRangeWaveWarning], bool]:
        """
        Drop or re-anchor waves that start before the first bar.

        Args:
            waves: Canonical waves in sequence order
            bars: Parsed bars sorted ascending by timestamp

        Returns:
            (waves, warnings, True if every wave started before the first bar)
        """
        if not waves:
            return waves, [], False

        earliest = bars[0]
        in_range = [w for w in waves if w.start_timestamp >= earliest.timestamp]
        if len(in_range) == len(waves):
            return waves, [], False

        warnings = []
        if in_range:
            for wave in waves:
                if wave.start_timestamp < earliest.timestamp:
                    message = (
                        f"Filtering out wave {wave.number.label} starting at {wave.start_timestamp}, "
                        f"before earliest bar {earliest.timestamp}"
                    )
                    logger.warning(message)
                    warnings.append(OutOfRangeWaveWarning(message))
            return in_range, warnings, False

        first = waves[0]
        message = (
            f"All {len(waves)} waves start before earliest bar {earliest.timestamp}; "
            f"re-anchoring wave {first.number.label} from {first.start_timestamp}"
        )
        logger.warning(message)
        warnings.append(OutOfRangeWaveWarning(message))

        changes = dict(start_timestamp=earliest.timestamp, start_price=earliest.close)
        if first.end_timestamp is not None and first.end_timestamp < earliest.timestamp:
            # The recorded end predates the data, so the end is unknown
            changes.update(end_timestamp=None, end_price=None, is_complete=False)
        return [replace(first, **changes), *waves[1:]], warnings, True

    def track_invalidation(self, wave: Wave, timeline: "_Timeline") -> Wave:
        """
        Flag the wave invalid at the first bar that breaches its invalidation price.

        Up-waves are breached by a low strictly below the level, down-waves by
        a high strictly above it. Waves without an invalidation price are
        returned unchanged.
        """
        level = wave.invalidation_price
        if level is None:
            return wave

        direction = wave.direction
        if direction is None:
            direction = Direction.UP if level <= wave.start_price else Direction.DOWN

        breach = timeline.first_breach(wave.start_timestamp, level, direction)
        if breach is None:
            return wave

        logger.info(
            f"Wave {wave.number.label} invalidated at {breach}: price crossed {level}"
        )
        return replace(wave, is_invalid=True, invalidation_timestamp=breach)


class _Timeline:
    """Column view of the bars for breach searches."""

    def __init__(self, bars: Sequence[PriceBar]):
        self.timestamps = np.array([b.timestamp for b in bars], dtype=np.int64)
        self.highs = np.array([b.high for b in bars], dtype=float)
        self.lows = np.array([b.low for b in bars], dtype=float)

    def first_breach(self, start: int, level: float, direction: Direction) -> Optional[int]:
        begin = int(np.searchsorted(self.timestamps, start, side="left"))
        if direction == Direction.UP:
            hits = np.nonzero(self.lows[begin:] < level)[0]
        else:
            hits = np.nonzero(self.highs[begin:] > level)[0]
        if hits.size == 0:
            return None
        return int(self.timestamps[begin + hits[0]])
