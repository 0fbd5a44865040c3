"""
Trend and pattern classification for wave sequences.

Invalidated waves never count toward a pattern.
"""
from typing import Dict, List, Sequence

from ..shared.defaults import CORRECTIVE_PATTERN_MIN_WAVES, IMPULSE_PATTERN_MIN_WAVES
from ..shared.types import Direction, Wave, WaveNumber, WaveType


def determine_trend(waves: Sequence[Wave]) -> str:
    """Trend of the last wave: 'bullish', 'bearish' or 'neutral'."""
    if not waves:
        return "neutral"
    direction = waves[-1].direction
    if direction == Direction.UP:
        return "bullish"
    if direction == Direction.DOWN:
        return "bearish"
    return "neutral"


def _count(waves: Sequence[Wave], wave_type: WaveType) -> int:
    return sum(1 for w in waves if w.wave_type == wave_type and not w.is_invalid)


def has_impulse_pattern(waves: Sequence[Wave], min_waves: int = IMPULSE_PATTERN_MIN_WAVES) -> bool:
    return _count(waves, WaveType.IMPULSE) >= min_waves


def has_corrective_pattern(
    waves: Sequence[Wave],
    min_waves: int = CORRECTIVE_PATTERN_MIN_WAVES,
) -> bool:
    return _count(waves, WaveType.CORRECTIVE) >= min_waves


def _size(wave: Wave) -> float:
    return abs(wave.end_price - wave.start_price)


def check_impulse_rules(waves: Sequence[Wave]) -> List[str]:
    """
    Check every complete 1-2-3-4-5 run against the classic Elliott rules.

    Rules:
    - Wave 2 cannot retrace more than 100% of Wave 1
    - Wave 3 cannot be the shortest of waves 1, 3, and 5
    - Wave 4 cannot overlap with Wave 1's territory

    Args:
        waves: Wave sequence in time order

    Returns:
        Human readable violations (empty when every run is valid)
    """
    violations = []
    motive = [WaveNumber.W1, WaveNumber.W2, WaveNumber.W3, WaveNumber.W4, WaveNumber.W5]

    for i in range(len(waves) - 4):
        run = list(waves[i:i + 5])
        if [w.number for w in run] != motive or not all(w.has_end for w in run):
            continue
        w: Dict[WaveNumber, Wave] = {wave.number: wave for wave in run}
        wave1, wave2, wave3, wave4, wave5 = (w[n] for n in motive)
        up = wave1.end_price > wave1.start_price
        where = f"impulse starting at {wave1.start_timestamp}"

        if _size(wave2) > _size(wave1):
            violations.append(f"{where}: wave 2 retraces more than 100% of wave 1")

        if _size(wave3) == min(_size(wave1), _size(wave3), _size(wave5)):
            violations.append(f"{where}: wave 3 is the shortest of waves 1, 3 and 5")

        overlaps = wave4.end_price <= wave1.end_price if up else wave4.end_price >= wave1.end_price
        if overlaps:
            violations.append(f"{where}: wave 4 overlaps wave 1 territory")

    return violations
