"""
Wave detection module.

Provides:
- Swing pivot detection over OHLC bars
- Elliott Wave labeling (1-2-3-4-5-A-B-C state machine)
- Trend and impulse/corrective pattern classification
"""
from .pivots import PivotDetector
from .elliott_wave import ElliottWaveDetector, WaveLabeler
from .patterns import (
    check_impulse_rules,
    determine_trend,
    has_corrective_pattern,
    has_impulse_pattern,
)

__all__ = [
    'PivotDetector',
    'ElliottWaveDetector',
    'WaveLabeler',
    'check_impulse_rules',
    'determine_trend',
    'has_corrective_pattern',
    'has_impulse_pattern',
]
