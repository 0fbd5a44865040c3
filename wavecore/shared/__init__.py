"""
Shared types, defaults and errors for the wave analysis core.

This module provides:
- PriceBar, Wave, FibTarget and WaveAnalysisResult dataclasses
- The WaveNumber state machine and WaveType/Direction enums
- Centralized default values for all analysis parameters
- The error and warning taxonomy
"""
from .types import (
    Direction,
    FibTarget,
    PriceBar,
    Wave,
    WaveAnalysisResult,
    WaveNumber,
    WaveType,
)
from .defaults import (
    PIVOT_WINDOW, MIN_BARS, PROGRESS_INTERVAL,
    RETRACEMENT_RATIOS, EXTENSION_RATIOS,
    CRITICAL_RETRACEMENT, CRITICAL_EXTENSION,
    IMPULSE_PATTERN_MIN_WAVES, CORRECTIVE_PATTERN_MIN_WAVES,
)
from .exceptions import (
    AnalysisWarning,
    InsufficientDataError,
    InvalidInputError,
    MalformedRecordError,
    MalformedRecordWarning,
    OutOfRangeWaveWarning,
    UnparsableAnalysisWarning,
    WaveAnalysisError,
)

__all__ = [
    'Direction',
    'FibTarget',
    'PriceBar',
    'Wave',
    'WaveAnalysisResult',
    'WaveNumber',
    'WaveType',
    'PIVOT_WINDOW', 'MIN_BARS', 'PROGRESS_INTERVAL',
    'RETRACEMENT_RATIOS', 'EXTENSION_RATIOS',
    'CRITICAL_RETRACEMENT', 'CRITICAL_EXTENSION',
    'IMPULSE_PATTERN_MIN_WAVES', 'CORRECTIVE_PATTERN_MIN_WAVES',
    'AnalysisWarning',
    'InsufficientDataError',
    'InvalidInputError',
    'MalformedRecordError',
    'MalformedRecordWarning',
    'OutOfRangeWaveWarning',
    'UnparsableAnalysisWarning',
    'WaveAnalysisError',
]
