"""
Elliott Wave analysis core.

Provides unified interfaces for:
- Bar parsing and CSV loading
- Swing pivot detection and Elliott Wave labeling
- Trend and pattern classification
- Fibonacci target calculation
- Validation and merging of local and external wave sequences
"""
from .analysis import ElliottWaveAnalyzer, analyze_waves
from .config import AnalysisConfig, DEFAULT_CONFIG
from .shared.types import FibTarget, PriceBar, Wave, WaveAnalysisResult, WaveNumber, WaveType

__all__ = [
    'ElliottWaveAnalyzer',
    'analyze_waves',
    'AnalysisConfig',
    'DEFAULT_CONFIG',
    'FibTarget',
    'PriceBar',
    'Wave',
    'WaveAnalysisResult',
    'WaveNumber',
    'WaveType',
]
