"""
Wave validation and merging module.

Provides:
- Source variants (local waves, external records) and their normalization
- Bounds validation and invalidation tracking against price history
- Parsing of external analyses and merging with the local sequence
"""
from .sources import (
    ExternalWaveRecord,
    LocalWave,
    RawWaveSource,
    normalize_sources,
    to_source,
)
from .validator import ValidationReport, WaveValidator
from .merger import (
    ExternalAnalysis,
    WaveMerger,
    parse_external_analysis,
    result_to_json,
    trend_from_text,
)

__all__ = [
    'ExternalWaveRecord',
    'LocalWave',
    'RawWaveSource',
    'normalize_sources',
    'to_source',
    'ValidationReport',
    'WaveValidator',
    'ExternalAnalysis',
    'WaveMerger',
    'parse_external_analysis',
    'result_to_json',
    'trend_from_text',
]
