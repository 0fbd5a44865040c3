"""
Data loading and bar parsing module.

Provides boundary parsing for price bars from any source (lists of
mappings, DataFrames, CSV files) and date range filtering.
"""
from .bars import coerce_timestamp, parse_bar, parse_bars
from .loader import DataLoader

__all__ = [
    'DataLoader',
    'coerce_timestamp',
    'parse_bar',
    'parse_bars',
]
