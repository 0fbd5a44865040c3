"""
CLI entry points for wave analysis.

Provides command-line interfaces for:
- Elliott Wave analysis of OHLCV CSV files
"""
