"""
Price target module.

Provides Fibonacci retracement and extension targets for wave sequences.
"""
from .target_calculator import FibonacciTargetCalculator

__all__ = [
    'FibonacciTargetCalculator',
]
