"""
Centralized default values for wave analysis parameters.

This is the SINGLE SOURCE OF TRUTH for all analysis parameter defaults.
All modules should import from here to ensure consistency.
"""

# Pivot detection
PIVOT_WINDOW = 5  # Bars compared on each side of a candidate pivot
MIN_BARS = 2 * PIVOT_WINDOW + 1  # Fewer bars than this cannot contain a pivot

# Wave labeling
PROGRESS_INTERVAL = 5  # Pivot pairs between progress callback invocations

# Fibonacci targets
RETRACEMENT_RATIOS = (0.236, 0.382, 0.5, 0.618, 0.786)
EXTENSION_RATIOS = (1.272, 1.618, 2.0, 2.618)
CRITICAL_RETRACEMENT = 0.618
CRITICAL_EXTENSION = 1.618

# Pattern classification
IMPULSE_PATTERN_MIN_WAVES = 3
CORRECTIVE_PATTERN_MIN_WAVES = 2

# External analysis normalization
# Epoch values above this are milliseconds (1e11 seconds is roughly year 5138)
EPOCH_MILLIS_THRESHOLD = 100_000_000_000
