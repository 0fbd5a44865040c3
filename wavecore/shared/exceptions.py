"""
Errors and non-fatal diagnostics raised or collected by the analysis core.

Only InvalidInputError ever reaches the caller. Everything deriving from
AnalysisWarning is logged and attached to the result instead of being raised.
"""


class WaveAnalysisError(Exception):
    """Base class for wave analysis errors."""
    pass


class InvalidInputError(WaveAnalysisError, TypeError):
    """Raised when an argument has the wrong shape (e.g. bars is not a sequence)."""
    pass


class MalformedRecordError(WaveAnalysisError, ValueError):
    """Raised by boundary parsers for a single bad bar or wave record."""
    pass


class AnalysisWarning(UserWarning):
    """Base class for diagnostics collected on an analysis result."""
    pass


class InsufficientDataError(AnalysisWarning):
    """Too few bars to detect any pivot. Informational, never raised."""
    pass


class MalformedRecordWarning(AnalysisWarning):
    """A bar or wave record was skipped because required fields were missing."""
    pass


class OutOfRangeWaveWarning(AnalysisWarning):
    """A wave started before the earliest bar and was filtered or re-anchored."""
    pass


class UnparsableAnalysisWarning(AnalysisWarning):
    """An external analysis payload was not structured data."""
    pass
