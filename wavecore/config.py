"""
Analysis configuration.

Config validation runs at construction time (fail fast with clear errors).
"""
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .shared.defaults import (
    PIVOT_WINDOW, PROGRESS_INTERVAL,
    RETRACEMENT_RATIOS, EXTENSION_RATIOS,
    CRITICAL_RETRACEMENT, CRITICAL_EXTENSION,
    IMPULSE_PATTERN_MIN_WAVES, CORRECTIVE_PATTERN_MIN_WAVES,
)


def _validate_config(
    *,
    pivot_window: int,
    progress_interval: int,
    retracement_ratios: Tuple[float, ...],
    extension_ratios: Tuple[float, ...],
    critical_retracement: Optional[float],
    critical_extension: Optional[float],
    impulse_min_waves: int,
    corrective_min_waves: int,
) -> None:
    """Validate analysis parameters. Raises ValueError with clear message on failure."""
    if pivot_window < 1:
        raise ValueError(f"pivot_window must be >= 1, got {pivot_window}")
    if progress_interval < 1:
        raise ValueError(f"progress_interval must be >= 1, got {progress_interval}")
    if any(not (0 < r < 1) for r in retracement_ratios):
        raise ValueError(
            f"retracement_ratios must all be in (0, 1), got {list(retracement_ratios)}"
        )
    if any(r <= 1 for r in extension_ratios):
        raise ValueError(
            f"extension_ratios must all be > 1, got {list(extension_ratios)}"
        )
    if critical_retracement is not None and critical_retracement not in retracement_ratios:
        raise ValueError(
            f"critical_retracement ({critical_retracement}) must be one of retracement_ratios"
        )
    if critical_extension is not None and critical_extension not in extension_ratios:
        raise ValueError(
            f"critical_extension ({critical_extension}) must be one of extension_ratios"
        )
    if impulse_min_waves < 1:
        raise ValueError(f"impulse_min_waves must be >= 1, got {impulse_min_waves}")
    if corrective_min_waves < 1:
        raise ValueError(f"corrective_min_waves must be >= 1, got {corrective_min_waves}")


@dataclass(frozen=True)
class AnalysisConfig:
    """Parameters for one wave analysis run (immutable)."""
    name: str = "default"
    description: str = ""

    # Pivot detection
    pivot_window: int = PIVOT_WINDOW

    # Wave labeling
    progress_interval: int = PROGRESS_INTERVAL

    # Fibonacci targets
    retracement_ratios: Tuple[float, ...] = field(default=RETRACEMENT_RATIOS)
    extension_ratios: Tuple[float, ...] = field(default=EXTENSION_RATIOS)
    critical_retracement: Optional[float] = CRITICAL_RETRACEMENT
    critical_extension: Optional[float] = CRITICAL_EXTENSION

    # Pattern classification
    impulse_min_waves: int = IMPULSE_PATTERN_MIN_WAVES
    corrective_min_waves: int = CORRECTIVE_PATTERN_MIN_WAVES

    def __post_init__(self):
        object.__setattr__(self, "retracement_ratios", tuple(float(r) for r in self.retracement_ratios))
        object.__setattr__(self, "extension_ratios", tuple(float(r) for r in self.extension_ratios))
        _validate_config(
            pivot_window=self.pivot_window,
            progress_interval=self.progress_interval,
            retracement_ratios=self.retracement_ratios,
            extension_ratios=self.extension_ratios,
            critical_retracement=self.critical_retracement,
            critical_extension=self.critical_extension,
            impulse_min_waves=self.impulse_min_waves,
            corrective_min_waves=self.corrective_min_waves,
        )

    @property
    def min_bars(self) -> int:
        return 2 * self.pivot_window + 1


DEFAULT_CONFIG = AnalysisConfig()
