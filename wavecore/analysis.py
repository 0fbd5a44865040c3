"""
End-to-end Elliott Wave analysis.

Runs the full pipeline for one bar series:
bars -> pivots -> labeled waves -> validation/merge with an optional external
analysis -> trend, pattern flags and Fibonacci targets.

Analyzers hold only configuration and keep no state between calls.
"""
import logging
from typing import Any, List, Optional

from .config import AnalysisConfig, DEFAULT_CONFIG
from .data.bars import BarsInput, parse_bars
from .indicators.elliott_wave import ElliottWaveDetector, ProgressCallback
from .shared.exceptions import AnalysisWarning, InsufficientDataError
from .shared.types import Wave, WaveAnalysisResult
from .targets.target_calculator import FibonacciTargetCalculator
from .validation.merger import WaveMerger
from .validation.validator import WaveValidator


logger = logging.getLogger(__name__)


class ElliottWaveAnalyzer:
    """Produces WaveAnalysisResult snapshots from price history."""

    def __init__(self, config: Optional[AnalysisConfig] = None):
        """
        Initialize the analyzer.

        Args:
            config: Analysis parameters (defaults to DEFAULT_CONFIG)
        """
        self.config = config or DEFAULT_CONFIG
        self.detector = ElliottWaveDetector(
            window=self.config.pivot_window,
            progress_interval=self.config.progress_interval,
        )
        self.merger = WaveMerger(
            validator=WaveValidator(),
            target_calculator=FibonacciTargetCalculator(
                retracement_ratios=self.config.retracement_ratios,
                extension_ratios=self.config.extension_ratios,
                critical_retracement=self.config.critical_retracement,
                critical_extension=self.config.critical_extension,
            ),
            impulse_min_waves=self.config.impulse_min_waves,
            corrective_min_waves=self.config.corrective_min_waves,
        )

    def analyze(
        self,
        bars: BarsInput,
        external: Any = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> WaveAnalysisResult:
        """
        Analyze a bar series.

        Args:
            bars: List of PriceBar objects or mappings, or an OHLCV DataFrame
            external: Optional external analysis (mapping, JSON text or free text)
            progress_callback: Optional reporter called with partial wave lists

        Returns:
            WaveAnalysisResult; never raises for data problems

        Raises:
            InvalidInputError: If bars is not a list, tuple or DataFrame
        """
        price_bars, bar_warnings = parse_bars(bars)
        warnings: List[AnalysisWarning] = list(bar_warnings)

        local_waves: List[Wave] = []
        if len(price_bars) < self.config.min_bars:
            message = (
                f"Insufficient data for wave analysis: {len(price_bars)} bars, "
                f"need {self.config.min_bars}"
            )
            logger.info(message)
            warnings.append(InsufficientDataError(message))
        else:
            local_waves = self.detector.detect_waves(price_bars, progress_callback=progress_callback)
            logger.debug(f"Detected {len(local_waves)} local waves in {len(price_bars)} bars")

        return self.merger.merge(local_waves, external, price_bars, warnings=warnings)


def analyze_waves(
    bars: BarsInput,
    external: Any = None,
    progress_callback: Optional[ProgressCallback] = None,
    config: Optional[AnalysisConfig] = None,
) -> WaveAnalysisResult:
    """Analyze a bar series with a one-off analyzer."""
    return ElliottWaveAnalyzer(config).analyze(
        bars, external=external, progress_callback=progress_callback
    )
