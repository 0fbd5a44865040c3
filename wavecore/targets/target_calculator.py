"""
Calculates Fibonacci price targets from a reference wave.

Retracements project back from the reference wave's end toward its start;
extensions project beyond the end in the direction of the original move,
measured from the start of the wave.
"""
import logging
from typing import List, Optional, Sequence

from ..shared.defaults import (
    CRITICAL_EXTENSION,
    CRITICAL_RETRACEMENT,
    EXTENSION_RATIOS,
    RETRACEMENT_RATIOS,
)
from ..shared.types import FibTarget, Wave


logger = logging.getLogger(__name__)


def _label(ratio: float) -> str:
    return f"{ratio * 100:.1f}%"


class FibonacciTargetCalculator:
    """Calculates retracement and extension targets for a wave."""

    def __init__(
        self,
        retracement_ratios: Sequence[float] = RETRACEMENT_RATIOS,
        extension_ratios: Sequence[float] = EXTENSION_RATIOS,
        critical_retracement: float = CRITICAL_RETRACEMENT,
        critical_extension: float = CRITICAL_EXTENSION,
    ):
        """
        Initialize the target calculator.

        Args:
            retracement_ratios: Ratios applied within the reference wave's range
            extension_ratios: Ratios projected beyond the reference wave
            critical_retracement: Retracement ratio flagged as a primary level
            critical_extension: Extension ratio flagged as a primary level
        """
        self.retracement_ratios = tuple(retracement_ratios)
        self.extension_ratios = tuple(extension_ratios)
        self.critical_retracement = critical_retracement
        self.critical_extension = critical_extension

    def calculate(self, reference: Optional[Wave]) -> List[FibTarget]:
        """
        Calculate targets for a reference wave.

        Args:
            reference: Wave whose start/end prices define the swing

        Returns:
            Retracement targets followed by extension targets. Empty when the
            wave is missing, still has no end price, or has zero height.
        """
        if reference is None or reference.end_price is None:
            return []

        start, end = reference.start_price, reference.end_price
        diff = end - start
        if diff == 0:
            logger.debug(f"Degenerate reference wave {reference.number.label}, no targets")
            return []

        targets = [
            FibTarget(
                label=_label(ratio),
                price=round(end - ratio * diff, 10),
                is_extension=False,
                is_critical=ratio == self.critical_retracement,
                level=ratio,
            )
            for ratio in self.retracement_ratios
        ]
        targets.extend(
            FibTarget(
                label=_label(ratio),
                price=round(start + ratio * diff, 10),
                is_extension=True,
                is_critical=ratio == self.critical_extension,
                level=ratio,
            )
            for ratio in self.extension_ratios
        )
        return targets

    def select_reference(self, waves: Sequence[Wave]) -> Optional[Wave]:
        """
        Pick the reference wave for targets.

        Preference order:
        1. Impulse wave of the most recently completed impulse/corrective pair
        2. Most recently completed impulse wave
        3. Most recently completed wave
        """
        live = [w for w in waves if w.is_complete and w.has_end and not w.is_invalid]
        for first, second in reversed(list(zip(live, live[1:]))):
            if first.is_impulse and not second.is_impulse:
                return first
        for wave in reversed(live):
            if wave.is_impulse:
                return wave
        return live[-1] if live else None

    def targets_for_waves(self, waves: Sequence[Wave]) -> List[FibTarget]:
        """Calculate targets from the selected reference wave of a sequence."""
        return self.calculate(self.select_reference(waves))
