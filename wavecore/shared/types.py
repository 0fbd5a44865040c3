"""
Shared types for the wave analysis core.

This module consolidates the price bar, wave, Fibonacci target and result
types used by every stage of the pipeline, plus the WaveNumber state machine
that drives wave labeling.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union


class WaveType(Enum):
    """Type of Elliott Wave."""
    IMPULSE = "impulse"  # Waves 1, 3, 5, B
    CORRECTIVE = "corrective"  # Waves 2, 4, A, C


class Direction(Enum):
    """Direction of a price leg."""
    UP = "up"
    DOWN = "down"


class WaveNumber(Enum):
    """
    Elliott Wave labels as states of the 1-2-3-4-5-A-B-C cycle.

    next() is total: C wraps around to 1.
    """
    W1 = "1"
    W2 = "2"
    W3 = "3"
    W4 = "4"
    W5 = "5"
    WA = "A"
    WB = "B"
    WC = "C"

    @property
    def label(self) -> str:
        return self.value

    @property
    def wave_type(self) -> WaveType:
        if self in _IMPULSE_NUMBERS:
            return WaveType.IMPULSE
        return WaveType.CORRECTIVE

    @property
    def is_motive_leg(self) -> bool:
        """True for waves 1-5, False for A-B-C."""
        return self.value.isdigit()

    def next(self) -> "WaveNumber":
        return _TRANSITIONS[self]

    def to_json(self) -> Union[int, str]:
        """Numbers serialize as ints, letters as strings."""
        return int(self.value) if self.is_motive_leg else self.value

    @classmethod
    def parse(cls, raw: Any) -> "WaveNumber":
        """
        Parse a wave label from an int, a digit string or a letter.

        Raises:
            ValueError: If the value is not one of 1-5 or A-C
        """
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, bool) or raw is None:
            raise ValueError(f"Not a wave number: {raw!r}")
        if isinstance(raw, float) and raw.is_integer():
            raw = int(raw)
        text = str(raw).strip().upper()
        if text.startswith("WAVE"):
            text = text[4:].strip()
        try:
            return cls(text)
        except ValueError:
            raise ValueError(f"Not a wave number: {raw!r}") from None


_IMPULSE_NUMBERS = frozenset({WaveNumber.W1, WaveNumber.W3, WaveNumber.W5, WaveNumber.WB})

_TRANSITIONS = {
    WaveNumber.W1: WaveNumber.W2,
    WaveNumber.W2: WaveNumber.W3,
    WaveNumber.W3: WaveNumber.W4,
    WaveNumber.W4: WaveNumber.W5,
    WaveNumber.W5: WaveNumber.WA,
    WaveNumber.WA: WaveNumber.WB,
    WaveNumber.WB: WaveNumber.WC,
    WaveNumber.WC: WaveNumber.W1,
}


@dataclass(frozen=True)
class PriceBar:
    """One OHLCV bar. timestamp is unix seconds."""
    timestamp: int
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
        }


@dataclass(frozen=True)
class Wave:
    """
    Represents a single Elliott Wave.

    A wave without end_timestamp/end_price is the in-progress wave and can
    never be complete. The wave type is always derived from the number.
    """
    number: WaveNumber
    start_timestamp: int
    start_price: float
    end_timestamp: Optional[int] = None
    end_price: Optional[float] = None
    is_complete: bool = True
    is_invalid: bool = False
    invalidation_price: Optional[float] = None
    invalidation_timestamp: Optional[int] = None
    subwaves: Tuple["Wave", ...] = ()

    def __post_init__(self):
        if self.is_complete and not self.has_end:
            raise ValueError(
                f"Wave {self.number.label} has no end and cannot be complete"
            )
        if self.end_timestamp is not None and self.end_timestamp < self.start_timestamp:
            raise ValueError(
                f"Wave {self.number.label} ends ({self.end_timestamp}) before it starts "
                f"({self.start_timestamp})"
            )

    @property
    def wave_type(self) -> WaveType:
        return self.number.wave_type

    @property
    def is_impulse(self) -> bool:
        return self.wave_type == WaveType.IMPULSE

    @property
    def has_end(self) -> bool:
        return self.end_timestamp is not None and self.end_price is not None

    @property
    def direction(self) -> Optional[Direction]:
        """Direction of the move, or None while in progress or flat."""
        if self.end_price is None or self.end_price == self.start_price:
            return None
        return Direction.UP if self.end_price > self.start_price else Direction.DOWN

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable camelCase mapping."""
        data: Dict[str, Any] = {
            "number": self.number.to_json(),
            "startTimestamp": self.start_timestamp,
            "startPrice": self.start_price,
            "type": self.wave_type.value,
            "isImpulse": self.is_impulse,
            "isComplete": self.is_complete,
            "isInvalid": self.is_invalid,
        }
        if self.end_timestamp is not None:
            data["endTimestamp"] = self.end_timestamp
        if self.end_price is not None:
            data["endPrice"] = self.end_price
        if self.invalidation_price is not None:
            data["invalidationPrice"] = self.invalidation_price
        if self.invalidation_timestamp is not None:
            data["invalidationTimestamp"] = self.invalidation_timestamp
        if self.subwaves:
            data["subwaves"] = [w.to_dict() for w in self.subwaves]
        return data


@dataclass(frozen=True)
class FibTarget:
    """A Fibonacci retracement or extension price level."""
    label: str
    price: float
    is_extension: bool
    is_critical: bool = False
    level: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "level": self.level,
            "price": self.price,
            "isExtension": self.is_extension,
            "isCritical": self.is_critical,
        }


@dataclass(frozen=True)
class WaveAnalysisResult:
    """
    Immutable snapshot returned to callers (cache and UI collaborators).

    current_wave, when present, is always an element of waves.
    """
    waves: Tuple[Wave, ...] = ()
    invalid_waves: Tuple[Wave, ...] = ()
    current_wave: Optional[Wave] = None
    fib_targets: Tuple[FibTarget, ...] = ()
    trend: str = "neutral"  # "bullish", "bearish" or "neutral"
    impulse_pattern: bool = False
    corrective_pattern: bool = False

    # Carried from external analyses
    analysis: Optional[str] = None
    stop_loss: Optional[float] = None
    confidence_level: Optional[str] = None

    # Diagnostics
    rule_violations: Tuple[str, ...] = ()
    warnings: Tuple[Warning, ...] = field(default=(), compare=False)

    def __post_init__(self):
        if self.current_wave is not None and self.current_wave not in self.waves:
            raise ValueError("current_wave must be one of waves")

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable camelCase mapping for caching and rendering."""
        data: Dict[str, Any] = {
            "waves": [w.to_dict() for w in self.waves],
            "invalidWaves": [w.to_dict() for w in self.invalid_waves],
            "currentWave": self.current_wave.to_dict() if self.current_wave else None,
            "fibTargets": [t.to_dict() for t in self.fib_targets],
            "trend": self.trend,
            "impulsePattern": self.impulse_pattern,
            "correctivePattern": self.corrective_pattern,
        }
        if self.analysis is not None:
            data["analysis"] = self.analysis
        if self.stop_loss is not None:
            data["stopLoss"] = self.stop_loss
        if self.confidence_level is not None:
            data["confidenceLevel"] = self.confidence_level
        if self.rule_violations:
            data["ruleViolations"] = list(self.rule_violations)
        return data
