"""
Merging of locally detected and externally supplied wave analyses.

External analyses come from a language model and arrive as a JSON object, a
JSON string (sometimes wrapped in prose or a code fence) or plain text. The
external sequence takes precedence once it survives normalization and bounds
validation; the local sequence is the fallback. Text that is not structured
data degrades to a minimal result that carries the text and a trend guessed
from the words "bullish"/"bearish".
"""
from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .sources import (
    END_PRICE_KEYS,
    END_TIME_KEYS,
    START_PRICE_KEYS,
    START_TIME_KEYS,
    ExternalWaveRecord,
    LocalWave,
    NUMBER_KEYS,
    first_value,
)
from .validator import ValidationReport, WaveValidator
from ..data.bars import BarsInput
from ..indicators.patterns import (
    check_impulse_rules,
    determine_trend,
    has_corrective_pattern,
    has_impulse_pattern,
)
from ..shared.defaults import CORRECTIVE_PATTERN_MIN_WAVES, IMPULSE_PATTERN_MIN_WAVES
from ..shared.exceptions import AnalysisWarning, UnparsableAnalysisWarning
from ..shared.types import Wave, WaveAnalysisResult, WaveNumber
from ..targets.target_calculator import FibonacciTargetCalculator


logger = logging.getLogger(__name__)

TRENDS = ("bullish", "bearish", "neutral")
WAVE_LIST_KEYS = ("completedWaves", "waves", "waveSequence")

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
_TREND_WORD_RE = re.compile(r"bullish|bearish", re.IGNORECASE)


@dataclass
class ExternalAnalysis:
    """An external analysis payload after parsing."""
    parsed: bool
    records: List[Mapping] = field(default_factory=list)
    invalid_records: List[Mapping] = field(default_factory=list)
    trend: Optional[str] = None
    analysis: Optional[str] = None
    stop_loss: Optional[float] = None
    confidence_level: Optional[str] = None
    warnings: List[AnalysisWarning] = field(default_factory=list)

    def sources(self) -> List[ExternalWaveRecord]:
        live = [ExternalWaveRecord(r) for r in self.records]
        invalid = [ExternalWaveRecord(r, force_invalid=True) for r in self.invalid_records]
        return live + invalid


def trend_from_text(text: str) -> str:
    """Earliest occurrence of 'bullish' or 'bearish' wins; neutral if neither."""
    match = _TREND_WORD_RE.search(text or "")
    return match.group(0).lower() if match else "neutral"


def _load_json(text: str) -> Any:
    """Parse JSON from raw text, a code fence, or the outermost braces in prose."""
    candidates = [text]
    candidates.extend(m.strip() for m in _FENCE_RE.findall(text))
    for opener, closer in (("{", "}"), ("[", "]")):
        start, end = text.find(opener), text.rfind(closer)
        if 0 <= start < end:
            candidates.append(text[start:end + 1])

    for candidate in candidates:
        for attempt in (candidate, _TRAILING_COMMA_RE.sub(r"\1", candidate)):
            try:
                return json.loads(attempt)
            except ValueError:
                continue
    raise ValueError("no JSON document found")


def _unparsable(text: str, reason: str) -> ExternalAnalysis:
    message = f"External analysis is not structured data ({reason}); using text fallback"
    logger.warning(message)
    return ExternalAnalysis(
        parsed=False,
        trend=trend_from_text(text),
        analysis=text,
        warnings=[UnparsableAnalysisWarning(message)],
    )


def _anchor_current_wave(current: Mapping, completed: Sequence[Mapping]) -> Mapping:
    """
    Start a current wave 2-5 or B-C where the last completed wave ended.

    Waves 1 and A open a new phase and keep their own start.
    """
    if not completed:
        return current
    try:
        number = WaveNumber.parse(first_value(current, NUMBER_KEYS))
    except ValueError:
        return current
    if number in (WaveNumber.W1, WaveNumber.WA):
        return current

    last = completed[-1]
    if not isinstance(last, Mapping):
        return current
    end_time, end_price = first_value(last, END_TIME_KEYS), first_value(last, END_PRICE_KEYS)
    if end_time is None or end_price is None:
        return current

    anchored = {k: v for k, v in current.items() if k not in START_TIME_KEYS + START_PRICE_KEYS}
    anchored.update(startTimestamp=end_time, startPrice=end_price)
    return anchored


def _as_float(value: Any) -> Optional[float]:
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _from_mapping(payload: Mapping) -> ExternalAnalysis:
    records: List[Mapping] = []
    for key in WAVE_LIST_KEYS:
        value = payload.get(key)
        if isinstance(value, list) and value:
            records = list(value)
            break

    current = payload.get("currentWave")
    if isinstance(current, Mapping):
        current = _anchor_current_wave(current, records)
        if not records or records[-1] != current:
            records.append(current)

    invalid = payload.get("invalidWaves")
    trend = str(payload.get("trend") or "").strip().lower()
    targets = payload.get("targets") if isinstance(payload.get("targets"), Mapping) else {}
    analysis = payload.get("analysis") or payload.get("explanation")
    confidence = payload.get("confidenceLevel")

    return ExternalAnalysis(
        parsed=True,
        records=records,
        invalid_records=list(invalid) if isinstance(invalid, list) else [],
        trend=trend if trend in TRENDS else None,
        analysis=str(analysis) if analysis is not None else None,
        stop_loss=_as_float(payload.get("stopLoss", targets.get("stopLoss"))),
        confidence_level=str(confidence) if confidence is not None else None,
    )


def _has_content(ext: ExternalAnalysis) -> bool:
    """True when parsed JSON holds wave records, a trend or analysis text."""
    records = ext.records + ext.invalid_records
    return (
        any(isinstance(r, Mapping) for r in records)
        or ext.trend is not None
        or ext.analysis is not None
    )


def parse_external_analysis(payload: Any) -> Optional[ExternalAnalysis]:
    """
    Parse an external analysis payload.

    Args:
        payload: Mapping, list of wave records, JSON text, freeform text or None

    Returns:
        ExternalAnalysis (parsed=False for freeform text), or None when there
        is no payload at all
    """
    if payload is None:
        return None
    if isinstance(payload, ExternalAnalysis):
        return payload

    if isinstance(payload, (str, bytes)):
        text = payload.decode("utf-8", errors="replace") if isinstance(payload, bytes) else payload
        if not text.strip():
            return None
        try:
            payload = _load_json(text)
        except ValueError as e:
            return _unparsable(text, str(e))
        if not isinstance(payload, (Mapping, list)):
            return _unparsable(text, f"JSON {type(payload).__name__} is not an analysis")
        ext = parse_external_analysis(payload)
        if not _has_content(ext):
            # A bracketed fragment inside prose, e.g. "supports [95, 90]"
            return _unparsable(text, "JSON fragment carries no wave records")
        return ext

    if isinstance(payload, Mapping):
        return _from_mapping(payload)
    if isinstance(payload, (list, tuple)):
        return ExternalAnalysis(parsed=True, records=list(payload))
    return _unparsable(str(payload), f"unsupported payload type {type(payload).__name__}")


class WaveMerger:
    """Chooses between local and external wave sequences and builds the result."""

    def __init__(
        self,
        validator: Optional[WaveValidator] = None,
        target_calculator: Optional[FibonacciTargetCalculator] = None,
        impulse_min_waves: int = IMPULSE_PATTERN_MIN_WAVES,
        corrective_min_waves: int = CORRECTIVE_PATTERN_MIN_WAVES,
    ):
        self.validator = validator or WaveValidator()
        self.target_calculator = target_calculator or FibonacciTargetCalculator()
        self.impulse_min_waves = impulse_min_waves
        self.corrective_min_waves = corrective_min_waves

    def merge(
        self,
        local_waves: Sequence[Wave],
        external: Any,
        bars: BarsInput,
        warnings: Sequence[AnalysisWarning] = (),
    ) -> WaveAnalysisResult:
        """
        Reconcile local and external sequences into one result.

        Args:
            local_waves: Waves from the local labeler (may be empty)
            external: Raw or parsed external analysis, or None
            bars: Authoritative price history
            warnings: Diagnostics collected by earlier stages

        Returns:
            Immutable WaveAnalysisResult
        """
        ext = parse_external_analysis(external)
        collected = list(warnings)
        if ext is not None:
            collected.extend(ext.warnings)

        if ext is not None and not ext.parsed and not local_waves:
            return self.fallback_result(ext, collected)

        report, source = self._choose(local_waves, ext, bars)
        collected.extend(report.warnings)
        logger.info(
            f"Using {source} wave sequence: {len(report.waves)} live, "
            f"{len(report.invalid_waves)} invalidated"
        )
        return self._build_result(report, ext, collected)

    def fallback_result(
        self,
        ext: ExternalAnalysis,
        warnings: Sequence[AnalysisWarning] = (),
    ) -> WaveAnalysisResult:
        """Minimal result for freeform text: no waves, the text, a guessed trend."""
        return WaveAnalysisResult(
            trend=ext.trend or "neutral",
            analysis=ext.analysis,
            warnings=tuple(warnings),
        )

    def _choose(
        self,
        local_waves: Sequence[Wave],
        ext: Optional[ExternalAnalysis],
        bars: BarsInput,
    ) -> Tuple[ValidationReport, str]:
        local_sources = [LocalWave(w) for w in local_waves]
        if ext is None or not ext.parsed or not (ext.records or ext.invalid_records):
            return self.validator.validate(local_sources, bars), "local"

        external_report = self.validator.validate(ext.sources(), bars)
        if not external_report.waves and not external_report.invalid_waves:
            logger.warning("External analysis produced no usable waves; using local sequence")
            local_report = self.validator.validate(local_sources, bars)
            local_report.warnings[:0] = external_report.warnings
            return local_report, "local"

        if external_report.entirely_out_of_range and local_waves:
            logger.warning("External waves all predate the data window; using local sequence")
            local_report = self.validator.validate(local_sources, bars)
            local_report.warnings[:0] = external_report.warnings
            return local_report, "local"

        return external_report, "external"

    def _build_result(
        self,
        report: ValidationReport,
        ext: Optional[ExternalAnalysis],
        warnings: List[AnalysisWarning],
    ) -> WaveAnalysisResult:
        waves = report.waves
        trend = determine_trend(waves)
        if trend == "neutral" and ext is not None and ext.trend:
            trend = ext.trend

        return WaveAnalysisResult(
            waves=tuple(waves),
            invalid_waves=tuple(report.invalid_waves),
            current_wave=report.current_wave,
            fib_targets=tuple(self.target_calculator.targets_for_waves(waves)),
            trend=trend,
            impulse_pattern=has_impulse_pattern(waves, self.impulse_min_waves),
            corrective_pattern=has_corrective_pattern(waves, self.corrective_min_waves),
            analysis=ext.analysis if ext else None,
            stop_loss=ext.stop_loss if ext else None,
            confidence_level=ext.confidence_level if ext else None,
            rule_violations=tuple(check_impulse_rules(waves)),
            warnings=tuple(warnings),
        )


def result_to_json(result: WaveAnalysisResult, indent: Optional[int] = 2) -> str:
    """Serialize a result for caching or display."""
    data: Dict[str, Any] = result.to_dict()
    return json.dumps(data, indent=indent)
