"""
Wave sources and their normalization into canonical Wave objects.

Waves reach the validator from two places: the local labeler, which already
produces canonical waves, and external analyses, whose records use varying
field names (startTime vs startTimestamp, isInvalidated vs isInvalid, ...).
Each source kind is its own variant with its own normalize(); nothing past
this module looks at raw field names.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple, Union

import pandas as pd

from ..data.bars import coerce_timestamp
from ..shared.exceptions import (
    InvalidInputError,
    MalformedRecordError,
    MalformedRecordWarning,
)
from ..shared.types import Wave, WaveNumber


logger = logging.getLogger(__name__)

NUMBER_KEYS = ("number", "wave", "label")
START_TIME_KEYS = ("startTimestamp", "start_timestamp", "startTime", "start_time", "startDate")
END_TIME_KEYS = ("endTimestamp", "end_timestamp", "endTime", "end_time", "endDate")
START_PRICE_KEYS = ("startPrice", "start_price")
END_PRICE_KEYS = ("endPrice", "end_price")
COMPLETE_KEYS = ("isComplete", "is_complete")
INVALID_KEYS = ("isInvalid", "isInvalidated", "is_invalid")
INVALIDATION_PRICE_KEYS = ("invalidationPrice", "invalidationLevel", "invalidation_price")
INVALIDATION_TIME_KEYS = ("invalidationTimestamp", "invalidationTime", "invalidation_timestamp")
TRUE_STRINGS = ("true", "yes", "y", "1")


def first_value(payload: Mapping, keys: Sequence[str]) -> Any:
    for key in keys:
        value = payload.get(key)
        if value is not None and value != "":
            return value
    return None


def _price(value: Any, name: str) -> float:
    try:
        price = float(value)
    except (TypeError, ValueError):
        raise MalformedRecordError(f"non-numeric {name}: {value!r}") from None
    if pd.isna(price):
        raise MalformedRecordError(f"{name} is NaN")
    return price


def _flag(value: Any) -> bool:
    """Read a boolean field that may arrive as a string ("false", "no", "0")."""
    if isinstance(value, str):
        return value.strip().lower() in TRUE_STRINGS
    return bool(value)


def _optional_price(value: Any, name: str) -> Optional[float]:
    if value is None:
        return None
    try:
        return _price(value, name)
    except MalformedRecordError as e:
        logger.debug(f"Ignoring {e}")
        return None


@dataclass(frozen=True)
class LocalWave:
    """A wave produced by the local labeler. Already canonical."""
    wave: Wave

    def normalize(self, previous: Optional[WaveNumber] = None) -> Wave:
        return self.wave


@dataclass(frozen=True)
class ExternalWaveRecord:
    """A wave record from an external analysis, in any supported spelling."""
    payload: Mapping
    force_invalid: bool = False

    def normalize(self, previous: Optional[WaveNumber] = None) -> Wave:
        """
        Convert the record into a canonical Wave.

        Args:
            previous: Label of the wave normalized just before this one, used
                when the record carries a start time but no number

        Raises:
            MalformedRecordError: If the record cannot become a Wave
        """
        payload = self.payload
        if not isinstance(payload, Mapping):
            raise MalformedRecordError(f"record is not an object: {type(payload).__name__}")
        raw_number = first_value(payload, NUMBER_KEYS)
        raw_start = first_value(payload, START_TIME_KEYS)
        raw_end = first_value(payload, END_TIME_KEYS)

        if raw_number is None and raw_start is None and raw_end is None:
            raise MalformedRecordError("record has neither a wave number nor a timestamp")

        if raw_number is None:
            number = previous.next() if previous is not None else WaveNumber.W1
            logger.debug(f"Record without number labeled {number.label} from its position")
        else:
            try:
                number = WaveNumber.parse(raw_number)
            except ValueError as e:
                raise MalformedRecordError(str(e)) from e

        if raw_start is None:
            raise MalformedRecordError(f"wave {number.label} has no start time")
        start_timestamp = coerce_timestamp(raw_start)

        raw_start_price = first_value(payload, START_PRICE_KEYS)
        if raw_start_price is None:
            raise MalformedRecordError(f"wave {number.label} has no start price")
        start_price = _price(raw_start_price, "startPrice")

        end_timestamp = coerce_timestamp(raw_end) if raw_end is not None else None
        end_price = _optional_price(first_value(payload, END_PRICE_KEYS), "endPrice")
        has_end = end_timestamp is not None and end_price is not None

        complete_flag = first_value(payload, COMPLETE_KEYS)
        is_complete = _flag(complete_flag) if complete_flag is not None else True

        raw_invalidation_time = first_value(payload, INVALIDATION_TIME_KEYS)
        try:
            invalidation_timestamp = (
                coerce_timestamp(raw_invalidation_time)
                if raw_invalidation_time is not None else None
            )
        except MalformedRecordError:
            invalidation_timestamp = None

        try:
            return Wave(
                number=number,
                start_timestamp=start_timestamp,
                start_price=start_price,
                end_timestamp=end_timestamp,
                end_price=end_price,
                is_complete=is_complete and has_end,
                is_invalid=self.force_invalid or any(_flag(payload.get(k)) for k in INVALID_KEYS),
                invalidation_price=_optional_price(
                    first_value(payload, INVALIDATION_PRICE_KEYS), "invalidationPrice"
                ),
                invalidation_timestamp=invalidation_timestamp,
                subwaves=tuple(self._subwaves()),
            )
        except ValueError as e:
            raise MalformedRecordError(str(e)) from e

    def _subwaves(self) -> List[Wave]:
        raw = self.payload.get("subwaves") or []
        if not isinstance(raw, (list, tuple)):
            return []
        subwaves, _ = normalize_sources(raw)
        return subwaves


RawWaveSource = Union[LocalWave, ExternalWaveRecord]


def to_source(item: Any) -> RawWaveSource:
    """
    Wrap a wave or a raw record in its source variant.

    Raises:
        InvalidInputError: If the item is neither a Wave, a mapping nor a source
    """
    if isinstance(item, (LocalWave, ExternalWaveRecord)):
        return item
    if isinstance(item, Wave):
        return LocalWave(item)
    if isinstance(item, Mapping):
        return ExternalWaveRecord(item)
    raise InvalidInputError(f"Unsupported wave source: {type(item).__name__}")


def normalize_sources(
    items: Sequence[Any],
) -> Tuple[List[Wave], List[MalformedRecordWarning]]:
    """
    Normalize a batch of wave sources, skipping malformed records.

    Args:
        items: Waves, raw mappings or source variants

    Returns:
        (canonical waves in input order, warnings for skipped records)
    """
    waves: List[Wave] = []
    warnings: List[MalformedRecordWarning] = []
    previous: Optional[WaveNumber] = None

    for i, item in enumerate(items):
        try:
            wave = to_source(item).normalize(previous)
        except (InvalidInputError, MalformedRecordError) as e:
            message = f"Skipping wave record {i}: {e}"
            logger.warning(message)
            warnings.append(MalformedRecordWarning(message))
            continue
        waves.append(wave)
        previous = wave.number

    return waves, warnings
