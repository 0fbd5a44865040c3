"""
Boundary parsing for price bars.

Bars supplied by collaborators are expected to be sorted, unique and free of
null OHLC fields, but nothing here relies on it: every record is re-checked,
bad records are skipped with a MalformedRecordWarning, and the survivors are
sorted and de-duplicated.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, List, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from ..shared.defaults import EPOCH_MILLIS_THRESHOLD
from ..shared.exceptions import (
    InvalidInputError,
    MalformedRecordError,
    MalformedRecordWarning,
)
from ..shared.types import PriceBar


logger = logging.getLogger(__name__)

OHLC_FIELDS = ("open", "high", "low", "close")

BarsInput = Union[Sequence[Any], pd.DataFrame]


def coerce_timestamp(value: Any) -> int:
    """
    Convert an epoch number, ISO string or datetime into unix seconds.

    Epoch values larger than EPOCH_MILLIS_THRESHOLD are treated as
    milliseconds. Naive datetimes and date-only strings are taken as UTC.

    Raises:
        MalformedRecordError: If the value cannot be interpreted as a time
    """
    if value is None or isinstance(value, bool):
        raise MalformedRecordError(f"Not a timestamp: {value!r}")

    if isinstance(value, (int, float, np.integer, np.floating)):
        if not np.isfinite(value):
            raise MalformedRecordError(f"Timestamp is not finite: {value!r}")
        seconds = float(value)
        if abs(seconds) > EPOCH_MILLIS_THRESHOLD:
            seconds /= 1000.0
        return int(seconds)

    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise MalformedRecordError("Empty timestamp string")
        try:
            return coerce_timestamp(float(text))
        except ValueError:
            pass
        try:
            value = pd.Timestamp(text)
        except (ValueError, TypeError) as e:
            raise MalformedRecordError(f"Unparsable timestamp {value!r}: {e}") from e

    if isinstance(value, (datetime, date, np.datetime64)):
        value = pd.Timestamp(value)

    if isinstance(value, pd.Timestamp):
        if pd.isna(value):
            raise MalformedRecordError("Timestamp is NaT")
        if value.tzinfo is None:
            value = value.tz_localize("UTC")
        return int(value.timestamp())

    raise MalformedRecordError(f"Unsupported timestamp type {type(value).__name__}")


def _coerce_price(record: Mapping, name: str) -> float:
    value = record.get(name)
    if value is None:
        raise MalformedRecordError(f"missing '{name}'")
    try:
        price = float(value)
    except (TypeError, ValueError):
        raise MalformedRecordError(f"non-numeric '{name}': {value!r}") from None
    if pd.isna(price):
        raise MalformedRecordError(f"'{name}' is NaN")
    return price


def parse_bar(record: Any) -> PriceBar:
    """
    Parse one bar from a PriceBar or a mapping.

    Mapping keys are matched case-insensitively; 'date' or 'time' are accepted
    in place of 'timestamp'. Volume defaults to 0.

    Raises:
        MalformedRecordError: If a required field is missing or invalid
    """
    if isinstance(record, PriceBar):
        record = record.to_dict()
    if not isinstance(record, Mapping):
        raise MalformedRecordError(f"Bar record is not a mapping: {type(record).__name__}")

    fields = {str(k).lower(): v for k, v in record.items()}
    raw_time = next(
        (fields[k] for k in ("timestamp", "date", "time", "datetime") if fields.get(k) is not None),
        None,
    )
    if raw_time is None:
        raise MalformedRecordError("missing 'timestamp'")

    prices = {name: _coerce_price(fields, name) for name in OHLC_FIELDS}
    volume = fields.get("volume")
    try:
        volume = 0.0 if volume is None or pd.isna(volume) else float(volume)
    except (TypeError, ValueError):
        volume = 0.0

    return PriceBar(timestamp=coerce_timestamp(raw_time), volume=volume, **prices)


def _records_from_frame(df: pd.DataFrame) -> List[dict]:
    frame = df.rename(columns=lambda c: str(c).lower())
    if "timestamp" not in frame.columns and "date" not in frame.columns:
        if not isinstance(frame.index, pd.DatetimeIndex):
            raise InvalidInputError(
                "DataFrame bars need a DatetimeIndex or a 'timestamp'/'date' column"
            )
        frame = frame.assign(timestamp=frame.index)
    return frame.to_dict(orient="records")


def parse_bars(bars: BarsInput) -> Tuple[List[PriceBar], List[MalformedRecordWarning]]:
    """
    Parse, sort and de-duplicate a bar series.

    Args:
        bars: List/tuple of PriceBar objects or mappings, or an OHLCV DataFrame

    Returns:
        (bars sorted ascending by timestamp, warnings for skipped records)

    Raises:
        InvalidInputError: If bars is not a list, tuple or DataFrame
    """
    if isinstance(bars, pd.DataFrame):
        records = _records_from_frame(bars)
    elif isinstance(bars, (list, tuple)):
        records = bars
    else:
        raise InvalidInputError(
            f"bars must be a list, tuple or DataFrame, got {type(bars).__name__}"
        )

    warnings: List[MalformedRecordWarning] = []
    by_time = {}
    for i, record in enumerate(records):
        try:
            bar = parse_bar(record)
        except MalformedRecordError as e:
            message = f"Skipping bar record {i}: {e}"
            logger.warning(message)
            warnings.append(MalformedRecordWarning(message))
            continue
        # Later duplicates replace earlier ones
        by_time[bar.timestamp] = bar

    parsed = [by_time[ts] for ts in sorted(by_time)]
    duplicates = len(records) - len(warnings) - len(parsed)
    if duplicates:
        logger.debug(f"Collapsed {duplicates} duplicate bar timestamps")
    return parsed, warnings
