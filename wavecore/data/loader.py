"""
CSV data loader for OHLCV bar series.

Loads bars exported by the historical-data collaborator with support for:
- Date index or explicit timestamp column
- Date range filtering
- Conversion into PriceBar lists through the bar parser
"""
import logging
import pandas as pd
from pathlib import Path
from typing import List, Optional, Union
from datetime import datetime

from .bars import parse_bars
from ..shared.types import PriceBar


logger = logging.getLogger(__name__)

DateLike = Union[str, datetime, pd.Timestamp]


class DataLoader:
    """
    Loads OHLCV data from CSV files.

    Supports date range filtering and conversion to PriceBar lists.
    """

    def __init__(self, data_path: Union[str, Path]):
        """
        Initialize the data loader.

        Args:
            data_path: Path to the CSV file containing the data
        """
        self.data_path = Path(data_path)
        if not self.data_path.exists():
            raise FileNotFoundError(f"Data file not found: {self.data_path}")

    def load(
        self,
        start_date: Optional[DateLike] = None,
        end_date: Optional[DateLike] = None,
    ) -> pd.DataFrame:
        """
        Load data from CSV file with optional filtering.

        Args:
            start_date: Start date for filtering (inclusive). If None, no start filter.
            end_date: End date for filtering (inclusive). If None, no end filter.

        Returns:
            DataFrame with datetime index and OHLCV columns
        """
        df = pd.read_csv(self.data_path)

        # Epoch 'timestamp' column or first column as dates
        lowered = {str(c).lower(): c for c in df.columns}
        if "timestamp" in lowered:
            column = lowered["timestamp"]
            index = pd.to_datetime(df[column], unit="s", utc=True)
            df = df.drop(columns=[column])
        else:
            column = df.columns[0]
            index = pd.to_datetime(df[column], utc=True)
            df = df.drop(columns=[column])
        df.index = pd.DatetimeIndex(index, name="Date")

        df = df.sort_index()

        if start_date is not None:
            df = df[df.index >= _as_utc(start_date)]

        if end_date is not None:
            df = df[df.index <= _as_utc(end_date)]

        logger.debug(f"Loaded {len(df)} rows from {self.data_path}")
        return df

    def load_bars(
        self,
        start_date: Optional[DateLike] = None,
        end_date: Optional[DateLike] = None,
    ) -> List[PriceBar]:
        """
        Load data and convert it to PriceBar objects.

        Rows with missing OHLC values are skipped with a warning.
        """
        bars, warnings = parse_bars(self.load(start_date=start_date, end_date=end_date))
        if warnings:
            logger.info(f"Skipped {len(warnings)} malformed rows in {self.data_path}")
        return bars


def _as_utc(value: DateLike) -> pd.Timestamp:
    ts = pd.Timestamp(value)
    return ts.tz_localize("UTC") if ts.tzinfo is None else ts.tz_convert("UTC")
