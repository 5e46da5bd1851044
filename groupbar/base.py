"""
Base component classes for groupbar.

Indicators accept OHLC bars as polars or pandas DataFrames. This module holds
the conversion to polars, the integrity checks run before a batch scan and the
abstract base class the indicators share.
"""

from abc import ABC, abstractmethod

from pandas import DataFrame as PandasDataFrame
from polars import DataFrame as PolarsDataFrame
from polars import col, from_pandas

# Columns every bar frame must carry
REQUIRED_COLUMNS = ["timestamp", "open", "high", "low", "close"]

# Integrity checks run on every bar frame, by failure label
OHLC_CHECKS = {
    "high >= low": col("high") >= col("low"),
    "high >= open": col("high") >= col("open"),
    "high >= close": col("high") >= col("close"),
    "low <= open": col("low") <= col("open"),
    "low <= close": col("low") <= col("close"),
    "timestamp strictly increasing": col("timestamp").diff().drop_nulls().dt.total_microseconds() > 0,
}


def to_polars(data: PolarsDataFrame | PandasDataFrame) -> PolarsDataFrame:
    """
    Return `data` as a polars DataFrame, converting pandas input.

    Raises:
        TypeError: If data is neither a pandas nor a polars DataFrame
    """
    if isinstance(data, PolarsDataFrame):
        return data
    if isinstance(data, PandasDataFrame):
        return from_pandas(data)
    raise TypeError(f"Unsupported data type: {type(data)}. Expected pandas.DataFrame or polars.DataFrame")


def validate_ohlc(df: PolarsDataFrame) -> None:
    """
    Check that a bar frame has the OHLC columns and consistent prices.

    Every bar must have its open and close inside its high-low range, and open
    times must strictly increase. An empty frame with the right columns passes.

    Raises:
        ValueError: Naming the missing columns or every failed check
    """
    missing = [name for name in REQUIRED_COLUMNS if name not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")

    if df.is_empty():
        return

    results = df.select([check.all().alias(label) for label, check in OHLC_CHECKS.items()]).row(0, named=True)
    failed = [label for label, passed in results.items() if passed is False]
    if failed:
        raise ValueError(f"Invalid price data: failed validations: {failed}")


class Component(ABC):
    """Base class for indicators that can run over a whole bar frame."""

    @abstractmethod
    def process(self, data: PolarsDataFrame | PandasDataFrame) -> PolarsDataFrame:
        """
        Run the indicator over every bar of `data`.

        Args:
            data: Bar frame with timestamp, open, high, low and close columns

        Returns:
            Polars DataFrame with the indicator output
        """

    @abstractmethod
    def validate_input(self, data: PolarsDataFrame | PandasDataFrame) -> None:
        """
        Check a bar frame before processing.

        Raises:
            ValueError: If the frame cannot be processed
        """

    def _convert_to_polars(self, data: PolarsDataFrame | PandasDataFrame) -> PolarsDataFrame:
        return to_polars(data)
