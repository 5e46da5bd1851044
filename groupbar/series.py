"""
Bar sources read by the scanners.

`BarSeries` is the read-only view the core needs from a host. `FrameBarSeries`
is a ready-made implementation backed by an OHLC DataFrame that a live host can
keep appending to.
"""

from datetime import datetime
from typing import Protocol, runtime_checkable

from pandas import DataFrame as PandasDataFrame
from polars import DataFrame as PolarsDataFrame

from .base import to_polars, validate_ohlc
from .candle import Bar


@runtime_checkable
class BarSeries(Protocol):
    """Read-only bar source owned by the host."""

    @property
    def count(self) -> int: ...

    @property
    def is_last_bar_open(self) -> bool: ...

    def bar(self, index: int) -> Bar: ...

    def open_time(self, index: int) -> datetime: ...


class FrameBarSeries:
    """
    Bar series backed by an OHLC DataFrame.

    Columns are materialized once so that per-index reads stay cheap during an
    incremental scan. New bars are appended at the tail, and the tail bar can be
    updated in place while it is still open.

    Example:
        >>> series = FrameBarSeries(df, last_bar_open=True)
        >>> series.update_last(high=1.1012, low=1.0990, close=1.1005)
        >>> series.append(Bar(1.1005, 1.1010, 1.1001, 1.1008, next_time))
    """

    def __init__(self, data: PolarsDataFrame | PandasDataFrame, last_bar_open: bool = False):
        df = to_polars(data)
        validate_ohlc(df)

        self._open = df["open"].cast(float).to_list()
        self._high = df["high"].cast(float).to_list()
        self._low = df["low"].cast(float).to_list()
        self._close = df["close"].cast(float).to_list()
        self._time = df["timestamp"].to_list()
        self._last_bar_open = last_bar_open

    @property
    def count(self) -> int:
        return len(self._time)

    @property
    def is_last_bar_open(self) -> bool:
        return self._last_bar_open

    def bar(self, index: int) -> Bar:
        self._check_index(index)
        return Bar(
            open=self._open[index],
            high=self._high[index],
            low=self._low[index],
            close=self._close[index],
            open_time=self._time[index],
        )

    def open_time(self, index: int) -> datetime:
        self._check_index(index)
        return self._time[index]

    def append(self, bar: Bar, is_open: bool = True) -> int:
        """
        Append a new bar at the tail.

        Args:
            bar: Bar to append, its open time must be after the current tail
            is_open: Whether the new bar is still accumulating (default: True)

        Returns:
            Index of the appended bar
        """
        if self._time and bar.open_time <= self._time[-1]:
            raise ValueError(f"Bar open time {bar.open_time} must be after the last bar at {self._time[-1]}")
        _check_prices(bar.open, bar.high, bar.low, bar.close)

        self._open.append(float(bar.open))
        self._high.append(float(bar.high))
        self._low.append(float(bar.low))
        self._close.append(float(bar.close))
        self._time.append(bar.open_time)
        self._last_bar_open = is_open

        return self.count - 1

    def update_last(self, high: float, low: float, close: float) -> None:
        """Update the still-open tail bar with new extremes and close."""
        if not self._last_bar_open:
            raise ValueError("The last bar is closed and cannot be updated")

        _check_prices(self._open[-1], high, low, close)
        self._high[-1] = float(high)
        self._low[-1] = float(low)
        self._close[-1] = float(close)

    def close_last(self) -> None:
        """Mark the tail bar as finalized."""
        self._last_bar_open = False

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._time):
            raise IndexError(f"Bar index {index} out of range for series of {len(self._time)} bars")


def _check_prices(open: float, high: float, low: float, close: float) -> None:
    if not (low <= open <= high and low <= close <= high):
        raise ValueError(f"Invalid price data: open={open}, high={high}, low={low}, close={close}")
