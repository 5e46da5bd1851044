"""
Composite candle folding and classification.

A composite candle is the single synthetic bar formed by folding a contiguous
run of bars into one high/low/open/close shape. Classification measures how
much of the composite range is taken by the body plus its nearer wick.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .series import BarSeries


@dataclass(frozen=True)
class Bar:
    """One OHLC price observation."""

    open: float
    high: float
    low: float
    close: float
    open_time: datetime


@dataclass(frozen=True)
class CompositeCandle:
    """Folded high/low/open/close of a run of bars with its classification."""

    high_price: float
    low_price: float
    open_price: float
    close_price: float
    upper_price: float  # max(open, close), open wins ties
    lower_price: float
    group_height: float  # high - low
    core_height: float  # body plus the nearer wick
    core_percent: float  # nan for a flat composite
    is_up: bool  # True when the body sits near the high
    is_signal: bool

    @property
    def range(self) -> float:
        return self.group_height

    @classmethod
    def from_prices(
        cls, high: float, low: float, open: float, close: float, max_body_percent: float, min_height: float
    ) -> "CompositeCandle":
        """
        Classify already folded prices.

        Args:
            high: Highest high of the run
            low: Lowest low of the run
            open: Open of the first bar
            close: Close of the last bar
            max_body_percent: Largest core percentage accepted as a signal (0-100)
            min_height: Smallest composite range accepted as a signal, in price units

        Returns:
            Classified CompositeCandle
        """
        if close > open:
            upper, lower = close, open
        else:
            upper, lower = open, close

        upper_to_low = upper - low
        lower_to_high = high - lower

        # Smaller upper_to_low: body near the low (inverted hammer shape)
        if upper_to_low < lower_to_high:
            core_height = upper_to_low
            is_up = False
        else:
            core_height = lower_to_high
            is_up = True

        group_height = high - low

        if group_height > 0:
            core_percent = core_height * 100 / group_height
            is_signal = group_height >= min_height and core_percent <= max_body_percent
        else:
            core_percent = math.nan
            is_signal = False

        return cls(
            high_price=high,
            low_price=low,
            open_price=open,
            close_price=close,
            upper_price=upper,
            lower_price=lower,
            group_height=group_height,
            core_height=core_height,
            core_percent=core_percent,
            is_up=is_up,
            is_signal=is_signal,
        )


def fold(bars: "BarSeries", start: int, end: int) -> tuple[float, float, float, float]:
    """
    Fold bars `[start, end]` into a single shape.

    Returns:
        Tuple of `(high, low, open, close)`

    Raises:
        ValueError: If the slice is empty or outside the series
    """
    if start > end:
        raise ValueError(f"start ({start}) must not be greater than end ({end})")
    if start < 0 or end >= bars.count:
        raise ValueError(f"Slice [{start}, {end}] is outside the series of {bars.count} bars")

    first = bars.bar(start)
    high = first.high
    low = first.low

    for i in range(start + 1, end + 1):
        bar = bars.bar(i)
        if bar.high > high:
            high = bar.high
        if bar.low < low:
            low = bar.low

    return high, low, first.open, bars.bar(end).close


def classify(
    bars: "BarSeries", start: int, end: int, max_body_percent: float, min_height: float
) -> CompositeCandle:
    """
    Fold bars `[start, end]` and classify the composite.

    Args:
        bars: Bar source
        start: Index of the first bar in the run
        end: Index of the last bar in the run
        max_body_percent: Largest core percentage accepted as a signal (0-100)
        min_height: Smallest composite range accepted as a signal, in price units

    Returns:
        Classified CompositeCandle

    Raises:
        ValueError: If the slice or the thresholds are out of range

    Example:
        >>> candle = classify(series, 3, 3, max_body_percent=90, min_height=10)
        >>> candle.core_percent, candle.is_up, candle.is_signal
        (90.0, True, True)
    """
    if not 0 <= max_body_percent <= 100:
        raise ValueError(f"max_body_percent must be within [0, 100], got {max_body_percent}")
    if min_height < 0:
        raise ValueError(f"min_height must be non-negative, got {min_height}")

    high, low, open, close = fold(bars, start, end)
    return CompositeCandle.from_prices(high, low, open, close, max_body_percent, min_height)
