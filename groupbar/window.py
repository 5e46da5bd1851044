"""
Windowing arithmetic shared by every indicator.

Computes where an incremental scan may safely start and where a trailing
window of bars begins, plus a few series helpers used for drawing.
"""

from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .series import BarSeries

# Fewer bars than this cannot characterize the spacing between bars
MIN_HISTORY = 3


def first_eligible_index(total_bar_count: int, requested_bar_count: int, buffer_size: int = 1) -> int | None:
    """
    Determine the first bar index that can be computed.

    Args:
        total_bar_count: Number of bars available
        requested_bar_count: Maximum number of bars to compute, `0` or less means unlimited
        buffer_size: Number of leading bars a single computation needs (default: 1)

    Returns:
        First eligible index, or None when there is not enough history

    Example:
        >>> first_eligible_index(5, 0)
        1
        >>> first_eligible_index(500, 100, buffer_size=3)
        400
        >>> first_eligible_index(2, 0) is None
        True
    """
    if total_bar_count < MIN_HISTORY or total_bar_count < buffer_size or buffer_size < 1:
        return None

    # Out of range means "everything": only the buffer is skipped
    if requested_bar_count <= 0 or requested_bar_count >= total_bar_count:
        return buffer_size

    return max(buffer_size, total_bar_count - requested_bar_count)


def window_start(end_index: int, window_size: int) -> int:
    """
    Get the inclusive start index of a trailing window ending at `end_index`.

    Raises:
        ValueError: If `end_index` is negative or `window_size` is less than 1
    """
    if end_index < 0:
        raise ValueError(f"end_index must be non-negative, got {end_index}")
    if window_size < 1:
        raise ValueError(f"window_size must be at least 1, got {window_size}")

    return end_index - window_size + 1


def timeframe_seconds(series: "BarSeries") -> int:
    """
    Get the bar period in seconds from the first three bars.

    The smaller of the two leading gaps is used since either one may span a
    market close.
    """
    if series.count < MIN_HISTORY:
        raise ValueError(f"At least {MIN_HISTORY} bars are required, got {series.count}")

    sec0 = int((series.open_time(1) - series.open_time(0)).total_seconds())
    sec1 = int((series.open_time(2) - series.open_time(1)).total_seconds())

    return min(sec0, sec1)


def draw_distance(series: "BarSeries", pip_size: float = 0, count: int = 10, factor: int = 5) -> float:
    """
    Get the offset used to place markers above or below bars.

    Averages the high-low range of the trailing bars and divides it by `factor`.

    Args:
        series: Bar source
        pip_size: Price of one pip, `0` returns the distance in price units
        count: Number of trailing bars to look back (default: 10)
        factor: Dispersion divisor (default: 5)

    Returns:
        Distance in pips when `pip_size > 0`, otherwise in price units
    """
    index = series.count - 1
    start = index - count

    if start < 0:
        start = 0
        count = index + 1

    total = sum(series.bar(i).high - series.bar(i).low for i in range(start, index + 1))
    average = total / (pip_size * count if pip_size > 0 else count)

    return average / factor


def format_open_time(time: datetime, short: bool = True) -> str:
    """Format a bar open time, the short form omits the year."""
    if short:
        return time.strftime("%m-%d %H:%M")
    return time.strftime("%Y-%m-%d %H:%M")
