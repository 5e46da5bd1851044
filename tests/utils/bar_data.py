"""
Test data utilities for groupbar tests.

Provides consistent bar generation functions across all test modules.
"""

from datetime import datetime, timedelta

import polars as pl

from groupbar.series import FrameBarSeries

# Small neutral bar: range 2, body at the middle
FILLER = (100.0, 101.0, 99.0, 100.0)


def create_timestamp_series(
    start: str = "2024-01-01", periods: int = 10, freq_minutes: int = 60, timezone: str | None = None
) -> list[datetime]:
    """
    Create a series of timestamps for test data.

    Args:
        start: Start date string
        periods: Number of timestamps to generate
        freq_minutes: Frequency in minutes between timestamps
        timezone: Timezone string (optional)

    Returns:
        List of datetime objects
    """
    if len(start) == 10:  # Date only (YYYY-MM-DD)
        start_dt = datetime.fromisoformat(f"{start} 00:00:00")
    else:  # DateTime string (YYYY-MM-DD HH:MM:SS)
        start_dt = datetime.fromisoformat(start)

    timestamps = [start_dt + timedelta(minutes=i * freq_minutes) for i in range(periods)]

    if timezone:
        import pytz

        tz = pytz.timezone(timezone)
        timestamps = [tz.localize(ts) for ts in timestamps]

    return timestamps


def create_bar_frame(
    bars: list[tuple[float, float, float, float]],
    start: str = "2024-01-01",
    freq_minutes: int = 60,
    timestamps: list[datetime] | None = None,
) -> pl.DataFrame:
    """
    Create an OHLC DataFrame from `(open, high, low, close)` tuples.

    Args:
        bars: Bar prices in order
        start: Start date string, ignored when `timestamps` is given
        freq_minutes: Minutes between bars, ignored when `timestamps` is given
        timestamps: Explicit open times (optional)
    """
    if timestamps is None:
        timestamps = create_timestamp_series(start, len(bars), freq_minutes)

    return pl.DataFrame(
        {
            "timestamp": timestamps,
            "open": [b[0] for b in bars],
            "high": [b[1] for b in bars],
            "low": [b[2] for b in bars],
            "close": [b[3] for b in bars],
        }
    )


def create_series(
    bars: list[tuple[float, float, float, float]], last_bar_open: bool = False, **kwargs
) -> FrameBarSeries:
    """Create a FrameBarSeries from `(open, high, low, close)` tuples."""
    return FrameBarSeries(create_bar_frame(bars, **kwargs), last_bar_open=last_bar_open)


def create_ohlc_data(periods: int = 10, base_price: float = 100.0, freq_minutes: int = 60) -> pl.DataFrame:
    """
    Create gently trending OHLC data without pin shapes.

    Every bar has a range of 1.0 and a body of 0.6 centered in the bar.
    """
    timestamps = create_timestamp_series("2024-01-01", periods, freq_minutes)
    base = [base_price + i * 0.1 for i in range(periods)]

    return pl.DataFrame(
        {
            "timestamp": timestamps,
            "open": [p - 0.3 for p in base],
            "high": [p + 0.5 for p in base],
            "low": [p - 0.5 for p in base],
            "close": [p + 0.3 for p in base],
            "volume": [1000 + i * 10 for i in range(periods)],
        }
    )


def create_market_data(weeks: int = 3, base_price: float = 1.1000, seed: int = 42) -> pl.DataFrame:
    """
    Create hourly FX-like bars trading Monday 00:00 to Friday 20:00 UTC.

    Prices follow a seeded random walk with wide wicks, so pin shapes show up
    regularly at the default 0.0001 pip size.

    Args:
        weeks: Number of trading weeks
        base_price: First open
        seed: Random seed for reproducible data
    """
    import random

    rng = random.Random(seed)
    monday = datetime(2024, 1, 1)

    rows = []
    price = base_price
    for week in range(weeks):
        week_start = monday + timedelta(weeks=week)
        for hour in range(5 * 24 - 3):
            open_price = price
            close_price = open_price + rng.gauss(0, 0.0010)
            high = max(open_price, close_price) + abs(rng.gauss(0, 0.0015))
            low = min(open_price, close_price) - abs(rng.gauss(0, 0.0015))
            rows.append(
                {
                    "timestamp": week_start + timedelta(hours=hour),
                    "open": round(open_price, 5),
                    "high": round(high, 5),
                    "low": round(low, 5),
                    "close": round(close_price, 5),
                }
            )
            price = close_price

    return pl.DataFrame(rows)


def create_weekend_timestamps(hours_before: int = 5, hours_after: int = 5) -> list[datetime]:
    """
    Create hourly open times around a weekend close.

    The last bar of the week opens Friday 2024-01-05 20:00 and the first bar of
    the next week opens Sunday 2024-01-07 22:00 (a 50 hour gap).
    """
    friday = datetime(2024, 1, 5, 20, 0)
    sunday = datetime(2024, 1, 7, 22, 0)

    before = [friday - timedelta(hours=i) for i in reversed(range(hours_before))]
    after = [sunday + timedelta(hours=i) for i in range(hours_after)]
    return before + after
