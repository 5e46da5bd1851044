"""
Unit tests for DataFrame-backed bar series.
"""

from datetime import datetime, timedelta

import pandas as pd
import pytest

from groupbar.candle import Bar
from groupbar.series import BarSeries, FrameBarSeries

from .utils.bar_data import FILLER, create_bar_frame, create_series


@pytest.mark.unit
class TestFrameBarSeries:
    """Test cases for reading bars."""

    def test_satisfies_protocol(self):
        assert isinstance(create_series([FILLER] * 3), BarSeries)

    def test_reads_bars_in_order(self):
        series = create_series([(1.0, 3.0, 0.5, 2.0), (2.0, 4.0, 1.5, 3.5)])

        assert series.count == 2
        assert series.bar(1) == Bar(2.0, 4.0, 1.5, 3.5, datetime(2024, 1, 1, 1, 0))
        assert series.open_time(0) == datetime(2024, 1, 1, 0, 0)

    def test_integer_prices_are_read_as_floats(self):
        df = create_bar_frame([(1, 3, 0, 2)] * 3)
        bar = FrameBarSeries(df).bar(0)

        assert isinstance(bar.open, float)
        assert bar.high == 3.0

    def test_accepts_pandas(self):
        df = pd.DataFrame(
            {
                "timestamp": pd.date_range("2024-01-01", periods=3, freq="1h"),
                "open": [1.0, 2.0, 3.0],
                "high": [1.5, 2.5, 3.5],
                "low": [0.5, 1.5, 2.5],
                "close": [1.2, 2.2, 3.2],
            }
        )

        series = FrameBarSeries(df)

        assert series.count == 3
        assert series.bar(2).close == 3.2

    def test_index_out_of_range(self):
        series = create_series([FILLER] * 3)

        with pytest.raises(IndexError, match="out of range"):
            series.bar(3)
        with pytest.raises(IndexError, match="out of range"):
            series.open_time(-1)

    def test_invalid_frame_rejected(self):
        with pytest.raises(ValueError, match="Invalid price data"):
            create_series([(100.0, 99.0, 98.0, 100.0)])

    def test_last_bar_open_flag(self):
        assert create_series([FILLER] * 3).is_last_bar_open is False
        assert create_series([FILLER] * 3, last_bar_open=True).is_last_bar_open is True


@pytest.mark.unit
class TestLiveUpdates:
    """Test cases for appending and updating bars."""

    @pytest.fixture
    def series(self):
        return create_series([FILLER] * 3, last_bar_open=True)

    def test_update_last(self, series):
        series.update_last(high=105.0, low=95.0, close=104.0)

        bar = series.bar(2)
        assert (bar.open, bar.high, bar.low, bar.close) == (100.0, 105.0, 95.0, 104.0)

    def test_update_closed_bar_raises(self, series):
        series.close_last()

        with pytest.raises(ValueError, match="closed"):
            series.update_last(high=105.0, low=95.0, close=104.0)

    def test_update_with_invalid_prices_raises(self, series):
        with pytest.raises(ValueError, match="Invalid price data"):
            series.update_last(high=99.5, low=95.0, close=99.0)

    def test_append(self, series):
        next_time = series.open_time(2) + timedelta(hours=1)
        index = series.append(Bar(100.0, 102.0, 98.0, 101.0, next_time), is_open=False)

        assert index == 3
        assert series.count == 4
        assert series.is_last_bar_open is False
        assert series.bar(3).close == 101.0

    def test_append_out_of_order_raises(self, series):
        with pytest.raises(ValueError, match="must be after"):
            series.append(Bar(100.0, 102.0, 98.0, 101.0, series.open_time(2)))

    def test_append_invalid_prices_raises(self, series):
        next_time = series.open_time(2) + timedelta(hours=1)

        with pytest.raises(ValueError, match="Invalid price data"):
            series.append(Bar(100.0, 99.0, 98.0, 101.0, next_time))
        assert series.count == 3
