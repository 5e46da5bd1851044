"""
Chart indicators built on the incremental scanners.

Each indicator owns its scan state, its logging handle and an optional chart.
A host either attaches a live `BarSeries` and calls `calculate(index)` as bars
arrive, or hands a whole OHLC DataFrame to `process` for a batch run.
"""

from dataclasses import dataclass
from datetime import datetime

import polars as pl
from pandas import DataFrame as PandasDataFrame
from polars import DataFrame as PolarsDataFrame
from polars import Datetime

from .base import Component, validate_ohlc
from .logs import IndicatorLogger, logger_name
from .precision import to_pips
from .rendering import (
    Chart,
    Color,
    LineStyle,
    Point,
    VerticalLine,
    draw_position,
    rectangle_for_signal,
    separator_time,
)
from .scanner import PatternScanner, ScanCursor, SignalEvent
from .schemas import (
    FrameSchema,
    GroupPinBarConfig,
    PriceRangeConfig,
    PriceRangeSchema,
    SignalSchema,
    TimeframeConfig,
    WeekSeparatorConfig,
    WeekSeparatorSchema,
)
from .series import BarSeries, FrameBarSeries
from .window import MIN_HISTORY, draw_distance, first_eligible_index, format_open_time, timeframe_seconds

# Marker offsets: the second marker on a bar is pushed further out
FIRST_MARKER_OFFSET = 1.0
SECOND_MARKER_OFFSET = 2.5


def _time_zone(df: PolarsDataFrame) -> str | None:
    return getattr(df.schema["timestamp"], "time_zone", None)


def _build_frame(rows: list[dict], schema: type[FrameSchema], time_zone: str | None = None) -> PolarsDataFrame:
    """
    Build an output DataFrame with the schema's columns and dtypes.

    Datetime columns carry `time_zone`, the zone of the input bars, whether or
    not any row was produced.
    """
    dtypes = {
        name: Datetime("us", time_zone) if dtype is Datetime else dtype
        for name, dtype in schema.get_polars_dtypes().items()
    }
    order = schema.get_standard_column_order()

    if not rows:
        return pl.DataFrame(schema={name: dtypes[name] for name in order})
    return pl.DataFrame(rows, schema_overrides=dtypes).select(order)


class GroupPinBar(Component):
    """
    Group pin bar indicator.

    Folds 1..group_size trailing bars into composite candles and marks the
    smallest composite whose body plus nearer wick is a small share of a large
    enough range. Signals are logged and drawn as rectangles.

    Example:
        >>> indicator = GroupPinBar(GroupPinBarConfig(symbol="EURUSD", timeframe="1h"))
        >>> signals = indicator.process(df)
        >>> signals.select(["timestamp", "window_size", "core_percent"])
    """

    def __init__(self, config: GroupPinBarConfig, series: BarSeries | None = None, chart: Chart | None = None):
        """
        Initialize the indicator.

        Args:
            config: Validated GroupPinBarConfig
            series: Live bar source to attach immediately (optional)
            chart: Drawing surface for signal rectangles (optional)
        """
        super().__init__()

        self.config = config
        self.chart = chart
        self.series: BarSeries | None = None
        self.scanner: PatternScanner | None = None
        self.logger: IndicatorLogger | None = None
        self._current_index: int | None = None

        if series is not None:
            self.attach(series)

    def attach(self, series: BarSeries) -> None:
        """
        Start a new scan over `series` from its current length.

        Every call opens a new logging handle and writes the startup record.
        """
        self.close()

        self.series = series
        self.scanner = PatternScanner(series)
        self.scanner.initialize(
            total_bar_count=series.count,
            max_window_size=self.config.group_size,
            bar_count_limit=self.config.bar_count,
            min_height=self.config.min_height,
            max_body_percent=self.config.percent,
        )

        self.logger = IndicatorLogger(
            logger_name(self.config.symbol, self.config.timeframe, type(self).__name__),
            log_all_bars=self.config.log_all_bars,
            is_last_bar=self._is_last_bar,
            path=self.config.log_path,
        )
        self.logger.log_start(self.config.describe())

    def close(self) -> None:
        """Release the log file of the current handle, if any."""
        if self.logger is not None:
            self.logger.close()

    def calculate(self, index: int) -> SignalEvent | None:
        """
        Evaluate bar `index`, logging and drawing a signal when one is found.

        Raises:
            RuntimeError: If no series is attached
        """
        if self.scanner is None:
            raise RuntimeError("No bar series attached, call attach() first")

        self._current_index = index
        event = self.scanner.offer(index)

        if event is not None:
            self._log_signal(event)
            self._draw_signal(event)

        return event

    def process(self, data: PolarsDataFrame | PandasDataFrame) -> PolarsDataFrame:
        """
        Scan a whole OHLC DataFrame.

        Attaches a fresh series built from `data`, so any live scan is replaced
        and the startup record is logged again, once per call.

        Args:
            data: Input DataFrame with timestamp, open, high, low and close columns

        Returns:
            DataFrame with one row per signal, columns per SignalSchema
        """
        self.validate_input(data)
        df = self._convert_to_polars(data)
        series = FrameBarSeries(df)
        self.attach(series)

        rows = []
        for index in range(series.count):
            event = self.calculate(index)
            if event is not None:
                rows.append(self._signal_row(event))

        return _build_frame(rows, SignalSchema, _time_zone(df))

    def validate_input(self, data: PolarsDataFrame | PandasDataFrame) -> None:
        """
        Validate input data format.

        Raises:
            ValueError: If data format is invalid, with specific error message
        """
        validate_ohlc(self._convert_to_polars(data))

    def _is_last_bar(self) -> bool:
        return self.series is not None and self._current_index == self.series.count - 1

    def _signal_row(self, event: SignalEvent) -> dict:
        candle = event.candle
        pip_size = self.config.pip_size
        return {
            "timestamp": self.series.open_time(event.end_index),
            "start_timestamp": self.series.open_time(event.start_index),
            "start_index": event.start_index,
            "end_index": event.end_index,
            "window_size": event.window_size,
            "high": candle.high_price,
            "low": candle.low_price,
            "open": candle.open_price,
            "close": candle.close_price,
            "upper": candle.upper_price,
            "lower": candle.lower_price,
            "group_height": to_pips(candle.group_height, pip_size),
            "core_height": to_pips(candle.core_height, pip_size),
            "core_percent": candle.core_percent,
            "is_up": candle.is_up,
        }

    def _log_signal(self, event: SignalEvent) -> None:
        candle = event.candle
        open_time = format_open_time(self.config.localize(self.series.open_time(event.end_index)), short=False)
        self.logger.info(
            "[%s] [%d] height = %.1f, core = %.1f, percent = %.1f%%",
            open_time,
            event.window_size,
            to_pips(candle.group_height, self.config.pip_size),
            to_pips(candle.core_height, self.config.pip_size),
            candle.core_percent,
        )

    def _draw_signal(self, event: SignalEvent) -> None:
        if self.chart is None:
            return

        rectangle = rectangle_for_signal(self.series, event)
        self.chart.draw_rectangle(rectangle)

        self.logger.info(
            "%s time1 = [%s], time2 = [%s]",
            rectangle.name,
            format_open_time(self.config.localize(rectangle.time1), short=False),
            format_open_time(self.config.localize(rectangle.time2), short=False),
        )


@dataclass(frozen=True)
class PriceRangeResult:
    """Heights and markers of one evaluated bar, heights in pips."""

    index: int
    timestamp: datetime
    bar_height: float | None = None
    body_height: float | None = None
    cross_star: float | None = None
    pin_bar: float | None = None


class PriceRange(Component):
    """
    Per-bar height indicator marking cross stars and pin bars.

    A cross star has a body that is a small share of the bar height. A pin bar
    has a short hammer: the shorter of the distances from the open and from the
    close to the far extreme of the bar.
    """

    def __init__(self, config: PriceRangeConfig, series: BarSeries | None = None, chart: Chart | None = None):
        super().__init__()

        self.config = config
        self.chart = chart
        self.series: BarSeries | None = None
        self.cursor: ScanCursor | None = None
        self.logger: IndicatorLogger | None = None
        self._current_index: int | None = None

        if series is not None:
            self.attach(series)

    def attach(self, series: BarSeries) -> None:
        """
        Start a new scan over `series` from its current length.

        Every call opens a new logging handle and writes the startup record.
        """
        self.close()

        self.series = series
        self.cursor = ScanCursor(first_eligible_index(series.count, self.config.bar_count))
        self.logger = IndicatorLogger(
            logger_name(self.config.symbol, self.config.timeframe, type(self).__name__),
            log_all_bars=self.config.log_all_bars,
            is_last_bar=self._is_last_bar,
            path=self.config.log_path,
        )
        self.logger.log_start(self.config.describe())

    def close(self) -> None:
        """Release the log file of the current handle, if any."""
        if self.logger is not None:
            self.logger.close()

    def calculate(self, index: int) -> PriceRangeResult | None:
        """
        Evaluate bar `index` once.

        Returns:
            PriceRangeResult, or None when the bar is not evaluated
        """
        if self.cursor is None:
            raise RuntimeError("No bar series attached, call attach() first")

        self._current_index = index
        if not self.cursor.should_run(index):
            return None

        result = self._evaluate(index)
        self.cursor.advance(index)
        return result

    def _evaluate(self, index: int) -> PriceRangeResult:
        bar = self.series.bar(index)
        pip_size = self.config.pip_size
        bar_height = to_pips(bar.high - bar.low, pip_size)

        if bar_height == 0 or not (self.config.draw_below_min_height or bar_height >= self.config.min_height):
            return PriceRangeResult(index=index, timestamp=bar.open_time)

        body_height = to_pips(abs(bar.open - bar.close), pip_size)
        distance = draw_distance(self.series, pip_size)
        time = format_open_time(self.config.localize(bar.open_time))
        offset = FIRST_MARKER_OFFSET

        cross_star = None
        percent = body_height * 100 / bar_height
        if percent <= self.config.cross_percent:
            cross_star = draw_position(bar_height, distance, offset)
            offset = SECOND_MARKER_OFFSET
            self._draw_point(f"CS[{index}]", index, cross_star, Color.ORANGE_RED)
            self.logger.info("CrsStr at [%s], height = %.1f, percent = %.1f%%", time, bar_height, percent)

        if bar.open < bar.close:
            open_distance = bar.high - bar.open
            close_distance = bar.close - bar.low
        else:
            open_distance = bar.open - bar.low
            close_distance = bar.high - bar.close

        hammer_height = to_pips(min(open_distance, close_distance), pip_size)

        pin_bar = None
        percent = hammer_height * 100 / bar_height
        if percent <= self.config.pin_percent:
            pin_bar = draw_position(bar_height, distance, offset)
            self._draw_point(f"PB[{index}]", index, pin_bar, Color.LIGHT_GREEN)
            self.logger.info("PinBar at [%s], height = %.1f, percent = %.1f%%", time, bar_height, percent)

        return PriceRangeResult(
            index=index,
            timestamp=bar.open_time,
            bar_height=bar_height,
            body_height=body_height,
            cross_star=cross_star,
            pin_bar=pin_bar,
        )

    def process(self, data: PolarsDataFrame | PandasDataFrame) -> PolarsDataFrame:
        """
        Evaluate a whole OHLC DataFrame.

        Attaches a fresh series built from `data` and logs the startup record
        again, once per call.

        Returns:
            DataFrame with one row per evaluated bar, columns per PriceRangeSchema
        """
        self.validate_input(data)
        df = self._convert_to_polars(data)
        series = FrameBarSeries(df)
        self.attach(series)

        rows = []
        for index in range(series.count):
            result = self.calculate(index)
            if result is not None:
                rows.append(
                    {
                        "timestamp": result.timestamp,
                        "bar_height": result.bar_height,
                        "body_height": result.body_height,
                        "cross_star": result.cross_star,
                        "pin_bar": result.pin_bar,
                    }
                )

        return _build_frame(rows, PriceRangeSchema, _time_zone(df))

    def validate_input(self, data: PolarsDataFrame | PandasDataFrame) -> None:
        validate_ohlc(self._convert_to_polars(data))

    def _is_last_bar(self) -> bool:
        return self.series is not None and self._current_index == self.series.count - 1

    def _draw_point(self, name: str, index: int, value: float, color: Color) -> None:
        if self.chart is not None:
            self.chart.draw_point(Point(name=name, index=index, value=value, color=color))


class WeekSeparator(Component):
    """Draws a dotted line between the last bar of a trading week and the first bar of the next."""

    # Longest timeframe for which weekly separators make sense
    MAX_TIMEFRAME_SECONDS = 86400

    def __init__(self, config: WeekSeparatorConfig, series: BarSeries | None = None, chart: Chart | None = None):
        super().__init__()

        self.config = config
        self.chart = chart
        self.series: BarSeries | None = None
        self.cursor: ScanCursor | None = None
        self.is_valid = False

        if series is not None:
            self.attach(series)

    def attach(self, series: BarSeries) -> None:
        """Start a new scan over `series` from its current length."""
        self.series = series
        self.cursor = ScanCursor(first_eligible_index(series.count, self.config.bar_count))
        self.is_valid = self.cursor.is_valid and self._period_seconds() <= self.MAX_TIMEFRAME_SECONDS

    def calculate(self, index: int) -> VerticalLine | None:
        """
        Evaluate bar `index` once.

        Returns:
            The separator drawn before bar `index`, or None
        """
        if self.cursor is None:
            raise RuntimeError("No bar series attached, call attach() first")

        if not self.is_valid or not self.cursor.should_run(index):
            return None

        line = None
        previous = self.series.open_time(index - 1)
        current = self.series.open_time(index)

        if (current - previous).total_seconds() > self.config.week_change_seconds:
            line = VerticalLine(
                name=f"WS[{index}]",
                time=separator_time(previous, current),
                color=Color.YELLOW,
                thickness=1,
                style=LineStyle.DOTS,
            )
            if self.chart is not None:
                self.chart.draw_vertical_line(line)

        self.cursor.advance(index)
        return line

    def process(self, data: PolarsDataFrame | PandasDataFrame) -> PolarsDataFrame:
        """
        Find every week change in a whole OHLC DataFrame.

        Returns:
            DataFrame with one row per separator, columns per WeekSeparatorSchema
        """
        self.validate_input(data)
        df = self._convert_to_polars(data)
        series = FrameBarSeries(df)
        self.attach(series)

        rows = []
        for index in range(series.count):
            line = self.calculate(index)
            if line is not None:
                rows.append({"index": index, "timestamp": line.time})

        return _build_frame(rows, WeekSeparatorSchema, _time_zone(df))

    def validate_input(self, data: PolarsDataFrame | PandasDataFrame) -> None:
        validate_ohlc(self._convert_to_polars(data))

    def _period_seconds(self) -> int:
        if self.config.timeframe is not None:
            return TimeframeConfig.get_seconds(self.config.timeframe)
        if self.series.count >= MIN_HISTORY:
            return timeframe_seconds(self.series)
        return 0
