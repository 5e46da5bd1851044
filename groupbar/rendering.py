"""
Chart drawing primitives for detected signals.

The scanners only produce values; this module turns them into shapes and hands
them to a `Chart`, which the host implements on top of its own drawing API.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from .window import timeframe_seconds

if TYPE_CHECKING:
    from .scanner import SignalEvent
    from .series import BarSeries


class Color(Enum):
    """Drawing colors."""

    YELLOW = "yellow"  # Upper-anchored composite
    RED = "red"  # Lower-anchored composite
    ORANGE_RED = "orange_red"  # Cross star
    LIGHT_GREEN = "light_green"  # Pin bar


class LineStyle(Enum):
    """Line styles for vertical lines."""

    SOLID = "solid"
    DOTS = "dots"


@dataclass(frozen=True)
class Rectangle:
    name: str
    time1: datetime
    price1: float
    time2: datetime
    price2: float
    color: Color


@dataclass(frozen=True)
class VerticalLine:
    name: str
    time: datetime
    color: Color
    thickness: int = 1
    style: LineStyle = LineStyle.SOLID


@dataclass(frozen=True)
class Point:
    name: str
    index: int
    value: float
    color: Color


class Chart(Protocol):
    """Drawing surface provided by the host."""

    def draw_rectangle(self, rectangle: Rectangle) -> None: ...

    def draw_vertical_line(self, line: VerticalLine) -> None: ...

    def draw_point(self, point: Point) -> None: ...


class RecordingChart:
    """Chart that keeps every drawing by name, redrawing a name replaces it."""

    def __init__(self):
        self.rectangles: dict[str, Rectangle] = {}
        self.lines: dict[str, VerticalLine] = {}
        self.points: dict[str, Point] = {}

    def draw_rectangle(self, rectangle: Rectangle) -> None:
        self.rectangles[rectangle.name] = rectangle

    def draw_vertical_line(self, line: VerticalLine) -> None:
        self.lines[line.name] = line

    def draw_point(self, point: Point) -> None:
        self.points[point.name] = point


def rectangle_for_signal(series: "BarSeries", event: "SignalEvent") -> Rectangle:
    """
    Build the rectangle spanning a signal's time and price extent.

    The left edge sits halfway between the first bar of the window and the bar
    before it, the right edge halfway between the last bar and the bar after it.
    Gaps are measured on the actual bars because the spacing across a market
    close differs from the regular period. Without a neighbouring bar the bar
    period is used instead.

    Args:
        series: Bar source the signal was found on
        event: Detected signal

    Returns:
        Rectangle named `RP[end_index,window_size]`
    """
    if event.is_up:
        # Body near the high
        price1 = event.high_price
        price2 = event.lower_price
        color = Color.YELLOW
    else:
        # Body near the low
        price1 = event.upper_price
        price2 = event.low_price
        color = Color.RED

    start, end = event.start_index, event.end_index
    start_time = series.open_time(start)
    end_time = series.open_time(end)

    if start > 0:
        before = start_time - series.open_time(start - 1)
    else:
        before = timedelta(seconds=timeframe_seconds(series))

    if end + 1 < series.count:
        after = series.open_time(end + 1) - end_time
    else:
        after = timedelta(seconds=timeframe_seconds(series))

    return Rectangle(
        name=f"RP[{end},{event.window_size}]",
        time1=start_time - before / 2,
        price1=price1,
        time2=end_time + after / 2,
        price2=price2,
        color=color,
    )


def separator_time(previous: datetime, current: datetime) -> datetime:
    """Get the point halfway between two bar open times, rounded down to the second."""
    seconds = int((current - previous).total_seconds()) >> 1
    return previous + timedelta(seconds=seconds)


def draw_position(bar_height: float, distance: float, offset_multiplier: float = 1.0) -> float:
    """
    Get the value at which to draw a marker above a bar.

    Args:
        bar_height: Height of the bar
        distance: Base offset, see `window.draw_distance`
        offset_multiplier: Scale of the offset, the first marker of a bar uses
            1 and a second one uses a larger value so the two do not overlap
    """
    return bar_height + distance * offset_multiplier
