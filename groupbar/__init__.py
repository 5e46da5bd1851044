"""
groupbar Python Module

Incremental candlestick pattern scanning over forward-growing OHLC bar series.
Folds runs of up to three bars into composite candles and flags group pin bars,
with companion price range and week separator indicators.
"""

from .base import Component
from .candle import Bar, CompositeCandle, classify, fold
from .factory import Factory
from .indicators import GroupPinBar, PriceRange, PriceRangeResult, WeekSeparator
from .logs import IndicatorLogger
from .precision import (  # noqa: F401
    PrecisionError,
    apply_precision,
    from_pips,
    get_comparison_tolerance,
    get_field_decimal_places,
    get_field_precision_type,
    to_pips,
)
from .rendering import Chart, Color, Rectangle, RecordingChart, VerticalLine, rectangle_for_signal
from .scanner import PatternScanner, ScanCursor, SignalEvent
from .schemas import (
    FactoryConfig,
    GroupPinBarConfig,
    PriceRangeConfig,
    PriceRangeSchema,
    SignalSchema,
    WeekSeparatorConfig,
    WeekSeparatorSchema,
)
from .series import BarSeries, FrameBarSeries
from .window import first_eligible_index, window_start

try:
    from importlib.metadata import version

    __version__ = version("groupbar")
except Exception:
    # Not installed, e.g. running from a source checkout
    __version__ = "0.0.0+unknown"
__all__ = [
    "Factory",
    "Component",
    "Bar",
    "BarSeries",
    "FrameBarSeries",
    "CompositeCandle",
    "classify",
    "fold",
    "first_eligible_index",
    "window_start",
    "PatternScanner",
    "ScanCursor",
    "SignalEvent",
    "GroupPinBar",
    "PriceRange",
    "PriceRangeResult",
    "WeekSeparator",
    "IndicatorLogger",
    "Chart",
    "Color",
    "Rectangle",
    "RecordingChart",
    "VerticalLine",
    "rectangle_for_signal",
    "FactoryConfig",
    "GroupPinBarConfig",
    "PriceRangeConfig",
    "WeekSeparatorConfig",
    "SignalSchema",
    "PriceRangeSchema",
    "WeekSeparatorSchema",
    "PrecisionError",
    "apply_precision",
    "to_pips",
    "from_pips",
    "get_field_decimal_places",
    "get_field_precision_type",
    "get_comparison_tolerance",
]
