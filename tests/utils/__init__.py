"""Test utilities package."""

from .bar_data import (
    FILLER,
    create_bar_frame,
    create_market_data,
    create_ohlc_data,
    create_series,
    create_timestamp_series,
    create_weekend_timestamps,
)
from .config_helpers import (
    create_group_pin_bar_config,
    create_price_range_config,
    create_week_separator_config,
)
from .pattern_data_factory import PatternDataFactory

__all__ = [
    # Bar data
    "FILLER",
    "create_bar_frame",
    "create_market_data",
    "create_ohlc_data",
    "create_series",
    "create_timestamp_series",
    "create_weekend_timestamps",
    # Config helpers
    "create_group_pin_bar_config",
    "create_price_range_config",
    "create_week_separator_config",
    # Patterns
    "PatternDataFactory",
]
