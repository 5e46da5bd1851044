"""
Factory pattern for groupbar component creation and configuration.

This module provides factory methods for creating and configuring indicators
from validated Pydantic configuration models.
"""

from typing import Any, TypedDict

from .indicators import GroupPinBar, PriceRange, WeekSeparator
from .rendering import Chart
from .schemas import FactoryConfig, GroupPinBarConfig, PriceRangeConfig, TimeframeConfig, WeekSeparatorConfig
from .series import BarSeries


class ComponentDict(TypedDict, total=False):
    """Type definition for component dictionary returned by Factory.create_all()."""

    group_pin_bar: GroupPinBar
    price_range: PriceRange
    week_separator: WeekSeparator


class Factory:
    """
    Factory class for creating groupbar indicators.

    Provides static methods for creating individual indicators and a class
    method for creating every configured indicator over one bar series.
    All methods accept validated Pydantic configuration models.
    """

    @staticmethod
    def create_group_pin_bar(
        config: GroupPinBarConfig, series: BarSeries | None = None, chart: Chart | None = None
    ) -> GroupPinBar:
        """
        Create group pin bar indicator from validated configuration.

        Args:
            config: Validated GroupPinBarConfig containing:
                - `bar_count`: Trailing bars to scan (0 = unlimited)
                - `group_size`: Largest composite window, 1 to 3
                - `min_pips`: Minimum composite range in pips
                - `percent`: Maximum core percentage
            series: Live bar source to attach (optional)
            chart: Drawing surface (optional)

        Returns:
            Configured GroupPinBar indicator

        Example:
            >>> from groupbar.schemas import GroupPinBarConfig
            >>> config = GroupPinBarConfig(symbol="EURUSD", timeframe="1h", group_size=3, percent=25)
            >>> indicator = Factory.create_group_pin_bar(config)
        """
        return GroupPinBar(config, series=series, chart=chart)

    @staticmethod
    def create_price_range(
        config: PriceRangeConfig, series: BarSeries | None = None, chart: Chart | None = None
    ) -> PriceRange:
        """Create price range indicator from validated configuration."""
        return PriceRange(config, series=series, chart=chart)

    @staticmethod
    def create_week_separator(
        config: WeekSeparatorConfig, series: BarSeries | None = None, chart: Chart | None = None
    ) -> WeekSeparator:
        """Create week separator from validated configuration."""
        return WeekSeparator(config, series=series, chart=chart)

    @classmethod
    def create_all(
        cls, config: FactoryConfig, series: BarSeries | None = None, chart: Chart | None = None
    ) -> ComponentDict:
        """
        Create every configured indicator, sharing one series and chart.

        Each indicator keeps its own scan state, so they can be offered the same
        indices independently.

        Returns:
            Dictionary containing only the configured indicators

        Example:
            >>> config = FactoryConfig(
            ...     group_pin_bar=GroupPinBarConfig(symbol="EURUSD"),
            ...     week_separator=WeekSeparatorConfig(),
            ... )
            >>> components = Factory.create_all(config, series=series, chart=chart)
            >>> sorted(components)
            ['group_pin_bar', 'week_separator']
        """
        components: ComponentDict = {}

        if config.group_pin_bar is not None:
            components["group_pin_bar"] = cls.create_group_pin_bar(config.group_pin_bar, series, chart)
        if config.price_range is not None:
            components["price_range"] = cls.create_price_range(config.price_range, series, chart)
        if config.week_separator is not None:
            components["week_separator"] = cls.create_week_separator(config.week_separator, series, chart)

        return components

    @staticmethod
    def get_supported_timeframes() -> list[str]:
        """
        Get list of all supported timeframes in chronological order.

        Returns:
            Timeframe strings ordered from shortest to longest
        """
        metadata = TimeframeConfig.TIMEFRAME_METADATA
        return sorted(metadata, key=lambda tf: metadata[tf]["seconds"])

    @staticmethod
    def get_default_config(indicator: str) -> dict[str, Any]:
        """
        Get the default configuration of an indicator.

        Args:
            indicator: One of `group_pin_bar`, `price_range`, `week_separator`

        Raises:
            ValueError: If the indicator is not supported
        """
        configs = {
            "group_pin_bar": GroupPinBarConfig,
            "price_range": PriceRangeConfig,
            "week_separator": WeekSeparatorConfig,
        }
        if indicator not in configs:
            raise ValueError(f"Unsupported indicator: {indicator}. Supported indicators are: {sorted(configs)}")

        return configs[indicator]().model_dump()
