"""
Test module for schema validation functionality.
This module tests configuration models and output schema metadata.
"""

from datetime import datetime

import pytest
import pytz
from polars import Boolean, Datetime, Float64, Int32
from pydantic import ValidationError

from groupbar.schemas import (
    FactoryConfig,
    GroupPinBarConfig,
    IndicatorBaseConfig,
    PriceRangeConfig,
    PriceRangeSchema,
    SignalSchema,
    TimeframeConfig,
    WeekSeparatorConfig,
    WeekSeparatorSchema,
)


class TestGroupPinBarConfig:
    """Test GroupPinBarConfig validation."""

    def test_defaults(self):
        config = GroupPinBarConfig()

        assert config.bar_count == 500
        assert config.group_size == 2
        assert config.min_pips == 20
        assert config.percent == 30
        assert config.pip_size == 0.0001
        assert config.timezone == "UTC"
        assert config.log_all_bars is True
        assert config.log_path is None
        assert config.min_height == pytest.approx(0.002)

    @pytest.mark.parametrize("group_size", [0, 4])
    def test_group_size_bounds(self, group_size):
        with pytest.raises(ValidationError):
            GroupPinBarConfig(group_size=group_size)

    @pytest.mark.parametrize("field,value", [("min_pips", 101), ("min_pips", -1), ("percent", 101), ("bar_count", -1)])
    def test_range_bounds(self, field, value):
        with pytest.raises(ValidationError):
            GroupPinBarConfig(**{field: value})

    def test_pip_size_must_be_positive(self):
        with pytest.raises(ValidationError):
            GroupPinBarConfig(pip_size=0)

    def test_extra_fields_forbidden(self):
        with pytest.raises(ValidationError, match="Extra inputs are not permitted"):
            GroupPinBarConfig(window=3)

    def test_invalid_timeframe(self):
        with pytest.raises(ValidationError, match="Invalid timeframe 'h4'"):
            GroupPinBarConfig(timeframe="h4")

    def test_invalid_timezone(self):
        with pytest.raises(ValidationError, match="Unknown timezone"):
            GroupPinBarConfig(timezone="Mars/Olympus")

    def test_symbol_whitespace_stripped(self):
        assert GroupPinBarConfig(symbol="  EURUSD ").symbol == "EURUSD"

    def test_min_height_uses_pip_size(self):
        config = GroupPinBarConfig(min_pips=50, pip_size=0.01)
        assert config.min_height == pytest.approx(0.5)

    def test_describe(self):
        config = GroupPinBarConfig(bar_count=0, group_size=3, min_pips=10, percent=25)
        assert config.describe() == [("BarCount", 0), ("GroupSize", 3), ("MinPips", 10), ("Percent", 25)]


class TestIndicatorBaseConfig:
    """Test settings shared by every indicator."""

    def test_localize_naive_time_as_utc(self):
        localized = IndicatorBaseConfig().localize(datetime(2024, 1, 1, 12, 0))

        assert localized.tzinfo is not None
        assert localized.utcoffset().total_seconds() == 0
        assert localized.hour == 12

    def test_localize_to_configured_timezone(self):
        localized = IndicatorBaseConfig(timezone="US/Eastern").localize(datetime(2024, 1, 1, 12, 0))
        assert localized.hour == 7

    def test_localize_aware_time(self):
        aware = pytz.timezone("Europe/London").localize(datetime(2024, 7, 1, 12, 0))
        localized = IndicatorBaseConfig(timezone="UTC").localize(aware)

        assert localized.hour == 11

    def test_describe_is_empty(self):
        assert IndicatorBaseConfig().describe() == []


class TestPriceRangeConfig:
    """Test PriceRangeConfig validation."""

    def test_defaults(self):
        config = PriceRangeConfig()

        assert config.bar_count == 200
        assert config.min_height == 15
        assert config.draw_below_min_height is False
        assert config.cross_percent == 8
        assert config.pin_percent == 25

    @pytest.mark.parametrize("field,value", [("cross_percent", 0), ("cross_percent", 21), ("pin_percent", 41)])
    def test_percent_bounds(self, field, value):
        with pytest.raises(ValidationError):
            PriceRangeConfig(**{field: value})

    def test_describe_lists_log_setting(self):
        described = dict(PriceRangeConfig(log_all_bars=False).describe())

        assert described["LogAllBars"] is False
        assert list(described) == [
            "BarCount",
            "MinHeight",
            "DrawBelowMinHeight",
            "CrossPercent",
            "PinPercent",
            "LogAllBars",
        ]


class TestWeekSeparatorConfig:
    """Test WeekSeparatorConfig validation."""

    def test_defaults(self):
        config = WeekSeparatorConfig()

        assert config.bar_count == 500
        assert config.week_change_seconds == 129600
        assert config.describe() == [("BarCount", 500)]

    def test_week_change_must_be_positive(self):
        with pytest.raises(ValidationError):
            WeekSeparatorConfig(week_change_seconds=0)


class TestFactoryConfig:
    """Test FactoryConfig validation."""

    def test_requires_one_indicator(self):
        with pytest.raises(ValidationError, match="At least one indicator configuration is required"):
            FactoryConfig()

    def test_partial_configuration(self):
        config = FactoryConfig(week_separator=WeekSeparatorConfig())

        assert config.group_pin_bar is None
        assert config.week_separator.bar_count == 500

    def test_nested_dicts_are_validated(self):
        with pytest.raises(ValidationError):
            FactoryConfig(group_pin_bar={"group_size": 5})


class TestTimeframeConfig:
    """Test TimeframeConfig lookups."""

    def test_validate_timeframe(self):
        assert TimeframeConfig.validate_timeframe("1h") is True
        assert TimeframeConfig.validate_timeframe("h1") is False

    def test_get_seconds(self):
        assert TimeframeConfig.get_seconds("4h") == 14400
        assert TimeframeConfig.get_seconds("1d") == 86400
        assert TimeframeConfig.get_seconds("unknown") is None


class TestSignalSchemaClassMethods:
    """Test SignalSchema class methods."""

    def test_get_column_descriptions(self):
        descriptions = SignalSchema.get_column_descriptions()

        assert set(descriptions) == set(SignalSchema.model_fields)
        assert all(isinstance(text, str) and text for text in descriptions.values())

    def test_get_polars_dtypes(self):
        polars_types = SignalSchema.get_polars_dtypes()

        assert polars_types["timestamp"] == Datetime
        assert polars_types["start_timestamp"] == Datetime
        assert polars_types["window_size"] == Int32
        assert polars_types["core_percent"] == Float64
        assert polars_types["is_up"] == Boolean

    def test_every_column_has_a_dtype(self):
        assert set(SignalSchema.get_polars_dtypes()) == set(SignalSchema.get_standard_column_order())
        assert set(PriceRangeSchema.get_polars_dtypes()) == set(PriceRangeSchema.get_standard_column_order())
        assert WeekSeparatorSchema.get_polars_dtypes() == {"index": Int32, "timestamp": Datetime}

    def test_get_standard_column_order(self):
        order = SignalSchema.get_standard_column_order()

        assert order[:5] == ["timestamp", "start_timestamp", "start_index", "end_index", "window_size"]
        assert order[-1] == "is_up"

    def test_get_field_metadata(self):
        assert SignalSchema.get_field_metadata("group_height")["precision_type"] == "pips"
        assert SignalSchema.get_field_metadata("nonexistent") == {}
