"""
Pydantic schema models for groupbar configuration validation.

This module provides the validated configuration of every indicator and the
column schemas of the DataFrames they return. Models use Pydantic v2 features
for type safety and detailed error reporting.
"""

from datetime import datetime
from typing import Any, ClassVar, Self

import pytz
from polars import Boolean, Datetime, Float64, Int32
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class TimeframeConfig(BaseModel):
    """Supported bar timeframes with their nominal duration."""

    TIMEFRAME_METADATA: ClassVar[dict[str, dict[str, Any]]] = {
        "1min": {"category": "sub-hourly", "seconds": 60},
        "5min": {"category": "sub-hourly", "seconds": 300},
        "15min": {"category": "sub-hourly", "seconds": 900},
        "30min": {"category": "sub-hourly", "seconds": 1800},
        "1h": {"category": "hourly", "seconds": 3600},
        "4h": {"category": "multi-hourly", "seconds": 14400},
        "12h": {"category": "multi-hourly", "seconds": 43200},
        "1d": {"category": "daily", "seconds": 86400},
        "1w": {"category": "weekly", "seconds": 604800},
        "1m": {"category": "monthly", "seconds": 2592000},  # Approximate - varies by month
    }

    @classmethod
    def validate_timeframe(cls, timeframe: str) -> bool:
        """Validate that the timeframe is supported."""
        return timeframe in cls.TIMEFRAME_METADATA

    @classmethod
    def get_seconds(cls, timeframe: str) -> int | None:
        metadata = cls.TIMEFRAME_METADATA.get(timeframe)
        return metadata["seconds"] if metadata else None


class IndicatorBaseConfig(BaseModel):
    """Settings shared by every indicator."""

    model_config = ConfigDict(str_strip_whitespace=True, validate_default=True, extra="forbid")

    symbol: str | None = Field(
        default=None,
        description="Trading symbol the bars belong to, used in log names",
        examples=["EURUSD", "XAUUSD", "BTC-USD"],
    )
    timeframe: str | None = Field(
        default=None,
        description="Bar timeframe, used in log names and period checks",
        examples=["5min", "1h", "4h", "1d"],
        json_schema_extra={"supported_timeframes": list(TimeframeConfig.TIMEFRAME_METADATA.keys())},
    )
    pip_size: float = Field(
        default=0.0001,
        gt=0,
        description="Price of one pip for the symbol",
        examples=[0.0001, 0.01, 1.0],
        json_schema_extra={
            "unit": "price",
            "asset_class_recommendations": {"fx": "0.0001 (0.01 for JPY pairs)", "metals": "0.01", "indices": "1.0"},
        },
    )
    timezone: str = Field(
        default="UTC",
        description="Timezone used when formatting bar open times in log records",
        examples=["UTC", "US/Eastern", "Europe/London"],
        json_schema_extra={"validation": "Must be valid pytz timezone"},
    )
    log_all_bars: bool = Field(
        default=True,
        description="Log every processed bar; False logs only the last bar",
    )
    log_path: str | None = Field(
        default=None,
        description="Directory for a per-indicator log file (None logs through handlers only)",
    )

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            pytz.timezone(v)
        except pytz.UnknownTimeZoneError as err:
            raise ValueError(f"Unknown timezone: {v}") from err
        return v

    @field_validator("timeframe")
    @classmethod
    def validate_timeframe(cls, v: str | None) -> str | None:
        if v is not None and not TimeframeConfig.validate_timeframe(v):
            raise ValueError(f"Invalid timeframe '{v}'. Supported: {list(TimeframeConfig.TIMEFRAME_METADATA.keys())}")
        return v

    def localize(self, time: datetime) -> datetime:
        """Express a bar open time in the configured timezone, naive times are taken as UTC."""
        tz = pytz.timezone(self.timezone)
        if time.tzinfo is None:
            return pytz.utc.localize(time).astimezone(tz)
        return time.astimezone(tz)

    def describe(self) -> list[tuple[str, Any]]:
        """Parameters written to the startup log record, in display order."""
        return []


class GroupPinBarConfig(IndicatorBaseConfig):
    """Configuration for the group pin bar scanner."""

    bar_count: int = Field(
        default=500,
        ge=0,
        description="Number of trailing bars to scan, 0 means unlimited",
        examples=[0, 200, 500],
    )
    group_size: int = Field(
        default=2,
        ge=1,
        le=3,
        description="Largest number of consecutive bars folded into one composite",
        json_schema_extra={"impact": "Larger groups clutter the chart, so at most 3 bars are folded"},
    )
    min_pips: int = Field(
        default=20,
        ge=0,
        le=100,
        description="Smallest composite range accepted as a signal, in pips",
        json_schema_extra={"unit": "pips"},
    )
    percent: int = Field(
        default=30,
        ge=0,
        le=100,
        description="Largest share of the range the body plus nearer wick may take",
        json_schema_extra={"unit": "percent"},
    )

    @property
    def min_height(self) -> float:
        """Minimum composite range in price units."""
        return self.min_pips * self.pip_size

    def describe(self) -> list[tuple[str, Any]]:
        return [
            ("BarCount", self.bar_count),
            ("GroupSize", self.group_size),
            ("MinPips", self.min_pips),
            ("Percent", self.percent),
        ]


class PriceRangeConfig(IndicatorBaseConfig):
    """Configuration for the per-bar price range indicator."""

    bar_count: int = Field(
        default=200,
        ge=0,
        description="Number of trailing bars to evaluate, 0 means unlimited",
    )
    min_height: int = Field(
        default=15,
        ge=0,
        description="Smallest bar height in pips",
        json_schema_extra={"unit": "pips"},
    )
    draw_below_min_height: bool = Field(
        default=False,
        description="Also evaluate bars shorter than min_height",
    )
    cross_percent: int = Field(
        default=8,
        ge=1,
        le=20,
        description="Largest body share of the bar height for a cross star",
        json_schema_extra={"unit": "percent"},
    )
    pin_percent: int = Field(
        default=25,
        ge=1,
        le=40,
        description="Largest hammer share of the bar height for a pin bar",
        json_schema_extra={"unit": "percent"},
    )

    def describe(self) -> list[tuple[str, Any]]:
        return [
            ("BarCount", self.bar_count),
            ("MinHeight", self.min_height),
            ("DrawBelowMinHeight", self.draw_below_min_height),
            ("CrossPercent", self.cross_percent),
            ("PinPercent", self.pin_percent),
            ("LogAllBars", self.log_all_bars),
        ]


class WeekSeparatorConfig(IndicatorBaseConfig):
    """Configuration for the week separator lines."""

    bar_count: int = Field(
        default=500,
        ge=0,
        description="Number of trailing bars to evaluate, 0 means unlimited",
    )
    week_change_seconds: int = Field(
        default=129600,
        gt=0,
        description="Gap between two bars above which a new trading week starts",
        json_schema_extra={"unit": "seconds", "default_meaning": "36 hours"},
    )

    def describe(self) -> list[tuple[str, Any]]:
        return [("BarCount", self.bar_count)]


class FactoryConfig(BaseModel):
    """Root configuration for Factory.create_all with one entry per indicator."""

    model_config = ConfigDict(str_strip_whitespace=True, validate_default=True, extra="forbid")

    group_pin_bar: GroupPinBarConfig | None = Field(default=None, description="Group pin bar scanner settings")
    price_range: PriceRangeConfig | None = Field(default=None, description="Price range indicator settings")
    week_separator: WeekSeparatorConfig | None = Field(default=None, description="Week separator settings")

    @model_validator(mode="after")
    def validate_at_least_one(self) -> Self:
        if self.group_pin_bar is None and self.price_range is None and self.week_separator is None:
            raise ValueError("At least one indicator configuration is required")
        return self


# =============================================================================
# DataFrame Schema Models
# =============================================================================


class FrameSchema(BaseModel):
    """
    Base for output frame schemas.

    Each field describes one output column. Its `json_schema_extra` carries the
    polars dtype, a category and, for numeric columns, the precision type used
    by `precision.apply_precision`.
    """

    model_config = ConfigDict(str_strip_whitespace=True, validate_default=True, extra="forbid")

    @classmethod
    def get_column_descriptions(cls) -> dict[str, str]:
        """Map each column to its description."""
        return {name: info.description for name, info in cls.model_fields.items() if info.description}

    @classmethod
    def get_polars_dtypes(cls) -> dict[str, Any]:
        """Map each column to the polars dtype declared in its metadata."""
        return {
            name: metadata["polars_dtype"]
            for name in cls.model_fields
            if "polars_dtype" in (metadata := cls.get_field_metadata(name))
        }

    @classmethod
    def get_standard_column_order(cls) -> list[str]:
        return list(cls.model_fields.keys())

    @classmethod
    def get_field_metadata(cls, field_name: str) -> dict[str, Any]:
        """
        Get the `json_schema_extra` of a column.

        Returns:
            The metadata dict, empty when the column is unknown or has none
        """
        field_info = cls.model_fields.get(field_name)
        extra = field_info.json_schema_extra if field_info else None
        return extra if isinstance(extra, dict) else {}


class SignalSchema(FrameSchema):
    """
    **Group Pin Bar Signal Schema**

    One row per detected signal, as returned by `GroupPinBar.process`.
    """

    timestamp: datetime = Field(
        description="Open time of the last bar of the composite",
        json_schema_extra={"polars_dtype": Datetime, "category": "position"},
    )
    start_timestamp: datetime = Field(
        description="Open time of the first bar of the composite",
        json_schema_extra={"polars_dtype": Datetime, "category": "position"},
    )
    start_index: int = Field(
        description="Series index of the first bar of the composite",
        ge=0,
        json_schema_extra={"polars_dtype": Int32, "category": "position", "precision_type": "integer"},
    )
    end_index: int = Field(
        description="Series index of the last bar of the composite",
        ge=0,
        json_schema_extra={"polars_dtype": Int32, "category": "position", "precision_type": "integer"},
    )
    window_size: int = Field(
        description="Number of bars folded into the composite",
        ge=1,
        le=3,
        json_schema_extra={"polars_dtype": Int32, "category": "position", "precision_type": "integer"},
    )
    high: float = Field(
        description="Highest high of the composite",
        json_schema_extra={"polars_dtype": Float64, "category": "composite", "precision_type": "price"},
    )
    low: float = Field(
        description="Lowest low of the composite",
        json_schema_extra={"polars_dtype": Float64, "category": "composite", "precision_type": "price"},
    )
    open: float = Field(
        description="Open of the first bar of the composite",
        json_schema_extra={"polars_dtype": Float64, "category": "composite", "precision_type": "price"},
    )
    close: float = Field(
        description="Close of the last bar of the composite",
        json_schema_extra={"polars_dtype": Float64, "category": "composite", "precision_type": "price"},
    )
    upper: float = Field(
        description="Higher of open and close, open on ties",
        json_schema_extra={"polars_dtype": Float64, "category": "composite", "precision_type": "price"},
    )
    lower: float = Field(
        description="Lower of open and close",
        json_schema_extra={"polars_dtype": Float64, "category": "composite", "precision_type": "price"},
    )
    group_height: float = Field(
        description="Composite range in pips",
        ge=0,
        json_schema_extra={"polars_dtype": Float64, "category": "classification", "precision_type": "pips"},
    )
    core_height: float = Field(
        description="Body plus nearer wick in pips",
        ge=0,
        json_schema_extra={"polars_dtype": Float64, "category": "classification", "precision_type": "pips"},
    )
    core_percent: float = Field(
        description="Core height as a percentage of the composite range",
        ge=0,
        le=100,
        json_schema_extra={"polars_dtype": Float64, "category": "classification", "precision_type": "percentage"},
    )
    is_up: bool = Field(
        description="True when the body sits near the high",
        json_schema_extra={"polars_dtype": Boolean, "category": "classification"},
    )


class PriceRangeSchema(FrameSchema):
    """
    **Price Range Schema**

    One row per evaluated bar, as returned by `PriceRange.process`.
    """

    timestamp: datetime = Field(
        description="Bar open time",
        json_schema_extra={"polars_dtype": Datetime, "category": "position"},
    )
    bar_height: float | None = Field(
        default=None,
        description="High to low in pips, null when the bar was skipped",
        json_schema_extra={"polars_dtype": Float64, "category": "heights", "precision_type": "pips"},
    )
    body_height: float | None = Field(
        default=None,
        description="Open to close in pips, null when the bar was skipped",
        json_schema_extra={"polars_dtype": Float64, "category": "heights", "precision_type": "pips"},
    )
    cross_star: float | None = Field(
        default=None,
        description="Marker position when the bar is a cross star",
        json_schema_extra={"polars_dtype": Float64, "category": "markers", "precision_type": "pips"},
    )
    pin_bar: float | None = Field(
        default=None,
        description="Marker position when the bar is a pin bar",
        json_schema_extra={"polars_dtype": Float64, "category": "markers", "precision_type": "pips"},
    )


class WeekSeparatorSchema(FrameSchema):
    """One row per separator, as returned by `WeekSeparator.process`."""

    index: int = Field(
        description="Series index of the first bar of the new week",
        ge=1,
        json_schema_extra={"polars_dtype": Int32, "category": "position", "precision_type": "integer"},
    )
    timestamp: datetime = Field(
        description="Separator time, halfway between the two bars",
        json_schema_extra={"polars_dtype": Datetime, "category": "position"},
    )
