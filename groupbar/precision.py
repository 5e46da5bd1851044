"""
Pip conversion and output rounding.

Output schemas tag each numeric column with a `precision_type` in their field
metadata. Rounding looks the tag up instead of hard-coding column names, so a
new column only needs the right tag to be rounded correctly.
"""

import polars as pl

from .schemas import FrameSchema, SignalSchema


class PrecisionError(Exception):
    """Raised when a pip size or a column precision is unusable."""


PRECISION_TYPE_PERCENTAGE = "percentage"
PRECISION_TYPE_PRICE = "price"
PRECISION_TYPE_PIPS = "pips"
PRECISION_TYPE_INTEGER = "integer"

# Decimal places that do not depend on the security
FIXED_DECIMAL_PLACES = {
    PRECISION_TYPE_PERCENTAGE: 2,
    PRECISION_TYPE_PIPS: 1,
}


def to_pips(price_distance: float, pip_size: float) -> float:
    """Convert a price distance to pips."""
    if pip_size <= 0:
        raise PrecisionError(f"pip_size must be positive, got {pip_size}")
    return price_distance / pip_size


def from_pips(pips: float, pip_size: float) -> float:
    """Convert a number of pips to a price distance."""
    if pip_size <= 0:
        raise PrecisionError(f"pip_size must be positive, got {pip_size}")
    return pips * pip_size


def get_field_precision_type(field_name: str, schema: type[FrameSchema] = SignalSchema) -> str | None:
    """Get the `precision_type` tag of a column, None when it has none."""
    return schema.get_field_metadata(field_name).get("precision_type")


def get_field_decimal_places(
    field_name: str, security_precision: int = 5, schema: type[FrameSchema] = SignalSchema
) -> int | None:
    """
    Get the number of decimals a column is rounded to.

    Percentages keep 2 decimals and pips 1, prices follow the security and
    integer columns are never rounded.

    Args:
        field_name: Output column name
        security_precision: Decimal places of the security's quotes
        schema: Schema declaring the column (default: SignalSchema)

    Returns:
        Number of decimal places, or None for integer columns

    Raises:
        PrecisionError: If the column is unknown or carries no usable tag
    """
    metadata = schema.get_field_metadata(field_name)
    if not metadata:
        raise PrecisionError(f"Field '{field_name}' not found in {schema.__name__}")

    precision_type = metadata.get("precision_type")
    if precision_type is None:
        raise PrecisionError(f"Field '{field_name}' missing 'precision_type' in json_schema_extra")

    if precision_type in FIXED_DECIMAL_PLACES:
        return FIXED_DECIMAL_PLACES[precision_type]
    if precision_type == PRECISION_TYPE_PRICE:
        return security_precision
    if precision_type == PRECISION_TYPE_INTEGER:
        return None

    raise PrecisionError(f"Unknown precision_type '{precision_type}' for field '{field_name}'")


def apply_precision(
    df: pl.DataFrame, security_precision: int, schema: type[FrameSchema] = SignalSchema
) -> pl.DataFrame:
    """
    Round the float columns of an output frame according to their tags.

    Columns without a tag, unknown to the schema, or not of a float type are
    returned unchanged, as is the column order.

    Example:
        ```python
        # EURUSD quotes with 5 decimals
        signals = apply_precision(indicator.process(df), 5)
        ```
    """
    rounded = []

    for name in df.columns:
        if not df.schema[name].is_float():
            continue
        try:
            decimals = get_field_decimal_places(name, security_precision, schema)
        except PrecisionError:
            continue
        if decimals is not None:
            rounded.append(pl.col(name).round(decimals))

    return df.with_columns(rounded) if rounded else df


def get_comparison_tolerance(
    field_name: str, security_precision: int = 5, schema: type[FrameSchema] = SignalSchema
) -> float:
    """
    Get the tolerance for comparing two values of a column.

    One unit in the last rounded decimal, 0 for integer columns and 1e-6 for
    columns the schema cannot place.
    """
    try:
        decimals = get_field_decimal_places(field_name, security_precision, schema)
    except PrecisionError:
        return 1e-6

    return 0 if decimals is None else 10 ** (-decimals)
