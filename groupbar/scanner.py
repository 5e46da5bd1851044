"""
Incremental group pin bar scanning.

The scanner is offered bar indices one at a time in non-decreasing order. For
each new index it folds trailing windows of 1..N bars, smallest first, and
reports the first window whose composite candle qualifies as a signal.
"""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from .candle import CompositeCandle, classify
from .series import BarSeries
from .window import first_eligible_index, window_start

logger = logging.getLogger(__name__)


@dataclass
class ScanCursor:
    """Eligibility boundary and at-most-once bookkeeping for an incremental scan."""

    first_eligible_index: int | None
    last_processed_index: int | None = None

    @property
    def is_valid(self) -> bool:
        return self.first_eligible_index is not None

    def should_run(self, index: int) -> bool:
        """
        Check whether `index` needs evaluating.

        Re-offering the last processed index is a no-op so the still-open
        current bar is evaluated only once.

        Raises:
            ValueError: If `index` goes back before the last processed index
        """
        if not self.is_valid or index < self.first_eligible_index or index == self.last_processed_index:
            return False

        if self.last_processed_index is not None and index < self.last_processed_index:
            raise ValueError(
                f"Bar indices must be offered in non-decreasing order: "
                f"got {index} after {self.last_processed_index}"
            )

        return True

    def advance(self, index: int) -> None:
        self.last_processed_index = index


@dataclass(frozen=True)
class SignalEvent:
    """A qualifying composite candle ending at `end_index`."""

    start_index: int
    end_index: int
    window_size: int
    candle: CompositeCandle

    @property
    def high_price(self) -> float:
        return self.candle.high_price

    @property
    def low_price(self) -> float:
        return self.candle.low_price

    @property
    def upper_price(self) -> float:
        return self.candle.upper_price

    @property
    def lower_price(self) -> float:
        return self.candle.lower_price

    @property
    def is_up(self) -> bool:
        return self.candle.is_up


class PatternScanner:
    """
    Incremental driver deciding which windows to test for each offered index.

    Lifecycle:
        - Uninitialized: constructed, `offer` raises RuntimeError
        - Ready: `initialize` has computed the eligibility boundary
        - Scanning: inside `offer`, returns to Ready afterwards

    When there is not enough history the scanner stays permanently inert:
    `is_valid` is False and every offer returns None.
    """

    def __init__(self, bars: BarSeries):
        self.bars = bars
        self.cursor: ScanCursor | None = None
        self.max_window_size = 0
        self.min_height = 0.0
        self.max_body_percent = 0.0

    def initialize(
        self,
        total_bar_count: int,
        max_window_size: int,
        bar_count_limit: int,
        min_height: float,
        max_body_percent: float,
    ) -> None:
        """
        Compute the eligibility boundary and store thresholds.

        Args:
            total_bar_count: Number of bars available at start
            max_window_size: Largest number of bars folded into one composite
            bar_count_limit: Maximum number of trailing bars to scan, `0` means unlimited
            min_height: Smallest composite range accepted as a signal, in price units
            max_body_percent: Largest core percentage accepted as a signal (0-100)
        """
        if max_window_size < 1:
            raise ValueError(f"max_window_size must be at least 1, got {max_window_size}")
        if min_height < 0:
            raise ValueError(f"min_height must be non-negative, got {min_height}")
        if not 0 <= max_body_percent <= 100:
            raise ValueError(f"max_body_percent must be within [0, 100], got {max_body_percent}")

        self.max_window_size = max_window_size
        self.min_height = min_height
        self.max_body_percent = max_body_percent

        # The window size doubles as the buffer so every window start stays in range
        self.cursor = ScanCursor(first_eligible_index(total_bar_count, bar_count_limit, max_window_size))

        if not self.cursor.is_valid:
            logger.warning(
                f"Not enough history to scan: {total_bar_count} bars available, "
                f"window size {max_window_size}. Scanner disabled."
            )

    @property
    def is_initialized(self) -> bool:
        return self.cursor is not None

    @property
    def is_valid(self) -> bool:
        return self.cursor is not None and self.cursor.is_valid

    @property
    def first_eligible_index(self) -> int | None:
        return self.cursor.first_eligible_index if self.cursor else None

    @property
    def last_processed_index(self) -> int | None:
        return self.cursor.last_processed_index if self.cursor else None

    def offer(self, index: int) -> SignalEvent | None:
        """
        Evaluate bar `index` at most once.

        Windows ending at `index` are tried from 1 bar up to `max_window_size`;
        the first qualifying window wins and larger ones are not tried.

        Returns:
            SignalEvent for the smallest qualifying window, or None

        Raises:
            RuntimeError: If the scanner has not been initialized
            ValueError: If `index` goes back before the last processed index
        """
        if self.cursor is None:
            raise RuntimeError("PatternScanner.initialize() must be called before offer()")

        if not self.cursor.should_run(index):
            return None

        event = None
        for size in range(1, self.max_window_size + 1):
            start = window_start(index, size)
            candle = classify(self.bars, start, index, self.max_body_percent, self.min_height)

            if candle.is_signal:
                event = SignalEvent(start_index=start, end_index=index, window_size=size, candle=candle)
                break

        self.cursor.advance(index)
        return event

    def scan(self, indices: Iterable[int] | None = None) -> Iterator[SignalEvent]:
        """
        Offer a run of indices and yield the signals found.

        Args:
            indices: Indices to offer in order, defaults to every bar from the
                first eligible index to the current tail
        """
        if self.cursor is None:
            raise RuntimeError("PatternScanner.initialize() must be called before scan()")

        if indices is None:
            if not self.is_valid:
                return
            indices = range(self.first_eligible_index, self.bars.count)

        for index in indices:
            event = self.offer(index)
            if event is not None:
                yield event
