"""Per-indicator logging handles."""

import logging
from collections.abc import Callable, Sequence
from itertools import count
from pathlib import Path
from typing import Any

LOG_FORMAT = "%(asctime)s %(thread)04d - %(message)s"

# Suffixes keeping the loggers of same-named handles apart
_handle_ids = count(1)


class IndicatorLogger:
    """
    Logging handle owned by a single indicator instance.

    Records go to a `groupbar.<name>.<n>` logger, where `n` is unique to the
    handle, so two indicators with the same name never share handlers or levels.
    With `log_all_bars=False` only records emitted while `is_last_bar()` is true
    are written; the startup record is always written.

    Args:
        name: Handle name, usually `symbol-timeframe-Indicator`
        log_all_bars: Log every bar rather than only the last one (default: True)
        is_last_bar: Callable telling whether the bar being processed is the last one
        path: Optional directory, a `<name>.log` file is written there when given
    """

    def __init__(
        self,
        name: str,
        log_all_bars: bool = True,
        is_last_bar: Callable[[], bool] | None = None,
        path: str | Path | None = None,
    ):
        self.name = name
        self.log_all_bars = log_all_bars
        self._is_last_bar = is_last_bar or (lambda: True)
        self.logger = logging.getLogger(f"groupbar.{name}.{next(_handle_ids)}")
        self.file_name: Path | None = None
        self._handler: logging.FileHandler | None = None

        if path is not None:
            directory = Path(path)
            directory.mkdir(parents=True, exist_ok=True)
            self.file_name = directory / f"{name}.log"

            self._handler = logging.FileHandler(self.file_name, encoding="utf-8")
            self._handler.setFormatter(logging.Formatter(LOG_FORMAT))
            self.logger.addHandler(self._handler)
            self.logger.setLevel(logging.INFO)

    @property
    def can_log(self) -> bool:
        return self.log_all_bars or self._is_last_bar()

    def info(self, message: str, *args: Any) -> None:
        if self.can_log:
            self.logger.info(message, *args)

    def log_start(self, parameters: Sequence[tuple[str, Any]]) -> None:
        """Write the startup record listing the indicator parameters."""
        if parameters:
            listed = ", ".join(
                f'{key}="{value}"' if isinstance(value, str) else f"{key}={value}" for key, value in parameters
            )
            message = f"Indicator {self.name} is started: {listed}"
        else:
            message = f"Indicator {self.name} is started without parameter."

        self.logger.info(message)

    def close(self) -> None:
        """Detach and close the file handler added by this handle, if any."""
        if self._handler is not None:
            self.logger.removeHandler(self._handler)
            self._handler.close()
            self._handler = None


def logger_name(symbol: str | None, timeframe: str | None, indicator: str) -> str:
    """Build a handle name such as `EURUSD-h4-GroupPinBar`."""
    return "-".join(part for part in (symbol, timeframe, indicator) if part)
