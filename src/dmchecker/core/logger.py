"""
Structured logging with key=value and JSON output support.

Wraps the standard library ``logging`` module so every classification step,
relay connection event and analysis milestone is emitted as a single
timestamped line that downstream consumers may display or discard. Two
output formats are supported: human-readable key=value pairs (default) and
machine-parseable JSON.

Values containing spaces, equals signs, or quotes are automatically escaped
and wrapped in double quotes. Long values (e.g. encrypted DM content) are
truncated to a configurable maximum length.

The ``StructuredFormatter`` is a stdlib ``logging.Formatter`` that reads
structured data from the ``structured_kv`` extra field (attached by Logger)
and appends it as key=value pairs. When installed on the root handler, it
unifies output from both ``Logger`` and plain ``logging.getLogger()`` calls
used in the nips and utils layers.

Examples:
    ```python
    from dmchecker.core.logger import Logger

    logger = Logger("analyzer")
    logger.info("analysis_started", relays=6, window_s=10.0)
    # Output: analysis_started relays=6 window_s=10.0

    relay_logger = logger.bind(relay="wss://relay.damus.io")
    relay_logger.debug("relay_connected")
    # Output: relay_connected relay=wss://relay.damus.io
    ```
"""

from __future__ import annotations

import datetime
import json
import logging
from typing import Any, ClassVar


def _truncate(value: str, max_value_length: int | None) -> str:
    if max_value_length and len(value) > max_value_length:
        return value[:max_value_length] + f"...<truncated {len(value) - max_value_length} chars>"
    return value


def format_kv_pairs(
    kwargs: dict[str, Any],
    max_value_length: int | None = 1000,
    prefix: str = " ",
) -> str:
    """Format a dictionary as space-separated key=value pairs.

    Args:
        kwargs: Key-value pairs to format.
        max_value_length: Maximum characters per value before truncation.
            Pass None to disable truncation.
        prefix: String prepended to the output (default: single space).

    Returns:
        Formatted string, e.g. ' client=Damus protocol="NIP-04 (Damus)"'.
        Returns empty string if kwargs is empty.
    """
    if not kwargs:
        return ""

    parts = []
    for k, v in kwargs.items():
        s = _truncate(str(v), max_value_length)
        # Quote values containing whitespace or characters that would break parsing
        if not s or " " in s or "=" in s or '"' in s or "'" in s:
            escaped = s.replace("\\", "\\\\").replace('"', '\\"')
            parts.append(f'{k}="{escaped}"')
        else:
            parts.append(f"{k}={s}")

    return prefix + " ".join(parts)


class StructuredFormatter(logging.Formatter):
    """Formats all log records as ``time level name message key=value ...``.

    The timestamp prefix keeps the trace sink contract: every line carries
    the wall-clock time at which it was produced.
    """

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.datetime.fromtimestamp(record.created, datetime.UTC)
        base = (
            f"{timestamp.strftime('%H:%M:%S.%f')[:-3]} "
            f"{record.levelname.lower()} {record.name} {record.getMessage()}"
        )
        extra: dict[str, Any] = getattr(record, "structured_kv", {})
        if extra:
            base += format_kv_pairs(extra)
        return base


class Logger:
    """Structured logger that appends keyword arguments as extra fields.

    Wraps a standard ``logging.Logger``. All public methods mirror the
    standard logging API with an added ``**kwargs`` parameter.

    Examples:
        ```python
        logger = Logger("analyzer")
        logger.info("event_classified", client="Damus", protocol="NIP-04")
        ```
    """

    _DEFAULT_MAX_VALUE_LENGTH: ClassVar[int] = 1000

    def __init__(
        self,
        name: str,
        *,
        json_output: bool = False,
        max_value_length: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize a structured logger.

        Args:
            name: Logger name, typically the service or module name.
            json_output: If True, emit JSON objects instead of key=value pairs.
            max_value_length: Maximum character length for individual values
                before truncation. Defaults to 1000.
            context: Key-value pairs attached to every record emitted by
                this logger (see ``bind()``).
        """
        if max_value_length is None:
            max_value_length = self._DEFAULT_MAX_VALUE_LENGTH
        self._logger = logging.getLogger(str(name))
        self._json_output = json_output
        self._max_value_length = max_value_length
        self._context: dict[str, Any] = dict(context or {})

    @property
    def name(self) -> str:
        return self._logger.name

    def bind(self, **context: Any) -> Logger:
        """Return a logger sharing this one's output that always adds ``context``."""
        return Logger(
            self._logger.name,
            json_output=self._json_output,
            max_value_length=self._max_value_length,
            context={**self._context, **context},
        )

    def _format_json(self, msg: str, level: str, kwargs: dict[str, Any]) -> str:
        record = {
            "timestamp": datetime.datetime.now(datetime.UTC).isoformat(),
            "level": level,
            "service": self._logger.name,
            "message": msg,
            **kwargs,
        }
        return json.dumps(record, default=str)

    def _make_extra(self, kwargs: dict[str, Any]) -> dict[str, Any]:
        """Build the ``extra`` dict with pre-truncated values for the formatter."""
        if not kwargs:
            return {}
        truncated = {
            k: _truncate(v, self._max_value_length) if isinstance(v, str) else v
            for k, v in kwargs.items()
        }
        return {"structured_kv": truncated}

    def _log(self, level: int, msg: str, kwargs: dict[str, Any], *, exc_info: bool = False) -> None:
        if not self._logger.isEnabledFor(level):
            return
        fields = {**self._context, **kwargs}
        if self._json_output:
            name = logging.getLevelName(level).lower()
            self._logger.log(level, self._format_json(msg, name, fields), exc_info=exc_info)
        else:
            self._logger.log(level, msg, extra=self._make_extra(fields), exc_info=exc_info)

    def debug(self, msg: str, **kwargs: Any) -> None:
        """Log a DEBUG level message with optional key=value pairs."""
        self._log(logging.DEBUG, msg, kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        """Log an INFO level message with optional key=value pairs."""
        self._log(logging.INFO, msg, kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        """Log a WARNING level message with optional key=value pairs."""
        self._log(logging.WARNING, msg, kwargs)

    def error(self, msg: str, **kwargs: Any) -> None:
        """Log an ERROR level message with optional key=value pairs."""
        self._log(logging.ERROR, msg, kwargs)

    def critical(self, msg: str, **kwargs: Any) -> None:
        """Log a CRITICAL level message with optional key=value pairs."""
        self._log(logging.CRITICAL, msg, kwargs)

    def exception(self, msg: str, **kwargs: Any) -> None:
        """Log an ERROR level message with exception traceback."""
        self._log(logging.ERROR, msg, kwargs, exc_info=True)
