"""Structured log lines for the slope service.

Every line carries an event tag (`elevation.fetch`, `elevation.batch`,
`slope.grid`, ...) followed by a JSON context, e.g.

    [elevation.batch] Batch finished | {"failed": 3, "requested": 120}

The same fields are attached to the record via `extra` for handlers that
emit structured output.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any, Mapping

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# httpx logs every request at INFO; a grid request issues hundreds.
_CHATTY_LOGGERS = ("httpx", "httpcore")

# Keys a LogRecord already defines; passing them through `extra` raises KeyError.
_RESERVED_RECORD_KEYS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}


def configure_logging(level: str = "INFO") -> None:
    """Install the root handler and keep HTTP client request logs at WARNING."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, logging.getLogger().level))


def _jsonable(value: Any) -> Any:
    # NaN/inf are not valid JSON; they show up for failed elevation lookups.
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    return value


def _encode_context(context: Mapping[str, Any]) -> str:
    try:
        return json.dumps({k: _jsonable(v) for k, v in context.items()}, default=str, sort_keys=True)
    except TypeError:
        return json.dumps({k: str(v) for k, v in context.items()}, sort_keys=True)


def log_event(
    logger: logging.Logger,
    event: str,
    message: str,
    *,
    level: str = "info",
    **fields: Any,
) -> None:
    """Emit `[event] message | {context}` at `level`, dropping None-valued fields.

    Example:
        log_event(LOGGER, "elevation.batch", "Batch finished", requested=120, failed=3)
    """
    context = {k: v for k, v in fields.items() if v is not None}
    payload = f"[{event}] {message}"
    if context:
        payload = f"{payload} | {_encode_context(context)}"

    extra = {k: v for k, v in context.items() if k not in _RESERVED_RECORD_KEYS}
    log_fn = getattr(logger, level, logger.info)
    log_fn(payload, extra={"event": event, **extra})
