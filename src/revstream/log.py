# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Structured logging helpers for :mod:`revstream`.

Library modules obtain a :class:`StructuredLogger` through :func:`get_logger`
and never configure handlers themselves. Applications that want to see the
reader's diagnostics call :func:`configure_logging` once at startup.
"""

from __future__ import annotations

import json
import logging
import logging.config
import os
from collections.abc import Mapping, MutableMapping
from datetime import UTC, datetime
from typing import Any, cast, override

__all__ = [
    "StructuredLogger",
    "configure_logging",
    "get_logger",
]

_LOG_LEVEL_ENV = "REVSTREAM_LOG_LEVEL"
_LOG_FORMAT_ENV = "REVSTREAM_LOG_FORMAT"


class StructuredLogger(logging.LoggerAdapter[logging.Logger]):
    """Logger adapter that requires an ``event`` name on every record.

    Bound context and any ``context=`` mapping passed at the call site are
    merged into a single ``context`` attribute on the emitted record.
    """

    def __init__(
        self,
        logger: logging.Logger,
        *,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(logger, dict(context) if context is not None else {})

    def bind(self, **context: object) -> StructuredLogger:
        """Return a new adapter with ``context`` merged into the bound payload."""

        merged = {**dict(cast(Mapping[str, object], self.extra)), **context}
        return type(self)(self.logger, context=merged)

    @override
    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        extra = kwargs.get("extra")
        if extra is None:
            extra = {}
        if not isinstance(extra, MutableMapping):
            raise TypeError("Structured logs require a mutable mapping for extra.")
        extra_mapping = cast(MutableMapping[str, object], extra)

        payload: dict[str, object] = dict(cast(Mapping[str, object], self.extra))
        inline = kwargs.pop("context", None)
        if inline is not None:
            if not isinstance(inline, Mapping):
                raise TypeError("context must be a mapping when provided.")
            payload.update(cast(Mapping[str, object], inline))

        event = kwargs.pop("event", None)
        if event is None:
            event = extra_mapping.pop("event", None)
        if not isinstance(event, str):
            raise TypeError("Structured logs require an 'event' field.")

        payload.update(extra_mapping)
        kwargs["extra"] = {"event": event, "context": payload}
        return msg, kwargs


def get_logger(
    name: str,
    *,
    context: Mapping[str, object] | None = None,
) -> StructuredLogger:
    """Return a :class:`StructuredLogger` scoped to ``name``."""

    return StructuredLogger(logging.getLogger(name), context=context)


def configure_logging(
    *,
    level: int | str | None = None,
    json_mode: bool | None = None,
    env: Mapping[str, str] | None = None,
    force: bool = False,
) -> None:
    """Configure the root logger for revstream diagnostics.

    ``level`` and ``json_mode`` fall back to the ``REVSTREAM_LOG_LEVEL`` and
    ``REVSTREAM_LOG_FORMAT`` environment variables (``json`` selects compact
    JSON lines, anything else the plain text formatter).

    When the host application already installed handlers, only the level is
    adjusted unless ``force=True``.
    """

    env = os.environ if env is None else env
    resolved_level = _coerce_level(level or env.get(_LOG_LEVEL_ENV) or None)

    if json_mode is None:
        json_mode = env.get(_LOG_FORMAT_ENV, "text").lower() == "json"

    root_logger = logging.getLogger()
    if root_logger.handlers and not force:
        root_logger.setLevel(resolved_level)
        return

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "text": {
                    "()": "revstream.log._TextFormatter",
                    "fmt": "%(asctime)s %(levelname)s %(name)s %(event)s %(message)s %(context)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
                "json": {"()": "revstream.log._JsonFormatter"},
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "json" if json_mode else "text",
                }
            },
            "root": {"handlers": ["stderr"], "level": resolved_level},
        }
    )


class _TextFormatter(logging.Formatter):
    """Text formatter tolerant of records emitted without structured fields."""

    @override
    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "event"):
            record.event = "-"
        if not hasattr(record, "context"):
            record.context = {}
        return super().format(record)


class _JsonFormatter(logging.Formatter):
    """Formatter that renders structured records as compact JSON."""

    @override
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        event = getattr(record, "event", None)
        if event is not None:
            payload["event"] = event
        context = getattr(record, "context", None)
        if context:
            payload["context"] = context
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=repr, separators=(",", ":"))


def _coerce_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if level is None:
        return logging.INFO
    resolved = logging.getLevelNamesMapping().get(level.upper())
    if resolved is None:
        raise TypeError(f"Unknown log level: {level!r}")
    return resolved
