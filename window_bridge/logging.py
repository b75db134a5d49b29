"""Window Bridge — Structured logging.

Log records carry ``timestamp``, ``level`` and ``logger`` keys.  While a
batch runs, ``batch_id`` and ``action_index`` are bound through structlog's
context variables, so every record emitted by the executor or the bridge
for that action carries them too.

Output goes to stderr so that ``window-bridge state --json`` keeps stdout
parseable.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

import structlog

_BATCH_KEYS = ("batch_id", "action_index")


def bind_batch_context(batch_id: str, action_index: int) -> None:
    structlog.contextvars.bind_contextvars(batch_id=batch_id, action_index=action_index)


def clear_batch_context() -> None:
    structlog.contextvars.unbind_contextvars(*_BATCH_KEYS)


def _renderer(format: str) -> Any:
    if format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def _handlers(formatter: logging.Formatter, log_file: str | Path | None) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure_logging(
    level: str = "info",
    format: str = "console",
    log_file: str | Path | None = None,
) -> None:
    """Route structlog and stdlib records through one formatter.

    ``format`` is ``"console"`` or ``"json"``; ``log_file`` adds a file
    handler next to stderr.  Call once, before the first log statement.
    """
    pre_chain: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if format == "json":
        pre_chain.append(structlog.processors.dict_tracebacks)

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=pre_chain,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, _renderer(format)],
    )

    root = logging.getLogger()
    root.handlers = _handlers(formatter, log_file)
    root.setLevel(level.upper())


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger named *name*, e.g. ``get_logger(__name__)``."""
    return structlog.get_logger(name)
