# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Logging setup for the registrar service.

Modules log through the standard library (``logging.getLogger(__name__)``
with %-style arguments). The root handler renders every record with
structlog's ProcessorFormatter, so the request context bound by
IdentityMiddleware (method, path, user_id, role) is attached to each line
written while that request is served.

Output is JSON outside development and a console layout in development.

Example:
    >>> setup_logging(get_settings())
    >>> bind_context(user_id="42", role="student")
    >>> logging.getLogger("registrar.domains.enrollment").info("Seat taken in %s", 12)
"""

import logging
import sys
from typing import TYPE_CHECKING

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

if TYPE_CHECKING:
    from registrar.core.config.settings import Settings

REQUEST_CONTEXT_KEYS = ("method", "path", "user_id", "role")

# Chatty below WARNING and not useful for enrollment traces
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiosqlite", "asyncio")


def drop_empty_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Remove request keys that were bound without a value."""
    for key in REQUEST_CONTEXT_KEYS:
        if key in event_dict and event_dict[key] in (None, ""):
            del event_dict[key]
    return event_dict


def build_formatter(json_output: bool) -> structlog.stdlib.ProcessorFormatter:
    """Create the formatter used by the root handler.

    Args:
        json_output: Render one JSON object per record instead of the
            console layout.

    Returns:
        ProcessorFormatter for stdlib log records.
    """
    pre_chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        drop_empty_context,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    if json_output:
        renderers: list[Processor] = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderers = [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]

    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=pre_chain,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *renderers,
        ],
    )


def setup_logging(settings: "Settings") -> None:
    """Install the structured root handler.

    Replaces any handlers already on the root logger, so calling it again
    (e.g. once per app instance) does not duplicate output.

    Args:
        settings: Application settings (log_level, environment, debug).
    """
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)
    json_output = not (settings.is_development or settings.debug)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter(json_output))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_context(**kwargs: object) -> None:
    """Attach key-value pairs to every record logged in this context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Forget everything bound with bind_context.

    Called at the start of each request so context never leaks from one
    request into the next.
    """
    structlog.contextvars.clear_contextvars()
