"""Logfire tracing for library commands."""

import functools
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

import logfire

from .config import LibraryConfig
from .errors import ErrResult

logger = logging.getLogger(__name__)


def configure_observability(config: LibraryConfig) -> None:
    """Configure logfire from the library settings."""
    if not config.logfire_enabled:
        logger.debug("Observability disabled via configuration")
        return

    logfire.configure(
        service_name="lending-library",
        environment=config.environment,
        send_to_logfire=config.logfire_send,
        console=None if config.logfire_console else False,
    )


def trace_command(command: str):
    """Wrap a library command in a ``library.<command>`` span."""

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            with logfire.span(f"library.{command}", command=command) as span:
                start_time = datetime.now()
                result = await func(*args, **kwargs)

                span.set_attribute("command.success", result.is_ok)
                span.set_attribute(
                    "command.duration_ms", (datetime.now() - start_time).total_seconds() * 1000
                )
                _add_result_attributes(span, result)
                return result

        return wrapper

    return decorator


def _add_result_attributes(span, result: Any) -> None:
    if isinstance(result, ErrResult):
        span.set_attribute("command.error_codes", [e.code.value for e in result.errors])
    elif isinstance(result.val, list):
        span.set_attribute("result.item_count", len(result.val))
