"""Optional OpenTelemetry tracing, exported to Uptrace when a DSN is configured.

Without the ``telemetry`` extra installed every span is a no-op.
"""

import functools
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterator, TypeVar

from config import Config

SERVICE_NAME = "workshop-freshness"

T = TypeVar("T")


@dataclass
class _TracingState:
    configured: bool = False
    exporting: bool = False


_STATE = _TracingState()


class _NoopSpan:
    def set_attribute(self, _key: str, _value: Any) -> None:
        return

    def record_exception(self, _exc: BaseException) -> None:
        return


def _trace_api():
    try:
        from opentelemetry import trace
    except ImportError:
        return None
    return trace


@contextmanager
def span(name: str, **attributes: Any) -> Iterator[Any]:
    trace = _trace_api()
    if trace is None:
        yield _NoopSpan()
        return
    with trace.get_tracer(SERVICE_NAME).start_as_current_span(name) as current:
        for key, value in attributes.items():
            if value is not None:
                current.set_attribute(f"workshop.{key}", value)
        yield current


def traced(name: str) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Wrap a coroutine taking ``mod_id`` as its first argument in a span."""

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(mod_id: int, *args: Any, **kwargs: Any) -> T:
            with span(name, mod_id=int(mod_id)):
                return await func(mod_id, *args, **kwargs)

        return wrapper

    return decorator


def configure_tracing(config: Config) -> bool:
    if _STATE.configured:
        return _STATE.exporting
    _STATE.configured = True

    if not config.uptrace_dsn:
        logging.debug("No Uptrace DSN configured, tracing disabled")
        return False

    try:
        import uptrace
        from opentelemetry.instrumentation.aiohttp_client import AioHttpClientInstrumentor

        uptrace.configure_opentelemetry(dsn=config.uptrace_dsn, service_name=SERVICE_NAME)
        AioHttpClientInstrumentor().instrument()
    except (ImportError, RuntimeError, ValueError, TypeError, AttributeError):
        logging.exception("Failed to initialize OpenTelemetry")
        return False

    _STATE.exporting = True
    logging.info("Tracing enabled, exporting to Uptrace")
    return True


def shutdown_tracing() -> None:
    if not _STATE.exporting:
        return
    try:
        import uptrace

        uptrace.shutdown()
    except (ImportError, RuntimeError, ValueError, TypeError, AttributeError):
        logging.exception("Failed to shutdown OpenTelemetry cleanly")
    _STATE.exporting = False
