"""Tracing helpers built on the OpenTelemetry API.

Span export is configured by the hosting process; without an SDK tracer
provider installed every span is a no-op.
"""

from typing import Any, Iterator, Optional
from contextlib import contextmanager

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode


def get_tracer(name: str):
    """Get a tracer instance."""
    return trace.get_tracer(name)


@contextmanager
def trace_span(name: str, tracer_name: str = "acl", enabled: bool = True, **attributes: Any) -> Iterator[Optional[Span]]:
    """Run a block inside a span, recording the exception when it fails."""
    if not enabled:
        yield None
        return

    with get_tracer(tracer_name).start_as_current_span(
        name, record_exception=False, set_status_on_exception=False
    ) as span:
        for key, value in attributes.items():
            if value is not None:
                span.set_attribute(key, value)
        try:
            yield span
        except Exception as exc:
            span.record_exception(exc)
            span.set_status(Status(StatusCode.ERROR, str(exc)))
            raise
