"""OpenTelemetry tracing helpers.

objstore only depends on the OpenTelemetry API. Spans are no-ops until the
embedding application installs a tracer provider.
"""

from __future__ import annotations

from opentelemetry import trace


def get_tracer(name: str) -> trace.Tracer:
    """Get a tracer instance for creating custom spans.

    Args:
        name: Tracer name, typically __name__ of the module.

    Returns:
        Tracer instance for creating spans.

    Example:
        from objstore.infra.tracing.opentelemetry import get_tracer

        tracer = get_tracer(__name__)

        async def sign_all(keys: list[str]):
            with tracer.start_as_current_span("sign_all") as span:
                span.set_attribute("keys.count", len(keys))
    """
    return trace.get_tracer(name)
