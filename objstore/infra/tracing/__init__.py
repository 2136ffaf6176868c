"""Tracing infrastructure."""

from .opentelemetry import get_tracer

__all__ = ["get_tracer"]
