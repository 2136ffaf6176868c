"""Prometheus registry shared by every objstore metric."""

from __future__ import annotations

from prometheus_client import CollectorRegistry

# Custom registry so embedding applications decide whether and where to expose it
REGISTRY = CollectorRegistry()
