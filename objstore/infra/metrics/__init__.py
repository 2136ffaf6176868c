"""Prometheus metrics infrastructure."""

from .prometheus import REGISTRY

__all__ = ["REGISTRY"]
