"""Telemetry and observability helpers.

This package emits deterministic run events for batch auditing.
"""

from .logger import RunLogger

__all__ = ["RunLogger"]
