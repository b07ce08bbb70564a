"""API route modules."""

from . import state, telemetry

__all__ = ["state", "telemetry"]
