"""Utility modules."""

from garage_parts.utils.logging import ServiceLogger, get_logger, setup_logging
from garage_parts.utils.scheduling import PeriodicTask
from garage_parts.utils.tracing import SweepTracer

__all__ = ["get_logger", "setup_logging", "ServiceLogger", "PeriodicTask", "SweepTracer"]
