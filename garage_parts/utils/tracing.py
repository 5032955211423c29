"""Reorder sweep tracing and timing."""

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generator

from garage_parts.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class TraceEvent:
    """Individual trace event within a sweep."""

    timestamp: datetime
    event_type: str
    part_id: str
    sweep_id: str
    duration_ms: float | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class SweepTracer:
    """Traces the per-part decisions taken during one reorder sweep."""

    def __init__(self, sweep_id: str):
        self.sweep_id = sweep_id
        self.events: list[TraceEvent] = []
        self.start_time = time.time()

    def add_event(
        self,
        event_type: str,
        part_id: str,
        duration_ms: float | None = None,
        **metadata: Any,
    ) -> None:
        """Add a trace event."""
        event = TraceEvent(
            timestamp=datetime.utcnow(),
            event_type=event_type,
            part_id=part_id,
            sweep_id=self.sweep_id,
            duration_ms=duration_ms,
            metadata=metadata,
        )
        self.events.append(event)

        logger.debug(
            "trace_event",
            sweep_id=self.sweep_id,
            event_type=event_type,
            part_id=part_id,
            duration_ms=duration_ms,
            **metadata,
        )

    @contextmanager
    def trace_operation(
        self, operation: str, part_id: str, **metadata: Any
    ) -> Generator[None, None, None]:
        """Context manager to trace an operation with timing."""
        start = time.time()
        try:
            yield
        finally:
            duration_ms = (time.time() - start) * 1000
            self.add_event(operation, part_id, duration_ms=duration_ms, **metadata)

    def get_trace_summary(self) -> dict[str, Any]:
        """Get a summary of the trace."""
        total_duration = (time.time() - self.start_time) * 1000

        event_counts: dict[str, int] = {}
        for event in self.events:
            event_counts[event.event_type] = event_counts.get(event.event_type, 0) + 1

        return {
            "sweep_id": self.sweep_id,
            "total_duration_ms": total_duration,
            "total_events": len(self.events),
            "event_counts": event_counts,
            "events": [
                {
                    "timestamp": event.timestamp.isoformat(),
                    "event_type": event.event_type,
                    "part_id": event.part_id,
                    "duration_ms": event.duration_ms,
                    "metadata": event.metadata,
                }
                for event in self.events
            ],
        }
