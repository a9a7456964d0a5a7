# path: src/monitoring/events.py
"""
Monitoring event schema for ticktest runs.

This module defines:
- EventType enum
- MonitoringEvent (structured run lifecycle events)

All events are JSON-serializable via `.to_dict()` and are published on a
monitoring.bus.EventBus by the test runner.
"""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional


# ============================================================
# Event Types
# ============================================================

class EventType(Enum):
    """Typed events emitted while running tests."""

    # One test's lifecycle
    TEST_STARTED = auto()
    TEST_FINISHED = auto()

    # First failing assertion of a test
    ASSERTION_FAILED = auto()

    # Debug-mode pause point reached
    BREAKPOINT_HIT = auto()

    # Whole batch done; payload carries the counts
    BATCH_FINISHED = auto()


# ============================================================
# Monitoring Event Structure
# ============================================================

@dataclass
class MonitoringEvent:
    """
    Runtime event emitted by the runner.

    All payload values must be JSON-safe.
    """

    event_type: EventType               # Enum describing the event class
    test_name: Optional[str]            # None for batch-level events
    payload: Dict[str, Any] = field(default_factory=dict)
    ts: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-safe dict for loggers."""
        data = asdict(self)
        data["event_type"] = self.event_type.name  # store name, not enum
        return data
