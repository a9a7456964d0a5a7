# src/engine/tracing.py
"""
Per-action tracing for the test runner.

A thin, structured record of every executed action so reports and
debugging tools can see what ran at which tick and how long it took.

It does NOT:
- Decide pass/fail
- Touch the world
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional

from spec.results import AssertionResult
from spec.test_spec import Action


@dataclass
class ActionTraceRecord:
    """Structured record of a single action execution."""

    timestamp: float           # wall-clock time (time.time())
    duration_s: float          # execution duration in seconds

    test_name: str
    tick: int
    action_kind: Optional[str]

    success: bool
    error: Optional[str]


class ActionTracer:
    """
    In-memory action tracer with optional logging.

    Responsibilities:
    - Keep a rolling buffer of recent ActionTraceRecord entries.
    - Emit a single debug log line per action.
    """

    def __init__(
        self,
        *,
        logger: Optional[logging.Logger] = None,
        max_records: int = 10_000,
    ) -> None:
        self._logger = logger or logging.getLogger("engine.action")
        self._records: Deque[ActionTraceRecord] = deque(maxlen=max_records)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def record(
        self,
        *,
        test_name: str,
        tick: int,
        action: Action,
        outcome: Optional[AssertionResult],
        duration_s: float,
        error: Optional[str] = None,
    ) -> None:
        """
        Record a trace for a completed action.

        `outcome` is the AssertionResult for Assert actions and None for
        everything else; a failed assertion is recorded as unsuccessful.
        """
        try:
            record = ActionTraceRecord(
                timestamp=time.time(),
                duration_s=duration_s,
                test_name=test_name,
                tick=tick,
                action_kind=getattr(action, "kind", None),
                success=error is None and (outcome is None or outcome.success),
                error=error if error is not None else (
                    outcome.message if outcome is not None and not outcome.success else None
                ),
            )
        except Exception:
            # Tracing must never crash the caller.
            self._logger.exception("Failed to build ActionTraceRecord")
            return

        self._records.append(record)

        self._logger.debug(
            "action_exec test=%s tick=%d kind=%s success=%s duration=%.6fs",
            record.test_name,
            record.tick,
            record.action_kind,
            record.success,
            record.duration_s,
        )

    def get_records(self) -> List[ActionTraceRecord]:
        """Return a snapshot of all currently buffered records."""
        return list(self._records)

    def records_for(self, test_name: str) -> List[ActionTraceRecord]:
        return [r for r in self._records if r.test_name == test_name]

    def clear(self) -> None:
        self._records.clear()
