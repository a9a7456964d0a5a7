# engine package
# src/engine/__init__.py
"""
ticktest execution engine.

Exports:
    - TestRunner / TestRunConfig: tick-by-tick runner and its knobs
    - RunnerError: error for tests that cannot run at all
    - AggregatedTimeline: merged, tick-indexed action schedule
    - ActionExecutor / ExecutionContext: action dispatch
    - block_matches: assertion comparison rule
"""

from __future__ import annotations

from .actions import ActionExecutor, ExecutionContext
from .matching import block_matches
from .runner import RunnerError, TestRunConfig, TestRunner
from .timeline import AggregatedTimeline
from .tracing import ActionTraceRecord, ActionTracer

__all__ = [
    "ActionExecutor",
    "ActionTraceRecord",
    "ActionTracer",
    "AggregatedTimeline",
    "ExecutionContext",
    "RunnerError",
    "TestRunConfig",
    "TestRunner",
    "block_matches",
]
