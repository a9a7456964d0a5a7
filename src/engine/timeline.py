# src/engine/timeline.py
"""
Timeline aggregation.

Merges one or more TestSpecs, each with an optional spatial offset, into a
single tick-indexed schedule. Offsets let several tests share one world
without their coordinates colliding.

Guarantees:
- Buckets are plain lists appended in input order (spec order, then
  timeline order, then value order), so the same input always produces
  the same schedule.
- Ticks are kept in a dict keyed by tick; iteration helpers always sort.
- Input is assumed validated (no negative ticks); the loader rejects
  those.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from spec.test_spec import TestSpec, TimelineEntry
from spec.types import BlockPos


ZERO_OFFSET: BlockPos = (0, 0, 0)

# (spec_index, offset entry, value_index)
ScheduledEntry = Tuple[int, TimelineEntry, int]


@dataclass(frozen=True)
class AggregatedTimeline:
    """
    Immutable merged schedule.

    Fields:
      - timeline: tick -> scheduled entries, in application order
      - max_tick: highest scheduled tick (0 when nothing is scheduled)
      - breakpoints: sorted union of the merged specs' breakpoint ticks
    """

    timeline: Mapping[int, Tuple[ScheduledEntry, ...]]
    max_tick: int
    breakpoints: Tuple[int, ...] = ()

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_tests(
        cls,
        tests: Sequence[Tuple[TestSpec, BlockPos]],
    ) -> "AggregatedTimeline":
        buckets: Dict[int, List[ScheduledEntry]] = {}
        breakpoints = set()

        for spec_index, (spec, offset) in enumerate(tests):
            for entry in spec.timeline:
                shifted = entry.offset(offset)
                for value_index, tick in enumerate(entry.ticks):
                    buckets.setdefault(tick, []).append((spec_index, shifted, value_index))
            breakpoints.update(spec.breakpoints)

        max_tick = max(buckets) if buckets else 0
        timeline = {tick: tuple(buckets[tick]) for tick in sorted(buckets)}
        return cls(
            timeline=timeline,
            max_tick=max_tick,
            breakpoints=tuple(sorted(breakpoints)),
        )

    @classmethod
    def from_spec(
        cls,
        spec: TestSpec,
        offset: BlockPos = ZERO_OFFSET,
    ) -> "AggregatedTimeline":
        return cls.from_tests([(spec, offset)])

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def actions_at(self, tick: int) -> Tuple[ScheduledEntry, ...]:
        """Scheduled entries for `tick` (empty tuple when none)."""
        return self.timeline.get(tick, ())

    def ticks(self) -> List[int]:
        """Ticks that have at least one scheduled entry, ascending."""
        return sorted(self.timeline)

    def next_action_tick(self, tick: int) -> Optional[int]:
        """First scheduled tick >= `tick`, or None past the last one."""
        for candidate in self.ticks():
            if candidate >= tick:
                return candidate
        return None

    def is_breakpoint(self, tick: int) -> bool:
        return tick in self.breakpoints

    def __len__(self) -> int:
        return sum(len(entries) for entries in self.timeline.values())

    def iter_entries(self) -> Iterable[Tuple[int, ScheduledEntry]]:
        """Yield (tick, scheduled entry) in execution order."""
        for tick in self.ticks():
            for scheduled in self.timeline[tick]:
                yield tick, scheduled
