# src/selection/filter.py
"""
Test filtering by exact name, glob name patterns and tags.

All configured constraints must hold (AND); within a multi-value
constraint any one value is enough (OR). A filter with nothing set
matches every spec.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Iterable, Optional, Tuple

from spec.test_spec import TestSpec


def glob_match(pattern: str, text: str) -> bool:
    """
    Match `text` against a glob `pattern`, anchored at both ends.

    `*` matches any run of characters (including none), `?` matches
    exactly one character, everything else matches literally.
    """

    @lru_cache(maxsize=None)
    def match_from(pi: int, ti: int) -> bool:
        if pi == len(pattern):
            return ti == len(text)

        token = pattern[pi]
        if token == "*":
            # Zero characters first, then progressively longer runs.
            return any(match_from(pi + 1, i) for i in range(ti, len(text) + 1))
        if ti == len(text):
            return False
        if token == "?" or token == text[ti]:
            return match_from(pi + 1, ti + 1)
        return False

    return match_from(0, 0)


@dataclass(frozen=True)
class TestFilter:
    """Criteria for selecting tests to run."""

    __test__ = False

    tags: Tuple[str, ...] = ()
    name_patterns: Tuple[str, ...] = ()
    exact_name: Optional[str] = None

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def all(cls) -> "TestFilter":
        return cls()

    @classmethod
    def by_tags(cls, tags: Iterable[str]) -> "TestFilter":
        return cls(tags=tuple(tags))

    @classmethod
    def by_name(cls, name: str) -> "TestFilter":
        return cls(exact_name=name)

    @classmethod
    def by_patterns(cls, patterns: Iterable[str]) -> "TestFilter":
        return cls(name_patterns=tuple(patterns))

    def with_tags(self, tags: Iterable[str]) -> "TestFilter":
        return replace(self, tags=self.tags + tuple(tags))

    def with_patterns(self, patterns: Iterable[str]) -> "TestFilter":
        return replace(self, name_patterns=self.name_patterns + tuple(patterns))

    def with_exact_name(self, name: str) -> "TestFilter":
        return replace(self, exact_name=name)

    # ------------------------------------------------------------------
    # Predicate
    # ------------------------------------------------------------------

    def matches(self, spec: TestSpec) -> bool:
        if self.exact_name is not None and spec.name != self.exact_name:
            return False

        if self.name_patterns and not any(
            glob_match(pattern, spec.name) for pattern in self.name_patterns
        ):
            return False

        if self.tags and not any(tag in spec.tags for tag in self.tags):
            return False

        return True

    def is_empty(self) -> bool:
        """True if no constraints are set (matches everything)."""
        return not self.tags and not self.name_patterns and self.exact_name is None
