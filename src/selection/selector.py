# src/selection/selector.py
"""
Glue between spec discovery and filtering.

TestSelector loads everything under a test root once per call and hands
back the specs a TestFilter accepts, in load (sorted path) order.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from spec.test_spec import TestSpec

from .filter import TestFilter
from .loader import LoadError, TestLoader


log = logging.getLogger(__name__)


class TestSelector:
    __test__ = False

    def __init__(self, test_root: Path) -> None:
        self._loader = TestLoader(Path(test_root))
        self.last_errors: List[LoadError] = []

    @property
    def test_root(self) -> Path:
        return self._loader.root

    def _load(self) -> List[TestSpec]:
        specs, errors = self._loader.load_all()
        self.last_errors = errors
        if errors:
            log.warning("%d test file(s) under %s failed to load", len(errors), self.test_root)
        return specs

    def load_tests(self, test_filter: Optional[TestFilter] = None) -> List[TestSpec]:
        """All loadable specs accepted by `test_filter` (everything if None)."""
        test_filter = test_filter or TestFilter.all()
        specs = self._load()
        selected = [s for s in specs if test_filter.matches(s)]
        log.info("Selected %d of %d tests from %s", len(selected), len(specs), self.test_root)
        return selected

    def load_test_by_name(self, name: str) -> Optional[TestSpec]:
        matches = self.load_tests(TestFilter.by_name(name))
        return matches[0] if matches else None

    def list_test_names(self) -> List[str]:
        return sorted(s.name for s in self._load())

    def list_tags(self) -> List[str]:
        tags = set()
        for spec in self._load():
            tags.update(spec.tags)
        return sorted(tags)
