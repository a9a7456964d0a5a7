# src/selection/__init__.py
"""
Test discovery and selection.

Exports:
    - TestFilter / glob_match: which specs to run
    - TestLoader / SpecLoadError / load_test_spec_from_file: spec files -> TestSpec
    - TestSelector: loader + filter glue
"""

from __future__ import annotations

from .filter import TestFilter, glob_match
from .loader import LoadError, SpecLoadError, TestLoader, load_test_spec_from_file
from .selector import TestSelector

__all__ = [
    "LoadError",
    "SpecLoadError",
    "TestFilter",
    "TestLoader",
    "TestSelector",
    "glob_match",
    "load_test_spec_from_file",
]
