# src/env/loader.py
"""
Run configuration for ticktest.

Resolution order (later wins):
    1. RunConfig defaults
    2. config/ticktest.yaml (optional; a missing file means defaults)
    3. TICKTEST_TEST / TICKTEST_PATTERN / TICKTEST_TAGS environment variables

CLI flags are applied on top of the result by cli.run_tests.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from engine.runner import TestRunConfig
from selection.filter import TestFilter


log = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]
CONFIG_ROOT = PROJECT_ROOT / "config"
DEFAULT_CONFIG_PATH = CONFIG_ROOT / "ticktest.yaml"

ENV_TEST = "TICKTEST_TEST"
ENV_PATTERN = "TICKTEST_PATTERN"
ENV_TAGS = "TICKTEST_TAGS"

BACKENDS = ("mock", "registry")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class RunConfig:
    """Everything needed to select and run a batch."""

    test_path: Path = PROJECT_ROOT / "test_specs"
    tags: List[str] = field(default_factory=list)
    name_patterns: List[str] = field(default_factory=list)
    exact_name: Optional[str] = None
    backend: str = "mock"
    debug_enabled: bool = False
    parallel: bool = False
    max_parallel_worlds: int = 4
    log_level: str = "INFO"

    def to_filter(self) -> TestFilter:
        test_filter = TestFilter(
            tags=tuple(self.tags),
            name_patterns=tuple(self.name_patterns),
        )
        if self.exact_name:
            test_filter = test_filter.with_exact_name(self.exact_name)
        return test_filter

    def to_run_config(self) -> TestRunConfig:
        return TestRunConfig(
            debug_enabled=self.debug_enabled,
            parallel=self.parallel,
            max_parallel_worlds=self.max_parallel_worlds,
        )

    def validate(self) -> None:
        if self.backend not in BACKENDS:
            raise ValueError(f"Invalid backend: {self.backend!r} (expected one of {BACKENDS})")
        if self.max_parallel_worlds < 1:
            raise ValueError(f"max_parallel_worlds must be >= 1, got {self.max_parallel_worlds}")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Invalid log_level: {self.log_level!r}")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml(path: Path) -> Dict[str, Any]:
    """Load the config file; a missing file yields an empty mapping."""
    if not path.exists():
        log.debug("No config file at %s, using defaults", path)
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected mapping at top of {path}, got {type(data)}")
    return data


def _split_csv(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return _split_csv(value)
    return [str(v) for v in value]


def _resolve_test_path(raw: Any) -> Path:
    path = Path(str(raw))
    if not path.is_absolute():
        path = PROJECT_ROOT / path
    return path


def _from_mapping(raw: Mapping[str, Any]) -> RunConfig:
    cfg = RunConfig()
    if "test_path" in raw:
        cfg.test_path = _resolve_test_path(raw["test_path"])
    cfg.tags = _as_list(raw.get("tags"))
    cfg.name_patterns = _as_list(raw.get("name_patterns"))
    if raw.get("exact_name"):
        cfg.exact_name = str(raw["exact_name"])
    cfg.backend = str(raw.get("backend", cfg.backend))
    cfg.debug_enabled = bool(raw.get("debug_enabled", cfg.debug_enabled))
    cfg.parallel = bool(raw.get("parallel", cfg.parallel))
    cfg.max_parallel_worlds = int(raw.get("max_parallel_worlds", cfg.max_parallel_worlds))
    cfg.log_level = str(raw.get("log_level", cfg.log_level)).upper()
    return cfg


def apply_env_overrides(cfg: RunConfig, environ: Optional[Mapping[str, str]] = None) -> RunConfig:
    """Apply TICKTEST_* variables to `cfg` in place and return it."""
    environ = os.environ if environ is None else environ

    name = environ.get(ENV_TEST)
    if name:
        cfg.exact_name = name

    patterns = environ.get(ENV_PATTERN)
    if patterns:
        cfg.name_patterns = _split_csv(patterns)

    tags = environ.get(ENV_TAGS)
    if tags:
        cfg.tags = _split_csv(tags)

    return cfg


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_run_config(
    path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> RunConfig:
    """Main entry point: returns a validated RunConfig."""
    cfg = _from_mapping(_load_yaml(path or DEFAULT_CONFIG_PATH))
    apply_env_overrides(cfg, environ)
    cfg.validate()
    return cfg
