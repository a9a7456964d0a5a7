# tests/test_cli.py

from __future__ import annotations

from pathlib import Path

import pytest
from rich.console import Console

from cli.run_tests import EXIT_BAD_PATH, EXIT_FAILED, EXIT_NO_TESTS, EXIT_OK, main


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("TICKTEST_TEST", "TICKTEST_PATTERN", "TICKTEST_TAGS"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "ticktest.yaml"
    path.write_text("backend: mock\n", encoding="utf-8")
    return path


def run(argv, spec_dir: Path, config_path: Path):
    console = Console(record=True, width=160, color_system=None)
    code = main(["--config", str(config_path), "--tests", str(spec_dir), *argv], console=console)
    return code, console.export_text()


def test_all_selected_pass(spec_dir, config_path):
    code, text = run(["--tag", "lamps"], spec_dir, config_path)
    assert code == EXIT_OK
    assert "PASS lamp_on" in text
    assert "place_stone" not in text


def test_failures_exit_nonzero(spec_dir, config_path):
    code, text = run(["--tag", "redstone"], spec_dir, config_path)
    assert code == EXIT_FAILED
    assert "FAIL missing_block" in text
    assert "1/2 passed" in text


def test_nothing_selected(spec_dir, config_path):
    code, text = run(["--pattern", "zzz*"], spec_dir, config_path)
    assert code == EXIT_NO_TESTS
    assert "No tests selected" in text


def test_missing_test_path_is_reported_without_traceback(tmp_path, config_path):
    missing = tmp_path / "no_such_dir"
    code, text = run([], missing, config_path)
    assert code == EXIT_BAD_PATH
    assert "Error:" in text
    assert "no_such_dir" in text

    code, text = run(["--list"], missing, config_path)
    assert code == EXIT_BAD_PATH


def test_exact_name_and_parallel(spec_dir, config_path):
    code, text = run(["--name", "place_stone", "--parallel", "--debug"], spec_dir, config_path)
    assert code == EXIT_OK
    assert "1/1 passed" in text


def test_env_pattern_is_honored(spec_dir, config_path, monkeypatch):
    monkeypatch.setenv("TICKTEST_PATTERN", "place_*")
    code, text = run([], spec_dir, config_path)
    assert code == EXIT_OK
    assert "PASS place_stone" in text
    assert "lamp_on" not in text


def test_list_and_list_tags(spec_dir, config_path):
    code, text = run(["--list"], spec_dir, config_path)
    assert code == EXIT_OK
    assert text.split() == ["lamp_on", "missing_block", "place_stone"]

    code, text = run(["--list-tags"], spec_dir, config_path)
    assert code == EXIT_OK
    assert text.split() == ["basic", "lamps", "redstone"]


def test_verbose_prints_detailed_report(spec_dir, config_path):
    code, text = run(["--verbose", "--backend", "registry"], spec_dir, config_path)
    assert code == EXIT_FAILED
    assert "Test Results" in text
    assert "Expected:" in text


def test_bundled_specs_pass():
    console = Console(record=True, width=160, color_system=None)
    assert main([], console=console) == EXIT_OK
