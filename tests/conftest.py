# tests/conftest.py

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure src/ is on sys.path for test imports like `import engine`, `import spec`.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = PROJECT_ROOT / "src"

if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from backends.mock import MockAdapter  # noqa: E402


@pytest.fixture
def mock_adapter() -> MockAdapter:
    return MockAdapter()


@pytest.fixture
def spec_dir(tmp_path: Path) -> Path:
    """A small test tree: two YAML specs, one JSON spec, one broken file."""
    root = tmp_path / "specs"
    (root / "redstone").mkdir(parents=True)

    (root / "place_stone.yaml").write_text(
        """
name: place_stone
tags: [basic]
timeline:
  - at: 0
    do: place
    pos: [0, 64, 0]
    block: minecraft:stone
  - at: 1
    do: assert
    checks:
      - pos: [0, 64, 0]
        is: stone
""",
        encoding="utf-8",
    )
    (root / "redstone" / "lamp.yaml").write_text(
        """
name: lamp_on
tags: [redstone, lamps]
timeline:
  - at: 0
    do: place
    pos: [1, 64, 1]
    block: {id: "minecraft:redstone_lamp", properties: {lit: true}}
  - at: 2
    do: assert
    checks:
      - pos: [1, 64, 1]
        is: {id: "minecraft:redstone_lamp", properties: {lit: true}}
""",
        encoding="utf-8",
    )
    (root / "redstone" / "missing_block.json").write_text(
        """
{
  "name": "missing_block",
  "tags": ["redstone"],
  "timeline": [
    {"at": 0, "do": "assert", "checks": [{"pos": [5, 5, 5], "is": "minecraft:stone"}]}
  ]
}
""",
        encoding="utf-8",
    )
    (root / "broken.yaml").write_text("name: broken\ntimeline:\n  - at: -1\n    do: remove\n    pos: [0, 0, 0]\n", encoding="utf-8")
    (root / "notes.txt").write_text("not a spec", encoding="utf-8")
    return root
