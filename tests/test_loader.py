# tests/test_loader.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from selection.filter import TestFilter
from selection.loader import SpecLoadError, TestLoader, load_test_spec_from_file
from selection.selector import TestSelector
from spec.test_spec import (
    Assert,
    Fill,
    Place,
    PlaceEach,
    Remove,
    SelectHotbar,
    SetSlot,
    UseItemOn,
)
from spec.types import Block, BlockFace, PlayerSlot


FULL_SPEC = """
flint_version: "0.3"
name: "everything"
description: "Uses every action kind"
tags: [redstone, player]
dependencies: [basic_place]
setup:
  player:
    inventory:
      hotbar1: {item: "minecraft:stone", count: 64}
      offhand: minecraft:shield
    selected_hotbar: 2
timeline:
  - at: 0
    do: place
    pos: [0, 64, 0]
    block: {id: "minecraft:repeater", properties: {delay: 2, powered: false}}
  - at: 0
    do: place_each
    blocks:
      - {pos: [1, 64, 0], block: "minecraft:stone"}
      - {pos: [2, 64, 0], block: {id: "minecraft:dirt"}}
  - at: 1
    do: fill
    region: [[0, 60, 0], [3, 60, 3]]
    with: minecraft:stone
  - at: [2, 4]
    do: remove
    pos: [1, 64, 0]
  - at: 3
    do: use_item_on
    pos: [0, 64, 0]
    face: Top
    item: minecraft:stick
  - at: 3
    do: set_slot
    slot: hotbar9
    item: minecraft:diamond_sword
  - at: 3
    do: set_slot
    slot: offhand
  - at: 3
    do: select_hotbar
    slot: 12
  - at: 5
    do: assert
    checks:
      - pos: [0, 64, 0]
        is: {id: "minecraft:repeater", properties: {delay: 2}}
      - {pos: [1, 64, 0], is: "minecraft:air"}
breakpoints: [3, 5]
"""


def write(tmp_path: Path, name: str, content: str) -> Path:
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


# ------------------------------------------------------------
# Single files
# ------------------------------------------------------------

def test_load_full_spec(tmp_path: Path) -> None:
    spec = load_test_spec_from_file(write(tmp_path, "everything.yaml", FULL_SPEC))

    assert spec.name == "everything"
    assert spec.version == "0.3"
    assert spec.description == "Uses every action kind"
    assert set(spec.tags) == {"redstone", "player"}
    assert spec.dependencies == ("basic_place",)
    assert spec.breakpoints == (3, 5)

    player = spec.player_setup
    assert player.selected_hotbar == 2
    assert player.inventory[PlayerSlot.HOTBAR1].item == "minecraft:stone"
    assert player.inventory[PlayerSlot.HOTBAR1].count == 64
    assert player.inventory[PlayerSlot.OFFHAND].count == 1

    actions = [e.action for e in spec.timeline]
    place, place_each, fill, remove, use, set_sword, clear_offhand, select, check = actions

    assert place == Place(pos=(0, 64, 0), block=Block(id="minecraft:repeater", properties={"delay": 2, "powered": False}))
    assert isinstance(place_each, PlaceEach)
    assert [p.block.id for p in place_each.placements] == ["minecraft:stone", "minecraft:dirt"]
    assert isinstance(fill, Fill) and fill.region == ((0, 60, 0), (3, 60, 3))
    assert isinstance(remove, Remove)
    assert spec.timeline[3].ticks == (2, 4)
    assert use == UseItemOn(pos=(0, 64, 0), face=BlockFace.TOP, item="minecraft:stick")
    assert set_sword == SetSlot(slot=PlayerSlot.HOTBAR9, item="minecraft:diamond_sword", count=1)
    assert clear_offhand == SetSlot(slot=PlayerSlot.OFFHAND, item=None)
    assert select == SelectHotbar(slot=12)
    assert isinstance(check, Assert)
    assert check.checks[1].expected == Block(id="minecraft:air")


def test_json_files_are_accepted(tmp_path: Path) -> None:
    path = write(
        tmp_path,
        "place.json",
        '{"name": "json_spec", "tags": ["basic"], "timeline": '
        '[{"at": 0, "do": "place", "pos": [1, 2, 3], "block": "minecraft:stone"}]}',
    )
    spec = load_test_spec_from_file(path)
    assert spec.name == "json_spec"
    assert spec.timeline[0].action == Place(pos=(1, 2, 3), block=Block(id="minecraft:stone"))
    assert spec.setup is None


@pytest.mark.parametrize(
    "body, fragment",
    [
        ("tags: [a]\n", "'name'"),
        ("name: ''\n", "'name'"),
        ("name: x\ntimeline:\n  - {at: -1, do: remove, pos: [0, 0, 0]}\n", "tick must be >= 0"),
        ("name: x\ntimeline:\n  - {at: 0, do: explode, pos: [0, 0, 0]}\n", "unknown action 'explode'"),
        ("name: x\ntimeline:\n  - {do: remove, pos: [0, 0, 0]}\n", "missing 'at'"),
        ("name: x\ntimeline:\n  - {at: 0, do: place, pos: [0, 0, 0]}\n", "missing field 'block'"),
        ("name: x\ntimeline:\n  - {at: 0, do: remove, pos: [0, 0]}\n", "Expected [x, y, z]"),
        ("name: x\ntimeline:\n  - {at: 0, do: remove, pos: [0.5, 0, 0]}\n", "whole-number coordinates"),
        ("name: x\ntimeline:\n  - {at: 0, do: remove, pos: [true, 0, 0]}\n", "integer coordinates"),
        ("name: x\ntags: 5\n", "'tags' must be a list of strings"),
        ("name: x\ntags: [ok, [nested]]\n", "'tags' entries must be strings"),
        ("name: x\ndependencies: 5\n", "'dependencies' must be a list of strings"),
        ("name: x\ndescription: [a, b]\n", "'description' must be a scalar"),
        ("name: x\ntimeline:\n  - {at: 0, do: use_item_on, pos: [0, 0, 0], face: up}\n", "unknown block face"),
        ("name: x\ntimeline:\n  - {at: 0, do: set_slot, slot: pocket}\n", "unknown player slot"),
        ("name: x\ntimeline:\n  - {at: 0, do: fill, region: [[0, 0, 0]], with: stone}\n", "two corners"),
        ("- just\n- a list\n", "expected a mapping"),
        ("name: [unclosed\n", "parse error"),
    ],
)
def test_malformed_specs_raise_spec_load_error(tmp_path: Path, body: str, fragment: str) -> None:
    path = write(tmp_path, "bad.yaml", body)
    with pytest.raises(SpecLoadError) as excinfo:
        load_test_spec_from_file(path)
    assert excinfo.value.path == path
    assert fragment in str(excinfo.value)
    assert str(path) in str(excinfo.value)


# ------------------------------------------------------------
# Directory loading + selection
# ------------------------------------------------------------

def test_collect_all_test_files_is_recursive_and_sorted(spec_dir: Path) -> None:
    files = TestLoader(spec_dir).collect_all_test_files()
    assert [f.relative_to(spec_dir).as_posix() for f in files] == [
        "broken.yaml",
        "place_stone.yaml",
        "redstone/lamp.yaml",
        "redstone/missing_block.json",
    ]


def test_load_all_skips_broken_files(spec_dir: Path, caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="selection.loader"):
        specs, errors = TestLoader(spec_dir).load_all()

    assert [s.name for s in specs] == ["place_stone", "lamp_on", "missing_block"]
    assert len(errors) == 1
    assert errors[0].path.name == "broken.yaml"
    assert "broken.yaml" in caplog.text


def test_undecodable_file_raises_spec_load_error(tmp_path: Path) -> None:
    path = tmp_path / "latin.yaml"
    path.write_bytes(b"name: caf\xe9\n")
    with pytest.raises(SpecLoadError) as excinfo:
        load_test_spec_from_file(path)
    assert excinfo.value.path == path
    assert "not valid UTF-8" in str(excinfo.value)


def test_load_all_keeps_going_past_undecodable_and_mistyped_files(tmp_path: Path) -> None:
    write(tmp_path, "a_good.yaml", "name: good\n")
    (tmp_path / "b_bad.yaml").write_bytes(b"\xff\xfe")
    write(tmp_path, "c_tags.yaml", "name: bad_tags\ntags: 5\n")
    write(tmp_path, "d_good.yaml", "name: also_good\ntags: solo\n")

    specs, errors = TestLoader(tmp_path).load_all()

    assert [s.name for s in specs] == ["good", "also_good"]
    assert specs[1].tags == ("solo",)
    assert [e.path.name for e in errors] == ["b_bad.yaml", "c_tags.yaml"]


def test_whole_float_coordinates_are_accepted(tmp_path: Path) -> None:
    path = write(tmp_path, "floats.yaml", "name: x\ntimeline:\n  - {at: 0, do: remove, pos: [1.0, 2, -3.0]}\n")
    assert load_test_spec_from_file(path).timeline[0].action == Remove(pos=(1, 2, -3))


def test_duplicate_names_first_wins(spec_dir: Path) -> None:
    write(spec_dir, "zz_duplicate.yaml", "name: place_stone\ntags: [dupe]\n")
    specs, errors = TestLoader(spec_dir).load_all()

    stones = [s for s in specs if s.name == "place_stone"]
    assert len(stones) == 1
    assert stones[0].tags == ("basic",)
    assert any("duplicate test name 'place_stone'" in e.message for e in errors)


def test_missing_root_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        TestLoader(tmp_path / "nope").collect_all_test_files()


def test_single_file_root(spec_dir: Path) -> None:
    specs, errors = TestLoader(spec_dir / "place_stone.yaml").load_all()
    assert [s.name for s in specs] == ["place_stone"]
    assert errors == []


def test_selector_queries(spec_dir: Path) -> None:
    selector = TestSelector(spec_dir)

    assert selector.list_test_names() == ["lamp_on", "missing_block", "place_stone"]
    assert selector.list_tags() == ["basic", "lamps", "redstone"]
    assert len(selector.last_errors) == 1

    redstone = selector.load_tests(TestFilter.by_tags(["redstone"]))
    assert [s.name for s in redstone] == ["lamp_on", "missing_block"]

    everything = selector.load_tests()
    assert len(everything) == 3

    by_pattern = selector.load_tests(TestFilter.by_patterns(["*_stone", "lamp_?n"]))
    assert [s.name for s in by_pattern] == ["place_stone", "lamp_on"]

    assert selector.load_test_by_name("lamp_on").tags == ("redstone", "lamps")
    assert selector.load_test_by_name("nonexistent") is None
