# tests/test_matching.py

from __future__ import annotations

from engine.matching import block_matches, ids_match, render_actual, render_expected
from spec.types import Block, BlockData


def test_ids_match_ignores_namespace_on_either_side():
    assert ids_match("stone", "minecraft:stone")
    assert ids_match("minecraft:stone", "stone")
    assert ids_match("minecraft:stone", "minecraft:stone")
    assert not ids_match("stone", "minecraft:dirt")


def test_properties_are_subset_matched():
    actual = BlockData(id="minecraft:oak_stairs", properties={"facing": "east", "half": "bottom"})
    assert block_matches(actual, Block(id="oak_stairs"))
    assert block_matches(actual, Block(id="oak_stairs", properties={"facing": "east"}))
    assert not block_matches(actual, Block(id="oak_stairs", properties={"facing": "west"}))
    assert not block_matches(actual, Block(id="oak_stairs", properties={"shape": "straight"}))


def test_typed_expected_values_are_normalized():
    actual = BlockData(id="minecraft:repeater", properties={"delay": "2", "powered": "true"})
    assert block_matches(actual, Block(id="repeater", properties={"delay": 2, "powered": True}))
    assert not block_matches(actual, Block(id="repeater", properties={"powered": False}))


def test_null_complex_and_reserved_properties_are_ignored():
    actual = BlockData(id="minecraft:lever", properties={"powered": "false"})
    expected = Block(
        id="minecraft:lever",
        properties={"facing": None, "extra": [1, 2], "properties": {"powered": "true"}},
    )
    assert block_matches(actual, expected)


def test_id_mismatch_fails_even_when_properties_match():
    actual = BlockData(id="minecraft:dirt", properties={"snowy": "false"})
    assert not block_matches(actual, Block(id="grass_block", properties={"snowy": False}))


def test_rendering_sorts_properties():
    expected = Block(id="minecraft:repeater", properties={"facing": "north", "delay": 3, "properties": "x"})
    assert render_expected(expected) == "minecraft:repeater[delay=3,facing=north]"
    assert render_actual(BlockData(id="minecraft:air")) == "minecraft:air"
    assert render_actual(BlockData(id="minecraft:lamp", properties={"lit": "true", "a": "b"})) == "minecraft:lamp[a=b,lit=true]"
