# src/engine/matching.py
"""
Block comparison used by Assert actions.

Rules:
- Identifiers match after stripping an optional namespace on both sides
  ("stone" == "minecraft:stone").
- Properties are a subset match: only properties named in the expected
  block are checked, and each must be present in the actual block with
  an equal string value.
- Expected values without a string form (None, lists, dicts) are
  "don't care". The key "properties" is reserved for the legacy nested
  encoding and is never compared.
"""

from __future__ import annotations

from spec.types import Block, BlockData, normalize_property_value, strip_namespace


RESERVED_PROPERTY_KEY = "properties"


def ids_match(expected_id: str, actual_id: str) -> bool:
    if expected_id == actual_id:
        return True
    return strip_namespace(expected_id) == strip_namespace(actual_id)


def block_matches(actual: BlockData, expected: Block) -> bool:
    """True if `actual` satisfies every constraint in `expected`."""
    if not ids_match(expected.id, actual.id):
        return False

    for key, value in expected.properties.items():
        if key == RESERVED_PROPERTY_KEY:
            continue
        expected_str = normalize_property_value(value)
        if expected_str is None:
            continue
        if actual.properties.get(key) != expected_str:
            return False

    return True


def render_expected(expected: Block) -> str:
    """Canonical `id[k=v,...]` form of an expected block."""
    props = {
        k: v
        for k, v in expected.string_properties().items()
        if k != RESERVED_PROPERTY_KEY
    }
    return str(BlockData(id=expected.id, properties=props))


def render_actual(actual: BlockData) -> str:
    return str(actual)
