# src/selection/loader.py
"""
Test spec file loading.

Spec files are JSON or YAML documents (yaml.safe_load reads both), one
test per file. See load_test_spec_from_file() for the accepted shape.
Malformed files raise SpecLoadError; TestLoader.load_all() reports those
per file and keeps going.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import yaml

from spec.test_spec import (
    Action,
    Assert,
    BlockCheck,
    Fill,
    Place,
    PlaceEach,
    Placement,
    PlayerSetup,
    Remove,
    SelectHotbar,
    SetSlot,
    SlotSetup,
    TestSetup,
    TestSpec,
    TimelineEntry,
    UseItemOn,
)
from spec.types import Block, BlockFace, PlayerSlot, make_pos


log = logging.getLogger(__name__)

SPEC_FILE_SUFFIXES = (".json", ".yaml", ".yml")


class SpecLoadError(ValueError):
    """A spec file could not be parsed into a TestSpec."""

    def __init__(self, path: Optional[Path], reason: str) -> None:
        self.path = path
        self.reason = reason
        where = str(path) if path is not None else "<spec>"
        super().__init__(f"{where}: {reason}")


def _load_yaml(path: Path) -> Dict[str, Any]:
    """
    Load a YAML/JSON file into a dict.

    Returns an empty dict if the file is empty, rather than None.
    """
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise SpecLoadError(path, f"expected a mapping at top level, got {type(data).__name__}")
    return data


# ---------------------------------------------------------------------------
# Field parsers
# ---------------------------------------------------------------------------


def _parse_block(raw: Any) -> Block:
    """A block is either a bare id string or {id, properties}."""
    if isinstance(raw, str):
        return Block(id=raw)
    if not isinstance(raw, Mapping) or "id" not in raw:
        raise ValueError(f"invalid block {raw!r}")
    props = raw.get("properties") or {}
    if not isinstance(props, Mapping):
        raise ValueError(f"block properties must be a mapping, got {props!r}")
    return Block(id=str(raw["id"]), properties=dict(props))


def _parse_ticks(raw: Any) -> Tuple[int, ...]:
    values = raw if isinstance(raw, list) else [raw]
    if not values:
        raise ValueError("'at' must name at least one tick")
    ticks = []
    for value in values:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"tick must be an integer, got {value!r}")
        if value < 0:
            raise ValueError(f"tick must be >= 0, got {value}")
        ticks.append(value)
    return tuple(ticks)


def _parse_slot(raw: Any) -> PlayerSlot:
    try:
        return PlayerSlot(str(raw).lower())
    except ValueError:
        raise ValueError(f"unknown player slot {raw!r}") from None


def _parse_face(raw: Any) -> BlockFace:
    try:
        return BlockFace(str(raw).lower())
    except ValueError:
        raise ValueError(f"unknown block face {raw!r}") from None


def _parse_count(raw: Any) -> int:
    count = int(raw)
    if count < 1:
        raise ValueError(f"item count must be >= 1, got {count}")
    return count


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


def _place(raw: Mapping[str, Any]) -> Action:
    return Place(pos=make_pos(raw["pos"]), block=_parse_block(raw["block"]))


def _place_each(raw: Mapping[str, Any]) -> Action:
    return PlaceEach(
        placements=tuple(
            Placement(pos=make_pos(p["pos"]), block=_parse_block(p["block"]))
            for p in raw["blocks"]
        )
    )


def _fill(raw: Mapping[str, Any]) -> Action:
    region = raw["region"]
    if len(region) != 2:
        raise ValueError(f"fill region needs two corners, got {region!r}")
    return Fill(region=(make_pos(region[0]), make_pos(region[1])), block=_parse_block(raw["with"]))


def _remove(raw: Mapping[str, Any]) -> Action:
    return Remove(pos=make_pos(raw["pos"]))


def _assert(raw: Mapping[str, Any]) -> Action:
    return Assert(
        checks=tuple(
            BlockCheck(pos=make_pos(c["pos"]), expected=_parse_block(c["is"]))
            for c in raw["checks"]
        )
    )


def _use_item_on(raw: Mapping[str, Any]) -> Action:
    item = raw.get("item")
    return UseItemOn(
        pos=make_pos(raw["pos"]),
        face=_parse_face(raw["face"]),
        item=str(item) if item is not None else None,
    )


def _set_slot(raw: Mapping[str, Any]) -> Action:
    item = raw.get("item")
    return SetSlot(
        slot=_parse_slot(raw["slot"]),
        item=str(item) if item is not None else None,
        count=_parse_count(raw.get("count", 1)),
    )


def _select_hotbar(raw: Mapping[str, Any]) -> Action:
    # Range is not validated here; out-of-range selections are ignored at run time.
    return SelectHotbar(slot=int(raw["slot"]))


ACTION_PARSERS: Dict[str, Callable[[Mapping[str, Any]], Action]] = {
    "place": _place,
    "place_each": _place_each,
    "fill": _fill,
    "remove": _remove,
    "assert": _assert,
    "use_item_on": _use_item_on,
    "set_slot": _set_slot,
    "select_hotbar": _select_hotbar,
}


def parse_timeline_entry(raw: Mapping[str, Any]) -> TimelineEntry:
    if not isinstance(raw, Mapping):
        raise ValueError(f"timeline entry must be a mapping, got {raw!r}")
    if "at" not in raw:
        raise ValueError("timeline entry missing 'at'")
    kind = raw.get("do")
    parser = ACTION_PARSERS.get(kind)
    if parser is None:
        raise ValueError(f"unknown action {kind!r}")
    try:
        action = parser(raw)
    except KeyError as exc:
        raise ValueError(f"action {kind!r} missing field {exc.args[0]!r}") from None
    return TimelineEntry(ticks=_parse_ticks(raw["at"]), action=action)


# ---------------------------------------------------------------------------
# Setup + top level
# ---------------------------------------------------------------------------


def _parse_setup(raw: Any) -> Optional[TestSetup]:
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        raise ValueError("'setup' must be a mapping")

    player_raw = raw.get("player")
    if player_raw is None:
        return TestSetup(player=None)
    if not isinstance(player_raw, Mapping):
        raise ValueError("'setup.player' must be a mapping")

    inventory: Dict[PlayerSlot, SlotSetup] = {}
    for slot_name, slot_cfg in (player_raw.get("inventory") or {}).items():
        if isinstance(slot_cfg, str):
            slot_cfg = {"item": slot_cfg}
        inventory[_parse_slot(slot_name)] = SlotSetup(
            item=str(slot_cfg["item"]),
            count=_parse_count(slot_cfg.get("count", 1)),
        )

    return TestSetup(
        player=PlayerSetup(
            inventory=inventory,
            selected_hotbar=int(player_raw.get("selected_hotbar", 1)),
        )
    )


def _parse_scalar(raw: Any, field: str) -> Optional[str]:
    if raw is None:
        return None
    if isinstance(raw, (list, dict)):
        raise ValueError(f"'{field}' must be a scalar, got {raw!r}")
    return str(raw)


def _parse_str_list(raw: Any, field: str) -> Tuple[str, ...]:
    """A list of scalars; a single string counts as a one-element list."""
    if raw is None:
        return ()
    if isinstance(raw, str):
        return (raw,) if raw else ()
    if not isinstance(raw, list):
        raise ValueError(f"'{field}' must be a list of strings, got {raw!r}")
    for value in raw:
        if isinstance(value, (list, dict)) or value is None:
            raise ValueError(f"'{field}' entries must be strings, got {value!r}")
    return tuple(str(value) for value in raw)


def parse_test_spec(raw: Mapping[str, Any], path: Optional[Path] = None) -> TestSpec:
    """Build a TestSpec from an already-parsed document."""
    name = raw.get("name")
    if not isinstance(name, str) or not name.strip():
        raise SpecLoadError(path, "'name' must be a non-empty string")

    try:
        timeline = tuple(
            parse_timeline_entry(entry) for entry in raw.get("timeline") or []
        )
        breakpoints = _parse_ticks(raw["breakpoints"]) if raw.get("breakpoints") else ()
        setup = _parse_setup(raw.get("setup"))
        version = _parse_scalar(raw.get("flint_version", raw.get("version")), "version")
        description = _parse_scalar(raw.get("description"), "description")
        tags = _parse_str_list(raw.get("tags"), "tags")
        dependencies = _parse_str_list(raw.get("dependencies"), "dependencies")
    except KeyError as exc:
        raise SpecLoadError(path, f"test '{name}': missing field {exc.args[0]!r}") from exc
    except (ValueError, TypeError) as exc:
        raise SpecLoadError(path, f"test '{name}': {exc}") from exc

    return TestSpec(
        name=name,
        timeline=timeline,
        tags=tags,
        version=version,
        description=description,
        dependencies=dependencies,
        setup=setup,
        breakpoints=breakpoints,
    )


def load_test_spec_from_file(path: Path) -> TestSpec:
    """
    Parse a single spec file into a TestSpec.

    Raises:
        SpecLoadError for unreadable or malformed files.
    """
    try:
        raw = _load_yaml(path)
    except yaml.YAMLError as exc:
        raise SpecLoadError(path, f"parse error: {exc}") from exc
    except OSError as exc:
        raise SpecLoadError(path, f"cannot read file: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise SpecLoadError(path, f"file is not valid UTF-8: {exc}") from exc
    return parse_test_spec(raw, path)


# ---------------------------------------------------------------------------
# Directory loader
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoadError:
    path: Path
    message: str


class TestLoader:
    """
    Discover and load every spec file under a test root.

    Files are visited in sorted path order so load results are stable.
    """

    __test__ = False

    def __init__(self, root: Path) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def collect_all_test_files(self) -> List[Path]:
        if not self._root.exists():
            raise FileNotFoundError(f"Test directory does not exist: {self._root}")
        if self._root.is_file():
            return [self._root]
        return sorted(
            p for p in self._root.rglob("*")
            if p.is_file() and p.suffix.lower() in SPEC_FILE_SUFFIXES
        )

    def load_all(self) -> Tuple[List[TestSpec], List[LoadError]]:
        """
        Load every spec file.

        Returns:
            (specs, errors): malformed files and duplicate names end up in
            `errors` and are skipped; they never abort the load.
        """
        specs: List[TestSpec] = []
        errors: List[LoadError] = []
        seen: Dict[str, Path] = {}

        for path in self.collect_all_test_files():
            try:
                spec = load_test_spec_from_file(path)
            except SpecLoadError as exc:
                log.warning("Failed to load test %s: %s", path, exc.reason)
                errors.append(LoadError(path=path, message=exc.reason))
                continue

            if spec.name in seen:
                message = f"duplicate test name '{spec.name}' (already defined in {seen[spec.name]})"
                log.warning("Skipping %s: %s", path, message)
                errors.append(LoadError(path=path, message=message))
                continue

            seen[spec.name] = path
            specs.append(spec)

        return specs, errors
