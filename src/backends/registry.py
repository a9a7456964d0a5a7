# src/backends/registry.py
"""
Registry-validating backend.

Stands in for a full engine at the contract boundary: block and item
identifiers are checked against a registry, block states are completed
with per-block default properties, and item use places block items.

Registry file shape (config/registry.yaml):

    minecraft_version: "1.21"
    blocks:
      stone: {}
      oak_stairs: {facing: north, half: bottom}
    items:
      - diamond_sword

Every block except air is also usable as a block item.

Rules:
- Ids are normalized into the `minecraft:` namespace.
- Unknown block ids, unknown property names and unknown item ids raise
  UnknownIdentifierError; the engine decides what to do with those.
- Unwritten positions read as minecraft:air.
- use_item_on with a held block item places that block on the adjacent
  face if the target is air. Stacks are never consumed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, Mapping, Optional

import yaml

from spec.types import (
    AIR_ID,
    DEFAULT_NAMESPACE,
    Block,
    BlockData,
    BlockFace,
    BlockPos,
    Item,
    PlayerSlot,
    ServerInfo,
    UnknownIdentifierError,
    offset_pos,
)


log = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_REGISTRY_PATH = PROJECT_ROOT / "config" / "registry.yaml"


def namespaced(identifier: str) -> str:
    """`stone` -> `minecraft:stone`; already-namespaced ids pass through."""
    if ":" in identifier:
        return identifier
    return f"{DEFAULT_NAMESPACE}:{identifier}"


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BlockRegistry:
    """Known blocks (with default properties) and items."""

    blocks: Mapping[str, Mapping[str, str]]
    items: FrozenSet[str]
    minecraft_version: str = "1.21"

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "BlockRegistry":
        blocks_raw = raw.get("blocks") or {}
        if not isinstance(blocks_raw, Mapping):
            raise ValueError("registry 'blocks' must be a mapping of id -> default properties")

        blocks: Dict[str, Dict[str, str]] = {
            AIR_ID: {},
        }
        for block_id, defaults in blocks_raw.items():
            props = Block(id=str(block_id), properties=defaults or {}).string_properties()
            blocks[namespaced(str(block_id))] = props

        items = {namespaced(str(i)) for i in raw.get("items") or []}
        items.update(b for b in blocks if b != AIR_ID)

        return cls(
            blocks=blocks,
            items=frozenset(items),
            minecraft_version=str(raw.get("minecraft_version", "1.21")),
        )

    @classmethod
    def from_yaml(cls, path: Optional[Path] = None) -> "BlockRegistry":
        """Load a registry file (defaults to config/registry.yaml)."""
        path = path or DEFAULT_REGISTRY_PATH
        if not path.exists():
            raise FileNotFoundError(f"Missing registry file: {path}")
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Expected mapping at top of {path}, got {type(data)}")
        return cls.from_mapping(data)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def resolve_block(self, block: Block) -> BlockData:
        """Full block state for `block`, defaults filled in."""
        block_id = namespaced(block.id)
        defaults = self.blocks.get(block_id)
        if defaults is None:
            raise UnknownIdentifierError("block", block.id)

        props = dict(defaults)
        for key, value in block.string_properties().items():
            if key not in defaults:
                raise UnknownIdentifierError("block property", f"{block_id}[{key}]")
            props[key] = value
        return BlockData(id=block_id, properties=props)

    def resolve_item(self, item: Item) -> Item:
        item_id = namespaced(item.id)
        if item_id not in self.items:
            raise UnknownIdentifierError("item", item.id)
        return Item(id=item_id, count=item.count)

    def is_block_item(self, item: Item) -> bool:
        return namespaced(item.id) in self.blocks and namespaced(item.id) != AIR_ID


# ---------------------------------------------------------------------------
# Backend
# ---------------------------------------------------------------------------


class RegistryAdapter:
    """Adapter producing RegistryWorld instances that share one registry."""

    def __init__(self, registry: Optional[BlockRegistry] = None) -> None:
        self._registry = registry or BlockRegistry.from_yaml()

    @property
    def registry(self) -> BlockRegistry:
        return self._registry

    def create_test_world(self) -> "RegistryWorld":
        return RegistryWorld(self._registry)

    def server_info(self) -> ServerInfo:
        return ServerInfo(
            name="registry",
            minecraft_version=self._registry.minecraft_version,
            extra={
                "blocks": len(self._registry.blocks),
                "items": len(self._registry.items),
            },
        )


class RegistryWorld:
    """World storing fully resolved block states."""

    def __init__(self, registry: BlockRegistry) -> None:
        self._registry = registry
        self._blocks: Dict[BlockPos, BlockData] = {}
        self._tick: int = 0

    def do_tick(self) -> None:
        self._tick += 1

    def current_tick(self) -> int:
        return self._tick

    def get_block(self, pos: BlockPos) -> BlockData:
        return self._blocks.get(tuple(pos), BlockData(id=AIR_ID))

    def set_block(self, pos: BlockPos, block: Block) -> None:
        state = self._registry.resolve_block(block)
        key = tuple(pos)
        if state.is_air():
            self._blocks.pop(key, None)
        else:
            self._blocks[key] = state

    def create_player(self) -> "RegistryPlayer":
        return RegistryPlayer(self)

    @property
    def registry(self) -> BlockRegistry:
        return self._registry


@dataclass
class RegistryPlayer:
    """Player whose slots only accept registered items."""

    world: RegistryWorld
    slots: Dict[PlayerSlot, Item] = field(default_factory=dict)
    selected: int = 1

    def set_slot(self, slot: PlayerSlot, item: Optional[Item]) -> None:
        if item is None:
            self.slots.pop(slot, None)
            return
        self.slots[slot] = self.world.registry.resolve_item(item)

    def get_slot(self, slot: PlayerSlot) -> Optional[Item]:
        return self.slots.get(slot)

    def select_hotbar(self, slot: int) -> None:
        if 1 <= slot <= 9:
            self.selected = slot

    def selected_hotbar(self) -> int:
        return self.selected

    def use_item_on(self, pos: BlockPos, face: BlockFace) -> None:
        held = self.slots.get(PlayerSlot.hotbar(self.selected))
        if held is None or not self.world.registry.is_block_item(held):
            log.debug("use_item_on(%s, %s) with %s: no effect", list(pos), face.value, held)
            return

        target = offset_pos(tuple(pos), face.offset)
        if not self.world.get_block(target).is_air():
            log.debug("use_item_on(%s, %s): target %s occupied", list(pos), face.value, list(target))
            return

        self.world.set_block(target, Block(id=held.id))
