# src/backends/mock.py
"""
In-memory backend for unit tests and development.

Provides:
- MockAdapter: creates MockWorld instances.
- MockWorld: dict-backed block storage and a tick counter.
- MockPlayer: dict-backed inventory and hotbar selection.

No block behavior, no registry: any identifier is accepted and stored
as written (properties normalized to strings).
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from spec.types import (
    AIR_ID,
    Block,
    BlockData,
    BlockFace,
    BlockPos,
    Item,
    PlayerSlot,
    ServerInfo,
)


class MockAdapter:
    """Adapter producing fresh MockWorld instances."""

    def __init__(self, minecraft_version: str = "1.21") -> None:
        self._version = minecraft_version
        self.worlds_created: int = 0

    def create_test_world(self) -> "MockWorld":
        self.worlds_created += 1
        return MockWorld()

    def server_info(self) -> ServerInfo:
        return ServerInfo(name="mock", minecraft_version=self._version)


class MockWorld:
    """World that stores blocks in a dict keyed by position."""

    def __init__(self) -> None:
        self._blocks: Dict[BlockPos, BlockData] = {}
        self._tick: int = 0
        self.players: List["MockPlayer"] = []

        # Every set_block call in order, for tests that care about write order.
        self.write_log: List[Tuple[BlockPos, str]] = []

    # ------------------------------------------------------------------
    # World protocol
    # ------------------------------------------------------------------

    def do_tick(self) -> None:
        self._tick += 1

    def current_tick(self) -> int:
        return self._tick

    def get_block(self, pos: BlockPos) -> BlockData:
        return self._blocks.get(tuple(pos), BlockData(id=AIR_ID))

    def set_block(self, pos: BlockPos, block: Block) -> None:
        key = tuple(pos)
        self._blocks[key] = block.to_block_data()
        self.write_log.append((key, block.id))

    def create_player(self) -> "MockPlayer":
        player = MockPlayer()
        self.players.append(player)
        return player

    # ------------------------------------------------------------------
    # Test-only helpers
    # ------------------------------------------------------------------

    def all_blocks(self) -> Dict[BlockPos, BlockData]:
        return dict(self._blocks)


class MockPlayer:
    """Player with a slot dict and a 1-9 hotbar selection."""

    def __init__(self) -> None:
        self._slots: Dict[PlayerSlot, Item] = {}
        self._selected: int = 1

        # (pos, face, held item) for every use_item_on call.
        self.uses: List[Tuple[BlockPos, BlockFace, Optional[Item]]] = []

    def set_slot(self, slot: PlayerSlot, item: Optional[Item]) -> None:
        if item is None:
            self._slots.pop(slot, None)
        else:
            self._slots[slot] = item

    def get_slot(self, slot: PlayerSlot) -> Optional[Item]:
        return self._slots.get(slot)

    def select_hotbar(self, slot: int) -> None:
        if 1 <= slot <= 9:
            self._selected = slot

    def selected_hotbar(self) -> int:
        return self._selected

    def use_item_on(self, pos: BlockPos, face: BlockFace) -> None:
        # No interaction logic; just remember what was used where.
        held = self._slots.get(PlayerSlot.hotbar(self._selected))
        self.uses.append((tuple(pos), face, held))
