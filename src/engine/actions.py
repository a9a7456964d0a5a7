# src/engine/actions.py
"""
Action dispatch for the test runner.

This module applies one scheduled Action to the world (and, for player
actions, to the lazily created player) held in an ExecutionContext.

Design constraints:
- One execute(...) call per scheduled action.
- Fill and Remove are expressed as repeated single-block writes so they
  inherit whatever per-write behavior the backend has.
- Asserts return a structured AssertionResult; they never raise.
- Unknown block/item identifiers are not fatal: the write is skipped
  and a warning is logged.
- The Action set is closed; an unrecognized action type is a programming
  error and raises TypeError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from spec.backend import Player, World
from spec.results import AssertionResult
from spec.test_spec import (
    Action,
    Assert,
    Fill,
    Place,
    PlaceEach,
    PlayerSetup,
    Remove,
    SelectHotbar,
    SetSlot,
    UseItemOn,
)
from spec.types import AIR_ID, Block, BlockPos, Item, PlayerSlot, UnknownIdentifierError

from .matching import block_matches, render_actual, render_expected


log = logging.getLogger(__name__)

AIR = Block(id=AIR_ID)


# ---------------------------------------------------------------------------
# Per-test execution context
# ---------------------------------------------------------------------------


@dataclass
class ExecutionContext:
    """
    World and player handles for one test invocation.

    The player starts absent and is created at most once, on the first
    player-touching action or when setup data is applied.
    """

    world: World
    player: Optional[Player] = None
    players_created: int = 0

    def ensure_player(self) -> Player:
        if self.player is None:
            self.player = self.world.create_player()
            self.players_created += 1
        return self.player


class ActionExecutor:
    """
    Apply Actions to an ExecutionContext.

    Public contract:
      apply_setup(setup, ctx) -> None
      execute(action, ctx, tick) -> AssertionResult | None

    Only Assert actions produce an AssertionResult; every other action
    returns None.
    """

    def __init__(self, *, logger: Optional[logging.Logger] = None) -> None:
        self._log = logger or log

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def apply_setup(self, setup: PlayerSetup, ctx: ExecutionContext) -> None:
        """Populate the player's inventory and hotbar before tick 0."""
        player = ctx.ensure_player()
        for slot, slot_setup in setup.inventory.items():
            self._set_slot(player, slot, Item(id=slot_setup.item, count=slot_setup.count))
        player.select_hotbar(setup.selected_hotbar)

    def execute(
        self,
        action: Action,
        ctx: ExecutionContext,
        tick: int,
    ) -> Optional[AssertionResult]:
        self._log.debug("execute tick=%d kind=%s", tick, getattr(action, "kind", None))

        if isinstance(action, Place):
            self._write(ctx.world, action.pos, action.block)
        elif isinstance(action, PlaceEach):
            for placement in action.placements:
                self._write(ctx.world, placement.pos, placement.block)
        elif isinstance(action, Fill):
            self._execute_fill(action, ctx.world)
        elif isinstance(action, Remove):
            self._write(ctx.world, action.pos, AIR)
        elif isinstance(action, Assert):
            return self._execute_assert(action, ctx.world, tick)
        elif isinstance(action, UseItemOn):
            self._execute_use_item_on(action, ctx)
        elif isinstance(action, SetSlot):
            item = Item(id=action.item, count=action.count) if action.item is not None else None
            self._set_slot(ctx.ensure_player(), action.slot, item)
        elif isinstance(action, SelectHotbar):
            # Out-of-range slots are ignored by the player itself.
            ctx.ensure_player().select_hotbar(action.slot)
        else:
            raise TypeError(f"Unsupported action type: {type(action).__name__}")

        return None

    # ------------------------------------------------------------------
    # Action handlers
    # ------------------------------------------------------------------

    def _execute_fill(self, action: Fill, world: World) -> None:
        (min_x, min_y, min_z), (max_x, max_y, max_z) = action.bounds()
        for x in range(min_x, max_x + 1):
            for y in range(min_y, max_y + 1):
                for z in range(min_z, max_z + 1):
                    self._write(world, (x, y, z), action.block)

    def _execute_assert(self, action: Assert, world: World, tick: int) -> AssertionResult:
        for check in action.checks:
            actual = world.get_block(check.pos)
            if not block_matches(actual, check.expected):
                outcome = AssertionResult.failed(
                    tick=tick,
                    position=check.pos,
                    expected=render_expected(check.expected),
                    actual=render_actual(actual),
                )
                self._log.debug("assert failed: %s", outcome.message)
                return outcome
        return AssertionResult.passed(tick)

    def _execute_use_item_on(self, action: UseItemOn, ctx: ExecutionContext) -> None:
        player = ctx.ensure_player()
        if action.item is not None:
            if not self._set_slot(player, PlayerSlot.HOTBAR1, Item(id=action.item)):
                return
            player.select_hotbar(1)
        player.use_item_on(action.pos, action.face)

    # ------------------------------------------------------------------
    # Guarded backend calls
    # ------------------------------------------------------------------

    def _write(self, world: World, pos: BlockPos, block: Block) -> bool:
        try:
            world.set_block(pos, block)
        except UnknownIdentifierError as exc:
            self._log.warning("%s - skipping placement at %s", exc, list(pos))
            return False
        return True

    def _set_slot(self, player: Player, slot: PlayerSlot, item: Optional[Item]) -> bool:
        try:
            player.set_slot(slot, item)
        except UnknownIdentifierError as exc:
            self._log.warning("%s - leaving slot %s unchanged", exc, slot.value)
            return False
        return True
