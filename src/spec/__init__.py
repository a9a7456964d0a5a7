# src/spec/__init__.py

from __future__ import annotations

"""
Public spec surface for ticktest.

This module re-exports *interfaces and data types* used across the codebase:
  - block / item value types (Block, BlockData, Item, BlockPos, ...)
  - the backend capability contract (WorldAdapter, World, Player)
  - the test specification model (TestSpec, TimelineEntry, actions)
  - result types (AssertionResult, TestResult, TestSummary)

Concrete backends live in src/backends/; the engine lives in src/engine/.
"""

# Value types
from .types import (
    AIR_ID,
    Block,
    BlockData,
    BlockFace,
    BlockPos,
    Item,
    PlayerSlot,
    ServerInfo,
    UnknownIdentifierError,
)

# Backend contract
from .backend import (
    Player,
    World,
    WorldAdapter,
)

# Test specification model
from .test_spec import (
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

# Results
from .results import (
    AssertionResult,
    TestResult,
    TestSummary,
)

__all__ = [
    # values
    "AIR_ID",
    "Block",
    "BlockData",
    "BlockFace",
    "BlockPos",
    "Item",
    "PlayerSlot",
    "ServerInfo",
    "UnknownIdentifierError",
    # contract
    "Player",
    "World",
    "WorldAdapter",
    # spec model
    "Action",
    "Assert",
    "BlockCheck",
    "Fill",
    "Place",
    "PlaceEach",
    "Placement",
    "PlayerSetup",
    "Remove",
    "SelectHotbar",
    "SetSlot",
    "SlotSetup",
    "TestSetup",
    "TestSpec",
    "TimelineEntry",
    "UseItemOn",
    # results
    "AssertionResult",
    "TestResult",
    "TestSummary",
]
