# backends package
# src/backends/__init__.py
"""
Backends implementing the spec.backend capability contract.

Exports:
    - MockAdapter / MockWorld / MockPlayer: in-memory stub, accepts any id
    - RegistryAdapter / RegistryWorld / RegistryPlayer: registry-validating backend
    - BlockRegistry: block/item registry used by the registry backend
    - create_adapter: build an adapter by backend name ("mock" | "registry")
"""

from __future__ import annotations

from typing import Optional

from spec.backend import WorldAdapter

from .mock import MockAdapter, MockPlayer, MockWorld
from .registry import BlockRegistry, RegistryAdapter, RegistryPlayer, RegistryWorld


def create_adapter(name: str, registry: Optional[BlockRegistry] = None) -> WorldAdapter:
    """Return the adapter registered under `name`."""
    if name == "mock":
        return MockAdapter()
    if name == "registry":
        return RegistryAdapter(registry)
    raise ValueError(f"Unknown backend: {name!r} (expected 'mock' or 'registry')")


__all__ = [
    "BlockRegistry",
    "MockAdapter",
    "MockPlayer",
    "MockWorld",
    "RegistryAdapter",
    "RegistryPlayer",
    "RegistryWorld",
    "create_adapter",
]
