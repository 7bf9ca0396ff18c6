"""
Delve — engine/ecs/components.py
ECS Component Definitions for python-tcod-ecs.
==============================================
Version:     0.1
Stack:       Python 3.11+ | python-tcod-ecs
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Tuple

@dataclass
class EntityIdentity:
    entity_id: int
    name: str
    is_player: bool = False

@dataclass
class Position:
    # Continuous world space; the tile under an entity is (floor(x), floor(y)).
    x: float
    y: float

@dataclass
class MiningStats:
    mining_range: float = 3.0   # tiles, measured to the tile centre

@dataclass
class MiningAction:
    tile: Tuple[int, int]
    block_id: str
    duration: float
    elapsed: float = 0.0

    @property
    def progress(self) -> float:
        return min(1.0, self.elapsed / self.duration) if self.duration > 0 else 1.0

@dataclass
class Inventory:
    items: Dict[str, int] = field(default_factory=dict)

    def add(self, item_id: str, amount: int) -> None:
        self.items[item_id] = self.items.get(item_id, 0) + amount

    def count(self, item_id: str) -> int:
        return self.items.get(item_id, 0)
