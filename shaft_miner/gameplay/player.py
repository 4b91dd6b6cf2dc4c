"""
Player state - position, currency, tool levels, and inventory.
NO UI DEPENDENCIES.
"""
from typing import Optional

from .blocks import BlockType
from .constants import SURFACE_ROW, SHAFT_LEFT, SHAFT_WIDTH
from .economy import backpack_capacity, pickaxe_power
from .inventory import Inventory


class Player:
    """
    The miner.

    Position is in cell units; (x, y) is the cell the player stands in.
    pickaxe_power and the inventory capacity are derived and refreshed by
    recompute() whenever a tier or level changes.
    """

    def __init__(self, x: float = SHAFT_LEFT + SHAFT_WIDTH // 2, y: float = SURFACE_ROW - 1):
        self.x = x
        self.y = y
        self.velocity_x: float = 0.0
        self.velocity_y: float = 0.0
        self.on_ground: bool = True
        self.climbing: bool = False
        self.facing: int = 1      # 1 right, -1 left

        self.gold: int = 0
        self.proficiency: int = 1
        self.strength: int = 1
        self.pickaxe_tier: int = 0
        self.backpack_tier: int = 0
        self.pickaxe_power: float = 1.0

        self.inventory = Inventory(capacity=0)
        self.selected_slot: int = 0
        self.recompute()

    def recompute(self) -> None:
        """Refresh derived stats from tiers and levels."""
        self.pickaxe_power = pickaxe_power(self.pickaxe_tier, self.proficiency)
        self.inventory.capacity = backpack_capacity(self.backpack_tier, self.strength)

    @property
    def backpack_capacity(self) -> float:
        return self.inventory.capacity

    @property
    def cell(self):
        return (int(round(self.x)), int(round(self.y)))

    def selected_type(self) -> Optional[BlockType]:
        return self.inventory.selected_type(self.selected_slot)

    def __repr__(self) -> str:
        return f"Player(at={self.cell}, gold={self.gold}, load={self.inventory.load}/{self.backpack_capacity})"
