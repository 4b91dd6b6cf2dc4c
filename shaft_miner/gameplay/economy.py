"""
Tool tiers, upgrade cost curves, and timing formulas.
NO UI DEPENDENCIES.
"""
import math
from dataclasses import dataclass
from typing import List, Optional

from .blocks import BlockType, CraftingRequirement, lookup
from .constants import (
    DEFAULT_MINE_TIME,
    PROFICIENCY_POWER_INCREMENT, PROFICIENCY_BASE_COST, PROFICIENCY_COST_MULTIPLIER,
    STRENGTH_CAPACITY_INCREMENT, STRENGTH_BASE_COST, STRENGTH_COST_MULTIPLIER,
)


@dataclass(frozen=True)
class PickaxeTier:
    name: str
    power: float                  # mining speed multiplier
    requirement: Optional[CraftingRequirement]
    upgrade_cost_multiplier: int


@dataclass(frozen=True)
class BackpackTier:
    name: str
    capacity: int                 # density units
    requirement: Optional[CraftingRequirement]
    upgrade_cost_multiplier: int


PICKAXE_TIERS: List[PickaxeTier] = [
    PickaxeTier("Stone", 1, None, 1),
    PickaxeTier("Copper", 4, CraftingRequirement(BlockType.COPPER, 5), 5),
    PickaxeTier("Iron", 16, CraftingRequirement(BlockType.IRON, 5), 20),
    PickaxeTier("Gold", 64, CraftingRequirement(BlockType.GOLD, 5), 75),
    PickaxeTier("Diamond", 256, CraftingRequirement(BlockType.DIAMOND, 5), 200),
]

BACKPACK_TIERS: List[BackpackTier] = [
    BackpackTier("Stone", 5, None, 1),
    BackpackTier("Copper", 50, CraftingRequirement(BlockType.COPPER, 5), 5),
    BackpackTier("Iron", 500, CraftingRequirement(BlockType.IRON, 5), 20),
    BackpackTier("Gold", 5000, CraftingRequirement(BlockType.GOLD, 5), 75),
    BackpackTier("Diamond", 50000, CraftingRequirement(BlockType.DIAMOND, 5), 200),
]


def next_pickaxe_tier(tier: int) -> Optional[PickaxeTier]:
    if tier + 1 >= len(PICKAXE_TIERS):
        return None
    return PICKAXE_TIERS[tier + 1]


def next_backpack_tier(tier: int) -> Optional[BackpackTier]:
    if tier + 1 >= len(BACKPACK_TIERS):
        return None
    return BACKPACK_TIERS[tier + 1]


def pickaxe_power(tier: int, proficiency: int) -> float:
    """Mining speed multiplier for a pickaxe tier at a proficiency level."""
    return PICKAXE_TIERS[tier].power * PROFICIENCY_POWER_INCREMENT ** (proficiency - 1)


def backpack_capacity(tier: int, strength: int) -> float:
    """Carry capacity (density units) for a backpack tier at a strength level."""
    return BACKPACK_TIERS[tier].capacity * STRENGTH_CAPACITY_INCREMENT ** (strength - 1)


def proficiency_upgrade_cost(tier: int, level: int) -> int:
    base = PROFICIENCY_BASE_COST * PICKAXE_TIERS[tier].upgrade_cost_multiplier
    return base * PROFICIENCY_COST_MULTIPLIER ** (level - 1)


def strength_upgrade_cost(tier: int, level: int) -> int:
    base = STRENGTH_BASE_COST * BACKPACK_TIERS[tier].upgrade_cost_multiplier
    return base * STRENGTH_COST_MULTIPLIER ** (level - 1)


def mining_duration(power: float, block_type: BlockType) -> float:
    """Seconds to mine one block of `block_type` with `power`."""
    return DEFAULT_MINE_TIME / power * lookup(block_type).mining_time_multiplier


def refining_duration(refiner_type: BlockType, input_type: BlockType) -> float:
    """Seconds a refiner of `refiner_type` needs for one `input_type`."""
    base = lookup(refiner_type).refining_time
    return base * math.sqrt(lookup(input_type).mining_time_multiplier)
