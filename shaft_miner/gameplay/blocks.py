"""
Block catalog - static block type definitions and ore distribution.
NO UI DEPENDENCIES.
"""
import math
import random
from dataclasses import dataclass
from enum import Enum, IntEnum, auto
from typing import Dict, Optional, Tuple, Union

from .constants import DIRT_MAX_DEPTH, STONE_MAX_DEPTH, SLATE_MAX_DEPTH, MAGMA_MAX_DEPTH


class BlockType(IntEnum):
    """All block types. Values are the stable ids used in save data."""
    # Terrain
    GRASS = 0
    DIRT = 1
    STONE = 2
    SLATE = 3
    MAGMA = 4
    BEDROCK = 5

    # Ores
    COPPER = 6
    IRON = 7
    GOLD = 8
    DIAMOND = 9

    # Utility blocks (shop)
    PLATFORM = 10
    LADDER = 11
    TORCH = 12

    # Refined products
    POLISHED_STONE = 13
    POLISHED_SLATE = 14
    POLISHED_MAGMA = 15
    POLISHED_BEDROCK = 16

    # Machinery
    STONE_REFINER = 17
    COPPER_REFINER = 18
    IRON_REFINER = 19
    GOLD_REFINER = 20
    COLLECTOR = 21
    CHEST = 22
    TUBE = 23


class BlockCategory(Enum):
    """What role a block plays."""
    TERRAIN = auto()
    ORE = auto()
    UTILITY = auto()
    REFINED = auto()
    REFINER = auto()
    COLLECTOR = auto()
    CHEST = auto()
    TUBE = auto()
    UNKNOWN = auto()


# Categories that take part in the automation network as endpoints
MACHINE_CATEGORIES = {BlockCategory.REFINER, BlockCategory.COLLECTOR, BlockCategory.CHEST}
STORAGE_CATEGORIES = {BlockCategory.COLLECTOR, BlockCategory.CHEST}


@dataclass(frozen=True)
class CraftingRequirement:
    """Materials consumed when crafting a block."""
    required_type: BlockType
    required_amount: int
    required_base_type: Optional[BlockType] = None  # one unit, e.g. previous refiner tier


@dataclass(frozen=True)
class OreDistribution:
    """Gaussian depth distribution for procedural ore placement."""
    min_depth: int
    mean_depth: float
    std_depth: float
    max_probability: float

    def probability(self, depth: int) -> float:
        """Chance this ore appears at `depth`; 0 above min_depth."""
        if depth < self.min_depth:
            return 0.0
        z = (depth - self.mean_depth) / self.std_depth
        return self.max_probability * math.exp(-0.5 * z * z)


@dataclass(frozen=True)
class BlockDefinition:
    """Static properties of a block type."""
    block_id: int
    name: str
    value: int
    density: int
    mining_time_multiplier: float
    category: BlockCategory
    solid: bool = True
    climbable: bool = False
    size: Tuple[int, int] = (1, 1)          # (width, height) in cells
    crafting: Optional[CraftingRequirement] = None
    distribution: Optional[OreDistribution] = None
    refined_type: Optional[BlockType] = None
    purchasable: bool = False
    refining_time: float = 0.0              # base seconds, refiners only

    @property
    def is_machine(self) -> bool:
        return self.category in MACHINE_CATEGORIES

    @property
    def has_storage(self) -> bool:
        return self.category in STORAGE_CATEGORIES

    @property
    def is_multi_cell(self) -> bool:
        return self.size != (1, 1)


UNKNOWN_BLOCK = BlockDefinition(
    block_id=-1,
    name="Unknown",
    value=0,
    density=1,
    mining_time_multiplier=1.0,
    category=BlockCategory.UNKNOWN,
    solid=True,
)


def _terrain(block_type: BlockType, name: str, value: int, density: int,
             mining_time: float, refined: Optional[BlockType] = None) -> BlockDefinition:
    return BlockDefinition(int(block_type), name, value, density, mining_time,
                           BlockCategory.TERRAIN, refined_type=refined)


def _ore(block_type: BlockType, name: str, value: int, mining_time: float,
         distribution: OreDistribution) -> BlockDefinition:
    return BlockDefinition(int(block_type), name, value, 1, mining_time,
                           BlockCategory.ORE, distribution=distribution)


def _polished(block_type: BlockType, raw: BlockDefinition) -> BlockDefinition:
    # Three times the value of the raw block, same weight and hardness
    return BlockDefinition(int(block_type), f"Polished {raw.name}", raw.value * 3,
                           raw.density, raw.mining_time_multiplier, BlockCategory.REFINED)


def _refiner(block_type: BlockType, name: str, refining_time: float,
             crafting: CraftingRequirement, purchasable: bool = False) -> BlockDefinition:
    return BlockDefinition(int(block_type), name, 100, 1, 1.0, BlockCategory.REFINER,
                           solid=False, size=(2, 2), crafting=crafting,
                           purchasable=purchasable, refining_time=refining_time)


_STONE = _terrain(BlockType.STONE, "Stone", 1, 1, 1.0, refined=BlockType.POLISHED_STONE)
_SLATE = _terrain(BlockType.SLATE, "Slate", 5, 5, 5.0, refined=BlockType.POLISHED_SLATE)
_MAGMA = _terrain(BlockType.MAGMA, "Magma", 20, 20, 20.0, refined=BlockType.POLISHED_MAGMA)
_BEDROCK = _terrain(BlockType.BEDROCK, "Bedrock", 100, 100, 100.0, refined=BlockType.POLISHED_BEDROCK)

BLOCKS: Dict[BlockType, BlockDefinition] = {
    BlockType.GRASS: _terrain(BlockType.GRASS, "Grass", 1, 1, 0.5),
    BlockType.DIRT: _terrain(BlockType.DIRT, "Dirt", 2, 1, 1.0),
    BlockType.STONE: _STONE,
    BlockType.SLATE: _SLATE,
    BlockType.MAGMA: _MAGMA,
    BlockType.BEDROCK: _BEDROCK,

    # Ores, in the order they are tried during generation
    BlockType.COPPER: _ore(BlockType.COPPER, "Copper", 20, 5.0,
                           OreDistribution(min_depth=6, mean_depth=15, std_depth=15, max_probability=0.09)),
    BlockType.IRON: _ore(BlockType.IRON, "Iron", 50, 30.0,
                         OreDistribution(min_depth=20, mean_depth=50, std_depth=25, max_probability=0.06)),
    BlockType.GOLD: _ore(BlockType.GOLD, "Gold", 100, 100.0,
                         OreDistribution(min_depth=60, mean_depth=120, std_depth=40, max_probability=0.04)),
    BlockType.DIAMOND: _ore(BlockType.DIAMOND, "Diamond", 1000, 300.0,
                            OreDistribution(min_depth=150, mean_depth=250, std_depth=50, max_probability=0.02)),

    BlockType.PLATFORM: BlockDefinition(int(BlockType.PLATFORM), "Platform", 3, 1, 0.5,
                                        BlockCategory.UTILITY, purchasable=True),
    BlockType.LADDER: BlockDefinition(int(BlockType.LADDER), "Ladder", 10, 1, 0.5,
                                      BlockCategory.UTILITY, solid=False, climbable=True,
                                      purchasable=True),
    BlockType.TORCH: BlockDefinition(int(BlockType.TORCH), "Torch", 5, 1, 0.5,
                                     BlockCategory.UTILITY, solid=False, purchasable=True),

    BlockType.POLISHED_STONE: _polished(BlockType.POLISHED_STONE, _STONE),
    BlockType.POLISHED_SLATE: _polished(BlockType.POLISHED_SLATE, _SLATE),
    BlockType.POLISHED_MAGMA: _polished(BlockType.POLISHED_MAGMA, _MAGMA),
    BlockType.POLISHED_BEDROCK: _polished(BlockType.POLISHED_BEDROCK, _BEDROCK),

    BlockType.STONE_REFINER: _refiner(BlockType.STONE_REFINER, "Stone Refiner", 20.0,
                                      CraftingRequirement(BlockType.STONE, 10),
                                      purchasable=True),
    BlockType.COPPER_REFINER: _refiner(BlockType.COPPER_REFINER, "Copper Refiner", 12.0,
                                       CraftingRequirement(BlockType.COPPER, 10,
                                                           BlockType.STONE_REFINER)),
    BlockType.IRON_REFINER: _refiner(BlockType.IRON_REFINER, "Iron Refiner", 6.0,
                                     CraftingRequirement(BlockType.IRON, 10,
                                                         BlockType.COPPER_REFINER)),
    BlockType.GOLD_REFINER: _refiner(BlockType.GOLD_REFINER, "Gold Refiner", 3.0,
                                     CraftingRequirement(BlockType.GOLD, 10,
                                                         BlockType.IRON_REFINER)),

    BlockType.COLLECTOR: BlockDefinition(int(BlockType.COLLECTOR), "Collector", 50, 1, 1.0,
                                         BlockCategory.COLLECTOR, solid=False,
                                         crafting=CraftingRequirement(BlockType.COPPER, 5),
                                         purchasable=True),
    BlockType.CHEST: BlockDefinition(int(BlockType.CHEST), "Chest", 30, 1, 1.0,
                                     BlockCategory.CHEST, solid=False, size=(3, 2),
                                     crafting=CraftingRequirement(BlockType.DIRT, 10),
                                     purchasable=True),
    BlockType.TUBE: BlockDefinition(int(BlockType.TUBE), "Tube", 2, 1, 0.5,
                                    BlockCategory.TUBE, solid=False,
                                    crafting=CraftingRequirement(BlockType.COPPER, 1),
                                    purchasable=True),
}


def is_known(block_id: int) -> bool:
    """True if `block_id` names a catalog entry."""
    try:
        return BlockType(block_id) in BLOCKS
    except ValueError:
        return False


def lookup(block_type: Union[BlockType, int]) -> BlockDefinition:
    """
    Get the definition for a block type.
    Returns UNKNOWN_BLOCK for ids outside the catalog.
    """
    if not is_known(block_type):
        return UNKNOWN_BLOCK
    return BLOCKS[BlockType(block_type)]


def density(block_type: BlockType) -> int:
    return lookup(block_type).density


def is_refinable(block_type: BlockType) -> bool:
    return lookup(block_type).refined_type is not None


def refined_output(block_type: BlockType) -> Optional[BlockType]:
    """The polished type a refiner turns `block_type` into, or None."""
    return lookup(block_type).refined_type


def ore_types():
    """Ores in catalog order."""
    return [t for t, d in BLOCKS.items() if d.distribution is not None]


def base_terrain_for_depth(depth: int) -> BlockType:
    """Depth-banded filler used when no ore is rolled."""
    if depth < DIRT_MAX_DEPTH:
        return BlockType.DIRT
    if depth < STONE_MAX_DEPTH:
        return BlockType.STONE
    if depth < SLATE_MAX_DEPTH:
        return BlockType.SLATE
    if depth < MAGMA_MAX_DEPTH:
        return BlockType.MAGMA
    return BlockType.BEDROCK


def pick_block_type(depth: int, rng: random.Random) -> BlockType:
    """
    Choose the block generated at `depth`.

    Ores are tried in catalog order; the first one whose roll succeeds
    wins. Otherwise the depth band decides.
    """
    for ore in ore_types():
        distribution = BLOCKS[ore].distribution
        if depth < distribution.min_depth:
            continue
        if rng.random() < distribution.probability(depth):
            return ore
    return base_terrain_for_depth(depth)
