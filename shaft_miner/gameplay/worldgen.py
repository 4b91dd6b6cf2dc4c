"""
World generation - grass surface and an ore-stocked shaft.
NO UI DEPENDENCIES.
"""
import logging
import random
from collections import Counter
from typing import Optional

from .blocks import BlockType, pick_block_type
from .grid import WorldGrid

logger = logging.getLogger(__name__)


def generate_world(rng: Optional[random.Random] = None, **dimensions) -> WorldGrid:
    """
    Build a fresh world.

    The grass row spans the full width but is only mineable above the
    shaft. Shaft rows below it are filled by depth band and ore rolls.
    `dimensions` are passed through to WorldGrid.
    """
    rng = rng if rng is not None else random.Random()
    world = WorldGrid(**dimensions)

    for x in range(world.width):
        world.add_terrain(x, world.surface_row, BlockType.GRASS,
                          mineable=world.in_shaft_columns(x))

    counts: Counter = Counter()
    for y in range(world.surface_row + 1, world.bottom_row + 1):
        depth = world.depth_of(y)
        for x in range(world.shaft_left, world.shaft_right + 1):
            block_type = pick_block_type(depth, rng)
            world.add_terrain(x, y, block_type)
            counts[block_type] += 1

    logger.info(
        "Generated world with %d blocks (%s)",
        len(world),
        ", ".join(f"{t.name.lower()}={n}" for t, n in sorted(counts.items())),
    )
    return world
