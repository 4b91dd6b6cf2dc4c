"""
Tests for world generation.
"""
import random

from shaft_miner.gameplay.blocks import BlockCategory, BlockType
from shaft_miner.gameplay.worldgen import generate_world


class TestGenerateWorld:
    """Tests for generate_world."""

    def test_surface_row(self):
        """Grass spans the surface; only the shaft part can be mined."""
        world = generate_world(random.Random(1))
        for x in range(world.width):
            block = world.get_block(x, world.surface_row)
            assert block.block_type == BlockType.GRASS
            assert block.is_mineable == world.in_shaft_columns(x)

    def test_shaft_filled(self):
        """Every shaft cell below the surface holds terrain or ore."""
        world = generate_world(random.Random(1))
        expected = world.width + world.shaft_width * (world.shaft_depth - 1)
        assert len(world) == expected
        assert world.get_block(world.shaft_left - 1, world.surface_row + 1) is None
        for block in world.iter_blocks():
            assert block.category in (BlockCategory.TERRAIN, BlockCategory.ORE)

    def test_seed_reproducible(self):
        """Same seed, same world."""
        a = generate_world(random.Random(42), shaft_depth=60)
        b = generate_world(random.Random(42), shaft_depth=60)
        assert [blk.block_type for blk in a.iter_blocks()] == [blk.block_type for blk in b.iter_blocks()]

    def test_shallow_rows_are_dirt_or_copper(self):
        """Near the surface only dirt and early ore appear."""
        world = generate_world(random.Random(5), shaft_depth=8)
        types = {b.block_type for b in world.iter_blocks() if b.y > world.surface_row}
        assert types <= {BlockType.DIRT, BlockType.COPPER}

    def test_no_machines(self):
        """A fresh world has no machines."""
        assert list(generate_world(random.Random(1), shaft_depth=20).iter_machines()) == []
