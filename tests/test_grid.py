"""
Tests for the world grid: placement, mining, and footprints.
"""
import pytest

from shaft_miner.gameplay.blocks import BlockType
from shaft_miner.gameplay.grid import Block, WorldGrid
from shaft_miner.gameplay.inventory import Inventory
from shaft_miner.gameplay.results import Failure, WorldIntegrityError


CHEST_CELLS = [(2, 3), (3, 3), (4, 3), (2, 4), (3, 4), (4, 4)]


class TestGeometry:
    """Tests for shaft bounds."""

    def test_default_layout(self):
        """Default world has a 9-wide shaft under a 22-wide surface."""
        world = WorldGrid()
        assert world.shaft_right == world.shaft_left + 8
        assert world.bottom_row == world.surface_row + 299
        assert world.in_shaft(world.shaft_left, world.surface_row)
        assert not world.in_shaft(world.shaft_left - 1, world.surface_row + 1)
        assert not world.in_shaft(world.shaft_left, world.surface_row - 1)

    def test_footprint_extends_right_and_down(self):
        """Footprint cells start at the anchor."""
        assert WorldGrid.footprint(2, 3, (3, 2)) == CHEST_CELLS

    def test_neighbors_are_edge_adjacent(self):
        """Four neighbours, no diagonals."""
        assert sorted(WorldGrid.neighbors((4, 4))) == [(3, 4), (4, 3), (4, 5), (5, 4)]


class TestPlacement:
    """Tests for place_block."""

    def test_chest_creates_six_records(self, world):
        """A 3x2 placement makes one anchor and five secondary cells."""
        result = world.place_block(2, 3, BlockType.CHEST)
        assert result.ok
        assert len(world) == 6

        anchor = world.get_block(2, 3)
        assert not anchor.is_secondary
        assert anchor.storage is not None
        secondaries = [world.get_block(x, y) for x, y in CHEST_CELLS[1:]]
        assert all(b.is_secondary and b.anchor == (2, 3) for b in secondaries)
        assert all(b.block_type == BlockType.CHEST for b in secondaries)

    @pytest.mark.parametrize("occupied", CHEST_CELLS)
    def test_any_occupied_cell_blocks(self, world, occupied):
        """One non-mined block anywhere in the footprint blocks the placement."""
        world.add_terrain(*occupied, BlockType.DIRT)
        result = world.place_block(2, 3, BlockType.CHEST)
        assert result.failure == Failure.PLACEMENT_BLOCKED
        assert len(world) == 1

    def test_mined_cells_are_free(self, world):
        """Placing over mined cells reuses them."""
        world.add_terrain(3, 4, BlockType.DIRT)
        world.mine_block(3, 4)
        assert world.place_block(2, 3, BlockType.CHEST).ok
        block = world.get_block(3, 4)
        assert not block.is_mined
        assert block.anchor == (2, 3)

    def test_outside_shaft_fails(self, world):
        """A footprint leaving the shaft is blocked like an occupied one."""
        assert world.place_block(14, 3, BlockType.CHEST).failure == Failure.PLACEMENT_BLOCKED
        assert world.place_block(3, 1, BlockType.TORCH).failure == Failure.PLACEMENT_BLOCKED
        assert world.place_block(3, 13, BlockType.STONE_REFINER).failure == Failure.PLACEMENT_BLOCKED
        assert len(world) == 0

    def test_takes_one_from_inventory(self, world):
        """Placement from an inventory consumes one unit."""
        inv = Inventory(capacity=100)
        inv.add(BlockType.LADDER)
        inv.add(BlockType.LADDER)
        assert world.place_block(5, 5, BlockType.LADDER, inv).ok
        assert inv.get_count(BlockType.LADDER) == 1

    def test_missing_inventory_item_fails(self, world):
        """Nothing is placed when the inventory lacks the block."""
        result = world.place_block(5, 5, BlockType.LADDER, Inventory(capacity=100))
        assert result.failure == Failure.INSUFFICIENT_MATERIALS
        assert world.get_block(5, 5) is None

    def test_unknown_type_raises(self, world):
        """Placing an id outside the catalog is an integrity error."""
        with pytest.raises(WorldIntegrityError):
            world.place_block(5, 5, 999)

    def test_refiner_gets_state(self, world):
        """Refiner anchors get an idle refiner on placement."""
        world.place_block(5, 5, BlockType.STONE_REFINER)
        anchor = world.get_block(5, 5)
        assert anchor.refiner is not None
        assert anchor.refiner.is_idle
        assert world.get_block(6, 6).refiner is None


class TestMining:
    """Tests for mine_block."""

    def test_mine_terrain(self, world):
        """Mining terrain marks the cell mined."""
        world.add_terrain(3, 3, BlockType.STONE)
        result = world.mine_block(3, 3)
        assert result.block_type == BlockType.STONE
        assert world.get_block(3, 3).is_mined
        assert world.get_solid_block(3, 3) is None

    def test_anchor_mines_whole_footprint(self, world):
        """Mining the anchor mines every footprint cell."""
        world.place_block(2, 3, BlockType.CHEST)
        result = world.mine_block(2, 3)
        assert result.block_type == BlockType.CHEST
        assert all(world.get_block(x, y).is_mined for x, y in CHEST_CELLS)
        assert world.get_block(2, 3).storage is None

    def test_secondary_same_as_anchor(self):
        """Mining any secondary cell resolves to the anchor first."""
        outcomes = []
        for target in ((2, 3), (4, 4)):
            world = WorldGrid(width=16, surface_row=2, shaft_left=0, shaft_width=16, shaft_depth=12)
            world.place_block(2, 3, BlockType.CHEST)
            result = world.mine_block(*target)
            mined = sorted(b.position for b in world.iter_blocks(include_mined=True) if b.is_mined)
            outcomes.append((result.block_type, mined))
        assert outcomes[0] == outcomes[1]
        assert outcomes[0][1] == sorted(CHEST_CELLS)

    def test_nonempty_storage_blocks_mining(self, world):
        """A chest with items must be emptied first."""
        world.place_block(2, 3, BlockType.CHEST)
        world.get_block(2, 3).storage.deposit(BlockType.DIRT)
        assert world.mine_block(3, 4).failure == Failure.MINE_BLOCKED
        assert not any(world.get_block(x, y).is_mined for x, y in CHEST_CELLS)

        world.get_block(2, 3).storage.pop()
        assert world.mine_block(3, 4).ok

    def test_busy_refiner_blocks_mining(self, world):
        """A refiner holding input cannot be picked up."""
        world.place_block(5, 5, BlockType.STONE_REFINER)
        world.get_block(5, 5).refiner.deposit(BlockType.STONE, 0.0)
        assert world.mine_block(6, 6).failure == Failure.MINE_BLOCKED

    def test_empty_and_unmineable_cells(self, world):
        """Empty cells and protected grass cannot be mined."""
        assert world.mine_block(5, 5).failure == Failure.NOT_MINEABLE
        world.add_terrain(5, 2, BlockType.GRASS, mineable=False)
        assert world.mine_block(5, 2).failure == Failure.NOT_MINEABLE

    def test_dangling_secondary_raises(self, world):
        """A secondary cell whose anchor is gone is corrupt state."""
        world.insert(Block(3, 3, BlockType.CHEST, is_secondary=True, anchor=(9, 9)))
        with pytest.raises(WorldIntegrityError):
            world.mine_block(3, 3)


class TestEditListeners:
    """Tests for edit notifications."""

    def test_machine_and_tube_edits_notify(self, world):
        """Machines and tubes notify listeners; other blocks do not."""
        seen = []
        world.add_edit_listener(lambda block: seen.append(block.block_type))
        world.place_block(5, 5, BlockType.TORCH)
        world.place_block(5, 6, BlockType.TUBE)
        world.place_block(6, 6, BlockType.COLLECTOR)
        world.mine_block(6, 6)
        assert seen == [BlockType.TUBE, BlockType.COLLECTOR, BlockType.COLLECTOR]
