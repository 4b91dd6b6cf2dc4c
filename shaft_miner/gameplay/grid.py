"""
World grid - placed and mined blocks keyed by cell coordinates.
NO UI DEPENDENCIES.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from .blocks import BlockCategory, BlockDefinition, BlockType, is_known, lookup
from .constants import SHAFT_DEPTH, SHAFT_LEFT, SHAFT_WIDTH, SURFACE_ROW, WORLD_WIDTH
from .inventory import Inventory
from .machines import Refiner, Storage
from .results import ActionResult, Failure, WorldIntegrityError

logger = logging.getLogger(__name__)

Position = Tuple[int, int]


# edge-adjacent steps; tubes never connect diagonally
NEIGHBOR_OFFSETS = ((0, -1), (0, 1), (-1, 0), (1, 0))


@dataclass
class Block:
    """
    One occupied cell.

    Multi-cell machines keep their type and state on the anchor cell;
    the other footprint cells are secondary and point at the anchor.
    """
    x: int
    y: int
    block_type: BlockType
    is_mined: bool = False
    is_mineable: bool = True
    is_secondary: bool = False
    anchor: Optional[Position] = None
    refiner: Optional[Refiner] = None
    storage: Optional[Storage] = None

    @property
    def position(self) -> Position:
        return (self.x, self.y)

    @property
    def definition(self) -> BlockDefinition:
        return lookup(self.block_type)

    @property
    def category(self) -> BlockCategory:
        return self.definition.category

    @property
    def is_machine(self) -> bool:
        """A live machine anchor."""
        return not self.is_mined and not self.is_secondary and self.definition.is_machine

    def ensure_refiner(self) -> Refiner:
        if self.refiner is None:
            self.refiner = Refiner(self.block_type)
        return self.refiner

    def ensure_storage(self) -> Storage:
        if self.storage is None:
            self.storage = Storage()
        return self.storage

    def clear_machine_state(self) -> None:
        self.refiner = None
        self.storage = None


class WorldGrid:
    """
    The mine: a surface row plus a vertical shaft.

    Coordinate system:
    - x increases to the right, y increases downward
    - the surface row is y == surface_row
    - machine footprints extend right and down from the anchor
    """

    def __init__(
        self,
        width: int = WORLD_WIDTH,
        surface_row: int = SURFACE_ROW,
        shaft_left: int = SHAFT_LEFT,
        shaft_width: int = SHAFT_WIDTH,
        shaft_depth: int = SHAFT_DEPTH,
    ):
        self.width = width
        self.surface_row = surface_row
        self.shaft_left = shaft_left
        self.shaft_width = shaft_width
        self.shaft_depth = shaft_depth
        self._blocks: Dict[Position, Block] = {}
        self._edit_listeners: List[Callable[[Block], None]] = []

    # =========================================================================
    # GEOMETRY
    # =========================================================================

    @property
    def shaft_right(self) -> int:
        """Last shaft column (inclusive)."""
        return self.shaft_left + self.shaft_width - 1

    @property
    def bottom_row(self) -> int:
        """Deepest shaft row (inclusive)."""
        return self.surface_row + self.shaft_depth - 1

    def in_shaft_columns(self, x: int) -> bool:
        return self.shaft_left <= x <= self.shaft_right

    def in_shaft(self, x: int, y: int) -> bool:
        """True for cells where blocks may be placed."""
        return self.in_shaft_columns(x) and self.surface_row <= y <= self.bottom_row

    def depth_of(self, y: int) -> int:
        return y - self.surface_row

    @staticmethod
    def footprint(x: int, y: int, size: Tuple[int, int]) -> List[Position]:
        width, height = size
        return [(x + dx, y + dy) for dy in range(height) for dx in range(width)]

    @staticmethod
    def neighbors(position: Position) -> List[Position]:
        """Edge-adjacent cells of `position`."""
        x, y = position
        return [(x + dx, y + dy) for dx, dy in NEIGHBOR_OFFSETS]

    # =========================================================================
    # LOOKUP
    # =========================================================================

    def get_block(self, x: int, y: int) -> Optional[Block]:
        return self._blocks.get((x, y))

    def get_solid_block(self, x: int, y: int) -> Optional[Block]:
        """Non-mined block at (x, y), or None."""
        block = self._blocks.get((x, y))
        if block is None or block.is_mined:
            return None
        return block

    def insert(self, block: Block) -> None:
        """Store a block record as-is. Used by generation and loading."""
        self._blocks[block.position] = block

    def add_terrain(self, x: int, y: int, block_type: BlockType, mineable: bool = True) -> Block:
        block = Block(x, y, block_type, is_mineable=mineable)
        self.insert(block)
        return block

    def iter_blocks(self, include_mined: bool = False) -> Iterator[Block]:
        """Blocks in grid order (insertion order)."""
        for block in self._blocks.values():
            if include_mined or not block.is_mined:
                yield block

    def iter_machines(self, category: Optional[BlockCategory] = None) -> Iterator[Block]:
        """Live machine anchors, optionally of one category."""
        for block in self._blocks.values():
            if block.is_machine and (category is None or block.category == category):
                yield block

    def __len__(self) -> int:
        return len(self._blocks)

    def resolve_anchor(self, block: Block) -> Block:
        """The anchor of `block` (itself unless it is a secondary cell)."""
        if not block.is_secondary:
            return block
        anchor = self._blocks.get(block.anchor) if block.anchor is not None else None
        if anchor is None or anchor.is_mined:
            raise WorldIntegrityError(
                f"Secondary cell {block.position} points at missing anchor {block.anchor}"
            )
        return anchor

    def secondary_cells(self, anchor: Block) -> List[Block]:
        cells = []
        for position in self.footprint(anchor.x, anchor.y, anchor.definition.size)[1:]:
            block = self._blocks.get(position)
            if block is not None and not block.is_mined and block.is_secondary \
                    and block.anchor == anchor.position:
                cells.append(block)
        return cells

    def footprint_cells(self, anchor: Block) -> List[Block]:
        """The anchor followed by its secondary cells."""
        return [anchor] + self.secondary_cells(anchor)

    # =========================================================================
    # EDITS
    # =========================================================================

    def add_edit_listener(self, listener: Callable[[Block], None]) -> None:
        """Call `listener(anchor)` after a machine or tube is placed or mined."""
        self._edit_listeners.append(listener)

    def _notify(self, anchor: Block, block_type: BlockType) -> None:
        definition = lookup(block_type)
        if not (definition.is_machine or definition.category == BlockCategory.TUBE):
            return
        for listener in self._edit_listeners:
            listener(anchor)

    def check_placement(self, x: int, y: int, block_type: BlockType) -> Optional[Failure]:
        """Why `block_type` cannot go at (x, y), or None if it can."""
        for cx, cy in self.footprint(x, y, lookup(block_type).size):
            if not self.in_shaft(cx, cy) or self.get_solid_block(cx, cy) is not None:
                return Failure.PLACEMENT_BLOCKED
        return None

    def place_block(
        self,
        x: int,
        y: int,
        block_type: BlockType,
        inventory: Optional[Inventory] = None,
    ) -> ActionResult:
        """
        Place `block_type` with its anchor at (x, y).

        Every footprint cell must be inside the shaft and free (mined or
        never filled). When `inventory` is given, one unit is taken from it.
        Nothing changes unless the whole placement succeeds.
        """
        if not is_known(block_type):
            raise WorldIntegrityError(f"Cannot place unknown block type {block_type!r}")
        block_type = BlockType(block_type)

        failure = self.check_placement(x, y, block_type)
        if failure is not None:
            return ActionResult.fail(failure)
        if inventory is not None and inventory.get_count(block_type) < 1:
            return ActionResult.fail(Failure.INSUFFICIENT_MATERIALS)

        definition = lookup(block_type)
        cells = self.footprint(x, y, definition.size)
        anchor = None
        for cx, cy in cells:
            block = self._blocks.get((cx, cy))
            if block is None:
                block = Block(cx, cy, block_type)
                self._blocks[(cx, cy)] = block
            block.block_type = block_type
            block.is_mined = False
            block.is_mineable = True
            block.clear_machine_state()
            if anchor is None:
                anchor = block
                block.is_secondary = False
                block.anchor = None
            else:
                block.is_secondary = True
                block.anchor = anchor.position

        if definition.category == BlockCategory.REFINER:
            anchor.ensure_refiner()
        elif definition.has_storage:
            anchor.ensure_storage()

        if inventory is not None:
            inventory.remove(block_type, 1)

        logger.debug("Placed %s at %s (%d cells)", definition.name, anchor.position, len(cells))
        self._notify(anchor, block_type)
        return ActionResult.success(block_type=block_type)

    def check_mine(self, x: int, y: int) -> Tuple[Optional[Block], Optional[Failure]]:
        """Resolve the anchor mined by targeting (x, y) and whether it may be mined."""
        block = self.get_solid_block(x, y)
        if block is None or not block.is_mineable:
            return None, Failure.NOT_MINEABLE
        anchor = self.resolve_anchor(block)
        if anchor.storage is not None and not anchor.storage.is_empty():
            return anchor, Failure.MINE_BLOCKED
        if anchor.refiner is not None and not anchor.refiner.is_idle:
            return anchor, Failure.MINE_BLOCKED
        return anchor, None

    def mine_block(self, x: int, y: int) -> ActionResult:
        """
        Mine the block at (x, y), or the whole machine it belongs to.
        The result's block_type is the anchor's type.
        """
        anchor, failure = self.check_mine(x, y)
        if failure is not None:
            return ActionResult.fail(failure)

        block_type = anchor.block_type
        for block in self.footprint_cells(anchor):
            block.is_mined = True
            block.is_secondary = False
            block.anchor = None
            block.clear_machine_state()

        logger.debug("Mined %s at %s", lookup(block_type).name, anchor.position)
        self._notify(anchor, block_type)
        return ActionResult.success(block_type=block_type)

    def __repr__(self) -> str:
        return f"WorldGrid({self.width} wide, shaft {self.shaft_width}x{self.shaft_depth})"
