"""
Machine network - which machines reach which through tubes.
NO UI DEPENDENCIES.
"""
import logging
from collections import deque
from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from .blocks import BlockCategory
from .grid import Block, Position, WorldGrid

logger = logging.getLogger(__name__)


@dataclass
class Connection:
    """A reachable machine and the cell path leading to it."""
    machine: Block
    path: List[Position]    # source footprint cell ... target footprint cell

    @property
    def distance(self) -> int:
        """Number of hops along the path."""
        return len(self.path) - 1


def find_path(world: WorldGrid, source: Block, target: Block) -> Optional[List[Position]]:
    """
    Breadth-first search from any footprint cell of `source` to any
    footprint cell of `target`, stepping only through tubes.
    Returns the cell path (both ends included), or None if unreachable.
    """
    source_cells = [b.position for b in world.footprint_cells(source)]
    target_cells: Set[Position] = {b.position for b in world.footprint_cells(target)}

    visited: Set[Position] = set(source_cells)
    queue = deque((cell, [cell]) for cell in source_cells)

    while queue:
        cell, path = queue.popleft()
        if cell in target_cells:
            return path

        for next_cell in world.neighbors(cell):
            if next_cell in visited:
                continue

            block = world.get_solid_block(*next_cell)
            if block is None:
                continue
            visited.add(next_cell)

            if next_cell in target_cells or block.category == BlockCategory.TUBE:
                queue.append((next_cell, path + [next_cell]))

    return None


class MachineNetwork:
    """
    Connections for every machine, nearest first.

    Rebuilt from scratch on every machine or tube edit. That is
    O(machines^2 * cells) per edit, fine for a single shaft.
    """

    def __init__(self):
        self._connections: Dict[Position, List[Connection]] = {}

    def __len__(self) -> int:
        return len(self._connections)

    def rebuild(self, world: WorldGrid) -> None:
        machines = list(world.iter_machines())
        connections: Dict[Position, List[Connection]] = {}
        for source in machines:
            found = []
            for target in machines:
                if target is source:
                    continue
                path = find_path(world, source, target)
                if path is not None:
                    found.append(Connection(target, path))
            # stable sort keeps scan order for equal distances
            found.sort(key=lambda c: c.distance)
            connections[source.position] = found
        self._connections = connections
        logger.debug("Machine network rebuilt with %d machines", len(connections))

    def connections_for(self, machine: Block) -> List[Connection]:
        return self._connections.get(machine.position, [])

    def nearest(self, machine: Block, category: BlockCategory, predicate=None) -> Optional[Block]:
        """Closest connected machine of `category` passing `predicate`."""
        for connection in self.connections_for(machine):
            target = connection.machine
            if target.category != category:
                continue
            if predicate is None or predicate(target):
                return target
        return None

    def attach(self, world: WorldGrid) -> None:
        """Build now and rebuild whenever `world` reports a machine/tube edit."""
        self.rebuild(world)
        world.add_edit_listener(lambda _block: self.rebuild(world))
