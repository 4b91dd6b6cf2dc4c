"""
Automation pass - moves items from collectors to refiners and chests.
NO UI DEPENDENCIES.
"""
from dataclasses import dataclass
from enum import Enum, auto
from typing import List

from .blocks import BlockCategory, BlockType, is_refinable, refined_output
from .grid import Block, Position, WorldGrid
from .machines import RefinerPhase
from .network import MachineNetwork


class TransferKind(Enum):
    COLLECTOR_TO_REFINER = auto()
    COLLECTOR_TO_CHEST = auto()
    REFINER_TO_CHEST = auto()


@dataclass(frozen=True)
class Transfer:
    """One item moved by the automation pass."""
    kind: TransferKind
    block_type: BlockType
    source: Position
    target: Position


def _idle_refiner(block: Block) -> bool:
    return block.ensure_refiner().is_idle


def _chest_with_space(block: Block) -> bool:
    return block.ensure_storage().has_space()


def process_collectors(world: WorldGrid, network: MachineNetwork, now: float) -> List[Transfer]:
    """
    Route every collector's queue, oldest item first.

    Refinable items go to the nearest idle refiner; anything else (or a
    refinable item with no idle refiner) goes to the nearest chest with
    space. Items with nowhere to go stay queued.
    """
    transfers: List[Transfer] = []

    for collector in world.iter_machines(BlockCategory.COLLECTOR):
        storage = collector.ensure_storage()
        if storage.is_empty():
            continue

        remaining = []
        for item in storage.snapshot():
            if is_refinable(item.block_type):
                refiner = network.nearest(collector, BlockCategory.REFINER, _idle_refiner)
                if refiner is not None and refiner.refiner.deposit(item.block_type, now) is None:
                    transfers.append(Transfer(TransferKind.COLLECTOR_TO_REFINER, item.block_type,
                                              collector.position, refiner.position))
                    continue

            chest = network.nearest(collector, BlockCategory.CHEST, _chest_with_space)
            if chest is not None and chest.storage.deposit(item.block_type, item.count) is None:
                transfers.append(Transfer(TransferKind.COLLECTOR_TO_CHEST, item.block_type,
                                          collector.position, chest.position))
                continue

            remaining.append(item)

        storage.retain(remaining)

    return transfers


def process_refiners(world: WorldGrid, network: MachineNetwork, now: float) -> List[Transfer]:
    """
    Promote finished refiners to Ready and push their output to the
    nearest chest with space. Without a chest the output stays held.
    """
    transfers: List[Transfer] = []

    for block in world.iter_machines(BlockCategory.REFINER):
        refiner = block.ensure_refiner()
        if refiner.is_idle:
            continue
        refiner.update(now)
        if refiner.phase != RefinerPhase.READY:
            continue

        chest = network.nearest(block, BlockCategory.CHEST, _chest_with_space)
        if chest is None:
            continue

        output = refined_output(refiner.input_type)
        chest.storage.deposit(output)
        refiner.reset()
        transfers.append(Transfer(TransferKind.REFINER_TO_CHEST, output,
                                  block.position, chest.position))

    return transfers


def process_automation(world: WorldGrid, network: MachineNetwork, now: float) -> List[Transfer]:
    """Run one automation tick: collectors first, then refiners."""
    transfers = process_collectors(world, network, now)
    transfers.extend(process_refiners(world, network, now))
    return transfers
