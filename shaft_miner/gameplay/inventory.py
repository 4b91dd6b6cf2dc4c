"""
Inventory model - slot array with density-weighted capacity.
NO UI DEPENDENCIES.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional

from .blocks import BlockType, density
from .constants import INVENTORY_SLOTS
from .results import Failure


@dataclass
class InventorySlot:
    """
    A stack of one block type.
    Empty iff block_type is None and count is 0.
    """
    block_type: Optional[BlockType] = None
    count: int = 0

    def is_empty(self) -> bool:
        return self.block_type is None

    def clear(self) -> None:
        self.block_type = None
        self.count = 0


class Inventory:
    """
    Fixed-size slot array with a weight budget.

    Each unit weighs its block density; `load` is the running total and
    never exceeds `capacity`. A block type occupies at most one slot.
    """

    def __init__(self, capacity: float, slot_count: int = INVENTORY_SLOTS):
        self.capacity = capacity
        self.slots: List[InventorySlot] = [InventorySlot() for _ in range(slot_count)]
        self.load: int = 0

    # =========================================================================
    # QUERIES
    # =========================================================================

    def find_slot(self, block_type: BlockType) -> Optional[InventorySlot]:
        """The slot holding `block_type`, or None."""
        for slot in self.slots:
            if slot.block_type == block_type and slot.count > 0:
                return slot
        return None

    def _first_empty_slot(self) -> Optional[InventorySlot]:
        for slot in self.slots:
            if slot.is_empty():
                return slot
        return None

    def get_count(self, block_type: BlockType) -> int:
        slot = self.find_slot(block_type)
        return slot.count if slot is not None else 0

    def has_room(self, block_type: BlockType, amount: int = 1) -> bool:
        """True if the weight budget allows `amount` more units."""
        return self.load + density(block_type) * amount <= self.capacity

    def check_add(self, block_type: BlockType) -> Optional[Failure]:
        """Why one unit of `block_type` cannot be added, or None if it can."""
        if not self.has_room(block_type):
            return Failure.INVENTORY_FULL
        if self.find_slot(block_type) is None and self._first_empty_slot() is None:
            return Failure.NO_SLOT_AVAILABLE
        return None

    def can_accept(self, block_type: BlockType) -> bool:
        return self.check_add(block_type) is None

    def can_exchange(self, consumed: Dict[BlockType, int], produced: BlockType) -> Optional[Failure]:
        """
        Check a craft: remove every (type, amount) in `consumed`, then add
        one `produced`. Returns the failure, or None if it would succeed.
        """
        freed_slots = 0
        freed_weight = 0
        for block_type, amount in consumed.items():
            have = self.get_count(block_type)
            if have < amount:
                return Failure.INSUFFICIENT_MATERIALS
            if have == amount:
                freed_slots += 1
            freed_weight += density(block_type) * amount

        if self.load - freed_weight + density(produced) > self.capacity:
            return Failure.INVENTORY_FULL
        keeps_stack = self.get_count(produced) > consumed.get(produced, 0)
        if not keeps_stack and self._first_empty_slot() is None and freed_slots == 0:
            return Failure.NO_SLOT_AVAILABLE
        return None

    def selected_type(self, index: int) -> Optional[BlockType]:
        if not 0 <= index < len(self.slots):
            return None
        return self.slots[index].block_type

    def iter_stacks(self):
        """Yield (block_type, count) for every non-empty slot."""
        for slot in self.slots:
            if not slot.is_empty():
                yield slot.block_type, slot.count

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def add(self, block_type: BlockType) -> bool:
        """
        Add one unit.
        Returns True if added, False (no mutation) if over capacity or no slot.
        """
        if self.check_add(block_type) is not None:
            return False

        slot = self.find_slot(block_type)
        if slot is None:
            slot = self._first_empty_slot()
            slot.block_type = block_type
            slot.count = 1
        else:
            slot.count += 1

        self.load += density(block_type)
        return True

    def remove(self, block_type: BlockType, amount: int = 1) -> bool:
        """
        Remove `amount` units.
        Returns False (no mutation) unless one slot holds at least `amount`.
        """
        if amount <= 0:
            return False
        slot = self.find_slot(block_type)
        if slot is None or slot.count < amount:
            return False

        slot.count -= amount
        self.load -= density(block_type) * amount
        if slot.count == 0:
            slot.clear()
        return True
