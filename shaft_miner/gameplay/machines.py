"""
Machine state: refiner processing and collector/chest storage.
NO UI DEPENDENCIES.
"""
from collections import deque
from dataclasses import dataclass
from enum import Enum, auto
from typing import Deque, List, Optional, Union

from .blocks import BlockType, refined_output
from .constants import MACHINE_STORAGE_LIMIT
from .economy import refining_duration
from .inventory import Inventory
from .results import ActionResult, Failure


# =============================================================================
# REFINER
# =============================================================================

class RefinerPhase(Enum):
    IDLE = auto()
    PROCESSING = auto()
    READY = auto()


@dataclass(frozen=True)
class Idle:
    phase = RefinerPhase.IDLE


@dataclass(frozen=True)
class Processing:
    input_type: BlockType
    started_at: float
    phase = RefinerPhase.PROCESSING


@dataclass(frozen=True)
class Ready:
    input_type: BlockType
    started_at: float
    phase = RefinerPhase.READY


RefinerState = Union[Idle, Processing, Ready]

IDLE = Idle()


class Refiner:
    """
    Turns one refinable block into its polished form over time.

    Idle -> Processing (deposit) -> Ready (duration elapsed) -> Idle (collect).
    Elapsed time is always `now - started_at`, so a paused loop catches up.
    """

    def __init__(self, refiner_type: BlockType):
        self.refiner_type = refiner_type
        self.state: RefinerState = IDLE

    @property
    def phase(self) -> RefinerPhase:
        return self.state.phase

    @property
    def is_idle(self) -> bool:
        return isinstance(self.state, Idle)

    @property
    def input_type(self) -> Optional[BlockType]:
        if isinstance(self.state, (Processing, Ready)):
            return self.state.input_type
        return None

    def required_duration(self) -> float:
        """Seconds needed for the current input; 0 when idle."""
        if self.input_type is None:
            return 0.0
        return refining_duration(self.refiner_type, self.input_type)

    def elapsed(self, now: float) -> float:
        if isinstance(self.state, Idle):
            return 0.0
        return now - self.state.started_at

    def progress(self, now: float) -> float:
        """0.0 to 1.0 for renderers."""
        duration = self.required_duration()
        if duration <= 0:
            return 0.0
        return min(1.0, self.elapsed(now) / duration)

    def deposit(self, block_type: BlockType, now: float) -> Optional[Failure]:
        """
        Start refining `block_type`.
        Returns None on success, or the reason it was refused.
        """
        if not self.is_idle:
            return Failure.REFINER_BUSY
        if refined_output(block_type) is None:
            return Failure.NOT_REFINABLE
        self.state = Processing(block_type, now)
        return None

    def update(self, now: float) -> bool:
        """
        Promote Processing to Ready once the duration has elapsed.
        Returns True on the tick the refiner becomes Ready.
        """
        if isinstance(self.state, Processing) and self.elapsed(now) >= self.required_duration():
            self.state = Ready(self.state.input_type, self.state.started_at)
            return True
        return False

    def output_type(self, now: float) -> Optional[BlockType]:
        """
        What collecting right now would yield: the refined type once done,
        the untouched input before that, None when idle.
        """
        if self.input_type is None:
            return None
        self.update(now)
        if isinstance(self.state, Ready):
            return refined_output(self.state.input_type)
        return self.state.input_type

    def reset(self) -> None:
        self.state = IDLE

    def collect_into(self, inventory: Inventory, now: float) -> ActionResult:
        """
        Move the current output into `inventory` and go Idle.
        State is kept when the inventory cannot take the output.
        """
        output = self.output_type(now)
        if output is None:
            return ActionResult.fail(Failure.REFINER_EMPTY)
        if not inventory.add(output):
            return ActionResult.fail(Failure.OUTPUT_INVENTORY_FULL)
        self.reset()
        return ActionResult.success(block_type=output)

    def __repr__(self) -> str:
        return f"Refiner({self.refiner_type.name}, {self.phase.name})"


# =============================================================================
# STORAGE
# =============================================================================

@dataclass
class StoredItem:
    block_type: BlockType
    count: int = 1


class Storage:
    """
    Bounded FIFO used by collectors and chests.
    Every push is its own entry; entries are not merged.
    """

    def __init__(self, capacity: int = MACHINE_STORAGE_LIMIT):
        self.capacity = capacity
        self.items: Deque[StoredItem] = deque()

    def __len__(self) -> int:
        return len(self.items)

    def is_empty(self) -> bool:
        return len(self.items) == 0

    def has_space(self) -> bool:
        return len(self.items) < self.capacity

    def peek(self) -> Optional[StoredItem]:
        return self.items[0] if self.items else None

    def deposit(self, block_type: BlockType, count: int = 1) -> Optional[Failure]:
        """Push one entry. Returns None on success, STORAGE_FULL at capacity."""
        if not self.has_space():
            return Failure.STORAGE_FULL
        self.items.append(StoredItem(block_type, count))
        return None

    def pop(self) -> Optional[StoredItem]:
        return self.items.popleft() if self.items else None

    def retain(self, items: List[StoredItem]) -> None:
        """Replace the queue with `items`, keeping their order."""
        self.items = deque(items)

    def snapshot(self) -> List[StoredItem]:
        return list(self.items)

    def collect_into(self, inventory: Inventory) -> ActionResult:
        """
        Move the oldest entry into `inventory`.
        The entry is only popped once the inventory has accepted it.
        """
        item = self.peek()
        if item is None:
            return ActionResult.fail(Failure.STORAGE_EMPTY)
        if not inventory.has_room(item.block_type, item.count):
            return ActionResult.fail(Failure.OUTPUT_INVENTORY_FULL)
        if inventory.check_add(item.block_type) is not None:
            return ActionResult.fail(Failure.OUTPUT_INVENTORY_FULL)

        for _ in range(item.count):
            inventory.add(item.block_type)
        self.pop()
        return ActionResult.success(block_type=item.block_type)

    def __repr__(self) -> str:
        return f"Storage({len(self.items)}/{self.capacity})"
