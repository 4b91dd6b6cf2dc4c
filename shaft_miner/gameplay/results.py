"""
Action results and the failure taxonomy.
NO UI DEPENDENCIES.

Routine gameplay failures are values, not exceptions. Only corrupt data
raises (see SaveDataError and WorldIntegrityError).
"""
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .blocks import BlockType


class FailureKind(Enum):
    """Broad class of a failure."""
    VALIDATION = auto()       # missing gold/materials/capacity/range
    STATE_CONFLICT = auto()   # machine busy, storage full/empty, cell blocked


class Failure(Enum):
    """Every expected reason an action can fail."""
    # Validation failures
    INSUFFICIENT_GOLD = (FailureKind.VALIDATION, "Not enough gold")
    INSUFFICIENT_MATERIALS = (FailureKind.VALIDATION, "Missing materials")
    INVENTORY_FULL = (FailureKind.VALIDATION, "Backpack is full")
    NO_SLOT_AVAILABLE = (FailureKind.VALIDATION, "No free inventory slot")
    OUT_OF_RANGE = (FailureKind.VALIDATION, "Too far away")
    NOT_MINEABLE = (FailureKind.VALIDATION, "Cannot mine that")
    NOTHING_SELECTED = (FailureKind.VALIDATION, "Selected slot is empty")
    INVALID_SLOT = (FailureKind.VALIDATION, "No such slot")
    MAX_LEVEL = (FailureKind.VALIDATION, "Already at max level")
    NOT_PURCHASABLE = (FailureKind.VALIDATION, "Not sold in the shop")
    NOT_CRAFTABLE = (FailureKind.VALIDATION, "Cannot be crafted")
    NO_MACHINE_NEARBY = (FailureKind.VALIDATION, "No machine nearby")
    BLOCKED_PATH = (FailureKind.VALIDATION, "Something is in the way")

    # State conflicts
    PLACEMENT_BLOCKED = (FailureKind.STATE_CONFLICT, "Space is occupied")
    MINE_BLOCKED = (FailureKind.STATE_CONFLICT, "Empty the machine first")
    REFINER_BUSY = (FailureKind.STATE_CONFLICT, "Refiner is busy")
    REFINER_EMPTY = (FailureKind.STATE_CONFLICT, "Refiner is empty")
    NOT_REFINABLE = (FailureKind.STATE_CONFLICT, "That block cannot be refined")
    OUTPUT_INVENTORY_FULL = (FailureKind.STATE_CONFLICT, "No room for the output")
    STORAGE_FULL = (FailureKind.STATE_CONFLICT, "Storage is full")
    STORAGE_EMPTY = (FailureKind.STATE_CONFLICT, "Storage is empty")

    def __init__(self, kind: FailureKind, message: str):
        self.kind = kind
        self.message = message


@dataclass(frozen=True)
class ActionResult:
    """
    Outcome of an action call.

    `block_type` carries the item an action produced or moved, if any.
    Truthy when the action succeeded.
    """
    ok: bool
    failure: Optional[Failure] = None
    message: str = ""
    block_type: Optional['BlockType'] = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, block_type: Optional['BlockType'] = None, message: str = "") -> 'ActionResult':
        return cls(ok=True, block_type=block_type, message=message)

    @classmethod
    def fail(cls, failure: Failure, message: Optional[str] = None) -> 'ActionResult':
        return cls(ok=False, failure=failure, message=message or failure.message)


class SaveDataError(ValueError):
    """Saved state is malformed or references unknown block types."""


class WorldIntegrityError(RuntimeError):
    """The in-memory world violates a structural invariant."""
