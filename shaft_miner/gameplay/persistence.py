"""
Save format - serialize/deserialize the player and world.
NO UI DEPENDENCIES.

The core only produces and consumes plain dicts; where they are stored is
up to the caller. Loading validates everything and raises SaveDataError
rather than guessing.
"""
import logging
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .blocks import BlockCategory, BlockType, density, is_known, is_refinable, lookup
from .constants import COMPACT_MINED_CODE, SAVE_FORMAT_VERSION
from .economy import BACKPACK_TIERS, PICKAXE_TIERS
from .grid import Block, WorldGrid
from .machines import Idle, Processing, Ready, Refiner, Storage, StoredItem
from .player import Player
from .results import SaveDataError

logger = logging.getLogger(__name__)


def _known_block_id(value: Optional[int]) -> Optional[int]:
    if value is not None and not is_known(value):
        raise ValueError(f"unknown block type id {value}")
    return value


# =============================================================================
# SAVE SCHEMA
# =============================================================================

class SlotModel(BaseModel):
    block_type: Optional[int] = None
    count: int = Field(default=0, ge=0)

    @field_validator("block_type")
    @classmethod
    def known_block_type(cls, value):
        return _known_block_id(value)

    @model_validator(mode="after")
    def empty_means_both(self) -> "SlotModel":
        if (self.block_type is None) != (self.count == 0):
            raise ValueError("slot must have both a type and a count, or neither")
        return self


class PlayerModel(BaseModel):
    x: float
    y: float
    velocity_x: float = 0.0
    velocity_y: float = 0.0
    on_ground: bool = True
    climbing: bool = False
    facing: int = 1
    gold: int = Field(ge=0)
    proficiency: int = Field(ge=1)
    strength: int = Field(ge=1)
    pickaxe_tier: int = Field(ge=0, lt=len(PICKAXE_TIERS))
    backpack_tier: int = Field(ge=0, lt=len(BACKPACK_TIERS))
    selected_slot: int = Field(default=0, ge=0)
    slots: List[SlotModel]


class RefinerModel(BaseModel):
    phase: Literal["idle", "processing", "ready"]
    input_type: Optional[int] = None
    started_at: Optional[float] = None

    @field_validator("input_type")
    @classmethod
    def refinable_input_type(cls, value):
        value = _known_block_id(value)
        if value is not None and not is_refinable(BlockType(value)):
            raise ValueError(f"block type id {value} cannot be refined")
        return value

    @model_validator(mode="after")
    def input_matches_phase(self) -> "RefinerModel":
        has_input = self.input_type is not None and self.started_at is not None
        if has_input != (self.phase != "idle"):
            raise ValueError(f"refiner phase {self.phase} does not match its input")
        return self


class StoredItemModel(BaseModel):
    block_type: int
    # machines move items one unit at a time
    count: int = Field(default=1, ge=1, le=1)

    @field_validator("block_type")
    @classmethod
    def known_block_type(cls, value):
        return _known_block_id(value)


class BlockModel(BaseModel):
    x: int
    y: int
    block_type: int
    is_mined: bool = False
    is_mineable: bool = True
    is_secondary: bool = False
    anchor: Optional[Tuple[int, int]] = None
    refiner: Optional[RefinerModel] = None
    storage: Optional[List[StoredItemModel]] = None

    @field_validator("block_type")
    @classmethod
    def known_block_type(cls, value):
        return _known_block_id(value)

    @model_validator(mode="after")
    def anchor_only_on_secondary(self) -> "BlockModel":
        if self.is_secondary != (self.anchor is not None):
            raise ValueError(f"block at ({self.x}, {self.y}) has inconsistent anchor link")
        return self


class WorldModel(BaseModel):
    width: int = Field(gt=0)
    surface_row: int = Field(ge=0)
    shaft_left: int = Field(ge=0)
    shaft_width: int = Field(gt=0)
    shaft_depth: int = Field(gt=0)


class SaveModel(BaseModel):
    version: int = SAVE_FORMAT_VERSION
    world: WorldModel
    player: PlayerModel
    blocks: List[BlockModel]


# =============================================================================
# SERIALIZE
# =============================================================================

def _refiner_to_model(refiner: Refiner) -> RefinerModel:
    state = refiner.state
    if isinstance(state, Idle):
        return RefinerModel(phase="idle")
    return RefinerModel(phase=state.phase.name.lower(), input_type=int(state.input_type),
                        started_at=state.started_at)


def serialize(player: Player, world: WorldGrid) -> Dict[str, Any]:
    """Full snapshot of player and world as JSON-ready data."""
    player_model = PlayerModel(
        x=player.x,
        y=player.y,
        velocity_x=player.velocity_x,
        velocity_y=player.velocity_y,
        on_ground=player.on_ground,
        climbing=player.climbing,
        facing=player.facing,
        gold=player.gold,
        proficiency=player.proficiency,
        strength=player.strength,
        pickaxe_tier=player.pickaxe_tier,
        backpack_tier=player.backpack_tier,
        selected_slot=player.selected_slot,
        slots=[
            SlotModel(block_type=None if s.block_type is None else int(s.block_type), count=s.count)
            for s in player.inventory.slots
        ],
    )
    blocks = [
        BlockModel(
            x=b.x,
            y=b.y,
            block_type=int(b.block_type),
            is_mined=b.is_mined,
            is_mineable=b.is_mineable,
            is_secondary=b.is_secondary,
            anchor=b.anchor,
            refiner=_refiner_to_model(b.refiner) if b.refiner is not None else None,
            storage=[StoredItemModel(block_type=int(i.block_type), count=i.count)
                     for i in b.storage.items] if b.storage is not None else None,
        )
        for b in world.iter_blocks(include_mined=True)
    ]
    world_model = WorldModel(
        width=world.width,
        surface_row=world.surface_row,
        shaft_left=world.shaft_left,
        shaft_width=world.shaft_width,
        shaft_depth=world.shaft_depth,
    )
    save = SaveModel(world=world_model, player=player_model, blocks=blocks)
    return save.model_dump(mode="json")


# =============================================================================
# DESERIALIZE
# =============================================================================

def _refiner_from_model(block_type: BlockType, model: RefinerModel) -> Refiner:
    refiner = Refiner(block_type)
    if model.phase == "processing":
        refiner.state = Processing(BlockType(model.input_type), model.started_at)
    elif model.phase == "ready":
        refiner.state = Ready(BlockType(model.input_type), model.started_at)
    return refiner


def _player_from_model(model: PlayerModel) -> Player:
    player = Player(model.x, model.y)
    player.velocity_x = model.velocity_x
    player.velocity_y = model.velocity_y
    player.on_ground = model.on_ground
    player.climbing = model.climbing
    player.facing = model.facing
    player.gold = model.gold
    player.proficiency = model.proficiency
    player.strength = model.strength
    player.pickaxe_tier = model.pickaxe_tier
    player.backpack_tier = model.backpack_tier
    player.recompute()

    inventory = player.inventory
    if len(model.slots) != len(inventory.slots):
        raise SaveDataError(f"expected {len(inventory.slots)} inventory slots, got {len(model.slots)}")
    if not 0 <= model.selected_slot < len(inventory.slots):
        raise SaveDataError(f"selected slot {model.selected_slot} out of range")
    player.selected_slot = model.selected_slot

    seen = set()
    load = 0
    for slot, slot_model in zip(inventory.slots, model.slots):
        if slot_model.block_type is None:
            continue
        block_type = BlockType(slot_model.block_type)
        if block_type in seen:
            raise SaveDataError(f"{block_type.name} is split across inventory slots")
        seen.add(block_type)
        slot.block_type = block_type
        slot.count = slot_model.count
        load += density(block_type) * slot_model.count
    if load > inventory.capacity:
        raise SaveDataError(f"inventory load {load} exceeds capacity {inventory.capacity}")
    inventory.load = load
    return player


def _world_from_model(world_model: WorldModel, block_models: List[BlockModel]) -> WorldGrid:
    world = WorldGrid(**world_model.model_dump())
    for model in block_models:
        block_type = BlockType(model.block_type)
        definition = lookup(block_type)
        block = Block(model.x, model.y, block_type,
                      is_mined=model.is_mined,
                      is_mineable=model.is_mineable,
                      is_secondary=model.is_secondary,
                      anchor=model.anchor)
        if model.refiner is not None and not model.is_secondary:
            block.refiner = _refiner_from_model(block_type, model.refiner)
        if model.storage is not None and not model.is_secondary:
            if len(model.storage) > Storage().capacity:
                raise SaveDataError(f"storage at ({model.x}, {model.y}) is over capacity")
            block.storage = Storage()
            block.storage.retain([StoredItem(BlockType(i.block_type), i.count) for i in model.storage])
        if world.get_block(model.x, model.y) is not None:
            raise SaveDataError(f"duplicate block at ({model.x}, {model.y})")
        if model.refiner is not None and definition.category != BlockCategory.REFINER:
            raise SaveDataError(f"{definition.name} at ({model.x}, {model.y}) cannot hold a refiner")
        if model.storage is not None and not definition.has_storage:
            raise SaveDataError(f"{definition.name} at ({model.x}, {model.y}) cannot hold items")
        world.insert(block)

    for block in world.iter_blocks():
        if not block.is_secondary:
            continue
        anchor = world.get_block(*block.anchor)
        if anchor is None or anchor.is_mined or anchor.is_secondary \
                or anchor.block_type != block.block_type:
            raise SaveDataError(f"secondary cell {block.position} has no matching anchor")
    return world


def deserialize(data: Dict[str, Any]) -> Tuple[Player, WorldGrid]:
    """
    Rebuild player and world from serialize() output.
    Raises SaveDataError for anything malformed.
    """
    try:
        save = SaveModel.model_validate(data)
    except ValidationError as exc:
        raise SaveDataError(f"invalid save data: {exc}") from exc
    if save.version != SAVE_FORMAT_VERSION:
        raise SaveDataError(f"unsupported save version {save.version}")

    player = _player_from_model(save.player)
    world = _world_from_model(save.world, save.blocks)
    logger.info("Loaded save with %d blocks", len(world))
    return player, world


# =============================================================================
# COMPACT EXPORT
# =============================================================================

def export_compact(world: WorldGrid) -> str:
    """
    Lossy export: two hex digits per shaft cell, row by row from the
    surface down, 'ff' for mined or empty cells. Machine state and
    secondary links are dropped, so this cannot be loaded back.
    """
    parts = []
    for y in range(world.surface_row, world.bottom_row + 1):
        for x in range(world.shaft_left, world.shaft_right + 1):
            block = world.get_solid_block(x, y)
            parts.append(COMPACT_MINED_CODE if block is None else f"{int(block.block_type):02x}")
    return "".join(parts)
