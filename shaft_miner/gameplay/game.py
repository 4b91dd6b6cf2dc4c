"""
Game facade - the player's actions against one mine.
NO UI DEPENDENCIES.
"""
import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from .automation import Transfer, TransferKind, process_automation
from .blocks import BLOCKS, BlockCategory, BlockType, density, is_known, lookup
from .constants import (
    MACHINE_INTERACTION_DISTANCE, MAX_PROFICIENCY_LEVEL, MAX_STRENGTH_LEVEL, REACH,
)
from .economy import (
    backpack_capacity, mining_duration, next_backpack_tier, next_pickaxe_tier,
    proficiency_upgrade_cost, strength_upgrade_cost,
)
from .grid import Block, WorldGrid
from .network import MachineNetwork
from .persistence import deserialize, export_compact, serialize
from .player import Player
from .results import ActionResult, Failure, SaveDataError
from .worldgen import generate_world

logger = logging.getLogger(__name__)


@dataclass
class GameEvent:
    """Base for what update() reports back."""
    pass


@dataclass
class BlockMinedEvent(GameEvent):
    """The player finished mining a block."""
    block_type: BlockType
    position: Tuple[int, int]


@dataclass
class ItemTransferredEvent(GameEvent):
    """Automation moved an item between machines."""
    transfer: Transfer


@dataclass
class RefinerFinishedEvent(GameEvent):
    """A refiner delivered its output to a chest."""
    block_type: BlockType
    position: Tuple[int, int]


@dataclass
class MiningJob:
    """In-progress mining of one cell."""
    x: int
    y: int
    progress: float = 0.0
    required: float = 0.0


class Game:
    """
    One mine, one miner.

    Actions return an ActionResult instead of raising; the renderer reads
    state through iter_visible_blocks() and get_player_state(). Call
    update(dt) every frame to advance mining and run the machines.
    """

    def __init__(
        self,
        world: Optional[WorldGrid] = None,
        player: Optional[Player] = None,
        clock: Callable[[], float] = time.time,
        rng: Optional[random.Random] = None,
    ):
        self.clock = clock
        self.world = world if world is not None else generate_world(rng)
        self.player = player if player is not None else Player()
        self.network = MachineNetwork()
        self.network.attach(self.world)
        self.mining: Optional[MiningJob] = None
        self._events: List[GameEvent] = []

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _log_failure(self, action: str, result: ActionResult) -> ActionResult:
        if not result.ok:
            logger.debug("%s failed: %s", action, result.failure.name)
        return result

    def _in_reach(self, x: int, y: int) -> bool:
        px, py = self.player.cell
        return abs(px - x) <= REACH and abs(py - y) <= REACH

    def _find_nearby_machine(self, category: BlockCategory) -> Optional[Block]:
        """Closest machine anchor of `category` with a footprint cell in reach."""
        px, py = self.player.cell
        best, best_distance = None, None
        for anchor in self.world.iter_machines(category):
            for cell in self.world.footprint_cells(anchor):
                dx, dy = abs(cell.x - px), abs(cell.y - py)
                if dx > MACHINE_INTERACTION_DISTANCE or dy > MACHINE_INTERACTION_DISTANCE:
                    continue
                if best_distance is None or dx + dy < best_distance:
                    best, best_distance = anchor, dx + dy
        return best

    # =========================================================================
    # MINING AND PLACING
    # =========================================================================

    def _check_mine(self, x: int, y: int) -> Tuple[Optional[Block], Optional[Failure]]:
        if not self._in_reach(x, y):
            return None, Failure.OUT_OF_RANGE
        anchor, failure = self.world.check_mine(x, y)
        if failure is not None:
            return anchor, failure
        inventory_failure = self.player.inventory.check_add(anchor.block_type)
        return anchor, inventory_failure

    def mine(self, x: int, y: int) -> ActionResult:
        """
        Mine the cell at (x, y) now and put the block in the backpack.
        Machines come back whole as one item.
        """
        anchor, failure = self._check_mine(x, y)
        if failure is not None:
            return self._log_failure("mine", ActionResult.fail(failure))

        position = anchor.position
        result = self.world.mine_block(x, y)
        if not result.ok:
            return self._log_failure("mine", result)
        self.player.inventory.add(result.block_type)
        self._events.append(BlockMinedEvent(result.block_type, position))
        return result

    def start_mining(self, x: int, y: int) -> ActionResult:
        """Begin timed mining of (x, y); update() finishes it."""
        anchor, failure = self._check_mine(x, y)
        if failure is not None:
            self.mining = None
            return self._log_failure("start_mining", ActionResult.fail(failure))
        required = mining_duration(self.player.pickaxe_power, anchor.block_type)
        self.mining = MiningJob(x, y, required=required)
        return ActionResult.success(block_type=anchor.block_type)

    def stop_mining(self) -> None:
        """Drop any mining progress. Nothing else changes."""
        self.mining = None

    def get_mining_progress(self) -> Optional[Tuple[int, int, float]]:
        """(x, y, fraction) of the current mining job, or None."""
        if self.mining is None:
            return None
        job = self.mining
        fraction = 1.0 if job.required <= 0 else min(1.0, job.progress / job.required)
        return (job.x, job.y, fraction)

    def _update_mining(self, dt: float) -> None:
        job = self.mining
        if job is None:
            return
        _, failure = self._check_mine(job.x, job.y)
        if failure is not None:
            # target gone, out of reach, or backpack filled up
            self.mining = None
            return
        job.progress += dt
        if job.progress >= job.required:
            self.mining = None
            self.mine(job.x, job.y)

    def place(self, x: int, y: int) -> ActionResult:
        """Place one unit of the selected slot with its anchor at (x, y)."""
        block_type = self.player.selected_type()
        if block_type is None:
            return self._log_failure("place", ActionResult.fail(Failure.NOTHING_SELECTED))
        if not self._in_reach(x, y):
            return self._log_failure("place", ActionResult.fail(Failure.OUT_OF_RANGE))
        result = self.world.place_block(x, y, block_type, self.player.inventory)
        return self._log_failure("place", result)

    def move_player(self, dx: int, dy: int) -> ActionResult:
        """
        Step one cell. Stand-in for the physics layer: solid blocks stop
        the player, climbing needs a ladder, the shaft walls clamp x.
        """
        player = self.player
        px, py = player.cell
        nx, ny = px + dx, py + dy
        if dx:
            player.facing = 1 if dx > 0 else -1

        if ny > self.world.surface_row and not self.world.in_shaft_columns(nx):
            return ActionResult.fail(Failure.BLOCKED_PATH)
        if not 0 <= nx < self.world.width or ny > self.world.bottom_row:
            return ActionResult.fail(Failure.BLOCKED_PATH)

        target = self.world.get_solid_block(nx, ny)
        if target is not None and target.definition.solid:
            return ActionResult.fail(Failure.BLOCKED_PATH)
        if dy < 0:
            here = self.world.get_solid_block(px, py)
            if here is None or not here.definition.climbable:
                return ActionResult.fail(Failure.BLOCKED_PATH)

        player.x, player.y = nx, ny
        here = self.world.get_solid_block(nx, ny)
        below = self.world.get_solid_block(nx, ny + 1)
        player.climbing = here is not None and here.definition.climbable
        player.on_ground = below is not None and below.definition.solid
        return ActionResult.success()

    # =========================================================================
    # INVENTORY AND SHOP
    # =========================================================================

    def select_slot(self, index: int) -> ActionResult:
        if not 0 <= index < len(self.player.inventory.slots):
            return ActionResult.fail(Failure.INVALID_SLOT)
        self.player.selected_slot = index
        return ActionResult.success(block_type=self.player.selected_type())

    def buy(self, block_type: BlockType) -> ActionResult:
        """Buy one unit of a shop item for its catalog value."""
        if not is_known(block_type) or not lookup(block_type).purchasable:
            return self._log_failure("buy", ActionResult.fail(Failure.NOT_PURCHASABLE))
        block_type = BlockType(block_type)
        price = lookup(block_type).value
        if self.player.gold < price:
            return self._log_failure("buy", ActionResult.fail(Failure.INSUFFICIENT_GOLD))
        failure = self.player.inventory.check_add(block_type)
        if failure is not None:
            return self._log_failure("buy", ActionResult.fail(failure))

        self.player.gold -= price
        self.player.inventory.add(block_type)
        return ActionResult.success(block_type=block_type)

    def sell(self) -> ActionResult:
        """Sell one unit of the selected slot for its catalog value."""
        block_type = self.player.selected_type()
        if block_type is None:
            return self._log_failure("sell", ActionResult.fail(Failure.NOTHING_SELECTED))
        self.player.inventory.remove(block_type, 1)
        self.player.gold += lookup(block_type).value
        return ActionResult.success(block_type=block_type)

    # =========================================================================
    # UPGRADES AND CRAFTING
    # =========================================================================

    def upgrade_proficiency(self) -> ActionResult:
        """Spend gold to raise mining speed."""
        player = self.player
        if player.proficiency >= MAX_PROFICIENCY_LEVEL:
            return self._log_failure("upgrade_proficiency", ActionResult.fail(Failure.MAX_LEVEL))
        cost = proficiency_upgrade_cost(player.pickaxe_tier, player.proficiency)
        if player.gold < cost:
            return self._log_failure("upgrade_proficiency", ActionResult.fail(Failure.INSUFFICIENT_GOLD))
        player.gold -= cost
        player.proficiency += 1
        player.recompute()
        return ActionResult.success()

    def upgrade_strength(self) -> ActionResult:
        """Spend gold to raise carry capacity."""
        player = self.player
        if player.strength >= MAX_STRENGTH_LEVEL:
            return self._log_failure("upgrade_strength", ActionResult.fail(Failure.MAX_LEVEL))
        cost = strength_upgrade_cost(player.backpack_tier, player.strength)
        if player.gold < cost:
            return self._log_failure("upgrade_strength", ActionResult.fail(Failure.INSUFFICIENT_GOLD))
        player.gold -= cost
        player.strength += 1
        player.recompute()
        return ActionResult.success()

    def _consume(self, requirement) -> Optional[Failure]:
        inventory = self.player.inventory
        if inventory.get_count(requirement.required_type) < requirement.required_amount:
            return Failure.INSUFFICIENT_MATERIALS
        inventory.remove(requirement.required_type, requirement.required_amount)
        return None

    def craft_pickaxe(self) -> ActionResult:
        """Craft the next pickaxe tier. Proficiency resets to 1."""
        tier = next_pickaxe_tier(self.player.pickaxe_tier)
        if tier is None:
            return self._log_failure("craft_pickaxe", ActionResult.fail(Failure.MAX_LEVEL))
        failure = self._consume(tier.requirement)
        if failure is not None:
            return self._log_failure("craft_pickaxe", ActionResult.fail(failure))
        self.player.pickaxe_tier += 1
        self.player.proficiency = 1
        self.player.recompute()
        logger.info("Crafted %s pickaxe", tier.name)
        return ActionResult.success()

    def craft_backpack(self) -> ActionResult:
        """
        Craft the next backpack tier. Strength resets to 1.

        Fails with INVENTORY_FULL when the new backpack at strength 1 could
        not hold what is left after paying, so load never exceeds capacity.
        """
        tier = next_backpack_tier(self.player.backpack_tier)
        if tier is None:
            return self._log_failure("craft_backpack", ActionResult.fail(Failure.MAX_LEVEL))
        requirement = tier.requirement
        inventory = self.player.inventory
        if inventory.get_count(requirement.required_type) >= requirement.required_amount:
            remaining = inventory.load - density(requirement.required_type) * requirement.required_amount
            if remaining > backpack_capacity(self.player.backpack_tier + 1, 1):
                return self._log_failure("craft_backpack", ActionResult.fail(Failure.INVENTORY_FULL))
        failure = self._consume(requirement)
        if failure is not None:
            return self._log_failure("craft_backpack", ActionResult.fail(failure))
        self.player.backpack_tier += 1
        self.player.strength = 1
        self.player.recompute()
        logger.info("Crafted %s backpack", tier.name)
        return ActionResult.success()

    def craft_machine(self, block_type: BlockType) -> ActionResult:
        """Craft one machine or tube from its catalog recipe."""
        if not is_known(block_type) or lookup(block_type).crafting is None:
            return self._log_failure("craft_machine", ActionResult.fail(Failure.NOT_CRAFTABLE))
        block_type = BlockType(block_type)
        recipe = lookup(block_type).crafting

        consumed: Dict[BlockType, int] = {recipe.required_type: recipe.required_amount}
        if recipe.required_base_type is not None:
            consumed[recipe.required_base_type] = consumed.get(recipe.required_base_type, 0) + 1

        inventory = self.player.inventory
        failure = inventory.can_exchange(consumed, block_type)
        if failure is not None:
            return self._log_failure("craft_machine", ActionResult.fail(failure))

        for consumed_type, amount in consumed.items():
            inventory.remove(consumed_type, amount)
        inventory.add(block_type)
        logger.info("Crafted %s", lookup(block_type).name)
        return ActionResult.success(block_type=block_type)

    # =========================================================================
    # MACHINE INTERACTION
    # =========================================================================

    def deposit_into_nearby_refiner(self) -> ActionResult:
        """Hand one unit of the selected block to a nearby idle refiner."""
        anchor = self._find_nearby_machine(BlockCategory.REFINER)
        if anchor is None:
            return self._log_failure("deposit_refiner", ActionResult.fail(Failure.NO_MACHINE_NEARBY))
        block_type = self.player.selected_type()
        if block_type is None:
            return self._log_failure("deposit_refiner", ActionResult.fail(Failure.NOTHING_SELECTED))

        failure = anchor.ensure_refiner().deposit(block_type, self.clock())
        if failure is not None:
            return self._log_failure("deposit_refiner", ActionResult.fail(failure))
        self.player.inventory.remove(block_type, 1)
        return ActionResult.success(block_type=block_type)

    def collect_from_nearby_refiner(self) -> ActionResult:
        """
        Take a nearby refiner's item: the refined block once done,
        the original input if collected early.
        """
        anchor = self._find_nearby_machine(BlockCategory.REFINER)
        if anchor is None:
            return self._log_failure("collect_refiner", ActionResult.fail(Failure.NO_MACHINE_NEARBY))
        result = anchor.ensure_refiner().collect_into(self.player.inventory, self.clock())
        return self._log_failure("collect_refiner", result)

    def deposit_into_nearby_collector(self) -> ActionResult:
        """Feed one unit of the selected block into a nearby collector."""
        anchor = self._find_nearby_machine(BlockCategory.COLLECTOR)
        if anchor is None:
            return self._log_failure("deposit_collector", ActionResult.fail(Failure.NO_MACHINE_NEARBY))
        block_type = self.player.selected_type()
        if block_type is None:
            return self._log_failure("deposit_collector", ActionResult.fail(Failure.NOTHING_SELECTED))

        failure = anchor.ensure_storage().deposit(block_type)
        if failure is not None:
            return self._log_failure("deposit_collector", ActionResult.fail(failure))
        self.player.inventory.remove(block_type, 1)
        return ActionResult.success(block_type=block_type)

    def collect_from_nearby_chest(self) -> ActionResult:
        """Take the oldest item out of a nearby chest."""
        anchor = self._find_nearby_machine(BlockCategory.CHEST)
        if anchor is None:
            return self._log_failure("collect_chest", ActionResult.fail(Failure.NO_MACHINE_NEARBY))
        result = anchor.ensure_storage().collect_into(self.player.inventory)
        return self._log_failure("collect_chest", result)

    # =========================================================================
    # UPDATE LOOP
    # =========================================================================

    def update(self, dt: float) -> List[GameEvent]:
        """
        Advance one tick: mining progress, then automation.
        Returns list of events that occurred.
        """
        self._events = []
        self._update_mining(dt)
        self._update_automation()
        return self._events

    def _update_automation(self) -> None:
        for transfer in process_automation(self.world, self.network, self.clock()):
            self._events.append(ItemTransferredEvent(transfer))
            if transfer.kind == TransferKind.REFINER_TO_CHEST:
                self._events.append(RefinerFinishedEvent(transfer.block_type, transfer.source))

    # =========================================================================
    # STATE QUERIES (for UI to read)
    # =========================================================================

    def iter_visible_blocks(self) -> Iterator[Block]:
        """Every non-mined block, in grid order."""
        return self.world.iter_blocks()

    def get_player_state(self) -> Dict[str, Any]:
        """Player stats as plain data."""
        player = self.player
        return {
            'position': (player.x, player.y),
            'facing': player.facing,
            'gold': player.gold,
            'load': player.inventory.load,
            'capacity': player.backpack_capacity,
            'proficiency': player.proficiency,
            'strength': player.strength,
            'pickaxe_tier': player.pickaxe_tier,
            'backpack_tier': player.backpack_tier,
            'pickaxe_power': player.pickaxe_power,
            'selected_slot': player.selected_slot,
            'slots': [
                (None if s.block_type is None else s.block_type.name, s.count)
                for s in player.inventory.slots
            ],
        }

    def shop_items(self) -> List[BlockType]:
        return [t for t, d in BLOCKS.items() if d.purchasable]

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def save_state(self) -> Dict[str, Any]:
        return serialize(self.player, self.world)

    def load_state(self, data: Dict[str, Any]) -> None:
        """
        Replace player and world with saved data.
        Raises SaveDataError and keeps the current state if the data is bad.
        """
        try:
            player, world = deserialize(data)
        except SaveDataError:
            logger.error("Rejected saved game; keeping current state", exc_info=True)
            raise
        self.player = player
        self.world = world
        self.network = MachineNetwork()
        self.network.attach(self.world)
        self.mining = None

    def export_compact(self) -> str:
        return export_compact(self.world)
