"""
Input Handler - Translates key presses to gameplay commands.
This is a THIN ADAPTER - no game logic here.
"""
import logging

import pygame

from ..gameplay.blocks import BlockType
from ..gameplay.game import Game
from .renderer import Renderer

logger = logging.getLogger(__name__)


SLOT_KEYS = {
    pygame.K_1: 0,
    pygame.K_2: 1,
    pygame.K_3: 2,
    pygame.K_4: 3,
    pygame.K_5: 4,
    pygame.K_6: 5,
    pygame.K_7: 6,
    pygame.K_8: 7,
    pygame.K_9: 8,
}

CURSOR_KEYS = {
    pygame.K_i: (0, -1),
    pygame.K_k: (0, 1),
    pygame.K_j: (-1, 0),
    pygame.K_l: (1, 0),
}

MOVE_KEYS = {
    pygame.K_UP: (0, -1),
    pygame.K_w: (0, -1),
    pygame.K_DOWN: (0, 1),
    pygame.K_s: (0, 1),
    pygame.K_LEFT: (-1, 0),
    pygame.K_a: (-1, 0),
    pygame.K_RIGHT: (1, 0),
    pygame.K_d: (1, 0),
}

# F-keys buy from the shop, shift+F-keys craft
SHOP_KEYS = {
    pygame.K_F1: BlockType.LADDER,
    pygame.K_F2: BlockType.PLATFORM,
    pygame.K_F3: BlockType.TORCH,
    pygame.K_F4: BlockType.TUBE,
    pygame.K_F5: BlockType.COLLECTOR,
    pygame.K_F6: BlockType.CHEST,
    pygame.K_F7: BlockType.STONE_REFINER,
}

CRAFT_KEYS = {
    pygame.K_F4: BlockType.TUBE,
    pygame.K_F5: BlockType.COLLECTOR,
    pygame.K_F6: BlockType.CHEST,
    pygame.K_F7: BlockType.STONE_REFINER,
    pygame.K_F8: BlockType.COPPER_REFINER,
    pygame.K_F9: BlockType.IRON_REFINER,
    pygame.K_F10: BlockType.GOLD_REFINER,
}


class InputHandler:
    """
    Handles keyboard input and translates to game commands.

    The input handler:
    - Reads key presses
    - Updates renderer state (cursor)
    - Calls game methods to modify game state
    """

    def __init__(self, game: Game, renderer: Renderer):
        self.game = game
        self.renderer = renderer

    def handle_key(self, key: int, mods: int = 0) -> bool:
        """
        Handle a single key press.
        Returns True if the game should quit.
        """
        if key == pygame.K_ESCAPE:
            return True

        shift = bool(mods & pygame.KMOD_SHIFT)
        game = self.game

        if key in MOVE_KEYS:
            game.move_player(*MOVE_KEYS[key])
        elif key in CURSOR_KEYS:
            self.renderer.move_cursor(*CURSOR_KEYS[key])
        elif key in SLOT_KEYS:
            game.select_slot(SLOT_KEYS[key])
        elif shift and key in CRAFT_KEYS:
            self._report(game.craft_machine(CRAFT_KEYS[key]))
        elif key in SHOP_KEYS:
            self._report(game.buy(SHOP_KEYS[key]))
        elif key == pygame.K_SPACE:
            self._report(game.start_mining(*self.renderer.cursor_cell()))
        elif key == pygame.K_RETURN:
            self._report(game.place(*self.renderer.cursor_cell()))
        elif key == pygame.K_x:
            self._report(game.sell())
        elif key == pygame.K_p:
            self._report(game.upgrade_proficiency())
        elif key == pygame.K_o:
            self._report(game.upgrade_strength())
        elif key == pygame.K_u:
            self._report(game.craft_pickaxe())
        elif key == pygame.K_b:
            self._report(game.craft_backpack())
        elif key == pygame.K_r:
            self._report(game.deposit_into_nearby_refiner())
        elif key == pygame.K_f:
            self._report(game.collect_from_nearby_refiner())
        elif key == pygame.K_c:
            self._report(game.deposit_into_nearby_collector())
        elif key == pygame.K_e:
            self._report(game.collect_from_nearby_chest())

        return False

    def handle_key_up(self, key: int):
        if key == pygame.K_SPACE:
            self.game.stop_mining()

    def _report(self, result):
        if not result.ok:
            logger.info(result.message)
