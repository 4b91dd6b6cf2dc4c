#!/usr/bin/env python3
"""
Shaft Miner - Main Entry Point

Dig down a single mine shaft, sell what you find, and build refiners,
collectors and chests connected by tubes to process ore automatically.

Usage:
    python -m shaft_miner.main

Controls:
    Arrows/WASD: Move (up needs a ladder)
    I,J,K,L: Move the target cursor
    Space (hold): Mine the target cell
    Enter: Place the selected block at the target cell
    1-9: Select inventory slot
    X: Sell one of the selected block
    F1-F7: Buy ladder, platform, torch, tube, collector, chest, stone refiner
    Shift+F4-F10: Craft tube, collector, chest, or a refiner tier
    P / O: Upgrade proficiency / strength
    U / B: Craft next pickaxe / backpack
    R / F: Deposit into / collect from a nearby refiner
    C: Deposit into a nearby collector
    E: Collect from a nearby chest
    Escape: Save and quit
"""
import logging
import random

import pygame

from .config import get_settings
from .gameplay.game import Game
from .gameplay.results import SaveDataError
from .storage import SaveStore
from .ui.input_handler import InputHandler
from .ui.renderer import Renderer

logger = logging.getLogger(__name__)


def load_game(store: SaveStore, slot: str, seed) -> Game:
    """Resume the saved game in `slot`, or start a new one."""
    rng = random.Random(seed) if seed is not None else None
    game = Game(rng=rng)
    data = store.get(slot)
    if data is None:
        logger.info("No saved game '%s'; starting fresh", slot)
        return game
    try:
        game.load_state(data)
    except SaveDataError:
        logger.warning("Saved game '%s' is unreadable; starting fresh", slot)
    return game


def main():
    """Main entry point."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    store = SaveStore(settings.save_path)
    game = load_game(store, settings.save_slot, settings.world_seed)

    pygame.init()
    screen = pygame.display.set_mode(
        Renderer.screen_size(game, settings.cell_size, settings.view_rows)
    )
    pygame.display.set_caption("Shaft Miner")
    clock = pygame.time.Clock()

    renderer = Renderer(game, screen, settings.cell_size, settings.view_rows)
    input_handler = InputHandler(game, renderer)

    logger.info("Starting game loop at %d Hz", settings.tick_rate_hz)
    since_save = 0.0
    running = True
    while running:
        dt = clock.tick(settings.tick_rate_hz) / 1000.0

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if input_handler.handle_key(event.key, event.mod):
                    running = False
            elif event.type == pygame.KEYUP:
                input_handler.handle_key_up(event.key)

        game.update(dt)

        since_save += dt
        if settings.autosave_interval_seconds and since_save >= settings.autosave_interval_seconds:
            store.put(settings.save_slot, game.save_state())
            since_save = 0.0

        renderer.render()
        pygame.display.flip()

    store.put(settings.save_slot, game.save_state())
    pygame.quit()


if __name__ == "__main__":
    main()
