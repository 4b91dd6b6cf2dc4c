"""
Renderer - Reads gameplay state and draws it with pygame.
This is a THIN ADAPTER - no game logic here.
"""
import pygame

from ..gameplay.blocks import BlockCategory, BlockType
from ..gameplay.game import Game
from ..gameplay.machines import RefinerPhase


HUD_HEIGHT = 72

# Colors
COLOR_BACKGROUND = (15, 15, 20)
COLOR_SKY = (90, 140, 200)
COLOR_GRID = (30, 30, 36)
COLOR_PLAYER = (100, 255, 100)
COLOR_CURSOR = (255, 255, 255)
COLOR_PROGRESS = (255, 220, 80)
COLOR_HUD = (200, 200, 200)
COLOR_HUD_SELECTED = (255, 255, 120)

BLOCK_COLORS = {
    BlockType.GRASS: (70, 160, 60),
    BlockType.DIRT: (120, 85, 55),
    BlockType.STONE: (120, 120, 120),
    BlockType.SLATE: (80, 85, 95),
    BlockType.MAGMA: (170, 60, 30),
    BlockType.BEDROCK: (40, 40, 40),
    BlockType.COPPER: (190, 110, 60),
    BlockType.IRON: (190, 170, 160),
    BlockType.GOLD: (230, 190, 50),
    BlockType.DIAMOND: (120, 230, 240),
    BlockType.PLATFORM: (150, 110, 70),
    BlockType.LADDER: (170, 130, 80),
    BlockType.TORCH: (255, 170, 40),
    BlockType.POLISHED_STONE: (170, 170, 175),
    BlockType.POLISHED_SLATE: (120, 130, 150),
    BlockType.POLISHED_MAGMA: (230, 100, 60),
    BlockType.POLISHED_BEDROCK: (90, 90, 100),
    BlockType.STONE_REFINER: (100, 150, 200),
    BlockType.COPPER_REFINER: (100, 150, 200),
    BlockType.IRON_REFINER: (100, 150, 200),
    BlockType.GOLD_REFINER: (100, 150, 200),
    BlockType.COLLECTOR: (200, 200, 100),
    BlockType.CHEST: (160, 100, 50),
    BlockType.TUBE: (180, 100, 180),
}
COLOR_UNKNOWN = (255, 0, 255)

PHASE_COLORS = {
    RefinerPhase.IDLE: (80, 80, 80),
    RefinerPhase.PROCESSING: (255, 200, 80),
    RefinerPhase.READY: (100, 255, 100),
}


class Renderer:
    """
    Renders the game state to a pygame surface.

    The renderer:
    - Reads game state (never modifies it)
    - Keeps a vertical camera centered on the player
    - Tracks the mining/placing cursor
    """

    def __init__(self, game: Game, screen: pygame.Surface, cell_size: int, view_rows: int):
        self.game = game
        self.screen = screen
        self.cell_size = cell_size
        self.view_rows = view_rows
        self.cursor_dx = 0
        self.cursor_dy = 1
        self.font = pygame.font.Font(None, 20)

    @staticmethod
    def screen_size(game: Game, cell_size: int, view_rows: int):
        return (game.world.width * cell_size, view_rows * cell_size + HUD_HEIGHT)

    # =========================================================================
    # CURSOR
    # =========================================================================

    def move_cursor(self, dx: int, dy: int):
        """Move the cursor relative to the player, clamped to reach."""
        self.cursor_dx = max(-2, min(2, self.cursor_dx + dx))
        self.cursor_dy = max(-2, min(2, self.cursor_dy + dy))

    def cursor_cell(self):
        px, py = self.game.player.cell
        return (px + self.cursor_dx, py + self.cursor_dy)

    # =========================================================================
    # DRAWING
    # =========================================================================

    def _camera_top(self) -> int:
        return self.game.player.cell[1] - self.view_rows // 2

    def _cell_rect(self, x: int, y: int) -> pygame.Rect:
        top = self._camera_top()
        return pygame.Rect(x * self.cell_size, HUD_HEIGHT + (y - top) * self.cell_size,
                           self.cell_size, self.cell_size)

    def render(self):
        self.screen.fill(COLOR_BACKGROUND)
        self._render_sky()
        self._render_blocks()
        self._render_player()
        self._render_cursor()
        self._render_hud()

    def _render_sky(self):
        world = self.game.world
        top = self._camera_top()
        rows = max(0, min(self.view_rows, world.surface_row - top))
        if rows:
            pygame.draw.rect(self.screen, COLOR_SKY,
                             (0, HUD_HEIGHT, world.width * self.cell_size, rows * self.cell_size))

    def _render_blocks(self):
        top = self._camera_top()
        bottom = top + self.view_rows
        now = self.game.clock()
        for block in self.game.iter_visible_blocks():
            if not top <= block.y < bottom:
                continue
            rect = self._cell_rect(block.x, block.y)
            pygame.draw.rect(self.screen, BLOCK_COLORS.get(block.block_type, COLOR_UNKNOWN), rect)
            pygame.draw.rect(self.screen, COLOR_GRID, rect, 1)

            if block.is_secondary:
                continue
            if block.category == BlockCategory.REFINER and block.refiner is not None:
                refiner = block.refiner
                bar = rect.inflate(-4, -rect.height + 4)
                bar.width = int(bar.width * refiner.progress(now))
                pygame.draw.rect(self.screen, PHASE_COLORS[refiner.phase], bar)
            elif block.storage is not None and not block.storage.is_empty():
                label = self.font.render(str(len(block.storage)), True, COLOR_HUD)
                self.screen.blit(label, rect.topleft)

    def _render_player(self):
        rect = self._cell_rect(*self.game.player.cell)
        pygame.draw.ellipse(self.screen, COLOR_PLAYER, rect.inflate(-6, -2))

    def _render_cursor(self):
        x, y = self.cursor_cell()
        rect = self._cell_rect(x, y)
        pygame.draw.rect(self.screen, COLOR_CURSOR, rect, 2)

        progress = self.game.get_mining_progress()
        if progress is not None:
            mx, my, fraction = progress
            bar = self._cell_rect(mx, my)
            bar.height = 4
            bar.width = int(bar.width * fraction)
            pygame.draw.rect(self.screen, COLOR_PROGRESS, bar)

    def _render_hud(self):
        state = self.game.get_player_state()
        lines = [
            f"Gold: {state['gold']}   Load: {state['load']}/{state['capacity']:g}   "
            f"Depth: {max(0, state['position'][1] - self.game.world.surface_row)}",
            f"Pickaxe {state['pickaxe_tier']} (prof {state['proficiency']})   "
            f"Backpack {state['backpack_tier']} (str {state['strength']})",
        ]
        for i, line in enumerate(lines):
            self.screen.blit(self.font.render(line, True, COLOR_HUD), (6, 4 + i * 18))

        x = 6
        for index, (name, count) in enumerate(state['slots']):
            color = COLOR_HUD_SELECTED if index == state['selected_slot'] else COLOR_HUD
            text = f"{index + 1}:{name.lower() if name else '-'}"
            if count:
                text += f" x{count}"
            surface = self.font.render(text, True, color)
            self.screen.blit(surface, (x, 44))
            x += surface.get_width() + 10
