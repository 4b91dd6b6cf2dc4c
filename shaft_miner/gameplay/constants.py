"""
Game constants - all magic numbers in one place.
NO UI DEPENDENCIES.
"""

# =============================================================================
# WORLD LAYOUT (grid cells)
# =============================================================================
WORLD_WIDTH = 22              # surface row spans the whole world
SURFACE_ROW = 5               # y of the grass row; y grows downward
SHAFT_LEFT = 7                # first shaft column
SHAFT_WIDTH = 9               # shaft columns
SHAFT_DEPTH = 300             # rows below the surface row

# Depth-banded base terrain (depth = rows below the surface row)
DIRT_MAX_DEPTH = 8
STONE_MAX_DEPTH = 40
SLATE_MAX_DEPTH = 100
MAGMA_MAX_DEPTH = 200

# =============================================================================
# PLAYER
# =============================================================================
INVENTORY_SLOTS = 9
REACH = 2                     # cells on each axis for mining and placing
MACHINE_INTERACTION_DISTANCE = 2

# =============================================================================
# MINING (all times in seconds)
# =============================================================================
DEFAULT_MINE_TIME = 2.0

# =============================================================================
# UPGRADES
# =============================================================================
PROFICIENCY_POWER_INCREMENT = 1.5   # pickaxe power per proficiency level
PROFICIENCY_BASE_COST = 10
PROFICIENCY_COST_MULTIPLIER = 2
MAX_PROFICIENCY_LEVEL = 5

STRENGTH_CAPACITY_INCREMENT = 2     # backpack capacity per strength level
STRENGTH_BASE_COST = 10
STRENGTH_COST_MULTIPLIER = 2
MAX_STRENGTH_LEVEL = 5

# =============================================================================
# MACHINES
# =============================================================================
MACHINE_STORAGE_LIMIT = 9     # entries per collector/chest

# =============================================================================
# PERSISTENCE
# =============================================================================
SAVE_FORMAT_VERSION = 1
COMPACT_MINED_CODE = "ff"
