"""
Central configuration constants for the ecosystem simulation.

Defines default values, thresholds, and rates used to build
SimulationConfig. Tests and config files override them per run.
"""

# ============================================================================
# World Configuration
# ============================================================================

WORLD_WIDTH_DEFAULT = 800.0   # Field width in pixels
WORLD_HEIGHT_DEFAULT = 600.0  # Field height in pixels

# Absolute maximum entities across all kinds
MAX_ENTITIES = 2000


# ============================================================================
# Spatial Indexing Configuration
# ============================================================================

# Uniform grid cell edge length (pixels)
GRID_SIZE = 100.0

# Use the uniform grid for neighbor search
# Set to False to use the O(n) linear scan for performance comparison
USE_GRID = True

# Link distance for presentation queries (neighbors_within)
LINK_DISTANCE = 100.0


# ============================================================================
# Scheduler Configuration
# ============================================================================

LOGIC_RATE = 30              # Logic updates per second
MAX_STEPS_PER_FRAME = 5      # Catch-up cap (excess time is dropped)
FRAME_RATE_SCALE = 60.0      # Per-frame constants are tuned for ~60fps
STATS_INTERVAL = 10          # Refresh stats every N ticks


# ============================================================================
# Probabilities (per 60fps frame, scaled by elapsed time)
# ============================================================================

PLANT_SPAWN_CHANCE = 0.02        # Chance for an extra plant to sprout
DIRECTION_CHANGE_CHANCE = 0.02   # Chance for a mover to pick a new heading
REPRODUCE_CHANCE = 0.01          # Per-tick chance, not time-scaled
OFFSPRING_JITTER = 10.0          # Max spawn offset from parent per axis (pixels)


# ============================================================================
# Energy Parameters
# ============================================================================

PLANT_GAIN = 0.1
HERBIVORE_GAIN = 15.0
CARNIVORE_GAIN = 25.0
OMNIVORE_PLANT_GAIN = 10.0
OMNIVORE_MEAT_GAIN = 20.0
MOVE_COST = 0.1
BASE_COST = 0.05
REPRODUCE_COST = 30.0
START_ENERGY = 50.0
EATING_PULSE = 10.0   # Eating highlight duration (frames), presentation only


# ============================================================================
# Population Defaults
# ============================================================================

# Per-kind caps (adapter may change these between ticks)
POPULATION_CAPS_DEFAULT = {
    'plant': 300,
    'herbivore': 150,
    'carnivore': 50,
    'omnivore': 50,
}

# Population seeded by a fresh simulation
INITIAL_POPULATION_DEFAULT = {
    'plant': 50,
    'herbivore': 20,
    'carnivore': 5,
    'omnivore': 5,
}


# ============================================================================
# Performance Configuration
# ============================================================================

# Tick timing window for rolling average
TICK_TIME_WINDOW = 100  # Number of ticks to average

# Default tick summary interval (print every N ticks)
TICK_SUMMARY_INTERVAL = 100
