from pathlib import Path

GRID_ROWS = 8
GRID_COLS = 8
NUM_GEM_TYPES = 6

# Base points for one matched gem; multiplied by the cascade index.
POINTS_PER_GEM = 10

# Minimum run length that counts as a match.
MATCH_LENGTH = 3

# Rejection-sampling cap per cell during initial generation. After this many
# draws the last candidate is accepted even if it completes a run.
MAX_GENERATION_ATTEMPTS = 100

# Shuffle retries before the board is regenerated from scratch.
MAX_SHUFFLE_ATTEMPTS = 100

# Display names for gem kinds, indexed by kind.
GEM_NAMES = ("ruby", "sapphire", "emerald", "topaz", "amethyst", "citrine")

STAR_COUNT = 3

DEFAULT_SAVE_PATH = Path.home() / ".gemgarden" / "progress.json"
