"""
Local configuration overrides.

Copy this file to local_config.py somewhere on the import path (for example
the directory you launch the demo from) and modify as needed.
local_config.py is gitignored and won't be committed.

Any variable defined here will override the default in flip3d/config.py.
"""

# -----------------------------------------------------------------------------
# Animation Settings
# -----------------------------------------------------------------------------

# Slow the flip down to watch the midpoint swap
# FLIP_DURATION_MS = 2000

# Flip towards the other side
# FLIP_FRONT_TO_BACK = "RIGHT"
# FLIP_BACK_TO_FRONT = "LEFT"

# -----------------------------------------------------------------------------
# Dashboard Settings
# -----------------------------------------------------------------------------

# Smaller window for laptops
# DASHBOARD_CELL_SIZE = 140
# DASHBOARD_COLUMNS = 4

# -----------------------------------------------------------------------------
# Debug Settings
# -----------------------------------------------------------------------------

# Log every state transition
# LOG_LEVEL = "DEBUG"
