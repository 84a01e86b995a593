"""
Numerical and mathematical constants.

Sources:
    - Kepler solver tolerance matched to double precision
"""

import numpy as np

# ---------------------------------------------------------------------------
# Mathematical constants
# ---------------------------------------------------------------------------
TWO_PI = 2.0 * np.pi

# ---------------------------------------------------------------------------
# Numerical tolerances
# ---------------------------------------------------------------------------
DEGENERATE_EPSILON = 1e-9               # Below this a frame axis is undefined [m/s or m]
KEPLER_XTOL = 1e-14                     # Eccentric anomaly solver tolerance [rad]

# ---------------------------------------------------------------------------
# Periodic fold
# ---------------------------------------------------------------------------
# A single-axis change of FOLD_PERIOD_FACTOR * |v| equals two full direction
# reversals of v, i.e. the identity.
FOLD_PERIOD_FACTOR = 4.0
FOLD_HALF_PERIOD_FACTOR = 2.0
