from __future__ import annotations

import math
from math import fmod

# ------------------------------------------------------------
# Units & helpers
# ------------------------------------------------------------

TAU = 6.283185307179586  # 2*pi

ARCSEC_PER_RAD = 180.0 * 3600.0 / math.pi


def wrap_rad(x: float) -> float:
    """Wrap radians to [0, 2pi)."""
    y = fmod(x, TAU)
    if y < 0:
        y += TAU
    # fmod of a tiny negative can round up to TAU
    return 0.0 if y >= TAU else y

def arcsec_to_rad(arcsec: float) -> float:
    return arcsec / ARCSEC_PER_RAD
