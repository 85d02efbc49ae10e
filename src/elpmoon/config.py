"""
elpmoon.config
--------------
Module-level constants shared by the series search and the composition layer.
"""

from __future__ import annotations

from typing import Dict, Mapping, Tuple

# ============================================================
# TEMPORAL AVERAGING
# ============================================================

# Julian ephemeris dates bounding the averaging span (about -4000 to +6000).
MEAN_SPAN_JD_START = 260732
MEAN_SPAN_JD_END = 3912458
MEAN_SAMPLES = 100

# ============================================================
# SAFETY REFINEMENT
# ============================================================

SAFE_MAX_ATTEMPTS = 5
SAFE_BUDGET_DIVISOR = 2.0

# Suggested budget tightening after an overshoot: max_error -= overshoot * 4/3.
OVERSHOOT_TIGHTEN_FACTOR = 4.0 / 3.0

# ============================================================
# COMPOSITION
# ============================================================

AU_KM = 1.49597870691e8

ITEMS = ("l", "b", "r")

# Fixed truncation plans per accuracy level: leading terms kept in blocks T^0, T^1, T^2.
# Full models: l (62, 28, 28), b (66, 26, 26), r (47, 21, 21).
ACCURACY_LEVELS: Mapping[str, Dict[str, Tuple[int, ...]]] = {
    "low":    {"l": (20, 6, 2),  "b": (25, 5, 2),  "r": (20, 5, 2)},
    "normal": {"l": (30, 10, 3), "b": (35, 8, 3),  "r": (27, 8, 3)},
    "high":   {"l": (40, 14, 4), "b": (45, 12, 4), "r": (35, 12, 4)},
    "fine":   {"l": (50, 20, 6), "b": (55, 18, 6), "r": (42, 16, 6)},
}
COMPLETE = "complete"
CUSTOM = "custom"
