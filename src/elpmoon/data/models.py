"""
elpmoon.data.models
-------------------
Builds the bundled SeriesModels from the Meeus tables.

Each table row  c * f(E) * sin|cos(Σ k_a * arg_a(T))  becomes one cosine term per
power of T in the eccentricity factor f(E) (1, E or E²), so block i collects the
T**i parts:

    E  = 1 + e1 T + e2 T²
    E² = 1 + 2 e1 T + (e1² + 2 e2) T²      (T³, T⁴ dropped)

Amplitudes are made positive (sign folded into the phase as +π); sine rows get a
-π/2 phase shift. Zero amplitudes are dropped and every block is sorted by
decreasing amplitude.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Iterable, List, Literal, Mapping, Tuple

from ..core.errors import SeriesInputError
from ..core.types import SeriesModel, Term
from . import meeus47 as mt

Item = Literal["l", "b", "r"]

TAU = 2.0 * math.pi

# Storage scale of the T^2, T^3, T^4 phase coefficients.
PHASE_SCALES = (1.0, 1.0, 1e4, 1e8, 1e8)

MICRODEG_TO_ARCSEC = 1e-6 * 3600.0
METRE_TO_KM = 1e-3


@dataclass(frozen=True)
class LinComb:
    mult: Mapping[str, int]  # integer multipliers of fundamental arguments


@dataclass(frozen=True)
class RawTerm:
    """coef * E**e_power * (sin|cos)(theta), coef in the table's unit."""
    coef: float
    theta: LinComb
    e_power: int = 0
    sine: bool = True


def phase_poly(lc: LinComb) -> Tuple[float, float, float, float, float]:
    """Phase coefficients in radians, pre-scaled for storage."""
    c = [0.0] * 5
    for name, k in lc.mult.items():
        if not k:
            continue
        for p, a in enumerate(mt.FUNDAMENTAL_ARGS[name]):
            c[p] += k * a
    return tuple(math.radians(x) * s for x, s in zip(c, PHASE_SCALES))


def eccentricity_factor(e_power: int) -> Tuple[float, float, float]:
    if e_power == 0:
        return (1.0, 0.0, 0.0)
    if e_power == 1:
        return (1.0, mt.E_T, mt.E_T2)
    if e_power == 2:
        return (1.0, 2.0 * mt.E_T, mt.E_T * mt.E_T + 2.0 * mt.E_T2)
    raise ValueError(f"unsupported eccentricity power {e_power}")


def make_term(amplitude: float, phases: Tuple[float, ...], sine: bool) -> Term:
    p0 = phases[0] - (math.pi / 2.0 if sine else 0.0)
    if amplitude < 0:
        amplitude = -amplitude
        p0 += math.pi
    return Term(amplitude, p0 % TAU, *phases[1:])


def build_model(raw: Iterable[RawTerm], *, scale: float, name: str = "", unit: str = "") -> SeriesModel:
    blocks: List[List[Term]] = [[], [], []]
    for rt in raw:
        phases = phase_poly(rt.theta)
        for k, f in enumerate(eccentricity_factor(rt.e_power)):
            amp = rt.coef * f * scale
            if amp == 0.0:
                continue
            blocks[k].append(make_term(amp, phases, rt.sine))
    for b in blocks:
        b.sort(key=lambda term: -term.amplitude)
    return SeriesModel(blocks=tuple(tuple(b) for b in blocks), name=name, unit=unit)


def _table_terms(rows, col: int, sine: bool) -> List[RawTerm]:
    out = []
    for row in rows:
        d, m, mp, f = row[:4]
        out.append(RawTerm(
            coef=float(row[col]),
            theta=LinComb({"D": d, "M": m, "Mp": mp, "F": f}),
            e_power=abs(m),
            sine=sine,
        ))
    return out


def _extra_terms(rows) -> List[RawTerm]:
    return [RawTerm(coef=float(c), theta=LinComb(dict(mult))) for mult, c in rows]


def raw_terms(item: Item) -> List[RawTerm]:
    if item == "l":
        return _table_terms(mt.LR_TERMS, 4, sine=True) + _extra_terms(mt.L_EXTRA_TERMS)
    if item == "b":
        return _table_terms(mt.B_TERMS, 4, sine=True) + _extra_terms(mt.B_EXTRA_TERMS)
    if item == "r":
        mean = RawTerm(coef=mt.MEAN_DISTANCE_M, theta=LinComb({}), sine=False)
        return [mean] + _table_terms(mt.LR_TERMS, 5, sine=False)
    raise SeriesInputError(f"item must be 'l', 'b' or 'r', got {item!r}")


_SPECS: Dict[str, Tuple[float, str]] = {
    "l": (MICRODEG_TO_ARCSEC, "arcsec"),
    "b": (MICRODEG_TO_ARCSEC, "arcsec"),
    "r": (METRE_TO_KM, "km"),
}


@lru_cache(maxsize=None)
def load_model(item: Item) -> SeriesModel:
    """
    'l': longitude perturbation (arcsec), 'b': latitude (arcsec), 'r': distance (km).
    """
    raw = raw_terms(item)
    scale, unit = _SPECS[item]
    return build_model(raw, scale=scale, name=item, unit=unit)
