from __future__ import annotations
import operator
from dataclasses import dataclass
from math import isfinite
from numbers import Real
from typing import Any, NamedTuple, Optional, Sequence, Tuple

from .errors import SeriesInputError


class Term(NamedTuple):
    """
    amp * cos(p0 + p1*t + p2*t^2/1e4 + p3*t^3/1e8 + p4*t^4/1e8),  t in Julian centuries.
    Phases in radians; p2..p4 are stored pre-scaled.
    """
    amplitude: float
    phase0: float
    phase1: float
    phase2: float
    phase3: float
    phase4: float


Block = Tuple[Term, ...]

# None -> all terms of the block, 0 -> no terms, n -> first n terms.
PlanEntry = Optional[int]
TruncationPlan = Tuple[PlanEntry, ...]


@dataclass(frozen=True)
class SeriesModel:
    """Blocks of terms; block i is weighted by t**i."""
    blocks: Tuple[Block, ...]
    name: str = ""
    unit: str = ""

    def __len__(self) -> int:
        return len(self.blocks)

    @property
    def term_counts(self) -> Tuple[int, ...]:
        return tuple(len(b) for b in self.blocks)

    @property
    def total_terms(self) -> int:
        return sum(self.term_counts)


def _coerce_term(raw: Any, i: int, j: int) -> Term:
    if isinstance(raw, Term):
        return raw
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence) or len(raw) != 6:
        raise SeriesInputError(f"term [{i}][{j}] must be a sequence of 6 numbers, got {raw!r}")
    for x in raw:
        if isinstance(x, bool) or not isinstance(x, Real):
            raise SeriesInputError(f"term [{i}][{j}] contains a non-numeric value {x!r}")
    return Term(*(float(x) for x in raw))


def as_model(model: Any) -> SeriesModel:
    """Accept a SeriesModel or a nested sequence blocks -> terms -> 6 numbers."""
    if isinstance(model, SeriesModel):
        return model
    if isinstance(model, (str, bytes)) or not isinstance(model, Sequence):
        raise SeriesInputError(f"model must be a sequence of blocks, got {type(model).__name__}")
    blocks = []
    for i, block in enumerate(model):
        if isinstance(block, (str, bytes)) or not isinstance(block, Sequence):
            raise SeriesInputError(f"block {i} must be a sequence of terms, got {type(block).__name__}")
        blocks.append(tuple(_coerce_term(term, i, j) for j, term in enumerate(block)))
    return SeriesModel(blocks=tuple(blocks))


def as_plan(plan: Any) -> Optional[TruncationPlan]:
    """Validate a plan; None passes through (all terms everywhere)."""
    if plan is None:
        return None
    if isinstance(plan, (str, bytes)) or not isinstance(plan, Sequence):
        raise SeriesInputError(f"plan must be a sequence of term counts, got {type(plan).__name__}")
    out = []
    for i, n in enumerate(plan):
        if n is None:
            out.append(None)
            continue
        if isinstance(n, bool):
            raise SeriesInputError(f"plan entry {i} must be an integer or None, got {n!r}")
        try:
            n = operator.index(n)
        except TypeError:
            raise SeriesInputError(f"plan entry {i} must be an integer or None, got {n!r}") from None
        if n < 0:
            raise SeriesInputError(f"plan entry {i} must be non-negative, got {n}")
        out.append(n)
    return tuple(out)


def check_budget(max_error: Any) -> float:
    if isinstance(max_error, bool) or not isinstance(max_error, Real):
        raise SeriesInputError(f"max_error must be a number, got {max_error!r}")
    value = float(max_error)
    if not isfinite(value) or value < 0:
        raise SeriesInputError(f"max_error must be a finite number >= 0, got {max_error!r}")
    return value


def effective_count(block: Block, plan: Optional[TruncationPlan], i: int) -> int:
    """Number of leading terms of block i retained under plan."""
    if plan is None or i >= len(plan) or plan[i] is None:
        return len(block)
    return min(plan[i], len(block))
