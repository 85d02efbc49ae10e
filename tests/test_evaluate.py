# tests/test_evaluate.py

import math

import pytest

from elpmoon import SeriesInputError, TimeContext, evaluate, estimate_max_error, load_model

# Single block, all phases zero: every cosine is 1 at any t.
SIMPLE = [[(10, 0, 0, 0, 0, 0), (3, 0, 0, 0, 0, 0), (1, 0, 0, 0, 0, 0)]]


def test_simple_block_values():
    assert evaluate(SIMPLE, 0, [3]) == 14.0
    assert evaluate(SIMPLE, 0, [1]) == 10.0
    assert evaluate(SIMPLE, 0, [2]) == 13.0


def test_plan_entry_states():
    """None / missing -> whole block, 0 -> nothing, n > len -> clamped."""
    assert evaluate(SIMPLE, 0) == 14.0
    assert evaluate(SIMPLE, 0, [None]) == 14.0
    assert evaluate(SIMPLE, 0, []) == 14.0
    assert evaluate(SIMPLE, 0, [0]) == 0.0
    assert evaluate(SIMPLE, 0, [99]) == 14.0
    # entries beyond the model's blocks are ignored
    assert evaluate(SIMPLE, 0, [3, 7, 1]) == 14.0


def test_blocks_weighted_by_powers_of_t():
    model = [[(2, 0, 0, 0, 0, 0)], [(3, 0, 0, 0, 0, 0)], [(0.5, 0, 0, 0, 0, 0)]]
    # 2 + 3*t + 0.5*t^2 at t = 2
    assert evaluate(model, 2.0) == pytest.approx(10.0)
    assert evaluate(model, TimeContext.from_centuries(2.0)) == pytest.approx(10.0)
    # at J2000.0 only block 0 survives
    assert evaluate(model, 0.0) == pytest.approx(2.0)


@pytest.mark.parametrize(
    "term",
    [
        (1, math.pi, 0, 0, 0, 0),
        (1, 0, math.pi, 0, 0, 0),
        (1, 0, 0, math.pi * 1e4, 0, 0),
        (1, 0, 0, 0, math.pi * 1e8, 0),
        (1, 0, 0, 0, 0, math.pi * 1e8),
    ],
)
def test_phase_polynomial_scaling(term):
    """phase2..phase4 are stored scaled by 1e4, 1e8, 1e8; at t=1 each term gives cos(pi)."""
    assert evaluate([[term]], 1.0) == pytest.approx(-1.0, abs=1e-12)


def test_full_plan_equals_no_plan():
    m = load_model("b")
    ctx = TimeContext(2448724.5)
    assert evaluate(m, ctx, list(m.term_counts)) == evaluate(m, ctx)


@pytest.mark.parametrize(
    "model",
    ["abc", 42, None, [[(1, 2)]], [[(1, 2, 3, 4, 5, "x")]], [5]],
)
def test_malformed_model_rejected(model):
    with pytest.raises(SeriesInputError):
        evaluate(model, 0.0)


@pytest.mark.parametrize("plan", ["3", 3, [-1], [1.5], [True]])
def test_malformed_plan_rejected(plan):
    with pytest.raises(SeriesInputError):
        evaluate(SIMPLE, 0.0, plan)


def test_bad_time_rejected():
    with pytest.raises(SeriesInputError):
        evaluate(SIMPLE, "J2000")


# ------------------------------------------------------------
# Error estimate
# ------------------------------------------------------------

def test_estimate_simple_block():
    assert estimate_max_error(SIMPLE, [1]) == 20.0
    assert estimate_max_error(SIMPLE, [2]) == pytest.approx(2 * math.sqrt(2) * 3)
    assert estimate_max_error(SIMPLE, [3]) == pytest.approx(2 * math.sqrt(3))
    assert estimate_max_error(SIMPLE) == pytest.approx(2 * math.sqrt(3))


def test_estimate_skips_empty_blocks():
    assert estimate_max_error(SIMPLE, [0]) == 0.0
    model = [[(4, 0, 0, 0, 0, 0)], [(2, 0, 0, 0, 0, 0)]]
    assert estimate_max_error(model, [1, 0], 3.0) == pytest.approx(8.0)


def test_estimate_weights_blocks():
    model = [[(4, 0, 0, 0, 0, 0)], [(2, 0, 0, 0, 0, 0)]]
    # 2 * (1*4*1 + 1*2*3)
    assert estimate_max_error(model, None, 3.0) == pytest.approx(20.0)


def test_estimate_monotone_in_plan():
    """Amplitudes shrinking fast enough: adding terms never raises the estimate (t >= 0)."""
    block = [(10 * 0.25 ** j, 0.1 * j, 0, 0, 0, 0) for j in range(8)]
    model = [block, block]
    for i in range(2):
        for n in range(1, 8):
            plan = [3, 3]
            plan[i] = n
            smaller = estimate_max_error(model, plan, 0.5)
            plan[i] = n + 1
            assert estimate_max_error(model, plan, 0.5) <= smaller


def test_estimate_at_j2000_uses_block0_only():
    m = load_model("l")
    plan = [10, 3, 2]
    a = estimate_max_error(m, plan, 0.0)
    assert a == pytest.approx(2 * math.sqrt(10) * m.blocks[0][9].amplitude)


def test_calculator_binds_time():
    from elpmoon import SeriesCalculator, make_truncation_nums

    model = load_model("r")
    ctx = TimeContext.from_centuries(0.5)
    calc = SeriesCalculator(ctx)
    assert calc.calc(model, [5, 1, 1]) == evaluate(model, ctx, [5, 1, 1])
    assert calc.estimate_max_error(model, [5, 1, 1]) == estimate_max_error(model, [5, 1, 1], ctx)
    assert calc.make_truncation_nums(model, 50.0) == make_truncation_nums(model, 50.0, ctx)

    calc.time = TimeContext.from_centuries(-1.0)
    assert calc.time.T == pytest.approx(-1.0)
    with pytest.raises(SeriesInputError):
        calc.time = 2451545.0
