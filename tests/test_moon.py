# tests/test_moon.py

import math

import pytest

from elpmoon import MoonPosition, SeriesInputError, TimeContext, estimate_max_error, load_model
from elpmoon.core.angles import arcsec_to_rad, wrap_rad
from elpmoon.moon import LATE_FIT_ARCSEC, preset_plan

JDE_47A = 2448724.5  # 1992 April 12, 0h TD


@pytest.fixture
def moon():
    return MoonPosition(TimeContext(JDE_47A))


def test_meeus_example_47a(moon):
    """
    Jean Meeus, Astronomical Algorithms (2nd Ed), Example 47.a.
    lambda = 133.162655 deg, beta = -3.229126 deg, Delta = 368409.7 km
    """
    # mean longitude constants differ from Meeus' L' by under 1"
    assert math.degrees(moon.l) == pytest.approx(133.162655, abs=1e-3)
    assert math.degrees(moon.b) == pytest.approx(-3.229126, abs=2e-5)
    assert moon.r == pytest.approx(368409.7, abs=0.1)


def test_components_add_up(moon):
    expected = wrap_rad(
        moon.mean_longitude + moon.longitude_precession_correction + moon.longitude_perturbation_correction
    )
    assert moon.l == pytest.approx(expected, abs=1e-15)
    # Meeus Σl = -1127527e-6 deg
    assert math.degrees(moon.longitude_perturbation_correction) == pytest.approx(-1.127527, abs=2e-6)


def test_late_epoch_fit():
    ctx = TimeContext.from_centuries(12.0)
    m = MoonPosition(ctx)
    a, b, c = LATE_FIT_ARCSEC
    base = m.mean_longitude + m.longitude_precession_correction + m.longitude_perturbation_correction
    assert m.l == pytest.approx(wrap_rad(base + arcsec_to_rad(a + b * 12.0 + c * 144.0)), abs=1e-12)


def test_spherical(moon):
    sc = moon.spherical
    assert sc.r == pytest.approx(368409.7 / 1.49597870691e8, rel=1e-6)
    assert sc.theta == pytest.approx(math.pi / 2 - moon.b)
    assert sc.phi == moon.l


def test_time_change_invalidates_cache(moon):
    l0 = moon.l
    moon.time = TimeContext(JDE_47A + 1.0)
    assert moon.time.jd == JDE_47A + 1.0
    # about 13 degrees per day
    assert abs(math.degrees(moon.l - l0)) > 10.0


def test_time_must_be_context(moon):
    with pytest.raises(SeriesInputError):
        moon.time = JDE_47A
    with pytest.raises(SeriesInputError):
        MoonPosition(JDE_47A)


def test_set_truncation(moon):
    r_full = moon.r
    assert moon.accuracy == "complete"
    assert moon.get_truncation("r") is None

    moon.set_truncation("r", [5, 1, 1])
    assert moon.accuracy == "custom"
    assert moon.get_truncation("r") == (5, 1, 1)
    assert moon.r != r_full
    assert moon.get_max_error("r") == estimate_max_error(load_model("r"), [5, 1, 1], moon.time)


def test_set_truncation_keeps_other_items(moon):
    b = moon.b
    moon.set_truncation("l", [3, 1, 1])
    assert moon.b == b
    assert moon.get_truncation("b") is None


@pytest.mark.parametrize("mode", ["true", "TRUE", "mean"])
def test_set_max_error(moon, mode):
    moon.set_max_error("b", 30.0, mode)
    plan = moon.get_truncation("b")
    model = load_model("b")
    assert len(plan) == len(model)
    assert sum(plan) <= model.total_terms
    assert moon.accuracy == "custom"
    if mode.lower() == "true":
        assert sum(plan) < model.total_terms
        assert moon.get_max_error("b") <= 30.0 + 1e-9


def test_set_max_error_safe(moon):
    moon.set_max_error("r", 100.0, "safe")
    assert len(moon.get_truncation("r")) == 3


@pytest.mark.parametrize(
    "args",
    [("x", 1.0), ("l", -1.0), ("l", "1"), ("l", 1.0, "fast"), ("l", 1.0, 3)],
)
def test_set_max_error_rejects(moon, args):
    with pytest.raises(SeriesInputError):
        moon.set_max_error(*args)


def test_bad_item(moon):
    with pytest.raises(SeriesInputError):
        moon.set_truncation("q", [1])
    with pytest.raises(SeriesInputError):
        moon.get_truncation("q")
    with pytest.raises(SeriesInputError):
        moon.get_max_error("q")
    with pytest.raises(SeriesInputError):
        moon.set_truncation("l", None)


def test_accuracy_levels(moon):
    l_full = moon.l
    moon.accuracy = "low"
    assert moon.accuracy == "low"
    for item in ("l", "b", "r"):
        plan = moon.get_truncation(item)
        assert plan == preset_plan(item, "low")
        assert len(plan) == 3
        assert sum(plan) < load_model(item).total_terms
    assert moon.l != l_full
    assert abs(math.degrees(moon.l - l_full)) < 0.1

    moon.accuracy = "complete"
    assert moon.get_truncation("l") is None
    assert moon.l == l_full


LEVELS = ("low", "normal", "high", "fine")


@pytest.mark.parametrize("item", ["l", "b", "r"])
def test_levels_truncate_the_model(item):
    model = load_model(item)
    totals = [sum(preset_plan(item, level)) for level in LEVELS]
    assert all(total < model.total_terms for total in totals)
    # every finer level keeps strictly more terms
    assert totals == sorted(set(totals))
    for level in LEVELS:
        plan = preset_plan(item, level)
        assert all(n <= c for n, c in zip(plan, model.term_counts))

