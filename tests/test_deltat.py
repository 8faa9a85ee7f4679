"""
test_deltat.py — ΔT table, interpolation and extrapolation
"""

import numpy as np
import numpy.testing as npt
import pytest

from skyproj.deltat import (
    YSTART, YSTOP,
    build_delta_t_table, delta_t_table, calc_delta_t, julian_ephemeris_day,
)
from skyproj.utils import J2000, JULIAN_YEAR, SECONDS_PER_DAY


def jd_of_year(y):
    return J2000 + (y - 2000.0) * JULIAN_YEAR


def dt_at(y):
    return calc_delta_t(jd_of_year(y), enabled=True)


# ═══════════════════════════════════════════════════════════════════════════
#  Table
# ═══════════════════════════════════════════════════════════════════════════

def test_table_shape():
    t = build_delta_t_table()
    assert (t.ystart, t.ystop) == (YSTART, YSTOP) == (1620, 2014)
    assert len(t.dt) == 395
    assert len(t.c1) == len(t.c4) == 394


def test_table_read_only():
    t = delta_t_table()
    with pytest.raises(ValueError):
        t.dt[0] = 0


def test_table_shared():
    assert delta_t_table() is delta_t_table()


def test_lunar_acceleration_adjustment():
    t = build_delta_t_table()
    # 12400 − 23.8973 · 3.355² = 12131.01, truncated
    assert t.dt[0] == 12131
    # Years after 1955 are untouched
    assert t.dt[2000 - YSTART] == 6383
    assert t.dt[-1] == 7000


def test_end_intervals_linear():
    t = build_delta_t_table()
    for k in (0, -1):
        assert t.c2[k] == t.c3[k] == t.c4[k] == 0.0


# ═══════════════════════════════════════════════════════════════════════════
#  ΔT
# ═══════════════════════════════════════════════════════════════════════════

def test_j2000():
    npt.assert_allclose(calc_delta_t(J2000, enabled=True), 63.83, atol=1e-9)


@pytest.mark.parametrize("year", [1700, 1800, 1900, 1950, 2010])
def test_integer_years_hit_table(year):
    t = delta_t_table()
    npt.assert_allclose(dt_at(year), t.dt[year - YSTART] / 100.0, atol=1e-9)


def bessel(dt, year):
    """Bessel's formula on the adjusted table, reduced near the table ends."""
    n = len(dt)
    x = int(np.floor(year)) - YSTART
    u = year - np.floor(year)
    d1 = np.diff(dt, 1).astype(float)
    d2 = np.diff(dt, 2).astype(float)
    d3 = np.diff(dt, 3).astype(float)
    d4 = np.diff(dt, 4).astype(float)
    y = dt[x] + u * d1[x]
    if x in (0, n - 2):
        return y
    y += u * (u - 1) * (d2[x - 1] + d2[x]) / 4
    if x in (1, n - 3):
        return y
    y += u * (u - 1) * (u - 0.5) * d3[x - 1] / 6
    y += (u + 1) * u * (u - 1) * (u - 2) * (d4[x - 2] + d4[x - 1]) / 48
    return y


@pytest.mark.parametrize("year", [
    1700.3, 1870.5, 1900.25, 1955.7, 1999.9,
    1620.5,     # first interval, linear
    1621.4,     # quadratic
    2012.6,     # quadratic
    2013.5,     # last interval, linear
])
def test_fractional_years_follow_bessel(year):
    t = delta_t_table()
    npt.assert_allclose(t.interpolate(year), bessel(t.dt, year), rtol=0, atol=1e-9)


def test_fractional_year_through_calc():
    # 1900.25: −2.52331787109375 s
    npt.assert_allclose(dt_at(1900.25), bessel(delta_t_table().dt, 1900.25) / 100.0,
                        atol=1e-9)


def test_interpolate_array_matches_scalar():
    t = delta_t_table()
    years = np.array([1650.1, 1777.77, 1901.5, 2013.99])
    npt.assert_allclose(t.interpolate(years), [t.interpolate(y) for y in years],
                        rtol=0, atol=1e-12)


def test_array_matches_scalar_across_branches():
    years = np.array([-500.0, 947.9, 948.0, 1610.0, 1619.99, 1620.0, 1850.3,
                      2013.9, 2014.0, 2050.0, 2100.0, 2300.0])
    dt = calc_delta_t(jd_of_year(years), enabled=True)
    expected = [dt_at(y) for y in years]
    npt.assert_allclose(dt, expected, rtol=0, atol=1e-9)


def test_far_future_quadratic():
    # u = 2: 102 + 102·2 + 25.3·4
    npt.assert_allclose(dt_at(2200.0), 407.2, atol=1e-9)


def test_before_948():
    # u = −20: 2178.45936 − 20·(497 − 20·44.1)
    npt.assert_allclose(dt_at(0.0), 9878.45936, atol=1e-6)


@pytest.mark.parametrize("boundary", [948.0, float(YSTART), float(YSTOP)])
def test_continuous_at_boundaries(boundary):
    assert abs(dt_at(boundary - 1e-6) - dt_at(boundary)) < 0.05


@pytest.mark.parametrize("lo, hi", [(900, 1000), (1590, 1650), (1990, 2110)])
def test_no_jumps_in_blend_windows(lo, hi):
    years = np.arange(lo, hi, 0.1)
    dt = calc_delta_t(jd_of_year(years), enabled=True)
    # Steepest stretch is about 5 s/yr, near 1620
    assert np.max(np.abs(np.diff(dt))) < 0.7


def test_array_shape_preserved():
    jd = np.array([[J2000, J2000 + 365.25], [J2000 - 36525.0, J2000 + 36525.0]])
    dt = calc_delta_t(jd, enabled=True)
    assert dt.shape == (2, 2)
    npt.assert_allclose(dt[0, 0], 63.83, atol=1e-9)


def test_disabled():
    assert calc_delta_t(J2000, enabled=False) == 0.0
    npt.assert_array_equal(calc_delta_t(np.array([J2000, 0.0]), enabled=False), [0.0, 0.0])


def test_disabled_by_env(monkeypatch):
    monkeypatch.setenv("SKYPROJ_USE_DELTA_T", "off")
    assert calc_delta_t(J2000) == 0.0
    assert julian_ephemeris_day(J2000) == J2000


def test_julian_ephemeris_day():
    npt.assert_allclose(julian_ephemeris_day(J2000, enabled=True),
                        J2000 + 63.83 / SECONDS_PER_DAY, atol=1e-12)
