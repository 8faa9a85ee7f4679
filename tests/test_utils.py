"""
test_utils.py — constants, vectors, time, sidereal time, formatting
"""

import math
from datetime import datetime, timezone

import numpy as np
import numpy.testing as npt
import pytest

from skyproj.utils import (
    D2R, H2R, J2000, TWO_PI,
    normalize, clamp_unit, wrap_two_pi, safe_atan2,
    radec_to_rect, rect_to_radec, separation,
    julian_date, julian_date_from_datetime, datetime_from_julian_date,
    julian_year, mean_sidereal_hours,
    format_ra_hm, format_ra_hms, format_dm, format_dms,
)


# ═══════════════════════════════════════════════════════════════════════════
#  Vectors
# ═══════════════════════════════════════════════════════════════════════════

def test_normalize_unit():
    npt.assert_allclose(normalize(np.array([3.0, 4.0, 0.0])), [0.6, 0.8, 0.0], atol=1e-15)


def test_normalize_batch():
    vecs = np.array([[1.0, 2.0, 2.0], [0.0, 0.0, 5.0]])
    npt.assert_allclose(np.linalg.norm(normalize(vecs), axis=1), [1.0, 1.0], atol=1e-15)


def test_normalize_zero_raises():
    with pytest.raises(ValueError):
        normalize(np.zeros(3))


def test_clamp_unit():
    assert clamp_unit(1.0000001) == 1.0
    npt.assert_array_equal(clamp_unit(np.array([-2.0, 0.5, 2.0])), [-1.0, 0.5, 1.0])


def test_wrap_two_pi():
    npt.assert_allclose(wrap_two_pi(-0.5), TWO_PI - 0.5)
    npt.assert_allclose(wrap_two_pi(TWO_PI + 0.25), 0.25)
    a = wrap_two_pi(np.array([-1e-18, -3.0, 7.0]))
    assert np.all((a >= 0) & (a < TWO_PI))


def test_safe_atan2_origin():
    assert safe_atan2(0.0, 0.0) == 0.0
    npt.assert_array_equal(safe_atan2(np.zeros(2), np.zeros(2)), [0.0, 0.0])


# ═══════════════════════════════════════════════════════════════════════════
#  Spherical ↔ Rectangular
# ═══════════════════════════════════════════════════════════════════════════

def test_radec_to_rect_axes():
    npt.assert_allclose(radec_to_rect(0.0, 0.0), [1, 0, 0], atol=1e-15)
    npt.assert_allclose(radec_to_rect(6 * H2R, 0.0), [0, 1, 0], atol=1e-15)
    npt.assert_allclose(radec_to_rect(0.0, math.pi / 2), [0, 0, 1], atol=1e-15)


def test_radec_to_rect_batch_shape():
    v = radec_to_rect(np.linspace(0, 6, 10), np.linspace(-1, 1, 10))
    assert v.shape == (10, 3)
    npt.assert_allclose(np.linalg.norm(v, axis=1), np.ones(10), atol=1e-14)


def test_rect_to_radec_roundtrip():
    ra = np.array([0.1, 2.0, 4.0, 6.2])
    dec = np.array([-1.2, -0.1, 0.3, 1.4])
    ra2, dec2 = rect_to_radec(radec_to_rect(ra, dec))
    npt.assert_allclose(ra2, ra, atol=1e-12)
    npt.assert_allclose(dec2, dec, atol=1e-12)


def test_rect_to_radec_pole():
    ra, dec = rect_to_radec(np.array([0.0, 0.0, 1.0]))
    assert ra == 0.0
    npt.assert_allclose(dec, math.pi / 2)


def test_rect_to_radec_bad_shape():
    with pytest.raises(ValueError):
        rect_to_radec(np.zeros((4, 2)))


def test_separation():
    npt.assert_allclose(separation(0.0, math.pi / 2, 1.0, -math.pi / 2), math.pi)
    npt.assert_allclose(separation(0.0, 0.0, 90 * D2R, 0.0), math.pi / 2)
    npt.assert_allclose(separation(1.0, 0.5, 1.0, 0.5), 0.0, atol=1e-7)


# ═══════════════════════════════════════════════════════════════════════════
#  Time
# ═══════════════════════════════════════════════════════════════════════════

def test_jd_j2000():
    npt.assert_allclose(julian_date(2000, 1, 1, 12), J2000, atol=1e-9)


def test_jd_from_datetime():
    dt = datetime(2000, 1, 1, 12, tzinfo=timezone.utc)
    npt.assert_allclose(julian_date_from_datetime(dt), J2000, atol=1e-9)
    # Naive datetimes are UTC
    npt.assert_allclose(julian_date_from_datetime(datetime(2000, 1, 1, 12)), J2000, atol=1e-9)


def test_datetime_from_jd_roundtrip():
    dt = datetime(2024, 7, 4, 3, 21, 10, tzinfo=timezone.utc)
    back = datetime_from_julian_date(julian_date_from_datetime(dt))
    assert abs((back - dt).total_seconds()) < 1e-3


def test_julian_year():
    assert julian_year(J2000) == 2000.0
    npt.assert_allclose(julian_year(np.array([J2000, J2000 + 365.25])), [2000.0, 2001.0])


def test_sidereal_reference():
    # Practical Astronomy with your Calculator §12: 1980-04-22 14:36:51.67 UT
    jd = julian_date(1980, 4, 22, 14, 36, 51.67)
    npt.assert_allclose(mean_sidereal_hours(jd), 4 + 40 / 60 + 5.23 / 3600, atol=1e-4)


def test_sidereal_longitude_offset():
    jd = julian_date(2024, 3, 1, 22, 0, 0)
    diff = (mean_sidereal_hours(jd, 15.0) - mean_sidereal_hours(jd, 0.0)) % 24
    npt.assert_allclose(diff, 1.0, atol=1e-9)


def test_sidereal_range():
    for jd in np.linspace(2440000.0, 2470000.0, 37):
        for lon in (-179.9, -75.0, 0.0, 120.0, 180.0):
            lst = mean_sidereal_hours(jd, lon)
            assert 0.0 <= lst < 24.0


# ═══════════════════════════════════════════════════════════════════════════
#  Formatting
# ═══════════════════════════════════════════════════════════════════════════

def test_format_ra_hm():
    assert format_ra_hm(0.0) == "0h 0.0m"
    assert format_ra_hm(12.5 * H2R) == "12h 30.0m"
    assert format_ra_hm(-H2R) == "23h 0.0m"


def test_format_ra_hm_rollover():
    assert format_ra_hm((23 + 59.96 / 60) * H2R) == "0h 0.0m"


def test_format_ra_hms():
    assert format_ra_hms((5 + 34 / 60 + 31.94 / 3600) * H2R) == "5h 34m 31.9s"


def test_format_dm_sign():
    assert format_dm(-30.5 * D2R) == "-30d 30m"
    assert format_dm(-1e-6) == "0d 0m"


def test_format_dm_offset():
    assert format_dm(-10 * D2R, offset=True) == "350d 0m"
    assert format_dm(190 * D2R) == "-170d 0m"


def test_format_dm_out_of_range():
    assert format_dm(500 * D2R) == ""


def test_format_dms():
    assert format_dms(1.5 * D2R) == "1d 30m 0s"
    assert format_dms(-(22 + 0.5 / 60) * D2R) == "-22d 0m 30s"
