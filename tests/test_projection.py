"""
test_projection.py — sky ↔ pixel mapping
"""

import math

import numpy as np
import numpy.testing as npt
import pytest

from skyproj.matrix import Matrix3x1
from skyproj.projection import (
    BEYOND_EDGE, BEYOND_HORIZON, IN_WINDOW,
    InputRep, Projected, project,
    rd2xyhit, rect2xyhit, rd2xydist, aa2xydist,
    xy2rd, xy2rd_arrays, xy2aa, xy2aa_arrays,
)
from skyproj.sphere import SphereCoords
from skyproj.utils import D2R, H2R, radec_to_rect, rect_to_radec, separation


def pixel_grid(frame, nx=8, ny=6):
    """Pixels spread over the window, avoiding the exact centre."""
    xs, ys = np.meshgrid(np.linspace(0, frame.width - 1, nx),
                         np.linspace(0, frame.height - 1, ny))
    return xs.ravel(), ys.ravel()


def off_centre(frame, angle):
    """J2000 (ra, dec) of a direction ``angle`` from the view centre."""
    w = np.array([math.sin(angle), 0.0, math.cos(angle)])
    return rect_to_radec(frame.rotation.view.invert().mult(w))


# ═══════════════════════════════════════════════════════════════════════════
#  Forward
# ═══════════════════════════════════════════════════════════════════════════

def test_centre(identity_frame):
    x, y, hit = rd2xyhit(identity_frame, 0.0, math.pi / 2)
    assert (x, y, hit) == (50.0, 50.0, IN_WINDOW)
    assert isinstance(x, float) and isinstance(hit, int)


def test_orientation(identity_frame):
    # 0h RA at the top, 6h RA to the right
    x, y, _ = rd2xyhit(identity_frame, 0.0, 80 * D2R)
    npt.assert_allclose([x, y], [50.0, 50.0 - 10 * D2R * 100.0], atol=1e-9)
    x, y, _ = rd2xyhit(identity_frame, 6 * H2R, 80 * D2R)
    npt.assert_allclose([x, y], [50.0 + 10 * D2R * 100.0, 50.0], atol=1e-9)


def test_equidistant(sky_frame):
    for angle in (0.1, 0.3, 0.5):
        ra, dec = off_centre(sky_frame, angle)
        p = project(sky_frame, (ra, dec))
        npt.assert_allclose(p.dist, angle, atol=1e-9)
        r = math.hypot(p.x - sky_frame.midx, p.y - sky_frame.midy)
        npt.assert_allclose(r, angle * sky_frame.pels_per_radian, atol=1e-6)


def test_beyond_edge(identity_frame):
    x, y, hit = rd2xyhit(identity_frame, 0.0, 0.0)
    assert hit == BEYOND_EDGE
    assert math.isfinite(x) and math.isfinite(y)


def test_just_past_ninety_is_beyond_edge(identity_frame):
    # 90.005°: still projected
    _, _, hit = rd2xyhit(identity_frame, 0.0, -0.005 * D2R)
    assert hit == BEYOND_EDGE


def test_ninety_one_degrees_beyond_horizon(sky_frame):
    ra, dec = off_centre(sky_frame, 91 * D2R)
    x, y, hit = rd2xyhit(sky_frame, ra, dec)
    assert hit == BEYOND_HORIZON
    assert math.isnan(x) and math.isnan(y)


def test_array_input(sky_frame):
    ra = np.array([0.0, 1.0, 2.0, 3.0])
    dec = np.array([0.5, 0.2, -0.2, -0.5])
    x, y, hit = rd2xyhit(sky_frame, ra, dec)
    assert x.shape == y.shape == hit.shape == (4,)
    for i in range(4):
        xi, yi, hi = rd2xyhit(sky_frame, ra[i], dec[i])
        assert hi == hit[i]
        if hi != BEYOND_HORIZON:
            npt.assert_allclose([xi, yi], [x[i], y[i]], atol=1e-9)


def test_rect_matches_radec(sky_frame):
    xs, ys = pixel_grid(sky_frame)
    ra, dec, _ = xy2rd_arrays(sky_frame, xs, ys)
    x1, y1, h1 = rd2xyhit(sky_frame, ra, dec)
    x2, y2, h2 = rect2xyhit(sky_frame, radec_to_rect(ra, dec))
    npt.assert_allclose(x2, x1, atol=1e-6)
    npt.assert_allclose(y2, y1, atol=1e-6)
    npt.assert_array_equal(h2, h1)


def test_project_input_forms(sky_frame):
    ra, dec = off_centre(sky_frame, 0.3)
    a = project(sky_frame, (ra, dec))
    b = project(sky_frame, SphereCoords(ra, dec))
    c = project(sky_frame, Matrix3x1(*radec_to_rect(ra, dec)), rep=InputRep.RECT)
    d = project(sky_frame, radec_to_rect(ra, dec), rep="rect")
    assert isinstance(a, Projected)
    assert a == b
    npt.assert_allclose([c.x, c.y, c.dist], [a.x, a.y, a.dist], atol=1e-6)
    assert c == d


def test_project_bad_input(sky_frame):
    with pytest.raises(ValueError):
        project(sky_frame, np.zeros((4, 2)), rep=InputRep.RECT)
    with pytest.raises(ValueError):
        project(sky_frame, (0.0, 0.0), rep="galactic")


def test_precess_flag(sky_frame):
    ra = np.array([0.5, 1.0, 1.5])
    dec = np.array([0.4, 0.6, 0.8])
    ra_app, dec_app = sky_frame.rotation.precess_nutate_arrays(ra, dec)
    x1, y1, d1 = rd2xydist(sky_frame, ra, dec)
    x2, y2, d2 = rd2xydist(sky_frame, ra_app, dec_app, precess=False)
    npt.assert_allclose(x2, x1, atol=1e-6)
    npt.assert_allclose(y2, y1, atol=1e-6)


def test_xydist_has_no_cutoff(identity_frame):
    x, y, dist = rd2xydist(identity_frame, 0.0, -60 * D2R)
    npt.assert_allclose(dist, 150 * D2R, atol=1e-9)
    assert math.isfinite(x) and math.isfinite(y)


# ═══════════════════════════════════════════════════════════════════════════
#  Horizontal input
# ═══════════════════════════════════════════════════════════════════════════

@pytest.mark.parametrize("frame_name", ["sky_frame", "azalt_frame"])
def test_aa2xydist_agrees_with_radec(request, frame_name):
    frame = request.getfixturevalue(frame_name)
    xs, ys = pixel_grid(frame, 4, 4)
    ra, dec, _ = xy2rd_arrays(frame, xs, ys)
    ra_app, dec_app = frame.rotation.precess_nutate_arrays(ra, dec)
    az, alt = frame.rotation.rd2aa_arrays(ra_app, dec_app)
    x1, y1, d1 = rd2xydist(frame, ra, dec)
    x2, y2, d2 = aa2xydist(frame, az, alt)
    npt.assert_allclose(x2, x1, atol=1e-6)
    npt.assert_allclose(y2, y1, atol=1e-6)
    npt.assert_allclose(d2, d1, atol=1e-9)


def test_aa2xydist_scalar(sky_frame):
    x, y, dist = aa2xydist(sky_frame, 1.0, 0.2)
    assert all(isinstance(v, float) for v in (x, y, dist))


def test_xy2aa_inverts_aa2xydist(azalt_frame):
    x, y, _ = aa2xydist(azalt_frame, 2.0, 0.5)
    aa = xy2aa(azalt_frame, x, y)
    npt.assert_allclose([aa.az, aa.alt], [2.0, 0.5], atol=1e-9)


def test_azalt_view_centre(azalt_frame):
    aa = xy2aa(azalt_frame, azalt_frame.midx, azalt_frame.midy)
    npt.assert_allclose([aa.az, aa.alt], [1.0, 0.7], atol=1e-9)


# ═══════════════════════════════════════════════════════════════════════════
#  Inverse
# ═══════════════════════════════════════════════════════════════════════════

def test_xy2rd_centre(identity_frame):
    sc, within = xy2rd(identity_frame, 50.0, 50.0)
    assert within
    npt.assert_allclose(sc.dec, math.pi / 2, atol=1e-12)


def test_roundtrip(sky_frame):
    xs, ys = pixel_grid(sky_frame)
    ra, dec, within = xy2rd_arrays(sky_frame, xs, ys)
    assert within.all()
    assert np.all((ra >= 0) & (ra < 2 * math.pi))
    x, y, hit = rd2xyhit(sky_frame, ra, dec)
    npt.assert_array_equal(hit, IN_WINDOW)
    npt.assert_allclose(x, xs, atol=1e-5)
    npt.assert_allclose(y, ys, atol=1e-5)
    ra2, dec2, _ = xy2rd_arrays(sky_frame, x, y)
    assert np.all(separation(ra, dec, ra2, dec2) < 1e-6)


def test_roundtrip_scalar(sky_frame):
    ra, dec = off_centre(sky_frame, 0.4)
    x, y, _ = rd2xyhit(sky_frame, ra, dec)
    sc, within = xy2rd(sky_frame, x, y)
    assert within
    assert sc.distance_from(SphereCoords(ra, dec)) < 1e-6


def test_xy2rd_outside_ninety(identity_frame):
    _, within = xy2rd(identity_frame, 50.0 + 200.0, 50.0)
    assert not within


def test_xy2aa_arrays_shape(azalt_frame):
    az, alt = xy2aa_arrays(azalt_frame, [0.0, 10.0, 799.0], [0.0, 300.0, 599.0])
    assert az.shape == alt.shape == (3,)
    assert np.all((az >= 0) & (az < 2 * math.pi))
