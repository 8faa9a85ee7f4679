"""
skyproj.projection — Sky ↔ Pixel Mapping
=========================================

Azimuthal-equidistant projection about the view centre.  A unit vector
``s`` is rotated into the view frame, ``m = R · s``; then

    dist    = acos(m_z)               angular distance from centre [rad]
    bearing = atan2(m_y, m_x)         0 = up, increasing clockwise
    x = midx + dist · sin(bearing) · ppr
    y = midy − dist · cos(bearing) · ppr

so pixel distance from the centre is proportional to true angular
separation.  ``R`` is the frame's ``view`` matrix, or ``vwopn`` (view
without precession/nutation) for overlays that are already apparent.

Reach codes
-----------
===================  ====  ==============================================
``IN_WINDOW``         1    inside the drawing area
``BEYOND_EDGE``       0    outside the area but within ~90° of centre;
                           coordinates are computed
``BEYOND_HORIZON``   −1    more than 90.01° from centre; coordinates are
                           not computed (NaN)
===================  ====  ==============================================

Every function accepts scalars or NumPy arrays; scalar input gives
Python floats/ints back.  The frame argument is a
:class:`skyproj.frame.MapFrame` (anything exposing the same attributes
works).
"""

import enum
from typing import NamedTuple

import numpy as np

from .matrix import Matrix3x1
from .rotation import DisplayMode
from .sphere import SphereCoords
from .utils import HALF_PI, radec_to_rect, safe_atan2, wrap_two_pi

IN_WINDOW = 1
BEYOND_EDGE = 0
BEYOND_HORIZON = -1

# cos(90.01°): anything further from the centre is not projected
HORIZON_Z = -0.0002


class InputRep(enum.Enum):
    """How the coordinates handed to :func:`project` are represented."""
    RADEC = "radec"      # (ra, dec) angle pair or SphereCoords
    RECT = "rect"        # unit vector(s), (3,) / (N,3) or Matrix3x1


class Projected(NamedTuple):
    x: object
    y: object
    dist: object
    hit: object


# ════════════════════════════════════════════════════════════════════════════
#  Helpers
# ════════════════════════════════════════════════════════════════════════════

def _matrix(frame, precess: bool):
    return frame.rotation.view if precess else frame.rotation.vwopn


def _as_rect(coords, rep: InputRep):
    """(N,3) unit vectors and whether the input was a single point."""
    rep = InputRep(rep)
    if rep is InputRep.RADEC:
        if isinstance(coords, SphereCoords):
            ra, dec = coords.a1, coords.a2
        else:
            ra, dec = coords
        scalar = np.ndim(ra) == 0 and np.ndim(dec) == 0
        return np.atleast_2d(radec_to_rect(ra, dec)), scalar

    if isinstance(coords, Matrix3x1):
        coords = coords.as_array()
    v = np.asarray(coords, dtype=np.float64)
    if v.shape == (3,):
        return v[np.newaxis, :], True
    if v.ndim == 2 and v.shape[1] == 3:
        return v, False
    raise ValueError(f"Expected (3,) or (N,3) array, got shape {v.shape}")


def _scalarize(scalar: bool, *arrays):
    if not scalar:
        return arrays
    return tuple(a[0].item() for a in arrays)


def _place(frame, dist, bearing):
    ppr = frame.pels_per_radian
    x = frame.midx + dist * np.sin(bearing) * ppr
    y = frame.midy - dist * np.cos(bearing) * ppr
    return x, y


# ════════════════════════════════════════════════════════════════════════════
#  Forward
# ════════════════════════════════════════════════════════════════════════════

def project(frame, coords, *, rep=InputRep.RADEC, precess: bool = True) -> Projected:
    """Project sky coordinates onto the frame.

    Parameters
    ----------
    frame : MapFrame
    coords : (ra, dec) pair, SphereCoords, unit vector(s) or Matrix3x1
    rep : InputRep — representation of ``coords``
    precess : bool — use ``view`` (True) or ``vwopn`` (False)

    Returns
    -------
    Projected(x, y, dist, hit)
        ``hit`` is one of the reach codes; ``x``/``y`` are NaN where it is
        ``BEYOND_HORIZON``.

    Raises
    ------
    ValueError
        Unknown ``rep`` or a badly shaped rectangular input.
    """
    rep = InputRep(rep)
    s, scalar = _as_rect(coords, rep)
    m = _matrix(frame, precess).mult(s)
    m0, m1, m2 = m[:, 0], m[:, 1], m[:, 2]

    dist = np.arccos(np.clip(m2, -1.0, 1.0))
    below = m2 < HORIZON_Z
    ppr = frame.pels_per_radian

    if rep is InputRep.RECT:
        # Scale (m_x, m_y) to length dist·ppr without trig on the bearing
        r = np.sqrt(m0 * m0 + m1 * m1)
        with np.errstate(divide="ignore", invalid="ignore"):
            pels = np.where(r != 0, dist * ppr / r, 0.0)
        offx = pels * m1
        offy = pels * m0
    else:
        bearing = safe_atan2(m1, m0)
        offx = dist * np.sin(bearing) * ppr
        offy = dist * np.cos(bearing) * ppr

    hit = np.where((frame.maxoffx <= np.abs(offx)) | (frame.maxoffy <= np.abs(offy)),
                   BEYOND_EDGE, IN_WINDOW)
    hit = np.where(below, BEYOND_HORIZON, hit)
    x = np.where(below, np.nan, frame.midx + offx)
    y = np.where(below, np.nan, frame.midy - offy)

    return Projected(*_scalarize(scalar, x, y, dist, hit))


def rd2xyhit(frame, ra, dec, precess: bool = True):
    """(x, y, hit) for RA/Dec; see :func:`project`."""
    p = project(frame, (ra, dec), rep=InputRep.RADEC, precess=precess)
    return p.x, p.y, p.hit


def rect2xyhit(frame, v, precess: bool = True):
    """(x, y, hit) for precomputed unit vectors (the catalog fast path)."""
    p = project(frame, v, rep=InputRep.RECT, precess=precess)
    return p.x, p.y, p.hit


def _xydist(frame, m):
    m2 = np.clip(m[:, 2], -1.0, 1.0)
    dist = np.arccos(m2)
    bearing = safe_atan2(m[:, 1], m[:, 0])
    x, y = _place(frame, dist, bearing)
    return x, y, dist


def rd2xydist(frame, ra, dec, precess: bool = True):
    """(x, y, dist) with no horizon cut-off.

    Coordinates are always computed; ``dist`` is clamped to [0, π].  Used
    for continuous curves whose callers test ``dist`` themselves.
    """
    scalar = np.ndim(ra) == 0 and np.ndim(dec) == 0
    s = np.atleast_2d(radec_to_rect(ra, dec))
    m = _matrix(frame, precess).mult(s)
    return _scalarize(scalar, *_xydist(frame, m))


def aa2xydist(frame, az, alt):
    """(x, y, dist) for horizontal coordinates.

    In RA/Dec mode the point goes through :meth:`aa2rd` to apparent
    (RA, Dec) and is projected with ``vwopn``.  In Az/Alt mode only the
    view azimuth and the field/altitude rotation apply.
    """
    if frame.mode is DisplayMode.RA_DEC:
        ra, dec = frame.rotation.aa2rd_arrays(az, alt)
        x, y, dist = rd2xydist(frame, ra, dec, precess=False)
        if np.ndim(az) == 0 and np.ndim(alt) == 0:
            return float(x[0]), float(y[0]), float(dist[0])
        return x, y, dist

    scalar = np.ndim(az) == 0 and np.ndim(alt) == 0
    az = np.asarray(az, dtype=np.float64) - frame.view_az
    alt = np.asarray(alt, dtype=np.float64)
    cosal = np.cos(alt)
    # x north, y west, z zenith
    s = np.stack([-np.cos(az) * cosal, np.sin(az) * cosal, np.sin(alt)], axis=-1)
    m = frame.rotation.fld_alt.mult(np.atleast_2d(s))
    return _scalarize(scalar, *_xydist(frame, m))


# ════════════════════════════════════════════════════════════════════════════
#  Inverse
# ════════════════════════════════════════════════════════════════════════════

def _unproject(frame, x, y):
    """View-frame unit vectors (N,3) and angular distance for pixels."""
    x = np.atleast_1d(np.asarray(x, dtype=np.float64))
    y = np.atleast_1d(np.asarray(y, dtype=np.float64))
    offx = (x - frame.midx) / frame.pels_per_radian
    offy = (frame.midy - y) / frame.pels_per_radian
    dist = np.sqrt(offx * offx + offy * offy)
    sind = np.sin(dist)
    with np.errstate(divide="ignore", invalid="ignore"):
        k = np.where(dist > 0, sind / dist, 0.0)
    w = np.stack([offy * k, offx * k, np.cos(dist)], axis=-1)
    return w, dist


def xy2rd_arrays(frame, x, y):
    """Vectorised :func:`xy2rd`; returns (ra, dec, within) arrays."""
    w, dist = _unproject(frame, x, y)
    v = frame.rotation.view.invert().mult(w)
    dec = np.arcsin(np.clip(v[:, 2], -1.0, 1.0))
    ra = wrap_two_pi(safe_atan2(v[:, 1], v[:, 0]))
    return ra, dec, dist <= HALF_PI


def xy2rd(frame, x, y):
    """Pixel → mean J2000 (RA, Dec), undoing the full ``view`` rotation.

    Returns
    -------
    (SphereCoords, within)
        RA is wrapped to [0, 2π); ``within`` is True when the pixel is no
        more than 90° from the view centre.
    """
    ra, dec, within = xy2rd_arrays(frame, x, y)
    return SphereCoords(float(ra[0]), float(dec[0])), bool(within[0])


def xy2aa_arrays(frame, x, y):
    """Vectorised :func:`xy2aa`; returns (az, alt) arrays."""
    w, _ = _unproject(frame, x, y)
    v = frame.rotation.fld_alt.invert().mult(w)
    alt = np.arcsin(np.clip(v[:, 2], -1.0, 1.0))
    az = wrap_two_pi(safe_atan2(v[:, 1], -v[:, 0]) + frame.view_az)
    return az, alt


def xy2aa(frame, x, y) -> SphereCoords:
    """Pixel → (Az, Alt) in Az/Alt display geometry; az in [0, 2π)."""
    az, alt = xy2aa_arrays(frame, x, y)
    return SphereCoords(float(az[0]), float(alt[0]))

