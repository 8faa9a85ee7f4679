"""
skyproj.rotation — Composed Sky Rotations
==========================================

Builds the chain of 3×3 rotations that takes a mean J2000 equatorial unit
vector to the observer's view frame:

    view = FldRotate · Altitude · Azimuth · Latitude · LST · Nutation · Precession

View frame axes (right handed): z points away from the observer along the
line of sight, y to the observer's right and x up.  The reference
configuration (LST 0h, latitude 90°, azimuth 0, altitude 90°, field 0°,
no precession/nutation) in Az/Alt mode gives ``view == I``: the observer
stands on the north pole facing 12h RA, looking straight up, with 0h RA
at the top and 6h RA to the right.

=========  ====  ===========================  ====================
Element    Axis  Direction                    Identity at
=========  ====  ===========================  ====================
LST        z     x → y as LST increases        0 h
Latitude   y     z → x as latitude decreases   90°
Azimuth    z     y → x as azimuth increases    0
Altitude   y     x → z as altitude decreases   π/2
FldRotate  z     y → x as field increases      0°
=========  ====  ===========================  ====================

:class:`Rotation` is the mutable builder owned by one render context;
every setter changes one elementary matrix and :meth:`Rotation.recalc`
must be called afterwards.  :meth:`Rotation.snapshot` hands out a frozen
:class:`RotationState` for a render pass.
"""

import enum
import logging
import math
from dataclasses import dataclass

import numpy as np

from .matrix import Matrix3x3, Z180
from .nutate import Nutation
from .sphere import SphereCoords
from .utils import (
    J2000, JULIAN_CENTURY, S2R,
    clamp_unit, radec_to_rect, rect_to_radec, safe_atan2, wrap_two_pi,
)

logger = logging.getLogger(__name__)


class DisplayMode(enum.Enum):
    """Which coordinate system is held fixed on screen."""
    RA_DEC = "radec"
    AZ_ALT = "azalt"


# ════════════════════════════════════════════════════════════════════════════
#  Elementary Matrices
# ════════════════════════════════════════════════════════════════════════════

def precession_matrix(jde: float) -> Matrix3x3:
    """J2000 → mean equator and equinox of date (Meeus eq. 21.2–21.4)."""
    t = (jde - J2000) / JULIAN_CENTURY
    zeta  = ((0.017998 * t + 0.30188) * t + 2306.2181) * t
    zz    = ((0.018203 * t + 1.09468) * t + 2306.2181) * t
    theta = ((0.041833 * t + 0.42665) * t + 2004.3109) * t
    zeta *= S2R
    zz *= S2R
    theta *= S2R
    cx, sx = math.cos(zeta), math.sin(zeta)
    cz, sz = math.cos(zz), math.sin(zz)
    ct, st = math.cos(theta), math.sin(theta)
    return Matrix3x3(cx * ct * cz - sx * sz, -(sx * ct * cz + cx * sz), -st * cz,
                     cx * ct * sz + sx * cz,   cx * cz - sx * ct * sz,  -st * sz,
                     cx * st,                 -sx * st,                  ct)


def lst_matrix(lst_hrs: float) -> Matrix3x3:
    a = lst_hrs * math.pi / 12
    c, s = math.cos(a), math.sin(a)
    return Matrix3x3(c, s, 0.0,
                     -s, c, 0.0,
                     0.0, 0.0, 1.0)


def lat_matrix(lat_deg: float) -> Matrix3x3:
    a = (90.0 - lat_deg) * math.pi / 180.0
    c, s = math.cos(a), math.sin(a)
    return Matrix3x3(c, 0.0, -s,
                     0.0, 1.0, 0.0,
                     s, 0.0, c)


def az_matrix(az_rad: float) -> Matrix3x3:
    c, s = math.cos(az_rad), math.sin(az_rad)
    return Matrix3x3(c, -s, 0.0,
                     s, c, 0.0,
                     0.0, 0.0, 1.0)


def alt_matrix(alt_rad: float) -> Matrix3x3:
    c, s = math.cos(alt_rad), math.sin(alt_rad)
    return Matrix3x3(s, 0.0, c,
                     0.0, 1.0, 0.0,
                     -c, 0.0, s)


def fld_matrix(fld_deg: float) -> Matrix3x3:
    f = fld_deg * math.pi / 180
    c, s = math.cos(f), math.sin(f)
    return Matrix3x3(c, -s, 0.0,
                     s, c, 0.0,
                     0.0, 0.0, 1.0)


# ════════════════════════════════════════════════════════════════════════════
#  Conversions shared by the builder and its snapshots
# ════════════════════════════════════════════════════════════════════════════

class _SkyConversions:
    """Coordinate conversions that read ``ll``, ``unll``, ``ntpr``, ``unpn``."""

    # ── Precession / nutation ──

    def precess_nutate(self, sc: SphereCoords) -> SphereCoords:
        """Mean J2000 (RA, Dec) → apparent (RA, Dec) of date."""
        return sc.rotate_radec(self.precess_nutate_matrix)

    def un_precess_nutate(self, sc: SphereCoords) -> SphereCoords:
        """Apparent (RA, Dec) of date → mean J2000 (RA, Dec)."""
        return sc.rotate_radec(self.unpn)

    def precess_nutate_arrays(self, ra, dec):
        """Array form of :meth:`precess_nutate`; returns (ra, dec)."""
        v = self.precess_nutate_matrix.mult(np.atleast_2d(radec_to_rect(ra, dec)))
        return rect_to_radec(v)

    def un_precess_nutate_arrays(self, ra, dec):
        v = self.unpn.mult(np.atleast_2d(radec_to_rect(ra, dec)))
        return rect_to_radec(v)

    # ── Equatorial ↔ Horizontal ──
    #  Azimuth is measured N → E, the opposite handedness to RA, hence the
    #  atan2(y, −x) and π − az flips.

    def rd2aa(self, rd: SphereCoords) -> SphereCoords:
        """Apparent (RA, Dec) → (Az, Alt); az in [0, 2π)."""
        m = rd.rotate(self.ll)
        alt = math.asin(clamp_unit(m.z))
        az = safe_atan2(m.y, -m.x)
        if az < 0:
            az += 2 * math.pi
        return SphereCoords(az, alt)

    def aa2rd(self, aa: SphereCoords) -> SphereCoords:
        """(Az, Alt) → apparent (RA, Dec); ra in [0, 2π)."""
        m = SphereCoords(math.pi - aa.az, aa.alt).rotate(self.unll)
        dec = math.asin(clamp_unit(m.z))
        ra = safe_atan2(m.y, m.x)
        if ra < 0:
            ra += 2 * math.pi
        return SphereCoords(ra, dec)

    def rd2aa_arrays(self, ra, dec):
        """Vectorised :meth:`rd2aa`; returns (az, alt) arrays."""
        m = self.ll.mult(np.atleast_2d(radec_to_rect(ra, dec)))
        alt = np.arcsin(clamp_unit(m[:, 2]))
        az = wrap_two_pi(safe_atan2(m[:, 1], -m[:, 0]))
        return az, alt

    def aa2rd_arrays(self, az, alt):
        """Vectorised :meth:`aa2rd`; returns (ra, dec) arrays."""
        az = np.asarray(az, dtype=np.float64)
        m = self.unll.mult(np.atleast_2d(radec_to_rect(math.pi - az, alt)))
        return rect_to_radec(m)


# ════════════════════════════════════════════════════════════════════════════
#  Frozen State
# ════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RotationState(_SkyConversions):
    """By-value copy of every matrix of a :class:`Rotation` after ``recalc``.

    Safe to hand to another thread: matrices are immutable values.
    """
    mode: DisplayMode
    nutation: Nutation
    prec: Matrix3x3
    lst: Matrix3x3
    lat: Matrix3x3
    az: Matrix3x3
    alt: Matrix3x3
    fld: Matrix3x3
    fld_alt: Matrix3x3
    ll: Matrix3x3
    unll: Matrix3x3
    vwopn: Matrix3x3
    precess_nutate_matrix: Matrix3x3
    view: Matrix3x3
    unpn: Matrix3x3
    az_rad: float = 0.0

    @property
    def nutation_matrix(self) -> Matrix3x3:
        return self.nutation.matrix

    def thaw(self) -> "Rotation":
        """A mutable :class:`Rotation` holding these matrices."""
        r = Rotation()
        r._restore(self)
        return r


# ════════════════════════════════════════════════════════════════════════════
#  Builder
# ════════════════════════════════════════════════════════════════════════════

class Rotation(_SkyConversions):
    """Mutable owner of the elementary and composite view matrices.

    All matrices start as the identity and nutation as
    :meth:`Nutation.none`.  Getters return immutable values, so nothing
    handed out can change this object's state.

    Examples
    --------
    >>> r = Rotation()
    >>> r.set_jday(2451545.0)
    >>> r.set_lst_hrs(6.0); r.set_lat_deg(40.0)
    >>> r.set_az_rad(0.0); r.set_alt_rad(math.pi / 2); r.set_fld_deg(0)
    >>> r.recalc(DisplayMode.AZ_ALT)
    """

    def __init__(self):
        ident = Matrix3x3()
        self._nutation = Nutation.none()
        self._prec = ident
        self._lst = ident
        self._lat = ident
        self._az = ident
        self._az_rad = 0.0
        self._alt = ident
        self._fld = ident
        self._falt = ident
        self._vwop = ident
        self._ntpr = ident
        self._view = ident
        self._unpn = ident
        self._ll = ident
        self._unll = ident
        self._mode = DisplayMode.RA_DEC

    # ── Setters ──

    def set_jday(self, jde: float) -> None:
        """Nutation and precession for a Julian Ephemeris Day."""
        self._nutation = Nutation.for_jday(jde)
        self._prec = precession_matrix(jde)

    def set_lst_hrs(self, lst_hrs: float) -> None:
        """Local sidereal time [hours, 0..24]; identity at 0."""
        self._lst = lst_matrix(lst_hrs)

    def set_lat_deg(self, lat_deg: float) -> None:
        """Observer latitude [deg, −90..90]; identity at 90."""
        self._lat = lat_matrix(lat_deg)

    def set_az_rad(self, az_rad: float) -> None:
        """View azimuth [rad, 0..2π]; identity at 0."""
        self._az = az_matrix(az_rad)
        self._az_rad = float(az_rad)

    def set_alt_rad(self, alt_rad: float) -> None:
        """View altitude [rad, −π/2..π/2]; identity at π/2."""
        self._alt = alt_matrix(alt_rad)

    def set_fld_deg(self, fld_deg: float) -> None:
        """Field rotation [deg, 0..360]; identity at 0."""
        self._fld = fld_matrix(fld_deg)

    def recalc(self, mode=DisplayMode.RA_DEC) -> None:
        """Rebuild the composite matrices.

        Parameters
        ----------
        mode : DisplayMode or its value ('radec' / 'azalt')

        Raises
        ------
        ValueError
            Unknown display mode.
        """
        mode = DisplayMode(mode)
        self._falt = self._fld @ self._alt
        self._ll = self._lat @ self._lst
        self._unll = self._ll.invert()

        if mode is DisplayMode.RA_DEC:
            # alt ~ dec, az ~ −ra
            self._vwop = self._falt @ (self._az @ Z180)
        else:
            self._vwop = self._falt @ (self._az @ self._ll)

        self._ntpr = self._nutation.matrix @ self._prec
        self._view = self._vwop @ self._ntpr
        self._unpn = self._ntpr.invert()
        self._mode = mode
        logger.debug("Rotation recalculated (mode=%s)", mode.value)

    # ── Getters ──

    @property
    def mode(self) -> DisplayMode:
        return self._mode

    @property
    def az_rad(self) -> float:
        """View azimuth last passed to :meth:`set_az_rad`."""
        return self._az_rad

    @property
    def nutation(self) -> Nutation:
        return self._nutation

    @property
    def view(self) -> Matrix3x3:
        return self._view

    @property
    def vwopn(self) -> Matrix3x3:
        """View without precession and nutation."""
        return self._vwop

    @property
    def fld_alt(self) -> Matrix3x3:
        return self._falt

    @property
    def precess_nutate_matrix(self) -> Matrix3x3:
        return self._ntpr

    @property
    def nutation_matrix(self) -> Matrix3x3:
        return self._nutation.matrix

    @property
    def ll(self) -> Matrix3x3:
        return self._ll

    @property
    def unll(self) -> Matrix3x3:
        return self._unll

    @property
    def unpn(self) -> Matrix3x3:
        return self._unpn

    # ── Copies ──

    def snapshot(self) -> RotationState:
        return RotationState(
            mode=self._mode, nutation=self._nutation,
            prec=self._prec, lst=self._lst, lat=self._lat, az=self._az,
            alt=self._alt, fld=self._fld, fld_alt=self._falt,
            ll=self._ll, unll=self._unll, vwopn=self._vwop,
            precess_nutate_matrix=self._ntpr, view=self._view,
            unpn=self._unpn, az_rad=self._az_rad,
        )

    def clone(self) -> "Rotation":
        return self.snapshot().thaw()

    def _restore(self, s: RotationState) -> None:
        self._mode = s.mode
        self._nutation = s.nutation
        self._prec, self._lst, self._lat = s.prec, s.lst, s.lat
        self._az, self._alt, self._fld = s.az, s.alt, s.fld
        self._az_rad = s.az_rad
        self._falt, self._ll, self._unll = s.fld_alt, s.ll, s.unll
        self._vwop, self._ntpr = s.vwopn, s.precess_nutate_matrix
        self._view, self._unpn = s.view, s.unpn
