"""
skyproj.sphere — Spherical Coordinate Pairs
============================================

A :class:`SphereCoords` is two angles in radians.  Depending on the caller
they are (RA, Dec), ecliptic (λ, β) or horizontal (Az, Alt)::

    (RA, Dec) = (0h, 0°)  →  [1, 0, 0]
    (RA, Dec) = (6h, 0°)  →  [0, 1, 0]

RA increases as a right-handed rotation about z (x → y).  Azimuth runs the
other way, so Az/Alt pairs must be flipped before being rotated by matrices
(see :meth:`skyproj.rotation.Rotation.rd2aa`).
"""

import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from .matrix import Matrix3x1, Matrix3x3
from .utils import (
    TWO_PI, clamp_unit, normalize, safe_atan2, separation,
    format_ra_hm, format_ra_hms, format_dm, format_dms,
)


@dataclass(frozen=True)
class SphereCoords:
    """Spherical angle pair [rad].

    Parameters
    ----------
    a1 : float — RA, λ or Az (stored as given)
    a2 : float — Dec, β or Alt, expected in [−π/2, π/2]
    """
    a1: float = 0.0
    a2: float = 0.0

    # ── Aliases ──

    @property
    def ra(self) -> float:
        return self.a1

    @property
    def lam(self) -> float:
        return self.a1

    @property
    def az(self) -> float:
        return self.a1

    @property
    def dec(self) -> float:
        return self.a2

    @property
    def beta(self) -> float:
        return self.a2

    @property
    def alt(self) -> float:
        return self.a2

    # ── Rectangular form ──

    def to_rect(self) -> NDArray:
        """Unit vector ``(cos a1 cos a2, sin a1 cos a2, sin a2)``."""
        cosde = math.cos(self.a2)
        return np.array([math.cos(self.a1) * cosde,
                         math.sin(self.a1) * cosde,
                         math.sin(self.a2)])

    @classmethod
    def from_rect(cls, v) -> "SphereCoords":
        """Angles of a (not necessarily unit) vector; a1 in [0, 2π)."""
        if isinstance(v, Matrix3x1):
            v = v.as_array()
        v = normalize(v)
        return cls._from_unit(v[0], v[1], v[2])

    @classmethod
    def _from_unit(cls, x: float, y: float, z: float) -> "SphereCoords":
        a2 = math.asin(clamp_unit(z))
        a1 = safe_atan2(float(y), float(x))    # −π..π
        if a1 < 0:
            a1 += TWO_PI                       # 0..2π
        return cls(a1, a2)

    # ── Rotation ──

    def rotate(self, m: Matrix3x3) -> Matrix3x1:
        """``m · v`` for the unit vector of these angles."""
        return m.mult(Matrix3x1(*self.to_rect()))

    def rotate_radec(self, m: Matrix3x3) -> "SphereCoords":
        """Rotate and convert back to angles (a1 in [0, 2π))."""
        r = self.rotate(m)
        return SphereCoords._from_unit(r.x, r.y, r.z)

    # ── Geometry ──

    def distance_from(self, other: "SphereCoords") -> float:
        """Angular separation [rad, 0..π]."""
        return float(separation(self.a1, self.a2, other.a1, other.a2))

    # ── Text ──

    def format_ra_hm(self) -> str:
        return format_ra_hm(self.a1)

    def format_ra_hms(self) -> str:
        return format_ra_hms(self.a1)

    def format_az(self) -> str:
        return format_dm(self.a1, True)

    def format_dec(self) -> str:
        return format_dm(self.a2, False)

    def format_dec_dms(self) -> str:
        return format_dms(self.a2, False)

    format_alt = format_dec

    def format_distance_from(self, other: "SphereCoords") -> str:
        return format_dms(self.distance_from(other), True)
