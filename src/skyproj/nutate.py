"""
skyproj.nutate — Nutation, Obliquity & Aberration
==================================================

Date-dependent quantities for a Julian Ephemeris Day:

- Δψ, Δε — nutation in longitude / obliquity from the 63-term series of
  Meeus ch. 22 (amplitudes in 0.0001″, linear term in Julian millennia).
- ε₀ — mean obliquity (Laskar polynomial in units of 10 000 years),
  ε = ε₀ + Δε the true obliquity.
- The nutation matrix ``N = R_x(−ε) · R_z(−Δψ) · R_x(ε₀)`` stored in closed
  form.
- Annual-aberration inputs e, ϖ, L☉ from the low-precision solar theory of
  Meeus ch. 23 / 25.

All conversions accept scalars or NumPy arrays.

Reference
---------
Meeus, J. (1998). *Astronomical Algorithms*, 2nd ed., pp. 143–151.
"""

import math
from dataclasses import dataclass, field

import numpy as np

from .matrix import Matrix3x3
from .sphere import SphereCoords
from .utils import D2R, J2000, JULIAN_CENTURY, S2R

# Constant of aberration κ = 20.49522″
ABERRATION_K = 20.49522 * S2R

# ── Nutation series ─────────────────────────────────────────────────────────
#  Multipliers of D, M, M′, F, Ω; Δψ = (A + B t) sin(arg); Δε = (C + D t) cos(arg)
#  A..D in 0.0001″, t in Julian millennia.
_NUTATION_TERMS = np.array([
    ( 0,  0,  0,  0,  1, -171996, -1742, 92025,  89),
    (-2,  0,  0,  2,  2,  -13187,   -16,  5736, -31),
    ( 0,  0,  0,  2,  2,   -2274,    -2,   977,  -5),
    ( 0,  0,  0,  0,  2,    2062,     2,  -895,   5),
    ( 0,  1,  0,  0,  0,    1426,   -34,    54,  -1),
    ( 0,  0,  1,  0,  0,     712,     1,    -7,   0),
    (-2,  1,  0,  2,  2,    -517,    12,   224,  -6),
    ( 0,  0,  0,  2,  1,    -386,    -4,   200,   0),
    ( 0,  0,  1,  2,  2,    -301,     0,   129,  -1),
    (-2, -1,  0,  2,  2,     217,    -5,   -95,   3),
    (-2,  0,  1,  0,  0,    -158,     0,     0,   0),
    (-2,  0,  0,  2,  1,     129,     1,   -70,   0),
    ( 0,  0, -1,  2,  2,     123,     0,   -53,   0),
    ( 2,  0,  0,  0,  0,      63,     0,     0,   0),
    ( 0,  0,  1,  0,  1,      63,     1,   -33,   0),
    ( 2,  0, -1,  2,  2,     -59,     0,    26,   0),
    ( 0,  0, -1,  0,  1,     -58,    -1,    32,   0),
    ( 0,  0,  1,  2,  1,     -51,     0,    27,   0),
    (-2,  0,  2,  0,  0,      48,     0,     0,   0),
    ( 0,  0, -2,  2,  1,      46,     0,   -24,   0),
    ( 2,  0,  0,  2,  2,     -38,     0,    16,   0),
    ( 0,  0,  2,  2,  2,     -31,     0,    13,   0),
    ( 0,  0,  2,  0,  0,      29,     0,     0,   0),
    (-2,  0,  1,  2,  2,      29,     0,   -12,   0),
    ( 0,  0,  0,  2,  0,      26,     0,     0,   0),
    (-2,  0,  0,  2,  0,     -22,     0,     0,   0),
    ( 0,  0, -1,  2,  1,      21,     0,   -10,   0),
    ( 0,  2,  0,  0,  0,      17,    -1,     0,   0),
    ( 2,  0, -1,  0,  1,      16,     0,    -8,   0),
    (-2,  2,  0,  2,  2,     -16,     1,     7,   0),
    ( 0,  1,  0,  0,  1,     -15,     0,     9,   0),
    (-2,  0,  1,  0,  1,     -13,     0,     7,   0),
    ( 0, -1,  0,  0,  1,     -12,     0,     6,   0),
    ( 0,  0,  2, -2,  0,      11,     0,     0,   0),
    ( 2,  0, -1,  2,  1,     -10,     0,     5,   0),
    ( 2,  0,  1,  2,  2,      -8,     0,     3,   0),
    ( 0,  1,  0,  2,  2,       7,     0,    -3,   0),
    (-2,  1,  1,  0,  0,      -7,     0,     0,   0),
    ( 0, -1,  0,  2,  2,      -7,     0,     3,   0),
    ( 2,  0,  0,  2,  1,      -7,     0,     3,   0),
    ( 2,  0,  1,  0,  0,       6,     0,     0,   0),
    (-2,  0,  2,  2,  2,       6,     0,    -3,   0),
    (-2,  0,  1,  2,  1,       6,     0,    -3,   0),
    ( 2,  0, -2,  0,  1,      -6,     0,     3,   0),
    ( 2,  0,  0,  0,  1,      -6,     0,     3,   0),
    ( 0, -1,  1,  0,  0,       5,     0,     0,   0),
    (-2, -1,  0,  2,  1,      -5,     0,     3,   0),
    (-2,  0,  0,  0,  1,      -5,     0,     3,   0),
    ( 0,  0,  2,  2,  1,      -5,     0,     3,   0),
    (-2,  0,  2,  0,  1,       4,     0,     0,   0),
    (-2,  1,  0,  2,  1,       4,     0,     0,   0),
    ( 0,  0,  1, -2,  0,       4,     0,     0,   0),
    (-1,  0,  1,  0,  0,      -4,     0,     0,   0),
    (-2,  1,  0,  0,  0,      -4,     0,     0,   0),
    ( 1,  0,  0,  0,  0,      -4,     0,     0,   0),
    ( 0,  0,  1,  2,  0,       3,     0,     0,   0),
    ( 0,  0, -2,  2,  2,      -3,     0,     0,   0),
    (-1, -1,  1,  0,  0,      -3,     0,     0,   0),
    ( 0,  1,  1,  0,  0,      -3,     0,     0,   0),
    ( 0, -1,  1,  2,  2,      -3,     0,     0,   0),
    ( 2, -1, -1,  2,  2,      -3,     0,     0,   0),
    ( 0,  0,  3,  2,  2,      -3,     0,     0,   0),
    ( 2, -1,  0,  2,  2,      -3,     0,     0,   0),
], dtype=np.int64)
_NUTATION_TERMS.flags.writeable = False


def mean_obliquity(jde: float) -> float:
    """Mean obliquity of the ecliptic ε₀ [rad] (Meeus eq. 22.3)."""
    T = (jde - J2000) / JULIAN_CENTURY
    U = T / 10 / 10                # 10 000 Julian years
    ep0 = 21.448 - U * (4680.93 + U * (1.55 - U * (1999.25 - U * (51.38 +
          U * (249.67 + U * (39.05 - U * (7.12 + U * (27.87 + U * (5.79 +
          U * 2.45)))))))))
    return (23 + (26 + ep0 / 60) / 60) * D2R


J2000_OBLIQUITY = mean_obliquity(J2000)


def _asin_clamped(s):
    if np.ndim(s) == 0:
        if s > 1:
            return math.pi / 2
        if s < -1:
            return -math.pi / 2
        return math.asin(s)
    return np.arcsin(np.clip(s, -1.0, 1.0))


def _atan2(y, x):
    if np.ndim(y) == 0 and np.ndim(x) == 0:
        return math.atan2(y, x)
    return np.arctan2(y, x)


# ════════════════════════════════════════════════════════════════════════════
#  Nutation
# ════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Nutation:
    """Nutation, obliquity and aberration parameters for one JDE.

    Build with :meth:`for_jday`; :meth:`none` is the zero state (identity
    matrix, zero obliquity) used before a date is set.

    Attributes
    ----------
    jde : float or None — Julian Ephemeris Day, None for :meth:`none`
    dpsi, deps : float — nutation in longitude / obliquity [rad]
    ep0 : float — mean obliquity [rad]
    ec : float — eccentricity of the Earth's orbit
    pi : float — longitude of perihelion [rad]
    lsun : float — Sun's true geometric longitude [rad, 0..2π)
    matrix : Matrix3x3 — nutation matrix
    """
    jde: float | None = None
    dpsi: float = 0.0
    deps: float = 0.0
    ep0: float = 0.0
    ec: float = 0.0
    pi: float = 0.0
    lsun: float = 0.0
    matrix: Matrix3x3 = field(default_factory=Matrix3x3)

    @classmethod
    def none(cls) -> "Nutation":
        return cls()

    @classmethod
    def for_jday(cls, jde: float) -> "Nutation":
        """Compute every quantity for a Julian Ephemeris Day."""
        T = (jde - J2000) / JULIAN_CENTURY
        D  = 297.85036 + T * (445267.111480 - T * (0.0019142 - T / 189474))
        M  = 357.52772 + T * ( 35999.050340 - T * (0.0001603 + T / 300000))
        Mp = 134.96298 + T * (477198.867398 + T * (0.0086972 + T /  56250))
        F  =  93.27191 + T * (483202.017538 - T * (0.0036825 - T / 327270))
        Om = 125.04452 - T * (  1934.136261 - T * (0.0020708 + T / 450000))

        Tm = T / 10                   # Julian millennia
        dpsi = 0.0
        deps = 0.0
        for n0, n1, n2, n3, n4, a, b, c, d in _NUTATION_TERMS.tolist():
            # fmod keeps the sign of the dividend
            arg = math.fmod(n0 * D + n1 * M + n2 * Mp + n3 * F + n4 * Om,
                            360) * D2R
            dpsi += (a + b * Tm) * math.sin(arg)
            deps += (c + d * Tm) * math.cos(arg)
        dpsi *= D2R / 36000000        # 0.0001″ → rad
        deps *= D2R / 36000000

        ep0 = mean_obliquity(jde)
        ep = ep0 + deps

        cep, sep = math.cos(ep), math.sin(ep)
        ce0, se0 = math.cos(ep0), math.sin(ep0)
        cdp, sdp = math.cos(dpsi), math.sin(dpsi)
        nut = Matrix3x3(
            cdp,       -ce0 * sdp,                    -se0 * sdp,
            cep * sdp,  ce0 * cep * cdp + se0 * sep,   se0 * cep * cdp - ce0 * sep,
            sep * sdp,  ce0 * sep * cdp - se0 * cep,   se0 * sep * cdp + ce0 * cep,
        )

        # ── Aberration (T in Julian centuries) ──
        T = Tm * 10
        L0 = 280.46646 + T * (36000.76983 + T * 0.0003032)
        Ms = math.fmod(357.52911 + T * (35999.05029 - T * 0.0001537), 360) * D2R
        C = ((1.914602 - T * (0.004817 + T * 0.000014)) * math.sin(Ms)
             + (0.019993 - T * 0.000101) * math.sin(2 * Ms)
             + 0.000289 * math.sin(3 * Ms))
        lsun = math.fmod(L0 + C, 360)
        if lsun < 0:
            lsun += 360
        lsun *= D2R
        ec = 0.016708634 - T * (0.000042037 + T * 0.0000001267)
        pi = (102.93735 + T * (1.71946 + T * 0.00046)) * D2R

        return cls(jde=jde, dpsi=dpsi, deps=deps, ep0=ep0,
                   ec=ec, pi=pi, lsun=lsun, matrix=nut)

    # ── Derived ──

    @property
    def ep(self) -> float:
        """True obliquity ε₀ + Δε [rad]."""
        return self.ep0 + self.deps

    # ── Ecliptic ↔ Equatorial ──

    def eclip_to_equat(self, lam, beta):
        """Apparent (RA, Dec) of mean ecliptic (λ, β), applying Δψ and ε.

        RA is the raw ``atan2`` result in (−π, π].
        """
        ep = self.ep
        cep, sep = math.cos(ep), math.sin(ep)
        lam = lam + self.dpsi
        sinlam = np.sin(lam)
        cosbeta = np.cos(beta)
        sinbeta = np.sin(beta)
        ra = _atan2(sinlam * cep - sinbeta * sep / cosbeta, np.cos(lam))
        dec = _asin_clamped(sinbeta * cep + cosbeta * sep * sinlam)
        if np.ndim(ra) == 0:
            return float(ra), float(dec)
        return ra, dec

    def equat_to_eclip(self, ra, dec):
        """Mean ecliptic (λ, β) of apparent (RA, Dec); λ is not wrapped."""
        ep = self.ep
        cep, sep = math.cos(ep), math.sin(ep)
        sinalpha = np.sin(ra)
        sindelta = np.sin(dec)
        cosdelta = np.cos(dec)
        lam = _atan2(sinalpha * cep + sindelta * sep / cosdelta, np.cos(ra))
        beta = _asin_clamped(sindelta * cep - cosdelta * sep * sinalpha)
        lam = lam - self.dpsi
        if np.ndim(lam) == 0:
            return float(lam), float(beta)
        return lam, beta

    def eclip_to_equat_sc(self, sc: SphereCoords) -> SphereCoords:
        return SphereCoords(*self.eclip_to_equat(sc.lam, sc.beta))

    def equat_to_eclip_sc(self, sc: SphereCoords) -> SphereCoords:
        return SphereCoords(*self.equat_to_eclip(sc.ra, sc.dec))

    # ── Aberration ──

    def adjust_eclip_for_aberration(self, lam, beta):
        """Ecliptic (λ, β) displaced for annual aberration (Meeus eq. 23.2)."""
        k = ABERRATION_K
        dlam = k * (self.ec * np.cos(self.pi - lam)
                    - np.cos(self.lsun - lam)) / np.cos(beta)
        dbeta = k * (self.ec * np.sin(self.pi - lam)
                     - np.sin(self.lsun - lam)) * np.sin(beta)
        lam = lam + dlam
        beta = beta + dbeta
        if np.ndim(lam) == 0:
            return float(lam), float(beta)
        return lam, beta

    def adjust_equat_for_aberration(self, ra, dec):
        """Equatorial (RA, Dec) displaced for annual aberration.

        Goes through ecliptic coordinates, so Δψ is removed and re-applied.
        """
        lam, beta = self.equat_to_eclip(ra, dec)
        lam, beta = self.adjust_eclip_for_aberration(lam, beta)
        return self.eclip_to_equat(lam, beta)

    def adjust_eclip_for_aberration_sc(self, sc: SphereCoords) -> SphereCoords:
        return SphereCoords(*self.adjust_eclip_for_aberration(sc.lam, sc.beta))

    def adjust_equat_for_aberration_sc(self, sc: SphereCoords) -> SphereCoords:
        return SphereCoords(*self.adjust_equat_for_aberration(sc.ra, sc.dec))

