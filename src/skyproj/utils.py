"""
skyproj.utils — Foundational Utilities
=======================================

Angle constants, spherical ↔ rectangular conversion, great-circle
separation, Julian dates, local mean sidereal time and angle formatting.
All functions accept scalars or NumPy arrays unless noted.
"""

import math
from datetime import datetime, timezone

import numpy as np
from numpy.typing import NDArray

# ── Angle Constants ─────────────────────────────────────────────────────────
TWO_PI = 2.0 * math.pi
HALF_PI = 0.5 * math.pi
D2R = math.pi / 180.0            # degrees → radians
R2D = 180.0 / math.pi            # radians → degrees
H2R = math.pi / 12.0             # hours of RA → radians
S2R = math.pi / 648000.0         # arcseconds → radians

# ── Time Constants ──────────────────────────────────────────────────────────
J2000 = 2451545.0                # JD of J2000.0 (2000-01-01 12:00 TT)
JULIAN_CENTURY = 36525.0         # days
JULIAN_YEAR = 365.25             # days
UNIX_EPOCH_JD = 2440587.5        # JD of 1970-01-01 00:00 UTC
MS_PER_DAY = 86_400_000.0
SECONDS_PER_DAY = 86_400.0
SIDEREAL_RATE = 1.00273790935    # sidereal / solar time ratio

# ── Vector Helpers ──────────────────────────────────────────────────────────

def normalize(v: NDArray) -> NDArray:
    """Return unit vector.  Works on single vectors or (N,3) arrays."""
    v = np.asarray(v, dtype=np.float64)
    if v.ndim == 1:
        mag = np.linalg.norm(v)
        if mag < 1e-15:
            raise ValueError("Cannot normalize a near-zero vector.")
        return v / mag
    elif v.ndim == 2:
        mag = np.linalg.norm(v, axis=1, keepdims=True)
        if np.any(mag < 1e-15):
            raise ValueError("Cannot normalize a near-zero vector.")
        return v / mag
    else:
        raise ValueError(f"Expected 1-D or 2-D array, got {v.ndim}-D.")


def clamp_unit(x):
    """Clip a computed cosine/sine into [−1, 1] before acos/asin."""
    if np.ndim(x) == 0:
        return max(-1.0, min(float(x), 1.0))
    return np.clip(x, -1.0, 1.0)


def wrap_two_pi(a):
    """Map an angle (or array of angles) into [0, 2π)."""
    if np.ndim(a) == 0:
        a = float(a)
        while a < 0.0:
            a += TWO_PI
        while a >= TWO_PI:
            a -= TWO_PI
        return a
    a = np.mod(a, TWO_PI)
    # np.mod can return exactly 2π for tiny negative inputs
    return np.where(a >= TWO_PI, 0.0, a)


def safe_atan2(y, x):
    """atan2 with the (0, 0) direction defined as bearing 0."""
    if np.ndim(y) == 0 and np.ndim(x) == 0:
        if x == 0 and y == 0:
            return 0.0
        return math.atan2(y, x)
    y = np.asarray(y, dtype=np.float64)
    x = np.asarray(x, dtype=np.float64)
    degenerate = (x == 0) & (y == 0)
    return np.where(degenerate, 0.0, np.arctan2(y, x))


# ── Spherical ↔ Rectangular ─────────────────────────────────────────────────

def radec_to_rect(ra, dec) -> NDArray:
    """Unit vector(s) for spherical angles.

    Parameters
    ----------
    ra : float or (N,) array — first angle (RA, λ or Az) [rad]
    dec : float or (N,) array — second angle (Dec, β or Alt) [rad]

    Returns
    -------
    v : (3,) or (N,3) ndarray — ``(cos ra cos dec, sin ra cos dec, sin dec)``
    """
    ra = np.asarray(ra, dtype=np.float64)
    dec = np.asarray(dec, dtype=np.float64)
    cosde = np.cos(dec)
    v = np.stack([np.cos(ra) * cosde, np.sin(ra) * cosde, np.sin(dec)], axis=-1)
    return v


def rect_to_radec(v: NDArray):
    """Spherical angles of rectangular vector(s).

    The z-component is clamped before ``arcsin``; the first angle is
    returned in [0, 2π) and is 0 for a vector along ±z.

    Returns
    -------
    ra, dec : float or (N,) arrays [rad]
    """
    v = np.asarray(v, dtype=np.float64)
    if v.shape[-1] != 3:
        raise ValueError(f"Expected (3,) or (N,3) array, got shape {v.shape}")
    if v.ndim == 1:
        dec = math.asin(clamp_unit(v[2]))
        ra = wrap_two_pi(safe_atan2(float(v[1]), float(v[0])))
        return ra, dec
    dec = np.arcsin(np.clip(v[:, 2], -1.0, 1.0))
    ra = wrap_two_pi(safe_atan2(v[:, 1], v[:, 0]))
    return ra, dec


def separation(ra1, dec1, ra2, dec2):
    """Great-circle separation between two directions [rad, 0..π]."""
    c = (np.sin(dec1) * np.sin(dec2)
         + np.cos(dec1) * np.cos(dec2) * np.cos(ra1 - ra2))
    return np.arccos(clamp_unit(c))


# ── Time Utilities ──────────────────────────────────────────────────────────

def julian_date(year: int, month: int, day: int,
                hour: float = 0.0, minute: float = 0.0,
                second: float = 0.0) -> float:
    """Compute Julian Date from calendar date (UTC, Gregorian)."""
    if month <= 2:
        year -= 1
        month += 12
    A = int(year / 100)
    B = 2 - A + int(A / 4)
    JD = (int(365.25 * (year + 4716))
          + int(30.6001 * (month + 1))
          + day + B - 1524.5)
    JD += (hour + minute / 60.0 + second / 3600.0) / 24.0
    return JD


def julian_date_from_datetime(dt: datetime) -> float:
    """Julian Date of an aware (or naive-UTC) datetime."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp() * 1000.0 / MS_PER_DAY + UNIX_EPOCH_JD


def datetime_from_julian_date(jd: float) -> datetime:
    """UTC datetime for a Julian Date."""
    return datetime.fromtimestamp((jd - UNIX_EPOCH_JD) * SECONDS_PER_DAY,
                                  tz=timezone.utc)


def julian_year(jd):
    """Decimal year of a Julian Date (365.25-day years from J2000)."""
    if np.ndim(jd):
        jd = np.asarray(jd, dtype=np.float64)
    return 2000.0 + (jd - J2000) / JULIAN_YEAR


def mean_sidereal_hours(jd: float, long_deg: float = 0.0) -> float:
    """Local mean sidereal time [hours, 0..24) at a Julian Date.

    The date is split into the preceding 0h UT and the UT hours of the
    day; Greenwich mean sidereal time at 0h comes from the polynomial of
    *Practical Astronomy with your Calculator* and is advanced at the
    sidereal rate.

    Parameters
    ----------
    jd : float — Julian Date (UT)
    long_deg : float — observer longitude [deg], east positive
    """
    jd0 = math.floor(jd - 0.5) + 0.5
    ut = (jd - jd0) * 24.0

    t = (jd0 - J2000) / JULIAN_CENTURY
    gst = 6.697374558 + t * (2400.0513369072 +
                             t * (0.0000258622 + t / 580650000.0))
    gst = math.fmod(gst, 24.0)
    gst += ut * SIDEREAL_RATE

    lst = gst + long_deg / 15.0
    while lst >= 24.0:
        lst -= 24.0
    while lst < 0.0:
        lst += 24.0
    return lst


# ── Angle Formatting ────────────────────────────────────────────────────────
#  Plain ASCII markers; no localisation.

def format_ra_hm(ra: float) -> str:
    """Right ascension as ``"#h #.#m"``."""
    d = ra * 12.0 / math.pi
    while d < 0:
        d += 24
    while d >= 24:
        d -= 24

    hr = int(math.floor(d))
    d = (d - hr) * 60
    mn = int(math.floor(d))
    tn = _round_half_up((d - mn) * 10)
    if tn == 10:
        tn = 0
        mn += 1
        if mn == 60:
            mn = 0
            hr += 1
            if hr == 24:
                hr = 0
    return f"{hr}h {mn}.{tn}m"


def format_ra_hms(ra: float) -> str:
    """Right ascension as ``"#h #m #.#s"``."""
    d = ra * 12.0 / math.pi
    while d < 0:
        d += 24
    while d >= 24:
        d -= 24

    hr = int(math.floor(d))
    d = (d - hr) * 60
    mn = int(math.floor(d))
    d = (d - mn) * 60
    sc = int(math.floor(d))
    tn = _round_half_up((d - sc) * 10)
    if tn == 10:
        tn = 0
        sc += 1
        if sc == 60:
            sc = 0
            mn += 1
            if mn == 60:
                mn = 0
                hr += 1
                if hr == 24:
                    hr = 0
    return f"{hr}h {mn}m {sc}.{tn}s"


def _fold_degrees(rad: float, offset: bool):
    deg = rad * R2D
    if deg > 400 or deg < -400:
        return None
    while deg > 180:
        deg -= 360
    while deg <= -180:
        deg += 360
    if offset and deg < 0:
        deg += 360
    return deg


def format_dm(rad: float, offset: bool = False) -> str:
    """Angle as ``"[-]#d #m"``.

    Parameters
    ----------
    rad : float — angle [rad]
    offset : bool — False → −180..180, True → 0..360
    """
    deg = _fold_degrees(rad, offset)
    if deg is None:
        return ""
    sign = ""
    if deg < 0:
        deg = -deg
        sign = "-"

    dg = int(math.floor(deg))
    mn = _round_half_up((deg - dg) * 60)
    if mn == 60:
        mn = 0
        dg += 1
    if dg == 0 and mn == 0:
        sign = ""
    return f"{sign}{dg}d {mn}m"


def format_dms(rad: float, offset: bool = False) -> str:
    """Angle as ``"[-]#d #m #s"`` (see :func:`format_dm`)."""
    deg = _fold_degrees(rad, offset)
    if deg is None:
        return ""
    sign = ""
    if deg < 0:
        deg = -deg
        sign = "-"

    dg = int(math.floor(deg))
    deg = (deg - dg) * 60
    mn = int(math.floor(deg))
    sc = _round_half_up((deg - mn) * 60)
    if sc == 60:
        sc = 0
        mn += 1
        if mn == 60:
            mn = 0
            dg += 1
    if dg == 0 and mn == 0 and sc == 0:
        sign = ""
    return f"{sign}{dg}d {mn}m {sc}s"


def _round_half_up(x: float) -> int:
    # Python's round() is banker's rounding
    return int(math.floor(x + 0.5))
