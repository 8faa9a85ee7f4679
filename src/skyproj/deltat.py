"""
skyproj.deltat — ΔT (TT − UT)
==============================

ΔT in seconds for a Julian Day.

Methods
-------
- **1620 – 2014**: yearly table (centiseconds) adjusted for a lunar
  acceleration of n′ = −25.7376″/cy², with Bessel interpolation using up
  to 4th differences.  Linear in the first and last interval, quadratic
  in the next ones in.
- **after 2014**: Chapront, Chapront-Touzé & Francou (1997) quadratic,
  blended into the last table value up to year 2100.
- **948 – 1620**: JPL Horizons quadratic (Stephenson & Houlden 1986),
  blended into the first table value over the last 20 years.
- **before 948**: Chapront et al. quadratic with its constant term changed
  to 2178.45936 so that it meets the previous formula at 948.

The table and its interpolation coefficients are built once by
:func:`build_delta_t_table` and shared read-only through
:func:`delta_t_table`.

Bessel's formula
----------------
For year ``x2 + u`` (0 ≤ u < 1) with differences ``d1..d4``::

    y = y2 + u d1[2] + u(u−1)(d2[1]+d2[2])/4 + u(u−1)(u−½) d3[1]/6
           + u(u+1)(u−1)(u−2)(d4[0]+d4[1])/48

which is stored expanded as a quartic in u, so ``y(0) = y2`` and
``y(1) = y3`` exactly.

Reference
---------
Meeus, J. (1998). *Astronomical Algorithms*, 2nd ed., ch. 10.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache

import numpy as np
from numpy.typing import NDArray

from . import config
from .utils import J2000, JULIAN_YEAR, SECONDS_PER_DAY

logger = logging.getLogger(__name__)

YSTART = 1620

# Centiseconds at the start of each year, 1620 onward
_RAW_DT = (
    # 1620 - 1699
    12400, 11900, 11500, 11000, 10600, 10200,  9800,  9500,  9100,  8800,
     8500,  8200,  7900,  7700,  7400,  7200,  7000,  6700,  6500,  6300,
     6200,  6000,  5800,  5700,  5500,  5400,  5300,  5100,  5000,  4900,
     4800,  4700,  4600,  4500,  4400,  4300,  4200,  4100,  4000,  3800,
     3700,  3600,  3500,  3400,  3300,  3200,  3100,  3000,  2800,  2700,
     2600,  2500,  2400,  2300,  2200,  2100,  2000,  1900,  1800,  1700,
     1600,  1500,  1400,  1400,  1300,  1200,  1200,  1100,  1100,  1000,
     1000,  1000,   900,   900,   900,   900,   900,   900,   900,   900,
    # 1700 - 1799
      900,   900,   900,   900,   900,   900,   900,   900,  1000,  1000,
     1000,  1000,  1000,  1000,  1000,  1000,  1000,  1100,  1100,  1100,
     1100,  1100,  1100,  1100,  1100,  1100,  1100,  1100,  1100,  1100,
     1100,  1100,  1100,  1100,  1200,  1200,  1200,  1200,  1200,  1200,
     1200,  1200,  1200,  1200,  1300,  1300,  1300,  1300,  1300,  1300,
     1300,  1400,  1400,  1400,  1400,  1400,  1400,  1400,  1500,  1500,
     1500,  1500,  1500,  1500,  1500,  1600,  1600,  1600,  1600,  1600,
     1600,  1600,  1600,  1600,  1600,  1700,  1700,  1700,  1700,  1700,
     1700,  1700,  1700,  1700,  1700,  1700,  1700,  1700,  1700,  1700,
     1700,  1700,  1600,  1600,  1600,  1600,  1500,  1500,  1400,  1400,
    # 1800 - 1899
     1370,  1340,  1310,  1290,  1270,  1260,  1250,  1250,  1250,  1250,
     1250,  1250,  1250,  1250,  1250,  1250,  1250,  1240,  1230,  1220,
     1200,  1170,  1140,  1110,  1060,  1020,   960,   910,   860,   800,
      750,   700,   660,   630,   600,   580,   570,   560,   560,   560,
      570,   580,   590,   610,   620,   630,   650,   660,   680,   690,
      710,   720,   730,   740,   750,   760,   770,   770,   780,   780,
      788,   782,   754,   697,   640,   602,   541,   410,   292,   182,
      161,    10,  -102,  -128,  -269,  -324,  -364,  -454,  -471,  -511,
     -540,  -542,  -520,  -546,  -546,  -579,  -563,  -564,  -580,  -566,
     -587,  -601,  -619,  -664,  -644,  -647,  -609,  -576,  -466,  -374,
    # 1900 - 1999
     -272,  -154,    -2,   124,   264,   386,   537,   614,   775,   913,
     1046,  1153,  1336,  1465,  1601,  1720,  1824,  1906,  2025,  2095,
     2116,  2225,  2241,  2303,  2349,  2362,  2386,  2449,  2434,  2408,
     2402,  2400,  2387,  2395,  2386,  2393,  2373,  2392,  2396,  2402,
     2433,  2483,  2530,  2570,  2624,  2677,  2728,  2778,  2825,  2871,
     2915,  2957,  2997,  3036,  3072,  3107,  3135,  3168,  3218,  3268,
     3315,  3359,  3400,  3447,  3503,  3573,  3654,  3743,  3829,  3920,
     4018,  4117,  4223,  4337,  4449,  4548,  4646,  4752,  4853,  4959,
     5054,  5138,  5217,  5296,  5379,  5434,  5487,  5532,  5582,  5630,
     5686,  5757,  5831,  5912,  5998,  6078,  6163,  6229,  6297,  6347,
    # 2000 - 2014 (2010 - 2014 are guesses)
     6383,  6409,  6430,  6447,  6457,  6469,  6485,  6515,  6546,  6578,
     6607,  6632,  6700,  6840,  7000,
)

YSTOP = YSTART + len(_RAW_DT) - 1        # 2014

# Lunar acceleration correction for years before 1955.5:
#   dt_new = dt_old − 91.072 (n′ + 26.0) u²,  u = (year − 1955.5)/100
# with n′ = −25.7376″/cy²  →  coefficient 23.8973
LUNAR_ACCEL_COEFF = 23.8973
LUNAR_ACCEL_LAST_YEAR = 1955


# ════════════════════════════════════════════════════════════════════════════
#  Table
# ════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DeltaTTable:
    """Adjusted ΔT table and its interpolation polynomial coefficients.

    Attributes
    ----------
    ystart, ystop : int — first and last tabulated year
    dt : (L,) int array — centiseconds at the start of each year
    c1, c2, c3, c4 : (L−1,) float arrays — coefficients of u, u², u³, u⁴
        for the interval starting at each year
    """
    ystart: int
    ystop: int
    dt: NDArray
    c1: NDArray
    c2: NDArray
    c3: NDArray
    c4: NDArray

    @property
    def first_seconds(self) -> float:
        return self.dt[0] / 100.0

    @property
    def last_seconds(self) -> float:
        return self.dt[-1] / 100.0

    def interpolate(self, year):
        """Centisecond value(s) at year(s) inside [ystart, ystop)."""
        year = np.asarray(year, dtype=np.float64)
        iy = np.floor(year)
        x = (iy - self.ystart).astype(np.intp)
        u = year - iy
        y = self.dt[x] + u * (self.c1[x] + u * (self.c2[x] +
                              u * (self.c3[x] + u * self.c4[x])))
        return float(y) if y.ndim == 0 else y


def _readonly(values, dtype) -> NDArray:
    a = np.array(values, dtype=dtype)
    a.flags.writeable = False
    return a


def build_delta_t_table() -> DeltaTTable:
    """Build the adjusted table and Bessel coefficients.

    The lunar-acceleration adjustment is applied before the differences
    are taken, and each adjusted value is truncated toward zero to whole
    centiseconds.
    """
    dt = list(_RAW_DT)
    n = len(dt)

    for i in range(LUNAR_ACCEL_LAST_YEAR - YSTART + 1):
        u = (YSTART + i - 1955.5) / 100
        dt[i] = int(dt[i] - LUNAR_ACCEL_COEFF * u * u)

    d1 = [0.0] * (n - 1)
    d2 = [0.0] * (n - 1)
    d3 = [0.0] * (n - 1)
    d4 = [0.0] * (n - 1)
    for i in range(n - 1):
        d1[i] = float(dt[i + 1] - dt[i])
    for i in range(n - 2):
        d2[i] = d1[i + 1] - d1[i]
    for i in range(n - 3):
        d3[i] = d2[i + 1] - d2[i]
    for i in range(n - 4):
        d4[i] = d3[i + 1] - d3[i]

    # Linear in the last interval
    d2[n - 2] = d3[n - 2] = d4[n - 2] = 0.0

    # Quadratic next to the end
    d2[n - 3] = (d2[n - 3] + d2[n - 4]) / 4
    d1[n - 3] -= d2[n - 3]
    d4[n - 3] = d3[n - 3] = 0.0

    # 4th order in the middle; descending so [i-1], [i-2] are still raw
    for i in range(n - 4, 1, -1):
        d4[i] = d4[i - 1] + d4[i - 2]
        d3[i] = d3[i - 1]
        d2[i] = d2[i] + d2[i - 1]
        d1[i] = d1[i] - d2[i] / 4 + d3[i] / 12 + d4[i] / 24
        d2[i] = d2[i] / 4 - d3[i] / 4 - d4[i] / 48
        d3[i] = d3[i] / 6 - d4[i] / 24
        d4[i] = d4[i] / 48

    # Quadratic next to the beginning
    d2[1] = (d2[1] + d2[0]) / 4
    d1[1] -= d2[1]
    d4[1] = d3[1] = 0.0

    # Linear in the first interval
    d2[0] = d3[0] = d4[0] = 0.0

    logger.debug("Built ΔT table: %d rows, %d-%d", n, YSTART, YSTOP)
    return DeltaTTable(
        ystart=YSTART, ystop=YSTOP,
        dt=_readonly(dt, np.int64),
        c1=_readonly(d1, np.float64), c2=_readonly(d2, np.float64),
        c3=_readonly(d3, np.float64), c4=_readonly(d4, np.float64),
    )


@lru_cache(maxsize=None)
def _note_disabled() -> None:
    logger.info("ΔT disabled by SKYPROJ_USE_DELTA_T; TT is taken as UT")


@lru_cache(maxsize=None)
def delta_t_table() -> DeltaTTable:
    """Shared table, built on first use."""
    return build_delta_t_table()


# ════════════════════════════════════════════════════════════════════════════
#  ΔT
# ════════════════════════════════════════════════════════════════════════════

def _after_table(Y, table: DeltaTTable):
    u = (Y - 2000) / 100.0
    d = 102 + u * (102 + u * 25.3)
    # Blend into the table end up to 2100
    u = (table.ystop - 2000) / 100.0
    blend = ((Y - 2100) / (table.ystop - 2100)) * \
            (table.last_seconds - (102 + u * (102 + u * 25.3)))
    return np.where(Y < 2100, d + blend, d)


def _before_948(Y):
    u = (Y - 2000) / 100.0
    return 2178.45936 + u * (497 + u * 44.1)


def _before_table(Y, table: DeltaTTable):
    u = (Y - 2000) / 100.0
    d = 50.6 + u * (67.5 + u * 22.5)
    # Blend into the table start over 20 years
    u = (table.ystart - 2000) / 100.0
    blend = ((Y - table.ystart + 20) / 20) * \
            (table.first_seconds - (50.6 + u * (67.5 + u * 22.5)))
    return np.where(Y > table.ystart - 20, d + blend, d)


def _delta_t_years(years: NDArray, table: DeltaTTable) -> NDArray:
    """ΔT [s] for an array of Julian years."""
    after = years >= table.ystop
    early = years < 948
    before = ~after & ~early & (years < table.ystart)
    inside = ~(after | early | before)

    out = np.empty_like(years)
    out[after] = _after_table(years[after], table)
    out[early] = _before_948(years[early])
    out[before] = _before_table(years[before], table)
    out[inside] = table.interpolate(years[inside]) * 0.01
    return out


def calc_delta_t(jd, table: DeltaTTable | None = None,
                 enabled: bool | None = None):
    """ΔT = TT − UT [s] at a Julian Day.

    Parameters
    ----------
    jd : float or array — Julian Day (UT)
    table : DeltaTTable or None — defaults to the shared table
    enabled : bool or None — False returns 0; None reads
        ``SKYPROJ_USE_DELTA_T`` (see :mod:`skyproj.config`)

    Returns
    -------
    dt : float, or array of jd's shape [s]
    """
    if enabled is None:
        enabled = config.use_delta_t()
        if not enabled:
            _note_disabled()
    if table is None:
        table = delta_t_table()

    if np.ndim(jd) == 0:
        if not enabled:
            return 0.0
        # Julian years; the 3 day / 400 yr calendar mismatch is irrelevant
        Y = 2000 + (float(jd) - J2000) / JULIAN_YEAR
        return float(_delta_t_years(np.array([Y]), table)[0])

    jd = np.asarray(jd, dtype=np.float64)
    if not enabled:
        return np.zeros_like(jd)
    years = 2000 + (jd - J2000) / JULIAN_YEAR
    return _delta_t_years(years.ravel(), table).reshape(years.shape)


def julian_ephemeris_day(jd, table: DeltaTTable | None = None,
                         enabled: bool | None = None):
    """JDE = JD + ΔT/86400."""
    return jd + calc_delta_t(jd, table, enabled) / SECONDS_PER_DAY
