"""
skyproj.grid — Grid and Reference-Curve Tracing
================================================

Traces coordinate grids and reference curves into pixel-space polylines
for a drawing collaborator.  Nothing here draws; each tracer returns a
:class:`GridTrace` of polylines plus at most one label position per grid
line.

Curves
------
- **RA/Dec grid**: an RA line every hour sampled at 1° of declination,
  and declination circles every 15° from +75° to −75° sampled at
  ``int(15 cos δ + ½)`` points per hour.  Hour lines stop at |δ| = 80°
  unless the hour is a multiple of 3, and at |δ| = 86° unless it is a
  multiple of 6, so the poles stay readable.  Projected without
  precession/nutation.
- **Az/Alt grid**: the same layout with azimuth lines every 15° (caps
  relaxed at multiples of 45° and 90°) and altitude circles.
- **Ecliptic**: the J2000 ecliptic at 1° steps.
- **Horizon**: the altitude-0 circle at 2° steps, plus compass points.

A sample is kept while it lies less than ``GRID_CUTOFF`` (≈95°) from the
view centre; a missed sample splits the line, and only runs of two or
more points become polylines.  The cancel token is polled once per grid
line.

Labels
------
Candidate positions are scored by :func:`score_midpoint`, which favours
points near the middle of the window, and the best one per line is kept
(:func:`select_label`).  Label angles are folded into (−π/2, π/2] so text
never renders upside down.
"""

import math
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from .cancel import CancelToken, note_cancelled
from .projection import aa2xydist, rd2xydist
from .utils import D2R, H2R, HALF_PI, safe_atan2

GRID_CUTOFF = 1.66          # rad, about 95°
ECLIPTIC_CUTOFF = 1.6       # rad, about 91.7°

# Mean obliquity at J2000.0 (23.4392911°)
SIN_E2K = 0.397777156
COS_E2K = 0.917482062

COMPASS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")


@dataclass(frozen=True)
class Polyline:
    """Connected pixel points, (N,2) array of (x, y), N ≥ 2."""
    points: NDArray

    def __len__(self) -> int:
        return len(self.points)


@dataclass(frozen=True)
class LabelSpot:
    """Where and at what angle to draw a grid line's label."""
    text: str
    x: float
    y: float
    angle: float
    score: float


@dataclass
class GridTrace:
    polylines: list = field(default_factory=list)
    labels: list = field(default_factory=list)
    complete: bool = True


# ════════════════════════════════════════════════════════════════════════════
#  Label placement
# ════════════════════════════════════════════════════════════════════════════

def score_midpoint(frame, x: float, y: float) -> float:
    """``x(r−x)·y(b−y)`` inside the window (r, b = last column, row), else 0."""
    r = frame.width - 1
    b = frame.height - 1
    if x < 0 or x > r or y < 0 or y > b:
        return 0.0
    return float((x * (r - x)) * (y * (b - y)))


def fold_angle(angle: float) -> float:
    """Fold a text angle into (−π/2, π/2]."""
    if angle <= -HALF_PI:
        return angle + math.pi
    if angle > HALF_PI:
        return angle - math.pi
    return angle


def select_label(spots: list) -> LabelSpot | None:
    """Highest-scoring spot, or None when no score is positive.

    Ties go to the earliest candidate.
    """
    best = None
    top = 0.0
    for spot in spots:
        if top < spot.score:
            top = spot.score
            best = spot
    if best is None:
        return None
    return LabelSpot(best.text, best.x, best.y, fold_angle(best.angle), best.score)


# ════════════════════════════════════════════════════════════════════════════
#  Run splitting
# ════════════════════════════════════════════════════════════════════════════

def _runs(keep: NDArray):
    """(start, stop) of each run of consecutive True values."""
    k = np.concatenate([[False], np.asarray(keep, dtype=bool), [False]])
    edges = np.flatnonzero(k[1:] != k[:-1])
    return list(zip(edges[0::2], edges[1::2]))


def _trace_line(frame, trace: GridTrace, text: str, x, y, keep,
                mid_flags=None, point_flags=None) -> None:
    """Append the polylines of one sampled grid line and its label.

    ``mid_flags[i]`` marks a candidate at the midpoint of segment
    (i−1, i); ``point_flags[i]`` a candidate at point i itself.  Both need
    point i−1 in the same run.
    """
    spots = []
    for start, stop in _runs(keep):
        if stop - start > 1:
            trace.polylines.append(
                Polyline(np.column_stack([x[start:stop], y[start:stop]])))
        for i in range(start + 1, stop):
            if point_flags is not None and point_flags[i]:
                px, py = float(x[i]), float(y[i])
            elif mid_flags is not None and mid_flags[i]:
                px, py = float(x[i] + x[i - 1]) / 2, float(y[i] + y[i - 1]) / 2
            else:
                continue
            angle = math.atan2(y[i] - y[i - 1], x[i] - x[i - 1])
            spots.append(LabelSpot(text, px, py, angle,
                                   score_midpoint(frame, px, py)))
    label = select_label(spots)
    if label is not None:
        trace.labels.append(label)


def _meridian_samples(line_index: int, caps: tuple[int, int]):
    """Degrees 90 → −90 along one meridian, minus polar caps.

    ``caps`` are the multiples (3, 6 for hours; 45, 90 for degrees) that
    are allowed past 80° and past 86°.
    """
    j = np.arange(90, -91, -1)
    if line_index % caps[0] != 0:
        j = j[np.abs(j) <= 80]
    if line_index % caps[1] != 0:
        j = j[np.abs(j) <= 86]
    # Segments ending at 7 or −8 mod 15 (sign of the dividend) get label spots
    rem = np.fmod(j, 15)
    return j, (rem == 7) | (rem == -8)


def _circle_samples(segs: int, step: float, n_steps: int):
    """Sample angles around a full circle and the sub-step index of each."""
    inc = step / segs
    j = np.repeat(np.arange(n_steps), segs)
    k = np.tile(np.arange(segs), n_steps)
    a = j * step + k * inc
    a = np.append(a, n_steps * step)
    k = np.append(k, 0)
    return a, k


def _circle_flags(k: NDArray, segs: int):
    point_flags = 2 * k == segs
    mid_flags = 2 * k == segs + 1
    return mid_flags, point_flags


# ════════════════════════════════════════════════════════════════════════════
#  Tracers
# ════════════════════════════════════════════════════════════════════════════

def trace_radec_grid(frame, token: CancelToken | None = None) -> GridTrace:
    """RA hour lines and declination circles (labels: hours, degrees)."""
    token = token or CancelToken.never()
    trace = GridTrace()

    for i in range(24):
        if not token.still_drawing:
            trace.complete = False
            note_cancelled("RA/Dec grid", len(trace.polylines))
            return trace
        j, mid = _meridian_samples(i, (3, 6))
        x, y, dist = rd2xydist(frame, np.full(j.shape, i * H2R), j * D2R,
                               precess=False)
        _trace_line(frame, trace, str(i), x, y, dist < GRID_CUTOFF, mid_flags=mid)

    for i in range(75, -76, -15):
        if not token.still_drawing:
            trace.complete = False
            note_cancelled("RA/Dec grid", len(trace.polylines))
            return trace
        decl = i * D2R
        segs = int(15 * math.cos(decl) + 0.5)
        ra, k = _circle_samples(segs, H2R, 24)
        x, y, dist = rd2xydist(frame, ra, np.full(ra.shape, decl), precess=False)
        mid, pt = _circle_flags(k, segs)
        _trace_line(frame, trace, str(i), x, y, dist < GRID_CUTOFF,
                    mid_flags=mid, point_flags=pt)
    return trace


def trace_azalt_grid(frame, token: CancelToken | None = None) -> GridTrace:
    """Azimuth lines every 15° and altitude circles (labels in degrees)."""
    token = token or CancelToken.never()
    trace = GridTrace()

    for i in range(0, 360, 15):
        if not token.still_drawing:
            trace.complete = False
            note_cancelled("Az/Alt grid", len(trace.polylines))
            return trace
        j, mid = _meridian_samples(i, (45, 90))
        x, y, dist = aa2xydist(frame, np.full(j.shape, i * math.pi / 180), j * D2R)
        _trace_line(frame, trace, str(i), x, y, dist < GRID_CUTOFF, mid_flags=mid)

    for i in range(75, -76, -15):
        if not token.still_drawing:
            trace.complete = False
            note_cancelled("Az/Alt grid", len(trace.polylines))
            return trace
        alt = i * math.pi / 180
        segs = int(15 * math.cos(alt) + 0.5)
        az, k = _circle_samples(segs, 15 * D2R, 24)
        x, y, dist = aa2xydist(frame, az, np.full(az.shape, alt))
        mid, pt = _circle_flags(k, segs)
        _trace_line(frame, trace, str(i), x, y, dist < GRID_CUTOFF,
                    mid_flags=mid, point_flags=pt)
    return trace


def ecliptic_radec(lam):
    """Mean J2000 (RA, Dec) of ecliptic longitudes on the J2000 ecliptic."""
    sinlam = np.sin(lam)
    ra = safe_atan2(sinlam * COS_E2K, np.cos(lam))
    dec = np.arcsin(np.clip(SIN_E2K * sinlam, -1.0, 1.0))
    return ra, dec


def trace_ecliptic(frame, token: CancelToken | None = None) -> GridTrace:
    """The J2000 ecliptic; a segment is kept when either end is near the view."""
    token = token or CancelToken.never()
    trace = GridTrace()
    if not token.still_drawing:
        trace.complete = False
        note_cancelled("ecliptic", 0)
        return trace

    lam = np.arange(361) * math.pi / 180
    ra, dec = ecliptic_radec(lam)
    x, y, dist = rd2xydist(frame, ra, dec)
    near = dist < ECLIPTIC_CUTOFF
    # Segment i joins points i−1 and i
    seg = near[1:] | near[:-1]
    for start, stop in _runs(seg):
        pts = np.column_stack([x[start:stop + 1], y[start:stop + 1]])
        trace.polylines.append(Polyline(pts))
    return trace


def trace_horizon(frame, token: CancelToken | None = None) -> GridTrace:
    """Altitude-0 circle (closed) and the eight compass points as labels."""
    token = token or CancelToken.never()
    trace = GridTrace()
    if not token.still_drawing:
        trace.complete = False
        note_cancelled("horizon", 0)
        return trace

    az = np.arange(0, 361, 2) * D2R
    x, y, _ = aa2xydist(frame, az, np.zeros(az.shape))
    trace.polylines.append(Polyline(np.column_stack([x, y])))

    caz = np.arange(8) * (math.pi / 4)
    cx, cy, cdist = aa2xydist(frame, caz, np.zeros(caz.shape))
    for name, px, py, d in zip(COMPASS, cx, cy, cdist):
        if d < HALF_PI:
            trace.labels.append(LabelSpot(name, float(px), float(py), 0.0,
                                          score_midpoint(frame, px, py)))
    return trace
