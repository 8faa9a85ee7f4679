"""
skyproj — Sky-Map Projection Core
==================================

A pure-NumPy library that maps celestial coordinates onto a planar sky
chart and back, for a planetarium-style viewer.

A mean J2000 unit vector reaches the screen through one composed
rotation::

    J2000 (RA, Dec)  →  Precession  →  Nutation      (apparent of date)
                     →  LST · Latitude                (horizontal)
                     →  Azimuth · Altitude · Field    (view frame)
                     →  azimuthal-equidistant         (pixels)

Coordinate Systems
------------------

**Equatorial (RA, Dec)**
  - x: vernal equinox, z: celestial pole, RA grows x → y.
  - Mean J2000 for catalogs; apparent of date after precession/nutation.

**Horizontal (Az, Alt)**
  - Az measured from north through east, opposite handedness to RA.

**View frame**
  - z: line of sight (away from the observer), x: screen up,
    y: screen right.

Render passes
-------------
A :class:`SimClock` and a :class:`Rotation` are live, mutable state.  A
render pass freezes both into a :class:`MapFrame` and only reads that,
polling a :class:`CancelToken` between grid lines and catalog chunks.
"""

from .utils import (
    TWO_PI, HALF_PI, D2R, R2D, H2R, S2R,
    J2000, JULIAN_CENTURY, JULIAN_YEAR,
    normalize, radec_to_rect, rect_to_radec, separation,
    julian_date, julian_date_from_datetime, datetime_from_julian_date,
    mean_sidereal_hours,
    format_ra_hm, format_ra_hms, format_dm, format_dms,
)

from .matrix import Matrix3x1, Matrix3x3

from .sphere import SphereCoords

from .deltat import (
    DeltaTTable, build_delta_t_table, delta_t_table,
    calc_delta_t, julian_ephemeris_day,
)

from .nutate import Nutation, mean_obliquity, ABERRATION_K

from .rotation import (
    DisplayMode, Rotation, RotationState,
    precession_matrix, lst_matrix, lat_matrix,
    az_matrix, alt_matrix, fld_matrix,
)

from .cancel import CancelToken, CancelledError

from .clock import SimClock, TimeSnapshot

from .projection import (
    IN_WINDOW, BEYOND_EDGE, BEYOND_HORIZON,
    InputRep, Projected, project,
    rd2xyhit, rect2xyhit, rd2xydist, aa2xydist,
    xy2rd, xy2rd_arrays, xy2aa, xy2aa_arrays,
)

from .frame import MapFrame, ViewSettings

from .grid import (
    Polyline, LabelSpot, GridTrace,
    trace_radec_grid, trace_azalt_grid, trace_ecliptic, trace_horizon,
    score_midpoint, select_label,
)

from .catalog import StarCatalog, CatalogProjection, project_catalog, apparent_place

__version__ = "0.1.0"
__all__ = [
    # ── Constants ──
    "TWO_PI", "HALF_PI", "D2R", "R2D", "H2R", "S2R",
    "J2000", "JULIAN_CENTURY", "JULIAN_YEAR", "ABERRATION_K",
    # ── Utilities ──
    "normalize", "radec_to_rect", "rect_to_radec", "separation",
    "julian_date", "julian_date_from_datetime", "datetime_from_julian_date",
    "mean_sidereal_hours",
    "format_ra_hm", "format_ra_hms", "format_dm", "format_dms",
    # ── Matrix values ──
    "Matrix3x1", "Matrix3x3", "SphereCoords",
    # ── Time scales ──
    "DeltaTTable", "build_delta_t_table", "delta_t_table",
    "calc_delta_t", "julian_ephemeris_day",
    "SimClock", "TimeSnapshot",
    # ── Nutation & rotation ──
    "Nutation", "mean_obliquity",
    "DisplayMode", "Rotation", "RotationState",
    "precession_matrix", "lst_matrix", "lat_matrix",
    "az_matrix", "alt_matrix", "fld_matrix",
    # ── Projection ──
    "IN_WINDOW", "BEYOND_EDGE", "BEYOND_HORIZON",
    "InputRep", "Projected", "project",
    "rd2xyhit", "rect2xyhit", "rd2xydist", "aa2xydist",
    "xy2rd", "xy2rd_arrays", "xy2aa", "xy2aa_arrays",
    # ── Render pass ──
    "MapFrame", "ViewSettings", "CancelToken", "CancelledError",
    # ── Grids & catalog ──
    "Polyline", "LabelSpot", "GridTrace",
    "trace_radec_grid", "trace_azalt_grid", "trace_ecliptic", "trace_horizon",
    "score_midpoint", "select_label",
    "StarCatalog", "CatalogProjection", "project_catalog", "apparent_place",
]
