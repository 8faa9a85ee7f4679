"""
skyproj.frame — Render-Pass Frame
==================================

A :class:`MapFrame` is everything one render pass needs, captured by
value at the start of the pass: drawing-area geometry, pixel scale, the
frozen :class:`~skyproj.rotation.RotationState` and the
:class:`~skyproj.clock.TimeSnapshot` it was built from.  A live clock or
rotation advancing on another thread cannot change a frame, and a
concurrent pass (printing, a resized window) simply builds its own.

Geometry
--------
For a ``width × height`` area, pixels run 0..width−1, so the centre is
``midx = (width − 1)/2`` and the edge pixels reach ``maxoffx = midx + ½``
from it (same for y).
"""

import logging
from dataclasses import dataclass, field, replace

from . import config, projection
from .clock import SimClock, TimeSnapshot
from .rotation import DisplayMode, Rotation, RotationState
from .sphere import SphereCoords
from .utils import HALF_PI

logger = logging.getLogger(__name__)


@dataclass
class ViewSettings:
    """User-facing view inputs (what the preferences dialog would hold).

    Parameters
    ----------
    lat_deg : float — observer latitude [deg]
    long_deg : float — observer longitude [deg], east positive
    az_rad : float — view-centre azimuth [rad]
    alt_rad : float — view-centre altitude [rad]
    fld_deg : float — field rotation [deg]
    zoom : float — multiplier on the default pels-per-radian
        (default from ``SKYPROJ_DEFAULT_ZOOM``)
    mode : DisplayMode — RA/Dec or Az/Alt held fixed on screen
    """
    lat_deg: float = 90.0
    long_deg: float = 0.0
    az_rad: float = 0.0
    alt_rad: float = HALF_PI
    fld_deg: float = 0.0
    zoom: float = field(default_factory=config.get_default_zoom)
    mode: DisplayMode = DisplayMode.RA_DEC

    def make_clock(self, **kwargs) -> SimClock:
        """A :class:`SimClock` at this location."""
        return SimClock(self.long_deg, self.lat_deg, **kwargs)


def _check_size(size) -> tuple[int, int]:
    width, height = size
    if width <= 0 or height <= 0:
        raise ValueError(f"Drawing area must be positive, got {width}x{height}")
    return int(width), int(height)


@dataclass(frozen=True)
class MapFrame:
    """Frozen render-pass state.

    Build with :meth:`build` (from settings and a time snapshot) or
    :meth:`from_rotation`.  The projection helpers below delegate to
    :mod:`skyproj.projection`.
    """
    width: int
    height: int
    pels_per_radian: float
    rotation: RotationState
    time: TimeSnapshot | None = None
    midx: float = field(init=False)
    midy: float = field(init=False)
    maxoffx: float = field(init=False)
    maxoffy: float = field(init=False)

    def __post_init__(self):
        _check_size((self.width, self.height))
        if not self.pels_per_radian > 0:
            raise ValueError(f"pels_per_radian must be positive, got {self.pels_per_radian}")
        midx = (self.width - 1) / 2.0
        midy = (self.height - 1) / 2.0
        object.__setattr__(self, "midx", midx)
        object.__setattr__(self, "midy", midy)
        object.__setattr__(self, "maxoffx", midx + 0.5)
        object.__setattr__(self, "maxoffy", midy + 0.5)

    # ── Construction ──

    @classmethod
    def build(cls, settings: ViewSettings, snapshot: TimeSnapshot,
              size: tuple[int, int], default_ppr: float) -> "MapFrame":
        """Compose the rotation for one pass.

        Date, sidereal time and latitude come from ``snapshot`` (so time
        and place are read together); view direction, field rotation,
        zoom and mode from ``settings``.
        """
        width, height = _check_size(size)
        ppr = default_ppr * settings.zoom
        r = Rotation()
        r.set_jday(snapshot.jde)
        r.set_lst_hrs(snapshot.lst_hours)
        r.set_az_rad(settings.az_rad)
        r.set_alt_rad(settings.alt_rad)
        r.set_lat_deg(snapshot.lat_deg)
        r.set_fld_deg(settings.fld_deg)
        r.recalc(settings.mode)
        logger.debug("Frame %dx%d ppr=%.3f mode=%s jde=%.6f",
                     width, height, ppr, settings.mode.value, snapshot.jde)
        return cls(width=width, height=height, pels_per_radian=ppr,
                   rotation=r.snapshot(), time=snapshot)

    @classmethod
    def from_rotation(cls, rotation, size: tuple[int, int], ppr: float) -> "MapFrame":
        """Frame around an existing (recalculated) rotation.

        The view azimuth used by the horizontal helpers is the one the
        rotation was built with.
        """
        if isinstance(rotation, Rotation):
            rotation = rotation.snapshot()
        width, height = _check_size(size)
        return cls(width=width, height=height, pels_per_radian=ppr,
                   rotation=rotation)

    def resized(self, size: tuple[int, int]) -> "MapFrame":
        width, height = _check_size(size)
        return replace(self, width=width, height=height)

    def zoomed(self, ppr: float) -> "MapFrame":
        return replace(self, pels_per_radian=ppr)

    @property
    def mode(self) -> DisplayMode:
        return self.rotation.mode

    @property
    def view_az(self) -> float:
        return self.rotation.az_rad

    # ── Projection ──

    def rd2xyhit(self, ra, dec, precess: bool = True):
        return projection.rd2xyhit(self, ra, dec, precess)

    def rd2xydist(self, ra, dec, precess: bool = True):
        return projection.rd2xydist(self, ra, dec, precess)

    def aa2xydist(self, az, alt):
        return projection.aa2xydist(self, az, alt)

    def xy2rd(self, x, y):
        return projection.xy2rd(self, x, y)

    def xy2aa(self, x, y) -> SphereCoords:
        return projection.xy2aa(self, x, y)

    # ── Rotation ──

    def rd2aa(self, rd: SphereCoords) -> SphereCoords:
        return self.rotation.rd2aa(rd)

    def aa2rd(self, aa: SphereCoords) -> SphereCoords:
        return self.rotation.aa2rd(aa)

    def precess_nutate(self, sc: SphereCoords) -> SphereCoords:
        return self.rotation.precess_nutate(sc)

    def un_precess_nutate(self, sc: SphereCoords) -> SphereCoords:
        return self.rotation.un_precess_nutate(sc)
