"""
skyproj.catalog — Batch Catalog Projection
===========================================

Projects a large star list in chunks through the precomputed-unit-vector
path of :func:`skyproj.projection.rect2xyhit`, polling the cancel token
between chunks.  Stars are held brightest first, so a magnitude limit
ends the pass early.
"""

import logging
from dataclasses import dataclass
from typing import NamedTuple

import numpy as np
from numpy.typing import NDArray

from . import config
from .cancel import CancelToken, note_cancelled
from .projection import IN_WINDOW, rect2xyhit
from .utils import radec_to_rect

logger = logging.getLogger(__name__)


def _readonly(a) -> NDArray:
    a = np.array(a, dtype=np.float64)
    a.flags.writeable = False
    return a


@dataclass(frozen=True)
class StarCatalog:
    """Mean J2000 star positions sorted by magnitude (brightest first).

    Build with :meth:`from_radec`; all arrays are read-only.

    Attributes
    ----------
    ra, dec : (N,) arrays [rad]
    mag : (N,) array — visual magnitude
    rect : (N,3) array — unit vectors of (ra, dec)
    order : (N,) int array — input index of each sorted entry
    """
    ra: NDArray
    dec: NDArray
    mag: NDArray
    rect: NDArray
    order: NDArray

    @classmethod
    def from_radec(cls, ra, dec, mag) -> "StarCatalog":
        ra = np.asarray(ra, dtype=np.float64)
        dec = np.asarray(dec, dtype=np.float64)
        mag = np.asarray(mag, dtype=np.float64)
        if not (ra.ndim == dec.ndim == mag.ndim == 1) or \
                not (ra.shape == dec.shape == mag.shape):
            raise ValueError("ra, dec and mag must be 1-D arrays of equal length")
        order = np.argsort(mag, kind="stable")
        ra, dec, mag = ra[order], dec[order], mag[order]
        rect = radec_to_rect(ra, dec)
        order = np.array(order, dtype=np.int64)
        order.flags.writeable = False
        return cls(ra=_readonly(ra), dec=_readonly(dec), mag=_readonly(mag),
                   rect=_readonly(rect), order=order)

    def __len__(self) -> int:
        return len(self.mag)

    def count_to(self, mag_limit: float | None) -> int:
        """Number of stars at or brighter than ``mag_limit``."""
        if mag_limit is None:
            return len(self)
        return int(np.searchsorted(self.mag, mag_limit, side="right"))


class CatalogProjection(NamedTuple):
    """Stars that landed inside the window.

    ``index`` refers to the catalog's sorted order; ``complete`` is False
    when the pass was cancelled.
    """
    index: NDArray
    x: NDArray
    y: NDArray
    complete: bool


def project_catalog(frame, catalog: StarCatalog, token: CancelToken | None = None,
                    *, mag_limit: float | None = None,
                    poll_every: int | None = None) -> CatalogProjection:
    """Project every star down to ``mag_limit`` and keep those in the window.

    Parameters
    ----------
    frame : MapFrame
    catalog : StarCatalog
    token : CancelToken — polled before each chunk
    mag_limit : float or None — faintest magnitude drawn
    poll_every : int or None — chunk size (default ``SKYPROJ_CANCEL_POLL_EVERY``)
    """
    token = token or CancelToken.never()
    if poll_every is None:
        poll_every = config.get_cancel_poll_every()
    if poll_every <= 0:
        raise ValueError(f"poll_every must be positive, got {poll_every}")

    n = catalog.count_to(mag_limit)
    idx_parts, x_parts, y_parts = [], [], []
    complete = True
    for start in range(0, n, poll_every):
        if not token.still_drawing:
            complete = False
            note_cancelled("catalog", start)
            break
        stop = min(start + poll_every, n)
        x, y, hit = rect2xyhit(frame, catalog.rect[start:stop])
        keep = hit == IN_WINDOW
        idx_parts.append(np.flatnonzero(keep) + start)
        x_parts.append(x[keep])
        y_parts.append(y[keep])

    if idx_parts:
        index = np.concatenate(idx_parts)
        xs = np.concatenate(x_parts)
        ys = np.concatenate(y_parts)
    else:
        index = np.empty(0, dtype=np.int64)
        xs = np.empty(0)
        ys = np.empty(0)
    logger.debug("Projected %d of %d catalog stars", len(index), n)
    return CatalogProjection(index, xs, ys, complete)


def apparent_place(catalog: StarCatalog, rotation):
    """Apparent (RA, Dec) of date of every catalog star.

    ``rotation`` is a :class:`~skyproj.rotation.Rotation` or
    :class:`~skyproj.rotation.RotationState` after ``set_jday``/``recalc``.
    """
    if len(catalog) == 0:
        return np.empty(0), np.empty(0)
    return rotation.precess_nutate_arrays(catalog.ra, catalog.dec)
