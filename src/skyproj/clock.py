"""
skyproj.clock — Simulation Clock
=================================

:class:`SimClock` is the live, mutable time source of a sky view.  While
running it advances at ``time_speed`` × wall-clock time; a timer on another
thread may read or change it at any moment.  A render pass never reads
the live clock directly: it takes one :class:`TimeSnapshot` with
:meth:`SimClock.freeze` and uses only that.

Time is held as UTC milliseconds since the Unix epoch, so

    JD  = ms / 86 400 000 + 2 440 587.5
    JDE = JD + ΔT / 86 400
"""

import threading
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from .deltat import calc_delta_t
from .utils import (
    MS_PER_DAY, SECONDS_PER_DAY, UNIX_EPOCH_JD,
    datetime_from_julian_date, mean_sidereal_hours,
)


@dataclass(frozen=True)
class TimeSnapshot:
    """One consistent reading of a :class:`SimClock`.

    Parameters
    ----------
    jd : float — Julian Day (UT)
    jde : float — Julian Ephemeris Day (TT)
    lst_hours : float — local mean sidereal time [h, 0..24)
    lat_deg : float — observer latitude [deg]
    long_deg : float — observer longitude [deg], east positive
    delta_t : float — ΔT used for jde [s]
    """
    jd: float
    jde: float
    lst_hours: float
    lat_deg: float
    long_deg: float
    delta_t: float

    @classmethod
    def at(cls, jd: float, long_deg: float = 0.0, lat_deg: float = 90.0,
           use_delta_t: bool | None = None) -> "TimeSnapshot":
        """Snapshot for a fixed Julian Day (no live clock)."""
        dt = calc_delta_t(jd, enabled=use_delta_t)
        return cls(jd=jd, jde=jd + dt / SECONDS_PER_DAY,
                   lst_hours=mean_sidereal_hours(jd, long_deg),
                   lat_deg=lat_deg, long_deg=long_deg, delta_t=dt)

    @property
    def utc(self) -> datetime:
        return datetime_from_julian_date(self.jd)


class SimClock:
    """Live simulation time at an observer location.

    Parameters
    ----------
    long_deg : float — longitude [deg], east positive
    lat_deg : float — latitude [deg]
    start : datetime or None — initial UTC instant (default: now)
    time_speed : int — multiplier applied to elapsed wall time while running
    running : bool — start advancing immediately
    now : callable — wall clock in seconds since the epoch (injectable
        for tests)
    """

    def __init__(self, long_deg: float, lat_deg: float,
                 start: datetime | None = None, time_speed: int = 1,
                 running: bool = True,
                 now: Callable[[], float] = time.time):
        self._lock = threading.Lock()
        self._now = now
        self._long_deg = long_deg
        self._lat_deg = lat_deg
        self._time_speed = time_speed
        self._running = running
        self._wall_ms = self._now_ms()
        if start is None:
            self._ms = self._wall_ms
        else:
            self._ms = _datetime_ms(start)

    def _now_ms(self) -> float:
        return self._now() * 1000.0

    def _advance(self) -> None:
        # Caller holds the lock
        if not self._running:
            return
        wall = self._now_ms()
        self._ms += (wall - self._wall_ms) * self._time_speed
        self._wall_ms = wall

    # ── Running state ──

    @property
    def running(self) -> bool:
        return self._running

    @property
    def time_speed(self) -> int:
        return self._time_speed

    def start(self) -> None:
        with self._lock:
            self._running = True
            self._wall_ms = self._now_ms()

    def stop(self) -> None:
        with self._lock:
            self._advance()
            self._running = False

    def set_time_speed(self, speed: int) -> None:
        with self._lock:
            if speed != self._time_speed:
                self._advance()
                self._time_speed = speed

    # ── Setting the time ──

    def set_datetime(self, when: datetime) -> None:
        """Jump to a UTC instant (naive datetimes are taken as UTC)."""
        with self._lock:
            self._ms = _datetime_ms(when)
            self._wall_ms = self._now_ms()

    def add(self, delta: timedelta) -> None:
        """Step the simulation time forward (or back, if negative)."""
        with self._lock:
            self._advance()
            self._ms += delta / timedelta(milliseconds=1)
            self._wall_ms = self._now_ms()

    def set_location(self, long_deg: float, lat_deg: float) -> None:
        with self._lock:
            self._long_deg = long_deg
            self._lat_deg = lat_deg

    @property
    def long_deg(self) -> float:
        return self._long_deg

    @property
    def lat_deg(self) -> float:
        return self._lat_deg

    # ── Reading ──

    def julian_day(self) -> float:
        with self._lock:
            self._advance()
            return self._ms / MS_PER_DAY + UNIX_EPOCH_JD

    def julian_eph_day(self) -> float:
        jd = self.julian_day()
        return jd + calc_delta_t(jd) / SECONDS_PER_DAY

    def lst_hours(self) -> float:
        with self._lock:
            self._advance()
            jd = self._ms / MS_PER_DAY + UNIX_EPOCH_JD
            long_deg = self._long_deg
        return mean_sidereal_hours(jd, long_deg)

    def utc(self) -> datetime:
        return datetime_from_julian_date(self.julian_day())

    def freeze(self) -> TimeSnapshot:
        """Read time and location once, atomically; the clock keeps running."""
        with self._lock:
            self._advance()
            jd = self._ms / MS_PER_DAY + UNIX_EPOCH_JD
            long_deg, lat_deg = self._long_deg, self._lat_deg
        dt = calc_delta_t(jd)
        return TimeSnapshot(jd=jd, jde=jd + dt / SECONDS_PER_DAY,
                            lst_hours=mean_sidereal_hours(jd, long_deg),
                            lat_deg=lat_deg, long_deg=long_deg, delta_t=dt)


def _datetime_ms(when: datetime) -> float:
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return when.timestamp() * 1000.0
