"""Shared fixtures for the skyproj test suite."""

import math

import pytest

from skyproj import CancelToken, DisplayMode, MapFrame, Rotation

# 2023-02-24 12:00 TT
JDE_TEST = 2460000.0


def make_rotation(mode=DisplayMode.RA_DEC, jde=JDE_TEST, lst=5.3, lat=40.0,
                  az=1.0, alt=0.7, fld=20.0):
    r = Rotation()
    if jde is not None:
        r.set_jday(jde)
    r.set_lst_hrs(lst)
    r.set_lat_deg(lat)
    r.set_az_rad(az)
    r.set_alt_rad(alt)
    r.set_fld_deg(fld)
    r.recalc(mode)
    return r


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("SKYPROJ_USE_DELTA_T", "SKYPROJ_DEFAULT_ZOOM",
                 "SKYPROJ_CANCEL_POLL_EVERY"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def identity_rotation():
    """LST 0h, latitude 90°, looking straight up, Az/Alt mode, no date."""
    return make_rotation(DisplayMode.AZ_ALT, jde=None, lst=0.0, lat=90.0,
                         az=0.0, alt=math.pi / 2, fld=0.0)


@pytest.fixture
def sky_rotation():
    return make_rotation()


@pytest.fixture
def identity_frame(identity_rotation):
    return MapFrame.from_rotation(identity_rotation, (101, 101), 100.0)


@pytest.fixture
def sky_frame(sky_rotation):
    return MapFrame.from_rotation(sky_rotation, (800, 600), 500.0)


@pytest.fixture
def rotation_factory():
    return make_rotation


class _PollLimitToken(CancelToken):
    """Reports "still drawing" for the first ``limit`` polls only."""

    def __init__(self, limit):
        super().__init__()
        self.limit = limit
        self.polls = 0

    @property
    def still_drawing(self):
        self.polls += 1
        if self.polls > self.limit:
            self.cancel()
        return not self.is_cancelled


@pytest.fixture
def poll_limit_token():
    return _PollLimitToken


@pytest.fixture
def azalt_frame(rotation_factory):
    r = rotation_factory(DisplayMode.AZ_ALT)
    return MapFrame.from_rotation(r, (800, 600), 500.0)
