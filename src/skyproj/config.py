"""Configuration: ΔT switch, default zoom and cancellation poll interval from environment."""

import os

DEFAULT_USE_DELTA_T = True
DEFAULT_ZOOM = 1.0
DEFAULT_CANCEL_POLL_EVERY = 2048

_FALSE_WORDS = {'0', 'false', 'no', 'off'}


def use_delta_t() -> bool:
    """Return whether ΔT (TT − UT) is applied (SKYPROJ_USE_DELTA_T env var or default).

    Returns:
        False when the variable is one of 0/false/no/off, True otherwise.
    """
    value = os.environ.get('SKYPROJ_USE_DELTA_T', '').strip().lower()
    if not value:
        return DEFAULT_USE_DELTA_T
    return value not in _FALSE_WORDS


def get_default_zoom() -> float:
    """Return the zoom factor used for new view settings (SKYPROJ_DEFAULT_ZOOM or default).

    Raises:
        ValueError: If the variable is set but is not a positive number.
    """
    value = os.environ.get('SKYPROJ_DEFAULT_ZOOM', '').strip()
    if not value:
        return DEFAULT_ZOOM
    zoom = float(value)
    if zoom <= 0:
        raise ValueError(f'SKYPROJ_DEFAULT_ZOOM must be positive, got {value!r}')
    return zoom


def get_cancel_poll_every() -> int:
    """Return the number of catalog points projected between cancellation polls.

    Raises:
        ValueError: If SKYPROJ_CANCEL_POLL_EVERY is set but is not a positive integer.
    """
    value = os.environ.get('SKYPROJ_CANCEL_POLL_EVERY', '').strip()
    if not value:
        return DEFAULT_CANCEL_POLL_EVERY
    every = int(value)
    if every <= 0:
        raise ValueError(f'SKYPROJ_CANCEL_POLL_EVERY must be positive, got {value!r}')
    return every
