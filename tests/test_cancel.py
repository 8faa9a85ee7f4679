"""
test_cancel.py — cooperative cancellation token
"""

import logging
import threading

import pytest

from skyproj.cancel import CancelledError, CancelToken, note_cancelled


def test_fresh_token_is_active():
    t = CancelToken.never()
    assert t.still_drawing
    assert not t.is_cancelled
    t.raise_if_cancelled()
    assert repr(t) == "CancelToken(active)"


def test_cancel():
    t = CancelToken()
    t.cancel()
    assert not t.still_drawing
    assert t.is_cancelled
    with pytest.raises(CancelledError):
        t.raise_if_cancelled()
    assert repr(t) == "CancelToken(cancelled)"


def test_cancel_from_other_thread():
    t = CancelToken()
    th = threading.Thread(target=t.cancel)
    th.start()
    th.join()
    assert t.is_cancelled


def test_note_cancelled_logs(caplog):
    with caplog.at_level(logging.INFO, logger="skyproj.cancel"):
        note_cancelled("catalog", 42)
    assert "Cancelled catalog after 42" in caplog.text
