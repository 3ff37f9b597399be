import sys
import threading

import pytest

import evac
from evac import errors


@pytest.fixture(autouse=True)
def restore_hooks():
    """Put back whatever hooks pytest had installed around each test."""
    saved_sys, saved_thread = sys.excepthook, threading.excepthook
    errors.set_error_hook(None)
    yield
    evac.uninstall()
    errors.set_error_hook(None)
    sys.excepthook, threading.excepthook = saved_sys, saved_thread
