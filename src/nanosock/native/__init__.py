"""Native messaging library implementations."""

import threading

from .. import config
from . import constants
from .base import Native

_BACKEND = config.backend()

if _BACKEND == "nng":
    from .nng import NngNative as _Default
elif _BACKEND == "zmq":
    from .zmq import ZmqNative as _Default
else:
    raise ImportError(f"unknown NANOSOCK_NATIVE backend: {_BACKEND!r}")

_instance = None
_instance_lock = threading.Lock()


def get() -> Native:
    """Return the process-wide instance of the selected native backend."""

    global _instance
    with _instance_lock:
        if _instance is None:
            _instance = _Default()
        return _instance
