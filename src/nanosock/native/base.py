"""Native messaging interface.

This is the (small) contract a native messaging library has to satisfy to sit
underneath :class:`nanosock.Socket`. The calls deliberately mirror the flat C
API of nanomsg: integer descriptors, integer constants from
:mod:`nanosock.native.constants`, a negative return value on failure, and a
thread-local error code that explains the most recent failure.
"""

from __future__ import annotations

import itertools
import struct
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from . import constants


class Native(ABC):
    """Minimal contract for a native messaging library.

    Subclasses keep their library-specific socket objects in the descriptor
    table maintained here, and report failures with :meth:`_fail`.
    """

    name = None

    def __init__(self):
        self._local = threading.local()
        self._sockets: Dict[int, Any] = {}
        self._lock = threading.Lock()
        self._descriptors = itertools.count(0)

    # --- error reporting ---

    def errno(self) -> int:
        """The error code left behind by the last failed call on this thread."""
        return getattr(self._local, "errno", 0)

    def strerror(self, code: int) -> str:
        """Human-readable description of the error *code*."""
        return constants.strerror(code)

    def _fail(self, code: int) -> int:
        self._local.errno = code
        return -1

    # --- descriptor table ---

    def _register(self, handle: Any) -> int:
        with self._lock:
            fd = next(self._descriptors)
            self._sockets[fd] = handle
        return fd

    def _lookup(self, fd: int) -> Optional[Any]:
        with self._lock:
            return self._sockets.get(fd)

    def _unregister(self, fd: int) -> Optional[Any]:
        with self._lock:
            return self._sockets.pop(fd, None)

    # --- payload helpers ---

    @staticmethod
    def _unpack_int(optval: bytes) -> Optional[int]:
        """Decode a scalar option payload; None if it is not a native int."""
        if len(optval) != constants.NN_INT_SIZE:
            return None
        return struct.unpack("=i", optval)[0]

    @staticmethod
    def _pack_int(value: int, optval: bytearray) -> int:
        packed = struct.pack("=i", int(value))
        optval[: len(packed)] = packed
        return len(packed)

    @staticmethod
    def _copy_out(data: bytes, optval: bytearray) -> int:
        count = min(len(data), len(optval))
        optval[:count] = data[:count]
        return count

    # --- the native API ---

    @abstractmethod
    def socket(self, domain: int, protocol: int) -> int:
        """Create a socket, returning its descriptor."""

    @abstractmethod
    def close(self, fd: int) -> int:
        """Close the socket identified by *fd*."""

    @abstractmethod
    def bind(self, fd: int, addr: str) -> int:
        """Add a local endpoint, returning its endpoint identifier."""

    @abstractmethod
    def connect(self, fd: int, addr: str) -> int:
        """Add a remote endpoint, returning its endpoint identifier."""

    @abstractmethod
    def setsockopt(self, fd: int, level: int, option: int, optval: bytes) -> int:
        """Set an option from its encoded payload."""

    @abstractmethod
    def getsockopt(self, fd: int, level: int, option: int, optval: bytearray) -> int:
        """Write an option's encoded payload into *optval*, returning its length."""

    @abstractmethod
    def send(self, fd: int, data: bytes, flags: int) -> int:
        """Send *data*, returning the number of bytes accepted."""

    @abstractmethod
    def recv(self, fd: int, buffer: bytearray, flags: int) -> int:
        """Receive into *buffer*, returning the full size of the message."""

