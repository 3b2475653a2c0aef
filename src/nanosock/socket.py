"""The socket handle: one owner for one native messaging socket.

A :class:`Socket` requests a descriptor from the native library when it is
created and gives it back exactly once, whether that happens through
:meth:`Socket.close`, the end of a ``with`` block, or garbage collection.
Every native failure that the caller cannot reasonably expect is raised as
:class:`~nanosock.errors.NativeCallFailed`; the two exceptions are
:meth:`Socket.send`, which returns the native result as-is, and a
non-blocking :meth:`Socket.receive`, which reports "nothing yet" as ``b""``.
"""

from __future__ import annotations

import logging
import re
import threading
import time
from dataclasses import dataclass
from typing import Optional, Union

from . import config
from . import native as natives
from . import options
from .errors import check
from .native import constants
from .native.base import Native
from .options import Option
from .protocol import Protocol


logger = logging.getLogger(__name__)

_localhost = re.compile(r"^(\w+://)localhost(?=[:/]|$)")


@dataclass(frozen=True)
class BindTo:
    """Bind the new socket to *uri*.

    A ``localhost`` host is replaced by the ``*`` wildcard, so the same URI
    string can be handed to the :class:`ConnectTo` on the other side. The
    rest of the URI is left alone.
    """

    uri: str

    @property
    def address(self) -> str:
        return _localhost.sub(r"\1*", self.uri, count=1)


@dataclass(frozen=True)
class ConnectTo:
    """Connect the new socket to *uri*.

    *settle* is the number of seconds to pause once connected, giving the
    transport a chance to finish its handshake before the first send. None
    selects :func:`nanosock.config.connect_settle`.
    """

    uri: str
    settle: Optional[float] = None

    @property
    def address(self) -> str:
        return self.uri


Endpoint = Union[BindTo, ConnectTo]


class Socket:
    """A messaging socket speaking one :class:`~nanosock.Protocol`.

    The handle cannot be copied; :meth:`move` hands ownership of the
    descriptor to a new handle and leaves this one closed.

    :ivar protocol: the :class:`~nanosock.Protocol` the socket was created with.
    """

    INVALID_FD = -1

    def __init__(
        self,
        protocol: Protocol,
        endpoint: Optional[Endpoint] = None,
        domain: int = constants.AF_SP,
        *,
        native: Optional[Native] = None,
    ):
        # Set first, so that close() during a failed __init__ is harmless.
        self._fd = self.INVALID_FD
        self._lock = threading.Lock()

        self.protocol = Protocol(protocol)
        self._native = native if native is not None else natives.get()

        fd = self._native.socket(domain, self.protocol.native)
        self._fd = check(self._native, "nn_socket", fd)
        logger.debug("created %s socket %d", self.protocol.name.lower(), self._fd)

        if endpoint is None:
            return

        try:
            self._attach(endpoint)
        except BaseException:
            self.close()
            raise

    def _attach(self, endpoint: Endpoint) -> None:
        if isinstance(endpoint, BindTo):
            self.bind(endpoint.address)
        elif isinstance(endpoint, ConnectTo):
            self.connect(endpoint.address)
            settle = endpoint.settle
            if settle is None:
                settle = config.connect_settle()
            if settle > 0:
                time.sleep(settle)
        else:
            raise TypeError(f"expected BindTo or ConnectTo, not {type(endpoint).__name__}")

    # --- ownership ---

    def __copy__(self):
        raise TypeError("Socket handles cannot be copied; use move()")

    def __deepcopy__(self, memo):
        raise TypeError("Socket handles cannot be copied; use move()")

    def __reduce__(self):
        raise TypeError("Socket handles cannot be pickled")

    def move(self) -> Socket:
        """Return a new handle that owns this socket's descriptor.

        This handle is left closed; closing it afterwards does not touch the
        descriptor now owned by the returned handle.
        """

        other = object.__new__(type(self))
        other._lock = threading.Lock()
        other.protocol = self.protocol
        other._native = self._native

        with self._lock:
            other._fd = self._fd
            self._fd = self.INVALID_FD

        logger.debug("moved socket %d to a new handle", other._fd)
        return other

    @property
    def fd(self) -> int:
        """The native descriptor, or :attr:`INVALID_FD` once closed."""
        return self._fd

    @property
    def closed(self) -> bool:
        return self._fd == self.INVALID_FD

    def close(self) -> None:
        """Close the native descriptor; calling this again does nothing."""

        with self._lock:
            fd = self._fd
            self._fd = self.INVALID_FD

        if fd == self.INVALID_FD:
            return

        if self._native.close(fd) < 0:
            code = self._native.errno()
            logger.warning(
                "closing socket %d failed: errno %d, %s",
                fd,
                code,
                self._native.strerror(code),
            )
        else:
            logger.debug("closed socket %d", fd)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def __del__(self):
        # __init__ may have failed before the lock existed.
        if hasattr(self, "_lock"):
            self.close()

    def __repr__(self):
        protocol = getattr(self, "protocol", None)
        name = protocol.name.lower() if protocol is not None else "?"
        state = "closed" if self.closed else f"fd={self._fd}"
        return f"<Socket {name} {state}>"

    # --- endpoints ---

    def bind(self, uri: str) -> None:
        """Accept connections on the local endpoint *uri*."""
        check(self._native, "nn_bind", self._native.bind(self._fd, uri))
        logger.debug("socket %d bound to %s", self._fd, uri)

    def connect(self, uri: str) -> None:
        """Connect to the remote endpoint *uri*."""
        check(self._native, "nn_connect", self._native.connect(self._fd, uri))
        logger.debug("socket %d connected to %s", self._fd, uri)

    # --- options ---

    def set_option(self, option: Option, value: options.Value) -> None:
        """Set *option* to *value*.

        Integers and booleans are handed over as a native int, strings and
        byte sequences as bytes with an explicit length. Whether the value
        suits the option is for the native library to decide.
        """

        option = Option(option)
        payload = options.encode(value)
        result = self._native.setsockopt(self._fd, option.level, option.option, payload)
        check(self._native, "nn_setsockopt", result)

    def get_option(self, option: Option) -> Union[int, bytes]:
        """Read back the current value of *option*."""

        option = Option(option)
        payload = bytearray(constants.NN_OPTION_MAX)
        result = self._native.getsockopt(self._fd, option.level, option.option, payload)
        size = check(self._native, "nn_getsockopt", result)
        return options.decode(option.shape, bytes(payload[:size]))

    # --- data transfer ---

    def send(self, data, blocking: bool = True) -> int:
        """Send *data* as one message.

        Returns the number of bytes accepted, or the negative native result
        as-is: telling a full queue apart from a fatal error is up to the
        caller.
        """

        if isinstance(data, str):
            raise TypeError('cannot send type str; maybe you left out a ".encode()"?')

        flags = 0 if blocking else constants.NN_DONTWAIT
        result = self._native.send(self._fd, data, flags)
        return check(self._native, "nn_send", result, passthrough=True)

    def receive(self, capacity: int = config.receive_capacity, blocking: bool = True) -> bytes:
        """Receive one message of up to *capacity* bytes.

        A blocking receive raises :class:`~nanosock.errors.NativeCallFailed`
        on failure, including a configured receive timeout expiring. A
        non-blocking receive returns ``b""`` when nothing is waiting. Longer
        messages are truncated to *capacity*.
        """

        if capacity <= 0:
            raise ValueError(f"receive capacity must be positive, not {capacity}")

        buffer = bytearray(capacity)
        flags = 0 if blocking else constants.NN_DONTWAIT
        result = self._native.recv(self._fd, buffer, flags)
        received = check(self._native, "nn_recv", result, passthrough=not blocking)

        if received < 0:
            received = 0

        return bytes(buffer[: min(received, capacity)])
