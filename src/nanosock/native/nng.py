"""nng native backend.

nng is the successor of nanomsg and speaks the same scalability protocols on
the wire. The C library is reached through the cffi bindings that ship with
:mod:`pynng`; only ``pynng.lib`` and ``pynng.ffi`` are used, never the
higher-level socket classes, so that every call maps onto exactly one C call.
"""

from __future__ import annotations

import errno
import logging

from pynng import ffi, lib

from . import constants
from .base import Native


logger = logging.getLogger(__name__)


# Protocol constant -> nng protocol name; the opener is nng_<name>_open.

protocols = {
    constants.NN_PAIR: "pair0",
    constants.NN_PUB: "pub0",
    constants.NN_SUB: "sub0",
    constants.NN_REQ: "req0",
    constants.NN_REP: "rep0",
    constants.NN_PUSH: "push0",
    constants.NN_PULL: "pull0",
    constants.NN_SURVEYOR: "surveyor0",
    constants.NN_RESPONDENT: "respondent0",
    constants.NN_BUS: "bus0",
}


# (level, option) -> (nng option name, payload kind). A value of None marks
# an option nng has no counterpart for.

options = {
    (constants.NN_SOL_SOCKET, constants.NN_LINGER): None,
    (constants.NN_SOL_SOCKET, constants.NN_SNDBUF): ("send-buffer", "int"),
    (constants.NN_SOL_SOCKET, constants.NN_RCVBUF): ("recv-buffer", "int"),
    (constants.NN_SOL_SOCKET, constants.NN_SNDTIMEO): ("send-timeout", "ms"),
    (constants.NN_SOL_SOCKET, constants.NN_RCVTIMEO): ("recv-timeout", "ms"),
    (constants.NN_SOL_SOCKET, constants.NN_RECONNECT_IVL): ("reconnect-time-min", "ms"),
    (constants.NN_SOL_SOCKET, constants.NN_RECONNECT_IVL_MAX): ("reconnect-time-max", "ms"),
    (constants.NN_SOL_SOCKET, constants.NN_SNDPRIO): None,
    (constants.NN_SOL_SOCKET, constants.NN_RCVPRIO): None,
    (constants.NN_SOL_SOCKET, constants.NN_IPV4ONLY): None,
    (constants.NN_SOL_SOCKET, constants.NN_SOCKET_NAME): ("socket-name", "string"),
    (constants.NN_SOL_SOCKET, constants.NN_RCVMAXSIZE): ("recv-size-max", "size"),
    (constants.NN_SOL_SOCKET, constants.NN_MAXTTL): ("ttl-max", "int"),
    (constants.NN_SUB, constants.NN_SUB_SUBSCRIBE): ("sub:subscribe", "opaque"),
    (constants.NN_SUB, constants.NN_SUB_UNSUBSCRIBE): ("sub:unsubscribe", "opaque"),
    (constants.NN_REQ, constants.NN_REQ_RESEND_IVL): ("req:resend-time", "ms"),
    (constants.NN_SURVEYOR, constants.NN_SURVEYOR_DEADLINE): ("surveyor:survey-time", "ms"),
    (constants.NN_TCP, constants.NN_TCP_NODELAY): ("tcp-nodelay", "bool"),
}

scalar_kinds = ("int", "ms", "size", "bool")

_ctypes = {
    "int": "int *",
    "ms": "nng_duration *",
    "size": "size_t *",
    "bool": "bool *",
}


# nng error codes -> errno values. System and transport errors carry a flag
# bit above the regular codes.

_SYSERR = 0x10000000
_TRANERR = 0x20000000

_errnos = {
    lib.NNG_EINTR: errno.EINTR,
    lib.NNG_ENOMEM: errno.ENOMEM,
    lib.NNG_EINVAL: errno.EINVAL,
    lib.NNG_EBUSY: errno.EBUSY,
    lib.NNG_ETIMEDOUT: errno.ETIMEDOUT,
    lib.NNG_ECONNREFUSED: errno.ECONNREFUSED,
    lib.NNG_ECLOSED: errno.EBADF,
    lib.NNG_EAGAIN: errno.EAGAIN,
    lib.NNG_ENOTSUP: errno.ENOTSUP,
    lib.NNG_EADDRINUSE: errno.EADDRINUSE,
    lib.NNG_ESTATE: constants.EFSM,
    lib.NNG_ENOENT: errno.ENOENT,
    lib.NNG_EPROTO: errno.EPROTO,
    lib.NNG_EUNREACHABLE: errno.EHOSTUNREACH,
    lib.NNG_EADDRINVAL: errno.EINVAL,
    lib.NNG_EPERM: errno.EACCES,
    lib.NNG_EMSGSIZE: errno.EMSGSIZE,
    lib.NNG_ECONNABORTED: errno.ECONNABORTED,
    lib.NNG_ECONNRESET: errno.ECONNRESET,
    lib.NNG_ECANCELED: errno.ECANCELED,
    lib.NNG_ENOFILES: errno.EMFILE,
    lib.NNG_ENOSPC: errno.ENOSPC,
    lib.NNG_EEXIST: errno.EEXIST,
    lib.NNG_EREADONLY: errno.EACCES,
    lib.NNG_EWRITEONLY: errno.EACCES,
    lib.NNG_ECRYPTO: errno.EPROTO,
    lib.NNG_EPEERAUTH: errno.EACCES,
    lib.NNG_ENOARG: errno.EINVAL,
    lib.NNG_EAMBIGUOUS: errno.EINVAL,
    lib.NNG_EBADTYPE: errno.EINVAL,
    lib.NNG_EINTERNAL: errno.EIO,
}


def translate(code: int) -> int:
    """Return the errno value corresponding to the nng error *code*."""

    if code & _SYSERR:
        return code & ~_SYSERR
    if code & _TRANERR:
        return errno.EPROTO
    return _errnos.get(code, errno.EIO)


def to_char(text):
    """Convert str or bytes to a NUL-terminated char[]."""
    if isinstance(text, str):
        text = text.encode()
    return ffi.new("char[]", bytes(text))


class NngNative(Native):
    """Native messaging primitives implemented with nng."""

    name = "nng"

    def _nng_fail(self, rv: int) -> int:
        return self._fail(translate(rv))

    def socket(self, domain: int, protocol: int) -> int:
        if domain == constants.AF_SP:
            suffix = ""
        elif domain == constants.AF_SP_RAW:
            suffix = "_raw"
        else:
            return self._fail(errno.EAFNOSUPPORT)

        try:
            name = protocols[protocol]
        except KeyError:
            return self._fail(errno.EPROTONOSUPPORT)

        opener = getattr(lib, "nng_" + name + "_open" + suffix, None)
        if opener is None:
            return self._fail(errno.EPROTONOSUPPORT)

        handle = ffi.new("nng_socket *")
        rv = opener(handle)
        if rv != 0:
            return self._nng_fail(rv)

        fd = self._register(handle)
        logger.debug("opened nng %s socket as descriptor %d", name, fd)
        return fd

    def close(self, fd: int) -> int:
        handle = self._unregister(fd)
        if handle is None:
            return self._fail(errno.EBADF)

        rv = lib.nng_close(handle[0])
        if rv != 0:
            return self._nng_fail(rv)
        return 0

    def bind(self, fd: int, addr: str) -> int:
        handle = self._lookup(fd)
        if handle is None:
            return self._fail(errno.EBADF)

        listener = ffi.new("nng_listener *")
        rv = lib.nng_listen(handle[0], to_char(addr), listener, 0)
        if rv != 0:
            return self._nng_fail(rv)
        return lib.nng_listener_id(listener[0])

    def connect(self, fd: int, addr: str) -> int:
        handle = self._lookup(fd)
        if handle is None:
            return self._fail(errno.EBADF)

        # Dialing never waits for the peer; nng keeps retrying in the
        # background, which is what a nanomsg connect does as well.

        dialer = ffi.new("nng_dialer *")
        rv = lib.nng_dial(handle[0], to_char(addr), dialer, lib.NNG_FLAG_NONBLOCK)
        if rv != 0:
            return self._nng_fail(rv)
        return lib.nng_dialer_id(dialer[0])

    def setsockopt(self, fd: int, level: int, option: int, optval: bytes) -> int:
        handle = self._lookup(fd)
        if handle is None:
            return self._fail(errno.EBADF)

        mapped = options.get((level, option))
        if mapped is None:
            return self._fail(errno.ENOPROTOOPT)

        name, kind = mapped
        name = to_char(name)
        socket = handle[0]

        if kind in scalar_kinds:
            value = self._unpack_int(optval)
            if value is None:
                return self._fail(errno.EINVAL)

            if kind == "int":
                rv = lib.nng_socket_set_int(socket, name, value)
            elif kind == "ms":
                rv = lib.nng_socket_set_ms(socket, name, value)
            elif kind == "size":
                # nanomsg spells "unlimited" as -1, nng as 0.
                rv = lib.nng_socket_set_size(socket, name, max(value, 0))
            else:
                rv = lib.nng_socket_set_bool(socket, name, bool(value))
        elif kind == "string":
            rv = lib.nng_socket_set_string(socket, name, to_char(optval))
        else:
            rv = lib.nng_socket_set(socket, name, ffi.new("char[]", bytes(optval)), len(optval))

        if rv != 0:
            return self._nng_fail(rv)
        return 0

    def getsockopt(self, fd: int, level: int, option: int, optval: bytearray) -> int:
        handle = self._lookup(fd)
        if handle is None:
            return self._fail(errno.EBADF)

        mapped = options.get((level, option))
        if mapped is None:
            return self._fail(errno.ENOPROTOOPT)

        name, kind = mapped
        name = to_char(name)
        socket = handle[0]

        if kind in scalar_kinds:
            value = ffi.new(_ctypes[kind])
            getter = getattr(lib, "nng_socket_get_" + kind)
            rv = getter(socket, name, value)
            if rv != 0:
                return self._nng_fail(rv)
            return self._pack_int(int(value[0]), optval)

        if kind == "string":
            pointer = ffi.new("char **")
            rv = lib.nng_socket_get_string(socket, name, pointer)
            if rv != 0:
                return self._nng_fail(rv)
            try:
                text = ffi.string(pointer[0])
            finally:
                lib.nng_strfree(pointer[0])
            return self._copy_out(text, optval)

        size = ffi.new("size_t *", len(optval))
        scratch = ffi.new("char[]", len(optval))
        rv = lib.nng_socket_get(socket, name, scratch, size)
        if rv != 0:
            return self._nng_fail(rv)
        return self._copy_out(ffi.buffer(scratch, min(size[0], len(optval)))[:], optval)

    def send(self, fd: int, data: bytes, flags: int) -> int:
        handle = self._lookup(fd)
        if handle is None:
            return self._fail(errno.EBADF)

        nng_flags = lib.NNG_FLAG_NONBLOCK if flags & constants.NN_DONTWAIT else 0
        rv = lib.nng_send(handle[0], ffi.from_buffer(data), len(data), nng_flags)
        if rv != 0:
            return self._nng_fail(rv)
        return len(data)

    def recv(self, fd: int, buffer: bytearray, flags: int) -> int:
        handle = self._lookup(fd)
        if handle is None:
            return self._fail(errno.EBADF)

        nng_flags = lib.NNG_FLAG_NONBLOCK if flags & constants.NN_DONTWAIT else 0
        size = ffi.new("size_t *", len(buffer))
        rv = lib.nng_recv(handle[0], ffi.from_buffer(buffer), size, nng_flags)
        if rv != 0:
            return self._nng_fail(rv)

        # nng copies at most len(buffer) bytes but reports the full length
        # of the message, exactly as nn_recv does.
        return int(size[0])
