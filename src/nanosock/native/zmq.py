"""ZeroMQ native backend.

libzmq implements the request/response, publish/subscribe, pipeline and pair
patterns, but has no survey or bus sockets; asking for those reports
``EPROTONOSUPPORT`` the same way an unknown protocol would.
"""

from __future__ import annotations

import atexit
import errno
import itertools
import logging

import zmq

from . import constants
from .base import Native


logger = logging.getLogger(__name__)

zmq_context = zmq.Context()


protocols = {
    constants.NN_PAIR: zmq.PAIR,
    constants.NN_PUB: zmq.PUB,
    constants.NN_SUB: zmq.SUB,
    constants.NN_REQ: zmq.REQ,
    constants.NN_REP: zmq.REP,
    constants.NN_PUSH: zmq.PUSH,
    constants.NN_PULL: zmq.PULL,
}


# (level, option) -> zmq socket option. A value of None marks an option
# libzmq has no counterpart for.

options = {
    (constants.NN_SOL_SOCKET, constants.NN_LINGER): zmq.LINGER,
    (constants.NN_SOL_SOCKET, constants.NN_SNDBUF): zmq.SNDBUF,
    (constants.NN_SOL_SOCKET, constants.NN_RCVBUF): zmq.RCVBUF,
    (constants.NN_SOL_SOCKET, constants.NN_SNDTIMEO): zmq.SNDTIMEO,
    (constants.NN_SOL_SOCKET, constants.NN_RCVTIMEO): zmq.RCVTIMEO,
    (constants.NN_SOL_SOCKET, constants.NN_RECONNECT_IVL): zmq.RECONNECT_IVL,
    (constants.NN_SOL_SOCKET, constants.NN_RECONNECT_IVL_MAX): zmq.RECONNECT_IVL_MAX,
    (constants.NN_SOL_SOCKET, constants.NN_SNDPRIO): None,
    (constants.NN_SOL_SOCKET, constants.NN_RCVPRIO): None,
    (constants.NN_SOL_SOCKET, constants.NN_IPV4ONLY): zmq.IPV4ONLY,
    (constants.NN_SOL_SOCKET, constants.NN_SOCKET_NAME): None,
    (constants.NN_SOL_SOCKET, constants.NN_RCVMAXSIZE): zmq.MAXMSGSIZE,
    (constants.NN_SOL_SOCKET, constants.NN_MAXTTL): None,
    (constants.NN_SUB, constants.NN_SUB_SUBSCRIBE): zmq.SUBSCRIBE,
    (constants.NN_SUB, constants.NN_SUB_UNSUBSCRIBE): zmq.UNSUBSCRIBE,
    (constants.NN_REQ, constants.NN_REQ_RESEND_IVL): None,
    (constants.NN_SURVEYOR, constants.NN_SURVEYOR_DEADLINE): None,
    (constants.NN_TCP, constants.NN_TCP_NODELAY): None,
}

bytes_options = (zmq.SUBSCRIBE, zmq.UNSUBSCRIBE)

# Matches the nanomsg default of one second.
default_linger = 1000


def translate(code: int) -> int:
    """Return the errno value corresponding to the libzmq error *code*."""

    if code == zmq.EFSM:
        return constants.EFSM
    if code == zmq.ETERM:
        return constants.ETERM
    return code


class ZmqNative(Native):
    """Native messaging primitives implemented with libzmq."""

    name = "zmq"

    def __init__(self, context=None):
        super().__init__()
        self.context = context or zmq_context
        self._endpoints = itertools.count(1)

    def _zmq_fail(self, exc: zmq.ZMQError) -> int:
        return self._fail(translate(exc.errno))

    def socket(self, domain: int, protocol: int) -> int:
        if domain != constants.AF_SP:
            return self._fail(errno.EAFNOSUPPORT)

        try:
            kind = protocols[protocol]
        except KeyError:
            return self._fail(errno.EPROTONOSUPPORT)

        try:
            socket = self.context.socket(kind)
            socket.setsockopt(zmq.LINGER, default_linger)
        except zmq.ZMQError as exc:
            return self._zmq_fail(exc)

        fd = self._register(socket)
        logger.debug("opened zmq socket type %d as descriptor %d", kind, fd)
        return fd

    def close(self, fd: int) -> int:
        socket = self._unregister(fd)
        if socket is None:
            return self._fail(errno.EBADF)

        socket.close()
        return 0

    def _attach(self, fd: int, addr: str, method: str) -> int:
        socket = self._lookup(fd)
        if socket is None:
            return self._fail(errno.EBADF)

        try:
            getattr(socket, method)(addr)
        except zmq.ZMQError as exc:
            return self._zmq_fail(exc)
        return next(self._endpoints)

    def bind(self, fd: int, addr: str) -> int:
        return self._attach(fd, addr, "bind")

    def connect(self, fd: int, addr: str) -> int:
        return self._attach(fd, addr, "connect")

    def setsockopt(self, fd: int, level: int, option: int, optval: bytes) -> int:
        socket = self._lookup(fd)
        if socket is None:
            return self._fail(errno.EBADF)

        zmq_option = options.get((level, option))
        if zmq_option is None:
            return self._fail(errno.ENOPROTOOPT)

        if zmq_option in bytes_options:
            value = bytes(optval)
        else:
            value = self._unpack_int(optval)
            if value is None:
                return self._fail(errno.EINVAL)

        try:
            socket.setsockopt(zmq_option, value)
        except zmq.ZMQError as exc:
            return self._zmq_fail(exc)
        return 0

    def getsockopt(self, fd: int, level: int, option: int, optval: bytearray) -> int:
        socket = self._lookup(fd)
        if socket is None:
            return self._fail(errno.EBADF)

        zmq_option = options.get((level, option))
        if zmq_option is None:
            return self._fail(errno.ENOPROTOOPT)

        try:
            value = socket.getsockopt(zmq_option)
        except zmq.ZMQError as exc:
            return self._zmq_fail(exc)

        if isinstance(value, bytes):
            return self._copy_out(value, optval)
        return self._pack_int(value, optval)

    def send(self, fd: int, data: bytes, flags: int) -> int:
        socket = self._lookup(fd)
        if socket is None:
            return self._fail(errno.EBADF)

        zmq_flags = zmq.NOBLOCK if flags & constants.NN_DONTWAIT else 0
        try:
            socket.send(data, flags=zmq_flags)
        except zmq.ZMQError as exc:
            return self._zmq_fail(exc)
        return len(data)

    def recv(self, fd: int, buffer: bytearray, flags: int) -> int:
        socket = self._lookup(fd)
        if socket is None:
            return self._fail(errno.EBADF)

        zmq_flags = zmq.NOBLOCK if flags & constants.NN_DONTWAIT else 0
        try:
            message = socket.recv(flags=zmq_flags)
        except zmq.ZMQError as exc:
            return self._zmq_fail(exc)

        self._copy_out(message, buffer)
        return len(message)


def _cleanup() -> None:
    zmq_context.destroy(linger=0)


atexit.register(_cleanup)
