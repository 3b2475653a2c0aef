"""Configurable socket behaviours and their native encoding."""

from __future__ import annotations

import enum
import struct
from typing import NamedTuple, Union

from .native import constants


class Shape(enum.Enum):
    """How an option's payload is laid out for the native call."""

    INTEGER = "integer"
    MILLISECONDS = "milliseconds"
    BYTES = "bytes"

    @property
    def scalar(self) -> bool:
        return self is not Shape.BYTES


class OptionSpec(NamedTuple):
    """Where an option lives in the native configuration space."""

    level: int
    option: int
    shape: Shape


_SOL = constants.NN_SOL_SOCKET


@enum.unique
class Option(enum.Enum):
    """A configurable socket behaviour.

    Each member's value is its :class:`OptionSpec`, so the mapping to a
    native (level, option) pair is fixed here and nowhere else.
    """

    LINGER_MS = OptionSpec(_SOL, constants.NN_LINGER, Shape.MILLISECONDS)
    SEND_BUFFER_SIZE = OptionSpec(_SOL, constants.NN_SNDBUF, Shape.INTEGER)
    RECEIVE_BUFFER_SIZE = OptionSpec(_SOL, constants.NN_RCVBUF, Shape.INTEGER)
    RECEIVE_MAX_SIZE = OptionSpec(_SOL, constants.NN_RCVMAXSIZE, Shape.INTEGER)
    SEND_TIMEOUT_MS = OptionSpec(_SOL, constants.NN_SNDTIMEO, Shape.MILLISECONDS)
    RECEIVE_TIMEOUT_MS = OptionSpec(_SOL, constants.NN_RCVTIMEO, Shape.MILLISECONDS)
    RECONNECT_INTERVAL_MS = OptionSpec(_SOL, constants.NN_RECONNECT_IVL, Shape.MILLISECONDS)
    RECONNECT_INTERVAL_MAX_MS = OptionSpec(_SOL, constants.NN_RECONNECT_IVL_MAX, Shape.MILLISECONDS)
    SEND_PRIORITY = OptionSpec(_SOL, constants.NN_SNDPRIO, Shape.INTEGER)
    RECEIVE_PRIORITY = OptionSpec(_SOL, constants.NN_RCVPRIO, Shape.INTEGER)
    IPV4_ONLY = OptionSpec(_SOL, constants.NN_IPV4ONLY, Shape.INTEGER)
    SOCKET_NAME = OptionSpec(_SOL, constants.NN_SOCKET_NAME, Shape.BYTES)
    TIME_TO_LIVE = OptionSpec(_SOL, constants.NN_MAXTTL, Shape.INTEGER)
    SUBSCRIBE_TOPIC = OptionSpec(constants.NN_SUB, constants.NN_SUB_SUBSCRIBE, Shape.BYTES)
    UNSUBSCRIBE_TOPIC = OptionSpec(constants.NN_SUB, constants.NN_SUB_UNSUBSCRIBE, Shape.BYTES)
    TCP_NO_DELAY = OptionSpec(constants.NN_TCP, constants.NN_TCP_NODELAY, Shape.INTEGER)
    SURVEYOR_DEADLINE_MS = OptionSpec(constants.NN_SURVEYOR, constants.NN_SURVEYOR_DEADLINE, Shape.MILLISECONDS)
    REQUEST_RESEND_INTERVAL_MS = OptionSpec(constants.NN_REQ, constants.NN_REQ_RESEND_IVL, Shape.MILLISECONDS)

    @property
    def level(self) -> int:
        return self.value.level

    @property
    def option(self) -> int:
        return self.value.option

    @property
    def shape(self) -> Shape:
        return self.value.shape


_INT_MIN = -(2 ** 31)
_INT_MAX = 2 ** 31 - 1

Value = Union[int, bool, bytes, bytearray, memoryview, str]


def encode(value: Value) -> bytes:
    """Encode an option value for the native call.

    Integers (and booleans) become a native C int passed by address with its
    size; byte sequences and strings are passed as-is with their length.
    """

    if isinstance(value, int):
        if not _INT_MIN <= value <= _INT_MAX:
            raise ValueError(f"option value out of range for a native int: {value}")
        return struct.pack("=i", value)
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise TypeError(f"cannot encode option value of type {type(value).__name__}")


def decode(shape: Shape, payload: bytes) -> Union[int, bytes]:
    """Decode a payload read back from the native library."""

    if shape.scalar:
        return struct.unpack("=i", payload[: constants.NN_INT_SIZE])[0]
    return bytes(payload)
