"""Exceptions raised by :mod:`nanosock`, and the one place native return
values are turned into them.
"""

from __future__ import annotations


class NanosockError(Exception):
    """Base class for all nanosock errors."""


class NativeCallFailed(NanosockError):
    """A native call reported failure with a negative return value.

    :ivar call: name of the native function that failed, e.g. ``nn_bind``.
    :ivar value: the value the native call returned.
    :ivar errno: the native error code at the point of failure.
    :ivar strerror: the description of *errno*.
    """

    def __init__(self, call: str, value: int, errno: int, strerror: str):
        self.call = call
        self.value = value
        self.errno = errno
        self.strerror = strerror
        super().__init__(
            f"{call} failed with value {value} errno {errno}, error: {strerror}"
        )


def check(native, call: str, result: int, passthrough: bool = False) -> int:
    """Return *result*, or raise :class:`NativeCallFailed` if it is negative.

    With *passthrough* set a negative *result* is handed back to the caller
    untouched; the caller then owns the interpretation of the failure.
    """

    if result < 0 and not passthrough:
        code = native.errno()
        raise NativeCallFailed(call, result, code, native.strerror(code))
    return result
