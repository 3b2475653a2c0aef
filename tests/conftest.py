import errno
import socket
import uuid

import pytest

from nanosock.native import constants
from nanosock.native.base import Native


class FakeNative(Native):
    """ In-memory stand-in for a native library. Every call is recorded in
        *calls*; :meth:`fail` makes a named call report the given errno.
    """

    name = 'fake'

    def __init__(self):
        super().__init__()
        self.calls = list()
        self.failures = dict()
        self.inbox = dict()
        self.sent = dict()
        self.options = dict()
        self.closed = list()


    def fail(self, method, code):
        self.failures[method] = code


    def _call(self, method, *args):
        self.calls.append((method,) + args)

        try:
            code = self.failures[method]
        except KeyError:
            return None

        return self._fail(code)


    def calls_to(self, method):
        return [call[1:] for call in self.calls if call[0] == method]


    def socket(self, domain, protocol):
        failed = self._call('socket', domain, protocol)
        if failed is not None:
            return failed

        fd = self._register(protocol)
        self.inbox[fd] = list()
        self.sent[fd] = list()
        return fd


    def close(self, fd):
        failed = self._call('close', fd)
        if failed is not None:
            return failed

        if self._unregister(fd) is None:
            return self._fail(errno.EBADF)

        self.closed.append(fd)
        return 0


    def bind(self, fd, addr):
        failed = self._call('bind', fd, addr)
        if failed is not None:
            return failed
        if self._lookup(fd) is None:
            return self._fail(errno.EBADF)
        return 1


    def connect(self, fd, addr):
        failed = self._call('connect', fd, addr)
        if failed is not None:
            return failed
        if self._lookup(fd) is None:
            return self._fail(errno.EBADF)
        return 1


    def setsockopt(self, fd, level, option, optval):
        failed = self._call('setsockopt', fd, level, option, optval)
        if failed is not None:
            return failed
        if self._lookup(fd) is None:
            return self._fail(errno.EBADF)

        self.options[(fd, level, option)] = bytes(optval)
        return 0


    def getsockopt(self, fd, level, option, optval):
        failed = self._call('getsockopt', fd, level, option)
        if failed is not None:
            return failed
        if self._lookup(fd) is None:
            return self._fail(errno.EBADF)

        try:
            stored = self.options[(fd, level, option)]
        except KeyError:
            return self._fail(errno.ENOPROTOOPT)

        return self._copy_out(stored, optval)


    def send(self, fd, data, flags):
        failed = self._call('send', fd, bytes(data), flags)
        if failed is not None:
            return failed
        if self._lookup(fd) is None:
            return self._fail(errno.EBADF)

        self.sent[fd].append(bytes(data))
        return len(data)


    def recv(self, fd, buffer, flags):
        failed = self._call('recv', fd, len(buffer), flags)
        if failed is not None:
            return failed
        if self._lookup(fd) is None:
            return self._fail(errno.EBADF)

        queue = self.inbox[fd]
        if not queue:
            if flags & constants.NN_DONTWAIT:
                return self._fail(errno.EAGAIN)
            return self._fail(errno.ETIMEDOUT)

        message = queue.pop(0)
        self._copy_out(message, buffer)
        return len(message)


@pytest.fixture
def fake():
    return FakeNative()


@pytest.fixture
def inproc():
    """ A fresh in-process address for each test.
    """

    return 'inproc://nanosock-test-' + uuid.uuid4().hex


@pytest.fixture
def free_port():
    """ A TCP port on the loopback interface nobody is listening on.
    """

    probe = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    probe.bind(('127.0.0.1', 0))
    port = probe.getsockname()[1]
    probe.close()
    return port


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
