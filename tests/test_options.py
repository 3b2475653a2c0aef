import struct

import nanosock
import pytest

from nanosock import Option, Protocol, Shape
from nanosock.native import constants


SOL = constants.NN_SOL_SOCKET

documented = {
    Option.LINGER_MS: (SOL, constants.NN_LINGER, Shape.MILLISECONDS),
    Option.SEND_BUFFER_SIZE: (SOL, constants.NN_SNDBUF, Shape.INTEGER),
    Option.RECEIVE_BUFFER_SIZE: (SOL, constants.NN_RCVBUF, Shape.INTEGER),
    Option.RECEIVE_MAX_SIZE: (SOL, constants.NN_RCVMAXSIZE, Shape.INTEGER),
    Option.SEND_TIMEOUT_MS: (SOL, constants.NN_SNDTIMEO, Shape.MILLISECONDS),
    Option.RECEIVE_TIMEOUT_MS: (SOL, constants.NN_RCVTIMEO, Shape.MILLISECONDS),
    Option.RECONNECT_INTERVAL_MS: (SOL, constants.NN_RECONNECT_IVL, Shape.MILLISECONDS),
    Option.RECONNECT_INTERVAL_MAX_MS: (SOL, constants.NN_RECONNECT_IVL_MAX, Shape.MILLISECONDS),
    Option.SEND_PRIORITY: (SOL, constants.NN_SNDPRIO, Shape.INTEGER),
    Option.RECEIVE_PRIORITY: (SOL, constants.NN_RCVPRIO, Shape.INTEGER),
    Option.IPV4_ONLY: (SOL, constants.NN_IPV4ONLY, Shape.INTEGER),
    Option.SOCKET_NAME: (SOL, constants.NN_SOCKET_NAME, Shape.BYTES),
    Option.TIME_TO_LIVE: (SOL, constants.NN_MAXTTL, Shape.INTEGER),
    Option.SUBSCRIBE_TOPIC: (constants.NN_SUB, constants.NN_SUB_SUBSCRIBE, Shape.BYTES),
    Option.UNSUBSCRIBE_TOPIC: (constants.NN_SUB, constants.NN_SUB_UNSUBSCRIBE, Shape.BYTES),
    Option.TCP_NO_DELAY: (constants.NN_TCP, constants.NN_TCP_NODELAY, Shape.INTEGER),
    Option.SURVEYOR_DEADLINE_MS: (constants.NN_SURVEYOR, constants.NN_SURVEYOR_DEADLINE, Shape.MILLISECONDS),
    Option.REQUEST_RESEND_INTERVAL_MS: (constants.NN_REQ, constants.NN_REQ_RESEND_IVL, Shape.MILLISECONDS),
}


def test_mapping_is_total():
    assert set(documented) == set(Option)


@pytest.mark.parametrize('option', list(Option))
def test_mapping(option):

    level, identifier, shape = documented[option]
    assert option.level == level
    assert option.option == identifier
    assert option.shape is shape

    # Stable: the same variant always yields the same level and option.
    assert Option[option.name].value == option.value


def test_pairs_are_distinct():

    pairs = [(option.level, option.option) for option in Option]
    assert len(set(pairs)) == len(pairs)


def test_scalar_shapes():
    assert Shape.INTEGER.scalar
    assert Shape.MILLISECONDS.scalar
    assert not Shape.BYTES.scalar


def test_set_scalar(fake):

    socket = nanosock.Socket(Protocol.PULL, native=fake)
    socket.set_option(Option.RECEIVE_TIMEOUT_MS, 100)

    payload = struct.pack('=i', 100)
    assert fake.calls_to('setsockopt') == [(socket.fd, SOL, constants.NN_RCVTIMEO, payload)]
    assert len(payload) == constants.NN_INT_SIZE


def test_set_boolean(fake):

    socket = nanosock.Socket(Protocol.PUSH, native=fake)
    socket.set_option(Option.TCP_NO_DELAY, True)

    (call,) = fake.calls_to('setsockopt')
    assert call[1:] == (constants.NN_TCP, constants.NN_TCP_NODELAY, struct.pack('=i', 1))


def test_set_bytes(fake):

    socket = nanosock.Socket(Protocol.SUBSCRIBE, native=fake)
    socket.set_option(Option.SUBSCRIBE_TOPIC, b'weather.')
    socket.set_option(Option.SOCKET_NAME, 'listener')
    socket.set_option(Option.SUBSCRIBE_TOPIC, bytearray(b''))

    calls = fake.calls_to('setsockopt')
    assert calls[0][1:] == (constants.NN_SUB, constants.NN_SUB_SUBSCRIBE, b'weather.')
    assert calls[1][1:] == (SOL, constants.NN_SOCKET_NAME, b'listener')
    assert calls[2][1:] == (constants.NN_SUB, constants.NN_SUB_SUBSCRIBE, b'')


def test_set_rejects_unencodable(fake):

    socket = nanosock.Socket(Protocol.PUSH, native=fake)

    with pytest.raises(TypeError):
        socket.set_option(Option.LINGER_MS, 1.5)

    with pytest.raises(ValueError):
        socket.set_option(Option.LINGER_MS, 2 ** 40)

    assert fake.calls_to('setsockopt') == []


def test_set_failure_raises(fake):

    socket = nanosock.Socket(Protocol.PUSH, native=fake)
    fake.fail('setsockopt', 92)

    with pytest.raises(nanosock.NativeCallFailed) as raised:
        socket.set_option(Option.SUBSCRIBE_TOPIC, b'')

    assert raised.value.call == 'nn_setsockopt'
    assert raised.value.value == -1
    assert raised.value.errno == 92


def test_get(fake):

    socket = nanosock.Socket(Protocol.SUBSCRIBE, native=fake)
    socket.set_option(Option.RECEIVE_TIMEOUT_MS, -1)
    socket.set_option(Option.SOCKET_NAME, b'weather')

    assert socket.get_option(Option.RECEIVE_TIMEOUT_MS) == -1
    assert socket.get_option(Option.SOCKET_NAME) == b'weather'


def test_get_failure_raises(fake):

    socket = nanosock.Socket(Protocol.PUSH, native=fake)

    with pytest.raises(nanosock.NativeCallFailed) as raised:
        socket.get_option(Option.SEND_PRIORITY)

    assert raised.value.call == 'nn_getsockopt'


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
