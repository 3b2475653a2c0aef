""" Numeric constants of the native messaging API.

    The values follow the nanomsg numbering so that descriptors, protocols and
    option identifiers mean the same thing regardless of which library is
    doing the actual work underneath.
"""

import errno
import os


# Address families.

AF_SP = 1
AF_SP_RAW = 2

# Protocols are numbered (family * 16) + variant.

NN_PROTO_PAIR = 1
NN_PAIR = NN_PROTO_PAIR * 16 + 0

NN_PROTO_PUBSUB = 2
NN_PUB = NN_PROTO_PUBSUB * 16 + 0
NN_SUB = NN_PROTO_PUBSUB * 16 + 1

NN_PROTO_REQREP = 3
NN_REQ = NN_PROTO_REQREP * 16 + 0
NN_REP = NN_PROTO_REQREP * 16 + 1

NN_PROTO_PIPELINE = 5
NN_PUSH = NN_PROTO_PIPELINE * 16 + 0
NN_PULL = NN_PROTO_PIPELINE * 16 + 1

NN_PROTO_SURVEY = 6
NN_SURVEYOR = NN_PROTO_SURVEY * 16 + 2
NN_RESPONDENT = NN_PROTO_SURVEY * 16 + 3

NN_PROTO_BUS = 7
NN_BUS = NN_PROTO_BUS * 16 + 0

# Option levels. Protocol specific options use the protocol constant as the
# level, transport specific options use a negative transport identifier.

NN_SOL_SOCKET = 0
NN_TCP = -3

# Generic socket options.

NN_LINGER = 1
NN_SNDBUF = 2
NN_RCVBUF = 3
NN_SNDTIMEO = 4
NN_RCVTIMEO = 5
NN_RECONNECT_IVL = 6
NN_RECONNECT_IVL_MAX = 7
NN_SNDPRIO = 8
NN_RCVPRIO = 9
NN_IPV4ONLY = 14
NN_SOCKET_NAME = 15
NN_RCVMAXSIZE = 16
NN_MAXTTL = 17

# Protocol and transport specific options.

NN_SUB_SUBSCRIBE = 1
NN_SUB_UNSUBSCRIBE = 2
NN_REQ_RESEND_IVL = 1
NN_SURVEYOR_DEADLINE = 1
NN_TCP_NODELAY = 1

# Send/receive flags.

NN_DONTWAIT = 1

# Scalar option payloads are C ints.

NN_INT_SIZE = 4

# Largest option value read back, the longest being a socket name.

NN_OPTION_MAX = 128

# Error codes that have no POSIX equivalent.

NN_HAUSNUMERO = 156384712
ETERM = NN_HAUSNUMERO + 53
EFSM = NN_HAUSNUMERO + 54

strings = {
    ETERM: 'Nanomsg library was terminated',
    EFSM: 'Operation cannot be performed in this state',
}


def strerror(code):
    """ Return the human-readable description of the error *code*.
    """

    try:
        return strings[code]
    except KeyError:
        pass

    if code in errno.errorcode:
        return os.strerror(code)

    return 'Unknown error ' + str(code)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
