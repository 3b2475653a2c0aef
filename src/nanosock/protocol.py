""" The messaging patterns a :class:`nanosock.Socket` can speak.
"""

import enum

from .native import constants


@enum.unique
class Protocol(enum.IntEnum):
    """ A scalability protocol, selected once when a socket is created. The
        value of each member is the native protocol constant requested from
        the native library; :func:`enum.unique` guarantees no two patterns
        ever share a constant.
    """

    REQUEST = constants.NN_REQ
    RESPONSE = constants.NN_REP
    PUBLISH = constants.NN_PUB
    SUBSCRIBE = constants.NN_SUB
    PUSH = constants.NN_PUSH
    PULL = constants.NN_PULL
    PAIR = constants.NN_PAIR
    SURVEYOR = constants.NN_SURVEYOR
    RESPONDENT = constants.NN_RESPONDENT
    BUS = constants.NN_BUS


    @property
    def native(self):
        """ The native protocol constant, as a plain integer.
        """

        return int(self)


    @property
    def peer(self):
        """ The :class:`Protocol` on the other end of a conversation with
            this one. Symmetric patterns are their own peer.
        """

        return _peers[self]


_peers = {
    Protocol.REQUEST: Protocol.RESPONSE,
    Protocol.RESPONSE: Protocol.REQUEST,
    Protocol.PUBLISH: Protocol.SUBSCRIBE,
    Protocol.SUBSCRIBE: Protocol.PUBLISH,
    Protocol.PUSH: Protocol.PULL,
    Protocol.PULL: Protocol.PUSH,
    Protocol.PAIR: Protocol.PAIR,
    Protocol.SURVEYOR: Protocol.RESPONDENT,
    Protocol.RESPONDENT: Protocol.SURVEYOR,
    Protocol.BUS: Protocol.BUS,
}


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
