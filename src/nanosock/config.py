""" Runtime defaults for :mod:`nanosock`, most of which can be overridden
    from the environment.
"""

import os
import sys


# The receive buffer allocated when the caller does not ask for a size.

receive_capacity = 1024


def backend():
    """ Return the name of the native backend to use. The choice is made
        with the ``NANOSOCK_NATIVE`` environment variable; the default is
        ``nng``. Changes to the environment variable are ignored once
        :mod:`nanosock.native` has been imported.
    """

    return os.environ.get('NANOSOCK_NATIVE', 'nng').lower()


def connect_settle():
    """ Return the number of seconds to pause after connecting a freshly
        created socket, as a float. Windows sockets have been seen to attempt
        a send before the TCP handshake completes, so the default there is
        a tenth of a second; elsewhere there is no pause. The
        ``NANOSOCK_CONNECT_SETTLE`` environment variable overrides the
        default on every platform.
    """

    try:
        found = os.environ['NANOSOCK_CONNECT_SETTLE']
    except KeyError:
        pass
    else:
        settle = float(found)
        if settle < 0:
            raise ValueError('NANOSOCK_CONNECT_SETTLE must not be negative: ' + found)
        return settle

    if sys.platform == 'win32':
        return 0.1

    return 0.0


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
