""" Python handle for scalability-protocol messaging sockets: request/response,
    publish/subscribe, push/pull pipelines, pair, bus and survey. A
    :class:`Socket` owns exactly one native socket descriptor and guarantees
    it is released exactly once.
"""

# Utility components.

from . import config
from . import errors
from .errors import NanosockError, NativeCallFailed

# The native library boundary.

from . import native
from .native.constants import AF_SP, AF_SP_RAW

# Primary public-facing interfaces.

from .protocol import Protocol
from .options import Option, OptionSpec, Shape
from .socket import Socket, BindTo, ConnectTo

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
