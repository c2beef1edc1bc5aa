""" Python implementation of duplex, a bidirectional remote procedure call
    engine. Two peers connected by any order-preserving message channel can
    invoke each other's exposed functions, pass functions back and forth as
    live callable references, and receive each other's exceptions.
"""

# Utility components.

from . import config
from . import json
from . import disposable

# Submodules used by multiple other components.

from . import errors
from . import protocol
from . import channel

# Primary public-facing interfaces.

from .errors import ChannelError, ConfigurationError, DuplexError, ProtocolError, ReceiptError, RemoteError
from .protocol import Codec, RemoteFunction, Undefined
from .peer import Invocation, Peer
from .builder import connect, expose
from .channel import Bridge, Channel, ZmqChannel

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
