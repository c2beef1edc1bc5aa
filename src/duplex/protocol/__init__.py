from . import fields
from . import message
from . import functions
from . import codec
from . import encoding

from .codec import Codec, CodecRegistry, ErrorCodec, FunctionCodec, Undefined, UndefinedCodec
from .encoding import DecodeContext, Decoder, Encoder
from .functions import FunctionRegistry, RemoteFunction


"""
duplex Protocol Layer
=====================

This package defines the channel-agnostic pieces of the duplex peer
protocol: the message grammar, the value codecs, and the bookkeeping for
functions passed by reference.

The protocol layer MUST NOT depend on any channel implementation
(e.g. the in-process bridge, ZeroMQ, etc).

---------------------------------------------------------------------

Layer Architecture Overview
---------------------------

User Code
    │
    ▼
Peer (duplex.peer)
    invoke(), add_codec(), dispose()
    Request ids, pending operations, lazy delivery receipts

    │
    ▼
Encoder / Decoder (encoding.py)
    One value at a time; primitives pass through,
    everything else goes through a codec

    │
    ▼
Codecs (codec.py, functions.py)
    Error, Function, Undefined, plus user codecs
    Handle registry for functions passed by reference

    │
    ▼
Message Grammar (message.py, fields.py)
    Invocation: [id, target, *args]
    Response:   [-id, error, result]

---------------------------------------------------------------------

Below the Protocol Layer (for context)
--------------------------------------

Channel Layer (duplex.channel)
    Moves message arrays between two peers
    - in-process bridge
    - ZeroMQ
    - etc.

---------------------------------------------------------------------
"""


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
