""" The :class:`Encoder` and :class:`Decoder` walk a single value at a time.
    Primitives (str, int, float, bool, None) are passed through untouched;
    anything else is handed to a codec from the peer's
    :class:`duplex.protocol.codec.CodecRegistry`.

    Containers are not traversed. A list or dict that no codec claims is
    passed through as-is, and it is up to the channel whether it can carry
    it.
"""

from ..errors import ProtocolError
from . import fields
from . import message

primitives = (str, int, float, bool, type(None))


class DecodeContext:
    """ Per-message information a codec may need while decoding. The
        :class:`duplex.protocol.codec.FunctionCodec` needs *send_message*,
        the reply capability of the exchange being decoded, so the proxies it
        creates can call back over that same exchange.
    """

    def __init__(self, send_message):
        self.send_message = send_message


# end of class DecodeContext



class Encoder:

    def __init__(self, codecs):
        self.codecs = codecs


    def encode(self, value):

        if isinstance(value, primitives):
            return value

        codec = self.codecs.find(value)

        if codec is None:
            # Best effort; the channel may or may not be able to carry it.
            return value

        return codec.encode(value)


# end of class Encoder



class Decoder:

    def __init__(self, codecs):
        self.codecs = codecs


    def decode(self, value, context):

        if isinstance(value, primitives):
            return value

        if message.is_wrapped(value) == False:
            return value

        kind = value[fields.KIND]
        codec = self.codecs.get(kind)

        if codec is None:
            raise ProtocolError("an incoming value was encoded with the codec %s, which is not registered locally; was add_codec() called?" % (repr(kind)))

        return codec.decode(value, context)


# end of class Decoder


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
