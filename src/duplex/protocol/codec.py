""" Codecs transform values that cannot cross a channel verbatim into tagged
    envelopes, and back again on the receiving side. Each codec has a name
    that is unique within a peer; the name is written into the envelope so
    the receiver knows which codec reconstructs the value.

    Three codecs are always present: :class:`ErrorCodec`,
    :class:`FunctionCodec`, and :class:`UndefinedCodec`. Additional codecs
    can be registered with :func:`duplex.peer.Peer.add_codec`.
"""

from __future__ import annotations

import logging
import traceback
from abc import ABC, abstractmethod
from typing import Callable, Dict, Iterator, Optional

from ..errors import ConfigurationError, ProtocolError, RemoteError
from . import fields
from . import message
from .functions import RemoteFunction

logger = logging.getLogger(__name__)


class _UndefinedType:
    """ The unit value: "no value at all", as distinct from None. There is
        only ever one instance, :data:`Undefined`.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance


    def __repr__(self):
        return 'Undefined'


    def __bool__(self):
        return False


    def __reduce__(self):
        return (_UndefinedType, ())


Undefined = _UndefinedType()



class Codec(ABC):
    """ Minimal contract for a value transformer. Subclasses set *name* and
        implement the capability test and the two directions. The *context*
        handed to :func:`decode` is a :class:`duplex.protocol.encoding.DecodeContext`.
    """

    name: str = None

    @abstractmethod
    def can_encode(self, value) -> bool:
        """Whether this codec claims *value*."""

    @abstractmethod
    def encode(self, value) -> dict:
        """Return the envelope standing in for *value*."""

    @abstractmethod
    def decode(self, wrapped: dict, context):
        """Reconstruct a value from its envelope."""

    def wrap(self, **fields_) -> dict:
        """ Convenience for subclasses: build an envelope tagged with this
            codec's name.
        """

        wrapped = {fields.KIND: self.name}
        wrapped.update(fields_)
        return wrapped

    def dispose(self) -> None:
        """Release anything held by the codec. The default is a no-op."""


# end of class Codec



class ErrorCodec(Codec):
    """ Carry exceptions across the channel as their message, class name,
        and formatted traceback. The receiving side gets a
        :class:`duplex.errors.RemoteError`. A :class:`RemoteError` being
        relayed onward keeps the name and traceback it arrived with.
    """

    name = fields.ERROR

    def can_encode(self, value):
        return isinstance(value, BaseException)


    def encode(self, value):

        if isinstance(value, RemoteError):
            text = value.message
            name = value.name
            stack = value.stack
        else:
            text = str(value)
            name = type(value).__name__
            stack = traceback.format_exception(type(value), value, value.__traceback__)
            stack = ''.join(stack)

        wrapped = self.wrap(message=text)

        if name is not None:
            wrapped['name'] = name
        if stack is not None:
            wrapped['stack'] = stack

        return wrapped


    def decode(self, wrapped, context):

        if message.is_wrapped_error(wrapped) == False:
            raise ProtocolError('malformed error envelope: ' + repr(wrapped))

        return RemoteError(wrapped['message'], wrapped.get('name'), wrapped.get('stack'))


# end of class ErrorCodec



class FunctionCodec(Codec):
    """ Carry callables across the channel by reference. Encoding a callable
        stores it in the owning peer's anonymous function registry via
        *register*, and the envelope carries only the resulting handle.
        Decoding a handle produces a :class:`RemoteFunction` that, when
        called, asks *invoke* to run an invocation targeting that handle.
    """

    name = fields.FUNCTION

    def __init__(self, register: Callable[[Callable], int], invoke: Callable):
        self.register = register
        self.invoke = invoke


    def can_encode(self, value):
        return callable(value)


    def encode(self, value):
        handle = self.register(value)
        return self.wrap(id=handle)


    def decode(self, wrapped, context):

        handle = wrapped.get('id')

        if message.is_handle(handle) == False:
            raise ProtocolError('malformed function envelope: ' + repr(wrapped))

        return RemoteFunction(handle, self.invoke, context.send_message)


# end of class FunctionCodec



class UndefinedCodec(Codec):
    """ The unit value, :data:`Undefined`, has no JSON representation of its
        own; it travels as a bare envelope with no other fields.
    """

    name = fields.UNDEFINED

    def can_encode(self, value):
        return value is Undefined


    def encode(self, value):
        return self.wrap()


    def decode(self, wrapped, context):
        return Undefined


# end of class UndefinedCodec



class CodecRegistry:
    """ The ordered set of codecs known to one peer. Lookup by name is used
        for decoding; iteration, in registration order, is used for encoding.
    """

    def __init__(self):
        self._codecs: Dict[str, Codec] = dict()
        self.disposed = False


    def __contains__(self, name):
        return name in self._codecs


    def __iter__(self) -> Iterator[Codec]:
        return iter(tuple(self._codecs.values()))


    def __len__(self):
        return len(self._codecs)


    def add(self, codec: Codec) -> Codec:
        """ Register *codec*. A second codec with the same name is a
            :class:`duplex.errors.ConfigurationError`.
        """

        name = codec.name

        if isinstance(name, str) == False or name == '':
            raise ConfigurationError('codec name must be a non-empty string: ' + repr(name))

        if name in self._codecs:
            raise ConfigurationError('a codec is already registered for ' + repr(name))

        self._codecs[name] = codec
        return codec


    def get(self, name) -> Optional[Codec]:
        return self._codecs.get(name)


    def find(self, value) -> Optional[Codec]:
        """ Return the first registered codec that claims *value*, or None.
        """

        for codec in self._codecs.values():
            if codec.can_encode(value):
                return codec

        return None


    def dispose(self):
        """ Dispose every registered codec exactly once.
        """

        if self.disposed:
            return

        self.disposed = True
        codecs = tuple(self._codecs.values())
        self._codecs.clear()

        for codec in codecs:
            logger.debug('disposing codec %s', codec.name)
            codec.dispose()


# end of class CodecRegistry


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
