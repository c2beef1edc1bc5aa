""" The :class:`Peer` is one end of a duplex connection. It exposes a local
    API to the remote side, invokes the remote side's API, and keeps track
    of every request still waiting for a response.

    All of the work happens on the running :mod:`asyncio` event loop; nothing
    here blocks waiting for the other side.
"""

import asyncio
import inspect
import itertools
import logging
from collections.abc import Mapping

from .disposable import DisposableStore
from .errors import ChannelError, ConfigurationError, ProtocolError, ReceiptError
from .protocol import fields
from .protocol import message
from .protocol.codec import CodecRegistry, ErrorCodec, FunctionCodec, Undefined, UndefinedCodec
from .protocol.encoding import DecodeContext, Decoder, Encoder
from .protocol.functions import FunctionRegistry

logger = logging.getLogger(__name__)


def exposed(api):
    """ Normalize *api* into a dictionary mapping method names to callables.
        A mapping is taken as-is, and every value must be callable; for any
        other object the public (no leading underscore) callable attributes
        are collected. None means there is no local API.
    """

    if api is None:
        return None

    methods = dict()

    if isinstance(api, Mapping):
        for name, method in api.items():
            if isinstance(name, str) == False or name == '':
                raise ConfigurationError('exposed method names must be non-empty strings: ' + repr(name))
            if callable(method) == False:
                raise ConfigurationError('exposed method %s is not callable: %s' % (repr(name), repr(method)))
            methods[name] = method
    else:
        for name in dir(api):
            if name.startswith('_'):
                continue
            method = getattr(api, name)
            if callable(method):
                methods[name] = method

    return methods



class PendingOperation:
    """ A request that was sent with a delivery receipt and is waiting for
        its response. The *future* settles at most once; later attempts to
        resolve or reject it are ignored.
    """

    def __init__(self, id, future):
        self.id = id
        self.future = future


    @property
    def settled(self):
        return self.future.done()


    def resolve(self, value):
        if self.future.done():
            return
        self.future.set_result(value)


    def reject(self, error):
        if self.future.done():
            return
        self.future.set_exception(error)


# end of class PendingOperation



class Invocation:
    """ The handle returned by :func:`Peer.invoke`. The invocation message is
        not sent right away: it goes out exactly two event loop turns after
        the call. If anyone subscribes to the outcome before then, the
        message asks for a delivery receipt and the outcome is reported back;
        otherwise it is sent fire-and-forget, with an id of zero.

        Subscribing means any of: awaiting the handle, calling
        :func:`add_done_callback`, or calling :func:`subscribe`. Wrapping it
        with :func:`asyncio.ensure_future` or :func:`asyncio.gather` also
        counts, since the wrapping task awaits it on its first step.

        Subscribing after the message went out without a receipt raises
        :class:`duplex.errors.ReceiptError`.

        :ivar id: The request id; zero unless a receipt was requested.
        :ivar sent: True once the message has been handed to the channel.
    """

    def __init__(self, peer, target, arguments, send, loop):
        self.peer = peer
        self.target = target
        self.arguments = arguments
        self.id = fields.NO_RECEIPT
        self.sent = False

        self._send = send
        self._loop = loop
        self._operation = None

        # One turn for the caller's synchronous code, one more for any task
        # it spawned to take its first step.
        loop.call_soon(loop.call_soon, self._dispatch)


    def __await__(self):
        return self.subscribe().__await__()


    def __repr__(self):
        if self.sent:
            state = 'sent'
        else:
            state = 'pending'

        return '<Invocation %s id=%d %s>' % (repr(self.target), self.id, state)


    @property
    def receipt(self):
        """ True if a delivery receipt was requested.
        """

        return self._operation is not None


    def subscribe(self):
        """ Request a delivery receipt, if that has not already happened, and
            return the :class:`asyncio.Future` that will hold the outcome.
        """

        operation = self._operation

        if operation is not None:
            return operation.future

        if self.sent:
            raise ReceiptError("attempted to await the outcome of %s after it was sent without requesting a delivery receipt; await or subscribe to the invocation before control returns to the event loop" % (repr(self.target)))

        if self.peer.disposed:
            raise ChannelError('cannot subscribe to %s, the peer is disposed' % (repr(self.target)))

        operation = self.peer._track(self._loop)
        self._operation = operation
        self.id = operation.id

        return operation.future


    def add_done_callback(self, callback, *, context=None):
        """ Subscribe, and arrange for *callback* to be called with the
            underlying future once the outcome is known.
        """

        future = self.subscribe()
        future.add_done_callback(callback, context=context)


    def _dispatch(self):

        self.sent = True

        try:
            self.peer._transmit(self, self._send)
        except Exception as e:
            operation = self._operation
            if operation is None:
                raise

            self.peer.pending.pop(operation.id, None)
            operation.reject(e)


# end of class Invocation



class Peer:
    """ One end of a duplex connection over *channel*, which must implement
        :class:`duplex.channel.base.Channel`.

        The optional *api* is what the remote side may invoke by name; see
        :func:`exposed` for what is accepted. Extra *codecs* are registered
        after the built-in Error, Function and Undefined codecs.

        :ivar pending: Operations awaiting a response, keyed by request id.
        :ivar functions: Local callables sent to the remote side by reference.
    """

    def __init__(self, channel, api=None, codecs=()):

        self.channel = channel
        self.api = exposed(api)
        self.disposed = False

        self.codecs = CodecRegistry()
        self.functions = FunctionRegistry()
        self.encoder = Encoder(self.codecs)
        self.decoder = Decoder(self.codecs)

        self.pending = dict()
        self._ticker = itertools.count(1)
        self._tasks = set()

        self.add_codec(ErrorCodec())
        self.add_codec(FunctionCodec(self.functions.register, self._invoke))
        self.add_codec(UndefinedCodec())

        for codec in codecs:
            self.add_codec(codec)

        subscription = channel.on_message(self._on_message)

        self._disposer = DisposableStore()
        self._disposer.add(subscription)
        self._disposer.add(channel)
        self._disposer.add(self.codecs)


    def __repr__(self):
        return '<Peer pending=%d functions=%d>' % (len(self.pending), len(self.functions))


    def add_codec(self, codec):
        """ Register an additional codec. Its name must not collide with any
            codec already registered on this peer.
        """

        if self.disposed:
            raise ConfigurationError('cannot add a codec to a disposed peer')

        return self.codecs.add(codec)


    def invoke(self, method, *args):
        """ Invoke the remote method named *method* with *args*, returning an
            :class:`Invocation`. Await the invocation to get the outcome; the
            remote side's exceptions are raised locally as
            :class:`duplex.errors.RemoteError`. Must be called with an event
            loop running.
        """

        if isinstance(method, str) == False:
            raise TypeError('method name must be a string: ' + repr(method))

        return self._invoke(method, args)


    def remote_function(self, method):
        """ Return a callable that invokes the remote *method* when called.
        """

        def remote(*args):
            return self.invoke(method, *args)

        remote.__name__ = method
        remote.__qualname__ = method
        return remote


    def dispose(self):
        """ Tear the peer down. Pending operations are dropped without being
            settled, the anonymous function registry is cleared, and the
            channel and every codec are disposed. Calling this more than once
            is harmless.
        """

        if self.disposed:
            return

        self.disposed = True
        logger.debug('disposing %r', self)

        self.pending.clear()
        self.functions.clear()

        for task in tuple(self._tasks):
            if task.done() == False:
                task.cancel()

        self._tasks.clear()
        self._disposer.dispose()


    def _invoke(self, target, args, send=None):
        """ Common path for named invocations and for calls to a
            :class:`duplex.protocol.functions.RemoteFunction`, which pass the
            anonymous function handle as *target* and the reply capability of
            the exchange it arrived on as *send*.
        """

        if self.disposed:
            raise ChannelError('cannot invoke %s on a disposed peer' % (repr(target)))

        loop = asyncio.get_running_loop()

        if send is None:
            send = self.channel.send_message

        arguments = [self.encoder.encode(arg) for arg in args]
        return Invocation(self, target, arguments, send, loop)


    def _track(self, loop):
        """ Allocate a request id and register a pending operation for it.
        """

        id = next(self._ticker)
        operation = PendingOperation(id, loop.create_future())
        self.pending[id] = operation
        return operation


    def _transmit(self, invocation, send):

        if self.disposed:
            logger.debug('not sending %r, peer is disposed', invocation)
            return

        outbound = message.invocation(invocation.id, invocation.target, invocation.arguments)
        logger.debug('sending %r', invocation)
        send(outbound)


    def _on_message(self, inbound, reply):
        """ Handler registered with the channel; called once per inbound
            message with the reply capability for that exchange.
        """

        if self.disposed:
            return

        context = DecodeContext(reply)

        if message.is_invocation(inbound):
            id, target, arguments = message.unpack_invocation(inbound)
            loop = asyncio.get_running_loop()
            task = loop.create_task(self._serve(id, target, arguments, context))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            return

        if message.is_response(inbound):
            self._settle(inbound, context)
            return

        raise ProtocolError('malformed message: ' + repr(inbound))


    def _resolve(self, target):

        if message.is_handle(target):
            return self.functions.lookup(target)

        if self.api is None:
            raise ProtocolError('unable to invoke %s, no local API has been exposed' % (repr(target)))

        try:
            return self.api[target]
        except KeyError:
            raise ProtocolError('no such local method: ' + repr(target))


    async def _serve(self, id, target, arguments, context):
        """ Run one inbound invocation to completion and, if the caller asked
            for a receipt, send the response.
        """

        try:
            function = self._resolve(target)
            args = [self.decoder.decode(argument, context) for argument in arguments]
            result = function(*args)

            if inspect.isawaitable(result):
                result = await result

            if id == fields.NO_RECEIPT:
                return

            # A codec failing on the result is reported like any other error.
            outbound = message.response(id, None, self.encoder.encode(result))

        except Exception as e:
            if id == fields.NO_RECEIPT:
                self._fault('unhandled error in fire-and-forget invocation of %s' % (repr(target)), e)
                return

            outbound = self._failure(id, e)

        if self.disposed:
            return

        try:
            context.send_message(outbound)
        except Exception as e:
            self._fault('unable to send the response to request %d' % (id), e)


    def _failure(self, id, error):
        """ Build the error response to request *id*. If *error* cannot be
            encoded either, the caller still gets a response, carrying a
            bare ProtocolError envelope, and the encoding failure is reported
            as a fault.
        """

        try:
            encoded = self.encoder.encode(error)
            return message.response(id, encoded, self.encoder.encode(Undefined))
        except Exception as e:
            self._fault('unable to encode the error raised by request %d' % (id), e)

        encoded = dict()
        encoded[fields.KIND] = fields.ERROR
        encoded['message'] = 'unable to encode the error raised by request %d: %s' % (id, type(error).__name__)
        encoded['name'] = ProtocolError.__name__

        undefined = dict()
        undefined[fields.KIND] = fields.UNDEFINED

        return message.response(id, encoded, undefined)


    def _settle(self, inbound, context):

        request_id, error, result = message.unpack_response(inbound)
        operation = self.pending.pop(request_id, None)

        if operation is None:
            raise ProtocolError('response for unknown request %d' % (request_id))

        try:
            if error is None:
                operation.resolve(self.decoder.decode(result, context))
            else:
                operation.reject(self.decoder.decode(error, context))
        except Exception as e:
            operation.reject(e)


    def _fault(self, text, exception):
        """ Report an error that has nowhere else to go, through the event
            loop's exception handler.
        """

        logger.debug('%s: %s', text, exception)

        loop = asyncio.get_running_loop()
        context = dict()
        context['message'] = text
        context['exception'] = exception
        context['peer'] = self
        loop.call_exception_handler(context)


# end of class Peer


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
