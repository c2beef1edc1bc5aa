""" Local bookkeeping for functions passed by reference. A peer owns one
    :class:`FunctionRegistry` holding every local callable it has sent to the
    other side; the other side holds a :class:`RemoteFunction` for each one.
"""

import itertools

from ..errors import ProtocolError


class FunctionRegistry:
    """ Map integer handles to local callables. Handles start at 1 and are
        never reused for the lifetime of the registry; entries stay until the
        registry is cleared, since a remote caller may invoke a function any
        number of times.

        Encoding the same callable twice allocates two handles, matching the
        behavior of the remote side, which has no way to tell them apart.
    """

    def __init__(self):
        self._functions = dict()
        self._ticker = itertools.count(1)


    def __contains__(self, handle):
        return handle in self._functions


    def __len__(self):
        return len(self._functions)


    def register(self, function):
        """ Store *function* and return its newly allocated handle.
        """

        if callable(function) == False:
            raise TypeError('only callables can be registered: ' + repr(function))

        handle = next(self._ticker)
        self._functions[handle] = function
        return handle


    def lookup(self, handle):
        """ Return the callable registered as *handle*. An unknown handle is
            a :class:`duplex.errors.ProtocolError`; either the registry was
            cleared or the remote side made the handle up.
        """

        try:
            return self._functions[handle]
        except (KeyError, TypeError):
            raise ProtocolError('no such anonymous function: ' + repr(handle))


    def clear(self):
        self._functions.clear()


# end of class FunctionRegistry



class RemoteFunction:
    """ A local stand-in for a function living on the remote peer. Calling
        it sends an invocation targeting *handle* through *send*, the reply
        capability of the exchange the function arrived on, and returns the
        same lazy :class:`duplex.peer.Invocation` handle that
        :func:`duplex.peer.Peer.invoke` returns.

        :ivar handle: The remote side's anonymous function handle.
    """

    def __init__(self, handle, invoke, send):
        self.handle = handle
        self._invoke = invoke
        self._send = send


    def __call__(self, *args):
        return self._invoke(self.handle, args, self._send)


    def __repr__(self):
        return '<RemoteFunction handle=%d>' % (self.handle)


# end of class RemoteFunction


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
