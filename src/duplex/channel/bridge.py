""" An in-process pair of channels, for tests and for peers living on the
    same event loop. Each message is serialized to JSON on the way in and
    parsed again on the way out, so only values that could cross a real
    wire make it through, and the receiver never shares objects with the
    sender.
"""

import asyncio
import logging

from .. import config
from .. import json
from ..errors import ChannelError
from .base import Channel

logger = logging.getLogger(__name__)


class BridgeChannel(Channel):
    """ One end of a :class:`Bridge`. Messages sent here are delivered to
        the other end one event loop turn later.
    """

    def __init__(self, label):
        Channel.__init__(self)
        self.label = label
        self.other = None
        self.disposed = False


    def __repr__(self):
        return '<BridgeChannel %s>' % (self.label)


    def send_message(self, message):

        if self.disposed:
            raise ChannelError('cannot send on a disposed channel: ' + self.label)

        encoded = json.dumps(list(message))

        if config.trace:
            logger.debug('[%s] %s', self.label, encoded.decode())

        loop = asyncio.get_running_loop()
        loop.call_soon(self.other._receive, encoded)


    def dispose(self):
        self.disposed = True
        self._handlers.clear()


    def _receive(self, encoded):

        if self.disposed:
            # Closed ports drop whatever was still in flight.
            return

        message = json.loads(encoded)
        self._deliver(message, self.send_message)


# end of class BridgeChannel



class Bridge:
    """ Two connected channels, :attr:`left` and :attr:`right`. Whatever is
        sent on one is received on the other.
    """

    def __init__(self):
        self.left = BridgeChannel('L -> R')
        self.right = BridgeChannel('R -> L')
        self.left.other = self.right
        self.right.other = self.left


    def dispose(self):
        self.left.dispose()
        self.right.dispose()


# end of class Bridge


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
