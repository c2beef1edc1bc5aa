"""Channel interface.

This is the (small) contract that channel implementations should follow. It
lives outside :mod:`duplex.protocol` so the protocol remains channel-agnostic.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable, List

from ..disposable import Subscription

logger = logging.getLogger(__name__)

Handler = Callable[[list, Callable[[list], None]], None]


class Channel(ABC):
    """Minimal contract for moving message arrays between two peers.

    Inbound messages are handed to every registered handler as
    ``handler(message, reply)``, where *reply* sends a message back on the
    same logical exchange. For channels without request/reply framing of
    their own, *reply* is simply :func:`send_message`.
    """

    def __init__(self):
        self._handlers: List[Handler] = []

    @abstractmethod
    def send_message(self, message: list) -> None:
        """Send one message array to the other side, fire-and-forget."""

    @abstractmethod
    def dispose(self) -> None:
        """Release the channel's resources. Must be idempotent."""

    def on_message(self, handler: Handler) -> Subscription:
        """Register *handler* for inbound messages.

        Returns a :class:`duplex.disposable.Subscription`; disposing it
        unregisters the handler.
        """

        self._handlers.append(handler)

        def release():
            try:
                self._handlers.remove(handler)
            except ValueError:
                pass

        return Subscription(release)

    def _deliver(self, message: list, reply: Callable[[list], None]) -> None:
        """Hand *message* to every handler. A handler raising does not stop
        delivery to the others; the exception goes to the event loop's
        exception handler instead.
        """

        for handler in tuple(self._handlers):
            try:
                handler(message, reply)
            except Exception as e:
                logger.debug('message handler %r raised %r', handler, e)
                loop = asyncio.get_running_loop()
                loop.call_exception_handler({
                    'message': 'unhandled exception in channel message handler',
                    'exception': e,
                    'channel': self,
                })
