""" Bookkeeping for things that must be released exactly once, such as
    channels, codecs and handler subscriptions.
"""

from __future__ import annotations

import logging
from typing import Callable, List

logger = logging.getLogger(__name__)


class Subscription:
    """ Handle returned when registering a callback somewhere; calling
        :func:`dispose` runs the supplied *release* callable at most once.
    """

    def __init__(self, release: Callable[[], None]):
        self._release = release


    @property
    def disposed(self) -> bool:
        return self._release is None


    def dispose(self) -> None:
        release = self._release
        if release is None:
            return

        self._release = None
        release()


# end of class Subscription



class DisposableStore:
    """ A collection of objects with a ``dispose()`` method that are released
        together. Items are disposed in the order they were added. Anything
        added after the store itself was disposed is disposed immediately.
    """

    def __init__(self):
        self._items: List = []
        self.disposed = False


    def __len__(self):
        return len(self._items)


    def add(self, item):
        if self.disposed:
            logger.debug('disposing %r added to an already disposed store', item)
            item.dispose()
            return item

        self._items.append(item)
        return item


    def dispose(self) -> None:
        """ Dispose every item exactly once. If one or more items raise, the
            remaining items are still disposed and the first exception is
            raised afterwards.
        """

        if self.disposed:
            return

        self.disposed = True
        items = self._items
        self._items = []

        first = None
        for item in items:
            try:
                item.dispose()
            except Exception as e:
                logger.debug('error disposing %r', item, exc_info=True)
                if first is None:
                    first = e

        if first is not None:
            raise first


# end of class DisposableStore


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
