""" Shorthand for building a :class:`duplex.peer.Peer`:

    .. code-block:: python

        peer = duplex.expose({'ping': ping}).connect(channel)
        remote = duplex.connect(channel)
"""

from .peer import Peer, exposed


class Builder:
    """ Holds a validated local API until a channel is supplied.
    """

    def __init__(self, api=None):
        # Validate now so a bad API is reported where it was exposed.
        exposed(api)
        self.api = api


    def connect(self, channel, codecs=()):
        return Peer(channel, self.api, codecs)


# end of class Builder



def expose(api):
    """ Start building a peer that serves *api* to the remote side.
    """

    return Builder(api)



def connect(channel, codecs=()):
    """ Return a peer on *channel* that exposes nothing and only invokes.
    """

    return Peer(channel, None, codecs)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
