""" Exception classes raised by duplex. Everything raised on purpose by the
    peer engine, the codecs, or the channels derives from :class:`DuplexError`.
"""


class DuplexError(Exception):
    """ Base class for all duplex errors.
    """


class ConfigurationError(DuplexError):
    """ A peer was assembled incorrectly: a duplicate codec name, or an
        exposed API entry that cannot be called. Raised synchronously at the
        offending call, never transmitted to the remote side.
    """


class ProtocolError(DuplexError):
    """ The remote side sent something this peer cannot make sense of: a
        response for an unknown request, an envelope for an unregistered
        codec, an unknown anonymous function handle, or a malformed message.
    """


class ReceiptError(DuplexError):
    """ A caller tried to wait on the outcome of an invocation after it was
        already sent without a delivery receipt. This is a usage error on the
        local side, it never comes from the remote peer.
    """


class ChannelError(DuplexError):
    """ A message was handed to a channel that can no longer deliver it.
    """


class RemoteError(DuplexError):
    """ The reconstructed form of an exception raised on the remote side.

        :ivar message: The text of the original exception.
        :ivar name: The class name of the original exception, if known.
        :ivar stack: The formatted remote traceback, if known.
    """

    def __init__(self, message, name=None, stack=None):
        self.message = message
        self.name = name
        self.stack = stack
        super().__init__(message)


    def __repr__(self):
        if self.name is None:
            return 'RemoteError(%s)' % (repr(self.message))
        return 'RemoteError(%s: %s)' % (self.name, repr(self.message))


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
