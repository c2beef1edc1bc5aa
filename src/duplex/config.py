""" Process-wide settings for duplex, taken from environment variables. The
    values are read once on import; call :func:`load` to pick up changes to
    the environment made after that point.

    ``DUPLEX_TRACE``
        Any of ``1``, ``true``, ``yes`` or ``on`` enables per-message debug
        logging in the bundled channels.

    ``DUPLEX_ZMQ_LINGER``
        The ZeroMQ ``LINGER`` socket option, in milliseconds, applied to
        sockets created by :class:`duplex.channel.zmq.ZmqChannel`.
"""

import os

truthy = set(('1', 'true', 'yes', 'on'))

trace = False
zmq_linger = 0


def load(environment=None):
    """ Refresh the module-level settings from *environment*, which defaults
        to :data:`os.environ`. A malformed ``DUPLEX_ZMQ_LINGER`` raises
        :class:`ValueError` and leaves the previous settings untouched.
    """

    global trace
    global zmq_linger

    if environment is None:
        environment = os.environ

    new_trace = environment.get('DUPLEX_TRACE', '')
    new_trace = new_trace.strip().lower() in truthy

    new_linger = environment.get('DUPLEX_ZMQ_LINGER', '').strip()

    if new_linger == '':
        new_linger = 0
    else:
        try:
            new_linger = int(new_linger)
        except ValueError:
            raise ValueError('DUPLEX_ZMQ_LINGER must be an integer: ' + repr(new_linger))

    trace = new_trace
    zmq_linger = new_linger


load()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
