""" Classification and construction of the positional messages exchanged by
    two peers. There are exactly two shapes on the wire:

    Invocation
        ``[id, target, arg1, arg2, ...]``, where *id* is a non-negative
        integer and *target* is either a method name (str) or a positive
        integer anonymous function handle. An *id* of zero asks the remote
        side not to respond at all.

    Response
        ``[-id, error, result]``, where *-id* is the negated id of the
        invocation being answered, *error* is None or a wrapped error, and
        *result* is the encoded return value.

    Messages are plain lists so that any channel able to carry JSON arrays
    can carry them.
"""

from . import fields


def _is_integer(value):
    # bool is an int subclass, but True is not a request id.
    return isinstance(value, int) and not isinstance(value, bool)


def is_wrapped(value):
    """ Return True if *value* is an envelope produced by a codec.
    """

    if isinstance(value, dict) == False:
        return False

    return isinstance(value.get(fields.KIND), str)


def is_wrapped_error(value):
    """ Return True if *value* is a well-formed wrapped error: the kind must
        be ``Error``, the message must be a string, and the optional name and
        stack fields must be strings when present.
    """

    if is_wrapped(value) == False:
        return False

    if value[fields.KIND] != fields.ERROR:
        return False

    if isinstance(value.get('message'), str) == False:
        return False

    for optional in ('name', 'stack'):
        field = value.get(optional)
        if field is not None and isinstance(field, str) == False:
            return False

    return True


def is_handle(target):
    return _is_integer(target) and target > 0


def is_invocation(message):
    """ Return True if *message* has the Invocation shape.
    """

    if isinstance(message, (list, tuple)) == False or len(message) < 2:
        return False

    id = message[0]
    target = message[1]

    if _is_integer(id) == False or id < 0:
        return False

    if isinstance(target, str):
        return True

    return is_handle(target)


def is_response(message):
    """ Return True if *message* has the Response shape.
    """

    if isinstance(message, (list, tuple)) == False or len(message) < 2:
        return False

    id = message[0]
    error = message[1]

    if _is_integer(id) == False or id >= 0:
        return False

    return error is None or is_wrapped_error(error)


def invocation(id, target, arguments=()):
    """ Build an Invocation message. The *arguments* must already be encoded.
    """

    if _is_integer(id) == False or id < 0:
        raise ValueError('invocation id must be a non-negative integer: ' + repr(id))

    if isinstance(target, str) == False and is_handle(target) == False:
        raise ValueError('invocation target must be a name or a positive handle: ' + repr(target))

    message = [id, target]
    message.extend(arguments)
    return message


def response(id, error=None, result=None):
    """ Build the Response message answering the invocation numbered *id*.
        The *error* and *result* must already be encoded.
    """

    if _is_integer(id) == False or id <= 0:
        raise ValueError('only invocations with a positive id can be answered: ' + repr(id))

    return [-id, error, result]


def unpack_invocation(message):
    """ Split an Invocation into ``(id, target, arguments)``.
    """

    return message[0], message[1], list(message[2:])


def unpack_response(message):
    """ Split a Response into ``(request_id, error, result)``, where the
        request id is positive again. A two-element response has no result;
        the returned result is the encoded unit value in that case.
    """

    request_id = -message[0]
    error = message[1]

    if len(message) > 2:
        result = message[2]
    else:
        result = {fields.KIND: fields.UNDEFINED}

    return request_id, error, result


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
