''' Wrapper around :mod:`orjson` so every component serializes messages the
    same way. :func:`dumps` always returns bytes; :func:`loads` accepts bytes
    or str.
'''

import orjson

JSONDecodeError = orjson.JSONDecodeError

# Non-string dictionary keys are written as strings, the same as the
# standard library would; orjson refuses them otherwise.
options = orjson.OPT_NON_STR_KEYS


def dumps(value):
    return orjson.dumps(value, option=options)


def loads(encoded):
    return orjson.loads(encoded)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
