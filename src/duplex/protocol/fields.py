"""Protocol constants.

Keep these in one place to avoid stringly-typed message handling.
"""

# Key naming the codec inside a wrapped value.
KIND = "$"

# Built-in codec names.
ERROR = "Error"
FUNCTION = "Function"
UNDEFINED = "Undefined"

# Message id used when the sender does not want a response.
NO_RECEIPT = 0
