"""Channel implementations."""

from .base import Channel
from .bridge import Bridge, BridgeChannel
from .zmq import ZmqChannel
