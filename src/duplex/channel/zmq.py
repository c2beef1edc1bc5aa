"""ZeroMQ channel.

Each duplex message travels as a single JSON frame. The socket type decides
the framing around it:

    PAIR, DEALER
        [json]

    ROUTER
        [identity, json]; the reply capability handed to message handlers
        routes back to the identity the message came from.

The channel uses :mod:`zmq.asyncio` sockets and must be used with an event
loop running: handlers are called from a receiving task, and outbound
messages are queued and written by a single sending task so that they leave
in the order :func:`ZmqChannel.send_message` was called.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import Optional, Sequence

import zmq
import zmq.asyncio

from .. import config
from .. import json
from ..errors import ChannelError
from .base import Channel

logger = logging.getLogger(__name__)


def _socket(socket_type: int, context: Optional[zmq.asyncio.Context]) -> zmq.asyncio.Socket:
    if context is None:
        context = zmq.asyncio.Context.instance()

    socket = context.socket(socket_type)
    socket.setsockopt(zmq.LINGER, config.zmq_linger)
    return socket


class ZmqChannel(Channel):
    """Carry duplex messages over a :mod:`zmq.asyncio` *socket*."""

    def __init__(self, socket: zmq.asyncio.Socket, name: Optional[str] = None):
        Channel.__init__(self)
        self.socket = socket
        self.name = name or f"zmq.{id(self)}"
        self.socket_type = socket.getsockopt(zmq.TYPE)
        self.disposed = False

        self._outbox: Optional[asyncio.Queue] = None
        self._sender: Optional[asyncio.Task] = None
        self._receiver: Optional[asyncio.Task] = None

    def __repr__(self):
        return f"<ZmqChannel {self.name}>"

    @classmethod
    def bind(cls, address: str, socket_type: int = zmq.PAIR, context: Optional[zmq.asyncio.Context] = None) -> "ZmqChannel":
        """Create a socket of *socket_type*, bind it to *address*, and wrap it."""

        socket = _socket(socket_type, context)
        try:
            socket.bind(address)
        except zmq.ZMQError as exc:
            socket.close(linger=0)
            raise ChannelError(f"unable to bind {address}: {exc}") from exc
        return cls(socket, address)

    @classmethod
    def connect(cls, address: str, socket_type: int = zmq.PAIR, context: Optional[zmq.asyncio.Context] = None) -> "ZmqChannel":
        """Create a socket of *socket_type*, connect it to *address*, and wrap it."""

        socket = _socket(socket_type, context)
        try:
            socket.connect(address)
        except zmq.ZMQError as exc:
            socket.close(linger=0)
            raise ChannelError(f"unable to connect {address}: {exc}") from exc
        return cls(socket, address)

    # --- Channel contract ---
    def on_message(self, handler):
        subscription = Channel.on_message(self, handler)

        if self._receiver is None:
            loop = asyncio.get_running_loop()
            self._receiver = loop.create_task(self._receive())

        return subscription

    def send_message(self, message: list) -> None:
        if self.socket_type == zmq.ROUTER:
            raise ChannelError("a ROUTER socket can only reply to a received message")

        self._enqueue((), message)

    def dispose(self) -> None:
        if self.disposed:
            return

        self.disposed = True
        self._handlers.clear()

        for task in (self._receiver, self._sender):
            if task is not None and not task.done():
                task.cancel()

        self._receiver = None
        self._sender = None
        self.socket.close(linger=config.zmq_linger)
        logger.debug("%r disposed", self)

    # --- internal ---
    def _enqueue(self, prefix: Sequence[bytes], message: list) -> None:
        if self.disposed:
            raise ChannelError(f"cannot send on a disposed channel: {self.name}")

        body = json.dumps(list(message))

        if config.trace:
            logger.debug("[%s] SEND %s", self.name, body.decode())

        if self._outbox is None:
            loop = asyncio.get_running_loop()
            self._outbox = asyncio.Queue()
            self._sender = loop.create_task(self._send())

        self._outbox.put_nowait(tuple(prefix) + (body,))

    def _reply(self, identity: bytes, message: list) -> None:
        self._enqueue((identity,), message)

    async def _send(self) -> None:
        while True:
            frames = await self._outbox.get()
            try:
                await self.socket.send_multipart(frames)
            except zmq.ZMQError as exc:
                asyncio.get_running_loop().call_exception_handler({
                    "message": f"unable to send on {self.name}",
                    "exception": exc,
                    "channel": self,
                })

    async def _receive(self) -> None:
        while True:
            try:
                frames = await self.socket.recv_multipart()
            except zmq.ZMQError:
                if self.disposed:
                    return
                raise

            if len(frames) > 1:
                reply = functools.partial(self._reply, frames[0])
            else:
                reply = self.send_message

            body = frames[-1]

            try:
                inbound = json.loads(body)
            except json.JSONDecodeError:
                logger.debug("[%s] discarding non-JSON frame %r", self.name, body)
                continue

            if not isinstance(inbound, list):
                logger.debug("[%s] discarding non-array message %r", self.name, inbound)
                continue

            if config.trace:
                logger.debug("[%s] RECV %s", self.name, body.decode())

            self._deliver(inbound, reply)
