"""Cooperative message pump for an FTX session.

A single loop races the keepalive timer against the transport. Whichever is
ready first is serviced; a ping is always sent at a message boundary, never
in the middle of handling one. The in-flight receive and timer survive
between calls so that losing the race never drops a frame or a tick.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Any

from .errors import FtxConnectionError
from .keepalive import Keepalive
from .model import Event, InboundMessage, MessageType, expand
from .protocol import build_ping
from .ws_client import FtxWsClient, FtxWsMessage, FtxWsMessageType

_LOGGER = logging.getLogger(__name__)


class MessagePump:
    """Reads inbound messages and feeds normalized events into a queue."""

    def __init__(
        self,
        client: FtxWsClient,
        keepalive: Keepalive,
        queue: deque[Event],
    ) -> None:
        self._client = client
        self._keepalive = keepalive
        self._queue = queue
        self._recv_task: asyncio.Future[FtxWsMessage] | None = None
        self._tick_task: asyncio.Future[Any] | None = None
        self.pings_sent = 0

    @property
    def _tag(self) -> str | None:
        return self._client.url

    async def next_response(self) -> InboundMessage:
        """Return the next non-pong message, pinging whenever the timer fires.

        Raises:
            FtxConnectionError: If the transport closes or fails
            FtxDecodeError: If a TEXT frame does not decode
        """
        while True:
            if self._recv_task is None:
                self._recv_task = asyncio.ensure_future(self._client.receive())
            if self._tick_task is None:
                self._tick_task = asyncio.ensure_future(self._keepalive.tick())

            done, _ = await asyncio.wait(
                {self._recv_task, self._tick_task},
                return_when=asyncio.FIRST_COMPLETED,
            )

            if self._tick_task in done:
                tick, self._tick_task = self._tick_task, None
                tick.result()
                await self._send_ping()

            if self._recv_task in done:
                received, self._recv_task = self._recv_task, None
                message = self._decode(received.result())
                if message.type is MessageType.PONG:
                    _LOGGER.debug("[%s] Pong", self._tag)
                    continue
                return message

    def handle(self, message: InboundMessage) -> int:
        """Queue the events carried by ``message``; return how many."""
        if message.type is MessageType.ERROR:
            _LOGGER.warning(
                "[%s] Server error %s: %s", self._tag, message.code, message.msg
            )
        elif message.type is MessageType.INFO:
            _LOGGER.info("[%s] Server info %s: %s", self._tag, message.code, message.msg)

        events = expand(message)
        self._queue.extend(events)
        if events:
            _LOGGER.debug(
                "[%s] Queued %d event(s) from %s %s",
                self._tag,
                len(events),
                message.type.value,
                message.channel.value if message.channel else "-",
            )
        return len(events)

    async def poll(self) -> int:
        """Read one message and route it through update handling."""
        return self.handle(await self.next_response())

    async def close(self) -> None:
        """Cancel the in-flight receive and timer."""
        pending = [t for t in (self._recv_task, self._tick_task) if t is not None]
        self._recv_task = None
        self._tick_task = None
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def _send_ping(self) -> None:
        await self._client.send_json(build_ping())
        self.pings_sent += 1
        _LOGGER.debug("[%s] Ping #%d sent", self._tag, self.pings_sent)

    def _decode(self, message: FtxWsMessage) -> InboundMessage:
        if message.type is FtxWsMessageType.CLOSED:
            _LOGGER.info("[%s] WebSocket closed by exchange", self._tag)
            raise FtxConnectionError(f"WebSocket closed: {message.data}")
        if message.type is FtxWsMessageType.ERROR:
            _LOGGER.error("[%s] WebSocket error: %s", self._tag, message.data)
            raise FtxConnectionError(f"WebSocket error: {message.data}")
        return FtxWsClient.decode(message)
