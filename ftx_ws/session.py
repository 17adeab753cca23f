"""Session facade for the FTX websocket stream.

This module provides the object callers hold. It handles:
- Connection and login handshake
- Channel subscriptions with confirmation
- Keepalive pings on the same connection
- Buffering so batched messages are delivered one event at a time

A session is single-owner and not safe for concurrent use: callers that
share one between tasks must serialize ``subscribe``/``unsubscribe``/``next``
themselves (for example behind an ``asyncio.Lock``). A dropped connection
ends the session; there is no reconnection.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import AsyncIterator, Iterable
from types import TracebackType
from typing import TYPE_CHECKING

from .errors import FtxClientError
from .keepalive import DEFAULT_PING_INTERVAL, Keepalive
from .model import Channel, Event
from .protocol import build_login
from .pump import MessagePump
from .subscriptions import (
    CONFIRMATION_WINDOW,
    SubscriptionProtocol,
    SubscriptionStatus,
    SubscriptionTracker,
)
from .ws import ENDPOINT, ENDPOINT_US
from .ws_client import FtxWsClient

if TYPE_CHECKING:
    from .config import FtxCredentials

_LOGGER = logging.getLogger(__name__)


class FtxSession:
    """Authenticated FTX websocket session.

    Usage:
        session = await FtxSession.connect(key, secret)
        await session.subscribe([Channel.trades("BTC-PERP"), Channel.fills()])
        async for event in session:
            ...
        await session.close()
    """

    ENDPOINT = ENDPOINT
    ENDPOINT_US = ENDPOINT_US

    def __init__(
        self,
        client: FtxWsClient,
        *,
        keepalive: Keepalive | None = None,
        ping_interval: float = DEFAULT_PING_INTERVAL,
        confirmation_window: int = CONFIRMATION_WINDOW,
    ) -> None:
        """Wrap an already-connected client.

        Args:
            client: Connected websocket client, owned by the session from now on
            keepalive: Optional timer override (tests use a simulated clock)
            ping_interval: Keepalive ping interval (seconds)
            confirmation_window: Messages scanned for each acknowledgement
        """
        self._client = client
        self._queue: deque[Event] = deque()
        self._keepalive = keepalive or Keepalive(ping_interval)
        self._pump = MessagePump(client, self._keepalive, self._queue)
        self._tracker = SubscriptionTracker()
        self._subscriptions = SubscriptionProtocol(
            client, self._pump, self._tracker, window=confirmation_window
        )
        self._closed = False

    # -------------------------------------------------------------------------
    # Public API: Connection Management
    # -------------------------------------------------------------------------

    @classmethod
    async def connect(
        cls,
        key: str,
        secret: str,
        subaccount: str | None = None,
        *,
        timeout: float = 15.0,
        ping_interval: float = DEFAULT_PING_INTERVAL,
        confirmation_window: int = CONFIRMATION_WINDOW,
    ) -> FtxSession:
        """Connect to ``wss://ftx.com/ws`` and log in."""
        return await cls.connect_with_endpoint(
            cls.ENDPOINT,
            key,
            secret,
            subaccount,
            timeout=timeout,
            ping_interval=ping_interval,
            confirmation_window=confirmation_window,
        )

    @classmethod
    async def connect_us(
        cls,
        key: str,
        secret: str,
        subaccount: str | None = None,
        *,
        timeout: float = 15.0,
        ping_interval: float = DEFAULT_PING_INTERVAL,
        confirmation_window: int = CONFIRMATION_WINDOW,
    ) -> FtxSession:
        """Connect to ``wss://ftx.us/ws`` and log in."""
        return await cls.connect_with_endpoint(
            cls.ENDPOINT_US,
            key,
            secret,
            subaccount,
            timeout=timeout,
            ping_interval=ping_interval,
            confirmation_window=confirmation_window,
        )

    @classmethod
    async def from_credentials(
        cls,
        credentials: FtxCredentials,
        *,
        us: bool = False,
        timeout: float = 15.0,
        ping_interval: float = DEFAULT_PING_INTERVAL,
        confirmation_window: int = CONFIRMATION_WINDOW,
    ) -> FtxSession:
        """Connect using a credentials object from ``ftx_ws.config``."""
        return await cls.connect_with_endpoint(
            cls.ENDPOINT_US if us else cls.ENDPOINT,
            credentials.key,
            credentials.secret,
            credentials.subaccount,
            timeout=timeout,
            ping_interval=ping_interval,
            confirmation_window=confirmation_window,
        )

    @classmethod
    async def connect_with_endpoint(
        cls,
        url: str,
        key: str,
        secret: str,
        subaccount: str | None = None,
        *,
        timeout: float = 15.0,
        ping_interval: float = DEFAULT_PING_INTERVAL,
        confirmation_window: int = CONFIRMATION_WINDOW,
    ) -> FtxSession:
        """Open the websocket, send the login command and return a session.

        Login is not acknowledged by the exchange. Bad credentials surface
        later as a server ``error`` message or a failed ``fills``
        subscription.

        Raises:
            FtxConnectionError: If the connection or the login send fails
        """
        _LOGGER.info("[%s] Connecting", url)
        client = FtxWsClient()
        await client.connect(url, timeout=timeout)

        try:
            await client.send_json(
                build_login(key=key, secret=secret, subaccount=subaccount)
            )
        except FtxClientError:
            await client.close()
            raise

        _LOGGER.info(
            "[%s] Login sent (subaccount=%s)", url, subaccount if subaccount else "-"
        )
        return cls(
            client,
            ping_interval=ping_interval,
            confirmation_window=confirmation_window,
        )

    async def close(self) -> None:
        """Stop the keepalive and close the websocket."""
        if self._closed:
            return
        _LOGGER.info("[%s] Closing session", self._client.url)
        self._closed = True
        await self._pump.close()
        await self._client.close()

    @property
    def closed(self) -> bool:
        return self._closed

    async def __aenter__(self) -> FtxSession:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Public API: Subscriptions
    # -------------------------------------------------------------------------

    async def subscribe(self, channels: Iterable[Channel]) -> None:
        """Subscribe to channels, one confirmation wait per channel."""
        await self._subscriptions.subscribe(channels)

    async def unsubscribe(self, channels: Iterable[Channel]) -> None:
        """Unsubscribe from channels previously passed to ``subscribe``."""
        await self._subscriptions.unsubscribe(channels)

    async def unsubscribe_all(self) -> None:
        """Unsubscribe from every tracked channel."""
        await self._subscriptions.unsubscribe_all()

    @property
    def channels(self) -> list[Channel]:
        """Tracked channels in request order, whatever their status."""
        return self._tracker.channels()

    @property
    def subscriptions(self) -> dict[Channel, SubscriptionStatus]:
        """Latest subscription status per tracked channel."""
        return self._tracker.snapshot()

    def subscription_status(self, channel: Channel) -> SubscriptionStatus | None:
        return self._tracker.status(channel)

    # -------------------------------------------------------------------------
    # Public API: Events
    # -------------------------------------------------------------------------

    @property
    def pending_events(self) -> int:
        """Events already received but not yet returned by ``next``."""
        return len(self._queue)

    async def next(self) -> Event | None:
        """Return the next event in arrival order.

        Returns None once the session has been closed locally.

        Raises:
            FtxConnectionError: If the exchange closes the connection or the
                transport fails
            FtxDecodeError: If an inbound message does not decode
        """
        while True:
            if self._queue:
                return self._queue.popleft()
            if self._closed:
                return None
            await self._pump.poll()

    def __aiter__(self) -> AsyncIterator[Event]:
        return self

    async def __anext__(self) -> Event:
        event = await self.next()
        if event is None:
            raise StopAsyncIteration
        return event
