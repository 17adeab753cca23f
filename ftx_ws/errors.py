"""Client error types for the FTX websocket stream."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .model import Channel


class FtxClientError(Exception):
    """Base error for FTX websocket client failures."""


class FtxConnectionError(FtxClientError):
    """Network connection to the exchange failed or was closed."""


class FtxTimeout(FtxConnectionError):
    """Timeout while connecting to the exchange."""


class FtxHandshakeError(FtxConnectionError):
    """WebSocket handshake failed."""


class FtxDecodeError(FtxClientError):
    """Inbound message was not valid JSON or had an unexpected shape."""


class FtxProtocolError(FtxClientError):
    """The exchange did not follow the expected command protocol."""


class FtxMissingConfirmationError(FtxProtocolError):
    """No subscribe/unsubscribe confirmation arrived within the window."""

    def __init__(self, channel: Channel, window: int) -> None:
        super().__init__(
            f"Missing subscription confirmation for {channel} "
            f"within {window} messages"
        )
        self.channel = channel
        self.window = window


class FtxNotSubscribedError(FtxProtocolError):
    """Unsubscribe requested for a channel that is not tracked."""

    def __init__(self, channel: Channel) -> None:
        super().__init__(f"Not subscribed to this channel: {channel}")
        self.channel = channel


class FtxChecksumError(FtxProtocolError):
    """Local orderbook checksum disagrees with the exchange checksum."""

    def __init__(self, market: str | None, expected: int, actual: int) -> None:
        super().__init__(
            f"Orderbook checksum mismatch for {market}: "
            f"expected {expected}, computed {actual}"
        )
        self.market = market
        self.expected = expected
        self.actual = actual
