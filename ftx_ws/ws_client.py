"""WebSocket client wrapper for the FTX stream."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from websockets.asyncio.client import ClientConnection
from websockets.exceptions import ConnectionClosed

from .errors import FtxClientError, FtxConnectionError, FtxDecodeError
from .model import InboundMessage, decode_message
from .ws import ENDPOINT, connect_websocket

_LOGGER = logging.getLogger(__name__)


class FtxWsMessageType(Enum):
    """Normalized WebSocket message types."""

    TEXT = "text"
    CLOSED = "closed"
    ERROR = "error"


@dataclass(frozen=True)
class FtxWsMessage:
    """Normalized WebSocket message payload."""

    type: FtxWsMessageType
    data: str | None = None


class FtxWsClient:
    """Wrapper around the websockets library for the FTX stream.

    Exposes the transport as ``send_json`` plus a single-message
    ``receive``; binary frames never reach the caller.
    """

    def __init__(self) -> None:
        self._ws: ClientConnection | None = None
        self.url: str | None = None

    async def connect(self, url: str = ENDPOINT, *, timeout: float = 15.0) -> None:
        """Connect to the exchange websocket."""
        self._ws = await connect_websocket(url, timeout=timeout)
        self.url = url

    @property
    def connected(self) -> bool:
        return self._ws is not None

    async def close(self) -> None:
        """Close the websocket connection."""
        if self._ws is not None:
            ws, self._ws = self._ws, None
            await ws.close()

    async def send_json(self, payload: dict[str, Any]) -> None:
        """Send a JSON payload to the websocket.

        Raises:
            FtxConnectionError: If not connected or the send fails
        """
        if self._ws is None:
            raise FtxConnectionError("WebSocket is not connected")
        try:
            await self._ws.send(json.dumps(payload))
        except ConnectionClosed as err:
            raise FtxConnectionError("WebSocket closed during send") from err
        except OSError as err:
            raise FtxConnectionError("WebSocket send failed") from err

    async def receive(self) -> FtxWsMessage:
        """Wait for the next TEXT frame, or a CLOSED/ERROR marker.

        Raises:
            FtxConnectionError: If not connected
        """
        if self._ws is None:
            raise FtxConnectionError("WebSocket is not connected")

        while True:
            try:
                msg = await self._ws.recv()
            except ConnectionClosed as err:
                _LOGGER.debug("[%s] Connection closed: %s", self.url, err)
                return FtxWsMessage(type=FtxWsMessageType.CLOSED, data=str(err))
            except Exception as err:
                _LOGGER.debug("[%s] Receive failed: %r", self.url, err)
                return FtxWsMessage(type=FtxWsMessageType.ERROR, data=repr(err))

            normalized = self._normalize_message(msg)
            if normalized is not None:
                return normalized

    @staticmethod
    def _normalize_message(msg: Any) -> FtxWsMessage | None:
        """Normalize backend-specific frames into FtxWsMessage."""
        if isinstance(msg, (bytes, bytearray, memoryview)):
            return None
        if isinstance(msg, str):
            return FtxWsMessage(FtxWsMessageType.TEXT, msg)
        return None

    @staticmethod
    def decode(message: FtxWsMessage) -> InboundMessage:
        """Decode a TEXT message payload into an InboundMessage.

        Raises:
            FtxClientError: If the message is not TEXT
            FtxDecodeError: If the payload does not decode
        """
        if message.type is not FtxWsMessageType.TEXT:
            raise FtxClientError("Only TEXT messages can be decoded")
        if not isinstance(message.data, str):
            raise FtxDecodeError("Message data is not a string")
        return decode_message(message.data)
