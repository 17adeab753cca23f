"""WebSocket connection helpers for the FTX streaming endpoints."""

from __future__ import annotations

import asyncio

import websockets
from websockets.asyncio.client import ClientConnection
from websockets.exceptions import (
    InvalidHandshake,
    InvalidURI,
    WebSocketException,
)

from .errors import (
    FtxConnectionError,
    FtxHandshakeError,
    FtxTimeout,
)

ENDPOINT = "wss://ftx.com/ws"
ENDPOINT_US = "wss://ftx.us/ws"


async def connect_websocket(
    url: str = ENDPOINT,
    *,
    timeout: float = 15.0,
) -> ClientConnection:
    """Connect to an FTX websocket endpoint.

    Protocol-level ping frames are disabled: the exchange expects the
    application ``{"op": "ping"}`` command instead, which the session sends.

    Args:
        url: Endpoint URL (``ENDPOINT`` or ``ENDPOINT_US``)
        timeout: Connection timeout
    """
    try:
        return await asyncio.wait_for(
            websockets.connect(
                url,
                ping_interval=None,
                close_timeout=5,
                max_size=None,
            ),
            timeout=timeout,
        )
    except TimeoutError as err:
        raise FtxTimeout("WebSocket connection timed out") from err
    except (InvalidHandshake, InvalidURI) as err:
        raise FtxHandshakeError("WebSocket handshake failed") from err
    except (OSError, WebSocketException) as err:
        raise FtxConnectionError("WebSocket connection failed") from err
