"""Authenticated streaming client for the FTX websocket API."""

__version__ = "0.1.0"

from .config import FtxCredentials, load_credentials
from .errors import (
    FtxChecksumError,
    FtxClientError,
    FtxConnectionError,
    FtxDecodeError,
    FtxHandshakeError,
    FtxMissingConfirmationError,
    FtxNotSubscribedError,
    FtxProtocolError,
    FtxTimeout,
)
from .keepalive import Keepalive
from .model import (
    Channel,
    ChannelKind,
    Event,
    Fill,
    InboundMessage,
    Liquidity,
    MessageType,
    OrderbookAction,
    OrderbookData,
    Side,
    Ticker,
    Trade,
)
from .orderbook import Orderbook
from .protocol import build_login, sign_login
from .session import FtxSession
from .subscriptions import SubscriptionStatus
from .ws import ENDPOINT, ENDPOINT_US, connect_websocket
from .ws_client import FtxWsClient, FtxWsMessage, FtxWsMessageType

__all__ = [
    "ENDPOINT",
    "ENDPOINT_US",
    "Channel",
    "ChannelKind",
    "Event",
    "Fill",
    "FtxChecksumError",
    "FtxClientError",
    "FtxConnectionError",
    "FtxCredentials",
    "FtxDecodeError",
    "FtxHandshakeError",
    "FtxMissingConfirmationError",
    "FtxNotSubscribedError",
    "FtxProtocolError",
    "FtxSession",
    "FtxTimeout",
    "FtxWsClient",
    "FtxWsMessage",
    "FtxWsMessageType",
    "InboundMessage",
    "Keepalive",
    "Liquidity",
    "MessageType",
    "Orderbook",
    "OrderbookAction",
    "OrderbookData",
    "Side",
    "SubscriptionStatus",
    "Ticker",
    "Trade",
    "__version__",
    "build_login",
    "connect_websocket",
    "sign_login",
]
