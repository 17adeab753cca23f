"""Wire model for the FTX websocket API.

Inbound messages are decoded into ``InboundMessage``. Data-bearing messages
carry one of the payload records below; the session flattens them into the
caller-visible event stream (``Event``).

Prices and sizes are kept as ``Decimal``. JSON floats are parsed with
``parse_float=Decimal`` so no binary rounding happens on the way in.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, TypeAlias

from .errors import FtxDecodeError


class ChannelKind(Enum):
    """Subscription target types, valued by their wire name."""

    ORDERBOOK = "orderbook"
    TRADES = "trades"
    TICKER = "ticker"
    FILLS = "fills"

    @property
    def account_scoped(self) -> bool:
        """Account channels take no market symbol."""
        return self is ChannelKind.FILLS


@dataclass(frozen=True)
class Channel:
    """A subscription target.

    Equality is structural, so two ``Channel.trades("BTC-PERP")`` instances
    name the same subscription.
    """

    kind: ChannelKind
    symbol: str | None = None

    def __post_init__(self) -> None:
        if self.kind.account_scoped:
            if self.symbol:
                raise ValueError(f"{self.kind.value} channel takes no symbol")
        elif not self.symbol:
            raise ValueError(f"{self.kind.value} channel requires a symbol")

    @classmethod
    def orderbook(cls, symbol: str) -> Channel:
        return cls(ChannelKind.ORDERBOOK, symbol)

    @classmethod
    def trades(cls, symbol: str) -> Channel:
        return cls(ChannelKind.TRADES, symbol)

    @classmethod
    def ticker(cls, symbol: str) -> Channel:
        return cls(ChannelKind.TICKER, symbol)

    @classmethod
    def fills(cls) -> Channel:
        return cls(ChannelKind.FILLS)

    @classmethod
    def parse(cls, text: str) -> Channel:
        """Parse ``"trades:BTC-PERP"`` or ``"fills"`` into a Channel.

        Raises:
            ValueError: If the channel name is unknown or the symbol is
                missing/superfluous.
        """
        name, _, symbol = text.strip().partition(":")
        try:
            kind = ChannelKind(name.lower())
        except ValueError as err:
            raise ValueError(f"Unknown channel: {name!r}") from err
        return cls(kind, symbol or None)

    @property
    def name(self) -> str:
        """Wire name of the channel."""
        return self.kind.value

    @property
    def market(self) -> str:
        """Wire market field; empty for account-scoped channels."""
        return self.symbol or ""

    def __str__(self) -> str:
        if self.symbol is None:
            return self.kind.value
        return f"{self.kind.value}:{self.symbol}"


class MessageType(Enum):
    """Inbound message tags."""

    SUBSCRIBED = "subscribed"
    UNSUBSCRIBED = "unsubscribed"
    UPDATE = "update"
    PARTIAL = "partial"
    PONG = "pong"
    ERROR = "error"
    INFO = "info"


class Side(Enum):
    BUY = "buy"
    SELL = "sell"


class OrderbookAction(Enum):
    """``partial`` is a full snapshot, ``update`` a delta against it."""

    PARTIAL = "partial"
    UPDATE = "update"


class Liquidity(Enum):
    MAKER = "maker"
    TAKER = "taker"


@dataclass(frozen=True)
class Trade:
    """A single public trade."""

    id: int
    price: Decimal
    size: Decimal
    side: Side
    liquidation: bool
    time: datetime
    market: str | None = None


@dataclass(frozen=True)
class OrderbookData:
    """Orderbook snapshot or delta.

    Attributes:
        action: Whether this replaces the book or patches it.
        bids: ``(price, size)`` pairs; size 0 removes the level.
        asks: ``(price, size)`` pairs; size 0 removes the level.
        checksum: CRC32 of the top of book after applying this message.
        time: Exchange timestamp.
    """

    action: OrderbookAction
    bids: list[tuple[Decimal, Decimal]]
    asks: list[tuple[Decimal, Decimal]]
    checksum: int
    time: datetime
    market: str | None = None


@dataclass(frozen=True)
class Fill:
    """A fill on one of the account's orders."""

    id: int
    market: str
    future: str | None
    order_id: int
    trade_id: int | None
    price: Decimal
    size: Decimal
    side: Side
    fee: Decimal
    fee_rate: Decimal
    liquidity: Liquidity
    type: str
    time: datetime


@dataclass(frozen=True)
class Ticker:
    """Best bid/offer and last trade price."""

    bid: Decimal | None
    ask: Decimal | None
    bid_size: Decimal | None
    ask_size: Decimal | None
    last: Decimal | None
    time: datetime
    market: str | None = None


Event: TypeAlias = Trade | OrderbookData | Fill | Ticker
"""Caller-visible normalized event."""

Payload: TypeAlias = list[Trade] | OrderbookData | Fill | Ticker


@dataclass(frozen=True)
class InboundMessage:
    """Decoded server message."""

    type: MessageType
    channel: ChannelKind | None = None
    market: str | None = None
    data: Payload | None = None
    code: int | None = None
    msg: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)


def _decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"Expected a number, got {type(value).__name__}")
    return Decimal(str(value))


def _optional_decimal(value: Any) -> Decimal | None:
    return None if value is None else _decimal(value)


def _epoch(value: Any) -> datetime:
    return datetime.fromtimestamp(float(value), UTC)


def _iso(value: Any) -> datetime:
    if not isinstance(value, str):
        raise ValueError("Expected an ISO-8601 timestamp")
    return datetime.fromisoformat(value)


def _levels(value: Any) -> list[tuple[Decimal, Decimal]]:
    return [(_decimal(price), _decimal(size)) for price, size in value]


def parse_trade(data: dict[str, Any], market: str | None = None) -> Trade:
    return Trade(
        id=int(data["id"]),
        price=_decimal(data["price"]),
        size=_decimal(data["size"]),
        side=Side(data["side"]),
        liquidation=bool(data.get("liquidation", False)),
        time=_iso(data["time"]),
        market=market,
    )


def parse_orderbook(data: dict[str, Any], market: str | None = None) -> OrderbookData:
    return OrderbookData(
        action=OrderbookAction(data["action"]),
        bids=_levels(data["bids"]),
        asks=_levels(data["asks"]),
        checksum=int(data["checksum"]),
        time=_epoch(data["time"]),
        market=market,
    )


def parse_fill(data: dict[str, Any]) -> Fill:
    trade_id = data.get("tradeId")
    return Fill(
        id=int(data["id"]),
        market=data["market"],
        future=data.get("future"),
        order_id=int(data["orderId"]),
        trade_id=None if trade_id is None else int(trade_id),
        price=_decimal(data["price"]),
        size=_decimal(data["size"]),
        side=Side(data["side"]),
        fee=_decimal(data["fee"]),
        fee_rate=_decimal(data["feeRate"]),
        liquidity=Liquidity(data["liquidity"]),
        type=data.get("type", "order"),
        time=_iso(data["time"]),
    )


def parse_ticker(data: dict[str, Any], market: str | None = None) -> Ticker:
    return Ticker(
        bid=_optional_decimal(data.get("bid")),
        ask=_optional_decimal(data.get("ask")),
        bid_size=_optional_decimal(data.get("bidSize")),
        ask_size=_optional_decimal(data.get("askSize")),
        last=_optional_decimal(data.get("last")),
        time=_epoch(data["time"]),
        market=market,
    )


def _guess_channel(data: Any) -> ChannelKind:
    """Infer the payload shape when the message names no channel."""
    if isinstance(data, list):
        return ChannelKind.TRADES
    if isinstance(data, dict):
        if "checksum" in data:
            return ChannelKind.ORDERBOOK
        if "orderId" in data:
            return ChannelKind.FILLS
        if "bid" in data or "last" in data:
            return ChannelKind.TICKER
    raise ValueError("Unrecognized payload shape")


def parse_payload(
    channel: ChannelKind | None, data: Any, market: str | None = None
) -> Payload:
    """Decode a ``data`` field according to its originating channel."""
    kind = channel or _guess_channel(data)
    if kind is ChannelKind.TRADES:
        if not isinstance(data, list):
            raise ValueError("trades payload must be a list")
        return [parse_trade(item, market) for item in data]
    if not isinstance(data, dict):
        raise ValueError(f"{kind.value} payload must be an object")
    if kind is ChannelKind.ORDERBOOK:
        return parse_orderbook(data, market)
    if kind is ChannelKind.FILLS:
        return parse_fill(data)
    return parse_ticker(data, market)


def decode_message(text: str) -> InboundMessage:
    """Decode a TEXT frame into an InboundMessage.

    Raises:
        FtxDecodeError: On malformed JSON, an unknown type tag or a payload
            that does not match its channel's schema.
    """
    try:
        raw = json.loads(text, parse_float=Decimal)
    except json.JSONDecodeError as err:
        raise FtxDecodeError(f"Invalid JSON: {err}") from err
    if not isinstance(raw, dict):
        raise FtxDecodeError("Message is not a JSON object")
    return parse_message(raw)


def parse_message(raw: dict[str, Any]) -> InboundMessage:
    """Build an InboundMessage from an already-decoded JSON object."""
    try:
        msg_type = MessageType(raw["type"])
        channel = ChannelKind(raw["channel"]) if raw.get("channel") else None
        market = raw.get("market") or None
        data = raw.get("data")
        payload = None if data is None else parse_payload(channel, data, market)
        code = raw.get("code")
        return InboundMessage(
            type=msg_type,
            channel=channel,
            market=market,
            data=payload,
            code=None if code is None else int(code),
            msg=raw.get("msg"),
            raw=raw,
        )
    except (KeyError, TypeError, ValueError, ArithmeticError) as err:
        raise FtxDecodeError(f"Unexpected message shape: {err!r}") from err


def expand(message: InboundMessage) -> list[Event]:
    """Flatten a message payload into normalized events, in wire order."""
    data = message.data
    if data is None:
        return []
    if isinstance(data, list):
        return list(data)
    return [data]
