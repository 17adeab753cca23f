"""Pytest configuration and fixtures for ftx_ws tests."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import pytest

from ftx_ws.keepalive import Keepalive
from ftx_ws.ws_client import FtxWsMessage, FtxWsMessageType


class ScriptedClient:
    """Stand-in for FtxWsClient that replays a fixed list of inbound frames.

    Dicts are sent as TEXT JSON, strings as raw TEXT, and FtxWsMessage
    instances as-is. Once the script is exhausted ``receive`` blocks forever,
    like a quiet exchange.
    """

    def __init__(self, script: list[Any] | None = None) -> None:
        self.url = "wss://test.invalid/ws"
        self.script: list[Any] = list(script or [])
        self.sent: list[dict[str, Any]] = []
        self.received = 0
        self.closed = False

    def feed(self, *frames: Any) -> None:
        self.script.extend(frames)

    async def send_json(self, payload: dict[str, Any]) -> None:
        self.sent.append(payload)

    async def receive(self) -> FtxWsMessage:
        if not self.script:
            await asyncio.Event().wait()
        frame = self.script.pop(0)
        self.received += 1
        if isinstance(frame, FtxWsMessage):
            return frame
        if isinstance(frame, dict):
            frame = json.dumps(frame)
        return FtxWsMessage(FtxWsMessageType.TEXT, frame)

    async def close(self) -> None:
        self.closed = True


async def never(_delay: float) -> None:
    """Sleep that never returns; disables keepalive ticks."""
    await asyncio.Event().wait()


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def trade(trade_id: int, price: float = 100.0, side: str = "buy") -> dict[str, Any]:
    return {
        "id": trade_id,
        "price": price,
        "size": 0.5,
        "side": side,
        "liquidation": False,
        "time": "2021-05-23T05:24:24.315884+00:00",
    }


def trades_message(*trade_ids: int, market: str = "BTC-PERP") -> dict[str, Any]:
    return {
        "channel": "trades",
        "market": market,
        "type": "update",
        "data": [trade(i) for i in trade_ids],
    }


def orderbook_message(
    *,
    action: str = "update",
    bids: list[list[float]] | None = None,
    asks: list[list[float]] | None = None,
    checksum: int = 0,
    market: str = "BTC-PERP",
) -> dict[str, Any]:
    return {
        "channel": "orderbook",
        "market": market,
        "type": "partial" if action == "partial" else "update",
        "data": {
            "action": action,
            "bids": bids or [],
            "asks": asks or [],
            "checksum": checksum,
            "time": 1621747464.123,
        },
    }


def fill_message(fill_id: int = 7) -> dict[str, Any]:
    return {
        "channel": "fills",
        "type": "update",
        "data": {
            "id": fill_id,
            "market": "BTC-PERP",
            "future": "BTC-PERP",
            "orderId": 42,
            "tradeId": 99,
            "price": 35000.5,
            "size": 0.01,
            "side": "sell",
            "fee": 0.07,
            "feeRate": 0.0002,
            "liquidity": "taker",
            "type": "order",
            "time": "2021-05-23T05:24:24.315884+00:00",
        },
    }


def ack(kind: str, channel: str = "trades", market: str = "BTC-PERP") -> dict[str, Any]:
    return {"type": kind, "channel": channel, "market": market}


@pytest.fixture
def idle_keepalive() -> Keepalive:
    """Keepalive whose timer never fires."""
    return Keepalive(15.0, sleep=never)


@pytest.fixture
def client() -> ScriptedClient:
    return ScriptedClient()
