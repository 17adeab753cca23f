"""Outbound command builders for the FTX websocket API.

Commands are plain dicts; ``FtxWsClient.send_json`` serializes them.
"""

from __future__ import annotations

import hashlib
import hmac
import time
from typing import Any

from .model import Channel

LOGIN_SUFFIX = "websocket_login"


def timestamp_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def sign_login(secret: str, timestamp: int) -> str:
    """Authentication tag for the login command.

    HMAC-SHA256 of ``"{timestamp}websocket_login"`` keyed by the API secret,
    lowercase hex encoded.
    """
    payload = f"{timestamp}{LOGIN_SUFFIX}".encode()
    return hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()


def build_login(
    *,
    key: str,
    secret: str,
    subaccount: str | None = None,
    timestamp: int | None = None,
) -> dict[str, Any]:
    """Construct the login command.

    Args:
        key: API key.
        secret: API secret, used only for signing.
        subaccount: Optional subaccount name; sent as null when omitted.
        timestamp: Optional epoch milliseconds override.
    """
    ts = timestamp if timestamp is not None else timestamp_ms()
    return {
        "op": "login",
        "args": {
            "key": key,
            "sign": sign_login(secret, ts),
            "time": ts,
            "subaccount": subaccount,
        },
    }


def build_ping() -> dict[str, Any]:
    return {"op": "ping"}


def _channel_command(op: str, channel: Channel) -> dict[str, Any]:
    return {"op": op, "channel": channel.name, "market": channel.market}


def build_subscribe(channel: Channel) -> dict[str, Any]:
    return _channel_command("subscribe", channel)


def build_unsubscribe(channel: Channel) -> dict[str, Any]:
    return _channel_command("unsubscribe", channel)
