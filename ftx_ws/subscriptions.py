"""Subscribe/unsubscribe protocol with bounded confirmation waits.

Each command is followed by a scan of at most ``window`` inbound messages
for the matching acknowledgement. Messages seen during the scan are routed
through normal update handling so no data is lost while waiting.

Channels are recorded before the exchange confirms them. A channel whose
confirmation never arrives stays tracked with status ``FAILED``: the
exchange may or may not have subscribed it, so the caller decides whether to
retry or unsubscribe.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from .errors import FtxMissingConfirmationError, FtxNotSubscribedError
from .model import Channel, MessageType
from .protocol import build_subscribe, build_unsubscribe
from .pump import MessagePump
from .ws_client import FtxWsClient

_LOGGER = logging.getLogger(__name__)

CONFIRMATION_WINDOW = 100


class SubscriptionStatus(Enum):
    """Local view of a channel's server-side subscription."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass
class SubscriptionEntry:
    channel: Channel
    status: SubscriptionStatus = SubscriptionStatus.PENDING


class SubscriptionTracker:
    """Ordered record of requested subscriptions.

    Duplicate requests for the same channel are kept as separate entries.
    """

    def __init__(self) -> None:
        self._entries: list[SubscriptionEntry] = []

    def __contains__(self, channel: object) -> bool:
        return any(entry.channel == channel for entry in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, channel: Channel) -> SubscriptionEntry:
        entry = SubscriptionEntry(channel)
        self._entries.append(entry)
        return entry

    def remove(self, channels: Iterable[Channel]) -> None:
        """Drop every entry for the given channels."""
        drop = set(channels)
        self._entries = [e for e in self._entries if e.channel not in drop]

    def clear(self) -> None:
        self._entries.clear()

    def channels(self) -> list[Channel]:
        """All tracked channels in request order, duplicates included."""
        return [entry.channel for entry in self._entries]

    def distinct(self) -> list[Channel]:
        return list(dict.fromkeys(self.channels()))

    def status(self, channel: Channel) -> SubscriptionStatus | None:
        """Status of the most recent entry for ``channel``."""
        for entry in reversed(self._entries):
            if entry.channel == channel:
                return entry.status
        return None

    def snapshot(self) -> dict[Channel, SubscriptionStatus]:
        """Latest status per distinct channel."""
        return {entry.channel: entry.status for entry in self._entries}


class SubscriptionProtocol:
    """Issues channel commands and waits for their acknowledgements."""

    def __init__(
        self,
        client: FtxWsClient,
        pump: MessagePump,
        tracker: SubscriptionTracker,
        *,
        window: int = CONFIRMATION_WINDOW,
    ) -> None:
        if window < 1:
            raise ValueError("Confirmation window must be at least 1")
        self._client = client
        self._pump = pump
        self._tracker = tracker
        self._window = window

    async def subscribe(self, channels: Iterable[Channel]) -> None:
        """Subscribe to each channel in turn.

        Raises:
            FtxMissingConfirmationError: If a channel is not confirmed within
                the window; later channels are not attempted
            FtxConnectionError: On transport failure
        """
        for channel in channels:
            entry = self._tracker.add(channel)
            await self._client.send_json(build_subscribe(channel))
            try:
                await self._await_confirmation(channel, MessageType.SUBSCRIBED)
            except FtxMissingConfirmationError:
                entry.status = SubscriptionStatus.FAILED
                raise
            entry.status = SubscriptionStatus.CONFIRMED
            _LOGGER.info("[%s] Subscribed to %s", self._client.url, channel)

    async def unsubscribe(self, channels: Iterable[Channel]) -> None:
        """Unsubscribe from tracked channels.

        The tracker is only updated once every channel is confirmed.

        Raises:
            FtxNotSubscribedError: If any channel is not tracked; nothing is
                sent in that case
            FtxMissingConfirmationError: If a channel is not confirmed within
                the window
        """
        requested = list(channels)
        for channel in requested:
            if channel not in self._tracker:
                raise FtxNotSubscribedError(channel)

        for channel in requested:
            await self._client.send_json(build_unsubscribe(channel))
            await self._await_confirmation(channel, MessageType.UNSUBSCRIBED)
            _LOGGER.info("[%s] Unsubscribed from %s", self._client.url, channel)

        self._tracker.remove(requested)

    async def unsubscribe_all(self) -> None:
        """Unsubscribe every tracked channel, then forget them all."""
        await self.unsubscribe(self._tracker.distinct())
        self._tracker.clear()

    async def _await_confirmation(self, channel: Channel, expected: MessageType) -> None:
        for _ in range(self._window):
            message = await self._pump.next_response()
            if message.type is expected:
                return
            self._pump.handle(message)

        _LOGGER.warning(
            "[%s] No %s confirmation for %s within %d messages",
            self._client.url,
            expected.value,
            channel,
            self._window,
        )
        raise FtxMissingConfirmationError(channel, self._window)
