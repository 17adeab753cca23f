"""Local orderbook maintained from ``orderbook`` channel events."""

from __future__ import annotations

import logging
import zlib
from decimal import Decimal

from .errors import FtxChecksumError
from .model import OrderbookAction, OrderbookData

_LOGGER = logging.getLogger(__name__)

CHECKSUM_DEPTH = 100


def _fmt(value: Decimal) -> str:
    # The exchange renders levels as Python floats, e.g. "1e-05".
    return str(float(value))


class Orderbook:
    """Price-level book rebuilt from partial snapshots and updates.

    Usage:
        book = Orderbook("BTC-PERP")
        async for event in session:
            if isinstance(event, OrderbookData) and event.market == book.market:
                book.apply(event)
    """

    def __init__(self, market: str | None = None) -> None:
        self.market = market
        self._bids: dict[Decimal, Decimal] = {}
        self._asks: dict[Decimal, Decimal] = {}
        self.synced = False

    def apply(self, data: OrderbookData, *, verify: bool = True) -> None:
        """Apply a snapshot or delta.

        Raises:
            FtxChecksumError: If ``verify`` is set and the resulting book
                disagrees with the exchange checksum
        """
        if data.action is OrderbookAction.PARTIAL:
            self._bids.clear()
            self._asks.clear()
            self.synced = True
        elif not self.synced:
            _LOGGER.debug("[%s] Update before partial ignored", self.market)
            return

        self._merge(self._bids, data.bids)
        self._merge(self._asks, data.asks)

        if verify:
            actual = self.checksum()
            if actual != data.checksum:
                self.synced = False
                raise FtxChecksumError(self.market, data.checksum, actual)

    @staticmethod
    def _merge(side: dict[Decimal, Decimal], levels: list[tuple[Decimal, Decimal]]) -> None:
        for price, size in levels:
            if size == 0:
                side.pop(price, None)
            else:
                side[price] = size

    def bids(self) -> list[tuple[Decimal, Decimal]]:
        """Bid levels, highest price first."""
        return sorted(self._bids.items(), reverse=True)

    def asks(self) -> list[tuple[Decimal, Decimal]]:
        """Ask levels, lowest price first."""
        return sorted(self._asks.items())

    def best_bid(self) -> tuple[Decimal, Decimal] | None:
        if not self._bids:
            return None
        price = max(self._bids)
        return price, self._bids[price]

    def best_ask(self) -> tuple[Decimal, Decimal] | None:
        if not self._asks:
            return None
        price = min(self._asks)
        return price, self._asks[price]

    def checksum(self) -> int:
        """CRC32 over the top levels, bids and asks interleaved."""
        bids = self.bids()[:CHECKSUM_DEPTH]
        asks = self.asks()[:CHECKSUM_DEPTH]
        parts: list[str] = []
        for i in range(max(len(bids), len(asks))):
            if i < len(bids):
                parts.append(f"{_fmt(bids[i][0])}:{_fmt(bids[i][1])}")
            if i < len(asks):
                parts.append(f"{_fmt(asks[i][0])}:{_fmt(asks[i][1])}")
        return zlib.crc32(":".join(parts).encode())
