"""Tests for FtxWsClient WebSocket wrapper and connect_websocket."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

import pytest
from websockets.exceptions import ConnectionClosedError, ConnectionClosedOK, InvalidURI

from ftx_ws.errors import (
    FtxClientError,
    FtxConnectionError,
    FtxDecodeError,
    FtxHandshakeError,
    FtxTimeout,
)
from ftx_ws.model import MessageType
from ftx_ws.ws import ENDPOINT, ENDPOINT_US, connect_websocket
from ftx_ws.ws_client import FtxWsClient, FtxWsMessage, FtxWsMessageType


class TestFtxWsMessage:
    """Tests for FtxWsMessage dataclass."""

    def test_enum_values(self):
        """Test enum has expected values."""
        assert FtxWsMessageType.TEXT.value == "text"
        assert FtxWsMessageType.CLOSED.value == "closed"
        assert FtxWsMessageType.ERROR.value == "error"

    def test_message_is_frozen(self):
        """Test that messages are immutable."""
        msg = FtxWsMessage(type=FtxWsMessageType.TEXT, data="test")
        with pytest.raises(AttributeError):
            msg.data = "modified"  # type: ignore[misc]


class TestConnectWebsocket:
    """Tests for connect_websocket() error mapping."""

    def test_endpoints(self):
        assert ENDPOINT == "wss://ftx.com/ws"
        assert ENDPOINT_US == "wss://ftx.us/ws"

    @pytest.mark.asyncio
    async def test_disables_protocol_pings(self):
        """Test library pings are off; the session sends its own."""
        mock_connect = AsyncMock(return_value=AsyncMock())
        with patch("ftx_ws.ws.websockets.connect", mock_connect):
            await connect_websocket(ENDPOINT_US)

        assert mock_connect.call_args.args == (ENDPOINT_US,)
        assert mock_connect.call_args.kwargs["ping_interval"] is None

    @pytest.mark.asyncio
    async def test_timeout(self):
        async def hang(*args, **kwargs):
            await asyncio.Event().wait()

        with patch("ftx_ws.ws.websockets.connect", side_effect=hang):
            with pytest.raises(FtxTimeout):
                await connect_websocket(ENDPOINT, timeout=0.01)

    @pytest.mark.asyncio
    async def test_invalid_uri(self):
        with patch(
            "ftx_ws.ws.websockets.connect",
            AsyncMock(side_effect=InvalidURI("ftx", "not a websocket URI")),
        ):
            with pytest.raises(FtxHandshakeError):
                await connect_websocket("ftx")

    @pytest.mark.asyncio
    async def test_os_error(self):
        with patch(
            "ftx_ws.ws.websockets.connect",
            AsyncMock(side_effect=OSError("unreachable")),
        ):
            with pytest.raises(FtxConnectionError, match="connection failed"):
                await connect_websocket(ENDPOINT)


class TestFtxWsClientConnect:
    """Tests for FtxWsClient.connect() and close()."""

    @pytest.mark.asyncio
    async def test_connect_success(self):
        mock_ws = AsyncMock()

        with patch(
            "ftx_ws.ws_client.connect_websocket", return_value=mock_ws
        ) as mock_connect:
            client = FtxWsClient()
            await client.connect(ENDPOINT_US, timeout=5.0)

        mock_connect.assert_called_once_with(ENDPOINT_US, timeout=5.0)
        assert client._ws is mock_ws
        assert client.url == ENDPOINT_US
        assert client.connected

    @pytest.mark.asyncio
    async def test_connect_propagates_errors(self):
        with patch(
            "ftx_ws.ws_client.connect_websocket",
            side_effect=FtxConnectionError("Connection failed"),
        ):
            client = FtxWsClient()
            with pytest.raises(FtxConnectionError, match="Connection failed"):
                await client.connect()
        assert not client.connected

    @pytest.mark.asyncio
    async def test_close_connected(self):
        mock_ws = AsyncMock()

        with patch("ftx_ws.ws_client.connect_websocket", return_value=mock_ws):
            client = FtxWsClient()
            await client.connect()
            await client.close()

        mock_ws.close.assert_called_once()
        assert not client.connected

    @pytest.mark.asyncio
    async def test_close_not_connected(self):
        """Test closing when not connected (no error)."""
        await FtxWsClient().close()


class TestFtxWsClientSendJson:
    """Tests for FtxWsClient.send_json()."""

    @pytest.mark.asyncio
    async def test_send_json_success(self):
        client = FtxWsClient()
        client._ws = AsyncMock()

        await client.send_json({"op": "ping"})

        client._ws.send.assert_called_once_with('{"op": "ping"}')

    @pytest.mark.asyncio
    async def test_send_json_not_connected(self):
        client = FtxWsClient()
        with pytest.raises(FtxConnectionError, match="not connected"):
            await client.send_json({"op": "ping"})

    @pytest.mark.asyncio
    async def test_send_json_closed(self):
        """Test a send on a closed socket becomes a connection error."""
        client = FtxWsClient()
        client._ws = AsyncMock()
        client._ws.send.side_effect = ConnectionClosedError(None, None)

        with pytest.raises(FtxConnectionError, match="closed during send"):
            await client.send_json({"op": "ping"})


class TestFtxWsClientReceive:
    """Tests for FtxWsClient.receive()."""

    @pytest.mark.asyncio
    async def test_receive_not_connected(self):
        with pytest.raises(FtxConnectionError, match="not connected"):
            await FtxWsClient().receive()

    @pytest.mark.asyncio
    async def test_receive_skips_binary(self):
        client = FtxWsClient()
        client._ws = AsyncMock()
        client._ws.recv.side_effect = [b"\x00\x01", "text1"]

        msg = await client.receive()

        assert msg == FtxWsMessage(FtxWsMessageType.TEXT, "text1")

    @pytest.mark.asyncio
    async def test_receive_closed(self):
        client = FtxWsClient()
        client._ws = AsyncMock()
        client._ws.recv.side_effect = ConnectionClosedOK(None, None)

        msg = await client.receive()

        assert msg.type is FtxWsMessageType.CLOSED

    @pytest.mark.asyncio
    async def test_receive_error(self):
        client = FtxWsClient()
        client._ws = AsyncMock()
        client._ws.recv.side_effect = OSError("reset by peer")

        msg = await client.receive()

        assert msg.type is FtxWsMessageType.ERROR
        assert "reset by peer" in msg.data


class TestFtxWsClientNormalization:
    """Tests for FtxWsClient message normalization."""

    def test_normalize_string_message(self):
        result = FtxWsClient._normalize_message("hello world")
        assert result == FtxWsMessage(FtxWsMessageType.TEXT, "hello world")

    def test_normalize_bytes_returns_none(self):
        assert FtxWsClient._normalize_message(b"\x00\x01\x02") is None


class TestFtxWsClientDecode:
    """Tests for FtxWsClient.decode()."""

    def test_decode_valid(self):
        msg = FtxWsMessage(type=FtxWsMessageType.TEXT, data='{"type": "pong"}')
        assert FtxWsClient.decode(msg).type is MessageType.PONG

    def test_decode_non_text_raises(self):
        msg = FtxWsMessage(type=FtxWsMessageType.CLOSED)
        with pytest.raises(FtxClientError, match="Only TEXT messages"):
            FtxWsClient.decode(msg)

    def test_decode_invalid_json_raises(self):
        msg = FtxWsMessage(type=FtxWsMessageType.TEXT, data="not valid json {")
        with pytest.raises(FtxDecodeError):
            FtxWsClient.decode(msg)
