"""Realtime streaming client."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

from ..auth.signer import Signer
from .channels import Channel
from .connection import DEFAULT_SHUTDOWN_TIMEOUT, ConnectionManager
from .dispatcher import ListenerHandle, MessageDispatcher
from .models import (
    CandlesEvent,
    HeartbeatEvent,
    Level2Event,
    MarketTradesEvent,
    StatusEvent,
    TickerEvent,
    UserEvent,
)
from .registry import SubscriptionRegistry
from .transport import AiohttpTransport, ConnectionState, TransportFactory

logger = logging.getLogger(__name__)

DEFAULT_WS_URL = "wss://advanced-trade-ws.coinbase.com"
DEFAULT_BUFFER_SIZE = 5 * 1024 * 1024


class ClientClosedError(RuntimeError):
    """Raised when a closed streaming client is used."""


class StreamingClient:
    """Connects to the market data websocket and delivers typed events.

    Example::

        client = StreamingClient(create_signer(key, secret))
        client.on_ticker(lambda event: print(event.tickers))
        await client.connect()
        await client.subscribe(["BTC-USD"], Channel.TICKER)
    """

    def __init__(
        self,
        signer: Signer,
        *,
        url: str = DEFAULT_WS_URL,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        heartbeat: float = 30.0,
        shutdown_timeout: float = DEFAULT_SHUTDOWN_TIMEOUT,
        transport_factory: TransportFactory | None = None,
    ):
        """Initialize streaming client.

        Args:
            signer: Signs subscription messages (token or legacy mode)
            url: Websocket endpoint
            buffer_size: Largest accepted message in bytes
            heartbeat: Transport-level ping interval in seconds
            shutdown_timeout: Upper bound on waiting for the receive loop
            transport_factory: Builds a fresh transport per connection
        """
        if not url or not url.strip():
            raise ValueError("WebSocket URL cannot be empty")
        if not url.startswith(("ws://", "wss://")):
            raise ValueError(f"Invalid WebSocket URL: {url}")
        if buffer_size <= 0:
            raise ValueError("Buffer size must be greater than zero")

        self.url = url
        self.buffer_size = buffer_size
        self.heartbeat = heartbeat
        self.signer = signer

        self.dispatcher = MessageDispatcher()
        self.connection = ConnectionManager(
            transport_factory or self._create_transport,
            self.dispatcher,
            shutdown_timeout=shutdown_timeout,
        )
        self.registry = SubscriptionRegistry(self.connection, signer)
        self._closed = False

    def _create_transport(self) -> AiohttpTransport:
        return AiohttpTransport(self.url, heartbeat=self.heartbeat, max_msg_size=self.buffer_size)

    @property
    def state(self) -> ConnectionState:
        return self.connection.state

    @property
    def subscriptions(self) -> frozenset[str]:
        return self.registry.subscriptions

    def _check_open(self) -> None:
        if self._closed:
            raise ClientClosedError("StreamingClient has been closed")

    async def connect(self) -> None:
        self._check_open()
        await self.connection.connect()

    async def disconnect(self) -> None:
        """Close the websocket; safe when already closed.

        Subscriptions are tied to the closed websocket and are dropped with it.
        """
        self._check_open()
        await self.connection.disconnect()

    async def subscribe(self, product_ids: Iterable[str] | None, channel: Channel | str) -> bool:
        self._check_open()
        return await self.registry.subscribe(product_ids, channel)

    async def unsubscribe(self, product_ids: Iterable[str] | None, channel: Channel | str) -> bool:
        self._check_open()
        return await self.registry.unsubscribe(product_ids, channel)

    async def send(self, message: str) -> None:
        """Send a raw text message on the open websocket."""
        self._check_open()
        await self.connection.send(message)

    async def close(self) -> None:
        """Disconnect and make the client unusable."""
        if self._closed:
            return
        await self.disconnect()
        self._closed = True
        logger.info("Streaming client closed")

    async def __aenter__(self) -> "StreamingClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # Listener registration. Each returns a handle; handle.remove() unregisters.

    def on_message(self, callback: Callable[[bytes], Any]) -> ListenerHandle:
        """Every complete message as raw bytes, including non-text messages."""
        return self.dispatcher.add_raw_listener(callback)

    def on_heartbeats(self, callback: Callable[[HeartbeatEvent], Any]) -> ListenerHandle:
        return self.dispatcher.add_listener(Channel.HEARTBEATS, callback)

    def on_candles(self, callback: Callable[[CandlesEvent], Any]) -> ListenerHandle:
        return self.dispatcher.add_listener(Channel.CANDLES, callback)

    def on_market_trades(self, callback: Callable[[MarketTradesEvent], Any]) -> ListenerHandle:
        return self.dispatcher.add_listener(Channel.MARKET_TRADES, callback)

    def on_status(self, callback: Callable[[StatusEvent], Any]) -> ListenerHandle:
        return self.dispatcher.add_listener(Channel.STATUS, callback)

    def on_ticker(self, callback: Callable[[TickerEvent], Any]) -> ListenerHandle:
        return self.dispatcher.add_listener(Channel.TICKER, callback)

    def on_ticker_batch(self, callback: Callable[[TickerEvent], Any]) -> ListenerHandle:
        return self.dispatcher.add_listener(Channel.TICKER_BATCH, callback)

    def on_level2(self, callback: Callable[[Level2Event], Any]) -> ListenerHandle:
        return self.dispatcher.add_listener(Channel.LEVEL2, callback)

    def on_user(self, callback: Callable[[UserEvent], Any]) -> ListenerHandle:
        return self.dispatcher.add_listener(Channel.USER, callback)
