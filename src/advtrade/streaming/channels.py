"""Streaming channel names and their payload types."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from .models import (
    CandlesEvent,
    HeartbeatEvent,
    Level2Event,
    MarketTradesEvent,
    StatusEvent,
    TickerEvent,
    UserEvent,
)


class Channel(str, Enum):
    """A streaming channel; the value is the wire-protocol name."""

    HEARTBEATS = "heartbeats"
    CANDLES = "candles"
    MARKET_TRADES = "market_trades"
    STATUS = "status"
    TICKER = "ticker"
    TICKER_BATCH = "ticker_batch"
    LEVEL2 = "level2"
    USER = "user"

    @classmethod
    def from_wire(cls, name: str | None) -> "Channel | None":
        """Case-insensitive lookup; returns None for unknown names."""
        if not name:
            return None
        return _BY_WIRE_NAME.get(name.strip().lower())


_BY_WIRE_NAME = {channel.value: channel for channel in Channel}

EVENT_TYPES: dict[Channel, type[BaseModel]] = {
    Channel.HEARTBEATS: HeartbeatEvent,
    Channel.CANDLES: CandlesEvent,
    Channel.MARKET_TRADES: MarketTradesEvent,
    Channel.STATUS: StatusEvent,
    Channel.TICKER: TickerEvent,
    Channel.TICKER_BATCH: TickerEvent,
    Channel.LEVEL2: Level2Event,
    Channel.USER: UserEvent,
}


def channel_string(channel: Channel | str) -> str:
    """Wire name for a channel.

    Raises:
        ValueError: If the value does not name a known channel
    """
    if isinstance(channel, Channel):
        return channel.value
    resolved = Channel.from_wire(channel)
    if resolved is None:
        raise ValueError(f"Invalid channel: {channel!r}")
    return resolved.value
