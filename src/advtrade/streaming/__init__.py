"""Realtime websocket client: connection, subscriptions and typed dispatch."""

from .channels import EVENT_TYPES, Channel, channel_string
from .client import ClientClosedError, StreamingClient
from .connection import ConnectionManager, NotConnectedError
from .dispatcher import ListenerHandle, MessageDispatcher
from .models import (
    CandlesEvent,
    HeartbeatEvent,
    Level2Event,
    MarketTradesEvent,
    StatusEvent,
    StreamEnvelope,
    TickerEvent,
    UserEvent,
)
from .registry import SubscriptionRegistry
from .transport import AiohttpTransport, ConnectionState, Frame, FrameType, Transport

__all__ = [
    "EVENT_TYPES",
    "AiohttpTransport",
    "CandlesEvent",
    "Channel",
    "ClientClosedError",
    "ConnectionManager",
    "ConnectionState",
    "Frame",
    "FrameType",
    "HeartbeatEvent",
    "Level2Event",
    "ListenerHandle",
    "MarketTradesEvent",
    "MessageDispatcher",
    "NotConnectedError",
    "StatusEvent",
    "StreamEnvelope",
    "StreamingClient",
    "SubscriptionRegistry",
    "TickerEvent",
    "Transport",
    "UserEvent",
    "channel_string",
]
