"""advtrade: async client for the Advanced Trade REST and websocket APIs."""

from .auth import ApiKeyType, create_signer
from .client import AdvancedTradeClient
from .settings import Settings
from .streaming import Channel, ConnectionState, NotConnectedError, StreamingClient

__all__ = [
    "AdvancedTradeClient",
    "ApiKeyType",
    "Channel",
    "ConnectionState",
    "NotConnectedError",
    "Settings",
    "StreamingClient",
    "create_signer",
]
