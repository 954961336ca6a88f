"""Top-level client combining the REST managers and the streaming client."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlparse

from .auth.signer import ApiKeyType, Signer, create_signer
from .rest.accounts import AccountsManager
from .rest.executor import RequestExecutor
from .rest.fees import FeesManager
from .rest.orders import OrdersManager
from .rest.public import PublicManager
from .settings import Settings
from .streaming.client import DEFAULT_BUFFER_SIZE, DEFAULT_WS_URL, StreamingClient

logger = logging.getLogger(__name__)

DEFAULT_REST_URL = "https://api.coinbase.com"


class AdvancedTradeClient:
    """Entry point to the trading API.

    REST managers share one signer and one HTTP session. The websocket
    client is only available for API key credentials; with an OAuth token
    ``websocket`` is None.
    """

    def __init__(
        self,
        api_key: str | None = None,
        api_secret: str | None = None,
        *,
        key_type: ApiKeyType = ApiKeyType.CDP,
        oauth_token: str | None = None,
        rest_url: str = DEFAULT_REST_URL,
        websocket_url: str = DEFAULT_WS_URL,
        websocket_buffer_size: int = DEFAULT_BUFFER_SIZE,
        **options: Any,
    ):
        """Initialize client.

        Args:
            api_key: API key id (CDP key name or legacy key)
            api_secret: API secret (PEM EC key for CDP keys)
            key_type: CDP (default) or deprecated LEGACY
            oauth_token: OAuth2 access token, used instead of a key pair
            rest_url: REST base URL
            websocket_url: Websocket endpoint
            websocket_buffer_size: Largest accepted websocket message in bytes
            **options: timeout, user_agent, heartbeat, shutdown_timeout
        """
        host = urlparse(rest_url).netloc or rest_url
        self.signer: Signer = create_signer(
            api_key,
            api_secret,
            key_type=key_type,
            oauth_token=oauth_token,
            rest_host=host,
        )

        executor_options = {k: options[k] for k in ("timeout", "user_agent") if k in options}
        self.executor = RequestExecutor(self.signer, base_url=rest_url, **executor_options)

        self.accounts = AccountsManager(self.executor)
        self.orders = OrdersManager(self.executor)
        self.fees = FeesManager(self.executor)
        self.public = PublicManager(self.executor)

        self.websocket: StreamingClient | None = None
        if oauth_token is None:
            stream_options = {k: options[k] for k in ("heartbeat", "shutdown_timeout") if k in options}
            self.websocket = StreamingClient(
                self.signer,
                url=websocket_url,
                buffer_size=websocket_buffer_size,
                **stream_options,
            )

    @classmethod
    def from_settings(cls, settings: Settings) -> "AdvancedTradeClient":
        logger.debug("settings=%s", settings.redacted())
        creds = settings.credentials
        return cls(
            creds.api_key.get_secret_value() if creds.api_key else None,
            creds.api_secret.get_secret_value() if creds.api_secret else None,
            key_type=creds.key_type,
            oauth_token=creds.oauth_token.get_secret_value() if creds.oauth_token else None,
            rest_url=settings.rest.base_url,
            websocket_url=settings.streaming.url,
            websocket_buffer_size=settings.streaming.buffer_size,
            timeout=settings.rest.timeout,
            user_agent=settings.rest.user_agent,
            heartbeat=settings.streaming.heartbeat,
            shutdown_timeout=settings.streaming.shutdown_timeout,
        )

    async def close(self) -> None:
        """Close the websocket and the HTTP session."""
        try:
            if self.websocket is not None:
                await self.websocket.close()
        finally:
            await self.executor.close()

    async def __aenter__(self) -> "AdvancedTradeClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
