"""Request and subscription signing.

Three credential variants are supported and one is picked when a client is
built:

* :class:`TokenSigner` - CDP API keys. Every request carries a short-lived
  JWT (ES256 for PEM EC keys, HS256 for shared secrets).
* :class:`LegacySigner` - deprecated HMAC-SHA256 key/secret pairs.
* :class:`OAuthSigner` - a pre-issued OAuth2 bearer token, REST only.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
import time
import warnings
from enum import Enum
from typing import Iterable

import jwt

REST_AUDIENCE = "retail_rest_api_proxy"
STREAM_AUDIENCE = "public_websocket_api"
TOKEN_TTL_SECONDS = 120
DEFAULT_REST_HOST = "api.coinbase.com"


class ApiKeyType(str, Enum):
    """Kind of API key a client was issued."""

    CDP = "cdp"
    LEGACY = "legacy"


def unix_timestamp() -> str:
    return str(int(time.time()))


def _require(value: str | None, name: str) -> str:
    if value is None or not str(value).strip():
        raise ValueError(f"{name} cannot be empty")
    return value


def _join_products(product_ids: Iterable[str] | None) -> str:
    if not product_ids:
        return ""
    return ",".join(product_ids)


class TokenSigner:
    """Signs requests with a per-call JWT."""

    key_type = ApiKeyType.CDP

    def __init__(self, api_key: str, api_secret: str, *, rest_host: str = DEFAULT_REST_HOST):
        self.api_key = _require(api_key, "API key")
        secret = _require(api_secret, "API secret")
        self.rest_host = rest_host

        if "-----BEGIN" in secret:
            # keys pasted from env files often carry literal "\n"
            self._key = secret.replace("\\n", "\n")
            self.algorithm = "ES256"
        else:
            self._key = secret
            self.algorithm = "HS256"

    def __repr__(self) -> str:
        return f"TokenSigner(api_key={self.api_key!r}, algorithm={self.algorithm!r})"

    def generate_jwt(self, audience: str, method: str, path: str | None = None) -> str:
        """Build a signed token for one request or subscription message.

        Args:
            audience: Target service (REST proxy or websocket API)
            method: HTTP verb, or ``subscribe``/``unsubscribe`` for streaming
            path: Request path; None for streaming

        Returns:
            Encoded JWT
        """
        _require(audience, "Audience")
        _require(method, "Method")

        now = int(time.time())
        payload = {
            "iss": self.api_key,
            "sub": self.api_key,
            "aud": [audience],
            "iat": now,
            "nbf": now,
            "exp": now + TOKEN_TTL_SECONDS,
        }
        if path is not None:
            _require(path, "Path")
            payload["uri"] = f"{method.upper()} {self.rest_host}{path.split('?', 1)[0]}"

        headers = {"kid": self.api_key, "nonce": secrets.token_hex(16)}
        return jwt.encode(payload, self._key, algorithm=self.algorithm, headers=headers)

    def rest_headers(self, method: str, path: str, body: str | None = None) -> dict[str, str]:
        token = self.generate_jwt(REST_AUDIENCE, method, path)
        return {"Authorization": f"Bearer {token}"}

    def subscription_fields(
        self,
        message_type: str,
        channel: str,
        product_ids: Iterable[str] | None,
    ) -> dict[str, str]:
        _require(channel, "Channel")
        return {
            "api_key": self.api_key,
            "timestamp": unix_timestamp(),
            "jwt": self.generate_jwt(STREAM_AUDIENCE, message_type),
        }


class LegacySigner:
    """HMAC-SHA256 signatures for legacy API keys.

    Deprecated: the venue is retiring legacy keys, prefer :class:`TokenSigner`.
    """

    key_type = ApiKeyType.LEGACY

    def __init__(self, api_key: str, api_secret: str):
        self.api_key = _require(api_key, "API key")
        self._secret = _require(api_secret, "API secret").encode()
        warnings.warn(
            "Legacy API key authentication is deprecated; use CDP API keys instead",
            DeprecationWarning,
            stacklevel=2,
        )

    def __repr__(self) -> str:
        return f"LegacySigner(api_key={self.api_key!r})"

    def _digest(self, message: str) -> bytes:
        return hmac.new(self._secret, message.encode(), hashlib.sha256).digest()

    def sign_request(self, timestamp: str, method: str, path: str, body: str | None = None) -> str:
        """Hex HMAC of ``timestamp + METHOD + path + body``; the query string is not signed."""
        _require(timestamp, "Timestamp")
        _require(method, "Method")
        _require(path, "Path")
        message = f"{timestamp}{method.upper()}{path.split('?', 1)[0]}{body or ''}"
        return self._digest(message).hex()

    def generate_signature(
        self,
        timestamp: str,
        channel: str,
        product_ids: Iterable[str] | None,
    ) -> str:
        """Base64 HMAC of ``timestamp + channel + comma-joined product ids``."""
        _require(timestamp, "Timestamp")
        _require(channel, "Channel")
        message = timestamp + channel + _join_products(product_ids)
        return base64.b64encode(self._digest(message)).decode()

    def rest_headers(self, method: str, path: str, body: str | None = None) -> dict[str, str]:
        timestamp = unix_timestamp()
        return {
            "CB-ACCESS-KEY": self.api_key,
            "CB-ACCESS-SIGN": self.sign_request(timestamp, method, path, body),
            "CB-ACCESS-TIMESTAMP": timestamp,
        }

    def subscription_fields(
        self,
        message_type: str,
        channel: str,
        product_ids: Iterable[str] | None,
    ) -> dict[str, str]:
        timestamp = unix_timestamp()
        return {
            "api_key": self.api_key,
            "timestamp": timestamp,
            "signature": self.generate_signature(timestamp, channel, product_ids),
        }


class OAuthSigner:
    """Bearer-token authentication for REST calls."""

    key_type = None

    def __init__(self, access_token: str):
        self._token = _require(access_token, "OAuth2 access token")

    def __repr__(self) -> str:
        return "OAuthSigner()"

    def rest_headers(self, method: str, path: str, body: str | None = None) -> dict[str, str]:
        _require(method, "Method")
        _require(path, "Path")
        return {"Authorization": f"Bearer {self._token}"}

    def subscription_fields(
        self,
        message_type: str,
        channel: str,
        product_ids: Iterable[str] | None,
    ) -> dict[str, str]:
        raise ValueError("OAuth2 access tokens cannot sign websocket subscriptions")


Signer = TokenSigner | LegacySigner | OAuthSigner


def create_signer(
    api_key: str | None = None,
    api_secret: str | None = None,
    *,
    key_type: ApiKeyType = ApiKeyType.CDP,
    oauth_token: str | None = None,
    rest_host: str = DEFAULT_REST_HOST,
) -> Signer:
    """Select the signer variant for a set of credentials.

    An OAuth token takes precedence over a key pair.

    Raises:
        ValueError: If no usable credentials were supplied
    """
    if oauth_token:
        return OAuthSigner(oauth_token)
    if ApiKeyType(key_type) is ApiKeyType.LEGACY:
        return LegacySigner(api_key, api_secret)
    return TokenSigner(api_key, api_secret, rest_host=rest_host)
