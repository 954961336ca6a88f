"""Pytest configuration and fixtures."""

import asyncio
import warnings

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from advtrade.auth.signer import LegacySigner, TokenSigner
from advtrade.streaming.transport import ConnectionState, Frame, FrameType


@pytest.fixture
def api_key():
    """Test API key."""
    return "organizations/test-org/apiKeys/test-key-123456"


@pytest.fixture
def api_secret():
    """Test shared secret (long enough for HS256)."""
    return "test_api_secret_0123456789abcdef0123456789abcdef"


@pytest.fixture
def ec_private_key():
    """Freshly generated P-256 key, as issued for CDP API keys."""
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture
def ec_private_pem(ec_private_key):
    return ec_private_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.TraditionalOpenSSL,
        serialization.NoEncryption(),
    ).decode()


@pytest.fixture
def token_signer(api_key, api_secret):
    return TokenSigner(api_key, api_secret)


@pytest.fixture
def legacy_signer(api_key, api_secret):
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", DeprecationWarning)
        return LegacySigner(api_key, api_secret)


@pytest.fixture
def sample_ticker_frame():
    """Ticker frame as sent by the venue."""
    return {
        "channel": "ticker",
        "client_id": "",
        "timestamp": "2023-02-09T20:30:37.167359596Z",
        "sequence_num": 0,
        "events": [
            {
                "type": "snapshot",
                "tickers": [
                    {
                        "type": "ticker",
                        "product_id": "BTC-USD",
                        "price": "21932.98",
                        "volume_24_h": "16038.28770938",
                        "low_24_h": "21835.29",
                        "high_24_h": "23011.18",
                        "low_52_w": "15460",
                        "high_52_w": "48240",
                        "price_percent_chg_24_h": "-4.15775596190603",
                        "best_bid": "21931.98",
                        "best_bid_quantity": "0.5",
                        "best_ask": "21933.01",
                        "best_ask_quantity": "0.25",
                    }
                ],
            }
        ],
    }


class ScriptedTransport:
    """In-memory transport fed by the test through :meth:`feed`."""

    def __init__(self, frames=()):
        self.queue = asyncio.Queue()
        for frame in frames:
            self.queue.put_nowait(frame)
        self.sent = []
        self.opened = False
        self.closed = False
        self.close_calls = 0
        self.open_error = None
        self.send_error = None
        self._receiving = False

    @property
    def state(self):
        if self.opened and not self.closed:
            return ConnectionState.OPEN
        return ConnectionState.CLOSED

    async def open(self):
        if self.open_error is not None:
            raise self.open_error
        self.opened = True

    async def send_text(self, text):
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(text)

    async def receive(self):
        self._receiving = True
        try:
            item = await self.queue.get()
        finally:
            self._receiving = False
        if isinstance(item, BaseException):
            raise item
        return item

    async def close(self):
        self.close_calls += 1
        self.closed = True

    def feed(self, item):
        self.queue.put_nowait(item)

    def feed_text(self, text, final=True):
        self.feed(Frame(FrameType.TEXT, text.encode("utf-8"), final))

    async def wait_idle(self):
        """Wait until the receive loop consumed everything and blocks again."""
        for _ in range(1000):
            if self.queue.empty() and (self._receiving or self.closed):
                return
            await asyncio.sleep(0)
        raise AssertionError("receive loop did not drain the scripted frames")


class TransportFactory:
    """Hands out a new ScriptedTransport per connect() and remembers them."""

    def __init__(self):
        self.created = []
        self.open_error = None

    def __call__(self):
        transport = ScriptedTransport()
        transport.open_error = self.open_error
        self.created.append(transport)
        return transport

    @property
    def last(self):
        return self.created[-1]


@pytest.fixture
def transport_factory():
    return TransportFactory()
