"""Websocket transport seam.

The connection manager talks to a :class:`Transport`, which hands back
:class:`Frame` objects. A frame may be a fragment of a larger message
(``final=False``); the manager reassembles fragments. The aiohttp
implementation always yields complete messages because aiohttp reassembles
continuation frames itself.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol

import aiohttp

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    CLOSED = "closed"
    CONNECTING = "connecting"
    OPEN = "open"


class FrameType(Enum):
    TEXT = "text"
    BINARY = "binary"
    CLOSE = "close"


@dataclass(frozen=True, slots=True)
class Frame:
    type: FrameType
    data: bytes = b""
    final: bool = True


class Transport(Protocol):
    """One websocket connection."""

    @property
    def state(self) -> ConnectionState:
        ...

    async def open(self) -> None:
        """Perform the handshake."""
        ...

    async def send_text(self, text: str) -> None:
        ...

    async def receive(self) -> Frame:
        """Block until the next frame (or fragment) arrives."""
        ...

    async def close(self) -> None:
        ...


TransportFactory = Callable[[], Transport]


class AiohttpTransport:
    """:class:`Transport` backed by ``aiohttp.ClientSession.ws_connect``."""

    def __init__(
        self,
        url: str,
        *,
        heartbeat: float = 30.0,
        max_msg_size: int = 5 * 1024 * 1024,
        session: aiohttp.ClientSession | None = None,
    ):
        self.url = url
        self.heartbeat = heartbeat
        self.max_msg_size = max_msg_size
        self.session = session
        self._owns_session = session is None
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._opening = False

    @property
    def state(self) -> ConnectionState:
        if self._ws is not None and not self._ws.closed:
            return ConnectionState.OPEN
        if self._opening:
            return ConnectionState.CONNECTING
        return ConnectionState.CLOSED

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self.session is None:
            self.session = aiohttp.ClientSession()
        return self.session

    async def open(self) -> None:
        self._opening = True
        try:
            session = await self._ensure_session()
            self._ws = await session.ws_connect(
                self.url,
                heartbeat=self.heartbeat,
                max_msg_size=self.max_msg_size,
            )
        except BaseException:
            await self._close_session()
            raise
        finally:
            self._opening = False

    async def send_text(self, text: str) -> None:
        if self._ws is None:
            raise ConnectionError("websocket is not open")
        await self._ws.send_str(text)

    async def receive(self) -> Frame:
        ws = self._ws
        if ws is None:
            raise ConnectionError("websocket is not open")

        while True:
            msg = await ws.receive()
            if msg.type == aiohttp.WSMsgType.TEXT:
                return Frame(FrameType.TEXT, msg.data.encode("utf-8"))
            if msg.type == aiohttp.WSMsgType.BINARY:
                return Frame(FrameType.BINARY, msg.data)
            if msg.type in (aiohttp.WSMsgType.CLOSE, aiohttp.WSMsgType.CLOSING, aiohttp.WSMsgType.CLOSED):
                return Frame(FrameType.CLOSE)
            if msg.type == aiohttp.WSMsgType.ERROR:
                raise ConnectionError(f"websocket error: {ws.exception()}")
            logger.debug("Ignoring websocket message of type %s", msg.type)

    async def close(self) -> None:
        ws, self._ws = self._ws, None
        try:
            if ws is not None and not ws.closed:
                await ws.close()
        finally:
            await self._close_session()

    async def _close_session(self) -> None:
        if self._owns_session and self.session is not None:
            session, self.session = self.session, None
            await session.close()
