"""Websocket connection lifecycle and the background receive loop."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from .transport import ConnectionState, FrameType, Transport, TransportFactory

if TYPE_CHECKING:
    from .dispatcher import MessageDispatcher

logger = logging.getLogger(__name__)

DEFAULT_SHUTDOWN_TIMEOUT = 2.0


class NotConnectedError(RuntimeError):
    """Raised when a message is sent while the websocket is not open."""


class ConnectionManager:
    """Owns one websocket and the task that drains it.

    ``connect`` and ``disconnect`` are serialized by a connection lock.
    The receive loop reassembles fragmented messages, publishes every
    complete message as raw bytes, and hands text messages to the
    dispatcher. It stops on a close frame or read error and never
    reconnects by itself.
    """

    def __init__(
        self,
        transport_factory: TransportFactory,
        dispatcher: "MessageDispatcher",
        *,
        shutdown_timeout: float = DEFAULT_SHUTDOWN_TIMEOUT,
    ):
        if shutdown_timeout <= 0:
            raise ValueError("Shutdown timeout must be greater than zero")

        self.transport_factory = transport_factory
        self.dispatcher = dispatcher
        self.shutdown_timeout = shutdown_timeout

        self._lock = asyncio.Lock()
        self._transport: Transport | None = None
        self._receive_task: asyncio.Task[None] | None = None
        self._generation = 0

    @property
    def state(self) -> ConnectionState:
        transport = self._transport
        if transport is None:
            return ConnectionState.CLOSED
        return transport.state

    @property
    def generation(self) -> int:
        """Changes whenever the websocket is opened, torn down or lost."""
        return self._generation

    @property
    def is_open(self) -> bool:
        return self.state is ConnectionState.OPEN

    def ensure_connected(self) -> None:
        if not self.is_open:
            raise NotConnectedError("WebSocket is not connected. Call connect() first.")

    async def connect(self) -> None:
        """Open the websocket and start the receive loop; no-op when already open."""
        async with self._lock:
            if self.is_open:
                return

            await self._teardown()

            transport = self.transport_factory()
            self._transport = transport
            try:
                await transport.open()
            except BaseException:
                self._transport = None
                raise

            self._generation += 1
            self._receive_task = asyncio.create_task(
                self._receive_loop(transport),
                name="advtrade-receive-loop",
            )
            logger.info("WebSocket connected")

    async def disconnect(self) -> None:
        """Stop the receive loop and close the websocket; no-op when closed."""
        async with self._lock:
            await self._teardown()

    async def send(self, text: str) -> None:
        """Send one text message.

        Raises:
            ValueError: If the message is empty
            NotConnectedError: If the websocket is not open
        """
        if not text or not text.strip():
            raise ValueError("Message cannot be empty")

        transport = self._transport
        if transport is None or transport.state is not ConnectionState.OPEN:
            raise NotConnectedError("WebSocket is not connected.")
        await transport.send_text(text)

    async def _teardown(self) -> None:
        task, self._receive_task = self._receive_task, None
        transport, self._transport = self._transport, None

        if task is None and transport is None:
            return
        self._generation += 1

        # a listener may call disconnect() from inside the receive loop
        own_task = task is not None and task is asyncio.current_task()
        if task is not None and not own_task:
            task.cancel()

        if transport is not None:
            try:
                await transport.close()
            except Exception as e:
                logger.debug("Ignoring error while closing websocket: %s", e)

        if task is not None and not own_task:
            done, _ = await asyncio.wait({task}, timeout=self.shutdown_timeout)
            if not done:
                logger.warning(
                    "Receive loop did not stop within %.1fs; abandoning it",
                    self.shutdown_timeout,
                )

        logger.info("WebSocket disconnected")

    async def _receive_loop(self, transport: Transport) -> None:
        buffer = bytearray()
        message_type: FrameType | None = None
        cancelled = False

        try:
            while transport.state is ConnectionState.OPEN:
                try:
                    frame = await transport.receive()
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    logger.warning("WebSocket receive failed: %s", e)
                    break

                if frame.type is FrameType.CLOSE:
                    logger.info("WebSocket closed by server")
                    break

                if message_type is None:
                    message_type = frame.type
                buffer.extend(frame.data)
                if not frame.final:
                    continue

                payload = bytes(buffer)
                kind = message_type
                buffer.clear()
                message_type = None

                await self.dispatcher.publish_raw(payload)

                if kind is FrameType.TEXT:
                    try:
                        text = payload.decode("utf-8")
                    except UnicodeDecodeError:
                        logger.warning("Dropping text message that is not valid UTF-8")
                        continue
                    if text.strip():
                        await self.dispatcher.dispatch(text)
        except asyncio.CancelledError:
            cancelled = True
            raise
        except Exception:
            logger.exception("Receive loop failed")
        finally:
            logger.debug("Receive loop stopped")
            if not cancelled:
                # ended by the server or an error, not by disconnect()
                if self._transport is transport:
                    self._generation += 1
                try:
                    await transport.close()
                except Exception as e:
                    logger.debug("Ignoring error while closing websocket: %s", e)
