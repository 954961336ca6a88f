"""Routing of decoded frames to per-channel listeners."""

from __future__ import annotations

import inspect
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from pydantic import ValidationError

from .channels import EVENT_TYPES, Channel
from .models import StreamEnvelope

logger = logging.getLogger(__name__)

Listener = Callable[[Any], Any]


@dataclass(eq=False)
class ListenerHandle:
    """Returned by listener registration; call :meth:`remove` to unregister."""

    _registry: list[Listener] = field(repr=False)
    callback: Listener
    channel: Channel | None = None

    @property
    def active(self) -> bool:
        return any(cb is self.callback for cb in self._registry)

    def remove(self) -> None:
        for i, cb in enumerate(self._registry):
            if cb is self.callback:
                del self._registry[i]
                return


def _find_channel(data: dict[str, Any]) -> Channel | None:
    for key, value in data.items():
        if isinstance(key, str) and key.lower() == "channel":
            return Channel.from_wire(value) if isinstance(value, str) else None
    return None


class MessageDispatcher:
    """Decodes text frames and invokes the listeners of their channel.

    Every listener is called once per event, in the order the events appear
    in the frame. A failing listener is logged and does not stop delivery to
    the others. Malformed frames are logged and dropped.
    """

    def __init__(self) -> None:
        self._listeners: dict[Channel, list[Listener]] = {channel: [] for channel in Channel}
        self._raw_listeners: list[Listener] = []

    def add_listener(self, channel: Channel | str, callback: Listener) -> ListenerHandle:
        """Register ``callback(event)`` for a channel.

        ``callback`` may be a plain function or a coroutine function.
        """
        if not callable(callback):
            raise ValueError("Listener must be callable")
        resolved = channel if isinstance(channel, Channel) else Channel.from_wire(channel)
        if resolved is None:
            raise ValueError(f"Invalid channel: {channel!r}")

        registry = self._listeners[resolved]
        registry.append(callback)
        return ListenerHandle(registry, callback, resolved)

    def add_raw_listener(self, callback: Listener) -> ListenerHandle:
        """Register ``callback(data: bytes)`` for every complete message."""
        if not callable(callback):
            raise ValueError("Listener must be callable")
        self._raw_listeners.append(callback)
        return ListenerHandle(self._raw_listeners, callback)

    def listener_count(self, channel: Channel) -> int:
        return len(self._listeners[channel])

    async def publish_raw(self, data: bytes) -> None:
        for callback in list(self._raw_listeners):
            await self._invoke(callback, data, "raw")

    async def dispatch(self, text: str) -> bool:
        """Deliver the events of one text frame.

        Returns:
            True if the frame belonged to a known channel and was decoded
        """
        try:
            data = json.loads(text)
        except (ValueError, RecursionError) as e:
            # JSONDecodeError, oversized integers and deep nesting
            logger.warning("Dropping malformed message: %s", e)
            return False

        if not isinstance(data, dict):
            logger.debug("Ignoring non-object message")
            return False

        channel = _find_channel(data)
        if channel is None:
            logger.debug("Ignoring message for unknown channel %r", data.get("channel"))
            return False

        listeners = list(self._listeners[channel])
        if not listeners:
            return True

        try:
            envelope = StreamEnvelope[EVENT_TYPES[channel]].model_validate({**data, "channel": channel.value})
        except (ValidationError, RecursionError) as e:
            logger.warning("Dropping malformed %s message: %s", channel.value, e)
            return False

        for event in envelope.events:
            for callback in listeners:
                await self._invoke(callback, event, channel.value)
        return True

    async def _invoke(self, callback: Listener, payload: Any, label: str) -> None:
        try:
            result = callback(payload)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Listener %r for %s messages failed", callback, label)
