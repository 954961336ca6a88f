"""Tracking of active channel subscriptions."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Iterable

from ..auth.signer import Signer
from .channels import Channel, channel_string
from .connection import ConnectionManager

logger = logging.getLogger(__name__)


def _product_list(product_ids: Iterable[str] | None) -> list[str]:
    products = list(product_ids or [])
    for product in products:
        if not isinstance(product, str) or not product.strip():
            raise ValueError("Product IDs must be non-empty strings")
    return products


class SubscriptionRegistry:
    """Set of subscribed channels, at most one subscription per channel.

    The check, the send and the bookkeeping of each subscribe/unsubscribe
    run under one lock, so concurrent calls for the same channel send at
    most one message. A channel is recorded only after its message was
    sent. Product lists are not merged: subscribing again to an active
    channel with other products is a no-op.

    Subscriptions belong to one websocket: once the connection is replaced,
    torn down or lost (its generation changes) they are forgotten.
    """

    def __init__(self, connection: ConnectionManager, signer: Signer):
        self.connection = connection
        self.signer = signer
        self._lock = asyncio.Lock()
        self._active: set[str] = set()
        self._generation = connection.generation

    @property
    def subscriptions(self) -> frozenset[str]:
        if self._generation != self.connection.generation:
            return frozenset()
        return frozenset(self._active)

    def is_subscribed(self, channel: Channel | str) -> bool:
        return channel_string(channel) in self.subscriptions

    def _sync(self) -> int:
        generation = self.connection.generation
        if generation != self._generation:
            self._active.clear()
            self._generation = generation
        return generation

    def build_message(
        self,
        message_type: str,
        product_ids: Iterable[str] | None,
        channel: Channel | str,
    ) -> str:
        """Serialize a signed subscribe/unsubscribe message."""
        name = channel_string(channel)
        products = _product_list(product_ids)
        message = {
            "type": message_type,
            "product_ids": products,
            "channel": name,
        }
        message.update(self.signer.subscription_fields(message_type, name, products))
        return json.dumps(message)

    async def subscribe(self, product_ids: Iterable[str] | None, channel: Channel | str) -> bool:
        """Subscribe to a channel unless it is already active.

        Returns:
            True if a subscribe message was sent

        Raises:
            NotConnectedError: If the websocket is not open
        """
        name = channel_string(channel)
        products = _product_list(product_ids)

        async with self._lock:
            self.connection.ensure_connected()
            generation = self._sync()
            if name in self._active:
                logger.debug("Already subscribed to %s", name)
                return False

            await self.connection.send(self.build_message("subscribe", products, name))
            if self.connection.generation == generation:
                self._active.add(name)

        logger.info("Subscribed to %s for %s", name, products)
        return True

    async def unsubscribe(self, product_ids: Iterable[str] | None, channel: Channel | str) -> bool:
        """Unsubscribe from a channel if it is active.

        Returns:
            True if an unsubscribe message was sent
        """
        name = channel_string(channel)
        products = _product_list(product_ids)

        async with self._lock:
            self.connection.ensure_connected()
            self._sync()
            if name not in self._active:
                return False

            await self.connection.send(self.build_message("unsubscribe", products, name))
            self._active.discard(name)

        logger.info("Unsubscribed from %s", name)
        return True
