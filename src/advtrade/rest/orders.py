"""Order placement, lookup and cancellation."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Iterable

from .executor import ApiRequestError, RequestExecutor
from .fees import format_utc

logger = logging.getLogger(__name__)

ORDERS_PATH = "/api/v3/brokerage/orders"


class OrderSide(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class OrderStatus(str, Enum):
    OPEN = "OPEN"
    FILLED = "FILLED"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"
    FAILED = "FAILED"
    UNKNOWN_ORDER_STATUS = "UNKNOWN_ORDER_STATUS"


class OrderRejectedError(ApiRequestError):
    """Raised when the venue answers an order request with an error_response."""


def _require(value: str | None, name: str) -> str:
    if not value or not str(value).strip():
        raise ValueError(f"{name} cannot be empty")
    return value


class OrdersManager:
    """Creates and manages orders through the brokerage API."""

    def __init__(self, executor: RequestExecutor):
        self.executor = executor

    async def list_orders(
        self,
        product_id: str | None = None,
        order_status: Iterable[OrderStatus] | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        order_type: str | None = None,
        order_side: OrderSide | None = None,
    ) -> list[dict[str, Any]]:
        """List historical orders matching the filters.

        Raises:
            ValueError: If OPEN is combined with other statuses
        """
        statuses = [OrderStatus(s) for s in order_status] if order_status else None
        if statuses and OrderStatus.OPEN in statuses and len(statuses) > 1:
            raise ValueError("Cannot pair OPEN orders with other order statuses")

        params = {
            "product_id": product_id,
            "order_status": [s.value for s in statuses] if statuses else None,
            "start_date": format_utc(start_date) if start_date else None,
            "end_date": format_utc(end_date) if end_date else None,
            "order_type": order_type,
            "order_side": OrderSide(order_side).value if order_side else None,
        }
        data = await self.executor.send("GET", f"{ORDERS_PATH}/historical/batch", params)
        return list((data or {}).get("orders", []))

    async def list_fills(
        self,
        order_id: str | None = None,
        product_id: str | None = None,
        start_sequence_timestamp: datetime | None = None,
        end_sequence_timestamp: datetime | None = None,
    ) -> list[dict[str, Any]]:
        params = {
            "order_id": order_id,
            "product_id": product_id,
            "start_sequence_timestamp": format_utc(start_sequence_timestamp) if start_sequence_timestamp else None,
            "end_sequence_timestamp": format_utc(end_sequence_timestamp) if end_sequence_timestamp else None,
        }
        data = await self.executor.send("GET", f"{ORDERS_PATH}/historical/fills", params)
        return list((data or {}).get("fills", []))

    async def get_order(self, order_id: str) -> dict[str, Any] | None:
        _require(order_id, "Order ID")
        data = await self.executor.send("GET", f"{ORDERS_PATH}/historical/{order_id}")
        return (data or {}).get("order")

    async def cancel_orders(self, order_ids: Iterable[str]) -> list[dict[str, Any]]:
        """Cancel a batch of orders, returning one result per id."""
        ids = list(order_ids or [])
        if not ids:
            raise ValueError("Order IDs cannot be empty")

        data = await self.executor.send("POST", f"{ORDERS_PATH}/batch_cancel", body={"order_ids": ids})
        return list((data or {}).get("results", []))

    async def create_market_order(
        self,
        product_id: str,
        side: OrderSide,
        amount: str,
        client_order_id: str | None = None,
    ) -> str | None:
        """Place an IOC market order.

        ``amount`` is the quote size for buys and the base size for sells.
        """
        side = OrderSide(side)
        _require(amount, "Amount")
        size_key = "quote_size" if side is OrderSide.BUY else "base_size"
        config = {"market_market_ioc": {size_key: amount}}
        return await self._create_order(product_id, side, config, client_order_id)

    async def create_limit_order_gtc(
        self,
        product_id: str,
        side: OrderSide,
        base_size: str,
        limit_price: str,
        post_only: bool = True,
        client_order_id: str | None = None,
    ) -> str | None:
        config = {
            "limit_limit_gtc": {
                "base_size": _require(base_size, "Base size"),
                "limit_price": _require(limit_price, "Limit price"),
                "post_only": post_only,
            }
        }
        return await self._create_order(product_id, side, config, client_order_id)

    async def create_limit_order_gtd(
        self,
        product_id: str,
        side: OrderSide,
        base_size: str,
        limit_price: str,
        end_time: datetime,
        post_only: bool = True,
        client_order_id: str | None = None,
    ) -> str | None:
        config = {
            "limit_limit_gtd": {
                "base_size": _require(base_size, "Base size"),
                "limit_price": _require(limit_price, "Limit price"),
                "end_time": format_utc(end_time),
                "post_only": post_only,
            }
        }
        return await self._create_order(product_id, side, config, client_order_id)

    async def create_stop_limit_order_gtc(
        self,
        product_id: str,
        side: OrderSide,
        base_size: str,
        limit_price: str,
        stop_price: str,
        client_order_id: str | None = None,
    ) -> str | None:
        side = OrderSide(side)
        config = {
            "stop_limit_stop_limit_gtc": {
                "base_size": _require(base_size, "Base size"),
                "limit_price": _require(limit_price, "Limit price"),
                "stop_price": _require(stop_price, "Stop price"),
                "stop_direction": (
                    "STOP_DIRECTION_STOP_UP" if side is OrderSide.BUY else "STOP_DIRECTION_STOP_DOWN"
                ),
            }
        }
        return await self._create_order(product_id, side, config, client_order_id)

    async def _create_order(
        self,
        product_id: str,
        side: OrderSide,
        order_configuration: dict[str, Any],
        client_order_id: str | None,
    ) -> str | None:
        _require(product_id, "Product ID")
        side = OrderSide(side)

        request = {
            "client_order_id": client_order_id if client_order_id and client_order_id.strip() else str(uuid.uuid4()),
            "product_id": product_id,
            "side": side.value,
            "order_configuration": order_configuration,
        }
        data = await self.executor.send("POST", ORDERS_PATH, body=request) or {}

        success = data.get("success_response")
        if isinstance(success, dict) and success.get("order_id"):
            logger.info("Order %s accepted for %s %s", success["order_id"], side.value, product_id)
            return success["order_id"]

        error = data.get("error_response")
        if isinstance(error, dict):
            raise OrderRejectedError(
                "Order creation failed. Error: {}. Message: {}. Details: {}".format(
                    error.get("error", "Unknown Error"),
                    error.get("message", "No Message"),
                    error.get("error_details", "No Details"),
                ),
                method="POST",
                path=ORDERS_PATH,
                body=str(error),
            )

        logger.warning("Order response for %s carried no order id", product_id)
        return None
