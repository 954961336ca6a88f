"""Unauthenticated market endpoints."""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable

from .executor import RequestExecutor

MARKET_PATH = "/api/v3/brokerage/market"


class Granularity(str, Enum):
    ONE_MINUTE = "ONE_MINUTE"
    FIVE_MINUTE = "FIVE_MINUTE"
    FIFTEEN_MINUTE = "FIFTEEN_MINUTE"
    THIRTY_MINUTE = "THIRTY_MINUTE"
    ONE_HOUR = "ONE_HOUR"
    TWO_HOUR = "TWO_HOUR"
    SIX_HOUR = "SIX_HOUR"
    ONE_DAY = "ONE_DAY"


def _require_product(product_id: str) -> None:
    if not product_id or not product_id.strip():
        raise ValueError("Product ID cannot be empty")


class PublicManager:
    """Market data that needs no credentials."""

    def __init__(self, executor: RequestExecutor):
        self.executor = executor

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        return await self.executor.send("GET", path, params, authenticated=False) or {}

    async def get_server_time(self) -> dict[str, Any]:
        return await self._get("/api/v3/brokerage/time")

    async def list_products(
        self,
        limit: int | None = None,
        offset: int | None = None,
        product_type: str | None = None,
        product_ids: Iterable[str] | None = None,
    ) -> list[dict[str, Any]]:
        if limit is not None and limit <= 0:
            raise ValueError("Limit must be greater than zero")
        if offset is not None and offset < 0:
            raise ValueError("Offset cannot be negative")

        data = await self._get(
            f"{MARKET_PATH}/products",
            {
                "limit": limit,
                "offset": offset,
                "product_type": product_type,
                "product_ids": list(product_ids) if product_ids else None,
            },
        )
        return list(data.get("products", []))

    async def get_product(self, product_id: str) -> dict[str, Any]:
        _require_product(product_id)
        return await self._get(f"{MARKET_PATH}/products/{product_id}")

    async def get_product_book(self, product_id: str, limit: int | None = None) -> dict[str, Any]:
        _require_product(product_id)
        data = await self._get(f"{MARKET_PATH}/product_book", {"product_id": product_id, "limit": limit})
        return data.get("pricebook", {})

    async def get_market_trades(
        self,
        product_id: str,
        limit: int,
        start: int | None = None,
        end: int | None = None,
    ) -> dict[str, Any]:
        """Latest trades plus best bid/ask for a product."""
        _require_product(product_id)
        if limit <= 0:
            raise ValueError("Limit must be greater than zero")
        return await self._get(
            f"{MARKET_PATH}/products/{product_id}/ticker",
            {"limit": limit, "start": start, "end": end},
        )

    async def get_candles(
        self,
        product_id: str,
        start: int,
        end: int,
        granularity: Granularity,
    ) -> list[dict[str, Any]]:
        """Candles between two unix timestamps (seconds)."""
        _require_product(product_id)
        if end < start:
            raise ValueError("End must be greater than or equal to start")

        data = await self._get(
            f"{MARKET_PATH}/products/{product_id}/candles",
            {"start": start, "end": end, "granularity": Granularity(granularity).value},
        )
        return list(data.get("candles", []))
