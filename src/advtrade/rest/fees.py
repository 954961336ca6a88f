"""Fee tier and volume summary."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from .executor import RequestExecutor


def _as_float(data: dict[str, Any], key: str) -> float:
    value = data.get(key)
    if value in (None, ""):
        return 0.0
    return float(value)


def format_utc(value: datetime) -> str:
    """ISO-8601 with a ``Z`` suffix; naive datetimes are treated as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass(slots=True)
class TransactionSummary:
    total_volume: float
    total_fees: float
    advanced_trade_only_volume: float
    advanced_trade_only_fees: float
    coinbase_pro_volume: float
    coinbase_pro_fees: float
    low: float
    fee_tier: dict[str, Any] = field(default_factory=dict)
    margin_rate: dict[str, Any] | None = None
    goods_and_services_tax: dict[str, Any] | None = None

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> "TransactionSummary":
        return cls(
            total_volume=_as_float(data, "total_volume"),
            total_fees=_as_float(data, "total_fees"),
            advanced_trade_only_volume=_as_float(data, "advanced_trade_only_volume"),
            advanced_trade_only_fees=_as_float(data, "advanced_trade_only_fees"),
            coinbase_pro_volume=_as_float(data, "coinbase_pro_volume"),
            coinbase_pro_fees=_as_float(data, "coinbase_pro_fees"),
            low=_as_float(data, "low"),
            fee_tier=data.get("fee_tier") or {},
            margin_rate=data.get("margin_rate"),
            goods_and_services_tax=data.get("goods_and_services_tax"),
        )


class FeesManager:
    """Queries the account's fee tier and traded volume."""

    def __init__(self, executor: RequestExecutor):
        self.executor = executor

    async def get_transaction_summary(
        self,
        start: datetime,
        end: datetime,
        user_native_currency: str = "USD",
        product_type: str = "SPOT",
    ) -> TransactionSummary | None:
        """Fetch the transaction summary for a date range.

        Raises:
            ValueError: On empty currency/product type or an inverted range
        """
        if not user_native_currency or not user_native_currency.strip():
            raise ValueError("User native currency cannot be empty")
        if not product_type or not product_type.strip():
            raise ValueError("Product type cannot be empty")

        start_utc = format_utc(start)
        end_utc = format_utc(end)
        if end_utc < start_utc:
            raise ValueError("End date must be greater than or equal to start date")

        data = await self.executor.send(
            "GET",
            "/api/v3/brokerage/transaction_summary",
            {
                "start_date": start_utc,
                "end_date": end_utc,
                "user_native_currency": user_native_currency,
                "product_type": product_type,
            },
        )
        if data is None:
            return None
        return TransactionSummary.from_response(data)
