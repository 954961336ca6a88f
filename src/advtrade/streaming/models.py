"""Typed payloads carried in the ``events`` array of streaming frames.

Numeric fields arrive as strings on the wire and are coerced to float;
timestamps are kept as the venue's ISO-8601 strings. Unknown fields are
ignored so that additive protocol changes do not break decoding.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, Field


class WireModel(BaseModel):
    model_config = {"extra": "ignore"}


class HeartbeatEvent(WireModel):
    current_time: str | None = None
    heartbeat_counter: int | None = None


class Candle(WireModel):
    start: str | None = None
    high: float | None = None
    low: float | None = None
    open: float | None = None
    close: float | None = None
    volume: float | None = None
    product_id: str | None = None


class CandlesEvent(WireModel):
    type: str | None = None
    candles: list[Candle] = Field(default_factory=list)


class MarketTrade(WireModel):
    trade_id: str | None = None
    product_id: str | None = None
    price: float | None = None
    size: float | None = None
    side: str | None = None
    time: str | None = None


class MarketTradesEvent(WireModel):
    type: str | None = None
    trades: list[MarketTrade] = Field(default_factory=list)


class ProductStatus(WireModel):
    product_type: str | None = None
    id: str | None = None
    base_currency: str | None = None
    quote_currency: str | None = None
    base_increment: float | None = None
    quote_increment: float | None = None
    display_name: str | None = None
    status: str | None = None
    status_message: str | None = None
    min_market_funds: float | None = None


class StatusEvent(WireModel):
    type: str | None = None
    products: list[ProductStatus] = Field(default_factory=list)


class Ticker(WireModel):
    type: str | None = None
    product_id: str | None = None
    price: float | None = None
    volume_24_h: float | None = None
    low_24_h: float | None = None
    high_24_h: float | None = None
    low_52_w: float | None = None
    high_52_w: float | None = None
    price_percent_chg_24_h: float | None = None
    best_bid: float | None = None
    best_bid_quantity: float | None = None
    best_ask: float | None = None
    best_ask_quantity: float | None = None


class TickerEvent(WireModel):
    type: str | None = None
    tickers: list[Ticker] = Field(default_factory=list)


class Level2Update(WireModel):
    side: str | None = None
    event_time: str | None = None
    price_level: float | None = None
    new_quantity: float | None = None


class Level2Event(WireModel):
    type: str | None = None
    product_id: str | None = None
    updates: list[Level2Update] = Field(default_factory=list)


class UserOrder(WireModel):
    order_id: str | None = None
    client_order_id: str | None = None
    cumulative_quantity: float | None = None
    leaves_quantity: float | None = None
    avg_price: float | None = None
    total_fees: float | None = None
    status: str | None = None
    product_id: str | None = None
    creation_time: str | None = None
    order_side: str | None = None
    order_type: str | None = None


class UserEvent(WireModel):
    type: str | None = None
    orders: list[UserOrder] = Field(default_factory=list)


EventT = TypeVar("EventT", bound=BaseModel)


class StreamEnvelope(WireModel, Generic[EventT]):
    """One decoded frame: a channel name and its ordered events."""

    channel: str
    client_id: str | None = None
    timestamp: str | None = None
    sequence_num: int | None = None
    events: list[EventT] = Field(default_factory=list)
