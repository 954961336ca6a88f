"""Tests for typed message dispatch."""

import json

import pytest

from advtrade.streaming.channels import Channel, channel_string
from advtrade.streaming.dispatcher import MessageDispatcher
from advtrade.streaming.models import HeartbeatEvent, Level2Event, TickerEvent


def frame(channel, *events, **extra):
    return json.dumps({"channel": channel, "events": list(events), **extra})


class TestChannels:
    """Tests for channel name mapping."""

    def test_every_channel_has_distinct_wire_name(self):
        names = [c.value for c in Channel]
        assert len(names) == len(set(names)) == 8

    def test_lookup_is_case_insensitive(self):
        assert Channel.from_wire("Market_Trades") is Channel.MARKET_TRADES
        assert channel_string("LEVEL2") == "level2"

    def test_unknown_name(self):
        assert Channel.from_wire("l3") is None
        with pytest.raises(ValueError):
            channel_string("l3")


class TestMessageDispatcher:
    """Tests for MessageDispatcher."""

    @pytest.mark.asyncio
    async def test_ticker_frame_reaches_only_ticker_listener(self, sample_ticker_frame):
        """One ticker event invokes the ticker listener once and nothing else."""
        dispatcher = MessageDispatcher()
        received = {channel: [] for channel in Channel}
        for channel in Channel:
            dispatcher.add_listener(channel, received[channel].append)

        handled = await dispatcher.dispatch(json.dumps(sample_ticker_frame))

        assert handled is True
        assert len(received[Channel.TICKER]) == 1
        event = received[Channel.TICKER][0]
        assert isinstance(event, TickerEvent)
        assert event.type == "snapshot"
        assert event.tickers[0].product_id == "BTC-USD"
        assert event.tickers[0].price == 21932.98
        assert all(not events for channel, events in received.items() if channel is not Channel.TICKER)

    @pytest.mark.asyncio
    async def test_events_delivered_in_frame_order(self):
        dispatcher = MessageDispatcher()
        counters = []
        dispatcher.add_listener(Channel.HEARTBEATS, lambda e: counters.append(e.heartbeat_counter))

        await dispatcher.dispatch(
            frame(
                "heartbeats",
                {"current_time": "2023-06-23 20:31:56", "heartbeat_counter": 3049},
                {"current_time": "2023-06-23 20:31:57", "heartbeat_counter": 3050},
            )
        )

        assert counters == [3049, 3050]

    @pytest.mark.asyncio
    async def test_every_listener_sees_every_event(self):
        dispatcher = MessageDispatcher()
        calls = []
        dispatcher.add_listener(Channel.HEARTBEATS, lambda e: calls.append(("a", e.heartbeat_counter)))
        dispatcher.add_listener(Channel.HEARTBEATS, lambda e: calls.append(("b", e.heartbeat_counter)))

        await dispatcher.dispatch(frame("heartbeats", {"heartbeat_counter": 1}, {"heartbeat_counter": 2}))

        assert calls == [("a", 1), ("b", 1), ("a", 2), ("b", 2)]

    @pytest.mark.asyncio
    async def test_channel_field_is_case_insensitive(self):
        dispatcher = MessageDispatcher()
        received = []
        dispatcher.add_listener(Channel.HEARTBEATS, received.append)

        await dispatcher.dispatch(frame("HeartBeats", {"heartbeat_counter": 7}))

        assert received[0].heartbeat_counter == 7

    @pytest.mark.asyncio
    async def test_level2_payload(self):
        dispatcher = MessageDispatcher()
        received = []
        dispatcher.add_listener("level2", received.append)

        await dispatcher.dispatch(
            frame(
                "level2",
                {
                    "type": "update",
                    "product_id": "BTC-USD",
                    "updates": [
                        {
                            "side": "bid",
                            "event_time": "1970-01-01T00:00:00Z",
                            "price_level": "21921.73",
                            "new_quantity": "0.06317902",
                        }
                    ],
                },
            )
        )

        event = received[0]
        assert isinstance(event, Level2Event)
        assert event.updates[0].side == "bid"
        assert event.updates[0].new_quantity == pytest.approx(0.06317902)

    @pytest.mark.asyncio
    async def test_ticker_batch_uses_ticker_payload(self, sample_ticker_frame):
        dispatcher = MessageDispatcher()
        batch, single = [], []
        dispatcher.add_listener(Channel.TICKER_BATCH, batch.append)
        dispatcher.add_listener(Channel.TICKER, single.append)

        await dispatcher.dispatch(json.dumps({**sample_ticker_frame, "channel": "ticker_batch"}))

        assert isinstance(batch[0], TickerEvent)
        assert single == []

    @pytest.mark.asyncio
    async def test_unknown_channel_ignored(self):
        dispatcher = MessageDispatcher()
        received = []
        dispatcher.add_listener(Channel.TICKER, received.append)

        assert await dispatcher.dispatch(frame("subscriptions", {"subscriptions": {}})) is False
        assert await dispatcher.dispatch(json.dumps({"type": "error", "message": "bad"})) is False
        assert received == []

    @pytest.mark.asyncio
    async def test_malformed_json_swallowed(self):
        dispatcher = MessageDispatcher()
        assert await dispatcher.dispatch('{"channel": "ticker", "events": [') is False
        assert await dispatcher.dispatch("[1, 2, 3]") is False

    @pytest.mark.asyncio
    async def test_invalid_envelope_swallowed(self):
        dispatcher = MessageDispatcher()
        received = []
        dispatcher.add_listener(Channel.HEARTBEATS, received.append)

        handled = await dispatcher.dispatch(json.dumps({"channel": "heartbeats", "events": "nope"}))

        assert handled is False
        assert received == []

    @pytest.mark.asyncio
    async def test_unknown_fields_ignored(self):
        dispatcher = MessageDispatcher()
        received = []
        dispatcher.add_listener(Channel.HEARTBEATS, received.append)

        await dispatcher.dispatch(frame("heartbeats", {"heartbeat_counter": 1, "new_field": True}, extra_top="x"))

        assert isinstance(received[0], HeartbeatEvent)

    @pytest.mark.asyncio
    async def test_failing_listener_is_isolated(self):
        dispatcher = MessageDispatcher()
        received = []

        def broken(event):
            raise RuntimeError("listener bug")

        dispatcher.add_listener(Channel.HEARTBEATS, broken)
        dispatcher.add_listener(Channel.HEARTBEATS, received.append)

        await dispatcher.dispatch(frame("heartbeats", {"heartbeat_counter": 1}, {"heartbeat_counter": 2}))

        assert [e.heartbeat_counter for e in received] == [1, 2]

    @pytest.mark.asyncio
    async def test_coroutine_listener_awaited(self):
        dispatcher = MessageDispatcher()
        received = []

        async def listener(event):
            received.append(event.heartbeat_counter)

        dispatcher.add_listener(Channel.HEARTBEATS, listener)
        await dispatcher.dispatch(frame("heartbeats", {"heartbeat_counter": 5}))

        assert received == [5]

    @pytest.mark.asyncio
    async def test_handle_remove(self):
        dispatcher = MessageDispatcher()
        received = []
        handle = dispatcher.add_listener(Channel.HEARTBEATS, received.append)
        assert handle.active

        handle.remove()
        handle.remove()
        await dispatcher.dispatch(frame("heartbeats", {"heartbeat_counter": 1}))

        assert not handle.active
        assert received == []
        assert dispatcher.listener_count(Channel.HEARTBEATS) == 0

    @pytest.mark.asyncio
    async def test_raw_listeners(self):
        dispatcher = MessageDispatcher()
        received = []
        dispatcher.add_raw_listener(received.append)

        await dispatcher.publish_raw(b"\x00\x01")

        assert received == [b"\x00\x01"]

    def test_invalid_registration(self):
        dispatcher = MessageDispatcher()
        with pytest.raises(ValueError):
            dispatcher.add_listener("orders", print)
        with pytest.raises(ValueError):
            dispatcher.add_listener(Channel.TICKER, "not callable")
