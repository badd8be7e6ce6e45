# -*- coding: utf-8 -*-
"""
Tests for the reconnecting notification stream.
"""

import asyncio
from unittest.mock import AsyncMock, call, patch

import pytest

from kuma_session.errors import ReconnectExhausted
from kuma_session.event_stream import EventStream
from kuma_session.models.config import ReconnectPolicy
from kuma_session.models.events import ConnectionState

USER_ID = 424242


@pytest.fixture
def sink():
    return AsyncMock()


def sent_texts(sink):
    return [c.args[1] for c in sink.send.await_args_list]


async def start(stream):
    task = asyncio.create_task(stream.run())
    await asyncio.sleep(0)
    return task


async def shutdown(stream, task):
    await stream.stop()
    await asyncio.wait_for(task, timeout=2.0)


class TestDelivery:

    @pytest.mark.asyncio
    async def test_fills_and_closed_position_in_order(
            self, texts, sink, make_transport, wait_until, make_fill, orders_message, positions_message,
    ):
        transport = make_transport([[
            orders_message("ETH-USD", [make_fill("1"), make_fill("2"), make_fill("3", fee=None)]),
            positions_message("ETH-USD", "open", "1", "0"),
            positions_message("ETH-USD", "closed", "0", "5.55", "3100"),
        ]])
        stream = EventStream(transport, sink, USER_ID, texts)

        task = await start(stream)
        await wait_until(lambda: sink.send.await_count == 4)
        await shutdown(stream, task)

        delivered = sent_texts(sink)
        assert "Filled 1.00 USD" in delivered[0]
        assert "Filled 2.00 USD" in delivered[1]
        assert delivered[2].endswith("fee LIQUIDATION")
        assert "🟢 <b>5.6</b>USD" in delivered[3]
        assert all(c.args[0] == USER_ID for c in sink.send.await_args_list)
        assert transport.subscriptions == [["orders", "positions"]]

    @pytest.mark.asyncio
    async def test_bad_messages_do_not_stop_stream(
            self, texts, sink, make_transport, wait_until, make_fill, orders_message,
    ):
        transport = make_transport([[
            {"type": "error", "data": {"code": "INVALID_TOKEN", "message": "expired"}},
            {"type": "orders", "data": {"market": "ETH-USD", "fills": [{"quoteQuantity": "abc"}]}},
            {"type": "orders", "data": {"market": "ETH-USD", "fills": "garbage"}},
            {"type": "orders", "data": None},
            {"type": "subscriptions"},
            orders_message("SOL-USD", [make_fill("7")]),
        ]])
        stream = EventStream(transport, sink, USER_ID, texts)

        task = await start(stream)
        await wait_until(lambda: sink.send.await_count == 1)
        await shutdown(stream, task)

        assert "Filled 7.00 USD" in sent_texts(sink)[0]
        assert transport.connect_calls == 1

    @pytest.mark.asyncio
    async def test_sink_failure_does_not_stop_dispatch(
            self, texts, sink, make_transport, wait_until, make_fill, orders_message,
    ):
        sink.send.side_effect = [RuntimeError("telegram down"), True]
        transport = make_transport([[orders_message("ETH-USD", [make_fill("1"), make_fill("2")])]])
        stream = EventStream(transport, sink, USER_ID, texts)

        task = await start(stream)
        await wait_until(lambda: sink.send.await_count == 2)
        await shutdown(stream, task)

        assert "Filled 2.00 USD" in sent_texts(sink)[1]

    @pytest.mark.asyncio
    async def test_handle_message_returns_texts(
            self, texts, sink, make_transport, make_fill, orders_message,
    ):
        stream = EventStream(make_transport(), sink, USER_ID, texts)

        result = await stream.handle_message(orders_message("ETH-USD", [make_fill("1"), make_fill("2")]))

        assert len(result) == 2
        assert await stream.handle_message({"type": "error", "data": {}}) == []


class TestReconnect:

    @pytest.mark.asyncio
    async def test_waits_before_every_attempt(
            self, texts, sink, make_transport, wait_until, make_fill, orders_message,
    ):
        failures = [OSError("refused")] * 3
        transport = make_transport(
            scripts=[[], [orders_message("ETH-USD", [make_fill("4")])]],
            connect_errors=[None] + failures,
        )
        stream = EventStream(transport, sink, USER_ID, texts)

        with patch.object(ReconnectPolicy, "wait", new_callable=AsyncMock) as wait:
            task = await start(stream)
            await wait_until(lambda: transport.connect_calls == 5 and stream.state is ConnectionState.LIVE)
            await wait_until(lambda: sink.send.await_count == 1)

            assert wait.await_args_list == [call(0), call(1), call(2), call(3)]
            assert len(transport.subscriptions) == 2
            await shutdown(stream, task)

        assert stream.state is ConnectionState.DISCONNECTED

    @pytest.mark.asyncio
    async def test_transport_error_triggers_reconnect(
            self, texts, sink, make_transport, wait_until, make_fill, orders_message,
    ):
        transport = make_transport([
            [orders_message("ETH-USD", [make_fill("1")]), ConnectionResetError("reset")],
            [orders_message("ETH-USD", [make_fill("2")])],
        ])
        stream = EventStream(transport, sink, USER_ID, texts)

        with patch.object(ReconnectPolicy, "wait", new_callable=AsyncMock):
            task = await start(stream)
            await wait_until(lambda: sink.send.await_count == 2)
            await shutdown(stream, task)

        assert transport.connect_calls == 2
        assert "Filled 2.00 USD" in sent_texts(sink)[1]

    @pytest.mark.asyncio
    async def test_initial_connect_failure_is_raised(self, texts, sink, make_transport):
        transport = make_transport(connect_errors=[OSError("refused")])
        stream = EventStream(transport, sink, USER_ID, texts)

        with pytest.raises(OSError, match="refused"):
            await stream.run()

        assert stream.state is ConnectionState.DISCONNECTED
        assert not stream.running
        assert transport.connect_calls == 1

    @pytest.mark.asyncio
    async def test_bounded_policy_gives_up(self, texts, sink, make_transport):
        transport = make_transport(
            scripts=[[], []],
            connect_errors=[None, OSError("refused"), OSError("refused")],
        )
        policy = ReconnectPolicy(delay=0, max_attempts=2)
        stream = EventStream(transport, sink, USER_ID, texts, policy=policy)

        with pytest.raises(ReconnectExhausted):
            await asyncio.wait_for(stream.run(), timeout=2.0)

        assert transport.connect_calls == 3
        assert stream.state is ConnectionState.DISCONNECTED

    @pytest.mark.asyncio
    async def test_cannot_run_twice(self, texts, sink, make_transport):
        stream = EventStream(make_transport(connect_errors=[OSError("x")]), sink, USER_ID, texts)

        with pytest.raises(OSError):
            await stream.run()
        with pytest.raises(RuntimeError):
            await stream.run()

    @pytest.mark.asyncio
    async def test_stop_ends_run(self, texts, sink, make_transport, wait_until):
        transport = make_transport()
        stream = EventStream(transport, sink, USER_ID, texts)

        task = await start(stream)
        await wait_until(lambda: stream.state is ConnectionState.LIVE)
        await shutdown(stream, task)

        assert task.done() and task.exception() is None
        assert not transport.connected


class TestReconnectPolicy:

    def test_defaults(self):
        policy = ReconnectPolicy()

        assert policy.delay == 45
        assert policy.max_attempts is None
        assert policy.delay_for(0) == policy.delay_for(10) == 45
        assert policy.allows(10_000)

    def test_backoff_and_limit(self):
        policy = ReconnectPolicy(delay=2, max_attempts=3, backoff_factor=2.0)

        assert [policy.delay_for(i) for i in range(3)] == [2, 4, 8]
        assert policy.allows(2)
        assert not policy.allows(3)

    @pytest.mark.parametrize("kwargs", [
        {"delay": -1},
        {"max_attempts": 0},
        {"backoff_factor": 0.5},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            ReconnectPolicy(**kwargs)

    @pytest.mark.asyncio
    async def test_wait_sleeps_for_delay(self):
        with patch("kuma_session.models.config.asyncio.sleep", new_callable=AsyncMock) as sleep:
            await ReconnectPolicy(delay=3, backoff_factor=2.0).wait(1)

        sleep.assert_awaited_once_with(6.0)
