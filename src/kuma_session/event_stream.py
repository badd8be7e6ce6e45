"""
Event Stream - per-user authenticated order/position notifications.

Keeps one subscription to the ``orders`` and ``positions`` channels alive for
the lifetime of a session and turns fills and closed positions into
localized messages for the user.

State machine:

    DISCONNECTED -> CONNECTING -> SUBSCRIBING -> LIVE
    LIVE --disconnect--> RECONNECTING --wait, connect, subscribe--> LIVE
                         (failed attempts stay in RECONNECTING)

The wait before each reconnect attempt comes from a ``ReconnectPolicy``;
the default is a fixed 45 seconds with no attempt limit.

Notifications are queued and sent by a single dispatcher task, so delivery
follows the order fills appear in the stream.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from .constants import STREAM_CHANNELS
from .errors import ReconnectExhausted
from .localization import LocaleTexts
from .models.config import ReconnectPolicy
from .models.events import ConnectionState, parse_stream_event
from .notifications import notifications_for

logger = logging.getLogger(__name__)


class MessageSink(Protocol):
    """Anything that can deliver a text to a user."""

    async def send(self, user_id: Any, text: str) -> Any:
        ...


class StreamTransport(Protocol):
    connected: bool

    async def connect(self) -> None:
        ...

    async def subscribe(self, channels: Sequence[str]) -> None:
        ...

    def messages(self):
        ...

    async def close(self) -> None:
        ...


class EventStream:
    """
    Reconnecting notification stream for one user.

    ``run()`` only returns after ``stop()``; the first connection failure is
    raised to the caller, later disconnects are retried per the policy.
    """

    def __init__(
        self,
        transport: StreamTransport,
        sink: MessageSink,
        user_id: Any,
        texts: LocaleTexts,
        policy: Optional[ReconnectPolicy] = None,
        channels: Sequence[str] = STREAM_CHANNELS,
        label: str = "",
    ):
        self._transport = transport
        self._sink = sink
        self._user_id = user_id
        self._texts = texts
        self._policy = policy or ReconnectPolicy()
        self._channels = list(channels)
        self._label = label or str(user_id)

        self._state = ConnectionState.DISCONNECTED
        self._queue: "asyncio.Queue[Tuple[Any, str]]" = asyncio.Queue()
        self._dispatch_task: Optional[asyncio.Task] = None
        self._run_task: Optional[asyncio.Task] = None
        self._started = False
        self.running = False

    @property
    def state(self) -> ConnectionState:
        return self._state

    async def run(self) -> None:
        """Connect, subscribe and dispatch notifications until stopped."""
        if self._started:
            raise RuntimeError("EventStream cannot be restarted; build a new one")
        self._started = True
        self.running = True
        self._run_task = asyncio.current_task()
        self._dispatch_task = asyncio.create_task(self._dispatch_loop())

        try:
            await self._open()
            logger.info(f"[{self._label}] Event stream live on {', '.join(self._channels)}")

            while self.running:
                await self._consume()
                if not self.running:
                    break
                logger.error(f"[{self._label}] Event stream disconnected")
                await self._reconnect()
        except asyncio.CancelledError:
            if self.running:
                raise
        finally:
            self.running = False
            self._state = ConnectionState.DISCONNECTED
            await self._stop_dispatcher()

    async def stop(self) -> None:
        """Stop the stream and close the transport."""
        self.running = False
        await self._transport.close()
        if self._run_task and self._run_task is not asyncio.current_task() and not self._run_task.done():
            self._run_task.cancel()
        logger.info(f"[{self._label}] Event stream stopped")

    async def handle_message(self, message: Dict[str, Any]) -> List[str]:
        """
        Queue the notifications for one raw message and return their texts.

        Errors are logged and swallowed so one bad message never interrupts
        the stream.
        """
        try:
            if message.get("type") == "error":
                logger.error(f"[{self._label}] Stream error message: {message.get('data')}")
                return []
            texts = notifications_for(parse_stream_event(message), self._texts)
        except Exception as e:
            logger.error(f"[{self._label}] Error processing message {message!r}: {e}")
            return []

        for text in texts:
            self._queue.put_nowait((self._user_id, text))
        return texts

    async def _open(self) -> None:
        self._state = ConnectionState.CONNECTING
        await self._transport.connect()
        self._state = ConnectionState.SUBSCRIBING
        await self._transport.subscribe(self._channels)
        self._state = ConnectionState.LIVE

    async def _consume(self) -> None:
        """Process messages until the transport disconnects."""
        try:
            async for message in self._transport.messages():
                await self.handle_message(message)
        except Exception as e:
            logger.error(f"[{self._label}] Stream transport error: {e}")

    async def _reconnect(self) -> None:
        self._state = ConnectionState.RECONNECTING
        attempt = 0
        while self.running:
            if not self._policy.allows(attempt):
                raise ReconnectExhausted(
                    f"Gave up reconnecting after {attempt} attempts"
                )
            await self._policy.wait(attempt)
            attempt += 1
            try:
                await self._open()
            except Exception as e:
                self._state = ConnectionState.RECONNECTING
                logger.error(f"[{self._label}] Reconnect attempt {attempt} failed: {e}")
                continue
            logger.info(f"[{self._label}] Event stream reconnected after {attempt} attempts")
            return

    async def _dispatch_loop(self) -> None:
        while True:
            user_id, text = await self._queue.get()
            try:
                await self._sink.send(user_id, text)
            except Exception as e:
                logger.error(f"[{self._label}] Failed to deliver notification: {e}")
            finally:
                self._queue.task_done()

    async def _stop_dispatcher(self) -> None:
        if self._dispatch_task is None:
            return
        self._dispatch_task.cancel()
        try:
            await self._dispatch_task
        except asyncio.CancelledError:
            pass
        self._dispatch_task = None
