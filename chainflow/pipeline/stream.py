"""Streamer: consumer handle over a background pipeline run."""

import asyncio
from typing import Awaitable, Callable, Optional

from ..errors import PipelineCancelledError
from ..messages import Generation

Handoff = Callable[[Generation], Awaitable[None]]
Producer = Callable[[Handoff, asyncio.Event], Awaitable[object]]


class Streamer:
    """Lazy, finite, forward-only sequence of generations.

    The producer runs as its own task and hands each completed generation to
    a bounded queue. Consume with ``async for`` (or ``anext``); the sequence
    ends with ``StopAsyncIteration`` on success, or re-raises the failing
    step's exception once every value handed off before it was delivered.
    Not restartable.

    Use it as an async context manager, or call ``aclose()``, when you stop
    consuming early. Otherwise the producer stays parked on a full queue.
    """

    def __init__(
        self,
        produce: Producer,
        *,
        cancel_event: Optional[asyncio.Event] = None,
        buffer: int = 1,
    ):
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max(1, buffer))
        self._cancel_event = cancel_event if cancel_event is not None else asyncio.Event()
        self._delivered = 0
        self._closed = False
        self._task = asyncio.create_task(produce(self._queue.put, self._cancel_event))

    @property
    def done(self) -> bool:
        """True once the producer has stopped and every value was consumed."""
        return self._task.done() and self._queue.empty()

    def __aiter__(self) -> "Streamer":
        return self

    async def __anext__(self) -> Generation:
        if self._closed:
            raise StopAsyncIteration
        if not self._queue.empty():
            return self._take(self._queue.get_nowait())

        if not self._task.done():
            getter = asyncio.ensure_future(self._queue.get())
            try:
                await asyncio.wait(
                    {getter, self._task}, return_when=asyncio.FIRST_COMPLETED
                )
            except BaseException:
                getter.cancel()
                raise
            if getter.done():
                return self._take(getter.result())
            getter.cancel()
            if not self._queue.empty():
                return self._take(self._queue.get_nowait())

        if self._task.cancelled():
            raise PipelineCancelledError(self._delivered + 1)
        error = self._task.exception()
        if error is not None:
            raise error
        raise StopAsyncIteration

    def _take(self, generation: Generation) -> Generation:
        self._delivered += 1
        return generation

    async def aclose(self) -> None:
        """Abandon the stream and wait for the producer to stop.

        A step already running is allowed to finish; no further step starts.
        Whatever the producer does after abandonment is discarded.
        """
        if self._closed:
            return
        self._closed = True
        self._cancel_event.set()
        # unblock a producer parked on a full queue
        while not self._queue.empty():
            self._queue.get_nowait()
        await asyncio.wait({self._task})
        if not self._task.cancelled():
            self._task.exception()

    async def __aenter__(self) -> "Streamer":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
