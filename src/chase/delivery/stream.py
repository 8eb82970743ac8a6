"""Asyncio delivery: lines as an async iterator, paced by the consumer."""

import asyncio
import logging
import threading
import weakref
from concurrent.futures import CancelledError as FutureCancelledError
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import TYPE_CHECKING

from ..data import LineRecord
from ..errors import DeliveryError
from .base import WorkerHandle, spawn_worker

if TYPE_CHECKING:
    from ..chaser import Chaser

logger = logging.getLogger(__name__)

# How often a blocked worker checks whether its consumer went away
_DISENGAGE_POLL = 0.1

_END = object()


class _Sink:
    """The worker's side of a stream: pushes records onto the event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop):
        self.loop = loop
        self.queue: asyncio.Queue = asyncio.Queue()
        self.closed = threading.Event()

    def _disengaged(self) -> bool:
        return self.closed.is_set() or self.loop.is_closed()

    async def _admit(self, record: LineRecord) -> None:
        accepted = self.loop.create_future()
        await self.queue.put((record, accepted))
        await accepted

    def push(self, record: LineRecord) -> None:
        """Block the worker thread until the consumer has taken ``record``."""
        if self._disengaged():
            raise DeliveryError("Stream consumer is gone")
        try:
            pending = asyncio.run_coroutine_threadsafe(self._admit(record), self.loop)
        except RuntimeError as e:
            raise DeliveryError(f"Stream event loop is unavailable: {e}") from e

        while True:
            try:
                pending.result(timeout=_DISENGAGE_POLL)
                return
            except FutureTimeoutError:
                if self._disengaged():
                    if not self.loop.is_closed():
                        pending.cancel()
                    raise DeliveryError("Stream consumer went away before taking the line")
            except FutureCancelledError:
                raise DeliveryError("Stream consumer went away before taking the line")

    def finish(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.queue.put_nowait, _END)
        except RuntimeError:
            # Loop already closed; nobody is left to tell
            pass

    def close(self) -> None:
        self.closed.set()


class LineStream:
    """
    Async iterator over the lines of a chased file.

    The worker reads the next line only after the previous one has been
    pulled. ``aclose()`` (or leaving ``async with``, or dropping the stream)
    disengages it; the worker then ends with ``DeliveryError``.
    """

    def __init__(self, sink: _Sink):
        self._sink = sink
        self._finished = False
        self._finalizer = weakref.finalize(self, sink.close)

    def __aiter__(self) -> "LineStream":
        return self

    async def __anext__(self) -> LineRecord:
        if self._finished or not self._finalizer.alive:
            raise StopAsyncIteration
        item = await self._sink.queue.get()
        if item is _END:
            self._finished = True
            raise StopAsyncIteration
        record, accepted = item
        if not accepted.done():
            accepted.set_result(None)
        return record

    async def aclose(self) -> None:
        self._finalizer()
        while not self._sink.queue.empty():
            item = self._sink.queue.get_nowait()
            if item is not _END and not item[1].done():
                item[1].set_exception(DeliveryError("Stream closed"))

    async def __aenter__(self) -> "LineStream":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


def run_stream(
    chaser: "Chaser", loop: asyncio.AbstractEventLoop | None = None
) -> tuple[LineStream, WorkerHandle]:
    """
    Chase ``chaser`` on a dedicated thread, exposing lines as an async iterator.

    Args:
        chaser: What to chase
        loop: Event loop the stream is consumed on (defaults to the running loop)

    Returns:
        The stream and the worker's completion handle (``await handle.wait()``).
    """
    if loop is None:
        loop = asyncio.get_running_loop()
    sink = _Sink(loop)
    handle = spawn_worker(chaser, sink.push, sink.finish)
    logger.debug(f"Started {handle.name}")
    return LineStream(sink), handle
