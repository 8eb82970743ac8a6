"""Worker thread plumbing shared by the channel and stream delivery modes."""

import asyncio
import logging
from collections.abc import Callable
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path
from threading import Thread
from typing import TYPE_CHECKING

from ..data import Line, LineRecord, Pos
from ..engine import chase

if TYPE_CHECKING:
    from ..chaser import Chaser

logger = logging.getLogger(__name__)


def thread_name(path: Path) -> str:
    """Name worker threads after the file they chase."""
    return f"chase-thread-{path}"


class WorkerHandle:
    """Completion handle for a chase running on a worker thread."""

    def __init__(self, thread: Thread, future: Future):
        self._thread = thread
        self._future = future

    @property
    def name(self) -> str:
        return self._thread.name

    def is_alive(self) -> bool:
        return not self._future.done()

    def join(self, timeout: float | None = None) -> None:
        """
        Wait for the worker to finish.

        Returns None if the run ended normally and re-raises the exception
        that ended it otherwise (for example ``DeliveryError`` once the
        consumer has gone away).

        Raises:
            TimeoutError: The worker was still running after ``timeout`` seconds.
        """
        try:
            self._future.result(timeout=timeout)
        except FutureTimeoutError:
            raise TimeoutError(f"{self.name} still running after {timeout}s") from None

    def exception(self, timeout: float | None = None) -> BaseException | None:
        """Like ``join``, but return the terminating exception instead of raising it."""
        try:
            return self._future.exception(timeout=timeout)
        except FutureTimeoutError:
            raise TimeoutError(f"{self.name} still running after {timeout}s") from None

    async def wait(self) -> None:
        """Await the worker's outcome from asyncio code."""
        await asyncio.wrap_future(self._future)


def spawn_worker(
    chaser: "Chaser",
    deliver: Callable[[LineRecord], None],
    on_exit: Callable[[], None],
) -> WorkerHandle:
    """
    Start a daemon thread chasing ``chaser`` and passing each line to ``deliver``.

    ``deliver`` is where backpressure happens: it should block until the
    consumer has taken the record, and raise once the consumer is gone.
    ``on_exit`` runs on the worker thread once the run ends, however it ends,
    and before the handle reports the outcome.
    """
    future: Future = Future()
    future.set_running_or_notify_cancel()

    def forward(text: str, line: Line, pos: Pos) -> None:
        deliver(LineRecord(text=text, line=line, pos=pos))

    def work() -> None:
        error: BaseException | None = None
        try:
            chase(chaser, forward)
        except BaseException as e:
            logger.debug(f"Worker for {chaser.path} ended: {e!r}")
            error = e
        on_exit()
        if error is None:
            future.set_result(None)
        else:
            future.set_exception(error)

    thread = Thread(target=work, name=thread_name(chaser.path), daemon=True)
    thread.start()
    return WorkerHandle(thread, future)
