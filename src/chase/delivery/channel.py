"""Blocking delivery over a zero-capacity (rendezvous) channel."""

import logging
import weakref
from collections.abc import Iterator
from threading import Condition
from typing import TYPE_CHECKING

from ..data import LineRecord
from ..errors import ChannelClosed, DeliveryError
from .base import WorkerHandle, spawn_worker

if TYPE_CHECKING:
    from ..chaser import Chaser

logger = logging.getLogger(__name__)


class Rendezvous:
    """
    Hand-off point between one sending and one receiving thread.

    There is no buffer: ``send`` returns only once ``recv`` has taken the
    record, so the sender can never get ahead of the receiver.
    """

    def __init__(self):
        self._cond = Condition()
        self._slot: LineRecord | None = None
        self._receiver_gone = False
        self._sender_gone = False

    def send(self, record: LineRecord) -> None:
        with self._cond:
            if self._receiver_gone:
                raise DeliveryError("Receiving side of the channel is closed")
            self._slot = record
            self._cond.notify_all()
            while self._slot is not None and not self._receiver_gone:
                self._cond.wait()
            if self._slot is not None:
                self._slot = None
                raise DeliveryError("Receiving side closed before taking the line")

    def recv(self, timeout: float | None = None) -> LineRecord:
        with self._cond:
            if not self._cond.wait_for(
                lambda: self._slot is not None or self._sender_gone or self._receiver_gone,
                timeout=timeout,
            ):
                raise TimeoutError(f"No line received within {timeout}s")
            if self._receiver_gone or self._slot is None:
                raise ChannelClosed("Channel is closed")
            record, self._slot = self._slot, None
            self._cond.notify_all()
            return record

    def close_receiver(self) -> None:
        with self._cond:
            self._receiver_gone = True
            self._cond.notify_all()

    def close_sender(self) -> None:
        with self._cond:
            self._sender_gone = True
            self._cond.notify_all()


class Receiver:
    """
    Receiving end of a chase channel.

    Iterating yields records until the worker ends. Closing the receiver, or
    simply dropping every reference to it, tells the worker to stop: its next
    delivery fails with ``DeliveryError``.
    """

    def __init__(self, rendezvous: Rendezvous):
        self._rendezvous = rendezvous
        self._finalizer = weakref.finalize(self, rendezvous.close_receiver)

    def recv(self, timeout: float | None = None) -> LineRecord:
        """
        Block until the next line arrives.

        Raises:
            ChannelClosed: The worker has ended (or this receiver was closed).
            TimeoutError: Nothing arrived within ``timeout`` seconds.
        """
        return self._rendezvous.recv(timeout=timeout)

    def close(self) -> None:
        self._finalizer()

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    def __iter__(self) -> Iterator[LineRecord]:
        while True:
            try:
                yield self.recv()
            except ChannelClosed:
                return

    def __enter__(self) -> "Receiver":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def run_channel(chaser: "Chaser") -> tuple[Receiver, WorkerHandle]:
    """
    Chase ``chaser`` on a dedicated thread, delivering lines over a channel.

    Returns:
        The receiving end and the worker's completion handle. Joining the
        handle after closing the receiver raises ``DeliveryError``.
    """
    rendezvous = Rendezvous()
    handle = spawn_worker(chaser, rendezvous.send, rendezvous.close_sender)
    logger.debug(f"Started {handle.name}")
    return Receiver(rendezvous), handle
