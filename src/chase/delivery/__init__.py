"""Run a chase on a worker thread and hand its lines to a consumer."""

from .base import WorkerHandle, thread_name
from .channel import Receiver, run_channel
from .stream import LineStream, run_stream

__all__ = [
    "WorkerHandle",
    "thread_name",
    "Receiver",
    "run_channel",
    "LineStream",
    "run_stream",
]
