"""Chase: follow a file through appends and rotations."""

__version__ = "0.1.0"

from .chaser import Chaser
from .data import (
    DEFAULT_INITIAL_NO_FILE_WAIT,
    DEFAULT_NOT_ROTATED_WAIT,
    DEFAULT_ROTATION_CHECK_WAIT,
    Control,
    Line,
    LineRecord,
    Pos,
)
from .delivery import LineStream, Receiver, WorkerHandle
from .errors import ChannelClosed, ChaseError, DeliveryError
from .retry import try_until

__all__ = [
    "__version__",
    "Chaser",
    "Control",
    "Line",
    "Pos",
    "LineRecord",
    "DEFAULT_INITIAL_NO_FILE_WAIT",
    "DEFAULT_NOT_ROTATED_WAIT",
    "DEFAULT_ROTATION_CHECK_WAIT",
    "Receiver",
    "LineStream",
    "WorkerHandle",
    "ChaseError",
    "DeliveryError",
    "ChannelClosed",
    "try_until",
]
