"""Exceptions raised while chasing a file.

I/O failures are not wrapped: they surface as the built-in ``OSError``
subclasses (``FileNotFoundError``, ``PermissionError``, ...).
"""


class ChaseError(Exception):
    """Base class for errors raised by chase itself."""


class DeliveryError(ChaseError):
    """The consumer side of a channel or stream has gone away."""


class ChannelClosed(ChaseError):
    """Nothing more will arrive: the worker feeding the channel has ended."""
