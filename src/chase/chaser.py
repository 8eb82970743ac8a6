"""The Chaser: configuration for following one file."""

import asyncio
import codecs
import copy
import json
import logging
from collections.abc import Callable
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

from .data import (
    DEFAULT_INITIAL_NO_FILE_WAIT,
    DEFAULT_NOT_ROTATED_WAIT,
    DEFAULT_ROTATION_CHECK_WAIT,
    Control,
    Line,
    Pos,
)
from .delivery import LineStream, Receiver, WorkerHandle, run_channel, run_stream
from .engine import chase

logger = logging.getLogger(__name__)


@dataclass
class Chaser:
    """
    Everything needed to follow a file.

    A Chaser is plain configuration: it can be changed between runs, but a
    run only ever reads it. All waits are in seconds; an attempt cap of None
    means "keep trying".

    Attributes:
        path: File to follow
        line: Line index to start delivering from
        initial_no_file_wait: Wait between attempts to open the file at startup
        initial_no_file_attempts: Cap on those attempts
        rotation_check_wait: Wait between attempts to re-open the path when
            checking for rotation
        rotation_check_attempts: Cap on those attempts
        not_rotated_wait: Wait before polling again when the file is at EOF
            and has not been rotated
        encoding: Text encoding of the file
        errors: Codec error handler; with "strict", lines that do not decode
            are skipped
    """

    path: Path
    line: Line = Line(0)
    initial_no_file_wait: float = DEFAULT_INITIAL_NO_FILE_WAIT
    initial_no_file_attempts: int | None = None
    rotation_check_wait: float = DEFAULT_ROTATION_CHECK_WAIT
    rotation_check_attempts: int | None = None
    not_rotated_wait: float = DEFAULT_NOT_ROTATED_WAIT
    encoding: str = "utf-8"
    errors: str = "strict"

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        if self.line < 0:
            raise ValueError(f"line must be >= 0, got {self.line}")
        for name in ("initial_no_file_attempts", "rotation_check_attempts"):
            attempts = getattr(self, name)
            if attempts is not None and attempts < 1:
                raise ValueError(f"{name} must be None or >= 1, got {attempts}")
        for name in ("initial_no_file_wait", "rotation_check_wait", "not_rotated_wait"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")
        try:
            codecs.lookup(self.encoding)
            codecs.lookup_error(self.errors)
        except LookupError as e:
            raise ValueError(str(e)) from e

    def copy(self) -> "Chaser":
        return copy.copy(self)

    def run(self, callback: Callable[[str, Line, Pos], Control | None]) -> None:
        """
        Chase the file on the current thread.

        ``callback`` receives each line (without its newline), its line index
        and its byte position. Return ``Control.STOP`` to end the run; any
        other return value keeps going. Returns only once stopped, or raises
        the error that ended the run.
        """
        chase(self, callback)

    def run_channel(self) -> tuple[Receiver, WorkerHandle]:
        """Chase the file on a worker thread, handing lines over a rendezvous channel."""
        return run_channel(self.copy())

    def run_stream(
        self, loop: asyncio.AbstractEventLoop | None = None
    ) -> tuple[LineStream, WorkerHandle]:
        """Chase the file on a worker thread, exposing lines as an async iterator."""
        return run_stream(self.copy(), loop=loop)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly snapshot of this configuration."""
        data = asdict(self)
        data["path"] = str(self.path)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Chaser":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown Chaser fields: {', '.join(sorted(unknown))}")
        if "path" not in data:
            raise ValueError("Chaser data is missing 'path'")
        return cls(**data)

    def save(self, state_file: str | Path) -> None:
        """
        Persist this configuration as JSON.

        Writes to a temporary file first and renames it into place, so an
        interrupted save never leaves a half-written state file.
        """
        state_file = Path(state_file)
        temp_file = state_file.with_suffix(state_file.suffix + ".tmp")
        with temp_file.open("w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
            f.flush()
        temp_file.replace(state_file)
        logger.debug(f"Saved chaser state to {state_file}")

    @classmethod
    def load(cls, state_file: str | Path) -> "Chaser":
        with Path(state_file).open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Invalid chaser state in {state_file}")
        return cls.from_dict(data)
