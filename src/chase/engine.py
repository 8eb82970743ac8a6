"""Synchronous file chasing: read, deliver, detect rotation, drain, switch."""

import logging
import time
from collections.abc import Callable
from io import BufferedReader
from typing import TYPE_CHECKING

from .data import Control, FileId, Line, Pos
from .retry import try_until

if TYPE_CHECKING:
    from .chaser import Chaser

logger = logging.getLogger(__name__)

Callback = Callable[[str, Line, Pos], Control | None]


def open_with_id(chaser: "Chaser") -> tuple[BufferedReader, FileId]:
    """Open the chased path for binary reading and capture its identity."""
    reader = open(chaser.path, "rb")
    try:
        return reader, FileId.of(reader.fileno())
    except OSError:
        reader.close()
        raise


class _Chasing:
    """State of a single run: the open file, its identity and the cursor."""

    def __init__(self, chaser: "Chaser", reader: BufferedReader, file_id: FileId):
        self.chaser = chaser
        self.reader = reader
        self.file_id = file_id
        self.line = Line(0)
        self.pos = Pos(0)

    def _advance(self, nbytes: int) -> None:
        self.line = Line(self.line + 1)
        self.pos = Pos(self.pos + nbytes)
        # The buffered reader reads ahead; pin it back to the exact boundary
        self.reader.seek(self.pos)

    def skip_to(self, target: Line) -> None:
        """Discard complete lines until ``target`` is the next line to read."""
        while self.line < target:
            raw = self.reader.readline()
            if not raw.endswith(b"\n"):
                self.reader.seek(self.pos)
                break
            self._advance(len(raw))
        if self.line < target:
            logger.info(
                f"{self.chaser.path} has only {self.line} complete lines, "
                f"starting there instead of line {target}"
            )

    def read_to_eof(self, callback: Callback, draining: bool = False) -> bool:
        """
        Deliver every available line to ``callback``.

        While following, an unterminated last line is left in place until
        its writer finishes it. While draining a rotated-away file there is
        nothing more to wait for, so it is delivered as is.

        Returns:
            True if the callback asked to stop, False once EOF is reached.
        """
        while True:
            raw = self.reader.readline()
            if not raw:
                return False
            if not raw.endswith(b"\n") and not draining:
                self.reader.seek(self.pos)
                return False

            try:
                text = raw.decode(self.chaser.encoding, self.chaser.errors)
            except UnicodeDecodeError as e:
                logger.warning(
                    f"Skipping line {self.line} of {self.chaser.path} "
                    f"at byte {self.pos}: {e}"
                )
                self._advance(len(raw))
                continue

            if text.endswith("\n"):
                text = text[:-1]
            if callback(text, self.line, self.pos) is Control.STOP:
                return True
            self._advance(len(raw))

    def switch_to(self, reader: BufferedReader, file_id: FileId) -> None:
        self.reader.close()
        self.reader = reader
        self.file_id = file_id
        self.line = Line(0)
        self.pos = Pos(0)

    def close(self) -> None:
        self.reader.close()


def check_rotation(running: _Chasing) -> tuple[BufferedReader, FileId] | None:
    """
    Re-open the chased path and compare its identity with the open file.

    Returns:
        The newly opened file and its identity if the path now points at a
        different file, None if it is still the file being read.
    """
    reader, file_id = open_with_id(running.chaser)
    if file_id != running.file_id:
        return reader, file_id
    reader.close()
    return None


def chase(chaser: "Chaser", callback: Callback) -> None:
    """
    Follow ``chaser.path`` on the calling thread until told to stop.

    Lines are handed to ``callback(text, line, pos)`` in file order. When the
    path is replaced by a different file, whatever was still appended to the
    old file is delivered first, then reading restarts at the top of the new
    file with line and position reset to 0.

    Raises:
        OSError: The file could not be opened within the startup attempts,
            the rotation check ran out of attempts, or a read/seek failed.
        Exception: Anything raised by ``callback`` ends the run unchanged.
    """
    reader, file_id = try_until(
        lambda: open_with_id(chaser),
        max_attempts=chaser.initial_no_file_attempts,
        delay=chaser.initial_no_file_wait,
    )
    running = _Chasing(chaser, reader, file_id)
    logger.info(f"Chasing {chaser.path} from line {chaser.line}")

    try:
        running.skip_to(chaser.line)
        while True:
            if running.read_to_eof(callback):
                break

            rotated = try_until(
                lambda: check_rotation(running),
                max_attempts=chaser.rotation_check_attempts,
                delay=chaser.rotation_check_wait,
            )
            if rotated is None:
                logger.debug(f"{chaser.path} at EOF (line {running.line}), polling")
                time.sleep(chaser.not_rotated_wait)
                continue

            new_reader, new_file_id = rotated
            logger.info(
                f"{chaser.path} rotated, draining old file from line {running.line}"
            )
            try:
                stopped = running.read_to_eof(callback, draining=True)
            except BaseException:
                new_reader.close()
                raise
            running.switch_to(new_reader, new_file_id)
            if stopped:
                break
    finally:
        running.close()
    logger.info(f"Stopped chasing {chaser.path}")
