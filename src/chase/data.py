"""Position, identity and record types used while chasing a file."""

import os
from dataclasses import dataclass
from enum import Enum
from typing import NewType

DEFAULT_INITIAL_NO_FILE_WAIT = 0.1
DEFAULT_ROTATION_CHECK_WAIT = 0.1
DEFAULT_NOT_ROTATED_WAIT = 0.1

# Zero-based index of a line in the file being chased
Line = NewType("Line", int)

# Byte offset, from the start of the file, of the next line to read
Pos = NewType("Pos", int)


@dataclass(frozen=True)
class FileId:
    """Identity of the storage object behind an open file."""

    device: int
    inode: int

    @classmethod
    def of(cls, fileno: int) -> "FileId":
        stat = os.fstat(fileno)
        return cls(device=stat.st_dev, inode=stat.st_ino)


@dataclass(frozen=True)
class LineRecord:
    """A single line handed to a consumer."""

    text: str
    line: Line
    pos: Pos

    def __str__(self) -> str:
        return self.text


class Control(Enum):
    """Returned by synchronous callbacks to keep going or leave the loop."""

    CONTINUE = "continue"
    STOP = "stop"
