"""Shared fixtures for chase tests."""

from pathlib import Path

import pytest

from chase import Chaser

# Short waits keep polling tests fast
FAST = 0.01


@pytest.fixture
def log_file(tmp_path: Path) -> Path:
    """Create an empty log file."""
    path = tmp_path / "test.log"
    path.write_bytes(b"")
    return path


@pytest.fixture
def abc_file(tmp_path: Path) -> Path:
    """Create a log file with three short lines."""
    path = tmp_path / "abc.log"
    path.write_bytes(b"a\nb\nc\n")
    return path


@pytest.fixture
def make_chaser():
    """Build a Chaser with fast poll and retry waits."""

    def factory(path: Path, **kwargs) -> Chaser:
        options = {
            "initial_no_file_wait": FAST,
            "rotation_check_wait": FAST,
            "not_rotated_wait": FAST,
        }
        options.update(kwargs)
        return Chaser(path=path, **options)

    return factory


def append(path: Path, data: bytes) -> None:
    with path.open("ab") as f:
        f.write(data)
        f.flush()
