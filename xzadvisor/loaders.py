"""File helpers used by the file-based entry points."""

import os
from pathlib import Path
from typing import Iterator, Union

PathLike = Union[str, os.PathLike]


def file_size(path: PathLike) -> int:
    """Size of a file in bytes. Raises OSError if it cannot be stat'ed."""
    return Path(path).stat().st_size


def read_sample(path: PathLike, size: int) -> bytes:
    """Read at most ``size`` leading bytes of a file."""
    with open(path, "rb") as f:
        return f.read(size)


def iter_chunks(path: PathLike, chunk_size: int) -> Iterator[bytes]:
    """Yield a file in fixed-size chunks (the last one may be shorter)."""
    with open(path, "rb") as f:
        while True:
            chunk = f.read(chunk_size)
            if not chunk:
                break
            yield chunk
