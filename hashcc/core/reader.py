"""File access for hashing: memory-mapped when possible, streamed otherwise."""

import mmap
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from hashcc.core.digest import DEFAULT_CHUNK_SIZE, ByteSource, digest
from hashcc.models.records import Algorithm
from hashcc.utils.logging import logger


@contextmanager
def read_for_hash(path: Path | str) -> Iterator[ByteSource]:
    """Open a file and yield its bytes for hashing.

    A read-only memory map of the whole file is preferred. Zero-length files,
    pipes, character devices and platforms that refuse the mapping fall back
    to the buffered file object. The handle is closed on every exit path.

    Args:
        path: File to open.

    Yields:
        An mmap or an open binary file positioned at offset 0.

    Raises:
        OSError: If the file can't be opened.
    """
    with open(path, "rb") as f:
        try:
            mapped = mmap.mmap(f.fileno(), 0, access=mmap.ACCESS_READ)
        except (ValueError, OSError) as e:
            logger.debug(f"mmap unavailable for {path} ({e}), streaming instead")
            mapped = None

        if mapped is None:
            yield f
        else:
            with mapped:
                yield mapped


def hash_file(
    path: Path | str,
    algorithm: Algorithm,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> str:
    """Compute the digest of a file.

    Args:
        path: Path to file.
        algorithm: Digest algorithm.
        chunk_size: Read size when the file is streamed.

    Returns:
        Lowercase hex digest.

    Raises:
        FileNotFoundError: If file doesn't exist.
        OSError: If file can't be read.
    """
    with read_for_hash(path) as source:
        return digest(source, algorithm, chunk_size)
