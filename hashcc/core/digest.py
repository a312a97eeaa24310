"""Digest computation for in-memory buffers and byte streams."""

import hashlib
import hmac
import mmap
import string
from typing import Any, BinaryIO, Union

import blake3

from hashcc.errors import WeakAlgorithmRejected
from hashcc.models.records import Algorithm, HashConfig

DEFAULT_CHUNK_SIZE = 64 * 1024

ByteBuffer = Union[bytes, bytearray, memoryview, mmap.mmap]
ByteSource = Union[ByteBuffer, BinaryIO]

_HEX_DIGITS = frozenset(string.hexdigits)


def _new_hasher(algorithm: Algorithm) -> Any:
    """Create a fresh hash object for the algorithm.

    Every member of Algorithm has an explicit branch here; adding a member
    without a branch fails loudly rather than falling back.
    """
    if algorithm is Algorithm.MD5:
        return hashlib.md5()
    if algorithm is Algorithm.SHA1:
        return hashlib.sha1()
    if algorithm is Algorithm.SHA256:
        return hashlib.sha256()
    if algorithm is Algorithm.SHA512:
        return hashlib.sha512()
    if algorithm is Algorithm.BLAKE3:
        return blake3.blake3()
    raise ValueError(f"Unsupported algorithm: {algorithm!r}")


def digest_bytes(data: ByteBuffer, algorithm: Algorithm) -> str:
    """Compute the digest of an in-memory buffer.

    Args:
        data: Bytes-like object (bytes, memoryview, mmap, ...).
        algorithm: Digest algorithm.

    Returns:
        Lowercase hex digest.
    """
    hasher = _new_hasher(algorithm)
    hasher.update(data)
    return hasher.hexdigest()


def digest_stream(
    stream: BinaryIO,
    algorithm: Algorithm,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> str:
    """Compute the digest of a binary stream in bounded chunks.

    Args:
        stream: Readable binary stream of unknown length.
        algorithm: Digest algorithm.
        chunk_size: Maximum bytes per read.

    Returns:
        Lowercase hex digest, identical to digest_bytes over the same bytes.

    Raises:
        OSError: If the stream can't be read.
    """
    hasher = _new_hasher(algorithm)

    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            break
        hasher.update(chunk)

    return hasher.hexdigest()


def digest(
    source: ByteSource,
    algorithm: Algorithm,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> str:
    """Compute the digest of a buffer or a stream.

    Buffers (including memory maps) are hashed in one update, anything else
    with a ``read`` method is consumed in chunks.
    """
    if isinstance(source, (bytes, bytearray, memoryview, mmap.mmap)):
        return digest_bytes(source, algorithm)
    return digest_stream(source, algorithm, chunk_size)


def expected_hex_len(algorithm: Algorithm) -> int:
    """Number of hex characters the algorithm emits."""
    return algorithm.hex_length


def is_valid_hex(text: str) -> bool:
    """Check text is a non-empty string of hex digits."""
    return bool(text) and all(c in _HEX_DIGITS for c in text)


def is_valid_digest(text: str, algorithm: Algorithm) -> bool:
    """Check text is hex of exactly the algorithm's width."""
    return len(text) == algorithm.hex_length and is_valid_hex(text)


def constant_time_eq(a: str | bytes, b: str | bytes) -> bool:
    """Compare two digests without short-circuiting on the first difference.

    Args:
        a: First value.
        b: Second value.

    Returns:
        True if both values are exactly equal.
    """
    if isinstance(a, str):
        try:
            a = a.encode("ascii")
        except UnicodeEncodeError:
            return False
    if isinstance(b, str):
        try:
            b = b.encode("ascii")
        except UnicodeEncodeError:
            return False
    return hmac.compare_digest(a, b)


def ensure_algorithm_allowed(config: HashConfig) -> None:
    """Apply the weak-algorithm gate.

    Raises:
        WeakAlgorithmRejected: If a weak algorithm is selected without opt-in.
    """
    if config.algorithm.is_weak and not config.allow_weak_algorithm:
        raise WeakAlgorithmRejected(config.algorithm)
