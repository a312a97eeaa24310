"""Tests for digest computation."""

import hashlib
import io

import blake3
import pytest

from hashcc.core.digest import (
    constant_time_eq,
    digest,
    digest_bytes,
    digest_stream,
    ensure_algorithm_allowed,
    expected_hex_len,
    is_valid_digest,
    is_valid_hex,
)
from hashcc.errors import WeakAlgorithmRejected
from hashcc.models.records import Algorithm, HashConfig

PAYLOAD = b"The quick brown fox jumps over the lazy dog\n" * 1000


def reference_digest(data: bytes, algorithm: Algorithm) -> str:
    if algorithm is Algorithm.BLAKE3:
        return blake3.blake3(data).hexdigest()
    return hashlib.new(algorithm.value, data).hexdigest()


class TestDigest:
    """Tests for buffered and streamed hashing."""

    @pytest.mark.parametrize("algorithm", list(Algorithm))
    def test_matches_reference_implementation(self, algorithm: Algorithm):
        """Test digests agree with hashlib and blake3."""
        assert digest_bytes(PAYLOAD, algorithm) == reference_digest(PAYLOAD, algorithm)

    @pytest.mark.parametrize("algorithm", list(Algorithm))
    def test_stream_equals_buffer(self, algorithm: Algorithm):
        """Test chunked streaming gives the same digest as one update."""
        streamed = digest_stream(io.BytesIO(PAYLOAD), algorithm, chunk_size=7)
        assert streamed == digest_bytes(PAYLOAD, algorithm)

    def test_dispatch_on_source_type(self):
        """Test digest accepts buffers and readable streams."""
        expected = digest_bytes(PAYLOAD, Algorithm.SHA256)

        assert digest(PAYLOAD, Algorithm.SHA256) == expected
        assert digest(memoryview(PAYLOAD), Algorithm.SHA256) == expected
        assert digest(io.BytesIO(PAYLOAD), Algorithm.SHA256, chunk_size=100) == expected

    def test_deterministic(self):
        """Test the same input always hashes the same."""
        first = digest_bytes(b"hello", Algorithm.BLAKE3)
        second = digest_bytes(b"hello", Algorithm.BLAKE3)
        assert first == second

    def test_known_value(self, hello_sha256: str):
        """Test a well-known SHA-256 value."""
        assert digest_bytes(b"hello", Algorithm.SHA256) == hello_sha256

    def test_empty_input(self):
        """Test empty input hashes to the algorithm's empty digest."""
        assert digest_stream(io.BytesIO(b""), Algorithm.SHA256) == hashlib.sha256().hexdigest()

    @pytest.mark.parametrize(
        "algorithm,length",
        [
            (Algorithm.MD5, 32),
            (Algorithm.SHA1, 40),
            (Algorithm.SHA256, 64),
            (Algorithm.SHA512, 128),
            (Algorithm.BLAKE3, 64),
        ],
    )
    def test_hex_lengths(self, algorithm: Algorithm, length: int):
        """Test output width and lowercase hex for every algorithm."""
        result = digest_bytes(b"abc", algorithm)
        assert len(result) == length
        assert expected_hex_len(algorithm) == length
        assert result == result.lower()


class TestValidation:
    """Tests for digest string validation."""

    def test_is_valid_hex(self):
        """Test hex detection."""
        assert is_valid_hex("00ffAA")
        assert not is_valid_hex("")
        assert not is_valid_hex("xyz")

    def test_is_valid_digest(self, hello_sha256: str):
        """Test width is enforced."""
        assert is_valid_digest(hello_sha256, Algorithm.SHA256)
        assert not is_valid_digest(hello_sha256[:-1], Algorithm.SHA256)
        assert not is_valid_digest(hello_sha256, Algorithm.SHA512)
        assert not is_valid_digest("g" * 64, Algorithm.SHA256)


class TestConstantTimeEq:
    """Tests for digest comparison."""

    def test_equal(self):
        """Test equal values compare equal."""
        assert constant_time_eq("abcdef", "abcdef")
        assert constant_time_eq(b"abcdef", b"abcdef")

    def test_different(self):
        """Test values differing anywhere compare unequal."""
        assert not constant_time_eq("abcdef", "abcdee")
        assert not constant_time_eq("abcdef", "bbcdef")

    def test_length_mismatch(self):
        """Test values of different length compare unequal."""
        assert not constant_time_eq("abc", "abcd")
        assert not constant_time_eq("", "a")

    def test_non_ascii(self):
        """Test non-ASCII text never matches."""
        assert not constant_time_eq("café", "café")


class TestWeakAlgorithmGate:
    """Tests for the weak algorithm policy."""

    @pytest.mark.parametrize("algorithm", [Algorithm.MD5, Algorithm.SHA1])
    def test_weak_rejected_by_default(self, algorithm: Algorithm):
        """Test MD5 and SHA-1 need an explicit opt-in."""
        with pytest.raises(WeakAlgorithmRejected) as exc_info:
            ensure_algorithm_allowed(HashConfig(algorithm=algorithm))
        assert "--allow-weak" in str(exc_info.value)

    @pytest.mark.parametrize("algorithm", [Algorithm.MD5, Algorithm.SHA1])
    def test_weak_allowed_with_opt_in(self, algorithm: Algorithm):
        """Test opting in lifts the gate."""
        ensure_algorithm_allowed(HashConfig(algorithm=algorithm, allow_weak_algorithm=True))

    @pytest.mark.parametrize(
        "algorithm", [Algorithm.SHA256, Algorithm.SHA512, Algorithm.BLAKE3]
    )
    def test_strong_always_allowed(self, algorithm: Algorithm):
        """Test strong algorithms pass without opt-in."""
        ensure_algorithm_allowed(HashConfig(algorithm=algorithm))
