"""Exceptions raised by the hashing and verification engine."""

from hashcc.models.records import Algorithm


class HashccError(Exception):
    """Base class for hashcc errors."""

    pass


class WeakAlgorithmRejected(HashccError):
    """Raised when MD5 or SHA-1 is selected without opting in."""

    def __init__(self, algorithm: Algorithm) -> None:
        self.algorithm = algorithm
        super().__init__(
            f"Refusing to use weak algorithm {algorithm.value}. "
            "Pass --allow-weak to proceed."
        )


class InvalidGlobPattern(HashccError):
    """Raised when an exclusion pattern cannot be compiled."""

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"invalid glob pattern '{pattern}': {reason}")


class InvalidManifestRecord(HashccError):
    """Raised for a malformed manifest line or row."""

    def __init__(self, line: int, reason: str) -> None:
        self.line = line
        self.reason = reason
        super().__init__(f"line {line}: {reason}")


class InvalidPath(HashccError):
    """Raised when a manifest path violates the path-safety policy."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{reason}: {path}")


class ManifestReadError(HashccError):
    """Raised when the manifest file itself cannot be opened."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"cannot read manifest {path}: {reason}")


class InvalidDigestString(HashccError):
    """Raised when an expected digest is not hex of the algorithm's width."""

    def __init__(self, value: str, algorithm: Algorithm) -> None:
        self.value = value
        self.algorithm = algorithm
        super().__init__(
            f"Invalid {algorithm.digest_size * 8}-bit hash: "
            f"expected {algorithm.hex_length} hex chars"
        )
