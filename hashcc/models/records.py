"""Data models for hashing and verification runs."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class Algorithm(str, Enum):
    """Supported digest algorithms."""

    MD5 = "md5"
    SHA1 = "sha1"
    SHA256 = "sha256"
    SHA512 = "sha512"
    BLAKE3 = "blake3"

    @property
    def digest_size(self) -> int:
        """Digest length in bytes."""
        return _DIGEST_SIZES[self]

    @property
    def hex_length(self) -> int:
        """Digest length in hex characters."""
        return 2 * _DIGEST_SIZES[self]

    @property
    def is_weak(self) -> bool:
        """True for algorithms with practical collision attacks."""
        return self in _WEAK_ALGORITHMS


_DIGEST_SIZES = {
    Algorithm.MD5: 16,
    Algorithm.SHA1: 20,
    Algorithm.SHA256: 32,
    Algorithm.SHA512: 64,
    Algorithm.BLAKE3: 32,
}

_WEAK_ALGORITHMS = frozenset({Algorithm.MD5, Algorithm.SHA1})


@dataclass(frozen=True)
class HashConfig:
    """Options passed explicitly into every core entry point."""

    algorithm: Algorithm = Algorithm.SHA256
    exclusions: tuple[str, ...] = ()
    base_dir: Path | None = None
    allow_absolute_paths: bool = False
    allow_weak_algorithm: bool = False
    follow_symlinks: bool = False
    workers: int | None = None  # None lets the executor pick from CPU count
    archives: bool = False
    chunk_size: int = 64 * 1024


@dataclass(frozen=True)
class DigestRecord:
    """A single path -> digest mapping."""

    path: str
    hash: str

    def is_well_formed(self, algorithm: Algorithm) -> bool:
        """Check the digest is lowercase hex of the algorithm's width."""
        if len(self.hash) != algorithm.hex_length:
            return False
        return all(c in "0123456789abcdef" for c in self.hash)

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for serialization."""
        return {"path": self.path, "hash": self.hash}


@dataclass(frozen=True)
class HashFailure:
    """A work item that could not be hashed."""

    path: str
    error: str
    error_type: str = "OSError"

    @classmethod
    def from_exception(cls, path: str, exc: BaseException) -> "HashFailure":
        """Build a failure record from a caught exception."""
        return cls(path=path, error=str(exc), error_type=type(exc).__name__)


@dataclass
class HashRunResult:
    """Result of hashing a file or directory tree."""

    records: list[DigestRecord] = field(default_factory=list)
    failures: list[HashFailure] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def clean(self) -> bool:
        """True when every selected file was hashed."""
        return not self.failures

    @property
    def total(self) -> int:
        """Number of work items attempted."""
        return len(self.records) + len(self.failures)


class Outcome(str, Enum):
    """Per-line outcome of manifest verification."""

    MATCHED = "ok"
    MISMATCHED = "failed"
    MISSING = "missing"
    INVALID_PATH = "invalid_path"
    ERROR = "error"


@dataclass(frozen=True)
class VerificationDiagnostic:
    """Outcome of one manifest line with a human-readable detail."""

    line: int
    path: str
    outcome: Outcome
    detail: str = ""


@dataclass
class VerificationSummary:
    """Aggregate counts of a manifest verification run."""

    ok: int = 0
    failed: int = 0
    missing: int = 0
    invalid_path: int = 0
    errors: int = 0
    diagnostics: list[VerificationDiagnostic] = field(default_factory=list)

    def add(self, diagnostic: VerificationDiagnostic) -> None:
        """Record a diagnostic and bump the matching counter."""
        self.diagnostics.append(diagnostic)
        if diagnostic.outcome is Outcome.MATCHED:
            self.ok += 1
        elif diagnostic.outcome is Outcome.MISMATCHED:
            self.failed += 1
        elif diagnostic.outcome is Outcome.MISSING:
            self.missing += 1
        elif diagnostic.outcome is Outcome.INVALID_PATH:
            self.invalid_path += 1
        else:
            self.errors += 1

    @property
    def total(self) -> int:
        """Number of manifest lines that produced an outcome."""
        return self.ok + self.failed + self.missing + self.invalid_path + self.errors

    @property
    def clean(self) -> bool:
        """True only if every line matched."""
        return (
            self.failed == 0
            and self.missing == 0
            and self.invalid_path == 0
            and self.errors == 0
        )

    @property
    def exit_code(self) -> int:
        """Process exit status for this run."""
        return 0 if self.clean else 1

    def counts(self) -> dict[str, int]:
        """Counts keyed by outcome name."""
        return {
            "ok": self.ok,
            "failed": self.failed,
            "missing": self.missing,
            "invalid_path": self.invalid_path,
            "errors": self.errors,
        }


@dataclass(frozen=True)
class CompareResult:
    """Result of comparing one file against an expected digest."""

    path: str
    expected: str
    actual: str
    matched: bool
