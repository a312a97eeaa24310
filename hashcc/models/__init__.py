"""Data models for hashing and verification."""

from hashcc.models.records import (
    Algorithm,
    CompareResult,
    DigestRecord,
    HashConfig,
    HashFailure,
    HashRunResult,
    Outcome,
    VerificationDiagnostic,
    VerificationSummary,
)

__all__ = [
    "Algorithm",
    "HashConfig",
    "DigestRecord",
    "HashFailure",
    "HashRunResult",
    "Outcome",
    "VerificationDiagnostic",
    "VerificationSummary",
    "CompareResult",
]
