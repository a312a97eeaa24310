"""Manifest verification and single-file comparison."""

import time
from pathlib import Path
from typing import Iterable

from hashcc.core.digest import constant_time_eq, ensure_algorithm_allowed, is_valid_digest
from hashcc.core.reader import hash_file
from hashcc.errors import InvalidDigestString, InvalidPath, ManifestReadError
from hashcc.models.records import (
    CompareResult,
    DigestRecord,
    HashConfig,
    Outcome,
    VerificationDiagnostic,
    VerificationSummary,
)
from hashcc.utils.logging import RunLogger, logger
from hashcc.utils.manifest import ManifestFormat, ManifestRow, read_rows


def resolve_manifest_path(raw_path: Path, config: HashConfig) -> Path:
    """Resolve a manifest path under the path-safety policy.

    Relative paths are joined onto ``config.base_dir`` when one is set. With a
    base directory, the canonical result must stay inside the canonical base;
    the target does not need to exist for this check.

    Args:
        raw_path: Path as written in the manifest.
        config: Run configuration.

    Returns:
        Path to hash.

    Raises:
        InvalidPath: If the path is absolute without opt-in or escapes the base.
        OSError: If the base directory can't be canonicalized.
    """
    if raw_path.is_absolute() and not config.allow_absolute_paths:
        raise InvalidPath(str(raw_path), "absolute path not allowed")

    if config.base_dir is None:
        return raw_path

    base = Path(config.base_dir)
    resolved = raw_path if raw_path.is_absolute() else base / raw_path

    base_canonical = base.resolve(strict=True)
    try:
        resolved_canonical = resolved.resolve()
    except RuntimeError as e:
        # Symlink loops raise RuntimeError before Python 3.13
        raise OSError(f"cannot canonicalize {resolved}: {e}") from e

    if not resolved_canonical.is_relative_to(base_canonical):
        raise InvalidPath(str(resolved), "path escapes base dir")

    return resolved


def verify_record(record: DigestRecord, line: int, config: HashConfig) -> VerificationDiagnostic:
    """Verify one manifest record.

    Args:
        record: Expected path and digest.
        line: Manifest line (or entry) number for diagnostics.
        config: Run configuration.

    Returns:
        Diagnostic carrying the outcome.
    """
    algorithm = config.algorithm
    expected = record.hash.strip().lower()

    if not is_valid_digest(expected, algorithm):
        return VerificationDiagnostic(
            line,
            record.path,
            Outcome.ERROR,
            f"expected {algorithm.hex_length} hex chars for {algorithm.value}, got '{record.hash}'",
        )

    try:
        resolved = resolve_manifest_path(Path(record.path), config)
    except InvalidPath as e:
        return VerificationDiagnostic(line, e.path, Outcome.INVALID_PATH, e.reason)
    except OSError as e:
        return VerificationDiagnostic(
            line,
            record.path,
            Outcome.ERROR,
            f"cannot canonicalize base dir {config.base_dir}: {e}",
        )

    display = str(resolved)

    try:
        exists = resolved.exists()
    except OSError as e:
        return VerificationDiagnostic(line, display, Outcome.ERROR, str(e))
    if not exists:
        return VerificationDiagnostic(line, display, Outcome.MISSING)

    try:
        actual = hash_file(resolved, algorithm, config.chunk_size)
    except OSError as e:
        return VerificationDiagnostic(line, display, Outcome.ERROR, str(e))

    if constant_time_eq(actual, expected):
        return VerificationDiagnostic(line, display, Outcome.MATCHED)
    return VerificationDiagnostic(line, display, Outcome.MISMATCHED, f"actual {actual}")


def verify_rows(
    rows: Iterable[ManifestRow],
    config: HashConfig,
    operation_logger: RunLogger | None = None,
) -> VerificationSummary:
    """Verify parsed manifest rows one by one.

    A malformed row or an unreadable file is counted and processing moves on
    to the next row.

    Args:
        rows: Parsed manifest rows.
        config: Run configuration.
        operation_logger: Optional structured run logger.

    Returns:
        VerificationSummary with counts and per-line diagnostics.
    """
    summary = VerificationSummary()

    for row in rows:
        if row.record is None:
            diagnostic = VerificationDiagnostic(row.line, "", Outcome.ERROR, row.error or "")
        else:
            diagnostic = verify_record(row.record, row.line, config)

        summary.add(diagnostic)

        if diagnostic.outcome is Outcome.MATCHED:
            logger.debug(f"{diagnostic.path} OK")
        else:
            logger.warning(
                f"line {diagnostic.line}: {diagnostic.path} {diagnostic.outcome.name}"
                + (f" ({diagnostic.detail})" if diagnostic.detail else "")
            )

        if operation_logger:
            operation_logger.log_operation(
                "verify",
                diagnostic.path,
                diagnostic.outcome is Outcome.MATCHED,
                {
                    "line": diagnostic.line,
                    "outcome": diagnostic.outcome.value,
                    "detail": diagnostic.detail,
                },
            )

    logger.info(
        f"Summary: OK={summary.ok} FAILED={summary.failed} MISSING={summary.missing} "
        f"INVALID_PATH={summary.invalid_path} ERROR={summary.errors}"
    )
    return summary


def verify_manifest(
    manifest_path: Path | str,
    config: HashConfig,
    format: ManifestFormat = ManifestFormat.CSV,
    operation_logger: RunLogger | None = None,
) -> VerificationSummary:
    """Verify every entry of a manifest file.

    Args:
        manifest_path: Manifest to read.
        config: Run configuration (algorithm, base_dir, path policy).
        format: Manifest format.
        operation_logger: Optional structured run logger.

    Returns:
        VerificationSummary. Check ``clean`` or ``exit_code`` for the verdict.

    Raises:
        WeakAlgorithmRejected: If a weak algorithm is not allowed.
        ManifestReadError: If the manifest can't be opened.
    """
    ensure_algorithm_allowed(config)

    try:
        f = open(manifest_path, "r", encoding="utf-8-sig", errors="surrogateescape", newline="")
    except OSError as e:
        raise ManifestReadError(str(manifest_path), e.strerror or str(e)) from e

    start_time = time.time()
    if operation_logger:
        operation_logger.log_run_start("verify", 0, config.algorithm.value)

    with f:
        summary = verify_rows(read_rows(f, format), config, operation_logger)

    if operation_logger:
        operation_logger.log_run_complete("verify", summary.counts(), time.time() - start_time)

    return summary


def compare_file(expected_hash: str, path: Path | str, config: HashConfig) -> CompareResult:
    """Compare a file against an expected digest.

    The expected digest is case-insensitive and must have the algorithm's
    exact width.

    Raises:
        WeakAlgorithmRejected: If a weak algorithm is not allowed.
        InvalidDigestString: If expected_hash is malformed.
        OSError: If the file can't be read.
    """
    ensure_algorithm_allowed(config)

    expected = expected_hash.strip().lower()
    if not is_valid_digest(expected, config.algorithm):
        raise InvalidDigestString(expected_hash, config.algorithm)

    actual = hash_file(path, config.algorithm, config.chunk_size)
    return CompareResult(
        path=str(path),
        expected=expected,
        actual=actual,
        matched=constant_time_eq(actual, expected),
    )
