"""Parallel hashing of file lists and directory trees."""

import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import BinaryIO, Callable, Sequence

from hashcc.core.archives import hash_archive
from hashcc.core.digest import digest_stream, ensure_algorithm_allowed
from hashcc.core.reader import hash_file
from hashcc.core.walker import compile_exclusions, enumerate_files
from hashcc.models.records import DigestRecord, HashConfig, HashFailure, HashRunResult
from hashcc.utils.logging import RunLogger, logger

ProgressCallback = Callable[[int, int, str], None]


def hash_work_item(item: Path, config: HashConfig) -> list[DigestRecord]:
    """Hash one work item.

    Archives expand to one record per member when ``config.archives`` is set.

    Raises:
        OSError: If the file can't be read.
    """
    if config.archives:
        members = hash_archive(item, config.algorithm, config.chunk_size)
        if members is not None:
            return members

    digest = hash_file(item, config.algorithm, config.chunk_size)
    return [DigestRecord(path=str(item), hash=digest)]


def hash_paths(
    items: Sequence[Path],
    config: HashConfig,
    progress_callback: ProgressCallback | None = None,
    operation_logger: RunLogger | None = None,
) -> HashRunResult:
    """Hash a list of files across a thread pool.

    Each item is submitted exactly once. Completed futures are drained by the
    calling thread, which is the only writer of the result lists.

    Args:
        items: Files to hash.
        config: Run configuration.
        progress_callback: Optional callback(current, total, message).
        operation_logger: Optional structured run logger.

    Returns:
        HashRunResult with records and failures sorted by path.
    """
    start_time = time.time()
    result = HashRunResult()
    total = len(items)

    if operation_logger:
        operation_logger.log_run_start("hash", total, config.algorithm.value)

    if total:
        with ThreadPoolExecutor(
            max_workers=config.workers, thread_name_prefix="hashcc"
        ) as executor:
            future_map: dict[Future[list[DigestRecord]], Path] = {
                executor.submit(hash_work_item, item, config): item for item in items
            }

            for done, future in enumerate(as_completed(future_map), start=1):
                item = future_map[future]
                try:
                    records = future.result()
                except Exception as e:
                    failure = HashFailure.from_exception(str(item), e)
                    result.failures.append(failure)
                    logger.warning(f"Failed to hash {item}: {e}")
                    if operation_logger:
                        operation_logger.log_error("hash", str(item), e)
                else:
                    result.records.extend(records)
                    if operation_logger:
                        operation_logger.log_operation(
                            "hash", str(item), True, {"records": len(records)}
                        )

                if progress_callback:
                    progress_callback(done, total, str(item))

    result.records.sort(key=lambda r: r.path)
    result.failures.sort(key=lambda f: f.path)
    result.duration_seconds = time.time() - start_time

    logger.debug(
        f"Hashed {len(result.records)} records, {len(result.failures)} failures "
        f"in {result.duration_seconds:.2f}s"
    )
    if operation_logger:
        operation_logger.log_run_complete(
            "hash",
            {
                "records": len(result.records),
                "failures": len(result.failures),
            },
            result.duration_seconds,
        )

    return result


def hash_path(
    root: Path | str,
    config: HashConfig,
    progress_callback: ProgressCallback | None = None,
    operation_logger: RunLogger | None = None,
) -> HashRunResult:
    """Hash a file or every file below a directory.

    The algorithm gate and exclusion patterns are checked before traversal.

    Args:
        root: File or directory.
        config: Run configuration.
        progress_callback: Optional callback(current, total, message).
        operation_logger: Optional structured run logger.

    Returns:
        HashRunResult sorted by path. Unreadable directories show up as
        failures alongside files that could not be hashed.

    Raises:
        WeakAlgorithmRejected: If a weak algorithm is not allowed.
        InvalidGlobPattern: If an exclusion pattern is malformed.
    """
    ensure_algorithm_allowed(config)
    exclusions = compile_exclusions(config.exclusions)

    walk_failures: list[HashFailure] = []

    def on_error(path: Path, error: OSError) -> None:
        walk_failures.append(HashFailure.from_exception(str(path), error))

    items = enumerate_files(
        root,
        exclusions,
        follow_symlinks=config.follow_symlinks,
        on_error=on_error,
    )
    logger.info(f"Hashing {len(items)} files under {root} with {config.algorithm.value}")

    result = hash_paths(items, config, progress_callback, operation_logger)
    if walk_failures:
        result.failures = sorted(result.failures + walk_failures, key=lambda f: f.path)
    return result


def hash_stream(stream: BinaryIO, config: HashConfig) -> str:
    """Hash a single byte stream such as stdin.

    Raises:
        WeakAlgorithmRejected: If a weak algorithm is not allowed.
    """
    ensure_algorithm_allowed(config)
    return digest_stream(stream, config.algorithm, config.chunk_size)
