"""Hashing and verification engine."""

from hashcc.core.digest import (
    constant_time_eq,
    digest,
    digest_bytes,
    digest_stream,
    ensure_algorithm_allowed,
    expected_hex_len,
    is_valid_hex,
)
from hashcc.core.dispatcher import hash_path, hash_paths, hash_stream
from hashcc.errors import (
    HashccError,
    InvalidDigestString,
    InvalidGlobPattern,
    InvalidManifestRecord,
    InvalidPath,
    ManifestReadError,
    WeakAlgorithmRejected,
)
from hashcc.core.reader import hash_file, read_for_hash
from hashcc.core.verifier import compare_file, verify_manifest, verify_rows
from hashcc.core.walker import ExclusionSet, compile_exclusions, enumerate_files

__all__ = [
    "digest",
    "digest_bytes",
    "digest_stream",
    "expected_hex_len",
    "is_valid_hex",
    "constant_time_eq",
    "ensure_algorithm_allowed",
    "read_for_hash",
    "hash_file",
    "ExclusionSet",
    "compile_exclusions",
    "enumerate_files",
    "hash_paths",
    "hash_path",
    "hash_stream",
    "verify_manifest",
    "verify_rows",
    "compare_file",
    "HashccError",
    "WeakAlgorithmRejected",
    "InvalidGlobPattern",
    "InvalidManifestRecord",
    "InvalidPath",
    "ManifestReadError",
    "InvalidDigestString",
]
