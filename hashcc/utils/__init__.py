"""Utility modules for logging and manifest serialization."""

from hashcc.utils.logging import RunLogger, setup_logging
from hashcc.utils.manifest import ManifestFormat, ManifestRow, read_rows, write_manifest, write_records

__all__ = [
    "setup_logging",
    "RunLogger",
    "ManifestFormat",
    "ManifestRow",
    "read_rows",
    "write_records",
    "write_manifest",
]
