"""Generate, compare, and verify file hashes."""

__version__ = "0.1.0"
