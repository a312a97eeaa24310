"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest

from hashcc.models.records import Algorithm, HashConfig


@pytest.fixture
def hello_sha256() -> str:
    """SHA-256 of b"hello"."""
    return "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"


@pytest.fixture
def sha256_config() -> HashConfig:
    """Default run configuration."""
    return HashConfig(algorithm=Algorithm.SHA256, workers=4)


@pytest.fixture
def hello_file(tmp_path: Path) -> Path:
    """Create a file containing b"hello"."""
    path = tmp_path / "hello.txt"
    path.write_bytes(b"hello")
    return path


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """Create a small directory tree with files to keep and files to exclude."""
    root = tmp_path / "tree"
    (root / "docs").mkdir(parents=True)
    (root / "src" / "pkg").mkdir(parents=True)
    (root / "build").mkdir()

    (root / "README.md").write_bytes(b"# readme\n")
    (root / "docs" / "guide.txt").write_bytes(b"guide contents\n")
    (root / "src" / "main.py").write_bytes(b"print('hi')\n")
    (root / "src" / "pkg" / "mod.py").write_bytes(b"x = 1\n")
    (root / "src" / "pkg" / "cache.tmp").write_bytes(b"scratch")
    (root / "build" / "out.bin").write_bytes(bytes(range(256)) * 64)
    (root / "empty.dat").write_bytes(b"")
    return root


@pytest.fixture
def verify_dir(tmp_path: Path) -> Path:
    """Create a base directory with two files for manifest verification."""
    base = tmp_path / "data"
    base.mkdir()
    (base / "good.txt").write_bytes(b"good file\n")
    (base / "bad.txt").write_bytes(b"tampered file\n")
    return base


# Markers for test categories
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow running"
    )
