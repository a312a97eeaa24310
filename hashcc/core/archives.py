"""Per-member hashing of zip and tar archives."""

import tarfile
import zipfile
from pathlib import Path

from hashcc.core.digest import DEFAULT_CHUNK_SIZE, digest_stream
from hashcc.models.records import Algorithm, DigestRecord

ARCHIVE_SEPARATOR = "!/"


def archive_kind(path: Path) -> str | None:
    """Classify a path by archive suffix.

    Returns:
        "zip", "tar", "tar.gz" or None.
    """
    name = path.name.lower()
    if name.endswith(".zip"):
        return "zip"
    if name.endswith(".tar"):
        return "tar"
    if name.endswith(".tar.gz") or name.endswith(".tgz"):
        return "tar.gz"
    return None


def member_path(archive: Path, member: str) -> str:
    """Display path of an archive member."""
    return f"{archive}{ARCHIVE_SEPARATOR}{member}"


def hash_zip(
    path: Path,
    algorithm: Algorithm,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> list[DigestRecord]:
    """Hash every file entry of a zip archive.

    Raises:
        OSError: If the archive can't be read.
        zipfile.BadZipFile: If the archive is corrupt.
    """
    records = []
    with zipfile.ZipFile(path) as archive:
        for info in archive.infolist():
            if info.is_dir():
                continue
            with archive.open(info) as member:
                records.append(
                    DigestRecord(
                        path=member_path(path, info.filename),
                        hash=digest_stream(member, algorithm, chunk_size),
                    )
                )
    return records


def hash_tar(
    path: Path,
    algorithm: Algorithm,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    gz: bool = False,
) -> list[DigestRecord]:
    """Hash every regular file of a tar (optionally gzip-compressed) archive.

    Raises:
        OSError: If the archive can't be read.
        tarfile.TarError: If the archive is corrupt.
    """
    records = []
    mode = "r:gz" if gz else "r:"
    with tarfile.open(path, mode) as archive:
        for info in archive:
            if not info.isfile():
                continue
            member = archive.extractfile(info)
            if member is None:
                continue
            with member:
                records.append(
                    DigestRecord(
                        path=member_path(path, info.name),
                        hash=digest_stream(member, algorithm, chunk_size),
                    )
                )
    return records


def hash_archive(
    path: Path,
    algorithm: Algorithm,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> list[DigestRecord] | None:
    """Hash archive members, or return None if path is not an archive."""
    kind = archive_kind(path)
    if kind == "zip":
        return hash_zip(path, algorithm, chunk_size)
    if kind == "tar":
        return hash_tar(path, algorithm, chunk_size)
    if kind == "tar.gz":
        return hash_tar(path, algorithm, chunk_size, gz=True)
    return None
