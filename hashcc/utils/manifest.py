"""Reading and writing path -> digest manifests (CSV, sumfile, JSON)."""

import csv
import json
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Iterator, TextIO

from hashcc.errors import InvalidManifestRecord
from hashcc.models.records import DigestRecord

CSV_FIELDS = ["path", "hash"]

# First whitespace run splits hash from path
_SUMFILE_LINE = re.compile(r"^(\S+)\s+(.+)$", re.DOTALL)


class ManifestFormat(str, Enum):
    """Serialization formats for digest lists."""

    TEXT = "text"
    SUMFILE = "sumfile"
    CSV = "csv"
    JSON = "json"


@dataclass(frozen=True)
class ManifestRow:
    """One parsed manifest entry, or the reason it could not be parsed."""

    line: int
    record: DigestRecord | None = None
    error: str | None = None

    @classmethod
    def invalid(cls, error: InvalidManifestRecord) -> "ManifestRow":
        """Build a row from a parse error."""
        return cls(line=error.line, error=error.reason)


def write_records(
    records: Iterable[DigestRecord],
    stream: TextIO,
    format: ManifestFormat = ManifestFormat.TEXT,
) -> None:
    """Serialize records to an open text stream.

    Args:
        records: Records to write, in order.
        stream: Destination stream.
        format: Output format. TEXT and SUMFILE share the ``<hash>  <path>`` layout.
    """
    if format in (ManifestFormat.TEXT, ManifestFormat.SUMFILE):
        for record in records:
            stream.write(f"{record.hash}  {record.path}\n")

    elif format == ManifestFormat.JSON:
        data = [r.to_dict() for r in records]
        json.dump(data, stream, indent=2)
        stream.write("\n")

    elif format == ManifestFormat.CSV:
        writer = csv.DictWriter(stream, fieldnames=CSV_FIELDS, lineterminator="\n")
        writer.writeheader()
        for record in records:
            writer.writerow(record.to_dict())


def write_manifest(
    records: Iterable[DigestRecord],
    path: Path,
    format: ManifestFormat = ManifestFormat.CSV,
) -> None:
    """Write records to a manifest file.

    Args:
        records: Records to write.
        path: Output file path.
        format: Manifest format.
    """
    with open(path, "w", encoding="utf-8", errors="surrogateescape", newline="") as f:
        write_records(records, f, format)


def parse_sumfile_line(line: str, line_no: int = 0) -> DigestRecord:
    """Split a ``<hash><whitespace><path>`` line into a record.

    Raises:
        InvalidManifestRecord: If the line has no hash or no path, or starts
            with whitespace.
    """
    trimmed = line.rstrip()
    match = _SUMFILE_LINE.match(trimmed)
    if not match:
        raise InvalidManifestRecord(line_no, f"invalid sumfile line: {trimmed}")
    return DigestRecord(path=match.group(2), hash=match.group(1))


def _record_from_fields(line_no: int, path: Any, digest: Any) -> DigestRecord:
    """Validate structured fields from a CSV row or JSON entry."""
    if not isinstance(path, str) or not isinstance(digest, str) or not path or not digest.strip():
        raise InvalidManifestRecord(line_no, "missing path or hash")
    return DigestRecord(path=path, hash=digest.strip())


def read_sumfile(stream: TextIO) -> Iterator[ManifestRow]:
    """Parse sumfile lines, skipping blank ones."""
    for line_no, line in enumerate(stream, start=1):
        if not line.strip():
            continue
        try:
            yield ManifestRow(line=line_no, record=parse_sumfile_line(line, line_no))
        except InvalidManifestRecord as e:
            yield ManifestRow.invalid(e)


def read_csv(stream: TextIO) -> Iterator[ManifestRow]:
    """Parse a CSV manifest with ``path`` and ``hash`` columns in any order."""
    reader = csv.DictReader(stream)

    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except csv.Error as e:
            yield ManifestRow(line=reader.line_num, error=f"invalid CSV row: {e}")
            continue

        try:
            if None in row:
                raise InvalidManifestRecord(reader.line_num, "invalid CSV row: unexpected extra fields")
            record = _record_from_fields(reader.line_num, row.get("path"), row.get("hash"))
        except InvalidManifestRecord as e:
            yield ManifestRow.invalid(e)
        else:
            yield ManifestRow(line=reader.line_num, record=record)


def read_json(stream: TextIO) -> Iterator[ManifestRow]:
    """Parse a JSON list of ``{"path": ..., "hash": ...}`` objects.

    Entries are numbered from 1 in place of line numbers.
    """
    try:
        data = json.load(stream)
    except json.JSONDecodeError as e:
        yield ManifestRow(line=e.lineno, error=f"invalid JSON manifest: {e.msg}")
        return

    if not isinstance(data, list):
        yield ManifestRow(line=1, error="invalid JSON manifest: expected a list")
        return

    for index, entry in enumerate(data, start=1):
        try:
            if not isinstance(entry, dict):
                raise InvalidManifestRecord(index, "invalid JSON entry: expected an object")
            record = _record_from_fields(index, entry.get("path"), entry.get("hash"))
        except InvalidManifestRecord as e:
            yield ManifestRow.invalid(e)
        else:
            yield ManifestRow(line=index, record=record)


def read_rows(stream: TextIO, format: ManifestFormat = ManifestFormat.CSV) -> Iterator[ManifestRow]:
    """Parse a manifest stream in the given format."""
    if format == ManifestFormat.CSV:
        return read_csv(stream)
    if format == ManifestFormat.JSON:
        return read_json(stream)
    return read_sumfile(stream)
