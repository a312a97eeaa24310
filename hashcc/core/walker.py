"""Directory traversal with glob-based exclusion."""

import os
import re
from pathlib import Path
from typing import Callable, Iterable

from hashcc.errors import InvalidGlobPattern
from hashcc.utils.logging import logger

ErrorCallback = Callable[[Path, OSError], None]


def _translate_class(pattern: str, start: int) -> tuple[str, int]:
    """Translate a ``[...]`` class starting at ``start``.

    Returns:
        Regex fragment and the index just past the closing bracket.
    """
    n = len(pattern)
    j = start + 1
    if j < n and pattern[j] in "!^":
        j += 1
    if j < n and pattern[j] == "]":
        j += 1
    while j < n and pattern[j] != "]":
        j += 1
    if j >= n:
        raise InvalidGlobPattern(pattern, "unclosed character class")

    body = pattern[start + 1 : j]
    negate = body[:1] in ("!", "^")
    if negate:
        body = body[1:]
    escaped = "".join(ch if ch == "-" else re.escape(ch) for ch in body)
    return "[" + ("^" if negate else "") + escaped + "]", j + 1


def translate_glob(pattern: str) -> str:
    """Translate a glob into a regular expression matching the whole path.

    ``*`` and ``?`` also match ``/``. A ``**`` component matches zero or
    more directories.

    Args:
        pattern: Glob pattern.

    Returns:
        Regex source string.

    Raises:
        InvalidGlobPattern: If the pattern is malformed.
    """
    out: list[str] = []
    in_alternates = False
    i, n = 0, len(pattern)

    while i < n:
        c = pattern[i]

        if c == "*":
            if pattern.startswith("**", i):
                starts_component = i == 0 or pattern[i - 1] == "/"
                end = i + 2
                if starts_component and end == n:
                    out.append(".*")
                    i = end
                    continue
                if starts_component and pattern[end] == "/":
                    out.append("(?:.*/)?")
                    i = end + 1
                    continue
            while i < n and pattern[i] == "*":
                i += 1
            out.append(".*")
            continue

        if c == "?":
            out.append(".")
        elif c == "[":
            fragment, i = _translate_class(pattern, i)
            out.append(fragment)
            continue
        elif c == "{":
            if in_alternates:
                raise InvalidGlobPattern(pattern, "nested alternate groups are not allowed")
            in_alternates = True
            out.append("(?:")
        elif c == "}":
            if not in_alternates:
                raise InvalidGlobPattern(pattern, "unopened alternate group")
            in_alternates = False
            out.append(")")
        elif c == "," and in_alternates:
            out.append("|")
        elif c == "\\":
            if i + 1 >= n:
                raise InvalidGlobPattern(pattern, "dangling escape")
            i += 1
            out.append(re.escape(pattern[i]))
        else:
            out.append(re.escape(c))
        i += 1

    if in_alternates:
        raise InvalidGlobPattern(pattern, "unclosed alternate group")

    return "".join(out)


class ExclusionSet:
    """Compiled set of exclusion globs.

    An empty set matches nothing.
    """

    def __init__(self, patterns: Iterable[str] = ()) -> None:
        """Compile patterns.

        Args:
            patterns: Glob patterns.

        Raises:
            InvalidGlobPattern: If any pattern is malformed.
        """
        self.patterns = tuple(patterns)
        self._compiled: list[re.Pattern[str]] = []

        for pattern in self.patterns:
            if not pattern:
                raise InvalidGlobPattern(pattern, "empty pattern")
            regex = translate_glob(pattern)
            try:
                self._compiled.append(re.compile(regex, re.DOTALL))
            except re.error as e:
                raise InvalidGlobPattern(pattern, str(e)) from e

    def matches(self, path: Path | str) -> bool:
        """Check whether the full path matches any pattern."""
        if not self._compiled:
            return False
        text = path.as_posix() if isinstance(path, Path) else str(path)
        return any(regex.fullmatch(text) for regex in self._compiled)

    def __len__(self) -> int:
        return len(self.patterns)

    def __repr__(self) -> str:
        return f"ExclusionSet({list(self.patterns)!r})"


def compile_exclusions(patterns: Iterable[str]) -> ExclusionSet:
    """Compile exclusion globs, failing fast on malformed ones."""
    return ExclusionSet(patterns)


def _report(on_error: ErrorCallback | None, path: Path, error: OSError) -> None:
    logger.warning(f"Cannot read {path}: {error}")
    if on_error:
        on_error(path, error)


def enumerate_files(
    root: Path | str,
    exclusions: ExclusionSet | None = None,
    follow_symlinks: bool = False,
    on_error: ErrorCallback | None = None,
) -> list[Path]:
    """List the regular files under root, minus excluded paths.

    Args:
        root: File or directory to enumerate.
        exclusions: Compiled exclusion set. None excludes nothing.
        follow_symlinks: Descend into symlinked directories and include
            symlinked files. Directory cycles are visited once.
        on_error: Called with (path, error) for unreadable entries.

    Returns:
        Paths sorted lexicographically.
    """
    root = Path(root)
    exclusions = exclusions or ExclusionSet()
    files: list[Path] = []

    if root.is_file():
        if not exclusions.matches(root):
            files.append(root)
        return files

    if not root.is_dir():
        logger.warning(f"Not a file or directory: {root}")
        return files

    visited: set[tuple[int, int]] = set()
    pending = [root]

    while pending:
        directory = pending.pop()

        if follow_symlinks:
            try:
                st = directory.stat()
            except OSError as e:
                _report(on_error, directory, e)
                continue
            key = (st.st_dev, st.st_ino)
            if key in visited:
                logger.debug(f"Skipping already visited directory: {directory}")
                continue
            visited.add(key)

        try:
            with os.scandir(directory) as it:
                entries = list(it)
        except OSError as e:
            _report(on_error, directory, e)
            continue

        for entry in entries:
            path = Path(entry.path)
            try:
                if entry.is_dir(follow_symlinks=follow_symlinks):
                    pending.append(path)
                    continue
                if not entry.is_file(follow_symlinks=follow_symlinks):
                    continue
            except OSError as e:
                _report(on_error, path, e)
                continue

            if exclusions.matches(path):
                logger.debug(f"Excluded: {path}")
                continue
            files.append(path)

    files.sort(key=str)
    return files
