"""
Disabled folder handling for Advanced Random Note.

Users list folders to skip, one per line, in free text. This module turns that
text into normalized folder prefixes and answers whether a file lies under one
of them. Matching works on whole path segments, so 'foo/' never excludes
'foobar/'.
"""

import logging
from typing import Iterable, List, Tuple


logger = logging.getLogger(__name__)


def split_segments(path: str) -> Tuple[str, ...]:
    """Split a vault path into its non-empty segments."""
    path = path.replace('\\', '/').strip()
    return tuple(segment for segment in path.split('/') if segment and segment != '.')


def is_under(path: str, prefix: Tuple[str, ...]) -> bool:
    """Check whether ``path`` lies at or below the folder ``prefix``."""
    segments = split_segments(path)
    return len(segments) >= len(prefix) and segments[:len(prefix)] == prefix


class FolderExclusion:
    """
    A parsed set of disabled folder prefixes.

    Create instances with :meth:`parse`; parsing the same raw text again
    yields an exclusion that behaves identically.
    """

    def __init__(self, prefixes: Iterable[Tuple[str, ...]] = ()):
        self._prefixes: List[Tuple[str, ...]] = []
        for prefix in prefixes:
            if prefix and prefix not in self._prefixes:
                self._prefixes.append(prefix)

    @classmethod
    def parse(cls, raw: str) -> 'FolderExclusion':
        """
        Parse raw disabled folder text.

        Args:
            raw: Newline separated folder prefixes; blank lines and lines
                starting with '#' are ignored

        Returns:
            FolderExclusion for the valid entries. Malformed entries are
            logged and skipped.
        """
        prefixes = []
        for line in (raw or '').splitlines():
            entry = line.strip()
            if not entry or entry.startswith('#'):
                continue

            segments = split_segments(entry)
            if not segments:
                logger.warning(f"Ignoring disabled folder entry without a folder name: {entry!r}")
                continue
            if '..' in segments:
                logger.warning(f"Ignoring disabled folder entry with parent reference: {entry!r}")
                continue

            prefixes.append(segments)
        return cls(prefixes)

    @property
    def prefixes(self) -> List[str]:
        """Normalized prefixes, each with a trailing slash."""
        return ['/'.join(prefix) + '/' for prefix in self._prefixes]

    def is_excluded(self, path: str) -> bool:
        """Check if a vault path falls under any disabled folder."""
        return any(is_under(path, prefix) for prefix in self._prefixes)

    def __bool__(self) -> bool:
        return bool(self._prefixes)

    def __len__(self) -> int:
        return len(self._prefixes)

    def __eq__(self, other) -> bool:
        if not isinstance(other, FolderExclusion):
            return NotImplemented
        return sorted(self._prefixes) == sorted(other._prefixes)

    def __str__(self) -> str:
        return '\n'.join(self.prefixes)

    def __repr__(self) -> str:
        return f"FolderExclusion({self.prefixes!r})"
