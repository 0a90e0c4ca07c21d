"""Canonical file identities for project path entries."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable

from ..utils.project import parse_file_uri

logger = logging.getLogger(__name__)


class PathResolver:
    """Turns raw path entries into canonical absolute identities.

    Relative entries are resolved against a base directory, `..` segments
    are collapsed, and identities are case-folded on case-insensitive hosts.
    Symlinks are kept as written unless follow_symlinks is set.
    """

    def __init__(self, case_sensitive: bool | None = None, follow_symlinks: bool = False):
        if case_sensitive is None:
            case_sensitive = os.path.normcase("A") == "A"
        self.case_sensitive = case_sensitive
        self.follow_symlinks = follow_symlinks

    def canonicalize(self, raw_path: str, base_directory: str | os.PathLike[str]) -> str | None:
        """Return the canonical identity of one entry, or None if it is empty."""
        if not raw_path or not raw_path.strip():
            return None
        raw_path = raw_path.strip()

        if raw_path.startswith("file:"):
            parsed = parse_file_uri(raw_path)
            if parsed is None:
                return None
            raw_path = str(parsed)
        elif os.sep == "/":
            # MSBuild item specs use backslashes even on POSIX hosts
            raw_path = raw_path.replace("\\", "/")

        path = os.path.join(os.fspath(base_directory), raw_path)
        if self.follow_symlinks:
            path = os.path.realpath(path)
        path = os.path.normpath(os.path.abspath(path))
        if not self.case_sensitive:
            path = path.lower() if os.sep == "/" else os.path.normcase(path)
        return path

    def resolve(
        self, raw_paths: Iterable[str], base_directory: str | os.PathLike[str]
    ) -> frozenset[str]:
        """Resolve entries into a set of unique identities.

        Empty entries are dropped.
        """
        identities: set[str] = set()
        for raw_path in raw_paths:
            identity = self.canonicalize(raw_path, base_directory)
            if identity is None:
                logger.debug(f"Dropping empty path entry under {base_directory}")
                continue
            identities.add(identity)
        return frozenset(identities)


def sorted_paths(paths: Iterable[str]) -> list[str]:
    """Deterministic order for identity sets."""
    return sorted(paths)
