"""
Source folder enumeration for Batch Transfer.

Lists every regular file under a task's source folder (top level only,
or the whole subtree when the task recurses) together with its
creation time.  Name and age filtering happen afterwards in
:mod:`batch_transfer.criteria`.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from batch_transfer.errors import ScanError
from batch_transfer.platform_utils import IS_WINDOWS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    """A file discovered by a scan, before filtering."""
    path: Path
    creation_time: datetime


def creation_timestamp(st: os.stat_result, use_modified_time: bool = False) -> float:
    """
    Best available creation time for a stat result.

    - macOS / BSD / Windows (3.12+): ``st_birthtime``
    - Windows (older Pythons): ``st_ctime`` is the creation time there
    - Linux: no creation time is exposed, ``st_mtime`` is used
    """
    if use_modified_time:
        return st.st_mtime
    birth = getattr(st, "st_birthtime", None)
    if birth is not None:
        return birth
    if IS_WINDOWS:
        return st.st_ctime
    return st.st_mtime


class FileCatalogScanner:
    """
    Enumerates files under a root folder.

    Parameters
    ----------
    use_modified_time : bool
        If True, report the last-modified time instead of the creation
        time for every file.
    """

    def __init__(self, use_modified_time: bool = False):
        self._use_modified_time = use_modified_time

    def scan(self, root: Path, recurse: bool) -> list[Candidate]:
        """
        Return the files directly under *root*, or its whole subtree.

        Raises ScanError if *root* is missing, is not a directory, or
        cannot be read.
        """
        root = Path(root)
        if not root.exists():
            raise ScanError(root, "folder does not exist")
        if not root.is_dir():
            raise ScanError(root, "not a directory")

        try:
            paths = self._walk(root) if recurse else self._list(root)
        except OSError as exc:
            raise ScanError(root, exc.strerror or str(exc)) from exc

        candidates: list[Candidate] = []
        for path in sorted(paths):
            try:
                st = path.stat()
            except FileNotFoundError:
                logger.debug("File vanished during scan: %s", path)
                continue
            except OSError as exc:
                raise ScanError(root, f"cannot stat {path}: {exc}") from exc
            ts = creation_timestamp(st, self._use_modified_time)
            candidates.append(Candidate(path, datetime.fromtimestamp(ts)))

        logger.debug(
            "Scanned %s (recurse=%s): %d file(s)", root, recurse, len(candidates)
        )
        return candidates

    @staticmethod
    def _list(root: Path) -> list[Path]:
        with os.scandir(root) as it:
            return [Path(entry.path) for entry in it if entry.is_file()]

    @staticmethod
    def _walk(root: Path) -> list[Path]:
        def _raise(exc: OSError) -> None:
            raise exc

        found: list[Path] = []
        for dirpath, _dirnames, filenames in os.walk(root, onerror=_raise):
            base = Path(dirpath)
            found.extend(base / name for name in filenames)
        return found
