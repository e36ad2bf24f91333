"""
File transfer engine for Batch Transfer.

Copies or moves one selected file into a task's destination folder.
Files always land directly in the destination folder; sub-folder
structure from a recursive scan is not reproduced.

Overwrites are done by writing a temporary file next to the target and
swapping it in with ``os.replace``, so an existing destination file is
either fully replaced or left as it was.  Every failure is returned as
a ``TransferOutcome`` instead of being raised.
"""

import errno
import logging
import os
import shutil
import tempfile
import time
from pathlib import Path

from batch_transfer.errors import DestinationExistsError, TransferError
from batch_transfer.platform_utils import IS_WINDOWS
from batch_transfer.report import ErrorDetail, TransferOutcome
from batch_transfer.scanner import Candidate
from batch_transfer.tasks import Action

logger = logging.getLogger(__name__)

_PART_SUFFIX = ".part"


class TransferExecutor:
    """Performs single-file copies and moves under an overwrite policy."""

    def transfer(
        self,
        candidate: Candidate,
        destination_folder: Path,
        action: Action,
        overwrite_existing: bool,
    ) -> TransferOutcome:
        """Copy or move *candidate* into *destination_folder*.

        Never raises; failures are reported in the returned outcome.
        """
        source = candidate.path
        dest = Path(destination_folder) / source.name
        started = time.time()

        try:
            logger.debug(
                "%s %s -> %s (overwrite=%s)",
                action.value, source, dest, overwrite_existing,
            )
            if action is Action.COPY:
                self._copy(source, dest, overwrite_existing)
            else:
                self._move(source, dest, overwrite_existing)
        except (TransferError, OSError) as exc:
            detail = ErrorDetail.from_exception(exc, source, dest, action)
            logger.error(
                "%s failed for %s -> %s: [%s] %s",
                action.value, source, dest, detail.kind.value, detail.message,
            )
            return TransferOutcome(candidate, dest, succeeded=False, error=detail)
        except Exception as exc:
            logger.exception("Unexpected error transferring %s", source)
            detail = ErrorDetail.from_exception(exc, source, dest, action)
            return TransferOutcome(candidate, dest, succeeded=False, error=detail)

        logger.info(
            "%s complete in %.1fs: %s -> %s",
            action.value, time.time() - started, source, dest,
        )
        return TransferOutcome(candidate, dest, succeeded=True)

    # ---- checks ----

    def _preflight(self, source: Path, dest: Path, overwrite: bool) -> None:
        if not source.is_file():
            raise FileNotFoundError(
                errno.ENOENT, "Source file no longer exists", str(source)
            )
        if not dest.parent.is_dir():
            raise TransferError(
                source, dest, f"Destination folder does not exist: {dest.parent}"
            )
        if dest.exists():
            if _same_file(source, dest):
                raise TransferError(
                    source, dest, "Source and destination are the same file"
                )
            if not overwrite:
                raise DestinationExistsError(source, dest)

    # ---- actions ----

    def _copy(self, source: Path, dest: Path, overwrite: bool) -> None:
        self._preflight(source, dest, overwrite)
        tmp = self._temp_path(dest)
        try:
            shutil.copy2(str(source), str(tmp))
            if not overwrite and dest.exists():
                # Appeared while we were copying
                raise DestinationExistsError(source, dest)
            os.replace(tmp, dest)
        finally:
            _discard(tmp)

    def _move(self, source: Path, dest: Path, overwrite: bool) -> None:
        self._preflight(source, dest, overwrite)
        try:
            if overwrite:
                os.replace(source, dest)
            else:
                _rename_exclusive(source, dest)
            return
        except FileExistsError as exc:
            # Appeared after the preflight check
            raise DestinationExistsError(source, dest) from exc
        except OSError as exc:
            if exc.errno != errno.EXDEV:
                raise
        logger.debug("Cross-device move, copying then deleting %s", source)

        self._copy(source, dest, overwrite)
        try:
            source.unlink()
        except OSError as exc:
            raise TransferError(
                source,
                dest,
                f"Copied to {dest} but could not remove source: {exc}",
            ) from exc

    @staticmethod
    def _temp_path(dest: Path) -> Path:
        """Reserve a hidden temporary file beside *dest*."""
        fd, name = tempfile.mkstemp(
            prefix=f".{dest.name}.", suffix=_PART_SUFFIX, dir=dest.parent
        )
        os.close(fd)
        return Path(name)


def _rename_exclusive(source: Path, dest: Path) -> None:
    """Rename *source* to *dest*; raise FileExistsError if *dest* exists."""
    if IS_WINDOWS:
        # rename never replaces an existing file on Windows
        os.rename(source, dest)
        return
    try:
        os.link(source, dest)
    except FileExistsError:
        raise
    except OSError as exc:
        if exc.errno == errno.EXDEV:
            raise
        # No hard links on this filesystem
        logger.debug("Hard link failed (%s), renaming %s", exc, source)
        if dest.exists():
            raise FileExistsError(errno.EEXIST, "File exists", str(dest)) from exc
        os.rename(source, dest)
        return
    try:
        source.unlink()
    except OSError:
        _discard(dest)
        raise


def _same_file(a: Path, b: Path) -> bool:
    try:
        return os.path.samefile(a, b)
    except OSError:
        return False


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError:
        logger.warning("Could not remove temporary file %s", path)
