"""Writes finished archives to local storage."""

import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Optional

from statement_exporter.errors import PersistError
from statement_exporter.utils.date_utils import timestamp_millis
from statement_exporter.utils.logging_config import get_logger
from statement_exporter.utils.sanitize import sanitize_filename_component

logger = get_logger(__name__)

FILE_PREFIX = "Statement"
FILE_EXTENSION = ".xlsx"


def build_file_name(statement_name: str, moment: Optional[datetime] = None) -> str:
    """Build the export file name for a statement.

    Format: Statement_<sanitized-source-name>_<epoch-millis>.xlsx

    Args:
        statement_name: Name of the source statement (usually its file name).
        moment: Timestamp to embed (default: now).

    Returns:
        File name without directory.
    """
    safe_name = sanitize_filename_component(statement_name)
    return f"{FILE_PREFIX}_{safe_name}_{timestamp_millis(moment)}{FILE_EXTENSION}"


def reserve_path(directory: Path, file_name: str) -> Path:
    """Claim directory/file_name, adding a numeric suffix if it is taken.

    The name is claimed by creating an empty file with O_EXCL, so two
    writers racing for the same name always end up with different paths.
    The caller replaces the placeholder with the real content, or removes
    it on failure.

    Raises:
        OSError: If the directory cannot be written.
    """
    candidate = directory / file_name
    stem, suffix = candidate.stem, candidate.suffix
    counter = 1
    while True:
        try:
            fd = os.open(candidate, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            candidate = directory / f"{stem}_{counter}{suffix}"
            counter += 1
            continue
        os.close(fd)
        return candidate


def persist(
    data: bytes,
    statement_name: str,
    directory: Path,
    moment: Optional[datetime] = None,
) -> Path:
    """Write archive bytes to a new file in the given directory.

    The bytes go to a temporary file in the same directory first and are
    renamed over a reserved name only once fully written, so a failed
    write never leaves a partial .xlsx behind and concurrent exports of
    the same statement never overwrite each other.

    Args:
        data: Archive bytes.
        statement_name: Source statement name used in the file name.
        directory: Writable target directory (created if missing).
        moment: Timestamp for the file name (default: now).

    Returns:
        Path of the written file.

    Raises:
        PersistError: If the directory or file cannot be written.
    """
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise PersistError(f"Cannot create export directory {directory}: {e}", directory) from e

    file_name = build_file_name(statement_name, moment)
    tmp_path: Optional[Path] = None
    target: Optional[Path] = None
    try:
        fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=".export-", suffix=".tmp")
        tmp_path = Path(tmp_name)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        target = reserve_path(directory, file_name)
        os.replace(tmp_path, target)
    except OSError as e:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
        if target is not None:
            target.unlink(missing_ok=True)
        raise PersistError(
            f"Failed to write {target or directory / file_name}: {e}",
            target or directory / file_name,
        ) from e

    logger.info(f"Wrote {len(data)} bytes to {target}")
    return target
