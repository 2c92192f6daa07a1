"""Persistence for the vault lock record.

Writes go to a sibling temp file which is fsynced and then renamed over the
lock file, so readers on this device never see a half-written record. The
sync service may still deliver truncated copies from other devices; those
surface as LockParseError.
"""

import logging
import os
import re
import shutil
from pathlib import Path

from pydantic import ValidationError

from ..constants import CONFLICT_MARKER
from ..errors import LockIOError, LockNotFoundError, LockParseError
from ..models import LockRecord, utc_now

logger = logging.getLogger(__name__)

# Characters not allowed in file names on common sync targets
_UNSAFE_NAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')


def _temp_path(lock_path: Path) -> Path:
    return lock_path.with_name(lock_path.name + ".tmp")


def read_lock(lock_path: Path) -> LockRecord:
    """Load the lock record.

    Args:
        lock_path: Path to vault.lock

    Returns:
        The parsed lock record

    Raises:
        LockNotFoundError: If no lock file exists
        LockParseError: If the file is not a valid lock record
        LockIOError: If the file exists but cannot be read
    """
    try:
        content = lock_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise LockNotFoundError(f"No lock file at {lock_path}") from None
    except UnicodeDecodeError as e:
        raise LockParseError(f"Lock file is not valid UTF-8: {e}") from e
    except OSError as e:
        raise LockIOError(f"Failed to read lock file: {e}") from e

    try:
        return LockRecord.model_validate_json(content)
    except ValidationError as e:
        raise LockParseError(f"Failed to parse lock file: {e}") from e


def write_lock_atomic(lock_path: Path, record: LockRecord) -> None:
    """Write the lock record via temp file, fsync and rename.

    Args:
        lock_path: Path to vault.lock
        record: Record to persist

    Raises:
        LockIOError: If any step fails. A leftover temp file is overwritten
            by the next attempt.
    """
    content = record.model_dump_json(indent=2)
    temp_path = _temp_path(lock_path)

    try:
        with open(temp_path, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
    except OSError as e:
        raise LockIOError(f"Failed to write temp lock file: {e}") from e

    try:
        os.replace(temp_path, lock_path)
    except OSError as e:
        raise LockIOError(f"Failed to rename lock file: {e}") from e


def remove_lock(lock_path: Path) -> None:
    """Delete the lock file. Deleting an absent file is not an error.

    Raises:
        LockIOError: If the file exists but cannot be removed
    """
    try:
        lock_path.unlink(missing_ok=True)
    except OSError as e:
        raise LockIOError(f"Failed to remove lock file: {e}") from e


def backup_name(lock_path: Path, prior: LockRecord) -> str:
    """Build a sync-conflict-style backup file name for a displaced record."""
    timestamp = utc_now().strftime("%Y-%m-%d %H-%M-%S")
    host = _UNSAFE_NAME_CHARS.sub("_", prior.hostname).strip() or "unknown"
    return f"{lock_path.name} ({CONFLICT_MARKER} {timestamp} from {host}).json"


def backup_lock(lock_path: Path, prior: LockRecord) -> Path | None:
    """Copy the current lock file aside before a forced takeover.

    Failures are logged and never raised; the takeover goes ahead regardless.

    Args:
        lock_path: Path to vault.lock
        prior: The record about to be overwritten (used for naming)

    Returns:
        Path to the backup, or None if it could not be written
    """
    backup_path = lock_path.with_name(backup_name(lock_path, prior))
    try:
        shutil.copyfile(lock_path, backup_path)
    except OSError as e:
        logger.warning(f"Failed to back up old lock file: {e}")
        return None
    logger.info(f"Old lock file backed up to {backup_path}")
    return backup_path
