"""Lock manager for vault-level single-writer access.

Provides a heartbeat-based advisory lock stored inside the vault so that
only one device edits a vault replicated by an external sync service.
Ownership is decided by machine ID; staleness is reported to the caller
but never acted on without an explicit forced takeover.

Every acquire is a single read/decide/write cycle with no internal retries.
Within this process, acquire and release for the same vault are serialized
so that a heartbeat write can never land after a release's delete.
"""

import asyncio
import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path

from .. import __version__
from ..config import LockConfig, load_config
from ..errors import LockConfigError, LockIOError, LockNotFoundError, LockParseError
from ..models import (
    AcquireAlreadyHeld,
    AcquireDenied,
    AcquireError,
    AcquireSuccess,
    LockAcquireResult,
    LockRecord,
    LockStatus,
    utc_now,
)
from .heartbeat import HeartbeatMaintainer
from .identity import get_hostname, get_machine_id
from .lock_store import backup_lock, read_lock, remove_lock, write_lock_atomic
from .vault_dir import get_lock_path, get_metadata_dir, normalize_vault_path, vault_key

logger = logging.getLogger(__name__)


@dataclass
class _ActiveLock:
    """A vault this process holds, with its running heartbeat."""

    vault_path: Path
    maintainer: HeartbeatMaintainer


# Per-process registry of held vaults, keyed by resolved vault path
_registry_guard = threading.Lock()
_vault_guards: dict[str, threading.Lock] = {}
_active_locks: dict[str, _ActiveLock] = {}


def _vault_guard(key: str) -> threading.Lock:
    """Get the critical section serializing acquire/release for one vault."""
    with _registry_guard:
        guard = _vault_guards.get(key)
        if guard is None:
            guard = _vault_guards[key] = threading.Lock()
        return guard


def _resolve_config(vault_path: Path, config: LockConfig | None) -> LockConfig:
    if config is not None:
        return config
    return load_config(get_metadata_dir(vault_path)).lock


def _new_record(app_version: str) -> LockRecord:
    now = utc_now()
    return LockRecord(
        machine_id=get_machine_id(),
        hostname=get_hostname(),
        pid=os.getpid(),
        app_version=app_version,
        locked_at=now,
        heartbeat=now,
    )


def _stop_heartbeat(key: str) -> None:
    """Stop and forget the heartbeat for a vault, if any. Caller holds the vault guard."""
    with _registry_guard:
        active = _active_locks.pop(key, None)
    if active is not None:
        active.maintainer.stop()


def _start_heartbeat(
    key: str, vault_path: Path, record: LockRecord, config: LockConfig
) -> HeartbeatMaintainer:
    """Start a heartbeat for a vault and register it. Caller holds the vault guard."""
    maintainer = HeartbeatMaintainer(
        lock_path=get_lock_path(vault_path),
        record=record,
        machine_id=record.machine_id,
        interval=config.heartbeat_interval_secs,
    )
    maintainer.start()
    with _registry_guard:
        _active_locks[key] = _ActiveLock(vault_path=vault_path, maintainer=maintainer)
    return maintainer


def _ensure_heartbeat(key: str, vault_path: Path, record: LockRecord, config: LockConfig) -> None:
    """Keep a live heartbeat running for a vault we already own on disk."""
    with _registry_guard:
        active = _active_locks.get(key)
    if active is not None and active.maintainer.running:
        return
    _stop_heartbeat(key)
    _start_heartbeat(key, vault_path, record, config)


def acquire_vault_lock(
    vault_path: str | Path,
    force: bool = False,
    *,
    config: LockConfig | None = None,
    app_version: str = __version__,
) -> LockAcquireResult:
    """Acquire the lock for a vault.

    Args:
        vault_path: Root of the vault
        force: Take over a lock held by another machine, backing it up first
        config: Lease timings (loaded from the vault's config.toml if omitted)
        app_version: Version string recorded in the lock

    Returns:
        AcquireSuccess if a new record for this machine was written,
        AcquireAlreadyHeld if the record already belongs to this machine,
        AcquireDenied if another machine holds it and force is False,
        AcquireError if the lock directory could not be read or written
    """
    vault = normalize_vault_path(vault_path)
    key = str(vault)
    with _vault_guard(key):
        return _acquire(key, vault, force, config, app_version)


def _acquire(
    key: str,
    vault: Path,
    force: bool,
    config: LockConfig | None,
    app_version: str,
) -> LockAcquireResult:
    logger.info(f"Attempting to acquire vault lock for {vault}")
    metadata_dir = get_metadata_dir(vault)
    lock_path = get_lock_path(vault)

    try:
        metadata_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return AcquireError(message=f"Failed to create {metadata_dir.name} directory: {e}")

    try:
        lock_config = _resolve_config(vault, config)
    except LockConfigError as e:
        return AcquireError(message=f"Failed to load lock config: {e}")

    my_machine_id = get_machine_id()

    existing: LockRecord | None
    try:
        existing = read_lock(lock_path)
    except LockNotFoundError:
        existing = None
    except LockParseError as e:
        logger.warning(f"Existing lock file is corrupt, will overwrite: {e}")
        existing = None
    except LockIOError as e:
        return AcquireError(message=str(e))

    if existing is not None:
        if existing.machine_id == my_machine_id:
            logger.info("Vault lock already held by this machine, reconnecting")
            _ensure_heartbeat(key, vault, existing, lock_config)
            return AcquireAlreadyHeld()

        age = int(existing.heartbeat_age().total_seconds())
        if not force:
            is_stale = existing.is_stale(lock_config.stale_threshold_secs)
            if is_stale:
                logger.warning(
                    f"Stale lock detected from {existing.hostname} - heartbeat age: {age}s"
                )
            else:
                logger.warning(
                    f"Vault locked by {existing.hostname} ({existing.machine_id}) - "
                    f"heartbeat age: {age}s"
                )
            return AcquireDenied(holder=existing, is_stale=is_stale)

        backup_lock(lock_path, existing)
        logger.info(f"Force acquiring lock from {existing.hostname} (heartbeat age: {age}s)")

    # Any heartbeat still running here belongs to a record no longer on disk
    _stop_heartbeat(key)

    record = _new_record(app_version)
    try:
        write_lock_atomic(lock_path, record)
    except LockIOError as e:
        return AcquireError(message=f"Failed to write lock file: {e}")

    _start_heartbeat(key, vault, record, lock_config)
    logger.info(f"Vault lock acquired for {vault}")
    return AcquireSuccess()


def release_vault_lock(vault_path: str | Path) -> None:
    """Release the lock for a vault.

    Stops the heartbeat (waiting for an in-flight write) before deleting the
    record, and only deletes a record owned by this machine. Releasing an
    unlocked vault is a no-op.

    Args:
        vault_path: Root of the vault

    Raises:
        LockIOError: If the lock file exists but cannot be read or removed
    """
    vault = normalize_vault_path(vault_path)
    key = str(vault)
    with _vault_guard(key):
        _stop_heartbeat(key)
        lock_path = get_lock_path(vault)

        try:
            existing = read_lock(lock_path)
        except LockNotFoundError:
            return
        except LockParseError as e:
            logger.warning(f"Removing corrupt lock file: {e}")
            remove_lock(lock_path)
            return

        if existing.machine_id != get_machine_id():
            logger.warning(
                f"Lock file belongs to {existing.hostname} ({existing.machine_id}), not removing"
            )
            return

        remove_lock(lock_path)
        logger.info(f"Vault lock released for {vault}")


async def acquire_vault_lock_async(
    vault_path: str | Path,
    force: bool = False,
    *,
    config: LockConfig | None = None,
    app_version: str = __version__,
) -> LockAcquireResult:
    """Async variant of acquire_vault_lock; file I/O runs in a worker thread."""
    return await asyncio.to_thread(
        acquire_vault_lock, vault_path, force, config=config, app_version=app_version
    )


async def release_vault_lock_async(vault_path: str | Path) -> None:
    """Async variant of release_vault_lock; file I/O runs in a worker thread."""
    await asyncio.to_thread(release_vault_lock, vault_path)


def check_vault_lock_status(
    vault_path: str | Path, config: LockConfig | None = None
) -> LockStatus:
    """Report who holds a vault without changing anything.

    Args:
        vault_path: Root of the vault
        config: Lease timings (loaded from the vault's config.toml if omitted)

    Returns:
        LockStatus; a missing or corrupt record reports an unlocked vault

    Raises:
        LockConfigError: If the vault's config.toml cannot be loaded
        LockIOError: If the lock file exists but cannot be read
    """
    vault = normalize_vault_path(vault_path)
    lock_config = _resolve_config(vault, config)
    try:
        holder = read_lock(get_lock_path(vault))
    except (LockNotFoundError, LockParseError):
        return LockStatus(is_locked=False)

    return LockStatus(
        is_locked=True,
        holder=holder,
        is_stale=holder.is_stale(lock_config.stale_threshold_secs),
        is_mine=holder.machine_id == get_machine_id(),
    )


def is_vault_lock_held(vault_path: str | Path) -> bool:
    """Check whether this process is actively maintaining the vault's lock."""
    with _registry_guard:
        active = _active_locks.get(vault_key(vault_path))
    return active is not None and active.maintainer.running


def release_all_locks() -> None:
    """Release every vault lock held by this process (application shutdown)."""
    with _registry_guard:
        vaults = [active.vault_path for active in _active_locks.values()]

    for vault in vaults:
        try:
            release_vault_lock(vault)
        except LockIOError as e:
            logger.error(f"Failed to release lock for {vault}: {e}")
