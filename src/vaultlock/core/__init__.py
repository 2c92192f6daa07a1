"""Core lock logic for vaultlock.

- identity: Stable machine ID and hostname, cached per process
- lock_store: Atomic read/write/remove/backup of the lock record
- heartbeat: Background refresh of a held lock
- lock_manager: Acquisition protocol, release and status
- vault_dir: Well-known paths inside the vault
"""

from .identity import get_hostname, get_machine_id, get_machine_info
from .lock_manager import (
    acquire_vault_lock,
    acquire_vault_lock_async,
    check_vault_lock_status,
    is_vault_lock_held,
    release_all_locks,
    release_vault_lock,
    release_vault_lock_async,
)
from .vault_dir import get_lock_path, get_metadata_dir

__all__ = [
    "acquire_vault_lock",
    "acquire_vault_lock_async",
    "check_vault_lock_status",
    "get_hostname",
    "get_lock_path",
    "get_machine_id",
    "get_machine_info",
    "get_metadata_dir",
    "is_vault_lock_held",
    "release_all_locks",
    "release_vault_lock",
    "release_vault_lock_async",
]
